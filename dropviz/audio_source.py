"""Audio file source: decodes a file into fixed-size raw PCM16 blocks.

Wraps a soundfile.SoundFile (libsndfile) and hands out interleaved
int16 bytes one block at a time, for playback and analysis alike.
"""

import os

import soundfile as sf

from dropviz.errors import EndOfStream, SourceIOError, UnsupportedFileType

SUPPORTED_EXTENSIONS = (".mp3", ".wav", ".flac", ".ogg")
PCM_DTYPE = "int16"


def is_supported_file(path) -> bool:
    """True if `path` has an audio extension we will try to decode."""
    return os.path.splitext(str(path))[1].lower() in SUPPORTED_EXTENSIONS


def check_file_type(path):
    """Raise UnsupportedFileType unless `path` looks like an audio file."""
    if not is_supported_file(path):
        raise UnsupportedFileType(path)


class FileSource:
    """Reads decoded PCM16 blocks from an audio file."""

    def __init__(self, path):
        check_file_type(path)
        self._path = str(path)
        try:
            self._file = sf.SoundFile(self._path, mode="r")
        except (sf.SoundFileError, OSError) as e:
            raise SourceIOError(f"cannot open {self._path}: {e}") from e
        self._sample_rate = self._file.samplerate
        self._channels = self._file.channels

    @property
    def name(self) -> str:
        return os.path.basename(self._path)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def frame_bytes(self) -> int:
        return self._channels * 2

    @property
    def closed(self) -> bool:
        return self._file is None or self._file.closed

    def read_block(self, frames: int) -> bytes:
        """Return up to `frames` frames of interleaved int16 bytes.

        The last block of a file may hold fewer frames than requested, but
        always at least one whole frame.

        Raises:
            EndOfStream:   no frames left.
            SourceIOError: the decoder failed or the source is closed.
        """
        if self.closed:
            raise SourceIOError(f"{self._path} is closed")
        try:
            data = bytes(self._file.buffer_read(frames, dtype=PCM_DTYPE))
        except (sf.SoundFileError, OSError) as e:
            raise SourceIOError(f"read failed on {self._path}: {e}") from e

        if not data:
            raise EndOfStream(self._path)
        if len(data) % self.frame_bytes:
            raise SourceIOError(
                f"decoder returned {len(data)} bytes, not a whole number of "
                f"{self.frame_bytes}-byte frames"
            )
        return data

    def close(self):
        """Close the underlying file. Safe to call more than once."""
        if self._file is not None:
            self._file.close()
            self._file = None
