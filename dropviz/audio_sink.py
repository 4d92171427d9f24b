"""Audio playback through the default output device via sounddevice.

Accepts the same interleaved int16 bytes the source produced and writes
them to a blocking RawOutputStream, which also paces playback.
"""

import sounddevice as sd

from dropviz.errors import SinkIOError

LATENCY = "low"  # keeps the bars close to what is being heard


class AudioSink:
    """Plays raw interleaved PCM16 on the default output device."""

    def __init__(self, sample_rate: int, channels: int, device=None):
        """
        Args:
            sample_rate: Sample rate in Hz.
            channels:    Interleaved channel count.
            device:      sounddevice device index.  None = system default.
        """
        self._sample_rate = sample_rate
        self._channels = channels
        self._device = device
        self._stream = None

    def start(self):
        """Open and start the output stream."""
        try:
            self._stream = sd.RawOutputStream(
                device=self._device,
                channels=self._channels,
                samplerate=self._sample_rate,
                dtype="int16",
                latency=LATENCY,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            raise SinkIOError(f"cannot open output device: {e}") from e

    def write(self, data: bytes):
        """Queue one block for playback."""
        if self._stream is None:
            raise SinkIOError("output stream is not open")
        try:
            underflowed = self._stream.write(data)
        except sd.PortAudioError as e:
            raise SinkIOError(f"playback write failed: {e}") from e
        if underflowed:
            print("[audio] output underflow")

    def close(self):
        """Stop and close the output stream."""
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except sd.PortAudioError as e:
                raise SinkIOError(f"cannot close output device: {e}") from e
            finally:
                self._stream = None
