"""Raw decoded bytes -> analysis samples.

Two conversions are supported:

  pcm16  Interleaved signed 16-bit little-endian PCM.  Channels are
         averaged to mono and scaled to [-1, 1).  One sample per frame.
  bytes  One sample per raw byte, unsigned 0-255.  A lossy reading of
         the playback buffer, kept for comparison with pcm16.

Both produce exactly `block_size` samples; a short final block is
zero-padded.
"""

import numpy as np

from dropviz.errors import ConfigurationError

PCM16 = "pcm16"
BYTES = "bytes"
SAMPLE_FORMATS = (PCM16, BYTES)

PCM_SAMPLE_BYTES = 2  # int16


class SampleFormat:
    """Sizing and decoding rules for one byte-to-sample conversion."""

    def __init__(self, name: str, block_size: int, channels: int):
        if name not in SAMPLE_FORMATS:
            raise ConfigurationError(
                f"unknown sample format {name!r}, expected one of {SAMPLE_FORMATS}"
            )
        if channels < 1:
            raise ConfigurationError(f"channel count must be >= 1, got {channels}")
        self.name = name
        self.block_size = block_size
        self.channels = channels
        self.frame_bytes = channels * PCM_SAMPLE_BYTES

        if name == BYTES and block_size < self.frame_bytes:
            raise ConfigurationError(
                f"{block_size}-byte blocks cannot hold one "
                f"{channels}-channel PCM16 frame"
            )

    @property
    def frames_per_block(self) -> int:
        """Decoded PCM frames to read for one analysis block.

        In bytes mode this rounds down to whole frames; the remaining
        bytes of the block are zero-padded.
        """
        if self.name == PCM16:
            return self.block_size
        return self.block_size // self.frame_bytes

    @property
    def bytes_per_block(self) -> int:
        return self.frames_per_block * self.frame_bytes

    def to_samples(self, data: bytes) -> np.ndarray:
        """Convert one block of raw bytes to `block_size` float64 samples."""
        if not data:
            raise ValueError("empty block")
        if len(data) % self.frame_bytes:
            raise ValueError(
                f"block of {len(data)} bytes is not a whole number of "
                f"{self.frame_bytes}-byte frames"
            )
        if len(data) > self.bytes_per_block:
            raise ValueError(
                f"block of {len(data)} bytes exceeds {self.bytes_per_block}"
            )

        if self.name == PCM16:
            pcm = np.frombuffer(data, dtype="<i2").reshape(-1, self.channels)
            samples = pcm.mean(axis=1) / 32768.0
        else:
            samples = np.frombuffer(data, dtype=np.uint8).astype(np.float64)

        if len(samples) < self.block_size:
            samples = np.pad(samples, (0, self.block_size - len(samples)))
        return samples
