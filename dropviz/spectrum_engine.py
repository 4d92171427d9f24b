"""Spectrum engine: Blackman window, real FFT, low-bin bands, peak falloff.

Converts one block of mono samples into N bar heights (0..max_height)
suitable for a bar-graph display, one call per rendered frame.
"""

import numpy as np

from dropviz.errors import ConfigurationError

BLOCK_SIZE = 2048  # ~46 ms of 44.1 kHz PCM per frame
NUM_BANDS = 80
PEAK_FALLOFF = 8.0  # subtracted from a falling bar once per frame


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def blackman_window(size: int) -> np.ndarray:
    """Read-only three-term Blackman coefficients for a block of `size`."""
    coeffs = np.blackman(size).astype(np.float64)
    coeffs.flags.writeable = False
    return coeffs


def apply_window(samples: np.ndarray, coeffs: np.ndarray) -> np.ndarray:
    """Taper a block with precomputed coefficients. Input is not modified."""
    if len(samples) != len(coeffs):
        raise ValueError(
            f"block has {len(samples)} samples, window expects {len(coeffs)}"
        )
    return np.asarray(samples, dtype=np.float64) * coeffs


def transform(windowed: np.ndarray) -> np.ndarray:
    """Half spectrum of a real block: len(windowed) // 2 + 1 complex bins."""
    return np.fft.rfft(windowed)


def reduce_bands(bins: np.ndarray, num_bands: int,
                 max_height: float) -> np.ndarray:
    """Magnitudes of the first `num_bands` bins, clamped to [0, max_height]."""
    max_height = max(float(max_height), 0.0)
    magnitudes = np.abs(bins[:num_bands])
    return np.minimum(max_height, magnitudes)


class PeakFalloff:
    """Per-band display state with averaging rise and linear decay.

    A band that drops below its displayed value falls by `falloff` per
    frame (never below zero); otherwise it moves halfway toward the new
    value.
    """

    def __init__(self, num_bands: int, falloff: float = PEAK_FALLOFF):
        self._falloff = float(falloff)
        self._state = np.zeros(num_bands, dtype=np.float64)

    @property
    def falloff(self) -> float:
        return self._falloff

    def snapshot(self) -> np.ndarray:
        out = self._state.copy()
        out.flags.writeable = False
        return out

    def reset(self):
        self._state[:] = 0.0

    def update(self, values: np.ndarray) -> np.ndarray:
        """Fold one frame of band magnitudes into the state, in place.

        Args:
            values: non-negative magnitudes, shape (num_bands,)

        Returns:
            read-only copy of the new state
        """
        prev = self._state
        falling = prev > values
        decayed = np.maximum(prev - self._falloff, 0.0)
        risen = (values + prev) / 2.0
        np.copyto(prev, np.where(falling, decayed, risen))
        return self.snapshot()


class SpectrumEngine:
    """Turns fixed-size sample blocks into smoothed per-band magnitudes."""

    def __init__(self, block_size: int = BLOCK_SIZE,
                 num_bands: int = NUM_BANDS,
                 falloff: float = PEAK_FALLOFF):
        if not is_power_of_two(block_size) or block_size < 2:
            raise ConfigurationError(
                f"block size must be a power of two, got {block_size}"
            )
        if not 1 <= num_bands <= block_size // 2:
            raise ConfigurationError(
                f"band count must be between 1 and {block_size // 2} "
                f"for a {block_size}-sample block, got {num_bands}"
            )
        if falloff < 0:
            raise ConfigurationError(f"falloff must be >= 0, got {falloff}")

        self._block_size = block_size
        self._num_bands = num_bands
        self._window = blackman_window(block_size)
        self._smoother = PeakFalloff(num_bands, falloff)

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def num_bands(self) -> int:
        return self._num_bands

    @property
    def window(self) -> np.ndarray:
        return self._window

    @property
    def bars(self) -> np.ndarray:
        """Current display state (read-only copy)."""
        return self._smoother.snapshot()

    def reset(self):
        """Zero the display state, e.g. when a new track starts."""
        self._smoother.reset()

    def analyse(self, samples: np.ndarray, max_height: float) -> np.ndarray:
        """Window, transform and reduce one block without touching state."""
        windowed = apply_window(samples, self._window)
        bins = transform(windowed)
        return reduce_bands(bins, self._num_bands, max_height)

    def process(self, samples: np.ndarray, max_height: float) -> np.ndarray:
        """Run one block through the full pipeline.

        Args:
            samples: float mono audio, shape (block_size,)
            max_height: tallest bar the render surface can show

        Returns:
            read-only np.ndarray of float, shape (num_bands,)
        """
        return self._smoother.update(self.analyse(samples, max_height))
