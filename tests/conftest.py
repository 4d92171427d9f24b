import os

# Headless pygame for renderer tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest


@pytest.fixture
def sine_block():
    """Factory for a unit sine that lands exactly on FFT bin `bin_index`."""
    def make(block_size, bin_index, amplitude=1.0):
        n = np.arange(block_size)
        return amplitude * np.sin(2 * np.pi * bin_index * n / block_size)
    return make
