"""Tests for the spectrum engine stages and peak-falloff smoothing."""

import math

import numpy as np
import pytest

from dropviz.errors import ConfigurationError
from dropviz.spectrum_engine import (
    PEAK_FALLOFF,
    PeakFalloff,
    SpectrumEngine,
    apply_window,
    blackman_window,
    is_power_of_two,
    reduce_bands,
    transform,
)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("size", [2, 64, 1024, 2048, 4096])
def test_power_of_two_block_sizes_accepted(size):
    engine = SpectrumEngine(block_size=size, num_bands=1)
    assert engine.block_size == size
    assert len(engine.window) == size


@pytest.mark.parametrize("size", [0, 1, 3, 1000, 4608, -8])
def test_other_block_sizes_rejected(size):
    with pytest.raises(ConfigurationError):
        SpectrumEngine(block_size=size, num_bands=1)


def test_band_count_limited_to_half_block():
    SpectrumEngine(block_size=256, num_bands=128)
    with pytest.raises(ConfigurationError):
        SpectrumEngine(block_size=256, num_bands=129)
    with pytest.raises(ConfigurationError):
        SpectrumEngine(block_size=256, num_bands=0)


def test_negative_falloff_rejected():
    with pytest.raises(ConfigurationError):
        SpectrumEngine(block_size=256, num_bands=8, falloff=-1)


def test_is_power_of_two():
    assert is_power_of_two(1)
    assert is_power_of_two(4096)
    assert not is_power_of_two(4608)
    assert not is_power_of_two(0)


# ---------------------------------------------------------------------------
# Window stage
# ---------------------------------------------------------------------------

def test_window_is_read_only_and_fixed():
    engine = SpectrumEngine(block_size=64, num_bands=8)
    before = engine.window.copy()
    with pytest.raises(ValueError):
        engine.window[0] = 1.0
    engine.process(np.ones(64), 100)
    np.testing.assert_array_equal(engine.window, before)


def test_apply_window_preserves_length_and_input():
    coeffs = blackman_window(128)
    samples = np.linspace(-1, 1, 128)
    original = samples.copy()

    out = apply_window(samples, coeffs)

    assert len(out) == len(samples)
    np.testing.assert_array_equal(samples, original)
    np.testing.assert_allclose(out, samples * coeffs)
    np.testing.assert_array_equal(apply_window(samples, coeffs), out)


def test_apply_window_rejects_wrong_length():
    with pytest.raises(ValueError):
        apply_window(np.zeros(100), blackman_window(128))


def test_blackman_tapers_to_zero_at_edges():
    coeffs = blackman_window(256)
    assert coeffs[0] == pytest.approx(0.0, abs=1e-12)
    assert coeffs[-1] == pytest.approx(0.0, abs=1e-12)
    assert coeffs.max() <= 1.0


# ---------------------------------------------------------------------------
# Transform and band reduction
# ---------------------------------------------------------------------------

def test_transform_returns_half_spectrum():
    bins = transform(np.zeros(64))
    assert len(bins) == 33
    assert np.iscomplexobj(bins)


def test_reduce_bands_takes_magnitude_of_leading_bins():
    bins = np.array([3 + 4j, 0j, -6 + 8j, 100 + 0j])
    np.testing.assert_allclose(reduce_bands(bins, 3, 1000), [5.0, 0.0, 10.0])


def test_reduce_bands_clamps_to_max_height():
    bins = np.array([3 + 4j, 0j, -6 + 8j])
    np.testing.assert_allclose(reduce_bands(bins, 3, 7), [5.0, 0.0, 7.0])
    np.testing.assert_allclose(reduce_bands(bins, 3, -5), [0.0, 0.0, 0.0])


def test_dc_block_lands_in_first_band():
    engine = SpectrumEngine(block_size=64, num_bands=4)
    mags = engine.analyse(np.ones(64), max_height=1e6)
    assert mags[0] == pytest.approx(np.sum(engine.window))
    assert np.all(mags[1:] < mags[0])


@pytest.mark.parametrize("num_bands,max_height", [(1, 10), (80, 450), (512, 3)])
def test_reduction_output_bounds(sine_block, num_bands, max_height):
    engine = SpectrumEngine(block_size=1024, num_bands=num_bands)
    mags = engine.analyse(sine_block(1024, 5, amplitude=0.8), max_height)
    assert mags.shape == (num_bands,)
    assert np.all(mags >= 0)
    assert np.all(mags <= max_height)


def test_analyse_is_idempotent_and_stateless(sine_block):
    engine = SpectrumEngine(block_size=512, num_bands=32)
    block = sine_block(512, 7)

    first = engine.analyse(block, 300)
    second = engine.analyse(block, 300)

    np.testing.assert_array_equal(first, second)
    np.testing.assert_array_equal(engine.bars, np.zeros(32))


# ---------------------------------------------------------------------------
# Peak falloff smoothing
# ---------------------------------------------------------------------------

def test_smoother_starts_at_zero():
    smoother = PeakFalloff(5)
    np.testing.assert_array_equal(smoother.snapshot(), np.zeros(5))
    assert smoother.falloff == PEAK_FALLOFF


def test_rise_averages_toward_target():
    smoother = PeakFalloff(1)
    v = 100.0
    assert smoother.update(np.array([v]))[0] == pytest.approx(50.0)
    assert smoother.update(np.array([v]))[0] == pytest.approx(75.0)
    for _ in range(50):
        value = smoother.update(np.array([v]))[0]
        assert value <= v


def test_equal_value_holds():
    smoother = PeakFalloff(1)
    smoother.update(np.array([40.0]))   # 20
    assert smoother.update(np.array([20.0]))[0] == pytest.approx(20.0)


def test_decay_is_linear_and_independent_of_drop_size():
    a = PeakFalloff(1, falloff=8.0)
    b = PeakFalloff(1, falloff=8.0)
    for s in (a, b):
        s.update(np.array([200.0]))     # 100
    assert a.update(np.array([0.0]))[0] == pytest.approx(92.0)
    assert b.update(np.array([99.0]))[0] == pytest.approx(92.0)


@pytest.mark.parametrize("prev0,k", [(50.0, 1), (50.0, 6), (50.0, 7), (3.0, 2)])
def test_decay_after_k_silent_frames(prev0, k):
    smoother = PeakFalloff(1, falloff=8.0)
    smoother.update(np.array([2 * prev0]))
    assert smoother.snapshot()[0] == pytest.approx(prev0)

    for _ in range(k):
        smoother.update(np.array([0.0]))

    assert smoother.snapshot()[0] == pytest.approx(max(prev0 - k * 8.0, 0.0))


def test_bands_update_independently():
    smoother = PeakFalloff(3, falloff=10.0)
    smoother.update(np.array([100.0, 0.0, 40.0]))     # 50, 0, 20
    out = smoother.update(np.array([0.0, 60.0, 20.0]))
    np.testing.assert_allclose(out, [40.0, 30.0, 20.0])


def test_snapshot_is_read_only_copy():
    smoother = PeakFalloff(2)
    snap = smoother.update(np.array([10.0, 10.0]))
    with pytest.raises(ValueError):
        snap[0] = 99.0
    smoother.update(np.array([10.0, 10.0]))
    assert snap[0] == pytest.approx(5.0)


def test_reset_zeroes_state():
    smoother = PeakFalloff(2)
    smoother.update(np.array([10.0, 10.0]))
    smoother.reset()
    np.testing.assert_array_equal(smoother.snapshot(), [0.0, 0.0])


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------

def test_first_frame_rises_to_half(sine_block):
    engine = SpectrumEngine(block_size=1024, num_bands=16)
    block = sine_block(1024, 4, amplitude=0.1)
    expected = engine.analyse(block, 450) / 2.0
    np.testing.assert_allclose(engine.process(block, 450), expected)


def test_silence_stays_at_zero():
    engine = SpectrumEngine(block_size=4096, num_bands=80)
    for _ in range(3):
        bars = engine.process(np.zeros(4096), 450)
    assert bars.shape == (80,)
    np.testing.assert_array_equal(bars, np.zeros(80))


def test_silence_decays_peak_within_expected_frames(sine_block):
    engine = SpectrumEngine(block_size=4096, num_bands=80, falloff=PEAK_FALLOFF)
    bars = engine.process(sine_block(4096, 10), 450)
    peak = bars.max()
    assert peak == pytest.approx(225.0)  # clamped to 450, halved by the rise

    frames = math.ceil(peak / PEAK_FALLOFF)
    silence = np.zeros(4096)
    for _ in range(frames - 1):
        bars = engine.process(silence, 450)
    assert bars.max() > 0
    bars = engine.process(silence, 450)
    np.testing.assert_array_equal(bars, np.zeros(80))


def test_bars_property_matches_last_process(sine_block):
    engine = SpectrumEngine(block_size=256, num_bands=8)
    out = engine.process(sine_block(256, 2), 100)
    np.testing.assert_array_equal(engine.bars, out)
    engine.reset()
    np.testing.assert_array_equal(engine.bars, np.zeros(8))


def test_process_rejects_short_block():
    engine = SpectrumEngine(block_size=256, num_bands=8)
    with pytest.raises(ValueError):
        engine.process(np.zeros(200), 100)
    np.testing.assert_array_equal(engine.bars, np.zeros(8))
