"""Unit tests for loudness estimation and frequency analysis."""

import pytest
import numpy as np

from speechpractice.audio.analyser import FrequencyAnalyser
from speechpractice.audio.errors import InvalidFrame
from speechpractice.audio.loudness import estimate_loudness


@pytest.mark.unit
class TestEstimateLoudness:
    """Test cases for estimate_loudness."""

    @pytest.mark.parametrize("boost", [0.0, 0.5, 2.0, 4.0, 100.0])
    def test_all_zero_frame_is_silent(self, boost):
        assert estimate_loudness(np.zeros(256, dtype=np.uint8), boost) == 0.0

    def test_output_always_within_range(self):
        rng = np.random.default_rng(1234)
        for _ in range(200):
            bins = rng.integers(0, 256, size=rng.integers(1, 1025), dtype=np.uint8)
            boost = float(rng.uniform(0, 10))
            loudness = estimate_loudness(bins, boost)
            assert 0.0 <= loudness <= 100.0

    def test_known_rms(self):
        # Every bin at 0.2 of full scale -> RMS 0.2 -> 20 * boost
        bins = np.full(128, 51, dtype=np.uint8)
        assert estimate_loudness(bins, 2.0) == pytest.approx(40.0)

    def test_mixed_bins(self):
        bins = np.array([255, 0, 0, 0], dtype=np.uint8)
        # sqrt(1/4) = 0.5
        assert estimate_loudness(bins, 1.0) == pytest.approx(50.0)

    def test_clamped_at_100(self):
        bins = np.full(64, 255, dtype=np.uint8)
        assert estimate_loudness(bins, 4.0) == 100.0

    def test_empty_frame_is_invalid(self):
        with pytest.raises(InvalidFrame):
            estimate_loudness(np.array([], dtype=np.uint8), 1.0)

    def test_out_of_range_values_are_invalid(self):
        with pytest.raises(InvalidFrame):
            estimate_loudness(np.array([10, 300]), 1.0)
        with pytest.raises(InvalidFrame):
            estimate_loudness(np.array([-1, 10]), 1.0)

    def test_two_dimensional_frame_is_invalid(self):
        with pytest.raises(InvalidFrame):
            estimate_loudness(np.zeros((2, 8), dtype=np.uint8), 1.0)

    def test_negative_boost_rejected(self):
        with pytest.raises(ValueError):
            estimate_loudness(np.zeros(8, dtype=np.uint8), -1.0)

    def test_accepts_plain_lists(self):
        assert estimate_loudness([255, 255], 1.0) == pytest.approx(100.0)


@pytest.mark.unit
class TestFrequencyAnalyser:
    """Test cases for FrequencyAnalyser."""

    def test_bin_count(self):
        assert FrequencyAnalyser(fft_size=512).frequency_bin_count == 256
        assert FrequencyAnalyser(fft_size=256).frequency_bin_count == 128

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            FrequencyAnalyser(fft_size=500)
        with pytest.raises(ValueError):
            FrequencyAnalyser(smoothing_time_constant=1.5)
        with pytest.raises(ValueError):
            FrequencyAnalyser(min_decibels=-30, max_decibels=-100)

    def test_silence_gives_zero_bytes(self):
        analyser = FrequencyAnalyser()
        analyser.push_samples(np.zeros(512))
        data = analyser.byte_frequency_data()
        assert data.dtype == np.uint8
        assert data.shape == (256,)
        assert not data.any()

    def test_sine_peaks_at_its_frequency(self):
        sample_rate = 44100
        analyser = FrequencyAnalyser(fft_size=512, smoothing_time_constant=0.0)
        t = np.arange(512) / sample_rate
        analyser.push_samples(0.5 * np.sin(2 * np.pi * 440 * t))

        data = analyser.byte_frequency_data()
        expected_bin = round(440 / (sample_rate / 512))
        assert abs(int(np.argmax(data)) - expected_bin) <= 1
        assert data.max() > 200

    def test_smoothing_carries_over_frames(self):
        analyser = FrequencyAnalyser(smoothing_time_constant=0.8)
        t = np.arange(512) / 44100
        analyser.push_samples(0.5 * np.sin(2 * np.pi * 1000 * t))
        loud = analyser.byte_frequency_data().max()

        analyser.push_samples(np.zeros(512))
        decaying = analyser.byte_frequency_data().max()
        assert 0 < decaying < loud

    def test_short_pushes_roll_the_window(self):
        analyser = FrequencyAnalyser(fft_size=64)
        analyser.push_samples(np.ones(40))
        analyser.push_samples(np.full(40, 0.5))
        assert analyser._samples.shape == (64,)
        assert np.allclose(analyser._samples[-40:], 0.5)
        assert np.allclose(analyser._samples[:24], 1.0)

    def test_reset(self):
        analyser = FrequencyAnalyser()
        analyser.push_samples(np.ones(512) * 0.3)
        analyser.byte_frequency_data()
        analyser.reset()
        assert not analyser.byte_frequency_data().any()
