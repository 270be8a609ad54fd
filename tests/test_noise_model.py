"""
Sensor noise model tests.

Derived exposure/area scalars, electron counts, quadrature noise and
configuration validation.
"""

import math

import numpy as np
import pytest

from photon_noise.errors import ConfigurationError
from photon_noise.sensor.noise_model import (
    PRNU,
    READ_NOISE_E,
    NoiseModelConfig,
    SensorNoiseModel,
)
from photon_noise.transfer.transfer_functions import HLG, PQ, SRGB


@pytest.fixture
def uhd_config():
    return NoiseModelConfig(width=3840, height=2160, iso_setting=25600, transfer_function=SRGB)


@pytest.fixture
def uhd_model(uhd_config):
    return SensorNoiseModel(uhd_config)


class TestNoiseModelConfig:

    def test_pixel_area(self, uhd_config):
        assert uhd_config.pixel_area_um2 == pytest.approx(36000 * 24000 / (3840 * 2160))
        assert uhd_config.pixel_area_um2 == pytest.approx(104.1667, rel=1e-5)

    def test_mid_tone_exposure(self, uhd_config):
        assert uhd_config.mid_tone_exposure == pytest.approx(3.90625e-4)

    @pytest.mark.parametrize("kwargs", [
        {"width": 0},
        {"height": -1},
        {"width": 1920.5},
        {"width": True},
        {"iso_setting": 0},
        {"iso_setting": -100},
        {"iso_setting": math.nan},
        {"iso_setting": math.inf},
        {"iso_setting": "800"},
        {"transfer_function": "srgb"},
    ])
    def test_invalid(self, kwargs):
        base = dict(width=1920, height=1080, iso_setting=800, transfer_function=SRGB)
        base.update(kwargs)
        with pytest.raises(ConfigurationError):
            NoiseModelConfig(**base)

    def test_numpy_integers_accepted(self):
        cfg = NoiseModelConfig(np.int64(640), np.int32(480), np.float64(100.0), SRGB)
        assert cfg.pixel_area_um2 == pytest.approx(2812.5)

    def test_frozen(self, uhd_config):
        with pytest.raises(AttributeError):
            uhd_config.iso_setting = 100


class TestSensorNoiseModel:

    def test_max_electrons(self, uhd_model):
        assert uhd_model.max_electrons_per_pixel == pytest.approx(509.0784, rel=1e-5)

    def test_mid_tone_gets_mid_tone_electrons(self, uhd_model):
        e = uhd_model.electrons_per_pixel(SRGB.mid_tone)
        assert e == pytest.approx(uhd_model.mid_tone_electrons_per_pixel)

    def test_hdr_mid_tone_scales_peak(self):
        sdr = SensorNoiseModel(NoiseModelConfig(3840, 2160, 25600, SRGB))
        pq = SensorNoiseModel(NoiseModelConfig(3840, 2160, 25600, PQ))
        hlg = SensorNoiseModel(NoiseModelConfig(3840, 2160, 25600, HLG))
        assert pq.max_electrons_per_pixel == pytest.approx(35243.89, rel=1e-5)
        assert hlg.max_electrons_per_pixel == pytest.approx(
            sdr.max_electrons_per_pixel * 0.18 / (26 / 1000))

    def test_black_is_read_noise(self, uhd_model):
        assert uhd_model.noise_in_electrons(0.0) == pytest.approx(READ_NOISE_E)

    def test_quadrature_sum(self, uhd_model):
        e = uhd_model.electrons_per_pixel(0.5)
        expected = math.sqrt(READ_NOISE_E ** 2 + e + (PRNU * e) ** 2)
        assert uhd_model.noise_in_electrons(0.5) == pytest.approx(expected)

    def test_non_negative_and_non_decreasing(self, uhd_model):
        linear = np.linspace(0.0, 1.0, 1001)
        noise = uhd_model.noise_in_electrons(linear)
        assert np.all(noise >= 0)
        assert np.all(np.diff(noise) >= 0)

    def test_array_in_array_out(self, uhd_model):
        out = uhd_model.noise_in_electrons(np.array([0.0, 0.5, 1.0]))
        assert isinstance(out, np.ndarray) and out.shape == (3,)
        assert isinstance(uhd_model.noise_in_electrons(0.5), float)

    def test_linear_noise(self, uhd_model):
        assert uhd_model.linear_noise(1.0) == pytest.approx(
            uhd_model.noise_in_electrons(1.0) / uhd_model.max_electrons_per_pixel)

    def test_snr_photon_limited(self):
        # shot noise dominates both read noise and PRNU at a few hundred electrons
        model = SensorNoiseModel(NoiseModelConfig(640, 480, 100, SRGB))
        mu = model.electrons_per_pixel(1e-4)
        assert model.signal_to_noise(1e-4) == pytest.approx(math.sqrt(mu), rel=0.02)

    def test_snr_black(self, uhd_model):
        assert uhd_model.signal_to_noise(0.0) == 0.0

    def test_doubling_iso_halves_electrons(self, uhd_config):
        low = SensorNoiseModel(uhd_config)
        high = SensorNoiseModel(NoiseModelConfig(3840, 2160, 51200, SRGB))
        assert high.max_electrons_per_pixel == pytest.approx(low.max_electrons_per_pixel / 2)

    def test_more_pixels_fewer_electrons(self):
        hd = SensorNoiseModel(NoiseModelConfig(1920, 1080, 800, SRGB))
        uhd = SensorNoiseModel(NoiseModelConfig(3840, 2160, 800, SRGB))
        assert uhd.max_electrons_per_pixel == pytest.approx(hd.max_electrons_per_pixel / 4)

    def test_single_precision(self, uhd_config, uhd_model):
        model32 = SensorNoiseModel(uhd_config, dtype=np.float32)
        assert model32.max_electrons_per_pixel.dtype == np.float32
        assert model32.max_electrons_per_pixel == pytest.approx(
            uhd_model.max_electrons_per_pixel, rel=2e-6)
        linear = np.array([0.0, 0.18, 0.5, 1.0])
        noise = model32.noise_in_electrons(linear.astype(np.float32))
        assert noise.dtype == np.float32
        np.testing.assert_allclose(noise, uhd_model.noise_in_electrons(linear), rtol=2e-6)

    def test_repr(self, uhd_model):
        assert "3840x2160" in repr(uhd_model) and "srgb" in repr(uhd_model)
