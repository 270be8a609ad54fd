"""
Transfer function registry tests.

Round trips, monotonicity and scalar/array handling for every registered
curve, plus the lookup failure paths.
"""

import numpy as np
import pytest

from photon_noise.errors import ConfigurationError, UnsupportedTransferFunction
from photon_noise.transfer.transfer_functions import (
    GAMMA22,
    HLG,
    PQ,
    SRGB,
    TRANSFER_FUNCTIONS,
    TransferCharacteristic,
    available_names,
    lookup,
    lookup_by_name,
)

ALL_CURVES = list(TRANSFER_FUNCTIONS.values())
IDS = [tf.name for tf in ALL_CURVES]
GRID = np.linspace(0.0, 1.0, 2001)


@pytest.mark.parametrize("tf", ALL_CURVES, ids=IDS)
class TestRoundTrip:

    def test_linear_to_encoded_and_back(self, tf):
        back = tf.to_linear(tf.from_linear(GRID))
        np.testing.assert_allclose(back, GRID, atol=1e-4)

    def test_encoded_to_linear_and_back(self, tf):
        back = tf.from_linear(tf.to_linear(GRID))
        np.testing.assert_allclose(back, GRID, atol=1e-4)

    def test_monotonic(self, tf):
        assert np.all(np.diff(tf.to_linear(GRID)) >= 0)
        assert np.all(np.diff(tf.from_linear(GRID)) >= 0)

    def test_endpoints(self, tf):
        assert tf.to_linear(0.0) == pytest.approx(0.0, abs=1e-6)
        assert tf.to_linear(1.0) == pytest.approx(1.0, abs=1e-6)
        assert tf.from_linear(1.0) == pytest.approx(1.0, abs=1e-6)

    def test_scalar_in_scalar_out(self, tf):
        assert isinstance(tf.to_linear(0.5), float)
        assert isinstance(tf.from_linear(0.5), float)
        out = tf.to_linear(np.array([0.25, 0.5]))
        assert isinstance(out, np.ndarray) and out.shape == (2,)

    def test_single_precision_is_kept(self, tf):
        grid32 = GRID.astype(np.float32)
        lin = tf.to_linear(grid32)
        enc = tf.from_linear(grid32)
        assert lin.dtype == np.float32 and enc.dtype == np.float32
        np.testing.assert_allclose(lin, tf.to_linear(GRID), rtol=1e-3, atol=1e-6)
        np.testing.assert_allclose(enc, tf.from_linear(GRID), rtol=1e-3, atol=1e-6)

    def test_negative_input_is_clamped(self, tf):
        with np.errstate(all="raise"):
            assert tf.to_linear(-0.1) == tf.to_linear(0.0)
            assert tf.from_linear(-0.1) == tf.from_linear(0.0)

    def test_mid_tone_in_range(self, tf):
        assert 0.0 < tf.mid_tone < 1.0


class TestCurveValues:

    def test_gamma22(self):
        assert GAMMA22.to_linear(0.5) == pytest.approx(0.5 ** 2.2)
        assert GAMMA22.mid_tone == 0.18

    def test_srgb_linear_segment(self):
        assert SRGB.to_linear(0.04) == pytest.approx(0.04 / 12.92)
        assert SRGB.from_linear(0.003) == pytest.approx(12.92 * 0.003)

    def test_srgb_power_segment(self):
        assert SRGB.to_linear(0.5) == pytest.approx(0.214041, rel=1e-5)

    def test_pq_reference_white(self):
        # 100 cd/m² on a 10000 cd/m² scale is encoded at ~0.508
        assert PQ.from_linear(100 / 10000) == pytest.approx(0.50808, abs=1e-4)
        assert PQ.mid_tone == pytest.approx(26 / 10000)

    def test_pq_below_c1_is_black(self):
        with np.errstate(all="raise"):
            assert PQ.to_linear(1e-8) == 0.0

    def test_hlg_branches_meet(self):
        below = HLG.to_linear(0.5)
        above = HLG.to_linear(0.5 + 1e-9)
        assert above == pytest.approx(below, rel=1e-6)
        assert below == pytest.approx((1 / 12) ** 1.2)

    def test_hlg_mid_tone(self):
        assert HLG.mid_tone == pytest.approx(26 / 1000)


class TestLookup:

    @pytest.mark.parametrize("tc, name", [
        (TransferCharacteristic.BT_470_M, "bt470m"),
        (TransferCharacteristic.BT_470_B_G, "bt470bg"),
        (TransferCharacteristic.SRGB, "srgb"),
        (TransferCharacteristic.SMPTE_2084, "smpte2084"),
        (TransferCharacteristic.HLG, "hlg"),
    ])
    def test_registered(self, tc, name):
        assert lookup(tc).name == name
        assert lookup(int(tc)) is lookup(tc)
        assert lookup_by_name(name) is lookup(tc)

    def test_unimplemented_cicp_code(self):
        with pytest.raises(UnsupportedTransferFunction, match="BT_709"):
            lookup(TransferCharacteristic.BT_709)

    def test_unknown_code(self):
        with pytest.raises(UnsupportedTransferFunction):
            lookup(99)

    def test_unknown_name(self):
        with pytest.raises(UnsupportedTransferFunction, match="Available"):
            lookup_by_name("rec709")

    def test_name_is_case_insensitive(self):
        assert lookup_by_name(" sRGB ") is SRGB

    def test_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            lookup_by_name("linear")

    def test_available_names(self):
        assert available_names() == ["bt470m", "bt470bg", "srgb", "smpte2084", "hlg"]

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            TRANSFER_FUNCTIONS[TransferCharacteristic.LINEAR] = SRGB

    def test_curves_are_frozen(self):
        with pytest.raises(AttributeError):
            SRGB.mid_tone = 0.2
