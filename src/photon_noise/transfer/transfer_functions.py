"""
transfer_functions.py — encoded ↔ linear-light tone curves used by the noise model.

WHAT THIS MODULE DOES
---------------------
Film grain is applied by the decoder to *encoded* (non-linear) sample values,
but photon noise lives in *linear* light. Each TransferFunction therefore
carries:
  • to_linear   : encoded value in [0, 1] → linear light in [0, 1] (EOTF)
  • from_linear : linear light in [0, 1] → encoded value in [0, 1] (inverse EOTF)
  • mid_tone    : the linear-light level treated as the reference exposure

The set of curves is closed and keyed by the CICP transfer characteristic
code (ITU-T H.273), as carried in the AV1 sequence header:
  bt470m (γ 2.2), bt470bg (γ 2.8), srgb, smpte2084 (PQ), hlg

Both conversions accept Python scalars (→ float) or numpy arrays (→ ndarray).
float32 arrays are evaluated in single precision with every pow/exp/log
rounded once, which reproduces existing C-generated tables bit for bit;
everything else is evaluated in double precision.

LEARNING NOTES
--------------
• SDR mid-tone is 18% of the maximum (ISO 12232 Standard Output Sensitivity).
  For HDR that would be far too bright (1800 cd/m² on PQ), so PQ and HLG use
  the BT.2408 reference of 26 cd/m², expressed relative to their peak.
• HLG here is defined in *display* light for a 1000 cd/m² display, i.e. the
  OOTF (system γ = 1.2) is folded into to_linear. For scene light, drop the
  1.2 power from both conversions and use mid_tone = (26/1000)**(1/1.2).
  Existing tables were generated with the display-light variant.

REFERENCES (short list)
-----------------------
• IEC 61966-2-1:1999 — sRGB.
• SMPTE ST 2084:2014 — PQ EOTF.
• ITU-R BT.2100-2 — HLG OETF/OOTF.
• ITU-R BT.2408-4 (2021), p. 6 — HDR reference white / mid-tone levels.
• ITU-T H.273 — Coding-independent code points (CICP).
© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Callable, Union

import numpy as np

from ..errors import UnsupportedTransferFunction

ArrayLike = Union[float, np.ndarray]


class TransferCharacteristic(IntEnum):
    """CICP transfer characteristics (H.273, table 3)."""
    RESERVED_0 = 0
    BT_709 = 1
    UNSPECIFIED = 2
    RESERVED_3 = 3
    BT_470_M = 4
    BT_470_B_G = 5
    BT_601 = 6
    SMPTE_240 = 7
    LINEAR = 8
    LOG_100 = 9
    LOG_100_SQRT10 = 10
    IEC_61966 = 11
    BT_1361 = 12
    SRGB = 13
    BT_2020_10_BIT = 14
    BT_2020_12_BIT = 15
    SMPTE_2084 = 16
    SMPTE_428 = 17
    HLG = 18


@dataclass(frozen=True)
class TransferFunction:
    """
    One encode/decode curve pair plus its mid-tone.

    mid_tone is in linear *output* light, relative to the curve's peak.
    """
    name: str
    characteristic: TransferCharacteristic
    to_linear: Callable[[ArrayLike], ArrayLike]
    from_linear: Callable[[ArrayLike], ArrayLike]
    mid_tone: float


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _as_array(v: ArrayLike) -> np.ndarray:
    """float32 input stays float32, anything else becomes float64; negatives clamp to 0."""
    a = np.asarray(v)
    if a.dtype != np.float32:
        a = a.astype(np.float64)
    return np.maximum(a, a.dtype.type(0))


def _rounded_once(func, *args):
    """Evaluate a ufunc in double and round once to the dtype of the first argument."""
    dtype = np.result_type(args[0])
    return np.asarray(func(*(np.asarray(a, dtype=np.float64) for a in args))).astype(dtype)


def _like_input(v: ArrayLike, out: np.ndarray) -> ArrayLike:
    return float(out) if np.ndim(v) == 0 else out


# -----------------------------------------------------------------------------
# Pure power laws (BT.470 System M / System B, G)
# -----------------------------------------------------------------------------
def _power_law(gamma: float):
    def to_linear(encoded: ArrayLike) -> ArrayLike:
        e = _as_array(encoded)
        return _like_input(encoded, _rounded_once(np.power, e, e.dtype.type(gamma)))

    def from_linear(linear: ArrayLike) -> ArrayLike:
        lin = _as_array(linear)
        t = lin.dtype.type
        return _like_input(linear, _rounded_once(np.power, lin, t(1) / t(gamma)))

    return to_linear, from_linear


gamma22_to_linear, gamma22_from_linear = _power_law(2.2)
gamma28_to_linear, gamma28_from_linear = _power_law(2.8)


# -----------------------------------------------------------------------------
# sRGB
# -----------------------------------------------------------------------------
SRGB_ENCODED_THRESHOLD = 0.04045
SRGB_LINEAR_THRESHOLD = 0.0031308


def srgb_to_linear(encoded: ArrayLike) -> ArrayLike:
    e = _as_array(encoded)
    t = e.dtype.type
    out = np.piecewise(
        e,
        [e <= t(SRGB_ENCODED_THRESHOLD)],
        [lambda v: v / t(12.92),
         lambda v: _rounded_once(np.power, (v + t(0.055)) / t(1.055), t(2.4))],
    )
    return _like_input(encoded, out)


def srgb_from_linear(linear: ArrayLike) -> ArrayLike:
    lin = _as_array(linear)
    t = lin.dtype.type
    out = np.piecewise(
        lin,
        [lin <= t(SRGB_LINEAR_THRESHOLD)],
        [lambda v: t(12.92) * v,
         lambda v: t(1.055) * _rounded_once(np.power, v, t(1) / t(2.4)) - t(0.055)],
    )
    return _like_input(linear, out)


# -----------------------------------------------------------------------------
# SMPTE ST 2084 (PQ)
# -----------------------------------------------------------------------------
# all five are exact in single precision
PQ_M1 = 2610 / 16384
PQ_M2 = 128 * 2523 / 4096
PQ_C1 = 3424 / 4096
PQ_C2 = 32 * 2413 / 4096
PQ_C3 = 32 * 2392 / 4096


def pq_to_linear(encoded: ArrayLike) -> ArrayLike:
    e = _as_array(encoded)
    t = e.dtype.type
    pq_pow_inv_m2 = _rounded_once(np.power, e, t(1) / t(PQ_M2))
    # below c1 the numerator would go negative (encoded values under ~7e-7)
    num = np.maximum(pq_pow_inv_m2 - t(PQ_C1), t(0))
    out = _rounded_once(np.power, num / (t(PQ_C2) - t(PQ_C3) * pq_pow_inv_m2), t(1) / t(PQ_M1))
    return _like_input(encoded, out)


def pq_from_linear(linear: ArrayLike) -> ArrayLike:
    lin = _as_array(linear)
    t = lin.dtype.type
    linear_pow_m1 = _rounded_once(np.power, lin, t(PQ_M1))
    ratio = (t(PQ_C1) + t(PQ_C2) * linear_pow_m1) / (t(1) + t(PQ_C3) * linear_pow_m1)
    return _like_input(linear, _rounded_once(np.power, ratio, t(PQ_M2)))


# -----------------------------------------------------------------------------
# Hybrid Log-Gamma (display light, 1000 cd/m² nominal peak)
# -----------------------------------------------------------------------------
HLG_A = 0.17883277
HLG_B = 0.28466892
HLG_C = 0.55991073
HLG_SYSTEM_GAMMA = 1.2


def hlg_to_linear(encoded: ArrayLike) -> ArrayLike:
    # EOTF = OOTF ∘ OETF⁻¹
    e = _as_array(encoded)
    t = e.dtype.type
    scene = np.piecewise(
        e,
        [e <= t(0.5)],
        [lambda v: v * v / t(3),
         lambda v: (_rounded_once(np.exp, (v - t(HLG_C)) / t(HLG_A)) + t(HLG_B)) / t(12)],
    )
    return _like_input(encoded, _rounded_once(np.power, scene, t(HLG_SYSTEM_GAMMA)))


def hlg_from_linear(linear: ArrayLike) -> ArrayLike:
    # EOTF⁻¹ = OETF ∘ OOTF⁻¹
    lin = _as_array(linear)
    t = lin.dtype.type
    scene = _rounded_once(np.power, lin, t(1) / t(HLG_SYSTEM_GAMMA))
    out = np.piecewise(
        scene,
        [scene <= t(1) / t(12)],
        [lambda v: np.sqrt(t(3) * v),
         lambda v: t(HLG_A) * _rounded_once(np.log, t(12) * v - t(HLG_B)) + t(HLG_C)],
    )
    return _like_input(linear, out)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------
GAMMA22 = TransferFunction("bt470m", TransferCharacteristic.BT_470_M,
                           gamma22_to_linear, gamma22_from_linear, 0.18)
GAMMA28 = TransferFunction("bt470bg", TransferCharacteristic.BT_470_B_G,
                           gamma28_to_linear, gamma28_from_linear, 0.18)
SRGB = TransferFunction("srgb", TransferCharacteristic.SRGB,
                        srgb_to_linear, srgb_from_linear, 0.18)
PQ = TransferFunction("smpte2084", TransferCharacteristic.SMPTE_2084,
                      pq_to_linear, pq_from_linear, 26 / 10000)
HLG = TransferFunction("hlg", TransferCharacteristic.HLG,
                       hlg_to_linear, hlg_from_linear, 26 / 1000)

TRANSFER_FUNCTIONS = MappingProxyType({
    tf.characteristic: tf for tf in (GAMMA22, GAMMA28, SRGB, PQ, HLG)
})

_BY_NAME = MappingProxyType({tf.name: tf for tf in TRANSFER_FUNCTIONS.values()})

DEFAULT_TRANSFER_FUNCTION = SRGB


def lookup(characteristic: TransferCharacteristic | int) -> TransferFunction:
    """
    Return the curve registered for a CICP transfer characteristic.

    Raises
    ------
    UnsupportedTransferFunction
        For codes outside H.273 and for H.273 curves that are not implemented.
    """
    try:
        key = TransferCharacteristic(characteristic)
    except ValueError:
        raise UnsupportedTransferFunction(
            f"unknown transfer characteristic {characteristic!r}"
        ) from None
    if key not in TRANSFER_FUNCTIONS:
        raise UnsupportedTransferFunction(
            f"unimplemented transfer function {key.name} ({int(key)}). "
            f"Available: {available_names()}"
        )
    return TRANSFER_FUNCTIONS[key]


def lookup_by_name(name: str) -> TransferFunction:
    """Case-insensitive lookup by CLI name (e.g. 'srgb', 'smpte2084')."""
    tf = _BY_NAME.get(name.strip().lower())
    if tf is None:
        raise UnsupportedTransferFunction(
            f"unknown transfer function '{name}'. Available: {available_names()}"
        )
    return tf


def available_names() -> list[str]:
    """CLI names of all registered curves, in CICP code order."""
    return [tf.name for tf in TRANSFER_FUNCTIONS.values()]
