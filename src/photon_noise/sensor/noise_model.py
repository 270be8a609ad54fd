"""
noise_model.py — analytic per-pixel noise of a 35mm-equivalent camera sensor.

WHAT THIS MODULE DOES
---------------------
Predicts the noise standard deviation (electrons RMS) a pixel would show at a
given linear exposure level, for an image of `width × height` pixels shot at
`iso_setting` on a full 36 × 24 mm sensor:
  1) ISO → focal-plane exposure of a mid-tone:    H = 10 / ISO   [lx·s]
  2) Image size → pixel area on the 35mm sensor:  A = 36000·24000 / (W·H)  [µm²]
  3) Exposure × area × photon flux × QE → mid-tone electrons per pixel
  4) Scale so that linear = transfer_function.mid_tone lands on that mid-tone
  5) Combine read noise, photon shot noise and PRNU in quadrature

WHY THIS WORKS
--------------
A "35mm-equivalent ISO" is the ISO that would map the same focal-plane
exposure to the observed output lightness on a 36 × 24 mm sensor. Smaller
sensors collect less light per image for the same lightness; multiply the
true ISO by (36·24 / used area) to get the equivalent value (e.g. APS-C at
ISO 1000 ≈ ISO 2250 on 35mm).

Noise is measured per *output* pixel, so more pixels on the same sensor area
means fewer electrons each and more per-pixel noise, which averages out to the
same amount when the image is viewed at the same size.

LEARNING NOTES
--------------
• Shot noise ⇒ var = mean (Poisson), so its variance term is simply the
  electron count: no square root to take and square again.
• Read noise dominates in the deep shadows; PRNU (multiplicative) only matters
  near full scale, where it grows linearly with the signal.
• Constants below are order-of-magnitude values for 2010–2020 cameras. Read
  noise is higher than 1.5 e⁻ at low ISO, but it matters less there.

REFERENCES (short list)
-----------------------
• E. Martinec, "Noise, dynamic range and bit depth in digital SLRs"
  (photonstophotos.net) — shot noise, pixel size.
• J. Nakamura (ed.), Image Sensors and Signal Processing for Digital Still
  Cameras (2005) — ISO 12232 exposure index, H = 10/S.
• J. Janesick, Photon Transfer (2007), doi:10.1117/3.725073 — noise in quadrature.
• J. Nasse / strollswithmydog.com — ~11,260 photons/µm²/lx·s for daylight.
• T. Hammond et al., "Equivalence of camera formats", doi:10.1117/1.OE.57.11.110801.
© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Union

import numpy as np

from ..errors import ConfigurationError
from ..transfer.transfer_functions import TransferFunction

ArrayLike = Union[float, np.ndarray]

# Physical constants
PHOTONS_PER_LX_S_PER_UM2 = 11260.0   # daylight-like spectrum
QUANTUM_EFFICIENCY = 0.20            # effective, CFA included
PRNU = 0.005                         # fractional gain non-uniformity
READ_NOISE_E = 1.5                   # input-referred, electrons RMS

# 35mm ("full frame") sensor, in µm
SENSOR_WIDTH_UM = 36000.0
SENSOR_HEIGHT_UM = 24000.0


# -----------------------------------------------------------------------------
# Parameters
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class NoiseModelConfig:
    """
    Inputs of the noise model.

    Image
    -----
    width, height : output image size in pixels (> 0)

    Exposure
    --------
    iso_setting : 35mm-equivalent ISO (> 0)

    Encoding
    --------
    transfer_function : curve the image will be encoded with
    """
    width: int
    height: int
    iso_setting: float
    transfer_function: TransferFunction

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        iso = self.iso_setting
        if isinstance(iso, bool) or not isinstance(iso, Real) or not math.isfinite(iso) or iso <= 0:
            raise ConfigurationError(f"iso_setting must be a positive number, got {iso!r}")
        if not isinstance(self.transfer_function, TransferFunction):
            raise ConfigurationError(
                f"transfer_function must be a TransferFunction, got {type(self.transfer_function).__name__}"
            )

    @property
    def pixel_area_um2(self) -> float:
        """Area of one output pixel on the 36 × 24 mm sensor."""
        return (SENSOR_WIDTH_UM * SENSOR_HEIGHT_UM) / (self.width * self.height)

    @property
    def mid_tone_exposure(self) -> float:
        """Focal-plane exposure of an 18% card at this ISO, in lx·s."""
        return 10.0 / self.iso_setting


# -----------------------------------------------------------------------------
# Model
# -----------------------------------------------------------------------------
class SensorNoiseModel:
    """
    Noise in electrons as a function of linear exposure in [0, 1].

    linear = 1 is the transfer function's peak; linear = tf.mid_tone receives
    exactly the mid-tone electron count. Every method accepts a scalar or an
    ndarray and returns the same kind.

    dtype selects the working precision. np.float32 evaluates every constant
    and intermediate in single precision, in the same order as the scaling
    curve tables have always been generated.
    """

    def __init__(self, config: NoiseModelConfig, dtype=np.float64):
        self.config = config
        self.dtype = np.dtype(dtype)
        t = self.dtype.type
        exposure = t(10) / t(config.iso_setting)
        pixels = int(config.width) * int(config.height)
        pixel_area = (t(SENSOR_WIDTH_UM) * t(SENSOR_HEIGHT_UM)) / t(pixels)
        self.mid_tone_electrons_per_pixel = (
            t(QUANTUM_EFFICIENCY) * t(PHOTONS_PER_LX_S_PER_UM2) * exposure * pixel_area
        )
        self.max_electrons_per_pixel = (
            self.mid_tone_electrons_per_pixel / t(config.transfer_function.mid_tone)
        )

    def __repr__(self) -> str:
        c = self.config
        return (f"SensorNoiseModel({c.width}x{c.height}, ISO {c.iso_setting:g}, "
                f"{c.transfer_function.name}, max_e={self.max_electrons_per_pixel:.1f})")

    def electrons_per_pixel(self, linear: ArrayLike) -> ArrayLike:
        """Mean captured electrons (clamped at 0)."""
        lin = np.asarray(linear, dtype=self.dtype)
        e = self.max_electrons_per_pixel * np.maximum(lin, self.dtype.type(0))
        return float(e) if np.ndim(linear) == 0 else e

    def noise_in_electrons(self, linear: ArrayLike) -> ArrayLike:
        """
        Quadrature sum of read noise, photon shot noise and PRNU (electrons RMS):

            σ = sqrt(read² + e + (PRNU · e)²)
        """
        t = self.dtype.type
        e = np.asarray(self.electrons_per_pixel(linear), dtype=self.dtype)
        sigma = np.sqrt(t(READ_NOISE_E) * t(READ_NOISE_E) + e + t(PRNU) * t(PRNU) * e * e)
        return float(sigma) if np.ndim(linear) == 0 else sigma

    def linear_noise(self, linear: ArrayLike) -> ArrayLike:
        """Noise σ expressed in linear-light units (fraction of the peak)."""
        sigma = np.asarray(self.noise_in_electrons(linear), dtype=self.dtype) / self.max_electrons_per_pixel
        return float(sigma) if np.ndim(linear) == 0 else sigma

    def signal_to_noise(self, linear: ArrayLike) -> ArrayLike:
        """
        SNR = μ / σ at the given exposure (0 in black).

        Photon-limited regime: SNR ≈ √μ; read-noise-limited: SNR ≈ μ / read.
        """
        mu = np.asarray(self.electrons_per_pixel(linear), dtype=self.dtype)
        snr = mu / np.asarray(self.noise_in_electrons(linear), dtype=self.dtype)
        return float(snr) if np.ndim(linear) == 0 else snr
