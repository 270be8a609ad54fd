"""
scaling_curve.py — sample the sensor noise model into an AV1 luma scaling curve.

WHAT THIS MODULE DOES
---------------------
AV1 film grain is specified by a piecewise-linear "scaling function" that maps
an 8-bit encoded luma value to a grain amplitude. This module evaluates the
SensorNoiseModel at evenly spaced encoded values and converts the noise to
that scale:
  1) x = i / (n - 1), encoded value in [0, 1]
  2) linear = tf.to_linear(x)
  3) σ_lin = noise_in_electrons(linear) / max_electrons_per_pixel
  4) local slope of tf.from_linear over [linear - 2σ_lin, linear + 2σ_lin]
     (clamped to [0, 1]) turns σ_lin into an encoded-domain σ
  5) x_out = round(255·x), noise_out = min(255, round(255 · 7.88 · σ_enc))

The 7.88 factor is the fixed-point amplitude of the grain template with
scaling_shift = 8 and must stay as is for existing tables to be reproduced.

LEARNING NOTES
--------------
• A ±2σ secant instead of the derivative avoids the infinite slope of
  power-law curves at black (d/dl l^(1/γ) → ∞ as l → 0).
• A window of zero width has no defined slope; such a point gets no grain
  instead of NaN.
• Rounding is half away from zero (C roundf), not numpy's half-to-even.
• Everything is evaluated in float32. In PQ highlights the window rise is a
  difference of two nearly equal encoded values, and double precision lands
  on a different integer there than the tables in circulation.

© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..sensor.noise_model import NoiseModelConfig, SensorNoiseModel

NUM_Y_POINTS = 14            # AV1 maximum number of luma scaling points
MAX_SCALING_VALUE = 255
NOISE_AMPLITUDE_SCALE = 7.88
SLOPE_WINDOW_SIGMAS = 2.0


@dataclass(frozen=True)
class ScalingPoint:
    x: int
    noise: int

    def __post_init__(self):
        for name in ("x", "noise"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {v!r}")
            if not (0 <= v <= MAX_SCALING_VALUE):
                raise ValueError(f"{name} must be in [0, 255], got {v}")


@dataclass(frozen=True)
class ScalingCurve:
    """
    Ordered luma scaling points.

    Invariants: 1..14 points, x strictly increasing, every value in [0, 255].
    """
    points: tuple[ScalingPoint, ...]

    def __post_init__(self):
        pts = tuple(self.points)
        object.__setattr__(self, "points", pts)
        if not (1 <= len(pts) <= NUM_Y_POINTS):
            raise ValueError(f"a scaling curve holds 1..{NUM_Y_POINTS} points, got {len(pts)}")
        for prev, cur in zip(pts, pts[1:]):
            if cur.x <= prev.x:
                raise ValueError(f"x values must be strictly increasing ({prev.x} → {cur.x})")

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def xs(self) -> list[int]:
        return [p.x for p in self.points]

    @property
    def noise_values(self) -> list[int]:
        return [p.noise for p in self.points]

    def as_pairs(self) -> list[tuple[int, int]]:
        return [(p.x, p.noise) for p in self.points]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def round_half_away(v):
    """roundf semantics: 0.5 → 1, -0.5 → -1, 2.5 → 3."""
    v = np.asarray(v)
    if not np.issubdtype(v.dtype, np.floating):
        v = v.astype(np.float64)
    whole = np.trunc(v)
    # v - trunc(v) is exact; |v| + 0.5 is not just below one half
    return whole + np.sign(v) * (np.abs(v - whole) >= 0.5)


def encoded_noise(model: SensorNoiseModel, x: np.ndarray) -> np.ndarray:
    """
    Noise σ in encoded units (fraction of full scale) at encoded values x.

    Steps 2–4 of the module docstring; vectorized over x and evaluated in the
    model's dtype.
    """
    tf = model.config.transfer_function
    t = model.dtype.type
    linear = np.asarray(tf.to_linear(np.asarray(x, dtype=model.dtype)), dtype=model.dtype)
    linear_noise = (np.asarray(model.noise_in_electrons(linear), dtype=model.dtype)
                    / model.max_electrons_per_pixel)

    start = np.maximum(t(0), linear - t(SLOPE_WINDOW_SIGMAS) * linear_noise)
    end = np.minimum(t(1), linear + t(SLOPE_WINDOW_SIGMAS) * linear_noise)
    width = end - start
    rise = (np.asarray(tf.from_linear(end), dtype=model.dtype)
            - np.asarray(tf.from_linear(start), dtype=model.dtype))

    slope = np.divide(rise, width, out=np.zeros_like(rise), where=width > 0)
    return linear_noise * slope


# -----------------------------------------------------------------------------
# Sampler
# -----------------------------------------------------------------------------
def sample_scaling_curve(config: NoiseModelConfig, num_points: int = NUM_Y_POINTS) -> ScalingCurve:
    """
    Build the luma scaling curve for a camera configuration.

    The whole pipeline runs in float32, so the integers match tables produced
    by the libaom photon_noise_table tool for the same inputs.

    Parameters
    ----------
    config : NoiseModelConfig
        Image size, ISO and transfer function.
    num_points : int
        Number of evenly spaced samples, 2..14 (default 14).

    Returns
    -------
    ScalingCurve
        Points from x = 0 to x = 255, noise in [0, 255].
    """
    if not (2 <= num_points <= NUM_Y_POINTS):
        raise ValueError(f"num_points must be in [2, {NUM_Y_POINTS}], got {num_points}")

    model = SensorNoiseModel(config, dtype=np.float32)
    t = np.float32
    x = np.arange(num_points, dtype=np.float32) / t(num_points - 1)

    sigma = encoded_noise(model, x)
    sigma = np.nan_to_num(sigma, nan=0.0, posinf=0.0, neginf=0.0)

    x_out = round_half_away(t(MAX_SCALING_VALUE) * x)
    amplitude = t(MAX_SCALING_VALUE) * t(NOISE_AMPLITUDE_SCALE)
    noise_out = np.clip(round_half_away(amplitude * sigma), 0, MAX_SCALING_VALUE)

    return ScalingCurve(tuple(
        ScalingPoint(int(xi), int(ni)) for xi, ni in zip(x_out, noise_out)
    ))
