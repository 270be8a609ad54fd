"""
plotting.py — quick-look figures for generated noise profiles.

WHAT THIS MODULE PROVIDES
-------------------------
• plot_scaling_curve(curve, model=None)
    The 14-point luma scaling function as the decoder sees it (piecewise
    linear), optionally with the sensor SNR vs encoded value on a twin axis.

Useful for eyeballing how a transfer function reshapes photon noise: sRGB
and gamma curves peak in the shadows, PQ collapses to ~0 above mid-grey.

© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt

from ..errors import PlotError
from ..grain.scaling_curve import ScalingCurve
from ..sensor.noise_model import SensorNoiseModel


def plot_scaling_curve(
    curve: ScalingCurve,
    model: Optional[SensorNoiseModel] = None,
    title: str = "Luma scaling function",
    path: str | Path | None = None,
):
    """
    Plot a scaling curve and optionally save it.

    Parameters
    ----------
    curve : ScalingCurve
        Points to draw.
    model : SensorNoiseModel | None
        If given, SNR (dB) along the encoded axis is drawn on a second y axis.
    title : str
        Figure title.
    path : str | Path | None
        PNG destination; the figure is closed after saving, even on failure.

    Returns
    -------
    fig : matplotlib Figure (None once saved and closed)

    Raises
    ------
    PlotError
        If the figure cannot be written to `path`.
    """
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(curve.xs, curve.noise_values, marker="o", label="scaling point")
    ax.set_xlim(0, 255)
    ax.set_ylim(0, max(8, max(curve.noise_values) * 1.1))
    ax.set_xlabel("Encoded luma (8-bit)")
    ax.set_ylabel("Grain scaling")
    ax.grid(True, alpha=0.3)

    if model is not None:
        tf = model.config.transfer_function
        x = np.linspace(1 / 255, 1.0, 255)
        snr = np.asarray(model.signal_to_noise(tf.to_linear(x)))
        with np.errstate(divide="ignore"):
            snr_db = 20.0 * np.log10(snr)
        ax2 = ax.twinx()
        ax2.plot(255 * x, snr_db, color="tab:orange", alpha=0.7, label="SNR")
        ax2.set_ylabel("Sensor SNR (dB)")

    ax.set_title(title)
    fig.tight_layout()

    if path is not None:
        try:
            fig.savefig(Path(path), dpi=150)
        except (OSError, ValueError) as exc:
            raise PlotError(f"Unable to save plot {path} ({exc})") from exc
        finally:
            plt.close(fig)
        return None
    return fig
