"""
errors.py — exception types raised by the photon-noise pipeline.

• ConfigurationError: fatal, bad inputs (size, ISO, transfer function).
• UnsupportedTransferFunction: selector outside the closed registry.
• GrainTableError: the grain table could not be written.
• PlotError: the diagnostic plot could not be saved.

© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid image size, ISO setting or transfer function."""


class UnsupportedTransferFunction(ConfigurationError):
    """Transfer characteristic that has no registered curve."""


class GrainTableError(OSError):
    """
    Failure while persisting a film grain table.

    `detail` holds a short human-readable reason (e.g. "Unable to open file x").
    """

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class PlotError(RuntimeError):
    """The scaling-curve figure could not be saved (bad directory or format)."""
