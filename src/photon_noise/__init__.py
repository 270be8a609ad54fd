"""
photon_noise — film grain tables from camera photon noise
==========================================================
Models the noise a digital camera would record at a given ISO and image size,
and turns it into an AV1 film grain table. Organized as:
    transfer → sensor → grain → (utils for plots, main for the CLI)

© 2025 Ali Pouya — Photon Noise Table
"""

__version__ = "1.0.0"

from .errors import ConfigurationError, GrainTableError, PlotError, UnsupportedTransferFunction
from .grain.grain_table import FilmGrainParams, FilmGrainTable, build_photon_noise_table
from .grain.scaling_curve import ScalingCurve, ScalingPoint, sample_scaling_curve
from .sensor.noise_model import NoiseModelConfig, SensorNoiseModel
from .transfer.transfer_functions import TransferCharacteristic, TransferFunction, lookup, lookup_by_name

__all__ = [
    "ConfigurationError",
    "FilmGrainParams",
    "FilmGrainTable",
    "GrainTableError",
    "NoiseModelConfig",
    "PlotError",
    "ScalingCurve",
    "ScalingPoint",
    "SensorNoiseModel",
    "TransferCharacteristic",
    "TransferFunction",
    "UnsupportedTransferFunction",
    "build_photon_noise_table",
    "lookup",
    "lookup_by_name",
    "sample_scaling_curve",
]
