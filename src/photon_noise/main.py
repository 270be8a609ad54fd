"""
Photon-noise film grain table generator (CLI)
camera settings → noise model → scaling curve → grain table

WHY THIS FILE
-------------
Creates a film grain table representing the noise one would get by shooting
with a digital camera at a given light level, for use with stills and videos:
  1) Pick the transfer function the image will be encoded with
  2) Model read / shot / PRNU noise for a 35mm sensor at the given ISO
  3) Sample 14 points into an AV1 luma scaling function
  4) Write a single whole-stream entry to a `filmgrn1` table

RUN
---
  photon-noise-table --width 3840 --height 2160 --iso 25600 -o noise.tbl
  python -m photon_noise.main -w 1920 -l 1080 -i 6400 -t hlg -o hlg.tbl --plot hlg.png

  # then, for example:
  aomenc --film-grain-table=noise.tbl ...
  avifenc -c aom -a film-grain-table=noise.tbl ...

NOTES
-----
• --iso is the 35mm-equivalent ISO: multiply the true ISO by
  (36×24 mm / used sensor area), e.g. ×1.5² for APS-C.
• --width/--height are the size of the images the table will be applied to,
  since that decides how the light was shared between pixels.

© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .errors import ConfigurationError, GrainTableError, PlotError
from .grain.grain_table import build_photon_noise_table
from .grain.scaling_curve import sample_scaling_curve
from .sensor.noise_model import NoiseModelConfig, SensorNoiseModel
from .transfer.transfer_functions import available_names, lookup_by_name


def generate_table(
    width: int,
    height: int,
    iso: float,
    output: str | Path,
    transfer_function: str = "srgb",
    plot: str | Path | None = None,
    verbose: bool = False,
) -> Path:
    """
    Execute one settings → table pass.

    Parameters
    ----------
    width, height : int
        Output image size in pixels.
    iso : float
        35mm-equivalent ISO setting.
    output : str | Path
        Destination of the film grain table.
    transfer_function : str
        One of: bt470m | bt470bg | srgb | smpte2084 | hlg
    plot : str | Path | None
        Optional PNG of the scaling curve.
    verbose : bool
        Print the sampled points.

    Raises
    ------
    ConfigurationError, GrainTableError, PlotError
        PlotError is raised after the table has been written.
    """
    config = NoiseModelConfig(
        width=width,
        height=height,
        iso_setting=iso,
        transfer_function=lookup_by_name(transfer_function),
    )
    curve = sample_scaling_curve(config)

    if verbose:
        model = SensorNoiseModel(config)
        print(model)
        print(f"pixel area ≈ {config.pixel_area_um2:.2f} µm² | "
              f"mid-tone exposure ≈ {config.mid_tone_exposure:.3e} lx·s")
        for p in curve:
            print(f"  x={p.x:3d}  noise={p.noise:3d}")

    path = build_photon_noise_table(curve).write(output)
    print(f"[OK] Saved film grain table to: {path.resolve()}")

    if plot is not None:
        # imported lazily so table generation does not need a plotting backend
        from .utils.plotting import plot_scaling_curve
        plot_scaling_curve(
            curve,
            model=SensorNoiseModel(config),
            title=f"{width}×{height} @ ISO {iso:g} ({config.transfer_function.name})",
            path=plot,
        )
        print(f"[OK] Saved scaling curve plot to: {Path(plot).resolve()}")

    return path


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="photon-noise-table",
        description="Film grain table modelling camera photon noise at a given ISO",
    )
    p.add_argument("-w", "--width", type=int, required=True, help="width of the image in pixels")
    p.add_argument("-l", "--height", type=int, required=True, help="height of the image in pixels")
    p.add_argument("-i", "--iso", type=float, required=True,
                   help="ISO setting indicative of the light level")
    p.add_argument("-o", "--output", required=True,
                   help="output file to which to write the film grain table")
    p.add_argument("-t", "--transfer-function", default="srgb", choices=available_names(),
                   type=str.lower, help="transfer function used by the encoded image (default: srgb)")
    p.add_argument("--plot", default=None, help="optional PNG of the scaling curve")
    p.add_argument("-v", "--verbose", action="store_true", help="print the sampled scaling points")
    return p.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        generate_table(
            width=args.width,
            height=args.height,
            iso=args.iso,
            output=args.output,
            transfer_function=args.transfer_function,
            plot=args.plot,
            verbose=args.verbose,
        )
    except ConfigurationError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except GrainTableError as exc:
        print(f"Failed to write film grain table: {exc.detail}", file=sys.stderr)
        return 1
    except PlotError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
