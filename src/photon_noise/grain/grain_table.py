"""
grain_table.py — AV1 film grain parameters and the `filmgrn1` text table.

A film grain table is a list of time intervals, each carrying one full set of
AV1 grain parameters. Encoders (aomenc --film-grain-table, avifenc -a
film-grain-table) read it and signal the parameters in the bitstream.

Photon-noise tables use a single entry spanning the whole stream, with only the
luma scaling function set and every other parameter at a fixed value.

© 2025 Ali Pouya — Photon Noise Table
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterator

from ..errors import GrainTableError
from .scaling_curve import ScalingCurve

FILE_MAGIC = "filmgrn1"
STREAM_START = 0
STREAM_END = 9223372036854775807  # INT64_MAX: "until the end of the stream"

PHOTON_NOISE_RANDOM_SEED = 7391


@dataclass(frozen=True)
class FilmGrainParams:
    """AV1 film_grain_params() with AR coefficients stored flat, lag-0 defaults."""
    apply_grain: int = 1
    update_parameters: int = 1

    scaling_points_y: tuple[tuple[int, int], ...] = ()
    scaling_points_cb: tuple[tuple[int, int], ...] = ()
    scaling_points_cr: tuple[tuple[int, int], ...] = ()
    scaling_shift: int = 8

    ar_coeff_lag: int = 0
    ar_coeffs_y: tuple[int, ...] = ()
    ar_coeffs_cb: tuple[int, ...] = (0,)
    ar_coeffs_cr: tuple[int, ...] = (0,)
    ar_coeff_shift: int = 6
    grain_scale_shift: int = 0

    cb_mult: int = 0
    cb_luma_mult: int = 0
    cb_offset: int = 0
    cr_mult: int = 0
    cr_luma_mult: int = 0
    cr_offset: int = 0

    overlap_flag: int = 1
    random_seed: int = PHOTON_NOISE_RANDOM_SEED
    chroma_scaling_from_luma: int = 0

    def __post_init__(self):
        n = self.num_ar_coeffs_luma
        if len(self.ar_coeffs_y) != n:
            raise ValueError(f"ar_coeffs_y needs {n} values for lag {self.ar_coeff_lag}")
        for name in ("ar_coeffs_cb", "ar_coeffs_cr"):
            if len(getattr(self, name)) != n + 1:
                raise ValueError(f"{name} needs {n + 1} values for lag {self.ar_coeff_lag}")

    @property
    def num_ar_coeffs_luma(self) -> int:
        return 2 * self.ar_coeff_lag * (self.ar_coeff_lag + 1)

    @classmethod
    def from_scaling_curve(cls, curve: ScalingCurve) -> "FilmGrainParams":
        """Luma-only grain driven by `curve`; chroma stays grain-free."""
        return cls(scaling_points_y=tuple(curve.as_pairs()))


@dataclass(frozen=True)
class FilmGrainTableEntry:
    start_time: int
    end_time: int
    params: FilmGrainParams

    def __post_init__(self):
        if self.end_time < self.start_time:
            raise ValueError(f"entry ends before it starts: {self.start_time}..{self.end_time}")


@dataclass
class FilmGrainTable:
    entries: list[FilmGrainTableEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[FilmGrainTableEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, start_time: int, end_time: int, params: FilmGrainParams) -> bool:
        """
        Add an interval and return whether the table changed.

        Entries must move forward in time: one that ends at or before the
        current last entry is ignored. An interval that touches or overlaps
        the last entry and carries equal params extends it instead.
        """
        if self.entries:
            last = self.entries[-1]
            if end_time <= last.end_time:
                return False
            if start_time <= last.end_time and last.params == params:
                self.entries[-1] = replace(last, end_time=end_time)
                return True
        self.entries.append(FilmGrainTableEntry(start_time, end_time, params))
        return True

    def to_text(self) -> str:
        lines = [FILE_MAGIC]
        for entry in self.entries:
            lines.extend(_format_entry(entry))
        return "\n".join(lines) + "\n"

    def write(self, path: str | Path) -> Path:
        """
        Write the table to `path`.

        Raises GrainTableError with a readable `detail` if the file cannot be
        opened or written.
        """
        path = Path(path)
        try:
            fh = open(path, "w", encoding="ascii", newline="\n")
        except OSError as exc:
            raise GrainTableError(f"Unable to open file {path} ({exc.strerror or exc})") from exc
        with fh:
            try:
                fh.write(self.to_text())
            except OSError as exc:
                raise GrainTableError(f"Unable to write file {path} ({exc.strerror or exc})") from exc
        return path


def _format_entry(entry: FilmGrainTableEntry) -> list[str]:
    p = entry.params
    lines = [f"E {entry.start_time} {entry.end_time} {p.apply_grain} {p.random_seed} {p.update_parameters}"]
    if not p.update_parameters:
        return lines

    def ints(values) -> str:
        return "".join(f" {v}" for v in values)

    def points(pts) -> str:
        return "".join(f" {x} {y}" for x, y in pts)

    lines += [
        "\tp" + ints((
            p.ar_coeff_lag, p.ar_coeff_shift, p.grain_scale_shift, p.scaling_shift,
            p.chroma_scaling_from_luma, p.overlap_flag,
            p.cb_mult, p.cb_luma_mult, p.cb_offset,
            p.cr_mult, p.cr_luma_mult, p.cr_offset,
        )),
        # the luma line carries an extra space after the count
        f"\tsY {len(p.scaling_points_y)} " + points(p.scaling_points_y),
        f"\tsCb {len(p.scaling_points_cb)}" + points(p.scaling_points_cb),
        f"\tsCr {len(p.scaling_points_cr)}" + points(p.scaling_points_cr),
        "\tcY" + ints(p.ar_coeffs_y),
        "\tcCb" + ints(p.ar_coeffs_cb),
        "\tcCr" + ints(p.ar_coeffs_cr),
    ]
    return lines


def build_photon_noise_table(curve: ScalingCurve) -> FilmGrainTable:
    """Single whole-stream entry carrying `curve` as the luma scaling function."""
    table = FilmGrainTable()
    table.append(STREAM_START, STREAM_END, FilmGrainParams.from_scaling_curve(curve))
    return table
