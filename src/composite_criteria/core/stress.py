"""
Stress Tensor Histories.

A :class:`StressField` holds the six stress tensor components of every
analyzed location over its loading history, in material (ply principal)
coordinates:

- s11: Normal stress in the fiber direction
- s22: Normal stress transverse to the fibers
- s33: Through-thickness normal stress
- s12: In-plane shear stress
- s13, s23: Out-of-plane (transverse) shear stresses

Each component is stored as an array of shape ``(n_locations, n_samples)``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
import polars as pl

logger = logging.getLogger(__name__)

COMPONENTS = ("s11", "s22", "s33", "s12", "s13", "s23")

# Column names of the long-format stress CSV, in COMPONENTS order
CSV_COLUMNS = ("S11", "S22", "S33", "S12", "S13", "S23")


class LocationStress(NamedTuple):
    """Stress history of a single location (one 1-D array per component)."""

    s11: np.ndarray
    s22: np.ndarray
    s33: np.ndarray
    s12: np.ndarray
    s13: np.ndarray
    s23: np.ndarray

    @property
    def has_out_of_plane(self) -> bool:
        """True if s33, s13 or s23 is non-zero at any sample."""
        return bool(np.any(self.s33) or np.any(self.s13) or np.any(self.s23))


@dataclass(frozen=True)
class StressField:
    """
    Stress tensor histories for all analyzed locations.

    Parameters
    ----------
    s11, s22, s33, s12, s13, s23 : np.ndarray
        Stress components, each of shape ``(n_locations, n_samples)``.
        One-dimensional input is read as a single sample per location.

    Raises
    ------
    ValueError
        If the six components do not share the same shape.
    """

    s11: np.ndarray
    s22: np.ndarray
    s33: np.ndarray
    s12: np.ndarray
    s13: np.ndarray
    s23: np.ndarray

    def __post_init__(self):
        shape = None
        for name in COMPONENTS:
            values = np.array(getattr(self, name), dtype=float)
            if values.ndim == 1:
                values = values[:, np.newaxis]
            if values.ndim != 2:
                raise ValueError(f"Stress component {name} must be 2-D, got shape {values.shape}")
            if shape is None:
                shape = values.shape
            elif values.shape != shape:
                raise ValueError(
                    f"Stress component {name} has shape {values.shape}, expected {shape}"
                )
            values.setflags(write=False)
            object.__setattr__(self, name, values)

    @classmethod
    def from_flat(
        cls, n_locations: int, n_samples: int, **components: Sequence[float]
    ) -> "StressField":
        """Build a field from flat, location-major component sequences.

        Parameters
        ----------
        n_locations : int
            Number of analyzed locations.
        n_samples : int
            Loading history length L of every location.
        **components
            ``s11=..., s22=..., ...`` each of length ``n_locations * n_samples``.
            Absent components are taken as zero.
        """
        unknown = set(components) - set(COMPONENTS)
        if unknown:
            raise ValueError(f"Unknown stress components: {sorted(unknown)}")

        arrays = {}
        for name in COMPONENTS:
            values = components.get(name)
            if values is None:
                arrays[name] = np.zeros((n_locations, n_samples))
                continue
            values = np.asarray(values, dtype=float)
            if values.size != n_locations * n_samples:
                raise ValueError(
                    f"Stress component {name} has {values.size} values, "
                    f"expected {n_locations} x {n_samples}"
                )
            arrays[name] = values.reshape(n_locations, n_samples)
        return cls(**arrays)

    @property
    def n_locations(self) -> int:
        """Number of analyzed locations."""
        return self.s11.shape[0]

    @property
    def n_samples(self) -> int:
        """Loading history length L."""
        return self.s11.shape[1]

    def location(self, index: int) -> LocationStress:
        """Stress history of location ``index`` (0-based)."""
        return LocationStress(*(getattr(self, name)[index] for name in COMPONENTS))


def load_stress_csv(
    path: Union[str, Path], separator: str = ","
) -> Tuple[StressField, np.ndarray, np.ndarray]:
    """
    Load a stress field from a long-format CSV file.

    The file holds one row per (location, sample) with the columns
    ``location, sample, S11, S22, S33, S12, S13, S23``. Missing stress
    columns are taken as zero. Optional ``main_id`` and ``sub_id`` columns
    give the identifiers written to the report; they default to the
    1-based location number and 1.

    Parameters
    ----------
    path : str or Path
        Path to the CSV file.
    separator : str
        Column separator.

    Returns
    -------
    field : StressField
        The stress histories, locations in ascending ``location`` order.
    main_ids, sub_ids : np.ndarray
        Report identifiers, one per location.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If locations do not all have the same number of samples.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stress file not found: {path}")

    df = pl.read_csv(path, separator=separator, has_header=True)
    for column in ("location", "sample"):
        if column not in df.columns:
            raise ValueError(f"Stress file {path} has no '{column}' column")

    df = df.sort(["location", "sample"])
    counts = df.group_by("location").agg(pl.len().alias("n"))["n"].unique()
    if counts.len() != 1:
        raise ValueError(f"Locations in {path} have different loading history lengths")

    n_samples = int(counts[0])
    n_locations = df.height // n_samples

    components = {}
    for name, column in zip(COMPONENTS, CSV_COLUMNS):
        if column in df.columns:
            components[name] = df[column].cast(pl.Float64).to_numpy()
    field = StressField.from_flat(n_locations, n_samples, **components)

    firsts = df.group_by("location", maintain_order=True).first()
    main_ids = _id_column(firsts, "main_id", np.arange(1, n_locations + 1))
    sub_ids = _id_column(firsts, "sub_id", np.ones(n_locations))

    logger.info(f"Stress field loaded from {path}: {n_locations} locations x {n_samples} samples")
    return field, main_ids, sub_ids


def _id_column(df: "pl.DataFrame", column: str, default: np.ndarray) -> np.ndarray:
    if column not in df.columns:
        return default
    return df[column].cast(pl.Float64).to_numpy()


def default_ids(
    n_locations: int, main_ids: Optional[Sequence] = None, sub_ids: Optional[Sequence] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(main_ids, sub_ids)`` arrays, filling in 1..N and 1 when absent."""
    main = np.arange(1, n_locations + 1) if main_ids is None else np.asarray(main_ids)
    sub = np.ones(n_locations) if sub_ids is None else np.asarray(sub_ids)
    if main.shape != (n_locations,) or sub.shape != (n_locations,):
        raise ValueError(f"Location identifiers must have {n_locations} entries")
    return main, sub
