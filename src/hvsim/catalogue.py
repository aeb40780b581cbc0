"""
Loading of star catalogues and galaxy trajectory files.

File formats
------------
Trajectory files (one per moving body)
    Whitespace-separated rows ``time x y z vx vy vz``, time in Gyr (or Myr),
    positions in kpc, velocities in km/s. Rows may be unsorted; extra
    trailing fields are ignored.

Kinematics CSV (``6d_cartesian_data.csv``)
    Header row, then one star per row with at least 14 columns:
    HVS number, source id, and x, y, z, vx, vy, vz each followed by its
    uncertainty (columns 2, 4, 6, 8, 10, 12 hold the values).

Covariance CSV (``6d_cartesian_covariance.csv``)
    Header row, then at least 23 columns: an index column, source id, and
    the 21 upper-triangle covariance entries in
    :data:`hvsim.linalg.COVARIANCE_FIELDS` order.

CSV fields may be quoted. Bytes that are not valid UTF-8 are replaced on
read, so a corrupted line fails to parse instead of aborting the load.
Malformed rows are skipped with a :class:`~hvsim.utils.MalformedRecordWarning`;
missing files give a :class:`~hvsim.utils.DataUnavailableWarning` and an
empty result.
"""

import numpy as np
import pandas as pd
import warnings
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union
from .constants import GYR_TO_MYR
from .interpolator import TrajectoryInterpolator
from .linalg import covariance_from_flat, COVARIANCE_FIELDS
from .state import StarRecord
from .utils import DataUnavailableWarning, MalformedRecordWarning

PathLike = Union[str, Path]

TRAJECTORY_COLUMNS = ('time', 'x', 'y', 'z', 'vx', 'vy', 'vz')
_TIME_UNITS = {'Gyr': GYR_TO_MYR, 'Myr': 1.0}

KINEMATICS_MIN_COLUMNS = 14
KINEMATICS_VALUE_COLUMNS = [2, 4, 6, 8, 10, 12]
COVARIANCE_MIN_COLUMNS = 2 + len(COVARIANCE_FIELDS)


class StarNotFoundError(KeyError):
    """Requested star is not present in the catalogue."""


# ========== TABLE READING ==========
def _read_fields(path: Path, n_cols: int, sep: str = ',',
                 skip_header: bool = False) -> pd.DataFrame:
    """
    Read the first ``n_cols`` fields of every line as stripped strings.

    Short lines are padded with NaN, extra fields are dropped and bytes that
    are not valid UTF-8 are replaced with U+FFFD. The index is the 1-based
    line number in the file. Blank lines are removed.
    """
    first_line = 2 if skip_header else 1
    columns = list(range(n_cols))
    try:
        table = pd.read_csv(
            path, sep=sep, header=None, names=columns, index_col=False,
            skiprows=first_line - 1, dtype=str, engine='python',
            skip_blank_lines=False, encoding_errors='replace',
            on_bad_lines=lambda fields: fields[:n_cols]
        )
    except pd.errors.EmptyDataError:
        table = pd.DataFrame(columns=columns, dtype=object)

    table.index = table.index + first_line
    for col in columns:
        table[col] = table[col].map(str.strip, na_action='ignore')
    table = table.where(table != '')
    return table[table.notna().any(axis=1)]


def _parse_integers(column: pd.Series) -> pd.Series:
    """Exact integer parse of string fields; anything else becomes NaN."""
    # Gaia source ids overflow float64 precision
    valid = column.str.fullmatch(r'[+-]?\d+', na=False)
    return column.where(valid).map(int, na_action='ignore')


def _parse_floats(table: pd.DataFrame) -> np.ndarray:
    return table.apply(pd.to_numeric, errors='coerce').to_numpy(dtype=float)


def _warn_malformed(table: pd.DataFrame, bad: np.ndarray, path: Path,
                    kind: str, sep: str = ','):
    for line_no, row in table[bad].iterrows():
        warnings.warn(
            f"Could not parse {kind} line {line_no} in {path.name}: "
            f"'{sep.join(row.dropna())}'",
            MalformedRecordWarning,
            stacklevel=3
        )


# ========== TRAJECTORY FILES ==========
def read_trajectory_file(path: PathLike, time_unit: str = 'Gyr',
                         name: Optional[str] = None) -> TrajectoryInterpolator:
    """
    Load one body's trajectory file into an interpolator.

    Parameters
    ----------
    path : str or Path
        Whitespace-separated trajectory file
    time_unit : {'Gyr', 'Myr'}, optional
        Unit of the time column (default: 'Gyr')
    name : str, optional
        Interpolator label (default: file stem)

    Returns
    -------
    TrajectoryInterpolator
        Sorted interpolator in canonical units; empty if the file is
        missing or holds no valid rows
    """
    if time_unit not in _TIME_UNITS:
        raise ValueError(
            f"Unknown time unit '{time_unit}'. Use: {list(_TIME_UNITS.keys())}"
        )
    path = Path(path)
    if name is None:
        name = path.stem

    if not path.exists():
        warnings.warn(
            f"Trajectory file not found: {path}",
            DataUnavailableWarning,
            stacklevel=2
        )
        return TrajectoryInterpolator(name=name)

    n_cols = len(TRAJECTORY_COLUMNS)
    table = _read_fields(path, n_cols, sep=r'\s+')
    if table.empty:
        rows = np.empty((0, n_cols))
    else:
        numeric = _parse_floats(table)
        finite = np.isfinite(numeric).all(axis=1)
        _warn_malformed(table, ~finite, path, 'trajectory', sep=' ')
        rows = numeric[finite]

    if rows.size == 0:
        warnings.warn(
            f"No valid trajectory rows in {path}",
            DataUnavailableWarning,
            stacklevel=2
        )
    return TrajectoryInterpolator.from_rows(
        rows, time_factor=_TIME_UNITS[time_unit], name=name
    )


def trajectory_pair_paths(root: PathLike, trajectory_id: int) -> Tuple[Path, Path]:
    """
    Locate the MW and LMC trajectory files for a trajectory id.

    Files are looked up in ``<root>/trajectory <id>/`` and recognised by
    their stem ending in ``_mw`` or ``_lmc``.

    Raises
    ------
    FileNotFoundError
        If the folder or either file is missing
    """
    folder = Path(root) / f"trajectory {trajectory_id}"
    if not folder.is_dir():
        raise FileNotFoundError(f"Trajectory folder not found: {folder}")

    files = sorted(p for p in folder.iterdir() if p.is_file())
    mw = next((p for p in files if p.stem.endswith('_mw')), None)
    lmc = next((p for p in files if p.stem.endswith('_lmc')), None)
    if mw is None or lmc is None:
        raise FileNotFoundError(
            f"Could not find '*_mw' and '*_lmc' trajectory files in {folder}"
        )
    return mw, lmc




# ========== STAR CATALOGUE ==========
def _read_catalogue_table(path: Path, n_cols: int) -> Optional[pd.DataFrame]:
    """Fields of a headed CSV, or warn and return None if the file is missing."""
    if not path.exists():
        warnings.warn(
            f"Catalogue file not found: {path}",
            DataUnavailableWarning,
            stacklevel=3
        )
        return None
    return _read_fields(path, n_cols, skip_header=True)


def read_kinematics(path: PathLike) -> Dict[int, Tuple[int, str, np.ndarray, np.ndarray]]:
    """
    Read mean positions and velocities keyed by source id.

    Returns
    -------
    dict
        source_id -> (hvs_id, name, position [kpc], velocity [km/s])
    """
    path = Path(path)
    table = _read_catalogue_table(path, KINEMATICS_MIN_COLUMNS)
    if table is None or table.empty:
        return {}

    hvs_ids = _parse_integers(table[0])
    source_ids = _parse_integers(table[1])
    values = _parse_floats(table[KINEMATICS_VALUE_COLUMNS])
    good = (table.notna().all(axis=1).to_numpy()
            & hvs_ids.notna().to_numpy()
            & source_ids.notna().to_numpy()
            & np.isfinite(values).all(axis=1))
    _warn_malformed(table, ~good, path, 'kinematics')

    data = {}
    for hvs_id, source_id, row in zip(hvs_ids[good], source_ids[good], values[good]):
        data[source_id] = (hvs_id, f"HVS {hvs_id}", row[:3], row[3:])
    return data


def read_covariance(path: PathLike) -> Dict[int, np.ndarray]:
    """
    Read covariance matrices keyed by source id.

    Returns
    -------
    dict
        source_id -> symmetric 6x6 covariance
    """
    path = Path(path)
    table = _read_catalogue_table(path, COVARIANCE_MIN_COLUMNS)
    if table is None or table.empty:
        return {}

    source_ids = _parse_integers(table[1])
    flat = _parse_floats(table[list(range(2, COVARIANCE_MIN_COLUMNS))])
    good = source_ids.notna().to_numpy() & np.isfinite(flat).all(axis=1)
    _warn_malformed(table, ~good, path, 'covariance')

    return {source_id: covariance_from_flat(row)
            for source_id, row in zip(source_ids[good], flat[good])}


class Catalogue(Mapping):
    """
    In-memory catalogue of hypervelocity stars, keyed by HVS number.

    Behaves as a read-only mapping ``hvs_id -> StarRecord``.

    Examples
    --------
    >>> catalogue = load_catalogue("6d_cartesian_data.csv",
    ...                            "6d_cartesian_covariance.csv")
    >>> star = catalogue.find(1)
    >>> star.name
    'HVS 1'
    """
    def __init__(self, stars=()):
        self._stars: Dict[int, StarRecord] = {}
        for star in stars:
            self._stars[star.id] = star

    def find(self, hvs_id: int) -> StarRecord:
        """
        Look up a star by HVS number.

        Raises
        ------
        StarNotFoundError
            If no star with that number was loaded
        """
        try:
            return self._stars[hvs_id]
        except KeyError:
            raise StarNotFoundError(f"HVS with ID '{hvs_id}' not found.") from None

    def by_source_id(self, source_id: int) -> StarRecord:
        """Look up a star by its external catalogue identifier."""
        for star in self._stars.values():
            if star.source_id == source_id:
                return star
        raise StarNotFoundError(f"No star with source_id {source_id}.")

    @property
    def ids(self) -> Tuple[int, ...]:
        return tuple(self._stars.keys())

    def to_dataframe(self) -> pd.DataFrame:
        """
        Summary table of mean states.

        Returns:
            DataFrame indexed by HVS number with name, source_id, mean
            position [kpc] and mean velocity [km/s]
        """
        records = []
        for star in self._stars.values():
            x, y, z = star.mean_position
            vx, vy, vz = star.mean_velocity
            records.append({
                'id': star.id, 'name': star.name, 'source_id': star.source_id,
                'x': x, 'y': y, 'z': z, 'vx': vx, 'vy': vy, 'vz': vz,
            })
        columns = ['id', 'name', 'source_id', 'x', 'y', 'z', 'vx', 'vy', 'vz']
        return pd.DataFrame.from_records(records, columns=columns).set_index('id')

    def __getitem__(self, hvs_id: int) -> StarRecord:
        return self.find(hvs_id)

    def __iter__(self) -> Iterator[int]:
        return iter(self._stars)

    def __len__(self) -> int:
        return len(self._stars)

    def __repr__(self):
        return f"Catalogue(n_stars={len(self)})"


def load_catalogue(kinematics_path: PathLike, covariance_path: PathLike) -> Catalogue:
    """
    Load and join the kinematics and covariance files.

    Stars are matched on source id. A star without a covariance row is
    skipped with a warning.

    Returns
    -------
    Catalogue
        Stars with both a mean state and a covariance
    """
    kinematics = read_kinematics(kinematics_path)
    covariances = read_covariance(covariance_path)

    stars = []
    for source_id, (hvs_id, name, position, velocity) in kinematics.items():
        if source_id not in covariances:
            warnings.warn(
                f"Could not find matching covariance data for star with "
                f"source_id: {source_id}",
                DataUnavailableWarning,
                stacklevel=2
            )
            continue
        stars.append(StarRecord(
            id=hvs_id,
            name=name,
            source_id=source_id,
            mean_position=position,
            mean_velocity=velocity,
            covariance=covariances[source_id],
        ))
    return Catalogue(stars)
