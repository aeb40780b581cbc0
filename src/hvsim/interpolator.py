'''Time-series interpolation of a moving body's centre
TrajectoryInterpolator class definition'''

import numpy as np
import pandas as pd
from typing import Iterable, List, Optional, Union
from .constants import GYR_TO_MYR, KM_S_TO_KPC_MYR
from .state import TimeSample


class TrajectoryInterpolator:
    """
    Discretized history of one moving body with linear interpolation.

    Raw samples are converted to canonical units (Myr, kpc, kpc/Myr) and
    sorted ascending by time on construction. Queries outside the sampled
    time range are clamped to the first or last sample. An interpolator
    with no samples is valid and answers every query with the zero vector.

    Parameters
    ----------
    times : array_like, shape (M,)
        Sample times, in units of ``1 / time_factor`` Myr
    positions : array_like, shape (M, 3)
        Sample positions [kpc]
    velocities : array_like, shape (M, 3)
        Sample velocities, in units of ``1 / velocity_factor`` kpc/Myr
    time_factor : float, optional
        Multiplier taking input times to Myr (default: Gyr -> Myr)
    velocity_factor : float, optional
        Multiplier taking input velocities to kpc/Myr (default: km/s -> kpc/Myr)
    name : str, optional
        Label used in repr, e.g. "MW" or "LMC"

    Examples
    --------
    >>> mw = TrajectoryInterpolator([0.0, -0.01], [[0, 0, 0], [1, 0, 0]],
    ...                             [[0, 0, 0], [0, 0, 0]], name="MW")
    >>> mw.position(-5.0)  # halfway between the two samples (in Myr)
    array([0.5, 0. , 0. ])
    """
    # ========== CONSTRUCTION ==========
    def __init__(
        self,
        times=(),
        positions=(),
        velocities=(),
        time_factor: float = GYR_TO_MYR,
        velocity_factor: float = KM_S_TO_KPC_MYR,
        name: Optional[str] = None
    ):
        times = np.asarray(times, dtype=float).reshape(-1)
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        velocities = np.asarray(velocities, dtype=float).reshape(-1, 3)

        if not (len(times) == len(positions) == len(velocities)):
            raise ValueError(
                f"times, positions and velocities must have the same length, "
                f"got {len(times)}, {len(positions)}, {len(velocities)}"
            )

        # stable sort: source order is not guaranteed
        order = np.argsort(times, kind='stable')
        self._times = times[order] * time_factor
        self._positions = positions[order]
        self._velocities = velocities[order] * velocity_factor
        self._name = name

        for arr in (self._times, self._positions, self._velocities):
            arr.flags.writeable = False

    @classmethod
    def from_rows(cls, rows, time_factor: float = GYR_TO_MYR,
                  velocity_factor: float = KM_S_TO_KPC_MYR,
                  name: Optional[str] = None) -> "TrajectoryInterpolator":
        """
        Build from raw 7-column rows [t, x, y, z, vx, vy, vz].

        Columns beyond the seventh are ignored.
        """
        rows = np.asarray(rows, dtype=float)
        if rows.size == 0:
            return cls(time_factor=time_factor, velocity_factor=velocity_factor,
                       name=name)
        rows = np.atleast_2d(rows)
        if rows.shape[1] < 7:
            raise ValueError(f"Rows need at least 7 columns, got {rows.shape[1]}")
        return cls(rows[:, 0], rows[:, 1:4], rows[:, 4:7],
                   time_factor=time_factor, velocity_factor=velocity_factor,
                   name=name)

    @classmethod
    def from_samples(cls, samples: Iterable[TimeSample],
                     name: Optional[str] = None) -> "TrajectoryInterpolator":
        """Build from TimeSample objects already in canonical units."""
        samples = list(samples)
        return cls([s.time for s in samples],
                   [s.position for s in samples],
                   [s.velocity for s in samples],
                   time_factor=1.0, velocity_factor=1.0, name=name)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, time_factor: float = 1.0,
                       velocity_factor: float = 1.0,
                       name: Optional[str] = None) -> "TrajectoryInterpolator":
        """
        Build from a DataFrame with columns time, x, y, z, vx, vy, vz.

        Unlike the main constructor the factors default to 1, so the
        output of :meth:`to_dataframe` round-trips unchanged.
        """
        return cls(df['time'].to_numpy(),
                   df[['x', 'y', 'z']].to_numpy(),
                   df[['vx', 'vy', 'vz']].to_numpy(),
                   time_factor=time_factor, velocity_factor=velocity_factor,
                   name=name)

    # ========== PROPERTY ACCESS ==========
    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def times(self) -> np.ndarray:
        """Sorted sample times [Myr] (read-only)."""
        return self._times

    @property
    def positions(self) -> np.ndarray:
        """Sample positions [kpc] in time order (read-only)."""
        return self._positions

    @property
    def velocities(self) -> np.ndarray:
        """Sample velocities [kpc/Myr] in time order (read-only)."""
        return self._velocities

    @property
    def is_empty(self) -> bool:
        return self._times.size == 0

    @property
    def t0(self) -> float:
        """Earliest sample time [Myr]."""
        if self.is_empty:
            raise ValueError("Empty interpolator has no time range")
        return float(self._times[0])

    @property
    def tf(self) -> float:
        """Latest sample time [Myr]."""
        if self.is_empty:
            raise ValueError("Empty interpolator has no time range")
        return float(self._times[-1])

    @property
    def duration(self) -> float:
        """Time span covered by the samples [Myr]."""
        return self.tf - self.t0

    @property
    def samples(self) -> List[TimeSample]:
        """All samples in time order."""
        return [TimeSample(t, p, v) for t, p, v
                in zip(self._times, self._positions, self._velocities)]

    # ========== QUERIES ==========
    def position(self, t: float) -> np.ndarray:
        """Interpolated position [kpc] at time t [Myr]."""
        return self._interpolate(t, self._positions)

    def velocity(self, t: float) -> np.ndarray:
        """Interpolated velocity [kpc/Myr] at time t [Myr]."""
        return self._interpolate(t, self._velocities)

    def state_at(self, t: float) -> TimeSample:
        """Interpolated position and velocity at time t as a TimeSample."""
        return TimeSample(t, self.position(t), self.velocity(t))

    def _interpolate(self, t: float, values: np.ndarray) -> np.ndarray:
        """Clamped linear interpolation of one value column at a single time."""
        if self._times.size == 0:
            return np.zeros(3)
        if t <= self._times[0]:
            return values[0].copy()
        if t >= self._times[-1]:
            return values[-1].copy()

        # bracketing pair with times[i] <= t < times[i + 1]
        i = int(np.searchsorted(self._times, t, side='right')) - 1
        t1 = self._times[i]
        t2 = self._times[i + 1]
        t_frac = (t - t1) / (t2 - t1)
        return values[i] + (values[i + 1] - values[i]) * t_frac

    def evaluate(self, times: Union[float, np.ndarray, list]) -> np.ndarray:
        """
        Evaluate positions and velocities at one or more times.

        Parameters
        ----------
        times : float or array_like
            Query times [Myr]

        Returns
        -------
        np.ndarray
            Array of shape (6,) if times is scalar, (n_times, 6) otherwise,
            with columns [x, y, z, vx, vy, vz]
        """
        if np.isscalar(times):
            return np.concatenate([self.position(times), self.velocity(times)])

        times = np.asarray(times, dtype=float).reshape(-1)
        n = self._times.size
        if n == 0:
            return np.zeros((times.size, 6))
        values = np.hstack([self._positions, self._velocities])
        if n == 1:
            return np.repeat(values, times.size, axis=0)

        idx = np.clip(np.searchsorted(self._times, times, side='right') - 1, 0, n - 2)
        t1 = self._times[idx]
        t2 = self._times[idx + 1]
        with np.errstate(divide='ignore', invalid='ignore'):
            t_frac = np.where(t2 > t1, (times - t1) / (t2 - t1), 0.0)
        result = values[idx] + (values[idx + 1] - values[idx]) * t_frac[:, None]

        # clamp outside the sampled range
        result[times <= self._times[0]] = values[0]
        result[times >= self._times[-1]] = values[-1]
        return result

    def contains_time(self, t: float) -> bool:
        """Check if time lies within the sampled range (no clamping needed)."""
        if self.is_empty:
            return False
        return self.t0 <= t <= self.tf

    def to_dataframe(self) -> pd.DataFrame:
        """
        Export samples to a pandas DataFrame in canonical units.

        Returns
        -------
        pd.DataFrame
            Columns time [Myr], x, y, z [kpc], vx, vy, vz [kpc/Myr]
        """
        data = {
            'time': self._times,
            'x': self._positions[:, 0],
            'y': self._positions[:, 1],
            'z': self._positions[:, 2],
            'vx': self._velocities[:, 0],
            'vy': self._velocities[:, 1],
            'vz': self._velocities[:, 2],
        }
        return pd.DataFrame(data)

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return int(self._times.size)

    def __repr__(self):
        label = f"'{self._name}'" if self._name else "unnamed"
        if self.is_empty:
            return f"TrajectoryInterpolator({label}, empty)"
        return (f"TrajectoryInterpolator({label}, n_samples={len(self)}, "
                f"t0={self.t0}, tf={self.tf})")

    def __call__(self, t: float) -> np.ndarray:
        """
        Position at time t.
        Syntactic sugar for .position(t). Allows interp(t) syntax.
        """
        return self.position(t)
