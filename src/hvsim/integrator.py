'''Kick-drift-kick leapfrog integration of a sample ensemble
LeapfrogIntegrator class definition'''

import numpy as np
import threading
from typing import Iterable, List, Optional, Tuple
from .config import config
from .history import EnsembleHistory
from .state import PhaseSpacePoint


class LeapfrogIntegrator:
    """
    Fixed-step leapfrog integrator for non-interacting test particles.

    Every step applies, to all samples at once and with the same
    simulation time t:

        a0     = field.acceleration(pos, t)
        v_half = vel + a0 * h/2
        pos    = pos + v_half * h
        a1     = field.acceleration(pos, t + h)
        vel    = v_half + a1 * h/2

    and only then advances t by h. A negative timestep integrates backward
    in time.

    Parameters
    ----------
    field : object
        Anything with an ``acceleration(positions, t)`` method accepting an
        (N, 3) array, e.g. :class:`~hvsim.potentials.GalaxyPotential`
    positions : array_like, shape (N, 3)
        Initial sample positions [kpc]
    velocities : array_like, shape (N, 3)
        Initial sample velocities [kpc/Myr]
    timestep : float
        Signed, non-zero timestep h [Myr]
    t_start : float, optional
        Initial simulation time [Myr] (default: 0, i.e. "now")

    Notes
    -----
    - The ensemble buffers are owned by the integrator and overwritten in
      place each step; accessors return copies
    - step() holds a lock, so concurrent callers are serialised and never
      observe a half-updated ensemble
    """

    # ========== CONSTRUCTION ==========
    def __init__(self, field, positions, velocities, timestep: float,
                 t_start: float = 0.0):
        if not callable(getattr(field, "acceleration", None)):
            raise TypeError(
                f"field must provide an acceleration(pos, t) method, "
                f"got {type(field).__name__}"
            )
        positions = np.array(positions, dtype=float)
        velocities = np.array(velocities, dtype=float)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"Positions must have shape (N, 3), got {positions.shape}")
        if velocities.shape != positions.shape:
            raise ValueError(
                f"Velocities shape {velocities.shape} does not match "
                f"positions shape {positions.shape}"
            )
        if not (np.all(np.isfinite(positions)) and np.all(np.isfinite(velocities))):
            raise ValueError("Initial ensemble contains NaN or Inf values")

        self._field = field
        self._positions = positions
        self._velocities = velocities
        self._timestep = self._check_timestep(timestep)
        self._time = float(t_start)
        self._step_count = 0
        self._lock = threading.Lock()

    @classmethod
    def from_samples(cls, field, samples: Iterable[PhaseSpacePoint],
                     timestep: float, t_start: float = 0.0) -> "LeapfrogIntegrator":
        """Build from a sequence of PhaseSpacePoint."""
        samples = list(samples)
        if not samples:
            raise ValueError("At least one sample is required")
        positions = np.array([s.position for s in samples])
        velocities = np.array([s.velocity for s in samples])
        return cls(field, positions, velocities, timestep, t_start)

    @staticmethod
    def _check_timestep(timestep) -> float:
        timestep = float(timestep)
        if timestep == 0 or not np.isfinite(timestep):
            raise ValueError(f"Timestep must be finite and non-zero, got {timestep}")
        return timestep

    # ========== PROPAGATION ==========
    def step(self) -> float:
        """
        Advance every sample by one timestep.

        Returns
        -------
        float
            The new simulation time [Myr]
        """
        with self._lock:
            h = self._timestep
            t = self._time
            half = 0.5 * h

            a0 = self._field.acceleration(self._positions, t)
            v_half = self._velocities + a0 * half
            pos_new = self._positions + v_half * h
            a1 = self._field.acceleration(pos_new, t + h)
            v_new = v_half + a1 * half

            self._positions[...] = pos_new
            self._velocities[...] = v_new
            # barrier: time advances once, after the whole ensemble is written
            self._time = t + h
            self._step_count += 1
            return self._time

    def run(self, n_steps: int, record_every: Optional[int] = None,
            history: Optional[EnsembleHistory] = None) -> EnsembleHistory:
        """
        Take n_steps steps, recording snapshots along the way.

        Parameters
        ----------
        n_steps : int
            Number of steps to take (non-negative)
        record_every : int, optional
            Record a snapshot every this many steps
            (default: config.DEFAULT_RECORD_EVERY). The state before the
            first step and after the last step are always recorded.
        history : EnsembleHistory, optional
            Existing history to extend; its last snapshot is assumed to be
            the current state

        Returns
        -------
        EnsembleHistory
            Recorded snapshots
        """
        if record_every is None:
            record_every = config.DEFAULT_RECORD_EVERY
        if n_steps < 0:
            raise ValueError(f"n_steps must be non-negative, got {n_steps}")
        if record_every < 1:
            raise ValueError(f"record_every must be at least 1, got {record_every}")

        if history is None:
            history = EnsembleHistory()
            history.append(*self.snapshot())

        for k in range(1, n_steps + 1):
            self.step()
            if k % record_every == 0 or k == n_steps:
                history.append(*self.snapshot())
        return history

    def snapshot(self) -> Tuple[float, np.ndarray, np.ndarray]:
        """Consistent copy of (time, positions, velocities)."""
        with self._lock:
            return self._time, self._positions.copy(), self._velocities.copy()

    # ========== PROPERTY ACCESS ==========
    @property
    def field(self):
        """Acceleration field driving the ensemble."""
        return self._field

    @property
    def time(self) -> float:
        """Current simulation time [Myr]."""
        return self._time

    @property
    def timestep(self) -> float:
        """Signed timestep [Myr]."""
        return self._timestep

    @timestep.setter
    def timestep(self, value: float):
        value = self._check_timestep(value)
        with self._lock:
            self._timestep = value

    @property
    def step_count(self) -> int:
        """Number of steps taken so far."""
        return self._step_count

    @property
    def n_samples(self) -> int:
        return self._positions.shape[0]

    @property
    def positions(self) -> np.ndarray:
        """Copy of the current sample positions [kpc], shape (N, 3)."""
        with self._lock:
            return self._positions.copy()

    @property
    def velocities(self) -> np.ndarray:
        """Copy of the current sample velocities [kpc/Myr], shape (N, 3)."""
        with self._lock:
            return self._velocities.copy()

    @property
    def samples(self) -> List[PhaseSpacePoint]:
        """Current ensemble as PhaseSpacePoint objects."""
        _, positions, velocities = self.snapshot()
        return [PhaseSpacePoint(p, v) for p, v in zip(positions, velocities)]

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return self.n_samples

    def __repr__(self):
        return (f"LeapfrogIntegrator(n_samples={self.n_samples}, "
                f"timestep={self._timestep}, time={self._time}, "
                f"steps={self._step_count})")
