'''Phase-space and catalogue record types
PhaseSpacePoint, TimeSample and StarRecord definitions'''

import numpy as np
from dataclasses import dataclass
from typing import Optional
from .config import config
from .constants import PHASE_SPACE_DIM
from .linalg import is_symmetric
from .utils import validation_error


def _frozen_vector(values, name: str, size: int = 3) -> np.ndarray:
    """Copy values into a read-only float array of the given length."""
    arr = np.array(values, dtype=float)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have shape ({size},), got {arr.shape}")
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class PhaseSpacePoint:
    """
    Position and velocity of one Monte Carlo sample.

    Attributes
    ----------
    position : np.ndarray
        Position [kpc], read-only
    velocity : np.ndarray
        Velocity [kpc/Myr], read-only
    """
    position: np.ndarray
    velocity: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'position', _frozen_vector(self.position, 'position'))
        object.__setattr__(self, 'velocity', _frozen_vector(self.velocity, 'velocity'))

    @classmethod
    def from_array(cls, state) -> "PhaseSpacePoint":
        """Build from a 6-element [x, y, z, vx, vy, vz] array."""
        state = np.asarray(state, dtype=float)
        if state.shape != (PHASE_SPACE_DIM,):
            raise ValueError(f"State must have shape (6,), got {state.shape}")
        return cls(state[:3], state[3:])

    @property
    def state(self) -> np.ndarray:
        """Concatenated [x, y, z, vx, vy, vz] array."""
        return np.concatenate([self.position, self.velocity])

    def __eq__(self, other) -> bool:
        if not isinstance(other, PhaseSpacePoint):
            return NotImplemented
        return np.allclose(self.state, other.state,
                           rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL)

    def __repr__(self):
        return (f"PhaseSpacePoint(position={self.position.tolist()}, "
                f"velocity={self.velocity.tolist()})")


@dataclass(frozen=True, eq=False)
class TimeSample:
    """
    One sample of a moving body's history in canonical units.

    Attributes
    ----------
    time : float
        Time [Myr]
    position : np.ndarray
        Position [kpc], read-only
    velocity : np.ndarray
        Velocity [kpc/Myr], read-only
    """
    time: float
    position: np.ndarray
    velocity: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'time', float(self.time))
        object.__setattr__(self, 'position', _frozen_vector(self.position, 'position'))
        object.__setattr__(self, 'velocity', _frozen_vector(self.velocity, 'velocity'))

    def __repr__(self):
        return (f"TimeSample(time={self.time}, position={self.position.tolist()}, "
                f"velocity={self.velocity.tolist()})")


@dataclass(frozen=True, eq=False)
class StarRecord:
    """
    Mean phase-space state and uncertainty of a catalogued star.

    Attributes
    ----------
    id : int
        Catalogue number of the star
    name : str
        Display name, e.g. "HVS 1"
    source_id : int
        External (survey) catalogue identifier
    mean_position : np.ndarray
        Mean position [kpc], read-only
    mean_velocity : np.ndarray
        Mean velocity [km/s], read-only
    covariance : np.ndarray
        Symmetric 6x6 covariance of (x, y, z, vx, vy, vz) in
        kpc^2, kpc km/s and (km/s)^2 blocks, read-only

    Notes
    -----
    Velocities here stay in the catalogue's km/s; conversion to kpc/Myr
    happens when initial conditions are sampled.
    """
    id: int
    name: str
    source_id: int
    mean_position: np.ndarray
    mean_velocity: np.ndarray
    covariance: Optional[np.ndarray] = None

    def __post_init__(self):
        object.__setattr__(self, 'mean_position',
                           _frozen_vector(self.mean_position, 'mean_position'))
        object.__setattr__(self, 'mean_velocity',
                           _frozen_vector(self.mean_velocity, 'mean_velocity'))

        if self.covariance is None:
            cov = np.zeros((PHASE_SPACE_DIM, PHASE_SPACE_DIM))
        else:
            cov = np.array(self.covariance, dtype=float)
        if cov.shape != (PHASE_SPACE_DIM, PHASE_SPACE_DIM):
            raise ValueError(f"Covariance must be 6x6, got shape {cov.shape}")
        if not np.all(np.isfinite(cov)):
            raise ValueError(f"Covariance of {self.name} contains NaN or Inf")
        if not is_symmetric(cov):
            validation_error(f"Covariance of {self.name} is not symmetric")
        cov.flags.writeable = False
        object.__setattr__(self, 'covariance', cov)

    @property
    def mean_state(self) -> np.ndarray:
        """Concatenated mean [x, y, z, vx, vy, vz] in catalogue units."""
        return np.concatenate([self.mean_position, self.mean_velocity])

    @property
    def position_sigma(self) -> np.ndarray:
        """1-sigma position uncertainties [kpc]."""
        return np.sqrt(np.clip(np.diag(self.covariance)[:3], 0.0, None))

    @property
    def velocity_sigma(self) -> np.ndarray:
        """1-sigma velocity uncertainties [km/s]."""
        return np.sqrt(np.clip(np.diag(self.covariance)[3:], 0.0, None))

    def __repr__(self):
        return (f"StarRecord(id={self.id}, name='{self.name}', "
                f"source_id={self.source_id})")
