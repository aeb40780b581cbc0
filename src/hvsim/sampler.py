'''Monte Carlo initial conditions for a catalogued star
InitialConditionSampler class definition'''

import numpy as np
from typing import List, Tuple, Union
from .constants import KM_S_TO_KPC_MYR
from .linalg import cholesky, standard_normals
from .state import PhaseSpacePoint, StarRecord


class InitialConditionSampler:
    """
    Draws phase-space samples from a star's 6-D Gaussian uncertainty.

    Each sample is mean + L z, where L is the Cholesky factor of the
    star's covariance and z holds six independent standard normals. The
    position part of the deviation is in kpc; the velocity part is in km/s
    and is converted to kpc/Myr before being added to the mean velocity.

    Parameters
    ----------
    rng : numpy.random.Generator or int, optional
        Random source, or a seed for a new ``default_rng``.
        None uses fresh OS entropy.
    disable_sampling : bool, optional
        If True, every sample sits exactly at the star's mean state.
        Default: False

    Examples
    --------
    >>> sampler = InitialConditionSampler(rng=42)
    >>> positions, velocities = sampler.sample_arrays(star, 1000)
    >>> positions.shape
    (1000, 3)
    """
    def __init__(self, rng: Union[np.random.Generator, int, None] = None,
                 disable_sampling: bool = False):
        self._rng = np.random.default_rng(rng)
        self._disable_sampling = bool(disable_sampling)

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    @property
    def disable_sampling(self) -> bool:
        return self._disable_sampling

    def sample_arrays(self, star: StarRecord,
                      n_samples: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Generate samples as position and velocity arrays.

        Parameters
        ----------
        star : StarRecord
            Star whose mean state and covariance define the distribution
        n_samples : int
            Number of samples (positive)

        Returns
        -------
        positions : np.ndarray, shape (n_samples, 3)
            Sample positions [kpc]
        velocities : np.ndarray, shape (n_samples, 3)
            Sample velocities [kpc/Myr]
        """
        n_samples = self._check_count(n_samples)
        mean_position = star.mean_position
        mean_velocity = star.mean_velocity * KM_S_TO_KPC_MYR

        if self._disable_sampling:
            positions = np.tile(mean_position, (n_samples, 1))
            velocities = np.tile(mean_velocity, (n_samples, 1))
            return positions, velocities

        L = cholesky(star.covariance)
        z = standard_normals(self._rng, (n_samples, L.shape[0]))
        # row k is L @ z[k]
        deviation = z @ L.T

        positions = mean_position + deviation[:, :3]
        velocities = mean_velocity + deviation[:, 3:] * KM_S_TO_KPC_MYR
        return positions, velocities

    def sample(self, star: StarRecord, n_samples: int) -> List[PhaseSpacePoint]:
        """Generate samples as a list of PhaseSpacePoint in draw order."""
        positions, velocities = self.sample_arrays(star, n_samples)
        return [PhaseSpacePoint(p, v) for p, v in zip(positions, velocities)]

    @staticmethod
    def _check_count(n_samples) -> int:
        if isinstance(n_samples, bool) or not isinstance(n_samples, (int, np.integer)):
            raise TypeError(f"Sample count must be an integer, got {n_samples!r}")
        if n_samples <= 0:
            raise ValueError(f"Sample count must be positive, got {n_samples}")
        return int(n_samples)

    def __repr__(self):
        return f"InitialConditionSampler(disable_sampling={self._disable_sampling})"


def generate_samples(star: StarRecord, n_samples: int,
                     rng: Union[np.random.Generator, int, None] = None,
                     disable_sampling: bool = False) -> List[PhaseSpacePoint]:
    """
    Generate Monte Carlo initial conditions for a star.

    Convenience wrapper around :class:`InitialConditionSampler`.

    Parameters
    ----------
    star : StarRecord
        Star to sample
    n_samples : int
        Number of samples
    rng : numpy.random.Generator or int, optional
        Random source or seed
    disable_sampling : bool, optional
        Place every sample at the mean state (default: False)

    Returns
    -------
    list of PhaseSpacePoint
        Samples in draw order, velocities in kpc/Myr
    """
    sampler = InitialConditionSampler(rng, disable_sampling=disable_sampling)
    return sampler.sample(star, n_samples)
