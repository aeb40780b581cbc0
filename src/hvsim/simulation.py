'''Run configuration and end-to-end simulation driver
RunConfig and Simulation class definitions'''

import numpy as np
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
from .config import config
from .history import EnsembleHistory
from .integrator import LeapfrogIntegrator
from .interpolator import TrajectoryInterpolator
from .potentials import GalaxyPotential
from .sampler import InitialConditionSampler
from .state import PhaseSpacePoint, StarRecord
from .utils import DataUnavailableWarning, Timer


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable settings of one simulation run.

    Unset fields take their values from the package config at creation time.

    Attributes
    ----------
    trajectory_id : int
        MW/LMC trajectory pair and LMC model selector (1-8)
    n_samples : int
        Number of Monte Carlo samples
    timestep : float
        Signed timestep [Myr]; negative integrates backward
    disable_sampling : bool
        Place every sample at the star's mean state
    seed : int, optional
        Seed for the sampling generator; None uses OS entropy
    """
    trajectory_id: int = field(default_factory=lambda: config.DEFAULT_TRAJECTORY_ID)
    n_samples: int = field(default_factory=lambda: config.DEFAULT_N_SAMPLES)
    timestep: float = field(default_factory=lambda: config.DEFAULT_TIMESTEP)
    disable_sampling: bool = False
    seed: Optional[int] = None

    def __post_init__(self):
        from .defaults import LMC_MODELS

        if (isinstance(self.n_samples, bool)
                or not isinstance(self.n_samples, (int, np.integer))
                or self.n_samples <= 0):
            raise ValueError(
                f"n_samples must be a positive integer, got {self.n_samples!r}"
            )
        if self.timestep == 0 or not np.isfinite(self.timestep):
            raise ValueError(
                f"timestep must be finite and non-zero, got {self.timestep}"
            )
        if self.trajectory_id not in LMC_MODELS:
            warnings.warn(
                f"Unknown trajectory id {self.trajectory_id}; "
                f"the default LMC model will be used",
                DataUnavailableWarning,
                stacklevel=3
            )


class Simulation:
    """
    Backward integration of one star's Monte Carlo ensemble.

    Builds the MW + LMC potential, draws the initial ensemble from the
    star's uncertainty and drives a leapfrog integrator over it.

    Parameters
    ----------
    star : StarRecord
        Star to integrate
    mw : TrajectoryInterpolator
        Milky Way centre history
    lmc : TrajectoryInterpolator
        LMC centre history
    run_config : RunConfig, optional
        Run settings (default: RunConfig())
    rng : numpy.random.Generator or int, optional
        Overrides ``run_config.seed`` as the sampling source

    Examples
    --------
    >>> sim = Simulation.from_files("data", star_id=1,
    ...                             run_config=RunConfig(trajectory_id=3, seed=7))
    >>> history = sim.run(1000, record_every=10)
    >>> history.spread()[-1]
    """

    # ========== CONSTRUCTION ==========
    def __init__(self, star: StarRecord, mw: TrajectoryInterpolator,
                 lmc: TrajectoryInterpolator,
                 run_config: Optional[RunConfig] = None,
                 rng: Union[np.random.Generator, int, None] = None):
        if run_config is None:
            run_config = RunConfig()
        if rng is None:
            rng = run_config.seed

        self._star = star
        self._run_config = run_config
        self._potential = GalaxyPotential(mw, lmc,
                                          trajectory_id=run_config.trajectory_id)
        self._sampler = InitialConditionSampler(
            rng, disable_sampling=run_config.disable_sampling
        )
        positions, velocities = self._sampler.sample_arrays(star, run_config.n_samples)
        self._integrator = LeapfrogIntegrator(self._potential, positions,
                                              velocities, run_config.timestep)
        self._history: Optional[EnsembleHistory] = None

    @classmethod
    def from_files(cls, data_root: Union[str, Path], star_id: int,
                   run_config: Optional[RunConfig] = None,
                   kinematics_file: str = '6d_cartesian_data.csv',
                   covariance_file: str = '6d_cartesian_covariance.csv',
                   trajectory_dir: str = 'galaxy trajectories',
                   time_unit: str = 'Gyr',
                   rng: Union[np.random.Generator, int, None] = None) -> "Simulation":
        """
        Set up a simulation entirely from files on disk.

        Expected layout::

            <data_root>/6d_cartesian_data.csv
            <data_root>/6d_cartesian_covariance.csv
            <data_root>/galaxy trajectories/trajectory <id>/*_mw*, *_lmc*

        Raises
        ------
        StarNotFoundError
            If the star is not in the catalogue (including a missing file)
        FileNotFoundError
            If the trajectory folder or files are missing
        ValueError
            If a trajectory file holds no usable rows
        """
        from .catalogue import load_catalogue, read_trajectory_file, trajectory_pair_paths

        if run_config is None:
            run_config = RunConfig()
        root = Path(data_root)

        catalogue = load_catalogue(root / kinematics_file, root / covariance_file)
        star = catalogue.find(star_id)

        mw_path, lmc_path = trajectory_pair_paths(root / trajectory_dir,
                                                  run_config.trajectory_id)
        mw = read_trajectory_file(mw_path, time_unit=time_unit, name='MW')
        lmc = read_trajectory_file(lmc_path, time_unit=time_unit, name='LMC')
        for interp, path in ((mw, mw_path), (lmc, lmc_path)):
            if interp.is_empty:
                raise ValueError(f"No usable trajectory data in {path}")

        return cls(star, mw, lmc, run_config=run_config, rng=rng)

    # ========== PROPAGATION ==========
    def step(self) -> float:
        """Advance the ensemble one timestep; returns the new time [Myr]."""
        return self._integrator.step()

    def run(self, n_steps: int, record_every: Optional[int] = None,
            verbose: bool = False) -> EnsembleHistory:
        """
        Integrate for n_steps and return the accumulated history.

        Successive calls extend the same history.

        Parameters
        ----------
        n_steps : int
            Number of steps
        record_every : int, optional
            Snapshot interval in steps (default: config.DEFAULT_RECORD_EVERY)
        verbose : bool, optional
            Print the elapsed wall time (default: False)
        """
        history = self._history
        if history is None:
            history = EnsembleHistory()
        # re-sync if steps were taken outside run()
        if history.n_snapshots == 0 or history.tf != self._integrator.time:
            history.append(*self._integrator.snapshot())

        with Timer(f"{self._star.name}: {n_steps} steps", verbose=verbose):
            self._history = self._integrator.run(n_steps, record_every=record_every,
                                                 history=history)
        return self._history

    # ========== PROPERTY ACCESS ==========
    @property
    def star(self) -> StarRecord:
        return self._star

    @property
    def run_config(self) -> RunConfig:
        return self._run_config

    @property
    def potential(self) -> GalaxyPotential:
        return self._potential

    @property
    def integrator(self) -> LeapfrogIntegrator:
        return self._integrator

    @property
    def history(self) -> Optional[EnsembleHistory]:
        """History recorded by run(), or None before the first run."""
        return self._history

    @property
    def time(self) -> float:
        """Current simulation time [Myr]."""
        return self._integrator.time

    @property
    def samples(self) -> List[PhaseSpacePoint]:
        """Current ensemble."""
        return self._integrator.samples

    def summary(self):
        """Print a summary of the run setup and progress."""
        rc = self._run_config
        print(f"Simulation of {self._star.name} (source_id {self._star.source_id})")
        print(f"  Samples: {rc.n_samples}"
              f"{' (sampling disabled)' if rc.disable_sampling else ''}")
        print(f"  Timestep: {rc.timestep} Myr, trajectory {rc.trajectory_id}")
        print(f"  Time: {self.time} Myr after {self._integrator.step_count} steps")
        self._potential.summary()

    def __repr__(self):
        return (f"Simulation(star='{self._star.name}', "
                f"n_samples={self._run_config.n_samples}, time={self.time})")
