"""
hvsim: Backward Orbits of Hypervelocity Stars

A Python package for integrating Monte Carlo ensembles of hypervelocity
stars backward in time through the time-dependent potential of a moving
Milky Way and Large Magellanic Cloud.
"""

# Configuration
from .config import config, temp_config

# Core classes
from .state import PhaseSpacePoint, TimeSample, StarRecord
from .interpolator import TrajectoryInterpolator
from .potentials import (
    GalaxyPotential, Hernquist, NFW, MiyamotoNagai, LMCParams, PotentialType
)
from .sampler import InitialConditionSampler, generate_samples
from .integrator import LeapfrogIntegrator
from .history import EnsembleHistory
from .simulation import RunConfig, Simulation

# Data loading
from .catalogue import (
    Catalogue, StarNotFoundError, load_catalogue, read_trajectory_file,
    trajectory_pair_paths
)

# Linear algebra helpers
from .linalg import cholesky, covariance_from_flat, standard_normal

# Default galaxy models
from .defaults import MW_COMPONENTS, LMC_MODELS, lmc_params, milky_way_lmc, milky_way_only

# Warning categories
from .utils import (
    HvsimWarning, MalformedRecordWarning, DataUnavailableWarning,
    NumericalDegeneracyWarning
)

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from hvsim import *"
__all__ = [
    # Configuration
    "config",
    "temp_config",
    # Classes
    "PhaseSpacePoint",
    "TimeSample",
    "StarRecord",
    "TrajectoryInterpolator",
    "GalaxyPotential",
    "Hernquist",
    "NFW",
    "MiyamotoNagai",
    "LMCParams",
    "PotentialType",
    "InitialConditionSampler",
    "LeapfrogIntegrator",
    "EnsembleHistory",
    "RunConfig",
    "Simulation",
    "Catalogue",
    # Functions
    "generate_samples",
    "load_catalogue",
    "read_trajectory_file",
    "trajectory_pair_paths",
    "cholesky",
    "covariance_from_flat",
    "standard_normal",
    "lmc_params",
    "milky_way_lmc",
    "milky_way_only",
    # Constants
    "MW_COMPONENTS",
    "LMC_MODELS",
    # Errors and warnings
    "StarNotFoundError",
    "HvsimWarning",
    "MalformedRecordWarning",
    "DataUnavailableWarning",
    "NumericalDegeneracyWarning",
]
