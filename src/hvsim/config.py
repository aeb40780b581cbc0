"""
Global Configuration for hvsim Package
======================================

This module provides package-wide configuration settings that users can modify
to control numerical tolerances, validation behavior, run defaults and default
plotting options.

Examples
--------
View current configuration:

>>> import hvsim
>>> print(hvsim.config)

Modify settings:

>>> hvsim.config.DEFAULT_N_SAMPLES = 500  # Larger ensembles by default
>>> hvsim.config.STRICT_VALIDATION = False  # Warn instead of raising

Reset to defaults:

>>> hvsim.config.reset()

Temporarily modify settings:

>>> with hvsim.temp_config(SYMMETRY_ATOL=1e-6):
...     # Looser symmetry check for this block only
...     star = hvsim.StarRecord(...)

Notes
-----
Physical constants and the galaxy parameter tables are NOT part of this
configuration; they live in :mod:`hvsim.defaults` as immutable data.
"""

from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class HvsimConfig:
    """
    Global configuration for hvsim package.

    Attributes
    ----------
    EQUALITY_RTOL : float
        Relative tolerance for floating-point equality comparisons.
        Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point equality comparisons.
        Default: 1e-14
    SYMMETRY_ATOL : float
        Absolute tolerance used when checking that a covariance matrix
        is symmetric. Catalogue covariances are stored in single precision,
        so this is deliberately loose.
        Default: 1e-8
    STRICT_VALIDATION : bool
        If True, validation failures raise exceptions.
        If False, validation failures issue warnings.
        Default: True
    DEFAULT_N_SAMPLES : int
        Default number of Monte Carlo samples per star.
        Default: 100
    DEFAULT_TIMESTEP : float
        Default integration timestep [Myr]. Negative integrates backward.
        Default: -0.1
    DEFAULT_TRAJECTORY_ID : int
        Default MW/LMC trajectory pair (1-8).
        Default: 1
    DEFAULT_RECORD_EVERY : int
        Record a history snapshot every this many steps.
        Default: 1
    DEFAULT_SAMPLE_COLOR : str
        Default color for sample markers and tracks in plots.
        Default: 'red'
    DEFAULT_MW_COLOR : str
        Default color for the Milky Way centre track.
        Default: 'cyan'
    DEFAULT_LMC_COLOR : str
        Default color for the LMC centre track.
        Default: 'magenta'
    DEFAULT_MARKER_SIZE : float
        Default marker size for sample end points.
        Default: 2.0
    """

    # Numerical tolerance for equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14
    SYMMETRY_ATOL: float = 1e-8

    # Validation behavior
    STRICT_VALIDATION: bool = True

    # Run defaults
    DEFAULT_N_SAMPLES: int = 100
    DEFAULT_TIMESTEP: float = -0.1
    DEFAULT_TRAJECTORY_ID: int = 1
    DEFAULT_RECORD_EVERY: int = 1

    # Plotting defaults
    DEFAULT_SAMPLE_COLOR: str = 'red'
    DEFAULT_MW_COLOR: str = 'cyan'
    DEFAULT_LMC_COLOR: str = 'magenta'
    DEFAULT_MARKER_SIZE: float = 2.0

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import hvsim
        >>> hvsim.config.DEFAULT_N_SAMPLES = 10  # Modify
        >>> hvsim.config.reset()  # Back to defaults
        >>> hvsim.config.DEFAULT_N_SAMPLES
        100
        """
        defaults = HvsimConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["HvsimConfig:"]
        lines.append("  Numerical Tolerances:")
        lines.append(f"    EQUALITY_RTOL = {self.EQUALITY_RTOL}")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append(f"    SYMMETRY_ATOL = {self.SYMMETRY_ATOL}")
        lines.append("  Behavior:")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        lines.append("  Run Defaults:")
        lines.append(f"    DEFAULT_N_SAMPLES = {self.DEFAULT_N_SAMPLES}")
        lines.append(f"    DEFAULT_TIMESTEP = {self.DEFAULT_TIMESTEP}")
        lines.append(f"    DEFAULT_TRAJECTORY_ID = {self.DEFAULT_TRAJECTORY_ID}")
        lines.append(f"    DEFAULT_RECORD_EVERY = {self.DEFAULT_RECORD_EVERY}")
        lines.append("  Plotting:")
        lines.append(f"    DEFAULT_SAMPLE_COLOR = '{self.DEFAULT_SAMPLE_COLOR}'")
        lines.append(f"    DEFAULT_MW_COLOR = '{self.DEFAULT_MW_COLOR}'")
        lines.append(f"    DEFAULT_LMC_COLOR = '{self.DEFAULT_LMC_COLOR}'")
        lines.append(f"    DEFAULT_MARKER_SIZE = {self.DEFAULT_MARKER_SIZE}")
        return "\n".join(lines)


# Global configuration instance
config = HvsimConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import hvsim
    >>> with hvsim.temp_config(STRICT_VALIDATION=False):
    ...     # Asymmetric covariances only warn inside this block
    ...     ...
    >>> # Original config restored here
    >>> hvsim.config.STRICT_VALIDATION
    True

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"HvsimConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
