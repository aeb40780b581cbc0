"""
Utility functions and classes for the hvsim package.

Also defines the warning categories used to report recoverable conditions
(skipped records, missing data, numerical fallbacks).
"""

from time import perf_counter
import warnings
from typing import Type
from .config import config


class HvsimWarning(UserWarning):
    """Base category for all recoverable conditions reported by hvsim."""


class MalformedRecordWarning(HvsimWarning):
    """A single input record could not be parsed and was skipped."""


class DataUnavailableWarning(HvsimWarning):
    """Input data is missing or empty; a degenerate fallback is in use."""


class NumericalDegeneracyWarning(HvsimWarning):
    """A numerical routine failed and returned its documented fallback."""


class Timer:
    """
    Wall-clock timer used around simulation runs.

    ``Simulation.run(verbose=True)`` wraps its integration loop in one and
    prints e.g. ``HVS 1: 1000 steps: 0.84 s``. With ``verbose=False`` the
    elapsed time is only stored in ``elapsed``.
    """
    def __init__(self, name="Operation", verbose=True):
        self.name = name
        self.verbose = verbose
        self.elapsed = None

    def __enter__(self):
        self._start = perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = perf_counter() - self._start
        if self.verbose:
            print(f"{self.name}: {self.elapsed:.6f} s")


def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Report a failed input check according to config.STRICT_VALIDATION.

    Used for soft checks such as covariance symmetry in StarRecord: in
    strict mode ``error_class(message)`` is raised, otherwise a UserWarning
    carrying the same message is issued and loading continues.
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    warnings.warn(message, UserWarning, stacklevel=3)
