'''Analytic galactic potentials and the time-dependent MW + LMC field
Force laws, potential component definitions and the GalaxyPotential class'''

import numpy as np
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union, TYPE_CHECKING
from enum import Enum
from .constants import G_KPC_MYR
from .utils import DataUnavailableWarning

if TYPE_CHECKING:
    from .interpolator import TrajectoryInterpolator


# define an enumerated list of potential component types
class PotentialType(Enum):
    HERNQUIST = 'hernquist'
    NFW = 'nfw'
    MIYAMOTO_NAGAI = 'miyamoto_nagai'


# ========== FORCE LAWS ==========
# All laws take positions relative to the mass centre, either a single (3,)
# vector or an (N, 3) batch, and return accelerations of the same shape in
# kpc/Myr^2. The acceleration at the centre itself is defined as zero.

def hernquist_acceleration(pos, m: float, c: float) -> np.ndarray:
    """
    Acceleration of a Hernquist sphere.

    a = -G m / (r (r + c)^2) * pos

    Parameters
    ----------
    pos : array_like, shape (3,) or (N, 3)
        Position relative to the centre [kpc]
    m : float
        Mass [Msun]
    c : float
        Scale radius [kpc]
    """
    pos = np.asarray(pos, dtype=float)
    r = np.linalg.norm(pos, axis=-1, keepdims=True)
    with np.errstate(divide='ignore', invalid='ignore'):
        factor = -G_KPC_MYR * m / (r * (r + c) ** 2)
    factor = np.where(r > 0, factor, 0.0)
    return factor * pos


def miyamoto_nagai_acceleration(pos, m: float, a: float, b: float) -> np.ndarray:
    """
    Acceleration of an axisymmetric Miyamoto-Nagai disk.

    With R^2 = x^2 + y^2, zeta = sqrt(z^2 + b^2) and
    D = (R^2 + (a + zeta)^2)^(3/2):

    a_x = -G m x / D
    a_y = -G m y / D
    a_z = -G m z (a + zeta) / (D zeta)

    Parameters
    ----------
    pos : array_like, shape (3,) or (N, 3)
        Position relative to the disk centre [kpc]
    m : float
        Mass [Msun], may be negative
    a : float
        Radial scale length [kpc]
    b : float
        Vertical scale height [kpc]
    """
    pos = np.asarray(pos, dtype=float)
    x = pos[..., 0]
    y = pos[..., 1]
    z = pos[..., 2]

    R_sq = x * x + y * y
    zeta = np.sqrt(z * z + b * b)
    D = (R_sq + (a + zeta) ** 2) ** 1.5
    D_zeta = D * zeta

    with np.errstate(divide='ignore', invalid='ignore'):
        common = np.where(D != 0, -G_KPC_MYR * m / D, 0.0)
        a_z = np.where(D_zeta != 0,
                       -G_KPC_MYR * m * z * (a + zeta) / D_zeta, 0.0)

    return np.stack([common * x, common * y, a_z], axis=-1)


def nfw_acceleration(pos, m: float, r_s: float) -> np.ndarray:
    """
    Acceleration of a Navarro-Frenk-White halo.

    With s = r / r_s and mu(s) = ln(1 + s) - s / (1 + s):

    a = -(G m mu(s) / r^2) * pos / r

    Parameters
    ----------
    pos : array_like, shape (3,) or (N, 3)
        Position relative to the halo centre [kpc]
    m : float
        Characteristic mass [Msun]
    r_s : float
        Scale radius [kpc]
    """
    pos = np.asarray(pos, dtype=float)
    r = np.linalg.norm(pos, axis=-1, keepdims=True)
    with np.errstate(divide='ignore', invalid='ignore'):
        s = r / r_s
        mass_profile = np.log(1.0 + s) - s / (1.0 + s)
        factor = -G_KPC_MYR * m * mass_profile / r ** 3
    factor = np.where(r > 0, factor, 0.0)
    return factor * pos


# ========== POTENTIAL COMPONENTS ==========
"""
Immutable potential components. Each carries its own parameters and
evaluates its force law through a single evaluate() call.
"""
def _check_finite(name, **params):
    for key, value in params.items():
        if not np.isfinite(value):
            raise ValueError(f"{name} {key} must be finite, got {value}")


@dataclass(frozen=True)
class Hernquist:
    """
    Hernquist sphere (bulge-like component).

    Attributes
    ----------
    mass : float
        Mass [Msun]
    scale : float
        Scale radius [kpc]
    """
    mass: float
    scale: float

    kind = PotentialType.HERNQUIST

    def __post_init__(self):
        _check_finite("Hernquist", mass=self.mass, scale=self.scale)
        if self.scale < 0:
            raise ValueError(f"Scale radius must be non-negative, got {self.scale}")

    def evaluate(self, relative_pos) -> np.ndarray:
        """Acceleration at a position relative to the component centre."""
        return hernquist_acceleration(relative_pos, self.mass, self.scale)


@dataclass(frozen=True)
class NFW:
    """
    NFW dark-matter halo.

    Attributes
    ----------
    mass : float
        Characteristic mass [Msun]
    scale_radius : float
        Scale radius r_s [kpc]
    """
    mass: float
    scale_radius: float

    kind = PotentialType.NFW

    def __post_init__(self):
        _check_finite("NFW", mass=self.mass, scale_radius=self.scale_radius)
        if self.scale_radius <= 0:
            raise ValueError(
                f"Scale radius must be positive, got {self.scale_radius}"
            )

    def evaluate(self, relative_pos) -> np.ndarray:
        """Acceleration at a position relative to the component centre."""
        return nfw_acceleration(relative_pos, self.mass, self.scale_radius)


@dataclass(frozen=True)
class MiyamotoNagai:
    """
    Miyamoto-Nagai disk.

    Negative masses are allowed: disk profiles are built as a signed
    superposition of several Miyamoto-Nagai terms.

    Attributes
    ----------
    mass : float
        Mass [Msun]
    a : float
        Radial scale length [kpc]
    b : float
        Vertical scale height [kpc]
    """
    mass: float
    a: float
    b: float

    kind = PotentialType.MIYAMOTO_NAGAI

    def __post_init__(self):
        _check_finite("Miyamoto-Nagai", mass=self.mass, a=self.a, b=self.b)
        if self.a < 0:
            raise ValueError(f"Scale length a must be non-negative, got {self.a}")
        if self.b < 0:
            raise ValueError(f"Scale height b must be non-negative, got {self.b}")

    def evaluate(self, relative_pos) -> np.ndarray:
        """Acceleration at a position relative to the component centre."""
        return miyamoto_nagai_acceleration(relative_pos, self.mass, self.a, self.b)


PotentialComponent = Union[Hernquist, NFW, MiyamotoNagai]
_COMPONENT_TYPES = (Hernquist, NFW, MiyamotoNagai)


@dataclass(frozen=True)
class LMCParams:
    """
    Immutable LMC model parameters.

    Attributes
    ----------
    mass : float
        Total mass of the LMC Hernquist sphere [Msun]
    scale_radius : float
        Hernquist scale radius [kpc]
    """
    mass: float
    scale_radius: float

    def __post_init__(self):
        if self.mass <= 0:
            raise ValueError(f"LMC mass must be positive, got {self.mass}")
        if self.scale_radius <= 0:
            raise ValueError(
                f"LMC scale radius must be positive, got {self.scale_radius}"
            )

    def to_component(self) -> Hernquist:
        """Hernquist component with these parameters."""
        return Hernquist(mass=self.mass, scale=self.scale_radius)


# ========== COMPOSITE FIELD ==========
class GalaxyPotential:
    """
    Time-dependent gravitational field of a moving Milky Way and LMC.

    The Milky Way is a fixed superposition of analytic components evaluated
    relative to the MW centre; the LMC is a single Hernquist sphere evaluated
    relative to the LMC centre. Both centres move and are looked up from
    their trajectory interpolators at every query.

    Parameters
    ----------
    mw_interpolator : TrajectoryInterpolator
        History of the Milky Way centre
    lmc_interpolator : TrajectoryInterpolator
        History of the LMC centre
    trajectory_id : int, optional
        Trajectory selector (1-8) choosing the LMC mass and scale radius.
        Unknown ids fall back to the default LMC model. Default: 1
    mw_components : sequence of potential components, optional
        Milky Way components. Default: ``hvsim.defaults.MW_COMPONENTS``
    lmc_component : Hernquist, optional
        Explicit LMC component, overriding the trajectory_id lookup

    Notes
    -----
    - GalaxyPotential is immutable; interpolators are held by reference
      and only queried
    - Nothing is cached: every call re-interpolates both centres and
      re-evaluates every component
    """

    # ========== CONSTRUCTION ==========
    def __init__(
        self,
        mw_interpolator: "TrajectoryInterpolator",
        lmc_interpolator: "TrajectoryInterpolator",
        trajectory_id: int = 1,
        mw_components: Optional[Sequence[PotentialComponent]] = None,
        lmc_component: Optional[Hernquist] = None,
    ):
        from .defaults import MW_COMPONENTS, lmc_params

        if mw_components is None:
            mw_components = MW_COMPONENTS
        mw_components = tuple(mw_components)

        self._validate_params(mw_interpolator, lmc_interpolator,
                              mw_components, lmc_component)

        self._mw_interpolator = mw_interpolator
        self._lmc_interpolator = lmc_interpolator
        self._trajectory_id = trajectory_id
        self._mw_components = mw_components

        if lmc_component is None:
            lmc_component = lmc_params(trajectory_id).to_component()
        self._lmc_component = lmc_component

    # ========== VALIDATION ==========
    @staticmethod
    def _validate_params(mw_interpolator, lmc_interpolator,
                         mw_components, lmc_component):
        """
        Validate constructor arguments.

        Raises
        ------
        TypeError
            If an interpolator or component has the wrong type
        ValueError
            If no Milky Way components are given
        """
        for label, interp in (("MW", mw_interpolator), ("LMC", lmc_interpolator)):
            if not callable(getattr(interp, "position", None)):
                raise TypeError(
                    f"{label} interpolator must provide a position(t) method, "
                    f"got {type(interp).__name__}"
                )
            if hasattr(interp, "__len__") and len(interp) == 0:
                warnings.warn(
                    f"{label} interpolator has no samples; its centre will "
                    f"be fixed at the origin",
                    DataUnavailableWarning,
                    stacklevel=3
                )

        if len(mw_components) == 0:
            raise ValueError("At least one Milky Way component is required")
        for comp in mw_components:
            if not isinstance(comp, _COMPONENT_TYPES):
                raise TypeError(
                    f"Unknown potential component {comp!r}. "
                    f"Valid types: Hernquist, NFW, MiyamotoNagai"
                )
        if lmc_component is not None and not isinstance(lmc_component, Hernquist):
            raise TypeError(
                f"LMC component must be Hernquist, got {type(lmc_component).__name__}"
            )

    # ========== FIELD EVALUATION ==========
    def acceleration(self, world_pos, t: float) -> np.ndarray:
        """
        Total gravitational acceleration at a position and time.

        Parameters
        ----------
        world_pos : array_like, shape (3,) or (N, 3)
            Position(s) in the simulation frame [kpc]
        t : float
            Simulation time [Myr]

        Returns
        -------
        np.ndarray
            Acceleration [kpc/Myr^2], same shape as world_pos
        """
        pos = np.asarray(world_pos, dtype=float)
        return self.mw_acceleration(pos, t) + self.lmc_acceleration(pos, t)

    def mw_acceleration(self, world_pos, t: float) -> np.ndarray:
        """Acceleration from the Milky Way components only."""
        pos = np.asarray(world_pos, dtype=float)
        relative_pos = pos - self._mw_interpolator.position(t)
        total = np.zeros_like(relative_pos)
        for comp in self._mw_components:
            total = total + comp.evaluate(relative_pos)
        return total

    def lmc_acceleration(self, world_pos, t: float) -> np.ndarray:
        """Acceleration from the LMC component only."""
        pos = np.asarray(world_pos, dtype=float)
        relative_pos = pos - self._lmc_interpolator.position(t)
        return self._lmc_component.evaluate(relative_pos)

    def centres(self, t: float) -> Tuple[np.ndarray, np.ndarray]:
        """MW and LMC centre positions [kpc] at time t."""
        return (self._mw_interpolator.position(t),
                self._lmc_interpolator.position(t))

    # ========== PROPERTY ACCESS ==========
    @property
    def mw_interpolator(self) -> "TrajectoryInterpolator":
        """Milky Way centre history."""
        return self._mw_interpolator

    @property
    def lmc_interpolator(self) -> "TrajectoryInterpolator":
        """LMC centre history."""
        return self._lmc_interpolator

    @property
    def trajectory_id(self) -> int:
        """Trajectory selector used for the LMC lookup."""
        return self._trajectory_id

    @property
    def mw_components(self) -> Tuple[PotentialComponent, ...]:
        """Milky Way potential components."""
        return self._mw_components

    @property
    def lmc_component(self) -> Hernquist:
        """LMC Hernquist component."""
        return self._lmc_component

    @property
    def mw_mass(self) -> float:
        """Signed sum of Milky Way component masses [Msun]."""
        return float(sum(comp.mass for comp in self._mw_components))

    def summary(self):
        """Print detailed summary of the potential model."""
        print(f"Galaxy Potential (trajectory {self._trajectory_id})")
        print(f"Milky Way: {len(self._mw_components)} components, "
              f"net mass = {self.mw_mass:.4e} Msun")
        for comp in self._mw_components:
            if comp.kind == PotentialType.HERNQUIST:
                print(f"  Hernquist      m = {comp.mass:.4e}  c = {comp.scale}")
            elif comp.kind == PotentialType.NFW:
                print(f"  NFW            m = {comp.mass:.4e}  r_s = {comp.scale_radius}")
            else:
                print(f"  Miyamoto-Nagai m = {comp.mass:.4e}  "
                      f"a = {comp.a}  b = {comp.b}")
        print(f"LMC: Hernquist m = {self._lmc_component.mass:.4e} Msun, "
              f"c = {self._lmc_component.scale} kpc")

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        return (f"GalaxyPotential(trajectory_id={self._trajectory_id}, "
                f"mw_components={len(self._mw_components)}, "
                f"lmc_mass={self._lmc_component.mass:.3e})")
