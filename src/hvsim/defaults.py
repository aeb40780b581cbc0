"""
Default Galaxy Models
=====================

Literal parameter tables for the Milky Way potential and the LMC models,
plus factory functions for commonly-used potentials.

Masses are in Msun and lengths in kpc.

Examples
--------
>>> from hvsim import milky_way_lmc, lmc_params
>>> lmc_params(3)
LMCParams(mass=180000000000.0, scale_radius=20.0)
>>> potential = milky_way_lmc(mw_interp, lmc_interp, trajectory_id=3)
"""
from .potentials import (
    GalaxyPotential, Hernquist, NFW, MiyamotoNagai, LMCParams
)

"""
Predefined Milky Way components
Two Hernquist spheres (bulge and a larger inner sphere), an NFW dark-matter
halo, and a thin + thick disk each built from three Miyamoto-Nagai terms.
The negative disk masses are part of the model and must not be changed.
"""
MW_BULGE = Hernquist(mass=1.8142e9, scale=0.0688867)

MW_INNER_SPHERE = Hernquist(mass=5e9, scale=0.7)

MW_HALO = NFW(mass=5.5427e11, scale_radius=15.626)

MW_THIN_DISK = (
    MiyamotoNagai(mass=9.01e10, a=4.27, b=0.242),
    MiyamotoNagai(mass=-5.91e10, a=9.23, b=0.242),
    MiyamotoNagai(mass=1e10, a=1.43, b=0.242),
)

MW_THICK_DISK = (
    MiyamotoNagai(mass=7.88e9, a=7.30, b=1.14),
    MiyamotoNagai(mass=-4.97e9, a=15.25, b=1.14),
    MiyamotoNagai(mass=0.82e9, a=2.02, b=1.14),
)

MW_COMPONENTS = (MW_BULGE, MW_INNER_SPHERE, MW_HALO) + MW_THIN_DISK + MW_THICK_DISK

"""
Predefined LMC models, keyed by trajectory id
Ids 1-4 and 5-8 share the same four mass/radius pairs.
"""
LMC_LIGHT = LMCParams(mass=8.0e10, scale_radius=10.4)
LMC_INTERMEDIATE = LMCParams(mass=10.0e10, scale_radius=12.7)
LMC_HEAVY = LMCParams(mass=18.0e10, scale_radius=20.0)
LMC_VERY_HEAVY = LMCParams(mass=25.0e10, scale_radius=25.2)

LMC_MODELS = {
    1: LMC_LIGHT,
    2: LMC_INTERMEDIATE,
    3: LMC_HEAVY,
    4: LMC_VERY_HEAVY,
    5: LMC_LIGHT,
    6: LMC_INTERMEDIATE,
    7: LMC_HEAVY,
    8: LMC_VERY_HEAVY,
}

DEFAULT_LMC = LMC_HEAVY


def lmc_params(trajectory_id) -> LMCParams:
    """
    Look up the LMC model for a trajectory id.

    Parameters
    ----------
    trajectory_id : int
        Trajectory selector, normally 1-8

    Returns
    -------
    LMCParams
        Mass and scale radius of the LMC. Unknown ids return
        ``DEFAULT_LMC`` rather than failing.
    """
    return LMC_MODELS.get(trajectory_id, DEFAULT_LMC)


def milky_way_lmc(mw_interpolator, lmc_interpolator, trajectory_id=1):
    """
    Create the standard Milky Way + LMC potential.

    Parameters
    ----------
    mw_interpolator : TrajectoryInterpolator
        History of the Milky Way centre
    lmc_interpolator : TrajectoryInterpolator
        History of the LMC centre
    trajectory_id : int, optional
        Trajectory selector choosing the LMC model (default: 1)

    Returns
    -------
    GalaxyPotential
        Nine-component Milky Way plus a Hernquist LMC
    """
    return GalaxyPotential(mw_interpolator, lmc_interpolator,
                           trajectory_id=trajectory_id,
                           mw_components=MW_COMPONENTS)


def milky_way_only(mw_interpolator, lmc_interpolator):
    """
    Create the Milky Way potential with a massless LMC.

    Useful for isolating the LMC's influence on an orbit by comparing
    against :func:`milky_way_lmc`.

    Returns
    -------
    GalaxyPotential
        Nine-component Milky Way; the LMC term contributes nothing
    """
    return GalaxyPotential(mw_interpolator, lmc_interpolator,
                           mw_components=MW_COMPONENTS,
                           lmc_component=Hernquist(mass=0.0, scale=DEFAULT_LMC.scale_radius))
