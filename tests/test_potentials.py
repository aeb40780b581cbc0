"""
Test suite for potential components and GalaxyPotential.

Tests cover:
- Closed-form force laws against hand-computed values
- Zero-radius safety (no NaN, no numpy warnings)
- Vectorised evaluation
- Superposition order independence
- Moving centres and LMC model lookup
- Construction errors
"""

import warnings
import pytest
import numpy as np
from hvsim import (
    GalaxyPotential, Hernquist, NFW, MiyamotoNagai, LMCParams, PotentialType,
    TrajectoryInterpolator, MW_COMPONENTS, lmc_params, milky_way_lmc,
    milky_way_only, DataUnavailableWarning
)
from hvsim.constants import G_KPC_MYR
from hvsim.defaults import DEFAULT_LMC, LMC_HEAVY, LMC_LIGHT
from hvsim.potentials import (
    hernquist_acceleration, miyamoto_nagai_acceleration, nfw_acceleration
)


def static_centre(position, name=None):
    """Interpolator pinned at one position for all times."""
    return TrajectoryInterpolator([0.0], [position], [[0.0, 0.0, 0.0]],
                                  time_factor=1.0, velocity_factor=1.0, name=name)


@pytest.fixture
def origin():
    return static_centre([0.0, 0.0, 0.0])


class TestForceLaws:
    """Test the closed-form accelerations."""

    def test_hernquist_value(self):
        a = hernquist_acceleration([1.0, 0.0, 0.0], 1e10, 1.0)
        assert np.allclose(a, [-G_KPC_MYR * 1e10 / 4.0, 0.0, 0.0])

    def test_hernquist_points_inward(self):
        pos = np.array([3.0, -4.0, 12.0])
        a = hernquist_acceleration(pos, 1e10, 0.7)
        assert np.dot(a, pos) < 0
        assert np.allclose(np.cross(a, pos), 0.0, atol=1e-15)

    def test_nfw_value(self):
        mu = np.log(2.0) - 0.5
        a = nfw_acceleration([0.0, 2.0, 0.0], 1e11, 2.0)
        assert np.allclose(a, [0.0, -G_KPC_MYR * 1e11 * mu / 4.0, 0.0])

    def test_miyamoto_nagai_in_plane(self):
        m, a_len, b = 1e10, 4.0, 0.3
        D = (9.0 + (a_len + b) ** 2) ** 1.5
        a = miyamoto_nagai_acceleration([3.0, 0.0, 0.0], m, a_len, b)
        assert np.allclose(a, [-G_KPC_MYR * m * 3.0 / D, 0.0, 0.0])

    def test_miyamoto_nagai_vertical(self):
        m, a_len, b = 1e10, 4.0, 0.3
        z = 2.0
        zeta = np.sqrt(z * z + b * b)
        D = (a_len + zeta) ** 3
        expected_z = -G_KPC_MYR * m * z * (a_len + zeta) / (D * zeta)
        a = miyamoto_nagai_acceleration([0.0, 0.0, z], m, a_len, b)
        assert np.allclose(a, [0.0, 0.0, expected_z])

    def test_negative_mass_pushes_outward(self):
        pos = np.array([5.0, 0.0, 0.0])
        a = miyamoto_nagai_acceleration(pos, -1e10, 9.0, 0.2)
        assert a[0] > 0

    def test_batch_matches_single(self):
        """(N, 3) input gives the same rows as individual calls."""
        batch = np.array([[1.0, 2.0, 3.0], [-4.0, 0.5, 0.1], [8.0, -1.0, -2.0]])
        for law, args in ((hernquist_acceleration, (1e10, 0.7)),
                          (nfw_acceleration, (5e11, 15.0)),
                          (miyamoto_nagai_acceleration, (9e10, 4.27, 0.242))):
            result = law(batch, *args)
            assert result.shape == batch.shape
            for row, pos in zip(result, batch):
                assert np.allclose(row, law(pos, *args))


class TestZeroRadius:
    """Accelerations at the component centre are zero and warning-free."""

    @pytest.mark.parametrize("component", [
        Hernquist(mass=1e10, scale=0.0),
        Hernquist(mass=1e10, scale=0.7),
        NFW(mass=5e11, scale_radius=15.0),
        MiyamotoNagai(mass=1e10, a=0.0, b=0.0),
        MiyamotoNagai(mass=1e10, a=4.0, b=0.0),
    ])
    def test_centre_is_zero(self, component):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            a = component.evaluate(np.zeros(3))
        assert np.all(np.isfinite(a))
        assert np.array_equal(a, np.zeros(3))

    def test_galaxy_at_centre_is_finite(self, origin):
        potential = GalaxyPotential(origin, origin)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            a = potential.acceleration(np.zeros(3), 0.0)
        assert np.all(np.isfinite(a))

    def test_batch_with_centre_row(self):
        batch = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        a = hernquist_acceleration(batch, 1e10, 1.0)
        assert np.array_equal(a[0], np.zeros(3))
        assert a[1, 0] < 0


class TestComponents:
    """Test component construction and validation."""

    def test_kinds(self):
        assert Hernquist(1.0, 1.0).kind == PotentialType.HERNQUIST
        assert NFW(1.0, 1.0).kind == PotentialType.NFW
        assert MiyamotoNagai(1.0, 1.0, 1.0).kind == PotentialType.MIYAMOTO_NAGAI

    def test_frozen(self):
        comp = Hernquist(mass=1e10, scale=1.0)
        with pytest.raises(AttributeError):
            comp.mass = 2e10

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            Hernquist(mass=1e10, scale=-1.0)
        with pytest.raises(ValueError):
            NFW(mass=1e10, scale_radius=0.0)
        with pytest.raises(ValueError):
            MiyamotoNagai(mass=1e10, a=-1.0, b=0.1)
        with pytest.raises(ValueError):
            Hernquist(mass=np.nan, scale=1.0)

    def test_lmc_params(self):
        assert LMCParams(8e10, 10.4).to_component() == Hernquist(8e10, 10.4)
        with pytest.raises(ValueError):
            LMCParams(mass=0.0, scale_radius=10.0)


class TestDefaults:
    """Test the default galaxy tables."""

    def test_mw_has_nine_components(self):
        assert len(MW_COMPONENTS) == 9

    def test_negative_disk_masses_preserved(self):
        negative = [c.mass for c in MW_COMPONENTS if c.mass < 0]
        assert sorted(negative) == [-5.91e10, -4.97e9]

    def test_lmc_lookup(self):
        assert lmc_params(1) == LMC_LIGHT
        assert lmc_params(3) == LMC_HEAVY
        assert lmc_params(5) == lmc_params(1)
        assert lmc_params(8) == lmc_params(4)

    def test_unknown_id_uses_default(self):
        assert lmc_params(0) == DEFAULT_LMC
        assert lmc_params(42) == DEFAULT_LMC


class TestGalaxyPotential:
    """Test the composite time-dependent field."""

    def test_superposition_order_independent(self, origin):
        forward = GalaxyPotential(origin, origin, mw_components=MW_COMPONENTS)
        backward = GalaxyPotential(origin, origin,
                                   mw_components=tuple(reversed(MW_COMPONENTS)))
        positions = np.array([[8.0, 0.0, 0.0], [1.0, 2.0, 0.5], [-30.0, 10.0, 20.0]])
        assert np.allclose(forward.acceleration(positions, 0.0),
                           backward.acceleration(positions, 0.0),
                           rtol=1e-12, atol=0.0)

    def test_total_is_mw_plus_lmc(self):
        mw = static_centre([0.0, 0.0, 0.0])
        lmc = static_centre([-1.0, -41.0, -28.0])
        potential = GalaxyPotential(mw, lmc, trajectory_id=3)
        pos = np.array([10.0, 5.0, -3.0])
        total = potential.acceleration(pos, 0.0)
        assert np.allclose(total, potential.mw_acceleration(pos, 0.0)
                           + potential.lmc_acceleration(pos, 0.0))

    def test_evaluated_relative_to_moving_centre(self):
        """Field follows the interpolated centre."""
        comp = Hernquist(mass=1e10, scale=0.5)
        mw = TrajectoryInterpolator([0.0, 10.0], [[0, 0, 0], [10, 0, 0]],
                                    [[0, 0, 0], [0, 0, 0]],
                                    time_factor=1.0, velocity_factor=1.0)
        lmc = static_centre([0.0, 0.0, 0.0])
        potential = GalaxyPotential(mw, lmc, mw_components=[comp],
                                    lmc_component=Hernquist(mass=0.0, scale=1.0))
        a = potential.acceleration([7.0, 0.0, 0.0], 5.0)
        assert np.allclose(a, comp.evaluate([2.0, 0.0, 0.0]))

    def test_lmc_selected_by_trajectory_id(self, origin):
        potential = GalaxyPotential(origin, origin, trajectory_id=3)
        assert potential.lmc_component == LMC_HEAVY.to_component()

    def test_explicit_lmc_component(self, origin):
        comp = Hernquist(mass=1.0, scale=1.0)
        potential = GalaxyPotential(origin, origin, lmc_component=comp)
        assert potential.lmc_component is comp

    def test_centres(self):
        mw = static_centre([1.0, 2.0, 3.0])
        lmc = static_centre([4.0, 5.0, 6.0])
        mw_c, lmc_c = GalaxyPotential(mw, lmc).centres(0.0)
        assert np.allclose(mw_c, [1, 2, 3])
        assert np.allclose(lmc_c, [4, 5, 6])

    def test_factories(self, origin):
        full = milky_way_lmc(origin, origin, trajectory_id=2)
        bare = milky_way_only(origin, origin)
        pos = np.array([8.0, 0.0, 0.0])
        assert np.allclose(bare.lmc_acceleration(pos, 0.0), 0.0)
        assert np.allclose(full.mw_acceleration(pos, 0.0), bare.acceleration(pos, 0.0))

    def test_mw_mass_is_signed_sum(self, origin):
        potential = GalaxyPotential(origin, origin)
        assert np.isclose(potential.mw_mass, sum(c.mass for c in MW_COMPONENTS))

    def test_summary_prints(self, origin, capsys):
        GalaxyPotential(origin, origin).summary()
        out = capsys.readouterr().out
        assert "Miyamoto-Nagai" in out
        assert "LMC" in out


class TestGalaxyPotentialErrors:
    """Test construction errors."""

    def test_no_components(self, origin):
        with pytest.raises(ValueError, match="At least one"):
            GalaxyPotential(origin, origin, mw_components=[])

    def test_bad_component(self, origin):
        with pytest.raises(TypeError, match="Unknown potential component"):
            GalaxyPotential(origin, origin, mw_components=["bulge"])

    def test_bad_lmc_component(self, origin):
        with pytest.raises(TypeError, match="LMC component"):
            GalaxyPotential(origin, origin, lmc_component=NFW(1e10, 1.0))

    def test_bad_interpolator(self, origin):
        with pytest.raises(TypeError, match="interpolator"):
            GalaxyPotential(object(), origin)

    def test_empty_interpolator_warns(self, origin):
        with pytest.warns(DataUnavailableWarning):
            potential = GalaxyPotential(TrajectoryInterpolator(), origin)
        assert np.allclose(potential.centres(0.0)[0], 0.0)
