"""
Test suite for InitialConditionSampler.

Tests cover:
- Sample statistics against the star's mean and covariance
- Correlated covariances
- Disabled sampling determinism
- Seeded reproducibility
- Degenerate covariance fallback
- Argument validation
"""

import pytest
import numpy as np
from hvsim import (
    InitialConditionSampler, PhaseSpacePoint, StarRecord, generate_samples,
    NumericalDegeneracyWarning
)
from hvsim.constants import KM_S_TO_KPC_MYR


POS_SIGMA = np.array([1.0, 2.0, 0.5])
VEL_SIGMA = np.array([10.0, 20.0, 5.0])


@pytest.fixture
def star():
    """Star with a diagonal covariance."""
    cov = np.diag(np.concatenate([POS_SIGMA, VEL_SIGMA]) ** 2)
    return StarRecord(id=1, name="HVS 1", source_id=1001,
                      mean_position=[10.0, -5.0, 2.0],
                      mean_velocity=[0.0, 300.0, -50.0],
                      covariance=cov)


@pytest.fixture
def correlated_star():
    cov = np.eye(6)
    cov[0, 1] = cov[1, 0] = 0.8
    return StarRecord(id=2, name="HVS 2", source_id=1002,
                      mean_position=[0.0, 0.0, 0.0],
                      mean_velocity=[0.0, 0.0, 0.0],
                      covariance=cov)


class TestStatistics:
    """Sample moments match the input distribution."""

    N = 10000

    def test_shapes(self, star):
        positions, velocities = InitialConditionSampler(rng=1).sample_arrays(star, 50)
        assert positions.shape == (50, 3)
        assert velocities.shape == (50, 3)

    def test_position_moments(self, star):
        positions, _ = InitialConditionSampler(rng=42).sample_arrays(star, self.N)
        assert np.all(np.abs(positions.mean(axis=0) - star.mean_position)
                      < 4 * POS_SIGMA / np.sqrt(self.N))
        assert np.allclose(positions.std(axis=0), POS_SIGMA, rtol=0.05)

    def test_velocity_moments_in_kpc_per_myr(self, star):
        _, velocities = InitialConditionSampler(rng=42).sample_arrays(star, self.N)
        expected_mean = star.mean_velocity * KM_S_TO_KPC_MYR
        expected_std = VEL_SIGMA * KM_S_TO_KPC_MYR
        assert np.all(np.abs(velocities.mean(axis=0) - expected_mean)
                      < 4 * expected_std / np.sqrt(self.N))
        assert np.allclose(velocities.std(axis=0), expected_std, rtol=0.05)

    def test_correlation(self, correlated_star):
        positions, _ = InitialConditionSampler(rng=3).sample_arrays(
            correlated_star, self.N
        )
        corr = np.corrcoef(positions[:, 0], positions[:, 1])[0, 1]
        assert abs(corr - 0.8) < 0.03

    def test_independent_axes(self, star):
        positions, _ = InitialConditionSampler(rng=4).sample_arrays(star, self.N)
        corr = np.corrcoef(positions[:, 0], positions[:, 2])[0, 1]
        assert abs(corr) < 0.05


class TestDisabledSampling:
    """Disabled sampling places every sample at the mean."""

    def test_bit_identical_to_mean(self, star):
        sampler = InitialConditionSampler(rng=0, disable_sampling=True)
        positions, velocities = sampler.sample_arrays(star, 20)
        mean_velocity = star.mean_velocity * KM_S_TO_KPC_MYR
        for pos, vel in zip(positions, velocities):
            assert np.array_equal(pos, star.mean_position)
            assert np.array_equal(vel, mean_velocity)

    def test_independent_of_seed(self, star):
        a = generate_samples(star, 5, rng=1, disable_sampling=True)
        b = generate_samples(star, 5, rng=2, disable_sampling=True)
        for p, q in zip(a, b):
            assert np.array_equal(p.state, q.state)

    def test_ignores_degenerate_covariance(self):
        star = StarRecord(id=3, name="HVS 3", source_id=3,
                          mean_position=[1, 2, 3], mean_velocity=[4, 5, 6])
        sampler = InitialConditionSampler(disable_sampling=True)
        positions, _ = sampler.sample_arrays(star, 3)
        assert np.array_equal(positions, np.tile([1.0, 2.0, 3.0], (3, 1)))


class TestReproducibility:
    """Seeded generators give identical ensembles."""

    def test_same_seed(self, star):
        a = InitialConditionSampler(rng=11).sample_arrays(star, 100)
        b = InitialConditionSampler(rng=11).sample_arrays(star, 100)
        assert np.array_equal(a[0], b[0])
        assert np.array_equal(a[1], b[1])

    def test_different_seed(self, star):
        a, _ = InitialConditionSampler(rng=11).sample_arrays(star, 100)
        b, _ = InitialConditionSampler(rng=12).sample_arrays(star, 100)
        assert not np.array_equal(a, b)

    def test_accepts_generator(self, star):
        rng = np.random.default_rng(8)
        sampler = InitialConditionSampler(rng=rng)
        assert sampler.rng is rng

    def test_sample_returns_points(self, star):
        samples = generate_samples(star, 4, rng=0)
        assert len(samples) == 4
        assert all(isinstance(s, PhaseSpacePoint) for s in samples)


class TestDegenerateCovariance:
    """Zero covariance falls back to a tiny spread around the mean."""

    def test_zero_covariance_warns(self):
        star = StarRecord(id=4, name="HVS 4", source_id=4,
                          mean_position=[8.0, 0.0, 0.0],
                          mean_velocity=[0.0, 0.0, 0.0])
        with pytest.warns(NumericalDegeneracyWarning):
            positions, _ = InitialConditionSampler(rng=0).sample_arrays(star, 100)
        assert np.allclose(positions, [8.0, 0.0, 0.0], atol=1e-4)


class TestValidation:
    """Test sample count validation."""

    @pytest.mark.parametrize("n", [0, -5])
    def test_non_positive(self, star, n):
        with pytest.raises(ValueError, match="positive"):
            InitialConditionSampler().sample_arrays(star, n)

    @pytest.mark.parametrize("n", [2.5, "10", True])
    def test_non_integer(self, star, n):
        with pytest.raises(TypeError, match="integer"):
            InitialConditionSampler().sample_arrays(star, n)

    def test_numpy_integer_accepted(self, star):
        positions, _ = InitialConditionSampler(rng=0).sample_arrays(star, np.int64(3))
        assert positions.shape == (3, 3)
