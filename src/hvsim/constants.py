"""
Physical constants and unit conversions.

Canonical units throughout the package are kpc, Myr, kpc/Myr and solar
masses.
"""

# Gravitational constant [kpc^3 / (Msun Myr^2)]
G_KPC_MYR = 4.49831e-12

# 1 km/s expressed in kpc/Myr
KM_S_TO_KPC_MYR = 1.022712e-3

# 1 Gyr expressed in Myr
GYR_TO_MYR = 1000.0

# Diagonal value of the matrix returned when a Cholesky factorization fails
CHOLESKY_FALLBACK_EPSILON = 1e-6

# Number of phase-space dimensions (3 position + 3 velocity)
PHASE_SPACE_DIM = 6
