import math

from scipy import constants

__all__ = ["mu0", "twopi", "singularity_radius", "m", "cm", "mm"]

# lengths are in metres
m = 1.0
cm = 1e-2 * m
mm = 1e-3 * m

mu0: float = constants.mu_0  # vacuum permeability [T*m/A]
twopi: float = 2 * math.pi

# below this distance from the beam axis the toroidal field evaluates to zero
singularity_radius: float = 1.0e-6 * m
