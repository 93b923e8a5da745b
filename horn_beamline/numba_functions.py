import math

import numba as nb
import numpy as np
import numpy.typing as npt


@nb.njit
def _toroidal_field_scalar(
    x: float, y: float, current: float, mu0: float, r_min: float
) -> tuple[float, float, float]:
    """Azimuthal field of an axial current at a single point."""
    r = math.sqrt(x * x + y * y)
    if r < r_min:
        return (0.0, 0.0, 0.0)
    b = (mu0 * current) / (2.0 * math.pi * r)
    return (-b * (y / r), b * (x / r), 0.0)


@nb.njit
def _toroidal_field_1d(
    x: npt.NDArray[np.float64],
    y: npt.NDArray[np.float64],
    current: float,
    mu0: float,
    r_min: float,
) -> tuple[
    npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]
]:
    """Azimuthal field of an axial current for 1-D coordinate arrays."""
    bx = np.zeros_like(x)
    by = np.zeros_like(x)
    bz = np.zeros_like(x)
    for i in range(x.shape[0]):
        fx, fy, fz = _toroidal_field_scalar(x[i], y[i], current, mu0, r_min)
        bx[i] = fx
        by[i] = fy
        bz[i] = fz
    return bx, by, bz


@nb.njit
def _dipole_field_scalar(magnitude: float, angle_deg: float) -> tuple[float, float, float]:
    """Uniform transverse field rotated by `angle_deg` from the +y axis."""
    angle_rad = angle_deg * (math.pi / 180.0)
    return (magnitude * math.sin(angle_rad), magnitude * math.cos(angle_rad), 0.0)
