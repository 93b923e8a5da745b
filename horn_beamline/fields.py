from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union, overload

import numpy as np
import numpy.typing as npt

from . import reference
from .common_types import Point4, Vector3
from .constants import mu0, singularity_radius, twopi
from .errors import ConfigurationError
from .field_options import HornPolarity
from .layout import BeamlineLayout, ElementPlacement
from .numba_functions import (
    _dipole_field_scalar,
    _toroidal_field_1d,
    _toroidal_field_scalar,
)
from .utils import check_finite_non_negative, check_finite_positive

__all__ = [
    "MagneticField",
    "ToroidalHornField",
    "UniformDipoleField",
    "DipoleEntry",
    "PlacedDipole",
    "DipoleChain",
]


class MagneticField(ABC):
    """
    Base class for static magnetic field laws.

    Field laws are immutable after construction; every evaluation is a pure
    function of the point and the configuration, so a single instance can be shared
    between threads without locking.
    """

    @overload
    def magnetic_field(self, x: float, y: float, z: float) -> Vector3: ...

    @overload
    def magnetic_field(
        self,
        x: npt.NDArray[np.float64],
        y: npt.NDArray[np.float64],
        z: npt.NDArray[np.float64],
    ) -> Tuple[
        npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]
    ]: ...

    @abstractmethod
    def magnetic_field(self, x, y, z):
        raise NotImplementedError

    def evaluate(self, point: Sequence[float]) -> Vector3:
        """
        Field at a single point

        Args:
            point (Sequence[float]): x, y, z coordinates [m]

        Returns:
            Tuple[float, float, float]: Bx, By, Bz [T]
        """
        x, y, z = point[0], point[1], point[2]
        return self.magnetic_field(float(x), float(y), float(z))

    def get_field_value(self, point: Point4) -> Vector3:
        """
        Field at a space-time point (x, y, z, t), the signature used by trajectory
        integrators. Time is unused, all fields are static.

        Args:
            point (Sequence[float]): x, y, z [m] and t [s]

        Returns:
            Tuple[float, float, float]: Bx, By, Bz [T]
        """
        return self.evaluate(point)

    def field(self, t: float, x: float, y: float, z: float) -> Vector3:
        """
        Field at x, y, z with the (t, x, y, z) argument order of force functions

        Args:
            t (float): time [s], unused
            x (float): x coordinate [m]
            y (float): y coordinate [m]
            z (float): z coordinate [m]

        Returns:
            Tuple[float, float, float]: Bx, By, Bz [T]
        """
        return self.magnetic_field(x, y, z)


def _as_flat_arrays(
    x, y, z
) -> Tuple[
    npt.NDArray[np.float64], npt.NDArray[np.float64], Tuple[int, ...]
]:
    _x, _y, _z = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64),
        np.asarray(y, dtype=np.float64),
        np.asarray(z, dtype=np.float64),
    )
    return (
        np.ascontiguousarray(_x).ravel(),
        np.ascontiguousarray(_y).ravel(),
        _x.shape,
    )


@dataclass(frozen=True)
class ToroidalHornField(MagneticField):
    """
    Azimuthal field in the gap between the inner and outer conductor of a magnetic
    horn.

    From Ampère's law for a current I flowing along the inner conductor:
        B = μ0 * I / (2π * r)
    with r = sqrt(x**2 + y**2). In cartesian coordinates:
        Bx = -B * y/r
        By = B * x/r
        Bz = 0
    The field does not depend on z, the horn shape only determines where the field
    is attached. A negative current reverses the circulation. Within
    `singularity_radius` of the axis the field is set to zero.

    Attributes:
        peak_current (float): current through the inner conductor [A]
    """

    peak_current: float

    def __post_init__(self):
        if not math.isfinite(self.peak_current):
            raise ConfigurationError(
                f"peak_current must be finite, got {self.peak_current}"
            )
        object.__setattr__(self, "peak_current", float(self.peak_current))

    @classmethod
    def with_polarity(
        cls, peak_current: float, polarity: HornPolarity = HornPolarity.forward
    ) -> ToroidalHornField:
        """
        Horn field with the current direction set by `polarity`

        Args:
            peak_current (float): current magnitude as configured [A]
            polarity (HornPolarity, optional): current direction. Defaults to
                                               HornPolarity.forward.

        Returns:
            ToroidalHornField: field law with current polarity.sign * peak_current
        """
        return cls(polarity.sign * peak_current)

    def magnitude_at(self, r: float) -> float:
        """
        Field magnitude at distance r from the axis

        Args:
            r (float): radial distance [m]

        Returns:
            float: |B| [T]
        """
        if r < singularity_radius:
            return 0.0
        return abs(mu0 * self.peak_current) / (twopi * r)

    def magnetic_field(self, x, y, z):
        """
        Calculate the toroidal field at x, y, z

        Args:
            x (Union[NDArray[np.float64], float]): x coordinate(s) [m]
            y (Union[NDArray[np.float64], float]): y coordinate(s) [m]
            z (Union[NDArray[np.float64], float]): z coordinate(s) [m]

        Returns:
            Tuple: Bx, By, Bz [T]
        """
        if np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0:
            return _toroidal_field_scalar(
                float(x), float(y), self.peak_current, mu0, singularity_radius
            )
        _x, _y, shape = _as_flat_arrays(x, y, z)
        bx, by, bz = _toroidal_field_1d(
            _x, _y, self.peak_current, mu0, singularity_radius
        )
        return (bx.reshape(shape), by.reshape(shape), bz.reshape(shape))


@dataclass(frozen=True)
class UniformDipoleField(MagneticField):
    """
    Uniform transverse field, rotated in the xy plane by `angle_deg` measured from
    the +y axis towards +x:
        Bx = B * sin(θ)
        By = B * cos(θ)
        Bz = 0
    The field is the same at every point; it is only meaningful inside the box it
    is attached to.

    Attributes:
        magnitude (float): field strength [T]
        angle_deg (float): rotation of the field in the xy plane [deg]
    """

    magnitude: float
    angle_deg: float = 0.0

    def __post_init__(self):
        for name in ("magnitude", "angle_deg"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, float(value))

    @property
    def field_vector(self) -> Vector3:
        return _dipole_field_scalar(self.magnitude, self.angle_deg)

    def magnetic_field(self, x, y, z):
        """
        Calculate the dipole field at x, y, z

        Args:
            x (Union[NDArray[np.float64], float]): x coordinate(s) [m]
            y (Union[NDArray[np.float64], float]): y coordinate(s) [m]
            z (Union[NDArray[np.float64], float]): z coordinate(s) [m]

        Returns:
            Tuple: Bx, By, Bz [T]
        """
        bx, by, bz = self.field_vector
        if np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0:
            return (bx, by, bz)
        shape = np.broadcast_shapes(np.shape(x), np.shape(y), np.shape(z))
        return (np.full(shape, bx), np.full(shape, by), np.full(shape, bz))


@dataclass(frozen=True)
class DipoleEntry:
    """
    Dipole of a chain before placement.

    Attributes:
        field (UniformDipoleField): field law of the dipole
        half_length (float): half of the box length along z [m]
        gap_before (float): free space upstream of the box [m]
        half_width (float): half of the transverse box size [m]
        name (str): name of the dipole
    """

    field: UniformDipoleField
    half_length: float
    gap_before: float = 0.0
    half_width: float = math.inf
    name: str = ""

    def __post_init__(self):
        check_finite_positive("half_length", self.half_length)
        check_finite_non_negative("gap_before", self.gap_before)
        if not self.half_width > 0:
            raise ConfigurationError(
                f"half_width must be positive, got {self.half_width}"
            )


@dataclass(frozen=True)
class PlacedDipole:
    """
    Dipole box at its absolute position, also the field region a beamline attaches
    the box field to.

    Attributes:
        name (str): name of the dipole
        field (UniformDipoleField): field law owned by this box
        z_center (float): z position of the box center [m]
        half_length (float): half of the box length along z [m]
        half_width (float): half of the transverse box size [m]
    """

    name: str
    field: UniformDipoleField
    z_center: float
    half_length: float
    half_width: float = math.inf

    @property
    def z_start(self) -> float:
        return self.z_center - self.half_length

    @property
    def z_stop(self) -> float:
        return self.z_center + self.half_length

    def contains(self, x: float, y: float, z: float) -> bool:
        return (
            self.z_start <= z <= self.z_stop
            and abs(x) <= self.half_width
            and abs(y) <= self.half_width
        )


class DipoleChain:
    """
    Sequence of uniform dipole boxes at increasing z, each with its own field
    orientation. The reference chain rotates the field by 0°, 120° and 240°, a
    three-fold symmetric chicane that returns nominal momentum particles to the axis
    while separating off-momentum particles.

    Args:
        entries (Iterable): `DipoleEntry` records or (field, half_length, gap_before)
                            tuples, upstream first

    Raises:
        ConfigurationError: fewer than three dipoles or invalid dimensions
    """

    min_dipoles: int = 3

    def __init__(
        self,
        entries: Iterable[
            Union[DipoleEntry, Tuple[UniformDipoleField, float, float]]
        ],
    ) -> None:
        _entries = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, DipoleEntry):
                entry = DipoleEntry(*entry)
            if not entry.name:
                entry = DipoleEntry(
                    entry.field,
                    entry.half_length,
                    entry.gap_before,
                    entry.half_width,
                    f"dipole_{index}",
                )
            _entries.append(entry)
        if len(_entries) < self.min_dipoles:
            raise ConfigurationError(
                f"a dipole chain needs at least {self.min_dipoles} dipoles, got "
                f"{len(_entries)}"
            )
        self._entries: Tuple[DipoleEntry, ...] = tuple(_entries)

    @classmethod
    def from_angles(
        cls,
        magnitude: float,
        angles_deg: Sequence[float] = reference.dipole_angles_deg,
        half_length: float = reference.dipole_half_length,
        gap_before: float = reference.dipole_gap,
        half_width: float = reference.dipole_half_width,
        names: Optional[Sequence[str]] = None,
    ) -> DipoleChain:
        """
        Chain of identical boxes with equal field strength and the given field
        angles

        Args:
            magnitude (float): field strength of every dipole [T]
            angles_deg (Sequence[float], optional): field angle of each dipole [deg].
                                                    Defaults to (0, 120, 240).
            half_length (float, optional): half of the box length [m]
            gap_before (float, optional): gap upstream of every box [m]
            half_width (float, optional): half of the transverse box size [m]
            names (Optional[Sequence[str]], optional): one name per dipole. Defaults
                                                       to dipole_0, dipole_1, ...

        Raises:
            ConfigurationError: number of names differs from the number of angles

        Returns:
            DipoleChain: chain with one dipole per angle
        """
        if names is None:
            names = [""] * len(angles_deg)
        elif len(names) != len(angles_deg):
            raise ConfigurationError(
                f"got {len(names)} names for {len(angles_deg)} dipoles"
            )
        return cls(
            DipoleEntry(
                UniformDipoleField(magnitude, angle),
                half_length,
                gap_before,
                half_width,
                name,
            )
            for angle, name in zip(angles_deg, names)
        )

    @classmethod
    def reference(cls, magnitude: float) -> DipoleChain:
        """
        Reference three-fold chicane: 50 cm boxes rotated by 0°, 120° and 240°,
        separated by 50 cm and named dipole_A, dipole_B and dipole_C

        Args:
            magnitude (float): field strength of every dipole [T]

        Returns:
            DipoleChain: reference chain
        """
        return cls.from_angles(magnitude, names=reference.dipole_names)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> Tuple[DipoleEntry, ...]:
        return self._entries

    @property
    def fields(self) -> List[UniformDipoleField]:
        return [entry.field for entry in self._entries]

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def place(
        self, layout: BeamlineLayout, start: Optional[float] = None
    ) -> Tuple[PlacedDipole, ...]:
        """
        Place the dipoles one after the other

        Args:
            layout (BeamlineLayout): layout of the enclosing world
            start (Optional[float], optional): z position the first gap is measured
                                               from [m]. Defaults to the upstream
                                               edge of the world.

        Returns:
            Tuple[PlacedDipole, ...]: dipoles with absolute positions
        """
        placed = layout.place(
            [
                ElementPlacement(e.half_length, e.gap_before, e.name)
                for e in self._entries
            ],
            start=start,
        )
        return tuple(
            PlacedDipole(p.name, e.field, p.z_center, e.half_length, e.half_width)
            for p, e in zip(placed, self._entries)
        )

    @staticmethod
    def field_at(
        placed: Sequence[PlacedDipole], x: float, y: float, z: float
    ) -> Vector3:
        """
        Field of the placed dipole containing x, y, z, zero outside all boxes

        Args:
            placed (Sequence[PlacedDipole]): placed dipoles
            x (float): x coordinate [m]
            y (float): y coordinate [m]
            z (float): z coordinate [m]

        Returns:
            Tuple[float, float, float]: Bx, By, Bz [T]
        """
        for dipole in placed:
            if dipole.contains(x, y, z):
                return dipole.field.magnetic_field(x, y, z)
        return (0.0, 0.0, 0.0)
