from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import numpy.typing as npt

from .errors import ConfigurationError

__all__: List[str] = ["Station", "Band", "BandProfile", "StationProfile"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Station:
    """
    Radial profile of a horn at a single longitudinal position.

    Attributes:
        z (float): longitudinal position of the station [m]
        r0 (float): inner radius of the inner conductor [m]
        r1 (float): outer radius of the inner conductor, start of the field gap [m]
        r2 (float): end of the field gap, inner radius of the outer conductor [m]
        r3 (float): outer radius of the outer conductor [m]
    """

    z: float
    r0: float
    r1: float
    r2: float
    r3: float

    def __post_init__(self):
        values = (self.z, self.r0, self.r1, self.r2, self.r3)
        if not all(math.isfinite(v) for v in values):
            raise ConfigurationError(f"station contains non-finite values: {values}")
        if not (0 <= self.r0 < self.r1 < self.r2 < self.r3):
            raise ConfigurationError(
                f"station at z = {self.z} needs 0 <= r0 < r1 < r2 < r3, got "
                f"r0 = {self.r0}, r1 = {self.r1}, r2 = {self.r2}, r3 = {self.r3}"
            )

    @property
    def radii(self) -> Tuple[float, float, float, float]:
        return (self.r0, self.r1, self.r2, self.r3)


class Band(Enum):
    """
    Enum to specify one of the three nested annular bands of a horn

    Attributes
        inner_conductor (int): band between r0 and r1
        field_gap (int): band between r1 and r2, carries the toroidal field
        outer_conductor (int): band between r2 and r3
    """

    inner_conductor = 0
    field_gap = 1
    outer_conductor = 2


@dataclass(frozen=True, eq=False)
class BandProfile:
    """
    Radius pairs of a single band at every station, the layout a body-of-revolution
    (polycone) constructor takes.

    Attributes:
        z (np.ndarray): station positions [m]
        r_inner (np.ndarray): inner radius of the band at each station [m]
        r_outer (np.ndarray): outer radius of the band at each station [m]
    """

    z: npt.NDArray[np.float64]
    r_inner: npt.NDArray[np.float64]
    r_outer: npt.NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.z)

    def as_planes(self) -> List[Tuple[float, float, float]]:
        """
        Profile as a list of (z, r_inner, r_outer) planes

        Returns:
            List[Tuple[float, float, float]]: one plane per station
        """
        return [
            (float(z), float(ri), float(ro))
            for z, ri, ro in zip(self.z, self.r_inner, self.r_outer)
        ]


def _readonly(array: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    array = np.array(array, dtype=np.float64)
    array.flags.writeable = False
    return array


class StationProfile:
    """
    Ordered sequence of stations describing a horn as three nested bodies of
    revolution. Consecutive stations are joined by conical frusta, so the radii of
    each band vary linearly in z between stations.

    Args:
        stations (Iterable): stations as `Station` objects or (z, r0, r1, r2, r3)
                             tuples, ordered by strictly increasing z

    Raises:
        ConfigurationError: fewer than 2 stations, a station with non-increasing
                            radii or stations not ordered by strictly increasing z
    """

    def __init__(self, stations: Iterable[Union[Station, Sequence[float]]]) -> None:
        _stations = tuple(self._to_station(s) for s in stations)
        if len(_stations) < 2:
            raise ConfigurationError(
                f"a station profile needs at least 2 stations, got {len(_stations)}"
            )
        for previous, current in zip(_stations[:-1], _stations[1:]):
            if not current.z > previous.z:
                raise ConfigurationError(
                    "station z positions must be strictly increasing, got "
                    f"z = {previous.z} followed by z = {current.z}"
                )

        self._stations = _stations
        table = np.array([(s.z, *s.radii) for s in _stations], dtype=np.float64)
        self._z = _readonly(table[:, 0])
        self._radii = tuple(_readonly(table[:, i]) for i in range(1, 5))

        r0, r1, r2, r3 = self._radii
        self._bands: Dict[Band, BandProfile] = {
            Band.inner_conductor: BandProfile(self._z, r0, r1),
            Band.field_gap: BandProfile(self._z, r1, r2),
            Band.outer_conductor: BandProfile(self._z, r2, r3),
        }
        logger.debug(
            "station profile with %d stations from z = %.4g to %.4g",
            len(_stations),
            self.z_min,
            self.z_max,
        )

    @staticmethod
    def _to_station(station: Union[Station, Sequence[float]]) -> Station:
        if isinstance(station, Station):
            return station
        values = tuple(station)
        if len(values) != 5:
            raise ConfigurationError(
                f"a station needs 5 values (z, r0, r1, r2, r3), got {values}"
            )
        return Station(*(float(v) for v in values))

    @classmethod
    def from_relative(
        cls, stations: Iterable[Union[Station, Sequence[float]]], z_center: float
    ) -> StationProfile:
        """
        Build a profile from a station table given relative to an arbitrary origin,
        shifted so that its longitudinal midpoint sits at `z_center`

        Args:
            stations (Iterable): relative station table
            z_center (float): absolute position of the profile midpoint [m]

        Returns:
            StationProfile: profile with absolute z positions
        """
        relative = cls(stations)
        return relative.translated(z_center - relative.z_center)

    def translated(self, dz: float) -> StationProfile:
        """
        Copy of the profile moved by `dz` along the beam axis

        Args:
            dz (float): shift in z [m]

        Returns:
            StationProfile: shifted profile
        """
        return StationProfile(
            Station(s.z + dz, s.r0, s.r1, s.r2, s.r3) for s in self._stations
        )

    def __len__(self) -> int:
        return len(self._stations)

    def __iter__(self) -> Iterator[Station]:
        return iter(self._stations)

    def __getitem__(self, index: int) -> Station:
        return self._stations[index]

    def __repr__(self) -> str:
        return (
            f"StationProfile(n={len(self)}, z_min={self.z_min:.4g}, "
            f"z_max={self.z_max:.4g})"
        )

    @property
    def stations(self) -> Tuple[Station, ...]:
        return self._stations

    @property
    def z(self) -> npt.NDArray[np.float64]:
        return self._z

    @property
    def z_min(self) -> float:
        return float(self._z[0])

    @property
    def z_max(self) -> float:
        return float(self._z[-1])

    @property
    def half_length(self) -> float:
        return (self.z_max - self.z_min) / 2

    @property
    def z_center(self) -> float:
        return (self.z_min + self.z_max) / 2

    @property
    def max_radius(self) -> float:
        return float(self._radii[3].max())

    @property
    def inner_conductor(self) -> BandProfile:
        return self._bands[Band.inner_conductor]

    @property
    def field_gap(self) -> BandProfile:
        return self._bands[Band.field_gap]

    @property
    def outer_conductor(self) -> BandProfile:
        return self._bands[Band.outer_conductor]

    def band(self, band: Band) -> BandProfile:
        return self._bands[band]

    def radii_at(self, z: float) -> Optional[Tuple[float, float, float, float]]:
        """
        Radii (r0, r1, r2, r3) at `z`, linearly interpolated between stations

        Args:
            z (float): longitudinal position [m]

        Returns:
            Optional[Tuple[float, float, float, float]]: interpolated radii, None if
                                                         z is outside the profile
        """
        if z < self.z_min or z > self.z_max:
            return None
        r0, r1, r2, r3 = (float(np.interp(z, self._z, r)) for r in self._radii)
        return (r0, r1, r2, r3)

    def band_at(self, x: float, y: float, z: float) -> Optional[Band]:
        """
        Band containing the point x, y, z. Inner edges are inclusive, outer edges
        exclusive, except for the outer edge of the outer conductor.

        Args:
            x (float): x coordinate [m]
            y (float): y coordinate [m]
            z (float): z coordinate [m]

        Returns:
            Optional[Band]: band containing the point, None if outside the horn
        """
        radii = self.radii_at(z)
        if radii is None:
            return None
        r0, r1, r2, r3 = radii
        r = math.hypot(x, y)
        if r0 <= r < r1:
            return Band.inner_conductor
        elif r1 <= r < r2:
            return Band.field_gap
        elif r2 <= r <= r3:
            return Band.outer_conductor
        return None
