from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import numpy as np
import numpy.typing as npt

from .errors import ConfigurationError
from .utils import (
    bounds_check_tolerance,
    check_finite_non_negative,
    check_finite_positive,
)

__all__: List[str] = ["ElementPlacement", "PlacedElement", "BeamlineLayout"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementPlacement:
    """
    Longitudinal extent of an element to be placed.

    Attributes:
        half_length (float): half of the element length along z, positive [m]
        gap_before (float): free space between the previous element (or the start of
                            the layout) and this element [m]
        name (str): name of the element
    """

    half_length: float
    gap_before: float = 0.0
    name: str = ""

    def __post_init__(self):
        object.__setattr__(
            self, "half_length", check_finite_positive("half_length", self.half_length)
        )
        object.__setattr__(
            self, "gap_before", check_finite_non_negative("gap_before", self.gap_before)
        )


@dataclass(frozen=True)
class PlacedElement:
    """
    Element with its absolute longitudinal position.

    Attributes:
        name (str): name of the element
        z_center (float): absolute z position of the element center [m]
        half_length (float): half of the element length along z [m]
    """

    name: str
    z_center: float
    half_length: float

    @property
    def z_start(self) -> float:
        return self.z_center - self.half_length

    @property
    def z_stop(self) -> float:
        return self.z_center + self.half_length


class BeamlineLayout:
    """
    Places elements back to back along z inside a world volume, in declaration
    order, separated by the requested gaps.

    Args:
        world_z_min (float): upstream edge of the world, finite [m]
        world_z_max (float, optional): downstream edge of the world [m]. Defaults to
                                       unbounded.
    """

    def __init__(self, world_z_min: float, world_z_max: float = math.inf) -> None:
        if not math.isfinite(world_z_min):
            raise ConfigurationError(f"world_z_min must be finite, got {world_z_min}")
        if math.isnan(world_z_max):
            raise ConfigurationError("world_z_max must not be NaN")
        if not world_z_max > world_z_min:
            raise ConfigurationError(
                f"world_z_max ({world_z_max}) must be larger than world_z_min "
                f"({world_z_min})"
            )
        self.world_z_min = float(world_z_min)
        self.world_z_max = float(world_z_max)

    @classmethod
    def from_world_half_length(cls, half_length: float) -> BeamlineLayout:
        """
        Layout for a world centered on z = 0

        Args:
            half_length (float): half of the world length along z [m]

        Returns:
            BeamlineLayout: layout spanning [-half_length, half_length]
        """
        return cls(-half_length, half_length)

    def __repr__(self) -> str:
        return f"BeamlineLayout(world_z_min={self.world_z_min}, world_z_max={self.world_z_max})"

    @staticmethod
    def _to_placement(element: Any) -> ElementPlacement:
        if isinstance(element, ElementPlacement):
            return element
        if hasattr(element, "half_length") and hasattr(element, "gap_before"):
            return ElementPlacement(
                element.half_length, element.gap_before, getattr(element, "name", "")
            )
        return ElementPlacement(*element)

    def place(
        self, elements: Sequence[Any], start: Optional[float] = None
    ) -> List[PlacedElement]:
        """
        Compute the z centers of elements placed one after the other.

        z_center[0] = start + gap_before[0] + half_length[0]
        z_center[i] = z_center[i-1] + half_length[i-1] + gap_before[i] + half_length[i]

        Args:
            elements (Sequence): `ElementPlacement` records, (half_length, gap_before)
                                 tuples or any object with `half_length` and
                                 `gap_before` attributes
            start (Optional[float], optional): z position the first gap is measured
                                               from [m]. Defaults to world_z_min.

        Raises:
            ConfigurationError: non-positive half-length, negative gap, or an
                                element that does not fit inside the world

        Returns:
            List[PlacedElement]: placed elements in declaration order
        """
        if start is None:
            start = self.world_z_min
        elif not bounds_check_tolerance(start, self.world_z_min, self.world_z_max):
            raise ConfigurationError(
                f"layout start {start} is outside the world "
                f"[{self.world_z_min}, {self.world_z_max}]"
            )

        placed: List[PlacedElement] = []
        z_center = 0.0
        for index, element in enumerate(elements):
            placement = self._to_placement(element)
            if index == 0:
                z_center = start + placement.gap_before + placement.half_length
            else:
                z_center = (
                    z_center
                    + placed[-1].half_length
                    + placement.gap_before
                    + placement.half_length
                )
            name = placement.name or f"element_{index}"
            element_placed = PlacedElement(name, z_center, placement.half_length)
            if not bounds_check_tolerance(
                element_placed.z_stop, self.world_z_min, self.world_z_max
            ):
                raise ConfigurationError(
                    f"{name} ends at z = {element_placed.z_stop}, beyond the world "
                    f"bound z = {self.world_z_max}"
                )
            logger.debug(
                "placed %s at z = %.6g (half length %.6g)",
                name,
                z_center,
                placement.half_length,
            )
            placed.append(element_placed)
        return placed

    def z_centers(
        self, elements: Sequence[Any], start: Optional[float] = None
    ) -> npt.NDArray[np.float64]:
        """
        z centers of the placed elements

        Args:
            elements (Sequence): elements as accepted by `place`
            start (Optional[float], optional): see `place`

        Returns:
            np.ndarray: z center of every element [m]
        """
        return np.array(
            [p.z_center for p in self.place(elements, start=start)], dtype=np.float64
        )
