from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from . import reference
from .common_types import Point4, Vector3
from .errors import AttachmentError, ConfigurationError
from .field_options import FieldIntegrationOptions
from .fields import (
    DipoleChain,
    DipoleEntry,
    MagneticField,
    PlacedDipole,
    ToroidalHornField,
    UniformDipoleField,
)
from .layout import BeamlineLayout, PlacedElement
from .stations import Band, Station, StationProfile
from .utils import check_finite_non_negative, check_finite_positive

__all__ = [
    "TargetSpec",
    "HornSpec",
    "DipoleSpec",
    "FieldRegion",
    "FieldAttachments",
    "Beamline",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetSpec:
    """
    Cylindrical production target, carries no field.

    Attributes:
        name (str): name of the target
        half_length (float): half of the target length [m]
        radius (float): target radius [m]
        gap_before (float): free space upstream of the target [m]
    """

    name: str
    half_length: float = reference.target_half_length
    radius: float = reference.target_radius
    gap_before: float = 0.0

    def __post_init__(self):
        check_finite_positive("half_length", self.half_length)
        check_finite_non_negative("gap_before", self.gap_before)
        if not self.radius > 0:
            raise ConfigurationError(f"target radius must be positive, got {self.radius}")


@dataclass(frozen=True)
class HornSpec:
    """
    Magnetic horn described by a station table with z relative to an arbitrary
    origin; the horn is placed so the midpoint of the table lands on its z center.

    Attributes:
        name (str): name of the horn
        stations (Sequence): (z, r0, r1, r2, r3) rows or `Station` objects [m]
        peak_current (float): current through the inner conductor [A]
        gap_before (float): free space upstream of the horn [m]
    """

    name: str
    stations: Sequence[Union[Station, Sequence[float]]]
    peak_current: float
    gap_before: float = 0.0
    relative_profile: StationProfile = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        check_finite_non_negative("gap_before", self.gap_before)
        profile = StationProfile(self.stations)
        object.__setattr__(self, "stations", profile.stations)
        object.__setattr__(self, "relative_profile", profile)

    @property
    def half_length(self) -> float:
        return self.relative_profile.half_length


@dataclass(frozen=True)
class DipoleSpec:
    """
    Box shaped uniform dipole. Consecutive dipole specifications form one
    `DipoleChain` when the beamline is built.

    Attributes:
        name (str): name of the dipole
        magnitude (float): field strength [T]
        angle_deg (float): field angle in the xy plane, from +y towards +x [deg]
        half_length (float): half of the box length [m]
        half_width (float): half of the transverse box size [m]
        gap_before (float): free space upstream of the box [m]
    """

    name: str
    magnitude: float
    angle_deg: float = 0.0
    half_length: float = reference.dipole_half_length
    half_width: float = reference.dipole_half_width
    gap_before: float = reference.dipole_gap

    def __post_init__(self):
        self.to_entry()

    def to_entry(self) -> DipoleEntry:
        return DipoleEntry(
            UniformDipoleField(self.magnitude, self.angle_deg),
            self.half_length,
            self.gap_before,
            self.half_width,
            self.name,
        )


ElementSpec = Union[TargetSpec, HornSpec, DipoleSpec, DipoleChain]


@dataclass(frozen=True)
class FieldRegion:
    """
    Field gap band of a placed horn, the region its toroidal field law is attached
    to.

    Attributes:
        name (str): name of the region
        placement (PlacedElement): longitudinal placement of the horn
        profile (StationProfile): absolute station profile of the horn
    """

    name: str
    placement: PlacedElement
    profile: StationProfile

    def contains(self, x: float, y: float, z: float) -> bool:
        return self.profile.band_at(x, y, z) is Band.field_gap


Region = Union[FieldRegion, PlacedDipole]


class FieldAttachments:
    """
    One-time binding of field laws to regions. Each region takes exactly one field
    law; once `lock` is called, at the start of trajectory integration, no further
    attachments are accepted.
    """

    def __init__(self) -> None:
        self._regions: Dict[str, Region] = {}
        self._fields: Dict[str, MagneticField] = {}
        self._locked = False

    def attach(self, region: Region, field_law: MagneticField) -> None:
        """
        Assign `field_law` to `region`

        Args:
            region (Region): horn field gap or dipole box receiving the field
            field_law (MagneticField): field law evaluated inside the region

        Raises:
            AttachmentError: attachments are locked or the region already has a field
        """
        if self._locked:
            raise AttachmentError(
                f"cannot attach a field to {region.name}, integration has started"
            )
        if region.name in self._fields:
            raise AttachmentError(f"{region.name} already has a field attached")
        self._regions[region.name] = region
        self._fields[region.name] = field_law
        logger.debug("attached %r to region %s", field_law, region.name)

    def lock(self) -> None:
        self._locked = True

    @property
    def locked(self) -> bool:
        return self._locked

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __getitem__(self, name: str) -> MagneticField:
        return self._fields[name]

    def __iter__(self) -> Iterator[Tuple[Region, MagneticField]]:
        return ((self._regions[name], f) for name, f in self._fields.items())

    @property
    def regions(self) -> List[Region]:
        return list(self._regions.values())


class Beamline:
    """
    Builds a beamline from a tagged list of element specifications: places the
    elements along z, constructs the horn station profiles at their placed
    positions, creates the field laws and attaches them to their regions.

    Consecutive `DipoleSpec`s are collected into a `DipoleChain`; a `DipoleChain`
    can also be passed directly. Every dipole section is placed through its chain,
    so each one holds at least `DipoleChain.min_dipoles` boxes.

    Args:
        specs (Sequence[ElementSpec]): target, horn and dipole specifications or
                                       dipole chains, upstream first
        layout (Optional[BeamlineLayout], optional): world layout. Defaults to the
                                                     reference 300 m world.
        options (FieldIntegrationOptions, optional): integration settings and horn
                                                     polarity for all field regions.

    Raises:
        ConfigurationError: invalid or duplicate element specifications, a dipole
                            section with too few dipoles, or elements that do not
                            fit inside the world
    """

    def __init__(
        self,
        specs: Sequence[ElementSpec],
        layout: Optional[BeamlineLayout] = None,
        options: FieldIntegrationOptions = FieldIntegrationOptions(),
    ) -> None:
        if layout is None:
            layout = BeamlineLayout.from_world_half_length(reference.world_half_length)
        specs = tuple(specs)
        sections = self._sections(specs)
        names: List[str] = []
        for section in sections:
            if isinstance(section, DipoleChain):
                names.extend(section.names)
            else:
                names.append(section.name)
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"duplicate element names: {duplicates}")

        self.layout = layout
        self.options = options
        self.specs = specs
        self.chains: Tuple[DipoleChain, ...] = tuple(
            s for s in sections if isinstance(s, DipoleChain)
        )
        self.attachments = FieldAttachments()

        elements: List[PlacedElement] = []
        profiles: Dict[str, StationProfile] = {}
        start: Optional[float] = None
        for section in sections:
            if isinstance(section, DipoleChain):
                for dipole in section.place(layout, start=start):
                    elements.append(
                        PlacedElement(dipole.name, dipole.z_center, dipole.half_length)
                    )
                    self.attachments.attach(dipole, dipole.field)
            else:
                (placement,) = layout.place([section], start=start)
                elements.append(placement)
                if isinstance(section, HornSpec):
                    profiles[section.name] = self._build_horn(section, placement)
            start = elements[-1].z_stop

        self.elements: Tuple[PlacedElement, ...] = tuple(elements)
        self.profiles = MappingProxyType(profiles)

        logger.info(
            "built beamline with %d elements and %d field regions",
            len(self.elements),
            len(self.attachments),
        )

    @staticmethod
    def _sections(
        specs: Sequence[ElementSpec],
    ) -> List[Union[TargetSpec, HornSpec, DipoleChain]]:
        sections: List[Union[TargetSpec, HornSpec, DipoleChain]] = []
        run: List[DipoleSpec] = []
        for spec in specs:
            if not isinstance(spec, (TargetSpec, HornSpec, DipoleSpec, DipoleChain)):
                raise ConfigurationError(f"unknown element specification {spec!r}")
            if isinstance(spec, DipoleSpec):
                run.append(spec)
                continue
            if run:
                sections.append(DipoleChain(s.to_entry() for s in run))
                run = []
            sections.append(spec)
        if run:
            sections.append(DipoleChain(s.to_entry() for s in run))
        return sections

    def _build_horn(self, spec: HornSpec, placement: PlacedElement) -> StationProfile:
        profile = spec.relative_profile.translated(
            placement.z_center - spec.relative_profile.z_center
        )
        region = FieldRegion(f"{spec.name}_field_gap", placement, profile)
        field_law = ToroidalHornField.with_polarity(
            spec.peak_current, self.options.polarity
        )
        self.attachments.attach(region, field_law)
        return profile

    @classmethod
    def reference(
        cls,
        dipole_magnitude: float,
        horns: Sequence[HornSpec] = (),
        options: FieldIntegrationOptions = FieldIntegrationOptions(),
    ) -> Beamline:
        """
        Reference beamline: graphite target at the upstream edge of a 300 m world,
        optional horns, then the three-fold dipole chicane

        Args:
            dipole_magnitude (float): field strength of each dipole [T]
            horns (Sequence[HornSpec], optional): horns placed after the target.
                                                  Defaults to none.
            options (FieldIntegrationOptions, optional): integration settings

        Returns:
            Beamline: the reference beamline
        """
        specs: List[ElementSpec] = [TargetSpec("target")]
        specs.extend(horns)
        specs.append(DipoleChain.reference(dipole_magnitude))
        return cls(specs, options=options)

    def element(self, name: str) -> PlacedElement:
        for placed in self.elements:
            if placed.name == name:
                return placed
        raise KeyError(name)

    @property
    def regions(self) -> List[Region]:
        return self.attachments.regions

    def attach(self, region: Region, field_law: MagneticField) -> None:
        """Attach an extra field law, only possible before `lock`."""
        self.attachments.attach(region, field_law)

    def lock(self) -> None:
        """Freeze the field attachments, call before trajectory integration starts."""
        self.attachments.lock()

    def region_at(self, x: float, y: float, z: float) -> Optional[Region]:
        """
        Field region containing x, y, z; the first region in declaration order wins
        on shared boundaries

        Returns:
            Optional[Region]: region containing the point, None if field free
        """
        for region in self.attachments.regions:
            if region.contains(x, y, z):
                return region
        return None

    def field(self, x: float, y: float, z: float) -> Vector3:
        """
        Field at x, y, z from the region containing the point, zero elsewhere

        Args:
            x (float): x coordinate [m]
            y (float): y coordinate [m]
            z (float): z coordinate [m]

        Returns:
            Tuple[float, float, float]: Bx, By, Bz [T]
        """
        region = self.region_at(x, y, z)
        if region is None:
            return (0.0, 0.0, 0.0)
        return self.attachments[region.name].magnetic_field(x, y, z)

    def get_field_value(self, point: Point4) -> Vector3:
        """Field at a space-time point (x, y, z, t), time is unused."""
        return self.field(float(point[0]), float(point[1]), float(point[2]))
