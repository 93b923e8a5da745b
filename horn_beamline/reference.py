"""
Reference beamline configuration: graphite target followed by a three-fold dipole
chicane inside a 300 m long world. These are configuration defaults kept for
compatibility with earlier simulation runs, not derived quantities.
"""

from typing import Tuple

from .constants import cm, m

__all__ = [
    "world_half_length",
    "world_half_width",
    "target_half_length",
    "target_radius",
    "dipole_angles_deg",
    "dipole_names",
    "dipole_half_length",
    "dipole_half_width",
    "dipole_gap",
]

world_half_length: float = 0.5 * 300.0 * m
world_half_width: float = 0.5 * 20.0 * m

target_half_length: float = 0.5 * 1.5 * m
target_radius: float = 0.85 * cm

dipole_angles_deg: Tuple[float, ...] = (0.0, 120.0, 240.0)
dipole_names: Tuple[str, ...] = ("dipole_A", "dipole_B", "dipole_C")
dipole_half_length: float = 0.5 * 50.0 * cm
dipole_half_width: float = 0.5 * 50.0 * cm
dipole_gap: float = 0.5 * m
