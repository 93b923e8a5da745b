import math

import numpy as np
import pytest

from horn_beamline.errors import ConfigurationError
from horn_beamline.layout import BeamlineLayout, ElementPlacement


def test_place_single_and_second_element():
    layout = BeamlineLayout(-150.0)
    assert layout.place([(75.0, 0.0)])[0].z_center == -75.0

    placed = layout.place([(75.0, 0.0), (25.0, 50.0)])
    assert [p.z_center for p in placed] == [-75.0, 75.0]
    assert placed[0].z_start == -150.0
    assert placed[1].z_stop == 100.0


def test_place_keeps_order_without_overlap():
    layout = BeamlineLayout.from_world_half_length(150.0)
    elements = [
        ElementPlacement(0.75, 0.0, "target"),
        ElementPlacement(1.5, 0.3, "horn"),
        ElementPlacement(0.25, 0.5, "dipole_A"),
        ElementPlacement(0.25, 0.5, "dipole_B"),
        ElementPlacement(0.25, 0.0, "dipole_C"),
    ]
    placed = layout.place(elements)
    assert [p.name for p in placed] == [e.name for e in elements]
    for first, second, element in zip(placed[:-1], placed[1:], elements[1:]):
        assert second.z_center > first.z_center
        assert math.isclose(second.z_start - first.z_stop, element.gap_before, abs_tol=1e-9)


def test_place_default_names_and_start():
    layout = BeamlineLayout(0.0, 10.0)
    placed = layout.place([(1.0, 0.0), (1.0, 1.0)], start=2.0)
    assert [p.name for p in placed] == ["element_0", "element_1"]
    assert [p.z_center for p in placed] == [3.0, 6.0]

    with pytest.raises(ConfigurationError):
        layout.place([(1.0, 0.0)], start=-1.0)


def test_z_centers():
    layout = BeamlineLayout(-150.0, 150.0)
    z = layout.z_centers([(0.75, 0.0), (0.25, 0.5), (0.25, 0.5), (0.25, 0.5)])
    assert isinstance(z, np.ndarray)
    assert np.allclose(z, [-149.25, -147.75, -146.75, -145.75])


def test_place_rejects_negative_lengths():
    layout = BeamlineLayout(-150.0, 150.0)
    with pytest.raises(ConfigurationError):
        layout.place([(-1.0, 0.0)])
    with pytest.raises(ConfigurationError):
        layout.place([(1.0, 0.0), (1.0, -0.1)])
    with pytest.raises(ConfigurationError):
        ElementPlacement(math.nan)


def test_place_rejects_world_overflow():
    layout = BeamlineLayout(-150.0, 150.0)
    with pytest.raises(ConfigurationError):
        layout.place([(75.0, 0.0), (25.0, 150.0)])
    # exactly touching the world boundary is allowed
    placed = layout.place([(75.0, 0.0), (75.0, 0.0)])
    assert placed[-1].z_stop == 150.0


def test_world_bounds():
    with pytest.raises(ConfigurationError):
        BeamlineLayout(1.0, 1.0)
    with pytest.raises(ConfigurationError):
        BeamlineLayout(math.nan)
    assert BeamlineLayout(-1.0).place([]) == []


def test_place_rejects_zero_length_elements():
    layout = BeamlineLayout(0.0, 10.0)
    with pytest.raises(ConfigurationError):
        layout.place([(0.0, 0.0), (0.0, 0.0)])
    with pytest.raises(ConfigurationError):
        ElementPlacement(0.0, 1.0)
    # zero gaps stay allowed
    placed = layout.place([(1.0, 0.0), (1.0, 0.0)])
    assert placed[1].z_center > placed[0].z_center
    assert placed[1].z_start == placed[0].z_stop


def test_world_start_must_be_finite():
    with pytest.raises(ConfigurationError):
        BeamlineLayout(-math.inf)
    with pytest.raises(ConfigurationError):
        BeamlineLayout(-math.inf, 10.0)
    assert BeamlineLayout(0.0).world_z_max == math.inf
