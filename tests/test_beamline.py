import numpy as np
import pytest

from horn_beamline.beamline import (
    Beamline,
    DipoleSpec,
    FieldAttachments,
    HornSpec,
    TargetSpec,
)
from horn_beamline.errors import AttachmentError, ConfigurationError
from horn_beamline.field_options import (
    FieldIntegrationOptions,
    HornPolarity,
    StepperType,
)
from horn_beamline.fields import (
    DipoleChain,
    PlacedDipole,
    ToroidalHornField,
    UniformDipoleField,
)
from horn_beamline.layout import BeamlineLayout

horn_stations = [
    (0.0, 0.0, 0.02, 0.15, 0.16),
    (0.5, 0.0, 0.02, 0.15, 0.16),
    (1.0, 0.005, 0.03, 0.20, 0.21),
    (2.0, 0.005, 0.03, 0.20, 0.21),
]


def make_beamline(options=FieldIntegrationOptions()):
    specs = [
        TargetSpec("target"),
        HornSpec("horn_A", horn_stations, 200e3, gap_before=0.3),
        DipoleSpec("dipole_A", 1.0, 0.0),
        DipoleSpec("dipole_B", 1.0, 120.0),
        DipoleSpec("dipole_C", 1.0, 240.0),
    ]
    return Beamline(specs, BeamlineLayout(-150.0, 150.0), options)


def test_beamline_placement():
    beamline = make_beamline()
    names = [p.name for p in beamline.elements]
    assert names == ["target", "horn_A", "dipole_A", "dipole_B", "dipole_C"]
    assert np.allclose(
        [p.z_center for p in beamline.elements],
        [-149.25, -147.2, -145.45, -144.45, -143.45],
    )

    profile = beamline.profiles["horn_A"]
    assert np.isclose(profile.z_min, -148.2)
    assert np.isclose(profile.z_max, -146.2)
    assert np.isclose(profile.z_center, beamline.element("horn_A").z_center)
    with pytest.raises(KeyError):
        beamline.element("horn_B")


def test_beamline_regions():
    beamline = make_beamline()
    assert [r.name for r in beamline.regions] == [
        "horn_A_field_gap",
        "dipole_A",
        "dipole_B",
        "dipole_C",
    ]
    horn_field = beamline.attachments["horn_A_field_gap"]
    assert isinstance(horn_field, ToroidalHornField)
    assert horn_field.peak_current == 200e3
    assert beamline.attachments["dipole_B"] == UniformDipoleField(1.0, 120.0)


def test_beamline_field_lookup():
    beamline = make_beamline()
    z_horn = beamline.profiles["horn_A"].z_center

    # field gap of the horn
    expected = ToroidalHornField(200e3).evaluate((0.1, 0.0, z_horn))
    assert beamline.field(0.1, 0.0, z_horn) == expected
    assert beamline.get_field_value((0.1, 0.0, z_horn, 0.0)) == expected
    # inner conductor, outer conductor and outside the horn
    assert beamline.field(0.01, 0.0, z_horn) == (0.0, 0.0, 0.0)
    assert beamline.field(0.205, 0.0, z_horn) == (0.0, 0.0, 0.0)
    assert beamline.field(0.5, 0.0, z_horn) == (0.0, 0.0, 0.0)
    # target
    assert beamline.field(0.0, 0.0, -149.25) == (0.0, 0.0, 0.0)

    z_b = beamline.element("dipole_B").z_center
    assert np.allclose(beamline.field(0.0, 0.1, z_b), (np.sqrt(3) / 2, -0.5, 0.0))
    assert beamline.region_at(0.0, 0.1, z_b).name == "dipole_B"
    assert beamline.region_at(0.0, 0.0, z_b + 0.5) is None


def test_beamline_polarity():
    beamline = make_beamline(FieldIntegrationOptions(polarity=HornPolarity.reverse))
    z_horn = beamline.profiles["horn_A"].z_center
    forward = ToroidalHornField(200e3).evaluate((0.0, 0.1, z_horn))
    assert np.allclose(beamline.field(0.0, 0.1, z_horn), -np.array(forward))


def test_beamline_attachment_lock():
    beamline = make_beamline()
    region = PlacedDipole("extra", UniformDipoleField(0.5), 100.0, 1.0, 0.1)
    beamline.attach(region, region.field)
    assert "extra" in beamline.attachments

    with pytest.raises(AttachmentError):
        beamline.attach(region, UniformDipoleField(0.1))

    beamline.lock()
    assert beamline.attachments.locked
    other = PlacedDipole("other", UniformDipoleField(0.5), 120.0, 1.0)
    with pytest.raises(AttachmentError):
        beamline.attach(other, other.field)
    assert "other" not in beamline.attachments
    # locking does not change evaluation
    assert np.allclose(beamline.field(0.0, 0.0, 100.0), (0.0, 0.5, 0.0))


def test_field_attachments():
    attachments = FieldAttachments()
    field = UniformDipoleField(1.0, 90.0)
    region = PlacedDipole("box", field, 0.0, 1.0)
    attachments.attach(region, field)
    assert len(attachments) == 1
    assert list(attachments) == [(region, field)]
    assert issubclass(AttachmentError, ConfigurationError)


def test_beamline_rejects_bad_configuration():
    layout = BeamlineLayout(-150.0, 150.0)
    with pytest.raises(ConfigurationError):
        Beamline([TargetSpec("a"), TargetSpec("a")], layout)
    with pytest.raises(ConfigurationError):
        Beamline([TargetSpec("a"), (1.0, 0.0)], layout)
    with pytest.raises(ConfigurationError):
        Beamline([TargetSpec("a"), TargetSpec("b", gap_before=300.0)], layout)
    with pytest.raises(ConfigurationError):
        HornSpec("horn", [(0.0, 0.0, 0.02, 0.15, 0.16), (1.0, 0.0, 0.2, 0.15, 0.16)], 1.0)
    with pytest.raises(ConfigurationError):
        DipoleSpec("d", 1.0, half_length=-0.25)
    with pytest.raises(ConfigurationError):
        DipoleSpec("d", 1.0, half_length=0.0)
    with pytest.raises(ConfigurationError):
        TargetSpec("t", half_length=0.0)
    with pytest.raises(ConfigurationError):
        TargetSpec("t", radius=0.0)


def test_reference_beamline():
    beamline = Beamline.reference(1.0)
    assert [p.name for p in beamline.elements] == [
        "target",
        "dipole_A",
        "dipole_B",
        "dipole_C",
    ]
    assert np.allclose(
        [p.z_center for p in beamline.elements],
        [-149.25, -147.75, -146.75, -145.75],
    )
    angles = [beamline.attachments[n].angle_deg for n in ("dipole_A", "dipole_B", "dipole_C")]
    assert angles == [0.0, 120.0, 240.0]


def test_reference_beamline_with_horn():
    horn = HornSpec("horn_A", horn_stations, 180e3, gap_before=0.3)
    beamline = Beamline.reference(1.0, horns=[horn])
    assert [p.name for p in beamline.elements][:2] == ["target", "horn_A"]
    assert len(beamline.regions) == 4


def test_integration_options():
    options = FieldIntegrationOptions()
    assert options.stepper is StepperType.classical_rk4
    assert options.polarity.sign == 1
    assert np.isclose(options.min_step, 0.5e-3)
    assert np.isclose(options.delta_intersection, 0.1e-3)
    assert np.isclose(options.max_allowed_step, 10e-3)
    assert make_beamline(
        FieldIntegrationOptions(stepper=StepperType.dormand_prince_745)
    ).options.stepper is StepperType.dormand_prince_745
    with pytest.raises(ConfigurationError):
        FieldIntegrationOptions(min_step=0.0)


def test_beamline_dipole_section_is_a_chain():
    beamline = make_beamline()
    assert len(beamline.chains) == 1
    assert beamline.chains[0].names == ["dipole_A", "dipole_B", "dipole_C"]
    region = beamline.region_at(0.0, 0.0, beamline.element("dipole_A").z_center)
    assert isinstance(region, PlacedDipole)
    assert region.field == UniformDipoleField(1.0, 0.0)

    reference_beamline = Beamline.reference(1.0)
    assert [f.angle_deg for f in reference_beamline.chains[0].fields] == [
        0.0,
        120.0,
        240.0,
    ]


def test_beamline_accepts_dipole_chain():
    chain = DipoleChain.from_angles(0.5, names=("d1", "d2", "d3"))
    beamline = Beamline([TargetSpec("target"), chain], BeamlineLayout(-150.0, 150.0))
    assert beamline.chains == (chain,)
    assert np.allclose(
        [p.z_center for p in beamline.elements],
        [-149.25, -147.75, -146.75, -145.75],
    )
    z_d3 = beamline.element("d3").z_center
    assert np.allclose(
        beamline.field(0.0, 0.0, z_d3), UniformDipoleField(0.5, 240.0).field_vector
    )


def test_beamline_rejects_short_dipole_section():
    layout = BeamlineLayout(-150.0, 150.0)
    with pytest.raises(ConfigurationError):
        Beamline(
            [TargetSpec("t"), DipoleSpec("a", 1.0), DipoleSpec("b", 1.0, 120.0)],
            layout,
        )
    # a horn splits the dipoles into two sections of one and two boxes
    with pytest.raises(ConfigurationError):
        Beamline(
            [
                TargetSpec("t"),
                DipoleSpec("a", 1.0),
                HornSpec("horn_A", horn_stations, 200e3),
                DipoleSpec("b", 1.0, 120.0),
                DipoleSpec("c", 1.0, 240.0),
            ],
            layout,
        )
    with pytest.raises(ConfigurationError):
        DipoleChain.from_angles(1.0, names=("a", "b"))


def test_beamline_layout_is_read_only():
    beamline = make_beamline()
    assert isinstance(beamline.elements, tuple)
    with pytest.raises(TypeError):
        beamline.profiles["horn_B"] = beamline.profiles["horn_A"]
