import logging

import matplotlib.pyplot as plt
import numpy as np
from horn_beamline import (
    Beamline,
    FieldIntegrationOptions,
    HornPolarity,
    HornSpec,
    SamplingOptions,
    StepperType,
    field_map,
)
from horn_beamline.logging_config import setup_logging

setup_logging(logging.DEBUG)

# (z, r0, r1, r2, r3) in m, z relative to the horn upstream end
horn_A_stations = [
    (0.00, 0.000, 0.020, 0.150, 0.160),
    (0.40, 0.000, 0.020, 0.150, 0.160),
    (0.90, 0.005, 0.012, 0.150, 0.160),
    (1.50, 0.005, 0.030, 0.200, 0.210),
    (2.50, 0.005, 0.030, 0.200, 0.210),
]
horn_B_stations = [
    (0.00, 0.000, 0.040, 0.300, 0.310),
    (1.00, 0.010, 0.025, 0.300, 0.310),
    (2.00, 0.000, 0.040, 0.300, 0.310),
]

options = FieldIntegrationOptions(
    stepper=StepperType.classical_rk4, polarity=HornPolarity.forward
)
horns = [
    HornSpec("horn_A", horn_A_stations, 200e3, gap_before=0.3),
    HornSpec("horn_B", horn_B_stations, 200e3, gap_before=2.0),
]
beamline = Beamline.reference(dipole_magnitude=1.0, horns=horns, options=options)
beamline.lock()

for element in beamline.elements:
    print(
        f"{element.name:>10s}: z = {element.z_start:9.3f} -> {element.z_stop:9.3f} m"
    )

horn = beamline.element("horn_A")
z = np.linspace(horn.z_start, horn.z_stop, 201)
x = np.linspace(0, 0.25, 126)
b = field_map(beamline, x, np.array([0.0]), z, SamplingOptions(n_cores=4))
magnitude = np.linalg.norm(b[:, 0, :, :], axis=-1)

fig, ax = plt.subplots(figsize=(8, 4))
mesh = ax.pcolormesh(z, x, magnitude, shading="auto")
profile = beamline.profiles["horn_A"]
for band in (profile.field_gap.r_inner, profile.field_gap.r_outer):
    ax.plot(profile.z, band, "w-", lw=1)
ax.set_xlabel("z [m]")
ax.set_ylabel("x [m]")
fig.colorbar(mesh, ax=ax, label="|B| [T]")
plt.show()
