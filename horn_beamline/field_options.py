from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from .constants import mm
from .errors import ConfigurationError

__all__: List[str] = [
    "StepperType",
    "HornPolarity",
    "FieldIntegrationOptions",
    "SamplingOptions",
]


class StepperType(Enum):
    """
    Enum to specify the integrator stepper the transport host uses inside a field
    region

    Attributes
        classical_rk4 (int): classical 4th order Runge-Kutta
        dormand_prince_745 (int): embedded Dormand-Prince 7(4)5
        nystrom_rk4 (int): Nystrom Runge-Kutta for pure magnetic fields
    """

    classical_rk4 = auto()
    dormand_prince_745 = auto()
    nystrom_rk4 = auto()


class HornPolarity(Enum):
    """
    Enum to specify the horn current direction

    Attributes
        forward (int): current as configured, focuses positive secondaries for a
                       positive peak current
        reverse (int): current sign flipped, focuses negative secondaries
    """

    forward = 1
    reverse = -1

    @property
    def sign(self) -> int:
        return self.value


@dataclass(frozen=True)
class FieldIntegrationOptions:
    """
    Dataclass to hold the integration settings handed to the transport host for
    every field region

    Attributes
        stepper (StepperType): stepper used inside field regions
        polarity (HornPolarity): horn current direction applied to all horns
        min_step (float): minimum chord finder step [m]
        delta_one_step (float): accuracy of a single step [m]
        delta_intersection (float): accuracy of boundary intersections [m]
        max_allowed_step (float): step limit inside field regions [m]
    """

    stepper: StepperType = StepperType.classical_rk4
    polarity: HornPolarity = HornPolarity.forward
    min_step: float = 0.5 * mm
    delta_one_step: float = 0.5 * mm
    delta_intersection: float = 0.1 * mm
    max_allowed_step: float = 10.0 * mm

    def __post_init__(self):
        """
        Check that all step settings are positive, runs upon initialization.
        """
        for name in (
            "min_step",
            "delta_one_step",
            "delta_intersection",
            "max_allowed_step",
        ):
            value = getattr(self, name)
            if not value > 0:
                raise ConfigurationError(f"`{name}` must be positive, got {value}")


@dataclass
class SamplingOptions:
    """
    Dataclass to hold field sampling options

    Attributes
        n_cores (int): # threads used to evaluate field maps
        verbose (bool): enable verbose logging of joblib
        chunk_size (int): points evaluated per job
    """

    n_cores: int = 6
    verbose: bool = False
    chunk_size: int = 4096
