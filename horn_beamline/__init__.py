from . import (
    beamline,
    constants,
    errors,
    field_options,
    fields,
    layout,
    logging_config,
    reference,
    sampling,
    stations,
)
from .beamline import (
    Beamline,
    DipoleSpec,
    FieldAttachments,
    FieldRegion,
    HornSpec,
    TargetSpec,
)
from .errors import AttachmentError, ConfigurationError
from .field_options import (
    FieldIntegrationOptions,
    HornPolarity,
    SamplingOptions,
    StepperType,
)
from .fields import (
    DipoleChain,
    DipoleEntry,
    MagneticField,
    PlacedDipole,
    ToroidalHornField,
    UniformDipoleField,
)
from .layout import BeamlineLayout, ElementPlacement, PlacedElement
from .logging_config import setup_logging
from .sampling import field_map, sample_field
from .stations import Band, BandProfile, Station, StationProfile

__all__ = [
    "Beamline",
    "BeamlineLayout",
    "DipoleChain",
    "StationProfile",
    "ToroidalHornField",
    "UniformDipoleField",
]
__all__ += beamline.__all__.copy()
__all__ += errors.__all__.copy()
__all__ += field_options.__all__.copy()
__all__ += fields.__all__.copy()
__all__ += layout.__all__.copy()
__all__ += logging_config.__all__.copy()
__all__ += sampling.__all__.copy()
__all__ += stations.__all__.copy()
