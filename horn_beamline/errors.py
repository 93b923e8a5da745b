from typing import List

__all__: List[str] = ["ConfigurationError", "AttachmentError"]


class ConfigurationError(ValueError):
    """
    Raised when a beamline, station profile or field region is configured with
    inconsistent values. Always raised during setup, never during field evaluation.
    """


class AttachmentError(ConfigurationError):
    """
    Raised when a field law is attached to a region twice, or after the field
    attachments have been locked for integration.
    """
