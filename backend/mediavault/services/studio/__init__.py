"""Studio mutations and their cascades."""

from mediavault.services.studio.cascade import (
    CascadeDeletionCoordinator,
    CascadeFailure,
    CascadeReport,
    ReferenceCleaner,
)
from mediavault.services.studio.models import StudioUpdateOptions
from mediavault.services.studio.propagation import LabelPropagator
from mediavault.services.studio.studio_service import (
    StudioService,
    normalize_custom_fields,
)

__all__ = [
    "CascadeDeletionCoordinator",
    "CascadeFailure",
    "CascadeReport",
    "LabelPropagator",
    "ReferenceCleaner",
    "StudioService",
    "StudioUpdateOptions",
    "normalize_custom_fields",
]
