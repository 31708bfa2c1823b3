"""Database repositories."""

from mediavault.repositories.label_repository import LabelRepository, label_repository
from mediavault.repositories.labelled_item_repository import (
    LabelledItemRepository,
    labelled_item_repository,
)
from mediavault.repositories.owned_repository import (
    SceneRepository,
    StudioOwnedRepository,
    image_repository,
    movie_repository,
    scene_repository,
)
from mediavault.repositories.studio_repository import (
    StudioRepository,
    studio_repository,
)

__all__ = [
    "LabelRepository",
    "LabelledItemRepository",
    "SceneRepository",
    "StudioOwnedRepository",
    "StudioRepository",
    "image_repository",
    "label_repository",
    "labelled_item_repository",
    "movie_repository",
    "scene_repository",
    "studio_repository",
]
