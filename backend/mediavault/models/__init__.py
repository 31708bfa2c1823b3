"""
Database models package.

This module imports and exports all database models to ensure they are
registered with SQLAlchemy when the application starts.
"""

from mediavault.models.base import BaseModel
from mediavault.models.image import Image
from mediavault.models.label import Label
from mediavault.models.labelled_item import ItemType, LabelledItem
from mediavault.models.movie import Movie
from mediavault.models.scene import Scene
from mediavault.models.search_document import StudioSearchDocument
from mediavault.models.studio import Studio

__all__ = [
    # Base
    "BaseModel",
    # Models
    "Studio",
    "Label",
    "LabelledItem",
    "Scene",
    "Movie",
    "Image",
    "StudioSearchDocument",
    # Enums
    "ItemType",
]
