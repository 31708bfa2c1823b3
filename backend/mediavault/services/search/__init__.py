"""Search index over studios."""

from mediavault.services.search.studio_index import StudioIndex, studio_index

__all__ = ["StudioIndex", "studio_index"]
