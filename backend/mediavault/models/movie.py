"""Movie model, a collection of scenes released by a studio."""

from typing import Any

from sqlalchemy import Column, ForeignKey, String

from mediavault.models.base import BaseModel, generate_id


class Movie(BaseModel):
    """A movie, optionally owned by a studio."""

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    studio_id = Column(
        String, ForeignKey("studio.id", ondelete="SET NULL"), nullable=True, index=True
    )

    def __init__(self, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("id", generate_id("mo"))
        super().__init__(name=name, **kwargs)
