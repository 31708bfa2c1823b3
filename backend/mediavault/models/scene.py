"""Scene model representing video files in the library."""

from typing import Any

from sqlalchemy import Column, ForeignKey, String, Text

from mediavault.models.base import BaseModel, generate_id


class Scene(BaseModel):
    """A scene, optionally owned by a studio."""

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    path = Column(String, nullable=True)
    details = Column(Text, nullable=True)

    studio_id = Column(
        String, ForeignKey("studio.id", ondelete="SET NULL"), nullable=True, index=True
    )

    def __init__(self, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("id", generate_id("sc"))
        super().__init__(name=name, **kwargs)
