"""Image model representing still images in the library."""

from typing import Any

from sqlalchemy import Column, ForeignKey, String

from mediavault.models.base import BaseModel, generate_id


class Image(BaseModel):
    """An image, optionally owned by a studio."""

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    path = Column(String, nullable=True)

    studio_id = Column(
        String, ForeignKey("studio.id", ondelete="SET NULL"), nullable=True, index=True
    )

    def __init__(self, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("id", generate_id("im"))
        super().__init__(name=name, **kwargs)
