"""Label model representing content labels."""

from typing import Any

from sqlalchemy import JSON, Column, String

from mediavault.models.base import BaseModel, generate_id


class Label(BaseModel):
    """Label that can be attached to studios, scenes, movies and images."""

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True, index=True)
    aliases = Column(JSON, nullable=False, default=list)

    def __init__(self, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("id", generate_id("la"))
        kwargs.setdefault("aliases", [])
        super().__init__(name=name, **kwargs)
