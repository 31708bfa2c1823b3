"""Join records linking labels to labelled entities."""

import enum
from typing import Any

from sqlalchemy import Column, Enum, ForeignKey, Index, String, UniqueConstraint

from mediavault.models.base import BaseModel, generate_id


class ItemType(str, enum.Enum):
    """Entity types that can carry labels."""

    STUDIO = "studio"
    SCENE = "scene"
    MOVIE = "movie"
    IMAGE = "image"


class LabelledItem(BaseModel):
    """
    "This entity carries this label."

    ``item_id`` is not a foreign key since it points into one of several
    tables depending on ``item_type``.
    """

    id = Column(String, primary_key=True)
    item_id = Column(String, nullable=False, index=True)
    item_type = Column(
        Enum(ItemType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    label_id = Column(
        String, ForeignKey("label.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("item_id", "label_id", name="uq_labelled_item"),
        Index("idx_labelled_item_type", "item_type", "item_id"),
    )

    def __init__(self, item_id: str, item_type: ItemType, label_id: str, **kwargs: Any):
        kwargs.setdefault("id", generate_id("li"))
        super().__init__(
            item_id=item_id, item_type=item_type, label_id=label_id, **kwargs
        )
