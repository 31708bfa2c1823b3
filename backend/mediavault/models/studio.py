"""Studio model representing production studios in the library."""

from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    String,
    Text,
)

from mediavault.models.base import BaseModel, generate_id


class Studio(BaseModel):
    """
    Studio model representing a production studio.

    Labels are not stored on the row; they live in ``labelled_item`` keyed
    by the studio id.
    """

    id = Column(String, primary_key=True, index=True)

    # Studio information
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    thumbnail = Column(String, nullable=True)
    favorite = Column(Boolean, default=False, nullable=False)
    bookmark = Column(BigInteger, nullable=True)  # Epoch milliseconds
    aliases = Column(JSON, nullable=False, default=list)
    custom_fields = Column(JSON, nullable=False, default=dict)

    # Hierarchy
    parent_id = Column(
        String, ForeignKey("studio.id", ondelete="SET NULL"), nullable=True, index=True
    )

    __table_args__ = (Index("idx_studio_name_lower", "name"),)

    def __init__(self, name: str, **kwargs: Any) -> None:
        kwargs.setdefault("id", generate_id("st"))
        kwargs.setdefault("favorite", False)
        kwargs.setdefault("aliases", [])
        kwargs.setdefault("custom_fields", {})
        super().__init__(name=name, **kwargs)

    def to_dict(self, exclude: Optional[set] = None) -> Dict[str, Any]:
        """Convert to dictionary with list/dict columns copied."""
        data = super().to_dict(exclude)
        if "aliases" in data:
            data["aliases"] = list(data["aliases"] or [])
        if "custom_fields" in data:
            data["custom_fields"] = dict(data["custom_fields"] or {})
        return data
