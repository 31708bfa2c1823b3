"""Denormalized studio projection backing the search index."""

from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, Integer, String

from mediavault.models.base import BaseModel


class StudioSearchDocument(BaseModel):
    """
    Search index entry for a studio.

    Rebuilt from the studio tables on every index call; never written to
    directly by mutations and never read back as a source of truth.
    """

    studio_id = Column(String, primary_key=True)
    name = Column(String, nullable=False, index=True)
    aliases = Column(JSON, nullable=False, default=list)
    label_ids = Column(JSON, nullable=False, default=list)
    label_names = Column(JSON, nullable=False, default=list)
    parent_id = Column(String, nullable=True, index=True)
    favorite = Column(Boolean, default=False, nullable=False)
    bookmark = Column(BigInteger, nullable=True)
    scene_count = Column(Integer, default=0, nullable=False)
    custom_fields = Column(JSON, nullable=False, default=dict)
    indexed_at = Column(DateTime(timezone=True), nullable=False)
