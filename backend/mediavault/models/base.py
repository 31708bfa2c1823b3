"""Declarative base shared by the studio, label and media tables."""

import re
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import Column, DateTime, func, inspect
from sqlalchemy.orm import declared_attr

from mediavault.core.database import Base

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def table_name_for(class_name: str) -> str:
    """``StudioSearchDocument`` -> ``studio_search_document``."""
    return _WORD_BOUNDARY.sub("_", class_name).lower()


def generate_id(prefix: str) -> str:
    """Generate a new prefixed identifier, e.g. ``st_1f0c...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


class BaseModel(Base):
    """Timestamps, a table name derived from the class and a dict view."""

    __abstract__ = True
    __allow_unmapped__ = True
    __mapper_args__ = {"eager_defaults": True}

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        index=True,
    )

    @declared_attr  # type: ignore[arg-type]
    def __tablename__(cls) -> str:
        return table_name_for(cls.__name__)

    def to_dict(self, exclude: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Column values by column name, with datetimes as ISO strings.

        Plugins receive studios in this form.
        """
        skip = set(exclude or ())
        data = {}
        for column in self.__table__.columns:
            if column.name in skip:
                continue
            value = getattr(self, column.name)
            data[column.name] = (
                value.isoformat() if isinstance(value, datetime) else value
            )
        return data

    def __repr__(self) -> str:
        identity = inspect(type(self)).primary_key
        key = ", ".join(str(getattr(self, column.key)) for column in identity)
        return f"<{type(self).__name__} {key}>"
