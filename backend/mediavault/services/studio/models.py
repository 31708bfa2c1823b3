"""Inputs to the studio mutations."""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CustomFieldValue = Union[List[str], bool, str, None]


class StudioUpdateOptions(BaseModel):
    """
    Sparse studio update.

    Only fields that were explicitly given are applied. ``parent`` is
    applied whenever it is given, so passing ``None`` detaches the studio
    from its parent.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    favorite: Optional[bool] = None
    bookmark: Optional[int] = Field(None, description="Epoch milliseconds or null")
    parent: Optional[str] = None
    labels: Optional[List[str]] = None
    aliases: Optional[List[str]] = None
    custom_fields: Optional[Dict[str, CustomFieldValue]] = Field(
        None, alias="customFields"
    )

    def is_set(self, field_name: str) -> bool:
        """Check whether a field was explicitly given."""
        return field_name in self.model_fields_set
