"""
Pydantic schemas for API requests and responses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mediavault.services.studio.models import StudioUpdateOptions


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


# Common response schemas
class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status")


class SuccessResponse(BaseModel):
    """Outcome of a mutation that reports only success."""

    success: bool = Field(..., description="Whether every item was processed")


# Label schemas
class LabelResponse(BaseSchema):
    """Label response schema."""

    id: str = Field(..., description="Label ID")
    name: str = Field(..., description="Label name")
    aliases: List[str] = Field(default_factory=list, description="Label aliases")


# Studio schemas
class StudioResponse(BaseSchema):
    """Studio response schema."""

    id: str = Field(..., description="Studio ID")
    name: str = Field(..., description="Studio name")
    description: Optional[str] = Field(None, description="Studio description")
    thumbnail: Optional[str] = Field(None, description="Thumbnail path")
    favorite: bool = Field(False, description="Favorite flag")
    bookmark: Optional[int] = Field(None, description="Bookmark time (epoch ms)")
    aliases: List[str] = Field(default_factory=list, description="Studio aliases")
    custom_fields: Dict[str, Any] = Field(
        default_factory=dict, alias="customFields", description="Custom fields"
    )
    parent_id: Optional[str] = Field(None, description="Parent studio ID")
    labels: List[LabelResponse] = Field(
        default_factory=list, description="Studio labels"
    )


class CreateStudioRequest(BaseModel):
    """Request to create a studio."""

    name: str = Field(..., min_length=1, description="Studio name")
    labels: List[str] = Field(
        default_factory=list, description="IDs of labels to attach"
    )


class UpdateStudiosRequest(BaseModel):
    """Sparse update applied to several studios."""

    ids: List[str] = Field(..., description="IDs of studios to update")
    opts: StudioUpdateOptions = Field(..., description="Fields to change")


class RemoveStudiosRequest(BaseModel):
    """Request to remove studios."""

    ids: List[str] = Field(..., description="IDs of studios to remove")


class RunStudioPluginsRequest(BaseModel):
    """Request to re-run studio plugins."""

    ids: List[str] = Field(..., description="IDs of studios to run plugins on")


class StudioSearchResult(BaseSchema):
    """Search index document of a studio."""

    studio_id: str = Field(..., description="Studio ID")
    name: str = Field(..., description="Studio name")
    aliases: List[str] = Field(default_factory=list, description="Studio aliases")
    label_ids: List[str] = Field(default_factory=list, description="Label IDs")
    label_names: List[str] = Field(default_factory=list, description="Label names")
    parent_id: Optional[str] = Field(None, description="Parent studio ID")
    favorite: bool = Field(False, description="Favorite flag")
    bookmark: Optional[int] = Field(None, description="Bookmark time (epoch ms)")
    scene_count: int = Field(0, description="Number of scenes")
    custom_fields: Dict[str, Any] = Field(
        default_factory=dict, alias="customFields", description="Custom fields"
    )
    indexed_at: Optional[datetime] = Field(None, description="Last index time")
