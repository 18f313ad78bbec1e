"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResourceIdentifier(BaseModel):
    """JSON:API resource identifier object."""

    type: str | None = Field(None, description="Resource type")
    id: str | int = Field(..., description="Resource id")


class JsonApiRelationship(BaseModel):
    """JSON:API relationship object (linkage only)."""

    model_config = ConfigDict(extra="allow")

    data: ResourceIdentifier | list[ResourceIdentifier] | None = Field(
        None,
        description="Resource linkage: an identifier, a list of identifiers or null",
    )


class JsonApiResourceObject(BaseModel):
    """JSON:API resource object as submitted by clients."""

    model_config = ConfigDict(extra="allow")

    type: str | None = Field(None, description="Resource type, must match the endpoint's type when given")
    id: str | int | None = Field(None, description="Resource id (ignored on create)")
    attributes: dict[str, Any] = Field(default_factory=dict, description="Attribute values")
    relationships: dict[str, JsonApiRelationship] = Field(
        default_factory=dict,
        description="Relationship linkage by member name",
    )


class JsonApiDocumentRequest(BaseModel):
    """Request DTO for a JSON:API document with a single primary resource."""

    model_config = ConfigDict(extra="allow")

    data: JsonApiResourceObject = Field(..., description="The primary resource")
