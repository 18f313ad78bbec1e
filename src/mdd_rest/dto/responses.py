"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageMetadata(BaseModel):
    """Pagination info of a paged collection."""

    model_config = ConfigDict(populate_by_name=True)

    size: int = Field(..., description="Page size", ge=1)
    number: int = Field(..., description="0-based page number", ge=0)
    total_elements: int = Field(..., alias="totalElements", description="Total matches", ge=0)
    total_pages: int = Field(..., alias="totalPages", description="Total pages", ge=0)


class UiField(BaseModel):
    """A single field entry of a UI schema."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Member name")
    type: str = Field(..., description="Value type, e.g. 'string', 'integer', 'relationship'")
    label: str = Field(..., description="Human readable label")
    required: bool = Field(False, description="Whether a value is required on create")
    max_length: int | None = Field(None, alias="maxLength", description="Maximum string length")
    enum_values: list[Any] | None = Field(None, alias="enumValues", description="Allowed values")
    related_path: str | None = Field(
        None,
        alias="relatedPath",
        description="Collection path of the related resource",
    )
    to_many: bool | None = Field(None, alias="toMany", description="Whether a relationship is a collection")
    previews: list[dict[str, Any]] | None = Field(None, description="Preview settings for file fields")


class UiSchema(BaseModel):
    """UI schema for a resource: fields and descriptive metadata."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Model class name")
    api_name: str = Field(..., alias="apiName", description="API name")
    description: str | None = Field(None, description="Resource description")
    request_mapping: str = Field(..., alias="requestMapping", description="Collection path")
    id_field: str = Field(..., alias="idField", description="Identifier member name")
    fields: list[UiField] = Field(default_factory=list, description="Visible fields")


class ResourceSummary(BaseModel):
    """A registered resource as listed by the root endpoint."""

    name: str
    path: str
    json_api_type: str


class ApiInfoResponse(BaseModel):
    """Response DTO for the root endpoint."""

    name: str
    version: str
    description: str
    resources: list[ResourceSummary] = Field(default_factory=list)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    database_healthy: bool = Field(..., description="Whether the database is reachable")
    resources: int = Field(..., description="Number of registered resources", ge=0)
