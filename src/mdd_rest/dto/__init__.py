"""Data Transfer Objects for API contracts.

These Pydantic models define the fixed parts of the external API contract.
Resource representations themselves are generated per model by the
hypermedia and schema packages.

Internal domain logic should use entities from the entities package.
"""

from .requests import JsonApiDocumentRequest, JsonApiRelationship, JsonApiResourceObject, ResourceIdentifier
from .responses import (
    ApiInfoResponse,
    HealthCheckResponse,
    PageMetadata,
    ResourceSummary,
    UiField,
    UiSchema,
)

__all__ = [
    "JsonApiDocumentRequest",
    "JsonApiRelationship",
    "JsonApiResourceObject",
    "ResourceIdentifier",
    "ApiInfoResponse",
    "HealthCheckResponse",
    "PageMetadata",
    "ResourceSummary",
    "UiField",
    "UiSchema",
]
