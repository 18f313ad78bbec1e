"""MDD REST - model driven REST services for SQLAlchemy models.

Mark SQLAlchemy models with ``@scrud_resource`` (or pass them explicitly)
and get search, CRUD, relationship, JSON Schema and UI schema endpoints,
as plain JSON with HATEOAS links or as JSON:API documents.

Layers:
    - models: Declarative base, UUID mixin and resource markers
    - registry: Cached metadata of resource models
    - specification / rsql: Query criteria from URL parameters and RSQL
    - protocols: Interface contracts (ModelStore, PredicateFactory)
    - repositories: Data access implementations
    - services: Business logic
    - handlers: HTTP endpoint handlers
    - hypermedia: HATEOAS and JSON:API representations
    - dto: Data transfer objects (API contracts)

Usage:
    ```python
    from mdd_rest import create_app

    app = create_app(models=[Author, Book])
    ```
"""

from mdd_rest.api import create_app
from mdd_rest.config import Settings, get_settings, settings
from mdd_rest.entities import FieldInfo, ModelInfo, Pageable, ParamsAwarePage
from mdd_rest.exceptions import (
    BadRequestError,
    InvalidRelationshipError,
    MddRestError,
    ModelRegistrationError,
    NotFoundError,
    RsqlSyntaxError,
)
from mdd_rest.models import Base, FilePreview, SystemUuidModel, scrud_resource
from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.services import PersistableModelService, ServiceContext

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Settings",
    "settings",
    "get_settings",
    # Application
    "create_app",
    # Models
    "Base",
    "SystemUuidModel",
    "FilePreview",
    "scrud_resource",
    # Registry
    "ModelInfoRegistry",
    "ModelInfo",
    "FieldInfo",
    # Services (business logic)
    "PersistableModelService",
    "ServiceContext",
    # Paging
    "Pageable",
    "ParamsAwarePage",
    # Errors
    "MddRestError",
    "NotFoundError",
    "BadRequestError",
    "InvalidRelationshipError",
    "RsqlSyntaxError",
    "ModelRegistrationError",
]
