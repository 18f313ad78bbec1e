"""Service layer for business logic.

This layer contains the CRUD, search and relationship logic of resource
models. Services depend on the ModelStore protocol, not on concrete
repositories, making them testable with in-memory stores.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from mdd_rest.services import PersistableModelService, ServiceContext

    context = ServiceContext.create(registry)
    service = PersistableModelService.create_for_session(session, book_info, context)
    ```
"""

from .context import ServiceContext
from .model_service import PersistableModelService, RepositoryFactory

__all__ = [
    "PersistableModelService",
    "RepositoryFactory",
    "ServiceContext",
]
