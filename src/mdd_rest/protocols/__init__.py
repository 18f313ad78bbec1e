"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Registering custom predicate factories for additional column types
- Swapping the storage backend behind resource services
- Unit testing with mock implementations

Usage:
    ```python
    from mdd_rest.protocols import ModelStore, PredicateFactory

    store: ModelStore = SqlAlchemyModelRepository(session, model_info)
    ```
"""

from .model_store import ModelStore
from .predicate_factory import PredicateFactory

__all__ = [
    "ModelStore",
    "PredicateFactory",
]
