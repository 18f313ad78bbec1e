"""Repository layer for data access.

This layer hides the ORM session behind the ModelStore protocol. This enables:
- Services that never build SQL themselves
- Unit testing with mock implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from mdd_rest.protocols import ModelStore

from .sqlalchemy_repository import SqlAlchemyModelRepository

__all__ = [
    "ModelStore",
    "SqlAlchemyModelRepository",
]
