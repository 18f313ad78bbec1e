"""Model storage protocol.

Defines the interface for the data access layer behind a resource service.
The default implementation is backed by a SQLAlchemy session; tests and
alternative backends only need to provide these methods.
"""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import ColumnElement

from mdd_rest.entities import ModelInfo, Pageable


@runtime_checkable
class ModelStore(Protocol):
    """Protocol for per-model storage backends."""

    @property
    def model_info(self) -> ModelInfo:
        """Metadata of the model this store manages."""
        ...

    def find_by_id(self, id: Any) -> Any | None:
        """Find a model by primary key.

        Args:
            id: The primary key value

        Returns:
            The model or None if it does not exist
        """
        ...

    def find_by_ids(self, ids: Iterable[Any]) -> list[Any]:
        """Find the models matching the given primary keys."""
        ...

    def find_all(self, criteria: ColumnElement[bool] | None = None) -> list[Any]:
        """Find all models, optionally restricted by ``criteria``."""
        ...

    def find_paginated(
        self,
        criteria: ColumnElement[bool] | None,
        pageable: Pageable,
    ) -> tuple[list[Any], int]:
        """Find a page of models.

        Args:
            criteria: Optional boolean filter expression
            pageable: Page number, size and sort orders

        Returns:
            Tuple of (models on the page, total number of matches)
        """
        ...

    def count(self, criteria: ColumnElement[bool] | None = None) -> int:
        """Count models matching ``criteria``."""
        ...

    def add(self, model: Any) -> Any:
        """Persist a new model and return it with generated values populated."""
        ...

    def save(self, model: Any) -> Any:
        """Flush changes of an existing model and return it."""
        ...

    def delete(self, model: Any) -> None:
        """Remove a model."""
        ...
