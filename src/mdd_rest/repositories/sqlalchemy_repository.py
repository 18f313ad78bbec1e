"""SQLAlchemy implementation of ModelStore.

One repository instance serves one model type within one session; the
session's transaction is owned by the caller.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.orm import Session

from mdd_rest.entities import ModelInfo, Pageable

logger = logging.getLogger(__name__)


class SqlAlchemyModelRepository:
    """Session backed repository for a single resource model.

    This class satisfies the ModelStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, session: Session, model_info: ModelInfo) -> None:
        """Initialize the repository.

        Args:
            session: The active SQLAlchemy session
            model_info: Metadata of the managed model
        """
        self._session = session
        self._model_info = model_info
        self._model_type = model_info.model_type

    @classmethod
    def create(cls, session: Session, model_info: ModelInfo) -> "SqlAlchemyModelRepository":
        """Factory method to create a repository for ``model_info``."""
        return cls(session=session, model_info=model_info)

    @property
    def model_info(self) -> ModelInfo:
        return self._model_info

    @property
    def session(self) -> Session:
        return self._session

    def find_by_id(self, id: Any) -> Any | None:
        return self._session.get(self._model_type, id)

    def find_by_ids(self, ids: Iterable[Any]) -> list[Any]:
        ids = list(ids)
        if not ids:
            return []
        stmt = select(self._model_type).where(self._id_column.in_(ids)).order_by(self._id_column)
        return list(self._session.scalars(stmt))

    def find_all(self, criteria: ColumnElement[bool] | None = None) -> list[Any]:
        stmt = select(self._model_type).order_by(self._id_column)
        if criteria is not None:
            stmt = stmt.where(criteria)
        return list(self._session.scalars(stmt))

    def find_paginated(
        self,
        criteria: ColumnElement[bool] | None,
        pageable: Pageable,
    ) -> tuple[list[Any], int]:
        """Find a page of models matching ``criteria``.

        Args:
            criteria: Optional boolean filter expression
            pageable: Page number, size and sort orders

        Returns:
            Tuple of (models on the page, total number of matches)
        """
        total = self.count(criteria)

        stmt = select(self._model_type)
        if criteria is not None:
            stmt = stmt.where(criteria)
        for order in pageable.sort:
            column = getattr(self._model_type, order.property)
            stmt = stmt.order_by(column.desc() if order.descending else column.asc())
        if not any(order.property == self._model_info.id_field_name for order in pageable.sort):
            # stable paging across equal sort keys
            stmt = stmt.order_by(self._id_column)
        stmt = stmt.offset(pageable.offset).limit(pageable.size)

        content = list(self._session.scalars(stmt))
        logger.debug(
            f"find_paginated {self._model_info.model_name}: page={pageable.page}, "
            f"size={pageable.size}, returned={len(content)}, total={total}"
        )
        return content, total

    def count(self, criteria: ColumnElement[bool] | None = None) -> int:
        stmt = select(func.count()).select_from(self._model_type)
        if criteria is not None:
            stmt = stmt.where(criteria)
        return self._session.scalar(stmt) or 0

    def exists(self, id: Any) -> bool:
        return self.count(self._id_column == id) > 0

    def add(self, model: Any) -> Any:
        self._session.add(model)
        self._session.flush()
        self._session.refresh(model)
        return model

    def save(self, model: Any) -> Any:
        self._session.flush()
        self._session.refresh(model)
        return model

    def delete(self, model: Any) -> None:
        self._session.delete(model)
        self._session.flush()

    @property
    def _id_column(self) -> Any:
        return getattr(self._model_type, self._model_info.id_field_name)
