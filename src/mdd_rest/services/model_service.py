"""Resource service for core business logic.

This service orchestrates CRUD and relationship operations for one model
by coordinating the repository (data access), the query builder (criteria)
and the schema factory (input validation).
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from mdd_rest.entities import FieldInfo, ModelInfo, Pageable, ParamsAwarePage
from mdd_rest.exceptions import BadRequestError, InvalidRelationshipError, NotFoundError
from mdd_rest.protocols import ModelStore
from mdd_rest.repositories import SqlAlchemyModelRepository

from .context import ServiceContext

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[ModelInfo], ModelStore]


class PersistableModelService:
    """CRUD and relationship operations for a single resource model.

    This service depends on the ModelStore PROTOCOL, not on a concrete
    implementation; the default factory method wires SQLAlchemy
    repositories bound to the request's session.

    Example:
        ```python
        service = PersistableModelService.create_for_session(session, book_info, context)
        book = service.create({"title": "Dune", "author": author_id})
        page = service.find_paginated({"filter": ["title==Dune*"]}, pageable)
        ```
    """

    def __init__(
        self,
        model_info: ModelInfo,
        repository_factory: RepositoryFactory,
        context: ServiceContext,
    ) -> None:
        """Initialize the service.

        Args:
            model_info: Metadata of the managed model (required).
            repository_factory: Creates the store for any registered model (required).
            context: Registry, query builder and schema factory (required).
        """
        self._model_info = model_info
        self._repositories = repository_factory
        self._context = context
        self._repository = repository_factory(model_info)
        self._id_adapter = TypeAdapter(model_info.id_type)

    @classmethod
    def create_for_session(
        cls,
        session: Session,
        model_info: ModelInfo,
        context: ServiceContext,
    ) -> "PersistableModelService":
        """Factory method creating a service backed by SQLAlchemy repositories.

        Args:
            session: The request's SQLAlchemy session
            model_info: Metadata of the managed model
            context: Application-wide service context

        Returns:
            Configured PersistableModelService
        """

        def repository_factory(info: ModelInfo) -> ModelStore:
            return SqlAlchemyModelRepository.create(session, info)

        return cls(model_info=model_info, repository_factory=repository_factory, context=context)

    @property
    def model_info(self) -> ModelInfo:
        return self._model_info

    @property
    def context(self) -> ServiceContext:
        return self._context

    @property
    def repository(self) -> ModelStore:
        """Get the underlying repository (for testing)."""
        return self._repository

    def convert_id(self, raw_id: Any, model_info: ModelInfo | None = None) -> Any:
        """Convert a path or query string id to the model's primary key type.

        Raises:
            NotFoundError: If the value cannot be an id of the model
        """
        info = model_info or self._model_info
        adapter = self._id_adapter if info is self._model_info else TypeAdapter(info.id_type)
        try:
            return adapter.validate_python(raw_id)
        except ValidationError as e:
            raise NotFoundError(f"{info.model_name} not found: {raw_id}") from e

    def find_by_id(self, id: Any) -> Any:
        """Find a model by id.

        Raises:
            NotFoundError: If no such model exists
        """
        model = self._repository.find_by_id(self.convert_id(id))
        if model is None:
            raise NotFoundError(f"{self._model_info.model_name} not found: {id}")
        return model

    def find_by_ids(self, ids: Iterable[Any]) -> list[Any]:
        converted = []
        for raw_id in ids:
            try:
                converted.append(self.convert_id(raw_id))
            except NotFoundError:
                logger.debug(f"Skipping invalid id {raw_id!r} for {self._model_info.model_name}")
        return self._repository.find_by_ids(converted)

    def find_all(self) -> list[Any]:
        return self._repository.find_all()

    def find_paginated(
        self,
        params: Mapping[str, Sequence[str]],
        pageable: Pageable,
        ignored: Sequence[str] = (),
    ) -> ParamsAwarePage:
        """Find a page of models matching the request's criteria.

        Args:
            params: Request parameters; ``filter`` holds RSQL, other member
                names are simple criteria
            pageable: Page request
            ignored: Parameter names that are not criteria

        Returns:
            The page, remembering ``params``
        """
        criteria = self._context.query_builder.build_specification(self._model_info, params, None, ignored)
        content, total = self._repository.find_paginated(criteria, pageable)
        return ParamsAwarePage(
            content=content,
            pageable=pageable,
            total_elements=total,
            parameters={k: list(v) for k, v in params.items()},
        )

    def create(self, data: Any) -> Any:
        """Validate ``data`` and persist a new model.

        Raises:
            BadRequestError: If the data does not validate
        """
        values = self._context.schemas.validate_input(self._model_info, data)
        model = self._model_info.model_type()
        self._apply(model, values)
        model = self._repository.add(model)
        logger.info(f"Created {self._model_info.model_name} {self._id_of(model)}")
        return model

    def update(self, id: Any, data: Any) -> Any:
        """Replace all writable members of an existing model.

        Columns missing from ``data`` are reset to null; columns with a
        default and relationships keep their current value.
        """
        model = self.find_by_id(id)
        values = self._context.schemas.validate_input(self._model_info, data)
        self._apply(model, values)
        return self._repository.save(model)

    def patch(self, id: Any, data: Any) -> Any:
        """Apply the given non-null members to an existing model."""
        model = self.find_by_id(id)
        values = self._context.schemas.validate_input(self._model_info, data, partial=True)
        self._apply(model, values)
        return self._repository.save(model)

    def delete(self, id: Any) -> None:
        model = self.find_by_id(id)
        self._repository.delete(model)
        logger.info(f"Deleted {self._model_info.model_name} {id}")

    def get_relationship(self, relation_name: str) -> FieldInfo:
        """Get a relationship exposed as a sub-resource.

        Raises:
            InvalidRelationshipError: If the name is unknown or not linkable
        """
        field_info = self._model_info.get_field(relation_name)
        if field_info is None or not field_info.is_linkable_resource or field_info.hidden:
            raise InvalidRelationshipError(relation_name)
        return field_info

    def related_model_info(self, field_info: FieldInfo) -> ModelInfo:
        return self._context.registry.get_entry_for(field_info.related_model_type)

    def find_related_single(self, id: Any, field_info: FieldInfo) -> Any | None:
        """Find the other end of a to-one relationship.

        Returns:
            The related model, or None when the relationship is unset
        """
        if not field_info.is_to_one:
            raise InvalidRelationshipError(field_info.name)
        model = self.find_by_id(id)
        return getattr(model, field_info.name)

    def find_related_paginated(
        self,
        id: Any,
        field_info: FieldInfo,
        params: Mapping[str, Sequence[str]],
        pageable: Pageable,
        ignored: Sequence[str] = (),
    ) -> ParamsAwarePage:
        """Find a page of models at the other end of a to-many relationship.

        The parent id becomes an implicit criterion on the reverse member,
        combined with any ``filter`` or simple criteria in ``params``.

        Raises:
            NotFoundError: If the parent does not exist
            BadRequestError: If the relationship has no reverse member
        """
        if not field_info.is_to_many:
            raise InvalidRelationshipError(field_info.name)
        if not field_info.reverse_field_name:
            raise BadRequestError(f"Related field info has no reverse field name: {field_info.name}")

        parent = self.find_by_id(id)
        related_info = self.related_model_info(field_info)
        implicit_criteria = {field_info.reverse_field_name: [str(self._id_of(parent))]}

        criteria = self._context.query_builder.build_specification(related_info, params, implicit_criteria, ignored)
        content, total = self._repositories(related_info).find_paginated(criteria, pageable)
        return ParamsAwarePage(
            content=content,
            pageable=pageable,
            total_elements=total,
            parameters={k: list(v) for k, v in params.items()},
        )

    def _apply(self, model: Any, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            field_info = self._model_info.get_field(name)
            if field_info is None or field_info.is_id:
                continue
            if field_info.is_relationship:
                value = self._resolve_related(field_info, value)
            setattr(model, name, value)

    def _resolve_related(self, field_info: FieldInfo, value: Any) -> Any:
        if value is None:
            return [] if field_info.is_to_many else None

        related_info = self.related_model_info(field_info)
        repository = self._repositories(related_info)

        def load(reference: Any) -> Any:
            raw_id = reference.get("id") if isinstance(reference, dict) else reference
            try:
                related_id = self.convert_id(raw_id, related_info)
            except NotFoundError as e:
                raise BadRequestError(f"Invalid {related_info.model_name} id: {raw_id}") from e
            related = repository.find_by_id(related_id)
            if related is None:
                raise BadRequestError(f"Related {related_info.model_name} not found: {raw_id}")
            return related

        if field_info.is_to_many:
            return [load(reference) for reference in value]
        return load(value)

    def _id_of(self, model: Any) -> Any:
        return getattr(model, self._model_info.id_field_name)
