"""Builds ORM filter expressions from member paths and URL parameters."""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from sqlalchemy import ColumnElement, and_, or_

from mdd_rest.entities import FieldInfo, ModelInfo
from mdd_rest.exceptions import BadRequestError
from mdd_rest.registry import ModelInfoRegistry

from .factories import Operator, escape_like
from .factory_registry import PredicateFactoryRegistry, default_factory_registry
from .members import SEARCH_MODE_PARAM_NAME, SIMPLE_SEARCH_PARAM_NAME, MemberCache

logger = logging.getLogger(__name__)

OR = "OR"
AND = "AND"


class CriteriaBuilder:
    """Turns comparisons on member paths into SQLAlchemy boolean clauses.

    Dotted paths traverse relationships: to-one segments become ``has()``
    and to-many segments ``any()`` subqueries. A path ending on a
    relationship compares the related model's id.

    Example:
        ```python
        builder = CriteriaBuilder.create(registry)
        clause = builder.predicate_for(book_info, "author.name", "==", ["Frank*"])
        session.scalars(select(Book).where(clause))
        ```
    """

    def __init__(
        self,
        registry: ModelInfoRegistry,
        factories: PredicateFactoryRegistry,
        members: MemberCache,
    ) -> None:
        self._registry = registry
        self._factories = factories
        self._members = members

    @classmethod
    def create(
        cls,
        registry: ModelInfoRegistry,
        factories: PredicateFactoryRegistry | None = None,
    ) -> "CriteriaBuilder":
        return cls(
            registry=registry,
            factories=factories or default_factory_registry,
            members=MemberCache(registry),
        )

    @property
    def members(self) -> MemberCache:
        return self._members

    @property
    def factories(self) -> PredicateFactoryRegistry:
        return self._factories

    def predicate_for(
        self,
        model_info: ModelInfo,
        selector: str,
        operator: str,
        values: list[str],
    ) -> ColumnElement[bool]:
        """Build the clause for one comparison.

        Args:
            model_info: Root model metadata
            selector: Member path, e.g. "title" or "author.name"
            operator: Comparison operator
            values: Raw string arguments

        Returns:
            SQLAlchemy boolean clause

        Raises:
            BadRequestError: Unknown member, unsupported type or bad value
        """
        path = self._members.resolve_path(model_info.model_type, selector)
        if path is None:
            raise BadRequestError(f"Unknown member '{selector}' for {model_info.model_name}")
        return self._predicate_for_path(model_info.model_type, path, operator, values)

    def build_simple_criteria(
        self,
        model_info: ModelInfo,
        params: Mapping[str, Sequence[str]],
        implicit_criteria: Mapping[str, Sequence[str]] | None = None,
        ignored: Sequence[str] = (),
    ) -> ColumnElement[bool] | None:
        """Build criteria from plain URL parameters.

        Parameters naming a model member become equality predicates (``IN``
        when repeated). ``_searchmode=OR`` combines them with OR instead of
        AND. ``_all`` searches all simple search fields case-insensitively.
        Implicit criteria are always AND-ed.

        Args:
            model_info: Root model metadata
            params: Request parameters, name to values
            implicit_criteria: Criteria added by the framework itself
            ignored: Extra parameter names to skip

        Returns:
            Combined clause, or None when no parameter applies
        """
        mode = _first(params.get(SEARCH_MODE_PARAM_NAME)) or AND
        if mode.upper() not in (AND, OR):
            raise BadRequestError(f"Invalid {SEARCH_MODE_PARAM_NAME}: {mode!r}, expected AND or OR")

        clauses: list[ColumnElement[bool]] = []
        for name, values in params.items():
            if name in ignored or not values:
                continue
            path = self._members.resolve_path(model_info.model_type, name)
            if path is None:
                continue
            clauses.append(self._simple_predicate(model_info.model_type, path, list(values)))

        search_text = _first(params.get(SIMPLE_SEARCH_PARAM_NAME))
        if search_text:
            search_clause = self._search_all(model_info, search_text)
            if search_clause is not None:
                clauses.append(search_clause)

        combined = _combine(clauses, or_ if mode.upper() == OR else and_)

        implicit: list[ColumnElement[bool]] = []
        for name, values in (implicit_criteria or {}).items():
            path = self._members.resolve_path(model_info.model_type, name)
            if path is None:
                raise BadRequestError(f"Unknown member '{name}' for {model_info.model_name}")
            implicit.append(self._simple_predicate(model_info.model_type, path, list(values)))

        if combined is not None:
            implicit.append(combined)
        return _combine(implicit, and_)

    def _simple_predicate(self, model_type: type, path: Sequence[FieldInfo], values: list[str]) -> ColumnElement[bool]:
        operator = Operator.IN if len(values) > 1 else Operator.EQUAL
        return self._predicate_for_path(model_type, path, operator.value, values)

    def _search_all(self, model_info: ModelInfo, text: str) -> ColumnElement[bool] | None:
        clauses = [
            getattr(model_info.model_type, name).ilike(f"%{escape_like(text)}%", escape="\\")
            for name in model_info.simple_search_field_names
        ]
        if not clauses:
            logger.debug(f"No simple search fields for {model_info.model_name}, ignoring _all")
        return _combine(clauses, or_)

    def _predicate_for_path(
        self,
        model_type: type,
        path: Sequence[FieldInfo],
        operator: str,
        values: list[str],
    ) -> ColumnElement[bool]:
        leaf = path[-1]
        if leaf.is_relationship:
            related_info = self._registry.get_entry_for(leaf.related_model_type)
            path = [*path, related_info.fields[related_info.id_field_name]]
            leaf = path[-1]

        factory = self._factories.get_predicate_factory_for_class(leaf.python_type)
        if factory is None:
            raise BadRequestError(f"Member '{leaf.name}' of type {leaf.python_type} cannot be used as criteria")

        def build_leaf(attribute: Any) -> ColumnElement[bool]:
            return factory.build_predicate(attribute, operator, values)

        return _traverse(model_type, list(path), build_leaf)


def _traverse(
    model_type: type,
    path: list[FieldInfo],
    build_leaf: Callable[[Any], ColumnElement[bool]],
) -> ColumnElement[bool]:
    head, *rest = path
    attribute = getattr(model_type, head.name)
    if not rest:
        return build_leaf(attribute)
    inner = _traverse(head.related_model_type, rest, build_leaf)
    return attribute.any(inner) if head.uselist else attribute.has(inner)


def _combine(clauses: list[ColumnElement[bool]], conjunction) -> ColumnElement[bool] | None:
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return conjunction(*clauses)


def _first(values: Sequence[str] | None) -> str | None:
    return values[0] if values else None
