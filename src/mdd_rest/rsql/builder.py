"""Translates RSQL syntax trees and request parameters into ORM criteria."""

import logging
from collections.abc import Mapping, Sequence

from sqlalchemy import ColumnElement, and_, or_

from mdd_rest.entities import ModelInfo
from mdd_rest.specification import FILTER_PARAM_NAME, CriteriaBuilder

from .ast import AndNode, ComparisonNode, Node, OrNode
from .parser import parse

logger = logging.getLogger(__name__)


class RsqlQueryBuilder:
    """Builds SQLAlchemy boolean clauses from RSQL.

    Example:
        ```python
        rsql = RsqlQueryBuilder(CriteriaBuilder.create(registry))
        clause = rsql.build(book_info, "title==Dune*;year=ge=1965")
        ```
    """

    def __init__(self, criteria: CriteriaBuilder) -> None:
        self._criteria = criteria

    @property
    def criteria(self) -> CriteriaBuilder:
        return self._criteria

    def build(self, model_info: ModelInfo, query: str | Node) -> ColumnElement[bool]:
        """Build the clause for an RSQL expression or an already parsed tree.

        Raises:
            RsqlSyntaxError: If ``query`` cannot be parsed
            BadRequestError: If a selector, operator or argument is invalid
        """
        node = parse(query) if isinstance(query, str) else query
        return self._visit(model_info, node)

    def build_specification(
        self,
        model_info: ModelInfo,
        params: Mapping[str, Sequence[str]],
        implicit_criteria: Mapping[str, Sequence[str]] | None = None,
        ignored: Sequence[str] = (),
    ) -> ColumnElement[bool] | None:
        """Combine the ``filter`` RSQL parameter with URL parameter criteria.

        Args:
            model_info: Root model metadata
            params: Request parameters, name to values
            implicit_criteria: Criteria always applied, e.g. the parent id
                of a relationship sub-resource
            ignored: Extra parameter names that are not criteria

        Returns:
            The combined clause or None when nothing applies
        """
        clauses: list[ColumnElement[bool]] = []

        filters = [f for f in params.get(FILTER_PARAM_NAME, ()) if f and f.strip()]
        for query in filters:
            logger.debug(f"Building RSQL criteria for {model_info.model_name}: {query}")
            clauses.append(self.build(model_info, query))

        simple = self._criteria.build_simple_criteria(model_info, params, implicit_criteria, ignored)
        if simple is not None:
            clauses.append(simple)

        if not clauses:
            return None
        return clauses[0] if len(clauses) == 1 else and_(*clauses)

    def _visit(self, model_info: ModelInfo, node: Node) -> ColumnElement[bool]:
        if isinstance(node, ComparisonNode):
            return self._criteria.predicate_for(
                model_info,
                node.selector,
                node.operator,
                list(node.arguments),
            )
        if isinstance(node, AndNode):
            return and_(*(self._visit(model_info, child) for child in node.children))
        if isinstance(node, OrNode):
            return or_(*(self._visit(model_info, child) for child in node.children))
        raise TypeError(f"Unknown RSQL node: {node!r}")
