"""Predicate factory protocol.

Defines the interface for anything that turns a filter comparison
(column, operator, raw string arguments) into an ORM boolean expression.

Implementations include:
- String, boolean, number, date and datetime factories (built in)
- Enum factories (created lazily per enum class)
- Custom factories registered per Python type
"""

from typing import Any, Protocol, runtime_checkable

from sqlalchemy import ColumnElement


@runtime_checkable
class PredicateFactory(Protocol):
    """Protocol for per-type predicate builders.

    Example:
        ```python
        from mdd_rest.protocols import PredicateFactory

        factory: PredicateFactory = StringPredicateFactory()
        clause = factory.build_predicate(Book.title, "==", ["Dune*"])
        ```
    """

    def convert(self, value: str) -> Any:
        """Convert a raw query string argument to the column's Python type.

        Args:
            value: The raw argument

        Returns:
            The converted value

        Raises:
            BadRequestError: If the value cannot be converted
        """
        ...

    def build_predicate(self, expression: Any, operator: str, values: list[str]) -> ColumnElement[bool]:
        """Build a boolean expression comparing ``expression`` to ``values``.

        Args:
            expression: The mapped attribute or column expression
            operator: An RSQL comparison operator, e.g. "==" or "=in="
            values: Raw string arguments

        Returns:
            SQLAlchemy boolean clause

        Raises:
            BadRequestError: If the operator is not supported for the type
        """
        ...
