"""Predicate factories per Python value type."""

import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum, StrEnum
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, not_

from mdd_rest.exceptions import BadRequestError

N = TypeVar("N", int, float, Decimal)
E = TypeVar("E", bound=Enum)


class Operator(StrEnum):
    """Comparison operators understood by the query builders."""

    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "=lt="
    LESS_THAN_OR_EQUAL = "=le="
    GREATER_THAN = "=gt="
    GREATER_THAN_OR_EQUAL = "=ge="
    IN = "=in="
    NOT_IN = "=out="
    LIKE = "=like="
    ILIKE = "=ilike="
    IS_NULL = "=isnull="

    @classmethod
    def parse(cls, symbol: str) -> "Operator":
        """Resolve an operator symbol, accepting the ``<``/``<=``/``>``/``>=`` aliases."""
        symbol = OPERATOR_ALIASES.get(symbol, symbol)
        try:
            return cls(symbol)
        except ValueError:
            raise BadRequestError(f"Unknown comparison operator: {symbol}") from None


OPERATOR_ALIASES = {
    "<": Operator.LESS_THAN.value,
    "<=": Operator.LESS_THAN_OR_EQUAL.value,
    ">": Operator.GREATER_THAN.value,
    ">=": Operator.GREATER_THAN_OR_EQUAL.value,
}

ORDERING_OPERATORS = frozenset(
    {
        Operator.LESS_THAN,
        Operator.LESS_THAN_OR_EQUAL,
        Operator.GREATER_THAN,
        Operator.GREATER_THAN_OR_EQUAL,
    }
)
MULTI_VALUE_OPERATORS = frozenset({Operator.IN, Operator.NOT_IN})

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise BadRequestError(f"Not a boolean value: {value!r}")


class AbstractPredicateFactory:
    """Base predicate factory.

    Subclasses declare the operators they support and implement ``convert``.
    Equality may be overridden to add type specific matching.
    """

    supported_operators: frozenset[Operator] = frozenset(Operator) - {Operator.LIKE, Operator.ILIKE}
    type_name: str = "value"

    def convert(self, value: str) -> Any:
        raise NotImplementedError

    def build_predicate(self, expression: Any, operator: str, values: list[str]) -> ColumnElement[bool]:
        op = Operator.parse(operator)

        if not values:
            raise BadRequestError(f"Operator {op.value} requires at least one argument")

        if op is Operator.IS_NULL:
            return expression.is_(None) if parse_bool(values[0]) else expression.is_not(None)

        if op not in self.supported_operators:
            raise BadRequestError(f"Operator {op.value} is not supported for {self.type_name} members")

        if op in MULTI_VALUE_OPERATORS:
            converted = [self._convert(v) for v in values]
            return expression.in_(converted) if op is Operator.IN else expression.not_in(converted)

        if len(values) != 1:
            raise BadRequestError(f"Operator {op.value} takes exactly one argument, got {len(values)}")

        return self._compare(expression, op, values[0])

    def _compare(self, expression: Any, op: Operator, raw: str) -> ColumnElement[bool]:
        value = self._convert(raw)
        if op is Operator.EQUAL:
            return expression == value
        if op is Operator.NOT_EQUAL:
            return expression != value
        if op is Operator.LESS_THAN:
            return expression < value
        if op is Operator.LESS_THAN_OR_EQUAL:
            return expression <= value
        if op is Operator.GREATER_THAN:
            return expression > value
        if op is Operator.GREATER_THAN_OR_EQUAL:
            return expression >= value
        raise BadRequestError(f"Operator {op.value} is not supported for {self.type_name} members")

    def _convert(self, raw: str) -> Any:
        try:
            return self.convert(raw)
        except BadRequestError:
            raise
        except (ValueError, TypeError, KeyError, InvalidOperation) as e:
            raise BadRequestError(f"Invalid {self.type_name} value: {raw!r}") from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StringPredicateFactory(AbstractPredicateFactory):
    """String comparisons; ``*`` in equality arguments acts as a wildcard."""

    supported_operators = frozenset(Operator)
    type_name = "string"

    def convert(self, value: str) -> str:
        return value

    def _compare(self, expression: Any, op: Operator, raw: str) -> ColumnElement[bool]:
        if op is Operator.EQUAL and "*" in raw:
            return expression.like(_wildcards(raw), escape="\\")
        if op is Operator.NOT_EQUAL and "*" in raw:
            return not_(expression.like(_wildcards(raw), escape="\\"))
        if op is Operator.LIKE:
            return expression.like(_contains(raw), escape="\\")
        if op is Operator.ILIKE:
            return expression.ilike(_contains(raw), escape="\\")
        return super()._compare(expression, op, raw)


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters for use with ``escape="\\"``."""
    return value.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")


def _wildcards(value: str) -> str:
    return escape_like(value).replace("*", "%")


def _contains(value: str) -> str:
    pattern = _wildcards(value)
    return pattern if "*" in value else f"%{pattern}%"


class BooleanPredicateFactory(AbstractPredicateFactory):
    supported_operators = frozenset(Operator) - ORDERING_OPERATORS - {Operator.LIKE, Operator.ILIKE}
    type_name = "boolean"

    def convert(self, value: str) -> bool:
        return parse_bool(value)


class NumberPredicateFactory(AbstractPredicateFactory, Generic[N]):
    """Comparisons for int, float and Decimal members."""

    def __init__(self, number_type: type[N]) -> None:
        self.number_type = number_type
        self.type_name = number_type.__name__

    def convert(self, value: str) -> N:
        return self.number_type(value.strip())

    def __repr__(self) -> str:
        return f"NumberPredicateFactory({self.number_type.__name__})"


class DatePredicateFactory(AbstractPredicateFactory):
    """ISO-8601 dates, e.g. ``2024-01-31``."""

    type_name = "date"

    def convert(self, value: str) -> date:
        return date.fromisoformat(value.strip())


class DateTimePredicateFactory(AbstractPredicateFactory):
    """ISO-8601 date-times; a bare date means midnight."""

    type_name = "datetime"

    def convert(self, value: str) -> datetime:
        return datetime.fromisoformat(value.strip())


class UuidPredicateFactory(AbstractPredicateFactory):
    supported_operators = frozenset(Operator) - ORDERING_OPERATORS - {Operator.LIKE, Operator.ILIKE}
    type_name = "uuid"

    def convert(self, value: str) -> uuid.UUID:
        return uuid.UUID(value.strip())


class EnumStringPredicateFactory(AbstractPredicateFactory, Generic[E]):
    """Matches enum members by name, falling back to value."""

    supported_operators = frozenset(Operator) - ORDERING_OPERATORS - {Operator.LIKE, Operator.ILIKE}

    def __init__(self, enum_type: type[E]) -> None:
        self.enum_type = enum_type
        self.type_name = enum_type.__name__

    def convert(self, value: str) -> E:
        try:
            return self.enum_type[value]
        except KeyError:
            pass
        for member in self.enum_type:
            if str(member.value) == value:
                return member
        raise BadRequestError(
            f"Invalid {self.type_name} value: {value!r}, expected one of "
            f"{', '.join(m.name for m in self.enum_type)}"
        )

    def __repr__(self) -> str:
        return f"EnumStringPredicateFactory({self.enum_type.__name__})"
