"""Query criteria: predicate factories, member lookups and URL parameter search.

Architecture:
    RSQL / URL params -> CriteriaBuilder -> PredicateFactory -> SQLAlchemy clause
"""

from .criteria import AND, OR, CriteriaBuilder
from .factories import (
    AbstractPredicateFactory,
    BooleanPredicateFactory,
    DatePredicateFactory,
    DateTimePredicateFactory,
    EnumStringPredicateFactory,
    NumberPredicateFactory,
    Operator,
    StringPredicateFactory,
    UuidPredicateFactory,
)
from .factory_registry import PredicateFactoryRegistry, default_factory_registry
from .members import (
    FILTER_PARAM_NAME,
    IGNORED_FIELD_NAMES,
    SEARCH_MODE_PARAM_NAME,
    SIMPLE_SEARCH_PARAM_NAME,
    MemberCache,
)

__all__ = [
    "AND",
    "OR",
    "CriteriaBuilder",
    "Operator",
    "AbstractPredicateFactory",
    "BooleanPredicateFactory",
    "DatePredicateFactory",
    "DateTimePredicateFactory",
    "EnumStringPredicateFactory",
    "NumberPredicateFactory",
    "StringPredicateFactory",
    "UuidPredicateFactory",
    "PredicateFactoryRegistry",
    "default_factory_registry",
    "MemberCache",
    "IGNORED_FIELD_NAMES",
    "FILTER_PARAM_NAME",
    "SEARCH_MODE_PARAM_NAME",
    "SIMPLE_SEARCH_PARAM_NAME",
]
