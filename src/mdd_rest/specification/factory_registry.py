"""Dispatch table from Python value types to predicate factories."""

import logging
import threading
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from mdd_rest.protocols import PredicateFactory

from .factories import (
    BooleanPredicateFactory,
    DatePredicateFactory,
    DateTimePredicateFactory,
    EnumStringPredicateFactory,
    NumberPredicateFactory,
    StringPredicateFactory,
    UuidPredicateFactory,
)

logger = logging.getLogger(__name__)


class PredicateFactoryRegistry:
    """Maps member types to the predicate factory that handles them.

    Lookup is by exact type. Enum types get an ``EnumStringPredicateFactory``
    created and cached on first use.
    """

    def __init__(self, factories: dict[type, PredicateFactory] | None = None) -> None:
        self._factories: dict[type, PredicateFactory] = dict(factories or {})
        self._lock = threading.RLock()

    @classmethod
    def create(cls) -> "PredicateFactoryRegistry":
        """Factory method creating a registry with the built-in factories."""
        return cls(
            {
                str: StringPredicateFactory(),
                bool: BooleanPredicateFactory(),
                date: DatePredicateFactory(),
                datetime: DateTimePredicateFactory(),
                uuid.UUID: UuidPredicateFactory(),
                int: NumberPredicateFactory(int),
                float: NumberPredicateFactory(float),
                Decimal: NumberPredicateFactory(Decimal),
            }
        )

    def add_factory_for_class(self, value_type: type, factory: PredicateFactory) -> None:
        """Register the predicate factory for the given type.

        Args:
            value_type: Python type of member values
            factory: The factory building predicates for that type
        """
        if value_type is None:
            raise ValueError("value_type cannot be None")
        if factory is None:
            raise ValueError("factory cannot be None")

        logger.debug(f"Registering predicate factory {factory!r} for type {value_type.__name__}")
        with self._lock:
            self._factories[value_type] = factory

    def get_predicate_factory_for_class(self, value_type: type | None) -> PredicateFactory | None:
        """Get the predicate factory for the given type, if any."""
        if value_type is None:
            return None

        factory = self._factories.get(value_type)
        if factory is None and isinstance(value_type, type) and issubclass(value_type, Enum):
            with self._lock:
                factory = self._factories.get(value_type)
                if factory is None:
                    factory = EnumStringPredicateFactory(value_type)
                    self.add_factory_for_class(value_type, factory)

        logger.debug(f"get_predicate_factory_for_class, type: {value_type}, factory: {factory!r}")
        return factory


# Shared default instance
default_factory_registry = PredicateFactoryRegistry.create()
