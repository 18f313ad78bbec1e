"""Application-wide collaborators shared by all resource services."""

from dataclasses import dataclass

from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.rsql import RsqlQueryBuilder
from mdd_rest.schema import SchemaFactory
from mdd_rest.specification import CriteriaBuilder, PredicateFactoryRegistry


@dataclass(frozen=True)
class ServiceContext:
    """Registry and the caches built on top of it.

    Created once per application and stored in ``app.state``; services are
    created per request around it.
    """

    registry: ModelInfoRegistry
    query_builder: RsqlQueryBuilder
    schemas: SchemaFactory

    @classmethod
    def create(
        cls,
        registry: ModelInfoRegistry,
        factories: PredicateFactoryRegistry | None = None,
    ) -> "ServiceContext":
        """Factory method wiring the query builder and schema factory to ``registry``."""
        return cls(
            registry=registry,
            query_builder=RsqlQueryBuilder(CriteriaBuilder.create(registry, factories)),
            schemas=SchemaFactory(registry),
        )
