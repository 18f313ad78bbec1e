"""Model registry.

Reads SQLAlchemy mapper metadata once per model class and caches it as
ModelInfo / FieldInfo entities for the lifetime of the process.
"""

import logging
import threading
from typing import Any

from sqlalchemy import String, inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import ColumnProperty, DeclarativeBase, Mapper, RelationshipProperty, configure_mappers

from mdd_rest.config import settings
from mdd_rest.entities import FieldInfo, ModelInfo
from mdd_rest.exceptions import ModelRegistrationError
from mdd_rest.models.resource import derive_path_fragment, get_resource_options, is_resource

logger = logging.getLogger(__name__)


class ModelInfoRegistry:
    """Thread-safe cache of resource model metadata.

    Example:
        ```python
        registry = ModelInfoRegistry()
        info = registry.register(Book)
        info.request_mapping     # "/api/rest/books"
        info.to_one_field_names  # ["author"]
        ```
    """

    def __init__(self, base_path: str | None = None) -> None:
        """Initialize an empty registry.

        Args:
            base_path: Prefix for request mappings. Defaults to settings.
        """
        path = settings.api_base_path if base_path is None else base_path
        self._base_path = path.rstrip("/")
        self._entries: dict[type, ModelInfo] = {}
        self._by_path: dict[str, ModelInfo] = {}
        self._exposed: set[type] = set()
        self._lock = threading.RLock()

    @classmethod
    def create(cls, models: list[type] | None = None, base_path: str | None = None) -> "ModelInfoRegistry":
        """Factory method creating a registry with the given models registered.

        Args:
            models: Model classes to register eagerly.
            base_path: Prefix for request mappings. Defaults to settings.

        Returns:
            Populated ModelInfoRegistry
        """
        registry = cls(base_path=base_path)
        for model_type in models or []:
            registry.register(model_type)
        return registry

    @property
    def base_path(self) -> str:
        return self._base_path

    def register(self, model_type: type) -> ModelInfo:
        """Register a model class as an exposed resource, returning its (cached) metadata.

        Args:
            model_type: A mapped SQLAlchemy class

        Returns:
            The ModelInfo for the class

        Raises:
            ModelRegistrationError: If the class is not mapped, has no single
                primary key, or its path fragment is already taken
        """
        info = self._load(model_type)
        if model_type not in self._exposed:
            with self._lock:
                self._exposed.add(model_type)
        return info

    def _load(self, model_type: type) -> ModelInfo:
        info = self._entries.get(model_type)
        if info is not None:
            return info

        with self._lock:
            info = self._entries.get(model_type)
            if info is not None:
                return info

            info = self._introspect(model_type)
            existing = self._by_path.get(info.path_fragment)
            if existing is not None:
                raise ModelRegistrationError(
                    f"Path fragment '{info.path_fragment}' of {model_type.__name__} "
                    f"is already mapped to {existing.model_name}"
                )

            self._by_path[info.path_fragment] = info
            self._entries[model_type] = info
            logger.info(f"Registered model {info.model_name} at {info.request_mapping}")
            return info

    def register_all(self, base: type[DeclarativeBase]) -> list[ModelInfo]:
        """Register every class mapped by ``base`` that is marked with ``scrud_resource``."""
        resources = sorted(
            (mapper.class_ for mapper in base.registry.mappers if is_resource(mapper.class_)),
            key=lambda cls: cls.__name__,
        )
        return [self.register(model_type) for model_type in resources]

    def get_entry_for(self, model_type: type) -> ModelInfo:
        """Get metadata for a model class, registering it lazily.

        A lazily registered class is known but not exposed: no router
        serves it until it is passed to ``register``.
        """
        return self._load(model_type)

    def is_exposed(self, model_type: type) -> bool:
        return model_type in self._exposed

    def get_entry_for_path(self, path_fragment: str) -> ModelInfo | None:
        return self._by_path.get(path_fragment.strip("/"))

    def related_model_info(self, field_info: FieldInfo) -> ModelInfo | None:
        """Resolve the metadata of a relationship's target model."""
        if field_info.related_model_type is None:
            return None
        return self.get_entry_for(field_info.related_model_type)

    def entries(self) -> list[ModelInfo]:
        return list(self._entries.values())

    def exposed_entries(self) -> list[ModelInfo]:
        return [info for model_type, info in list(self._entries.items()) if model_type in self._exposed]

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _introspect(self, model_type: type) -> ModelInfo:
        try:
            mapper: Mapper = inspect(model_type)
        except NoInspectionAvailable as e:
            raise ModelRegistrationError(f"{model_type!r} is not a mapped class") from e

        configure_mappers()

        primary_key = mapper.primary_key
        if len(primary_key) != 1:
            raise ModelRegistrationError(
                f"{model_type.__name__} must have exactly one primary key column, has {len(primary_key)}"
            )
        id_property = mapper.get_property_by_column(primary_key[0])

        fields: dict[str, FieldInfo] = {}
        for prop in mapper.column_attrs:
            fields[prop.key] = self._column_field(prop, is_id=prop.key == id_property.key)

        for rel in mapper.relationships:
            fields[rel.key] = self._relationship_field(mapper, rel)

        id_field = fields[id_property.key]
        options = get_resource_options(model_type)
        path_fragment = options.path_fragment or derive_path_fragment(model_type.__name__)

        return ModelInfo(
            model_type=model_type,
            id_field_name=id_field.name,
            id_type=id_field.python_type or str,
            path_fragment=path_fragment,
            request_mapping=f"{self._base_path}/{path_fragment}",
            api_name=options.api_name or model_type.__name__,
            description=options.description or _first_doc_line(model_type),
            json_api_type=options.json_api_type or path_fragment,
            fields=fields,
        )

    def _column_field(self, prop: ColumnProperty, is_id: bool) -> FieldInfo:
        column = prop.columns[0]
        info: dict[str, Any] = {**column.info, **prop.info}

        python_type = _python_type(column)
        enum_type = getattr(column.type, "enum_class", None)
        is_string = isinstance(column.type, String) and enum_type is None
        is_foreign_key = bool(column.foreign_keys)

        return FieldInfo(
            name=prop.key,
            python_type=python_type,
            is_column=True,
            is_id=is_id,
            nullable=bool(column.nullable) and not is_id,
            has_default=column.default is not None or column.server_default is not None or is_id,
            max_length=getattr(column.type, "length", None) if is_string else None,
            enum_type=enum_type,
            searchable=info.get("searchable", is_string and not is_id and not is_foreign_key),
            hidden=info.get("hidden", False),
            label=info.get("label"),
            previews=tuple(info.get("previews", ())),
        )

    def _relationship_field(self, mapper: Mapper, rel: RelationshipProperty) -> FieldInfo:
        info: dict[str, Any] = dict(rel.info)
        foreign_key_name = None
        if rel.direction.name == "MANYTOONE" and len(rel.local_columns) == 1:
            local_column = next(iter(rel.local_columns))
            foreign_key_name = mapper.get_property_by_column(local_column).key

        return FieldInfo(
            name=rel.key,
            python_type=rel.mapper.class_,
            is_column=False,
            nullable=True,
            relationship_direction=rel.direction.name,
            uselist=bool(rel.uselist),
            related_model_type=rel.mapper.class_,
            reverse_field_name=_reverse_field_name(mapper, rel),
            foreign_key_name=foreign_key_name,
            linkable=info.get("linkable", True),
            hidden=info.get("hidden", False),
            label=info.get("label"),
        )


def _python_type(column) -> type | None:
    try:
        return column.type.python_type
    except NotImplementedError:
        logger.debug(f"No python type for column {column.name} of type {column.type!r}")
        return None


def _reverse_field_name(mapper: Mapper, rel: RelationshipProperty) -> str | None:
    if rel.back_populates:
        return rel.back_populates
    for candidate in rel.mapper.relationships:
        if candidate.back_populates == rel.key and candidate.mapper.class_ is mapper.class_:
            return candidate.key
    return None


def _first_doc_line(model_type: type) -> str | None:
    doc = model_type.__doc__
    if not doc:
        return None
    return doc.strip().splitlines()[0]
