"""Model metadata domain entity."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from .field_info import FieldInfo


@dataclass(frozen=True)
class ModelInfo:
    """Cached metadata describing a registered resource model.

    Attributes:
        model_type: The mapped model class
        id_field_name: Primary key attribute name
        id_type: Python type of the primary key
        path_fragment: URI component, e.g. "books"
        request_mapping: Full collection path, e.g. "/api/rest/books"
        api_name: Name used for OpenAPI tags
        description: Free text description
        json_api_type: JSON:API ``type`` member
        fields: Ordered field metadata by attribute name
    """

    model_type: type
    id_field_name: str
    id_type: type
    path_fragment: str
    request_mapping: str
    api_name: str
    description: str | None
    json_api_type: str
    fields: Mapping[str, FieldInfo] = field(default_factory=dict)

    @property
    def uri_component(self) -> str:
        return self.path_fragment

    @property
    def model_name(self) -> str:
        return self.model_type.__name__

    def get_field(self, name: str) -> FieldInfo | None:
        return self.fields.get(name)

    @property
    def column_fields(self) -> list[FieldInfo]:
        return [f for f in self.fields.values() if f.is_column]

    @property
    def attribute_fields(self) -> list[FieldInfo]:
        """Visible non-id, non-foreign-key columns (JSON:API ``attributes``)."""
        foreign_keys = self.foreign_key_names
        return [
            f
            for f in self.fields.values()
            if f.is_column and not f.is_id and not f.hidden and f.name not in foreign_keys
        ]

    @property
    def relationship_fields(self) -> list[FieldInfo]:
        return [f for f in self.fields.values() if f.is_relationship]

    @property
    def foreign_key_names(self) -> set[str]:
        return {f.foreign_key_name for f in self.fields.values() if f.foreign_key_name}

    @property
    def to_one_field_names(self) -> list[str]:
        return [f.name for f in self.fields.values() if f.is_to_one]

    @property
    def to_many_field_names(self) -> list[str]:
        return [f.name for f in self.fields.values() if f.is_to_many]

    @property
    def simple_search_field_names(self) -> list[str]:
        return [f.name for f in self.fields.values() if f.is_column and f.searchable and not f.hidden]

    def __repr__(self) -> str:
        return f"ModelInfo({self.model_name}, mapping={self.request_mapping!r})"
