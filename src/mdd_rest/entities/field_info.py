"""Field metadata domain entity."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mdd_rest.models.resource import FilePreview


@dataclass(frozen=True)
class FieldInfo:
    """Cached metadata for a single persistent member of a model.

    Mirrors what the ORM mapper knows about a column or relationship so
    that query building and response shaping never repeat the lookup.

    Attributes:
        name: Attribute name on the model class
        python_type: Python type of a column value, or the related class
        is_column: True for columns, False for relationships
        is_id: Whether the column is (part of) the primary key
        nullable: Whether the column accepts NULL
        has_default: Whether the column is populated when not given
        max_length: Maximum length of string columns, if declared
        enum_type: Enum class for enum columns
        relationship_direction: "MANYTOONE", "ONETOMANY" or "MANYTOMANY"
        uselist: Whether the relationship holds a collection
        related_model_type: Target class of a relationship
        reverse_field_name: Name of the relationship on the target side
        foreign_key_name: Local column holding the related id (to-one only)
        linkable: Whether a relationship is exposed as a sub-resource
        searchable: Whether a string column takes part in ``_all`` search
        hidden: Excluded from representations and the UI schema
        label: Human readable label
        previews: Preview settings for file path columns
    """

    name: str
    python_type: type | None = None
    is_column: bool = True
    is_id: bool = False
    nullable: bool = True
    has_default: bool = False
    max_length: int | None = None
    enum_type: type[Enum] | None = None
    relationship_direction: str | None = None
    uselist: bool = False
    related_model_type: type | None = None
    reverse_field_name: str | None = None
    foreign_key_name: str | None = None
    linkable: bool = True
    searchable: bool = False
    hidden: bool = False
    label: str | None = None
    previews: tuple[FilePreview, ...] = field(default_factory=tuple)

    @property
    def is_relationship(self) -> bool:
        return not self.is_column

    @property
    def is_to_one(self) -> bool:
        return self.is_relationship and not self.uselist

    @property
    def is_to_many(self) -> bool:
        return self.is_relationship and self.uselist

    @property
    def is_one_to_many(self) -> bool:
        return self.is_to_many and self.relationship_direction == "ONETOMANY"

    @property
    def is_many_to_many(self) -> bool:
        return self.is_to_many and self.relationship_direction == "MANYTOMANY"

    @property
    def is_linkable_resource(self) -> bool:
        """Whether the member is a relationship exposed as a sub-resource."""
        return self.is_relationship and self.linkable and self.related_model_type is not None

    @property
    def is_required(self) -> bool:
        """Whether a value must be supplied on create."""
        if self.is_id or self.is_relationship:
            return False
        return not self.nullable and not self.has_default

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()

    def enum_values(self) -> list[Any]:
        if self.enum_type is None:
            return []
        return [member.value for member in self.enum_type]
