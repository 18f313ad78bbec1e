"""Pydantic models generated from registry metadata.

Input models validate and convert request bodies; the output model backs
the JSON Schema endpoint.
"""

import threading
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from mdd_rest.entities import FieldInfo, ModelInfo
from mdd_rest.exceptions import BadRequestError
from mdd_rest.registry import ModelInfoRegistry

_INPUT_CONFIG = ConfigDict(extra="ignore")


class SchemaFactory:
    """Creates and caches pydantic models per registered resource model.

    Example:
        ```python
        schemas = SchemaFactory(registry)
        values = schemas.validate_input(book_info, {"title": "Dune"})
        schema = schemas.json_schema(book_info)
        ```
    """

    def __init__(self, registry: ModelInfoRegistry) -> None:
        self._registry = registry
        self._cache: dict[tuple[type, str], type[BaseModel]] = {}
        self._lock = threading.RLock()

    def input_model(self, model_info: ModelInfo, partial: bool = False) -> type[BaseModel]:
        """Pydantic model for create/update (or patch, when ``partial``) bodies."""
        kind = "patch" if partial else "input"
        return self._cached(model_info, kind, lambda: self._build_input(model_info, partial))

    def output_model(self, model_info: ModelInfo) -> type[BaseModel]:
        """Pydantic model describing the plain JSON representation."""
        return self._cached(model_info, "output", lambda: self._build_output(model_info))

    def json_schema(self, model_info: ModelInfo) -> dict[str, Any]:
        """JSON Schema of the model's plain JSON representation."""
        schema = self.output_model(model_info).model_json_schema()
        if model_info.description:
            schema["description"] = model_info.description
        return schema

    def validate_input(self, model_info: ModelInfo, data: Any, partial: bool = False) -> dict[str, Any]:
        """Validate a request body and convert values to column types.

        Args:
            model_info: Target model metadata
            data: Decoded JSON body
            partial: Validate as a patch; unset and null members are dropped

        Returns:
            Attribute values keyed by member name

        Raises:
            BadRequestError: If the body does not validate
        """
        if not isinstance(data, dict):
            raise BadRequestError(f"Expected a JSON object for {model_info.model_name}")

        try:
            validated = self.input_model(model_info, partial).model_validate(data)
        except ValidationError as e:
            raise BadRequestError(_format_errors(model_info, e)) from e

        if partial:
            return {k: v for k, v in validated.model_dump(exclude_unset=True).items() if v is not None}

        values = validated.model_dump()
        unset = set(values) - validated.model_fields_set
        # unset relationships and defaulted columns keep their current value
        for name in unset:
            field_info = model_info.get_field(name)
            if field_info is not None and (field_info.is_relationship or field_info.has_default):
                del values[name]
        # a to-one relationship and its foreign key column are one member
        for name in model_info.to_one_field_names:
            foreign_key_name = model_info.get_field(name).foreign_key_name
            if foreign_key_name in unset:
                values.pop(foreign_key_name, None)
        return values

    def _cached(self, model_info: ModelInfo, kind: str, build) -> type[BaseModel]:
        key = (model_info.model_type, kind)
        model = self._cache.get(key)
        if model is None:
            with self._lock:
                model = self._cache.get(key)
                if model is None:
                    model = build()
                    self._cache[key] = model
        return model

    def _build_input(self, model_info: ModelInfo, partial: bool) -> type[BaseModel]:
        definitions: dict[str, Any] = {}
        for field_info in model_info.fields.values():
            if field_info.is_id:
                continue
            if field_info.is_column:
                annotation = _column_annotation(field_info)
            elif field_info.is_many_to_many or field_info.is_to_one:
                annotation = self._reference_annotation(field_info)
            else:
                # one-to-many collections are owned by the other side
                continue

            if partial or not field_info.is_required:
                definitions[field_info.name] = (annotation | None, Field(None, **_constraints(field_info)))
            else:
                definitions[field_info.name] = (annotation, Field(..., **_constraints(field_info)))

        suffix = "Patch" if partial else "Input"
        return create_model(f"{model_info.model_name}{suffix}", __config__=_INPUT_CONFIG, **definitions)

    def _build_output(self, model_info: ModelInfo) -> type[BaseModel]:
        definitions: dict[str, Any] = {}
        for field_info in model_info.column_fields:
            if field_info.hidden:
                continue
            annotation = _column_annotation(field_info)
            if field_info.nullable:
                annotation = annotation | None
            definitions[field_info.name] = (
                annotation,
                Field(None if field_info.nullable else ..., title=field_info.display_label),
            )
        return create_model(model_info.model_name, **definitions)

    def _reference_annotation(self, field_info: FieldInfo) -> Any:
        related_info = self._registry.get_entry_for(field_info.related_model_type)
        reference = self._cached(
            related_info,
            "reference",
            lambda: create_model(
                f"{related_info.model_name}Reference",
                __config__=_INPUT_CONFIG,
                id=(related_info.id_type, ...),
            ),
        )
        single = related_info.id_type | reference
        return list[single] if field_info.is_to_many else single


def _column_annotation(field_info: FieldInfo) -> Any:
    if field_info.enum_type is not None:
        return field_info.enum_type
    return field_info.python_type or Any


def _constraints(field_info: FieldInfo) -> dict[str, Any]:
    constraints: dict[str, Any] = {"title": field_info.display_label}
    if field_info.max_length:
        constraints["max_length"] = field_info.max_length
    return constraints


def _format_errors(model_info: ModelInfo, error: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or '<body>'}: {item['msg']}" for item in error.errors()
    )
    return f"Invalid {model_info.model_name}: {problems}"
