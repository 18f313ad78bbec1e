"""UI schema generation."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from mdd_rest.dto import UiField, UiSchema
from mdd_rest.entities import FieldInfo, ModelInfo
from mdd_rest.registry import ModelInfoRegistry

_TYPE_NAMES: dict[type, str] = {
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
    Decimal: "number",
    date: "date",
    datetime: "datetime",
    uuid.UUID: "uuid",
}


def build_ui_schema(model_info: ModelInfo, registry: ModelInfoRegistry) -> UiSchema:
    """Describe the model's visible fields for form and table generation.

    Args:
        model_info: Metadata of the model
        registry: Used to resolve relationship targets

    Returns:
        The UI schema DTO
    """
    fields = [_ui_field(f, registry) for f in model_info.fields.values() if not f.hidden]
    return UiSchema(
        name=model_info.model_name,
        api_name=model_info.api_name,
        description=model_info.description,
        request_mapping=model_info.request_mapping,
        id_field=model_info.id_field_name,
        fields=fields,
    )


def _ui_field(field_info: FieldInfo, registry: ModelInfoRegistry) -> UiField:
    if field_info.is_relationship:
        related_info = registry.related_model_info(field_info)
        return UiField(
            name=field_info.name,
            type="relationship",
            label=field_info.display_label,
            related_path=related_info.request_mapping if related_info else None,
            to_many=field_info.is_to_many,
        )

    if field_info.enum_type is not None:
        type_name = "enum"
    else:
        type_name = _TYPE_NAMES.get(field_info.python_type, "string")
    if field_info.previews:
        type_name = "file"

    return UiField(
        name=field_info.name,
        type=type_name,
        label=field_info.display_label,
        required=field_info.is_required,
        max_length=field_info.max_length,
        enum_values=field_info.enum_values() or None,
        previews=[p.to_dict() for p in field_info.previews] or None,
    )
