"""JSON Schema and UI schema generation from registry metadata."""

from .model_schemas import SchemaFactory
from .ui_schema import build_ui_schema

__all__ = ["SchemaFactory", "build_ui_schema"]
