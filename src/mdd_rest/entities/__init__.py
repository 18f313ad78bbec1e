"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by the registry,
services and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .field_info import FieldInfo
from .model_info import ModelInfo
from .page import Pageable, ParamsAwarePage, SortOrder

__all__ = ["FieldInfo", "ModelInfo", "Pageable", "ParamsAwarePage", "SortOrder"]
