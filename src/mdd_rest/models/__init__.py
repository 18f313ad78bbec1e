"""Model base classes and resource markers."""

from .base import Base, SystemUuidModel
from .resource import (
    FilePreview,
    ResourceOptions,
    derive_path_fragment,
    get_resource_options,
    is_resource,
    scrud_resource,
)

__all__ = [
    "Base",
    "SystemUuidModel",
    "FilePreview",
    "ResourceOptions",
    "scrud_resource",
    "get_resource_options",
    "is_resource",
    "derive_path_fragment",
]
