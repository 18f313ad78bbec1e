"""Resource markers for model classes.

``scrud_resource`` marks a mapped class as a REST resource. Column and
relationship level options are read from SQLAlchemy's ``info`` dictionary:

    label       human readable label used by the UI schema
    hidden      exclude the member from representations and the UI schema
    linkable    expose a relationship as a sub-resource (default True)
    searchable  include a string column in ``_all`` search (default True)
    previews    list of FilePreview for file path columns
"""

import re
from dataclasses import dataclass
from typing import Any, TypeVar

RESOURCE_OPTIONS_ATTR = "__mdd_resource__"

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class FilePreview:
    """Thumbnail or other preview generation settings for a file column.

    Attributes:
        max_width: Maximum width in pixels (images only)
        max_height: Maximum height in pixels (images only)
        preserve_ratio: Preserve aspect ratio when scaling (images only)
    """

    max_width: int
    max_height: int
    preserve_ratio: bool = True

    def __post_init__(self) -> None:
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("Preview dimensions must be positive")

    def to_dict(self) -> dict[str, Any]:
        return {
            "maxWidth": self.max_width,
            "maxHeight": self.max_height,
            "preserveRatio": self.preserve_ratio,
        }


@dataclass(frozen=True)
class ResourceOptions:
    """Options given to ``scrud_resource``."""

    path_fragment: str | None = None
    api_name: str | None = None
    description: str | None = None
    json_api_type: str | None = None


def scrud_resource(
    path_fragment: str | None = None,
    api_name: str | None = None,
    description: str | None = None,
    json_api_type: str | None = None,
):
    """Class decorator marking a mapped model as a REST resource.

    Args:
        path_fragment: URI component for the generated endpoints. Defaults to
            the pluralised kebab-case class name.
        api_name: Name used for OpenAPI tags. Defaults to the class name.
        description: Resource description for docs and the UI schema.
        json_api_type: JSON:API ``type`` member. Defaults to the path fragment.

    Returns:
        The decorator
    """
    options = ResourceOptions(
        path_fragment=path_fragment.strip("/") if path_fragment else None,
        api_name=api_name,
        description=description,
        json_api_type=json_api_type,
    )

    def decorate(cls: T) -> T:
        setattr(cls, RESOURCE_OPTIONS_ATTR, options)
        return cls

    return decorate


def get_resource_options(model_type: type) -> ResourceOptions:
    """Return the options the class was decorated with, or defaults."""
    options = model_type.__dict__.get(RESOURCE_OPTIONS_ATTR)
    return options if options is not None else ResourceOptions()


def is_resource(model_type: type) -> bool:
    return RESOURCE_OPTIONS_ATTR in model_type.__dict__


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def derive_path_fragment(class_name: str) -> str:
    """Derive a URI component from a class name: ``BookAuthor`` -> ``book-authors``."""
    words = _CAMEL_BOUNDARY.sub("-", class_name).lower()
    if words.endswith("y") and not words.endswith(("ay", "ey", "oy", "uy")):
        return words[:-1] + "ies"
    if words.endswith(("s", "x", "z", "ch", "sh")):
        return words + "es"
    return words + "s"
