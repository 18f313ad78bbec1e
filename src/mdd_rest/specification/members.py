"""Cached member lookups by (possibly dotted) path."""

import logging
import threading

from mdd_rest.entities import FieldInfo
from mdd_rest.registry import ModelInfoRegistry

logger = logging.getLogger(__name__)

SIMPLE_SEARCH_PARAM_NAME = "_all"
SEARCH_MODE_PARAM_NAME = "_searchmode"
FILTER_PARAM_NAME = "filter"

# Request parameters that never name a model member
IGNORED_FIELD_NAMES = frozenset(
    {
        "page",
        "size",
        "sort",
        "direction",
        "properties",
        "totalPages",
        "totalElements",
        "format",
        "ids",
        "ids[]",
        "_pn",
        "_ps",
        "page[number]",
        "page[size]",
        FILTER_PARAM_NAME,
        SEARCH_MODE_PARAM_NAME,
        SIMPLE_SEARCH_PARAM_NAME,
    }
)


class MemberCache:
    """Resolves member paths against registered models, caching hits and misses.

    Unknown paths are cached as ``None`` so repeated lookups skip the scan.
    """

    def __init__(self, registry: ModelInfoRegistry) -> None:
        self._registry = registry
        self._paths: dict[tuple[type, str], tuple[FieldInfo, ...] | None] = {}
        self._lock = threading.Lock()

    def resolve_path(self, model_type: type, member_path: str) -> tuple[FieldInfo, ...] | None:
        """Resolve ``a.b.c`` to the FieldInfo of every segment.

        Args:
            model_type: The root model class
            member_path: Attribute name, optionally dotted through relationships

        Returns:
            Tuple of FieldInfo from root to leaf, or None if the path is
            ignored or unknown
        """
        if member_path in IGNORED_FIELD_NAMES:
            return None

        key = (model_type, member_path)
        if key in self._paths:
            return self._paths[key]

        with self._lock:
            if key in self._paths:
                return self._paths[key]

            path = self._scan(model_type, member_path)
            if path is None:
                logger.warning(f"Caching empty result for field {model_type.__name__}#{member_path}")
            else:
                logger.debug(f"Added member path to cache: {model_type.__name__}#{member_path}")
            self._paths[key] = path
            return path

    def get_field(self, model_type: type, field_name: str) -> FieldInfo | None:
        """Get the (cached) field for the given model member name."""
        path = self.resolve_path(model_type, field_name)
        return path[-1] if path else None

    def get_member_type(self, model_type: type, member_path: str) -> type | None:
        """Get the (cached) value type for the given member path."""
        path = self.resolve_path(model_type, member_path)
        return path[-1].python_type if path else None

    def _scan(self, model_type: type, member_path: str) -> tuple[FieldInfo, ...] | None:
        segments = member_path.split(".")
        current = model_type
        path: list[FieldInfo] = []

        for index, segment in enumerate(segments):
            if current is None:
                return None
            model_info = self._registry.get_entry_for(current)
            field_info = model_info.get_field(segment)
            if field_info is None:
                return None
            if field_info.is_relationship:
                current = field_info.related_model_type
            elif index < len(segments) - 1:
                # columns have no members
                return None
            path.append(field_info)

        return tuple(path)
