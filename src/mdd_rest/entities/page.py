"""Paging domain entities."""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SortOrder:
    """Sort direction for a single property."""

    property: str
    descending: bool = False

    def __str__(self) -> str:
        return f"-{self.property}" if self.descending else self.property


@dataclass(frozen=True)
class Pageable:
    """Page request: 0-based page number, page size and sort orders."""

    page: int = 0
    size: int = 10
    sort: tuple[SortOrder, ...] = field(default_factory=tuple)

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class ParamsAwarePage:
    """A page of results that remembers the request parameters behind it.

    Attributes:
        content: Models on this page
        pageable: The page request
        total_elements: Total matches across all pages
        parameters: Request parameters that produced the page
    """

    content: Sequence[Any]
    pageable: Pageable
    total_elements: int
    parameters: Mapping[str, list[str]] = field(default_factory=dict)

    @property
    def number(self) -> int:
        return self.pageable.page

    @property
    def size(self) -> int:
        return self.pageable.size

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        if self.size == 0:
            return 1
        return math.ceil(self.total_elements / self.size)

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 0
