"""Page request parsing."""

from mdd_rest.config import settings
from mdd_rest.entities import ModelInfo, Pageable, SortOrder
from mdd_rest.exceptions import BadRequestError

PARAM_PAGE_NUMBER = "_pn"
PARAM_PAGE_SIZE = "_ps"
PARAM_SORT = "sort"
PARAM_JSONAPI_PAGE_NUMBER = "page[number]"
PARAM_JSONAPI_PAGE_SIZE = "page[size]"


def parse_sort(sort: str | None, model_info: ModelInfo | None = None) -> tuple[SortOrder, ...]:
    """Parse ``"-year,title"`` into sort orders; a leading dash means descending.

    Raises:
        BadRequestError: If a property is not a column of the model
    """
    if not sort:
        return ()

    orders = []
    for token in sort.split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        name = token.lstrip("+-").strip()
        if model_info is not None:
            field_info = model_info.get_field(name)
            if field_info is None or not field_info.is_column:
                raise BadRequestError(f"Cannot sort {model_info.model_name} by '{name}'")
        orders.append(SortOrder(property=name, descending=descending))
    return tuple(orders)


def _to_int(value: int | str | None, description: str) -> int | None:
    if value is None or isinstance(value, int):
        return value
    try:
        return int(value)
    except ValueError as e:
        raise BadRequestError(f"{description} must be an integer, got {value!r}") from e


def build_pageable(
    page: int | str | None = 0,
    size: int | str | None = None,
    sort: str | None = None,
    model_info: ModelInfo | None = None,
    max_size: int | None = None,
) -> Pageable:
    """Build a page request, defaulting the sort to the model id.

    Args:
        page: 0-based page number, as given in the query string
        size: Page size, as given. Defaults to settings; capped to ``max_size``
        sort: Comma separated properties, descending when prefixed with '-'
        model_info: Model used to validate sort properties
        max_size: Maximum page size. Defaults to settings.

    Returns:
        The Pageable

    Raises:
        BadRequestError: On a non-integer or negative page, a non-integer or
            non-positive size, or an unknown sort property
    """
    page = _to_int(page, "Page number")
    size = _to_int(size, "Page size")
    page = 0 if page is None else page
    size = settings.page_size_default if size is None else size
    max_size = max_size or settings.page_size_max

    if page < 0:
        raise BadRequestError(f"Page number must not be negative, got {page}")
    if size < 1:
        raise BadRequestError(f"Page size must be at least 1, got {size}")

    if not sort and model_info is not None:
        sort = model_info.id_field_name

    return Pageable(page=page, size=min(size, max_size), sort=parse_sort(sort, model_info))
