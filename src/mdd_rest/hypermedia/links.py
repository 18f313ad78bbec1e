"""HATEOAS link building."""

import logging
from dataclasses import dataclass
from typing import Any

from fastapi.datastructures import URL

from mdd_rest.entities import ModelInfo, ParamsAwarePage

logger = logging.getLogger(__name__)

MIME_APPLICATION_JSON = "application/json"
MIME_APPLICATION_HAL_JSON = "application/hal+json"
MIME_APPLICATION_VND_API_JSON = "application/vnd.api+json"
JSON_API_MEDIA_TYPE = MIME_APPLICATION_VND_API_JSON

SELF_REL = "self"


@dataclass(frozen=True)
class Link:
    """A hypermedia link relation."""

    rel: str
    href: str


def links_to_dict(links: list[Link] | None) -> dict[str, dict[str, str]]:
    """Render links HAL style: ``{"self": {"href": "..."}}``."""
    return {link.rel: {"href": link.href} for link in links or []}


def links_to_json_api(links: list[Link] | None) -> dict[str, str]:
    """Render links JSON:API style: ``{"self": "..."}``."""
    return {link.rel: link.href for link in links or []}


def build_page_links(page: ParamsAwarePage, url: str, page_number_param_name: str) -> list[Link]:
    """Build first/previous/next/last links for a page of results.

    Every other query parameter of ``url`` is preserved; only the page number
    parameter is replaced.

    Args:
        page: The page of results
        url: The full request URL
        page_number_param_name: Query parameter carrying the page number

    Returns:
        Links in first, previous, next, last order, omitting those that do
        not apply
    """
    base = URL(url)

    def to_page(number: int) -> str:
        return str(base.include_query_params(**{page_number_param_name: number}))

    links: list[Link] = []
    if not page.is_first:
        links.append(Link("first", to_page(0)))
    if page.has_previous:
        links.append(Link("previous", to_page(page.number - 1)))
    if page.has_next:
        links.append(Link("next", to_page(page.number + 1)))
    if not page.is_last:
        links.append(Link("last", to_page(page.total_pages - 1)))
    return links


def model_url(base_url: str, model_info: ModelInfo, id: Any) -> str:
    return f"{base_url.rstrip('/')}{model_info.request_mapping}/{id}"


def build_model_links(
    model: Any,
    model_info: ModelInfo | None,
    base_url: str,
    exposed: bool = True,
) -> list[Link] | None:
    """Build the self link and one link per linkable relationship.

    Args:
        model: The model instance
        model_info: Its metadata
        base_url: Scheme and host the API is served from
        exposed: Whether a router serves the model's class

    Returns:
        The links, or None when the model has no id, no metadata or no router
    """
    if model_info is None or not exposed:
        return None
    id = getattr(model, model_info.id_field_name, None)
    if id is None:
        return None

    self_href = model_url(base_url, model_info, id)
    links = [Link(SELF_REL, self_href)]

    relationship_names = [*model_info.to_one_field_names, *model_info.to_many_field_names]
    for name in relationship_names:
        field_info = model_info.get_field(name)
        if field_info.is_linkable_resource and not field_info.hidden:
            links.append(Link(name, f"{self_href}/relationships/{name}"))
    return links
