"""Plain JSON resource representations with HATEOAS ``_links``."""

import logging
from collections.abc import Iterable
from typing import Any

from fastapi.encoders import jsonable_encoder

from mdd_rest.dto import PageMetadata
from mdd_rest.entities import ModelInfo, ParamsAwarePage
from mdd_rest.registry import ModelInfoRegistry

from .links import SELF_REL, build_model_links, build_page_links, links_to_dict

logger = logging.getLogger(__name__)

LINKS_KEY = "_links"


def model_to_dict(model: Any, model_info: ModelInfo) -> dict[str, Any]:
    """Visible column values of ``model``, JSON encoded."""
    values = {f.name: getattr(model, f.name) for f in model_info.column_fields if not f.hidden}
    return jsonable_encoder(values)


def to_hateoas_resource(model: Any, model_info: ModelInfo, base_url: str, exposed: bool = True) -> dict[str, Any]:
    """Wrap a single model: its values plus self and relationship links.

    Models of a class no router serves (``exposed`` false) carry no links.
    """
    resource = model_to_dict(model, model_info)
    links = build_model_links(model, model_info, base_url, exposed)
    logger.debug(f"to_hateoas_resource, model: {model!r}, modelInfo: {model_info!r}")
    if links:
        resource[LINKS_KEY] = links_to_dict(links)
    return resource


def to_hateoas_resources(models: Iterable[Any], model_info: ModelInfo, base_url: str) -> dict[str, Any]:
    """Wrap a collection of models under ``content``."""
    return {
        "content": [to_hateoas_resource(m, model_info, base_url) for m in models],
        LINKS_KEY: {SELF_REL: {"href": f"{base_url.rstrip('/')}{model_info.request_mapping}"}},
    }


def to_hateoas_paged_resources(
    page: ParamsAwarePage,
    url: str,
    page_number_param_name: str,
    registry: ModelInfoRegistry,
    base_url: str,
) -> dict[str, Any]:
    """Wrap a page of models with page metadata, request parameters and page links.

    Each element is wrapped using the metadata of its own class, so pages
    of related models render correctly.
    """
    content = []
    for model in page.content:
        model_info = registry.get_entry_for(type(model))
        content.append(to_hateoas_resource(model, model_info, base_url, registry.is_exposed(model_info.model_type)))

    metadata = PageMetadata(
        size=page.size,
        number=page.number,
        total_elements=page.total_elements,
        total_pages=page.total_pages,
    )
    links = build_page_links(page, url, page_number_param_name)
    return {
        "content": content,
        "page": metadata.model_dump(by_alias=True),
        "parameters": {k: list(v) for k, v in page.parameters.items()},
        LINKS_KEY: links_to_dict(links),
    }
