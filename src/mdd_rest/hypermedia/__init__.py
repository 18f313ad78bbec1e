"""Hypermedia response shaping: HATEOAS links, plain JSON resources and JSON:API documents."""

from .jsonapi import (
    JSON_API_PAGE_NUMBER_PARAM,
    from_document,
    to_collection_document,
    to_document,
    to_empty_document,
    to_page_document,
    to_resource_object,
)
from .links import (
    JSON_API_MEDIA_TYPE,
    MIME_APPLICATION_HAL_JSON,
    MIME_APPLICATION_JSON,
    MIME_APPLICATION_VND_API_JSON,
    Link,
    build_model_links,
    build_page_links,
    links_to_dict,
    links_to_json_api,
)
from .resources import model_to_dict, to_hateoas_paged_resources, to_hateoas_resource, to_hateoas_resources

__all__ = [
    "JSON_API_MEDIA_TYPE",
    "JSON_API_PAGE_NUMBER_PARAM",
    "MIME_APPLICATION_HAL_JSON",
    "MIME_APPLICATION_JSON",
    "MIME_APPLICATION_VND_API_JSON",
    "Link",
    "build_model_links",
    "build_page_links",
    "links_to_dict",
    "links_to_json_api",
    "model_to_dict",
    "to_hateoas_resource",
    "to_hateoas_resources",
    "to_hateoas_paged_resources",
    "to_resource_object",
    "to_document",
    "to_empty_document",
    "to_collection_document",
    "to_page_document",
    "from_document",
]
