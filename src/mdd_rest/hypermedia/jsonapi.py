"""JSON:API document assembly and unwrapping."""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from mdd_rest.dto import JsonApiDocumentRequest, PageMetadata, ResourceIdentifier
from mdd_rest.entities import ModelInfo, ParamsAwarePage
from mdd_rest.exceptions import BadRequestError
from mdd_rest.registry import ModelInfoRegistry

from .links import SELF_REL, build_page_links, links_to_json_api, model_url
from .resources import model_to_dict

logger = logging.getLogger(__name__)

JSON_API_PAGE_NUMBER_PARAM = "page[number]"


def to_resource_object(model: Any, model_info: ModelInfo, registry: ModelInfoRegistry, base_url: str) -> dict[str, Any]:
    """Render a model as a JSON:API resource object.

    To-one linkage is read from the foreign key column so the related row
    is never loaded; to-many relationships carry links only. Models of a
    class no router serves are rendered without links or relationships.
    """
    id = getattr(model, model_info.id_field_name)
    self_href = model_url(base_url, model_info, id)
    exposed = registry.is_exposed(model_info.model_type)
    attributes = model_to_dict(model, model_info)
    for name in (model_info.id_field_name, *model_info.foreign_key_names):
        attributes.pop(name, None)

    relationships: dict[str, Any] = {}
    for field_info in model_info.relationship_fields:
        if not exposed or not field_info.is_linkable_resource or field_info.hidden:
            continue
        relationship: dict[str, Any] = {
            "links": {
                SELF_REL: f"{self_href}/relationships/{field_info.name}",
                "related": f"{self_href}/{field_info.name}",
            }
        }
        if field_info.is_to_one and field_info.foreign_key_name:
            related_id = getattr(model, field_info.foreign_key_name)
            related_info = registry.related_model_info(field_info)
            relationship["data"] = (
                None if related_id is None else {"type": related_info.json_api_type, "id": str(related_id)}
            )
        relationships[field_info.name] = relationship

    resource: dict[str, Any] = {
        "type": model_info.json_api_type,
        "id": str(id),
        "attributes": attributes,
    }
    if relationships:
        resource["relationships"] = relationships
    if exposed:
        resource["links"] = {SELF_REL: self_href}
    return resource


def to_document(model: Any, model_info: ModelInfo, registry: ModelInfoRegistry, base_url: str) -> dict[str, Any]:
    """Wrap a single model in a JSON:API document."""
    logger.debug(f"to_document, model: {model!r}")
    resource = to_resource_object(model, model_info, registry, base_url)
    document: dict[str, Any] = {"data": resource}
    if "links" in resource:
        document["links"] = dict(resource["links"])
    return document


def to_empty_document(self_href: str) -> dict[str, Any]:
    """A document whose primary data is null, e.g. an unset to-one relationship."""
    return {"data": None, "links": {SELF_REL: self_href}}


def to_collection_document(
    models: Iterable[Any],
    model_info: ModelInfo,
    registry: ModelInfoRegistry,
    base_url: str,
) -> dict[str, Any]:
    """Wrap a full (unpaged) collection in a JSON:API document."""
    data = [to_resource_object(m, model_info, registry, base_url) for m in models]
    return {
        "data": data,
        "links": {SELF_REL: f"{base_url.rstrip('/')}{model_info.request_mapping}"},
        "meta": {"total": len(data)},
    }


def to_page_document(
    page: ParamsAwarePage,
    registry: ModelInfoRegistry,
    url: str,
    base_url: str,
    page_number_param_name: str = JSON_API_PAGE_NUMBER_PARAM,
) -> dict[str, Any]:
    """Wrap a page of models in a JSON:API document with page meta and links."""
    data = [
        to_resource_object(model, registry.get_entry_for(type(model)), registry, base_url)
        for model in page.content
    ]
    metadata = PageMetadata(
        size=page.size,
        number=page.number,
        total_elements=page.total_elements,
        total_pages=page.total_pages,
    )
    links = {SELF_REL: url, **links_to_json_api(build_page_links(page, url, page_number_param_name))}
    return {
        "data": data,
        "links": links,
        "meta": {"page": metadata.model_dump(by_alias=True)},
    }


def from_document(document: Any, model_info: ModelInfo, registry: ModelInfoRegistry) -> dict[str, Any]:
    """Unwrap a submitted JSON:API document into plain member values.

    Attributes are copied as they are; relationship linkage becomes related
    ids (a list of ids for to-many members).

    Args:
        document: The decoded request body
        model_info: Metadata of the endpoint's model
        registry: Used to check relationship linkage types

    Returns:
        Member values suitable for the service layer

    Raises:
        BadRequestError: If the document is malformed, its type does not
            match the endpoint or it refers to unknown relationships
    """
    try:
        parsed = JsonApiDocumentRequest.model_validate(document)
    except ValidationError as e:
        raise BadRequestError(f"Invalid JSON:API document: {e.errors()[0]['msg']}") from e

    resource = parsed.data
    if resource.type is not None and resource.type != model_info.json_api_type:
        raise BadRequestError(
            f"Resource type '{resource.type}' does not match endpoint type '{model_info.json_api_type}'"
        )

    values = dict(resource.attributes)
    for name, relationship in resource.relationships.items():
        field_info = model_info.get_field(name)
        if field_info is None or not field_info.is_relationship:
            raise BadRequestError(f"Unknown relationship '{name}' for {model_info.model_name}")
        related_info = registry.related_model_info(field_info)
        linkage = relationship.data
        if linkage is None:
            values[name] = [] if field_info.is_to_many else None
        elif isinstance(linkage, list):
            values[name] = [_linked_id(item, related_info) for item in linkage]
        else:
            values[name] = _linked_id(linkage, related_info)
    return values


def _linked_id(identifier: ResourceIdentifier, related_info: ModelInfo) -> Any:
    if identifier.type is not None and identifier.type != related_info.json_api_type:
        raise BadRequestError(
            f"Resource type '{identifier.type}' does not match relationship type '{related_info.json_api_type}'"
        )
    return identifier.id
