"""HTTP handlers for resource model operations.

Handlers convert between request payloads, service calls and the two
response representations (plain JSON with HATEOAS links, and JSON:API).
They handle HTTP concerns like status codes and error translation.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from fastapi import HTTPException

from mdd_rest.dto import UiSchema
from mdd_rest.entities import FieldInfo, ModelInfo, ParamsAwarePage
from mdd_rest.exceptions import MddRestError, NotFoundError
from mdd_rest.hypermedia import (
    JSON_API_PAGE_NUMBER_PARAM,
    from_document,
    to_collection_document,
    to_document,
    to_empty_document,
    to_hateoas_paged_resources,
    to_hateoas_resource,
    to_hateoas_resources,
    to_page_document,
)
from mdd_rest.pagination import PARAM_PAGE_NUMBER, build_pageable
from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.schema import build_ui_schema
from mdd_rest.services import PersistableModelService

logger = logging.getLogger(__name__)

Params = Mapping[str, Sequence[str]]


class ModelHandler:
    """HTTP handlers for one resource model.

    This handler delegates business logic to PersistableModelService
    and handles HTTP-specific concerns like:
    - Choosing the plain JSON or JSON:API representation
    - Building page requests from query parameters
    - Translating framework errors into HTTPException

    Example:
        ```python
        service = PersistableModelService.create_for_session(session, book_info, context)
        handler = ModelHandler(service=service, base_url="http://localhost:8000")

        # Use in FastAPI route
        @router.get("/{id}")
        def get_by_id(id: str):
            return handler.get_by_id(id, json_api=False)
        ```
    """

    def __init__(self, service: PersistableModelService, base_url: str) -> None:
        """Initialize the handler.

        Args:
            service: The model service for business logic (required).
            base_url: Scheme and host links are built against (required).
        """
        self._service = service
        self._base_url = base_url.rstrip("/")

    @property
    def model_info(self) -> ModelInfo:
        return self._service.model_info

    @property
    def registry(self) -> ModelInfoRegistry:
        return self._service.context.registry

    def create(self, payload: Any, json_api: bool) -> dict[str, Any]:
        """Handle POST requests.

        Args:
            payload: Decoded request body, plain JSON or a JSON:API document
            json_api: Whether the JSON:API representation was negotiated

        Returns:
            The created resource

        Raises:
            HTTPException: If the body is invalid (400)
        """
        try:
            values = from_document(payload, self.model_info, self.registry) if json_api else payload
            model = self._service.create(values)
            return self._render(model, self.model_info, json_api)
        except MddRestError as e:
            raise self._http_error("create", e) from e

    def get_page(
        self,
        params: Params,
        url: str,
        page: int | str | None,
        size: int | str | None,
        sort: str | None,
        json_api: bool,
    ) -> dict[str, Any]:
        """Handle paginated search requests.

        Args:
            params: All query parameters; ``filter`` holds RSQL, other model
                member names are simple criteria
            url: The full request URL, used for page links
            page: 0-based page number
            size: Page size
            sort: Comma separated sort properties
            json_api: Whether the JSON:API representation was negotiated

        Returns:
            The page of resources with metadata and links

        Raises:
            HTTPException: If a parameter or the filter is invalid (400)
        """
        try:
            pageable = build_pageable(page, size, sort, self.model_info)
            result = self._service.find_paginated(params, pageable)
            return self._render_page(result, url, json_api)
        except MddRestError as e:
            raise self._http_error("search", e) from e

    def get_all(self, json_api: bool) -> dict[str, Any]:
        """Handle GET requests for the full, unpaged collection."""
        models = self._service.find_all()
        if json_api:
            return to_collection_document(models, self.model_info, self.registry, self._base_url)
        return to_hateoas_resources(models, self.model_info, self._base_url)

    def get_by_ids(self, ids: Sequence[str], json_api: bool) -> dict[str, Any]:
        """Handle GET requests for the resources matching the given ids.

        Ids that do not match an existing resource are left out.
        """
        models = self._service.find_by_ids(ids)
        if json_api:
            return to_collection_document(models, self.model_info, self.registry, self._base_url)
        return to_hateoas_resources(models, self.model_info, self._base_url)

    def get_by_id(self, id: str, json_api: bool) -> dict[str, Any]:
        """Handle GET requests for a single resource.

        Raises:
            HTTPException: If the resource does not exist (404)
        """
        try:
            model = self._service.find_by_id(id)
            return self._render(model, self.model_info, json_api)
        except MddRestError as e:
            raise self._http_error("get", e) from e

    def update(self, id: str, payload: Any, json_api: bool) -> dict[str, Any]:
        """Handle PUT requests; members missing from the body are reset."""
        try:
            values = from_document(payload, self.model_info, self.registry) if json_api else payload
            model = self._service.update(id, values)
            return self._render(model, self.model_info, json_api)
        except MddRestError as e:
            raise self._http_error("update", e) from e

    def patch(self, id: str, payload: Any, json_api: bool) -> dict[str, Any]:
        """Handle PATCH requests; only non-null members in the body are applied."""
        try:
            values = from_document(payload, self.model_info, self.registry) if json_api else payload
            model = self._service.patch(id, values)
            return self._render(model, self.model_info, json_api)
        except MddRestError as e:
            raise self._http_error("patch", e) from e

    def delete(self, id: str) -> None:
        try:
            self._service.delete(id)
        except MddRestError as e:
            raise self._http_error("delete", e) from e

    def get_related(
        self,
        id: str,
        relation_name: str,
        params: Params,
        url: str,
        page: int | str | None,
        size: int | str | None,
        sort: str | None,
        json_api: bool,
    ) -> dict[str, Any]:
        """Handle GET requests for the other end of a relationship.

        To-one relationships render the related resource, to-many
        relationships a page of related resources filtered by the request's
        criteria.

        Raises:
            HTTPException: If the relationship is invalid (400), or the
                parent or an unset to-one plain JSON target is missing (404)
        """
        try:
            field_info = self._service.get_relationship(relation_name)
            if field_info.is_to_one:
                return self._related_single(id, field_info, url, json_api)

            related_info = self._service.related_model_info(field_info)
            pageable = build_pageable(page, size, sort, related_info)
            result = self._service.find_related_paginated(id, field_info, params, pageable)
            return self._render_page(result, url, json_api)
        except MddRestError as e:
            raise self._http_error("get related", e) from e

    def get_json_schema(self) -> dict[str, Any]:
        return self._service.context.schemas.json_schema(self.model_info)

    def get_ui_schema(self) -> UiSchema:
        return build_ui_schema(self.model_info, self.registry)

    def _related_single(self, id: str, field_info: FieldInfo, url: str, json_api: bool) -> dict[str, Any]:
        related = self._service.find_related_single(id, field_info)
        if related is None:
            if json_api:
                return to_empty_document(url)
            raise NotFoundError(f"No {field_info.name} related to {self.model_info.model_name} {id}")
        return self._render(related, self._service.related_model_info(field_info), json_api)

    def _render(self, model: Any, model_info: ModelInfo, json_api: bool) -> dict[str, Any]:
        if json_api:
            return to_document(model, model_info, self.registry, self._base_url)
        return to_hateoas_resource(model, model_info, self._base_url, self.registry.is_exposed(model_info.model_type))

    def _render_page(self, page: ParamsAwarePage, url: str, json_api: bool) -> dict[str, Any]:
        if json_api:
            return to_page_document(page, self.registry, url, self._base_url, JSON_API_PAGE_NUMBER_PARAM)
        return to_hateoas_paged_resources(page, url, PARAM_PAGE_NUMBER, self.registry, self._base_url)

    def _http_error(self, action: str, error: MddRestError) -> HTTPException:
        logger.info(f"Failed to {action} {self.model_info.model_name}: {error.message}")
        return HTTPException(status_code=error.status_code, detail=error.message)
