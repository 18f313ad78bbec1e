"""Per-model REST routers.

Every registered model gets the same set of endpoints under its request
mapping, e.g. ``/api/rest/books``. Plain JSON is the default
representation; JSON:API is used when the ``Accept`` or ``Content-Type``
header names ``application/vnd.api+json``.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from mdd_rest.dto import UiSchema
from mdd_rest.entities import ModelInfo
from mdd_rest.handlers import ModelHandler
from mdd_rest.hypermedia import JSON_API_MEDIA_TYPE, MIME_APPLICATION_JSON
from mdd_rest.services import PersistableModelService

from .dependencies import ContextDep, SessionDep

PAGE_NO = "no"

CORS_ALLOWED_METHODS = "GET, OPTIONS, POST, PUT, PATCH, DELETE"
CORS_ALLOWED_HEADERS = "Origin, X-Requested-With, Content-Type, Accept"
CORS_MAX_AGE = "3600"


def is_json_api(request: Request) -> bool:
    """Whether the request negotiates the JSON:API representation."""
    accept = request.headers.get("accept", "")
    content_type = request.headers.get("content-type", "")
    return JSON_API_MEDIA_TYPE in accept or JSON_API_MEDIA_TYPE in content_type


JsonApiDep = Annotated[bool, Depends(is_json_api)]

# Query parameters shared by the search and relationship endpoints; page
# numbers and sizes are validated by build_pageable
FilterQuery = Annotated[list[str] | None, Query(description="RSQL filter, e.g. title==Dune*;year=ge=1965")]
PageNumberQuery = Annotated[str | None, Query(alias="_pn", description="0-based page number")]
PageSizeQuery = Annotated[str | None, Query(alias="_ps", description="Page size")]
JsonApiPageNumberQuery = Annotated[str | None, Query(alias="page[number]", description="JSON:API page number")]
JsonApiPageSizeQuery = Annotated[str | None, Query(alias="page[size]", description="JSON:API page size")]
SortQuery = Annotated[str | None, Query(description="Comma separated properties, '-' prefix for descending")]


def query_params(request: Request) -> dict[str, list[str]]:
    """Query parameters as a name to values mapping."""
    params: dict[str, list[str]] = {}
    for name, value in request.query_params.multi_items():
        params.setdefault(name, []).append(value)
    return params


def respond(content: Any, json_api: bool, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    media_type = JSON_API_MEDIA_TYPE if json_api else MIME_APPLICATION_JSON
    return JSONResponse(content=content, status_code=status_code, media_type=media_type)


def build_model_router(model_info: ModelInfo) -> APIRouter:
    """Build the REST router of one registered model.

    Args:
        model_info: Metadata of the model; its request mapping becomes the
            router prefix and its API name the OpenAPI tag

    Returns:
        APIRouter ready to be included in the application
    """
    router = APIRouter(prefix=model_info.request_mapping, tags=[model_info.api_name])
    name = model_info.model_name

    def get_handler(request: Request, session: SessionDep, context: ContextDep) -> ModelHandler:
        service = PersistableModelService.create_for_session(session, model_info, context)
        return ModelHandler(service=service, base_url=str(request.base_url))

    HandlerDep = Annotated[ModelHandler, Depends(get_handler)]

    def page_request(
        json_api: bool,
        page_number: str | None,
        page_size: str | None,
        json_api_page_number: str | None,
        json_api_page_size: str | None,
    ) -> tuple[str | None, str | None]:
        if json_api:
            return (
                page_number if json_api_page_number is None else json_api_page_number,
                page_size if json_api_page_size is None else json_api_page_size,
            )
        return page_number, page_size

    @router.post("", status_code=status.HTTP_201_CREATED, summary=f"Create a new {name}")
    def create(handler: HandlerDep, json_api: JsonApiDep, payload: Annotated[Any, Body()]) -> JSONResponse:
        return respond(handler.create(payload, json_api), json_api, status.HTTP_201_CREATED)

    @router.get("", summary=f"Search {name} resources")
    def search(
        request: Request,
        handler: HandlerDep,
        json_api: JsonApiDep,
        filter: FilterQuery = None,
        page: Annotated[str | None, Query(description="Use 'no' to get the full collection")] = None,
        ids: Annotated[list[str] | None, Query()] = None,
        ids_array: Annotated[list[str] | None, Query(alias="ids[]")] = None,
        page_number: PageNumberQuery = None,
        page_size: PageSizeQuery = None,
        json_api_page_number: JsonApiPageNumberQuery = None,
        json_api_page_size: JsonApiPageSizeQuery = None,
        sort: SortQuery = None,
    ) -> JSONResponse:
        """Paginated search by RSQL ``filter`` and member parameters.

        ``page=no`` returns the full collection and ``ids`` the resources
        with the given ids, both unpaged.
        """
        if page == PAGE_NO:
            return respond(handler.get_all(json_api), json_api)

        requested_ids = [*(ids or []), *(ids_array or [])]
        if requested_ids:
            return respond(handler.get_by_ids(requested_ids, json_api), json_api)

        number, size = page_request(json_api, page_number, page_size, json_api_page_number, json_api_page_size)
        content = handler.get_page(query_params(request), str(request.url), number, size, sort, json_api)
        return respond(content, json_api)

    @router.options("", summary="Get the CORS headers")
    def options(request: Request) -> Response:
        headers = {
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Origin": request.app.state.settings.cors_allowed_origin,
            "Access-Control-Allow-Methods": CORS_ALLOWED_METHODS,
            "Access-Control-Allow-Headers": CORS_ALLOWED_HEADERS,
            "Access-Control-Max-Age": CORS_MAX_AGE,
        }
        return Response(status_code=status.HTTP_200_OK, headers=headers)

    @router.get("/jsonschema", summary=f"Get the JSON Schema of {name}")
    def json_schema(handler: HandlerDep) -> dict[str, Any]:
        return handler.get_json_schema()

    @router.get("/uischema", response_model=UiSchema, summary=f"Get the UI schema of {name}")
    def ui_schema(handler: HandlerDep) -> UiSchema:
        return handler.get_ui_schema()

    @router.get("/{id}", summary=f"Find a {name} by id")
    def get_by_id(id: str, handler: HandlerDep, json_api: JsonApiDep) -> JSONResponse:
        return respond(handler.get_by_id(id, json_api), json_api)

    @router.put("/{id}", summary=f"Update a {name}")
    def update(id: str, handler: HandlerDep, json_api: JsonApiDep, payload: Annotated[Any, Body()]) -> JSONResponse:
        return respond(handler.update(id, payload, json_api), json_api)

    @router.patch("/{id}", summary=f"Patch a {name}")
    def patch(id: str, handler: HandlerDep, json_api: JsonApiDep, payload: Annotated[Any, Body()]) -> JSONResponse:
        return respond(handler.patch(id, payload, json_api), json_api)

    @router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, summary=f"Delete a {name}")
    def delete(id: str, handler: HandlerDep) -> Response:
        handler.delete(id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/{id}/{relation}", summary=f"Find the resources related to a {name}")
    @router.get("/{id}/relationships/{relation}", summary=f"Find the resources related to a {name}")
    def get_related(
        id: str,
        relation: str,
        request: Request,
        handler: HandlerDep,
        json_api: JsonApiDep,
        filter: FilterQuery = None,
        page_number: PageNumberQuery = None,
        page_size: PageSizeQuery = None,
        json_api_page_number: JsonApiPageNumberQuery = None,
        json_api_page_size: JsonApiPageSizeQuery = None,
        sort: SortQuery = None,
    ) -> JSONResponse:
        number, size = page_request(json_api, page_number, page_size, json_api_page_number, json_api_page_size)
        content = handler.get_related(id, relation, query_params(request), str(request.url), number, size, sort, json_api)
        return respond(content, json_api)

    return router
