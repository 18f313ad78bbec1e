"""
Tests for HATEOAS links, plain JSON resources and JSON:API documents.
"""

import datetime

import pytest
from sample_models import Author, Book, Genre, Tag

from mdd_rest.entities import Pageable, ParamsAwarePage
from mdd_rest.exceptions import BadRequestError
from mdd_rest.hypermedia import (
    build_model_links,
    build_page_links,
    from_document,
    links_to_dict,
    to_document,
    to_empty_document,
    to_hateoas_paged_resources,
    to_hateoas_resource,
    to_page_document,
    to_resource_object,
)
from mdd_rest.registry import ModelInfoRegistry

BASE_URL = "http://testserver"
BOOKS_URL = "http://testserver/api/rest/books"


def make_page(number: int, size: int = 2, total: int = 5, content=None) -> ParamsAwarePage:
    return ParamsAwarePage(
        content=content or [],
        pageable=Pageable(page=number, size=size),
        total_elements=total,
        parameters={"title": ["Dune"]},
    )


def rels(links) -> list[str]:
    return [link.rel for link in links]


@pytest.fixture
def book():
    return Book(
        id="b1",
        title="Dune",
        genre=Genre.SCIENCE_FICTION,
        published=datetime.date(1965, 8, 1),
        pages=412,
        in_print=True,
        author_id="a1",
    )


def test_page_links_first_page():
    assert rels(build_page_links(make_page(0), BOOKS_URL, "_pn")) == ["next", "last"]


def test_page_links_middle_page():
    links = build_page_links(make_page(1), f"{BOOKS_URL}?title=Dune&_pn=1", "_pn")

    assert rels(links) == ["first", "previous", "next", "last"]
    hrefs = {link.rel: link.href for link in links}
    assert hrefs["previous"] == f"{BOOKS_URL}?title=Dune&_pn=0"
    assert hrefs["next"] == f"{BOOKS_URL}?title=Dune&_pn=2"
    assert hrefs["last"] == f"{BOOKS_URL}?title=Dune&_pn=2"


def test_page_links_last_page():
    links = build_page_links(make_page(2), BOOKS_URL, "_pn")

    assert rels(links) == ["first", "previous"]
    assert links[1].href == f"{BOOKS_URL}?_pn=1"


def test_page_links_single_page():
    assert build_page_links(make_page(0, size=10), BOOKS_URL, "_pn") == []


def test_model_links(registry, book):
    links = links_to_dict(build_model_links(book, registry.get_entry_for(Book), BASE_URL))

    assert links == {
        "self": {"href": f"{BOOKS_URL}/b1"},
        "author": {"href": f"{BOOKS_URL}/b1/relationships/author"},
        "tags": {"href": f"{BOOKS_URL}/b1/relationships/tags"},
    }


def test_model_links_need_an_id(registry):
    assert build_model_links(Book(title="Unsaved"), registry.get_entry_for(Book), BASE_URL) is None


def test_hateoas_resource(registry, book):
    resource = to_hateoas_resource(book, registry.get_entry_for(Book), BASE_URL)

    assert resource["id"] == "b1"
    assert resource["genre"] == "science-fiction"
    assert resource["published"] == "1965-08-01"
    assert resource["author_id"] == "a1"
    assert resource["_links"]["self"]["href"] == f"{BOOKS_URL}/b1"


def test_hateoas_resource_hides_hidden_columns(registry):
    author = Author(id="a1", name="Frank Herbert", secret="spice")

    resource = to_hateoas_resource(author, registry.get_entry_for(Author), BASE_URL)

    assert resource["name"] == "Frank Herbert"
    assert "secret" not in resource


def test_hateoas_paged_resources(registry, book):
    page = make_page(0, size=1, total=2, content=[book])

    resources = to_hateoas_paged_resources(page, BOOKS_URL, "_pn", registry, BASE_URL)

    assert [r["title"] for r in resources["content"]] == ["Dune"]
    assert resources["page"] == {"size": 1, "number": 0, "totalElements": 2, "totalPages": 2}
    assert resources["parameters"] == {"title": ["Dune"]}
    assert resources["_links"]["next"]["href"] == f"{BOOKS_URL}?_pn=1"


def test_json_api_resource_object(registry, book):
    resource = to_resource_object(book, registry.get_entry_for(Book), registry, BASE_URL)

    assert resource["type"] == "books"
    assert resource["id"] == "b1"
    assert "id" not in resource["attributes"]
    assert "author_id" not in resource["attributes"]
    assert resource["attributes"]["title"] == "Dune"
    assert resource["relationships"]["author"] == {
        "links": {
            "self": f"{BOOKS_URL}/b1/relationships/author",
            "related": f"{BOOKS_URL}/b1/author",
        },
        "data": {"type": "authors", "id": "a1"},
    }
    assert "data" not in resource["relationships"]["tags"]
    assert resource["links"] == {"self": f"{BOOKS_URL}/b1"}


def test_json_api_unset_to_one_linkage(registry):
    book = Book(id="b2", title="Orphan", genre=Genre.HISTORY)

    resource = to_resource_object(book, registry.get_entry_for(Book), registry, BASE_URL)

    assert resource["relationships"]["author"]["data"] is None


def test_json_api_document(registry, book):
    document = to_document(book, registry.get_entry_for(Book), registry, BASE_URL)

    assert document["data"]["id"] == "b1"
    assert document["links"] == {"self": f"{BOOKS_URL}/b1"}


def test_json_api_empty_document():
    assert to_empty_document(f"{BOOKS_URL}/b1/author") == {
        "data": None,
        "links": {"self": f"{BOOKS_URL}/b1/author"},
    }


def test_json_api_page_document(registry, book):
    page = make_page(0, size=1, total=3, content=[book])

    document = to_page_document(page, registry, BOOKS_URL, BASE_URL)

    assert [resource["id"] for resource in document["data"]] == ["b1"]
    assert document["meta"]["page"] == {"size": 1, "number": 0, "totalElements": 3, "totalPages": 3}
    assert document["links"]["self"] == BOOKS_URL
    assert document["links"]["next"] == f"{BOOKS_URL}?page%5Bnumber%5D=1"
    assert "previous" not in document["links"]


def test_from_document(registry):
    document = {
        "data": {
            "type": "books",
            "attributes": {"title": "Dune", "genre": "science-fiction"},
            "relationships": {
                "author": {"data": {"type": "authors", "id": "a1"}},
                "tags": {"data": [{"type": "tag", "id": 1}, {"type": "tag", "id": 2}]},
            },
        }
    }

    values = from_document(document, registry.get_entry_for(Book), registry)

    assert values == {"title": "Dune", "genre": "science-fiction", "author": "a1", "tags": [1, 2]}


def test_from_document_null_linkage(registry):
    document = {"data": {"type": "books", "relationships": {"author": {"data": None}, "tags": {"data": None}}}}

    assert from_document(document, registry.get_entry_for(Book), registry) == {"author": None, "tags": []}


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ({"data": {"type": "authors", "attributes": {}}}, "does not match endpoint type 'books'"),
        ({"data": {"relationships": {"author": {"data": {"type": "tag", "id": 1}}}}}, "relationship type"),
        ({"data": {"relationships": {"title": {"data": None}}}}, "Unknown relationship 'title'"),
        ({"attributes": {"title": "Dune"}}, "Invalid JSON:API document"),
    ],
)
def test_from_document_errors(registry, document, message):
    with pytest.raises(BadRequestError, match=message):
        from_document(document, registry.get_entry_for(Book), registry)


def test_related_page_uses_element_metadata(registry):
    """Test that pages of related models render with the related model's links."""
    tag = Tag(id=7, name="classic")
    page = make_page(0, size=10, total=1, content=[tag])

    resources = to_hateoas_paged_resources(page, f"{BOOKS_URL}/b1/tags", "_pn", registry, BASE_URL)

    assert resources["content"][0]["_links"]["self"]["href"] == "http://testserver/api/rest/labels/7"


def test_model_without_router_has_no_links():
    registry = ModelInfoRegistry.create([Book], base_path="/api/rest")
    author = Author(id="a1", name="Frank Herbert")
    author_info = registry.get_entry_for(Author)

    assert build_model_links(author, author_info, BASE_URL, exposed=False) is None

    page = make_page(0, size=10, total=1, content=[author])
    resources = to_hateoas_paged_resources(page, f"{BOOKS_URL}/b1/author", "_pn", registry, BASE_URL)
    assert "_links" not in resources["content"][0]

    document = to_document(author, author_info, registry, BASE_URL)
    assert document == {"data": {"type": "authors", "id": "a1", "attributes": document["data"]["attributes"]}}
    assert document["data"]["attributes"]["name"] == "Frank Herbert"
