"""
Tests for the MDD REST API.
"""

import json

import pytest
from conftest import TEST_SETTINGS
from fastapi.testclient import TestClient
from sample_models import Author, Book

from mdd_rest.api import create_app
from mdd_rest.database import create_session_factory

AUTHORS = "/api/rest/authors"
BOOKS = "/api/rest/books"
LABELS = "/api/rest/labels"
JSON_API = "application/vnd.api+json"
JSON_API_HEADERS = {"Accept": JSON_API, "Content-Type": JSON_API}


def create_author(client, name="Frank Herbert", **values):
    response = client.post(AUTHORS, json={"name": name, **values})
    assert response.status_code == 201, response.text
    return response.json()


def create_book(client, title="Dune", genre="science-fiction", **values):
    response = client.post(BOOKS, json={"title": title, "genre": genre, **values})
    assert response.status_code == 201, response.text
    return response.json()


def titles(response):
    return sorted(resource["title"] for resource in response.json()["content"])


@pytest.fixture
def library(client):
    """Two authors, three books and a tag."""
    herbert = create_author(client, email="frank@example.com")
    le_guin = create_author(client, "Ursula K. Le Guin")
    classic = client.post(LABELS, json={"name": "classic"}).json()
    dune = create_book(client, pages=412, published="1965-08-01", author=herbert["id"], tags=[classic["id"]])
    messiah = create_book(client, "Dune Messiah", pages=256, published="1969-10-15", author=herbert["id"])
    earthsea = create_book(
        client, "A Wizard of Earthsea", "fantasy", pages=183, author={"id": le_guin["id"]}, tags=[{"id": classic["id"]}]
    )
    return {
        "herbert": herbert,
        "le_guin": le_guin,
        "classic": classic,
        "dune": dune,
        "messiah": messiah,
        "earthsea": earthsea,
    }


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "MDD REST API"
    assert {"name": "Book", "path": BOOKS, "json_api_type": "books"} in data["resources"]


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database_healthy": True, "resources": 3}


def test_create_and_get(client):
    author = create_author(client, email="frank@example.com")

    assert author["name"] == "Frank Herbert"
    assert author["_links"]["self"]["href"] == f"http://testserver{AUTHORS}/{author['id']}"
    assert "secret" not in author

    response = client.get(f"{AUTHORS}/{author['id']}")
    assert response.status_code == 200
    assert response.json()["email"] == "frank@example.com"


def test_create_book_with_relationships(client, library):
    dune = library["dune"]

    assert dune["author_id"] == library["herbert"]["id"]
    assert dune["genre"] == "science-fiction"
    assert dune["in_print"] is True
    assert dune["published"] == "1965-08-01"
    assert library["earthsea"]["author_id"] == library["le_guin"]["id"]


def test_get_missing(client):
    response = client.get(f"{AUTHORS}/missing")
    assert response.status_code == 404
    assert response.json() == {"detail": "Author not found: missing"}

    assert client.get(f"{LABELS}/not-a-number").status_code == 404


def test_update_resets_missing_members(client, library):
    dune = library["dune"]

    response = client.put(f"{BOOKS}/{dune['id']}", json={"title": "Dune (1965)", "genre": "science-fiction"})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Dune (1965)"
    assert data["pages"] is None
    assert data["in_print"] is True
    assert data["author_id"] == library["herbert"]["id"]
    assert client.get(f"{BOOKS}/{dune['id']}/author").json()["name"] == "Frank Herbert"
    tags = client.get(f"{BOOKS}/{dune['id']}/tags").json()["content"]
    assert [tag["name"] for tag in tags] == ["classic"]


def test_update_clears_relationship_given_as_null(client, library):
    dune = library["dune"]

    response = client.put(f"{BOOKS}/{dune['id']}", json={"title": "Dune", "genre": "science-fiction", "author": None})

    assert response.status_code == 200
    assert response.json()["author_id"] is None
    assert client.get(f"{BOOKS}/{dune['id']}/author").status_code == 404


def test_json_api_update_keeps_missing_relationships(client, library):
    dune = library["dune"]
    document = {"data": {"type": "books", "id": dune["id"], "attributes": {"title": "Dune", "genre": "fantasy"}}}

    response = client.put(f"{BOOKS}/{dune['id']}", content=json.dumps(document), headers=JSON_API_HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["attributes"]["genre"] == "fantasy"
    assert data["attributes"]["pages"] is None
    assert data["relationships"]["author"]["data"] == {"type": "authors", "id": library["herbert"]["id"]}


def test_patch_applies_given_members(client, library):
    dune = library["dune"]

    response = client.patch(f"{BOOKS}/{dune['id']}", json={"price": "9.99", "title": None})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Dune"
    assert data["price"] == 9.99
    assert data["pages"] == 412
    assert data["author_id"] == library["herbert"]["id"]


def test_delete(client, library):
    messiah = library["messiah"]

    response = client.delete(f"{BOOKS}/{messiah['id']}")
    assert response.status_code == 204
    assert client.get(f"{BOOKS}/{messiah['id']}").status_code == 404
    assert client.delete(f"{BOOKS}/{messiah['id']}").status_code == 404


def test_invalid_bodies(client, library):
    response = client.post(BOOKS, json={"genre": "fantasy"})
    assert response.status_code == 400
    assert "title" in response.json()["detail"]

    response = client.post(BOOKS, json={"title": "Lost", "genre": "fantasy", "author": "missing"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Related Author not found: missing"

    response = client.post(BOOKS, json={"title": "Lost", "genre": "fantasy", "tags": ["x"]})
    assert response.status_code == 400


def test_duplicate_unique_value_conflicts(client, library):
    response = client.post(AUTHORS, json={"name": "Impostor", "email": "frank@example.com"})

    assert response.status_code == 409
    assert response.json()["detail"].startswith("Conflict")


def test_search_with_filter(client, library):
    response = client.get(BOOKS, params={"filter": "title==Dune*;pages=gt=300"})

    assert response.status_code == 200
    assert titles(response) == ["Dune"]
    assert response.json()["parameters"] == {"filter": ["title==Dune*;pages=gt=300"]}


def test_search_with_simple_criteria(client, library):
    assert titles(client.get(BOOKS, params={"genre": "FANTASY"})) == ["A Wizard of Earthsea"]
    assert titles(client.get(BOOKS, params={"genre": "fantasy", "title": "Dune", "_searchmode": "OR"})) == [
        "A Wizard of Earthsea",
        "Dune",
    ]
    assert titles(client.get(BOOKS, params={"_all": "wizard"})) == ["A Wizard of Earthsea"]
    assert titles(client.get(BOOKS, params={"author.name": "Ursula K. Le Guin"})) == ["A Wizard of Earthsea"]


def test_search_pages_and_sort(client, library):
    response = client.get(BOOKS, params={"_ps": 2, "sort": "-pages"})

    data = response.json()
    assert [book["title"] for book in data["content"]] == ["Dune", "Dune Messiah"]
    assert data["page"] == {"size": 2, "number": 0, "totalElements": 3, "totalPages": 2}
    assert data["_links"]["next"]["href"] == f"http://testserver{BOOKS}?_ps=2&sort=-pages&_pn=1"
    assert "previous" not in data["_links"]

    second = client.get(data["_links"]["next"]["href"]).json()
    assert [book["title"] for book in second["content"]] == ["A Wizard of Earthsea"]
    assert second["_links"]["previous"]["href"].endswith("_pn=0")


@pytest.mark.parametrize(
    "params",
    [
        {"filter": "title=="},
        {"filter": "nope==1"},
        {"sort": "author"},
        {"_searchmode": "XOR", "title": "Dune"},
    ],
)
def test_search_bad_requests(client, library, params):
    response = client.get(BOOKS, params=params)

    assert response.status_code == 400
    assert response.json()["detail"]


@pytest.mark.parametrize(
    "params",
    [
        {"_pn": -1},
        {"_ps": 0},
        {"_pn": "abc"},
        {"_ps": "many"},
    ],
)
def test_search_invalid_page_request(client, params):
    response = client.get(BOOKS, params=params)

    assert response.status_code == 400
    assert response.json()["detail"]


def test_json_api_invalid_page_request(client):
    response = client.get(BOOKS, params={"page[size]": 0}, headers={"Accept": JSON_API})

    assert response.status_code == 400


def test_full_collection(client, library):
    response = client.get(BOOKS, params={"page": "no"})

    assert response.status_code == 200
    data = response.json()
    assert len(data["content"]) == 3
    assert "page" not in data
    assert data["_links"]["self"]["href"] == f"http://testserver{BOOKS}"


def test_find_by_ids(client, library):
    ids = [library["dune"]["id"], library["earthsea"]["id"], "missing"]

    assert titles(client.get(BOOKS, params={"ids": ids})) == ["A Wizard of Earthsea", "Dune"]
    assert titles(client.get(BOOKS, params={"ids[]": ids[:1]})) == ["Dune"]


def test_to_many_relationship(client, library):
    herbert = library["herbert"]

    response = client.get(f"{AUTHORS}/{herbert['id']}/books")

    assert response.status_code == 200
    assert titles(response) == ["Dune", "Dune Messiah"]
    assert response.json()["page"]["totalElements"] == 2

    filtered = client.get(f"{AUTHORS}/{herbert['id']}/books", params={"filter": "pages=lt=300"})
    assert titles(filtered) == ["Dune Messiah"]


def test_many_to_many_relationship(client, library):
    classic = library["classic"]

    assert titles(client.get(f"{LABELS}/{classic['id']}/books")) == ["A Wizard of Earthsea", "Dune"]

    response = client.get(f"{BOOKS}/{library['dune']['id']}/relationships/tags")
    assert [tag["name"] for tag in response.json()["content"]] == ["classic"]
    assert response.json()["content"][0]["_links"]["self"]["href"] == f"http://testserver{LABELS}/{classic['id']}"


def test_to_one_relationship(client, library):
    dune = library["dune"]

    response = client.get(f"{BOOKS}/{dune['id']}/author")
    assert response.status_code == 200
    assert response.json()["name"] == "Frank Herbert"

    response = client.get(f"{BOOKS}/{dune['id']}/relationships/author")
    assert response.json()["id"] == library["herbert"]["id"]


def test_unset_to_one_relationship(client):
    book = create_book(client, "The Histories", "history")

    assert client.get(f"{BOOKS}/{book['id']}/author").status_code == 404

    response = client.get(f"{BOOKS}/{book['id']}/author", headers={"Accept": JSON_API})
    assert response.status_code == 200
    assert response.json()["data"] is None


def test_invalid_relationship(client, library):
    dune = library["dune"]

    for relation in ("nope", "title"):
        response = client.get(f"{BOOKS}/{dune['id']}/{relation}")
        assert response.status_code == 400
        assert response.json() == {"detail": f"Invalid relationship: {relation}"}

    assert client.get(f"{BOOKS}/missing/author").status_code == 404


def test_json_api_create_and_get(client, library):
    document = {
        "data": {
            "type": "books",
            "attributes": {"title": "Children of Dune", "genre": "science-fiction", "pages": 444},
            "relationships": {
                "author": {"data": {"type": "authors", "id": library["herbert"]["id"]}},
                "tags": {"data": [{"type": "tag", "id": library["classic"]["id"]}]},
            },
        }
    }

    response = client.post(BOOKS, content=json.dumps(document), headers=JSON_API_HEADERS)

    assert response.status_code == 201, response.text
    assert response.headers["content-type"] == JSON_API
    data = response.json()["data"]
    assert data["type"] == "books"
    assert data["attributes"]["title"] == "Children of Dune"
    assert "author_id" not in data["attributes"]
    assert data["relationships"]["author"]["data"] == {"type": "authors", "id": library["herbert"]["id"]}

    fetched = client.get(f"{BOOKS}/{data['id']}", headers={"Accept": JSON_API}).json()
    assert fetched["data"]["attributes"]["pages"] == 444
    assert fetched["links"]["self"] == f"http://testserver{BOOKS}/{data['id']}"


def test_json_api_type_mismatch(client):
    document = {"data": {"type": "authors", "attributes": {"title": "Dune", "genre": "fantasy"}}}

    response = client.post(BOOKS, content=json.dumps(document), headers=JSON_API_HEADERS)

    assert response.status_code == 400
    assert "does not match endpoint type" in response.json()["detail"]


def test_json_api_patch(client, library):
    dune = library["dune"]
    document = {"data": {"type": "books", "id": dune["id"], "attributes": {"pages": 500}}}

    response = client.patch(f"{BOOKS}/{dune['id']}", content=json.dumps(document), headers=JSON_API_HEADERS)

    assert response.status_code == 200
    attributes = response.json()["data"]["attributes"]
    assert attributes["pages"] == 500
    assert attributes["title"] == "Dune"


def test_json_api_search(client, library):
    response = client.get(BOOKS, params={"page[size]": 2, "sort": "title"}, headers={"Accept": JSON_API})

    assert response.status_code == 200
    document = response.json()
    assert [resource["attributes"]["title"] for resource in document["data"]] == ["A Wizard of Earthsea", "Dune"]
    assert document["meta"]["page"] == {"size": 2, "number": 0, "totalElements": 3, "totalPages": 2}
    assert "next" in document["links"]

    second = client.get(BOOKS, params={"page[size]": 2, "page[number]": 1, "sort": "title"}, headers={"Accept": JSON_API})
    assert [resource["attributes"]["title"] for resource in second.json()["data"]] == ["Dune Messiah"]


def test_json_api_full_collection(client, library):
    response = client.get(BOOKS, params={"page": "no"}, headers={"Accept": JSON_API})

    assert response.json()["meta"] == {"total": 3}


def test_json_schema(client):
    response = client.get(f"{BOOKS}/jsonschema")

    assert response.status_code == 200
    schema = response.json()
    assert schema["title"] == "Book"
    assert schema["description"] == "Books in the catalogue."
    assert "title" in schema["properties"]


def test_ui_schema(client):
    response = client.get(f"{AUTHORS}/uischema")

    assert response.status_code == 200
    data = response.json()
    assert data["apiName"] == "Author"
    assert data["requestMapping"] == AUTHORS
    fields = {field["name"]: field for field in data["fields"]}
    assert fields["name"]["label"] == "Full name"
    assert fields["books"]["toMany"] is True


def test_options_returns_cors_headers(client):
    response = client.options(BOOKS)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:9000"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "PUT" in response.headers["access-control-allow-methods"]
    assert response.headers["access-control-max-age"] == "3600"


def test_cors_preflight(client):
    response = client.options(
        BOOKS,
        headers={"Origin": "http://localhost:9000", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:9000"


def test_openapi_lists_model_endpoints(client):
    paths = client.get("/openapi.json").json()["paths"]

    assert set(paths[BOOKS]) >= {"get", "post", "options"}
    assert set(paths[BOOKS + "/{id}"]) == {"get", "put", "patch", "delete"}
    assert BOOKS + "/{id}/relationships/{relation}" in paths


def test_related_model_without_router_has_no_links(engine):
    app = create_app(models=[Book], settings=TEST_SETTINGS, engine=engine)
    with TestClient(app) as client:
        with create_session_factory(engine)() as session:
            author = Author(name="Frank Herbert")
            session.add(author)
            session.commit()
            author_id = author.id
        book = create_book(client, author=author_id)

        assert client.get(AUTHORS).status_code == 404
        assert [resource["path"] for resource in client.get("/").json()["resources"]] == [BOOKS]

        response = client.get(f"{BOOKS}/{book['id']}/author")
        assert response.json()["name"] == "Frank Herbert"
        assert "_links" not in response.json()

        response = client.get(f"{BOOKS}/{book['id']}/author", headers={"Accept": JSON_API})
        document = response.json()
        assert document["data"]["id"] == author_id
        assert "links" not in document["data"]
        assert "relationships" not in document["data"]
