#!/usr/bin/env python3
"""
Demo script for MDD REST.

This script exposes two small models, Author and Book, and walks through
CRUD, RSQL search, relationships and JSON:API against an in-memory SQLite
database. Run with ``--serve`` to start the API with uvicorn instead.
"""

import argparse
import datetime
import enum
import json
from decimal import Decimal

import uvicorn
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Date, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mdd_rest import Base, Settings, SystemUuidModel, create_app, scrud_resource, settings

JSON_API = "application/vnd.api+json"


class Genre(enum.Enum):
    SCIENCE_FICTION = "science-fiction"
    FANTASY = "fantasy"
    HISTORY = "history"


@scrud_resource(description="Writers of books")
class Author(SystemUuidModel, Base):
    __tablename__ = "demo_author"

    name: Mapped[str] = mapped_column(String(100), info={"label": "Full name"})
    country: Mapped[str | None] = mapped_column(String(60))

    books: Mapped[list["Book"]] = relationship(back_populates="author")


@scrud_resource(description="Books in the catalogue")
class Book(SystemUuidModel, Base):
    __tablename__ = "demo_book"

    title: Mapped[str] = mapped_column(String(200))
    genre: Mapped[Genre] = mapped_column(Enum(Genre))
    published: Mapped[datetime.date | None] = mapped_column(Date)
    price: Mapped[Decimal | None] = mapped_column(Numeric(8, 2))
    author_id: Mapped[str | None] = mapped_column(ForeignKey("demo_author.id"))

    author: Mapped[Author | None] = relationship(back_populates="books")


def build_app(database_url: str = "sqlite://") -> FastAPI:
    """Create the demo application on the given database."""
    return create_app(models=[Author, Book], settings=Settings(database_url=database_url))


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def show(response) -> dict:
    print(f"{response.request.method} {response.request.url} -> {response.status_code}")
    body = response.json() if response.content else {}
    print(json.dumps(body, indent=2)[:1200])
    return body


def demo_crud(client: TestClient) -> dict[str, str]:
    """Create authors and books, then update and patch one of them."""
    print_section("CRUD")

    herbert = show(client.post("/api/rest/authors", json={"name": "Frank Herbert", "country": "US"}))
    le_guin = client.post("/api/rest/authors", json={"name": "Ursula K. Le Guin", "country": "US"}).json()

    books = [
        {"title": "Dune", "genre": "science-fiction", "published": "1965-08-01", "author": herbert["id"]},
        {"title": "Dune Messiah", "genre": "science-fiction", "published": "1969-10-15", "author": herbert["id"]},
        {"title": "A Wizard of Earthsea", "genre": "fantasy", "published": "1968-11-01", "author": le_guin["id"]},
    ]
    created = [client.post("/api/rest/books", json=book).json() for book in books]
    print(f"\n📝 Created {len(created)} books")

    show(client.patch(f"/api/rest/books/{created[0]['id']}", json={"price": "9.99"}))
    return {"herbert": herbert["id"], "dune": created[0]["id"]}


def demo_search(client: TestClient) -> None:
    """Search with RSQL filters, simple criteria and sorting."""
    print_section("Search")

    show(client.get("/api/rest/books", params={"filter": "title==Dune*;published=ge=1966-01-01"}))
    show(client.get("/api/rest/books", params={"genre": "fantasy", "title": "Dune", "_searchmode": "OR"}))
    show(client.get("/api/rest/books", params={"filter": "author.name=ilike=herbert", "sort": "-published"}))
    show(client.get("/api/rest/books", params={"_ps": 1, "_pn": 1}))


def demo_relationships(client: TestClient, ids: dict[str, str]) -> None:
    """Navigate relationships in both directions."""
    print_section("Relationships")

    show(client.get(f"/api/rest/authors/{ids['herbert']}/books"))
    show(client.get(f"/api/rest/books/{ids['dune']}/author"))


def demo_json_api(client: TestClient, ids: dict[str, str]) -> None:
    """Read and write JSON:API documents."""
    print_section("JSON:API")

    headers = {"Accept": JSON_API, "Content-Type": JSON_API}
    show(client.get(f"/api/rest/books/{ids['dune']}", headers=headers))
    document = {
        "data": {
            "type": "books",
            "attributes": {"title": "Children of Dune", "genre": "science-fiction"},
            "relationships": {"author": {"data": {"type": "authors", "id": ids["herbert"]}}},
        }
    }
    show(client.post("/api/rest/books", content=json.dumps(document), headers=headers))


def demo_schemas(client: TestClient) -> None:
    """Print the JSON Schema and UI schema of Book."""
    print_section("Schemas")

    show(client.get("/api/rest/books/jsonschema"))
    show(client.get("/api/rest/books/uischema"))


def main() -> None:
    """Run all demos, or serve the demo API."""
    parser = argparse.ArgumentParser(description="MDD REST demo")
    parser.add_argument("--serve", action="store_true", help="Serve the demo API with uvicorn")
    parser.add_argument("--database-url", default="sqlite://", help="Database URL (default: in-memory SQLite)")
    args = parser.parse_args()

    app = build_app(args.database_url)

    if args.serve:
        uvicorn.run(app, host=settings.api_host, port=settings.api_port)
        return

    print("\n" + "🚀" * 35)
    print("  MDD REST - Demo")
    print("🚀" * 35)

    with TestClient(app) as client:
        ids = demo_crud(client)
        demo_search(client)
        demo_relationships(client, ids)
        demo_json_api(client, ids)
        demo_schemas(client)

    print_section("Demo Complete")
    print("\n✅ All demos completed successfully!")


if __name__ == "__main__":
    main()
