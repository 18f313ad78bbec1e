"""
Tests for the OpenAPI export command.
"""

import json

import pytest
from fastapi import FastAPI

from mdd_rest.openapi_export import export_openapi, load_app, main, render_endpoints


def test_render_endpoints():
    openapi = {
        "info": {"title": "Shop", "version": "1.0"},
        "paths": {
            "/items": {
                "post": {"tags": ["Item"], "summary": "Create a new Item"},
                "get": {"tags": ["Item"], "summary": "Search Item resources"},
            },
        },
    }

    lines = render_endpoints(openapi).splitlines()

    assert lines[0] == "# Shop 1.0"
    assert lines[4] == "| `GET` | `/items` | Item | Search Item resources |"
    assert lines[5] == "| `POST` | `/items` | Item | Create a new Item |"


def test_export_openapi(app, tmp_path):
    openapi_path, endpoints_path = export_openapi(app, tmp_path / "docs")

    document = json.loads(openapi_path.read_text(encoding="utf-8"))
    assert "/api/rest/books/{id}" in document["paths"]
    assert "| `DELETE` | `/api/rest/books/{id}` | Book | Delete a Book |" in endpoints_path.read_text(encoding="utf-8")


def test_load_app_from_factory():
    assert isinstance(load_app("mdd_rest.api:create_app"), FastAPI)


@pytest.mark.parametrize("target", ["mdd_rest.api", "mdd_rest.config:settings"])
def test_load_app_rejects_invalid_targets(target):
    with pytest.raises(ValueError):
        load_app(target)


def test_main(tmp_path, capsys):
    main(["mdd_rest.api:create_app", "--output", str(tmp_path)])

    assert (tmp_path / "openapi.json").exists()
    assert (tmp_path / "endpoints.md").exists()
    assert "Wrote" in capsys.readouterr().out
