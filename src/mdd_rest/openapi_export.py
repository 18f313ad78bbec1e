"""Export the generated OpenAPI document of an application.

Writes ``openapi.json`` and a Markdown endpoint summary, ``endpoints.md``,
to a target directory:

    mdd-rest-openapi myproject.main:app --output build/openapi
"""

import argparse
import importlib
import json
from pathlib import Path
from typing import Any

from fastapi import FastAPI

OPENAPI_FILE_NAME = "openapi.json"
ENDPOINTS_FILE_NAME = "endpoints.md"

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "options")


def load_app(target: str) -> FastAPI:
    """Load an application from a ``module:attribute`` reference.

    The attribute may be the application itself or a factory returning it.

    Raises:
        ValueError: If the reference is malformed or does not resolve to a
            FastAPI application
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected 'module:attribute', got {target!r}")

    app = getattr(importlib.import_module(module_name), attribute)
    if not isinstance(app, FastAPI) and callable(app):
        app = app()
    if not isinstance(app, FastAPI):
        raise ValueError(f"{target} is not a FastAPI application")
    return app


def render_endpoints(openapi: dict[str, Any]) -> str:
    info = openapi.get("info", {})
    lines: list[str] = [
        f"# {info.get('title', 'API')} {info.get('version', '')}".rstrip(),
        "",
        "| Method | Path | Tags | Summary |",
        "| --- | --- | --- | --- |",
    ]
    for path, operations in sorted(openapi.get("paths", {}).items()):
        for method in HTTP_METHODS:
            operation = operations.get(method)
            if operation is None:
                continue
            tags = ", ".join(operation.get("tags", []))
            lines.append(f"| `{method.upper()}` | `{path}` | {tags} | {operation.get('summary', '')} |")
    return "\n".join(lines) + "\n"


def export_openapi(app: FastAPI, target_dir: Path) -> tuple[Path, Path]:
    """Write the OpenAPI document and the endpoint summary.

    Args:
        app: The application to document
        target_dir: Directory to write to, created when missing

    Returns:
        Paths of the JSON document and the Markdown summary
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    openapi = app.openapi()

    openapi_path = target_dir / OPENAPI_FILE_NAME
    openapi_path.write_text(json.dumps(openapi, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    endpoints_path = target_dir / ENDPOINTS_FILE_NAME
    endpoints_path.write_text(render_endpoints(openapi), encoding="utf-8")
    return openapi_path, endpoints_path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export the OpenAPI document of an MDD REST application.")
    parser.add_argument("app", help="Application or factory as 'module:attribute'")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("build/openapi"),
        help="Directory to write openapi.json and endpoints.md to (default: build/openapi)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    openapi_path, endpoints_path = export_openapi(load_app(args.app), args.output)
    print(f"Wrote {openapi_path} and {endpoints_path}")


if __name__ == "__main__":
    main()
