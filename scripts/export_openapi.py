#!/usr/bin/env python3
"""
Export the OpenAPI document of the demo application.

Usage:
    python scripts/export_openapi.py --output build/openapi
"""

import argparse
from pathlib import Path

from demo import build_app

from mdd_rest.openapi_export import export_openapi


def main() -> None:
    parser = argparse.ArgumentParser(description="Export the demo application's OpenAPI document.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("build/openapi"),
        help="Directory to write openapi.json and endpoints.md to (default: build/openapi)",
    )
    args = parser.parse_args()

    openapi_path, endpoints_path = export_openapi(build_app(), args.output)
    print(f"Wrote {openapi_path} and {endpoints_path}")


if __name__ == "__main__":
    main()
