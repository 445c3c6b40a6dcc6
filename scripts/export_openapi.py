"""
Export the catalog API's OpenAPI spec to a JSON file.

Usage:
    python scripts/export_openapi.py [output-path]

Defaults to ./docs/openapi.json next to the catalog package.
"""

import json
import os
import sys

# Ensure the catalog package is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog.main import app  # noqa: E402

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "docs")
OUTPUT_FILE = os.path.join(OUTPUT_DIR, "openapi.json")


def export(output_file: str = OUTPUT_FILE) -> dict:
    """Write the OpenAPI document to ``output_file`` and return it."""
    os.makedirs(os.path.dirname(output_file) or ".", exist_ok=True)

    spec = app.openapi()
    with open(output_file, "w") as f:
        json.dump(spec, f, indent=2, default=str)
    return spec


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    output_file = argv[0] if argv else OUTPUT_FILE
    spec = export(output_file)

    print(f"OpenAPI spec exported to {output_file}")
    print(f"    Title   : {spec['info']['title']}")
    print(f"    Version : {spec['info']['version']}")
    print(f"    Paths   : {len(spec.get('paths', {}))}")


if __name__ == "__main__":
    main()
