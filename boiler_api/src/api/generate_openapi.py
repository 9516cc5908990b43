"""
Write the service's OpenAPI schema to interfaces/openapi.json.

Usage:
  python -m src.api.generate_openapi
"""
import json
import os

from src.api.main import app


# PUBLIC_INTERFACE
def write_openapi(output_path: str = os.path.join("interfaces", "openapi.json")) -> str:
    """Dump app.openapi() to output_path, creating its directory; returns the path."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(app.openapi(), f, indent=2)
    return output_path


if __name__ == "__main__":
    write_openapi()
