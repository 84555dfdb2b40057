"""Write the FastAPI-generated OpenAPI document for the Sleep Log API to openapi.json."""

import json
from pathlib import Path

from main import app

OPENAPI_PATH = Path(__file__).resolve().parent.parent / "openapi.json"


def main():
    document = app.openapi()
    OPENAPI_PATH.write_text(json.dumps(document, indent=2) + "\n")
    print(f"Wrote {OPENAPI_PATH} ({len(document.get('paths', {}))} paths)")


if __name__ == "__main__":
    main()
