"""Export the ledger API OpenAPI document."""

from __future__ import annotations

import json
from pathlib import Path

from rentledger.main import create_application


def main(destination: Path = Path("docs/openapi.json")) -> None:
    spec = create_application().openapi()
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(spec, indent=2), encoding="utf-8")
    print(f"OpenAPI specification written to {destination}")


if __name__ == "__main__":
    main()
