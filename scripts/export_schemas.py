"""Export JSON schemas for the analysis and document API contracts."""

import json
from pathlib import Path

from pydantic import BaseModel

from backend.app.models import AnalysisResult, AnalyzeRequest, AnalyzeResponse, Document

SCHEMAS: dict[str, type[BaseModel]] = {
    "AnalysisResult": AnalysisResult,
    "AnalyzeRequest": AnalyzeRequest,
    "AnalyzeResponse": AnalyzeResponse,
    "Document": Document,
}


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for name, model in SCHEMAS.items():
        path = schemas_dir / f"{name}.schema.json"
        # Response models are documented by their wire names
        schema = model.model_json_schema(by_alias=True, mode="serialization")
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {name} schema to {path}")


if __name__ == "__main__":
    main()
