"""JSON Schema export for configuration and agent output formats."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel

from designlab.config.schema import DesignLabConfig
from designlab.schemas.models import DesignArtifact, QualitativeReview, ScoreEntry

logger = logging.getLogger(__name__)

SCHEMA_FILES: dict[str, type[BaseModel]] = {
    "design-lab-config.schema.json": DesignLabConfig,
    "design-artifact.schema.json": DesignArtifact,
    "qualitative-review.schema.json": QualitativeReview,
    "score.schema.json": ScoreEntry,
}


def export_schemas(out_dir: str | Path) -> list[Path]:
    """
    Write one JSON Schema file per model into out_dir.

    Returns:
        Paths written, in SCHEMA_FILES order
    """
    target = Path(out_dir)
    target.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, model in SCHEMA_FILES.items():
        path = target / filename
        path.write_text(json.dumps(model.model_json_schema(), indent=2) + "\n")
        logger.debug("Wrote %s", path)
        written.append(path)
    return written
