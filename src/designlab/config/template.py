"""Starter configuration written by ``design-lab init``."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from designlab.config.loader import project_config_stem
from designlab.domain.exceptions import ConfigurationError

DEFAULT_MODELS = ("openai/gpt-4o", "openai/gpt-4o-mini")

_TEMPLATE = """{{
  // Models that each produce one design candidate ("provider/model")
  "design_models": {design_models},
  // Models that review and score every candidate; defaults to design_models
  "review_models": {review_models},
  "review": {{
    "qualitative": {{ "enabled": true }},
    "quantitative": {{ "enabled": true }}
  }},
  "hooks": {{
    "design_isolation": {{ "enabled": true }}
  }},
  "output": {{
    "base_dir": ".design-lab"
  }}
}}
"""


def render_config_template(
    design_models: Sequence[str] = DEFAULT_MODELS,
    review_models: Sequence[str] | None = None,
) -> str:
    return _TEMPLATE.format(
        design_models=json.dumps(list(design_models)),
        review_models=json.dumps(list(review_models or design_models)),
    )


def write_config_template(
    project_dir: str | Path = ".",
    design_models: Sequence[str] = DEFAULT_MODELS,
    review_models: Sequence[str] | None = None,
) -> Path:
    """
    Create .designlab/design-lab.jsonc in project_dir.

    Raises:
        ConfigurationError: If a project config already exists
    """
    stem = project_config_stem(project_dir)
    for suffix in (".json", ".jsonc"):
        existing = stem.with_name(stem.name + suffix)
        if existing.exists():
            raise ConfigurationError(f"Config already exists: {existing}")

    path = stem.with_name(stem.name + ".jsonc")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config_template(design_models, review_models), encoding="utf-8")
    return path
