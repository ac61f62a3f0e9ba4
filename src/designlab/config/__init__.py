"""
Configuration for Design Lab.
"""

from designlab.config.loader import deep_merge, load_config, parse_jsonc, validate_config
from designlab.config.schema import (
    DEFAULT_SCORING_CRITERIA,
    DesignLabConfig,
    ExecutionConfig,
    ScoringCriterionConfig,
)
from designlab.config.template import render_config_template, write_config_template

__all__ = [
    "DEFAULT_SCORING_CRITERIA",
    "DesignLabConfig",
    "ExecutionConfig",
    "ScoringCriterionConfig",
    "deep_merge",
    "load_config",
    "parse_jsonc",
    "render_config_template",
    "validate_config",
    "write_config_template",
]
