"""Configuration schema for Design Lab.

Unknown keys are rejected at every level so that typos surface as
ConfigurationError instead of being silently ignored.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from designlab.domain.models import ScoringCriterion


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ScoringCriterionConfig(_Section):
    """One scoring criterion as written in the config file."""

    name: str
    description: str
    min: float
    max: float
    weight: float = Field(1.0, ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "ScoringCriterionConfig":
        if self.min > self.max:
            raise ValueError(f"min ({self.min:g}) must not exceed max ({self.max:g})")
        return self

    def to_criterion(self) -> ScoringCriterion:
        return ScoringCriterion(
            name=self.name,
            description=self.description,
            min=self.min,
            max=self.max,
            weight=self.weight,
        )


DEFAULT_SCORING_CRITERIA: tuple[ScoringCriterionConfig, ...] = (
    ScoringCriterionConfig(
        name="clarity",
        description="How clear and understandable is the design?",
        min=0,
        max=10,
        weight=1.0,
    ),
    ScoringCriterionConfig(
        name="feasibility",
        description="How technically feasible is the design?",
        min=0,
        max=10,
        weight=1.2,
    ),
    ScoringCriterionConfig(
        name="scalability",
        description="How well does the design scale?",
        min=0,
        max=10,
        weight=1.0,
    ),
    ScoringCriterionConfig(
        name="maintainability",
        description="How maintainable is the design?",
        min=0,
        max=10,
        weight=1.0,
    ),
    ScoringCriterionConfig(
        name="innovation",
        description="How innovative is the approach?",
        min=0,
        max=10,
        weight=0.8,
    ),
)


class DesignSettings(_Section):
    agent_prompt: str | None = None
    temperature: float = Field(0.7, ge=0, le=2)
    top_p: float = Field(0.9, ge=0, le=1)
    max_tokens: int = Field(4000, gt=0)


class QualitativeReviewConfig(_Section):
    enabled: bool = True
    models: list[str] | None = None


class QuantitativeReviewConfig(_Section):
    enabled: bool = True
    models: list[str] | None = None
    criteria: list[ScoringCriterionConfig] = Field(
        default_factory=lambda: list(DEFAULT_SCORING_CRITERIA)
    )


class ReviewConfig(_Section):
    qualitative: QualitativeReviewConfig = Field(default_factory=QualitativeReviewConfig)
    quantitative: QuantitativeReviewConfig = Field(default_factory=QuantitativeReviewConfig)


class DesignIsolationConfig(_Section):
    enabled: bool = True


class HooksConfig(_Section):
    design_isolation: DesignIsolationConfig = Field(default_factory=DesignIsolationConfig)


class OutputConfig(_Section):
    base_dir: str = ".design-lab"


class ExecutionConfig(_Section):
    """Polling and concurrency knobs for agent invocations."""

    poll_interval: float = Field(0.5, ge=0)
    stability_threshold: int = Field(3, ge=1)
    max_wait_seconds: float = Field(600.0, gt=0)
    send_timeout_seconds: float = Field(180.0, gt=0)
    max_parallel: int = Field(1, ge=1)


class ProviderConfig(_Section):
    """OpenAI-compatible endpoint used by the default agent client."""

    base_url: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    request_timeout: float = Field(180.0, gt=0)


class DesignLabConfig(_Section):
    """Root configuration object."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_url: str | None = Field(None, alias="$schema")
    design_models: list[str] = Field(min_length=1)
    review_models: list[str] | None = None
    topic_generation_model: str | None = None
    design: DesignSettings = Field(default_factory=DesignSettings)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    hooks: HooksConfig = Field(default_factory=HooksConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)

    # -------------------------------------------------------------------------
    # Resolved views
    # -------------------------------------------------------------------------

    @property
    def topic_model(self) -> str:
        return self.topic_generation_model or self.design_models[0]

    @property
    def qualitative_models(self) -> list[str]:
        """Models for qualitative review; empty when the phase is disabled."""
        if not self.review.qualitative.enabled:
            return []
        return self.review.qualitative.models or self.review_models or list(self.design_models)

    @property
    def scoring_models(self) -> list[str]:
        """Models for numeric scoring; empty when the phase is disabled."""
        if not self.review.quantitative.enabled:
            return []
        return self.review.quantitative.models or self.review_models or list(self.design_models)

    @property
    def criteria(self) -> list[ScoringCriterion]:
        return [c.to_criterion() for c in self.review.quantitative.criteria]
