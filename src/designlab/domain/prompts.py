"""
Prompt templates and agent profiles for each pipeline phase.

Templates use {{placeholder}} variables so that literal JSON braces in the
prompt body need no escaping. Unknown placeholders are left in place.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from designlab.domain.models import SamplingOptions, ScoringCriterion, ToolPermissions

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


# =============================================================================
# PROMPT TEMPLATE
# =============================================================================


@dataclass(frozen=True)
class PromptTemplate:
    """A prompt body with {{name}} placeholders."""

    text: str

    def render(self, **variables: str) -> str:
        """Substitute known variables; leave unknown placeholders untouched."""

        def _sub(match: re.Match[str]) -> str:
            key = match.group(1)
            return variables[key] if key in variables else match.group(0)

        return _PLACEHOLDER.sub(_sub, self.text)

    @property
    def placeholders(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(_PLACEHOLDER.findall(self.text)))


@dataclass(frozen=True)
class AgentProfile:
    """Prompt, sampling settings and tool access for one kind of agent."""

    template: PromptTemplate
    sampling: SamplingOptions
    tools: ToolPermissions


# =============================================================================
# PROMPT TEXT
# =============================================================================

_TASK_CONTEXT = """REQUIREMENTS:
{{requirements}}

CONSTRAINTS:
{{constraints}}

NON-FUNCTIONAL REQUIREMENTS:
{{non_functional_requirements}}"""

_JSON_ONLY = (
    "Respond with valid JSON only. Do not add any text or explanation "
    "outside the JSON value."
)

DESIGN_PROMPT = PromptTemplate(
    f"""You are an expert system architect. Produce a complete design proposal for the task below.

{_TASK_CONTEXT}

Return a design matching this JSON structure:
{{
  "id": "kebab-case identifier for the design",
  "title": "short title",
  "summary": "one-paragraph summary of the approach",
  "assumptions": ["assumption about the system"],
  "architecture_overview": "high-level architecture",
  "architecture": "detailed architecture",
  "components": [
    {{
      "name": "component name",
      "description": "what it does",
      "responsibilities": ["responsibility"],
      "interfaces": ["interface or protocol (optional)"]
    }}
  ],
  "data_flow": "how data moves through the system",
  "tradeoffs": [
    {{
      "aspect": "aspect considered",
      "choice": "choice made",
      "rationale": "reason for the choice",
      "alternatives": ["alternative considered"]
    }}
  ],
  "risks": [
    {{
      "description": "risk",
      "severity": "low|medium|high",
      "mitigation": "mitigation (optional)"
    }}
  ],
  "open_questions": ["question needing investigation"],
  "additional_notes": "extra context (optional)"
}}

{_JSON_ONLY}"""
)

REVIEW_PROMPT = PromptTemplate(
    f"""You are an expert reviewer of system architectures. Review the design proposal below objectively and thoroughly.

{_TASK_CONTEXT}

DESIGN:
{{{{design_json}}}}

Return your assessment matching this JSON structure:
{{
  "design_id": "id of the reviewed design",
  "reviewer_model": "your model identifier",
  "strengths": ["specific strength"],
  "weaknesses": ["specific weakness or concern"],
  "missing_considerations": ["important aspect not addressed"],
  "risk_assessment": "low|medium|high",
  "overall_impression": "overall assessment",
  "suggested_improvements": ["actionable suggestion"]
}}

Weigh technical feasibility, maintainability, scalability and operations.

{_JSON_ONLY}"""
)

TOPIC_PROMPT = PromptTemplate(
    """You name design tasks.

REQUIREMENTS:
{{requirements}}

Reply with a topic of 2-5 words that captures the core of this task. It will
be used as a directory name: no special characters, hyphens instead of spaces,
technology-agnostic where possible.

Reply with the topic only, on a single line."""
)

_SCORING_PROMPT_HEAD = f"""You are an expert evaluator of system architectures. Score the design proposal below objectively and consistently.

{_TASK_CONTEXT}

DESIGN:
{{{{design_json}}}}

SCORING CRITERIA:
"""

_SCORING_PROMPT_TAIL = f"""

GUIDELINES:
- Give every criterion a numeric score inside its range
- Higher scores mean a better design
- Justify each score in its comment

Return scores matching this JSON structure:
[
  {{
    "name": "criterion name",
    "value": 0,
    "comment": "justification for the score"
  }}
]

{_JSON_ONLY}"""


def build_scoring_prompt(criteria: Sequence[ScoringCriterion]) -> PromptTemplate:
    """Scoring prompt listing each criterion with its range and weight."""
    lines = "\n".join(
        f"- {c.name} ({c.min:g}-{c.max:g}): {c.description} (weight: {c.weight:g})"
        for c in criteria
    )
    return PromptTemplate(_SCORING_PROMPT_HEAD + lines + _SCORING_PROMPT_TAIL)


# =============================================================================
# AGENT PROFILES
# =============================================================================

READ_ONLY = ToolPermissions(read=True, write=False, command=False)
READ_WRITE = ToolPermissions(read=True, write=True, command=False)
NO_TOOLS = ToolPermissions(read=False, write=False, command=False)


def topic_profile() -> AgentProfile:
    return AgentProfile(TOPIC_PROMPT, SamplingOptions(0.5, 0.9, 50), NO_TOOLS)


def design_profile(
    agent_prompt: str | None = None,
    temperature: float = 0.7,
    top_p: float = 0.9,
    max_tokens: int = 4000,
) -> AgentProfile:
    """Design agents may read and write inside their own sub-path."""
    template = PromptTemplate(agent_prompt) if agent_prompt else DESIGN_PROMPT
    return AgentProfile(
        template, SamplingOptions(temperature, top_p, max_tokens), READ_WRITE
    )


def review_profile() -> AgentProfile:
    return AgentProfile(REVIEW_PROMPT, SamplingOptions(0.5, 0.9, 3000), READ_ONLY)


def scoring_profile(criteria: Sequence[ScoringCriterion]) -> AgentProfile:
    return AgentProfile(
        build_scoring_prompt(criteria), SamplingOptions(0.3, 0.9, 2000), READ_ONLY
    )
