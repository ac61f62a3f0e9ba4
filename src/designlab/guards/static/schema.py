"""
Structural validation of decoded agent output.

Pure guards with no I/O: they check a JSON-decoded payload against a
pydantic schema or against the configured criterion ranges.
"""

from collections.abc import Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError

from designlab.domain.interfaces import GuardInterface
from designlab.domain.models import GuardResult, ScoringCriterion


def format_validation_errors(error: ValidationError) -> list[str]:
    """One 'location: message' line per pydantic error."""
    lines = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"{location}: {err['msg']}")
    return lines


class SchemaGuard(GuardInterface):
    """
    Validates a payload against a pydantic model or type.

    On success the GuardResult carries the validated (typed) value.
    """

    def __init__(self, schema: Any, name: str | None = None):
        """
        Args:
            schema: A pydantic model class or any type TypeAdapter accepts
            name: Label used in feedback (defaults to the schema's name)
        """
        self._adapter: TypeAdapter[Any] = TypeAdapter(schema)
        self.name = name or getattr(schema, "__name__", repr(schema))

    def validate(self, payload: Any) -> GuardResult:
        try:
            value = self._adapter.validate_python(payload)
        except ValidationError as e:
            return GuardResult(
                passed=False,
                feedback=f"{self.name} validation failed:\n"
                + "\n".join(format_validation_errors(e)),
                guard_name="SchemaGuard",
            )
        return GuardResult(passed=True, feedback="Schema valid", guard_name="SchemaGuard", value=value)


class ScoreBoundsGuard(GuardInterface):
    """
    Checks that every score lies inside its criterion's [min, max].

    Expects a sequence of objects with `name` and `value` attributes (the
    output of a SchemaGuard over score entries). Scores for names that match
    no criterion are left for the aggregator to ignore.
    """

    def __init__(self, criteria: Sequence[ScoringCriterion]):
        self._criteria = {c.name: c for c in criteria}

    def validate(self, payload: Any) -> GuardResult:
        if not payload:
            return GuardResult(
                passed=False, feedback="No scores returned", guard_name="ScoreBoundsGuard"
            )

        problems = []
        for entry in payload:
            criterion = self._criteria.get(entry.name)
            if criterion is None:
                continue
            if not criterion.min <= entry.value <= criterion.max:
                problems.append(
                    f"{entry.name}: {entry.value} outside "
                    f"[{criterion.min:g}, {criterion.max:g}]"
                )

        if problems:
            return GuardResult(
                passed=False,
                feedback="Scores out of range:\n" + "\n".join(problems),
                guard_name="ScoreBoundsGuard",
            )
        return GuardResult(
            passed=True, feedback="Scores in range", guard_name="ScoreBoundsGuard", value=payload
        )
