"""Tests for SchemaGuard and ScoreBoundsGuard."""

import pytest

from designlab.domain.models import ScoringCriterion
from designlab.guards import SchemaGuard, ScoreBoundsGuard
from designlab.schemas.models import DesignArtifact, QualitativeReview, ScoreEntry


class TestSchemaGuard:
    """Tests for SchemaGuard.validate()."""

    def test_valid_design_returns_model(self, design_payload) -> None:
        result = SchemaGuard(DesignArtifact).validate(design_payload("alpha"))

        assert result.passed
        assert isinstance(result.value, DesignArtifact)
        assert result.value.id == "alpha"

    def test_missing_fields_listed(self) -> None:
        result = SchemaGuard(DesignArtifact).validate({"id": "x", "title": "t"})

        assert not result.passed
        assert result.guard_name == "SchemaGuard"
        lines = result.feedback.splitlines()
        assert lines[0] == "DesignArtifact validation failed:"
        assert "summary: Field required" in lines
        assert "data_flow: Field required" in lines

    def test_extra_fields_rejected(self, design_payload) -> None:
        payload = {**design_payload("alpha"), "budget": "unlimited"}

        result = SchemaGuard(DesignArtifact).validate(payload)

        assert not result.passed
        assert "budget" in result.feedback

    def test_nested_location(self, design_payload) -> None:
        payload = design_payload("alpha")
        payload["risks"] = [{"description": "x", "severity": "catastrophic"}]

        result = SchemaGuard(DesignArtifact).validate(payload)

        assert "risks.0.severity" in result.feedback

    def test_review_risk_levels(self, review_payload) -> None:
        guard = SchemaGuard(QualitativeReview)

        assert guard.validate(review_payload(risk="high")).passed
        assert not guard.validate(review_payload(risk="extreme")).passed

    def test_list_schema_with_custom_name(self) -> None:
        guard = SchemaGuard(list[ScoreEntry], name="Scores")

        result = guard.validate({"name": "clarity"})

        assert not result.passed
        assert result.feedback.startswith("Scores validation failed:")

    def test_non_object_payload(self) -> None:
        result = SchemaGuard(DesignArtifact).validate(["not", "a", "design"])

        assert not result.passed


class TestScoreBoundsGuard:
    """Tests for ScoreBoundsGuard.validate()."""

    @pytest.fixture
    def guard(self) -> ScoreBoundsGuard:
        return ScoreBoundsGuard(
            [ScoringCriterion("clarity", min=0, max=10), ScoringCriterion("risk", min=1, max=5)]
        )

    def test_in_range_passes(self, guard) -> None:
        entries = [ScoreEntry(name="clarity", value=10), ScoreEntry(name="risk", value=1)]

        result = guard.validate(entries)

        assert result.passed
        assert result.value == entries

    def test_out_of_range_lists_each_problem(self, guard) -> None:
        entries = [ScoreEntry(name="clarity", value=-1), ScoreEntry(name="risk", value=6)]

        result = guard.validate(entries)

        assert not result.passed
        assert result.feedback.splitlines() == [
            "Scores out of range:",
            "clarity: -1.0 outside [0, 10]",
            "risk: 6.0 outside [1, 5]",
        ]

    def test_unknown_names_ignored(self, guard) -> None:
        assert guard.validate([ScoreEntry(name="vibes", value=99)]).passed

    def test_empty_list_fails(self, guard) -> None:
        result = guard.validate([])

        assert not result.passed
        assert result.feedback == "No scores returned"
