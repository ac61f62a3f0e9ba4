"""
Guard composition and enforcement helpers.
"""

from typing import Any

from designlab.domain.exceptions import SchemaValidationError
from designlab.domain.interfaces import GuardInterface
from designlab.domain.models import GuardResult


class CompositeGuard(GuardInterface):
    """
    Logical AND of multiple guards. All must pass.

    Guards run in order and each one receives the value validated by the
    previous guard, so a schema guard can feed typed entries to a bounds
    guard. Short-circuits on the first failure.
    """

    def __init__(self, *guards: GuardInterface):
        """
        Args:
            *guards: Guards to compose (evaluated in order)
        """
        self.guards = guards

    def validate(self, payload: Any) -> GuardResult:
        value = payload
        for guard in self.guards:
            result = guard.validate(value)
            if not result.passed:
                return result  # Short-circuit on failure
            if result.value is not None:
                value = result.value
        return GuardResult(passed=True, feedback="All guards passed", value=value)


def ensure_valid(guard: GuardInterface, payload: Any) -> Any:
    """
    Run a guard and return the validated value.

    Raises:
        SchemaValidationError: If the guard fails
    """
    result = guard.validate(payload)
    if not result.passed:
        raise SchemaValidationError(
            result.feedback, errors=result.feedback.splitlines()[1:]
        )
    return payload if result.value is None else result.value
