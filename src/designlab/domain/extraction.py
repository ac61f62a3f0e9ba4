"""
JSON extraction from free-form agent output.

Agents answer in prose that may contain the JSON payload as the whole
reply, inside a fenced code block, or embedded among other text. Each
strategy below returns a tagged ExtractionResult instead of raising, and
extract_json() tries them in order until one succeeds.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from designlab.domain.exceptions import ExtractionError

PREVIEW_LENGTH = 200

# =============================================================================
# RESULT TYPE
# =============================================================================


@dataclass(frozen=True)
class ExtractionResult:
    """Tagged result of one extraction strategy."""

    ok: bool
    strategy: str
    value: Any = None
    error: str = ""

    @classmethod
    def success(cls, strategy: str, value: Any) -> ExtractionResult:
        return cls(ok=True, strategy=strategy, value=value)

    @classmethod
    def failure(cls, strategy: str, error: str) -> ExtractionResult:
        return cls(ok=False, strategy=strategy, error=error)


# =============================================================================
# STRATEGIES
# =============================================================================


class ExtractionStrategy(ABC):
    """A single way of locating a JSON value in text."""

    name: str = "strategy"

    @abstractmethod
    def extract(self, text: str) -> ExtractionResult:
        """Try to decode a JSON value from text."""
        pass

    def __call__(self, text: str) -> ExtractionResult:
        return self.extract(text)

    def _decode(self, candidate: str) -> ExtractionResult:
        try:
            return ExtractionResult.success(self.name, json.loads(candidate))
        except json.JSONDecodeError as e:
            return ExtractionResult.failure(self.name, f"{self.name}: {e}")


class WholeTextStrategy(ExtractionStrategy):
    """The entire reply is a JSON document."""

    name = "whole_text"

    def extract(self, text: str) -> ExtractionResult:
        return self._decode(text.strip())


class FencedBlockStrategy(ExtractionStrategy):
    """The payload sits inside a ```json (or bare ```) fence."""

    name = "fenced_block"

    _FENCE = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```")

    def extract(self, text: str) -> ExtractionResult:
        result = ExtractionResult.failure(self.name, f"{self.name}: no fenced block")
        for block in self._FENCE.findall(text):
            result = self._decode(block.strip())
            if result.ok:
                return result
        return result


class BraceMatchingStrategy(ExtractionStrategy):
    """The payload is the first balanced {...} or [...] span that decodes."""

    name = "brace_matching"

    _OPENERS = {"{": "}", "[": "]"}

    def extract(self, text: str) -> ExtractionResult:
        result = ExtractionResult.failure(self.name, f"{self.name}: no JSON object found")
        for start, ch in enumerate(text):
            if ch not in self._OPENERS:
                continue
            end = self._matching_close(text, start)
            if end is None:
                result = ExtractionResult.failure(
                    self.name, f"{self.name}: unbalanced braces"
                )
                continue
            result = self._decode(text[start : end + 1])
            if result.ok:
                return result
        return result

    def _matching_close(self, text: str, start: int) -> int | None:
        stack: list[str] = []
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch in self._OPENERS:
                stack.append(self._OPENERS[ch])
            elif stack and ch == stack[-1]:
                stack.pop()
                if not stack:
                    return i
        return None


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    WholeTextStrategy(),
    FencedBlockStrategy(),
    BraceMatchingStrategy(),
)


# =============================================================================
# ENTRY POINT
# =============================================================================


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """First `length` characters of text, with an ellipsis when truncated."""
    return text[:length] + ("..." if len(text) > length else "")


def try_extract_json(
    text: str, strategies: tuple[ExtractionStrategy, ...] = DEFAULT_STRATEGIES
) -> ExtractionResult:
    """Run strategies in order and return the first success, else the last failure."""
    result = ExtractionResult.failure("none", "no extraction strategies configured")
    for strategy in strategies:
        result = strategy(text)
        if result.ok:
            return result
    return result


def extract_json(
    text: str, strategies: tuple[ExtractionStrategy, ...] = DEFAULT_STRATEGIES
) -> Any:
    """
    Extract a JSON value from agent output.

    Raises:
        ExtractionError: If every strategy fails. The message carries the
            last strategy's diagnostic and a preview of the text.
    """
    result = try_extract_json(text, strategies)
    if not result.ok:
        raise ExtractionError(
            f"Failed to extract JSON from agent output ({result.error})",
            preview(text),
        )
    return result.value
