"""
Filesystem-safe names for topics, candidates and models.
"""

import re
from collections import Counter
from collections.abc import Sequence

MAX_NAME_LENGTH = 50

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def sanitize_for_filename(text: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """
    Lowercase slug of text: [a-z0-9-] only, single dashes, at most max_length.

    >>> sanitize_for_filename("OpenAI/GPT-4o Mini!")
    'openai-gpt-4o-mini'
    """
    slug = text.lower().replace("/", "-")
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _DASHES.sub("-", slug)
    return slug[:max_length].strip("-")


def model_short_name(model: str) -> str:
    """Last path segment of a "provider/model" identifier."""
    return model.rsplit("/", 1)[-1]


def unique_model_keys(models: Sequence[str]) -> dict[str, str]:
    """
    Map each model to a distinct filename key, preserving order.

    The key is the sanitized short name; models whose short names collide
    fall back to the sanitized full identifier, and any remaining clash gets
    a numeric suffix.
    """
    short = {m: sanitize_for_filename(model_short_name(m)) or "model" for m in models}
    clashes = Counter(short.values())

    keys: dict[str, str] = {}
    taken: set[str] = set()
    for model in models:
        if model in keys:
            continue
        key = short[model]
        if clashes[key] > 1:
            key = sanitize_for_filename(model) or key
        candidate, n = key, 2
        while candidate in taken:
            candidate = f"{key}-{n}"
            n += 1
        keys[model] = candidate
        taken.add(candidate)
    return keys
