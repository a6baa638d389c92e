"""Fuzzy matching of free-text queries against reference food descriptions.

Descriptions are comma-segmented with the category first and the most specific
segment last, e.g. ``"Sweets, sugars, granulated"``. The weights and the
acceptance threshold were tuned against real product names; keep them as is.
"""

import re
from collections.abc import Iterable

from nutrition_resolver.domain.reference import ReferenceFood

EXACT_MATCH_SCORE = 100.0
MATCH_THRESHOLD = 8.0

_BASE_WEIGHT = 10.0
_PLURAL_POINTS = 0.8
_SPECIFIC_SEGMENT_BONUS = 8.0
_WHOLE_SEGMENT_BONUS = 6.0
_PARTIAL_SEGMENT_BONUS = 2.0
_CATEGORY_WORD_BONUS = 1.0
_PREFIX_COVERAGE = 0.6
_MAX_PLAIN_SEGMENTS = 3
_SEGMENT_PENALTY = 0.5

_WORD_SPLIT = re.compile(r"[\s,]+")


def query_words(query: str) -> list[str]:
    """Split a query into lowercase words longer than one character."""
    return [word for word in _WORD_SPLIT.split(query.lower()) if len(word) > 1]


def _word_points(word: str, text: str) -> float:
    if word in text:
        return 1.0
    variant = word[:-1] if word.endswith("s") else f"{word}s"
    if variant and variant in text:
        return _PLURAL_POINTS
    return 0.0


def _names_specific_segment(query: str, segment: str) -> bool:
    if not segment:
        return False
    if query == segment or query.startswith(segment):
        return True
    # A truncated query must still cover most of the segment.
    return (
        segment.startswith(query)
        and len(query) >= _PREFIX_COVERAGE * len(segment)
    )


def score_match(query: str, description: str) -> float:
    """Score how well ``query`` names the food in ``description``."""
    normalized_query = " ".join(query.lower().split())
    normalized_description = description.lower().strip()
    if not normalized_query:
        return 0.0
    if normalized_query == normalized_description:
        return EXACT_MATCH_SCORE

    segments = [segment.strip() for segment in normalized_description.split(",")]
    words = query_words(normalized_query)
    if not words:
        return 0.0

    points = sum(_word_points(word, normalized_description) for word in words)
    if points == 0:
        return 0.0

    score = points / len(words) * _BASE_WEIGHT

    specific = segments[1:]
    if any(_names_specific_segment(normalized_query, seg) for seg in specific):
        score += _SPECIFIC_SEGMENT_BONUS
    elif any(
        all(_word_points(word, seg) > 0 for word in words) for seg in specific
    ):
        score += _WHOLE_SEGMENT_BONUS
    else:
        partial = sum(
            1 for seg in specific if any(_word_points(word, seg) > 0 for word in words)
        )
        score += _PARTIAL_SEGMENT_BONUS * partial

    category = segments[0]
    score += _CATEGORY_WORD_BONUS * sum(
        1 for word in words if _word_points(word, category) > 0
    )

    score -= len(normalized_description) / 100
    score -= _SEGMENT_PENALTY * max(0, len(segments) - _MAX_PLAIN_SEGMENTS)
    return score


def best_match(
    query: str, foods: Iterable[ReferenceFood]
) -> tuple[ReferenceFood, float] | None:
    """Return the highest scoring food at or above the threshold."""
    best: tuple[ReferenceFood, float] | None = None
    for food in foods:
        score = score_match(query, food.description)
        if score < MATCH_THRESHOLD:
            continue
        if best is None or score > best[1]:
            best = (food, score)
    return best
