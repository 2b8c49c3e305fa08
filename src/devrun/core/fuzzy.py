"""Fuzzy string matching for "did you mean" script suggestions.

Uses Levenshtein edit distance normalised to a 0.0-1.0 similarity score.
"""

from __future__ import annotations

from typing import Sequence

SUGGESTION_THRESHOLD = 0.5


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions, or
    substitutions needed to turn ``a`` into ``b``.

    Operates on code points, so "café" and "cafe" are one edit apart.
    """
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Two-row dynamic programming table
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current

    return previous[len(b)]


def similarity_score(a: str, b: str) -> float:
    """Return similarity between 0.0 and 1.0 (1.0 = identical)."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_len


def find_similar(
    query: str,
    candidates: Sequence[str],
    threshold: float,
) -> list[tuple[str, float]]:
    """Rank candidates by case-insensitive similarity to query.

    Only candidates scoring at least ``threshold`` are kept. Results are
    sorted best first; equal scores keep their input order.
    """
    query_lower = query.lower()
    matches = [
        (candidate, similarity_score(query_lower, candidate.lower()))
        for candidate in candidates
    ]
    matches = [(candidate, score) for candidate, score in matches if score >= threshold]
    matches.sort(key=lambda m: m[1], reverse=True)
    return matches


def suggest(query: str, candidates: Sequence[str]) -> str | None:
    """Return the best candidate if it is similar enough, else None."""
    matches = find_similar(query, candidates, SUGGESTION_THRESHOLD)
    if not matches:
        return None
    return matches[0][0]


def is_exact_match(query: str, candidates: Sequence[str]) -> bool:
    """Case-insensitive membership test."""
    query_lower = query.lower()
    return any(candidate.lower() == query_lower for candidate in candidates)
