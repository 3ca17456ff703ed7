"""
suggestions.py

Close-match suggestions for mistyped property names.
"""

from typing import Iterable, Tuple

DEFAULT_MAX_DISTANCE = 2
DEFAULT_LIMIT = 3


def levenshtein(a: str, b: str) -> int:
    """Edit distance between ``a`` and ``b`` (insert, delete, substitute)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def suggest(
    invalid_name: str,
    candidate_names: Iterable[str],
    max_distance: int = DEFAULT_MAX_DISTANCE,
    limit: int = DEFAULT_LIMIT,
) -> Tuple[str, ...]:
    """
    Propose the names closest to ``invalid_name``.

    Names are compared case-insensitively. Candidates further than
    ``max_distance`` edits away are dropped; the rest are ordered by distance,
    then alphabetically, and cut to ``limit``.

    Returns:
        Tuple of names, empty when nothing is close enough
    """
    if not invalid_name:
        return ()

    folded = invalid_name.casefold()
    scored = []
    for candidate in set(candidate_names):
        if not candidate or candidate == invalid_name:
            continue
        distance = levenshtein(folded, candidate.casefold())
        if distance <= max_distance:
            scored.append((distance, candidate))

    scored.sort()
    return tuple(name for _, name in scored[:limit])
