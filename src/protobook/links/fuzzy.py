"""Approximate matching used for "did you mean" suggestions."""

from difflib import SequenceMatcher


def _is_subsequence(needle: str, haystack: str) -> bool:
    it = iter(haystack)
    return all(ch in it for ch in needle)


def fuzzy_score(query: str, candidate: str) -> int:
    """Score how well `query` approximates `candidate`.

    Returns 0 unless every character of the query appears in the candidate
    in order. Matching is smart-case: case-insensitive unless the query
    contains an uppercase letter. Positive scores range from 1 to 100 and
    grow with the overall similarity of the two strings.
    """
    if not query:
        return 0

    if not any(ch.isupper() for ch in query):
        query = query.lower()
        candidate = candidate.lower()

    if not _is_subsequence(query, candidate):
        return 0

    ratio = SequenceMatcher(None, query, candidate, autojunk=False).ratio()
    return max(1, round(ratio * 100))


def rank(query: str, candidates: list[str], limit: int = 3) -> list[str]:
    """Best `limit` candidates by score, highest first; ties keep input order."""
    scored = [(fuzzy_score(query, c), c) for c in candidates]
    positive = [pair for pair in scored if pair[0] > 0]
    positive.sort(key=lambda pair: pair[0], reverse=True)
    return [c for _, c in positive[:limit]]
