"""Resolution of abbreviated `proto!(...)` queries to known symbols.

A query is a dotted name with an optional `::property` suffix, e.g.
`HelloWorld`, `pkg.HelloWorld`, `.pkg.Greeter::SayHello`. A known symbol
matches when its dotted segments end with the query's segments.
"""

from collections.abc import Iterable
from dataclasses import replace

import structlog

from protobook.core.errors import ResolutionError
from protobook.links import fuzzy
from protobook.links.symbol import SymbolLink, split_property

log = structlog.get_logger(__name__)

SUGGESTION_LIMIT = 3


def _query_segments(name: str) -> tuple[str, ...]:
    name = name.strip()
    if name.startswith("."):
        name = name[1:]
    if not name:
        return ()
    return tuple(name.split("."))


def _ends_with(segments: tuple[str, ...], suffix: tuple[str, ...]) -> bool:
    if not suffix or len(suffix) > len(segments):
        return False
    return segments[-len(suffix) :] == suffix


def matches(query: str, candidate: SymbolLink) -> bool:
    """True when `candidate` is addressed by `query` (segment suffix match)."""
    name, prop = split_property(query)
    wanted = _query_segments(name)

    if prop is None:
        return _ends_with(candidate.segments(), wanted)

    if candidate.property != prop.strip():
        return False
    return _ends_with(candidate.name_segments(), wanted)


def resolve_query(query: str, known: Iterable[SymbolLink]) -> SymbolLink:
    """Return the single known symbol addressed by `query`.

    Raises:
        ResolutionError: Several symbols match (every candidate is listed),
            or none does (near matches, or a sample of valid names).
    """
    candidates = list(known)
    found = [c for c in candidates if matches(query, c)]

    if len(found) == 1:
        log.debug("query.resolved", query=query, fqsl=found[0].fqsl())
        return replace(found[0])

    if found:
        raise ResolutionError.ambiguous(query, [c.fqsl() for c in found])

    names = [c.fqsl() for c in candidates]
    suggestions = fuzzy.rank(query, names, limit=SUGGESTION_LIMIT)
    if suggestions:
        raise ResolutionError.no_match(query, suggestions)
    raise ResolutionError.no_match_sample(query, names[:SUGGESTION_LIMIT])
