"""Symbol identities, the usage graph and query resolution.

The content rewriter lives in `protobook.links.rewriter`; it renders
anchors and is imported directly by the book pipeline.
"""

from protobook.links.query import resolve_query
from protobook.links.symbol import SymbolLink, match_package, routing_path
from protobook.links.usages import (
    Backlink,
    ContentBacklink,
    SymbolBacklink,
    SymbolUsages,
    assign_backlinks,
)

__all__ = [
    "Backlink",
    "ContentBacklink",
    "SymbolBacklink",
    "SymbolLink",
    "SymbolUsages",
    "assign_backlinks",
    "match_package",
    "resolve_query",
    "routing_path",
]
