"""Cross-reference graph: who uses which symbol.

`SymbolUsages` maps a target `SymbolLink` to the ordered list of backlinks
pointing at it. The indexer seeds it with type-usage edges, the rewriter
adds content edges, and `assign_backlinks` copies the final lists onto the
entity tree once every writer is done.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from protobook.links.symbol import SymbolLink

if TYPE_CHECKING:
    from protobook.descriptor.models import Namespace

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SymbolBacklink:
    """A schema member (field or method) that refers to the target."""

    source: SymbolLink

    def href(self) -> str:
        return self.source.href()

    @property
    def label(self) -> str:
        return self.source.fqsl()


@dataclass(frozen=True, slots=True)
class ContentBacklink:
    """A documentation page that cites the target.

    `id` is the page-local citation anchor, `label` is `"<page>[<n>]"`.
    """

    path: str
    id: str
    label: str

    def href(self) -> str:
        # Chapter paths point at the .md source; links target the same file
        return f"/{self.path}#{self.id}"


Backlink = SymbolBacklink | ContentBacklink


class SymbolUsages:
    """Mutable mapping from target symbol to the backlinks recorded for it.

    Keys keep insertion order, so iteration (and therefore query
    resolution) is deterministic within a run.
    """

    def __init__(self) -> None:
        self._edges: dict[SymbolLink, list[Backlink]] = {}

    def register(self, link: SymbolLink) -> None:
        """Make a declared symbol resolvable, without adding an edge."""
        self._edges.setdefault(link, [])

    def add(self, target: SymbolLink, backlink: Backlink) -> None:
        self._edges.setdefault(target, []).append(backlink)

    def known(self) -> list[SymbolLink]:
        """Snapshot of every key, in insertion order."""
        return list(self._edges)

    def get(self, link: SymbolLink) -> list[Backlink] | None:
        return self._edges.get(link)

    def __contains__(self, link: object) -> bool:
        return link in self._edges

    def __iter__(self) -> Iterator[SymbolLink]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def edge_count(self) -> int:
        return sum(len(edges) for edges in self._edges.values())


def assign_backlinks(namespaces: Mapping[str, Namespace] | Iterable[Namespace], usages: SymbolUsages) -> int:
    """Copy each entity's accumulated backlinks from the graph onto it.

    Runs once, after indexing and every page rewrite. Returns the number of
    entities that received at least one backlink.
    """
    if isinstance(namespaces, Mapping):
        namespaces = namespaces.values()

    attached = 0
    for namespace in namespaces:
        for entity in namespace.iter_linked():
            edges = usages.get(entity.self_link)
            if edges:
                entity.backlinks = list(edges)
                attached += 1

    log.info("usages.backlinks_assigned", entities=attached, edges=usages.edge_count())
    return attached

