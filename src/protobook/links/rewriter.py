"""Rewrites `[text](proto!(Query))` references in chapter prose.

The chapter is parsed with markdown-it-py, whose link rule is wrapped to
record where each link starts and ends in its inline source. Those offsets
are mapped back onto the chapter text (through blockquote markers, list
indentation and table pipes) and only the link spans are spliced, so
everything else on the page stays byte-for-byte intact. Inline links and
reference-style links (`[text][id]` with `[id]: proto!(Query)`) are both
recognised; definition lines are left in place.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

import structlog
from markdown_it import MarkdownIt
from markdown_it.rules_inline import StateInline
from markdown_it.rules_inline import link as link_rule
from markdown_it.token import Token

from protobook.core.errors import ContentError
from protobook.links.query import resolve_query
from protobook.links.usages import ContentBacklink, SymbolUsages
from protobook.render import render_symbol_link

if TYPE_CHECKING:
    from protobook.book.models import Chapter

log = structlog.get_logger(__name__)

PROTO_LINK = re.compile(r"^proto!\((?P<query>.*)\)$")

# Same line breaks markdown-it normalises to "\n"
_LINE_BREAK = re.compile(r"\r\n?|\n")

SPAN_META = "source_span"


def _spanned_link(state: StateInline, silent: bool) -> bool:
    """markdown-it's link rule, also storing the link's `(start, end)` in its meta."""
    start = state.pos
    first = len(state.tokens)
    if not link_rule(state, silent):
        return False
    if not silent:
        for token in state.tokens[first:]:
            if token.type == "link_open":
                token.meta[SPAN_META] = (start, state.pos)
                break
    return True


@lru_cache(maxsize=1)
def get_parser() -> MarkdownIt:
    """CommonMark plus the GFM tables and strikethrough mdBook enables."""
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    md.inline.ruler.at("link", _spanned_link)
    return md


@dataclass(frozen=True, slots=True)
class ProtoReference:
    """One reference found in the token stream.

    `span` is the link's `(start, end)` within the inline token's content.
    """

    query: str
    label: str | None
    span: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class _Splice:
    start: int
    end: int
    text: str


def iter_references(children: Sequence[Token]) -> Iterator[ProtoReference]:
    """Yield every `proto!(...)` link among an inline token's children."""
    md = get_parser()
    i = 0
    while i < len(children):
        token = children[i]
        i += 1
        if token.type != "link_open":
            continue
        match = PROTO_LINK.match(md.normalizeLinkText(str(token.attrGet("href") or "")))
        if not match:
            continue

        parts: list[str] = []
        while i < len(children) and children[i].type != "link_close":
            child = children[i]
            if child.type in ("text", "code_inline"):
                parts.append(child.content)
            elif child.type in ("softbreak", "hardbreak"):
                parts.append(" ")
            i += 1

        label = "".join(parts).strip()
        yield ProtoReference(query=match.group("query"), label=label or None, span=token.meta.get(SPAN_META))


def _suffix_columns(line: str, text: str) -> list[int] | None:
    """Columns of a paragraph line, which is the source line minus its leading markup."""
    body = text.lstrip(" \t")
    core = body.rstrip(" \t")
    end = len(line.rstrip(" \t"))
    if not core or not line[:end].endswith(core):
        return None
    col = end - len(core)
    return [col] * (len(text) - len(body)) + [col + j for j in range(len(body))]


def _columns_at(line: str, at: int, text: str) -> list[int] | None:
    columns: list[int] = []
    col = at
    for ch in text:
        # Table cells drop the backslash of an escaped pipe
        if ch == "|" and line.startswith("\\|", col):
            col += 1
        if col >= len(line) or line[col] != ch:
            return None
        columns.append(col)
        col += 1
    return columns


def _search_columns(line: str, text: str, cursor: int) -> list[int] | None:
    """Columns of the first occurrence of `text` in `line` at or after `cursor`."""
    for at in range(cursor, len(line) + 1):
        columns = _columns_at(line, at, text)
        if columns is not None:
            return columns
    return None


class _ChapterRewriter:
    """Per-chapter state: citation counter, line cursors, pending splices."""

    def __init__(self, chapter: Chapter, usages: SymbolUsages) -> None:
        self.chapter = chapter
        self.usages = usages
        self.content = chapter.content
        self.known = usages.known()
        self.counter = 1
        self.splices: list[_Splice] = []
        self.lines = self._split_lines()
        # Table cells share a source line; each is searched after the previous one
        self.line_cursors: dict[int, int] = {}

    def _split_lines(self) -> list[tuple[int, int]]:
        """`(start, end)` of every line, `end` excluding the line break."""
        lines = []
        start = 0
        for match in _LINE_BREAK.finditer(self.content):
            lines.append((start, match.start()))
            start = match.end()
        lines.append((start, len(self.content)))
        return lines

    def run(self) -> str:
        tokens = get_parser().parse(self.content)
        for index, token in enumerate(tokens):
            if token.type != "inline" or not token.children:
                continue
            references = list(iter_references(token.children))
            if not references:
                continue

            parent = tokens[index - 1] if index else None
            offsets = self._inline_offsets(token, _is_paragraph_like(parent))
            for reference in references:
                self._rewrite(reference, offsets)

        result = self.content
        for splice in reversed(self.splices):
            result = result[: splice.start] + splice.text + result[splice.end :]
        return result

    def _inline_offsets(self, token: Token, paragraph: bool) -> list[int] | None:
        """Absolute chapter offset of every character of `token.content`."""
        if not token.map:
            return None
        offsets: list[int] = []
        for k, text in enumerate(token.content.split("\n")):
            line_no = token.map[0] + k
            if line_no >= len(self.lines):
                return None
            start, end = self.lines[line_no]
            line = self.content[start:end].replace("\0", "\ufffd")

            columns = _suffix_columns(line, text) if paragraph else None
            if columns is None:
                columns = _search_columns(line, text, self.line_cursors.get(line_no, 0))
            if columns is None:
                return None
            if columns:
                self.line_cursors[line_no] = columns[-1] + 1

            offsets.extend(start + col for col in columns)
            # The line break that followed `text`
            offsets.append(end)
        return offsets

    def _rewrite(self, reference: ProtoReference, offsets: list[int] | None) -> None:
        if offsets is None or reference.span is None:
            raise ContentError.unlocated_link(self.chapter.name, reference.query)
        span_start = offsets[reference.span[0]]
        span_end = offsets[reference.span[1] - 1] + 1

        link = resolve_query(reference.query, self.known)
        if reference.label is not None:
            link = link.with_label(reference.label)

        # Draft chapters have no path and are never back-linked
        if self.chapter.path is not None:
            citation_id = f"{self.counter}{link.fqsl()}"
            self.usages.add(
                link,
                ContentBacklink(
                    path=str(self.chapter.path),
                    id=citation_id,
                    label=f"{self.chapter.name}[{self.counter}]",
                ),
            )
            link = link.with_own_id(citation_id)

        self.splices.append(_Splice(span_start, span_end, render_symbol_link(link)))
        self.counter += 1


def _is_paragraph_like(token: Token | None) -> bool:
    """Paragraph and setext heading lines keep their text up to the line end."""
    if token is None:
        return False
    return token.type == "paragraph_open" or (token.type == "heading_open" and token.markup in ("=", "-"))


def link_proto_symbols(chapter: Chapter, usages: SymbolUsages) -> int:
    """Replace every proto reference in `chapter.content` with an anchor.

    Resolves against the symbols known when the chapter starts. Pages with
    a path also record a content backlink per reference.

    Returns:
        Number of references rewritten.

    Raises:
        ResolutionError: A query is ambiguous or matches nothing.
        ContentError: A reference cannot be mapped back onto the page text.
    """
    rewriter = _ChapterRewriter(chapter, usages)
    content = rewriter.run()
    count = len(rewriter.splices)
    if count:
        chapter.content = content
    log.debug("rewriter.chapter", chapter=chapter.name, references=count)
    return count
