"""The mdBook preprocessor: descriptor set in, cross-linked book out.

Single pass, strictly ordered:

1. load config and decode the descriptor set
2. index every file, seeding the usage graph with type edges
3. rewrite `proto!(...)` references in every chapter, in reading order
4. attach the finished graph to the entity tree
5. render one chapter per package and place it in the book
"""

from __future__ import annotations

from typing import Any

import structlog

from protobook.book.models import Book, Chapter, ChapterItem, PreprocessorContext
from protobook.config import PREPROCESSOR_NAME, PreprocessorConfig, load_config
from protobook.core.logging import configure_logging
from protobook.descriptor import Namespace, index_descriptor_set, read_descriptor_set
from protobook.links.rewriter import link_proto_symbols
from protobook.links.usages import SymbolUsages, assign_backlinks
from protobook.render import render_namespace

log = structlog.get_logger(__name__)

UNSUPPORTED_RENDERER = "not-supported"


class ProtobufPreprocessor:
    """Adds generated protobuf reference pages to a book."""

    name = PREPROCESSOR_NAME

    def supports_renderer(self, renderer: str) -> bool:
        return renderer != UNSUPPORTED_RENDERER

    def run(
        self,
        ctx: PreprocessorContext,
        book: Book,
        *,
        config: PreprocessorConfig | None = None,
        **overrides: Any,
    ) -> Book:
        """Process `book` in place and return it.

        Config comes from the context's book.toml unless `config` is given;
        `overrides` take precedence over book.toml and the environment.

        Raises:
            ProtobookError: Any configuration, descriptor or resolution
                failure. Nothing is returned in that case.
        """
        if config is None:
            config = load_config(ctx.root, ctx.config, **overrides)
            configure_logging(config=config.logging)

        descriptor_set = read_descriptor_set(config.descriptor_path)

        usages = SymbolUsages()
        namespaces = index_descriptor_set(descriptor_set, usages)

        references = 0
        for chapter in book.iter_chapters():
            count = link_proto_symbols(chapter, usages)
            if count:
                log.info("preprocessor.chapter_linked", chapter=chapter.name, references=count)
            references += count

        assign_backlinks(namespaces, usages)

        chapters = [namespace_chapter(ns, config.proto_url_root) for ns in namespaces.values()]
        place_chapters(book, chapters, config.nest_under)

        log.info(
            "preprocessor.done",
            namespaces=len(namespaces),
            references=references,
        )
        return book


def namespace_chapter(namespace: Namespace, url_root: str | None = None) -> Chapter:
    """Chapter for one package; its path is `proto/<package path>.md`."""
    path = f"{namespace.routing_path()}.md"
    return Chapter(
        name=namespace.title,
        content=render_namespace(namespace, url_root),
        path=path,
        source_path=path,
    )


def place_chapters(book: Book, chapters: list[Chapter], nest_under: str | None) -> None:
    """Append generated chapters under the `nest_under` chapter or at the end.

    Nested chapters are numbered after their parent (`parent.number + [i]`,
    1-based) and inherit its `parent_names`.
    """
    parent = book.find_chapter(nest_under) if nest_under else None

    if nest_under and parent is None:
        log.warning("preprocessor.nest_under_not_found", chapter=nest_under)

    if parent is None:
        book.sections.extend(ChapterItem(chapter=c) for c in chapters)
        return

    for i, chapter in enumerate(chapters, start=1):
        if parent.number is not None:
            chapter.number = [*parent.number, i]
        chapter.parent_names = [*parent.parent_names, parent.name]
        parent.sub_items.append(ChapterItem(chapter=chapter))
