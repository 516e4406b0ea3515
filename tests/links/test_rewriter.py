"""Tests for proto reference rewriting (links/rewriter.py)."""

import pytest

from protobook.book.models import Chapter
from protobook.core.errors import ErrorCode, ResolutionError
from protobook.links.rewriter import SPAN_META, get_parser, iter_references, link_proto_symbols
from protobook.links.symbol import SymbolLink
from protobook.links.usages import ContentBacklink, SymbolUsages


def usages_for(*fqsls: str, packages: set[str]) -> SymbolUsages:
    usages = SymbolUsages()
    for fqsl in fqsls:
        usages.register(SymbolLink.from_fqsl(fqsl, packages))
    return usages


def anchor(label: str, symbol: str = "HelloWorld") -> str:
    return f'<a href="/proto/hello.md#{symbol}">{label}</a>'


@pytest.fixture
def hello_usages() -> SymbolUsages:
    return usages_for(".hello.HelloWorld", ".hello.Greeter", packages={"hello"})


class TestPassthrough:
    """Pages without references are left alone."""

    def test_given_page_without_references_when_linked_then_byte_identical(
        self, hello_usages: SymbolUsages
    ) -> None:
        """Footnotes, plain links and raw HTML survive untouched."""
        # Given
        content = (
            "# Chapter 1\n"
            "\n"
            "Some text with a footnote[^1] and a [plain link](https://example.com \"title\").\n"
            "\n"
            "<div class=\"custom\">  raw   html </div>\n"
            "\n"
            "* list item\n"
            "*   another   item\n"
            "\n"
            "[^1]: The footnote.\n"
        )
        chapter = Chapter(name="Chapter 1", content=content, path="chapter_1.md")

        # When
        count = link_proto_symbols(chapter, hello_usages)

        # Then
        assert count == 0
        assert chapter.content == content

    @pytest.mark.parametrize(
        "content",
        [
            "```\n[x](proto!(HelloWorld))\n```\n",
            "    [x](proto!(HelloWorld))\n",
            "Mail <https://x.y/[a](proto!(HelloWorld))> today.\n",
            '<span title="[a](proto!(HelloWorld))">hi</span>\n',
            "<!-- [a](proto!(HelloWorld)) -->\n",
            "Escaped \\[x](proto!(HelloWorld)) link.\n",
            "[unused]: proto!(NoSuchThing)\n",
        ],
        ids=["fence", "indented_code", "autolink", "inline_html", "html_comment", "escaped", "unused_definition"],
    )
    def test_proto_text_outside_links(self, hello_usages: SymbolUsages, content: str) -> None:
        chapter = Chapter(name="Draft", content=content)

        assert link_proto_symbols(chapter, hello_usages) == 0
        assert chapter.content == content

    def test_only_the_link_changes(self, hello_usages: SymbolUsages) -> None:
        chapter = Chapter(name="Intro", content="Intro  with  spacing.\n\nSee [it](proto!(HelloWorld)) *now*.\n")

        link_proto_symbols(chapter, hello_usages)

        assert chapter.content == f"Intro  with  spacing.\n\nSee {anchor('it')} *now*.\n"


class TestSourceSpans:
    """Each reference is replaced exactly where the parser found it."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (
                "Literal \\`[x](proto!(HelloWorld))\\` here\n",
                f"Literal \\`{anchor('x')}\\` here\n",
            ),
            (
                "<https://x.y/[a](proto!(HelloWorld))> [b](proto!(HelloWorld))\n",
                f"<https://x.y/[a](proto!(HelloWorld))> {anchor('b')}\n",
            ),
            (
                '<span title="[a](proto!(HelloWorld))">hi</span> [b](proto!(HelloWorld))\n',
                f'<span title="[a](proto!(HelloWorld))">hi</span> {anchor("b")}\n',
            ),
            (
                "Write `[x](proto!(HelloWorld))` to get [x](proto!(HelloWorld)).\n",
                f"Write `[x](proto!(HelloWorld))` to get {anchor('x')}.\n",
            ),
            (
                "> Quote with\n> a [w](proto!(HelloWorld)) inside.\n",
                f"> Quote with\n> a {anchor('w')} inside.\n",
            ),
            (
                "- item\n\n  more on [w](proto!(HelloWorld))\n- next\n",
                f"- item\n\n  more on {anchor('w')}\n- next\n",
            ),
            (
                "1. > [w](proto!(HelloWorld))\n",
                f"1. > {anchor('w')}\n",
            ),
            (
                "## See [w](proto!(HelloWorld)) ##\n",
                f"## See {anchor('w')} ##\n",
            ),
            (
                "See [w](proto!(HelloWorld))\n---\n",
                f"See {anchor('w')}\n---\n",
            ),
            (
                "One\r\n[w](proto!(HelloWorld))\r\n",
                f"One\r\n{anchor('w')}\r\n",
            ),
            (
                "See [hello\nworld](proto!(HelloWorld)).\n",
                f"See {anchor('hello world')}.\n",
            ),
            (
                "[w](<proto!(HelloWorld)> \"title\")\n",
                f"{anchor('w')}\n",
            ),
        ],
        ids=[
            "escaped_backticks",
            "autolink_before",
            "inline_html_before",
            "code_span_before",
            "blockquote",
            "list_continuation",
            "quote_in_list",
            "atx_heading",
            "setext_heading",
            "crlf",
            "multiline_label",
            "bracketed_destination",
        ],
    )
    def test_reference_replaced_in_place(self, hello_usages: SymbolUsages, content: str, expected: str) -> None:
        chapter = Chapter(name="Draft", content=content)

        assert link_proto_symbols(chapter, hello_usages) == 1
        assert chapter.content == expected

    def test_given_table_cells_when_linked_then_each_cell_spliced(self, hello_usages: SymbolUsages) -> None:
        """Identical cells on one row map to their own columns; escaped pipes are kept."""
        # Given
        content = (
            "| a | b | c |\n"
            "|---|---|---|\n"
            "| x \\| [w](proto!(HelloWorld)) | [w](proto!(HelloWorld)) | [g](proto!(Greeter)) |\n"
        )
        chapter = Chapter(name="Draft", content=content)

        # When
        count = link_proto_symbols(chapter, hello_usages)

        # Then
        assert count == 3
        assert chapter.content == (
            "| a | b | c |\n"
            "|---|---|---|\n"
            f"| x \\| {anchor('w')} | {anchor('w')} | {anchor('g', 'Greeter')} |\n"
        )


class TestReferenceStyleLinks:
    """`[text][label]` links whose definition points at a proto symbol."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (
                "See [x][hw].\n\n[hw]: proto!(HelloWorld)\n",
                f"See {anchor('x')}.\n\n[hw]: proto!(HelloWorld)\n",
            ),
            (
                "See [HelloWorld][].\n\n[helloworld]: proto!(HelloWorld)\n",
                f"See {anchor('HelloWorld')}.\n\n[helloworld]: proto!(HelloWorld)\n",
            ),
            (
                "[HelloWorld]\n\n[HelloWorld]: proto!(HelloWorld)\n",
                f"{anchor('HelloWorld')}\n\n[HelloWorld]: proto!(HelloWorld)\n",
            ),
        ],
        ids=["full", "collapsed", "shortcut"],
    )
    def test_reference_forms(self, hello_usages: SymbolUsages, content: str, expected: str) -> None:
        chapter = Chapter(name="Refs", content=content)

        assert link_proto_symbols(chapter, hello_usages) == 1
        assert chapter.content == expected

    def test_given_mixed_styles_when_linked_then_citations_in_page_order(self, hello_usages: SymbolUsages) -> None:
        # Given
        chapter = Chapter(
            name="Refs",
            path="refs.md",
            content="[x][hw] then [y](proto!(Greeter)).\n\n[hw]: proto!(HelloWorld)\n",
        )

        # When
        link_proto_symbols(chapter, hello_usages)

        # Then
        assert chapter.content == (
            '<a id="1.hello.HelloWorld" href="/proto/hello.md#HelloWorld">x</a> then '
            '<a id="2.hello.Greeter" href="/proto/hello.md#Greeter">y</a>.\n\n'
            "[hw]: proto!(HelloWorld)\n"
        )
        assert hello_usages.get(SymbolLink("hello", "Greeter")) == [
            ContentBacklink(path="refs.md", id="2.hello.Greeter", label="Refs[2]")
        ]


class TestRewrite:
    """Resolution and rendering of references."""

    def test_given_draft_chapter_when_linked_then_plain_anchor(self, hello_usages: SymbolUsages) -> None:
        """A chapter without a path gets no citation id and records no backlink."""
        # Given
        chapter = Chapter(name="Draft", content="[proto link](proto!(HelloWorld))")

        # When
        count = link_proto_symbols(chapter, hello_usages)

        # Then
        assert count == 1
        assert chapter.content == anchor("proto link")
        assert hello_usages.edge_count() == 0

    def test_given_chapter_with_path_when_linked_then_citations_numbered(self, hello_usages: SymbolUsages) -> None:
        """Each reference gets its own anchor id and a content backlink."""
        # Given
        chapter = Chapter(
            name="Guide",
            path="guide.md",
            content="[a](proto!(HelloWorld)) and [b](proto!(.hello.HelloWorld))\n",
        )

        # When
        count = link_proto_symbols(chapter, hello_usages)

        # Then
        assert count == 2
        assert chapter.content == (
            '<a id="1.hello.HelloWorld" href="/proto/hello.md#HelloWorld">a</a> and '
            '<a id="2.hello.HelloWorld" href="/proto/hello.md#HelloWorld">b</a>\n'
        )
        edges = hello_usages.get(SymbolLink("hello", "HelloWorld"))
        assert edges == [
            ContentBacklink(path="guide.md", id="1.hello.HelloWorld", label="Guide[1]"),
            ContentBacklink(path="guide.md", id="2.hello.HelloWorld", label="Guide[2]"),
        ]
        assert edges[0].href() == "/guide.md#1.hello.HelloWorld"

    def test_empty_text_uses_default_label(self, hello_usages: SymbolUsages) -> None:
        chapter = Chapter(name="Draft", content="[](proto!(HelloWorld))")
        link_proto_symbols(chapter, hello_usages)
        assert chapter.content == anchor("HelloWorld")

    def test_code_span_label(self, hello_usages: SymbolUsages) -> None:
        chapter = Chapter(name="Draft", content="[`HelloWorld`](proto!(HelloWorld))")
        link_proto_symbols(chapter, hello_usages)
        assert chapter.content == anchor("HelloWorld")

    def test_label_is_escaped(self, hello_usages: SymbolUsages) -> None:
        chapter = Chapter(name="Draft", content=r"[a \<b\>](proto!(HelloWorld))")
        link_proto_symbols(chapter, hello_usages)
        assert chapter.content == anchor("a &lt;b&gt;")

    def test_method_query(self) -> None:
        greeter = SymbolLink("hello", "Greeter")
        usages = SymbolUsages()
        usages.register(greeter)
        usages.register(greeter.with_property("SayHello"))
        chapter = Chapter(name="Draft", content="[call](proto!(Greeter::SayHello))")

        link_proto_symbols(chapter, usages)

        assert chapter.content == anchor("call", "Greeter::SayHello")


class TestErrors:
    """Failures surface as typed errors carrying the user-facing text."""

    def test_given_ambiguous_query_when_linked_then_lists_candidates(self) -> None:
        # Given
        usages = usages_for(".hello.HelloWorld", ".other.HelloWorld", packages={"hello", "other"})
        chapter = Chapter(name="Draft", content="[x](proto!(HelloWorld))")

        # When
        with pytest.raises(ResolutionError) as exc_info:
            link_proto_symbols(chapter, usages)

        # Then
        assert exc_info.value.message == (
            "More than one protobuf symbol matched your query. "
            "Replace your link with one of the following:\n"
            "proto!(.hello.HelloWorld)\n"
            "proto!(.other.HelloWorld)"
        )
        assert chapter.content == "[x](proto!(HelloWorld))"

    def test_given_typo_when_linked_then_near_match_named(self) -> None:
        # Given
        usages = usages_for(".hello.HelloWorld", ".hello.Unrelated", packages={"hello"})
        chapter = Chapter(name="Draft", content="[x](proto!(HelloWord))")

        # When
        with pytest.raises(ResolutionError) as exc_info:
            link_proto_symbols(chapter, usages)

        # Then
        assert exc_info.value.code == ErrorCode.RESOLUTION_NO_MATCH
        assert exc_info.value.message.endswith("near matches:\nproto!(.hello.HelloWorld)")

    def test_unresolvable_reference_definition(self, hello_usages: SymbolUsages) -> None:
        chapter = Chapter(name="Refs", content="See [x][hw].\n\n[hw]: proto!(Nope)\n")

        with pytest.raises(ResolutionError) as exc_info:
            link_proto_symbols(chapter, hello_usages)

        assert exc_info.value.code == ErrorCode.RESOLUTION_NO_MATCH


class TestIterReferences:
    """Token-level discovery."""

    def test_only_proto_links(self) -> None:
        tokens = get_parser().parse("[a](https://x.y) [b *c*](proto!(Q)) ![img](proto!(I))")
        inline = next(t for t in tokens if t.type == "inline")

        references = list(iter_references(inline.children or []))

        assert [(r.query, r.label, r.span) for r in references] == [("Q", "b c", (17, 35))]

    def test_link_spans_recorded(self) -> None:
        tokens = get_parser().parse("x [a](y) [b][c]\n\n[c]: z\n")
        inline = next(t for t in tokens if t.type == "inline")

        spans = [t.meta[SPAN_META] for t in inline.children or [] if t.type == "link_open"]

        assert spans == [(2, 8), (9, 15)]
