"""mdBook host interface: protocol models and the preprocessor."""

from protobook.book.models import (
    Book,
    BookItem,
    Chapter,
    ChapterItem,
    PartTitleItem,
    PreprocessorContext,
    parse_input,
)

__all__ = [
    "Book",
    "BookItem",
    "Chapter",
    "ChapterItem",
    "PartTitleItem",
    "PreprocessorContext",
    "parse_input",
]
