"""Pydantic models for mdBook's preprocessor protocol.

mdBook sends `[context, book]` as JSON on stdin and reads the book back
from stdout. Only the fields this preprocessor touches are modelled; any
other keys are kept and written back unchanged.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from protobook.core.errors import ConfigError


class Chapter(BaseModel):
    """One page of the book."""

    model_config = ConfigDict(extra="allow")

    name: str
    content: str = ""
    number: list[int] | None = None  # section number, e.g. [2, 1] for "2.1."
    sub_items: list["BookItem"] = Field(default_factory=list)
    path: str | None = None  # None for draft chapters
    source_path: str | None = None
    parent_names: list[str] = Field(default_factory=list)

    def iter_chapters(self) -> Iterator["Chapter"]:
        """This chapter, then its descendants in pre-order."""
        yield self
        for item in self.sub_items:
            if isinstance(item, ChapterItem):
                yield from item.chapter.iter_chapters()


class ChapterItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chapter: Chapter = Field(alias="Chapter")


class PartTitleItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    part_title: str = Field(alias="PartTitle")


BookItem = ChapterItem | PartTitleItem | Literal["Separator"]

Chapter.model_rebuild()


class Book(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    sections: list[BookItem] = Field(default_factory=list)
    non_exhaustive: None = Field(default=None, alias="__non_exhaustive")

    def iter_chapters(self) -> Iterator[Chapter]:
        """Every chapter in reading order (pre-order through sub items)."""
        for item in self.sections:
            if isinstance(item, ChapterItem):
                yield from item.chapter.iter_chapters()

    def find_chapter(self, name: str) -> Chapter | None:
        return next((c for c in self.iter_chapters() if c.name == name), None)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PreprocessorContext(BaseModel):
    """Build context mdBook hands to every preprocessor."""

    model_config = ConfigDict(extra="allow")

    root: Path
    config: dict[str, Any] = Field(default_factory=dict)  # parsed book.toml
    renderer: str = "html"
    mdbook_version: str = ""


_INPUT = TypeAdapter(tuple[PreprocessorContext, Book])


def parse_input(data: str | bytes) -> tuple[PreprocessorContext, Book]:
    """Decode mdBook's `[context, book]` JSON.

    Raises:
        ConfigError: The input is not valid preprocessor JSON.
    """
    try:
        return _INPUT.validate_json(data)
    except ValidationError as e:
        raise ConfigError.parse_error("<stdin>", str(e.errors()[0]["msg"])) from e
