"""Shared fixtures: deterministic fake block parsers.

The fakes split text into blocks at blank lines, which is all the merge
engine needs to exercise every strategy without depending on the details
of the real Markdown grammar.
"""

import re
from dataclasses import dataclass

import pytest

from rivulet.blocks import PositionedBlock
from rivulet.errors import ParseFailure

_BLOCK = re.compile(r"^[ \t]*\S[^\n]*(?:\n[ \t]*\S[^\n]*)*", re.MULTILINE)


@dataclass(frozen=True, eq=False)
class Chunk:
    """Opaque block produced by the fake parsers (compared by identity)."""

    text: str


class ParagraphParser:
    """BlockParser that treats every run of non-blank lines as one block."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.bases: list[int] = []

    def parse(self, span: str, base: int = 0) -> tuple[PositionedBlock, ...]:
        self.calls.append(span)
        self.bases.append(base)
        return tuple(
            PositionedBlock(Chunk(match.group(0)), match.start())
            for match in _BLOCK.finditer(span)
        )


class FlakyParser(ParagraphParser):
    """ParagraphParser that rejects any span containing ``!!``."""

    def parse(self, span: str, base: int = 0) -> tuple[PositionedBlock, ...]:
        if "!!" in span:
            self.calls.append(span)
            self.bases.append(base)
            raise ParseFailure("unbalanced marker", len(span))
        return super().parse(span, base)


@pytest.fixture
def parser() -> ParagraphParser:
    return ParagraphParser()


@pytest.fixture
def flaky_parser() -> FlakyParser:
    return FlakyParser()
