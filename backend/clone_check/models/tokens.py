"""Token-level data structures shared by tokenizers, the index and reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Sequence

BEGIN = "$BEGIN$"
END = "$END$"
NO_DENIZEN = -1


class Mode(str, enum.Enum):
    """Whether an indexed entity is the course baseline or a student submission."""

    COURSE = "course"
    SUBMISSION = "submission"


@dataclass(frozen=True, slots=True)
class Span:
    file: str
    from_line: int
    from_col: int
    to_line: int
    to_col: int


@dataclass(frozen=True, slots=True)
class Token:
    """One anonymized token.

    Only ``symbol`` and ``compare_text`` take part in equality, so two
    occurrences of the same code shape compare equal regardless of who owns
    them, where they live, or which random display name they were given.
    """

    symbol: str
    compare_text: str
    mode: Mode = field(compare=False)
    owner_id: int = field(compare=False)
    denizen_id: int = field(compare=False)
    span: Span = field(compare=False)
    display_text: str = field(compare=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.symbol, self.compare_text)

    def as_sentinel(self, marker: str) -> "Token":
        return replace(self, compare_text=marker, display_text=marker)

    def __str__(self) -> str:
        return f"{self.symbol}:{self.display_text}"


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """An indexable chunk of tokens bracketed by BEGIN/END sentinels."""

    tokens: tuple[Token, ...]
    file: str
    function_name: str

    def __len__(self) -> int:
        return len(self.tokens)


def bracket(tokens: Sequence[Token]) -> tuple[Token, ...]:
    """Wrap a token run with sentinels built from its first and last token."""
    if not tokens:
        return ()
    return (tokens[0].as_sentinel(BEGIN), *tokens, tokens[-1].as_sentinel(END))


__all__ = ["BEGIN", "END", "NO_DENIZEN", "Mode", "Span", "Token", "SourceUnit", "bracket"]
