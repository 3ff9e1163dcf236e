"""Lexical tokenization of Haskell sources through Pygments."""

from __future__ import annotations

import bisect
import logging
from typing import Iterable, Iterator

from pygments.lexers.haskell import HaskellLexer
from pygments.token import Comment, Error, Keyword, Literal, Name, Punctuation, Text, _TokenType

from clone_check.core.errors import ParseFailure
from clone_check.models.tokens import Mode, SourceUnit, Span, Token, bracket
from clone_check.tokenizers.base import BaseTokenizer
from clone_check.utils.ids import random_name

logger = logging.getLogger(__name__)

_FORMATTING_PUNCTUATION = frozenset({"{", "}", "(", ")", ";"})
_BLOCK_NAME = "<block>"

RawToken = tuple[int, _TokenType, str]


class HaskellTokenizer(BaseTokenizer):
    """Split a file into blank-line delimited blocks of anonymized tokens."""

    suffixes = (".hs",)
    language = "haskell"

    def __init__(self) -> None:
        self._lexer = HaskellLexer(stripnl=False, ensurenl=False)

    def tokenize(
        self,
        source_text: str,
        filename: str,
        mode: Mode,
        owner_id: int,
        denizen_id: int,
    ) -> list[SourceUnit]:
        raw = list(self._lexer.get_tokens_unprocessed(source_text))
        if not raw:
            raise ParseFailure(filename, "empty token stream")
        for offset, ttype, value in raw:
            if ttype in Error:
                raise ParseFailure(filename, f"unexpected token {value!r} at offset {offset}")

        locator = _Locator(source_text)
        units: list[SourceUnit] = []
        for chunk in split_blocks(raw):
            tokens = [
                _make_token(offset, ttype, value, locator, filename, mode, owner_id, denizen_id)
                for offset, ttype, value in chunk
                if not is_formatting(ttype, value)
            ]
            bracketed = bracket(tokens)
            if bracketed:
                units.append(SourceUnit(tokens=bracketed, file=filename, function_name=_block_name(chunk)))
        logger.debug("Tokenized %s into %d blocks", filename, len(units))
        return units


def is_whitespace(ttype: _TokenType, value: str) -> bool:
    return ttype in Text and (value == "" or value.isspace())


def is_formatting(ttype: _TokenType, value: str) -> bool:
    if is_whitespace(ttype, value):
        return True
    return ttype in Punctuation and value in _FORMATTING_PUNCTUATION


def split_blocks(raw: Iterable[RawToken]) -> Iterator[list[RawToken]]:
    """Split a token stream wherever a whitespace run spans a blank line."""
    chunk: list[RawToken] = []
    newlines = 0
    for item in raw:
        _, ttype, value = item
        if is_whitespace(ttype, value):
            newlines += value.count("\n")
            chunk.append(item)
            continue
        if newlines >= 2 and chunk:
            yield chunk
            chunk = []
        newlines = 0
        chunk.append(item)
    if chunk:
        yield chunk


def _block_name(chunk: list[RawToken]) -> str:
    for _, ttype, value in chunk:
        if ttype in Name.Function:
            return value
    return _BLOCK_NAME


def _anonymized(ttype: _TokenType) -> bool:
    return ttype in Name or ttype in Literal or ttype in Comment or ttype in Keyword.Type


def _make_token(
    offset: int,
    ttype: _TokenType,
    value: str,
    locator: "_Locator",
    filename: str,
    mode: Mode,
    owner_id: int,
    denizen_id: int,
) -> Token:
    from_line, from_col = locator.locate(offset)
    to_line, to_col = locator.locate(offset + len(value))
    symbol = str(ttype)
    if _anonymized(ttype):
        compare_text, display_text = "", random_name()
    else:
        compare_text = display_text = value
    return Token(
        symbol=symbol,
        compare_text=compare_text,
        mode=mode,
        owner_id=owner_id,
        denizen_id=denizen_id,
        span=Span(file=filename, from_line=from_line, from_col=from_col, to_line=to_line, to_col=to_col),
        display_text=display_text,
    )


class _Locator:
    """Map character offsets to 1-based line and 0-based column."""

    def __init__(self, text: str) -> None:
        self._starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._starts.append(index + 1)

    def locate(self, offset: int) -> tuple[int, int]:
        line = bisect.bisect_right(self._starts, offset)
        return line, offset - self._starts[line - 1]


__all__ = ["HaskellTokenizer", "split_blocks", "is_formatting", "is_whitespace"]
