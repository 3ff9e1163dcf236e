"""Tokenizer interface and registry."""

from __future__ import annotations

from pathlib import PurePosixPath

from clone_check.models.tokens import Mode, SourceUnit


class BaseTokenizer:
    """Common tokenizer interface, one implementation per language."""

    suffixes: tuple[str, ...] = ()
    language: str = "unknown"

    def can_tokenize(self, filename: str) -> bool:
        return PurePosixPath(filename).suffix.lower() in self.suffixes

    def tokenize(
        self,
        source_text: str,
        filename: str,
        mode: Mode,
        owner_id: int,
        denizen_id: int,
    ) -> list[SourceUnit]:  # pragma: no cover - interface
        raise NotImplementedError


class TokenizerRegistry:
    """Registry that selects a tokenizer by file extension."""

    def __init__(self, tokenizers: list[BaseTokenizer] | None = None) -> None:
        self._tokenizers: list[BaseTokenizer] = list(tokenizers or [])

    def register(self, tokenizer: BaseTokenizer) -> None:
        self._tokenizers.append(tokenizer)

    def for_path(self, filename: str) -> BaseTokenizer | None:
        for tokenizer in self._tokenizers:
            if tokenizer.can_tokenize(filename):
                return tokenizer
        return None

    def supports(self, filename: str) -> bool:
        return self.for_path(filename) is not None

    def tokenize(
        self,
        source_text: str,
        filename: str,
        mode: Mode,
        owner_id: int,
        denizen_id: int,
    ) -> list[SourceUnit]:
        tokenizer = self.for_path(filename)
        if tokenizer is None:
            raise ValueError(f"No tokenizer registered for {filename}")
        return tokenizer.tokenize(source_text, filename, mode, owner_id, denizen_id)


__all__ = ["BaseTokenizer", "TokenizerRegistry"]
