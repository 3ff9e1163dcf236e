"""Per-language tokenization policies."""

from .base import BaseTokenizer, TokenizerRegistry
from .haskell import HaskellTokenizer
from .python_ast import PythonTokenizer


def default_registry(test_marker: str = "test") -> TokenizerRegistry:
    """Registry with every supported language."""
    registry = TokenizerRegistry()
    registry.register(PythonTokenizer(test_marker=test_marker))
    registry.register(HaskellTokenizer())
    return registry


__all__ = [
    "BaseTokenizer",
    "TokenizerRegistry",
    "PythonTokenizer",
    "HaskellTokenizer",
    "default_registry",
]
