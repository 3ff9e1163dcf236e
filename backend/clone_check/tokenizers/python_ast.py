"""Structured tokenization of Python sources through the ``ast`` module."""

from __future__ import annotations

import ast
import logging
from typing import Iterator

from clone_check.core.errors import ParseFailure
from clone_check.models.tokens import Mode, SourceUnit, Span, Token, bracket
from clone_check.tokenizers.base import BaseTokenizer
from clone_check.utils.ids import random_name

logger = logging.getLogger(__name__)

# Nodes whose payload is a user-chosen identifier or a literal value.
_ANONYMIZED = (
    ast.Name,
    ast.arg,
    ast.Constant,
    ast.Attribute,
    ast.keyword,
    ast.alias,
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.Global,
    ast.Nonlocal,
)

_FUNCTIONS = (ast.FunctionDef, ast.AsyncFunctionDef)


def default_filter(node: ast.AST) -> bool:
    """Keep nodes that carry structure; drop load/store/del markers."""
    return not isinstance(node, ast.expr_context)


class PythonTokenizer(BaseTokenizer):
    """Emit one unit per named function, skipping functions marked as tests."""

    suffixes = (".py",)
    language = "python"

    def __init__(self, test_marker: str = "test") -> None:
        self.test_marker = test_marker

    def tokenize(
        self,
        source_text: str,
        filename: str,
        mode: Mode,
        owner_id: int,
        denizen_id: int,
    ) -> list[SourceUnit]:
        try:
            tree = ast.parse(source_text, filename=filename)
        except (SyntaxError, ValueError) as exc:
            raise ParseFailure(filename, str(exc)) from exc
        except (RecursionError, MemoryError) as exc:
            raise ParseFailure(filename, f"source nests too deeply ({type(exc).__name__})") from exc

        units: list[SourceUnit] = []
        for function in _collect_functions(tree):
            if self._is_test(function):
                continue
            fallback = _span_of(function, filename, None)
            tokens = [
                _make_token(node, span, mode, owner_id, denizen_id)
                for node, span in _walk(function, filename, fallback)
                if default_filter(node)
            ]
            bracketed = bracket(tokens)
            if bracketed:
                units.append(SourceUnit(tokens=bracketed, file=filename, function_name=function.name))
        logger.debug("Tokenized %s into %d units", filename, len(units))
        return units

    def _is_test(self, function: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
        return any(_decorator_name(dec) == self.test_marker for dec in function.decorator_list)


def _collect_functions(tree: ast.AST) -> list[ast.FunctionDef | ast.AsyncFunctionDef]:
    functions = [node for node in ast.walk(tree) if isinstance(node, _FUNCTIONS)]
    functions.sort(key=lambda node: (node.lineno, node.col_offset))
    return functions


def _decorator_name(decorator: ast.expr) -> str | None:
    if isinstance(decorator, ast.Call):
        decorator = decorator.func
    if isinstance(decorator, ast.Attribute):
        return decorator.attr
    if isinstance(decorator, ast.Name):
        return decorator.id
    return None


def _is_docstring(parent: ast.AST, child: ast.AST) -> bool:
    body = getattr(parent, "body", None)
    if not isinstance(parent, (*_FUNCTIONS, ast.ClassDef)) or not body or body[0] is not child:
        return False
    return (
        isinstance(child, ast.Expr)
        and isinstance(child.value, ast.Constant)
        and isinstance(child.value.value, str)
    )


def _walk(root: ast.AST, filename: str, inherited: Span) -> Iterator[tuple[ast.AST, Span]]:
    """Pre-order DFS yielding each node with its (possibly inherited) span.

    Uses an explicit stack: deeply nested expressions parse fine but would
    overflow a recursive walk.
    """
    stack = [(root, inherited)]
    while stack:
        node, parent_span = stack.pop()
        span = _span_of(node, filename, parent_span)
        yield node, span
        children = [child for child in ast.iter_child_nodes(node) if not _is_docstring(node, child)]
        stack.extend((child, span) for child in reversed(children))


def _span_of(node: ast.AST, filename: str, inherited: Span | None) -> Span:
    lineno = getattr(node, "lineno", None)
    if lineno is None:
        if inherited is None:
            return Span(file=filename, from_line=1, from_col=0, to_line=1, to_col=0)
        return inherited
    col = getattr(node, "col_offset", 0) or 0
    return Span(
        file=filename,
        from_line=lineno,
        from_col=col,
        to_line=getattr(node, "end_lineno", None) or lineno,
        to_col=getattr(node, "end_col_offset", None) or col,
    )


def _make_token(node: ast.AST, span: Span, mode: Mode, owner_id: int, denizen_id: int) -> Token:
    symbol = type(node).__name__
    if isinstance(node, _ANONYMIZED):
        compare_text, display_text = "", random_name()
    else:
        compare_text = display_text = symbol
    return Token(
        symbol=symbol,
        compare_text=compare_text,
        mode=mode,
        owner_id=owner_id,
        denizen_id=denizen_id,
        span=span,
        display_text=display_text,
    )


__all__ = ["PythonTokenizer", "default_filter"]
