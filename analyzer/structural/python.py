"""Bracket balance, block-header and indentation checks for Python.

The checks are flow-insensitive heuristics over logical lines (physical
lines joined while brackets are open or after a backslash); they
approximate, not parse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .. import constants
from ..lexers import python as lex
from ..models import AnalysisError, Token, syntax_error
from ._base import StructuralAnalyzer

logger = logging.getLogger(__name__)

OPENING_BRACKETS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}
CLOSING_BRACKETS: dict[str, str] = {v: k for k, v in OPENING_BRACKETS.items()}

CONTROL_KEYWORDS: frozenset[str] = frozenset(
    {"if", "elif", "else", "for", "while", "try", "except", "finally", "with", "def", "class"}
)
CLAUSE_KEYWORDS: frozenset[str] = frozenset({"else", "elif", "except", "finally"})
UNARY_OPERATORS: frozenset[str] = frozenset({"-", "+", "~"})


@dataclass
class LogicalLine:
    tokens: list[Token] = field(default_factory=list)

    @property
    def first(self) -> Token:
        return self.tokens[0]

    @property
    def indent(self) -> int:
        return self.first.column - 1

    @property
    def keyword(self) -> str:
        """Leading statement keyword, looking through ``async``."""
        toks = self.tokens
        if toks[0].kind != lex.KEYWORD:
            return ""
        if toks[0].value == "async" and len(toks) > 1:
            return toks[1].value
        return toks[0].value

    def opens_block(self) -> bool:
        last = self.tokens[-1]
        return last.kind == lex.DELIMITER and last.value == ":"

    def has_top_level_colon(self) -> bool:
        depth = 0
        for tok in self.tokens:
            if tok.kind == lex.SEPARATOR:
                depth += 1 if tok.value in OPENING_BRACKETS else -1
            elif depth <= 0 and tok.kind == lex.DELIMITER and tok.value == ":":
                return True
        return False


def logical_lines(tokens: list[Token]) -> list[LogicalLine]:
    """Group tokens by physical line, joining bracketed and backslash-continued lines."""
    lines: list[LogicalLine] = []
    depth = 0
    current_line = -1
    continued = False
    for tok in tokens:
        if tok.kind == lex.COMMENT:
            continue
        if tok.kind == lex.LINE_CONTINUATION:
            continued = True
            continue
        if tok.line != current_line:
            current_line = tok.line
            if (depth <= 0 and not continued) or not lines:
                lines.append(LogicalLine())
            continued = False
        lines[-1].tokens.append(tok)
        if tok.kind == lex.SEPARATOR:
            depth += 1 if tok.value in OPENING_BRACKETS else -1
            depth = max(depth, 0)
    return lines


class PythonStructuralAnalyzer(StructuralAnalyzer):
    LANGUAGE = "python"

    def __init__(self, indent_width: int = constants.INDENT_WIDTH):
        self.indent_width = indent_width

    def analyze(self, tokens: list[Token], language: str) -> list[AnalysisError]:
        errors = self._check_brackets(tokens)
        lines = logical_lines(tokens)
        for line in lines:
            errors.extend(self._check_header(line))
            errors.extend(self._check_operators(line))
        errors.extend(self._check_indentation(lines))
        errors.sort(key=lambda e: (e.line, e.column))
        logger.debug("python structure: %d diagnostics", len(errors))
        return errors

    # ── brackets ─────────────────────────────────────────────────

    @staticmethod
    def _check_brackets(tokens: list[Token]) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        stack: list[Token] = []
        for tok in tokens:
            if tok.kind != lex.SEPARATOR:
                continue
            if tok.value in OPENING_BRACKETS:
                stack.append(tok)
                continue
            if not stack:
                errors.append(
                    syntax_error(
                        f"Closing '{tok.value}' has no matching opening bracket",
                        tok.line,
                        tok.column,
                    )
                )
                continue
            opened = stack.pop()
            if opened.value != CLOSING_BRACKETS[tok.value]:
                errors.append(
                    syntax_error(
                        f"Mismatched brackets: '{opened.value}' opened at"
                        f" {opened.line}:{opened.column} closed by '{tok.value}'",
                        tok.line,
                        tok.column,
                    )
                )
        for opened in stack:
            errors.append(
                syntax_error(f"Unclosed '{opened.value}'", opened.line, opened.column)
            )
        return errors

    # ── statement headers ────────────────────────────────────────

    @staticmethod
    def _check_header(line: LogicalLine) -> list[AnalysisError]:
        keyword = line.keyword
        if keyword not in CONTROL_KEYWORDS:
            return []
        errors: list[AnalysisError] = []
        head = line.first
        if not line.has_top_level_colon():
            errors.append(
                syntax_error(
                    f"Missing ':' after '{keyword}' statement", head.line, head.column
                )
            )
        toks = line.tokens[1:] if line.first.value != "async" else line.tokens[2:]
        if keyword in ("def", "class"):
            if not toks or toks[0].kind != lex.IDENTIFIER:
                errors.append(
                    syntax_error(
                        f"Expected a name after '{keyword}'", head.line, head.column
                    )
                )
            if keyword == "def" and not any(
                t.kind == lex.SEPARATOR and t.value == "(" for t in toks
            ):
                errors.append(
                    syntax_error(
                        "Expected '(' after function name", head.line, head.column
                    )
                )
        if keyword == "for" and not any(
            t.kind == lex.KEYWORD and t.value == "in" for t in toks
        ):
            errors.append(
                syntax_error("'for' loop is missing 'in'", head.line, head.column)
            )
        return errors

    @staticmethod
    def _check_operators(line: LogicalLine) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        for prev, tok in zip(line.tokens, line.tokens[1:]):
            if (
                prev.kind == lex.OPERATOR
                and tok.kind == lex.OPERATOR
                and prev.line == tok.line
                and tok.value not in UNARY_OPERATORS
            ):
                errors.append(
                    syntax_error(
                        f"Consecutive operators '{prev.value}' '{tok.value}'",
                        tok.line,
                        tok.column,
                    )
                )
        return errors

    # ── indentation ──────────────────────────────────────────────

    def _check_indentation(self, lines: list[LogicalLine]) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        width = self.indent_width
        openers: list[tuple[int, str]] = []
        previous: LogicalLine | None = None

        for line in lines:
            indent = line.indent
            head = line.first
            if indent % width != 0:
                errors.append(
                    syntax_error(
                        f"Indentation of {indent} spaces is not a multiple of {width}",
                        head.line,
                        1,
                    )
                )

            if previous is not None:
                prev_indent = previous.indent
                if previous.opens_block():
                    if indent <= prev_indent:
                        errors.append(
                            syntax_error(
                                f"Expected an indented block after line {previous.first.line}",
                                head.line,
                                1,
                            )
                        )
                    elif indent != prev_indent + width:
                        errors.append(
                            syntax_error(
                                f"Expected indentation of {prev_indent + width} spaces,"
                                f" found {indent}",
                                head.line,
                                1,
                            )
                        )
                elif indent > prev_indent:
                    errors.append(syntax_error("Unexpected indent", head.line, 1))

            keyword = line.keyword
            if keyword in CLAUSE_KEYWORDS:
                while openers and openers[-1][0] > indent:
                    openers.pop()
                if not openers or openers[-1][0] != indent:
                    errors.append(
                        syntax_error(
                            f"'{keyword}' is not aligned with a matching block"
                            f" (indent {indent})",
                            head.line,
                            head.column,
                        )
                    )
                else:
                    openers.pop()
            else:
                while openers and openers[-1][0] >= indent:
                    openers.pop()
            if line.opens_block() or (
                keyword in CONTROL_KEYWORDS and line.has_top_level_colon()
            ):
                openers.append((indent, keyword))
            previous = line
        return errors
