"""Descriptive execution trace — renders what a token stream *would* do.

Nothing is executed; each language maps a handful of notable tokens to one
human-readable line, bracketed by a header and a closing line.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from . import constants
from .lexers import html as html_lex
from .lexers import python as python_lex
from .lexers import sql as sql_lex
from .models import Symbol, SymbolKind, Token

logger = logging.getLogger(__name__)

_HEADERS: dict[str, tuple[str, str]] = {
    constants.LANG_HTML: ("=== HTML rendering trace ===", "HTML page rendered"),
    constants.LANG_PYTHON: ("=== Python execution trace ===", "Python script finished"),
    constants.LANG_SQL: ("=== SQL execution trace ===", "SQL commands executed"),
}

_SQL_ACTIONS: dict[str, str] = {
    "SELECT": "Running SELECT query",
    "INSERT": "Inserting rows",
    "UPDATE": "Updating rows",
    "DELETE": "Deleting rows",
    "DROP": "Dropping object",
    "ALTER": "Altering object",
    "TRUNCATE": "Truncating table",
}


def simulate(
    tokens: list[Token], language: str, symbols: Mapping[str, Symbol] | None = None
) -> list[str]:
    """Return the trace lines for *tokens*; empty for unsupported languages."""
    symbols = symbols or {}
    bounds = _HEADERS.get(language)
    if bounds is None:
        return []
    header, footer = bounds
    if language == constants.LANG_HTML:
        body = _html_lines(tokens)
    elif language == constants.LANG_PYTHON:
        body = _python_lines(tokens, symbols)
    else:
        body = _sql_lines(tokens, symbols)
    logger.debug("Trace for %s: %d lines", language, len(body))
    return [header, *body, footer]


def _html_lines(tokens: list[Token]) -> list[str]:
    return [
        f"Rendering element <{html_lex.tag_name(tok)}>"
        for tok in tokens
        if tok.kind in html_lex.OPENING_TAG_KINDS or tok.kind in html_lex.STANDALONE_TAG_KINDS
    ]


def _python_lines(tokens: list[Token], symbols: Mapping[str, Symbol]) -> list[str]:
    lines: list[str] = []
    for index, tok in enumerate(tokens):
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if tok.kind == python_lex.KEYWORD and tok.value in ("def", "class"):
            if following is None or following.kind != python_lex.IDENTIFIER:
                continue
            if tok.value == "class":
                lines.append(f"Defining class: {following.value}")
                continue
            name = following.value
            params = [
                s.name
                for s in symbols.values()
                if s.kind == SymbolKind.PARAMETER
                and (s.scope == name or s.scope.endswith(f".{name}"))
            ]
            lines.append(f"Defining function: {name}({', '.join(params)})")
        elif (
            tok.kind == python_lex.IDENTIFIER
            and tok.value == "print"
            and following is not None
            and following.value == "("
        ):
            lines.append(f"Calling print() at line {tok.line}")
    return lines


def _sql_lines(tokens: list[Token], symbols: Mapping[str, Symbol]) -> list[str]:
    lines: list[str] = []
    for index, tok in enumerate(tokens):
        if tok.kind != sql_lex.KEYWORD:
            continue
        keyword = tok.value.upper()
        if keyword == "CREATE":
            rest = tokens[index + 1 : index + 3]
            if len(rest) == 2 and rest[0].value.upper() == "TABLE":
                name = sql_lex.normalize(rest[1])
                columns = sum(
                    1
                    for s in symbols.values()
                    if s.kind == SymbolKind.COLUMN and s.scope == name
                )
                lines.append(f"Creating table: {name} ({columns} columns)")
            elif rest:
                lines.append(f"Creating {rest[0].value.lower()}")
        elif keyword in _SQL_ACTIONS:
            lines.append(f"{_SQL_ACTIONS[keyword]} (line {tok.line})")
    return lines
