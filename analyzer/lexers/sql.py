"""SqlLexer — unanchored single-alternation scanner for the query language."""

from __future__ import annotations

import logging
import re

from .. import constants
from ..models import Symbol, SymbolKind, Token
from ..scanner import AlternationScanner, ScanResult
from ..symbol_table import SymbolTable
from ._base import BaseLexer

logger = logging.getLogger(__name__)

# ── token kinds ──────────────────────────────────────────────────

COMMENT = "COMMENT"
KEYWORD = "KEYWORD"
DATA_TYPE = "DATA_TYPE"
FUNCTION = "FUNCTION"
BOOLEAN = "BOOLEAN"
NULL = "NULL"
NUMBER = "NUMBER"
STRING = "STRING"
IDENTIFIER = "IDENTIFIER"
QUOTED_IDENTIFIER = "QUOTED_IDENTIFIER"
OPERATOR = "OPERATOR"
PUNCTUATION = "PUNCTUATION"

ERROR_UNTERMINATED_COMMENT = "ERROR_UNTERMINATED_COMMENT"
ERROR_UNTERMINATED_STRING = "ERROR_UNTERMINATED_STRING"
ERROR_NUMBER = "ERROR_NUMBER"
ERROR_IDENTIFIER = "ERROR_IDENTIFIER"
ERROR_KEYWORD = "ERROR_KEYWORD"

STATEMENT_KEYWORDS: frozenset[str] = frozenset(
    {"SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "DROP", "ALTER", "TRUNCATE"}
)

_KEYWORD_GROUPS: dict[str, tuple[str, ...]] = {
    "dml": ("SELECT", "INSERT", "UPDATE", "DELETE", "MERGE"),
    "ddl": (
        "CREATE", "DROP", "ALTER", "TRUNCATE", "TABLE", "INDEX", "VIEW",
        "DATABASE", "SCHEMA", "ADD", "COLUMN", "IF",
    ),
    "clause": (
        "FROM", "WHERE", "INTO", "VALUES", "SET", "JOIN", "INNER", "LEFT",
        "RIGHT", "OUTER", "FULL", "CROSS", "ON", "GROUP", "ORDER", "BY",
        "HAVING", "LIMIT", "OFFSET", "UNION", "ALL", "DISTINCT", "AS", "ASC",
        "DESC", "CASE", "WHEN", "THEN", "ELSE", "END", "EXISTS",
    ),
    "constraint": (
        "PRIMARY", "KEY", "FOREIGN", "REFERENCES", "UNIQUE", "DEFAULT",
        "CHECK", "CONSTRAINT", "AUTO_INCREMENT", "AUTOINCREMENT", "CASCADE",
    ),
    "logical": ("AND", "OR", "NOT", "IN", "IS", "LIKE", "BETWEEN"),
}

TYPE_FAMILIES: dict[str, tuple[str, ...]] = {
    "integer": ("INT", "INTEGER", "SMALLINT", "BIGINT", "TINYINT", "SERIAL"),
    "numeric": ("DECIMAL", "NUMERIC", "FLOAT", "REAL", "DOUBLE"),
    "text": ("VARCHAR", "CHAR", "TEXT", "NVARCHAR", "NCHAR", "CLOB"),
    "date": ("DATE", "TIME", "DATETIME", "TIMESTAMP"),
    "bool": ("BOOLEAN", "BOOL"),
    "binary": ("BLOB", "BINARY", "VARBINARY"),
}

MISSPELLED_KEYWORDS: dict[str, str] = {
    "SELEC": "SELECT",
    "SLECT": "SELECT",
    "SELCT": "SELECT",
    "FRON": "FROM",
    "FROMM": "FROM",
    "WHER": "WHERE",
    "WHRE": "WHERE",
    "INSRT": "INSERT",
    "INSER": "INSERT",
    "UPDAT": "UPDATE",
    "DELET": "DELETE",
    "CREAT": "CREATE",
    "CRATE": "CREATE",
    "TABEL": "TABLE",
    "VALUS": "VALUES",
}


def _words(words) -> str:
    return r"\b(?:" + "|".join(words) + r")\b"


_TABLE: list[tuple[str, str, str | None]] = [
    (ERROR_UNTERMINATED_COMMENT, r"/\*(?![\s\S]*?\*/)[\s\S]*", None),
    (COMMENT, r"--[^\n]*|/\*[\s\S]*?\*/", None),
    (ERROR_UNTERMINATED_STRING, r"'(?:[^'\n]|'')*(?=\n|\Z)", None),
    (STRING, r"'(?:[^']|'')*'", None),
    (QUOTED_IDENTIFIER, r"`[^`\n]*`|\[[^\]\n]*\]|\"[^\"\n]*\"", None),
    (ERROR_NUMBER, r"\d+(?:\.\d+){2,}", None),
    (ERROR_IDENTIFIER, r"\d+[A-Za-z_]\w*", None),
    (ERROR_KEYWORD, _words(MISSPELLED_KEYWORDS), None),
    *[(KEYWORD, _words(words), group) for group, words in _KEYWORD_GROUPS.items()],
    *[(DATA_TYPE, _words(words), family) for family, words in TYPE_FAMILIES.items()],
    (FUNCTION, _words(("COUNT", "SUM", "AVG", "MIN", "MAX", "COALESCE", "NOW")), None),
    (BOOLEAN, _words(("TRUE", "FALSE")), None),
    (NULL, _words(("NULL",)), None),
    (NUMBER, r"\d+\.\d+", "decimal"),
    (NUMBER, r"\d+", "integer"),
    (IDENTIFIER, r"[A-Za-z_]\w*", None),
    (OPERATOR, r"<>|!=|<=|>=|\|\||[=<>+\-*/%]", None),
    (PUNCTUATION, r"[(),;.]", None),
    (constants.KIND_NEWLINE, r"\n", None),
    (constants.KIND_WHITESPACE, r"[^\S\n]+", None),
    (constants.KIND_INVALID, r"[\s\S]", None),
]

_SCANNER = AlternationScanner(_TABLE, re.IGNORECASE, name="sql")


def normalize(token: Token) -> str:
    """Upper-cased keyword text or lower-cased identifier key of *token*."""
    if token.kind == QUOTED_IDENTIFIER:
        return token.value[1:-1].lower()
    if token.kind == IDENTIFIER:
        return token.value.lower()
    return token.value.upper()


class SqlLexer(BaseLexer):
    LANGUAGE = constants.LANG_SQL
    ERROR_MESSAGES = {
        ERROR_UNTERMINATED_COMMENT: "Unterminated block comment",
        ERROR_UNTERMINATED_STRING: "Unterminated string literal",
        ERROR_NUMBER: "Malformed number",
        ERROR_IDENTIFIER: "Identifier cannot start with a digit",
        ERROR_KEYWORD: "Misspelled keyword",
        constants.KIND_INVALID: "Invalid character",
    }
    SUGGESTIONS = {
        ERROR_UNTERMINATED_COMMENT: "Close the comment with '*/'",
        ERROR_UNTERMINATED_STRING: "Close the string with a single quote",
    }

    def scan(self, source: str) -> ScanResult:
        return _SCANNER.scan(source)

    def _diagnostic_for(self, token: Token):
        diagnostic = super()._diagnostic_for(token)
        if token.kind == ERROR_KEYWORD:
            intended = MISSPELLED_KEYWORDS.get(token.value.upper(), "")
            diagnostic = diagnostic.model_copy(
                update={"suggestion": f"Did you mean {intended}?"}
            )
        return diagnostic

    def _collect_symbols(self, tokens: list[Token], symbols: SymbolTable) -> None:
        for token in tokens:
            if token.kind in (IDENTIFIER, QUOTED_IDENTIFIER):
                key = normalize(token)
                symbols.declare(
                    key,
                    Symbol(
                        name=key,
                        kind=SymbolKind.UNKNOWN,
                        declaration_line=token.line,
                        declaration_column=token.column,
                    ),
                )
            elif token.kind in (STRING, NUMBER):
                symbols.declare(
                    token.value,
                    Symbol(
                        name=token.value,
                        kind=SymbolKind.CONSTANT,
                        data_type="text" if token.kind == STRING else token.subkind or "integer",
                        declaration_line=token.line,
                        declaration_column=token.column,
                        initialized=True,
                        value=token.value,
                    ),
                )
