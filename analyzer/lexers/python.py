"""PythonLexer — anchored ordered-pattern scanner for the scripting language."""

from __future__ import annotations

import logging
import re

from .. import constants
from ..models import Symbol, SymbolKind, Token
from ..scanner import PatternScanner, ScanResult, compile_rules
from ..symbol_table import SymbolTable
from ._base import BaseLexer

logger = logging.getLogger(__name__)

# ── token kinds ──────────────────────────────────────────────────

COMMENT = "COMMENT"
STRING = "STRING"
NUMBER = "NUMBER"
KEYWORD = "KEYWORD"
IDENTIFIER = "IDENTIFIER"
OPERATOR = "OPERATOR"
DELIMITER = "DELIMITER"
SEPARATOR = "SEPARATOR"
LINE_CONTINUATION = "LINE_CONTINUATION"

ERROR_COMMENT = "ERROR_COMMENT"
ERROR_UNTERMINATED_STRING = "ERROR_UNTERMINATED_STRING"
ERROR_UNTERMINATED_TRIPLE_STRING = "ERROR_UNTERMINATED_TRIPLE_STRING"
ERROR_NUMBER_MULTI_DOT = "ERROR_NUMBER_MULTI_DOT"
ERROR_BINARY_LITERAL = "ERROR_BINARY_LITERAL"
ERROR_IDENTIFIER = "ERROR_IDENTIFIER"
ERROR_OPERATOR_SEQUENCE = "ERROR_OPERATOR_SEQUENCE"

KEYWORDS: frozenset[str] = frozenset(
    {
        "False", "None", "True", "and", "as", "assert", "async", "await",
        "break", "class", "continue", "def", "del", "elif", "else", "except",
        "finally", "for", "from", "global", "if", "import", "in", "is",
        "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
        "while", "with", "yield",
    }
)

_KEYWORD_ALTERNATION = "|".join(sorted(KEYWORDS, key=len, reverse=True))
_PREFIX = r"(?:[rRbBuUfF]{1,2})?"

_RULES = compile_rules(
    [
        (ERROR_COMMENT, r"/#[^\r\n]*"),
        (COMMENT, r"#[^\r\n]*"),
        (ERROR_UNTERMINATED_TRIPLE_STRING, rf"{_PREFIX}(\"\"\"|''')(?![\s\S]*?\1)[\s\S]*"),
        (STRING, rf"{_PREFIX}(?:\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?''')", "triple"),
        (ERROR_UNTERMINATED_STRING, rf"{_PREFIX}\"(?:[^\"\\\r\n]|\\.)*(?=[\r\n]|\Z)"),
        (ERROR_UNTERMINATED_STRING, rf"{_PREFIX}'(?:[^'\\\r\n]|\\.)*(?=[\r\n]|\Z)"),
        (STRING, rf"{_PREFIX}\"(?:[^\"\\\r\n]|\\.)*\""),
        (STRING, rf"{_PREFIX}'(?:[^'\\\r\n]|\\.)*'"),
        (ERROR_NUMBER_MULTI_DOT, r"\d+(?:\.\d+){2,}"),
        (ERROR_BINARY_LITERAL, r"0[bB](?:[01]*[2-9][0-9]*|(?![01]))"),
        (NUMBER, r"0[xX][0-9a-fA-F]+(?:_[0-9a-fA-F]+)*", "hex"),
        (NUMBER, r"0[bB][01]+(?:_[01]+)*", "binary"),
        (NUMBER, r"0[oO][0-7]+(?:_[0-7]+)*", "octal"),
        (NUMBER, r"(?:\d+\.\d*|\.\d+|\d+)[eE][+-]?\d+[jJ]?(?!\w)", "float"),
        (NUMBER, r"(?:\d+\.\d*|\.\d+|\d+)[jJ](?!\w)", "complex"),
        (ERROR_IDENTIFIER, r"\d+[^\W\d]\w*"),
        (NUMBER, r"\d+\.\d*|\.\d+", "float"),
        (NUMBER, r"\d+(?:_\d+)*", "int"),
        (KEYWORD, rf"(?:{_KEYWORD_ALTERNATION})(?!\w)"),
        (IDENTIFIER, r"[^\W\d]\w*"),
        (ERROR_OPERATOR_SEQUENCE, r"([+\-*/=<>&|^%])\1{2,}"),
        (
            OPERATOR,
            r"\*\*=|//=|>>=|<<=|->|:=|\*\*|//|>>|<<|<=|>=|==|!=|\+=|-=|\*=|/=|%=|&=|\|=|\^=|@=",
        ),
        (OPERATOR, r"[+\-*/%<>=&|^~@]"),
        (DELIMITER, r"\.\.\.|[:,.;]"),
        (SEPARATOR, r"[()\[\]{}]"),
        (LINE_CONTINUATION, r"\\\r?\n"),
        (constants.KIND_NEWLINE, r"\r?\n|\r"),
        (constants.KIND_WHITESPACE, r"[ \t\f]+"),
        (constants.KIND_INVALID, r"[\s\S]"),
    ]
)

_SCANNER = PatternScanner(_RULES, name="python")
_STRING_PREFIX = re.compile(r"([rRbBuUfF]{1,2})[\"']")


def literal_type(token: Token) -> str | None:
    """Python type name of a literal token, or ``None`` for non-literals."""
    if token.kind == STRING:
        prefix = string_prefix(token)
        return "bytes" if "b" in prefix else "str"
    if token.kind == NUMBER:
        if token.subkind == "float":
            return "float"
        if token.subkind == "complex":
            return "complex"
        return "int"
    if token.kind == KEYWORD and token.value in ("True", "False"):
        return "bool"
    if token.kind == KEYWORD and token.value == "None":
        return "NoneType"
    return None


def string_prefix(token: Token) -> str:
    match = _STRING_PREFIX.match(token.value)
    return match.group(1).lower() if match else ""


class PythonLexer(BaseLexer):
    LANGUAGE = constants.LANG_PYTHON
    ERROR_MESSAGES = {
        ERROR_COMMENT: "Malformed comment marker",
        ERROR_UNTERMINATED_STRING: "Unterminated string literal",
        ERROR_UNTERMINATED_TRIPLE_STRING: "Unterminated triple-quoted string",
        ERROR_NUMBER_MULTI_DOT: "Number has more than one decimal point",
        ERROR_BINARY_LITERAL: "Invalid digit in binary literal",
        ERROR_IDENTIFIER: "Identifier cannot start with a digit",
        ERROR_OPERATOR_SEQUENCE: "Invalid operator sequence",
        constants.KIND_INVALID: "Invalid character",
    }
    SUGGESTIONS = {
        ERROR_COMMENT: "Comments start with a single '#'",
        ERROR_UNTERMINATED_STRING: "Close the string with a matching quote",
        ERROR_BINARY_LITERAL: "Binary literals may only contain 0 and 1",
        ERROR_IDENTIFIER: "Start names with a letter or underscore",
    }

    def scan(self, source: str) -> ScanResult:
        result = _SCANNER.scan(source)
        result.tokens = [self._with_prefix(t) for t in result.tokens]
        return result

    @staticmethod
    def _with_prefix(token: Token) -> Token:
        if token.kind != STRING:
            return token
        prefix = string_prefix(token)
        if not prefix:
            return token
        subkind = f"{prefix}-triple" if token.subkind == "triple" else prefix
        return token.model_copy(update={"subkind": subkind})

    def _collect_symbols(self, tokens: list[Token], symbols: SymbolTable) -> None:
        previous: Token | None = None
        for token in tokens:
            if token.kind == IDENTIFIER:
                kind = SymbolKind.UNKNOWN
                if previous is not None and previous.value == "def":
                    kind = SymbolKind.FUNCTION
                elif previous is not None and previous.value == "class":
                    kind = SymbolKind.CLASS
                symbols.declare(
                    token.value,
                    Symbol(
                        name=token.value,
                        kind=kind,
                        declaration_line=token.line,
                        declaration_column=token.column,
                    ),
                )
            elif token.kind in (NUMBER, STRING):
                symbols.declare(
                    token.value,
                    Symbol(
                        name=token.value,
                        kind=SymbolKind.CONSTANT,
                        data_type=literal_type(token) or constants.DEFAULT_DATA_TYPE,
                        declaration_line=token.line,
                        declaration_column=token.column,
                        initialized=True,
                        value=token.value,
                    ),
                )
            previous = token
