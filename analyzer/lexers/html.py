"""HtmlLexer — case-insensitive ordered-pattern scanner for markup."""

from __future__ import annotations

import logging
import re

from .. import constants
from ..models import Symbol, SymbolKind, Token
from ..scanner import PatternScanner, ScanResult, advance_position, compile_rules
from ..symbol_table import SymbolTable
from ._base import BaseLexer

logger = logging.getLogger(__name__)

# ── token kinds ──────────────────────────────────────────────────

COMMENT = "COMMENT"
DOCTYPE = "DOCTYPE"
CDATA = "CDATA"
PROCESSING_INSTRUCTION = "PROCESSING_INSTRUCTION"
VOID_TAG = "VOID_TAG"
TAG_SELF_CLOSING = "TAG_SELF_CLOSING"
RESERVED_TAG_OPEN = "RESERVED_TAG_OPEN"
RESERVED_TAG_CLOSE = "RESERVED_TAG_CLOSE"
TAG_OPEN = "TAG_OPEN"
TAG_CLOSE = "TAG_CLOSE"
TAG_END = "TAG_END"
ATTRIBUTE = "ATTRIBUTE"
ENTITY = "ENTITY"
TEXT = "TEXT"
SYMBOL = "SYMBOL"

ERROR_COMMENT = "ERROR_COMMENT"
ERROR_DOCTYPE = "ERROR_DOCTYPE"
ERROR_UNCLOSED_TAG = "ERROR_UNCLOSED_TAG"
ERROR_ENTITY = "ERROR_ENTITY"
ERROR_ATTRIBUTE_UNTERMINATED = "ERROR_ATTRIBUTE_UNTERMINATED"
ERROR_ATTRIBUTE_UNQUOTED = "ERROR_ATTRIBUTE_UNQUOTED"
ERROR_ATTRIBUTE_MISSING_VALUE = "ERROR_ATTRIBUTE_MISSING_VALUE"

OPENING_TAG_KINDS: frozenset[str] = frozenset({RESERVED_TAG_OPEN, TAG_OPEN})
CLOSING_TAG_KINDS: frozenset[str] = frozenset({RESERVED_TAG_CLOSE, TAG_CLOSE})
STANDALONE_TAG_KINDS: frozenset[str] = frozenset({VOID_TAG, TAG_SELF_CLOSING})
TAG_KINDS: frozenset[str] = OPENING_TAG_KINDS | CLOSING_TAG_KINDS | STANDALONE_TAG_KINDS

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

RESERVED_TAGS: tuple[str, ...] = (
    "html", "head", "body", "title", "div", "span", "p", "a", "ul", "ol",
    "li", "table", "tr", "td", "th", "script", "style", "header", "footer",
    "nav", "section", "article", "aside", "main",
)

_NAME_END = r"(?![\w:-])"
_VOID = "|".join(sorted(VOID_ELEMENTS))
_RESERVED = "|".join(RESERVED_TAGS)
_QUOTED = r"(?:\"[^\"]*\"|'[^']*')"

_RULES = compile_rules(
    [
        (ERROR_COMMENT, r"<!--(?![\s\S]*?-->)[\s\S]*"),
        (COMMENT, r"<!--[\s\S]*?-->"),
        (ERROR_DOCTYPE, r"<!DOCTYPE\s*>|<!(?!DOCTYPE\b|--|\[CDATA\[)[^<>]*>"),
        (DOCTYPE, r"<!DOCTYPE\s+[^<>]+>"),
        (CDATA, r"<!\[CDATA\[[\s\S]*?\]\]>"),
        (PROCESSING_INSTRUCTION, r"<\?[\s\S]*?\?>"),
        (ERROR_UNCLOSED_TAG, r"</?[A-Za-z][\w:-]*[^<>]*(?=<|\Z)"),
        (VOID_TAG, rf"<(?:{_VOID}){_NAME_END}[^<>]*>"),
        (TAG_SELF_CLOSING, r"<[A-Za-z][\w:-]*[^<>]*/>"),
        (RESERVED_TAG_CLOSE, rf"</\s*(?:{_RESERVED}){_NAME_END}\s*>"),
        (RESERVED_TAG_OPEN, rf"<(?:{_RESERVED}){_NAME_END}[^<>]*>"),
        (TAG_CLOSE, r"</\s*[A-Za-z][\w:-]*\s*>"),
        (TAG_OPEN, r"<[A-Za-z][\w:-]*[^<>]*>"),
        (ERROR_ENTITY, r"&#?[A-Za-z0-9]*(?![A-Za-z0-9;#])"),
        (ENTITY, r"&#[xX][0-9a-fA-F]+;", "hex"),
        (ENTITY, r"&#[0-9]+;", "numeric"),
        (ENTITY, r"&[A-Za-z][A-Za-z0-9]*;", "named"),
        (constants.KIND_NEWLINE, r"\n"),
        (constants.KIND_WHITESPACE, r"[^\S\n]+"),
        (TEXT, r"[^<>&\s\x00-\x08\x0e-\x1f\x7f]+(?:[^\S\n]+[^<>&\s\x00-\x08\x0e-\x1f\x7f]+)*"),
        (SYMBOL, r"[<>]"),
        (constants.KIND_INVALID, r"[\s\S]"),
    ],
    re.IGNORECASE,
)

# Attribute region of a single tag, scanned with its own ordered table.
_URL_ATTRS = "href|src|action|cite|poster|formaction|background"
_NUMERIC_ATTRS = (
    "width|height|size|maxlength|minlength|colspan|rowspan|cols|rows|span|min|max|step"
)
_ENUM_ATTRS = "target|rel|type|method|dir|enctype|loading|autocomplete|scope|shape|wrap"
_BOOLEAN_ATTRS = (
    "disabled|checked|readonly|required|selected|multiple|autofocus|hidden"
    "|async|defer|novalidate|autoplay|controls|loop|muted|open|ismap"
)

_ATTRIBUTE_RULES = compile_rules(
    [
        (constants.KIND_WHITESPACE, r"\s+"),
        (ERROR_ATTRIBUTE_UNTERMINATED, r"[^\s=/\"']+\s*=\s*(?:\"[^\"]*|'[^']*)\Z"),
        (ATTRIBUTE, rf"(?:{_URL_ATTRS}){_NAME_END}\s*=\s*{_QUOTED}", "url"),
        (ATTRIBUTE, rf"id{_NAME_END}\s*=\s*{_QUOTED}", "id"),
        (
            ATTRIBUTE,
            rf"(?:{_NUMERIC_ATTRS}){_NAME_END}\s*=\s*(?:\"\s*-?\d+(?:\.\d+)?%?\s*\"|'\s*-?\d+(?:\.\d+)?%?\s*')",
            "numeric",
        ),
        (ATTRIBUTE, rf"(?:{_ENUM_ATTRS}){_NAME_END}\s*=\s*{_QUOTED}", "enum"),
        (ATTRIBUTE, rf"(?:{_BOOLEAN_ATTRS}){_NAME_END}(?!\s*=)", "boolean"),
        (ATTRIBUTE, rf"[^\s=/\"'<>]+\s*=\s*{_QUOTED}", "string"),
        (ERROR_ATTRIBUTE_UNQUOTED, r"[^\s=/\"'<>]+\s*=\s*[^\s\"'=<>`]+"),
        (ERROR_ATTRIBUTE_MISSING_VALUE, r"[^\s=/\"'<>]+\s*=(?=\s|\Z)"),
        (ATTRIBUTE, r"[^\s=/\"'<>]+", "flag"),
        (constants.KIND_INVALID, r"[\s\S]"),
    ],
    re.IGNORECASE,
)

_TAG_PARTS = re.compile(r"<\s*(/?)\s*([A-Za-z][\w:-]*)(.*?)(/?)\s*>?\Z", re.DOTALL)
_ATTR_PARTS = re.compile(r"([^\s=]+)\s*(?:=\s*(.*))?\Z", re.DOTALL)

_SCANNER = PatternScanner(_RULES, name="html")
_ATTRIBUTE_SCANNER = PatternScanner(_ATTRIBUTE_RULES, name="html-attributes")


def tag_name(token: Token) -> str:
    """Lower-cased element name of a tag token (empty for non-tags)."""
    if token.subkind:
        return token.subkind
    match = _TAG_PARTS.match(token.value)
    return match.group(2).lower() if match else ""


def split_attribute(lexeme: str) -> tuple[str, str]:
    """Return ``(name, unquoted value)`` for an attribute lexeme."""
    match = _ATTR_PARTS.match(lexeme)
    if match is None:
        return lexeme.lower(), ""
    name, raw = match.group(1), match.group(2) or ""
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        raw = raw[1:-1]
    elif raw[:1] in ("\"", "'"):
        raw = raw[1:]
    return name.lower(), raw


class HtmlLexer(BaseLexer):
    LANGUAGE = constants.LANG_HTML
    ERROR_MESSAGES = {
        ERROR_COMMENT: "Unterminated comment",
        ERROR_DOCTYPE: "Malformed DOCTYPE declaration",
        ERROR_UNCLOSED_TAG: "Tag is missing its closing '>'",
        ERROR_ENTITY: "Malformed character entity",
        ERROR_ATTRIBUTE_UNTERMINATED: "Unterminated attribute value",
        ERROR_ATTRIBUTE_UNQUOTED: "Attribute value is not quoted",
        ERROR_ATTRIBUTE_MISSING_VALUE: "Attribute has '=' but no value",
        constants.KIND_INVALID: "Invalid character",
    }
    SUGGESTIONS = {
        ERROR_COMMENT: "Close the comment with '-->'",
        ERROR_DOCTYPE: "Use <!DOCTYPE html>",
        ERROR_ENTITY: "Entities must end with ';' (e.g. &amp;)",
        ERROR_ATTRIBUTE_UNQUOTED: "Wrap the value in double quotes",
    }

    def scan(self, source: str) -> ScanResult:
        result = _SCANNER.scan(source)
        tokens: list[Token] = []
        for token in result.tokens:
            if token.kind in TAG_KINDS or token.kind == ERROR_UNCLOSED_TAG:
                tokens.extend(self._split_tag(token))
            else:
                tokens.append(token)
        result.tokens = tokens
        return result

    def _split_tag(self, token: Token) -> list[Token]:
        """Split a tag lexeme into ``<name``, its attribute tokens and ``>``.

        The head token keeps the tag kind and carries the lower-cased name as
        ``subkind`` plus the parsed attribute mapping.
        """
        match = _TAG_PARTS.match(token.value)
        if match is None:
            return [token]
        name = match.group(2).lower()
        region_start, region_end = match.start(3), match.end(3)
        line, column = advance_position(
            token.value[:region_start], token.line, token.column
        )
        scanned = _ATTRIBUTE_SCANNER.scan(match.group(3), line, column)
        attributes: dict[str, str] = {}
        attr_tokens: list[Token] = []
        for attr in scanned.tokens:
            if attr.kind == constants.KIND_INVALID:
                attr_tokens.append(attr)
                continue
            attr_name, attr_value = split_attribute(attr.value)
            attributes.setdefault(attr_name, attr_value)
            attr_tokens.append(
                attr.model_copy(update={"attributes": {"name": attr_name, "value": attr_value}})
            )
        head = token.model_copy(
            update={
                "value": token.value[:region_start],
                "subkind": name,
                "attributes": attributes,
            }
        )
        tail = token.value[region_end:]
        closer = tail.lstrip()
        if not closer:
            return [head, *attr_tokens]
        line, column = advance_position(
            token.value[: len(token.value) - len(closer)], token.line, token.column
        )
        end = Token(value=closer, kind=TAG_END, line=line, column=column)
        return [head, *attr_tokens, end]

    def _collect_symbols(self, tokens: list[Token], symbols: SymbolTable) -> None:
        current_tag = ""
        for token in tokens:
            if token.kind in OPENING_TAG_KINDS or token.kind in STANDALONE_TAG_KINDS:
                current_tag = token.subkind or ""
                symbols.declare(
                    current_tag,
                    Symbol(
                        name=current_tag,
                        kind=SymbolKind.TAG,
                        data_type="element",
                        declaration_line=token.line,
                        declaration_column=token.column,
                        initialized=True,
                        value=token.value,
                    ),
                )
            elif token.kind == ATTRIBUTE and current_tag:
                attr_name = token.attributes.get("name", token.value)
                symbols.declare(
                    f"{current_tag}.{attr_name}",
                    Symbol(
                        name=attr_name,
                        kind=SymbolKind.ATTRIBUTE,
                        data_type=token.subkind or "string",
                        scope=current_tag,
                        declaration_line=token.line,
                        declaration_column=token.column,
                        initialized=True,
                        value=token.attributes.get("value", ""),
                    ),
                )
