"""Document-level and attribute-level rules for markup."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..lexers import html as lex
from ..models import AnalysisError, Symbol, SymbolKind, Token, semantic_error, semantic_warning
from ..symbol_table import SymbolTable
from ._base import SemanticAnalyzer

logger = logging.getLogger(__name__)

GLOBAL_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "id", "class", "style", "title", "lang", "dir", "hidden", "tabindex",
        "role", "accesskey", "contenteditable", "draggable", "spellcheck",
        "translate",
    }
)
GLOBAL_ATTRIBUTE_PREFIXES: tuple[str, ...] = ("data-", "aria-", "on")

_COMMON_MEDIA = frozenset({"src", "controls", "autoplay", "loop", "muted", "preload", "width", "height"})

TAG_ATTRIBUTES: dict[str, frozenset[str]] = {
    "html": frozenset({"xmlns", "manifest"}),
    "head": frozenset(),
    "title": frozenset(),
    "body": frozenset(),
    "meta": frozenset({"charset", "name", "content", "http-equiv", "property"}),
    "link": frozenset(
        {"rel", "href", "type", "media", "sizes", "crossorigin", "integrity", "hreflang", "as"}
    ),
    "script": frozenset(
        {"src", "type", "async", "defer", "crossorigin", "integrity", "nomodule", "charset"}
    ),
    "style": frozenset({"media", "type"}),
    "base": frozenset({"href", "target"}),
    "a": frozenset(
        {"href", "target", "rel", "download", "hreflang", "type", "referrerpolicy", "ping"}
    ),
    "img": frozenset(
        {
            "src", "alt", "width", "height", "srcset", "sizes", "loading",
            "decoding", "crossorigin", "usemap", "ismap", "referrerpolicy",
        }
    ),
    "form": frozenset(
        {"action", "method", "enctype", "target", "name", "autocomplete", "novalidate", "accept-charset", "rel"}
    ),
    "input": frozenset(
        {
            "type", "name", "value", "placeholder", "required", "disabled",
            "readonly", "checked", "min", "max", "step", "maxlength",
            "minlength", "pattern", "size", "autocomplete", "autofocus",
            "multiple", "list", "form", "accept", "src", "alt", "width", "height",
        }
    ),
    "button": frozenset(
        {"type", "name", "value", "disabled", "form", "autofocus", "formaction", "formmethod"}
    ),
    "label": frozenset({"for", "form"}),
    "select": frozenset({"name", "multiple", "required", "disabled", "size", "autofocus", "form"}),
    "option": frozenset({"value", "selected", "disabled", "label"}),
    "textarea": frozenset(
        {
            "name", "rows", "cols", "placeholder", "required", "disabled",
            "readonly", "maxlength", "minlength", "wrap", "autofocus", "form",
        }
    ),
    "table": frozenset({"border"}),
    "td": frozenset({"colspan", "rowspan", "headers"}),
    "th": frozenset({"colspan", "rowspan", "headers", "scope", "abbr"}),
    "ol": frozenset({"start", "reversed", "type"}),
    "li": frozenset({"value"}),
    "iframe": frozenset(
        {"src", "width", "height", "name", "allow", "allowfullscreen", "loading", "sandbox", "srcdoc", "referrerpolicy"}
    ),
    "video": _COMMON_MEDIA | {"poster", "playsinline"},
    "audio": _COMMON_MEDIA,
    "source": frozenset({"src", "type", "srcset", "sizes", "media"}),
    **{
        name: frozenset()
        for name in (
            "div", "span", "p", "ul", "tr", "header", "footer", "nav",
            "section", "article", "aside", "main", "h1", "h2", "h3", "h4",
            "h5", "h6", "br", "hr", "strong", "em", "b", "i", "small",
        )
    },
}

REQUIRED_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "img": ("src", "alt"),
    "a": ("href",),
    "form": ("action",),
    "link": ("rel", "href"),
}

TARGET_KEYWORDS: frozenset[str] = frozenset({"_blank", "_self", "_parent", "_top"})
REL_VALUES: frozenset[str] = frozenset(
    {
        "alternate", "author", "bookmark", "canonical", "dns-prefetch",
        "external", "help", "icon", "license", "manifest", "modulepreload",
        "next", "nofollow", "noopener", "noreferrer", "opener", "pingback",
        "preconnect", "prefetch", "preload", "prev", "search", "stylesheet",
        "tag", "shortcut", "apple-touch-icon",
    }
)
INPUT_TYPES: frozenset[str] = frozenset(
    {
        "button", "checkbox", "color", "date", "datetime-local", "email",
        "file", "hidden", "image", "month", "number", "password", "radio",
        "range", "reset", "search", "submit", "tel", "text", "time", "url",
        "week",
    }
)
URL_ATTRIBUTES: frozenset[str] = frozenset({"href", "src", "action", "cite", "poster", "formaction"})
URL_SCHEMES: frozenset[str] = frozenset(
    {"http", "https", "ftp", "mailto", "tel", "data", "javascript", "file"}
)

_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):")
_NETWORK_URL = re.compile(r"^(?:https?|ftp)://[^\s/?#]+[^\s]*$", re.IGNORECASE)
_EMAIL = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_ID = re.compile(r"^[A-Za-z][\w\-:.]*$")
_HEADING = re.compile(r"^h([1-6])$")


def valid_email(value: str) -> bool:
    return bool(_EMAIL.match(value))


def valid_url(value: str) -> bool:
    """Absolute URLs need a known scheme; relative references need no spaces."""
    if any(ch.isspace() for ch in value):
        return False
    scheme = _SCHEME.match(value)
    if scheme is None:
        return True
    name = scheme.group(1).lower()
    if name not in URL_SCHEMES:
        return False
    if name in ("http", "https", "ftp"):
        return bool(_NETWORK_URL.match(value))
    if name == "mailto":
        return valid_email(value[len("mailto:") :].split("?", 1)[0])
    return True


def attribute_allowed(tag: str, attribute: str) -> bool:
    if attribute in GLOBAL_ATTRIBUTES or attribute.startswith(GLOBAL_ATTRIBUTE_PREFIXES):
        return True
    allowed = TAG_ATTRIBUTES.get(tag)
    return allowed is None or attribute in allowed


@dataclass
class _OpenForm:
    token: Token
    has_submit: bool = False


@dataclass
class _DocumentState:
    ids: dict[str, Token] = field(default_factory=dict)
    fragment_links: list[tuple[str, Token]] = field(default_factory=list)
    headings: list[tuple[int, Token]] = field(default_factory=list)
    open_forms: list[_OpenForm] = field(default_factory=list)


class HtmlSemanticAnalyzer(SemanticAnalyzer):
    LANGUAGE = "html"

    def _analyze(self, tokens: list[Token], table: SymbolTable) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        state = _DocumentState()
        elements = [
            t
            for t in tokens
            if t.kind in lex.OPENING_TAG_KINDS or t.kind in lex.STANDALONE_TAG_KINDS
        ]
        errors.extend(self._check_title(elements))
        errors.extend(self._check_document_metadata(elements))

        for token in tokens:
            name = lex.tag_name(token) if token.kind in lex.TAG_KINDS else ""
            if token.kind in lex.CLOSING_TAG_KINDS:
                if name == "form" and state.open_forms:
                    errors.extend(self._close_form(state.open_forms.pop()))
                continue
            if not name:
                continue
            errors.extend(self._check_attributes(token, name, table, state))
            heading = _HEADING.match(name)
            if heading:
                state.headings.append((int(heading.group(1)), token))
            if name == "form":
                if token.kind in lex.OPENING_TAG_KINDS:
                    state.open_forms.append(_OpenForm(token))
            elif state.open_forms and self._is_submit_control(token, name):
                state.open_forms[-1].has_submit = True

        for form in state.open_forms:
            errors.extend(self._close_form(form))
        errors.extend(self._check_fragment_links(state))
        errors.extend(self._check_headings(state.headings))
        return errors

    # ── document ─────────────────────────────────────────────────

    @staticmethod
    def _check_title(elements: list[Token]) -> list[AnalysisError]:
        titles = [t for t in elements if lex.tag_name(t) == "title"]
        if not titles:
            return [semantic_error("Missing <title> element in document")]
        return [
            semantic_error("Duplicate <title> element", t.line, t.column)
            for t in titles[1:]
        ]

    @staticmethod
    def _check_document_metadata(elements: list[Token]) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        for token in elements:
            if lex.tag_name(token) == "html" and not token.attributes.get("lang"):
                errors.append(
                    semantic_warning(
                        "<html> should declare a lang attribute",
                        token.line,
                        token.column,
                        suggestion='e.g. <html lang="en">',
                    )
                )
        has_charset = any(
            lex.tag_name(t) == "meta"
            and (
                "charset" in t.attributes
                or "charset=" in t.attributes.get("content", "").lower()
            )
            for t in elements
        )
        if not has_charset:
            errors.append(
                semantic_warning(
                    "Missing character set declaration",
                    suggestion='Add <meta charset="UTF-8"> inside <head>',
                )
            )
        return errors

    # ── attributes ───────────────────────────────────────────────

    def _check_attributes(
        self, token: Token, name: str, table: SymbolTable, state: _DocumentState
    ) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        attributes = token.attributes
        for required in REQUIRED_ATTRIBUTES.get(name, ()):
            if required not in attributes:
                errors.append(
                    semantic_error(
                        f"<{name}> is missing required attribute '{required}'",
                        token.line,
                        token.column,
                    )
                )
        for attribute, value in attributes.items():
            if not attribute_allowed(name, attribute):
                errors.append(
                    semantic_error(
                        f"Attribute '{attribute}' is not allowed on <{name}>",
                        token.line,
                        token.column,
                    )
                )
            if attribute in URL_ATTRIBUTES:
                errors.extend(self._check_url(token, attribute, value, state))
            elif attribute == "id":
                errors.extend(self._check_id(token, name, value, table, state))
        errors.extend(self._check_enumerated(token, name, attributes))
        if name == "input" and attributes.get("type", "").lower() == "email":
            value = attributes.get("value", "")
            if value and not valid_email(value):
                errors.append(
                    semantic_error(
                        f"Invalid email address '{value}'", token.line, token.column
                    )
                )
        return errors

    @staticmethod
    def _check_url(
        token: Token, attribute: str, value: str, state: _DocumentState
    ) -> list[AnalysisError]:
        if attribute == "href":
            if value == "":
                return [semantic_warning("Empty href attribute", token.line, token.column)]
            if value == "#":
                return [
                    semantic_warning(
                        'Placeholder link href="#"', token.line, token.column
                    )
                ]
            if value.startswith("#"):
                state.fragment_links.append((value[1:], token))
                return []
        if value and not valid_url(value):
            return [
                semantic_error(
                    f"Invalid URL in {attribute}: '{value}'", token.line, token.column
                )
            ]
        return []

    @staticmethod
    def _check_id(
        token: Token, name: str, value: str, table: SymbolTable, state: _DocumentState
    ) -> list[AnalysisError]:
        if not _ID.match(value):
            return [semantic_error(f"Invalid id '{value}'", token.line, token.column)]
        first = state.ids.get(value)
        if first is not None:
            return [
                semantic_error(
                    f"Duplicate id '{value}' (first declared at line {first.line})",
                    token.line,
                    token.column,
                )
            ]
        state.ids[value] = token
        table.put(
            f"#{value}",
            Symbol(
                name=value,
                kind=SymbolKind.ATTRIBUTE,
                data_type="id",
                scope=name,
                declaration_line=token.line,
                declaration_column=token.column,
                initialized=True,
                value=value,
            ),
        )
        return []

    @staticmethod
    def _check_enumerated(
        token: Token, name: str, attributes: dict[str, str]
    ) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        target = attributes.get("target")
        if target is not None and (not target or target.startswith("_")):
            if target.lower() not in TARGET_KEYWORDS:
                errors.append(
                    semantic_error(
                        f"Invalid target value '{target}'", token.line, token.column
                    )
                )
        for rel in attributes.get("rel", "").lower().split():
            if rel not in REL_VALUES:
                errors.append(
                    semantic_error(f"Unknown rel value '{rel}'", token.line, token.column)
                )
        if name == "input" and "type" in attributes:
            kind = attributes["type"].lower()
            if kind not in INPUT_TYPES:
                errors.append(
                    semantic_error(
                        f"Invalid input type '{attributes['type']}'",
                        token.line,
                        token.column,
                    )
                )
        return errors

    # ── cross-references ─────────────────────────────────────────

    @staticmethod
    def _check_fragment_links(state: _DocumentState) -> list[AnalysisError]:
        return [
            semantic_error(
                f"Link target '#{fragment}' does not match any id",
                token.line,
                token.column,
            )
            for fragment, token in state.fragment_links
            if fragment not in state.ids
        ]

    @staticmethod
    def _check_headings(headings: list[tuple[int, Token]]) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        if headings and headings[0][0] != 1:
            level, token = headings[0]
            errors.append(
                semantic_warning(
                    f"First heading is <h{level}>; documents should start with <h1>",
                    token.line,
                    token.column,
                )
            )
        h1s = [t for level, t in headings if level == 1]
        for token in h1s[1:]:
            errors.append(
                semantic_warning("Multiple <h1> elements", token.line, token.column)
            )
        for (prev, _), (level, token) in zip(headings, headings[1:]):
            if level > prev + 1:
                errors.append(
                    semantic_warning(
                        f"Heading level jumps from <h{prev}> to <h{level}>",
                        token.line,
                        token.column,
                    )
                )
        return errors

    @staticmethod
    def _is_submit_control(token: Token, name: str) -> bool:
        kind = token.attributes.get("type", "").lower()
        if name == "button":
            return kind in ("", "submit")
        return name == "input" and kind in ("submit", "image")

    @staticmethod
    def _close_form(form: _OpenForm) -> list[AnalysisError]:
        if form.has_submit:
            return []
        token = form.token
        return [
            semantic_warning("<form> has no submit button", token.line, token.column)
        ]
