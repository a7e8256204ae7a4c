"""Tag-stack nesting, document cardinality and element placement checks."""

from __future__ import annotations

import logging
from collections import Counter

from ..lexers import html as lex
from ..models import AnalysisError, Token, syntax_error
from ._base import StructuralAnalyzer

logger = logging.getLogger(__name__)

HEAD_ONLY: frozenset[str] = frozenset({"title", "meta", "link", "style", "base"})
BODY_ONLY: frozenset[str] = frozenset(
    {
        "header", "main", "footer", "article", "section", "nav", "aside",
        "h1", "h2", "h3", "h4", "h5", "h6", "p", "div", "span", "a", "ul",
        "ol", "li", "table", "form", "img",
    }
)
SINGLETON_ELEMENTS: tuple[str, ...] = ("html", "head", "body")

_DOCTYPE = "doctype"


class HtmlStructuralAnalyzer(StructuralAnalyzer):
    LANGUAGE = "html"

    def analyze(self, tokens: list[Token], language: str) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        stack: list[Token] = []
        counts: Counter[str] = Counter()
        in_head = False
        in_body = False

        for token in tokens:
            if token.kind == lex.DOCTYPE:
                counts[_DOCTYPE] += 1
                if counts[_DOCTYPE] > 1:
                    errors.append(
                        syntax_error(
                            "Duplicate <!DOCTYPE> declaration", token.line, token.column
                        )
                    )
                continue
            if token.kind not in lex.TAG_KINDS:
                continue

            name = lex.tag_name(token)
            if token.kind in lex.CLOSING_TAG_KINDS:
                errors.extend(self._close(token, name, stack))
                if name == "head":
                    in_head = False
                elif name == "body":
                    in_body = False
                continue

            errors.extend(self._check_placement(token, name, in_head, in_body))
            if name in SINGLETON_ELEMENTS:
                counts[name] += 1
                if counts[name] > 1:
                    errors.append(
                        syntax_error(
                            f"Duplicate <{name}> element", token.line, token.column
                        )
                    )
            if token.kind in lex.OPENING_TAG_KINDS and name not in lex.VOID_ELEMENTS:
                stack.append(token)
                if name == "head":
                    in_head = True
                elif name == "body":
                    in_body = True

        for token in stack:
            errors.append(
                syntax_error(
                    f"Unclosed tag <{lex.tag_name(token)}>", token.line, token.column
                )
            )
        errors.extend(self._check_required(counts))
        logger.debug("html structure: %d diagnostics", len(errors))
        return errors

    # ── helpers ──────────────────────────────────────────────────

    @staticmethod
    def _close(token: Token, name: str, stack: list[Token]) -> list[AnalysisError]:
        if name in lex.VOID_ELEMENTS:
            return [
                syntax_error(
                    f"Void element <{name}> cannot have a closing tag",
                    token.line,
                    token.column,
                )
            ]
        if not stack:
            return [
                syntax_error(f"Orphan closing tag </{name}>", token.line, token.column)
            ]
        opened = lex.tag_name(stack.pop())
        if opened != name:
            return [
                syntax_error(
                    f"Badly nested tags: expected </{opened}> but found </{name}>",
                    token.line,
                    token.column,
                )
            ]
        return []

    @staticmethod
    def _check_placement(
        token: Token, name: str, in_head: bool, in_body: bool
    ) -> list[AnalysisError]:
        if name in HEAD_ONLY and not in_head:
            return [
                syntax_error(
                    f"<{name}> must appear inside <head>", token.line, token.column
                )
            ]
        if name in BODY_ONLY and not in_body:
            return [
                syntax_error(
                    f"<{name}> must appear inside <body>", token.line, token.column
                )
            ]
        return []

    @staticmethod
    def _check_required(counts: Counter[str]) -> list[AnalysisError]:
        errors = []
        if counts[_DOCTYPE] == 0:
            errors.append(syntax_error("Missing <!DOCTYPE> declaration"))
        for name in SINGLETON_ELEMENTS:
            if counts[name] == 0:
                errors.append(syntax_error(f"Missing <{name}> element"))
        return errors
