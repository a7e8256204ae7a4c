"""Language detection by signature-pattern scoring."""

from __future__ import annotations

import logging
import re

from . import constants

logger = logging.getLogger(__name__)

_PYTHON_SIGNATURES: tuple[re.Pattern, ...] = (
    re.compile(
        r"\b(?:def|class|import|from|if|elif|else|for|while|in|try|with|lambda|yield"
        r"|pass|nonlocal|async|await|print|return|self|except|raise|None|True|False)\b",
        re.MULTILINE,
    ),
    re.compile(r"^\s*#", re.MULTILINE),
    re.compile(r":\s*$", re.MULTILINE),
)

_SQL_SIGNATURES: tuple[re.Pattern, ...] = (
    re.compile(
        r"\b(?:SELECT|FROM|WHERE|INSERT|INTO|VALUES|UPDATE|SET|DELETE|CREATE"
        r"|TABLE|DROP|ALTER|JOIN|GROUP|ORDER|BY|PRIMARY|KEY|REFERENCES"
        r"|FOREIGN|HAVING|DISTINCT)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:INT|INTEGER|VARCHAR|CHAR|TEXT|DATE|DECIMAL|NUMERIC|BOOLEAN"
        r"|FLOAT|TIMESTAMP)\b",
        re.IGNORECASE,
    ),
    re.compile(r"--"),
    re.compile(r"/\*.*?\*/", re.DOTALL),
)

_HTML_SIGNATURES: tuple[re.Pattern, ...] = (
    re.compile(r"<[^>]+>"),
    re.compile(
        r"<\s*/?\s*(?:html|head|body|title|div|span|p|a|script|style|meta"
        r"|link|table|ul|ol|li|form|input|img)\b",
        re.IGNORECASE,
    ),
    re.compile(r"<!DOCTYPE", re.IGNORECASE),
)

_SIGNATURES: dict[str, tuple[re.Pattern, ...]] = {
    constants.LANG_PYTHON: _PYTHON_SIGNATURES,
    constants.LANG_SQL: _SQL_SIGNATURES,
    constants.LANG_HTML: _HTML_SIGNATURES,
}


def score_languages(text: str) -> dict[str, int]:
    """Return the signature-match count of *text* for each language."""
    return {
        language: sum(len(pattern.findall(text)) for pattern in patterns)
        for language, patterns in _SIGNATURES.items()
    }


def detect_language(text: str) -> str:
    """Pick the language whose score strictly exceeds every other score.

    Ties (including all-zero) and blank input yield ``"unknown"``.
    """
    if not text or not text.strip():
        return constants.LANG_UNKNOWN
    scores = score_languages(text)
    best = max(scores.values())
    winners = [lang for lang, score in scores.items() if score == best]
    logger.debug("Detection scores: %s", scores)
    if best == 0 or len(winners) != 1:
        return constants.LANG_UNKNOWN
    return winners[0]
