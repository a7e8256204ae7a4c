"""Composable API functions for the multi-language analyzer.

Each function corresponds to a CLI workflow (--tokens, --symbols, --stats)
but is callable programmatically without argparse.
"""

from __future__ import annotations

import logging

from . import constants
from .detector import detect_language
from .lexers import get_lexer
from .lexers.generic import tokenize_words
from .models import AnalysisError, Token
from .pipeline import run_analysis
from .run_types import AnalysisConfig
from .token_stats import count_kinds

logger = logging.getLogger(__name__)


def detect(source: str) -> str:
    """Return the detected language tag of *source* (``"unknown"`` on ties)."""
    return detect_language(source)


def tokenize_source(source: str, language: str = "") -> list[Token]:
    """Tokenize source with the scanner for its language.

    Args:
        source: The source text.
        language: Language tag; detected when empty.

    Returns:
        The token list, including error-kind tokens. Text in no supported
        language is split into whitespace-separated WORD tokens.
    """
    language = language or detect_language(source)
    logger.info("Tokenizing source (%s)", language)
    if language not in constants.SUPPORTED_LANGUAGES:
        return tokenize_words(source)
    return get_lexer(language).tokenize(source)


def dump_tokens(source: str, language: str = "") -> str:
    """Tokenize source and return a human-readable text dump.

    Args:
        source: The source text.
        language: Language tag; detected when empty.

    Returns:
        A multi-line string with one token per line.
    """
    return "\n".join(f"  {tok}" for tok in tokenize_source(source, language))


def dump_symbols(source: str, language: str = "") -> str:
    """Run the full pipeline and return the symbol table as text.

    Args:
        source: The source text.
        language: Language tag; detected when empty.

    Returns:
        A multi-line string with one ``key: symbol`` entry per line, sorted
        by key.
    """
    result = run_analysis(source, AnalysisConfig(language=language, trace=False))
    return "\n".join(
        f"  {key}: {result.symbols[key]}" for key in sorted(result.symbols)
    )


def dump_diagnostics(source: str, language: str = "") -> str:
    """Run the full pipeline and return every diagnostic, one per line."""
    result = run_analysis(source, AnalysisConfig(language=language, trace=False))
    return "\n".join(f"  {err.full_message}" for err in _sorted(result.all_errors()))


def token_kind_stats(source: str, language: str = "") -> dict[str, int]:
    """Tokenize source and return a token-kind frequency map.

    Args:
        source: The source text.
        language: Language tag; detected when empty.

    Returns:
        A dict mapping token kinds to their counts.
    """
    return count_kinds(tokenize_source(source, language))


def _sorted(errors: list[AnalysisError]) -> list[AnalysisError]:
    return sorted(errors, key=lambda e: (e.line, e.column))
