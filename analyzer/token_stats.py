"""Pure functions for computing statistics over token lists."""

from __future__ import annotations

from collections import Counter

from analyzer.models import AnalysisError, Token


def count_kinds(tokens: list[Token]) -> dict[str, int]:
    """Return a frequency map of token kinds in the given token list.

    Args:
        tokens: A list of tokens.

    Returns:
        A dict mapping kind tags to their occurrence counts.
        Empty dict for an empty input list.
    """
    return dict(Counter(tok.kind for tok in tokens))


def count_severities(errors: list[AnalysisError]) -> dict[str, int]:
    """Return a frequency map of diagnostic severities."""
    return dict(Counter(err.severity.value for err in errors))
