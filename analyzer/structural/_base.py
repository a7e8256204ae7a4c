"""StructuralAnalyzer — token-stream syntax checking interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import AnalysisError, Token


class StructuralAnalyzer(ABC):
    """Checks structure over an already-scanned token stream.

    Implementations never re-scan source text and never raise on malformed
    input: every violation becomes a diagnostic and the walk continues.
    """

    LANGUAGE: str = ""

    @abstractmethod
    def analyze(self, tokens: list[Token], language: str) -> list[AnalysisError]: ...
