"""SemanticAnalyzer — symbol-table driven rule checking interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..models import AnalysisError, Token
from ..run_types import SemanticOutcome
from ..symbol_table import SymbolTable

logger = logging.getLogger(__name__)


class SemanticAnalyzer(ABC):
    """Base class for per-language semantic analyzers.

    ``analyze`` works on a private copy of the incoming table and hands the
    updated copy back, so the caller's table is never mutated.
    """

    LANGUAGE: str = ""

    def analyze(
        self, tokens: list[Token], language: str, symbols: SymbolTable
    ) -> SemanticOutcome:
        table = symbols.copy()
        diagnostics = self._analyze(tokens, table)
        logger.debug(
            "%s semantics: %d diagnostics, %d symbols",
            self.LANGUAGE,
            len(diagnostics),
            len(table),
        )
        return SemanticOutcome(diagnostics=diagnostics, symbols=table)

    @abstractmethod
    def _analyze(self, tokens: list[Token], table: SymbolTable) -> list[AnalysisError]:
        """Add symbols to *table* and return the findings."""
