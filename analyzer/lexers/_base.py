"""BaseLexer — shared lexical-phase infrastructure for every language."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..models import AnalysisError, Token, lexical_error
from ..run_types import LexicalOutcome
from ..scanner import ScanResult, is_error_kind
from ..symbol_table import SymbolTable

logger = logging.getLogger(__name__)

_MAX_LEXEME_IN_MESSAGE = 40


class BaseLexer(ABC):
    """Base class for per-language scanners.

    Subclasses provide ``scan`` and the ``ERROR_MESSAGES`` table mapping each
    error kind they can emit to a human-readable message, and may override
    ``_collect_symbols``.
    """

    LANGUAGE: str = ""
    ERROR_MESSAGES: dict[str, str] = {}
    SUGGESTIONS: dict[str, str] = {}
    DEFAULT_ERROR_MESSAGE: str = "Unrecognized character"

    @abstractmethod
    def scan(self, source: str) -> ScanResult: ...

    def tokenize(self, source: str) -> list[Token]:
        return self.scan(source).tokens

    def analyze_lexical(self, source: str) -> LexicalOutcome:
        """Tokenize *source*, translating error-kind tokens into diagnostics."""
        tokens = self.tokenize(source)
        diagnostics = [self._diagnostic_for(t) for t in tokens if is_error_kind(t.kind)]
        symbols = SymbolTable()
        self._collect_symbols(tokens, symbols)
        logger.debug(
            "%s lexer: %d tokens, %d diagnostics, %d symbols",
            self.LANGUAGE,
            len(tokens),
            len(diagnostics),
            len(symbols),
        )
        return LexicalOutcome(tokens=tokens, diagnostics=diagnostics, symbols=symbols)

    # ── helpers ──────────────────────────────────────────────────

    def _diagnostic_for(self, token: Token) -> AnalysisError:
        template = self.ERROR_MESSAGES.get(token.kind, self.DEFAULT_ERROR_MESSAGE)
        lexeme = token.value
        if len(lexeme) > _MAX_LEXEME_IN_MESSAGE:
            lexeme = lexeme[:_MAX_LEXEME_IN_MESSAGE] + "..."
        return lexical_error(
            f"{template}: {lexeme!r}",
            token.line,
            token.column,
            suggestion=self.SUGGESTIONS.get(token.kind, ""),
        )

    def _collect_symbols(self, tokens: list[Token], symbols: SymbolTable) -> None:
        """Record one symbol per structurally significant token."""
