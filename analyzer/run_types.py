"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import constants
from .models import AnalysisError, Token
from .symbol_table import SymbolTable


@dataclass(frozen=True)
class AnalysisConfig:
    """Groups analysis configuration.

    ``language`` overrides detection when non-empty.
    """

    language: str = ""
    indent_width: int = constants.INDENT_WIDTH
    trace: bool = True


@dataclass
class LexicalOutcome:
    tokens: list[Token] = field(default_factory=list)
    diagnostics: list[AnalysisError] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)


@dataclass
class SemanticOutcome:
    diagnostics: list[AnalysisError] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)


@dataclass
class PipelineStats:
    """Timing and size statistics for each pipeline stage."""

    source_bytes: int = 0
    source_lines: int = 0
    language: str = ""

    # Stage timings (seconds)
    detect_time: float = 0.0
    lexical_time: float = 0.0
    structural_time: float = 0.0
    semantic_time: float = 0.0
    trace_time: float = 0.0
    total_time: float = 0.0

    # Output sizes
    token_count: int = 0
    lexical_errors: int = 0
    syntactic_errors: int = 0
    semantic_errors: int = 0
    symbol_count: int = 0
    trace_lines: int = 0

    def report(self) -> str:
        lines = [
            "═══ Pipeline Statistics ═══",
            f"  Source: {self.source_lines} lines, {self.source_bytes} bytes ({self.language})",
            "",
            f"  {'Stage':<20} {'Time':>10}  {'Output':>30}",
            f"  {'─' * 20} {'─' * 10}  {'─' * 30}",
        ]

        stages = [
            ("Detect", self.detect_time, self.language),
            (
                "Lexical",
                self.lexical_time,
                f"{self.token_count} tokens, {self.lexical_errors} errors",
            ),
            ("Structural", self.structural_time, f"{self.syntactic_errors} errors"),
            (
                "Semantic",
                self.semantic_time,
                f"{self.symbol_count} symbols, {self.semantic_errors} findings",
            ),
            ("Trace", self.trace_time, f"{self.trace_lines} lines"),
        ]
        for name, t, output in stages:
            time_str = f"{t * 1000:>8.1f}ms"
            lines.append(f"  {name:<20} {time_str:>10}  {output:>30}")

        lines.append(f"  {'─' * 20} {'─' * 10}  {'─' * 30}")
        lines.append(f"  {'Total':<20} {self.total_time * 1000:>8.1f}ms")
        return "\n".join(lines)


@dataclass
class AnalysisResult:
    """Everything one ``run_analysis`` call produced."""

    language: str = constants.LANG_UNKNOWN
    tokens: list[Token] = field(default_factory=list)
    lexical_errors: list[AnalysisError] = field(default_factory=list)
    syntactic_errors: list[AnalysisError] = field(default_factory=list)
    semantic_errors: list[AnalysisError] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)
    trace: list[str] = field(default_factory=list)
    success: bool = False
    stats: PipelineStats = field(default_factory=PipelineStats)

    def all_errors(self) -> list[AnalysisError]:
        return [*self.lexical_errors, *self.syntactic_errors, *self.semantic_errors]

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "success": self.success,
            "tokens": [t.model_dump() for t in self.tokens],
            "lexical_errors": [e.model_dump(mode="json") for e in self.lexical_errors],
            "syntactic_errors": [
                e.model_dump(mode="json") for e in self.syntactic_errors
            ],
            "semantic_errors": [e.model_dump(mode="json") for e in self.semantic_errors],
            "symbols": self.symbols.to_dict(),
            "trace": list(self.trace),
        }
