"""Pipeline controller — detect → lex → structural → semantic → trace."""

from __future__ import annotations

import logging
import time

from . import constants
from .detector import detect_language
from .lexers import get_lexer
from .lexers.generic import tokenize_words
from .models import lexical_error, syntax_error
from .run_types import AnalysisConfig, AnalysisResult, PipelineStats
from .scanner import ScannerConfigError
from .semantic import get_semantic_analyzer
from .structural import get_structural_analyzer
from .trace import simulate

logger = logging.getLogger(__name__)


def _is_successful(result: AnalysisResult) -> bool:
    """No lexical diagnostics and no blocking syntactic diagnostic."""
    return not result.lexical_errors and not any(
        err.is_blocking() for err in result.syntactic_errors
    )


def _finish(result: AnalysisResult, started: float) -> AnalysisResult:
    stats = result.stats
    stats.token_count = len(result.tokens)
    stats.lexical_errors = len(result.lexical_errors)
    stats.syntactic_errors = len(result.syntactic_errors)
    stats.semantic_errors = len(result.semantic_errors)
    stats.symbol_count = len(result.symbols)
    stats.trace_lines = len(result.trace)
    stats.total_time = time.perf_counter() - started
    result.success = _is_successful(result)
    logger.info(
        "Analysis of %s finished in %.1fms: success=%s (%d lexical, %d syntactic, %d semantic)",
        result.language,
        stats.total_time * 1000,
        result.success,
        stats.lexical_errors,
        stats.syntactic_errors,
        stats.semantic_errors,
    )
    return result


def _no_analyzer(result: AnalysisResult, source: str, started: float) -> AnalysisResult:
    logger.warning("No analyzer registered for language %r", result.language)
    if not result.tokens:
        result.tokens = tokenize_words(source)
    result.syntactic_errors.append(
        syntax_error(constants.NO_ANALYZER_MESSAGE.format(language=result.language))
    )
    return _finish(result, started)


def run_analysis(source: str, config: AnalysisConfig | None = None) -> AnalysisResult:
    """Analyze *source* end to end.

    Args:
        source: One complete source text.
        config: Optional settings; ``config.language`` skips detection.

    Returns:
        An AnalysisResult with tokens, the three diagnostic lists, the
        symbol table, trace lines, success flag and per-stage statistics.
    """
    config = config or AnalysisConfig()
    started = time.perf_counter()
    stats = PipelineStats(
        source_bytes=len(source.encode("utf-8")),
        source_lines=source.count("\n")
        + (1 if source and not source.endswith("\n") else 0),
    )

    # 1. Detect
    t0 = time.perf_counter()
    language = config.language or detect_language(source)
    stats.detect_time = time.perf_counter() - t0
    stats.language = language
    result = AnalysisResult(language=language, stats=stats)
    logger.info("Analyzing %d bytes as %s", stats.source_bytes, language)

    if language not in constants.SUPPORTED_LANGUAGES:
        return _no_analyzer(result, source, started)

    # 2. Lexical
    t0 = time.perf_counter()
    try:
        lexical = get_lexer(language).analyze_lexical(source)
    except ScannerConfigError as exc:
        logger.warning("Scanner fault for %s: %s", language, exc)
        stats.lexical_time = time.perf_counter() - t0
        result.lexical_errors.append(
            lexical_error(constants.SCANNER_FAULT_MESSAGE.format(detail=exc))
        )
        return _finish(result, started)
    except ValueError:
        return _no_analyzer(result, source, started)
    stats.lexical_time = time.perf_counter() - t0
    result.tokens = lexical.tokens
    result.lexical_errors = lexical.diagnostics
    result.symbols = lexical.symbols
    logger.info(
        "Lexer produced %d tokens in %.1fms", len(result.tokens), stats.lexical_time * 1000
    )

    # 3. Structural
    t0 = time.perf_counter()
    try:
        structural = get_structural_analyzer(language, indent_width=config.indent_width)
    except ValueError:
        return _no_analyzer(result, source, started)
    result.syntactic_errors = structural.analyze(result.tokens, language)
    stats.structural_time = time.perf_counter() - t0

    # 4. Semantic
    t0 = time.perf_counter()
    try:
        semantic = get_semantic_analyzer(language)
    except ValueError:
        return _no_analyzer(result, source, started)
    outcome = semantic.analyze(result.tokens, language, result.symbols)
    result.semantic_errors = outcome.diagnostics
    result.symbols = outcome.symbols
    stats.semantic_time = time.perf_counter() - t0

    # 5. Trace
    if config.trace:
        t0 = time.perf_counter()
        result.trace = simulate(result.tokens, language, result.symbols)
        stats.trace_time = time.perf_counter() - t0

    return _finish(result, started)
