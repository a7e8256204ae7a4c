"""End-to-end tests for run_analysis — success rule, fallbacks, config and stats."""

from __future__ import annotations

import pytest

from analyzer import pipeline
from analyzer.models import ErrorKind, Severity
from analyzer.pipeline import run_analysis
from analyzer.run_types import AnalysisConfig
from analyzer.scanner import ScannerConfigError

HTML_DOCUMENT = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Demo</title>
</head>
<body>
<h1>Hello</h1>
<a href="#">top</a>
</body>
</html>
"""

PYTHON_SOURCE = """\
def add(a, b):
    return a + b


print(add(1, 2))
"""

SQL_SOURCE = """\
CREATE TABLE users (id INT PRIMARY KEY, name VARCHAR(50));
INSERT INTO users (id, name) VALUES (1, 'Ann');
SELECT name FROM users WHERE id = 1;
"""


class _FaultyLexer:
    def analyze_lexical(self, source):
        raise ScannerConfigError("rule 'X' matched an empty lexeme")


class TestSuccessRule:
    @pytest.mark.parametrize("source", [HTML_DOCUMENT, PYTHON_SOURCE, SQL_SOURCE])
    def test_clean_sources_succeed(self, source):
        result = run_analysis(source)
        assert result.success
        assert result.lexical_errors == []
        assert result.syntactic_errors == []

    def test_languages_detected(self):
        assert run_analysis(HTML_DOCUMENT).language == "html"
        assert run_analysis(PYTHON_SOURCE).language == "python"
        assert run_analysis(SQL_SOURCE).language == "sql"

    def test_semantic_findings_are_advisory(self):
        result = run_analysis(HTML_DOCUMENT)
        assert result.success
        assert any(e.severity == Severity.WARNING for e in result.semantic_errors)

    def test_semantic_error_does_not_block(self):
        result = run_analysis("print(y)\n", AnalysisConfig(language="python"))
        assert result.success
        assert [e.message for e in result.semantic_errors] == ["Undeclared variable 'y'"]

    def test_lexical_error_fails(self):
        result = run_analysis("x = 1 $ 2\n", AnalysisConfig(language="python"))
        assert not result.success
        assert result.lexical_errors
        assert all(e.kind == ErrorKind.LEXICAL for e in result.lexical_errors)

    def test_blocking_syntax_error_fails(self):
        result = run_analysis("x = (1\n", AnalysisConfig(language="python"))
        assert not result.success
        assert any(e.is_blocking() for e in result.syntactic_errors)

    def test_every_stage_runs_despite_errors(self):
        result = run_analysis("x = (1\nprint(q)\n", AnalysisConfig(language="python"))
        assert result.syntactic_errors
        assert result.semantic_errors
        assert result.trace

    def test_backslash_continuation_succeeds(self):
        source = "total = 1 + \\\n    2\nprint(total)\n"
        result = run_analysis(source, AnalysisConfig(language="python"))
        assert result.success
        assert result.syntactic_errors == []


class TestFallbacks:
    def test_unknown_language(self):
        result = run_analysis("hello there")
        assert result.language == "unknown"
        assert not result.success
        assert [e.message for e in result.syntactic_errors] == [
            "No analyzer available for language: unknown"
        ]
        assert [t.kind for t in result.tokens] == ["WORD", "WORD"]
        assert result.trace == []

    def test_empty_source(self):
        result = run_analysis("")
        assert result.language == "unknown"
        assert result.tokens == []
        assert not result.success

    def test_scanner_fault_is_lexical(self, monkeypatch):
        monkeypatch.setattr(pipeline, "get_lexer", lambda language: _FaultyLexer())
        result = run_analysis("x = 1\n", AnalysisConfig(language="python"))
        assert not result.success
        assert len(result.lexical_errors) == 1
        assert result.lexical_errors[0].message.startswith("Scanner configuration fault")
        assert result.tokens == []


class TestConfig:
    def test_language_override_skips_detection(self):
        result = run_analysis(SQL_SOURCE, AnalysisConfig(language="python"))
        assert result.language == "python"

    def test_trace_disabled(self):
        assert run_analysis(PYTHON_SOURCE, AnalysisConfig(trace=False)).trace == []

    def test_indent_width(self):
        source = "if True:\n  x = 1\n  print(x)\n"
        narrow = run_analysis(source, AnalysisConfig(language="python", indent_width=2))
        default = run_analysis(source, AnalysisConfig(language="python"))
        assert narrow.success
        assert not default.success


class TestResult:
    @pytest.mark.parametrize("source", [HTML_DOCUMENT, PYTHON_SOURCE, SQL_SOURCE])
    def test_deterministic(self, source):
        assert run_analysis(source).to_dict() == run_analysis(source).to_dict()

    def test_stats_match_result(self):
        result = run_analysis(PYTHON_SOURCE)
        stats = result.stats
        assert stats.token_count == len(result.tokens)
        assert stats.symbol_count == len(result.symbols)
        assert stats.trace_lines == len(result.trace)
        assert stats.source_lines == 5
        assert stats.language == "python"
        assert "═══ Pipeline Statistics ═══" in stats.report()

    def test_symbols_from_semantic_phase(self):
        result = run_analysis(SQL_SOURCE)
        assert result.symbols["users.name"].data_type == "text"

    def test_all_errors_concatenates_phases(self):
        result = run_analysis("x = (1\nprint(q)\n", AnalysisConfig(language="python"))
        assert len(result.all_errors()) == (
            len(result.lexical_errors)
            + len(result.syntactic_errors)
            + len(result.semantic_errors)
        )
