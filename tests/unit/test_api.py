"""Tests for the composable API functions in analyzer.api."""

from analyzer.api import (
    detect,
    dump_diagnostics,
    dump_symbols,
    dump_tokens,
    tokenize_source,
)
from analyzer.models import Token

SIMPLE_SOURCE = "x = 1\nprint(x)\n"

SQL_SOURCE = "SELECT a FROM t;"


class TestDetect:
    def test_sql(self):
        assert detect(SQL_SOURCE) == "sql"

    def test_python(self):
        assert detect(SIMPLE_SOURCE) == "python"

    def test_blank_is_unknown(self):
        assert detect("   \n") == "unknown"


class TestTokenizeSource:
    def test_returns_list_of_tokens(self):
        result = tokenize_source(SIMPLE_SOURCE)
        assert all(isinstance(tok, Token) for tok in result)

    def test_language_parameter(self):
        kinds = [tok.kind for tok in tokenize_source("x = 1", language="python")]
        assert kinds == ["IDENTIFIER", "OPERATOR", "NUMBER"]

    def test_unknown_language_falls_back_to_words(self):
        result = tokenize_source("hello  there\nfriend")
        assert [tok.kind for tok in result] == ["WORD", "WORD", "WORD"]
        assert (result[2].line, result[2].column) == (2, 1)


class TestDumpTokens:
    def test_one_token_per_line(self):
        result = dump_tokens("x = 1", language="python")
        assert len(result.splitlines()) == 3
        assert "IDENTIFIER" in result


class TestDumpSymbols:
    def test_contains_variable(self):
        result = dump_symbols(SIMPLE_SOURCE, language="python")
        assert "x: x [variable] type=int" in result

    def test_sql_keys(self):
        result = dump_symbols("CREATE TABLE t (a INT);", language="sql")
        assert "t.a: a [column] type=integer" in result


class TestDumpDiagnostics:
    def test_semantic_finding(self):
        result = dump_diagnostics("print(y)\n", language="python")
        assert "[semantic] (1:7) Undeclared variable 'y'" in result

    def test_clean_source_is_empty(self):
        assert dump_diagnostics(SIMPLE_SOURCE, language="python") == ""
