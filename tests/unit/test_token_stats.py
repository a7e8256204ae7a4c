"""Tests for token and diagnostic statistics: count_kinds, count_severities and the API wrapper."""

from analyzer.api import token_kind_stats
from analyzer.models import Token, semantic_error, semantic_warning
from analyzer.token_stats import count_kinds, count_severities


def _token(value: str, kind: str) -> Token:
    return Token(value=value, kind=kind, line=1, column=1)


class TestCountKinds:
    def test_empty_list_returns_empty_dict(self):
        assert count_kinds([]) == {}

    def test_repeated_kinds_are_summed(self):
        tokens = [_token("x", "IDENTIFIER"), _token("=", "OPERATOR"), _token("y", "IDENTIFIER")]
        assert count_kinds(tokens) == {"IDENTIFIER": 2, "OPERATOR": 1}


class TestCountSeverities:
    def test_errors_and_warnings(self):
        errors = [semantic_error("a"), semantic_warning("b"), semantic_warning("c")]
        assert count_severities(errors) == {"error": 1, "warning": 2}

    def test_empty(self):
        assert count_severities([]) == {}


class TestTokenKindStats:
    def test_python_assignment(self):
        assert token_kind_stats("x = 1\n", "python") == {
            "IDENTIFIER": 1,
            "OPERATOR": 1,
            "NUMBER": 1,
        }

    def test_total_matches_token_count(self):
        source = "SELECT a, b FROM t;"
        stats = token_kind_stats(source, "sql")
        assert sum(stats.values()) == 7
