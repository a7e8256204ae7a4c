"""Tests for the shared data model and the symbol table."""

import pydantic
import pytest

from analyzer.models import (
    AnalysisError,
    ErrorKind,
    Severity,
    Symbol,
    SymbolKind,
    Token,
    lexical_error,
    semantic_warning,
    syntax_error,
)
from analyzer.symbol_table import SymbolTable


class TestToken:
    def test_negative_positions_clamped(self):
        tok = Token(value="x", kind="IDENTIFIER", line=-3, column=-1)
        assert (tok.line, tok.column) == (0, 0)

    def test_frozen(self):
        tok = Token(value="x", kind="IDENTIFIER", line=1, column=1)
        with pytest.raises(pydantic.ValidationError):
            tok.value = "y"

    def test_error_kinds(self):
        assert Token(value="'", kind="ERROR_UNTERMINATED_STRING", line=1, column=1).is_error()
        assert Token(value="$", kind="INVALID", line=1, column=1).is_error()
        assert not Token(value="x", kind="IDENTIFIER", line=1, column=1).is_error()

    def test_str_includes_position_and_kind(self):
        tok = Token(value="42", kind="NUMBER", line=2, column=5, subkind="int")
        text = str(tok)
        assert "2:5" in text
        assert "NUMBER/int" in text


class TestAnalysisError:
    def test_defaults_to_positionless_error(self):
        err = AnalysisError(message="boom", kind=ErrorKind.SEMANTIC)
        assert (err.line, err.column) == (0, 0)
        assert err.severity == Severity.ERROR

    def test_full_message_with_suggestion(self):
        err = lexical_error("Bad token", 3, 4, suggestion="Remove it")
        assert err.full_message == "[lexical] (3:4) Bad token - Remove it"

    def test_only_syntactic_errors_block(self):
        assert syntax_error("x").is_blocking()
        assert not syntax_error("x", severity=Severity.WARNING).is_blocking()
        assert not lexical_error("x").is_blocking()
        assert not semantic_warning("x").is_blocking()

    def test_semantic_warning_severity(self):
        warning = semantic_warning("careful", 1, 2)
        assert warning.kind == ErrorKind.SEMANTIC
        assert warning.severity == Severity.WARNING


def _symbol(name: str, kind: SymbolKind = SymbolKind.VARIABLE, scope: str = "global"):
    return Symbol(name=name, kind=kind, scope=scope)


class TestSymbolTable:
    def test_put_last_writer_wins(self):
        table = SymbolTable()
        table.put("x", _symbol("x"))
        table.put("x", _symbol("x", SymbolKind.FUNCTION))
        assert table["x"].kind == SymbolKind.FUNCTION
        assert len(table) == 1

    def test_declare_keeps_first(self):
        table = SymbolTable()
        table.declare("x", _symbol("x"))
        stored = table.declare("x", _symbol("x", SymbolKind.FUNCTION))
        assert stored.kind == SymbolKind.VARIABLE

    def test_copy_is_independent(self):
        table = SymbolTable()
        table.put("x", _symbol("x"))
        snapshot = table.copy()
        snapshot["x"].initialized = True
        snapshot.put("y", _symbol("y"))
        assert not table["x"].initialized
        assert "y" not in table

    def test_of_kind_and_scoped_to(self):
        table = SymbolTable()
        table.put("users", _symbol("users", SymbolKind.TABLE))
        table.put("users.id", _symbol("id", SymbolKind.COLUMN, scope="users"))
        table.put("users.name", _symbol("name", SymbolKind.COLUMN, scope="users"))
        assert list(table.of_kind(SymbolKind.TABLE)) == ["users"]
        assert sorted(s.name for s in table.scoped_to("users")) == ["id", "name"]

    def test_to_dict_sorted_and_json_ready(self):
        table = SymbolTable()
        table.put("b", _symbol("b"))
        table.put("a", _symbol("a", SymbolKind.CLASS))
        dumped = table.to_dict()
        assert list(dumped) == ["a", "b"]
        assert dumped["a"]["kind"] == "class"
