"""Tests for the Python scanner and its lexical diagnostics."""

import pytest

from analyzer.lexers import get_lexer
from analyzer.lexers import python as lex
from analyzer.lexers.python import PythonLexer, literal_type
from analyzer.models import ErrorKind, SymbolKind


def _tokens(source: str):
    return PythonLexer().tokenize(source)


def _kinds(source: str) -> list[str]:
    return [t.kind for t in _tokens(source)]


class TestPythonTokens:
    def test_simple_assignment(self):
        tokens = _tokens("x = 1\n")
        assert [(t.kind, t.value) for t in tokens] == [
            (lex.IDENTIFIER, "x"),
            (lex.OPERATOR, "="),
            (lex.NUMBER, "1"),
        ]

    def test_positions(self):
        tokens = _tokens("x = 1\ny = 22")
        assert tokens[3].position == "2:1"
        assert tokens[5].position == "2:5"

    def test_keyword_requires_word_boundary(self):
        tokens = _tokens("def define")
        assert [t.kind for t in tokens] == [lex.KEYWORD, lex.IDENTIFIER]

    def test_print_is_identifier(self):
        assert _kinds("print") == [lex.IDENTIFIER]

    def test_number_subkinds(self):
        tokens = _tokens("0x1F 0b101 0o17 1.5 1e5 3j 42")
        assert [t.subkind for t in tokens] == [
            "hex",
            "binary",
            "octal",
            "float",
            "float",
            "complex",
            "int",
        ]

    def test_string_prefix_recorded(self):
        tokens = _tokens("rb'x' f\"y\" 'z'")
        assert [t.subkind for t in tokens] == ["rb", "f", None]

    def test_triple_quoted_string(self):
        tokens = _tokens('"""doc\nstring"""\nx')
        assert tokens[0].kind == lex.STRING
        assert tokens[0].subkind == "triple"
        assert tokens[1].position == "3:1"

    def test_delimiters_and_separators(self):
        tokens = _tokens("f(a, b): ...")
        kinds = [(t.kind, t.value) for t in tokens]
        assert (lex.SEPARATOR, "(") in kinds
        assert (lex.DELIMITER, ",") in kinds
        assert (lex.DELIMITER, ":") in kinds
        assert (lex.DELIMITER, "...") in kinds

    def test_compound_operators(self):
        tokens = _tokens("a **= b // c")
        assert [t.value for t in tokens if t.kind == lex.OPERATOR] == ["**=", "//"]

    def test_comment_kept_as_token(self):
        assert _kinds("x  # note") == [lex.IDENTIFIER, lex.COMMENT]

    def test_line_continuation_token(self):
        tokens = _tokens("x = 1 + \\\n    2")
        assert tokens[4].kind == lex.LINE_CONTINUATION
        assert tokens[5].position == "2:5"


class TestPythonLexicalErrors:
    def test_unterminated_string(self):
        assert _kinds('x = "abc\n') == [
            lex.IDENTIFIER,
            lex.OPERATOR,
            lex.ERROR_UNTERMINATED_STRING,
        ]

    def test_unterminated_triple_string(self):
        assert _kinds("'''never closed\nstill open") == [lex.ERROR_UNTERMINATED_TRIPLE_STRING]

    def test_number_with_two_dots(self):
        assert _kinds("1.2.3") == [lex.ERROR_NUMBER_MULTI_DOT]

    def test_bad_binary_digit(self):
        assert _kinds("0b102") == [lex.ERROR_BINARY_LITERAL]

    def test_identifier_starting_with_digit(self):
        assert _kinds("3abc") == [lex.ERROR_IDENTIFIER]

    def test_repeated_operator(self):
        assert lex.ERROR_OPERATOR_SEQUENCE in _kinds("a +++ b")

    def test_malformed_comment(self):
        assert _kinds("/# nope") == [lex.ERROR_COMMENT]

    def test_invalid_character(self):
        assert _kinds("$") == ["INVALID"]

    def test_diagnostics_returned_not_written(self):
        outcome = PythonLexer().analyze_lexical('s = "open\nn = 1\n')
        assert len(outcome.diagnostics) == 1
        diagnostic = outcome.diagnostics[0]
        assert diagnostic.kind == ErrorKind.LEXICAL
        assert diagnostic.message.startswith("Unterminated string literal")
        assert (diagnostic.line, diagnostic.column) == (1, 5)
        assert diagnostic.suggestion

    def test_clean_source_has_no_diagnostics(self):
        assert PythonLexer().analyze_lexical("x = [1, 2]\n").diagnostics == []


class TestPythonLexicalSymbols:
    def test_function_and_class_names(self):
        symbols = PythonLexer().analyze_lexical("class A:\n    def f(self):\n        pass\n").symbols
        assert symbols["A"].kind == SymbolKind.CLASS
        assert symbols["f"].kind == SymbolKind.FUNCTION

    def test_literals_are_constants(self):
        symbols = PythonLexer().analyze_lexical("x = 42\n").symbols
        assert symbols["42"].kind == SymbolKind.CONSTANT
        assert symbols["42"].data_type == "int"
        assert symbols["x"].kind == SymbolKind.UNKNOWN

    def test_literal_type(self):
        tokens = _tokens("b'x' 1.0 True None 7")
        assert [literal_type(t) for t in tokens] == ["bytes", "float", "bool", "NoneType", "int"]


class TestLexerRegistry:
    def test_registry_returns_python_lexer(self):
        assert isinstance(get_lexer("python"), PythonLexer)

    def test_unknown_language_raises(self):
        with pytest.raises(ValueError, match="Unsupported language"):
            get_lexer("cobol")
