"""Tests for the SQL alternation scanner and its lexical diagnostics."""

from analyzer.lexers import sql as lex
from analyzer.lexers.sql import SqlLexer, normalize
from analyzer.models import SymbolKind


def _tokens(source: str):
    return SqlLexer().tokenize(source)


def _kinds(source: str) -> list[str]:
    return [t.kind for t in _tokens(source)]


class TestSqlTokens:
    def test_simple_select(self):
        tokens = _tokens("SELECT name FROM users;")
        assert [(t.kind, t.subkind) for t in tokens] == [
            (lex.KEYWORD, "dml"),
            (lex.IDENTIFIER, None),
            (lex.KEYWORD, "clause"),
            (lex.IDENTIFIER, None),
            (lex.PUNCTUATION, None),
        ]

    def test_keywords_case_insensitive(self):
        assert _kinds("select * from t") == [
            lex.KEYWORD,
            lex.OPERATOR,
            lex.KEYWORD,
            lex.IDENTIFIER,
        ]

    def test_data_type_family(self):
        tokens = _tokens("id INT, name VARCHAR(50), born DATE")
        families = [t.subkind for t in tokens if t.kind == lex.DATA_TYPE]
        assert families == ["integer", "text", "date"]

    def test_literals(self):
        tokens = _tokens("1 2.5 'it''s' TRUE NULL")
        assert [(t.kind, t.subkind) for t in tokens] == [
            (lex.NUMBER, "integer"),
            (lex.NUMBER, "decimal"),
            (lex.STRING, None),
            (lex.BOOLEAN, None),
            (lex.NULL, None),
        ]

    def test_quoted_identifiers(self):
        tokens = _tokens('`order` [user name] "total"')
        assert all(t.kind == lex.QUOTED_IDENTIFIER for t in tokens)
        assert [normalize(t) for t in tokens] == ["order", "user name", "total"]

    def test_comments(self):
        assert _kinds("-- note\nSELECT /* inline */ 1") == [
            lex.COMMENT,
            lex.KEYWORD,
            lex.COMMENT,
            lex.NUMBER,
        ]

    def test_columns_run_on_across_lines(self):
        tokens = _tokens("SELECT a\nFROM t")
        assert tokens[2].line == 2
        assert tokens[2].column == 10

    def test_normalize_keywords_and_identifiers(self):
        tokens = _tokens("select Users")
        assert [normalize(t) for t in tokens] == ["SELECT", "users"]


class TestSqlLexicalErrors:
    def test_misspelled_keyword_with_suggestion(self):
        outcome = SqlLexer().analyze_lexical("SELEC * FROM t;")
        assert len(outcome.diagnostics) == 1
        assert outcome.diagnostics[0].suggestion == "Did you mean SELECT?"

    def test_malformed_number(self):
        assert _kinds("1.2.3") == [lex.ERROR_NUMBER]

    def test_identifier_starting_with_digit(self):
        assert _kinds("2abc") == [lex.ERROR_IDENTIFIER]

    def test_unterminated_string(self):
        assert _kinds("'abc\n") == [lex.ERROR_UNTERMINATED_STRING]

    def test_unterminated_block_comment(self):
        assert _kinds("/* open\nSELECT 1") == [lex.ERROR_UNTERMINATED_COMMENT]

    def test_invalid_character(self):
        assert _kinds("SELECT @") == [lex.KEYWORD, "INVALID"]


class TestSqlLexicalSymbols:
    def test_identifiers_keyed_lower_case(self):
        symbols = SqlLexer().analyze_lexical("SELECT Name FROM Users").symbols
        assert symbols["name"].kind == SymbolKind.UNKNOWN
        assert "users" in symbols

    def test_literals_are_constants(self):
        symbols = SqlLexer().analyze_lexical("SELECT 1, 'a'").symbols
        assert symbols["1"].data_type == "integer"
        assert symbols["'a'"].data_type == "text"
