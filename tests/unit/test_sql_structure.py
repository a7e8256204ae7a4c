"""Tests for SQL statement splitting and clause checks."""

from analyzer.lexers.sql import SqlLexer
from analyzer.structural.sql import SqlStructuralAnalyzer, split_statements


def _messages(source: str) -> list[str]:
    tokens = SqlLexer().tokenize(source)
    return [e.message for e in SqlStructuralAnalyzer().analyze(tokens, "sql")]


class TestSplitStatements:
    def test_split_on_semicolon(self):
        tokens = SqlLexer().tokenize("SELECT 1 FROM a; SELECT 2 FROM b;")
        assert len(split_statements(tokens)) == 2

    def test_split_on_statement_keyword(self):
        tokens = SqlLexer().tokenize("DELETE FROM a WHERE id = 1\nSELECT x FROM b")
        statements = split_statements(tokens)
        assert [s[0].value for s in statements] == ["DELETE", "SELECT"]

    def test_nested_select_stays_in_statement(self):
        tokens = SqlLexer().tokenize(
            "SELECT a FROM t WHERE a IN (SELECT b FROM u) UNION SELECT c FROM v;"
        )
        assert len(split_statements(tokens)) == 1

    def test_insert_select_stays_together(self):
        tokens = SqlLexer().tokenize("INSERT INTO t (a) SELECT a FROM u;")
        assert len(split_statements(tokens)) == 1


class TestValidStatements:
    def test_clean_script(self):
        script = """\
CREATE TABLE users (id INT PRIMARY KEY, name VARCHAR(50));
INSERT INTO users (id, name) VALUES (1, 'Ann'), (2, 'Bob');
SELECT name FROM users WHERE id = 1 ORDER BY name;
UPDATE users SET name = 'Cy' WHERE id = 2;
DELETE FROM users WHERE id = 2;
DROP TABLE IF EXISTS users;
"""
        assert _messages(script) == []


class TestSelect:
    def test_missing_from(self):
        assert "SELECT without FROM" in _messages("SELECT name;")

    def test_missing_columns(self):
        assert "SELECT requires a column list" in _messages("SELECT FROM t;")

    def test_missing_table(self):
        assert "FROM must be followed by a table name" in _messages("SELECT a FROM;")

    def test_clause_order(self):
        messages = _messages("SELECT a FROM t ORDER BY a WHERE a = 1;")
        assert "WHERE clause must come before ORDER" in messages

    def test_group_requires_by(self):
        assert "GROUP must be followed by BY" in _messages("SELECT a FROM t GROUP a;")

    def test_where_without_condition(self):
        assert "WHERE requires a condition" in _messages("SELECT a FROM t WHERE;")

    def test_unbalanced_where(self):
        assert "Unclosed '(' in WHERE condition" in _messages(
            "SELECT a FROM t WHERE (a = 1;"
        )


class TestInsert:
    def test_missing_into(self):
        assert "INSERT must include INTO" in _messages("INSERT t VALUES (1);")

    def test_missing_values(self):
        assert "INSERT must include VALUES" in _messages("INSERT INTO t (a);")

    def test_values_without_list(self):
        messages = _messages("INSERT INTO t VALUES 1;")
        assert "VALUES must be followed by a parenthesized list" in messages

    def test_unclosed_values(self):
        assert "Unclosed VALUES list" in _messages("INSERT INTO t VALUES (1, 2;")


class TestOtherStatements:
    def test_update_without_set(self):
        assert "UPDATE must include SET" in _messages("UPDATE t WHERE a = 1;")

    def test_update_bad_assignment(self):
        assert "SET requires column = value assignments" in _messages("UPDATE t SET 5;")

    def test_update_column_named_after_type(self):
        assert _messages("UPDATE events SET date = '2024-01-02' WHERE id = 1;") == []

    def test_delete_without_from(self):
        assert "DELETE must include FROM" in _messages("DELETE t WHERE a = 1;")

    def test_create_without_object(self):
        messages = _messages("CREATE users (id INT);")
        assert "CREATE must be followed by TABLE, INDEX, VIEW or DATABASE" in messages

    def test_create_table_unbalanced(self):
        assert "Unbalanced parentheses in CREATE TABLE" in _messages(
            "CREATE TABLE t (id INT;"
        )

    def test_create_table_empty(self):
        assert "CREATE TABLE requires at least one column" in _messages("CREATE TABLE t ();")

    def test_drop_without_name(self):
        assert "DROP TABLE requires a name" in _messages("DROP TABLE;")

    def test_unrecognized_statement(self):
        assert "Unrecognized statement starting with 'users'" in _messages("users;")
