"""Tests for SQL schema collection and reference/type checks."""

from analyzer.lexers.sql import SqlLexer
from analyzer.models import ErrorKind, Severity, SymbolKind
from analyzer.semantic import get_semantic_analyzer
from analyzer.semantic.sql import SqlSemanticAnalyzer, literal_matches

SCHEMA = """\
CREATE TABLE users (id INT PRIMARY KEY, name VARCHAR(50), born DATE);
CREATE TABLE orders (id INT, user_id INT REFERENCES users(id), total DECIMAL(10, 2));
"""


def _analyze(source: str):
    lexical = SqlLexer().analyze_lexical(source)
    return SqlSemanticAnalyzer().analyze(lexical.tokens, "sql", lexical.symbols)


def _messages(source: str) -> list[str]:
    return [e.message for e in _analyze(source).diagnostics]


class TestSchema:
    def test_clean_script(self):
        script = SCHEMA + (
            "SELECT name FROM users WHERE id = 1;\n"
            "INSERT INTO users (id, name, born) VALUES (1, 'Ann', '2000-01-31');\n"
            "UPDATE users SET name = 'Bo' WHERE id = 1;\n"
            "DELETE FROM orders WHERE total > 10;\n"
        )
        assert _messages(script) == []

    def test_tables_and_columns_recorded(self):
        symbols = _analyze(SCHEMA).symbols
        assert symbols["users"].kind == SymbolKind.TABLE
        column = symbols["users.name"]
        assert column.kind == SymbolKind.COLUMN
        assert column.data_type == "text"
        assert column.scope == "users"
        assert column.value == "VARCHAR"

    def test_duplicate_table(self):
        messages = _messages("CREATE TABLE t (a INT);\nCREATE TABLE t (b INT);")
        assert messages == ["Table 't' is already defined (line 1)"]

    def test_duplicate_column(self):
        messages = _messages("CREATE TABLE t (a INT, a TEXT);")
        assert messages == ["Duplicate column 'a' in table 't'"]

    def test_foreign_key_to_missing_table(self):
        messages = _messages("CREATE TABLE t (a INT REFERENCES missing(id));")
        assert messages == ["Foreign key t.a references undefined table 'missing'"]

    def test_foreign_key_to_missing_column(self):
        script = (
            "CREATE TABLE p (id INT);\n"
            "CREATE TABLE c (pid INT, FOREIGN KEY (pid) REFERENCES p(code));"
        )
        assert _messages(script) == ["Foreign key c.pid references undefined column 'p.code'"]

    def test_foreign_key_to_non_primary_column(self):
        script = (
            "CREATE TABLE p (id INT PRIMARY KEY, code INT);\n"
            "CREATE TABLE c (pcode INT REFERENCES p(code));"
        )
        outcome = _analyze(script)
        assert [e.message for e in outcome.diagnostics] == [
            "Foreign key c.pcode references 'p.code', which is not a primary key"
        ]
        assert outcome.diagnostics[0].severity == Severity.WARNING

    def test_default_value_type_mismatch(self):
        messages = _messages("CREATE TABLE t (n INT DEFAULT 'x');")
        assert messages == ["Default value 'x' is not compatible with column 't.n' (integer)"]

    def test_compatible_defaults(self):
        script = (
            "CREATE TABLE t"
            " (n INT DEFAULT -1, ok BOOLEAN DEFAULT FALSE, s TEXT DEFAULT 'a');"
        )
        assert _messages(script) == []

    def test_alter_adds_column(self):
        script = SCHEMA + "ALTER TABLE users ADD COLUMN email TEXT;\nSELECT email FROM users;"
        outcome = _analyze(script)
        assert outcome.diagnostics == []
        assert outcome.symbols["users.email"].data_type == "text"

    def test_alter_undefined_table(self):
        assert _messages("ALTER TABLE ghost ADD email TEXT;") == [
            "ALTER TABLE of undefined table 'ghost'"
        ]

    def test_index_on_undefined_table(self):
        assert _messages("CREATE INDEX idx ON ghost (a);") == [
            "CREATE INDEX on undefined table 'ghost'"
        ]

    def test_index_on_unknown_column(self):
        messages = _messages(SCHEMA + "CREATE UNIQUE INDEX idx ON users (email);")
        assert messages == ["Column 'email' does not exist in table 'users'"]


class TestSelect:
    def test_undefined_table_is_semantic(self):
        outcome = _analyze("SELECT a FROM ghost;")
        assert [e.message for e in outcome.diagnostics] == ["Table 'ghost' is not defined"]
        assert outcome.diagnostics[0].kind == ErrorKind.SEMANTIC

    def test_unknown_column(self):
        messages = _messages(SCHEMA + "SELECT email FROM users;")
        assert messages == ["Column 'email' does not exist in table(s) users"]

    def test_unknown_column_in_where(self):
        messages = _messages(SCHEMA + "SELECT name FROM users WHERE age > 3;")
        assert messages == ["Column 'age' does not exist in table(s) users"]

    def test_aliased_columns(self):
        script = SCHEMA + (
            "SELECT u.name, o.nope FROM users u JOIN orders o ON u.id = o.user_id;"
        )
        assert _messages(script) == ["Column 'nope' does not exist in table 'orders'"]

    def test_unknown_alias(self):
        messages = _messages(SCHEMA + "SELECT z.name FROM users;")
        assert messages == ["Unknown table or alias 'z'"]

    def test_subquery_checked_against_its_own_tables(self):
        script = SCHEMA + "SELECT name FROM users WHERE id IN (SELECT user_id FROM orders);"
        assert _messages(script) == []

    def test_unknown_column_in_subquery(self):
        script = SCHEMA + "SELECT name FROM users WHERE id IN (SELECT nope FROM orders);"
        assert _messages(script) == ["Column 'nope' does not exist in table(s) orders, users"]

    def test_correlated_subquery_sees_outer_alias(self):
        script = SCHEMA + (
            "SELECT u.name FROM users u"
            " WHERE EXISTS (SELECT o.id FROM orders o WHERE o.user_id = u.id);"
        )
        assert _messages(script) == []

    def test_column_outside_group_by(self):
        script = SCHEMA + "SELECT name, born, COUNT(*) FROM users GROUP BY name;"
        assert _messages(script) == [
            "Column 'born' must appear in GROUP BY or be used in an aggregate function"
        ]

    def test_aggregate_without_group_by(self):
        messages = _messages(SCHEMA + "SELECT name, COUNT(*) FROM users;")
        assert messages == [
            "Column 'name' must appear in GROUP BY or be used in an aggregate function"
        ]

    def test_grouped_aggregate_is_clean(self):
        script = SCHEMA + "SELECT user_id, SUM(total) FROM orders GROUP BY user_id;"
        assert _messages(script) == []


class TestInsert:
    def test_value_count_mismatch(self):
        messages = _messages(SCHEMA + "INSERT INTO users (id, name) VALUES (1);")
        assert messages == ["INSERT into 'users' has 1 value(s) for 2 column(s)"]

    def test_type_mismatch(self):
        messages = _messages(SCHEMA + "INSERT INTO users (id, name) VALUES ('x', 'Ann');")
        assert messages == ["Type mismatch for column 'users.id': expected integer but got 'x'"]

    def test_date_pattern(self):
        messages = _messages(SCHEMA + "INSERT INTO users (id, born) VALUES (1, '31/01/2000');")
        assert messages == [
            "Type mismatch for column 'users.born': expected date but got '31/01/2000'"
        ]

    def test_unknown_column(self):
        messages = _messages(SCHEMA + "INSERT INTO users (id, email) VALUES (1, 'a');")
        assert messages == ["Column 'email' does not exist in table 'users'"]

    def test_insert_without_values_is_warning(self):
        outcome = _analyze(SCHEMA + "INSERT INTO users (id);")
        assert [e.message for e in outcome.diagnostics] == ["INSERT without VALUES"]
        assert outcome.diagnostics[0].severity == Severity.WARNING

    def test_null_accepted_for_any_type(self):
        assert _messages(SCHEMA + "INSERT INTO users (id, name) VALUES (1, NULL);") == []


class TestUpdateDeleteDrop:
    def test_primary_key_set_to_null(self):
        messages = _messages(SCHEMA + "UPDATE users SET id = NULL WHERE name = 'a';")
        assert messages == ["Constraint violation: primary key column 'id' set to NULL"]

    def test_column_named_id_treated_as_key(self):
        messages = _messages(SCHEMA + "UPDATE orders SET id = NULL WHERE total > 1;")
        assert messages == ["Constraint violation: primary key column 'id' set to NULL"]

    def test_update_unknown_column(self):
        messages = _messages(SCHEMA + "UPDATE users SET email = 'a' WHERE id = 1;")
        assert messages == ["Column 'email' does not exist in table 'users'"]

    def test_delete_without_where(self):
        outcome = _analyze(SCHEMA + "DELETE FROM users;")
        assert [e.message for e in outcome.diagnostics] == [
            "DELETE without WHERE removes all rows"
        ]
        assert outcome.diagnostics[0].severity == Severity.WARNING
        assert outcome.diagnostics[0].suggestion

    def test_delete_with_where(self):
        assert _messages(SCHEMA + "DELETE FROM users WHERE id = 1;") == []

    def test_drop_undefined_table(self):
        assert _messages("DROP TABLE ghost;") == ["DROP TABLE of undefined table 'ghost'"]

    def test_drop_if_exists_is_silent(self):
        assert _messages("DROP TABLE IF EXISTS ghost;") == []


class TestLiteralMatches:
    def test_families(self):
        lexer = SqlLexer()
        assert literal_matches("integer", lexer.tokenize("-5"))
        assert not literal_matches("integer", lexer.tokenize("1.5"))
        assert literal_matches("numeric", lexer.tokenize("1.5"))
        assert literal_matches("bool", lexer.tokenize("TRUE"))
        assert literal_matches("unknown", lexer.tokenize("'x'"))

    def test_registry(self):
        assert isinstance(get_semantic_analyzer("sql"), SqlSemanticAnalyzer)


class TestTypeNamedColumns:
    EVENTS = "CREATE TABLE events (id INT, date DATE, text VARCHAR(20));\n"

    def test_insert_into_type_named_columns(self):
        script = (
            "CREATE TABLE events (id INT, date DATE);"
            " INSERT INTO events (id, date) VALUES (1, '2024-01-01');"
        )
        assert _messages(script) == []

    def test_type_named_columns_recorded(self):
        symbols = _analyze(self.EVENTS).symbols
        assert symbols["events.date"].data_type == "date"
        assert symbols["events.text"].data_type == "text"

    def test_select_and_update_type_named_columns(self):
        script = self.EVENTS + (
            "SELECT date, text FROM events WHERE date = '2024-01-01';\n"
            "UPDATE events SET text = 'x' WHERE id = 1;\n"
        )
        assert _messages(script) == []

    def test_type_checked_for_type_named_column(self):
        messages = _messages(self.EVENTS + "INSERT INTO events (id, date) VALUES (1, 'soon');")
        assert messages == [
            "Type mismatch for column 'events.date': expected date but got 'soon'"
        ]
