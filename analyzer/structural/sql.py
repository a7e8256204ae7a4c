"""Cursor-driven clause presence and order checks for SQL statements."""

from __future__ import annotations

import logging
from typing import Callable

from ..lexers import sql as lex
from ..models import AnalysisError, Token, syntax_error
from ._base import StructuralAnalyzer

logger = logging.getLogger(__name__)

OBJECT_KINDS: frozenset[str] = frozenset({"TABLE", "INDEX", "VIEW", "DATABASE", "SCHEMA"})
NAME_KINDS: frozenset[str] = frozenset({lex.IDENTIFIER, lex.QUOTED_IDENTIFIER})

# Clause keyword → position in the canonical SELECT clause order.
_SELECT_CLAUSE_ORDER: dict[str, int] = {
    "FROM": 0,
    "WHERE": 1,
    "GROUP": 2,
    "HAVING": 3,
    "ORDER": 4,
    "LIMIT": 5,
}
_CONDITION_TERMINATORS: frozenset[str] = frozenset(
    {"GROUP", "ORDER", "HAVING", "LIMIT", "UNION"}
)


def word(token: Token) -> str:
    return lex.normalize(token)


def is_punct(token: Token, value: str) -> bool:
    return token.kind == lex.PUNCTUATION and token.value == value


def split_statements(tokens: list[Token]) -> list[list[Token]]:
    """Split at top-level ``;`` and at statement keywords that start a new statement.

    A nested ``SELECT`` (inside parentheses, after ``UNION``, or feeding an
    ``INSERT``/``CREATE ... AS``) stays in its enclosing statement.
    """
    statements: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    for tok in tokens:
        if tok.kind == lex.COMMENT:
            continue
        if is_punct(tok, "("):
            depth += 1
        elif is_punct(tok, ")"):
            depth -= 1
        if depth <= 0 and is_punct(tok, ";"):
            if current:
                statements.append(current)
            current = []
            depth = 0
            continue
        if (
            current
            and depth <= 0
            and tok.kind == lex.KEYWORD
            and word(tok) in lex.STATEMENT_KEYWORDS
            and not _continues_statement(current, tok)
        ):
            statements.append(current)
            current = []
        current.append(tok)
    if current:
        statements.append(current)
    return statements


def _continues_statement(current: list[Token], tok: Token) -> bool:
    if word(tok) != "SELECT":
        return False
    leader = word(current[0])
    previous = word(current[-1])
    return leader in ("INSERT", "CREATE") or previous in ("UNION", "ALL", "AS")


class _Cursor:
    """Forward-only walk over one statement's tokens."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def advance(self) -> Token | None:
        tok = self.peek()
        if tok is not None:
            self.pos += 1
        return tok

    def accept(self, *words: str) -> Token | None:
        tok = self.peek()
        if tok is not None and word(tok) in words:
            self.pos += 1
            return tok
        return None

    def accept_kind(self, kind: str) -> Token | None:
        tok = self.peek()
        if tok is not None and tok.kind == kind:
            self.pos += 1
            return tok
        return None

    def accept_name(self) -> Token | None:
        tok = self.peek()
        if tok is not None and tok.kind in NAME_KINDS:
            self.pos += 1
            while self._qualified_part():
                self.pos += 2
            return tok
        return None

    def _qualified_part(self) -> bool:
        if self.pos + 1 >= len(self.tokens):
            return False
        return (
            is_punct(self.tokens[self.pos], ".")
            and self.tokens[self.pos + 1].kind in NAME_KINDS
        )

    def find(self, *words: str) -> int:
        """Index of the next top-level token matching *words*, or -1."""
        depth = 0
        for index in range(self.pos, len(self.tokens)):
            tok = self.tokens[index]
            if is_punct(tok, "("):
                depth += 1
            elif is_punct(tok, ")"):
                depth -= 1
            elif depth <= 0 and word(tok) in words:
                return index
        return -1

    def skip_parenthesized(self) -> bool:
        """Consume a balanced ``( ... )`` group; False if it never closes."""
        depth = 0
        while not self.at_end():
            tok = self.advance()
            if is_punct(tok, "("):
                depth += 1
            elif is_punct(tok, ")"):
                depth -= 1
                if depth == 0:
                    return True
        return False

    def location(self, fallback: Token) -> tuple[int, int]:
        tok = self.peek() or fallback
        return tok.line, tok.column


class SqlStructuralAnalyzer(StructuralAnalyzer):
    LANGUAGE = "sql"

    def __init__(self):
        self._dispatch: dict[str, Callable[[_Cursor, Token], list[AnalysisError]]] = {
            "SELECT": self._check_select,
            "INSERT": self._check_insert,
            "UPDATE": self._check_update,
            "DELETE": self._check_delete,
            "CREATE": self._check_create,
            "DROP": self._check_drop,
            "ALTER": self._check_alter,
            "TRUNCATE": self._check_truncate,
        }

    def analyze(self, tokens: list[Token], language: str) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        for statement in split_statements(tokens):
            leader = statement[0]
            handler = self._dispatch.get(word(leader))
            if handler is None:
                errors.append(
                    syntax_error(
                        f"Unrecognized statement starting with '{leader.value}'",
                        leader.line,
                        leader.column,
                    )
                )
                continue
            cursor = _Cursor(statement)
            cursor.advance()
            errors.extend(handler(cursor, leader))
        logger.debug("sql structure: %d diagnostics", len(errors))
        return errors

    # ── statements ───────────────────────────────────────────────

    def _check_select(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        cursor.accept("DISTINCT", "ALL")
        nxt = cursor.peek()
        if nxt is None or word(nxt) == "FROM":
            errors.append(
                syntax_error(
                    "SELECT requires a column list", *cursor.location(leader)
                )
            )
        from_index = cursor.find("FROM")
        if from_index < 0:
            errors.append(syntax_error("SELECT without FROM", leader.line, leader.column))
            errors.extend(self._check_balance(cursor.tokens, leader, "SELECT"))
            return errors
        cursor.pos = from_index + 1
        if cursor.accept_name() is None and not is_punct(cursor.peek() or leader, "("):
            errors.append(
                syntax_error(
                    "FROM must be followed by a table name", *cursor.location(leader)
                )
            )
        errors.extend(self._check_clause_order(cursor.tokens[from_index:]))
        errors.extend(self._check_where(cursor, leader, "SELECT"))
        return errors

    def _check_insert(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        if cursor.accept("INTO") is None:
            errors.append(
                syntax_error("INSERT must include INTO", *cursor.location(leader))
            )
        if cursor.accept_name() is None:
            errors.append(
                syntax_error("INSERT INTO requires a table name", *cursor.location(leader))
            )
        nxt = cursor.peek()
        if nxt is not None and is_punct(nxt, "("):
            if not cursor.skip_parenthesized():
                errors.append(
                    syntax_error("Unclosed column list in INSERT", nxt.line, nxt.column)
                )
                return errors
        if cursor.accept("SELECT") is not None:
            return errors
        if cursor.accept("VALUES") is None:
            errors.append(
                syntax_error("INSERT must include VALUES", *cursor.location(leader))
            )
            return errors
        while True:
            group = cursor.peek()
            if group is None or not is_punct(group, "("):
                errors.append(
                    syntax_error(
                        "VALUES must be followed by a parenthesized list",
                        *cursor.location(leader),
                    )
                )
                break
            if not cursor.skip_parenthesized():
                errors.append(
                    syntax_error("Unclosed VALUES list", group.line, group.column)
                )
                break
            nxt = cursor.peek()
            if nxt is None or not is_punct(nxt, ","):
                break
            cursor.advance()
        extra = cursor.peek()
        if extra is not None:
            errors.append(
                syntax_error(
                    f"Unexpected '{extra.value}' after VALUES list",
                    extra.line,
                    extra.column,
                )
            )
        return errors

    def _check_update(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        if cursor.accept_name() is None:
            errors.append(
                syntax_error("UPDATE requires a table name", *cursor.location(leader))
            )
        set_index = cursor.find("SET")
        if set_index < 0:
            errors.append(syntax_error("UPDATE must include SET", leader.line, leader.column))
        else:
            cursor.pos = set_index + 1
            name = cursor.accept_name() or cursor.accept_kind(lex.DATA_TYPE)
            nxt = cursor.peek()
            if name is None or nxt is None or nxt.value != "=":
                errors.append(
                    syntax_error(
                        "SET requires column = value assignments",
                        *cursor.location(leader),
                    )
                )
        errors.extend(self._check_where(cursor, leader, "UPDATE"))
        return errors

    def _check_delete(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        if cursor.accept("FROM") is None:
            errors.append(
                syntax_error("DELETE must include FROM", *cursor.location(leader))
            )
        if cursor.accept_name() is None:
            errors.append(
                syntax_error("DELETE FROM requires a table name", *cursor.location(leader))
            )
        errors.extend(self._check_where(cursor, leader, "DELETE"))
        return errors

    def _check_create(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        kind = cursor.accept(*OBJECT_KINDS)
        if kind is None:
            return [
                syntax_error(
                    "CREATE must be followed by TABLE, INDEX, VIEW or DATABASE",
                    *cursor.location(leader),
                )
            ]
        self._skip_if_exists(cursor, negated=True)
        if cursor.accept_name() is None:
            return [
                syntax_error(
                    f"CREATE {word(kind)} requires a name", *cursor.location(leader)
                )
            ]
        if word(kind) != "TABLE":
            return []
        columns = cursor.peek()
        if columns is None or not is_punct(columns, "("):
            if cursor.accept("AS") is not None:
                return []
            return [
                syntax_error(
                    "CREATE TABLE requires a column definition list",
                    *cursor.location(leader),
                )
            ]
        start = cursor.pos
        if not cursor.skip_parenthesized():
            return [
                syntax_error(
                    "Unbalanced parentheses in CREATE TABLE", columns.line, columns.column
                )
            ]
        if cursor.pos - start == 2:
            return [
                syntax_error(
                    "CREATE TABLE requires at least one column", columns.line, columns.column
                )
            ]
        return []

    def _check_drop(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        kind = cursor.accept(*OBJECT_KINDS)
        if kind is None:
            return [
                syntax_error(
                    "DROP must be followed by TABLE, INDEX, VIEW or DATABASE",
                    *cursor.location(leader),
                )
            ]
        self._skip_if_exists(cursor, negated=False)
        if cursor.accept_name() is None:
            return [
                syntax_error(
                    f"DROP {word(kind)} requires a name", *cursor.location(leader)
                )
            ]
        return []

    def _check_alter(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        if cursor.accept("TABLE") is None or cursor.accept_name() is None:
            return [
                syntax_error(
                    "ALTER must be followed by TABLE and a table name",
                    *cursor.location(leader),
                )
            ]
        return []

    def _check_truncate(self, cursor: _Cursor, leader: Token) -> list[AnalysisError]:
        cursor.accept("TABLE")
        if cursor.accept_name() is None:
            return [
                syntax_error("TRUNCATE requires a table name", *cursor.location(leader))
            ]
        return []

    # ── clauses ──────────────────────────────────────────────────

    @staticmethod
    def _skip_if_exists(cursor: _Cursor, negated: bool) -> None:
        mark = cursor.pos
        if cursor.accept("IF") is None:
            return
        if negated and cursor.accept("NOT") is None:
            cursor.pos = mark
            return
        if cursor.accept("EXISTS") is None:
            cursor.pos = mark

    @staticmethod
    def _check_clause_order(tokens: list[Token]) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        highest = -1
        highest_name = ""
        depth = 0
        for index, tok in enumerate(tokens):
            if is_punct(tok, "("):
                depth += 1
            elif is_punct(tok, ")"):
                depth -= 1
            if depth > 0 or tok.kind != lex.KEYWORD:
                continue
            name = word(tok)
            rank = _SELECT_CLAUSE_ORDER.get(name)
            if rank is None:
                continue
            if name in ("GROUP", "ORDER"):
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                if following is None or word(following) != "BY":
                    errors.append(
                        syntax_error(f"{name} must be followed by BY", tok.line, tok.column)
                    )
            if rank < highest:
                errors.append(
                    syntax_error(
                        f"{name} clause must come before {highest_name}",
                        tok.line,
                        tok.column,
                    )
                )
            else:
                highest, highest_name = rank, name
        return errors

    def _check_where(
        self, cursor: _Cursor, leader: Token, statement: str
    ) -> list[AnalysisError]:
        tokens = cursor.tokens
        where_index = cursor.find("WHERE")
        if where_index < 0:
            return self._check_balance(tokens, leader, statement)
        errors = self._check_balance(tokens[:where_index], leader, statement)
        where = tokens[where_index]
        balance = 0
        condition: list[Token] = []
        for tok in tokens[where_index + 1 :]:
            if balance == 0 and word(tok) in _CONDITION_TERMINATORS:
                break
            condition.append(tok)
            if is_punct(tok, "("):
                balance += 1
            elif is_punct(tok, ")"):
                balance -= 1
                if balance < 0:
                    errors.append(
                        syntax_error(
                            "Unbalanced ')' in WHERE condition", tok.line, tok.column
                        )
                    )
                    balance = 0
        if not condition:
            errors.append(
                syntax_error("WHERE requires a condition", where.line, where.column)
            )
        elif balance > 0:
            errors.append(
                syntax_error("Unclosed '(' in WHERE condition", where.line, where.column)
            )
        return errors

    @staticmethod
    def _check_balance(
        tokens: list[Token], leader: Token, statement: str
    ) -> list[AnalysisError]:
        balance = 0
        for tok in tokens:
            if is_punct(tok, "("):
                balance += 1
            elif is_punct(tok, ")"):
                balance -= 1
                if balance < 0:
                    return [
                        syntax_error(
                            f"Unbalanced ')' in {statement} statement", tok.line, tok.column
                        )
                    ]
        if balance > 0:
            return [
                syntax_error(
                    f"Unbalanced parentheses in {statement} statement",
                    leader.line,
                    leader.column,
                )
            ]
        return []
