"""Schema collection and reference/type validation for SQL scripts.

The first pass records every ``CREATE TABLE`` (and ``ALTER TABLE ... ADD``)
as table and column symbols (keys ``table`` and ``table.column``); the
second pass validates the remaining statements against them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..lexers import sql as lex
from ..models import AnalysisError, Symbol, SymbolKind, Token, semantic_error, semantic_warning
from ..structural.sql import NAME_KINDS, is_punct, split_statements, word
from ..symbol_table import SymbolTable
from ._base import SemanticAnalyzer

logger = logging.getLogger(__name__)

TABLE_CONSTRAINT_WORDS: frozenset[str] = frozenset(
    {"PRIMARY", "FOREIGN", "UNIQUE", "CONSTRAINT", "CHECK", "KEY", "INDEX"}
)
AGGREGATE_FUNCTIONS: frozenset[str] = frozenset({"COUNT", "SUM", "AVG", "MIN", "MAX"})
# Type words such as ``date`` or ``text`` are also valid column names.
COLUMN_NAME_KINDS: frozenset[str] = NAME_KINDS | {lex.DATA_TYPE}
_DATE = re.compile(r"^'\d{4}-\d{2}-\d{2}'$")


@dataclass
class ForeignKey:
    table: str
    column: str
    target_table: str
    target_column: str
    token: Token


@dataclass
class TableSchema:
    name: str
    token: Token
    columns: dict[str, str] = field(default_factory=dict)  # column -> type family
    primary_keys: set[str] = field(default_factory=set)


def split_commas(tokens: list[Token]) -> list[list[Token]]:
    parts: list[list[Token]] = [[]]
    depth = 0
    for tok in tokens:
        if is_punct(tok, "("):
            depth += 1
        elif is_punct(tok, ")"):
            depth -= 1
        if depth == 0 and is_punct(tok, ","):
            parts.append([])
        else:
            parts[-1].append(tok)
    return [p for p in parts if p]


def parenthesized(tokens: list[Token], start: int) -> tuple[list[Token], int]:
    """Contents of the group opening at *start* and the index after it."""
    depth = 0
    for index in range(start, len(tokens)):
        if is_punct(tokens[index], "("):
            depth += 1
        elif is_punct(tokens[index], ")"):
            depth -= 1
            if depth == 0:
                return tokens[start + 1 : index], index + 1
    return tokens[start + 1 :], len(tokens)


def index_of(tokens: list[Token], *words: str, start: int = 0) -> int:
    depth = 0
    for index in range(start, len(tokens)):
        tok = tokens[index]
        if is_punct(tok, "("):
            depth += 1
        elif is_punct(tok, ")"):
            depth -= 1
        elif depth == 0 and word(tok) in words:
            return index
    return -1


def column_key(token: Token) -> str:
    if token.kind == lex.DATA_TYPE:
        return token.value.lower()
    return lex.normalize(token)


def names(tokens: list[Token]) -> list[str]:
    return [column_key(t) for t in tokens if t.kind in COLUMN_NAME_KINDS]


def split_subqueries(tokens: list[Token]) -> tuple[list[Token], list[list[Token]]]:
    """Separate parenthesized ``SELECT`` groups from the surrounding tokens."""
    outer: list[Token] = []
    subqueries: list[list[Token]] = []
    index = 0
    while index < len(tokens):
        tok = tokens[index]
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if is_punct(tok, "(") and following is not None and word(following) == "SELECT":
            inner, index = parenthesized(tokens, index)
            subqueries.append(inner)
            continue
        outer.append(tok)
        index += 1
    return outer, subqueries


def literal_matches(family: str, tokens: list[Token]) -> bool:
    """Pattern-based compatibility of a literal with a column type family."""
    if len(tokens) == 2 and tokens[0].value == "-" and tokens[1].kind == lex.NUMBER:
        tokens = tokens[1:]
    if len(tokens) != 1:
        return True
    tok = tokens[0]
    if tok.kind == lex.NULL or family == "unknown":
        return True
    if tok.kind not in (lex.NUMBER, lex.STRING, lex.BOOLEAN):
        return True
    if family == "integer":
        return tok.kind == lex.NUMBER and tok.subkind == "integer"
    if family == "numeric":
        return tok.kind == lex.NUMBER
    if family == "text":
        return tok.kind == lex.STRING
    if family == "date":
        return tok.kind == lex.STRING and bool(_DATE.match(tok.value))
    if family == "bool":
        return tok.kind == lex.BOOLEAN or tok.value in ("0", "1")
    return True


class SqlSemanticAnalyzer(SemanticAnalyzer):
    LANGUAGE = "sql"

    def _analyze(self, tokens: list[Token], table: SymbolTable) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        statements = split_statements(tokens)
        schemas: dict[str, TableSchema] = {}
        foreign_keys: list[ForeignKey] = []

        for statement in statements:
            leader = word(statement[0])
            if leader == "CREATE" and index_of(statement, "TABLE") == 1:
                errors.extend(self._collect_table(statement, table, schemas, foreign_keys))
            elif leader == "ALTER":
                errors.extend(self._collect_alter(statement, table, schemas, foreign_keys))

        errors.extend(self._check_foreign_keys(foreign_keys, schemas))
        for statement in statements:
            leader = word(statement[0])
            if leader == "CREATE":
                errors.extend(self._check_create_index(statement, schemas))
            elif leader == "ALTER":
                errors.extend(self._check_alter(statement, schemas))
            elif leader == "SELECT":
                errors.extend(self._check_select(statement, schemas))
            elif leader == "INSERT":
                errors.extend(self._check_insert(statement, schemas))
            elif leader == "UPDATE":
                errors.extend(self._check_update(statement, schemas))
            elif leader == "DELETE":
                errors.extend(self._check_delete(statement, schemas))
            elif leader == "DROP":
                errors.extend(self._check_drop(statement, schemas))
        return errors

    # ── schema pass ──────────────────────────────────────────────

    def _collect_table(
        self,
        statement: list[Token],
        table: SymbolTable,
        schemas: dict[str, TableSchema],
        foreign_keys: list[ForeignKey],
    ) -> list[AnalysisError]:
        cursor = 2
        if cursor < len(statement) and word(statement[cursor]) == "IF":
            cursor += 3
        if cursor >= len(statement) or statement[cursor].kind not in NAME_KINDS:
            return []
        name_tok = statement[cursor]
        name = lex.normalize(name_tok)
        if name in schemas:
            first = schemas[name].token
            return [
                semantic_error(
                    f"Table '{name}' is already defined (line {first.line})",
                    name_tok.line,
                    name_tok.column,
                )
            ]
        schema = TableSchema(name, name_tok)
        schemas[name] = schema
        table.put(
            name,
            Symbol(
                name=name,
                kind=SymbolKind.TABLE,
                data_type="table",
                declaration_line=name_tok.line,
                declaration_column=name_tok.column,
                initialized=True,
            ),
        )
        open_index = cursor + 1
        if open_index >= len(statement) or not is_punct(statement[open_index], "("):
            return []
        body, _ = parenthesized(statement, open_index)
        errors: list[AnalysisError] = []
        for definition in split_commas(body):
            head = word(definition[0])
            if head in TABLE_CONSTRAINT_WORDS:
                self._table_constraint(schema, definition, foreign_keys)
                continue
            errors.extend(self._column(schema, definition, table, foreign_keys))
        return errors

    @staticmethod
    def _column(
        schema: TableSchema,
        definition: list[Token],
        table: SymbolTable,
        foreign_keys: list[ForeignKey],
    ) -> list[AnalysisError]:
        name_tok = definition[0]
        if name_tok.kind not in COLUMN_NAME_KINDS:
            return []
        column = column_key(name_tok)
        if column in schema.columns:
            return [
                semantic_error(
                    f"Duplicate column '{column}' in table '{schema.name}'",
                    name_tok.line,
                    name_tok.column,
                )
            ]
        type_tok = definition[1] if len(definition) > 1 else None
        family = "unknown"
        if type_tok is not None and type_tok.kind == lex.DATA_TYPE:
            family = type_tok.subkind or family
        schema.columns[column] = family
        words = [word(t) for t in definition]
        if "PRIMARY" in words:
            schema.primary_keys.add(column)
        reference = index_of(definition, "REFERENCES")
        if reference >= 0:
            foreign_keys.extend(_references(schema.name, [column], definition, reference))
        errors: list[AnalysisError] = []
        default = index_of(definition, "DEFAULT")
        if default >= 0 and default + 1 < len(definition):
            value = definition[default + 1 : default + 2]
            if value[0].value == "-":
                value = definition[default + 1 : default + 3]
            if not literal_matches(family, value):
                errors.append(
                    semantic_error(
                        f"Default value {' '.join(t.value for t in value)} is not"
                        f" compatible with column '{schema.name}.{column}' ({family})",
                        value[0].line,
                        value[0].column,
                    )
                )
        table.put(
            f"{schema.name}.{column}",
            Symbol(
                name=column,
                kind=SymbolKind.COLUMN,
                data_type=family,
                scope=schema.name,
                declaration_line=name_tok.line,
                declaration_column=name_tok.column,
                initialized=True,
                value=type_tok.value.upper() if type_tok is not None else None,
            ),
        )
        return errors

    @staticmethod
    def _table_constraint(
        schema: TableSchema, definition: list[Token], foreign_keys: list[ForeignKey]
    ) -> None:
        open_index = next(
            (i for i, t in enumerate(definition) if is_punct(t, "(")), None
        )
        if open_index is None:
            return
        inner, _ = parenthesized(definition, open_index)
        columns = names(inner)
        head_words = [word(t) for t in definition[:open_index]]
        if "PRIMARY" in head_words:
            schema.primary_keys.update(columns)
        reference = index_of(definition, "REFERENCES")
        if "FOREIGN" in head_words and reference >= 0:
            foreign_keys.extend(_references(schema.name, columns, definition, reference))

    @staticmethod
    def _check_foreign_keys(
        foreign_keys: list[ForeignKey], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        for fk in foreign_keys:
            target = schemas.get(fk.target_table)
            if target is None:
                errors.append(
                    semantic_error(
                        f"Foreign key {fk.table}.{fk.column} references undefined table"
                        f" '{fk.target_table}'",
                        fk.token.line,
                        fk.token.column,
                    )
                )
            elif fk.target_column and fk.target_column not in target.columns:
                errors.append(
                    semantic_error(
                        f"Foreign key {fk.table}.{fk.column} references undefined column"
                        f" '{fk.target_table}.{fk.target_column}'",
                        fk.token.line,
                        fk.token.column,
                    )
                )
            elif fk.target_column and not _primary_like(target, fk.target_column):
                errors.append(
                    semantic_warning(
                        f"Foreign key {fk.table}.{fk.column} references"
                        f" '{fk.target_table}.{fk.target_column}', which is not a primary key",
                        fk.token.line,
                        fk.token.column,
                    )
                )
        return errors

    def _collect_alter(
        self,
        statement: list[Token],
        table: SymbolTable,
        schemas: dict[str, TableSchema],
        foreign_keys: list[ForeignKey],
    ) -> list[AnalysisError]:
        """Apply ``ALTER TABLE t ADD ...`` to an already collected table."""
        if len(statement) < 5 or word(statement[1]) != "TABLE":
            return []
        schema = schemas.get(lex.normalize(statement[2]))
        if schema is None or word(statement[3]) != "ADD":
            return []
        definition = statement[4:]
        if word(definition[0]) == "COLUMN":
            definition = definition[1:]
        if not definition:
            return []
        if word(definition[0]) in TABLE_CONSTRAINT_WORDS:
            self._table_constraint(schema, definition, foreign_keys)
            return []
        return self._column(schema, definition, table, foreign_keys)

    # ── statement pass ───────────────────────────────────────────

    def _check_select(
        self,
        statement: list[Token],
        schemas: dict[str, TableSchema],
        outer: dict[str, str] | None = None,
    ) -> list[AnalysisError]:
        """Check a SELECT; *outer* holds the enclosing query's aliases for subqueries."""
        from_index = index_of(statement, "FROM")
        if from_index < 0:
            return []
        end = index_of(
            statement, "WHERE", "GROUP", "ORDER", "HAVING", "LIMIT", "UNION", start=from_index
        )
        end = len(statement) if end < 0 else end
        errors = self._check_grouping(statement, from_index)
        aliases = self._table_aliases(statement[from_index + 1 : end])
        for alias_tok, table_name in aliases.values():
            if table_name not in schemas:
                errors.append(
                    semantic_error(
                        f"Table '{table_name}' is not defined",
                        alias_tok.line,
                        alias_tok.column,
                    )
                )
        known = {alias: name for alias, (_, name) in aliases.items() if name in schemas}
        if len(known) != len(aliases):
            return errors
        known = {**(outer or {}), **known}
        references = statement[1:from_index]
        where = index_of(statement, "WHERE")
        if where >= 0:
            stop = index_of(statement, "GROUP", "ORDER", "HAVING", "LIMIT", "UNION", start=where)
            references = references + statement[where + 1 : stop if stop >= 0 else len(statement)]
        references, subqueries = split_subqueries(references)
        errors.extend(self._check_columns(references, known, schemas))
        for subquery in subqueries:
            errors.extend(self._check_select(subquery, schemas, known))
        return errors

    @staticmethod
    def _check_grouping(statement: list[Token], from_index: int) -> list[AnalysisError]:
        """Plain select columns must be grouped once GROUP BY or an aggregate appears."""
        items = [
            split_subqueries(item)[0] for item in split_commas(statement[1:from_index])
        ]
        aggregated = [
            any(t.kind == lex.FUNCTION and word(t) in AGGREGATE_FUNCTIONS for t in item)
            for item in items
        ]
        group = index_of(statement, "GROUP", start=from_index)
        if group < 0 and not any(aggregated):
            return []
        grouped: set[str] = set()
        if group >= 0:
            stop = index_of(statement, "HAVING", "ORDER", "LIMIT", "UNION", start=group)
            for key in split_commas(statement[group + 2 : stop if stop >= 0 else len(statement)]):
                key_names = [t for t in key if t.kind in COLUMN_NAME_KINDS]
                if key_names:
                    grouped.add(column_key(key_names[-1]))
        errors: list[AnalysisError] = []
        for item, is_aggregate in zip(items, aggregated):
            if is_aggregate:
                continue
            for tok in _plain_columns(item):
                column = column_key(tok)
                if column not in grouped:
                    errors.append(
                        semantic_error(
                            f"Column '{column}' must appear in GROUP BY or be used"
                            " in an aggregate function",
                            tok.line,
                            tok.column,
                        )
                    )
        return errors

    @staticmethod
    def _table_aliases(tokens: list[Token]) -> dict[str, tuple[Token, str]]:
        """Map alias (or table name) → (table token, table name) for a FROM list."""
        aliases: dict[str, tuple[Token, str]] = {}
        index = 0
        expect_table = True
        while index < len(tokens):
            tok = tokens[index]
            if is_punct(tok, ",") or word(tok) == "JOIN":
                expect_table = True
            elif is_punct(tok, "("):
                _, index = parenthesized(tokens, index)
                expect_table = False
                continue
            elif expect_table and tok.kind in NAME_KINDS:
                name = lex.normalize(tok)
                alias = name
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                if following is not None and word(following) == "AS":
                    index += 1
                    following = tokens[index + 1] if index + 1 < len(tokens) else None
                if following is not None and following.kind in NAME_KINDS:
                    alias = lex.normalize(following)
                    index += 1
                aliases[alias] = (tok, name)
                expect_table = False
            index += 1
        return aliases

    @staticmethod
    def _check_columns(
        tokens: list[Token],
        known: dict[str, str],
        schemas: dict[str, TableSchema],
    ) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        reported: set[str] = set()
        skip_next = False
        for index, tok in enumerate(tokens):
            if skip_next:
                skip_next = False
                continue
            if word(tok) == "AS":
                skip_next = True
                continue
            if tok.kind not in COLUMN_NAME_KINDS:
                continue
            following = tokens[index + 1] if index + 1 < len(tokens) else None
            previous = tokens[index - 1] if index else None
            if previous is not None and is_punct(previous, "."):
                continue
            if following is not None and is_punct(following, "("):
                continue
            name = column_key(tok)
            if following is not None and is_punct(following, "."):
                column_tok = tokens[index + 2] if index + 2 < len(tokens) else None
                table_name = known.get(name)
                if table_name is None:
                    errors.append(
                        semantic_error(
                            f"Unknown table or alias '{name}'", tok.line, tok.column
                        )
                    )
                    continue
                if column_tok is None or column_tok.kind not in COLUMN_NAME_KINDS:
                    continue
                column = column_key(column_tok)
                if column not in schemas[table_name].columns:
                    errors.append(
                        semantic_error(
                            f"Column '{column}' does not exist in table '{table_name}'",
                            column_tok.line,
                            column_tok.column,
                        )
                    )
                continue
            if name in known or name in reported:
                continue
            if not any(name in schemas[t].columns for t in known.values()):
                reported.add(name)
                tables = ", ".join(sorted(set(known.values())))
                errors.append(
                    semantic_error(
                        f"Column '{name}' does not exist in table(s) {tables}",
                        tok.line,
                        tok.column,
                    )
                )
        return errors

    def _check_insert(
        self, statement: list[Token], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        leader = statement[0]
        errors: list[AnalysisError] = []
        values_index = index_of(statement, "VALUES")
        if values_index < 0 and index_of(statement, "SELECT") < 0:
            errors.append(
                semantic_warning("INSERT without VALUES", leader.line, leader.column)
            )
        into = index_of(statement, "INTO")
        name_index = into + 1 if into >= 0 else 1
        if name_index >= len(statement) or statement[name_index].kind not in NAME_KINDS:
            return errors
        name_tok = statement[name_index]
        schema = self._require_table(name_tok, schemas, errors)
        if schema is None:
            return errors
        columns = list(schema.columns)
        cursor = name_index + 1
        if cursor < len(statement) and is_punct(statement[cursor], "("):
            inner, cursor = parenthesized(statement, cursor)
            columns = []
            for col_tok in (t for t in inner if t.kind in COLUMN_NAME_KINDS):
                column = column_key(col_tok)
                columns.append(column)
                if column not in schema.columns:
                    errors.append(
                        semantic_error(
                            f"Column '{column}' does not exist in table '{schema.name}'",
                            col_tok.line,
                            col_tok.column,
                        )
                    )
        if values_index < 0:
            return errors
        cursor = values_index + 1
        while cursor < len(statement) and is_punct(statement[cursor], "("):
            group_tok = statement[cursor]
            inner, cursor = parenthesized(statement, cursor)
            values = split_commas(inner)
            if len(values) != len(columns):
                errors.append(
                    semantic_error(
                        f"INSERT into '{schema.name}' has {len(values)} value(s)"
                        f" for {len(columns)} column(s)",
                        group_tok.line,
                        group_tok.column,
                    )
                )
            else:
                errors.extend(self._check_types(schema, columns, values))
            if cursor < len(statement) and is_punct(statement[cursor], ","):
                cursor += 1
        return errors

    @staticmethod
    def _check_types(
        schema: TableSchema, columns: list[str], values: list[list[Token]]
    ) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        for column, value in zip(columns, values):
            family = schema.columns.get(column, "unknown")
            if not literal_matches(family, value):
                tok = value[0]
                text = " ".join(t.value for t in value)
                errors.append(
                    semantic_error(
                        f"Type mismatch for column '{schema.name}.{column}':"
                        f" expected {family} but got {text}",
                        tok.line,
                        tok.column,
                    )
                )
        return errors

    def _check_update(
        self, statement: list[Token], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        if len(statement) < 2 or statement[1].kind not in NAME_KINDS:
            return errors
        schema = self._require_table(statement[1], schemas, errors)
        set_index = index_of(statement, "SET")
        if schema is None or set_index < 0:
            return errors
        where = index_of(statement, "WHERE", start=set_index)
        assignments = statement[set_index + 1 : where if where >= 0 else len(statement)]
        for assignment in split_commas(assignments):
            if len(assignment) < 3 or assignment[0].kind not in COLUMN_NAME_KINDS:
                continue
            col_tok = assignment[0]
            column = column_key(col_tok)
            value = assignment[2:]
            if column not in schema.columns:
                errors.append(
                    semantic_error(
                        f"Column '{column}' does not exist in table '{schema.name}'",
                        col_tok.line,
                        col_tok.column,
                    )
                )
                continue
            if _primary_like(schema, column) and len(value) == 1 and value[0].kind == lex.NULL:
                errors.append(
                    semantic_error(
                        f"Constraint violation: primary key column '{column}' set to NULL",
                        col_tok.line,
                        col_tok.column,
                    )
                )
                continue
            errors.extend(self._check_types(schema, [column], [value]))
        return errors

    def _check_delete(
        self, statement: list[Token], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        leader = statement[0]
        errors: list[AnalysisError] = []
        from_index = index_of(statement, "FROM")
        name_index = from_index + 1 if from_index >= 0 else 1
        if name_index < len(statement) and statement[name_index].kind in NAME_KINDS:
            self._require_table(statement[name_index], schemas, errors)
        if index_of(statement, "WHERE") < 0:
            errors.append(
                semantic_warning(
                    "DELETE without WHERE removes all rows",
                    leader.line,
                    leader.column,
                    suggestion="Add a WHERE clause to limit the rows deleted",
                )
            )
        return errors

    @staticmethod
    def _check_drop(
        statement: list[Token], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        if len(statement) < 3 or word(statement[1]) != "TABLE":
            return []
        cursor = 2
        if word(statement[cursor]) == "IF":
            cursor += 2
        if cursor >= len(statement) or statement[cursor].kind not in NAME_KINDS:
            return []
        name_tok = statement[cursor]
        name = lex.normalize(name_tok)
        if name in schemas or cursor > 2:
            return []
        return [
            semantic_warning(
                f"DROP TABLE of undefined table '{name}'", name_tok.line, name_tok.column
            )
        ]

    @staticmethod
    def _check_alter(
        statement: list[Token], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        if len(statement) < 3 or word(statement[1]) != "TABLE":
            return []
        name_tok = statement[2]
        if name_tok.kind not in NAME_KINDS:
            return []
        name = lex.normalize(name_tok)
        if name in schemas:
            return []
        return [
            semantic_error(
                f"ALTER TABLE of undefined table '{name}'", name_tok.line, name_tok.column
            )
        ]

    @staticmethod
    def _check_create_index(
        statement: list[Token], schemas: dict[str, TableSchema]
    ) -> list[AnalysisError]:
        if len(statement) < 2:
            return []
        index_word = 2 if word(statement[1]) == "UNIQUE" else 1
        if len(statement) <= index_word or word(statement[index_word]) != "INDEX":
            return []
        on = index_of(statement, "ON")
        if on < 0 or on + 1 >= len(statement) or statement[on + 1].kind not in NAME_KINDS:
            return []
        name_tok = statement[on + 1]
        name = lex.normalize(name_tok)
        schema = schemas.get(name)
        if schema is None:
            return [
                semantic_error(
                    f"CREATE INDEX on undefined table '{name}'",
                    name_tok.line,
                    name_tok.column,
                )
            ]
        errors: list[AnalysisError] = []
        open_index = on + 2
        if open_index < len(statement) and is_punct(statement[open_index], "("):
            inner, _ = parenthesized(statement, open_index)
            for col_tok in (t for t in inner if t.kind in COLUMN_NAME_KINDS):
                column = column_key(col_tok)
                if column not in schema.columns:
                    errors.append(
                        semantic_error(
                            f"Column '{column}' does not exist in table '{schema.name}'",
                            col_tok.line,
                            col_tok.column,
                        )
                    )
        return errors

    @staticmethod
    def _require_table(
        name_tok: Token, schemas: dict[str, TableSchema], errors: list[AnalysisError]
    ) -> TableSchema | None:
        name = lex.normalize(name_tok)
        schema = schemas.get(name)
        if schema is None:
            errors.append(
                semantic_error(
                    f"Table '{name}' is not defined", name_tok.line, name_tok.column
                )
            )
        return schema


def _references(
    table: str, columns: list[str], definition: list[Token], reference: int
) -> list[ForeignKey]:
    target_index = reference + 1
    if target_index >= len(definition) or definition[target_index].kind not in NAME_KINDS:
        return []
    target_tok = definition[target_index]
    target_columns: list[str] = []
    if target_index + 1 < len(definition) and is_punct(definition[target_index + 1], "("):
        inner, _ = parenthesized(definition, target_index + 1)
        target_columns = names(inner)
    target_columns += [""] * (len(columns) - len(target_columns))
    return [
        ForeignKey(table, column, lex.normalize(target_tok), target_column, target_tok)
        for column, target_column in zip(columns, target_columns)
    ]


def _primary_like(schema: TableSchema, column: str) -> bool:
    return column in schema.primary_keys or column == "id"


def _plain_columns(item: list[Token]) -> list[Token]:
    """Column tokens of one select item, without its alias or table qualifiers."""
    if item and word(item[0]) == "DISTINCT":
        item = item[1:]
    alias = index_of(item, "AS")
    if alias >= 0:
        item = item[:alias]
    elif len(item) > 1 and item[-1].kind in NAME_KINDS and item[-2].kind in NAME_KINDS:
        item = item[:-1]
    columns: list[Token] = []
    for index, tok in enumerate(item):
        following = item[index + 1] if index + 1 < len(item) else None
        if tok.kind not in COLUMN_NAME_KINDS:
            continue
        if following is not None and (is_punct(following, ".") or is_punct(following, "(")):
            continue
        columns.append(tok)
    return columns
