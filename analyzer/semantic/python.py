"""Declared-before-use, call arity and bug-pattern heuristics for Python.

Scope tracking is a single integer depth that grows on every ``:`` token;
a name is visible at a use site when any depth it was assigned at is at
most the current depth. This is flow-insensitive by construction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .. import constants
from ..lexers import python as lex
from ..models import (
    AnalysisError,
    Symbol,
    SymbolKind,
    Token,
    semantic_error,
    semantic_warning,
)
from ..structural.python import LogicalLine, logical_lines
from ..symbol_table import SymbolTable
from ._base import SemanticAnalyzer

logger = logging.getLogger(__name__)

BUILTINS: frozenset[str] = frozenset(
    {
        "abs", "all", "any", "bin", "bool", "bytearray", "bytes", "callable",
        "chr", "classmethod", "complex", "delattr", "dict", "dir", "divmod",
        "enumerate", "eval", "exec", "exit", "filter", "float", "format",
        "frozenset", "getattr", "globals", "hasattr", "hash", "help", "hex",
        "id", "input", "int", "isinstance", "issubclass", "iter", "len",
        "list", "locals", "map", "max", "min", "next", "object", "oct",
        "open", "ord", "pow", "print", "property", "quit", "range", "repr",
        "reversed", "round", "set", "setattr", "slice", "sorted",
        "staticmethod", "str", "sum", "super", "tuple", "type", "vars", "zip",
        "Exception", "BaseException", "ArithmeticError", "AssertionError",
        "AttributeError", "FileNotFoundError", "ImportError", "IndexError",
        "KeyError", "KeyboardInterrupt", "LookupError", "NameError",
        "NotImplementedError", "OSError", "RuntimeError", "StopIteration",
        "TypeError", "ValueError", "ZeroDivisionError", "NotImplemented",
        "Ellipsis", "__name__", "__file__", "__doc__",
    }
)

AUGMENTED_OPERATORS: frozenset[str] = frozenset(
    {"+=", "-=", "*=", "/=", "//=", "%=", "**=", "&=", "|=", "^=", ">>=", "<<=", "@="}
)
DIVISION_OPERATORS: frozenset[str] = frozenset({"/", "//", "%", "/=", "//=", "%="})
CONDITION_KEYWORDS: frozenset[str] = frozenset({"if", "elif", "while"})
HEADER_KEYWORDS: frozenset[str] = frozenset(
    {"if", "elif", "else", "for", "while", "try", "except", "finally", "with", "def", "class"}
)
LOWER_BOUND_OPS: frozenset[str] = frozenset({">", ">="})
UPPER_BOUND_OPS: frozenset[str] = frozenset({"<", "<="})
_MIRRORED_OPS: dict[str, str] = {">": "<", ">=": "<=", "<": ">", "<=": ">="}

ADDITION_NAMES: tuple[str, ...] = ("add", "sum", "plus")
SUBTRACTION_NAMES: tuple[str, ...] = ("sub", "minus", "subtract")

_CONSTRUCTOR_TYPES: frozenset[str] = frozenset(
    {"int", "float", "str", "bool", "list", "dict", "set", "tuple"}
)
_NUMERIC_TYPES: frozenset[str] = frozenset({"int", "float"})


# ── token predicates ─────────────────────────────────────────────


def is_op(tok: Token | None, *values: str) -> bool:
    return tok is not None and tok.kind == lex.OPERATOR and tok.value in values


def is_sep(tok: Token | None, value: str) -> bool:
    return tok is not None and tok.kind == lex.SEPARATOR and tok.value == value


def is_delim(tok: Token | None, value: str) -> bool:
    return tok is not None and tok.kind == lex.DELIMITER and tok.value == value


def is_kw(tok: Token | None, *values: str) -> bool:
    return tok is not None and tok.kind == lex.KEYWORD and tok.value in values


def bracket_depths(tokens: list[Token]) -> list[int]:
    """Bracket nesting depth in effect at each token."""
    depths = []
    depth = 0
    for tok in tokens:
        if tok.kind == lex.SEPARATOR and tok.value in ")]}":
            depth = max(depth - 1, 0)
        depths.append(depth)
        if tok.kind == lex.SEPARATOR and tok.value in "([{":
            depth += 1
    return depths


def matching_close(tokens: list[Token], open_index: int) -> int:
    """Index of the bracket closing ``tokens[open_index]`` (or len(tokens))."""
    depth = 0
    for index in range(open_index, len(tokens)):
        tok = tokens[index]
        if tok.kind == lex.SEPARATOR and tok.value in "([{":
            depth += 1
        elif tok.kind == lex.SEPARATOR and tok.value in ")]}":
            depth -= 1
            if depth == 0:
                return index
    return len(tokens)


def split_top_level(tokens: list[Token]) -> list[list[Token]]:
    """Split a bracket-free-at-top token run on commas."""
    parts: list[list[Token]] = [[]]
    for tok, depth in zip(tokens, bracket_depths(tokens)):
        if depth == 0 and is_delim(tok, ","):
            parts.append([])
        else:
            parts[-1].append(tok)
    if not parts[-1]:
        parts.pop()
    return parts


def numeric_value(tokens: list[Token], index: int) -> tuple[float | None, int]:
    """Parse an optionally negated numeric literal at *index*."""
    sign = 1.0
    if is_op(tokens[index] if index < len(tokens) else None, "-"):
        sign = -1.0
        index += 1
    if index >= len(tokens) or tokens[index].kind != lex.NUMBER:
        return None, index
    text = tokens[index].value.replace("_", "")
    try:
        if tokens[index].subkind in ("hex", "binary", "octal"):
            return sign * int(text, 0), index + 1
        return sign * float(text), index + 1
    except ValueError:
        return None, index + 1


def format_number(value: float) -> str:
    return str(int(value)) if value == int(value) else str(value)


# ── per-run state ────────────────────────────────────────────────


@dataclass(frozen=True)
class Frame:
    indent: int
    keyword: str
    name: str


@dataclass
class Parameter:
    token: Token
    role: str  # required | default | varargs | kwargs


@dataclass
class _Run:
    table: SymbolTable
    depth: int = 0
    assigned: dict[str, set[int]] = field(default_factory=dict)
    used: set[str] = field(default_factory=set)
    types: dict[str, str] = field(default_factory=dict)
    variables: dict[str, Token] = field(default_factory=dict)
    reported: set[str] = field(default_factory=set)
    functions: dict[str, Token] = field(default_factory=dict)
    calls: list[tuple[Token, list[list[Token]]]] = field(default_factory=list)
    bodies: dict[str, list[LogicalLine]] = field(default_factory=dict)
    errors: list[AnalysisError] = field(default_factory=list)


def frames_for(lines: list[LogicalLine]) -> list[tuple[LogicalLine, tuple[Frame, ...]]]:
    """Pair each logical line with the enclosing def/class frames."""
    stack: list[Frame] = []
    result = []
    for line in lines:
        while stack and stack[-1].indent >= line.indent:
            stack.pop()
        result.append((line, tuple(stack)))
        keyword = line.keyword
        if keyword in ("def", "class") and line.opens_block():
            name_tok = _name_after_keyword(line)
            if name_tok is not None:
                stack.append(Frame(line.indent, keyword, name_tok.value))
    return result


def _name_after_keyword(line: LogicalLine) -> Token | None:
    toks = line.tokens
    for index, tok in enumerate(toks[:-1]):
        if is_kw(tok, "def", "class") and toks[index + 1].kind == lex.IDENTIFIER:
            return toks[index + 1]
    return None


def qualified_scope(frames: tuple[Frame, ...]) -> str:
    if not frames:
        return constants.GLOBAL_SCOPE
    return ".".join(frame.name for frame in frames)


def parse_parameters(tokens: list[Token], open_index: int) -> dict[int, Parameter]:
    """Parameters of a ``def`` whose list opens at *open_index*, keyed by token index."""
    close = matching_close(tokens, open_index)
    params: dict[int, Parameter] = {}
    chunk_start = open_index + 1
    depth = 0
    for index in range(open_index + 1, close + 1):
        tok = tokens[index] if index < len(tokens) else None
        if tok is not None and tok.kind == lex.SEPARATOR and tok.value in "([{":
            depth += 1
        elif tok is not None and tok.kind == lex.SEPARATOR and tok.value in ")]}" and index != close:
            depth -= 1
        if index == close or (depth == 0 and is_delim(tok, ",")):
            param = _parameter_from(tokens, chunk_start, index)
            if param is not None:
                params[param[1]] = param[0]
            chunk_start = index + 1
    return params


def _parameter_from(tokens: list[Token], start: int, end: int) -> tuple[Parameter, int] | None:
    chunk = tokens[start:end]
    if not chunk:
        return None
    role = "required"
    offset = 0
    if is_op(chunk[0], "*"):
        role, offset = "varargs", 1
    elif is_op(chunk[0], "**"):
        role, offset = "kwargs", 1
    if offset >= len(chunk) or chunk[offset].kind != lex.IDENTIFIER:
        return None
    if role == "required" and any(is_op(t, "=") for t in chunk):
        role = "default"
    return Parameter(chunk[offset], role), start + offset


def infer_type(rhs: list[Token], types: dict[str, str]) -> str:
    if not rhs:
        return constants.DEFAULT_DATA_TYPE
    first = rhs[0]
    if len(rhs) == 1:
        literal = lex.literal_type(first)
        if literal:
            return literal
        if first.kind == lex.IDENTIFIER:
            return types.get(first.value, constants.DEFAULT_DATA_TYPE)
    if is_sep(first, "[") and matching_close(rhs, 0) == len(rhs) - 1:
        return "list"
    if is_sep(first, "{") and matching_close(rhs, 0) == len(rhs) - 1:
        return "dict"
    if is_sep(first, "(") and any(is_delim(t, ",") for t in rhs):
        return "tuple"
    if first.kind == lex.IDENTIFIER and first.value in _CONSTRUCTOR_TYPES and is_sep(
        rhs[1] if len(rhs) > 1 else None, "("
    ):
        return first.value
    return constants.DEFAULT_DATA_TYPE


class PythonSemanticAnalyzer(SemanticAnalyzer):
    LANGUAGE = "python"

    def _analyze(self, tokens: list[Token], table: SymbolTable) -> list[AnalysisError]:
        lines = logical_lines(tokens)
        contexts = frames_for(lines)
        assigned_anywhere = self._collect_assigned_names(lines)
        run = _Run(table)

        for line, frames in contexts:
            if line.keyword == "def":
                name_tok = _name_after_keyword(line)
                if name_tok is not None:
                    own = frames + (Frame(line.indent, "def", name_tok.value),)
                    run.bodies.setdefault(qualified_scope(own), []).append(line)
            for frame_index in range(len(frames)):
                key = qualified_scope(frames[: frame_index + 1])
                if frames[frame_index].keyword == "def":
                    run.bodies.setdefault(key, []).append(line)
            self._walk_line(run, line, frames, assigned_anywhere)
            self._check_condition(run, line)
            self._check_expressions(run, line)
            self._check_range(run, line)

        self._check_calls(run)
        self._check_function_bodies(run)
        self._check_unused(run)
        return run.errors

    # ── prepass ──────────────────────────────────────────────────

    def _collect_assigned_names(self, lines: list[LogicalLine]) -> set[str]:
        names: set[str] = set()
        for line in lines:
            pre, post, params, _ = self._binding_sites(line)
            for index in (*pre, *post, *params):
                names.add(line.tokens[index].value)
        return names

    def _binding_sites(
        self, line: LogicalLine
    ) -> tuple[set[int], set[int], dict[int, Parameter], set[int]]:
        """Indices bound before the line's uses, after them, as parameters, and skipped."""
        toks = line.tokens
        pre: set[int] = set()
        post: set[int] = set()
        params: dict[int, Parameter] = {}
        skipped: set[int] = set()
        keyword = line.keyword

        if keyword in ("import", "from"):
            self._import_sites(toks, pre, skipped)
            return pre, post, params, skipped

        for index, tok in enumerate(toks):
            if is_kw(tok, "for"):
                self._for_targets(toks, index, pre)
            elif is_kw(tok, "lambda"):
                cursor = index + 1
                while cursor < len(toks) and not is_delim(toks[cursor], ":"):
                    if toks[cursor].kind == lex.IDENTIFIER and not is_op(
                        toks[cursor - 1], "="
                    ):
                        pre.add(cursor)
                    cursor += 1
            elif is_kw(tok, "as") and index + 1 < len(toks):
                if toks[index + 1].kind == lex.IDENTIFIER:
                    pre.add(index + 1)
            elif is_kw(tok, "global", "nonlocal"):
                pre.update(
                    i for i in range(index + 1, len(toks)) if toks[i].kind == lex.IDENTIFIER
                )
            elif is_kw(tok, "def", "class") and index + 1 < len(toks):
                if toks[index + 1].kind != lex.IDENTIFIER:
                    continue
                pre.add(index + 1)
                if is_kw(tok, "def") and is_sep(toks[index + 2] if index + 2 < len(toks) else None, "("):
                    params.update(parse_parameters(toks, index + 2))
            elif is_op(tok, ":=") and index > 0 and toks[index - 1].kind == lex.IDENTIFIER:
                post.add(index - 1)

        post.update(self._assignment_targets(toks, self._statement_start(line)))
        return pre, post, params, skipped

    @staticmethod
    def _statement_start(line: LogicalLine) -> int:
        """Index after a block header's ``:`` (simple statements start at 0)."""
        if line.keyword not in HEADER_KEYWORDS:
            return 0
        toks = line.tokens
        depths = bracket_depths(toks)
        for index, tok in enumerate(toks):
            if depths[index] == 0 and is_delim(tok, ":"):
                return index + 1
        return len(toks)

    @staticmethod
    def _import_sites(toks: list[Token], pre: set[int], skipped: set[int]) -> None:
        import_index = next(
            (i for i, t in enumerate(toks) if is_kw(t, "import")), len(toks)
        )
        is_from = is_kw(toks[0], "from")
        for index, tok in enumerate(toks):
            if tok.kind != lex.IDENTIFIER:
                continue
            if is_from and index < import_index:
                skipped.add(index)
                continue
            previous = toks[index - 1] if index else None
            following = toks[index + 1] if index + 1 < len(toks) else None
            if is_delim(previous, ".") or is_kw(following, "as"):
                skipped.add(index)
            elif is_delim(following, ".") and not is_kw(previous, "import") and not is_delim(previous, ","):
                skipped.add(index)
            else:
                pre.add(index)

    @staticmethod
    def _for_targets(toks: list[Token], for_index: int, pre: set[int]) -> None:
        cursor = for_index + 1
        while cursor < len(toks) and not is_kw(toks[cursor], "in"):
            if toks[cursor].kind == lex.IDENTIFIER and not is_delim(toks[cursor - 1], "."):
                pre.add(cursor)
            cursor += 1

    @staticmethod
    def _top_level_equals(toks: list[Token], start: int) -> list[int]:
        depths = bracket_depths(toks)
        equals = []
        for index in range(start, len(toks)):
            if is_kw(toks[index], "lambda"):
                break
            if depths[index] == 0 and is_op(toks[index], "="):
                equals.append(index)
        return equals

    def _assignment_targets(self, toks: list[Token], start: int) -> set[int]:
        equals = self._top_level_equals(toks, start)
        if not equals:
            return set()
        depths = bracket_depths(toks)
        targets: set[int] = set()
        in_annotation = False
        for index in range(start, equals[-1]):
            tok = toks[index]
            if depths[index] != 0:
                continue
            if is_delim(tok, ":"):
                in_annotation = True
            elif is_op(tok, "="):
                in_annotation = False
            elif tok.kind == lex.IDENTIFIER and not in_annotation:
                previous = toks[index - 1] if index else None
                following = toks[index + 1]
                if is_delim(previous, ".") or is_delim(following, ".") or is_sep(
                    following, "["
                ) or is_sep(following, "("):
                    continue
                targets.add(index)
        return targets

    # ── main walk ────────────────────────────────────────────────

    def _walk_line(
        self,
        run: _Run,
        line: LogicalLine,
        frames: tuple[Frame, ...],
        assigned_anywhere: set[str],
    ) -> None:
        toks = line.tokens
        pre, post, params, skipped = self._binding_sites(line)
        depths = bracket_depths(toks)
        scope = qualified_scope(frames)
        in_function = any(frame.keyword == "def" for frame in frames)
        in_class_body = bool(frames) and frames[-1].keyword == "class"

        for index in sorted(pre):
            self._bind_pre(run, line, index, scope, frames)
        if params:
            name_tok = _name_after_keyword(line)
            own_scope = f"{scope}.{name_tok.value}" if frames else name_tok.value
            for index in sorted(params):
                self._bind(
                    run,
                    toks[index],
                    SymbolKind.PARAMETER,
                    own_scope,
                    constants.DEFAULT_DATA_TYPE,
                    params[index].role,
                )

        for index, tok in enumerate(toks):
            if is_delim(tok, ":"):
                run.depth += 1
                continue
            if tok.kind != lex.IDENTIFIER or index in pre or index in post:
                continue
            if index in params or index in skipped:
                continue
            previous = toks[index - 1] if index else None
            following = toks[index + 1] if index + 1 < len(toks) else None
            if is_delim(previous, "."):
                continue
            if depths[index] > 0 and is_op(following, "="):
                continue
            self._use(run, tok, in_function, assigned_anywhere)
            if is_sep(following, "("):
                close = matching_close(toks, index + 1)
                run.calls.append((tok, split_top_level(toks[index + 2 : close])))

        equals = self._top_level_equals(toks, self._statement_start(line))
        rhs = toks[equals[-1] + 1 :] if equals else []
        rhs_type = infer_type(rhs, run.types)
        literal = rhs[0].value if len(rhs) == 1 and lex.literal_type(rhs[0]) else None
        for index in sorted(post):
            tok = toks[index]
            self._bind(run, tok, SymbolKind.VARIABLE, scope, rhs_type, literal)
            if not in_class_body:
                run.variables.setdefault(tok.value, tok)
            self._check_shadowing(run, tok)

    def _bind_pre(
        self,
        run: _Run,
        line: LogicalLine,
        index: int,
        scope: str,
        frames: tuple[Frame, ...],
    ) -> None:
        toks = line.tokens
        tok = toks[index]
        previous = toks[index - 1] if index else None
        if is_kw(previous, "def"):
            key = f"{scope}.{tok.value}" if frames else tok.value
            self._define_function(run, tok, key, scope)
            return
        if is_kw(previous, "class"):
            self._bind(run, tok, SymbolKind.CLASS, scope, "class", None)
            self._check_shadowing(run, tok)
            return
        data_type = "module" if line.keyword in ("import", "from") else constants.DEFAULT_DATA_TYPE
        self._bind(run, tok, SymbolKind.VARIABLE, scope, data_type, None)
        if line.keyword == "for" or any(is_kw(t, "for") for t in toks[:index]):
            self._check_shadowing(run, tok)

    def _define_function(self, run: _Run, tok: Token, key: str, scope: str) -> None:
        first = run.functions.get(key)
        if first is not None:
            run.errors.append(
                semantic_warning(
                    f"Function '{tok.value}' is redefined (first defined at line {first.line})",
                    tok.line,
                    tok.column,
                )
            )
        else:
            run.functions[key] = tok
        self._bind(run, tok, SymbolKind.FUNCTION, scope, "function", None)
        self._check_shadowing(run, tok)

    def _bind(
        self,
        run: _Run,
        tok: Token,
        kind: SymbolKind,
        scope: str,
        data_type: str,
        value,
    ) -> None:
        name = tok.value
        run.assigned.setdefault(name, set()).add(run.depth)
        run.types[name] = data_type
        if kind == SymbolKind.PARAMETER:
            key = f"{scope}.{name}"
        elif kind == SymbolKind.FUNCTION and scope != constants.GLOBAL_SCOPE:
            key = f"{scope}.{name}"
        else:
            key = name
        run.table.put(
            key,
            Symbol(
                name=name,
                kind=kind,
                data_type=data_type,
                scope=scope,
                declaration_line=tok.line,
                declaration_column=tok.column,
                initialized=True,
                value=value,
            ),
        )

    def _use(
        self, run: _Run, tok: Token, in_function: bool, assigned_anywhere: set[str]
    ) -> None:
        name = tok.value
        run.used.add(name)
        depths = run.assigned.get(name)
        if depths and any(depth <= run.depth for depth in depths):
            return
        if name in BUILTINS or name in run.reported:
            return
        if name in assigned_anywhere and in_function:
            return
        run.reported.add(name)
        if name in assigned_anywhere:
            run.errors.append(
                semantic_warning(
                    f"Variable '{name}' may be used before it is assigned",
                    tok.line,
                    tok.column,
                )
            )
            return
        run.errors.append(
            semantic_error(f"Undeclared variable '{name}'", tok.line, tok.column)
        )

    @staticmethod
    def _check_shadowing(run: _Run, tok: Token) -> None:
        if tok.value in BUILTINS:
            run.errors.append(
                semantic_warning(
                    f"'{tok.value}' shadows a built-in name", tok.line, tok.column
                )
            )

    # ── expression rules ─────────────────────────────────────────

    @staticmethod
    def _condition_tokens(line: LogicalLine) -> list[Token]:
        toks = line.tokens
        depths = bracket_depths(toks)
        start = 2 if is_kw(toks[0], "async") else 1
        for index in range(start, len(toks)):
            if depths[index] == 0 and is_delim(toks[index], ":"):
                return toks[start:index]
        return toks[start:]

    def _check_condition(self, run: _Run, line: LogicalLine) -> None:
        if line.keyword not in CONDITION_KEYWORDS:
            return
        condition = self._condition_tokens(line)
        for tok, depth in zip(condition, bracket_depths(condition)):
            if depth == 0 and is_op(tok, "="):
                run.errors.append(
                    semantic_error(
                        f"Assignment '=' inside '{line.keyword}' condition; did you mean '=='?",
                        tok.line,
                        tok.column,
                    )
                )
        self._check_bounds(run, line, condition)

    def _check_bounds(self, run: _Run, line: LogicalLine, condition: list[Token]) -> None:
        depths = bracket_depths(condition)
        connectors = [
            i for i, t in enumerate(condition) if depths[i] == 0 and is_kw(t, "or", "and")
        ]
        if len(connectors) != 1:
            return
        split = connectors[0]
        left = self._comparison(condition[:split])
        right = self._comparison(condition[split + 1 :])
        if left is None or right is None or left[0] != right[0]:
            return
        bounds = {left[1]: left[2], right[1]: right[2]}
        lower = next((v for op, v in bounds.items() if op in LOWER_BOUND_OPS), None)
        upper = next((v for op, v in bounds.items() if op in UPPER_BOUND_OPS), None)
        if lower is None or upper is None:
            return
        name = left[0]
        head = condition[0]
        text = " ".join(t.value for t in condition)
        if condition[split].value == "or" and upper > lower:
            run.errors.append(
                semantic_warning(
                    f"Condition '{text}' is always true: every value of '{name}' satisfies one side",
                    head.line,
                    head.column,
                )
            )
        elif condition[split].value == "and" and upper <= lower:
            run.errors.append(
                semantic_warning(
                    f"Condition '{text}' can never be true",
                    head.line,
                    head.column,
                )
            )

    @staticmethod
    def _comparison(part: list[Token]) -> tuple[str, str, float] | None:
        """Normalize ``name OP number`` / ``number OP name`` to (name, op, value)."""
        if len(part) < 3:
            return None
        if part[0].kind == lex.IDENTIFIER and part[1].kind == lex.OPERATOR:
            value, end = numeric_value(part, 2)
            if value is not None and end == len(part) and part[1].value in _MIRRORED_OPS:
                return part[0].value, part[1].value, value
        value, end = numeric_value(part, 0)
        if (
            value is not None
            and end + 2 == len(part)
            and part[end].kind == lex.OPERATOR
            and part[end].value in _MIRRORED_OPS
            and part[end + 1].kind == lex.IDENTIFIER
        ):
            return part[end + 1].value, _MIRRORED_OPS[part[end].value], value
        return None

    def _check_expressions(self, run: _Run, line: LogicalLine) -> None:
        toks = line.tokens
        for index, tok in enumerate(toks):
            following = toks[index + 1] if index + 1 < len(toks) else None
            previous = toks[index - 1] if index else None
            if is_kw(tok, "or", "and") and is_kw(following, "True", "False"):
                run.errors.append(
                    semantic_warning(
                        f"'{tok.value} {following.value}' makes the condition constant",
                        tok.line,
                        tok.column,
                    )
                )
            elif tok.kind == lex.OPERATOR and tok.value in DIVISION_OPERATORS:
                if tok.value == "%" and previous is not None and previous.kind == lex.STRING:
                    continue
                value, _ = numeric_value(toks, index + 1)
                if value == 0 and following is not None and following.kind == lex.NUMBER:
                    run.errors.append(
                        semantic_error("Division by zero", tok.line, tok.column)
                    )
            elif is_op(tok, "+") and previous is not None and following is not None:
                kinds = {self._type_of(run, previous), self._type_of(run, following)}
                numeric = kinds & _NUMERIC_TYPES
                if "str" in kinds and numeric:
                    run.errors.append(
                        semantic_error(
                            f"Cannot add str and {numeric.pop()}", tok.line, tok.column
                        )
                    )

    @staticmethod
    def _type_of(run: _Run, tok: Token) -> str | None:
        literal = lex.literal_type(tok)
        if literal:
            return literal
        if tok.kind == lex.IDENTIFIER:
            return run.types.get(tok.value)
        return None

    def _check_range(self, run: _Run, line: LogicalLine) -> None:
        if line.keyword != "for":
            return
        toks = line.tokens
        for index, tok in enumerate(toks[:-1]):
            if tok.value != "range" or not is_sep(toks[index + 1], "("):
                continue
            close = matching_close(toks, index + 1)
            args = split_top_level(toks[index + 2 : close])
            if len(args) not in (2, 3):
                continue
            values = []
            for arg in args:
                value, end = numeric_value(arg, 0)
                values.append(value if end == len(arg) else None)
            start, stop = values[0], values[1]
            step = values[2] if len(values) == 3 else 1.0
            if start is None or stop is None or step is None or step <= 0:
                continue
            if start > stop:
                run.errors.append(
                    semantic_warning(
                        f"range({format_number(start)}, {format_number(stop)}) is empty;"
                        " the loop body never runs",
                        tok.line,
                        tok.column,
                    )
                )

    # ── post-pass rules ──────────────────────────────────────────

    def _check_calls(self, run: _Run) -> None:
        for tok, args in run.calls:
            function = run.table.get(tok.value)
            if tok.value not in run.functions or function is None:
                continue
            if function.kind != SymbolKind.FUNCTION:
                continue
            if any(arg and is_op(arg[0], "*", "**") for arg in args):
                continue
            roles = [
                s.value
                for s in run.table.scoped_to(tok.value)
                if s.kind == SymbolKind.PARAMETER
                and s.declaration_line >= function.declaration_line
            ]
            if "varargs" in roles:
                continue
            required = roles.count("required")
            maximum = required + roles.count("default")
            given = len(args)
            if required <= given <= maximum or ("kwargs" in roles and given >= required):
                continue
            expected = str(required) if required == maximum else f"{required} to {maximum}"
            run.errors.append(
                semantic_error(
                    f"Function '{tok.value}' expects {expected} argument(s) but {given} given",
                    tok.line,
                    tok.column,
                )
            )

    def _check_function_bodies(self, run: _Run) -> None:
        for key, tok in run.functions.items():
            body = run.bodies.get(key, [])
            body_tokens = [t for line in body for t in line.tokens]
            name = tok.value.lower()
            pluses = sum(1 for t in body_tokens if is_op(t, "+", "+="))
            minuses = sum(
                1
                for i, t in enumerate(body_tokens)
                if is_op(t, "-", "-=")
                and i > 0
                and body_tokens[i - 1].kind in (lex.IDENTIFIER, lex.NUMBER)
            )
            if any(word in name for word in ADDITION_NAMES) and minuses and not pluses:
                run.errors.append(
                    semantic_warning(
                        f"Function '{tok.value}' suggests addition but subtracts",
                        tok.line,
                        tok.column,
                    )
                )
            elif any(word in name for word in SUBTRACTION_NAMES) and pluses and not minuses:
                run.errors.append(
                    semantic_warning(
                        f"Function '{tok.value}' suggests subtraction but adds",
                        tok.line,
                        tok.column,
                    )
                )
            if tok.value == "__init__" and body:
                self._check_constructor(run, body)

    @staticmethod
    def _check_constructor(run: _Run, body: list[LogicalLine]) -> None:
        header = body[0].tokens
        open_index = next((i for i, t in enumerate(header) if is_sep(t, "(")), None)
        if open_index is None:
            return
        params = list(parse_parameters(header, open_index).values())
        names = {p.token.value for p in params[1:]}
        for line in body[1:]:
            toks = line.tokens
            if len(toks) != 5:
                continue
            receiver, dot, attribute, equals, value = toks
            if not (
                receiver.value == "self"
                and is_delim(dot, ".")
                and is_op(equals, "=")
                and value.kind == lex.IDENTIFIER
            ):
                continue
            if attribute.value in names and value.value in names and attribute.value != value.value:
                run.errors.append(
                    semantic_warning(
                        f"'self.{attribute.value}' is assigned parameter '{value.value}'"
                        f" instead of '{attribute.value}'",
                        attribute.line,
                        attribute.column,
                    )
                )

    @staticmethod
    def _check_unused(run: _Run) -> None:
        for name, tok in run.variables.items():
            if name in run.used or name.startswith("_") or name == "self":
                continue
            run.errors.append(
                semantic_warning(
                    f"Variable '{name}' is assigned but never used", tok.line, tok.column
                )
            )
