"""Shared data model — tokens, symbols and diagnostics used by every stage."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from . import constants


class Language(str, Enum):
    HTML = constants.LANG_HTML
    PYTHON = constants.LANG_PYTHON
    SQL = constants.LANG_SQL
    UNKNOWN = constants.LANG_UNKNOWN


class ErrorKind(str, Enum):
    LEXICAL = "lexical"
    SYNTACTIC = "syntactic"
    SEMANTIC = "semantic"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class SymbolKind(str, Enum):
    VARIABLE = "variable"
    FUNCTION = "function"
    CLASS = "class"
    TABLE = "table"
    COLUMN = "column"
    PARAMETER = "parameter"
    CONSTANT = "constant"
    TAG = "tag"
    ATTRIBUTE = "attribute"
    UNKNOWN = "unknown"


def _clamp(value: int) -> int:
    return max(value, 0)


class Token(BaseModel):
    """A classified lexeme with its 1-based source position."""

    model_config = ConfigDict(frozen=True)

    value: str
    kind: str
    line: int
    column: int
    subkind: str | None = None
    attributes: dict[str, str] = {}

    @field_validator("line", "column")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        return _clamp(v)

    @property
    def position(self) -> str:
        return f"{self.line}:{self.column}"

    def is_error(self) -> bool:
        return self.kind.startswith(constants.ERROR_KIND_PREFIX) or (
            self.kind == constants.KIND_INVALID
        )

    def __str__(self) -> str:
        sub = f"/{self.subkind}" if self.subkind else ""
        return f"{self.position:<8} {self.kind}{sub} {self.value!r}"


class Symbol(BaseModel):
    name: str
    kind: SymbolKind = SymbolKind.UNKNOWN
    data_type: str = constants.DEFAULT_DATA_TYPE
    scope: str = constants.GLOBAL_SCOPE
    declaration_line: int = 0
    declaration_column: int = 0
    initialized: bool = False
    value: Any = None

    def __str__(self) -> str:
        return (
            f"{self.name} [{self.kind.value}] type={self.data_type}"
            f" scope={self.scope} @{self.declaration_line}:{self.declaration_column}"
        )


class AnalysisError(BaseModel):
    """A lexical, syntactic or semantic finding.

    ``line``/``column`` default to 0 for positionless findings.
    """

    message: str
    kind: ErrorKind
    line: int = 0
    column: int = 0
    severity: Severity = Severity.ERROR
    suggestion: str = ""

    @field_validator("line", "column")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        return _clamp(v)

    def is_blocking(self) -> bool:
        return self.kind == ErrorKind.SYNTACTIC and self.severity == Severity.ERROR

    @property
    def full_message(self) -> str:
        text = f"[{self.kind.value}] ({self.line}:{self.column}) {self.message}"
        if self.suggestion:
            text += f" - {self.suggestion}"
        return text

    def __str__(self) -> str:
        return self.full_message


def lexical_error(message: str, line: int = 0, column: int = 0, **kwargs) -> AnalysisError:
    return AnalysisError(
        message=message, kind=ErrorKind.LEXICAL, line=line, column=column, **kwargs
    )


def syntax_error(message: str, line: int = 0, column: int = 0, **kwargs) -> AnalysisError:
    return AnalysisError(
        message=message, kind=ErrorKind.SYNTACTIC, line=line, column=column, **kwargs
    )


def semantic_error(
    message: str, line: int = 0, column: int = 0, **kwargs
) -> AnalysisError:
    return AnalysisError(
        message=message, kind=ErrorKind.SEMANTIC, line=line, column=column, **kwargs
    )


def semantic_warning(message: str, line: int = 0, column: int = 0, **kwargs) -> AnalysisError:
    return AnalysisError(
        message=message,
        kind=ErrorKind.SEMANTIC,
        line=line,
        column=column,
        severity=Severity.WARNING,
        **kwargs,
    )
