"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

LANG_HTML = "html"
LANG_PYTHON = "python"
LANG_SQL = "sql"
LANG_UNKNOWN = "unknown"

SUPPORTED_LANGUAGES: tuple[str, ...] = (LANG_HTML, LANG_PYTHON, LANG_SQL)

# Token kinds shared by every scanner
KIND_WHITESPACE = "WHITESPACE"
KIND_NEWLINE = "NEWLINE"
KIND_INVALID = "INVALID"
KIND_WORD = "WORD"
ERROR_KIND_PREFIX = "ERROR_"

SKIPPED_KINDS: frozenset[str] = frozenset({KIND_WHITESPACE, KIND_NEWLINE})

INDENT_WIDTH = 4

DEFAULT_DATA_TYPE = "unknown"
GLOBAL_SCOPE = "global"

NO_ANALYZER_MESSAGE = "No analyzer available for language: {language}"
SCANNER_FAULT_MESSAGE = "Scanner configuration fault: {detail}"
