"""Lexical scanners, one per supported language."""

from __future__ import annotations

import importlib

from ._base import BaseLexer

# Lazy imports to avoid compiling every rule table at startup
_LEXER_CLASSES: dict[str, str] = {
    "html": "html.HtmlLexer",
    "python": "python.PythonLexer",
    "sql": "sql.SqlLexer",
}


def get_lexer(language: str) -> BaseLexer:
    """Instantiate the lexer for *language*.

    Raises ``ValueError`` if *language* has no registered lexer.
    """
    spec = _LEXER_CLASSES.get(language)
    if spec is None:
        raise ValueError(f"Unsupported language for lexical analysis: {language}")
    module_name, class_name = spec.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    return getattr(mod, class_name)()


SUPPORTED_LEXER_LANGUAGES: tuple[str, ...] = tuple(_LEXER_CLASSES.keys())

__all__ = ["BaseLexer", "get_lexer", "SUPPORTED_LEXER_LANGUAGES"]
