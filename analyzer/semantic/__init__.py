"""Semantic analyzers, one per supported language."""

from __future__ import annotations

import importlib

from ._base import SemanticAnalyzer

_ANALYZER_CLASSES: dict[str, str] = {
    "html": "html.HtmlSemanticAnalyzer",
    "python": "python.PythonSemanticAnalyzer",
    "sql": "sql.SqlSemanticAnalyzer",
}


def get_semantic_analyzer(language: str) -> SemanticAnalyzer:
    """Instantiate the semantic analyzer for *language*.

    Raises ``ValueError`` if *language* has no registered analyzer.
    """
    spec = _ANALYZER_CLASSES.get(language)
    if spec is None:
        raise ValueError(f"Unsupported language for semantic analysis: {language}")
    module_name, class_name = spec.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    return getattr(mod, class_name)()


SUPPORTED_SEMANTIC_LANGUAGES: tuple[str, ...] = tuple(_ANALYZER_CLASSES.keys())

__all__ = ["SemanticAnalyzer", "get_semantic_analyzer", "SUPPORTED_SEMANTIC_LANGUAGES"]
