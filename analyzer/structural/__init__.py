"""Structural (syntactic) analyzers, one per supported language."""

from __future__ import annotations

import importlib

from .. import constants
from ._base import StructuralAnalyzer

_ANALYZER_CLASSES: dict[str, str] = {
    "html": "html.HtmlStructuralAnalyzer",
    "python": "python.PythonStructuralAnalyzer",
    "sql": "sql.SqlStructuralAnalyzer",
}


def get_structural_analyzer(
    language: str, indent_width: int = constants.INDENT_WIDTH
) -> StructuralAnalyzer:
    """Instantiate the structural analyzer for *language*.

    ``indent_width`` only applies to indentation-sensitive languages.
    Raises ``ValueError`` if *language* has no registered analyzer.
    """
    spec = _ANALYZER_CLASSES.get(language)
    if spec is None:
        raise ValueError(f"Unsupported language for structural analysis: {language}")
    module_name, class_name = spec.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    cls = getattr(mod, class_name)
    if language == constants.LANG_PYTHON:
        return cls(indent_width=indent_width)
    return cls()


SUPPORTED_STRUCTURAL_LANGUAGES: tuple[str, ...] = tuple(_ANALYZER_CLASSES.keys())

__all__ = [
    "StructuralAnalyzer",
    "get_structural_analyzer",
    "SUPPORTED_STRUCTURAL_LANGUAGES",
]
