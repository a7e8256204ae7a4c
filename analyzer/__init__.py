"""Multi-language source analyzer package."""

from .pipeline import run_analysis  # noqa: F401
from .run_types import AnalysisConfig, AnalysisResult  # noqa: F401
from .api import (  # noqa: F401
    detect,
    tokenize_source,
    dump_tokens,
    dump_symbols,
    dump_diagnostics,
    token_kind_stats,
)
