"""Command-line entry point: analyze one source file and print the results."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from . import constants
from .models import AnalysisError
from .pipeline import run_analysis
from .run_types import AnalysisConfig, AnalysisResult
from .token_stats import count_kinds, count_severities

logger = logging.getLogger(__name__)

DEMO_SOURCE = """\
def add(a, b):
    return a - b

total = add(1, 2)
print(totl)
"""


def _section(title: str, rows: list[str]) -> None:
    print(f"═══ {title} ═══")
    for row in rows:
        print(f"  {row}")
    print()


def _diagnostic_rows(errors: list[AnalysisError]) -> list[str]:
    rows = [
        f"{err.severity.value:<8}{err.full_message}"
        for err in sorted(errors, key=lambda e: (e.line, e.column))
    ]
    return rows or ["(none)"]


def _print_result(result: AnalysisResult, args: argparse.Namespace) -> None:
    print(f"Language: {result.language}")
    print()
    if args.tokens:
        _section("Tokens", [str(tok) for tok in result.tokens])
    _section("Lexical diagnostics", _diagnostic_rows(result.lexical_errors))
    _section("Syntactic diagnostics", _diagnostic_rows(result.syntactic_errors))
    _section("Semantic diagnostics", _diagnostic_rows(result.semantic_errors))
    if args.symbols:
        _section(
            "Symbols",
            [f"{key}: {result.symbols[key]}" for key in sorted(result.symbols)],
        )
    if args.trace:
        _section("Trace", result.trace)
    if args.stats:
        kinds = count_kinds(result.tokens)
        _section(
            "Token kinds",
            [f"{kind:<32} {count}" for kind, count in sorted(kinds.items())],
        )
        severities = count_severities(result.all_errors())
        _section(
            "Diagnostic severities",
            [f"{name:<32} {count}" for name, count in sorted(severities.items())]
            or ["(none)"],
        )
        print(result.stats.report())
        print()
    print("Result: " + ("SUCCESS" if result.success else "FAILED"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multi-lang-analyzer",
        description="Lexical, structural and semantic analysis of HTML, Python and SQL",
    )
    parser.add_argument("file", nargs="?", help="Source file to analyze")
    parser.add_argument(
        "--language",
        "-l",
        default="",
        choices=["", *constants.SUPPORTED_LANGUAGES],
        help="Skip detection and analyze as this language",
    )
    parser.add_argument("--tokens", action="store_true", help="Print the token stream")
    parser.add_argument("--symbols", action="store_true", help="Print the symbol table")
    parser.add_argument("--trace", action="store_true", help="Print the execution trace")
    parser.add_argument(
        "--stats", action="store_true", help="Print token-kind counts and stage timings"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the whole result as JSON"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log pipeline progress to stderr"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    if not args.file:
        # Demo mode: use a built-in example
        source = DEMO_SOURCE
        if not args.json:
            print("No file provided. Using built-in demo:\n")
            print(source)
    else:
        with open(args.file, encoding="utf-8") as f:
            source = f.read()

    result = run_analysis(source, AnalysisConfig(language=args.language))
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        _print_result(result, args)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
