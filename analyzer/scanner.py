"""Ordered-pattern scanning — first matching rule at the cursor wins.

Rule tables are explicit ordered lists: error-shaped patterns must come
before the generic patterns they would otherwise lose to.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from . import constants
from .models import Token

logger = logging.getLogger(__name__)


class ScannerConfigError(RuntimeError):
    """A rule matched an empty lexeme; scanning cannot make progress."""


@dataclass(frozen=True)
class ScanRule:
    kind: str
    pattern: re.Pattern
    subkind: str | None = None


def compile_rules(
    table: list[tuple[str, str]] | list[tuple[str, str, str | None]],
    flags: int = 0,
) -> tuple[ScanRule, ...]:
    """Compile ``(kind, regex[, subkind])`` entries once, preserving order."""
    rules = []
    for entry in table:
        kind, regex = entry[0], entry[1]
        subkind = entry[2] if len(entry) > 2 else None
        rules.append(ScanRule(kind, re.compile(regex, flags), subkind))
    return tuple(rules)


def is_error_kind(kind: str) -> bool:
    return kind.startswith(constants.ERROR_KIND_PREFIX) or kind == constants.KIND_INVALID


def advance_position(text: str, line: int, column: int) -> tuple[int, int]:
    """Return the (line, column) reached after consuming *text*."""
    newlines = text.count("\n")
    if newlines == 0:
        return line, column + len(text)
    return line + newlines, len(text) - text.rfind("\n")


@dataclass
class ScanResult:
    tokens: list[Token] = field(default_factory=list)
    end_line: int = 1
    end_column: int = 1
    skipped_chars: int = 0


class PatternScanner:
    """Anchored priority-ordered scanner.

    At each cursor position the rules are tried in order and the first one
    matching exactly at the cursor wins. WHITESPACE and NEWLINE lexemes
    advance the position but are not emitted.
    """

    def __init__(self, rules: tuple[ScanRule, ...], name: str = "scanner"):
        self.rules = rules
        self.name = name

    def scan(self, source: str, line: int = 1, column: int = 1) -> ScanResult:
        tokens: list[Token] = []
        pos = 0
        skipped = 0
        end = len(source)
        while pos < end:
            rule, match = self._match_at(source, pos)
            if match is None:
                # No catch-all rule matched: drop one character silently.
                line, column = advance_position(source[pos], line, column)
                pos += 1
                skipped += 1
                continue
            lexeme = match.group(0)
            if not lexeme:
                raise ScannerConfigError(
                    f"{self.name}: rule {rule.kind} matched an empty lexeme"
                    f" at {line}:{column}"
                )
            if rule.kind not in constants.SKIPPED_KINDS:
                tokens.append(
                    Token(
                        value=lexeme,
                        kind=rule.kind,
                        line=line,
                        column=column,
                        subkind=rule.subkind,
                    )
                )
            line, column = advance_position(lexeme, line, column)
            pos = match.end()
        logger.debug("%s produced %d tokens", self.name, len(tokens))
        return ScanResult(tokens, line, column, skipped)

    def _match_at(self, source: str, pos: int):
        for rule in self.rules:
            match = rule.pattern.match(source, pos)
            if match is not None:
                return rule, match
        return None, None


class AlternationScanner:
    """Single-pass scanner over one combined named-group alternation.

    Uses unanchored ``finditer`` semantics, so characters no alternative
    covers are skipped. Columns count characters from the start of input
    and are not reset on newline.
    """

    def __init__(
        self,
        table: list[tuple[str, str, str | None]],
        flags: int = 0,
        name: str = "scanner",
    ):
        self.name = name
        self._groups: dict[str, tuple[str, str | None]] = {}
        parts = []
        for index, (kind, regex, subkind) in enumerate(table):
            group = f"g{index}_{kind}"
            self._groups[group] = (kind, subkind)
            parts.append(f"(?P<{group}>{regex})")
        self.pattern = re.compile("|".join(parts), flags)

    def scan(self, source: str) -> ScanResult:
        tokens: list[Token] = []
        line = 1
        column = 1
        last_end = 0
        skipped = 0
        for match in self.pattern.finditer(source):
            lexeme = match.group(0)
            if not lexeme:
                raise ScannerConfigError(
                    f"{self.name}: rule {match.lastgroup} matched an empty lexeme"
                    f" at {line}:{column}"
                )
            gap = source[last_end : match.start()]
            line += gap.count("\n")
            column += len(gap)
            skipped += len(gap)
            kind, subkind = self._groups[match.lastgroup]
            if kind not in constants.SKIPPED_KINDS:
                tokens.append(
                    Token(value=lexeme, kind=kind, line=line, column=column, subkind=subkind)
                )
            line += lexeme.count("\n")
            column += len(lexeme)
            last_end = match.end()
        tail = source[last_end:]
        line += tail.count("\n")
        column += len(tail)
        skipped += len(tail)
        logger.debug("%s produced %d tokens", self.name, len(tokens))
        return ScanResult(tokens, line, column, skipped)
