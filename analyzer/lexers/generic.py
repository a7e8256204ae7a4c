"""Whitespace-split tokenization for text in no supported language."""

from __future__ import annotations

import re

from .. import constants
from ..models import Token

_WORD = re.compile(r"\S+")


def tokenize_words(source: str) -> list[Token]:
    tokens: list[Token] = []
    for line_no, text in enumerate(source.split("\n"), start=1):
        for match in _WORD.finditer(text):
            tokens.append(
                Token(
                    value=match.group(0),
                    kind=constants.KIND_WORD,
                    line=line_no,
                    column=match.start() + 1,
                )
            )
    return tokens
