"""SymbolTable — key → Symbol mapping owned by one analysis run."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping

from .models import Symbol, SymbolKind


class SymbolTable(MutableMapping[str, Symbol]):
    """Maps a plain name (or ``scope.name`` for SQL) to exactly one Symbol.

    Storage never rejects duplicates: the last writer for a key wins.
    Duplicate detection is a semantic rule, not a storage invariant.
    """

    def __init__(self, symbols: dict[str, Symbol] | None = None):
        self._symbols: dict[str, Symbol] = dict(symbols or {})

    def __getitem__(self, key: str) -> Symbol:
        return self._symbols[key]

    def __setitem__(self, key: str, symbol: Symbol) -> None:
        self._symbols[key] = symbol

    def __delitem__(self, key: str) -> None:
        del self._symbols[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolTable({len(self._symbols)} symbols)"

    def put(self, key: str, symbol: Symbol) -> Symbol:
        self._symbols[key] = symbol
        return symbol

    def declare(self, key: str, symbol: Symbol) -> Symbol:
        """Insert *symbol* only if *key* is absent; return the stored symbol."""
        return self._symbols.setdefault(key, symbol)

    def copy(self) -> SymbolTable:
        """Independent snapshot — mutating the copy never touches this table."""
        return SymbolTable(
            {key: sym.model_copy(deep=True) for key, sym in self._symbols.items()}
        )

    def of_kind(self, kind: SymbolKind) -> dict[str, Symbol]:
        return {k: s for k, s in self._symbols.items() if s.kind == kind}

    def scoped_to(self, scope: str) -> list[Symbol]:
        return [s for s in self._symbols.values() if s.scope == scope]

    def to_dict(self) -> dict[str, dict]:
        return {k: s.model_dump(mode="json") for k, s in sorted(self._symbols.items())}
