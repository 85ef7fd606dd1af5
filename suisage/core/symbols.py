"""Symbol table and resolver for Sui coin types.

The table maps human-friendly symbols (SUI, USDC) to canonical Move coin
types (``0x2::sui::SUI``). It is loaded once from YAML and never mutated,
so a single resolver can be shared by concurrent queries.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import yaml

from ..coin_types import normalize_coin_type
from .errors import UnknownSymbol

logger = logging.getLogger(__name__)


def load_symbol_table(path: Path) -> Mapping[str, str]:
    """Load ``symbol -> coin type`` from a YAML file with a top-level ``symbols`` key."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    raw = data.get("symbols", data) if isinstance(data, dict) else {}
    if not isinstance(raw, dict):
        raise ValueError(f"Symbol file {path} must contain a mapping of symbols")

    table: Dict[str, str] = {}
    for symbol, coin_type in raw.items():
        if not isinstance(coin_type, str) or not coin_type:
            raise ValueError(f"Symbol {symbol!r} in {path} has no coin type")
        table[str(symbol).upper()] = coin_type

    logger.debug(f"Loaded {len(table)} symbols from {path}")
    return MappingProxyType(table)


class SymbolResolver:
    """Resolves coin symbols to canonical coin types and back."""

    def __init__(self, table: Mapping[str, Any]):
        self._table: Mapping[str, str] = MappingProxyType(
            {str(symbol).upper(): str(coin_type) for symbol, coin_type in table.items()}
        )
        self._reverse: Mapping[str, str] = MappingProxyType(
            {normalize_coin_type(coin_type): symbol for symbol, coin_type in self._table.items()}
        )

    @classmethod
    def from_file(cls, path: Path) -> "SymbolResolver":
        return cls(load_symbol_table(path))

    @property
    def table(self) -> Mapping[str, str]:
        return self._table

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.try_resolve(symbol) is not None

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._table.items())

    def __len__(self) -> int:
        return len(self._table)

    def try_resolve(self, symbol: str) -> Optional[str]:
        if not isinstance(symbol, str):
            return None
        candidate = symbol.strip()
        coin_type = self._table.get(candidate.upper())
        if coin_type is not None:
            return coin_type
        # Already a known canonical identifier (short or long address form)
        normalized = normalize_coin_type(candidate)
        known_symbol = self._reverse.get(normalized)
        if known_symbol is not None:
            return self._table[known_symbol]
        return None

    def resolve(self, symbol: str) -> str:
        coin_type = self.try_resolve(symbol)
        if coin_type is None:
            raise UnknownSymbol(str(symbol))
        return coin_type

    def symbol_for(self, coin_type: str) -> str:
        """Reverse lookup, falling back to the coin type's name segment."""
        symbol = self._reverse.get(normalize_coin_type(coin_type))
        if symbol is not None:
            return symbol
        if isinstance(coin_type, str) and "::" in coin_type:
            return coin_type.split("::")[-1] or "Unknown"
        return coin_type or "Unknown"
