"""Fixed layouts for the result shapes the generic template renders poorly."""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .symbols import SymbolResolver
from .tools import ResultShape

logger = logging.getLogger(__name__)

# Reserves are reported in base units with 9 decimals.
RESERVE_SCALE = 1e9


def _number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    return float(value)


def format_currency(value: Any) -> str:
    """Two decimals at or above $100, four below."""
    amount = _number(value)
    decimals = 2 if amount >= 100 else 4
    return f"${amount:,.{decimals}f}"


def format_change(value: Any) -> str:
    change = _number(value)
    sign = "+" if change > 0 else ""
    return f"{sign}{change:.2f}%"


def format_priced_asset(symbol: str, price: Mapping[str, Any]) -> str:
    """``SUI: $1.2300 (+2.50%)``; the change is omitted when unknown."""
    line = f"{symbol}: {format_currency(price['current'])}"
    change = price.get("priceChange24h")
    if change is not None:
        line += f" ({format_change(change)})"
    return line


def format_price_map(prices: Mapping[str, Any], symbols: SymbolResolver) -> str:
    """One priced line per coin. Raises ValueError when no entry is a price object."""
    lines = ["Current prices:"]
    for coin_type, price in prices.items():
        if isinstance(price, Mapping):
            lines.append(format_priced_asset(symbols.symbol_for(coin_type), price))
    if len(lines) == 1:
        if prices:
            raise ValueError("price map holds no price objects")
        lines.append("No data found")
    return "\n".join(lines)


def format_pool(pool: Mapping[str, Any], symbols: SymbolResolver) -> str:
    tvl = _number(pool.get("tvl", 0))
    fee = _number(pool.get("fee", 0))
    apr = _number(pool.get("apr", 0))
    names = [symbols.symbol_for(token) for token in pool.get("tokens", [])]
    reserves = list(pool.get("reserves", []))

    rows = []
    for index, name in enumerate(names):
        reserve = _number(reserves[index]) / RESERVE_SCALE if index < len(reserves) else 0.0
        rows.append(f"{name:<10}: {reserve:>12,.2f}")

    summary = (
        f"This pool has a Total Value Locked (TVL) of ${tvl:,.2f}, "
        f"generates ${fee:,.2f} in daily fees, and offers an APR of {apr:.2f}%.\n"
        f"The pool contains the following tokens: {', '.join(names)}"
    )
    block = "\n".join(
        [
            "Pool Information",
            "================",
            f"ID: {pool['id']}",
            "",
            "Tokens and Reserves:",
            *rows,
            "",
            "Pool Stats:",
            f"• TVL: ${tvl:,.2f}",
            f"• Daily Fees: ${fee:,.2f}",
            f"• APR: {apr:.2f}%",
        ]
    )
    return f"{summary}\n\n{block}"


def format_pool_list(pools: Sequence[Mapping[str, Any]]) -> str:
    if not pools:
        return "No data found"
    entries = []
    for index, pool in enumerate(pools, start=1):
        entries.append(
            f"{index}. Pool {pool['id']}\n"
            f"    TVL: ${_number(pool.get('tvl', 0)):,.2f}\n"
            f"    APR: {_number(pool.get('apr', 0)):.2f}%\n"
            f"    Daily Fees: ${_number(pool.get('fee', 0)):,.2f}"
        )
    return "\n\n".join(entries)


def format_spot_price(price: Any, arguments: Mapping[str, Any], symbols: SymbolResolver) -> str:
    coin_in = symbols.symbol_for(arguments.get("coin_in_type") or "token")
    coin_out = symbols.symbol_for(arguments.get("coin_out_type") or "token")
    return f"The current spot price is {_number(price):.6f} {coin_out} per {coin_in}"


def _priced_asset(output: Any, arguments: Mapping[str, Any], symbols: SymbolResolver) -> str:
    return format_priced_asset(symbols.symbol_for(arguments.get("token_type", "")), output)


ShapeFormatter = Callable[[Any, Mapping[str, Any], SymbolResolver], str]

SHAPE_FORMATTERS: Dict[ResultShape, ShapeFormatter] = {
    ResultShape.PRICED_ASSET: _priced_asset,
    ResultShape.PRICE_MAP: lambda output, arguments, symbols: format_price_map(output, symbols),
    ResultShape.POOL: lambda output, arguments, symbols: format_pool(output, symbols),
    ResultShape.POOL_LIST: lambda output, arguments, symbols: format_pool_list(output),
    ResultShape.SPOT_PRICE: format_spot_price,
}


def format_shape(
    shape: ResultShape,
    output: Any,
    arguments: Mapping[str, Any],
    symbols: SymbolResolver,
) -> Optional[str]:
    """Apply the formatter for ``shape``, or return None if the output does not fit it."""
    formatter = SHAPE_FORMATTERS.get(shape)
    if formatter is None:
        return None
    try:
        return formatter(output, arguments, symbols)
    except (KeyError, TypeError, ValueError, AttributeError, IndexError) as exc:
        logger.debug(f"Output does not fit the {shape.value} layout: {exc}")
        return None
