"""Literal examples for each dedicated result layout."""

from suisage.core.formatters import (
    format_currency,
    format_pool,
    format_pool_list,
    format_price_map,
    format_priced_asset,
    format_shape,
    format_spot_price,
)
from suisage.core.tools import ResultShape

from conftest import CETUS, POOL_ID, SUI, SUI_LONG, USDC

PRICE = {"current": 1.23, "previous": 1.20, "lastUpdated": 1700000000000, "priceChange24h": 2.50}

POOL = {
    "id": POOL_ID,
    "tokens": [SUI, USDC],
    "reserves": [5_000_000_000_000, 6_150_000_000_000],
    "fee": 120.5,
    "tvl": 1_234_567.891,
    "apr": 12.5,
}


class TestPricedAsset:

    def test_small_price_has_four_decimals(self):
        assert format_priced_asset("SUI", PRICE) == "SUI: $1.2300 (+2.50%)"

    def test_large_price_has_two_decimals_and_separators(self):
        price = {"current": 3456.789, "priceChange24h": -1.234}
        assert format_priced_asset("WETH", price) == "WETH: $3,456.79 (-1.23%)"

    def test_boundary_at_one_hundred(self):
        assert format_currency(100) == "$100.00"
        assert format_currency(99.5) == "$99.5000"

    def test_zero_change_has_no_plus(self):
        assert format_priced_asset("USDC", {"current": 1, "priceChange24h": 0}) == "USDC: $1.0000 (0.00%)"

    def test_unknown_change_is_omitted(self):
        assert format_priced_asset("SUI", {"current": 1.23, "priceChange24h": None}) == "SUI: $1.2300"


def test_price_map(symbols):
    prices = {SUI_LONG: PRICE, USDC: {"current": 0.9998, "priceChange24h": -0.03}}

    assert format_price_map(prices, symbols) == (
        "Current prices:\n"
        "SUI: $1.2300 (+2.50%)\n"
        "USDC: $0.9998 (-0.03%)"
    )


def test_pool(symbols):
    assert format_pool(POOL, symbols) == (
        "This pool has a Total Value Locked (TVL) of $1,234,567.89, "
        "generates $120.50 in daily fees, and offers an APR of 12.50%.\n"
        "The pool contains the following tokens: SUI, USDC\n"
        "\n"
        "Pool Information\n"
        "================\n"
        f"ID: {POOL_ID}\n"
        "\n"
        "Tokens and Reserves:\n"
        "SUI       :     5,000.00\n"
        "USDC      :     6,150.00\n"
        "\n"
        "Pool Stats:\n"
        "• TVL: $1,234,567.89\n"
        "• Daily Fees: $120.50\n"
        "• APR: 12.50%"
    )


def test_pool_list():
    pools = [POOL, {"id": "0xpool2", "tokens": [SUI, CETUS], "reserves": [1, 2], "fee": 10, "tvl": 50000, "apr": 40}]

    assert format_pool_list(pools) == (
        f"1. Pool {POOL_ID}\n"
        "    TVL: $1,234,567.89\n"
        "    APR: 12.50%\n"
        "    Daily Fees: $120.50\n"
        "\n"
        "2. Pool 0xpool2\n"
        "    TVL: $50,000.00\n"
        "    APR: 40.00%\n"
        "    Daily Fees: $10.00"
    )


def test_empty_pool_list():
    assert format_pool_list([]) == "No data found"


def test_spot_price(symbols):
    text = format_spot_price(0.998, {"coin_in_type": SUI, "coin_out_type": USDC}, symbols)
    assert text == "The current spot price is 0.998000 USDC per SUI"


class TestFormatShape:

    def test_priced_asset_uses_resolved_input(self, symbols):
        text = format_shape(ResultShape.PRICED_ASSET, PRICE, {"token_type": SUI}, symbols)
        assert text == "SUI: $1.2300 (+2.50%)"

    def test_mismatched_output_returns_none(self, symbols):
        assert format_shape(ResultShape.POOL, {"unexpected": True}, {}, symbols) is None
        assert format_shape(ResultShape.PRICED_ASSET, [1, 2], {}, symbols) is None
        assert format_shape(ResultShape.SPOT_PRICE, "n/a", {}, symbols) is None

    def test_price_map_of_scalars_returns_none(self, symbols):
        assert format_shape(ResultShape.PRICE_MAP, {SUI_LONG: 1.23}, {}, symbols) is None
        assert format_shape(ResultShape.PRICE_MAP, {}, {}, symbols) == "Current prices:\nNo data found"
