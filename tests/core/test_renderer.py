"""Tests for choosing between dedicated layouts and template substitution."""

import json

import pytest

from suisage.core.renderer import ResponseRenderer
from suisage.types import ActionResult

from conftest import POOL_ID, SUI, SUI_LONG, USDC, WALLET

PRICE = {"current": 1.23, "previous": 1.20, "lastUpdated": 1700000000000, "priceChange24h": 2.50}
POOL = {"id": POOL_ID, "tokens": [SUI, USDC], "reserves": [1, 2], "fee": 1.0, "tvl": 2.0, "apr": 3.0}


@pytest.fixture
def renderer(registry, symbols):
    return ResponseRenderer(registry, symbols)


def price_result():
    return ActionResult(tool="get_token_price", input={"token_type": SUI, "network": "MAINNET"}, output=PRICE)


class TestDedicatedLayouts:

    @pytest.mark.parametrize("template", [None, "", "   ", "${result}", "The price of SUI"])
    def test_priced_asset(self, renderer, template):
        assert renderer.render(template, [price_result()]) == "SUI: $1.2300 (+2.50%)"

    def test_spot_price(self, renderer):
        results = [ActionResult(
            tool="get_pool_spot_price",
            input={"pool_id": POOL_ID, "coin_in_type": SUI, "coin_out_type": USDC},
            output=0.998,
        )]
        assert renderer.render("${result}", results) == "The current spot price is 0.998000 USDC per SUI"

    def test_layout_that_does_not_fit_falls_back(self, renderer):
        results = [ActionResult(tool="get_token_price", input={"token_type": SUI}, output={"odd": 1})]
        assert renderer.render(None, results) == json.dumps({"odd": 1}, indent=2)


class TestTemplateSubstitution:

    def test_field_path(self, renderer):
        assert renderer.render("${result.current}", [price_result()]) == "1.230"

    def test_object_leaf_uses_tool_layout(self, renderer):
        results = [ActionResult(tool="get_pool_info", input={"pool_id": POOL_ID}, output=POOL)]
        text = renderer.render("Here you go:\n${result}\nAnything else?", results)

        assert text.startswith("Here you go:\nThis pool has a Total Value Locked")
        assert "Pool Information" in text
        assert text.endswith("\nAnything else?")

    def test_unshaped_tool_dumps_json(self, renderer):
        route = {"coinIn": {"type": SUI}, "routes": []}
        results = [ActionResult(tool="get_trade_route", input={}, output=route)]

        assert renderer.render("Route: ${result}", results) == "Route: " + json.dumps(route, indent=2)

    def test_unshaped_tool_without_template(self, renderer):
        results = [ActionResult(tool="get_staking_positions", input={"wallet_address": WALLET}, output=[])]
        assert renderer.render(None, results) == "No data found"

    def test_tool_template_used_when_plan_has_none(self, renderer):
        orders = [{"objectId": "0xorder1"}]
        results = [ActionResult(tool="get_dca_orders", input={"wallet_address": WALLET}, output=orders)]

        assert renderer.render(None, results) == "DCA Orders for wallet:\n" + json.dumps(orders, indent=2)

    def test_plan_template_wins_over_tool_template(self, renderer):
        results = [ActionResult(tool="get_dca_orders", input={"wallet_address": WALLET}, output=[])]
        assert renderer.render("Orders: ${result}", results) == "Orders: No data found"

    def test_unresolvable_path_is_kept(self, renderer):
        assert renderer.render("SUI is ${result.price}", [price_result()]) == "SUI is ${result.price}"

    def test_plain_text_for_unshaped_tool(self, renderer):
        results = [ActionResult(tool="get_trade_route", input={}, output={})]
        assert renderer.render("Done.", results) == "Done."


class TestMixedResults:
    """Each placeholder is laid out with the tool and input of its own result."""

    def test_indexed_results_use_their_own_input(self, renderer):
        results = [
            price_result(),
            ActionResult(
                tool="get_token_price",
                input={"token_type": USDC, "network": "MAINNET"},
                output={"current": 0.9998, "priceChange24h": -0.03},
            ),
        ]

        text = renderer.render("${results[0]} | ${results[1]}", results)

        assert text == "SUI: $1.2300 (+2.50%) | USDC: $0.9998 (-0.03%)"

    def test_second_result_uses_its_own_tool_layout(self, renderer):
        results = [
            price_result(),
            ActionResult(tool="get_pool_info", input={"pool_id": POOL_ID}, output=POOL),
        ]

        text = renderer.render("Price: ${results[0]}\nPool: ${results[1]}", results)

        assert text.startswith("Price: SUI: $1.2300 (+2.50%)\nPool: This pool has a Total Value Locked")
        assert "Pool Information" in text

    def test_keyed_price_map_entry(self, renderer):
        prices = {SUI_LONG: PRICE, USDC: {"current": 0.9998, "priceChange24h": -0.03}}
        results = [ActionResult(tool="get_coins_price_info", input={"coins": [SUI, USDC]}, output=prices)]

        assert renderer.render("SUI now: ${results['SUI']}", results) == "SUI now: SUI: $1.2300 (+2.50%)"
        assert renderer.render("${results['USDC']}!", results) == "USDC: $0.9998 (-0.03%)!"

    def test_price_map_entry_by_path(self, renderer):
        prices = {SUI_LONG: PRICE}
        results = [ActionResult(tool="get_coins_price_info", input={"coins": [SUI]}, output=prices)]

        assert renderer.render(f"Got ${{result['{SUI_LONG}']}}", results) == "Got SUI: $1.2300 (+2.50%)"

    def test_pool_list_element(self, renderer):
        results = [ActionResult(tool="get_all_pools", input={"network": "MAINNET"}, output=[POOL])]

        text = renderer.render("Top pool:\n${results[0][0]}", results)

        assert text.startswith("Top pool:\nThis pool has a Total Value Locked (TVL) of $2.00")
        assert f"ID: {POOL_ID}" in text

    def test_price_map_without_price_objects_dumps_json(self, renderer):
        odd = {SUI_LONG: 1.23}
        results = [ActionResult(tool="get_coins_price_info", input={"coins": [SUI]}, output=odd)]

        assert renderer.render("Prices: ${result}", results) == "Prices: " + json.dumps(odd, indent=2)


class TestNoResults:

    def test_returns_template(self, renderer):
        assert renderer.render("Sui is a layer 1 blockchain.", []) == "Sui is a layer 1 blockchain."

    def test_returns_empty_without_template(self, renderer):
        assert renderer.render(None, []) == ""
