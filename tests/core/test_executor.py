"""Tests for action validation, symbol resolution and ordered dispatch."""

import pytest

from suisage.core.errors import (
    InvalidParameter,
    MissingParameter,
    ToolExecutionFailure,
    UnknownSymbol,
    UnknownTool,
)
from suisage.core.executor import ActionExecutor, coerce_value, to_plain
from suisage.core.models import Action
from suisage.core.tools import ParameterSpec, ParameterType
from suisage.types import TokenPrice

from conftest import POOL_ID, SUI, SUI_LONG, USDC, WALLET


@pytest.fixture
def executor(registry, symbols):
    return ActionExecutor(registry, symbols)


# =============================================================================
# Argument preparation
# =============================================================================


class TestPrepareArguments:

    def test_resolves_asset_reference(self, executor, registry):
        args = executor.prepare_arguments(registry.lookup("get_token_price"), {"token_type": "sui"})
        assert args == {"token_type": SUI, "network": "MAINNET"}

    def test_resolves_arrays_element_wise(self, executor, registry):
        args = executor.prepare_arguments(
            registry.lookup("get_coins_price_info"),
            {"coins": ["SUI", USDC]},
        )
        assert args["coins"] == [SUI, USDC]

    def test_scalar_becomes_one_element_array(self, executor, registry):
        args = executor.prepare_arguments(registry.lookup("get_coins_price_info"), {"coins": "USDC"})
        assert args["coins"] == [USDC]

    def test_non_asset_strings_unchanged(self, executor, registry):
        args = executor.prepare_arguments(registry.lookup("get_pool_info"), {"pool_id": "SUI"})
        assert args["pool_id"] == "SUI"

        args = executor.prepare_arguments(registry.lookup("get_dca_orders"), {"wallet_address": WALLET})
        assert args["wallet_address"] == WALLET

    def test_unknown_symbol(self, executor, registry):
        with pytest.raises(UnknownSymbol, match="DOGE"):
            executor.prepare_arguments(registry.lookup("get_token_price"), {"token_type": "DOGE"})

    def test_missing_required_parameter(self, executor, registry):
        with pytest.raises(MissingParameter) as exc_info:
            executor.prepare_arguments(registry.lookup("get_pool_info"), {"network": "MAINNET"})

        message = str(exc_info.value)
        assert "pool_id" in message
        assert "get_pool_info" in message

    def test_defaults_fill_missing_optionals(self, executor, registry):
        args = executor.prepare_arguments(registry.lookup("get_all_pools"), {})
        assert args == {"sort_by": "tvl", "limit": 10, "network": "MAINNET"}

    def test_arguments_follow_parameter_order(self, executor, registry):
        args = executor.prepare_arguments(
            registry.lookup("get_pool_spot_price"),
            {"network": "TESTNET", "coin_out_type": "USDC", "pool_id": POOL_ID, "coin_in_type": "SUI"},
        )
        assert list(args) == ["pool_id", "coin_in_type", "coin_out_type", "with_fees", "network"]

    def test_unknown_keys_ignored(self, executor, registry):
        args = executor.prepare_arguments(
            registry.lookup("get_token_price"),
            {"token_type": "SUI", "currency": "EUR"},
        )
        assert "currency" not in args

    def test_values_are_coerced(self, executor, registry):
        args = executor.prepare_arguments(
            registry.lookup("get_all_pools"),
            {"sort_by": "APR", "limit": "5"},
        )
        assert args["sort_by"] == "apr"
        assert args["limit"] == 5

    def test_enum_violation(self, executor, registry):
        with pytest.raises(InvalidParameter, match="sort_by"):
            executor.prepare_arguments(registry.lookup("get_all_pools"), {"sort_by": "volume"})


class TestCoerceValue:

    def spec(self, kind):
        return ParameterSpec(name="p", type=kind, description="p")

    def test_numbers(self):
        assert coerce_value("t", self.spec(ParameterType.NUMBER), "1.5") == 1.5
        assert coerce_value("t", self.spec(ParameterType.NUMBER), 3) == 3
        assert coerce_value("t", self.spec(ParameterType.INTEGER), "1_000_000") == 1_000_000
        assert coerce_value("t", self.spec(ParameterType.INTEGER), 2.0) == 2

    def test_bad_numbers(self):
        with pytest.raises(InvalidParameter):
            coerce_value("t", self.spec(ParameterType.NUMBER), "lots")
        with pytest.raises(InvalidParameter):
            coerce_value("t", self.spec(ParameterType.INTEGER), 2.5)
        with pytest.raises(InvalidParameter):
            coerce_value("t", self.spec(ParameterType.NUMBER), True)

    def test_booleans(self):
        assert coerce_value("t", self.spec(ParameterType.BOOLEAN), "false") is False
        assert coerce_value("t", self.spec(ParameterType.BOOLEAN), "TRUE") is True
        assert coerce_value("t", self.spec(ParameterType.BOOLEAN), True) is True
        with pytest.raises(InvalidParameter):
            coerce_value("t", self.spec(ParameterType.BOOLEAN), "maybe")

    def test_strings(self):
        assert coerce_value("t", self.spec(ParameterType.STRING), 42) == "42"
        with pytest.raises(InvalidParameter):
            coerce_value("t", self.spec(ParameterType.STRING), {"a": 1})


def test_to_plain_uses_camel_case():
    price = TokenPrice(current=1.23, previous=1.2, last_updated=1, price_change_24h=2.5)

    assert to_plain({"x": [price]}) == {
        "x": [{"current": 1.23, "previous": 1.2, "lastUpdated": 1, "priceChange24h": 2.5}]
    }


# =============================================================================
# Execution
# =============================================================================


class TestExecute:

    @pytest.mark.asyncio
    async def test_results_preserve_action_order(self, executor, market):
        actions = [
            Action(tool="get_token_price", input={"token_type": "SUI"}),
            Action(tool="get_all_pools", input={"limit": 1}),
            Action(tool="get_token_price", input={"token_type": "USDC"}),
        ]

        results = await executor.execute(actions)

        assert [r.tool for r in results] == ["get_token_price", "get_all_pools", "get_token_price"]
        assert results[0].output["current"] == 1.23
        assert results[0].output["priceChange24h"] == 2.5
        assert len(results[1].output) == 1
        assert results[2].input["token_type"] == USDC
        assert [call[0] for call in market.calls] == ["get_token_price", "get_all_pools", "get_token_price"]

    @pytest.mark.asyncio
    async def test_implementation_receives_positional_arguments(self, executor, market):
        await executor.execute([
            Action(
                tool="get_pool_spot_price",
                input={"pool_id": POOL_ID, "coin_in_type": "SUI", "coin_out_type": "USDC", "with_fees": "false"},
            )
        ])

        assert market.calls == [("get_spot_price", POOL_ID, SUI, USDC, False, "MAINNET")]

    @pytest.mark.asyncio
    async def test_price_map_keys_pass_through(self, executor):
        results = await executor.execute([Action(tool="get_coins_price_info", input={"coins": ["SUI"]})])

        assert list(results[0].output) == [SUI_LONG]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, executor, market):
        with pytest.raises(UnknownTool):
            await executor.execute([Action(tool="send_coins", input={})])
        assert market.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, executor, market):
        market.fail_on.add("get_token_price")

        with pytest.raises(ToolExecutionFailure) as exc_info:
            await executor.execute([Action(tool="get_token_price", input={"token_type": "SUI"})])

        assert exc_info.value.tool == "get_token_price"
        assert "unavailable" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_second_failure_aborts_and_stops(self, executor, market):
        market.fail_on.add("get_pool")
        actions = [
            Action(tool="get_token_price", input={"token_type": "SUI"}),
            Action(tool="get_pool_info", input={"pool_id": POOL_ID}),
            Action(tool="get_all_pools", input={}),
        ]

        with pytest.raises(ToolExecutionFailure):
            await executor.execute(actions)

        assert [call[0] for call in market.calls] == ["get_token_price", "get_pool"]

    @pytest.mark.asyncio
    async def test_validation_happens_before_dispatch(self, executor, market):
        with pytest.raises(MissingParameter):
            await executor.execute([Action(tool="get_pool_info", input={})])
        assert market.calls == []
