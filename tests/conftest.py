"""Shared fixtures: a small symbol table and an in-memory market data provider."""

from typing import Any, Dict, List, Optional, Set
from unittest.mock import AsyncMock, MagicMock

import pytest

from suisage.core.symbols import SymbolResolver
from suisage.core.tools import build_default_registry
from suisage.providers.base import MarketDataError, MarketDataProvider
from suisage.providers.llm.base import LLMProvider
from suisage.types import PoolInfo, TokenPrice

SUI = "0x2::sui::SUI"
SUI_LONG = "0x" + "0" * 63 + "2::sui::SUI"
USDC = "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC"
CETUS = "0x06864a6f921804860930db6ddbe2e16acdf8504495ea7481637a1c8b9a8fe54b::cetus::CETUS"

POOL_ID = "0x97aae7a80abb29c9feabbe7075028550230401ffe7fb745757d3c28a30437408"
WALLET = "0x7f1d2c8e3a4b5c6d7e8f9a0b1c2d3e4f5a6b7c8d9e0f1a2b3c4d5e6f7a8b9c0d"


class FakeMarket(MarketDataProvider):
    """Canned market data; records every call in order."""

    name = "fake"

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail_on: Set[str] = set()
        self.prices: Dict[str, TokenPrice] = {
            SUI: TokenPrice(current=1.23, previous=1.20, last_updated=1700000000000, price_change_24h=2.5),
            USDC: TokenPrice(current=0.9998, previous=1.0001, last_updated=1700000000000, price_change_24h=-0.03),
        }
        self.pools: List[PoolInfo] = [
            PoolInfo(
                id=POOL_ID,
                tokens=[SUI, USDC],
                reserves=[5_000_000_000_000, 6_150_000_000_000],
                fee=120.5,
                tvl=1_234_567.891,
                apr=12.345,
            ),
            PoolInfo(id="0xpool2", tokens=[SUI, CETUS], reserves=[1, 2], fee=10.0, tvl=50_000.0, apr=40.0),
            PoolInfo(id="0xpool3", tokens=[USDC, CETUS], reserves=[3, 4], fee=300.0, tvl=900_000.0, apr=5.0),
        ]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if method in self.fail_on:
            raise MarketDataError(f"{method} unavailable")

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    async def get_token_price(self, asset_id: str, network: str = "MAINNET") -> TokenPrice:
        self._record("get_token_price", asset_id, network)
        return self.prices[asset_id]

    async def get_coins_price_info(self, asset_ids: List[str], network: str = "MAINNET") -> Dict[str, TokenPrice]:
        self._record("get_coins_price_info", list(asset_ids), network)
        # The live API answers with long-form coin types
        return {
            (SUI_LONG if asset_id == SUI else asset_id): self.prices[asset_id]
            for asset_id in asset_ids
        }

    async def get_pool(self, pool_id: str, network: str = "MAINNET") -> Optional[PoolInfo]:
        self._record("get_pool", pool_id, network)
        return next((pool for pool in self.pools if pool.id == pool_id), None)

    async def get_all_pools(self, network: str = "MAINNET") -> List[PoolInfo]:
        self._record("get_all_pools", network)
        return list(self.pools)

    async def get_spot_price(
        self,
        pool_id: str,
        coin_in_type: str,
        coin_out_type: str,
        with_fees: bool = True,
        network: str = "MAINNET",
    ) -> float:
        self._record("get_spot_price", pool_id, coin_in_type, coin_out_type, with_fees, network)
        return 0.998 if with_fees else 1.0

    async def get_trade_route(
        self,
        coin_in_type: str,
        coin_out_type: str,
        coin_in_amount: int,
        network: str = "MAINNET",
    ) -> Dict[str, Any]:
        self._record("get_trade_route", coin_in_type, coin_out_type, coin_in_amount, network)
        return {"coinIn": {"type": coin_in_type, "amount": coin_in_amount}, "routes": []}

    async def get_staking_positions(self, wallet_address: str, network: str = "MAINNET") -> List[Dict[str, Any]]:
        self._record("get_staking_positions", wallet_address, network)
        return []

    async def get_dca_orders(self, wallet_address: str, network: str = "MAINNET") -> List[Dict[str, Any]]:
        self._record("get_dca_orders", wallet_address, network)
        return [{"objectId": "0xorder1", "coinIn": SUI, "coinOut": USDC}]


@pytest.fixture
def symbols() -> SymbolResolver:
    return SymbolResolver({"SUI": SUI, "USDC": USDC, "CETUS": CETUS})


@pytest.fixture
def market() -> FakeMarket:
    return FakeMarket()


@pytest.fixture
def registry(market):
    return build_default_registry(market)


@pytest.fixture
def llm() -> MagicMock:
    """LLM double whose ``complete`` returns whatever the test sets."""
    provider = MagicMock(spec=LLMProvider)
    provider.complete = AsyncMock(return_value="")
    return provider
