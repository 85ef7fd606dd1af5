"""Aftermath Finance market data over its public REST API."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from ..coin_types import normalize_coin_type
from ..config import settings
from ..types import PoolInfo, TokenPrice
from .base import MarketDataError, MarketDataProvider

# Pool weights and trade fees are 18-decimal fixed point.
FIXED_ONE = 10 ** 18


def _to_int(value: Any) -> int:
    """Aftermath serializes bigints as strings, sometimes with a trailing 'n'."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    text = str(value).strip().rstrip("n")
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        return int(float(text))


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().rstrip("n")
    return float(text) if text else 0.0


class AftermathProvider(MarketDataProvider):
    """Market data provider backed by the Aftermath Finance API.

    One ``httpx.AsyncClient`` serves both networks; the caller owns its
    lifecycle through ``close()`` or ``async with``.
    """

    name = "aftermath"

    def __init__(
        self,
        *,
        mainnet_url: Optional[str] = None,
        testnet_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_urls = {
            "MAINNET": (mainnet_url or settings.aftermath_mainnet_url).rstrip("/"),
            "TESTNET": (testnet_url or settings.aftermath_testnet_url).rstrip("/"),
        }
        self.timeout_s = timeout if timeout is not None else settings.aftermath_timeout_seconds
        self._client = client or httpx.AsyncClient(
            timeout=self.timeout_s,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
        )
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self) -> "AftermathProvider":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _url(self, network: str, path: str) -> str:
        key = (network or "MAINNET").upper()
        if key not in self.base_urls:
            raise MarketDataError(f"Unsupported network: {network}")
        return f"{self.base_urls[key]}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        network: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Any:
        url = self._url(network, path)
        try:
            response = await self._client.request(method, url, json=json)
            if allow_not_found and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise MarketDataError(f"Aftermath API error ({status}) for {path}") from exc
        except httpx.RequestError as exc:
            raise MarketDataError(f"Aftermath request error for {path}: {exc}") from exc
        except ValueError as exc:
            raise MarketDataError(f"Aftermath returned invalid JSON for {path}") from exc

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        try:
            start = time.time()
            await self._request("POST", "MAINNET", "price-info", json={"coins": ["0x2::sui::SUI"]})
            return {"status": "healthy", "latency_ms": int((time.time() - start) * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    @staticmethod
    def _to_token_price(raw: Dict[str, Any]) -> TokenPrice:
        current = _to_float(raw.get("price"))
        change = raw.get("priceChange24HoursPercentage")
        change_pct = _to_float(change) if change is not None else None
        previous = current
        if change_pct is not None and change_pct != -100:
            previous = current / (1 + change_pct / 100)
        return TokenPrice(
            current=current,
            previous=previous,
            last_updated=int(time.time() * 1000),
            price_change_24h=change_pct,
        )

    async def _price_info(self, asset_ids: List[str], network: str) -> Dict[str, Any]:
        data = await self._request("POST", network, "price-info", json={"coins": list(asset_ids)})
        if not isinstance(data, dict):
            raise MarketDataError("Aftermath price-info response is not an object")
        return data

    async def get_token_price(self, asset_id: str, network: str = "MAINNET") -> TokenPrice:
        data = await self._price_info([asset_id], network)
        wanted = normalize_coin_type(asset_id)
        for coin_type, raw in data.items():
            if normalize_coin_type(coin_type) == wanted and isinstance(raw, dict):
                return self._to_token_price(raw)
        raise MarketDataError(f"No price available for {asset_id}")

    async def get_coins_price_info(self, asset_ids: List[str], network: str = "MAINNET") -> Dict[str, TokenPrice]:
        data = await self._price_info(asset_ids, network)
        return {
            coin_type: self._to_token_price(raw)
            for coin_type, raw in data.items()
            if isinstance(raw, dict)
        }

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    async def _pool_stats(self, pool_ids: List[str], network: str) -> List[Dict[str, Any]]:
        if not pool_ids:
            return []
        data = await self._request("POST", network, "pools/stats", json={"poolIds": pool_ids})
        if not isinstance(data, list):
            return [{} for _ in pool_ids]
        return [entry if isinstance(entry, dict) else {} for entry in data]

    @staticmethod
    def _to_pool_info(pool: Dict[str, Any], stats: Dict[str, Any], fallback_id: str = "") -> PoolInfo:
        coins = pool.get("coins") or {}
        return PoolInfo(
            id=pool.get("objectId") or pool.get("id") or fallback_id,
            tokens=list(coins.keys()),
            reserves=[_to_int(coin.get("balance")) for coin in coins.values()],
            fee=_to_float(stats.get("fees")),
            tvl=_to_float(stats.get("tvl")),
            apr=_to_float(stats.get("apr")),
        )

    async def _pool_object(self, pool_id: str, network: str) -> Optional[Dict[str, Any]]:
        data = await self._request("GET", network, f"pools/{pool_id}", allow_not_found=True)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise MarketDataError(f"Aftermath pool response for {pool_id} is not an object")
        return data

    async def get_pool(self, pool_id: str, network: str = "MAINNET") -> Optional[PoolInfo]:
        pool = await self._pool_object(pool_id, network)
        if pool is None:
            return None
        stats = await self._pool_stats([pool_id], network)
        return self._to_pool_info(pool, stats[0] if stats else {}, fallback_id=pool_id)

    async def get_all_pools(self, network: str = "MAINNET") -> List[PoolInfo]:
        data = await self._request("GET", network, "pools")
        if not isinstance(data, list):
            raise MarketDataError("Aftermath pools response is not a list")
        pools = [pool for pool in data if isinstance(pool, dict)]
        pool_ids = [pool.get("objectId") or pool.get("id") or "" for pool in pools]
        stats = await self._pool_stats([pid for pid in pool_ids if pid], network)
        stats_by_id = dict(zip([pid for pid in pool_ids if pid], stats))
        return [
            self._to_pool_info(pool, stats_by_id.get(pid, {}), fallback_id=pid or f"pool-{index}")
            for index, (pool, pid) in enumerate(zip(pools, pool_ids))
        ]

    async def get_spot_price(
        self,
        pool_id: str,
        coin_in_type: str,
        coin_out_type: str,
        with_fees: bool = True,
        network: str = "MAINNET",
    ) -> float:
        pool = await self._pool_object(pool_id, network)
        if pool is None:
            raise MarketDataError(f"Pool not found: {pool_id}")

        coins = {normalize_coin_type(k): v for k, v in (pool.get("coins") or {}).items()}
        coin_in = coins.get(normalize_coin_type(coin_in_type))
        coin_out = coins.get(normalize_coin_type(coin_out_type))
        if coin_in is None or coin_out is None:
            raise MarketDataError(f"Pool {pool_id} does not hold both {coin_in_type} and {coin_out_type}")

        # Weighted-pool spot price on decimal-normalized balances:
        # (B_out / W_out) / (B_in / W_in)
        balance_in = _to_int(coin_in.get("normalizedBalance") or coin_in.get("balance"))
        balance_out = _to_int(coin_out.get("normalizedBalance") or coin_out.get("balance"))
        weight_in = _to_int(coin_in.get("weight")) or FIXED_ONE
        weight_out = _to_int(coin_out.get("weight")) or FIXED_ONE
        if balance_in == 0 or balance_out == 0:
            raise MarketDataError(f"Pool {pool_id} has an empty reserve")

        price = (balance_out / weight_out) / (balance_in / weight_in)
        if with_fees:
            fee_in = _to_int(coin_in.get("tradeFeeIn")) / FIXED_ONE
            fee_out = _to_int(coin_out.get("tradeFeeOut")) / FIXED_ONE
            price *= (1 - fee_in) * (1 - fee_out)
        return price

    # ------------------------------------------------------------------
    # Router, staking, DCA
    # ------------------------------------------------------------------

    async def get_trade_route(
        self,
        coin_in_type: str,
        coin_out_type: str,
        coin_in_amount: int,
        network: str = "MAINNET",
    ) -> Dict[str, Any]:
        data = await self._request(
            "POST",
            network,
            "router/trade-route",
            json={
                "coinInType": coin_in_type,
                "coinOutType": coin_out_type,
                "coinInAmount": str(coin_in_amount),
            },
        )
        if not isinstance(data, dict):
            raise MarketDataError("Aftermath trade route response is not an object")
        return data

    async def get_staking_positions(self, wallet_address: str, network: str = "MAINNET") -> List[Dict[str, Any]]:
        data = await self._request(
            "POST", network, "staking/staking-positions", json={"walletAddress": wallet_address}
        )
        return list(data or [])

    async def get_dca_orders(self, wallet_address: str, network: str = "MAINNET") -> List[Dict[str, Any]]:
        data = await self._request(
            "POST", network, "dca/active-orders", json={"walletAddress": wallet_address}
        )
        return list(data or [])
