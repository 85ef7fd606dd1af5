from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..types import PoolInfo, TokenPrice


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class MarketDataError(Exception):
    """Raised when the market data backend cannot serve a request"""
    pass


class MarketDataProvider(Provider):
    """Price and pool data for Sui DeFi markets.

    Every method takes a ``network`` (``MAINNET`` or ``TESTNET``). Any call may
    raise; the executor reports that as a tool failure.
    """

    @abstractmethod
    async def get_token_price(self, asset_id: str, network: str = "MAINNET") -> TokenPrice:
        """Get current price and 24h change for one coin type"""
        pass

    @abstractmethod
    async def get_coins_price_info(self, asset_ids: List[str], network: str = "MAINNET") -> Dict[str, TokenPrice]:
        """Get prices for several coin types, keyed by coin type"""
        pass

    @abstractmethod
    async def get_pool(self, pool_id: str, network: str = "MAINNET") -> Optional[PoolInfo]:
        """Get one pool, or None if it does not exist"""
        pass

    @abstractmethod
    async def get_all_pools(self, network: str = "MAINNET") -> List[PoolInfo]:
        """Get every pool the backend knows about"""
        pass

    @abstractmethod
    async def get_spot_price(
        self,
        pool_id: str,
        coin_in_type: str,
        coin_out_type: str,
        with_fees: bool = True,
        network: str = "MAINNET",
    ) -> float:
        """Get units of coin_out received per unit of coin_in"""
        pass

    @abstractmethod
    async def get_trade_route(
        self,
        coin_in_type: str,
        coin_out_type: str,
        coin_in_amount: int,
        network: str = "MAINNET",
    ) -> Dict[str, Any]:
        """Get the best route for swapping coin_in_amount of coin_in"""
        pass

    @abstractmethod
    async def get_staking_positions(self, wallet_address: str, network: str = "MAINNET") -> List[Dict[str, Any]]:
        """Get liquid staking positions held by a wallet"""
        pass

    @abstractmethod
    async def get_dca_orders(self, wallet_address: str, network: str = "MAINNET") -> List[Dict[str, Any]]:
        """Get active dollar-cost-averaging orders for a wallet"""
        pass
