"""
Tool registry for LLM-planned market data lookups.

Each tool has a definition (name, description, ordered parameters, output
descriptor) and an async implementation bound to a market data provider.
The registry is built once at startup, then frozen and shared read-only by
every query.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Coroutine, Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..providers.base import MarketDataError, MarketDataProvider
from ..types import PoolInfo, TokenPrice
from .errors import UnknownTool


class ParameterType(str, Enum):
    """Supported parameter types for tool definitions"""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"


class ResultShape(str, Enum):
    """Result shapes that have a dedicated formatter"""
    PRICED_ASSET = "priced_asset"
    PRICE_MAP = "price_map"
    POOL = "pool"
    POOL_LIST = "pool_list"
    SPOT_PRICE = "spot_price"


class ParameterSpec(BaseModel):
    """Definition of a single tool parameter"""
    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType
    description: str
    required: bool = True
    default: Optional[Any] = None
    is_asset_reference: bool = False
    enum: Optional[Tuple[str, ...]] = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


class OutputSpec(BaseModel):
    """What a tool returns and how to render it when the plan gives no template"""
    model_config = ConfigDict(frozen=True)

    type: str = "object"
    description: str = ""
    shape: Optional[ResultShape] = None
    answer_template: Optional[str] = None


class ToolDefinition(BaseModel):
    """Definition of a tool that the planner may call"""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    category: str = "general"
    parameters: Tuple[ParameterSpec, ...] = Field(default_factory=tuple)
    output: OutputSpec = Field(default_factory=OutputSpec)

    @property
    def required_parameters(self) -> List[ParameterSpec]:
        return [p for p in self.parameters if p.required and not p.has_default]

    @property
    def optional_parameters(self) -> List[ParameterSpec]:
        return [p for p in self.parameters if not p.required or p.has_default]


@dataclass(frozen=True)
class RegisteredTool:
    """A tool registered in the registry with its definition and implementation."""
    definition: ToolDefinition
    implementation: Callable[..., Coroutine[Any, Any, Any]]

    @property
    def name(self) -> str:
        return self.definition.name


class ToolRegistry:
    """
    Registry of tools the planner can call.

    Names are unique. Once ``freeze()`` is called no further tools can be
    registered, which lets concurrent queries share one instance.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._tools: Dict[str, RegisteredTool] = {}
        self._frozen = False
        self.logger = logger or logging.getLogger(__name__)

    def register(
        self,
        name: str,
        description: str,
        parameters: Sequence[ParameterSpec],
        implementation: Callable[..., Coroutine[Any, Any, Any]],
        output: Optional[OutputSpec] = None,
        category: str = "general",
    ) -> RegisteredTool:
        """Register a tool. Raises ValueError on a duplicate name."""
        if self._frozen:
            raise RuntimeError(f"Cannot register tool '{name}': registry is frozen")
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")

        names = [p.name for p in parameters]
        if len(set(names)) != len(names):
            raise ValueError(f"Tool '{name}' declares duplicate parameter names")

        tool = RegisteredTool(
            definition=ToolDefinition(
                name=name,
                description=description,
                category=category,
                parameters=tuple(parameters),
                output=output or OutputSpec(),
            ),
            implementation=implementation,
        )
        self._tools[name] = tool
        self.logger.debug(f"Registered tool {name} ({category})")
        return tool

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> RegisteredTool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownTool(name)
        return tool

    def get(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[RegisteredTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def definitions(self) -> List[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def by_category(self) -> Dict[str, List[ToolDefinition]]:
        """Definitions grouped by category, in registration order."""
        grouped: Dict[str, List[ToolDefinition]] = {}
        for tool in self._tools.values():
            grouped.setdefault(tool.definition.category, []).append(tool.definition)
        return grouped


# =============================================================================
# Default market data catalog
# =============================================================================

POOL_SORT_KEYS = {
    "tvl": "tvl",
    "apr": "apr",
    "fees": "fee",
}


class MarketToolHandlers:
    """Implementations of the default catalog, bound to one provider."""

    def __init__(self, provider: MarketDataProvider):
        self.provider = provider

    async def get_token_price(self, token_type: str, network: str) -> TokenPrice:
        return await self.provider.get_token_price(token_type, network)

    async def get_coins_price_info(self, coins: List[str], network: str) -> Dict[str, TokenPrice]:
        return await self.provider.get_coins_price_info(coins, network)

    async def get_pool_info(self, pool_id: str, network: str) -> PoolInfo:
        pool = await self.provider.get_pool(pool_id, network)
        if pool is None:
            raise MarketDataError(f"Pool not found: {pool_id}")
        return pool

    async def get_pool_apr(self, pool_id: str, network: str) -> float:
        pool = await self.get_pool_info(pool_id, network)
        return pool.apr

    async def get_all_pools(self, sort_by: str, limit: int, network: str) -> List[PoolInfo]:
        key = POOL_SORT_KEYS.get(sort_by.lower())
        if key is None:
            raise ValueError(f"Cannot sort pools by '{sort_by}'")
        if limit < 1:
            raise ValueError("limit must be at least 1")
        pools = await self.provider.get_all_pools(network)
        ranked = sorted(pools, key=lambda pool: getattr(pool, key), reverse=True)
        return ranked[:limit]

    async def get_pool_spot_price(
        self,
        pool_id: str,
        coin_in_type: str,
        coin_out_type: str,
        with_fees: bool,
        network: str,
    ) -> float:
        return await self.provider.get_spot_price(pool_id, coin_in_type, coin_out_type, with_fees, network)

    async def get_trade_route(
        self,
        coin_in_type: str,
        coin_out_type: str,
        coin_in_amount: int,
        network: str,
    ) -> Dict[str, Any]:
        if coin_in_amount <= 0:
            raise ValueError("coin_in_amount must be positive")
        return await self.provider.get_trade_route(coin_in_type, coin_out_type, coin_in_amount, network)

    async def get_staking_positions(self, wallet_address: str, network: str) -> List[Dict[str, Any]]:
        return await self.provider.get_staking_positions(wallet_address, network)

    async def get_dca_orders(self, wallet_address: str, network: str) -> List[Dict[str, Any]]:
        return await self.provider.get_dca_orders(wallet_address, network)


def _network_param(default_network: str) -> ParameterSpec:
    return ParameterSpec(
        name="network",
        type=ParameterType.STRING,
        description="Sui network to query",
        required=False,
        default=default_network,
        enum=("MAINNET", "TESTNET"),
    )


def build_default_registry(
    provider: MarketDataProvider,
    *,
    default_network: str = "MAINNET",
    freeze: bool = True,
) -> ToolRegistry:
    """Register the market data catalog against ``provider``."""
    handlers = MarketToolHandlers(provider)
    registry = ToolRegistry()
    network = _network_param(default_network)

    registry.register(
        "get_token_price",
        "Get the current USD price and 24h change of a single coin.",
        [
            ParameterSpec(
                name="token_type",
                type=ParameterType.STRING,
                description="Coin symbol (SUI, USDC) or full coin type",
                is_asset_reference=True,
            ),
            network,
        ],
        handlers.get_token_price,
        output=OutputSpec(
            type="object",
            description="{current, previous, lastUpdated, priceChange24h}",
            shape=ResultShape.PRICED_ASSET,
        ),
        category="prices",
    )

    registry.register(
        "get_coins_price_info",
        "Get current USD prices and 24h changes for several coins at once.",
        [
            ParameterSpec(
                name="coins",
                type=ParameterType.ARRAY,
                description="List of coin symbols or coin types",
                is_asset_reference=True,
            ),
            network,
        ],
        handlers.get_coins_price_info,
        output=OutputSpec(
            type="object",
            description="Mapping of coin type to {current, previous, lastUpdated, priceChange24h}",
            shape=ResultShape.PRICE_MAP,
        ),
        category="prices",
    )

    registry.register(
        "get_pool_info",
        "Get reserves, TVL, daily fees and APR of one liquidity pool by its object id.",
        [
            ParameterSpec(name="pool_id", type=ParameterType.STRING, description="Pool object id (0x...)"),
            network,
        ],
        handlers.get_pool_info,
        output=OutputSpec(
            type="object",
            description="{id, tokens, reserves, fee, tvl, apr}",
            shape=ResultShape.POOL,
        ),
        category="pools",
    )

    registry.register(
        "get_pool_apr",
        "Get the current APR of one liquidity pool, in percent.",
        [
            ParameterSpec(name="pool_id", type=ParameterType.STRING, description="Pool object id (0x...)"),
            network,
        ],
        handlers.get_pool_apr,
        output=OutputSpec(
            type="number",
            description="Pool APR in percent",
            answer_template="Pool APR: ${result}%",
        ),
        category="pools",
    )

    registry.register(
        "get_all_pools",
        "List liquidity pools ranked by TVL, APR or daily fees, highest first.",
        [
            ParameterSpec(
                name="sort_by",
                type=ParameterType.STRING,
                description="Ranking metric",
                required=False,
                default="tvl",
                enum=tuple(POOL_SORT_KEYS),
            ),
            ParameterSpec(
                name="limit",
                type=ParameterType.INTEGER,
                description="Maximum number of pools to return",
                required=False,
                default=10,
            ),
            network,
        ],
        handlers.get_all_pools,
        output=OutputSpec(
            type="array",
            description="List of {id, tokens, reserves, fee, tvl, apr}",
            shape=ResultShape.POOL_LIST,
        ),
        category="pools",
    )

    registry.register(
        "get_pool_spot_price",
        "Get the spot price between two coins in a pool, in units of coin_out per coin_in.",
        [
            ParameterSpec(name="pool_id", type=ParameterType.STRING, description="Pool object id (0x...)"),
            ParameterSpec(
                name="coin_in_type",
                type=ParameterType.STRING,
                description="Coin being sold",
                is_asset_reference=True,
            ),
            ParameterSpec(
                name="coin_out_type",
                type=ParameterType.STRING,
                description="Coin being bought",
                is_asset_reference=True,
            ),
            ParameterSpec(
                name="with_fees",
                type=ParameterType.BOOLEAN,
                description="Include pool trade fees in the price",
                required=False,
                default=True,
            ),
            network,
        ],
        handlers.get_pool_spot_price,
        output=OutputSpec(type="number", description="Spot price", shape=ResultShape.SPOT_PRICE),
        category="pools",
    )

    registry.register(
        "get_trade_route",
        "Find the best swap route for selling an amount of one coin for another.",
        [
            ParameterSpec(
                name="coin_in_type",
                type=ParameterType.STRING,
                description="Coin being sold",
                is_asset_reference=True,
            ),
            ParameterSpec(
                name="coin_out_type",
                type=ParameterType.STRING,
                description="Coin being bought",
                is_asset_reference=True,
            ),
            ParameterSpec(
                name="coin_in_amount",
                type=ParameterType.INTEGER,
                description="Amount of coin_in in base units (1 SUI = 1000000000)",
            ),
            network,
        ],
        handlers.get_trade_route,
        output=OutputSpec(type="object", description="Route with coinIn, coinOut, spotPrice and routes"),
        category="trading",
    )

    registry.register(
        "get_staking_positions",
        "List the liquid staking positions held by a wallet.",
        [
            ParameterSpec(name="wallet_address", type=ParameterType.STRING, description="Sui wallet address"),
            network,
        ],
        handlers.get_staking_positions,
        output=OutputSpec(type="array", description="Staking positions"),
        category="wallets",
    )

    registry.register(
        "get_dca_orders",
        "List the active dollar-cost-averaging orders of a wallet.",
        [
            ParameterSpec(name="wallet_address", type=ParameterType.STRING, description="Sui wallet address"),
            network,
        ],
        handlers.get_dca_orders,
        output=OutputSpec(
            type="array",
            description="DCA orders",
            answer_template="DCA Orders for wallet:\n${result}",
        ),
        category="wallets",
    )

    if freeze:
        registry.freeze()
    return registry
