from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class TokenPrice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current: float = Field(description="Current price in USD")
    previous: float = Field(description="Price 24h ago in USD")
    last_updated: int = Field(alias="lastUpdated", description="Unix timestamp in milliseconds")
    price_change_24h: Optional[float] = Field(
        default=None,
        alias="priceChange24h",
        description="24h change as a percentage",
    )


class PoolInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Pool object id")
    tokens: List[str] = Field(default_factory=list, description="Coin types held by the pool")
    reserves: List[int] = Field(default_factory=list, description="Raw reserve per token, same order as tokens")
    fee: float = Field(default=0.0, description="Daily fees in USD")
    tvl: float = Field(default=0.0, description="Total value locked in USD")
    apr: float = Field(default=0.0, description="Annual percentage rate")
