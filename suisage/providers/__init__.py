from .aftermath import AftermathProvider
from .base import MarketDataError, MarketDataProvider, Provider

__all__ = [
    "AftermathProvider",
    "MarketDataError",
    "MarketDataProvider",
    "Provider",
]
