from .market import TokenPrice, PoolInfo
from .requests import QueryRequest
from .responses import ActionResult, QueryResponse, QueryStatus

__all__ = [
    "TokenPrice",
    "PoolInfo",
    "QueryRequest",
    "ActionResult",
    "QueryResponse",
    "QueryStatus",
]
