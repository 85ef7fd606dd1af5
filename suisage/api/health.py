from fastapi import APIRouter, Request
from typing import Dict, Any

router = APIRouter()


@router.get("/healthz")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    state = request.app.state
    provider_status: Dict[str, Any] = {}

    market = getattr(state, "market", None)
    if market is not None:
        provider_status[market.name] = await market.health_check()
    else:
        provider_status["market"] = {"status": "unavailable", "reason": "not configured"}

    llm = getattr(state, "llm", None)
    if llm is not None:
        provider_status[llm.name] = await llm.health_check()
    else:
        provider_status["llm"] = {"status": "unavailable", "reason": "not configured"}

    available_providers = sum(
        1 for status in provider_status.values()
        if status.get("status") == "healthy"
    )

    return {
        "status": "healthy" if available_providers == len(provider_status) else "degraded",
        "agent_ready": getattr(state, "agent", None) is not None,
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
    }
