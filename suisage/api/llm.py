from datetime import datetime, timezone
from fastapi import APIRouter

from ..providers.llm import get_available_providers, canonical_provider_name
from ..config import settings

router = APIRouter(prefix="/api/llm")


@router.get("/providers")
async def list_llm_providers():
    """Supported planner models and which providers have credentials"""
    providers = [
        {"id": provider_id, **info}
        for provider_id, info in get_available_providers().items()
    ]
    default_provider = canonical_provider_name(settings.llm_provider)

    return {
        "providers": providers,
        "default_provider": default_provider,
        "default_model": settings.resolve_default_model(default_provider),
        "fetched_at": datetime.now(timezone.utc).isoformat(),
    }
