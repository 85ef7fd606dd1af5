import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..core.agent import SuiSageAgent
from ..types import QueryRequest, QueryResponse, QueryStatus

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

STATUS_CODES: Dict[QueryStatus, int] = {
    QueryStatus.SUCCESS: 200,
    QueryStatus.NEEDS_INFO: 202,
    QueryStatus.ERROR: 400,
}


def _log_late_result(task: "asyncio.Task[QueryResponse]") -> None:
    if task.cancelled():
        return
    if task.exception() is not None:
        logger.error(f"Timed-out query failed after response was sent: {task.exception()}")
    else:
        logger.info(f"Discarding late result of timed-out query ({task.result().status.value})")


async def run_with_timeout(agent: SuiSageAgent, query: str, timeout: float, query_id: Optional[str] = None) -> QueryResponse:
    """Await one query, giving up after ``timeout`` seconds without cancelling it."""
    task = asyncio.ensure_future(agent.answer(query, query_id=query_id))
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Query exceeded {timeout:g}s; responding with a timeout error")
        task.add_done_callback(_log_late_result)
        return QueryResponse.failure(f"Query timed out after {timeout:g} seconds")


@router.post("/query")
async def query(body: QueryRequest, request: Request) -> JSONResponse:
    """Answer a natural-language question about Sui DeFi markets"""
    agent: SuiSageAgent = getattr(request.app.state, "agent", None)
    if agent is None:
        return JSONResponse(
            status_code=503,
            content=QueryResponse.failure("Query service is not configured").to_payload(),
        )

    timeout = getattr(request.app.state, "query_timeout", settings.query_timeout_seconds)
    response = await run_with_timeout(
        agent,
        body.query,
        timeout,
        query_id=getattr(request.state, "request_id", None),
    )

    payload: Dict[str, Any] = response.to_payload()
    return JSONResponse(status_code=STATUS_CODES[response.status], content=payload)
