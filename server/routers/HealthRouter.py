import asyncio

import httpx
from fastapi import APIRouter, Request

from server.models.responses import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "portfolio-chat-agent"
LLM_PROBE_TIMEOUT = 3.0


@router.get("")
async def health(request: Request) -> HealthResponse:
    """Liveness plus a short reachability probe of the LLM backend."""
    return HealthResponse(
        service=SERVICE_NAME,
        version=request.app.state.app_version,
        llm_reachable=await _probe_llm(request),
    )


async def _probe_llm(request: Request) -> bool:
    llm_client = getattr(request.app.state, "llm_client", None)
    if llm_client is None or not llm_client.has_api_key():
        return False
    try:
        result: httpx.Response = await asyncio.wait_for(llm_client.do_healthcheck(), timeout=LLM_PROBE_TIMEOUT)
    except (asyncio.TimeoutError, httpx.HTTPError, RuntimeError) as e:
        request.app.state.logging.warning("LLM health probe failed: %s", e)
        return False
    return result.is_success
