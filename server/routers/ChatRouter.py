import json

from fastapi import APIRouter, Request
from fastapi.responses import Response, StreamingResponse
from pydantic import ValidationError

from server.dependencies.http import (
    cors_headers,
    error_response,
    get_allowed_origin,
    get_client_ip,
    method_not_allowed,
    preflight_response,
)
from server.models.requests import ChatRequest
from shared.models.errors import AgentError, InputRejectedError, RateLimitError, ServerMisconfiguredError

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("")
async def chat(request: Request) -> Response:
    """Answer one chat message as a stream of server-sent events.

    Every check that can fail (configuration, rate limit, body, token, message,
    demo limit) answers with a JSON error before the stream opens. Once the
    stream is open, failures arrive as an in-band error event.

    Args:
        request (Request): FastAPI request (provides app.state.agent_service).

    Returns:
        Response: text/event-stream of tool, delta, done or error events.
    """
    agent_service = request.app.state.agent_service
    if agent_service is None:
        return error_response(request, ServerMisconfiguredError())

    if not request.app.state.chat_rate_limiter.is_allowed(get_client_ip(request)):
        return error_response(request, RateLimitError())

    try:
        body = ChatRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return error_response(request, InputRejectedError("Invalid chat request body"))

    try:
        await agent_service.prepare_turn(body.token, body.message)
    except AgentError as e:
        return error_response(request, e)

    stream = agent_service.start_turn(body.message, body.history)
    headers = {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        **cors_headers(get_allowed_origin(request)),
    }
    return StreamingResponse(stream.frames(), media_type="text/event-stream", headers=headers)


@router.options("")
async def chat_preflight(request: Request) -> Response:
    return preflight_response(request)


@router.api_route("", methods=["GET", "PUT", "PATCH", "DELETE"])
async def chat_method_not_allowed(request: Request) -> Response:
    return method_not_allowed(request)
