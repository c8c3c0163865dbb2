import json

from fastapi import APIRouter, Request
from fastapi.responses import Response

from server.dependencies.http import (
    error_response,
    get_client_ip,
    json_response,
    method_not_allowed,
    preflight_response,
)
from shared.models.errors import AgentError, AdmissionRequestError, ServerMisconfiguredError

router = APIRouter(prefix="/token", tags=["token"])


@router.post("")
async def token_action(request: Request) -> Response:
    """Dispatch a visitor or admin action from the JSON body's "action" field.

    Args:
        request (Request): FastAPI request (provides app.state.admission_service).

    Returns:
        Response: The action's JSON result, or {"error": ...} with its status.
    """
    admission_service = request.app.state.admission_service
    if admission_service is None:
        return error_response(request, ServerMisconfiguredError())

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return error_response(request, AdmissionRequestError(400, "Invalid JSON"))
    if not isinstance(body, dict):
        return error_response(request, AdmissionRequestError(400, "Invalid JSON"))

    try:
        result = await admission_service.do_action(
            body,
            ip=get_client_ip(request),
            ua=request.headers.get("user-agent", ""),
        )
    except AgentError as e:
        return error_response(request, e)
    return json_response(request, result)


@router.options("")
async def token_preflight(request: Request) -> Response:
    return preflight_response(request)


@router.api_route("", methods=["GET", "PUT", "PATCH", "DELETE"])
async def token_method_not_allowed(request: Request) -> Response:
    return method_not_allowed(request)
