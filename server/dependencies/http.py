"""Request helpers shared by the routers: CORS origin, caller IP, error bodies."""

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from shared.models.errors import AgentError

DEFAULT_ALLOWED_ORIGINS = ["https://loganventer.com", "https://loganventer.netlify.app"]


def get_allowed_origin(request: Request) -> str:
    """Echo the Origin header if it is on the allow-list (exact match), else the first entry."""
    allowed = getattr(request.app.state, "allowed_origins", None) or DEFAULT_ALLOWED_ORIGINS
    origin = request.headers.get("origin", "")
    return origin if origin in allowed else allowed[0]


def cors_headers(origin: str, preflight: bool = False) -> dict[str, str]:
    headers = {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    if preflight:
        headers["Access-Control-Allow-Methods"] = "POST, OPTIONS"
        headers["Access-Control-Allow-Headers"] = "Content-Type"
    return headers


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then the socket peer, then "unknown"."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def preflight_response(request: Request) -> Response:
    return Response(status_code=204, headers=cors_headers(get_allowed_origin(request), preflight=True))


def json_response(request: Request, body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code, headers=cors_headers(get_allowed_origin(request)))


def error_response(request: Request, error: AgentError) -> JSONResponse:
    """Render an AgentError as {"error": code} with its status."""
    return json_response(request, {"error": error.error}, status_code=error.status_code)


def method_not_allowed(request: Request) -> JSONResponse:
    return json_response(request, {"error": "Method not allowed"}, status_code=405)
