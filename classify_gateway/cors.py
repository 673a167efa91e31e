"""Permissive cross-origin headers on every response."""
from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, Response, status

log = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Credentials": "true",
}


def apply_cors(response: Response) -> Response:
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


def install_cors(app: FastAPI) -> None:
    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception as exc:  # noqa: BLE001
            # unhandled errors would otherwise skip this middleware
            log.error("unhandled_error", path=request.url.path, type=type(exc).__name__, err=str(exc))
            response = Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return apply_cors(response)
