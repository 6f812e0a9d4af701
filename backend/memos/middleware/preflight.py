"""
Memos Backend — Bare OPTIONS Responder
=======================================

What:  Answers any OPTIONS request with 200 and the CORS allow headers.
How:   Sits inside CORSMiddleware, so real browser preflights (Origin plus
       Access-Control-Request-Method) are answered there first; what reaches
       this layer is a plain OPTIONS probe, which never hits the router.
"""

from typing import List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization, X-Request-ID"


def pick_allow_origin(origins: List[str], origin: Optional[str]) -> str:
    if "*" in origins:
        return "*"
    if origin in origins:
        return origin
    return origins[0] if origins else ""


class PreflightMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, origins: List[str]):
        super().__init__(app)
        self.origins = origins

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "OPTIONS":
            return await call_next(request)

        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": pick_allow_origin(
                    self.origins, request.headers.get("origin")
                ),
                "Access-Control-Allow-Methods": ALLOWED_METHODS,
                "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            },
        )
