"""
Memos Backend — Auth Route Handler
===================================

What:  POST /api/auth/verify, the password check behind the client login gate.
"""

from fastapi import APIRouter

from memos.schemas.memo import AuthPayload, AuthResponse, ErrorResponse
from memos.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/verify",
    response_model=AuthResponse,
    responses={
        400: {"description": "Password missing", "model": ErrorResponse},
        401: {"description": "Wrong password", "model": ErrorResponse},
    },
    summary="Verify the shared password",
)
async def verify_password(payload: AuthPayload) -> AuthResponse:
    """
    Example:
        POST /api/auth/verify {"password": "memos123"}
        → 200 {"success": true, "token": "3f2a..."}
    """
    return auth_service.verify(payload.password)
