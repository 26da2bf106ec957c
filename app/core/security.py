# app/core/security.py
import secrets
from typing import Optional

from fastapi import Header, Request

from app.core.errors import ServiceError


class Unauthorized(ServiceError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Invalid or missing API key"


async def get_api_key(request: Request, x_api_key: Optional[str] = Header(None)) -> None:
    """
    Hook de autenticación por API Key.

    The edge gateway does the real authentication; services only check the
    key when ``API_KEY`` is configured.
    """
    expected = request.app.state.settings.API_KEY
    if not expected:
        return
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise Unauthorized()
