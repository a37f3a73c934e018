import secrets
from typing import Optional

from fastapi import Header, Request

from app.errors import AuthError


def require_api_key(
    request: Request,
    x_rapidapi_key: Optional[str] = Header(default=None, alias="X-RapidAPI-Key"),
):
    """Every /api route needs the same RapidAPI key the server is configured with."""
    expected = request.app.state.settings.jsearch_api_key
    if not x_rapidapi_key or not expected or not secrets.compare_digest(x_rapidapi_key, expected):
        raise AuthError(
            "Unauthorized - Invalid API Key",
            "Please provide a valid RapidAPI key in the X-RapidAPI-Key header",
        )
