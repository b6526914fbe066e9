"""Credential extractors for Starlette requests."""

import base64
import binascii
from typing import Any

import structlog

from .models import Credentials

logger = structlog.get_logger()


async def form_extractor(request: Any) -> dict[str, Any]:
    """Read username and password from a form encoded request body."""
    form = await request.form()
    return {"username": form.get("username"), "password": form.get("password")}


def basic_auth_extractor(request: Any) -> Credentials | None:
    """Read username and password from an HTTP Basic Authorization header.

    Returns None if the header is missing or malformed.
    """
    auth_header = getattr(request, "headers", {}).get("Authorization", "")
    scheme, _, encoded = auth_header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        logger.debug("Malformed Basic Authorization header")
        return None

    username, separator, password = decoded.partition(":")
    if not separator or not username or not password:
        return None

    return Credentials(username=username, password=password)
