from fastapi import Header, Request
from typing import Optional
import logging

from face_portal.exceptions import MissingFieldError

logger = logging.getLogger(__name__)


async def require_portal_uid(x_portal_uid: Optional[str] = Header(None)) -> str:
    """Identity token for the JSON endpoints, sent as the X-Portal-UID header.

    The token is opaque: it is forwarded upstream as-is and never checked here.
    """
    if not x_portal_uid:
        logger.error("No X-Portal-UID header found.")
        raise MissingFieldError("X-Portal-UID header is required")
    return x_portal_uid


def get_upstream(request: Request):
    return request.app.state.upstream
