# backend/roombook/api/dependencies/auth.py
"""
Caller identity dependency.

Identity comes from the chat/front-end presenter that fronts the API;
it forwards the acting user's id in the ``X-User-Id`` header.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER)
) -> str:
    """
    Resolve the acting user's id.

    Raises:
        HTTPException: 401 when the header is missing or blank
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        logger.debug("Request rejected: missing %s header", USER_ID_HEADER)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": f"Missing {USER_ID_HEADER} header", "code": "UNAUTHENTICATED"},
        )
    return user_id
