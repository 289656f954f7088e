import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from supabase import Client

from .supabase_client import get_supabase

logger = logging.getLogger(__name__)


def get_current_user_id(
    client: Annotated[Client, Depends(get_supabase)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[str]:
    """
    Resolves the caller from a Supabase access token.

    Requests without an Authorization header are anonymous and own nothing;
    a header carrying a token Supabase does not recognise is rejected.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authorization header")

    try:
        res = client.auth.get_user(token)
    except Exception as e:
        logger.info("Session lookup failed: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session") from e

    if res is None or res.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")
    return res.user.id


CurrentUserId = Annotated[Optional[str], Depends(get_current_user_id)]
