"""
Research Library Server - Authentication Utilities

This module provides authentication functionality including:
- Signing and verifying the session cookie
- Resolving the caller of a request from its session
- Authorization dependencies for protected routes

The cookie carries only the opaque session key, wrapped in an HS256 JWT so
a tampered cookie is rejected before any session lookup. Expiry is enforced
server-side by the session store, so the token itself has no exp claim.
"""

import logging
from typing import Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt

import config
import policy
from policy import Action
from exceptions import AuthenticationError
from library import LibraryServices
from models.auth import SessionUser

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


# ==================== Session Cookie ====================

def EncodeSessionCookie(session_id: str, secret: str = None) -> str:
    """
    Wrap a session key in a signed token

    Args:
        session_id: Opaque session key
        secret: Signing secret (defaults to config.SESSION_SECRET)

    Returns:
        str: Cookie value
    """
    return jwt.encode({"sid": session_id}, secret or config.SESSION_SECRET, algorithm=ALGORITHM)


def DecodeSessionCookie(token: Optional[str], secret: str = None) -> Optional[str]:
    """
    Verify a cookie value and extract the session key

    Returns:
        str: Session key, or None if the cookie is missing or invalid
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, secret or config.SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        logger.warning("Rejected session cookie with invalid signature")
        return None

    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) and session_id else None


def SetSessionCookie(response: Response, session_id: str, idle_minutes: int) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=EncodeSessionCookie(session_id),
        max_age=idle_minutes * 60,
        httponly=True,
        samesite="lax"
    )


def ClearSessionCookie(response: Response) -> None:
    # Drop a refresh queued earlier in this request so the deletion is final
    del response.headers["set-cookie"]
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        path="/",
        samesite="lax"
    )


# ==================== Dependencies ====================

def GetLibrary(request: Request) -> LibraryServices:
    """FastAPI dependency returning the application's managers"""
    return request.app.state.library


def GetSessionId(request: Request) -> Optional[str]:
    """Session key from the request cookie, if it carries a valid one"""
    return DecodeSessionCookie(request.cookies.get(config.SESSION_COOKIE_NAME))


def GetOptionalCaller(
    request: Request,
    response: Response,
    library: LibraryServices = Depends(GetLibrary)
) -> Optional[SessionUser]:
    """
    FastAPI dependency resolving the caller's session snapshot

    A live session gets its cookie re-issued so the browser's copy rolls
    with the server-side idle expiry.

    Returns:
        SessionUser, or None for anonymous requests
    """
    session_id = GetSessionId(request)
    caller = library.session_manager.GetCurrentUser(session_id)
    if caller is not None:
        SetSessionCookie(response, session_id, library.session_manager.idle_minutes)
    return caller


def GetCurrentCaller(caller: Optional[SessionUser] = Depends(GetOptionalCaller)) -> SessionUser:
    """
    FastAPI dependency requiring a live session

    Raises:
        AuthenticationError: If there is no live session
    """
    if not policy.IsAuthenticated(caller):
        raise AuthenticationError("Unauthorized")
    return caller


def RequireAction(action: Action):
    """
    Dependency factory checking a role-gated action before the route runs

    Args:
        action: Action the route performs

    Usage:
        @router.get("/activity-logs")
        async def list_logs(caller: SessionUser = Depends(RequireAction(Action.LOG_READ))):
            ...
    """
    def action_checker(caller: Optional[SessionUser] = Depends(GetOptionalCaller)) -> SessionUser:
        return policy.Require(caller, action)

    return action_checker

