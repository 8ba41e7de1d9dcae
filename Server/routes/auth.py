"""
Research Library Server - Authentication Endpoints

This module contains login, logout, the current-session lookup and the
idle-expiry report.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from models.auth import LoginRequest, LoginResponse, ExpiryReportRequest, SessionUser
from managers.login_throttle import RequireDeviceId
from auth import GetLibrary, GetCurrentCaller, GetSessionId, SetSessionCookie, ClearSessionCookie
from exceptions import AuthenticationError
from library import LibraryServices


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Authentication Endpoints ====================

@router.post("/auth/login", response_model=LoginResponse, tags=["Authentication"])
async def login(
    login_request: LoginRequest,
    response: Response,
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Authenticate a user and start a session

    Args:
        login_request: Username, password and device id

    Returns:
        LoginResponse: Message and the session snapshot

    Raises:
        ValidationError: Missing device id
        RateLimitError: Too many recent failures for this device and username
        AuthenticationError: Wrong username or password
    """
    device_id = RequireDeviceId(login_request.deviceId)
    library.throttle.CheckAttempt(device_id, login_request.username)

    session = library.db_manager.GetSession()
    try:
        user = library.db_manager.FindUserByLogin(session, login_request.username)
        if user:
            session.expunge(user)
    finally:
        session.close()

    password_ok = bool(user) and await library.db_manager.VerifyPasswordAsync(
        login_request.password, user.password_hash
    )

    if not password_ok:
        library.throttle.RecordFailure(device_id, login_request.username)
        raise AuthenticationError("Invalid credentials")

    library.throttle.RecordSuccess(device_id, login_request.username)

    session_user = SessionUser(
        id=user.user_id,
        username=user.username,
        full_name=user.full_name,
        role=user.role
    )
    session_id = library.session_manager.CreateSession(session_user)
    SetSessionCookie(response, session_id, library.session_manager.idle_minutes)

    logger.info(f"User '{user.username}' logged in successfully")
    library.activity_log.Record(session_user, "Login", user.full_name, "Successful login")

    return LoginResponse(message="Login successful", user=session_user)


@router.post("/auth/logout", tags=["Authentication"])
async def logout(
    request: Request,
    response: Response,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    End the caller's session

    The audit entry is written before the session is destroyed so it still
    carries the caller's name.
    """
    library.activity_log.Record(caller, "Logout", caller.full_name, "Manual session termination")

    library.session_manager.DestroySession(GetSessionId(request))
    ClearSessionCookie(response)

    logger.info(f"User '{caller.username}' logged out")
    return {"message": "Logged out successfully"}


@router.get("/auth/me", response_model=SessionUser, tags=["Authentication"])
async def me(caller: SessionUser = Depends(GetCurrentCaller)):
    """Return the caller's session snapshot"""
    return caller


@router.post("/auth/report-expiry", tags=["Authentication"])
async def report_expiry(
    report: Optional[ExpiryReportRequest] = None,
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Record that a client's session ran out

    Public: the session is already gone, so the client identifies itself
    with whatever it still remembers.
    """
    report = report or ExpiryReportRequest()
    performed_by = report.full_name or report.username or "System"
    target = report.full_name or report.username or "Self"

    library.activity_log.RecordAs(performed_by, "Logout", target, "Session expired due to inactivity")
    return {"message": "Expiry logged"}
