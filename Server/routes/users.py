"""
Research Library Server - User Management Endpoints

Account listing and creation (admin), self-service or admin edits, account
deletion with password re-authentication, and session kicks.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from models.auth import SessionUser
from models.api import CreateUserRequest, UpdateUserRequest, DeleteUserRequest
from auth import GetLibrary, GetCurrentCaller, GetSessionId, ClearSessionCookie
from library import LibraryServices


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== User Endpoints ====================

@router.get("/users", tags=["Users"])
async def list_users(
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """List all accounts, without password hashes (admin only)"""
    return library.users.ListUsers(caller)


@router.post("/users", status_code=status.HTTP_201_CREATED, tags=["Users"])
async def create_user(
    request: CreateUserRequest,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Create an account (admin only)

    Raises:
        ConflictError: Username already exists
    """
    return await library.users.CreateUser(caller, request)


# Declared before /users/{user_id} routes so "sessions" is not taken as an id
@router.get("/users/sessions", tags=["Users"])
async def list_active_session_users(
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """Ids of users holding at least one live session (admin only)"""
    return library.users.ListActiveSessionUsers(caller)


@router.put("/users/{user_id}", tags=["Users"])
async def update_user(
    user_id: str,
    update: UpdateUserRequest,
    request: Request,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Update an account

    Users may edit their own profile (with their current password); admins
    may change another user's full name.
    """
    result = await library.users.UpdateUser(
        caller, user_id, update, current_session_id=GetSessionId(request)
    )
    return {
        "message": "User updated successfully",
        "user": result["user"],
        "changes": result["changes"]
    }


@router.delete("/users/{user_id}", tags=["Users"])
async def delete_user(
    user_id: str,
    request: Request,
    response: Response,
    body: Optional[DeleteUserRequest] = None,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Delete an account

    The caller confirms with their own password. Deleting yourself also ends
    the current session.
    """
    current_password = body.currentPassword if body else None
    is_self = await library.users.DeleteUser(caller, user_id, current_password)

    if is_self:
        library.session_manager.DestroySession(GetSessionId(request))
        ClearSessionCookie(response)

    return {"message": "Account deleted successfully"}


@router.delete("/users/{user_id}/sessions", tags=["Users"])
async def kick_user(
    user_id: str,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """End every session of a user without deleting the account (admin only)"""
    deleted_count = library.users.KickUser(caller, user_id)
    return {"message": "User kicked successfully", "deletedCount": deleted_count}
