"""
Research Library Server - User Manager

Account lifecycle: create, update (self-service or by an admin), delete,
and session kicks. Every rule about who may change what comes from policy.py.
"""

import logging
from typing import List, Optional

from sqlalchemy import func

import policy
from policy import Action
from best_effort import RunBestEffort
from exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from models.auth import SessionUser
from models.api import CreateUserRequest, UpdateUserRequest
from models.database import User

logger = logging.getLogger(__name__)

# Field label used in the "Modified: ..." audit text
FIELD_LABELS = {
    "full_name": "Full Name",
    "username": "Username",
    "role": "Role",
    "password": "Password",
}
CREDENTIAL_FIELDS = {"username", "role", "password"}


class UserManager:
    """
    User account operations
    """

    def __init__(self, db_manager, session_manager, activity_log):
        self.db_manager = db_manager
        self.session_manager = session_manager
        self.activity_log = activity_log

    # ==================== Helpers ====================

    @staticmethod
    def _UsernameTaken(session, username: str, exclude_user_id: Optional[str] = None) -> bool:
        query = session.query(User).filter(func.lower(User.username) == username.strip().lower())
        if exclude_user_id is not None:
            query = query.filter(User.user_id != exclude_user_id)
        return query.first() is not None

    async def VerifyActorPassword(self, caller: SessionUser, current_password: str) -> None:
        """
        Step-up check: the caller's own current password, read fresh from the database

        Raises:
            AuthenticationError: If the caller's account no longer exists
            AuthorizationError: If the password does not match
        """
        session = self.db_manager.GetSession()
        try:
            actor = session.query(User).filter(User.user_id == caller.id).first()
        finally:
            session.close()

        if not actor:
            raise AuthenticationError("Unauthorized")

        if not await self.db_manager.VerifyPasswordAsync(current_password, actor.password_hash):
            logger.warning(f"Failed password re-authentication for user '{caller.username}'")
            raise AuthorizationError("Incorrect current password")

    # ==================== Queries ====================

    def ListUsers(self, caller: SessionUser) -> List[dict]:
        """All users, newest first, without password hashes"""
        policy.Require(caller, Action.USER_LIST)

        session = self.db_manager.GetSession()
        try:
            users = session.query(User).order_by(User.created_at.desc()).all()
            return [user.ToDict() for user in users]
        finally:
            session.close()

    def ListActiveSessionUsers(self, caller: SessionUser) -> List[str]:
        """Ids of users holding at least one live session"""
        policy.Require(caller, Action.SESSION_LIST)
        return sorted(self.session_manager.ListActiveUserIds())

    # ==================== Mutations ====================

    async def CreateUser(self, caller: SessionUser, request: CreateUserRequest) -> dict:
        """
        Create an account (admin only)

        Raises:
            ConflictError: If the username is already in use
        """
        policy.Require(caller, Action.USER_CREATE)

        session = self.db_manager.GetSession()
        try:
            if self._UsernameTaken(session, request.username):
                raise ConflictError("Username already exists")

            password_hash = await self.db_manager.HashPasswordAsync(request.password)

            new_user = User(
                username=request.username,
                password_hash=password_hash,
                full_name=request.full_name,
                role=request.role.value
            )
            session.add(new_user)
            session.commit()
            result = new_user.ToDict()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.info(f"User '{caller.username}' created user '{request.username}' with role '{request.role.value}'")
        self.activity_log.Record(
            caller, "Added User", request.full_name,
            f"Account created with '{request.role.value}' role"
        )

        return result

    async def UpdateUser(self, caller: SessionUser, user_id: str, request: UpdateUserRequest,
                         current_session_id: Optional[str] = None) -> dict:
        """
        Update an account

        Self-edits may change full name, username, role and password and always
        need the caller's current password. Admins editing someone else may
        only change the full name; other submitted fields are ignored.

        Args:
            caller: Session snapshot of the editor
            user_id: Account being edited
            request: Submitted fields
            current_session_id: Caller's session, kept when other sessions are kicked

        Returns:
            dict: {"user": ..., "changes": [...]}
        """
        policy.Require(caller, Action.USER_UPDATE, user_id)

        if policy.RequiresStepUp(caller, Action.USER_UPDATE, user_id) and not request.currentPassword:
            raise ValidationError("Current password is required to update your profile")

        if request.currentPassword:
            await self.VerifyActorPassword(caller, request.currentPassword)

        is_self = policy.IsSelf(caller, user_id)
        requested = {
            "full_name": request.full_name,
            "username": request.username,
            "role": request.role.value if request.role else None,
            "password": request.password,
        }
        allowed = policy.FilterUserChanges(caller, user_id, requested)
        dropped = [field for field, value in requested.items() if value is not None and field not in allowed]
        if dropped:
            logger.info(f"Ignoring fields {dropped} in edit of user {user_id} by '{caller.username}'")

        session = self.db_manager.GetSession()
        try:
            user = session.query(User).filter(User.user_id == user_id).first()
            if not user:
                raise NotFoundError("User not found")

            original_name = user.full_name
            changes = []

            if "full_name" in allowed and allowed["full_name"] and allowed["full_name"] != user.full_name:
                user.full_name = allowed["full_name"]
                changes.append("full_name")

            if "username" in allowed and allowed["username"] and allowed["username"] != user.username:
                if self._UsernameTaken(session, allowed["username"], exclude_user_id=user.user_id):
                    raise ConflictError("Username taken")
                user.username = allowed["username"]
                changes.append("username")

            if "role" in allowed and allowed["role"] != user.role:
                user.role = allowed["role"]
                changes.append("role")

            if "password" in allowed:
                user.password_hash = await self.db_manager.HashPasswordAsync(allowed["password"])
                changes.append("password")

            if changes:
                session.commit()
            result = user.ToDict()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if changes:
            labels = ", ".join(FIELD_LABELS[field] for field in changes)
            if is_self:
                self.activity_log.Record(caller, "Updated Profile", "Self", f"Modified: {labels}")
            else:
                self.activity_log.Record(caller, "Edited User Account", original_name, f"Modified: {labels}")

            if is_self and CREDENTIAL_FIELDS.intersection(changes):
                RunBestEffort(
                    f"log out other sessions of user {user_id}",
                    self.session_manager.DestroyAllSessionsForUser,
                    user_id,
                    except_session_id=current_session_id
                )

        return {"user": result, "changes": [FIELD_LABELS[field] for field in changes]}

    async def DeleteUser(self, caller: SessionUser, user_id: str, current_password: Optional[str]) -> bool:
        """
        Delete an account and every session it holds

        Args:
            caller: Session snapshot of the actor
            user_id: Account to delete
            current_password: The actor's own password

        Returns:
            bool: True if the caller deleted their own account

        Raises:
            AuthorizationError: Not self/admin, wrong password, or last admin
            NotFoundError: Target does not exist
            ValidationError: Password missing
        """
        policy.Require(caller, Action.USER_DELETE, user_id)
        is_self = policy.IsSelf(caller, user_id)

        session = self.db_manager.GetSession()
        try:
            target = session.query(User).filter(User.user_id == user_id).first()
            if not target:
                raise NotFoundError("User not found")

            if not current_password:
                raise ValidationError("Password verification required")

            await self.VerifyActorPassword(caller, current_password)

            if policy.IsLastAdminProtected(target.role, self.db_manager.CountAdmins(session)):
                raise AuthorizationError("Cannot delete the only administrator account")

            target_name = target.full_name
            session.delete(target)
            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        destroyed = self.session_manager.DestroyAllSessionsForUser(user_id)

        logger.info(f"User '{caller.username}' deleted user '{target_name}' ({destroyed} session(s) destroyed)")
        self.activity_log.Record(
            caller, "Deleted User", target_name,
            "Self-deletion" if is_self else "Administrative deletion"
        )

        return is_self

    def KickUser(self, caller: SessionUser, user_id: str) -> int:
        """
        Terminate every session a user holds without deleting the account

        Returns:
            int: Number of sessions destroyed (0 if none)
        """
        policy.Require(caller, Action.USER_KICK)

        deleted_count = self.session_manager.DestroyAllSessionsForUser(user_id)

        session = self.db_manager.GetSession()
        try:
            kicked = session.query(User).filter(User.user_id == user_id).first()
            target_name = kicked.full_name if kicked else f"User ID: {user_id}"
        finally:
            session.close()

        logger.warning(f"User '{caller.username}' kicked '{target_name}' ({deleted_count} session(s))")
        self.activity_log.Record(caller, "Kicked User", target_name, "Administrative session termination")

        return deleted_count
