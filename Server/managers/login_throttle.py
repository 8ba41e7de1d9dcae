"""
Research Library Server - Login Throttle

Brute-force protection for the login endpoint, keyed by the pair
(device id, lowercase username):

- 3 failures within a minute of each other lock the pair for 60 seconds
  from the last failure
- a failure more than 10 minutes after the previous one counts as the first
- a successful login removes the record entirely

Counter updates use SQLite's INSERT ... ON CONFLICT DO UPDATE so concurrent
failures for the same pair never create a second row or lose an increment.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case
from sqlalchemy.dialects.sqlite import insert

from exceptions import ValidationError, RateLimitError
from models.database import LoginAttempt, AsUtc
from models.infrastructure import ThrottleState, GRACE_PERIOD

logger = logging.getLogger(__name__)


def NormalizeUsername(username: str) -> str:
    return (username or "").strip().lower()


def RequireDeviceId(device_id: Optional[str]) -> str:
    """
    Validate the client-supplied device id

    Raises:
        ValidationError: If the device id is missing or blank
    """
    if device_id is None or not str(device_id).strip():
        raise ValidationError("Device ID is required")
    return str(device_id).strip()


class LoginThrottle:
    """
    Tracks failed logins per (device, username) in the login_attempts table
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def GetState(self, device_id: str, username: str) -> Optional[ThrottleState]:
        """
        Current attempt record for a pair

        Returns:
            ThrottleState, or None if the pair has no record
        """
        session = self.db_manager.GetSession()
        try:
            record = session.query(LoginAttempt).filter(
                LoginAttempt.device_id == device_id,
                LoginAttempt.username == NormalizeUsername(username)
            ).first()
            if not record:
                return None
            return ThrottleState(attempts=record.attempts, last_attempt_utc=AsUtc(record.last_attempt))
        finally:
            session.close()

    def CheckAttempt(self, device_id: Optional[str], username: str, now: Optional[datetime] = None) -> None:
        """
        Decide whether a login attempt may proceed to the credential check

        Args:
            device_id: Client-supplied device id
            username: Username as typed
            now: Current time (tests pass a fixed clock)

        Raises:
            ValidationError: If device_id is missing
            RateLimitError: If the pair is locked out
        """
        device_id = RequireDeviceId(device_id)
        now = now or datetime.now(timezone.utc)

        state = self.GetState(device_id, username)
        if state is None:
            return

        remaining = state.LockoutRemaining(now)
        if remaining > 0:
            logger.warning(
                f"Login locked out for '{NormalizeUsername(username)}' on device '{device_id}' "
                f"({state.attempts} failures, {remaining}s remaining)"
            )
            raise RateLimitError(
                f"Too many login attempts. Please try again in {remaining} seconds.",
                retry_after=remaining
            )

    def RecordFailure(self, device_id: str, username: str, now: Optional[datetime] = None) -> int:
        """
        Count a failed login

        Args:
            device_id: Client-supplied device id
            username: Username as typed
            now: Current time

        Returns:
            int: Failure count after this attempt
        """
        device_id = RequireDeviceId(device_id)
        normalized = NormalizeUsername(username)
        now = now or datetime.now(timezone.utc)
        grace_cutoff = now - GRACE_PERIOD

        statement = insert(LoginAttempt).values(
            device_id=device_id,
            username=normalized,
            attempts=1,
            last_attempt=now,
            created_at=now,
            updated_at=now
        )
        statement = statement.on_conflict_do_update(
            index_elements=[LoginAttempt.device_id, LoginAttempt.username],
            set_={
                # Older than the grace period: forget previous mistakes
                "attempts": case(
                    (LoginAttempt.last_attempt < grace_cutoff, 1),
                    else_=LoginAttempt.attempts + 1
                ),
                "last_attempt": now,
                "updated_at": now
            }
        )

        session = self.db_manager.GetSession()
        try:
            session.execute(statement)
            session.commit()
            attempts = session.query(LoginAttempt.attempts).filter(
                LoginAttempt.device_id == device_id,
                LoginAttempt.username == normalized
            ).scalar()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        logger.warning(f"Failed login for '{normalized}' on device '{device_id}' (attempt {attempts})")
        return attempts

    def RecordSuccess(self, device_id: str, username: str) -> None:
        """Forget all failures for the pair after a successful login"""
        session = self.db_manager.GetSession()
        try:
            session.query(LoginAttempt).filter(
                LoginAttempt.device_id == device_id,
                LoginAttempt.username == NormalizeUsername(username)
            ).delete()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
