"""
Research Library Server - Login Throttle State Model

Dataclass view of a login attempt record with the two time-window checks
the throttle applies to it.
"""

import math
from datetime import datetime, timedelta
from dataclasses import dataclass

MAX_ATTEMPTS = 3
LOCKOUT_SECONDS = 60
GRACE_PERIOD = timedelta(minutes=10)


@dataclass
class ThrottleState:
    """
    Failure count and last failure time for one (device, username) pair

    The lockout window and the grace reset are independent checks on the
    same record. The grace reset only changes how the next failure is
    counted; it never shortens an active lockout.
    """
    attempts: int
    last_attempt_utc: datetime

    def ElapsedMilliseconds(self, now: datetime) -> int:
        return int((now - self.last_attempt_utc).total_seconds() * 1000)

    def GraceApplies(self, now: datetime) -> bool:
        """More than ten minutes since the last failure: old mistakes are forgotten"""
        return (now - self.last_attempt_utc) > GRACE_PERIOD

    def EffectiveAttempts(self, now: datetime) -> int:
        return 0 if self.GraceApplies(now) else self.attempts

    def LockoutRemaining(self, now: datetime) -> int:
        """
        Seconds until the lockout lifts, or 0 if not locked out

        Evaluated on the stored count, not the grace-adjusted one.
        """
        diff_ms = self.ElapsedMilliseconds(now)
        if self.attempts >= MAX_ATTEMPTS and diff_ms < LOCKOUT_SECONDS * 1000:
            return math.ceil((LOCKOUT_SECONDS * 1000 - diff_ms) / 1000)
        return 0
