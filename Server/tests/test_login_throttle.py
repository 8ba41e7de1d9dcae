"""
Tests for the login throttle in Research Library Server

Tests lockout, the ten-minute grace reset and clearing on success, using a
fixed clock instead of real waiting.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import RateLimitError, ValidationError
from models.infrastructure import ThrottleState
from library_testing import NewLibrary

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def test_lockout_after_three_failures():
    """Three failures within a minute lock the pair; the lock lifts after retryAfter"""
    throttle = NewLibrary().throttle

    throttle.RecordFailure("D1", "bob", now=T0)
    throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=2))
    throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=4))

    with pytest.raises(RateLimitError) as error:
        throttle.CheckAttempt("D1", "bob", now=T0 + timedelta(seconds=10))

    # 6 seconds after the last failure: 54 seconds left
    assert error.value.retry_after == 54
    assert error.value.status_code == 429
    assert "54 seconds" in error.value.message

    # Past retryAfter the attempt may proceed
    throttle.CheckAttempt("D1", "bob", now=T0 + timedelta(seconds=4 + 61))


def test_lockout_retry_after_bounds():
    """retryAfter stays between 1 and 60 inside the lockout window"""
    state = ThrottleState(attempts=3, last_attempt_utc=T0)

    assert state.LockoutRemaining(T0) == 60
    assert state.LockoutRemaining(T0 + timedelta(milliseconds=59001)) == 1
    assert state.LockoutRemaining(T0 + timedelta(seconds=60)) == 0
    assert ThrottleState(attempts=2, last_attempt_utc=T0).LockoutRemaining(T0) == 0


def test_pairs_are_independent():
    """A locked (device, username) pair does not block other devices or usernames"""
    throttle = NewLibrary().throttle

    for offset in range(3):
        throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=offset))

    now = T0 + timedelta(seconds=5)
    throttle.CheckAttempt("D2", "bob", now=now)
    throttle.CheckAttempt("D1", "alice", now=now)


def test_username_is_case_insensitive():
    """Failures for 'Bob' and 'bob' count against the same record"""
    throttle = NewLibrary().throttle

    throttle.RecordFailure("D1", "Bob", now=T0)
    assert throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=1)) == 2
    assert throttle.GetState("D1", "BOB").attempts == 2


def test_grace_period_resets_counter():
    """Ten minutes after the last failure the next failure counts as the first"""
    throttle = NewLibrary().throttle

    throttle.RecordFailure("D1", "bob", now=T0)
    throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=1))

    later = T0 + timedelta(minutes=11)
    state = throttle.GetState("D1", "bob")
    assert state.GraceApplies(later)
    assert state.EffectiveAttempts(later) == 0

    assert throttle.RecordFailure("D1", "bob", now=later) == 1
    throttle.CheckAttempt("D1", "bob", now=later + timedelta(seconds=1))


def test_grace_period_after_lockout():
    """A locked pair that stays quiet for ten minutes starts over"""
    throttle = NewLibrary().throttle

    for offset in range(3):
        throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=offset))

    later = T0 + timedelta(minutes=12)
    throttle.CheckAttempt("D1", "bob", now=later)
    assert throttle.RecordFailure("D1", "bob", now=later) == 1
    throttle.CheckAttempt("D1", "bob", now=later + timedelta(seconds=1))


def test_success_clears_state():
    """A successful login removes the record; the next failure counts from 1"""
    throttle = NewLibrary().throttle

    throttle.RecordFailure("D1", "bob", now=T0)
    throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=1))

    throttle.RecordSuccess("D1", "bob")
    assert throttle.GetState("D1", "bob") is None

    assert throttle.RecordFailure("D1", "bob", now=T0 + timedelta(seconds=2)) == 1


def test_missing_device_id_rejected():
    """A blank or missing device id is a validation error before any lookup"""
    throttle = NewLibrary().throttle

    with pytest.raises(ValidationError):
        throttle.CheckAttempt(None, "bob")
    with pytest.raises(ValidationError):
        throttle.CheckAttempt("   ", "bob")
    with pytest.raises(ValidationError):
        throttle.RecordFailure("", "bob")


if __name__ == "__main__":
    print("Running login throttle tests...")
    print()

    test_lockout_after_three_failures()
    test_lockout_retry_after_bounds()
    test_pairs_are_independent()
    test_username_is_case_insensitive()
    test_grace_period_resets_counter()
    test_grace_period_after_lockout()
    test_success_clears_state()
    test_missing_device_id_rejected()

    print()
    print("All tests passed!")
