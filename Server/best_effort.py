"""
Research Library Server - Best-Effort Cascades

Follow-up work that must not fail the action that triggered it (kicking a
user's other sessions after a credential change, for example). Failures go
to the operator log only.
"""

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def RunBestEffort(description: str, func: Callable[..., Any], *args, **kwargs) -> Optional[Any]:
    """
    Call func and swallow any exception

    Args:
        description: Short label for the operator log
        func: Callable to run

    Returns:
        func's return value, or None if it raised
    """
    try:
        return func(*args, **kwargs)
    except Exception:
        logger.exception(f"Best-effort task failed: {description}")
        return None
