"""
Research Library Server - Activity Log Endpoints

Admin-only access to the audit trail.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from models.auth import SessionUser
from models.api import DeleteLogsRequest
from policy import Action
from auth import GetLibrary, RequireAction
from library import LibraryServices


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


@router.get("/activity-logs", tags=["Activity Logs"])
async def list_activity_logs(
    caller: SessionUser = Depends(RequireAction(Action.LOG_READ)),
    library: LibraryServices = Depends(GetLibrary)
):
    """Most recent entries, newest first"""
    return library.activity_log.ListRecent()


@router.delete("/activity-logs", tags=["Activity Logs"])
async def delete_activity_logs(
    request: Optional[DeleteLogsRequest] = None,
    caller: SessionUser = Depends(RequireAction(Action.LOG_DELETE)),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Permanently delete entries by id

    Raises:
        ValidationError: ids missing, empty or not a list
    """
    deleted_count = library.activity_log.DeleteLogs(caller, request.ids if request else None)
    logger.info(f"User '{caller.username}' deleted {deleted_count} activity logs")
    return {"message": "Logs deleted successfully", "deletedCount": deleted_count}
