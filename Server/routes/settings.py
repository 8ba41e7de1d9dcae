"""
Research Library Server - Settings Endpoints

Admin access to server-tunable settings. A new session idle timeout applies
to sessions created or refreshed after the change.
"""

import logging

from fastapi import APIRouter, Depends

from models.auth import SessionUser
from models.api import SettingsUpdateRequest
from policy import Action
from auth import GetLibrary, RequireAction
from library import LibraryServices


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


@router.get("/settings", tags=["Settings"])
async def get_settings(
    caller: SessionUser = Depends(RequireAction(Action.SETTINGS_READ)),
    library: LibraryServices = Depends(GetLibrary)
):
    return library.db_manager.GetAllSettings()


@router.put("/settings", tags=["Settings"])
async def update_settings(
    request: SettingsUpdateRequest,
    caller: SessionUser = Depends(RequireAction(Action.SETTINGS_UPDATE)),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Update one or more settings

    Returns:
        dict: All settings after the update
    """
    settings = library.db_manager.UpdateSettings(request.model_dump(exclude_none=True))
    library.session_manager.idle_minutes = settings["session_idle_minutes"]

    logger.info(f"User '{caller.username}' updated settings: {request.model_dump(exclude_none=True)}")
    library.activity_log.Record(caller, "Updated Settings", "System", "Server settings changed")

    return {"message": "Settings updated successfully", "settings": settings}
