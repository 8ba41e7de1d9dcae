"""
Research Library Server - Statistics Endpoints
"""

from fastapi import APIRouter, Depends

from models.auth import SessionUser
from policy import Action
from auth import GetLibrary, RequireAction
from library import LibraryServices


# Create router instance
router = APIRouter()


@router.get("/stats", tags=["Statistics"])
async def public_stats(library: LibraryServices = Depends(GetLibrary)):
    """Landing page counters: papers, downloads, strands and the founding year"""
    return library.stats.GetPublicStats()


@router.get("/dashboard/stats", tags=["Statistics"])
async def dashboard_stats(
    caller: SessionUser = Depends(RequireAction(Action.DASHBOARD_READ)),
    library: LibraryServices = Depends(GetLibrary)
):
    return library.stats.GetDashboardStats()
