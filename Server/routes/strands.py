"""
Research Library Server - Strand Endpoints

Listing is public; any signed-in user may add, edit or remove strands.
"""

from fastapi import APIRouter, Depends, status

from models.auth import SessionUser
from models.api import CreateStrandRequest, UpdateStrandRequest
from auth import GetLibrary, GetCurrentCaller
from library import LibraryServices


# Create router instance
router = APIRouter()


@router.get("/strands", tags=["Strands"])
async def list_strands(library: LibraryServices = Depends(GetLibrary)):
    """All strands with paper counts and download totals, sorted by acronym"""
    return library.strands.ListStrands()


@router.post("/strands", status_code=status.HTTP_201_CREATED, tags=["Strands"])
async def create_strand(
    request: CreateStrandRequest,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    return library.strands.CreateStrand(caller, request)


@router.put("/strands/{strand_id}", tags=["Strands"])
async def update_strand(
    strand_id: str,
    request: UpdateStrandRequest,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    return library.strands.UpdateStrand(caller, strand_id, request)


@router.delete("/strands/{strand_id}", tags=["Strands"])
async def delete_strand(
    strand_id: str,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Remove a strand

    Raises:
        NotFoundError: Unknown strand
        ConflictError: Papers still reference the strand
    """
    library.strands.DeleteStrand(caller, strand_id)
    return {"message": "Strand deleted successfully"}
