"""
Research Library Server - Research Paper Endpoints

This module contains endpoints for browsing papers, streaming their PDFs and
managing them. Create and update take multipart forms with the PDF in the
"pdf" field.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse

from models.auth import SessionUser
from models.api import PaperForm
from models.infrastructure import UploadedPdf
from auth import GetLibrary, GetCurrentCaller
from library import LibraryServices


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


# ==================== Helpers ====================

async def ReadUpload(upload: Optional[UploadFile]) -> Optional[UploadedPdf]:
    """
    Read a multipart file into memory

    Returns:
        UploadedPdf, or None if no file was sent
    """
    if upload is None or not upload.filename:
        return None

    content = await upload.read()
    return UploadedPdf(
        filename=upload.filename,
        content_type=upload.content_type or "",
        content=content
    )


def PaperFormFields(
    title: Optional[str] = Form(None),
    authors: Optional[str] = Form(None),
    abstract: Optional[str] = Form(None),
    keywords: Optional[str] = Form(None),
    adviser: Optional[str] = Form(None),
    school_year: Optional[str] = Form(None),
    grade_section: Optional[str] = Form(None),
    strand: Optional[str] = Form(None),
    is_featured: Optional[str] = Form(None)
) -> PaperForm:
    """FastAPI dependency collecting the paper form fields"""
    return PaperForm(
        title=title,
        authors=authors,
        abstract=abstract,
        keywords=keywords,
        adviser=adviser,
        school_year=school_year,
        grade_section=grade_section,
        strand=strand,
        is_featured=is_featured
    )


def PdfResponse(library: LibraryServices, paper_id: str, disposition: str, count_download: bool) -> FileResponse:
    file_path, title = library.papers.OpenPaperFile(paper_id, count_download=count_download)
    return FileResponse(
        path=str(file_path),
        media_type="application/pdf",
        filename=f"{title}.pdf",
        content_disposition_type=disposition
    )


# ==================== Public Endpoints ====================

@router.get("/papers", tags=["Papers"])
async def list_papers(library: LibraryServices = Depends(GetLibrary)):
    """All papers, newest first"""
    return library.papers.ListPapers()


@router.get("/papers/view/{paper_id}", tags=["Papers"])
async def view_paper(paper_id: str, library: LibraryServices = Depends(GetLibrary)):
    """Stream a paper's PDF for in-browser viewing (not counted as a download)"""
    return PdfResponse(library, paper_id, "inline", count_download=False)


@router.get("/papers/download/{paper_id}", tags=["Papers"])
async def download_paper(paper_id: str, library: LibraryServices = Depends(GetLibrary)):
    """
    Download a paper's PDF and count the download

    Raises:
        NotFoundError: Unknown paper or missing file
    """
    logger.info(f"Download requested for paper {paper_id}")
    return PdfResponse(library, paper_id, "attachment", count_download=True)


@router.get("/papers/{paper_id}", tags=["Papers"])
async def get_paper(paper_id: str, library: LibraryServices = Depends(GetLibrary)):
    return library.papers.GetPaper(paper_id)


# ==================== Management Endpoints ====================

@router.post("/papers", status_code=status.HTTP_201_CREATED, tags=["Papers"])
async def create_paper(
    form: PaperForm = Depends(PaperFormFields),
    pdf: Optional[UploadFile] = File(None),
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """
    Add a paper with its PDF

    Raises:
        ValidationError: Missing fields, bad authors, unknown strand, missing or invalid PDF
    """
    paper = library.papers.CreatePaper(caller, form, await ReadUpload(pdf))
    return {"message": "Paper added successfully", "paper": paper}


@router.put("/papers/{paper_id}", tags=["Papers"])
async def update_paper(
    paper_id: str,
    form: PaperForm = Depends(PaperFormFields),
    pdf: Optional[UploadFile] = File(None),
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """Update a paper; fields not sent are left unchanged, a new PDF replaces the old one"""
    result = library.papers.UpdatePaper(caller, paper_id, form, await ReadUpload(pdf))
    return {"message": "Paper updated successfully", "paper": result["paper"]}


@router.delete("/papers/{paper_id}", tags=["Papers"])
async def delete_paper(
    paper_id: str,
    caller: SessionUser = Depends(GetCurrentCaller),
    library: LibraryServices = Depends(GetLibrary)
):
    """Remove a paper and its PDF (admin only)"""
    library.papers.DeletePaper(caller, paper_id)
    return {"message": "Paper deleted successfully"}
