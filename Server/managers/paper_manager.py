"""
Research Library Server - Paper Manager

Research paper operations and their file cascades:

- create stores the PDF first and removes it again if the row can't be saved
- update diffs every field against the stored paper and logs only real changes;
  a new PDF replaces the old file, a new title renames the existing file
  when the new name is free
- delete removes the file (tolerating a missing one) and then the row
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy.orm import joinedload

import policy
from policy import Action
from exceptions import NotFoundError, ValidationError
from file_storage import PaperStorage, FilenameForTitle, ValidatePdf
from models.auth import SessionUser
from models.api import PaperForm, ParseAuthors, ParseKeywords, ParseFlag
from models.database import ResearchPaper, Strand
from models.infrastructure import UploadedPdf
from managers.strand_manager import NormalizeAcronym

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "authors", "abstract", "adviser", "school_year", "grade_section", "strand")


def NormalizeAuthors(authors) -> List[dict]:
    """Author list reduced to the four name fields, for structural comparison"""
    normalized = []
    for author in authors or []:
        if hasattr(author, "Normalized"):
            normalized.append(author.Normalized())
        else:
            normalized.append({
                "firstName": author.get("firstName") or "",
                "middleName": author.get("middleName") or "",
                "lastName": author.get("lastName") or "",
                "suffix": author.get("suffix") or "",
            })
    return normalized


class PaperManager:
    """
    Research paper operations
    """

    def __init__(self, db_manager, storage: PaperStorage, activity_log):
        self.db_manager = db_manager
        self.storage = storage
        self.activity_log = activity_log

    # ==================== Helpers ====================

    @staticmethod
    def _ParseAuthorsOrFail(raw: str) -> List[dict]:
        try:
            return NormalizeAuthors(ParseAuthors(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Rejected authors field: {e}")
            raise ValidationError("Invalid authors format")

    @staticmethod
    def _FindStrandOrFail(session, short: str) -> Strand:
        strand = session.query(Strand).filter(Strand.short == NormalizeAcronym(short)).first()
        if not strand:
            raise ValidationError("Invalid Strand")
        return strand

    # ==================== Queries ====================

    def ListPapers(self) -> List[dict]:
        """All papers, newest first"""
        session = self.db_manager.GetSession()
        try:
            papers = session.query(ResearchPaper).options(
                joinedload(ResearchPaper.strand)
            ).order_by(ResearchPaper.created_at.desc()).all()
            return [paper.ToDict() for paper in papers]
        finally:
            session.close()

    def GetPaper(self, paper_id: str) -> dict:
        session = self.db_manager.GetSession()
        try:
            paper = session.query(ResearchPaper).options(
                joinedload(ResearchPaper.strand)
            ).filter(ResearchPaper.paper_id == paper_id).first()
            if not paper:
                raise NotFoundError("Paper not found")
            return paper.ToDict()
        finally:
            session.close()

    def OpenPaperFile(self, paper_id: str, count_download: bool = False) -> Tuple[Path, str]:
        """
        Locate a paper's PDF for viewing or downloading

        Args:
            paper_id: Paper id
            count_download: Increment download_count (atomic UPDATE in the database)

        Returns:
            (file path, paper title)

        Raises:
            NotFoundError: Unknown paper, no file recorded, or file missing on disk
        """
        session = self.db_manager.GetSession()
        try:
            if count_download:
                updated = session.query(ResearchPaper).filter(
                    ResearchPaper.paper_id == paper_id
                ).update(
                    {ResearchPaper.download_count: ResearchPaper.download_count + 1},
                    synchronize_session=False
                )
                session.commit()
                if not updated:
                    raise NotFoundError("File not found")

            paper = session.query(ResearchPaper).filter(ResearchPaper.paper_id == paper_id).first()
            if not paper or not paper.pdf_path:
                raise NotFoundError("File not found")
            pdf_path, title = paper.pdf_path, paper.title
        finally:
            session.close()

        if not self.storage.Exists(pdf_path):
            raise NotFoundError("File missing on server")

        return self.storage.GetFilePath(pdf_path), title

    # ==================== Mutations ====================

    def CreatePaper(self, caller: SessionUser, form: PaperForm, upload: Optional[UploadedPdf]) -> dict:
        """
        Add a paper with its PDF

        Raises:
            ValidationError: Missing fields, bad authors JSON, unknown strand, missing/bad PDF
            StorageError: PDF could not be written
        """
        policy.Require(caller, Action.PAPER_CREATE)

        missing = [field for field in REQUIRED_FIELDS if not getattr(form, field)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        authors = self._ParseAuthorsOrFail(form.authors)
        if not authors:
            raise ValidationError("At least one author is required")

        if upload is None:
            raise ValidationError("PDF file is required")
        ValidatePdf(upload)

        session = self.db_manager.GetSession()
        stored_filename = None
        try:
            strand = self._FindStrandOrFail(session, form.strand)

            stored_filename = self.storage.StoreFile(upload, form.title)

            paper = ResearchPaper(
                title=form.title,
                authors=authors,
                abstract=form.abstract,
                keywords=ParseKeywords(form.keywords or ""),
                adviser=form.adviser,
                school_year=form.school_year,
                grade_section=form.grade_section,
                strand_id=strand.strand_id,
                is_featured=ParseFlag(form.is_featured) if form.is_featured is not None else False,
                pdf_path=stored_filename
            )
            session.add(paper)
            session.commit()
            result = paper.ToDict()
            result["strand"] = strand.short

        except Exception:
            session.rollback()
            if stored_filename:
                self.storage.DeleteFile(stored_filename)
            raise
        finally:
            session.close()

        self.activity_log.Record(caller, "Added Paper", form.title, "New research paper added to library")
        return result

    def UpdatePaper(self, caller: SessionUser, paper_id: str, form: PaperForm,
                    upload: Optional[UploadedPdf] = None) -> dict:
        """
        Apply submitted fields; unsubmitted fields stay as they are

        Returns:
            dict: {"paper": ..., "changes": [...]}
        """
        policy.Require(caller, Action.PAPER_UPDATE)

        new_authors = self._ParseAuthorsOrFail(form.authors) if form.authors else None
        if upload is not None:
            ValidatePdf(upload)

        session = self.db_manager.GetSession()
        new_filename = None
        renamed = None
        try:
            paper = session.query(ResearchPaper).filter(ResearchPaper.paper_id == paper_id).first()
            if not paper:
                raise NotFoundError("Paper not found")

            original_title = paper.title
            changes = []

            title_changed = bool(form.title) and form.title != original_title
            if title_changed:
                paper.title = form.title
                changes.append(f"Title (changed to '{form.title}')")

            if form.abstract is not None and form.abstract != paper.abstract:
                paper.abstract = form.abstract
                changes.append("Abstract")

            if form.keywords is not None:
                new_keywords = ParseKeywords(form.keywords)
                if sorted(new_keywords) != sorted(paper.keywords or []):
                    paper.keywords = new_keywords
                    changes.append("Keywords")

            if form.adviser is not None and form.adviser != paper.adviser:
                paper.adviser = form.adviser
                changes.append("Adviser")

            if form.school_year is not None and form.school_year != paper.school_year:
                paper.school_year = form.school_year
                changes.append("School Year")

            if form.grade_section is not None and form.grade_section != paper.grade_section:
                paper.grade_section = form.grade_section
                changes.append("Grade Section")

            if form.is_featured is not None:
                featured = ParseFlag(form.is_featured)
                if featured != paper.is_featured:
                    paper.is_featured = featured
                    changes.append("Featured Status")

            if form.strand:
                strand = self._FindStrandOrFail(session, form.strand)
                if strand.strand_id != paper.strand_id:
                    paper.strand_id = strand.strand_id
                    changes.append("Strand")

            if new_authors is not None and new_authors != NormalizeAuthors(paper.authors):
                paper.authors = new_authors
                changes.append("Authors")

            old_filename = paper.pdf_path
            if upload is not None:
                # Write first so a failed upload leaves the old file in place
                new_filename = self.storage.StoreFile(upload, paper.title)
                self.storage.DeleteFile(old_filename)
                canonical = FilenameForTitle(paper.title)
                if new_filename != canonical and self.storage.RenameFile(new_filename, canonical):
                    new_filename = canonical
                paper.pdf_path = new_filename
                changes.append("Pdf")
            elif title_changed and self.storage.Exists(old_filename):
                renamed_to = FilenameForTitle(paper.title)
                if self.storage.RenameFile(old_filename, renamed_to):
                    paper.pdf_path = renamed_to
                    renamed = (old_filename, renamed_to)

            session.commit()
            paper = session.query(ResearchPaper).options(
                joinedload(ResearchPaper.strand)
            ).filter(ResearchPaper.paper_id == paper_id).first()
            result = paper.ToDict()

        except Exception:
            session.rollback()
            if new_filename:
                self.storage.DeleteFile(new_filename)
            if renamed:
                self.storage.RenameFile(renamed[1], renamed[0])
            raise
        finally:
            session.close()

        self.activity_log.Record(
            caller, "Edited Paper", original_title,
            f"Edited: {', '.join(changes)}" if changes else "Updated details"
        )

        return {"paper": result, "changes": changes}

    def DeletePaper(self, caller: SessionUser, paper_id: str) -> None:
        """
        Remove a paper and its file (admin only)
        """
        policy.Require(caller, Action.PAPER_DELETE)

        session = self.db_manager.GetSession()
        try:
            paper = session.query(ResearchPaper).filter(ResearchPaper.paper_id == paper_id).first()
            if not paper:
                raise NotFoundError("Paper not found")

            title = paper.title
            self.storage.DeleteFile(paper.pdf_path)

            session.delete(paper)
            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        self.activity_log.Record(caller, "Deleted Paper", title, "Paper permanently removed from library")
