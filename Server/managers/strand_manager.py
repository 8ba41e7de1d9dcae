"""
Research Library Server - Strand Manager

Strand (academic track) operations. Acronyms are stored uppercase and are
unique; a strand that still has papers filed under it cannot be deleted.
"""

import logging
from typing import List

from sqlalchemy import func

import policy
from policy import Action
from exceptions import ConflictError, NotFoundError, ValidationError
from models.auth import SessionUser
from models.api import CreateStrandRequest, UpdateStrandRequest
from models.database import Strand, ResearchPaper

logger = logging.getLogger(__name__)

DEFAULT_ICON = "BookOpen"


def NormalizeAcronym(short: str) -> str:
    return (short or "").strip().upper()


class StrandManager:
    """
    Strand operations
    """

    def __init__(self, db_manager, activity_log):
        self.db_manager = db_manager
        self.activity_log = activity_log

    @staticmethod
    def _AcronymTaken(session, short: str, exclude_strand_id: str = None) -> bool:
        query = session.query(Strand).filter(Strand.short == short)
        if exclude_strand_id is not None:
            query = query.filter(Strand.strand_id != exclude_strand_id)
        return query.first() is not None

    def ListStrands(self) -> List[dict]:
        """
        All strands sorted by acronym, each with paperCount and totalDownloads
        """
        session = self.db_manager.GetSession()
        try:
            rows = session.query(
                Strand,
                func.count(ResearchPaper.paper_id),
                func.coalesce(func.sum(ResearchPaper.download_count), 0)
            ).outerjoin(
                ResearchPaper, ResearchPaper.strand_id == Strand.strand_id
            ).group_by(Strand.strand_id).order_by(Strand.short).all()

            strands = []
            for strand, paper_count, total_downloads in rows:
                strand_dict = strand.ToDict()
                strand_dict["paperCount"] = paper_count
                strand_dict["totalDownloads"] = int(total_downloads)
                strands.append(strand_dict)
            return strands
        finally:
            session.close()

    def CreateStrand(self, caller: SessionUser, request: CreateStrandRequest) -> dict:
        """
        Raises:
            ConflictError: If the acronym already exists (any case)
        """
        policy.Require(caller, Action.STRAND_CREATE)

        short = NormalizeAcronym(request.short)
        if not short:
            raise ValidationError("Acronym is required")

        session = self.db_manager.GetSession()
        try:
            if self._AcronymTaken(session, short):
                raise ConflictError("Strand with this acronym already exists")

            strand = Strand(
                short=short,
                name=request.name,
                description=request.description or "",
                icon=request.icon or DEFAULT_ICON
            )
            session.add(strand)
            session.commit()
            result = strand.ToDict()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        self.activity_log.Record(caller, "Added Strand", short, f"New strand '{short}' added to strand list")
        return result

    def UpdateStrand(self, caller: SessionUser, strand_id: str, request: UpdateStrandRequest) -> dict:
        """
        Apply submitted fields and log which ones changed

        Raises:
            NotFoundError: Unknown strand
            ConflictError: New acronym belongs to another strand
        """
        policy.Require(caller, Action.STRAND_UPDATE)

        session = self.db_manager.GetSession()
        try:
            strand = session.query(Strand).filter(Strand.strand_id == strand_id).first()
            if not strand:
                raise NotFoundError("Strand not found")

            original_short = strand.short
            changes = []

            new_short = NormalizeAcronym(request.short) if request.short is not None else None
            if new_short and new_short != original_short:
                if self._AcronymTaken(session, new_short, exclude_strand_id=strand.strand_id):
                    raise ConflictError("Strand with this acronym already exists")
                strand.short = new_short
                changes.append(f"Acronym (changed to '{new_short}')")

            if request.name and request.name != strand.name:
                strand.name = request.name
                changes.append("Full Name")

            if request.description is not None and request.description != (strand.description or ""):
                strand.description = request.description
                changes.append("Description")

            if request.icon and request.icon != (strand.icon or DEFAULT_ICON):
                strand.icon = request.icon
                changes.append("Icon")

            if changes:
                session.commit()
            result = strand.ToDict()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if changes:
            self.activity_log.Record(caller, "Edited Strand", original_short, f"Edited: {', '.join(changes)}")

        return result

    def DeleteStrand(self, caller: SessionUser, strand_id: str) -> None:
        """
        Raises:
            NotFoundError: Unknown strand
            ConflictError: Papers still reference the strand
        """
        policy.Require(caller, Action.STRAND_DELETE)

        session = self.db_manager.GetSession()
        try:
            strand = session.query(Strand).filter(Strand.strand_id == strand_id).first()
            if not strand:
                raise NotFoundError("Strand not found")

            paper_count = session.query(ResearchPaper).filter(ResearchPaper.strand_id == strand_id).count()
            if paper_count > 0:
                raise ConflictError(
                    f"Cannot delete strand '{strand.short}': {paper_count} paper(s) are filed under it"
                )

            short = strand.short
            session.delete(strand)
            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        self.activity_log.Record(caller, "Deleted Strand", short, f"Strand '{short}' removed from strands collection")
