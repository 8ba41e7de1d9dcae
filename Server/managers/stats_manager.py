"""
Research Library Server - Statistics

Counts for the public landing page and the admin dashboard.
"""

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from models.database import ResearchPaper, Strand, User

# Year the library started collecting papers, shown on the landing page
LIBRARY_SINCE = 2020


class StatsManager:
    """
    Read-only aggregate queries
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    @staticmethod
    def _TotalDownloads(session) -> int:
        return int(session.query(func.coalesce(func.sum(ResearchPaper.download_count), 0)).scalar() or 0)

    def GetPublicStats(self) -> dict:
        session = self.db_manager.GetSession()
        try:
            return {
                "papers": session.query(ResearchPaper).count(),
                "downloads": self._TotalDownloads(session),
                "strands": session.query(Strand).count(),
                "since": LIBRARY_SINCE
            }
        finally:
            session.close()

    def GetDashboardStats(self) -> dict:
        """
        Totals, the five most recent uploads, papers per school year and
        downloads per strand (highest first)
        """
        session = self.db_manager.GetSession()
        try:
            recent = session.query(ResearchPaper).options(
                joinedload(ResearchPaper.strand)
            ).order_by(ResearchPaper.created_at.desc()).limit(5).all()

            recent_uploads = [{
                "id": paper.paper_id,
                "title": paper.title,
                "strand": paper.strand.short if paper.strand else "N/A",
                "download_count": paper.download_count,
                "published_date": paper.created_at.isoformat() if paper.created_at else None
            } for paper in recent]

            school_years = session.query(
                ResearchPaper.school_year, func.count(ResearchPaper.paper_id)
            ).group_by(ResearchPaper.school_year).order_by(ResearchPaper.school_year).all()

            downloads_by_strand = session.query(
                Strand.short, func.sum(ResearchPaper.download_count)
            ).join(
                ResearchPaper, ResearchPaper.strand_id == Strand.strand_id
            ).group_by(Strand.strand_id).all()

            return {
                "stats": {
                    "totalPapers": session.query(ResearchPaper).count(),
                    "totalDownloads": self._TotalDownloads(session),
                    "activeStrands": session.query(Strand).count(),
                    "registeredUsers": session.query(User).count(),
                    "papersTrend": 0,
                    "downloadsTrend": 0
                },
                "recentUploads": recent_uploads,
                "schoolYearDistribution": [
                    {"year": year or "Unknown", "count": count} for year, count in school_years
                ],
                "downloadsByStrand": sorted(
                    [{"strand": short, "downloads": int(downloads or 0)} for short, downloads in downloads_by_strand],
                    key=lambda item: item["downloads"],
                    reverse=True
                )
            }
        finally:
            session.close()
