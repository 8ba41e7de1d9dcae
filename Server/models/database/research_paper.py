"""
Research Library Server - Research Paper Database Model

Paper metadata. The PDF itself lives in file storage under pdf_path.
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship

from models.database.base import Base, NewId, UtcNow


class ResearchPaper(Base):
    """
    Research papers table
    """
    __tablename__ = "research_papers"

    paper_id = Column(String(32), primary_key=True, default=NewId)
    title = Column(String, nullable=False)
    authors = Column(JSON, nullable=False, default=list)  # [{firstName, middleName, lastName, suffix}]
    abstract = Column(String, nullable=False)
    keywords = Column(JSON, nullable=False, default=list)
    adviser = Column(String, nullable=False)
    school_year = Column(String, nullable=False)
    grade_section = Column(String, nullable=False)
    strand_id = Column(String(32), ForeignKey("strands.strand_id"), nullable=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    download_count = Column(Integer, nullable=False, default=0)
    pdf_path = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow, onupdate=UtcNow)

    strand = relationship("Strand", back_populates="papers")

    @property
    def author_display(self) -> str:
        """'Lastname, F. & Lastname, F.' as shown on paper cards"""
        parts = []
        for author in self.authors or []:
            first = (author.get("firstName") or "")[:1]
            parts.append(f"{author.get('lastName', '')}, {first}.")
        return " & ".join(parts)

    def ToDict(self) -> dict:
        return {
            "id": self.paper_id,
            "title": self.title,
            "authors": self.authors or [],
            "author_display": self.author_display,
            "abstract": self.abstract,
            "keywords": self.keywords or [],
            "adviser": self.adviser,
            "school_year": self.school_year,
            "grade_section": self.grade_section,
            "strand": self.strand.short if self.strand else "N/A",
            "strand_id": self.strand_id,
            "is_featured": self.is_featured,
            "download_count": self.download_count,
            "pdf_path": self.pdf_path,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "published_date": self.created_at.isoformat() if self.created_at else None,
        }
