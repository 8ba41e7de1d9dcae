"""
Research Library Server - Strand Database Model

Academic tracks (STEM, ABM, ...) that papers are filed under.
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from models.database.base import Base, NewId, UtcNow


class Strand(Base):
    """
    Strands table - acronym is stored uppercase and is unique
    """
    __tablename__ = "strands"

    strand_id = Column(String(32), primary_key=True, default=NewId)
    short = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    icon = Column(String, nullable=False, default="BookOpen")
    created_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow, onupdate=UtcNow)

    # Relationship to papers (no cascade: a strand in use cannot be deleted)
    papers = relationship("ResearchPaper", back_populates="strand")

    def ToDict(self) -> dict:
        return {
            "id": self.strand_id,
            "short": self.short,
            "name": self.name,
            "description": self.description or "",
            "icon": self.icon,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
