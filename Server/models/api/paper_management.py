"""
Research Library Server - Paper Management API Models

Papers are submitted as multipart forms (metadata plus the PDF), so every
field arrives as a string. PaperForm holds the raw values; the parse helpers
turn them into the stored shapes.
"""

import json
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class Author(BaseModel):
    """One paper author"""
    firstName: str
    middleName: Optional[str] = ""
    lastName: str
    suffix: Optional[str] = ""

    def Normalized(self) -> dict:
        """Compare-ready form: the four name fields, blanks as empty strings"""
        return {
            "firstName": self.firstName or "",
            "middleName": self.middleName or "",
            "lastName": self.lastName or "",
            "suffix": self.suffix or "",
        }


class PaperForm(BaseModel):
    """
    Raw paper fields from a create or update form.
    None means "not submitted" (left unchanged on update).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = None
    authors: Optional[str] = None  # JSON list of Author
    abstract: Optional[str] = None
    keywords: Optional[str] = None  # comma separated
    adviser: Optional[str] = None
    school_year: Optional[str] = None
    grade_section: Optional[str] = None
    strand: Optional[str] = None  # strand acronym
    is_featured: Optional[str] = None


def ParseAuthors(raw: str) -> List[Author]:
    """
    Parse the JSON authors field

    Raises:
        ValueError: If the value is not a JSON list of author objects
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("authors must be a list")
    return [Author(**item) for item in data]


def ParseKeywords(raw: str) -> List[str]:
    """Split a comma separated keyword string, dropping blanks"""
    return [keyword.strip() for keyword in raw.split(",") if keyword.strip()]


def ParseFlag(raw) -> bool:
    """Form checkbox values arrive as 'true'/'false' strings"""
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("true", "1", "on", "yes")
