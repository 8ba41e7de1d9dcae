"""
Research Library Server - Uploaded PDF Model

Framework-independent view of an uploaded paper file.
"""

from dataclasses import dataclass


@dataclass
class UploadedPdf:
    """A PDF received with a create or update request"""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)
