"""
Research Library Server - File Storage Management

This module handles PDF storage for research papers:
- Storage directory creation
- File name derivation from paper titles
- Store / delete / rename by file name

Delete is tolerant (a missing file is not an error) so a database row is
never left behind because its file already vanished. Store is strict: a
failed write aborts the paper mutation.
"""

import logging
import re
from pathlib import Path
from typing import Optional

import config
from exceptions import StorageError, ValidationError
from models.infrastructure import UploadedPdf

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
_UNSAFE_TITLE_CHARS = re.compile(r"[^a-zA-Z0-9 ]")


def SanitizeTitle(title: str) -> str:
    """
    Strip everything but letters, digits and spaces from a title

    Args:
        title: Paper title

    Returns:
        str: Sanitized title ('Untitled' if nothing is left)
    """
    sanitized = _UNSAFE_TITLE_CHARS.sub("", title or "").strip()
    return sanitized or "Untitled"


def FilenameForTitle(title: str) -> str:
    return f"{SanitizeTitle(title)}.pdf"


def ValidatePdf(upload: UploadedPdf) -> None:
    """
    Check an upload before it is stored

    Raises:
        ValidationError: If the file is not a PDF, is empty, or is too large
    """
    if upload.content_type != PDF_CONTENT_TYPE:
        raise ValidationError("Only PDF files are allowed!")
    if upload.size == 0:
        raise ValidationError("Uploaded file is empty")
    if upload.size > config.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File exceeds the {config.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit")


class PaperStorage:
    """
    Flat directory of paper PDFs addressed by file name
    """

    def __init__(self, storage_root: str = None):
        self.storage_root = Path(storage_root or config.STORAGE_ROOT)

    def InitializeStorage(self) -> None:
        """
        Create the storage directory if it doesn't exist
        """
        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Paper storage directory ready: {self.storage_root.absolute()}")
        except Exception as e:
            logger.error(f"Failed to initialize storage: {str(e)}")
            raise

    def GetFilePath(self, filename: str) -> Path:
        """
        Resolve a stored file name to an absolute path

        Raises:
            ValidationError: If the name would escape the storage directory
        """
        root = self.storage_root.absolute()
        file_path = (root / filename).absolute()
        if not filename or file_path.parent != root:
            raise ValidationError(f"Invalid file name: {filename}")
        return file_path

    def Exists(self, filename: Optional[str]) -> bool:
        if not filename:
            return False
        try:
            return self.GetFilePath(filename).is_file()
        except ValidationError:
            return False

    def _FreeFilename(self, title: str) -> str:
        """File name for title that no stored file is using yet"""
        stem = SanitizeTitle(title)
        filename = f"{stem}.pdf"
        counter = 2
        while self.Exists(filename):
            filename = f"{stem} ({counter}).pdf"
            counter += 1
        return filename

    def StoreFile(self, upload: UploadedPdf, title: str) -> str:
        """
        Write an uploaded PDF under a name derived from the paper title

        Args:
            upload: Uploaded file
            title: Paper title used to name the file

        Returns:
            str: Stored file name

        Raises:
            ValidationError: If the upload is not an acceptable PDF
            StorageError: If the file cannot be written
        """
        ValidatePdf(upload)
        self.storage_root.mkdir(parents=True, exist_ok=True)

        filename = self._FreeFilename(title)
        file_path = self.GetFilePath(filename)

        try:
            file_path.write_bytes(upload.content)
        except OSError as e:
            logger.error(f"Failed to store file {filename}: {str(e)}")
            raise StorageError("Failed to store uploaded file")

        logger.info(f"Stored paper file {filename} ({upload.size} bytes)")
        return filename

    def DeleteFile(self, filename: Optional[str]) -> bool:
        """
        Delete a stored file, tolerating a missing one

        Returns:
            bool: True if a file was removed
        """
        if not filename:
            return False

        try:
            file_path = self.GetFilePath(filename)
        except ValidationError:
            logger.warning(f"Refusing to delete invalid file name: {filename}")
            return False

        try:
            file_path.unlink()
            logger.info(f"Deleted paper file {filename}")
            return True
        except FileNotFoundError:
            logger.warning(f"Paper file already missing: {filename}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete paper file {filename}: {str(e)}")
            return False

    def RenameFile(self, old_filename: str, new_filename: str) -> bool:
        """
        Rename a stored file, never overwriting an existing one

        Returns:
            bool: True if the file was renamed
        """
        if not self.Exists(old_filename) or old_filename == new_filename:
            return False

        try:
            new_path = self.GetFilePath(new_filename)
        except ValidationError:
            return False

        if new_path.exists():
            logger.info(f"Not renaming {old_filename}: {new_filename} already exists")
            return False

        try:
            self.GetFilePath(old_filename).rename(new_path)
            logger.info(f"Renamed paper file {old_filename} -> {new_filename}")
            return True
        except OSError as e:
            logger.error(f"Failed to rename {old_filename} to {new_filename}: {str(e)}")
            return False
