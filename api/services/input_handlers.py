"""
Input handler for uploaded survey workbooks

Uploads are validated and kept in memory; nothing is written to disk.
"""
from pathlib import Path
from typing import BinaryIO
import logging

from survey_insights.stage1_ingest.config import ALLOWED_EXTENSIONS
from survey_insights.stage1_ingest.exceptions import InvalidFileFormatError

logger = logging.getLogger(__name__)


class UploadRejectedError(ValueError):
    """Raised when an upload is empty or exceeds the size limit"""
    pass


class FileUploadHandler:
    """Handle direct file uploads"""

    def __init__(self, file: BinaryIO, filename: str, max_size_mb: int = 50):
        self.file = file
        self.filename = Path(filename or "").name
        self.max_size = max_size_mb * 1024 * 1024
        self.validate_extension(self.filename)

    def validate_extension(self, filename: str) -> None:
        """Validate file extension"""
        suffix = Path(filename).suffix.lower()
        if suffix not in ALLOWED_EXTENSIONS:
            raise InvalidFileFormatError(
                f"Unsupported file type: {suffix or '<none>'}. "
                f"Allowed: {', '.join(ALLOWED_EXTENSIONS)}"
            )

    def read(self) -> bytes:
        """Read the upload into memory, enforcing the size limit"""
        content = self.file.read(self.max_size + 1)

        if not content:
            raise UploadRejectedError(f"Uploaded file is empty: {self.filename}")

        if len(content) > self.max_size:
            raise UploadRejectedError(
                f"File too large (max: {self.max_size / 1024 / 1024:.0f}MB): {self.filename}"
            )

        logger.info(f"Received upload: {self.filename} ({len(content) / 1024:.1f}KB)")
        return content
