"""
VoterReg Backend — File Upload Service
=======================================

What:  Validates ID photo attachments and stores them in a bucket, returning
       a public URL for the registration record.
How:   Checks size, declared MIME type, extension and sniffed content (in that
       order, cheapest first) before any storage I/O, then writes through
       BucketStorage without overwriting.
Who:   Called by the submission service for register applications.
When:  Before the applicant record or any application row is written.

Validation Layers:
    1. Size:          empty files and files over settings.max_file_size (5MB)
    2. Declared type: the multipart Content-Type must be JPEG, PNG or WebP
    3. Extension:     .jpg / .jpeg / .png / .webp
    4. Content sniff: python-magic reads the header bytes; a renamed GIF or
                      PDF is rejected even with a valid name and Content-Type

Errors:
    ValidationError     wrong size / type / name (nothing stored)
    NotFoundError       bucket missing
    DuplicateError      path already used
    AccessDeniedError   storage refused the write
    UnknownUploadError  anything else while storing
    UrlResolutionError  stored, but no public URL could be produced
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.config import settings
from app.exceptions import (
    UnknownUploadError,
    UrlResolutionError,
    ValidationError,
    VoterRegError,
)
from app.services.bucket_storage import BucketStorage, bucket_storage

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


@dataclass
class Attachment:
    """An uploaded file as received from the client."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class FileService:
    """
    Validates attachments and stores them in buckets.

    Args:
        storage: BucketStorage to write to (tests pass one rooted in tmp_path).
    """

    def __init__(self, storage: Optional[BucketStorage] = None):
        self.storage = storage or bucket_storage

    def _validate_size(self, attachment: Attachment, bucket: str) -> None:
        """
        Raises:
            ValidationError for empty files and files above the limit.
        """
        if attachment.size == 0:
            raise ValidationError(
                message=f"The file for {bucket} is empty. Please choose a photo.",
                field="file",
            )
        if attachment.size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"File size ({attachment.size / 1024 / 1024:.2f}MB) exceeds the "
                    f"{max_mb:.0f}MB limit for {bucket}"
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": attachment.size},
            )

    def _validate_declared_type(self, attachment: Attachment) -> None:
        declared = (attachment.content_type or "").lower()
        if declared not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f'Invalid file type "{attachment.content_type}". '
                    f"Only JPEG, JPG, PNG, and WebP files are allowed."
                ),
                field="file",
                context={"declared_mime": attachment.content_type},
            )

    def _validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase with dot)."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def _validate_content(self, attachment: Attachment) -> str:
        """
        Sniffs the real MIME type from the file's magic bytes.

        Returns:
            Detected MIME type (e.g. "image/jpeg").
        """
        try:
            import magic
            mime_type = magic.from_buffer(attachment.content[:2048], mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise UnknownUploadError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid JPEG, PNG, or WebP image."
                ),
                field="file",
                context={"detected_mime": mime_type},
            )
        return mime_type

    def validate(self, attachment: Attachment, bucket: str) -> None:
        """
        Runs every check without touching storage.

        Raises:
            ValidationError: the attachment cannot be accepted.
        """
        self._validate_size(attachment, bucket)
        self._validate_declared_type(attachment)
        self._validate_extension(attachment.filename)
        self._validate_content(attachment)

    async def upload(self, attachment: Attachment, bucket: str, path: str) -> str:
        """
        Validates, stores and links one attachment.

        Returns:
            Public URL of the stored object.
        """
        self.validate(attachment, bucket)

        try:
            stored_path = await self.storage.put(bucket, path, attachment.content)
        except VoterRegError as e:
            logger.error(
                "Upload to %s failed: %s | path=%s size=%d type=%s",
                bucket,
                e.message,
                path,
                attachment.size,
                attachment.content_type,
            )
            raise

        url = self.storage.public_url(bucket, stored_path)
        if not url:
            await self.storage.remove(bucket, stored_path)
            raise UrlResolutionError(bucket=bucket, context={"path": stored_path})
        return url


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
