"""
VoterReg Backend — Bucket Storage
==================================

What:  Named buckets of binary objects with put / public_url / remove / resolve.
How:   Each bucket is a directory under settings.storage_root. Objects are
       written with exclusive-create so an existing path is never overwritten.
       Public URLs point at the /files route, which serves from the same
       directories.
Who:   Used by FileService (uploads) and the files route (downloads).

Directory Structure:
    storage/
    ├── government-ids/
    │   └── public/<auth_id>-<epoch_ms>-front-<name>.jpg
    └── id-selfies/
        └── public/<auth_id>-<epoch_ms>-selfie-<name>.jpg

Buckets are created at startup (ensure_buckets); a write to a bucket that
does not exist fails with NotFoundError instead of creating it.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
from urllib.parse import quote

import aiofiles

from app.config import settings
from app.exceptions import (
    AccessDeniedError,
    DuplicateError,
    NotFoundError,
    UnknownUploadError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class BucketStorage:
    """
    Local-filesystem implementation of the object store.

    Args:
        root:            Directory holding one sub-directory per bucket.
        public_base_url: Base of public links; empty disables link generation.
    """

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root = Path(root or settings.storage_root).resolve()
        self.public_base_url = (
            settings.public_base_url if public_base_url is None else public_base_url.rstrip("/")
        )

    def ensure_buckets(self, buckets: Iterable[str]) -> None:
        """Creates the bucket directories (idempotent)."""
        for bucket in buckets:
            (self.root / bucket).mkdir(parents=True, exist_ok=True)
            logger.info("Bucket ready: %s", bucket)

    def _bucket_dir(self, bucket: str) -> Path:
        bucket_dir = self.root / bucket
        if "/" in bucket or bucket in {"", ".", ".."} or not bucket_dir.is_dir():
            raise NotFoundError(
                resource="bucket",
                resource_id=bucket,
                message=f'Storage bucket "{bucket}" not found. Please contact support.',
            )
        return bucket_dir

    def resolve(self, bucket: str, path: str) -> Path:
        """
        Maps (bucket, path) to a file inside the bucket directory.

        Raises:
            NotFoundError:   bucket does not exist
            ValidationError: path is absolute or escapes the bucket
        """
        bucket_dir = self._bucket_dir(bucket)
        key = PurePosixPath(path)
        if not path or "\\" in path or key.is_absolute() or ".." in key.parts:
            raise ValidationError(message="Invalid file path", field="path")
        resolved = (bucket_dir / key).resolve()
        if bucket_dir.resolve() not in resolved.parents:
            raise ValidationError(message="Invalid file path", field="path")
        return resolved

    async def put(self, bucket: str, path: str, content: bytes) -> str:
        """
        Stores `content` at `path` inside `bucket`; returns the stored path.

        Raises:
            NotFoundError:      bucket does not exist
            DuplicateError:     path already holds an object
            AccessDeniedError:  the process may not write there
            UnknownUploadError: any other I/O failure
        """
        target = self.resolve(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # "xb": exclusive create, fails if the object exists
            async with aiofiles.open(target, "xb") as f:
                await f.write(content)
        except FileExistsError as e:
            raise DuplicateError(bucket=bucket, context={"path": path}) from e
        except PermissionError as e:
            raise AccessDeniedError(
                message=f"You don't have permission to upload to {bucket}. Please contact support.",
                context={"bucket": bucket, "path": path},
            ) from e
        except OSError as e:
            logger.error("Failed to store object %s/%s: %s", bucket, path, str(e))
            raise UnknownUploadError(
                message=f"Failed to upload file to {bucket}: {e.strerror or 'Unknown error'}",
                bucket=bucket,
                context={"path": path, "os_error": str(e)},
            ) from e

        logger.info("Object stored: %s/%s (%d bytes)", bucket, path, len(content))
        return path

    def public_url(self, bucket: str, path: str) -> Optional[str]:
        """Returns the public link for a stored object, or None when links are disabled."""
        if not self.public_base_url:
            return None
        return f"{self.public_base_url}/files/{quote(bucket)}/{quote(path)}"

    async def remove(self, bucket: str, path: str) -> None:
        """
        Best-effort delete used to clean up after a failed submission.

        Missing objects are ignored; other failures are logged, not raised.
        """
        try:
            target = self.resolve(bucket, path)
            if target.exists():
                target.unlink()
                logger.info("Removed object: %s/%s", bucket, path)
        except (OSError, NotFoundError, ValidationError) as e:
            logger.warning("Failed to remove object %s/%s: %s", bucket, path, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
bucket_storage = BucketStorage()
