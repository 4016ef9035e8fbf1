"""
VoterReg Backend — Submission Service (Intake Orchestrator)
============================================================

What:  End-to-end intake of one application: photos, applicant, application.
How:   Composes FileService, ApplicantService and ApplicationWriter.
Who:   Called by POST /api/applications.
When:  Once per submitted form.

Orchestration Flow:
    ┌────────────┐    ┌────────────┐    ┌──────────────┐    ┌─────────────┐
    │  Validate  │───▶│  Upload    │───▶│  Resolve     │───▶│  Write      │
    │  all files │    │  to buckets│    │  applicant   │    │  application│
    └────────────┘    └────────────┘    └──────────────┘    └─────────────┘

    Files are only taken for register applications. Every file is validated
    before the first one is stored, so a bad selfie never leaves an orphaned
    ID photo behind. If resolving or writing fails afterwards, the stored
    files are removed (best effort) and the error propagates unchanged,
    unless the application row was already committed: an orphaned
    application keeps the files its detail rows point at.
"""

import logging
import re
import time
from typing import Dict, List, Mapping, Optional, Tuple

from app.config import settings
from app.exceptions import PersistenceError, VoterRegError
from app.schemas.application import ApplicationForm
from app.services.applicant_service import ApplicantService, applicant_service
from app.services.application_writer import ApplicationWriter, application_writer
from app.services.file_service import Attachment, FileService, file_service
from app.store import Store

logger = logging.getLogger(__name__)

# Upload field → (bucket setting, path label)
UPLOAD_SLOTS: Dict[str, Tuple[str, str]] = {
    "government_id_front": ("government_id_bucket", "front"),
    "government_id_back": ("government_id_bucket", "back"),
    "id_selfie": ("selfie_bucket", "selfie"),
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """'my id (1).jpg' → 'my_id__1_.jpg'"""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def upload_path(auth_id: str, label: str, filename: str, epoch_ms: Optional[int] = None) -> str:
    """public/<auth_id>-<epoch_ms>-<label>-<sanitized filename>"""
    if epoch_ms is None:
        epoch_ms = int(time.time() * 1000)
    return f"public/{auth_id}-{epoch_ms}-{label}-{sanitize_filename(filename)}"


class SubmissionService:
    """
    Args:
        files:      FileService for validation and storage.
        applicants: ApplicantService for the eligibility policy.
        writer:     ApplicationWriter for the row set.
    """

    def __init__(
        self,
        files: Optional[FileService] = None,
        applicants: Optional[ApplicantService] = None,
        writer: Optional[ApplicationWriter] = None,
    ):
        self.files = files or file_service
        self.applicants = applicants or applicant_service
        self.writer = writer or application_writer

    async def submit(
        self,
        store: Store,
        form: ApplicationForm,
        auth_id: str,
        attachments: Optional[Mapping[str, Optional[Attachment]]] = None,
    ) -> str:
        """
        Returns:
            public_facing_id of the new application.

        Raises:
            ValidationError:          a file was rejected (nothing stored).
            StorageWriteError:        a file could not be stored.
            DuplicateSubmissionError,
            AlreadyApprovedError,
            NotFoundError:            applicant policy (see ApplicantService).
            PersistenceError:         a row could not be written.
        """
        pending: List[Tuple[str, str, str, Attachment]] = []
        if form.application_type == "register":
            for slot, attachment in (attachments or {}).items():
                if attachment is None:
                    continue
                bucket_setting, label = UPLOAD_SLOTS[slot]
                bucket = getattr(settings, bucket_setting)
                self.files.validate(attachment, bucket)
                pending.append((slot, bucket, label, attachment))
        elif attachments and any(attachments.values()):
            logger.info(
                "Ignoring uploaded files on a %s application (auth_id=%s)",
                form.application_type,
                auth_id,
            )

        stored: List[Tuple[str, str]] = []
        uploads: Dict[str, str] = {}
        try:
            for slot, bucket, label, attachment in pending:
                path = upload_path(auth_id, label, attachment.filename)
                uploads[f"{slot}_url"] = await self.files.upload(attachment, bucket, path)
                stored.append((bucket, path))

            applicant_id = await self.applicants.resolve(store, form, auth_id)
            public_id = await self.writer.write(store, applicant_id, form, uploads)
        except VoterRegError as e:
            if (
                isinstance(e, PersistenceError)
                and "orphaned_application" in e.context
                and e.record != "registration"
            ):
                # The committed registration row references these objects
                logger.warning(
                    "Keeping %d uploaded file(s) of orphaned application %s: %s",
                    len(stored),
                    e.context["orphaned_application"],
                    ", ".join(f"{bucket}/{path}" for bucket, path in stored),
                )
                raise
            for bucket, path in stored:
                await self.files.storage.remove(bucket, path)
            raise

        logger.info(
            "Submission accepted: %s type=%s files=%d auth_id=%s",
            public_id,
            form.application_type,
            len(stored),
            auth_id,
        )
        return public_id


# ── Singleton Instance ────────────────────────────────────────────────────
submission_service = SubmissionService()
