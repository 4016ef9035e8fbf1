"""
VoterReg Backend — Status & Assignment Manager
===============================================

What:  Officer-side review operations: status transitions, remarks, ERB
       hearing date, and the officer-assignment log.
How:   Each operation is a conditional update of the `application` row keyed
       by public id. A status change also records which officer made it in
       `officer_assignment` (one row per officer per application).
Who:   PATCH /api/applications/{public_id}/... routes and the Approval
       Orchestrator.

Status Rules:
    status must be pending | verified | approved | disapproved
    disapproved  → reason required (non-empty after trim)
    other        → reason cleared
    pending      → processing_date cleared; anything else stamps it
    non-pending  → caller must be an officer

The assignment write happens after the status is committed; if it fails the
status change stands and the failure is only logged.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from app.exceptions import AccessDeniedError, NotFoundError, ValidationError, VoterRegError
from app.models import APPLICATION_STATUSES, Application, Officer, OfficerAssignment
from app.schemas.application import OfficerAssignmentItem
from app.store import Store

logger = logging.getLogger(__name__)

STATUS_ACTIONS = {
    "pending": "set_pending",
    "verified": "verify",
    "approved": "approve",
    "disapproved": "disapprove",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StatusService:
    """Review-side writes on existing applications."""

    async def resolve_officer_id(self, store: Store, auth_id: Optional[str]) -> Optional[int]:
        """Returns the officer id behind `auth_id`, or None for non-officers."""
        if not auth_id:
            return None
        officer = await store.select_maybe_one(
            Officer, {"auth_id": auth_id}, columns=["officer_id"]
        )
        return officer["officer_id"] if officer else None

    async def get_application_keys(self, store: Store, public_id: str) -> Dict[str, Any]:
        """
        Returns application_number and applicant_id for a public id.

        Raises:
            NotFoundError: unknown public id.
        """
        application = await store.select_maybe_one(
            Application,
            {"public_facing_id": public_id},
            columns=["application_number", "applicant_id"],
        )
        if application is None:
            raise NotFoundError(
                resource="application",
                resource_id=public_id,
                message="Application not found.",
            )
        return application

    async def record_assignment(
        self, store: Store, officer_id: int, application_number: int, action: str
    ) -> Dict[str, Any]:
        """Upserts the (officer, application) assignment with `action`."""
        return await store.upsert(
            OfficerAssignment,
            {
                "officer_id": officer_id,
                "application_number": application_number,
                "action": action,
            },
            conflict=["officer_id", "application_number"],
        )

    async def _update_application(
        self, store: Store, public_id: str, patch: Dict[str, Any]
    ) -> None:
        updated = await store.update(Application, patch, {"public_facing_id": public_id})
        if not updated:
            raise NotFoundError(
                resource="application",
                resource_id=public_id,
                message="Application not found.",
            )

    async def update_application_status(
        self,
        store: Store,
        public_id: str,
        status: str,
        reason: Optional[str] = None,
        auth_id: Optional[str] = None,
    ) -> None:
        """
        Moves an application to `status`.

        Raises:
            ValidationError:   unknown status, or disapproval without a reason.
            AccessDeniedError: a non-officer tried to leave pending.
            NotFoundError:     unknown public id.
        """
        if status not in APPLICATION_STATUSES:
            raise ValidationError(
                message=f"Invalid status '{status}'.",
                field="status",
                context={"allowed": list(APPLICATION_STATUSES)},
            )

        reason_text = (reason or "").strip()
        if status == "disapproved" and not reason_text:
            raise ValidationError(
                message="Reason for disapproval is required.",
                field="reason_for_disapproval",
            )

        officer_id = await self.resolve_officer_id(store, auth_id)
        if officer_id is None and status != "pending":
            raise AccessDeniedError(
                message="Only election officers can review applications.",
                context={"auth_id": auth_id, "status": status},
            )

        application = await self.get_application_keys(store, public_id)
        await self._update_application(
            store,
            public_id,
            {
                "status": status,
                "processing_date": None if status == "pending" else utc_now(),
                "reason_for_disapproval": reason_text if status == "disapproved" else None,
            },
        )
        logger.info(
            "Application %s → %s (officer_id=%s)", public_id, status, officer_id
        )

        if officer_id is None:
            return
        try:
            await self.record_assignment(
                store, officer_id, application["application_number"], STATUS_ACTIONS[status]
            )
        except VoterRegError as e:
            logger.error(
                "Failed to record %s assignment for %s (officer_id=%s): %s",
                STATUS_ACTIONS[status],
                public_id,
                officer_id,
                e.message,
            )

    async def update_application_remarks(
        self, store: Store, public_id: str, remarks: Optional[str]
    ) -> None:
        """Sets officer remarks; blank text clears them."""
        text = (remarks or "").strip()
        await self._update_application(store, public_id, {"remarks": text or None})

    async def update_erb_hearing_date(
        self, store: Store, public_id: str, hearing_date: Optional[date]
    ) -> None:
        await self._update_application(store, public_id, {"erb_hearing_date": hearing_date})

    async def list_officer_assignments(
        self, store: Store, public_id: str
    ) -> List[OfficerAssignmentItem]:
        """Returns each assignment on the application with the officer's name and position."""
        application = await self.get_application_keys(store, public_id)
        assignments = await store.select(
            OfficerAssignment,
            {"application_number": application["application_number"]},
            columns=["officer_id", "action"],
        )

        items: List[OfficerAssignmentItem] = []
        for assignment in assignments:
            officer = await store.select_maybe_one(
                Officer,
                {"officer_id": assignment["officer_id"]},
                columns=["first_name", "last_name", "position"],
            ) or {}
            items.append(OfficerAssignmentItem(
                action=assignment["action"],
                officer_first_name=officer.get("first_name"),
                officer_last_name=officer.get("last_name"),
                officer_position=officer.get("position"),
            ))
        return items


# ── Singleton Instance ────────────────────────────────────────────────────
status_service = StatusService()
