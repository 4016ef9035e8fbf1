"""
VoterReg Backend — Approval Orchestrator
=========================================

What:  Approves an application and issues the applicant's voter record.
How:   A four-step Workflow over independently committed writes:

    ┌────────────┐   ┌──────────────────┐   ┌──────────────┐   ┌───────────────┐
    │ status     │──▶│ officer          │──▶│ voter_record │──▶│ voting_status │
    │ =approved  │   │ assignment       │   │ (critical)   │   │ ="Active"     │
    │ (critical) │   │ (best effort)    │   │              │   │ (best effort) │
    └────────────┘   └──────────────────┘   └──────────────┘   └───────────────┘

    voter_record fails → status goes back to "verified" with no processing
                         date; the assignment row is left as written;
                         PersistenceError(record="voter_record") is raised.
    voting_status fails → logged; the approval stands.

Who:   POST /api/applications/{public_id}/approve.
"""

import logging
from typing import Optional

from app.exceptions import AccessDeniedError, ValidationError
from app.models import Applicant, ApplicantVoterRecord, Application
from app.services.status_service import StatusService, status_service, utc_now
from app.services.workflow import Step, Workflow
from app.store import Store

logger = logging.getLogger(__name__)


class ApprovalService:
    """
    Args:
        statuses: StatusService used for officer lookup and assignments.
    """

    def __init__(self, statuses: Optional[StatusService] = None):
        self.statuses = statuses or status_service

    async def approve_application_with_voter_record(
        self,
        store: Store,
        public_id: str,
        precinct_number: str,
        voter_id: str,
        auth_id: Optional[str],
    ) -> None:
        """
        Raises:
            ValidationError:   blank precinct number or voter id.
            AccessDeniedError: caller is not an officer.
            NotFoundError:     unknown public id.
            PersistenceError:  the status or voter record could not be saved.
        """
        precinct = (precinct_number or "").strip()
        voter = (voter_id or "").strip()
        if not precinct or not voter:
            raise ValidationError(
                message="Precinct number and voter ID are required.",
                field="precinct_number" if not precinct else "voter_id",
            )

        officer_id = await self.statuses.resolve_officer_id(store, auth_id)
        if officer_id is None:
            raise AccessDeniedError(
                message="Only election officers can approve applications.",
                context={"auth_id": auth_id},
            )

        application = await self.statuses.get_application_keys(store, public_id)
        application_filter = {"public_facing_id": public_id}
        applicant_filter = {"applicant_id": application["applicant_id"]}

        async def approve():
            return await store.update(
                Application,
                {
                    "status": "approved",
                    "processing_date": utc_now(),
                    "reason_for_disapproval": None,
                },
                application_filter,
            )

        async def revert_to_verified():
            return await store.update(
                Application,
                {"status": "verified", "processing_date": None},
                application_filter,
            )

        async def assign():
            return await self.statuses.record_assignment(
                store, officer_id, application["application_number"], "approve"
            )

        async def save_voter_record():
            return await store.upsert(
                ApplicantVoterRecord,
                {**applicant_filter, "precinct_number": precinct, "voter_id": voter},
                conflict=["applicant_id"],
            )

        async def activate():
            return await store.update(Applicant, {"voting_status": "Active"}, applicant_filter)

        await Workflow("approval", [
            Step(
                "status",
                approve,
                compensate=revert_to_verified,
                failure_message="Failed to update application status.",
            ),
            Step("officer_assignment", assign, best_effort=True),
            Step(
                "voter_record",
                save_voter_record,
                failure_message="Failed to create voter record. Application status has been reverted.",
            ),
            Step("voting_status", activate, best_effort=True),
        ]).run()

        logger.info(
            "Application %s approved by officer_id=%s (precinct=%s)",
            public_id,
            officer_id,
            precinct,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
approval_service = ApprovalService()
