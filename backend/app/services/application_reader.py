"""
VoterReg Backend — Application Reader
======================================

What:  Rebuilds the flattened, submission-shaped view of one application.
How:   Loads the parent row by public id, then every one-to-one relation
       through Store.select_maybe_one (a missing relation reads as an empty
       record), and splits the combined text columns back into form fields.
Who:   GET /api/applications/{public_id}.

Lossy Splits:
    house_number_street, father_name and mother_maiden_name were stored as
    "<first part> <rest>". They are split at the first space after trimming,
    so a house number that itself contains a space comes back split
    differently than it was entered.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from app.exceptions import NotFoundError
from app.models import (
    Applicant,
    ApplicantSpecialSector,
    Application,
    ApplicationCorrection,
    ApplicationDeclaredAddress,
    ApplicationReactivation,
    ApplicationRegistration,
    ApplicationReinstatement,
    ApplicationTransfer,
)
from app.schemas.application import ApplicationView
from app.store import Store

logger = logging.getLogger(__name__)

_APPLICATION_RELATIONS = (
    ApplicationDeclaredAddress,
    ApplicationRegistration,
    ApplicationTransfer,
    ApplicationReactivation,
    ApplicationCorrection,
    ApplicationReinstatement,
)


def split_first_space(value: Optional[str]) -> Tuple[str, str]:
    """
    '12 Rizal St' → ('12', 'Rizal St'); '12' → ('12', ''); None → ('', '').
    """
    trimmed = (value or "").strip()
    head, _, tail = trimmed.partition(" ")
    return head, tail


class ApplicationReader:

    async def get_application(self, store: Store, public_id: str) -> ApplicationView:
        """
        Raises:
            NotFoundError: no application has this public id.
        """
        application = await store.select_maybe_one(
            Application, {"public_facing_id": public_id}
        )
        if application is None:
            raise NotFoundError(
                resource="application",
                resource_id=public_id,
                message="Application not found.",
            )

        applicant_key = {"applicant_id": application["applicant_id"]}
        applicant = await store.select_maybe_one(Applicant, applicant_key) or {}
        special_sector = await store.select_maybe_one(ApplicantSpecialSector, applicant_key) or {}

        application_key = {"application_number": application["application_number"]}
        related: Dict[str, Dict[str, Any]] = {}
        for model in _APPLICATION_RELATIONS:
            related[model.__tablename__] = (
                await store.select_maybe_one(model, application_key) or {}
            )

        address = related["application_declared_address"]
        house_number, street = split_first_space(address.get("house_number_street"))
        father_first, father_last = split_first_space(applicant.get("father_name"))
        mother_first, mother_last = split_first_space(applicant.get("mother_maiden_name"))

        fields: Dict[str, Any] = {}
        for name in (
            "application_registration",
            "application_transfer",
            "application_reactivation",
            "application_correction",
            "application_reinstatement",
        ):
            fields.update(related[name])
        fields.update({
            key: value
            for key, value in address.items()
            if key != "house_number_street"
        })
        fields.update(special_sector)
        fields.update({
            key: value
            for key, value in applicant.items()
            if key not in ("father_name", "mother_maiden_name", "voting_status", "auth_id")
        })
        for key in ("applicant_id", "application_number"):
            fields.pop(key, None)

        return ApplicationView(
            **fields,
            id=application["public_facing_id"],
            application_type=application["application_type"],
            status=application["status"],
            submission_date=application["application_date"],
            approval_date=application.get("processing_date"),
            remarks=application.get("remarks"),
            reason_for_disapproval=application.get("reason_for_disapproval"),
            erb_hearing_date=application.get("erb_hearing_date"),
            house_number=house_number,
            street=street,
            father_first_name=father_first,
            father_last_name=father_last,
            mother_first_name=mother_first,
            mother_maiden_last_name=mother_last,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
application_reader = ApplicationReader()
