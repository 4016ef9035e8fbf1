"""
VoterReg Backend — Application Writer
======================================

What:  Persists one submitted application: the parent `application` row plus
       the detail rows its type needs.
How:   Builds a Workflow of store writes. Each write commits on its own; a
       failure stops the remaining writes and reports which sub-record failed.
Who:   Called by the submission service after the applicant is resolved.

Write Order:
    1. special_sector    register only, when any sector field is filled in
    2. application       parent row, status "pending"
    3. details           per type (see DETAIL_RECORDS)
    4. declared_address  register / transfer / transfer_with_reactivation

Partial Writes:
    Nothing is undone on failure. If the parent row was already committed it
    stays behind as an orphan: the failure is logged at ERROR and the raised
    PersistenceError carries `orphaned_application` (its public id).
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from app.database import Base
from app.exceptions import (
    AlreadyApprovedError,
    ConflictError,
    DatabaseError,
    DuplicateSubmissionError,
    PersistenceError,
    VoterRegError,
)
from app.models import (
    ApplicantSpecialSector,
    Application,
    ApplicationCorrection,
    ApplicationDeclaredAddress,
    ApplicationReactivation,
    ApplicationRegistration,
    ApplicationReinstatement,
    ApplicationTransfer,
)
from app.schemas.application import ApplicationForm
from app.services.workflow import Step, Workflow
from app.store import Store

logger = logging.getLogger(__name__)

# Application types → (record name, model) written as details, in order
DETAIL_RECORDS: Dict[str, Tuple[Tuple[str, Type[Base]], ...]] = {
    "register": (("registration", ApplicationRegistration),),
    "transfer": (("transfer", ApplicationTransfer),),
    "transfer_with_reactivation": (
        ("transfer", ApplicationTransfer),
        ("reactivation", ApplicationReactivation),
    ),
    "reactivation": (("reactivation", ApplicationReactivation),),
    "correction_of_entry": (("correction", ApplicationCorrection),),
    "reinstatement": (("reinstatement", ApplicationReinstatement),),
}

ADDRESS_TYPES = ("register", "transfer", "transfer_with_reactivation")

SPECIAL_SECTOR_TRIGGERS = (
    "is_illiterate",
    "is_senior_citizen",
    "is_indigenous_person",
    "is_pwd",
    "vote_on_ground_floor",
    "assistance_needed",
    "assistor_name",
)

UPLOAD_FIELDS = ("government_id_front_url", "government_id_back_url", "id_selfie_url")


def join_house_number_street(house_number: Optional[str], street: Optional[str]) -> str:
    """'12' + 'Rizal St' → '12 Rizal St'; an empty street leaves the house number alone."""
    parts = [part for part in (house_number or "", street or "") if part]
    return " ".join(parts)


def has_special_sector(form: ApplicationForm) -> bool:
    return any(getattr(form, name) for name in SPECIAL_SECTOR_TRIGGERS)


def _detail_record(
    name: str, form: ApplicationForm, uploads: Mapping[str, Optional[str]]
) -> Dict[str, Any]:
    if name == "registration":
        record = {
            "registration_type": form.registration_type,
            "adult_registration_consent": form.adult_registration_consent,
        }
        record.update({field: uploads.get(field) for field in UPLOAD_FIELDS})
        return record
    if name == "transfer":
        return {
            "previous_precinct_number": form.previous_precinct_number,
            "previous_barangay": form.previous_barangay,
            "previous_city_municipality": form.previous_city_municipality,
            "previous_province": form.previous_province,
            "previous_foreign_post": form.previous_foreign_post,
            "previous_country": form.previous_country,
            "transfer_type": form.transfer_type,
        }
    if name == "reactivation":
        return {"reason_for_deactivation": form.reason_for_deactivation}
    if name == "correction":
        return {
            "target_field": form.target_field,
            "current_value": form.current_value,
            "requested_value": form.requested_value,
        }
    return {"reinstatement_type": form.reinstatement_type}


class ApplicationWriter:
    """Writes the application row set for one submission."""

    async def _registration_conflict(
        self, store: Store, applicant_id: int, cause: ConflictError
    ) -> VoterRegError:
        """Names the active registration the unique index matched."""
        context = {"applicant_id": applicant_id, **cause.context}
        try:
            rows = await store.select(
                Application,
                {"applicant_id": applicant_id, "application_type": "register"},
                columns=["status"],
            )
        except DatabaseError as e:
            logger.warning(
                "Could not read the blocking registration of applicant_id=%s: %s",
                applicant_id,
                e.message,
            )
            rows = []

        statuses = {row["status"] for row in rows}
        if "approved" in statuses:
            return AlreadyApprovedError(context=context)
        blocking_status = "verified" if "verified" in statuses else "pending"
        return DuplicateSubmissionError(blocking_status=blocking_status, context=context)

    async def write(
        self,
        store: Store,
        applicant_id: int,
        form: ApplicationForm,
        uploads: Optional[Mapping[str, Optional[str]]] = None,
    ) -> str:
        """
        Returns:
            The new application's public_facing_id.

        Raises:
            DuplicateSubmissionError: the active-registration index rejected
                                      the parent row (concurrent submission);
                                      names the blocking row's status.
            AlreadyApprovedError:     the blocking registration is approved.
            PersistenceError:         a sub-record failed; `.record` names it.
        """
        uploads = uploads or {}
        application_type = form.application_type
        created: Dict[str, Any] = {}

        async def write_special_sector():
            return await store.upsert(
                ApplicantSpecialSector,
                {
                    "applicant_id": applicant_id,
                    "is_illiterate": form.is_illiterate,
                    "is_senior_citizen": form.is_senior_citizen,
                    "tribe": form.tribe,
                    "type_of_disability": form.type_of_disability,
                    "assistance_needed": form.assistance_needed,
                    "assistor_name": form.assistor_name,
                    "vote_on_ground_floor": form.vote_on_ground_floor,
                },
                conflict=["applicant_id"],
            )

        async def write_application():
            try:
                row = await store.insert(
                    Application,
                    {
                        "applicant_id": applicant_id,
                        "application_type": application_type,
                        "status": "pending",
                    },
                )
            except ConflictError as e:
                if application_type == "register":
                    raise await self._registration_conflict(store, applicant_id, e) from e
                raise
            created.update(row)
            return row

        def write_detail(name: str, model: Type[Base]):
            async def action():
                return await store.insert(
                    model,
                    {
                        "application_number": created["application_number"],
                        **_detail_record(name, form, uploads),
                    },
                )
            return action

        async def write_address():
            return await store.insert(
                ApplicationDeclaredAddress,
                {
                    "application_number": created["application_number"],
                    "house_number_street": join_house_number_street(
                        form.house_number, form.street
                    ),
                    "barangay": form.barangay,
                    "city_municipality": form.city_municipality,
                    "province": form.province,
                    "years_in_country": form.years_in_country,
                    "years_of_residence_municipality": form.years_of_residence_municipality,
                    "months_of_residence_municipality": form.months_of_residence_municipality,
                    "years_of_residence_address": form.years_of_residence_address,
                    "months_of_residence_address": form.months_of_residence_address,
                },
            )

        steps: List[Step] = []
        if application_type == "register" and has_special_sector(form):
            steps.append(Step(
                "special_sector",
                write_special_sector,
                failure_message="Failed to save special sector information.",
            ))
        steps.append(Step(
            "application",
            write_application,
            failure_message="Failed to create application. Please try again.",
        ))
        for name, model in DETAIL_RECORDS.get(application_type, ()):
            steps.append(Step(name, write_detail(name, model)))
        if application_type in ADDRESS_TYPES:
            steps.append(Step("declared_address", write_address))

        try:
            await Workflow("submission", steps).run()
        except PersistenceError as e:
            if created:
                e.context["orphaned_application"] = created["public_facing_id"]
                logger.error(
                    "Application %s left without its %s record (applicant_id=%s type=%s)",
                    created["public_facing_id"],
                    e.record,
                    applicant_id,
                    application_type,
                )
            raise

        logger.info(
            "Application written: %s type=%s applicant_id=%s",
            created["public_facing_id"],
            application_type,
            applicant_id,
        )
        return created["public_facing_id"]


# ── Singleton Instance ────────────────────────────────────────────────────
application_writer = ApplicationWriter()
