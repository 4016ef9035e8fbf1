"""
VoterReg Backend — Applicant Resolver
======================================

What:  Finds or creates the applicant record behind a caller identity and
       enforces the one-active-registration rule.
How:   Reads the applicant by `auth_id`, then the statuses of that applicant's
       register applications, and picks one of five outcomes (below).
Who:   Called by the submission service before the Application Writer.

Register Outcomes:
    no applicant                          → insert, return new id
    a pending / verified register exists  → DuplicateSubmissionError
    every register is disapproved         → upsert on auth_id, same id
    an approved register exists           → AlreadyApprovedError
    applicant without register apps       → reuse as-is

Other application types need an existing applicant (NotFoundError otherwise).

The pre-check is read-then-write; two simultaneous first submissions can both
pass it. The partial unique index on `application` rejects the second one.
"""

import logging
from typing import Any, Dict, List

from app.exceptions import (
    AlreadyApprovedError,
    DatabaseError,
    DuplicateSubmissionError,
    NotFoundError,
    PersistenceError,
)
from app.models import Applicant, Application
from app.schemas.application import ApplicationForm
from app.store import Store

logger = logging.getLogger(__name__)

BLOCKING_STATUSES = ("pending", "verified")


def join_name(first: Any, last: Any) -> str:
    """'Juan' + 'Dela Cruz' → 'Juan Dela Cruz'; missing parts are dropped."""
    return f"{first or ''} {last or ''}".strip()


def build_applicant_record(form: ApplicationForm, auth_id: str) -> Dict[str, Any]:
    """Maps the personal section of a form onto `applicant` columns."""
    married = form.civil_status == "Married"
    return {
        "auth_id": auth_id,
        "first_name": form.first_name,
        "last_name": form.last_name,
        "middle_name": form.middle_name,
        "suffix": form.suffix,
        "citizenship_type": form.citizenship_type,
        "date_of_naturalization": form.date_of_naturalization,
        "certificate_number": form.certificate_number,
        "profession_occupation": form.profession_occupation,
        "contact_number": form.contact_number,
        "email_address": form.email_address,
        "civil_status": form.civil_status,
        "spouse_name": (form.spouse_name or "") if married else None,
        "sex": form.sex,
        "date_of_birth": form.date_of_birth,
        "place_of_birth_municipality": form.place_of_birth_municipality,
        "place_of_birth_province": form.place_of_birth_province,
        "father_name": join_name(form.father_first_name, form.father_last_name),
        "mother_maiden_name": join_name(form.mother_first_name, form.mother_maiden_last_name),
    }


class ApplicantService:
    """Applicant lookup and registration-eligibility policy."""

    async def require_existing(self, store: Store, auth_id: str) -> int:
        """
        Returns the applicant id for `auth_id`.

        Raises:
            NotFoundError: the caller has never registered.
        """
        applicant = await store.select_maybe_one(
            Applicant, {"auth_id": auth_id}, columns=["applicant_id"]
        )
        if applicant is None:
            raise NotFoundError(
                resource="applicant",
                message="No applicant record found for this user. Please register first.",
                context={"auth_id": auth_id},
            )
        return applicant["applicant_id"]

    async def resolve_for_registration(
        self, store: Store, form: ApplicationForm, auth_id: str
    ) -> int:
        """
        Returns the applicant id a new register application should use.

        Raises:
            DuplicateSubmissionError: a pending or verified registration exists.
            AlreadyApprovedError:     an approved registration exists.
            PersistenceError:         the applicant row could not be written.
        """
        existing = await store.select_maybe_one(
            Applicant, {"auth_id": auth_id}, columns=["applicant_id"]
        )
        record = build_applicant_record(form, auth_id)

        if existing is None:
            created = await self._write(store.insert(Applicant, record))
            logger.info(
                "Applicant created: applicant_id=%s auth_id=%s", created["applicant_id"], auth_id
            )
            return created["applicant_id"]

        applicant_id = existing["applicant_id"]
        registrations: List[Dict[str, Any]] = await store.select(
            Application,
            {"applicant_id": applicant_id, "application_type": "register"},
            columns=["status"],
        )
        statuses = [row["status"] for row in registrations]

        for status in statuses:
            if status in BLOCKING_STATUSES:
                logger.info(
                    "Registration blocked: applicant_id=%s has a %s application",
                    applicant_id,
                    status,
                )
                raise DuplicateSubmissionError(
                    blocking_status=status, context={"applicant_id": applicant_id}
                )

        if statuses and all(status == "disapproved" for status in statuses):
            await self._write(store.upsert(Applicant, record, conflict=["auth_id"]))
            logger.info(
                "Applicant updated for re-registration: applicant_id=%s", applicant_id
            )
            return applicant_id

        if "approved" in statuses:
            raise AlreadyApprovedError(context={"applicant_id": applicant_id})

        return applicant_id

    async def resolve(self, store: Store, form: ApplicationForm, auth_id: str) -> int:
        """Register forms go through the eligibility policy; others need an applicant."""
        if form.application_type == "register":
            return await self.resolve_for_registration(store, form, auth_id)
        return await self.require_existing(store, auth_id)

    @staticmethod
    async def _write(pending) -> Dict[str, Any]:
        try:
            return await pending
        except DatabaseError as e:
            raise PersistenceError(
                record="applicant",
                message="Failed to save applicant information.",
                context=e.context,
            ) from e


# ── Singleton Instance ────────────────────────────────────────────────────
applicant_service = ApplicantService()
