"""
VoterReg Backend — Status & Assignment Manager Unit Tests
==========================================================

What:  Status transitions, disapproval-reason validation, officer checks,
       assignment bookkeeping, remarks and hearing date.
"""

from datetime import date

import pytest

from app.exceptions import AccessDeniedError, NotFoundError, ValidationError
from app.models import Applicant, Application, Officer, OfficerAssignment
from app.services.status_service import StatusService


@pytest.fixture
def seeded(fake_store):
    """One applicant, one pending register application, one officer."""
    applicant = fake_store.seed(Applicant, {"auth_id": "user-1"})
    application = fake_store.seed(
        Application,
        {"applicant_id": applicant["applicant_id"], "application_type": "register"},
    )
    officer = fake_store.seed(
        Officer,
        {"auth_id": "officer-1", "first_name": "Rosa", "last_name": "Lim", "position": "Clerk"},
    )
    return {"application": application, "officer": officer}


def current(store):
    return store.rows(Application)[0]


class TestUpdateStatus:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_verify_stamps_processing_date_and_assigns(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_application_status(
            fake_store, public_id, "verified", auth_id="officer-1"
        )

        row = current(fake_store)
        assert row["status"] == "verified"
        assert row["processing_date"] is not None
        assert row["reason_for_disapproval"] is None

        assignments = fake_store.rows(OfficerAssignment)
        assert len(assignments) == 1
        assert assignments[0]["action"] == "verify"
        assert assignments[0]["officer_id"] == seeded["officer"]["officer_id"]

    @pytest.mark.asyncio
    async def test_disapprove_stores_trimmed_reason(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_application_status(
            fake_store, public_id, "disapproved", reason="  Blurry ID photo  ", auth_id="officer-1"
        )

        row = current(fake_store)
        assert row["status"] == "disapproved"
        assert row["reason_for_disapproval"] == "Blurry ID photo"
        assert fake_store.rows(OfficerAssignment)[0]["action"] == "disapprove"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", [None, "", "   \t "])
    async def test_disapprove_without_reason_rejected(self, fake_store, seeded, reason):
        public_id = seeded["application"]["public_facing_id"]
        with pytest.raises(ValidationError, match="Reason for disapproval is required"):
            await self.service.update_application_status(
                fake_store, public_id, "disapproved", reason=reason, auth_id="officer-1"
            )

        assert current(fake_store)["status"] == "pending"
        assert "update" not in fake_store.operations(Application)

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, fake_store, seeded):
        with pytest.raises(ValidationError, match="Invalid status"):
            await self.service.update_application_status(
                fake_store, seeded["application"]["public_facing_id"], "archived",
                auth_id="officer-1",
            )

    @pytest.mark.asyncio
    async def test_non_officer_cannot_verify(self, fake_store, seeded):
        with pytest.raises(AccessDeniedError):
            await self.service.update_application_status(
                fake_store, seeded["application"]["public_facing_id"], "verified",
                auth_id="user-1",
            )
        assert current(fake_store)["status"] == "pending"

    @pytest.mark.asyncio
    async def test_reset_to_pending_without_officer(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_application_status(
            fake_store, public_id, "verified", auth_id="officer-1"
        )
        await self.service.update_application_status(fake_store, public_id, "pending")

        row = current(fake_store)
        assert row["status"] == "pending"
        assert row["processing_date"] is None
        # No officer on the reset, so the earlier assignment is untouched
        assert fake_store.rows(OfficerAssignment)[0]["action"] == "verify"

    @pytest.mark.asyncio
    async def test_repeat_action_overwrites_assignment(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_application_status(
            fake_store, public_id, "verified", auth_id="officer-1"
        )
        await self.service.update_application_status(
            fake_store, public_id, "pending", auth_id="officer-1"
        )

        assignments = fake_store.rows(OfficerAssignment)
        assert len(assignments) == 1
        assert assignments[0]["action"] == "set_pending"

    @pytest.mark.asyncio
    async def test_assignment_failure_keeps_status(self, fake_store, seeded):
        fake_store.fail(OfficerAssignment, "upsert")
        await self.service.update_application_status(
            fake_store, seeded["application"]["public_facing_id"], "verified",
            auth_id="officer-1",
        )
        assert current(fake_store)["status"] == "verified"
        assert fake_store.rows(OfficerAssignment) == []

    @pytest.mark.asyncio
    async def test_unknown_application(self, fake_store, seeded):
        with pytest.raises(NotFoundError):
            await self.service.update_application_status(
                fake_store, "APP-MISSING000", "verified", auth_id="officer-1"
            )


class TestRemarksAndHearingDate:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_remarks_trimmed(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_application_remarks(fake_store, public_id, "  Call applicant ")
        assert current(fake_store)["remarks"] == "Call applicant"

    @pytest.mark.asyncio
    async def test_blank_remarks_cleared(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_application_remarks(fake_store, public_id, "note")
        await self.service.update_application_remarks(fake_store, public_id, "   ")
        assert current(fake_store)["remarks"] is None

    @pytest.mark.asyncio
    async def test_hearing_date_set_and_cleared(self, fake_store, seeded):
        public_id = seeded["application"]["public_facing_id"]
        await self.service.update_erb_hearing_date(fake_store, public_id, date(2026, 11, 3))
        assert current(fake_store)["erb_hearing_date"] == date(2026, 11, 3)

        await self.service.update_erb_hearing_date(fake_store, public_id, None)
        assert current(fake_store)["erb_hearing_date"] is None

    @pytest.mark.asyncio
    async def test_remarks_on_unknown_application(self, fake_store, seeded):
        with pytest.raises(NotFoundError):
            await self.service.update_application_remarks(fake_store, "APP-MISSING000", "x")


class TestListAssignments:

    @pytest.mark.asyncio
    async def test_lists_officer_details(self, fake_store, seeded):
        service = StatusService()
        public_id = seeded["application"]["public_facing_id"]
        await service.update_application_status(
            fake_store, public_id, "verified", auth_id="officer-1"
        )

        items = await service.list_officer_assignments(fake_store, public_id)

        assert len(items) == 1
        assert items[0].action == "verify"
        assert items[0].officer_first_name == "Rosa"
        assert items[0].officer_position == "Clerk"
