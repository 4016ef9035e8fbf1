"""
VoterReg Backend — Application Writer Unit Tests
=================================================

What:  Which rows each application type produces, the special-sector gate,
       address joining, and partial-failure reporting.
"""

import pytest

from app.exceptions import (
    AlreadyApprovedError,
    ConflictError,
    DuplicateSubmissionError,
    PersistenceError,
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
from app.services.application_writer import ApplicationWriter, join_house_number_street

DETAIL_MODELS = (
    ApplicationRegistration,
    ApplicationTransfer,
    ApplicationReactivation,
    ApplicationCorrection,
    ApplicationReinstatement,
)


def written_tables(store):
    return {
        model.__tablename__
        for model in DETAIL_MODELS + (ApplicationDeclaredAddress,)
        if store.rows(model)
    }


class TestWriterByType:

    def setup_method(self):
        self.writer = ApplicationWriter()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "application_type, expected",
        [
            ("register", {"application_registration", "application_declared_address"}),
            ("transfer", {"application_transfer", "application_declared_address"}),
            (
                "transfer_with_reactivation",
                {
                    "application_transfer",
                    "application_reactivation",
                    "application_declared_address",
                },
            ),
            ("reactivation", {"application_reactivation"}),
            ("correction_of_entry", {"application_correction"}),
            ("reinstatement", {"application_reinstatement"}),
        ],
    )
    async def test_detail_rows_per_type(self, fake_store, form_factory, application_type, expected):
        public_id = await self.writer.write(fake_store, 7, form_factory(application_type))

        application = fake_store.rows(Application)[0]
        assert application["public_facing_id"] == public_id
        assert public_id.startswith("APP-")
        assert application["status"] == "pending"
        assert application["applicant_id"] == 7
        assert application["application_date"] is not None
        assert written_tables(fake_store) == expected

    @pytest.mark.asyncio
    async def test_detail_rows_point_at_parent(self, fake_store, form_factory):
        await self.writer.write(fake_store, 7, form_factory("transfer_with_reactivation"))
        number = fake_store.rows(Application)[0]["application_number"]
        assert fake_store.rows(ApplicationTransfer)[0]["application_number"] == number
        assert fake_store.rows(ApplicationReactivation)[0]["application_number"] == number

    @pytest.mark.asyncio
    async def test_registration_carries_upload_urls(self, fake_store, form_factory):
        uploads = {
            "government_id_front_url": "http://testserver/files/government-ids/public/f.jpg",
            "id_selfie_url": "http://testserver/files/id-selfies/public/s.jpg",
        }
        await self.writer.write(fake_store, 7, form_factory(), uploads)

        registration = fake_store.rows(ApplicationRegistration)[0]
        assert registration["government_id_front_url"] == uploads["government_id_front_url"]
        assert registration["government_id_back_url"] is None
        assert registration["id_selfie_url"] == uploads["id_selfie_url"]
        assert registration["registration_type"] == "new"


class TestSpecialSector:

    def setup_method(self):
        self.writer = ApplicationWriter()

    @pytest.mark.asyncio
    async def test_written_for_register_with_any_flag(self, fake_store, form_factory):
        await self.writer.write(
            fake_store, 7, form_factory(is_pwd=True, type_of_disability="Visual")
        )
        sector = fake_store.rows(ApplicantSpecialSector)
        assert len(sector) == 1
        assert sector[0]["applicant_id"] == 7
        assert sector[0]["type_of_disability"] == "Visual"
        assert fake_store.calls[0] == ("upsert", "applicant_special_sector")

    @pytest.mark.asyncio
    async def test_skipped_without_flags(self, fake_store, form_factory):
        await self.writer.write(fake_store, 7, form_factory())
        assert fake_store.rows(ApplicantSpecialSector) == []

    @pytest.mark.asyncio
    async def test_skipped_for_other_types(self, fake_store, form_factory):
        await self.writer.write(fake_store, 7, form_factory("transfer", is_senior_citizen=True))
        assert fake_store.rows(ApplicantSpecialSector) == []

    @pytest.mark.asyncio
    async def test_failure_stops_before_application(self, fake_store, form_factory):
        fake_store.fail(ApplicantSpecialSector, "upsert")
        with pytest.raises(PersistenceError, match="special sector") as exc_info:
            await self.writer.write(fake_store, 7, form_factory(is_illiterate=True))

        assert exc_info.value.record == "special_sector"
        assert "orphaned_application" not in exc_info.value.context
        assert fake_store.rows(Application) == []


class TestAddress:

    def test_join_house_number_street(self):
        assert join_house_number_street("12", "Rizal St") == "12 Rizal St"
        assert join_house_number_street("12", "") == "12"
        assert join_house_number_street("12", None) == "12"

    @pytest.mark.asyncio
    async def test_address_row(self, fake_store, form_factory):
        await ApplicationWriter().write(fake_store, 7, form_factory())
        address = fake_store.rows(ApplicationDeclaredAddress)[0]
        assert address["house_number_street"] == "12 Rizal St"
        assert address["barangay"] == "San Isidro"
        assert address["months_of_residence_municipality"] == 2


class TestPartialFailure:

    def setup_method(self):
        self.writer = ApplicationWriter()

    @pytest.mark.asyncio
    async def test_detail_failure_leaves_orphan_and_reports_it(self, fake_store, form_factory):
        fake_store.fail(ApplicationDeclaredAddress, "insert")

        with pytest.raises(PersistenceError) as exc_info:
            await self.writer.write(fake_store, 7, form_factory("transfer"))

        application = fake_store.rows(Application)[0]
        assert exc_info.value.record == "declared_address"
        assert exc_info.value.context["orphaned_application"] == application["public_facing_id"]
        # Earlier rows are not rolled back
        assert len(fake_store.rows(ApplicationTransfer)) == 1

    @pytest.mark.asyncio
    async def test_application_insert_failure(self, fake_store, form_factory):
        fake_store.fail(Application, "insert")
        with pytest.raises(PersistenceError, match="Failed to create application") as exc_info:
            await self.writer.write(fake_store, 7, form_factory("reinstatement"))
        assert exc_info.value.record == "application"
        assert fake_store.rows(ApplicationReinstatement) == []

    @pytest.mark.asyncio
    async def test_register_conflict_is_duplicate_submission(self, fake_store, form_factory):
        fake_store.fail(Application, "insert", ConflictError())
        with pytest.raises(DuplicateSubmissionError) as exc_info:
            await self.writer.write(fake_store, 7, form_factory("register"))
        assert exc_info.value.blocking_status == "pending"

    @pytest.mark.asyncio
    async def test_register_conflict_names_verified_blocker(self, fake_store, form_factory):
        fake_store.seed(
            Application, {"applicant_id": 7, "application_type": "register", "status": "verified"}
        )
        fake_store.fail(Application, "insert", ConflictError())

        with pytest.raises(DuplicateSubmissionError) as exc_info:
            await self.writer.write(fake_store, 7, form_factory("register"))

        assert exc_info.value.blocking_status == "verified"
        assert exc_info.value.context["blocking_status"] == "verified"

    @pytest.mark.asyncio
    async def test_register_conflict_with_approved_blocker(self, fake_store, form_factory):
        fake_store.seed(
            Application, {"applicant_id": 7, "application_type": "register", "status": "approved"}
        )
        fake_store.fail(Application, "insert", ConflictError())

        with pytest.raises(AlreadyApprovedError):
            await self.writer.write(fake_store, 7, form_factory("register"))

        assert len(fake_store.rows(Application)) == 1

    @pytest.mark.asyncio
    async def test_non_register_conflict_is_persistence_error(self, fake_store, form_factory):
        fake_store.fail(Application, "insert", ConflictError())
        with pytest.raises(PersistenceError):
            await self.writer.write(fake_store, 7, form_factory("transfer"))
