"""
VoterReg Backend — Store Integration Tests (SQLite)
====================================================

What:  The five store primitives against a real database: generated keys via
       RETURNING, ON CONFLICT upserts, error wrapping, and the partial unique
       index that guards active registrations.
How:   sqlite_store fixture (aiosqlite, tables from Base.metadata).
"""

import pytest

from app.exceptions import ConflictError, DatabaseError
from app.models import Applicant, ApplicantVoterRecord, Application, Officer, OfficerAssignment


class TestStorePrimitives:

    @pytest.mark.asyncio
    async def test_insert_returns_generated_keys_and_defaults(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        application = await sqlite_store.insert(
            Application,
            {"applicant_id": applicant["applicant_id"], "application_type": "transfer"},
        )

        assert applicant["applicant_id"] >= 1
        assert application["application_number"] >= 1
        assert application["public_facing_id"].startswith("APP-")
        assert application["status"] == "pending"
        assert application["application_date"] is not None

    @pytest.mark.asyncio
    async def test_select_filters_and_projects(self, sqlite_store):
        await sqlite_store.insert(Applicant, {"auth_id": "a", "first_name": "Ana"})
        await sqlite_store.insert(Applicant, {"auth_id": "b", "first_name": "Ben"})

        rows = await sqlite_store.select(Applicant, {"auth_id": "b"}, columns=["first_name"])
        assert rows == [{"first_name": "Ben"}]

    @pytest.mark.asyncio
    async def test_select_maybe_one(self, sqlite_store):
        assert await sqlite_store.select_maybe_one(Applicant, {"auth_id": "nobody"}) is None

        await sqlite_store.insert(Applicant, {"auth_id": "a", "last_name": "Cruz"})
        await sqlite_store.insert(Applicant, {"auth_id": "b", "last_name": "Cruz"})
        with pytest.raises(DatabaseError):
            await sqlite_store.select_maybe_one(Applicant, {"last_name": "Cruz"})

    @pytest.mark.asyncio
    async def test_upsert_updates_in_place(self, sqlite_store):
        first = await sqlite_store.upsert(
            Applicant, {"auth_id": "user-1", "first_name": "Juan"}, conflict=["auth_id"]
        )
        second = await sqlite_store.upsert(
            Applicant, {"auth_id": "user-1", "first_name": "Juanito"}, conflict=["auth_id"]
        )

        assert second["applicant_id"] == first["applicant_id"]
        assert second["first_name"] == "Juanito"
        assert len(await sqlite_store.select(Applicant, {})) == 1

    @pytest.mark.asyncio
    async def test_upsert_on_composite_key(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        application = await sqlite_store.insert(
            Application,
            {"applicant_id": applicant["applicant_id"], "application_type": "register"},
        )
        officer = await sqlite_store.insert(Officer, {"auth_id": "officer-1"})
        key = {
            "officer_id": officer["officer_id"],
            "application_number": application["application_number"],
        }

        await sqlite_store.upsert(
            OfficerAssignment, {**key, "action": "verify"}, conflict=list(key)
        )
        await sqlite_store.upsert(
            OfficerAssignment, {**key, "action": "approve"}, conflict=list(key)
        )

        rows = await sqlite_store.select(OfficerAssignment, key)
        assert [row["action"] for row in rows] == ["approve"]

    @pytest.mark.asyncio
    async def test_update_returns_rowcount(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        count = await sqlite_store.update(
            Applicant, {"voting_status": "Active"}, {"applicant_id": applicant["applicant_id"]}
        )
        missing = await sqlite_store.update(
            Applicant, {"voting_status": "Active"}, {"applicant_id": 999}
        )

        assert count == 1
        assert missing == 0

    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict_error(self, sqlite_store):
        await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        with pytest.raises(ConflictError):
            await sqlite_store.insert(Applicant, {"auth_id": "user-1"})

    @pytest.mark.asyncio
    async def test_not_null_violation_is_conflict_error(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        with pytest.raises(ConflictError):
            await sqlite_store.upsert(
                ApplicantVoterRecord,
                {"applicant_id": applicant["applicant_id"], "precinct_number": None, "voter_id": "V"},
                conflict=["applicant_id"],
            )


class TestActiveRegistrationIndex:

    async def _register(self, store, applicant_id, status="pending"):
        return await store.insert(
            Application,
            {"applicant_id": applicant_id, "application_type": "register", "status": status},
        )

    @pytest.mark.asyncio
    async def test_second_active_registration_rejected(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        await self._register(sqlite_store, applicant["applicant_id"])

        with pytest.raises(ConflictError):
            await self._register(sqlite_store, applicant["applicant_id"])

    @pytest.mark.asyncio
    async def test_disapproved_registrations_do_not_block(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        await self._register(sqlite_store, applicant["applicant_id"], "disapproved")
        await self._register(sqlite_store, applicant["applicant_id"], "disapproved")
        await self._register(sqlite_store, applicant["applicant_id"])

        rows = await sqlite_store.select(Application, {"applicant_id": applicant["applicant_id"]})
        assert len(rows) == 3

    @pytest.mark.asyncio
    async def test_other_types_are_not_limited(self, sqlite_store):
        applicant = await sqlite_store.insert(Applicant, {"auth_id": "user-1"})
        await self._register(sqlite_store, applicant["applicant_id"])
        for _ in range(2):
            await sqlite_store.insert(
                Application,
                {"applicant_id": applicant["applicant_id"], "application_type": "transfer"},
            )
