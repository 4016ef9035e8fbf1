"""
VoterReg Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Inventory:
    fake_store        In-memory Store double (no database needed)
    form_factory      Builds ApplicationForm instances with realistic defaults
    temp_storage      BucketStorage rooted in tmp_path with both buckets created
    jpeg_attachment   Small Attachment with JPEG magic bytes
    sqlite_store      Real Store bound to a fresh SQLite database (aiosqlite)
    test_client       HTTPX AsyncClient over ASGITransport, store overridden
"""

import os
import tempfile

# Settings are read at import time; point them at throwaway resources first
_TEST_DIR = tempfile.mkdtemp(prefix="voterreg_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/voterreg_test.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "storage")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["LOG_LEVEL"] = "WARNING"

import copy  # noqa: E402
from typing import Any, Dict, List, Optional, Sequence, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

import app.models  # noqa: E402,F401
from app.config import settings  # noqa: E402
from app.database import Base  # noqa: E402
from app.exceptions import ConflictError, DatabaseError  # noqa: E402
from app.schemas.application import ApplicationForm  # noqa: E402
from app.services.bucket_storage import BucketStorage  # noqa: E402
from app.services.file_service import Attachment  # noqa: E402
from app.store import Store  # noqa: E402

Row = Dict[str, Any]

JPEG_BYTES = (
    b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    b"\xff\xd9"
)


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Store
# ══════════════════════════════════════════════════════════════════════════


class FakeStore:
    """
    Dict-backed stand-in for app.store.Store.

    Emulates what the services rely on: autoincrement keys, Python-side
    column defaults, unique columns and conflict-key upserts. Any
    (table, operation) pair can be told to fail via `fail()`.

    Attributes:
        tables: table name → list of row dicts
        calls:  (operation, table name) in call order
    """

    def __init__(self):
        self.tables: Dict[str, List[Row]] = {}
        self.calls: List[Tuple[str, str]] = []
        self._failures: Dict[Tuple[str, str], Exception] = {}
        self._sequences: Dict[str, int] = {}

    # ── Test helpers ──────────────────────────────────────────────────────

    def fail(self, model, operation: str, error: Optional[Exception] = None) -> None:
        """Makes every `operation` on `model` raise `error` (DatabaseError by default)."""
        self._failures[(model.__tablename__, operation)] = error or DatabaseError(
            context={"table": model.__tablename__, "operation": operation}
        )

    def rows(self, model) -> List[Row]:
        return self.tables.setdefault(model.__tablename__, [])

    def seed(self, model, record: Row) -> Row:
        """Inserts without recording a call or applying failures."""
        return self._insert_row(model, record)

    def operations(self, model) -> List[str]:
        return [op for op, table in self.calls if table == model.__tablename__]

    # ── Internals ─────────────────────────────────────────────────────────

    def _enter(self, model, operation: str) -> None:
        self.calls.append((operation, model.__tablename__))
        error = self._failures.get((model.__tablename__, operation))
        if error is not None:
            raise error

    @staticmethod
    def _matches(row: Row, filters: Dict[str, Any]) -> bool:
        return all(row.get(name) == value for name, value in filters.items())

    def _insert_row(self, model, record: Row) -> Row:
        table = model.__table__
        row: Row = {}
        for column in table.columns:
            if column.name in record:
                row[column.name] = record[column.name]
            elif column.primary_key and column.autoincrement is True:
                self._sequences[table.name] = self._sequences.get(table.name, 0) + 1
                row[column.name] = self._sequences[table.name]
            elif column.default is not None:
                default = column.default
                row[column.name] = default.arg(None) if default.is_callable else default.arg
            else:
                row[column.name] = None

        existing = self.rows(model)
        for column in table.columns:
            if not (column.unique or column.primary_key):
                continue
            if any(other.get(column.name) == row[column.name] for other in existing):
                raise ConflictError(
                    message="This record conflicts with existing data.",
                    context={"table": table.name, "column": column.name},
                )
        existing.append(row)
        return copy.deepcopy(row)

    # ── Store interface ───────────────────────────────────────────────────

    async def select(
        self, model, filters: Dict[str, Any], columns: Optional[Sequence[str]] = None
    ) -> List[Row]:
        self._enter(model, "select")
        found = [row for row in self.rows(model) if self._matches(row, filters)]
        if columns:
            return [{name: row[name] for name in columns} for row in found]
        return copy.deepcopy(found)

    async def select_maybe_one(
        self, model, filters: Dict[str, Any], columns: Optional[Sequence[str]] = None
    ) -> Optional[Row]:
        rows = await self.select(model, filters, columns)
        if len(rows) > 1:
            raise DatabaseError(context={"table": model.__tablename__, "matches": len(rows)})
        return rows[0] if rows else None

    async def insert(self, model, record: Row) -> Row:
        self._enter(model, "insert")
        return self._insert_row(model, record)

    async def upsert(self, model, record: Row, conflict: Sequence[str]) -> Row:
        self._enter(model, "upsert")
        key = {name: record[name] for name in conflict}
        for row in self.rows(model):
            if self._matches(row, key):
                row.update(record)
                return copy.deepcopy(row)
        return self._insert_row(model, record)

    async def update(self, model, patch: Row, filters: Dict[str, Any]) -> int:
        self._enter(model, "update")
        count = 0
        for row in self.rows(model):
            if self._matches(row, filters):
                row.update(patch)
                count += 1
        return count


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def form_factory():
    """
    Returns a builder for ApplicationForm.

    Usage:
        form = form_factory("transfer", previous_barangay="San Roque")
    """

    def build(application_type: str = "register", **overrides) -> ApplicationForm:
        fields: Dict[str, Any] = {
            "application_type": application_type,
            "first_name": "Juan",
            "last_name": "Dela Cruz",
            "middle_name": "Santos",
            "civil_status": "Single",
            "sex": "Male",
            "date_of_birth": "1990-05-17",
            "place_of_birth_municipality": "Quezon City",
            "place_of_birth_province": "Metro Manila",
            "father_first_name": "Pedro",
            "father_last_name": "Dela Cruz",
            "mother_first_name": "Maria",
            "mother_maiden_last_name": "Santos",
            "house_number": "12",
            "street": "Rizal St",
            "barangay": "San Isidro",
            "city_municipality": "Quezon City",
            "province": "Metro Manila",
            "years_of_residence_municipality": 5,
            "months_of_residence_municipality": 2,
            "years_of_residence_address": 3,
            "months_of_residence_address": 0,
            "registration_type": "new",
            "adult_registration_consent": True,
        }
        fields.update(overrides)
        return ApplicationForm(**fields)

    return build


@pytest.fixture
def temp_storage(tmp_path):
    """BucketStorage rooted in tmp_path, buckets created, links enabled."""
    storage = BucketStorage(root=str(tmp_path / "storage"), public_base_url="http://testserver")
    storage.ensure_buckets(settings.buckets)
    return storage


@pytest.fixture
def jpeg_attachment():
    return Attachment(filename="front.jpg", content=JPEG_BYTES, content_type="image/jpeg")


@pytest_asyncio.fixture
async def sqlite_store(tmp_path):
    """
    A real Store over a fresh SQLite file with every table created.

    Used for the SQL-level tests (upsert dialect, partial index, RETURNING).
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/store.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield Store(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(fake_store):
    """
    HTTPX AsyncClient against the FastAPI app, with the Store dependency
    replaced by `fake_store` and the default buckets created.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.dependencies import get_store
    from app.main import app
    from app.services.bucket_storage import bucket_storage

    bucket_storage.ensure_buckets(settings.buckets)
    app.dependency_overrides[get_store] = lambda: fake_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
