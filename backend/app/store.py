"""
VoterReg Backend — Relational Store (Data-Access Boundary)
===========================================================

What:  The five primitives every service uses to touch the database:
       select, select_maybe_one, insert, upsert, update.
How:   Each primitive opens its own AsyncSession, runs one statement, commits,
       and returns plain dicts (column name → value). Tables are addressed by
       their ORM model class.
Who:   Injected into every service method (same seam the session had in the
       original note service); replaced by an in-memory double in tests.
When:  On every read and write.

Unit of work:
    A primitive is its own transaction. A multi-step flow (submission,
    approval) therefore commits step by step, and a failure half-way leaves
    the earlier steps in place. Services that need to undo earlier steps do
    it explicitly through app.services.workflow.

At-most-one reads:
    `select_maybe_one` is the only way services read a one-to-one relation.
    It returns the row or None, and raises when more than one row matches,
    so no caller ever has to unwrap a one-element list.

Upserts:
    PostgreSQL and SQLite both implement INSERT ... ON CONFLICT; the dialect
    of the bound engine picks the statement builder.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import insert as sa_insert
from sqlalchemy import select as sa_select
from sqlalchemy import update as sa_update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import Base, async_session_factory
from app.exceptions import ConflictError, DatabaseError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
T = TypeVar("T")

_UPSERT_BUILDERS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class Store:
    """
    Thin, per-call transactional access to the relational tables.

    Args:
        session_factory: async_sessionmaker to open sessions from. Defaults to
                         the application's factory; tests pass one bound to a
                         temporary SQLite database.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory or async_session_factory

    async def _run(
        self,
        operation: str,
        model: Type[Base],
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Runs `work` in a fresh session, commits, and wraps SQLAlchemy errors."""
        table_name = model.__tablename__
        async with self._session_factory() as session:
            try:
                result = await work(session)
                await session.commit()
                return result
            except IntegrityError as e:
                await session.rollback()
                logger.warning("Constraint violation on %s %s: %s", operation, table_name, e.orig)
                raise ConflictError(
                    message="This record conflicts with existing data.",
                    context={"table": table_name, "operation": operation, "error": str(e.orig)},
                ) from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    "Database error on %s %s: %s", operation, table_name, str(e), exc_info=True
                )
                raise DatabaseError(
                    context={
                        "table": table_name,
                        "operation": operation,
                        "error_type": type(e).__name__,
                    },
                ) from e

    async def select(
        self,
        model: Type[Base],
        filters: Dict[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        """
        Returns every row of `model` whose columns equal `filters`.

        Args:
            filters: Column name → required value (combined with AND).
            columns: Restrict the returned keys; None returns all columns.
        """
        table = model.__table__

        async def work(session: AsyncSession) -> List[Row]:
            selected = [table.c[name] for name in columns] if columns else [table]
            stmt = sa_select(*selected).where(
                *[table.c[name] == value for name, value in filters.items()]
            )
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

        return await self._run("select", model, work)

    async def select_maybe_one(
        self,
        model: Type[Base],
        filters: Dict[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[Row]:
        """
        Returns the single matching row, or None.

        Raises:
            DatabaseError: more than one row matched.
        """
        rows = await self.select(model, filters, columns)
        if len(rows) > 1:
            logger.error(
                "Expected at most one %s row for %s, found %d",
                model.__tablename__,
                filters,
                len(rows),
            )
            raise DatabaseError(
                context={"table": model.__tablename__, "filters": filters, "matches": len(rows)},
            )
        return rows[0] if rows else None

    async def insert(self, model: Type[Base], record: Row) -> Row:
        """Inserts one row and returns it as stored (generated keys included)."""
        table = model.__table__

        async def work(session: AsyncSession) -> Row:
            stmt = sa_insert(table).values(**record).returning(*table.c)
            result = await session.execute(stmt)
            return dict(result.mappings().one())

        return await self._run("insert", model, work)

    async def upsert(self, model: Type[Base], record: Row, conflict: Sequence[str]) -> Row:
        """
        Inserts `record`, or overwrites the non-key columns of the row that
        already holds the same `conflict` key.
        """
        table = model.__table__

        async def work(session: AsyncSession) -> Row:
            dialect = session.get_bind().dialect.name
            builder = _UPSERT_BUILDERS.get(dialect)
            if builder is None:
                raise DatabaseError(
                    message="Upserts are not supported on this database.",
                    context={"dialect": dialect},
                )
            stmt = builder(table).values(**record)
            updates = {
                name: stmt.excluded[name] for name in record if name not in conflict
            }
            stmt = stmt.on_conflict_do_update(
                index_elements=list(conflict),
                set_=updates,
            ).returning(*table.c)
            result = await session.execute(stmt)
            return dict(result.mappings().one())

        return await self._run("upsert", model, work)

    async def update(self, model: Type[Base], patch: Row, filters: Dict[str, Any]) -> int:
        """Applies `patch` to every row matching `filters`; returns the row count."""
        table = model.__table__

        async def work(session: AsyncSession) -> int:
            stmt = (
                sa_update(table)
                .where(*[table.c[name] == value for name, value in filters.items()])
                .values(**patch)
            )
            result = await session.execute(stmt)
            return result.rowcount

        return await self._run("update", model, work)


# ── Singleton Instance ────────────────────────────────────────────────────
store = Store()
