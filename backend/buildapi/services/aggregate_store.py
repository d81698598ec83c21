"""
Build API — Aggregate Record Store
====================================

What:  Every SQL statement the service issues against the `Aggregates` table.
Why:   Keeps persistence in one place, behind awaitable methods that either
       return a plain result or raise DatabaseError.
How:   Wraps one AsyncSession. Statements are issued in the order called;
       commit/rollback belongs to the session owner (get_db_session for
       requests, the seeding CLI for scripts).
Who:   AggregateService (request path) and buildapi.seed (operational scripts).

Contract:
    create_table()              idempotent schema creation
    insert(record) -> id        store-assigned autoincrement id
    list_all() -> [Aggregate]   every row, in id order
    get_by_id(id) -> Aggregate | None
    update_by_id(id, record) -> rows affected
    delete_by_id(id) -> rows affected

Ids are taken as strings straight from the URL path and bound as given;
SQLite's numeric affinity on the INTEGER key decides whether they match.

Reads use populate_existing: bulk UPDATE/DELETE skip session
synchronization, so rows must come from the table, not the identity map.
"""

import logging
from typing import Iterable, List, Optional, Union

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from buildapi.database import Base
from buildapi.exceptions import DatabaseError
from buildapi.models.aggregate import Aggregate
from buildapi.schemas.aggregate import AggregatePayload

logger = logging.getLogger(__name__)

AggregateId = Union[int, str]


def _column_values(record: AggregatePayload) -> dict:
    return {
        "name": record.name,
        "loose_density": record.loose_density,
        "compacted_density": record.compacted_density,
        "category": record.category,
    }


class AggregateStore:
    """
    Thin async data-access layer over the `Aggregates` table.

    Any SQLAlchemy failure is logged with its real cause and re-raised as
    DatabaseError; callers never see driver exceptions.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_table(self) -> None:
        """CREATE TABLE IF NOT EXISTS Aggregates (...)."""
        try:
            await self.session.run_sync(
                lambda sync_session: Base.metadata.create_all(
                    bind=sync_session.connection(),
                    tables=[Aggregate.__table__],
                )
            )
        except SQLAlchemyError as e:
            logger.error("Error creating table: %s", str(e))
            raise DatabaseError(
                message="Could not create the Aggregates table",
                context={"original_error": str(e)},
            ) from e

    async def insert(self, record: AggregatePayload) -> int:
        """Insert one row and return the id the store assigned to it."""
        aggregate = Aggregate(**_column_values(record))
        try:
            self.session.add(aggregate)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Error inserting aggregate: %s", str(e))
            raise DatabaseError(
                message="Could not insert the aggregate",
                context={"original_error": str(e)},
            ) from e
        return aggregate.id

    async def insert_many(self, records: Iterable[AggregatePayload]) -> List[int]:
        """Insert several rows in the caller's transaction; returns their ids in order."""
        aggregates = [Aggregate(**_column_values(record)) for record in records]
        try:
            self.session.add_all(aggregates)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Error inserting aggregates: %s", str(e))
            raise DatabaseError(
                message="Could not insert the aggregates",
                context={"count": len(aggregates), "original_error": str(e)},
            ) from e
        return [aggregate.id for aggregate in aggregates]

    async def list_all(self) -> List[Aggregate]:
        try:
            result = await self.session.execute(
                select(Aggregate)
                .order_by(Aggregate.id)
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Error listing aggregates: %s", str(e))
            raise DatabaseError(
                message="Could not list aggregates",
                context={"original_error": str(e)},
            ) from e

    async def get_by_id(self, aggregate_id: AggregateId) -> Optional[Aggregate]:
        try:
            result = await self.session.execute(
                select(Aggregate)
                .where(Aggregate.id == aggregate_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Error fetching aggregate %s: %s", aggregate_id, str(e))
            raise DatabaseError(
                message="Could not fetch the aggregate",
                context={"aggregate_id": str(aggregate_id), "original_error": str(e)},
            ) from e

    async def update_by_id(self, aggregate_id: AggregateId, record: AggregatePayload) -> int:
        """Full replace of the four mutable columns; returns rows affected."""
        statement = (
            update(Aggregate)
            .where(Aggregate.id == aggregate_id)
            .values(**_column_values(record))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error updating aggregate %s: %s", aggregate_id, str(e))
            raise DatabaseError(
                message="Could not update the aggregate",
                context={"aggregate_id": str(aggregate_id), "original_error": str(e)},
            ) from e
        return result.rowcount

    async def delete_by_id(self, aggregate_id: AggregateId) -> int:
        statement = (
            delete(Aggregate)
            .where(Aggregate.id == aggregate_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Error deleting aggregate %s: %s", aggregate_id, str(e))
            raise DatabaseError(
                message="Could not delete the aggregate",
                context={"aggregate_id": str(aggregate_id), "original_error": str(e)},
            ) from e
        return result.rowcount
