from __future__ import annotations

import contextlib
import datetime as dt
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from city_explorer.core.errors import StorageError
from city_explorer.db.base import as_utc
from city_explorer.models import Business, CacheFetch, Event, Forecast, Location, Movie
from city_explorer.schemas.records import (
    BusinessRecord,
    EventRecord,
    ForecastRecord,
    LocationRecord,
    MovieRecord,
    Record,
)
from city_explorer.services.freshness import ResourceType


logger = logging.getLogger(__name__)


_TABLES: dict[ResourceType, tuple[type[Any], type[Record]]] = {
    ResourceType.FORECAST: (Forecast, ForecastRecord),
    ResourceType.EVENT: (Event, EventRecord),
    ResourceType.MOVIE: (Movie, MovieRecord),
    ResourceType.BUSINESS: (Business, BusinessRecord),
}


def _table_for(resource_type: ResourceType) -> tuple[type[Any], type[Record]]:
    try:
        return _TABLES[resource_type]
    except KeyError:
        raise ValueError(f"No storage for resource type {resource_type.value!r}")


def _dialect_name(session: AsyncSession) -> str:
    bind = session.bind or session.get_bind()
    if bind is None or getattr(bind, "dialect", None) is None:
        return ""
    return str(bind.dialect.name or "")


def _dialect_insert(session: AsyncSession) -> Callable[..., Any] | None:
    """The dialect's INSERT supporting ON CONFLICT, or None when it has none."""

    dialect = _dialect_name(session)
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as _insert

        return _insert
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as _insert

        return _insert
    return None


class CacheStore:
    """Keyed persistence for locations and per-(type, location) row sets.

    Every operation checks a session out of the injected sessionmaker and
    returns it to the pool when done; nothing is held between calls.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    @contextlib.asynccontextmanager
    async def _transaction(self, op: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessionmaker.begin() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("Storage operation %s failed", op, exc_info=True)
            raise StorageError(f"Storage operation {op} failed") from e

    async def find_location(self, search_query: str) -> LocationRecord | None:
        async with self._transaction("find_location") as session:
            row = (
                await session.execute(
                    sa.select(Location).where(Location.search_query == search_query)
                )
            ).scalar_one_or_none()
            if row is None:
                return None
            return LocationRecord.model_validate(row)

    async def insert_location(self, record: LocationRecord) -> int:
        """Insert the location unless its search_query is already stored.

        Returns the id of the stored row. Two requests that miss on the same
        query at once both end up with the first writer's id.
        """

        values = record.model_dump(exclude={"id"})
        async with self._transaction("insert_location") as session:
            _insert = _dialect_insert(session)
            if _insert is not None:
                await session.execute(
                    _insert(Location.__table__)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=["search_query"])
                )
            else:
                try:
                    async with session.begin_nested():
                        session.add(Location(**values))
                        await session.flush()
                except IntegrityError:
                    logger.info(
                        "Location %r inserted concurrently", record.search_query
                    )

            location_id = (
                await session.execute(
                    sa.select(Location.id).where(
                        Location.search_query == record.search_query
                    )
                )
            ).scalar_one()
            return int(location_id)

    async def _fetched_at(
        self, session: AsyncSession, resource_type: ResourceType, location_id: int
    ) -> dt.datetime | None:
        model, _ = _table_for(resource_type)
        marker = (
            await session.execute(
                sa.select(CacheFetch.fetched_at).where(
                    CacheFetch.resource_type == resource_type.value,
                    CacheFetch.location_id == location_id,
                )
            )
        ).scalar_one_or_none()
        if marker is not None:
            return as_utc(marker)

        oldest = (
            await session.execute(
                sa.select(sa.func.min(model.created_at)).where(
                    model.location_id == location_id
                )
            )
        ).scalar_one_or_none()
        return as_utc(oldest) if oldest is not None else None

    async def _rows(
        self, session: AsyncSession, resource_type: ResourceType, location_id: int
    ) -> list[Record]:
        model, record_cls = _table_for(resource_type)
        rows = (
            await session.execute(
                sa.select(model)
                .where(model.location_id == location_id)
                .order_by(model.id)
            )
        ).scalars()
        return [record_cls.model_validate(row) for row in rows]

    async def find_by_type_and_location(
        self, resource_type: ResourceType, location_id: int
    ) -> list[Record]:
        async with self._transaction("find_by_type_and_location") as session:
            return await self._rows(session, resource_type, location_id)

    async def fetched_at(
        self, resource_type: ResourceType, location_id: int
    ) -> dt.datetime | None:
        """When the cached set for the pair was fetched, or None if there is none.

        Rows that predate the fetch marker (or were written without one) fall
        back to their oldest created_at.
        """

        async with self._transaction("fetched_at") as session:
            return await self._fetched_at(session, resource_type, location_id)

    async def cached_set(
        self, resource_type: ResourceType, location_id: int
    ) -> tuple[dt.datetime | None, list[Record]]:
        """Fetch time and rows for the pair, read in one transaction."""

        async with self._transaction("cached_set") as session:
            fetched_at = await self._fetched_at(session, resource_type, location_id)
            if fetched_at is None:
                return None, []
            return fetched_at, await self._rows(session, resource_type, location_id)

    async def purge_by_type_and_location(
        self, resource_type: ResourceType, location_id: int
    ) -> int:
        """Delete every row for the pair. Deleting nothing is fine."""

        model, _ = _table_for(resource_type)
        async with self._transaction("purge_by_type_and_location") as session:
            result = await session.execute(
                sa.delete(model).where(model.location_id == location_id)
            )
            await session.execute(
                sa.delete(CacheFetch).where(
                    CacheFetch.resource_type == resource_type.value,
                    CacheFetch.location_id == location_id,
                )
            )
            return int(result.rowcount or 0)

    async def insert_many(
        self, resource_type: ResourceType, records: Sequence[Record]
    ) -> None:
        if not records:
            return
        model, _ = _table_for(resource_type)
        location_ids = {r.location_id for r in records}
        if len(location_ids) != 1:
            raise ValueError("insert_many expects records for a single location")
        location_id = location_ids.pop()
        fetched_at = min(r.created_at for r in records)

        async with self._transaction("insert_many") as session:
            session.add_all([model(**r.model_dump()) for r in records])
            await session.flush()
            await self._upsert_marker(
                session,
                resource_type=resource_type,
                location_id=location_id,
                fetched_at=fetched_at,
            )

    async def _upsert_marker(
        self,
        session: AsyncSession,
        *,
        resource_type: ResourceType,
        location_id: int,
        fetched_at: dt.datetime,
    ) -> None:
        # Concurrent refreshes of one pair may both land here; last one wins.
        values = {
            "resource_type": resource_type.value,
            "location_id": location_id,
            "fetched_at": fetched_at,
        }
        _insert = _dialect_insert(session)
        if _insert is not None:
            stmt = _insert(CacheFetch.__table__).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["resource_type", "location_id"],
                set_={"fetched_at": stmt.excluded.fetched_at},
            )
            await session.execute(stmt)
            return

        await session.execute(
            sa.delete(CacheFetch).where(
                CacheFetch.resource_type == resource_type.value,
                CacheFetch.location_id == location_id,
            )
        )
        session.add(CacheFetch(**values))
