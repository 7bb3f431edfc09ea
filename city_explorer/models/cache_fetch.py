from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.db.base import Base, utcnow


class CacheFetch(Base):
    """When the cached row set for one (resource_type, location) was fetched.

    Exactly one row per pair while the set is cached; removed on purge.
    """

    __tablename__ = "cache_fetches"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    resource_type: Mapped[str] = mapped_column(sa.String(16), nullable=False)
    location_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
    )
    fetched_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "resource_type",
            "location_id",
            name="uq_cache_fetches_resource_type_location_id",
        ),
    )
