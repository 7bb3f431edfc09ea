from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.db.base import Base, utcnow


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    # The raw text the client searched for, not the provider's address.
    search_query: Mapped[str] = mapped_column(sa.Text, nullable=False, unique=True)
    formatted_query: Mapped[str] = mapped_column(sa.Text, nullable=False)

    latitude: Mapped[float] = mapped_column(sa.Float, nullable=False)
    longitude: Mapped[float] = mapped_column(sa.Float, nullable=False)

    # Locations never expire and are never updated.
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
