from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.db.base import Base, utcnow


class Movie(Base):
    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    location_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(sa.Text, nullable=False)
    overview: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    average_votes: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    total_votes: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    image_url: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    popularity: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    # Kept as the provider's YYYY-MM-DD text; some titles have no date.
    released_on: Mapped[str | None] = mapped_column(sa.String(10), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
