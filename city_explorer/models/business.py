from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.db.base import Base, utcnow


class Business(Base):
    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    location_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    # Price tier as "$".."$$$$"; not every business reports one.
    price: Mapped[str | None] = mapped_column(sa.String(8), nullable=True)
    rating: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    url: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
