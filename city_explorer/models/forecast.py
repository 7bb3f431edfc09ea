from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.db.base import Base, utcnow


class Forecast(Base):
    __tablename__ = "forecasts"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    location_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    forecast_summary: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    day_label: Mapped[str] = mapped_column(sa.String(15), nullable=False)

    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
