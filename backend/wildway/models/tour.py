"""Tour catalogue model."""

from __future__ import annotations

import datetime as dt
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from wildway.db.base import Base
from wildway.models.enums import TourDifficulty
from wildway.models.user import utcnow


class Tour(Base):
    __tablename__ = "tours"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty: Mapped[TourDifficulty] = mapped_column(
        Enum(TourDifficulty, name="tour_difficulty", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    ratings_average: Mapped[float] = mapped_column(Float, default=4.5)
    ratings_quantity: Mapped[int] = mapped_column(Integer, default=0)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_discount: Mapped[float | None] = mapped_column(Float, nullable=True)
    summary: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # ISO-8601 strings; JSONB on Postgres, plain JSON elsewhere.
    start_dates: Mapped[list[str]] = mapped_column(JSON().with_variant(JSONB, "postgresql"), default=list)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
