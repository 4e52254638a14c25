"""Service helpers for the tour catalogue."""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from typing import Any
from uuid import UUID

from sqlalchemy import String, cast, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wildway.core.exceptions import BadRequestError, ConflictError
from wildway.core.sanitize import slugify
from wildway.models.booking import Booking
from wildway.models.tour import Tour
from wildway.schemas.tour import TourCreate, TourUpdate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "name": Tour.name,
    "price": Tour.price,
    "duration": Tour.duration,
    "ratings_average": Tour.ratings_average,
    "ratings_quantity": Tour.ratings_quantity,
    "created_at": Tour.created_at,
}
TOP_TOURS_SORT = "-ratings_average,price"
TOP_TOURS_LIMIT = 5
STATS_MIN_RATING = 4.5


def _parse_uuid(value: str | UUID) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _order_by(sort: str | None) -> list[Any]:
    if not sort:
        return [Tour.created_at.desc()]
    clauses: list[Any] = []
    for raw_field in sort.split(","):
        field = raw_field.strip()
        if not field:
            continue
        descending = field.startswith("-")
        column = SORTABLE_FIELDS.get(field.lstrip("-"))
        if column is None:
            raise BadRequestError(f"Cannot sort tours by '{field.lstrip('-')}'.")
        clauses.append(column.desc() if descending else column.asc())
    return clauses or [Tour.created_at.desc()]


def _serialize_dates(values: list[dt.datetime]) -> list[str]:
    return [value.isoformat() for value in values]


def list_tours(db: Session, *, sort: str | None = None, page: int = 1, limit: int = 100) -> list[Tour]:
    return (
        db.query(Tour)
        .order_by(*_order_by(sort))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )


def list_top_tours(db: Session) -> list[Tour]:
    return list_tours(db, sort=TOP_TOURS_SORT, limit=TOP_TOURS_LIMIT)


def get_tour(db: Session, tour_id: str) -> Tour | None:
    tour_uuid = _parse_uuid(tour_id)
    if tour_uuid is None:
        return None
    return db.get(Tour, tour_uuid)


def get_tour_by_slug(db: Session, slug: str) -> Tour | None:
    return db.query(Tour).filter(Tour.slug == slug.strip().lower()).first()


def _commit_tour(db: Session, tour: Tour) -> Tour:
    db.add(tour)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A tour with this name already exists.", details={"name": tour.name}) from exc
    db.refresh(tour)
    return tour


def create_tour(db: Session, data: TourCreate) -> Tour:
    payload = data.model_dump(exclude={"start_dates"})
    tour = Tour(
        **payload,
        slug=slugify(data.name),
        start_dates=_serialize_dates(data.start_dates),
    )
    tour = _commit_tour(db, tour)
    logger.info("Tour created: %s", tour.slug)
    return tour


def update_tour(db: Session, tour_id: str, data: TourUpdate) -> Tour | None:
    tour = get_tour(db, tour_id)
    if not tour:
        logger.warning("Tour update failed (not found): %s", tour_id)
        return None

    changes = data.model_dump(exclude_unset=True)
    start_dates = changes.pop("start_dates", None)
    for field, value in changes.items():
        setattr(tour, field, value)
    if start_dates is not None:
        tour.start_dates = _serialize_dates(data.start_dates or [])
    if "name" in changes:
        tour.slug = slugify(tour.name)
    if tour.price_discount is not None and tour.price_discount >= tour.price:
        db.rollback()
        raise BadRequestError("Discount price should be below regular price")

    tour = _commit_tour(db, tour)
    logger.info("Tour updated: %s", tour.slug)
    return tour


def delete_tour(db: Session, tour_id: str) -> bool:
    tour = get_tour(db, tour_id)
    if not tour:
        logger.warning("Tour delete failed (not found): %s", tour_id)
        return False
    db.delete(tour)
    db.commit()
    logger.info("Tour deleted: %s", tour.slug)
    return True


def tour_stats(db: Session) -> list[dict[str, Any]]:
    difficulty = func.upper(cast(Tour.difficulty, String(20)))
    avg_price = func.avg(Tour.price)
    rows = (
        db.query(
            difficulty.label("difficulty"),
            func.count(Tour.id).label("num_tours"),
            func.coalesce(func.sum(Tour.ratings_quantity), 0).label("num_ratings"),
            func.avg(Tour.ratings_average).label("avg_rating"),
            avg_price.label("avg_price"),
            func.min(Tour.price).label("min_price"),
            func.max(Tour.price).label("max_price"),
        )
        .filter(Tour.ratings_average >= STATS_MIN_RATING)
        .group_by(difficulty)
        .order_by(avg_price.asc())
        .all()
    )
    return [
        {
            "difficulty": row.difficulty,
            "num_tours": int(row.num_tours),
            "num_ratings": int(row.num_ratings),
            "avg_rating": round(float(row.avg_rating), 2),
            "avg_price": round(float(row.avg_price), 2),
            "min_price": float(row.min_price),
            "max_price": float(row.max_price),
        }
        for row in rows
    ]


def monthly_plan(db: Session, year: int) -> list[dict[str, Any]]:
    by_month: dict[int, list[str]] = defaultdict(list)
    for tour in db.query(Tour).order_by(Tour.name.asc()).all():
        for raw in tour.start_dates or []:
            try:
                starts_at = dt.datetime.fromisoformat(raw)
            except (TypeError, ValueError):
                logger.warning("Skipping malformed start date on tour %s: %r", tour.slug, raw)
                continue
            if starts_at.year == year:
                by_month[starts_at.month].append(tour.name)

    plan = [
        {"month": month, "num_tour_starts": len(names), "tours": names}
        for month, names in by_month.items()
    ]
    plan.sort(key=lambda entry: (-entry["num_tour_starts"], entry["month"]))
    return plan


def list_booked_tours(db: Session, user_id: UUID) -> list[Tour]:
    tour_ids = [row.tour_id for row in db.query(Booking.tour_id).filter(Booking.user_id == user_id).all()]
    if not tour_ids:
        return []
    return db.query(Tour).filter(Tour.id.in_(tour_ids)).order_by(Tour.name.asc()).all()
