"""Pydantic schemas for tour payloads and responses."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from wildway.core.sanitize import clean_multiline, clean_single_line, slugify
from wildway.models.enums import TourDifficulty

MIN_TOUR_NAME_LEN = 10
MAX_TOUR_NAME_LEN = 40
MAX_SUMMARY_LEN = 500

# Columns a partial update may leave out but never clear.
REQUIRED_TOUR_FIELDS = (
    "name",
    "duration",
    "max_group_size",
    "difficulty",
    "ratings_average",
    "ratings_quantity",
    "price",
    "summary",
)


def _require_sluggable(name: str) -> str:
    if not slugify(name):
        raise ValueError("Tour name must contain at least one letter or digit")
    return name


class TourCreate(BaseModel):
    name: str = Field(min_length=MIN_TOUR_NAME_LEN, max_length=MAX_TOUR_NAME_LEN)
    duration: int = Field(gt=0)
    max_group_size: int = Field(gt=0)
    difficulty: TourDifficulty
    ratings_average: float = Field(default=4.5, ge=1, le=5)
    ratings_quantity: int = Field(default=0, ge=0)
    price: float = Field(gt=0)
    price_discount: float | None = Field(default=None, ge=0)
    summary: str = Field(min_length=1, max_length=MAX_SUMMARY_LEN)
    description: str | None = None
    start_dates: list[dt.datetime] = Field(default_factory=list)

    @field_validator("name", "summary", mode="before")
    @classmethod
    def normalize_single_line(cls, value: str) -> str:
        return clean_single_line(value)

    @field_validator("name")
    @classmethod
    def name_has_slug(cls, value: str) -> str:
        return _require_sluggable(value)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return clean_multiline(value) or None

    @model_validator(mode="after")
    def discount_below_price(self) -> "TourCreate":
        if self.price_discount is not None and self.price_discount >= self.price:
            raise ValueError("Discount price should be below regular price")
        return self


class TourUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=MIN_TOUR_NAME_LEN, max_length=MAX_TOUR_NAME_LEN)
    duration: int | None = Field(default=None, gt=0)
    max_group_size: int | None = Field(default=None, gt=0)
    difficulty: TourDifficulty | None = None
    ratings_average: float | None = Field(default=None, ge=1, le=5)
    ratings_quantity: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, gt=0)
    price_discount: float | None = Field(default=None, ge=0)
    summary: str | None = Field(default=None, min_length=1, max_length=MAX_SUMMARY_LEN)
    description: str | None = None
    start_dates: list[dt.datetime] | None = None

    @field_validator("name", "summary", mode="before")
    @classmethod
    def normalize_single_line(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return clean_single_line(value)

    @field_validator("name")
    @classmethod
    def name_has_slug(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _require_sluggable(value)

    @model_validator(mode="after")
    def required_fields_not_cleared(self) -> "TourUpdate":
        cleared = [f for f in REQUIRED_TOUR_FIELDS if f in self.model_fields_set and getattr(self, f) is None]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class TourOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    duration: int
    max_group_size: int
    difficulty: TourDifficulty
    ratings_average: float
    ratings_quantity: int
    price: float
    price_discount: float | None
    summary: str
    description: str | None
    start_dates: list[dt.datetime]
    created_at: dt.datetime


class TourData(BaseModel):
    tour: TourOut


class TourResponse(BaseModel):
    status: str = "success"
    data: TourData


class TourListData(BaseModel):
    tours: list[TourOut]


class TourListResponse(BaseModel):
    status: str = "success"
    results: int
    data: TourListData


class TourStat(BaseModel):
    difficulty: str
    num_tours: int
    num_ratings: int
    avg_rating: float
    avg_price: float
    min_price: float
    max_price: float


class TourStatsData(BaseModel):
    stats: list[TourStat]


class TourStatsResponse(BaseModel):
    status: str = "success"
    data: TourStatsData


class MonthlyPlanEntry(BaseModel):
    month: int
    num_tour_starts: int
    tours: list[str]


class MonthlyPlanData(BaseModel):
    plan: list[MonthlyPlanEntry]


class MonthlyPlanResponse(BaseModel):
    status: str = "success"
    data: MonthlyPlanData
