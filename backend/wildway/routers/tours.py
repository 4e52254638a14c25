"""Tour catalogue endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from wildway.core.deps import AuthContext, get_db, protect, restrict_to
from wildway.core.exceptions import NotFoundError
from wildway.core.rate_limit import rate_limit
from wildway.models.enums import UserRole
from wildway.models.tour import Tour
from wildway.schemas.tour import (
    MonthlyPlanData,
    MonthlyPlanResponse,
    TourCreate,
    TourData,
    TourListData,
    TourListResponse,
    TourOut,
    TourResponse,
    TourStatsData,
    TourStatsResponse,
    TourUpdate,
)
from wildway.services import tours as tour_service

router = APIRouter(dependencies=[Depends(rate_limit())])

TOUR_EDITORS = (UserRole.admin, UserRole.lead_guide)
TOUR_PLANNERS = (UserRole.admin, UserRole.lead_guide, UserRole.guide)


def _list_response(tours: list[Tour]) -> TourListResponse:
    return TourListResponse(
        results=len(tours),
        data=TourListData(tours=[TourOut.model_validate(t) for t in tours]),
    )


def _tour_response(tour: Tour) -> TourResponse:
    return TourResponse(data=TourData(tour=TourOut.model_validate(tour)))


@router.get("/", response_model=TourListResponse)
def get_all_tours(
    sort: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=100, ge=1, le=100),
    db: Session = Depends(get_db),
) -> TourListResponse:
    return _list_response(tour_service.list_tours(db, sort=sort, page=page, limit=limit))


@router.get("/top-5-cheap", response_model=TourListResponse)
def get_top_tours(db: Session = Depends(get_db)) -> TourListResponse:
    return _list_response(tour_service.list_top_tours(db))


@router.get("/tour-stats", response_model=TourStatsResponse)
def get_tour_stats(db: Session = Depends(get_db)) -> TourStatsResponse:
    return TourStatsResponse(data=TourStatsData(stats=tour_service.tour_stats(db)))


@router.get("/monthly-plan/{year}", response_model=MonthlyPlanResponse)
def get_monthly_plan(
    year: int,
    _: AuthContext = Depends(restrict_to(*TOUR_PLANNERS)),
    db: Session = Depends(get_db),
) -> MonthlyPlanResponse:
    return MonthlyPlanResponse(data=MonthlyPlanData(plan=tour_service.monthly_plan(db, year)))


@router.get("/my-tours", response_model=TourListResponse)
def get_my_tours(auth: AuthContext = Depends(protect), db: Session = Depends(get_db)) -> TourListResponse:
    return _list_response(tour_service.list_booked_tours(db, auth.user.id))


@router.get("/slug/{slug}", response_model=TourResponse)
def get_tour_by_slug(slug: str, db: Session = Depends(get_db)) -> TourResponse:
    tour = tour_service.get_tour_by_slug(db, slug)
    if not tour:
        raise NotFoundError("No tour found with that name.", details={"slug": slug})
    return _tour_response(tour)


@router.get("/{tour_id}", response_model=TourResponse)
def get_tour(tour_id: str, db: Session = Depends(get_db)) -> TourResponse:
    tour = tour_service.get_tour(db, tour_id)
    if not tour:
        raise NotFoundError("No tour found with that ID.", details={"tour_id": tour_id})
    return _tour_response(tour)


@router.post("/", response_model=TourResponse, status_code=status.HTTP_201_CREATED)
def create_tour(
    payload: TourCreate,
    _: AuthContext = Depends(restrict_to(*TOUR_EDITORS)),
    db: Session = Depends(get_db),
) -> TourResponse:
    return _tour_response(tour_service.create_tour(db, payload))


@router.patch("/{tour_id}", response_model=TourResponse)
def update_tour(
    tour_id: str,
    payload: TourUpdate,
    _: AuthContext = Depends(restrict_to(*TOUR_EDITORS)),
    db: Session = Depends(get_db),
) -> TourResponse:
    tour = tour_service.update_tour(db, tour_id, payload)
    if not tour:
        raise NotFoundError("No tour found with that ID.", details={"tour_id": tour_id})
    return _tour_response(tour)


@router.delete(
    "/{tour_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    response_model=None,
)
def delete_tour(
    tour_id: str,
    _: AuthContext = Depends(restrict_to(*TOUR_EDITORS)),
    db: Session = Depends(get_db),
) -> Response:
    if not tour_service.delete_tour(db, tour_id):
        raise NotFoundError("No tour found with that ID.", details={"tour_id": tour_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
