"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    AlertResponse,
    FacilityResponse,
    FacilityStatusResponse,
    FeedbackRequest,
    FeedbackResponse,
    HistoryPointResponse,
    ReadingResponse,
    ReadingSubmission,
    RecentFeedbackResponse,
    TemperatureUpdate,
    TemperatureUpdateResponse,
    VoteRequest,
    VoteResponse,
    WeightedReadingResponse,
    WeightedTemperatureResponse,
)
from models.events import EventType
from services.dashboard import RECENT_FEEDBACKS_LIMIT, DashboardService, build_default_dashboard

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


def facilities_payload(dashboard: DashboardService) -> list[dict]:
    return [
        FacilityStatusResponse.from_status(item).model_dump(mode="json")
        for item in dashboard.list_facilities()
    ]


def recent_feedbacks_payload(dashboard: DashboardService) -> list[dict]:
    return [
        RecentFeedbackResponse.from_entry(entry).model_dump(mode="json")
        for entry in dashboard.recent_feedbacks()
    ]


async def broadcast_facilities(dashboard: DashboardService) -> None:
    await dashboard.broadcaster.publish(
        EventType.facilities_update, facilities_payload(dashboard)
    )


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get(
    "/facilities",
    response_model=List[FacilityStatusResponse],
    summary="List facilities with crowd-weighted temperatures and feedback.",
)
async def list_facilities(
    dashboard: DashboardService = Depends(get_dashboard),
) -> List[FacilityStatusResponse]:
    return [FacilityStatusResponse.from_status(item) for item in dashboard.list_facilities()]


@router.get(
    "/facilities/{facility_id}",
    response_model=FacilityStatusResponse,
    summary="Fetch the dashboard card for one facility.",
)
async def get_facility(
    facility_id: int,
    dashboard: DashboardService = Depends(get_dashboard),
) -> FacilityStatusResponse:
    try:
        return FacilityStatusResponse.from_status(dashboard.get_facility_status(facility_id))
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.put(
    "/facilities/{facility_id}/temperature",
    response_model=TemperatureUpdateResponse,
    summary="Record a raw sensor temperature for a facility.",
)
async def update_temperature(
    facility_id: int,
    update: TemperatureUpdate,
    dashboard: DashboardService = Depends(get_dashboard),
) -> TemperatureUpdateResponse:
    try:
        facility, alert = dashboard.update_facility_temperature(facility_id, update.temperature)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc

    await broadcast_facilities(dashboard)
    alert_body = AlertResponse.from_alert(alert) if alert is not None else None
    if alert_body is not None:
        await dashboard.broadcaster.publish(
            EventType.temperature_alert, alert_body.model_dump(mode="json")
        )
    return TemperatureUpdateResponse(
        facility=FacilityResponse.model_validate(facility),
        alert=alert_body,
    )


@router.get(
    "/facilities/{facility_id}/history",
    response_model=List[HistoryPointResponse],
    summary="Raw temperature series for charting.",
)
async def get_history(
    facility_id: int,
    hours: Optional[int] = Query(None, description="Window size in hours (default 24)."),
    dashboard: DashboardService = Depends(get_dashboard),
) -> List[HistoryPointResponse]:
    try:
        points = dashboard.temperature_history(facility_id, hours)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return [HistoryPointResponse.model_validate(point) for point in points]


@router.get(
    "/facilities/{facility_id}/readings",
    response_model=List[WeightedReadingResponse],
    summary="Most recent crowd readings, newest first, with vote-adjusted scores.",
)
async def get_readings(
    facility_id: int,
    limit: Optional[int] = Query(None, ge=0, le=100),
    dashboard: DashboardService = Depends(get_dashboard),
) -> List[WeightedReadingResponse]:
    try:
        readings = dashboard.recent_readings(facility_id, limit)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return [WeightedReadingResponse.from_weighted(item) for item in readings]


@router.post(
    "/facilities/{facility_id}/readings",
    status_code=status.HTTP_201_CREATED,
    response_model=ReadingResponse,
    summary="Submit a crowd temperature reading.",
)
async def submit_reading(
    facility_id: int,
    submission: ReadingSubmission,
    dashboard: DashboardService = Depends(get_dashboard),
) -> ReadingResponse:
    try:
        reading = dashboard.submit_reading(
            facility_id,
            submission.temperature,
            submitted_by=submission.submitted_by,
            unit=submission.unit,
        )
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc

    body = ReadingResponse.model_validate(reading)
    await dashboard.broadcaster.publish(EventType.reading_submitted, body.model_dump(mode="json"))
    await broadcast_facilities(dashboard)
    return body


@router.get(
    "/facilities/{facility_id}/weighted-temperature",
    response_model=WeightedTemperatureResponse,
    summary="Vote-weighted temperature estimate for a facility.",
)
async def get_weighted_temperature(
    facility_id: int,
    dashboard: DashboardService = Depends(get_dashboard),
) -> WeightedTemperatureResponse:
    try:
        estimate = dashboard.weighted_temperature(facility_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return WeightedTemperatureResponse(facility_id=facility_id, weighted_temperature=estimate)


@router.post(
    "/readings/{reading_id}/votes",
    status_code=status.HTTP_201_CREATED,
    response_model=VoteResponse,
    summary="Up- or down-vote a crowd reading.",
)
async def cast_vote(
    reading_id: int,
    vote: VoteRequest,
    dashboard: DashboardService = Depends(get_dashboard),
) -> VoteResponse:
    try:
        recorded = dashboard.cast_vote(reading_id, vote.is_upvote)
    except KeyError as exc:
        raise _not_found(exc) from exc

    body = VoteResponse.model_validate(recorded)
    await dashboard.broadcaster.publish(EventType.reading_voted, body.model_dump(mode="json"))
    await broadcast_facilities(dashboard)
    return body


@router.post(
    "/facilities/{facility_id}/feedback",
    status_code=status.HTTP_201_CREATED,
    response_model=FeedbackResponse,
    summary="Rate how a facility feels right now.",
)
async def submit_feedback(
    facility_id: int,
    feedback: FeedbackRequest,
    dashboard: DashboardService = Depends(get_dashboard),
) -> FeedbackResponse:
    try:
        item = dashboard.record_feedback(
            facility_id, feedback.rating, submitted_by=feedback.submitted_by
        )
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc

    await broadcast_facilities(dashboard)
    await dashboard.broadcaster.publish(
        EventType.recent_feedbacks, recent_feedbacks_payload(dashboard)
    )
    return FeedbackResponse.model_validate(item)


@router.get(
    "/feedback/recent",
    response_model=List[RecentFeedbackResponse],
    summary="Latest feedback across all facilities, newest first.",
)
async def get_recent_feedbacks(
    limit: int = Query(RECENT_FEEDBACKS_LIMIT, ge=0, le=50),
    dashboard: DashboardService = Depends(get_dashboard),
) -> List[RecentFeedbackResponse]:
    return [RecentFeedbackResponse.from_entry(entry) for entry in dashboard.recent_feedbacks(limit)]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /facilities for live dashboard data."}
