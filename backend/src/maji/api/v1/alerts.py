"""Alert API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from maji.api.deps import AlertServiceDep, CurrentUser, OptionalUser
from maji.models.enums import AlertStatus, AlertType
from maji.schemas.alert import (
    AlertCreate,
    AlertCreatedResponse,
    AlertDetailResponse,
    AlertFeedbackCreate,
    AlertFeedbackResponse,
    AlertListResponse,
    AlertResponse,
)

router = APIRouter()


@router.get("", response_model=AlertListResponse)
async def list_alerts(
    current_user: OptionalUser,
    alert_service: AlertServiceDep,
    zone_id: UUID | None = None,
    alert_type: AlertType | None = Query(None, alias="type"),
    status_filter: AlertStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """List alerts, defaulting to active alerts in the user's primary zone."""
    alerts, total = await alert_service.list_alerts(
        current_user,
        zone_id=zone_id,
        alert_type=alert_type,
        status=status_filter,
        skip=skip,
        limit=limit,
    )
    return AlertListResponse(
        alerts=[AlertDetailResponse.model_validate(a) for a in alerts],
        total=total,
    )


@router.get("/{alert_id}", response_model=AlertDetailResponse)
async def get_alert(alert_id: UUID, alert_service: AlertServiceDep):
    return await alert_service.get_alert(alert_id)


@router.post("", response_model=AlertCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_alert(
    body: AlertCreate, current_user: CurrentUser, alert_service: AlertServiceDep
):
    """Post a water supply alert (verified scouts and admins).

    Raises:
        403: Not a scout, or scout not verified
        404: Zone not found
    """
    alert, points = await alert_service.create_alert(
        current_user,
        zone_id=body.zone_id,
        alert_type=body.type,
        message=body.message,
        eta=body.eta,
        duration=body.duration,
    )
    return AlertCreatedResponse(
        **AlertResponse.model_validate(alert).model_dump(),
        points_earned=points,
    )


@router.post("/{alert_id}/feedback", response_model=AlertFeedbackResponse)
async def submit_feedback(
    alert_id: UUID,
    body: AlertFeedbackCreate,
    current_user: CurrentUser,
    alert_service: AlertServiceDep,
):
    """Vote on whether an alert turned out to be accurate.

    Raises:
        403: Voting on your own alert
        409: Already voted on this alert
    """
    alert = await alert_service.submit_feedback(
        alert_id,
        current_user,
        body.accurate,
        actual_start_time=body.actual_start_time,
        actual_duration=body.actual_duration,
        comment=body.comment,
    )
    return AlertFeedbackResponse(
        feedback_score=alert.feedback_score,
        feedback_count=alert.feedback_count,
        is_verified=alert.is_verified,
    )


@router.patch("/{alert_id}/cancel", response_model=AlertResponse)
async def cancel_alert(alert_id: UUID, current_user: CurrentUser, alert_service: AlertServiceDep):
    """Cancel an active alert (its scout or an admin)."""
    return await alert_service.cancel_alert(alert_id, current_user)
