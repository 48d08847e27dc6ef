"""Report API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from maji.api.deps import AdminUser, CurrentUser, ReportServiceDep
from maji.models.enums import ReportStatus, ReportType
from maji.schemas.report import (
    MyReportsResponse,
    ReportCreate,
    ReportCreatedResponse,
    ReportListResponse,
    ReportResponse,
    ReportStats,
    ReportStatusUpdate,
)

router = APIRouter()


@router.post("", response_model=ReportCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    body: ReportCreate, current_user: CurrentUser, report_service: ReportServiceDep
):
    """Submit an infrastructure report.

    Raises:
        409: Caller already reported this incident
        503: Report intake busy, retry
    """
    report = await report_service.create_report(
        current_user,
        report_type=body.type,
        location=body.location.as_tuple(),
        description=body.description,
        address=body.address,
    )
    return ReportCreatedResponse(
        **ReportResponse.model_validate(report).model_dump(),
        potential_bounty=report.bounty_amount,
        message=(
            f"Report submitted. You may earn {report.bounty_amount:,} Le "
            "if verified and resolved."
        ),
    )


@router.get("/mine", response_model=MyReportsResponse)
async def my_reports(
    current_user: CurrentUser,
    report_service: ReportServiceDep,
    report_type: ReportType | None = Query(None, alias="type"),
    status_filter: ReportStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """Get current user's reports with totals."""
    reports, total = await report_service.list_reports(
        user_id=current_user.user_id,
        report_type=report_type,
        status=status_filter,
        skip=skip,
        limit=limit,
    )
    stats = await report_service.get_reporter_stats(current_user.user_id)
    return MyReportsResponse(
        reports=[ReportResponse.model_validate(r) for r in reports],
        total=total,
        stats=ReportStats(**stats),
    )


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: UUID, current_user: CurrentUser, report_service: ReportServiceDep
):
    """Get report details (owner or admin)."""
    return await report_service.get_report(report_id, current_user)


@router.get("", response_model=ReportListResponse)
async def list_reports(
    admin_user: AdminUser,
    report_service: ReportServiceDep,
    report_type: ReportType | None = Query(None, alias="type"),
    status_filter: ReportStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """List all reports (admin only)."""
    reports, total = await report_service.list_reports(
        report_type=report_type, status=status_filter, skip=skip, limit=limit
    )
    return ReportListResponse(
        reports=[ReportResponse.model_validate(r) for r in reports],
        total=total,
    )


@router.patch("/{report_id}/status", response_model=ReportResponse)
async def update_report_status(
    report_id: UUID,
    body: ReportStatusUpdate,
    admin_user: AdminUser,
    report_service: ReportServiceDep,
):
    """Advance, resolve or reject a report (admin only).

    Resolving pays the bounty to the incident's first reporter.
    """
    return await report_service.update_report_status(
        report_id, admin_user, body.status, body.resolution
    )
