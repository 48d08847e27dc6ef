"""Report service for infrastructure reports, deduplication and bounties.

Reports of the same type filed within the dedup window and strictly closer
than the dedup radius describe the same incident. A reporter cannot file
twice for one incident, enough distinct reporters verify it automatically,
and only the first report of an incident earns the bounty when resolved.
Rejecting that first report hands the lead to the next open report.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maji.core.config import settings
from maji.core.errors import DuplicateReport, Forbidden, InvalidTransition, NotFound, ResourceBusy
from maji.middleware.metrics import record_report_created
from maji.models.base import utcnow
from maji.models.enums import NotificationKind, ReportStatus, ReportType
from maji.models.report import Report
from maji.models.user import User
from maji.services.notification_service import NotificationService
from maji.services.redis_service import RedisService
from maji.services.scoring import calculate_distance

logger = logging.getLogger(__name__)

OPEN_STATUSES = (
    ReportStatus.PENDING,
    ReportStatus.VERIFIED,
    ReportStatus.FORWARDED,
    ReportStatus.IN_PROGRESS,
)
TERMINAL_STATUSES = (ReportStatus.RESOLVED, ReportStatus.REJECTED)

# Forward-only order for admin status updates; REJECTED sits outside it
STATUS_PROGRESSION = [
    ReportStatus.PENDING,
    ReportStatus.VERIFIED,
    ReportStatus.FORWARDED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.RESOLVED,
]

LOCK_TTL_SECONDS = 10
LOCK_ATTEMPTS = 5
LOCK_RETRY_DELAY = 0.1


def bounty_for_type(report_type: ReportType) -> int:
    amounts = settings.BOUNTY_AMOUNTS
    return amounts.get(report_type.value, amounts.get(ReportType.OTHER.value, 0))


def find_nearby(
    candidates: Iterable[Report],
    location: tuple[float, float],
    radius_meters: float,
) -> list[Report]:
    """Return candidates strictly closer than radius_meters to location.

    Args:
        candidates: Reports to check, order is preserved
        location: (longitude, latitude)
        radius_meters: Exclusive distance bound

    Returns:
        Nearby reports in input order
    """
    return [
        report
        for report in candidates
        if calculate_distance(location, (report.longitude, report.latitude)) < radius_meters
    ]


def check_status_transition(current: ReportStatus, requested: ReportStatus) -> None:
    """Validate an admin status change.

    Raises:
        InvalidTransition: current is terminal, or requested does not move
            the report forward
    """
    if current in TERMINAL_STATUSES:
        raise InvalidTransition("report", current.value, requested.value)
    if requested == ReportStatus.REJECTED:
        return
    if STATUS_PROGRESSION.index(requested) <= STATUS_PROGRESSION.index(current):
        raise InvalidTransition("report", current.value, requested.value)


class ReportService:
    """Service class for report operations."""

    def __init__(
        self,
        db: AsyncSession,
        redis_service: RedisService,
        notifier: NotificationService,
    ):
        self.db = db
        self.redis_service = redis_service
        self.notifier = notifier

    async def _get_report(self, report_id: UUID, for_update: bool = False) -> Report:
        stmt = select(Report).where(Report.report_id == report_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        report = result.scalar_one_or_none()
        if report is None:
            raise NotFound("report")
        return report

    async def _acquire_type_lock(self, report_type: ReportType) -> str:
        name = f"report:{report_type.value}"
        for _ in range(LOCK_ATTEMPTS):
            acquired, owner_id = await self.redis_service.acquire_lock(
                name, ttl=LOCK_TTL_SECONDS
            )
            if acquired:
                return owner_id
            await asyncio.sleep(LOCK_RETRY_DELAY)
        logger.warning(f"Could not acquire report lock for {report_type.value}")
        raise ResourceBusy()

    # ==================== Creation ====================

    async def create_report(
        self,
        reporter: User,
        report_type: ReportType,
        location: tuple[float, float],
        description: str | None = None,
        address: str | None = None,
        recent_window: timedelta | None = None,
        proximity_meters: float | None = None,
    ) -> Report:
        """File a report, deduplicating against recent nearby reports.

        Creation of reports of one type is serialized with a Redis lock so
        concurrent reports of the same incident see each other.

        Args:
            reporter: Reporting user
            report_type: Kind of problem
            location: (longitude, latitude)
            description: Optional details
            address: Optional street address
            recent_window: Dedup window, defaults to REPORT_DEDUP_WINDOW_HOURS
            proximity_meters: Dedup radius, defaults to REPORT_DEDUP_RADIUS_METERS

        Returns:
            The created report

        Raises:
            DuplicateReport: Reporter already has a nearby open report
            ResourceBusy: Type lock could not be acquired
        """
        if recent_window is None:
            recent_window = timedelta(hours=settings.REPORT_DEDUP_WINDOW_HOURS)
        if proximity_meters is None:
            proximity_meters = settings.REPORT_DEDUP_RADIUS_METERS

        owner_id = await self._acquire_type_lock(report_type)
        try:
            result = await self.db.execute(
                select(Report)
                .where(
                    Report.type == report_type,
                    Report.status.in_(OPEN_STATUSES),
                    Report.created_at >= utcnow() - recent_window,
                )
                .order_by(Report.created_at.asc())
                .with_for_update()
            )
            nearby = find_nearby(result.scalars().all(), location, proximity_meters)

            if any(r.user_id == reporter.user_id for r in nearby):
                raise DuplicateReport()

            verified_count = len(nearby) + 1
            auto_verify = len(nearby) >= settings.REPORT_AUTO_VERIFY_NEARBY

            longitude, latitude = location
            report = Report(
                user_id=reporter.user_id,
                type=report_type,
                description=description,
                address=address,
                longitude=longitude,
                latitude=latitude,
                status=ReportStatus.VERIFIED if auto_verify else ReportStatus.PENDING,
                bounty_amount=bounty_for_type(report_type),
                verified_count=verified_count,
                corroborates_id=nearby[0].report_id if nearby else None,
            )
            self.db.add(report)

            if auto_verify:
                for other in nearby:
                    if other.status == ReportStatus.PENDING:
                        other.status = ReportStatus.VERIFIED
                        other.verified_count = verified_count

            await self.db.execute(
                update(User)
                .where(User.user_id == reporter.user_id)
                .values(reputation=User.reputation + settings.REPUTATION_REPORT_POINTS)
            )
            await self.db.commit()
        finally:
            await self.redis_service.release_lock(f"report:{report_type.value}", owner_id)

        record_report_created(report_type.value, auto_verify)
        logger.info(
            f"Report {report.report_id} ({report_type.value}) filed by {reporter.user_id}, "
            f"{len(nearby)} nearby, status {report.status.value}"
        )
        return report

    # ==================== Status changes ====================

    async def resolve_report(
        self, report_id: UUID, admin: User, resolution: str | None = None
    ) -> Report:
        """Resolve a report and pay the bounty to the incident's first reporter.

        Raises:
            Forbidden: Actor is not an admin
            NotFound: Report does not exist
            InvalidTransition: Report is already RESOLVED or REJECTED
        """
        if not admin.is_admin:
            raise Forbidden("Admin privileges required")
        report = await self._get_report(report_id, for_update=True)
        if report.status in TERMINAL_STATUSES:
            raise InvalidTransition("report", report.status.value, ReportStatus.RESOLVED.value)

        now = utcnow()
        report.status = ReportStatus.RESOLVED
        report.resolved_at = now
        report.resolved_by = admin.user_id
        report.resolution = resolution

        pay_bounty = (
            not report.bounty_paid
            and report.bounty_amount > 0
            and report.corroborates_id is None
        )
        if pay_bounty:
            report.bounty_paid = True
            report.bounty_paid_at = now
            await self.db.execute(
                update(User)
                .where(User.user_id == report.user_id)
                .values(
                    reputation=User.reputation + settings.REPUTATION_RESOLVED_REPORT_BONUS
                )
            )
        await self.db.commit()

        logger.info(f"Report {report.report_id} resolved by {admin.user_id}, bounty paid={pay_bounty}")

        self._notify_status(report)
        if pay_bounty:
            self.notifier.dispatch(
                report.user_id,
                NotificationKind.BOUNTY,
                {"report_id": str(report.report_id), "amount": report.bounty_amount},
            )
        return report

    async def update_report_status(
        self,
        report_id: UUID,
        admin: User,
        requested: ReportStatus,
        resolution: str | None = None,
    ) -> Report:
        """Move a report forward, or reject it. RESOLVED goes through resolve_report."""
        if requested == ReportStatus.RESOLVED:
            return await self.resolve_report(report_id, admin, resolution)
        if not admin.is_admin:
            raise Forbidden("Admin privileges required")

        report = await self._get_report(report_id, for_update=True)
        previous = report.status
        check_status_transition(previous, requested)

        report.status = requested
        if resolution is not None:
            report.resolution = resolution
        if requested == ReportStatus.REJECTED:
            await self._promote_corroborators(report)
        await self.db.commit()

        logger.info(f"Report {report.report_id}: {previous.value} -> {requested.value}")
        self._notify_status(report)
        return report

    async def _promote_corroborators(self, rejected: Report) -> None:
        """Hand the incident lead of a rejected report to its earliest open corroborator.

        The new lead becomes bounty-eligible and the remaining corroborators
        point at it.
        """
        result = await self.db.execute(
            select(Report)
            .where(
                Report.corroborates_id == rejected.report_id,
                Report.status.in_(OPEN_STATUSES),
            )
            .order_by(Report.created_at.asc())
            .with_for_update()
        )
        followers = list(result.scalars().all())
        if not followers:
            return

        lead, rest = followers[0], followers[1:]
        lead.corroborates_id = None
        for other in rest:
            other.corroborates_id = lead.report_id
        logger.info(
            f"Report {lead.report_id} now leads the incident of rejected report "
            f"{rejected.report_id} ({len(rest)} corroborating)"
        )

    def _notify_status(self, report: Report) -> None:
        self.notifier.dispatch(
            report.user_id,
            NotificationKind.REPORT_UPDATE,
            {"report_id": str(report.report_id), "status": report.status.value},
        )

    # ==================== Queries ====================

    async def get_report(self, report_id: UUID, actor: User) -> Report:
        result = await self.db.execute(
            select(Report)
            .options(selectinload(Report.reporter))
            .where(Report.report_id == report_id)
        )
        report = result.scalar_one_or_none()
        if report is None:
            raise NotFound("report")
        if report.user_id != actor.user_id and not actor.is_admin:
            raise Forbidden("Access denied")
        return report

    async def list_reports(
        self,
        user_id: UUID | None = None,
        report_type: ReportType | None = None,
        status: ReportStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Report], int]:
        """List reports newest first, optionally for one reporter.

        Returns:
            Tuple of (reports list, total count)
        """
        filters = []
        if user_id is not None:
            filters.append(Report.user_id == user_id)
        if report_type is not None:
            filters.append(Report.type == report_type)
        if status is not None:
            filters.append(Report.status == status)

        count_result = await self.db.execute(
            select(func.count(Report.report_id)).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Report)
            .options(selectinload(Report.reporter))
            .where(*filters)
            .order_by(Report.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_reporter_stats(self, user_id: UUID) -> dict[str, Any]:
        """Totals for a reporter: reports filed, verified or resolved, bounty earned."""
        total_result = await self.db.execute(
            select(func.count(Report.report_id)).where(Report.user_id == user_id)
        )
        verified_result = await self.db.execute(
            select(func.count(Report.report_id)).where(
                Report.user_id == user_id,
                Report.status.in_((ReportStatus.VERIFIED, ReportStatus.RESOLVED)),
            )
        )
        bounty_result = await self.db.execute(
            select(func.coalesce(func.sum(Report.bounty_amount), 0)).where(
                Report.user_id == user_id,
                Report.bounty_paid.is_(True),
            )
        )
        return {
            "total": total_result.scalar_one(),
            "verified": verified_result.scalar_one(),
            "bounty_earned": int(bounty_result.scalar_one()),
        }
