"""Alert service for scout alerts and community feedback."""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maji.core.config import settings
from maji.core.errors import (
    AlreadyVoted,
    Forbidden,
    InvalidTransition,
    NotFound,
    ScoutNotVerified,
)
from maji.middleware.metrics import record_alert_created
from maji.models.alert import Alert, AlertFeedback
from maji.models.base import utcnow
from maji.models.enums import AlertStatus, AlertType, NotificationKind, UserRole
from maji.models.user import User
from maji.models.zone import Zone
from maji.services.notification_service import NotificationService
from maji.services.scoring import calculate_confidence, running_mean

logger = logging.getLogger(__name__)


def compute_expires_at(
    eta: datetime | None, duration: int | None, now: datetime | None = None
) -> datetime | None:
    """Work out when an alert stops being relevant.

    Args:
        eta: Expected start of the event
        duration: Expected duration in minutes
        now: Reference time for alerts without an eta

    Returns:
        eta + duration (default duration when eta is given alone),
        now + duration when only duration is given, otherwise None
    """
    if eta is not None:
        minutes = duration or settings.ALERT_DEFAULT_DURATION_MINUTES
        return eta + timedelta(minutes=minutes)
    if duration:
        return (now or utcnow()) + timedelta(minutes=duration)
    return None


def apply_feedback(alert: Alert, accurate: bool) -> None:
    """Fold one feedback vote into the alert's running score.

    Verification is sticky: once the score and vote count reach the
    thresholds the alert stays verified, even if later votes pull the score
    back down.
    """
    value = 1.0 if accurate else 0.0
    alert.feedback_score = running_mean(alert.feedback_score, alert.feedback_count, value)
    alert.feedback_count += 1
    if (
        alert.feedback_score >= settings.ALERT_VERIFY_MIN_SCORE
        and alert.feedback_count >= settings.ALERT_VERIFY_MIN_FEEDBACK
    ):
        alert.is_verified = True


class AlertService:
    """Service class for alert operations."""

    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    async def _get_alert(self, alert_id: UUID, for_update: bool = False) -> Alert:
        stmt = (
            select(Alert)
            .options(selectinload(Alert.zone), selectinload(Alert.scout))
            .where(Alert.alert_id == alert_id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        alert = result.scalar_one_or_none()
        if alert is None:
            raise NotFound("alert")
        return alert

    async def _award_reputation(self, user_id: UUID, points: int) -> None:
        await self.db.execute(
            update(User)
            .where(User.user_id == user_id)
            .values(reputation=User.reputation + points)
        )

    async def create_alert(
        self,
        scout: User,
        zone_id: UUID,
        alert_type: AlertType,
        message: str | None = None,
        eta: datetime | None = None,
        duration: int | None = None,
    ) -> tuple[Alert, int]:
        """Post a new alert for a zone.

        Args:
            scout: Posting user (SCOUT or ADMIN)
            zone_id: Target zone
            alert_type: Kind of alert
            message: Optional free text
            eta: Expected start (naive UTC)
            duration: Expected duration in minutes

        Returns:
            Tuple of (alert, reputation points earned)

        Raises:
            NotFound: Zone does not exist
            Forbidden: User is neither SCOUT nor ADMIN
            ScoutNotVerified: SCOUT account is not verified
        """
        result = await self.db.execute(select(Zone).where(Zone.zone_id == zone_id))
        zone = result.scalar_one_or_none()
        if zone is None:
            raise NotFound("zone")

        if scout.role not in (UserRole.SCOUT, UserRole.ADMIN):
            raise Forbidden("Only scouts can post alerts")
        if scout.role == UserRole.SCOUT and not scout.is_verified:
            raise ScoutNotVerified()

        alert = Alert(
            zone_id=zone.zone_id,
            scout_id=scout.user_id,
            type=alert_type,
            message=message,
            eta=eta,
            duration=duration,
            expires_at=compute_expires_at(eta, duration),
            confidence=calculate_confidence(scout.reputation),
            status=AlertStatus.ACTIVE,
        )
        self.db.add(alert)

        points = settings.REPUTATION_ALERT_POINTS
        await self._award_reputation(scout.user_id, points)
        await self.db.commit()

        record_alert_created(alert_type.value)
        logger.info(
            f"Alert {alert.alert_id} ({alert_type.value}) posted in zone {zone.slug} "
            f"by {scout.user_id}, confidence {alert.confidence}"
        )

        self.notifier.broadcast_zone(
            zone.zone_id,
            NotificationKind.ALERT,
            {
                "alert_id": str(alert.alert_id),
                "zone": zone.name,
                "type": alert_type.value,
                "message": message,
                "eta": eta.isoformat() if eta else None,
                "confidence": alert.confidence,
            },
        )
        return alert, points

    async def submit_feedback(
        self,
        alert_id: UUID,
        voter: User,
        accurate: bool,
        actual_start_time: datetime | None = None,
        actual_duration: int | None = None,
        comment: str | None = None,
    ) -> Alert:
        """Record one user's accuracy vote on an alert.

        Each user votes at most once per alert and scouts cannot vote on their
        own alerts. Accurate votes award the posting scout reputation.

        Args:
            alert_id: Alert UUID
            voter: Voting user
            accurate: Whether the alert matched what happened
            actual_start_time: When supply actually started (naive UTC)
            actual_duration: How long supply actually lasted, in minutes
            comment: Optional free text

        Raises:
            NotFound: Alert does not exist
            Forbidden: Voter posted the alert
            AlreadyVoted: Voter already gave feedback on this alert
        """
        alert = await self._get_alert(alert_id, for_update=True)
        if alert.scout_id == voter.user_id:
            raise Forbidden("You cannot give feedback on your own alert")

        existing = await self.db.execute(
            select(AlertFeedback.feedback_id).where(
                AlertFeedback.alert_id == alert.alert_id,
                AlertFeedback.user_id == voter.user_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise AlreadyVoted()

        self.db.add(
            AlertFeedback(
                alert_id=alert.alert_id,
                user_id=voter.user_id,
                accurate=accurate,
                actual_start_time=actual_start_time,
                actual_duration=actual_duration,
                comment=comment,
            )
        )
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise AlreadyVoted()

        was_verified = alert.is_verified
        apply_feedback(alert, accurate)
        if accurate:
            await self._award_reputation(
                alert.scout_id, settings.REPUTATION_ACCURATE_ALERT_POINTS
            )

        await self.db.commit()

        if alert.is_verified and not was_verified:
            logger.info(f"Alert {alert.alert_id} verified by community feedback")
        return alert

    async def cancel_alert(self, alert_id: UUID, actor: User) -> Alert:
        alert = await self._get_alert(alert_id, for_update=True)
        if alert.scout_id != actor.user_id and not actor.is_admin:
            raise Forbidden("You can only cancel your own alerts")
        if alert.status != AlertStatus.ACTIVE:
            raise InvalidTransition("alert", alert.status.value, AlertStatus.CANCELLED.value)

        alert.status = AlertStatus.CANCELLED
        await self.db.commit()
        logger.info(f"Alert {alert.alert_id} cancelled by {actor.user_id}")
        return alert

    async def get_alert(self, alert_id: UUID) -> Alert:
        return await self._get_alert(alert_id)

    async def list_alerts(
        self,
        actor: User | None = None,
        zone_id: UUID | None = None,
        alert_type: AlertType | None = None,
        status: AlertStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Alert], int]:
        """List alerts, newest first.

        Without an explicit zone the actor's primary zone is used. Without an
        explicit status only ACTIVE alerts are returned.

        Returns:
            Tuple of (alerts list, total count)
        """
        if zone_id is None and actor is not None:
            zone_id = actor.primary_zone_id

        filters = [Alert.status == (status or AlertStatus.ACTIVE)]
        if zone_id is not None:
            filters.append(Alert.zone_id == zone_id)
        if alert_type is not None:
            filters.append(Alert.type == alert_type)

        count_result = await self.db.execute(
            select(func.count(Alert.alert_id)).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Alert)
            .options(selectinload(Alert.zone), selectinload(Alert.scout))
            .where(*filters)
            .order_by(Alert.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total
