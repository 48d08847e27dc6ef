"""Tests for report deduplication, verification and bounties."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from maji.core.errors import DuplicateReport, Forbidden, InvalidTransition, NotFound, ResourceBusy
from maji.models import User
from maji.models.enums import NotificationKind, ReportStatus, ReportType, UserRole
from maji.services import report_service
from maji.services.report_service import (
    ReportService,
    bounty_for_type,
    check_status_transition,
    find_nearby,
)

KISSY_ROAD = (-13.2317, 8.4657)
# About 11 m north of KISSY_ROAD
NEXT_DOOR = (-13.2317, 8.4658)
# About 1.1 km north of KISSY_ROAD
UP_THE_HILL = (-13.2317, 8.4757)


@pytest.fixture
def service(db_session, mock_redis_service, mock_notifier):
    return ReportService(db_session, mock_redis_service, mock_notifier)


class TestHelpers:
    def test_bounty_by_type(self):
        assert bounty_for_type(ReportType.BURST_PIPE) == 30000
        assert bounty_for_type(ReportType.OTHER) == 5000

    def test_find_nearby_is_strict_and_ordered(self):
        first = SimpleNamespace(longitude=KISSY_ROAD[0], latitude=KISSY_ROAD[1])
        second = SimpleNamespace(longitude=NEXT_DOOR[0], latitude=NEXT_DOOR[1])
        far = SimpleNamespace(longitude=UP_THE_HILL[0], latitude=UP_THE_HILL[1])

        assert find_nearby([first, far, second], KISSY_ROAD, 100.0) == [first, second]
        # Zero radius excludes even the exact same point
        assert find_nearby([first], KISSY_ROAD, 0.0) == []

    @pytest.mark.parametrize(
        "current,requested",
        [
            (ReportStatus.PENDING, ReportStatus.VERIFIED),
            (ReportStatus.PENDING, ReportStatus.IN_PROGRESS),
            (ReportStatus.VERIFIED, ReportStatus.FORWARDED),
            (ReportStatus.FORWARDED, ReportStatus.REJECTED),
        ],
    )
    def test_allowed_status_changes(self, current, requested):
        check_status_transition(current, requested)

    @pytest.mark.parametrize(
        "current,requested",
        [
            (ReportStatus.VERIFIED, ReportStatus.PENDING),
            (ReportStatus.IN_PROGRESS, ReportStatus.FORWARDED),
            (ReportStatus.VERIFIED, ReportStatus.VERIFIED),
            (ReportStatus.RESOLVED, ReportStatus.REJECTED),
            (ReportStatus.REJECTED, ReportStatus.VERIFIED),
        ],
    )
    def test_rejected_status_changes(self, current, requested):
        with pytest.raises(InvalidTransition):
            check_status_transition(current, requested)


class TestCreateReport:
    @pytest.mark.asyncio
    async def test_single_report_is_pending(self, service, db_session, customer, mock_redis_service):
        report = await service.create_report(customer, ReportType.LEAK, KISSY_ROAD, "Pipe leaking")

        assert report.status == ReportStatus.PENDING
        assert report.verified_count == 1
        assert report.bounty_amount == 20000
        assert report.corroborates_id is None

        mock_redis_service.acquire_lock.assert_awaited()
        mock_redis_service.release_lock.assert_awaited_once_with("report:LEAK", "owner")

        refreshed = await db_session.get(User, customer.user_id, populate_existing=True)
        assert refreshed.reputation == 5

    @pytest.mark.asyncio
    async def test_three_reporters_verify_incident(self, service, make_user):
        reporters = [await make_user() for _ in range(3)]

        first = await service.create_report(reporters[0], ReportType.LEAK, KISSY_ROAD)
        second = await service.create_report(reporters[1], ReportType.LEAK, NEXT_DOOR)
        assert second.status == ReportStatus.PENDING
        assert second.verified_count == 2

        third = await service.create_report(reporters[2], ReportType.LEAK, KISSY_ROAD)

        for report in (first, second, third):
            assert report.status == ReportStatus.VERIFIED
            assert report.verified_count == 3
        assert second.corroborates_id == first.report_id
        assert third.corroborates_id == first.report_id

    @pytest.mark.asyncio
    async def test_same_reporter_duplicate(self, service, customer):
        await service.create_report(customer, ReportType.LEAK, KISSY_ROAD)
        with pytest.raises(DuplicateReport):
            await service.create_report(customer, ReportType.LEAK, NEXT_DOOR)

    @pytest.mark.asyncio
    async def test_other_type_or_place_is_independent(self, service, customer):
        await service.create_report(customer, ReportType.LEAK, KISSY_ROAD)

        burst = await service.create_report(customer, ReportType.BURST_PIPE, KISSY_ROAD)
        far = await service.create_report(customer, ReportType.LEAK, UP_THE_HILL)

        assert burst.corroborates_id is None
        assert far.corroborates_id is None
        assert far.verified_count == 1

    @pytest.mark.asyncio
    async def test_lock_busy(self, service, customer, mock_redis_service, monkeypatch):
        monkeypatch.setattr(report_service, "LOCK_RETRY_DELAY", 0)
        mock_redis_service.acquire_lock.return_value = (False, "someone-else")

        with pytest.raises(ResourceBusy):
            await service.create_report(customer, ReportType.LEAK, KISSY_ROAD)
        assert mock_redis_service.acquire_lock.await_count == report_service.LOCK_ATTEMPTS
        mock_redis_service.release_lock.assert_not_awaited()


class TestResolveReport:
    @pytest.mark.asyncio
    async def test_bounty_only_for_first_reporter(self, service, db_session, make_user, admin, mock_notifier):
        first_reporter = await make_user()
        second_reporter = await make_user()
        first = await service.create_report(first_reporter, ReportType.LEAK, KISSY_ROAD)
        second = await service.create_report(second_reporter, ReportType.LEAK, NEXT_DOOR)

        second = await service.resolve_report(second.report_id, admin, "Duplicate of first")
        assert second.status == ReportStatus.RESOLVED
        assert second.bounty_paid is False

        first = await service.resolve_report(first.report_id, admin, "Pipe replaced")
        assert first.bounty_paid is True
        assert first.bounty_paid_at is not None
        assert first.resolved_by == admin.user_id

        refreshed = await db_session.get(User, first_reporter.user_id, populate_existing=True)
        assert refreshed.reputation == 5 + 15

        kinds = [c.args[1] for c in mock_notifier.dispatch.call_args_list]
        assert kinds.count(NotificationKind.BOUNTY) == 1
        assert kinds.count(NotificationKind.REPORT_UPDATE) == 2

        stats = await service.get_reporter_stats(first_reporter.user_id)
        assert stats == {"total": 1, "verified": 1, "bounty_earned": 20000}

    @pytest.mark.asyncio
    async def test_rejected_lead_hands_bounty_to_next_reporter(self, service, make_user, admin):
        first = await service.create_report(await make_user(), ReportType.LEAK, KISSY_ROAD)
        second = await service.create_report(await make_user(), ReportType.LEAK, NEXT_DOOR)
        third = await service.create_report(await make_user(), ReportType.LEAK, KISSY_ROAD)
        assert second.corroborates_id == first.report_id
        assert third.corroborates_id == first.report_id

        await service.update_report_status(first.report_id, admin, ReportStatus.REJECTED)

        assert second.corroborates_id is None
        assert third.corroborates_id == second.report_id

        second = await service.resolve_report(second.report_id, admin, "Pipe replaced")
        assert second.bounty_paid is True
        third = await service.resolve_report(third.report_id, admin)
        assert third.bounty_paid is False

    @pytest.mark.asyncio
    async def test_rejecting_a_follower_keeps_the_lead(self, service, make_user, admin):
        first = await service.create_report(await make_user(), ReportType.LEAK, KISSY_ROAD)
        second = await service.create_report(await make_user(), ReportType.LEAK, NEXT_DOOR)

        await service.update_report_status(second.report_id, admin, ReportStatus.REJECTED)

        assert first.corroborates_id is None
        assert second.corroborates_id == first.report_id

    @pytest.mark.asyncio
    async def test_resolve_twice_fails(self, service, customer, admin):
        report = await service.create_report(customer, ReportType.FLOOD, KISSY_ROAD)
        await service.resolve_report(report.report_id, admin)
        with pytest.raises(InvalidTransition):
            await service.resolve_report(report.report_id, admin)

    @pytest.mark.asyncio
    async def test_non_admin_cannot_resolve(self, service, customer):
        report = await service.create_report(customer, ReportType.FLOOD, KISSY_ROAD)
        with pytest.raises(Forbidden):
            await service.resolve_report(report.report_id, customer)

    @pytest.mark.asyncio
    async def test_status_update_then_reject(self, service, customer, admin):
        report = await service.create_report(customer, ReportType.BLOCKED_DRAIN, KISSY_ROAD)

        report = await service.update_report_status(report.report_id, admin, ReportStatus.FORWARDED)
        assert report.status == ReportStatus.FORWARDED

        with pytest.raises(InvalidTransition):
            await service.update_report_status(report.report_id, admin, ReportStatus.VERIFIED)

        report = await service.update_report_status(
            report.report_id, admin, ReportStatus.REJECTED, "Private property"
        )
        assert report.status == ReportStatus.REJECTED
        assert report.resolution == "Private property"
        assert report.bounty_paid is False


class TestQueries:
    @pytest.mark.asyncio
    async def test_get_report_access(self, service, customer, admin, make_user):
        report = await service.create_report(customer, ReportType.BROKEN_TAP, KISSY_ROAD)

        assert (await service.get_report(report.report_id, customer)).report_id == report.report_id
        assert (await service.get_report(report.report_id, admin)).report_id == report.report_id

        stranger = await make_user()
        with pytest.raises(Forbidden):
            await service.get_report(report.report_id, stranger)
        with pytest.raises(NotFound):
            await service.get_report(uuid4(), admin)

    @pytest.mark.asyncio
    async def test_list_reports(self, service, customer, make_user):
        other = await make_user(UserRole.CITIZEN)
        await service.create_report(customer, ReportType.LEAK, KISSY_ROAD)
        await service.create_report(other, ReportType.FLOOD, UP_THE_HILL)

        reports, total = await service.list_reports()
        assert total == 2

        reports, total = await service.list_reports(user_id=customer.user_id)
        assert total == 1
        assert reports[0].type == ReportType.LEAK

        reports, total = await service.list_reports(report_type=ReportType.FLOOD)
        assert total == 1
