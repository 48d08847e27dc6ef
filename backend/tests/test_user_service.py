"""Tests for the current user's profile."""

from uuid import uuid4

import pytest

from maji.core.errors import NotFound
from maji.models import Report
from maji.models.enums import ReportType, UserRole
from maji.services.user_service import UserService


@pytest.fixture
def service(db_session):
    return UserService(db_session)


class TestProfile:
    @pytest.mark.asyncio
    async def test_stats_count_own_activity(
        self, service, db_session, make_user, make_order, make_alert, customer, zone
    ):
        await make_order()
        await make_order()
        db_session.add(
            Report(user_id=customer.user_id, type=ReportType.LEAK, longitude=-13.2317,
                   latitude=8.4657)
        )
        await db_session.commit()
        scout = await make_user(UserRole.SCOUT)
        await make_alert(zone, scout)

        user, stats = await service.get_profile(customer.user_id)

        assert user.user_id == customer.user_id
        assert stats == {"orders_count": 2, "reports_count": 1, "alerts_count": 0}
        assert (await service.get_stats(scout.user_id))["alerts_count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(NotFound) as exc_info:
            await service.get_profile(uuid4())
        assert exc_info.value.entity == "user"


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_sets_name_and_zone(self, service, customer, zone):
        user = await service.update_profile(
            customer.user_id, name="Fatmata Kamara", primary_zone_id=zone.zone_id
        )

        assert user.name == "Fatmata Kamara"
        assert user.primary_zone.zone_id == zone.zone_id

    @pytest.mark.asyncio
    async def test_none_leaves_fields_unchanged(self, service, customer, zone):
        await service.update_profile(customer.user_id, name="Fatmata", primary_zone_id=zone.zone_id)

        user = await service.update_profile(customer.user_id)

        assert user.name == "Fatmata"
        assert user.primary_zone_id == zone.zone_id

    @pytest.mark.asyncio
    async def test_unknown_zone(self, service, customer):
        with pytest.raises(NotFound) as exc_info:
            await service.update_profile(customer.user_id, primary_zone_id=uuid4())
        assert exc_info.value.entity == "zone"
