"""Tests for vendor discovery, registration and catalog management."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from maji.core.errors import Forbidden, NotFound, VendorAlreadyRegistered
from maji.models import Product, Rating, Vendor
from maji.models.enums import OrderStatus, UserRole
from maji.models.vendor import vendor_zones
from maji.services.vendor_service import VendorListing, VendorService, rank_listings

KISSY_ROAD = (-13.2317, 8.4657)
# About 11 m north of KISSY_ROAD
NEXT_DOOR = (-13.2317, 8.4658)
# About 1.1 km north of KISSY_ROAD
UP_THE_HILL = (-13.2317, 8.4757)
BO = (-11.7383, 7.9647)


def listing(rating=0.0, location=None, prices=()):
    vendor = SimpleNamespace(
        rating=rating,
        longitude=location[0] if location else None,
        latitude=location[1] if location else None,
    )
    return VendorListing(vendor=vendor, products=[SimpleNamespace(price=p) for p in prices])


@pytest.fixture
def service(db_session):
    return VendorService(db_session)


async def deliver_to(db_session, vendor, zone):
    await db_session.execute(
        vendor_zones.insert().values(vendor_id=vendor.vendor_id, zone_id=zone.zone_id)
    )
    await db_session.commit()


class TestRankListings:
    def test_best_rated_first_by_default(self):
        low, high = listing(rating=3.5), listing(rating=4.8)
        assert rank_listings([low, high]) == [high, low]

    def test_radius_drops_far_and_unlocated_vendors(self):
        close = listing(location=NEXT_DOOR)
        hill = listing(location=UP_THE_HILL)
        far = listing(location=BO)
        unlocated = listing()

        ranked = rank_listings(
            [hill, far, unlocated, close], near=KISSY_ROAD, radius_meters=5000, sort="distance"
        )

        assert ranked == [close, hill]
        assert close.distance == 11
        assert 1100 < hill.distance < 1125

    def test_radius_is_inclusive(self):
        hill = listing(location=UP_THE_HILL)
        rank_listings([hill], near=KISSY_ROAD, radius_meters=5000)

        assert rank_listings([hill], near=KISSY_ROAD, radius_meters=hill.distance) == [hill]

    def test_price_sort_puts_empty_catalogs_last(self):
        cheap = listing(prices=(3000, 9000))
        dear = listing(prices=(5000,))
        empty = listing()

        assert rank_listings([empty, dear, cheap], sort="price") == [cheap, dear, empty]

    def test_distance_sort_without_location_falls_back_to_rating(self):
        low, high = listing(rating=2.0), listing(rating=4.0)
        assert rank_listings([low, high], sort="distance") == [high, low]


class TestListVendors:
    @pytest.mark.asyncio
    async def test_only_verified_vendors_with_available_products(
        self, service, db_session, make_user, vendor, product
    ):
        db_session.add(
            Product(vendor_id=vendor.vendor_id, name="Jerry can", unit="can", price=4000,
                    is_available=False)
        )
        other = await make_user(UserRole.VENDOR)
        db_session.add(
            Vendor(user_id=other.user_id, business_name="Pending Water", phone=other.phone,
                   is_active=True, is_verified=False)
        )
        await db_session.commit()

        listings, total = await service.list_vendors()

        assert total == 1
        assert listings[0].vendor.vendor_id == vendor.vendor_id
        assert [p.product_id for p in listings[0].products] == [product.product_id]

    @pytest.mark.asyncio
    async def test_zone_filter(self, service, db_session, vendor, zone):
        _, total = await service.list_vendors(zone_id=zone.zone_id)
        assert total == 0

        await deliver_to(db_session, vendor, zone)
        listings, total = await service.list_vendors(zone_id=zone.zone_id)

        assert total == 1
        assert listings[0].vendor.vendor_id == vendor.vendor_id

    @pytest.mark.asyncio
    async def test_min_rating_filter(self, service, db_session, vendor):
        vendor.rating = 3.9
        await db_session.commit()

        assert (await service.list_vendors(min_rating=4.0))[1] == 0
        assert (await service.list_vendors(min_rating=3.5))[1] == 1

    @pytest.mark.asyncio
    async def test_near_reports_distance(self, service, db_session, vendor):
        vendor.longitude, vendor.latitude = KISSY_ROAD
        await db_session.commit()

        listings, _ = await service.list_vendors(near=NEXT_DOOR, sort="distance")
        assert listings[0].distance == 11

        _, total = await service.list_vendors(near=BO)
        assert total == 0

    @pytest.mark.asyncio
    async def test_pagination_keeps_total(self, service, db_session, make_user, vendor):
        for n in range(2):
            owner = await make_user(UserRole.VENDOR)
            db_session.add(
                Vendor(user_id=owner.user_id, business_name=f"Water {n}", phone=owner.phone,
                       is_active=True, is_verified=True)
            )
        await db_session.commit()

        page, total = await service.list_vendors(skip=1, limit=1)

        assert total == 3
        assert len(page) == 1


class TestGetVendor:
    @pytest.mark.asyncio
    async def test_reviews_summary(self, service, db_session, make_order, customer, vendor):
        for score in (5, 5, 3):
            order = await make_order(OrderStatus.COMPLETED)
            db_session.add(
                Rating(order_id=order.order_id, user_id=customer.user_id,
                       vendor_id=vendor.vendor_id, score=score, comment="Fast delivery")
            )
        vendor.rating, vendor.rating_count = 4.3, 3
        await db_session.commit()

        found, reviews = await service.get_vendor(vendor.vendor_id)

        assert found.vendor_id == vendor.vendor_id
        assert len(found.products) == 1
        assert reviews["average"] == 4.3
        assert reviews["count"] == 3
        assert reviews["distribution"] == {1: 0, 2: 0, 3: 1, 4: 0, 5: 2}
        assert len(reviews["recent"]) == 3
        assert reviews["recent"][0]["reviewer_name"] == customer.name
        assert reviews["recent"][0]["comment"] == "Fast delivery"

    @pytest.mark.asyncio
    async def test_no_reviews(self, service, vendor):
        _, reviews = await service.get_vendor(vendor.vendor_id)

        assert reviews["distribution"] == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
        assert reviews["recent"] == []

    @pytest.mark.asyncio
    async def test_unknown_vendor(self, service):
        with pytest.raises(NotFound) as exc_info:
            await service.get_vendor(uuid4())
        assert exc_info.value.entity == "vendor"


class TestRegisterVendor:
    @pytest.mark.asyncio
    async def test_registers_unverified_and_promotes_owner(self, service, customer, zone):
        vendor = await service.register_vendor(
            customer,
            business_name="Kissy Springs",
            phone="076 123 456",
            location=KISSY_ROAD,
            delivery_zone_ids=[zone.zone_id],
            delivery_fee=1500,
        )

        assert vendor.is_verified is False
        assert vendor.phone == "+23276123456"
        assert (vendor.longitude, vendor.latitude) == KISSY_ROAD
        assert [z.zone_id for z in vendor.delivery_zones] == [zone.zone_id]
        assert customer.role == UserRole.VENDOR
        # Hidden until verified
        assert (await service.list_vendors())[1] == 0

    @pytest.mark.asyncio
    async def test_admin_keeps_role(self, service, admin, zone):
        await service.register_vendor(
            admin, business_name="Depot", phone="076123456", location=KISSY_ROAD,
            delivery_zone_ids=[zone.zone_id],
        )
        assert admin.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_only_one_profile_per_user(self, service, vendor_owner, vendor, zone):
        with pytest.raises(VendorAlreadyRegistered):
            await service.register_vendor(
                vendor_owner, business_name="Second", phone="076123456",
                location=KISSY_ROAD, delivery_zone_ids=[zone.zone_id],
            )

    @pytest.mark.asyncio
    async def test_unknown_zone(self, service, customer, zone):
        with pytest.raises(NotFound) as exc_info:
            await service.register_vendor(
                customer, business_name="Kissy Springs", phone="076123456",
                location=KISSY_ROAD, delivery_zone_ids=[zone.zone_id, uuid4()],
            )
        assert exc_info.value.entity == "zone"


class TestUpdateVendor:
    @pytest.mark.asyncio
    async def test_owner_updates_profile(self, service, vendor_owner, vendor, zone):
        updated = await service.update_vendor(
            vendor.vendor_id,
            vendor_owner,
            {
                "business_name": None,
                "delivery_fee": 2500,
                "address": "4 Fourah Bay Road",
                "location": UP_THE_HILL,
                "delivery_zones": [zone.zone_id],
            },
        )

        assert updated.business_name == "Aqua Salone Water"
        assert updated.delivery_fee == 2500
        assert updated.address == "4 Fourah Bay Road"
        assert (updated.longitude, updated.latitude) == UP_THE_HILL
        assert [z.zone_id for z in updated.delivery_zones] == [zone.zone_id]

    @pytest.mark.asyncio
    async def test_clearable_fields_accept_null(self, service, db_session, vendor_owner, vendor):
        vendor.description = "Borehole water"
        await db_session.commit()

        updated = await service.update_vendor(vendor.vendor_id, vendor_owner, {"description": None})
        assert updated.description is None

    @pytest.mark.asyncio
    async def test_stranger_forbidden(self, service, customer, vendor):
        with pytest.raises(Forbidden):
            await service.update_vendor(vendor.vendor_id, customer, {"delivery_fee": 0})

    @pytest.mark.asyncio
    async def test_admin_allowed(self, service, admin, vendor):
        updated = await service.update_vendor(vendor.vendor_id, admin, {"min_order": 5000})
        assert updated.min_order == 5000


class TestCatalog:
    @pytest.mark.asyncio
    async def test_owner_adds_product(self, service, vendor_owner, vendor):
        product = await service.add_product(
            vendor.vendor_id, vendor_owner, name="Jerry can (20L)", unit="can", price=3000
        )

        assert product.vendor_id == vendor.vendor_id
        assert product.is_available is True
        found, _ = await service.get_vendor(vendor.vendor_id)
        assert product.product_id in {p.product_id for p in found.products}

    @pytest.mark.asyncio
    async def test_stranger_cannot_add_product(self, service, customer, vendor):
        with pytest.raises(Forbidden):
            await service.add_product(vendor.vendor_id, customer, name="x", unit="bag", price=1)

    @pytest.mark.asyncio
    async def test_update_product(self, service, vendor_owner, vendor, product):
        updated = await service.update_product(
            vendor.vendor_id, product.product_id, vendor_owner,
            {"price": 5500, "name": None, "is_available": False},
        )

        assert updated.price == 5500
        assert updated.name == "Sachet water (bag of 30)"
        assert updated.is_available is False

    @pytest.mark.asyncio
    async def test_product_of_another_vendor(self, service, db_session, make_user, product):
        owner = await make_user(UserRole.VENDOR)
        other = Vendor(user_id=owner.user_id, business_name="Other", phone=owner.phone)
        db_session.add(other)
        await db_session.commit()

        with pytest.raises(NotFound) as exc_info:
            await service.update_product(other.vendor_id, product.product_id, owner, {"price": 1})
        assert exc_info.value.entity == "product"

    @pytest.mark.asyncio
    async def test_delete_unordered_product(self, service, db_session, vendor_owner, vendor, product):
        product_id = product.product_id
        assert await service.delete_product(vendor.vendor_id, product_id, vendor_owner)

        db_session.expunge_all()
        assert await db_session.get(Product, product_id) is None

    @pytest.mark.asyncio
    async def test_ordered_product_is_retired(
        self, service, db_session, make_order, vendor_owner, vendor, product
    ):
        await make_order(OrderStatus.COMPLETED)

        deleted = await service.delete_product(vendor.vendor_id, product.product_id, vendor_owner)

        assert deleted is False
        await db_session.refresh(product)
        assert product.is_available is False
