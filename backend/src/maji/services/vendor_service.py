"""Vendor service for marketplace discovery and catalog management."""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maji.core.config import settings
from maji.core.errors import Forbidden, NotFound, VendorAlreadyRegistered
from maji.models.enums import UserRole
from maji.models.order import OrderItem
from maji.models.product import Product
from maji.models.rating import Rating
from maji.models.user import User
from maji.models.vendor import Vendor, vendor_zones
from maji.models.zone import Zone
from maji.services.auth_service import normalize_phone
from maji.services.scoring import calculate_distance

logger = logging.getLogger(__name__)

VENDOR_FIELDS = ("business_name", "description", "address", "delivery_fee", "min_order")
PRODUCT_FIELDS = ("name", "description", "unit", "price", "is_available")
# Fields a partial update may clear by sending null
CLEARABLE_FIELDS = ("description", "address")


def apply_changes(target: Any, changes: dict[str, Any], fields: tuple[str, ...]) -> None:
    for field in fields:
        if field not in changes:
            continue
        if changes[field] is None and field not in CLEARABLE_FIELDS:
            continue
        setattr(target, field, changes[field])


@dataclass
class VendorListing:
    """A vendor as shown in search results."""

    vendor: Vendor
    products: list[Product]
    distance: int | None = None

    @property
    def min_price(self) -> float:
        return min((p.price for p in self.products), default=float("inf"))


def rank_listings(
    listings: list[VendorListing],
    near: tuple[float, float] | None = None,
    radius_meters: float | None = None,
    sort: str = "rating",
) -> list[VendorListing]:
    """Apply the distance filter and ordering to vendor listings.

    Args:
        listings: Candidate vendors
        near: Searcher's (longitude, latitude); enables distance and radius
        radius_meters: Inclusive radius, defaults to VENDOR_SEARCH_RADIUS_METERS
        sort: "rating" (best first), "distance" (closest first, needs near)
            or "price" (cheapest available product first)

    Returns:
        Filtered and sorted listings. Vendors without a location are dropped
        when near is given.
    """
    if near is not None:
        if radius_meters is None:
            radius_meters = settings.VENDOR_SEARCH_RADIUS_METERS
        located = []
        for listing in listings:
            vendor = listing.vendor
            if vendor.longitude is None or vendor.latitude is None:
                continue
            listing.distance = round(
                calculate_distance(near, (vendor.longitude, vendor.latitude))
            )
            if listing.distance <= radius_meters:
                located.append(listing)
        listings = located

    if sort == "distance" and near is not None:
        return sorted(listings, key=lambda item: item.distance)
    if sort == "price":
        return sorted(listings, key=lambda item: item.min_price)
    return sorted(listings, key=lambda item: item.vendor.rating, reverse=True)


class VendorService:
    """Service class for vendor and product operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Loading ====================

    async def _get_vendor(self, vendor_id: UUID, for_update: bool = False) -> Vendor:
        stmt = (
            select(Vendor)
            .options(selectinload(Vendor.products), selectinload(Vendor.delivery_zones))
            .where(Vendor.vendor_id == vendor_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        vendor = result.scalar_one_or_none()
        if vendor is None:
            raise NotFound("vendor")
        return vendor

    async def _get_owned_vendor(self, vendor_id: UUID, actor: User) -> Vendor:
        vendor = await self._get_vendor(vendor_id, for_update=True)
        if vendor.user_id != actor.user_id and not actor.is_admin:
            raise Forbidden("You can only manage your own vendor profile")
        return vendor

    async def _load_zones(self, zone_ids: list[UUID]) -> list[Zone]:
        """Load zones by id.

        Raises:
            NotFound: Any of the zones does not exist
        """
        unique_ids = set(zone_ids)
        result = await self.db.execute(select(Zone).where(Zone.zone_id.in_(unique_ids)))
        zones = list(result.scalars().all())
        if len(zones) != len(unique_ids):
            raise NotFound("zone")
        return zones

    # ==================== Discovery ====================

    async def list_vendors(
        self,
        zone_id: UUID | None = None,
        min_rating: float | None = None,
        near: tuple[float, float] | None = None,
        radius_meters: float | None = None,
        sort: str = "rating",
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[VendorListing], int]:
        """List active, verified vendors with their available products.

        Args:
            zone_id: Only vendors delivering to this zone
            min_rating: Only vendors rated at least this
            near: Searcher's (longitude, latitude)
            radius_meters: Search radius around near
            sort: "rating", "distance" or "price"
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (listings page, total matching)
        """
        stmt = (
            select(Vendor)
            .options(selectinload(Vendor.products))
            .where(Vendor.is_active.is_(True), Vendor.is_verified.is_(True))
            .execution_options(populate_existing=True)
        )
        if zone_id is not None:
            stmt = stmt.join(vendor_zones, vendor_zones.c.vendor_id == Vendor.vendor_id).where(
                vendor_zones.c.zone_id == zone_id
            )
        if min_rating is not None:
            stmt = stmt.where(Vendor.rating >= min_rating)

        result = await self.db.execute(stmt)
        listings = [
            VendorListing(vendor=v, products=[p for p in v.products if p.is_available])
            for v in result.scalars().all()
        ]
        listings = rank_listings(listings, near, radius_meters, sort)
        return listings[skip : skip + limit], len(listings)

    async def get_vendor(self, vendor_id: UUID) -> tuple[Vendor, dict[str, Any]]:
        """Get a vendor with its full catalog and review summary.

        Returns:
            Tuple of (vendor, reviews) where reviews holds the rating
            average, count, 1-5 score distribution and the most recent
            reviews with reviewer names

        Raises:
            NotFound: Vendor does not exist
        """
        vendor = await self._get_vendor(vendor_id)

        distribution = {score: 0 for score in range(1, 6)}
        result = await self.db.execute(
            select(Rating.score, func.count(Rating.rating_id))
            .where(Rating.vendor_id == vendor_id)
            .group_by(Rating.score)
        )
        for score, count in result.all():
            distribution[score] = count

        result = await self.db.execute(
            select(Rating)
            .options(selectinload(Rating.user))
            .where(Rating.vendor_id == vendor_id)
            .order_by(Rating.created_at.desc())
            .limit(settings.VENDOR_RECENT_REVIEWS)
        )
        recent = [
            {
                "rating_id": r.rating_id,
                "score": r.score,
                "comment": r.comment,
                "reviewer_name": r.user.name,
                "created_at": r.created_at,
            }
            for r in result.scalars().all()
        ]

        reviews = {
            "average": vendor.rating,
            "count": vendor.rating_count,
            "distribution": distribution,
            "recent": recent,
        }
        return vendor, reviews

    # ==================== Profile ====================

    async def register_vendor(
        self,
        owner: User,
        business_name: str,
        phone: str,
        location: tuple[float, float],
        delivery_zone_ids: list[UUID],
        description: str | None = None,
        address: str | None = None,
        delivery_fee: int = 0,
        min_order: int = 0,
    ) -> Vendor:
        """Register the owner's vendor profile.

        The vendor starts unverified and hidden from discovery until an admin
        verifies it. A citizen or scout owner becomes a VENDOR.

        Raises:
            VendorAlreadyRegistered: Owner already has a vendor profile
            NotFound: A delivery zone does not exist
            InvalidPhone: Phone is not a Sierra Leone number
        """
        existing = await self.db.execute(
            select(Vendor.vendor_id).where(Vendor.user_id == owner.user_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise VendorAlreadyRegistered()

        zones = await self._load_zones(delivery_zone_ids)
        longitude, latitude = location
        vendor = Vendor(
            user_id=owner.user_id,
            business_name=business_name,
            description=description,
            phone=normalize_phone(phone),
            address=address,
            longitude=longitude,
            latitude=latitude,
            delivery_fee=delivery_fee,
            min_order=min_order,
            is_active=True,
            is_verified=False,
            rating=0.0,
            rating_count=0,
            delivery_zones=zones,
        )
        self.db.add(vendor)
        if owner.role != UserRole.ADMIN:
            owner.role = UserRole.VENDOR
        await self.db.commit()

        logger.info(f"Vendor {vendor.vendor_id} registered by {owner.user_id}")
        return await self._get_vendor(vendor.vendor_id)

    async def update_vendor(
        self, vendor_id: UUID, actor: User, changes: dict[str, Any]
    ) -> Vendor:
        """Apply a partial profile update.

        Args:
            vendor_id: Vendor UUID
            actor: Vendor owner or admin
            changes: Fields to set; "location" is a (longitude, latitude)
                pair and "delivery_zones" a list of zone ids

        Raises:
            NotFound: Vendor or a delivery zone does not exist
            Forbidden: Actor does not own the vendor
        """
        vendor = await self._get_owned_vendor(vendor_id, actor)

        if changes.get("delivery_zones") is not None:
            vendor.delivery_zones = await self._load_zones(changes["delivery_zones"])
        if changes.get("location") is not None:
            vendor.longitude, vendor.latitude = changes["location"]
        if changes.get("phone") is not None:
            vendor.phone = normalize_phone(changes["phone"])
        apply_changes(vendor, changes, VENDOR_FIELDS)
        await self.db.commit()

        logger.info(f"Vendor {vendor.vendor_id} updated by {actor.user_id}: {sorted(changes)}")
        return await self._get_vendor(vendor_id)

    # ==================== Catalog ====================

    async def add_product(
        self,
        vendor_id: UUID,
        actor: User,
        name: str,
        unit: str,
        price: int,
        description: str | None = None,
        is_available: bool = True,
    ) -> Product:
        vendor = await self._get_owned_vendor(vendor_id, actor)

        product = Product(
            vendor_id=vendor.vendor_id,
            name=name,
            description=description,
            unit=unit,
            price=price,
            is_available=is_available,
        )
        self.db.add(product)
        await self.db.commit()

        logger.info(f"Product {product.product_id} added to vendor {vendor.vendor_id}")
        return product

    async def _get_product(self, vendor: Vendor, product_id: UUID) -> Product:
        result = await self.db.execute(
            select(Product).where(
                Product.product_id == product_id,
                Product.vendor_id == vendor.vendor_id,
            )
        )
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFound("product")
        return product

    async def update_product(
        self, vendor_id: UUID, product_id: UUID, actor: User, changes: dict[str, Any]
    ) -> Product:
        """Apply a partial product update.

        Price changes only affect future orders; existing order items keep
        their snapshot price.

        Raises:
            NotFound: Vendor does not exist, or product is not in its catalog
            Forbidden: Actor does not own the vendor
        """
        vendor = await self._get_owned_vendor(vendor_id, actor)
        product = await self._get_product(vendor, product_id)

        apply_changes(product, changes, PRODUCT_FIELDS)
        await self.db.commit()
        return product

    async def delete_product(self, vendor_id: UUID, product_id: UUID, actor: User) -> bool:
        """Remove a product from the catalog.

        A product that appears on past orders is kept and marked unavailable
        so those orders still resolve their items.

        Returns:
            True if the product row was deleted, False if it was retired

        Raises:
            NotFound: Vendor does not exist, or product is not in its catalog
            Forbidden: Actor does not own the vendor
        """
        vendor = await self._get_owned_vendor(vendor_id, actor)
        product = await self._get_product(vendor, product_id)

        ordered = await self.db.execute(
            select(func.count(OrderItem.item_id)).where(
                OrderItem.product_id == product.product_id
            )
        )
        if ordered.scalar_one() > 0:
            product.is_available = False
            deleted = False
        else:
            await self.db.delete(product)
            deleted = True
        await self.db.commit()

        logger.info(
            f"Product {product_id} {'deleted' if deleted else 'retired'} "
            f"from vendor {vendor.vendor_id}"
        )
        return deleted
