"""Order pricing and validation.

Turns a vendor's catalog and a set of requested line items into a priced
order draft. Nothing here touches the database.
"""

from dataclasses import dataclass, field
from typing import Iterable, Protocol
from uuid import UUID

from maji.core.errors import (
    MinimumOrderNotMet,
    ProductNotFound,
    ProductUnavailable,
    VendorUnavailable,
)
from maji.services.scoring import calculate_platform_fee


class LineRequest(Protocol):
    product_id: UUID
    quantity: int


@dataclass
class PricedLine:
    product_id: UUID
    quantity: int
    unit_price: int
    total_price: int


@dataclass
class PricedOrder:
    subtotal: int
    delivery_fee: int
    platform_fee: int
    total: int
    items: list[PricedLine] = field(default_factory=list)


def price_order(vendor, products: Iterable, requested: Iterable[LineRequest]) -> PricedOrder:
    """Validate requested items against a vendor catalog and price them.

    Prices are read from the catalog at call time and snapshotted into the
    returned lines.

    Args:
        vendor: Vendor with is_active, is_verified, delivery_fee and min_order
        products: The vendor's products
        requested: Line requests with product_id and quantity (>= 1)

    Returns:
        PricedOrder where total = subtotal + delivery_fee + platform_fee

    Raises:
        VendorUnavailable: Vendor inactive or unverified
        ProductNotFound: A requested product is not in the vendor's catalog
        ProductUnavailable: A requested product is marked unavailable
        MinimumOrderNotMet: Subtotal below the vendor's minimum order
    """
    if not vendor.is_active or not vendor.is_verified:
        raise VendorUnavailable()

    catalog = {p.product_id: p for p in products}
    requested = list(requested)

    for line in requested:
        if line.quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got {line.quantity}")
        if line.product_id not in catalog:
            raise ProductNotFound()

    if any(not catalog[line.product_id].is_available for line in requested):
        raise ProductUnavailable()

    lines = []
    subtotal = 0
    for line in requested:
        unit_price = catalog[line.product_id].price
        total_price = unit_price * line.quantity
        subtotal += total_price
        lines.append(
            PricedLine(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=unit_price,
                total_price=total_price,
            )
        )

    if subtotal < vendor.min_order:
        raise MinimumOrderNotMet(vendor.min_order)

    delivery_fee = vendor.delivery_fee
    platform_fee = calculate_platform_fee(subtotal)

    return PricedOrder(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        platform_fee=platform_fee,
        total=subtotal + delivery_fee + platform_fee,
        items=lines,
    )
