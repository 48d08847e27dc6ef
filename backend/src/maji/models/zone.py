"""Zone model for geographic administrative areas."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maji.core.database import Base
from maji.models.base import TimestampMixin

if TYPE_CHECKING:
    from maji.models.alert import Alert
    from maji.models.vendor import Vendor


class Zone(Base, TimestampMixin):
    """Zone scoping alerts and vendor coverage."""

    __tablename__ = "zones"

    zone_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )

    alerts: Mapped[List["Alert"]] = relationship("Alert", back_populates="zone")
    vendors: Mapped[List["Vendor"]] = relationship(
        "Vendor", secondary="vendor_zones", back_populates="delivery_zones"
    )
