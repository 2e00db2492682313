"""Distance cache model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Float, Index, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fuelfinder.models.base import Base

# SQLite only autoincrements INTEGER PRIMARY KEY
_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")
_COORD_TYPE = Numeric(9, 5)


class DistanceRecord(Base):
    """Cached driving distance between two quantized coordinates."""

    __tablename__ = "distances"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    from_lat: Mapped[Decimal] = mapped_column(_COORD_TYPE, nullable=False)
    from_lng: Mapped[Decimal] = mapped_column(_COORD_TYPE, nullable=False)
    to_lat: Mapped[Decimal] = mapped_column(_COORD_TYPE, nullable=False)
    to_lng: Mapped[Decimal] = mapped_column(_COORD_TYPE, nullable=False)
    distance_km: Mapped[float] = mapped_column(Float, nullable=False)
    # naive UTC; written by the service so TTL arithmetic uses one clock
    created_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "from_lat", "from_lng", "to_lat", "to_lng", name="uq_distances_coordinates"
        ),
        Index("ix_distances_expires_at", "expires_at"),
    )
