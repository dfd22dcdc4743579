"""Reservation model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Date, Time, DateTime, ForeignKey, Text, Index, Uuid, text
from sqlalchemy.orm import relationship

from app.database import Base


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Statuses that occupy a table slot
ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

_ACTIVE_SLOT_PREDICATE = text("status IN ('pending', 'confirmed')")


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    table_id = Column(Uuid, ForeignKey("tables.id"))
    area_id = Column(Uuid, ForeignKey("restaurant_areas.id"))

    # Customer information
    customer_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    number_of_people = Column(Integer, nullable=False, default=1)

    # Slot
    reservation_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)

    # Status
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)

    # Notes
    notes = Column(Text)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="reservations")
    table = relationship("Table")
    area = relationship("Area")

    __table_args__ = (
        # At most one active reservation per table slot
        Index(
            "uq_reservations_active_slot",
            "restaurant_id",
            "table_id",
            "reservation_date",
            "start_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
        Index("ix_reservations_restaurant_date", "restaurant_id", "reservation_date", "start_time"),
    )

    def __repr__(self):
        return f"<Reservation(id={self.id}, table_id={self.table_id}, status={self.status})>"
