"""Restaurant (tenant) and floor models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship

from app.database import Base


class Restaurant(Base):
    """Restaurant tenant"""
    __tablename__ = "restaurants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    timezone = Column(String(50), default="America/Sao_Paulo")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    areas = relationship("Area", back_populates="restaurant")
    tables = relationship("Table", back_populates="restaurant")
    reservations = relationship("Reservation", back_populates="restaurant")
    users = relationship("User", back_populates="restaurant")


class Area(Base):
    """Dining area (terrace, main hall, ...)"""
    __tablename__ = "restaurant_areas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="areas")
    tables = relationship("Table", back_populates="area")


class Table(Base):
    """Physical table that can be reserved"""
    __tablename__ = "tables"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    area_id = Column(Uuid, ForeignKey("restaurant_areas.id"))
    number = Column(Integer, nullable=False)
    name = Column(String(100))
    capacity = Column(Integer, default=4)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="tables")
    area = relationship("Area", back_populates="tables")
