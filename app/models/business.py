# app/models/business.py
"""
Business Model - owner of a weekly schedule, services and appointments
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    phone_number = Column(String(20), nullable=True)

    # Scheduling configuration
    timezone = Column(String(50), nullable=False, default="UTC")
    slot_granularity_minutes = Column(Integer, nullable=False, default=30)

    hours = relationship(
        "BusinessHours",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="BusinessHours.day_of_week",
    )
    blocked_dates = relationship(
        "BlockedDate",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="BlockedDate.date",
    )

    # Technical fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True)

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"


class BusinessHours(Base):
    __tablename__ = "business_hours"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_business_hours_day"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    open_time = Column(String(5), nullable=False)  # HH:MM format
    close_time = Column(String(5), nullable=False)  # HH:MM format
    is_closed = Column(Boolean, default=False)

    lunch_enabled = Column(Boolean, default=False)
    lunch_start = Column(String(5), nullable=True)
    lunch_end = Column(String(5), nullable=True)

    business = relationship("Business", back_populates="hours")

    def __repr__(self):
        return f"<BusinessHours(business_id={self.business_id}, day={self.day_of_week})>"
