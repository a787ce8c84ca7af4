# app/models/service.py
"""
Service Model - what a customer books (haircut, beard trim, ...)

The duration decides how long a booked slot blocks the schedule.
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Boolean, DateTime, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)

    # Minutes; without one the business's slot granularity is used
    duration = Column(Integer, nullable=True)

    is_active = Column(Boolean, default=True, index=True)
    display_order = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business", backref="services")

    def __repr__(self):
        return f"<Service(name={self.name}, duration={self.duration})>"

    @property
    def formatted_duration(self) -> str:
        """Label such as 1h 30m; services without a duration take one slot"""
        if not self.duration:
            return "1 slot"

        hours, minutes = divmod(self.duration, 60)
        if hours and minutes:
            return f"{hours}h {minutes}m"
        return f"{hours}h" if hours else f"{minutes}m"
