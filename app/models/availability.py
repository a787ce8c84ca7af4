# ===== app/models/availability.py =====
from sqlalchemy import Column, String, Date, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.models.base import Base
import uuid


class BlockedDate(Base):
    """Whole-day closures (holidays, vacations) that override weekly hours"""
    __tablename__ = "blocked_dates"
    __table_args__ = (
        UniqueConstraint("business_id", "date", name="uq_blocked_dates_business_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    date = Column(Date, nullable=False)
    reason = Column(String, nullable=True)  # "Holiday", "Vacation", etc.

    business = relationship("Business", back_populates="blocked_dates")
