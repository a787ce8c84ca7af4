# ===== app/models/appointment.py =====
from sqlalchemy import Column, String, Integer, Text, Date, DateTime, ForeignKey, Index, Uuid, text
from sqlalchemy.sql import func
from .base import Base
import uuid


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # One confirmed booking per start time; the atomic "check then insert"
        Index(
            "uq_appointments_confirmed_slot",
            "business_id", "appointment_date", "appointment_time",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
        Index("idx_appointments_business_date", "business_id", "appointment_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True)

    # Customer info
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)

    # Appointment details (business local time)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # HH:MM format
    duration_minutes = Column(Integer, default=30)
    notes = Column(Text, nullable=True)

    # Status tracking
    status = Column(String, nullable=False, default="confirmed")  # confirmed, completed, cancelled

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Appointment(id={self.id}, date={self.appointment_date}, time={self.appointment_time})>"
