"""create scheduling tables

Revision ID: a1c4e7d2b930
Revises:
Create Date: 2026-10-17 10:12:44.501377

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e7d2b930'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. businesses
    op.create_table(
        'businesses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('timezone', sa.String(50), nullable=False),
        sa.Column('slot_granularity_minutes', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('is_active', sa.Boolean, nullable=True),
    )

    # 2. weekly hours, one row per weekday
    op.create_table(
        'business_hours',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer, nullable=False),
        sa.Column('open_time', sa.String(5), nullable=False),
        sa.Column('close_time', sa.String(5), nullable=False),
        sa.Column('is_closed', sa.Boolean, nullable=True),
        sa.Column('lunch_enabled', sa.Boolean, nullable=True),
        sa.Column('lunch_start', sa.String(5), nullable=True),
        sa.Column('lunch_end', sa.String(5), nullable=True),
        sa.UniqueConstraint('business_id', 'day_of_week', name='uq_business_hours_day'),
    )

    # 3. blocked dates
    op.create_table(
        'blocked_dates',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('reason', sa.String, nullable=True),
        sa.UniqueConstraint('business_id', 'date', name='uq_blocked_dates_business_date'),
    )

    # 4. services
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('duration', sa.Integer, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=True),
        sa.Column('display_order', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_services_business_id', 'services', ['business_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    # 5. appointments
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id', ondelete='SET NULL'), nullable=True),
        sa.Column('customer_name', sa.String, nullable=False),
        sa.Column('customer_phone', sa.String, nullable=True),
        sa.Column('appointment_date', sa.Date, nullable=False),
        sa.Column('appointment_time', sa.String(5), nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', sa.String, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.Text, nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    )

    # Atomic slot claim: one confirmed booking per start time
    op.create_index(
        'uq_appointments_confirmed_slot',
        'appointments',
        ['business_id', 'appointment_date', 'appointment_time'],
        unique=True,
        sqlite_where=sa.text("status = 'confirmed'"),
        postgresql_where=sa.text("status = 'confirmed'"),
    )
    op.create_index('idx_appointments_business_date', 'appointments', ['business_id', 'appointment_date'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_appointments_business_date', table_name='appointments')
    op.drop_index('uq_appointments_confirmed_slot', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('ix_services_is_active', table_name='services')
    op.drop_index('ix_services_business_id', table_name='services')
    op.drop_table('services')
    op.drop_table('blocked_dates')
    op.drop_table('business_hours')
    op.drop_table('businesses')
