"""owners, availability slots, schedule bookings

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'owners',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('schedule_token', sa.Text(), nullable=False, unique=True),
        sa.Column('managed_by', sa.Integer()),
        sa.Column('onsite_block_minutes', sa.Integer(), server_default=sa.text('60')),
        sa.Column('online_block_minutes', sa.Integer(), server_default=sa.text('30')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'availability_slots',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('owners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Text(), nullable=False),
        sa.Column('end_time', sa.Text(), nullable=False),
        sa.Column('interview_type', sa.Text(), nullable=False, server_default=sa.text("'online'")),
        sa.Column('status', sa.Text(), nullable=False, server_default=sa.text("'available'")),
        sa.Column('blocked_by_id', sa.Integer()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('available', 'booked', 'blocked')",
            name='ck_availability_slots_status',
        ),
        sa.CheckConstraint(
            "interview_type IN ('online', 'onsite')",
            name='ck_availability_slots_interview_type',
        ),
        sa.CheckConstraint('start_time < end_time', name='ck_availability_slots_interval'),
    )
    op.create_index(
        'ix_availability_slots_scope',
        'availability_slots',
        ['owner_id', 'date', 'interview_type', 'status'],
    )
    op.create_index('ix_availability_slots_blocked_by_id', 'availability_slots', ['blocked_by_id'])

    op.create_table(
        'schedule_bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('slot_id', sa.Integer(), sa.ForeignKey('availability_slots.id', ondelete='SET NULL')),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('owners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('interview_type', sa.Text(), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=False),
        sa.Column('contact_name', sa.Text()),
        sa.Column('contact_email', sa.Text()),
        sa.Column('notes', sa.Text()),
        sa.Column('slot_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Text(), nullable=False),
        sa.Column('end_time', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(timezone=True)),
        sa.Column('cancel_reason', sa.Text()),
        sa.CheckConstraint(
            "interview_type IN ('online', 'onsite', 'both')",
            name='ck_schedule_bookings_interview_type',
        ),
    )
    op.create_index(
        'uq_schedule_bookings_active_slot',
        'schedule_bookings',
        ['slot_id'],
        unique=True,
        sqlite_where=sa.text('cancelled_at IS NULL'),
        postgresql_where=sa.text('cancelled_at IS NULL'),
    )


def downgrade():
    op.drop_index('uq_schedule_bookings_active_slot', table_name='schedule_bookings')
    op.drop_table('schedule_bookings')
    op.drop_index('ix_availability_slots_blocked_by_id', table_name='availability_slots')
    op.drop_index('ix_availability_slots_scope', table_name='availability_slots')
    op.drop_table('availability_slots')
    op.drop_table('owners')
