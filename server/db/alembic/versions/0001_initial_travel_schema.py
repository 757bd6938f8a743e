"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('Admin', 'Customer')", name='ck_user_role_valid'),
        sa.CheckConstraint('length(email) > 0', name='ck_user_email_not_empty'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=False)

    # Create travel_packages table
    op.create_table('travel_packages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('destination', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('available_slots', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('max_capacity > 0', name='ck_package_max_capacity_positive'),
        sa.CheckConstraint('available_slots >= 0', name='ck_package_available_slots_non_negative'),
        sa.CheckConstraint('available_slots <= max_capacity', name='ck_package_available_lte_capacity'),
        sa.CheckConstraint('price >= 0', name='ck_package_price_non_negative'),
        sa.CheckConstraint('duration > 0', name='ck_package_duration_positive'),
        sa.CheckConstraint('end_date >= start_date', name='ck_package_dates_ordered'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_travel_packages_title'), 'travel_packages', ['title'], unique=False)
    op.create_index(op.f('ix_travel_packages_destination'), 'travel_packages', ['destination'], unique=False)
    op.create_index(op.f('ix_travel_packages_start_date'), 'travel_packages', ['start_date'], unique=False)
    op.create_index(op.f('ix_travel_packages_is_active'), 'travel_packages', ['is_active'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('travel_package_id', sa.Integer(), nullable=False),
        sa.Column('booking_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('number_of_travelers', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('number_of_travelers > 0', name='ck_booking_travelers_positive'),
        sa.CheckConstraint('total_price >= 0', name='ck_booking_total_price_non_negative'),
        sa.CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Cancelled')",
            name='ck_booking_status_valid'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['travel_package_id'], ['travel_packages.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_travel_package_id'), 'bookings', ['travel_package_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_bookings_status'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_travel_package_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_user_id'), table_name='bookings')
    op.drop_table('bookings')

    op.drop_index(op.f('ix_travel_packages_is_active'), table_name='travel_packages')
    op.drop_index(op.f('ix_travel_packages_start_date'), table_name='travel_packages')
    op.drop_index(op.f('ix_travel_packages_destination'), table_name='travel_packages')
    op.drop_index(op.f('ix_travel_packages_title'), table_name='travel_packages')
    op.drop_table('travel_packages')

    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
