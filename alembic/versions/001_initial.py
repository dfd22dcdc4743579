"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_SLOT_PREDICATE = "status IN ('pending', 'confirmed')"


def upgrade() -> None:
    # Create restaurants table
    op.create_table(
        'restaurants',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(50), default='America/Sao_Paulo'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id')),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create restaurant_areas table
    op.create_table(
        'restaurant_areas',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create tables table
    op.create_table(
        'tables',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('area_id', sa.Uuid(), sa.ForeignKey('restaurant_areas.id')),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100)),
        sa.Column('capacity', sa.Integer(), default=4),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('restaurant_id', sa.Uuid(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('table_id', sa.Uuid(), sa.ForeignKey('tables.id')),
        sa.Column('area_id', sa.Uuid(), sa.ForeignKey('restaurant_areas.id')),
        sa.Column('customer_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(20)),
        sa.Column('number_of_people', sa.Integer(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_tables_restaurant_id', 'tables', ['restaurant_id'])
    op.create_index(
        'ix_reservations_restaurant_date',
        'reservations',
        ['restaurant_id', 'reservation_date', 'start_time'],
    )
    # One active reservation per table slot; cancelled/completed/no_show rows do not count
    op.create_index(
        'uq_reservations_active_slot',
        'reservations',
        ['restaurant_id', 'table_id', 'reservation_date', 'start_time'],
        unique=True,
        postgresql_where=sa.text(ACTIVE_SLOT_PREDICATE),
        sqlite_where=sa.text(ACTIVE_SLOT_PREDICATE),
    )


def downgrade() -> None:
    op.drop_index('uq_reservations_active_slot', table_name='reservations')
    op.drop_index('ix_reservations_restaurant_date', table_name='reservations')
    op.drop_index('ix_tables_restaurant_id', table_name='tables')
    op.drop_table('reservations')
    op.drop_table('tables')
    op.drop_table('restaurant_areas')
    op.drop_table('users')
    op.drop_table('restaurants')
