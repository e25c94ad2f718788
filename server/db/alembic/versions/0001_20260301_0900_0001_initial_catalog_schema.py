"""Initial catalog and checkout schema

Revision ID: 0001
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id_column() -> sa.Column:
    return sa.Column('id', sa.String(length=64), nullable=False)


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    # Reference data
    op.create_table('locations',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_locations_name'), 'locations', ['name'], unique=False)
    op.create_index(op.f('ix_locations_created_at'), 'locations', ['created_at'], unique=False)

    op.create_table('categories',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_categories_created_at'), 'categories', ['created_at'], unique=False)

    op.create_table('guides',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('profile_image', sa.String(length=1024), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_guides_created_at'), 'guides', ['created_at'], unique=False)

    op.create_table('tour_types',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tour_types_name'), 'tour_types', ['name'], unique=True)
    op.create_index(op.f('ix_tour_types_created_at'), 'tour_types', ['created_at'], unique=False)

    op.create_table('marine_life',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('scientific_name', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('long_description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('animal_type', sa.String(length=100), nullable=True),
        sa.Column('seasons', sa.JSON(), nullable=False),
        sa.Column('expeditions', sa.JSON(), nullable=False),
        sa.Column('active_months', sa.JSON(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_marine_life_name'), 'marine_life', ['name'], unique=False)
    op.create_index(op.f('ix_marine_life_slug'), 'marine_life', ['slug'], unique=True)
    op.create_index(op.f('ix_marine_life_animal_type'), 'marine_life', ['animal_type'], unique=False)
    op.create_index(op.f('ix_marine_life_created_at'), 'marine_life', ['created_at'], unique=False)

    op.create_table('equipment',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_equipment_created_at'), 'equipment', ['created_at'], unique=False)

    op.create_table('tags',
        _id_column(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    # Tours
    op.create_table('tours',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('difficulty', sa.String(length=20), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('base_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('max_participants', sa.Integer(), nullable=False),
        sa.Column('published', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('highlights', sa.JSON(), nullable=False),
        sa.Column('inclusions', sa.JSON(), nullable=False),
        sa.Column('exclusions', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('required_equipment', sa.JSON(), nullable=False),
        sa.Column('seasons', sa.JSON(), nullable=False),
        sa.Column('marine_life_names', sa.JSON(), nullable=False),
        sa.Column('expedition_type', sa.String(length=100), nullable=True),
        sa.Column('marine_area', sa.String(length=255), nullable=True),
        sa.Column('departure_port', sa.String(length=255), nullable=True),
        sa.Column('conservation_info', sa.Text(), nullable=True),
        sa.Column('tide_dependency', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('safety_briefing', sa.Text(), nullable=True),
        sa.Column('category_id', sa.String(length=64), nullable=True),
        sa.Column('guide_id', sa.String(length=64), nullable=True),
        sa.Column('tour_type_id', sa.String(length=64), nullable=True),
        sa.Column('start_location_id', sa.String(length=64), nullable=True),
        sa.Column('end_location_id', sa.String(length=64), nullable=True),
        sa.Column('location_id', sa.String(length=64), nullable=True),
        *_timestamp_columns(),
        sa.CheckConstraint('duration > 0', name='ck_tour_duration_positive'),
        sa.CheckConstraint('max_participants > 0', name='ck_tour_max_participants_positive'),
        sa.CheckConstraint('base_price >= 0', name='ck_tour_base_price_non_negative'),
        sa.CheckConstraint('length(name) > 0', name='ck_tour_name_not_empty'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['guide_id'], ['guides.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['tour_type_id'], ['tour_types.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['start_location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['end_location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tours_name'), 'tours', ['name'], unique=False)
    op.create_index(op.f('ix_tours_published'), 'tours', ['published'], unique=False)
    op.create_index(op.f('ix_tours_deleted'), 'tours', ['deleted'], unique=False)
    op.create_index(op.f('ix_tours_category_id'), 'tours', ['category_id'], unique=False)
    op.create_index(op.f('ix_tours_guide_id'), 'tours', ['guide_id'], unique=False)
    op.create_index(op.f('ix_tours_tour_type_id'), 'tours', ['tour_type_id'], unique=False)
    op.create_index(op.f('ix_tours_created_at'), 'tours', ['created_at'], unique=False)

    op.create_table('tour_marine_life',
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('marine_life_id', sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['marine_life_id'], ['marine_life.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('tour_id', 'marine_life_id')
    )

    op.create_table('tour_tags',
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('tag_id', sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tour_id', 'tag_id')
    )

    op.create_table('tour_equipment',
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('equipment_id', sa.String(length=64), nullable=False),
        sa.Column('required', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['equipment_id'], ['equipment.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('tour_id', 'equipment_id')
    )

    op.create_table('itinerary_days',
        _id_column(),
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.CheckConstraint('day_number > 0', name='ck_itinerary_day_number_positive'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tour_id', 'day_number', name='uq_itinerary_tour_day')
    )
    op.create_index(op.f('ix_itinerary_days_tour_id'), 'itinerary_days', ['tour_id'], unique=False)

    op.create_table('accommodations',
        _id_column(),
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_accommodations_tour_id'), 'accommodations', ['tour_id'], unique=False)

    # Schedules
    op.create_table('schedules',
        _id_column(),
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('available_spots', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamp_columns(),
        sa.CheckConstraint('available_spots >= 0', name='ck_schedule_available_spots_non_negative'),
        sa.CheckConstraint('end_date >= start_date', name='ck_schedule_dates_ordered'),
        sa.CheckConstraint('price IS NULL OR price >= 0', name='ck_schedule_price_non_negative'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_schedules_tour_id'), 'schedules', ['tour_id'], unique=False)
    op.create_index(op.f('ix_schedules_start_date'), 'schedules', ['start_date'], unique=False)
    op.create_index(op.f('ix_schedules_status'), 'schedules', ['status'], unique=False)
    op.create_index(op.f('ix_schedules_created_at'), 'schedules', ['created_at'], unique=False)

    # Checkout orders
    op.create_table('checkout_orders',
        _id_column(),
        sa.Column('provider_order_id', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('tour_id', sa.String(length=64), nullable=False),
        sa.Column('schedule_id', sa.String(length=64), nullable=False),
        sa.Column('participants', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('contact_info', sa.Text(), nullable=False),
        sa.Column('approval_url', sa.String(length=2048), nullable=True),
        sa.Column('idempotency_key', sa.String(length=255), nullable=True),
        sa.Column('request_hash', sa.String(length=64), nullable=True),
        *_timestamp_columns(),
        sa.CheckConstraint('participants > 0', name='ck_checkout_order_participants_positive'),
        sa.CheckConstraint('amount >= 0', name='ck_checkout_order_amount_non_negative'),
        sa.CheckConstraint('length(currency) = 3', name='ck_checkout_order_currency_length'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['schedule_id'], ['schedules.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('idempotency_key')
    )
    op.create_index(op.f('ix_checkout_orders_provider_order_id'), 'checkout_orders', ['provider_order_id'], unique=True)
    op.create_index(op.f('ix_checkout_orders_status'), 'checkout_orders', ['status'], unique=False)
    op.create_index(op.f('ix_checkout_orders_tour_id'), 'checkout_orders', ['tour_id'], unique=False)
    op.create_index(op.f('ix_checkout_orders_schedule_id'), 'checkout_orders', ['schedule_id'], unique=False)
    op.create_index(op.f('ix_checkout_orders_created_at'), 'checkout_orders', ['created_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('checkout_orders')
    op.drop_table('schedules')
    op.drop_table('accommodations')
    op.drop_table('itinerary_days')
    op.drop_table('tour_equipment')
    op.drop_table('tour_tags')
    op.drop_table('tour_marine_life')
    op.drop_table('tours')
    op.drop_table('tags')
    op.drop_table('equipment')
    op.drop_table('marine_life')
    op.drop_table('tour_types')
    op.drop_table('guides')
    op.drop_table('categories')
    op.drop_table('locations')
