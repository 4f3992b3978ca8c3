"""decor inventory, customer requirements and monthly allocation grid

Revision ID: 000001_decor_init
Revises:
Create Date: 2026-10-19 00:00:01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '000001_decor_init'
down_revision = None
branch_labels = None
depends_on = None

DECOR_COLUMNS = (
    'walkway_stands',
    'arc',
    'aisle_stands',
    'photobooth',
    'lecturn',
    'stage_boards',
    'backdrop_boards',
    'dance_floor',
    'walkway_boards',
    'white_sticker',
    'centerpieces',
    'glass_charger_plates',
    'melamine_charger_plates',
    'african_mats',
    'gold_napkin_holders',
    'silver_napkin_holders',
    'roof_top_decor',
    'parcan_lights',
    'revolving_heads',
    'fairy_lights',
    'snake_lights',
    'neon_lights',
    'small_chandeliers',
    'large_chandeliers',
    'african_lampshades',
)

def upgrade():
    op.create_table('tenants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(256), nullable=False),
        sa.Column('token_salt', sa.String(64), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_seen_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_tenants_name', 'tenants', ['name'])

    op.create_table('customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_customers_user', 'customers', ['user_id'])

    op.create_table('decor_inventory',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('category', sa.String(128), nullable=False),
        sa.Column('item_name', sa.String(200), nullable=False),
        sa.Column('in_store', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('hired', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('damaged', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('in_store >= 0', name='ck_decor_in_store_nonneg'),
        sa.CheckConstraint('hired >= 0', name='ck_decor_hired_nonneg'),
        sa.CheckConstraint('damaged >= 0', name='ck_decor_damaged_nonneg'),
        sa.CheckConstraint('price >= 0', name='ck_decor_price_nonneg'),
    )
    op.create_index('ix_decor_user_category_name', 'decor_inventory', ['user_id', 'category', 'item_name'])

    op.create_table('customer_requirements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('decor_item_id', sa.Integer(), sa.ForeignKey('decor_inventory.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity_required', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'customer_id', 'decor_item_id', name='uq_requirement_user_customer_item'),
        sa.CheckConstraint('quantity_required >= 1', name='ck_requirement_qty_positive'),
    )
    op.create_index('ix_requirements_user_customer', 'customer_requirements', ['user_id', 'customer_id'])

    op.create_table('decor_allocations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('row_number', sa.Integer(), nullable=False),
        sa.Column('customer_name', sa.String(200), nullable=False),
        *[sa.Column(c, sa.Integer(), nullable=False, server_default='0') for c in DECOR_COLUMNS],
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('month', 'year', 'row_number', 'user_id', name='uq_alloc_month_year_row_user'),
        sa.CheckConstraint('month >= 1 AND month <= 12', name='ck_alloc_month_range'),
        *[sa.CheckConstraint(f'{c} >= 0', name=f'ck_alloc_{c}_nonneg') for c in DECOR_COLUMNS],
    )
    op.create_index('ix_alloc_user_month_year', 'decor_allocations', ['user_id', 'month', 'year'])

def downgrade():
    op.drop_index('ix_alloc_user_month_year', table_name='decor_allocations')
    op.drop_table('decor_allocations')
    op.drop_index('ix_requirements_user_customer', table_name='customer_requirements')
    op.drop_table('customer_requirements')
    op.drop_index('ix_decor_user_category_name', table_name='decor_inventory')
    op.drop_table('decor_inventory')
    op.drop_index('ix_customers_user', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_tenants_name', table_name='tenants')
    op.drop_table('tenants')
