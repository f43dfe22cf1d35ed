"""Initial schema - products, customers, orders and order items

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ORDER_STATUSES = ('Pending', 'Processing', 'Shipped', 'Delivered', 'Completed', 'Cancelled')


def upgrade() -> None:
    # Products table
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(18, 2), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_created_at', 'products', ['created_at'])

    # Customers table
    op.create_table(
        'customers',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_customers'),
    )
    op.create_index('ix_customers_email', 'customers', ['email'], unique=True)
    op.create_index('ix_customers_country', 'customers', ['country'])
    op.create_index('ix_customers_created_at', 'customers', ['created_at'])

    # Orders table
    op.create_table(
        'orders',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('customer_id', sa.String(36), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='order_status'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_order_date', 'orders', ['order_date'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    # Order items table (owned by orders)
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.String(36), nullable=False),
        sa.Column('product_id', sa.String(36), nullable=False),
        sa.Column('product_name', sa.String(200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(18, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(18, 2), nullable=False),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name='fk_order_items_order_id_orders',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_index('ix_order_items_order_id', 'order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_created_at', 'orders')
    op.drop_index('ix_orders_status', 'orders')
    op.drop_index('ix_orders_order_date', 'orders')
    op.drop_index('ix_orders_customer_id', 'orders')
    op.drop_table('orders')
    op.drop_index('ix_customers_created_at', 'customers')
    op.drop_index('ix_customers_country', 'customers')
    op.drop_index('ix_customers_email', 'customers')
    op.drop_table('customers')
    op.drop_index('ix_products_created_at', 'products')
    op.drop_index('ix_products_category', 'products')
    op.drop_index('ix_products_name', 'products')
    op.drop_table('products')

    # Drop enum types
    op.execute('DROP TYPE IF EXISTS order_status')
