"""initial_schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Creates users, zones, the vendor marketplace (vendors, products, orders,
order items, transactions, ratings), alerts and reports.
Enum columns are stored as VARCHAR; money columns are integer Leones.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'zones',
        sa.Column('zone_id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('user_id', sa.Uuid(), primary_key=True),
        sa.Column('phone', sa.String(20), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('reputation', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('primary_zone_id', sa.Uuid(), sa.ForeignKey('zones.zone_id'), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('reputation >= 0', name='chk_user_reputation_positive'),
    )
    op.create_index('idx_users_role', 'users', ['role'])

    op.create_table(
        'vendors',
        sa.Column('vendor_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('business_name', sa.String(200), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('delivery_fee', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('min_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint('delivery_fee >= 0', name='chk_vendor_delivery_fee_positive'),
        sa.CheckConstraint('min_order >= 0', name='chk_vendor_min_order_positive'),
    )
    op.create_index('idx_vendors_user', 'vendors', ['user_id'])

    op.create_table(
        'products',
        sa.Column('product_id', sa.Uuid(), primary_key=True),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.vendor_id'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('price > 0', name='chk_product_price_positive'),
    )
    op.create_index('idx_products_vendor', 'products', ['vendor_id'])

    op.create_table(
        'orders',
        sa.Column('order_id', sa.Uuid(), primary_key=True),
        sa.Column('order_number', sa.String(20), nullable=False, unique=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.vendor_id'), nullable=False),
        sa.Column('delivery_address', sa.String(500), nullable=False),
        sa.Column('delivery_notes', sa.String(500), nullable=True),
        sa.Column('delivery_longitude', sa.Float(), nullable=True),
        sa.Column('delivery_latitude', sa.Float(), nullable=True),
        sa.Column('subtotal', sa.Integer(), nullable=False),
        sa.Column('delivery_fee', sa.Integer(), nullable=False),
        sa.Column('platform_fee', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancel_reason', sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('subtotal >= 0', name='chk_order_subtotal_positive'),
        sa.CheckConstraint(
            'total_amount = subtotal + delivery_fee + platform_fee',
            name='chk_order_total',
        ),
    )
    op.create_index('idx_orders_customer_created', 'orders', ['customer_id', 'created_at'])
    op.create_index('idx_orders_vendor_created', 'orders', ['vendor_id', 'created_at'])
    op.create_index('idx_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('item_id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.order_id'), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.product_id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='chk_order_item_quantity_positive'),
    )
    op.create_index('idx_order_items_order', 'order_items', ['order_id'])

    op.create_table(
        'transactions',
        sa.Column('transaction_id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.order_id'), nullable=False, unique=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('provider', sa.String(20), nullable=False),
        sa.Column('payer_phone', sa.String(20), nullable=True),
        sa.Column('provider_ref', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('escrow_status', sa.String(20), nullable=False),
        sa.Column('escrow_released_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_transactions_status', 'transactions', ['status'])

    op.create_table(
        'ratings',
        sa.Column('rating_id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.order_id'), nullable=False, unique=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.vendor_id'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('quality_score', sa.Integer(), nullable=True),
        sa.Column('service_score', sa.Integer(), nullable=True),
        sa.Column('comment', sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('score BETWEEN 1 AND 5', name='chk_rating_score_range'),
    )
    op.create_index('idx_ratings_vendor', 'ratings', ['vendor_id'])

    op.create_table(
        'alerts',
        sa.Column('alert_id', sa.Uuid(), primary_key=True),
        sa.Column('zone_id', sa.Uuid(), sa.ForeignKey('zones.zone_id'), nullable=False),
        sa.Column('scout_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('message', sa.String(500), nullable=True),
        sa.Column('eta', sa.DateTime(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('confidence', sa.Float(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('feedback_score', sa.Float(), nullable=True),
        sa.Column('feedback_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('confidence >= 0 AND confidence <= 1', name='chk_alert_confidence_range'),
        sa.CheckConstraint('feedback_count >= 0', name='chk_alert_feedback_count_positive'),
    )
    op.create_index(
        'idx_alerts_zone_status_created', 'alerts', ['zone_id', 'status', 'created_at']
    )

    op.create_table(
        'reports',
        sa.Column('report_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('bounty_amount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('bounty_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('bounty_paid_at', sa.DateTime(), nullable=True),
        sa.Column('verified_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('corroborates_id', sa.Uuid(), sa.ForeignKey('reports.report_id'), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_by', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=True),
        sa.Column('resolution', sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('bounty_amount >= 0', name='chk_report_bounty_positive'),
        sa.CheckConstraint('verified_count >= 1', name='chk_report_verified_count_positive'),
    )
    op.create_index(
        'idx_reports_type_status_created', 'reports', ['type', 'status', 'created_at']
    )
    op.create_index('idx_reports_user_created', 'reports', ['user_id', 'created_at'])


def downgrade() -> None:
    for table in (
        'reports',
        'alerts',
        'ratings',
        'transactions',
        'order_items',
        'orders',
        'products',
        'vendors',
        'users',
        'zones',
    ):
        op.drop_table(table)
