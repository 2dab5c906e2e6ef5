"""initial storefront schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _store_fk() -> sa.Column:
    return sa.Column('store_id', sa.UUID(as_uuid=False), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    # Stores and staff
    op.create_table('stores',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'ACTIVE', 'SUSPENDED', name='storestatus'), nullable=True),
        sa.Column('store_type', sa.Enum('CLOTHING', 'CAR_CARE', 'GENERAL', name='storetype'), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=True),
        sa.Column('branding', sa.JSON(), nullable=True),
        sa.Column('subscription_plan', sa.String(length=50), nullable=True),
        sa.Column('subscription_status', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stores_slug'), 'stores', ['slug'], unique=True)

    op.create_table('store_domains',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('domain', sa.String(length=255), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('domain'),
    )
    op.create_index(op.f('ix_store_domains_store_id'), 'store_domains', ['store_id'], unique=False)

    op.create_table('store_preview_tokens',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_store_preview_tokens_store_id'), 'store_preview_tokens', ['store_id'], unique=False)
    op.create_index(op.f('ix_store_preview_tokens_token'), 'store_preview_tokens', ['token'], unique=True)

    op.create_table('users',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        sa.Column('store_id', sa.UUID(as_uuid=False), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_store_id'), 'users', ['store_id'], unique=False)

    # Catalog
    op.create_table('categories',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('name_ar', sa.String(length=100), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'slug', name='uq_category_store_slug'),
    )
    op.create_index(op.f('ix_categories_store_id'), 'categories', ['store_id'], unique=False)

    op.create_table('bulk_batches',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'ANALYZING', 'PROCESSING', 'COMPLETED', 'FAILED', name='batchstatus'), nullable=True),
        sa.Column('source_urls', sa.JSON(), nullable=True),
        sa.Column('total_images', sa.Integer(), nullable=True),
        sa.Column('processed_count', sa.Integer(), nullable=True),
        sa.Column('failed_count', sa.Integer(), nullable=True),
        sa.Column('current_product', sa.String(length=255), nullable=True),
        sa.Column('product_groups', sa.JSON(), nullable=True),
        sa.Column('config', sa.JSON(), nullable=True),
        sa.Column('error_log', sa.JSON(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_bulk_batches_store_id'), 'bulk_batches', ['store_id'], unique=False)

    op.create_table('products',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('category_id', sa.UUID(as_uuid=False), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('batch_id', sa.UUID(as_uuid=False), sa.ForeignKey('bulk_batches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_ar', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('status', sa.Enum('DRAFT', 'ACTIVE', 'ARCHIVED', name='productstatus'), nullable=True),
        sa.Column('inventory', sa.Integer(), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('sizes', sa.JSON(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('ai_generated', sa.Boolean(), nullable=True),
        sa.Column('ai_confidence', sa.Enum('HIGH', 'MEDIUM', 'LOW', name='aiconfidence'), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'slug', name='uq_product_store_slug'),
    )
    op.create_index(op.f('ix_products_store_id'), 'products', ['store_id'], unique=False)
    op.create_index(op.f('ix_products_category_id'), 'products', ['category_id'], unique=False)

    op.create_table('product_drafts',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('batch_id', sa.UUID(as_uuid=False), sa.ForeignKey('bulk_batches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_id', sa.UUID(as_uuid=False), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_ar', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('suggested_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('sizes', sa.JSON(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=True),
        sa.Column('primary_image_url', sa.String(length=1000), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('DRAFT', 'APPROVED', 'PERSISTED', 'DISCARDED', name='draftstatus'), nullable=True),
        sa.Column('ai_confidence', sa.Enum('HIGH', 'MEDIUM', 'LOW', name='aiconfidence', create_type=False), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_product_drafts_store_id'), 'product_drafts', ['store_id'], unique=False)
    op.create_index(op.f('ix_product_drafts_batch_id'), 'product_drafts', ['batch_id'], unique=False)

    op.create_table('generated_assets',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('batch_id', sa.UUID(as_uuid=False), sa.ForeignKey('bulk_batches.id', ondelete='CASCADE'), nullable=True),
        sa.Column('product_id', sa.UUID(as_uuid=False), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('draft_id', sa.UUID(as_uuid=False), sa.ForeignKey('product_drafts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('asset_type', sa.Enum('BACKGROUND_REMOVED', 'LIFESTYLE', name='assettype'), nullable=False),
        sa.Column('source_url', sa.String(length=1000), nullable=False),
        sa.Column('generated_url', sa.String(length=1000), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_generated_assets_store_id'), 'generated_assets', ['store_id'], unique=False)
    op.create_index(op.f('ix_generated_assets_batch_id'), 'generated_assets', ['batch_id'], unique=False)

    # Carts and orders
    op.create_table('carts',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('session_id', sa.String(length=100), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'CONVERTED', 'MERGED', 'ABANDONED', name='cartstatus'), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_carts_store_id'), 'carts', ['store_id'], unique=False)
    op.create_index(op.f('ix_carts_session_id'), 'carts', ['session_id'], unique=False)

    op.create_table('cart_items',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        sa.Column('cart_id', sa.UUID(as_uuid=False), sa.ForeignKey('carts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.UUID(as_uuid=False), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant', sa.String(length=100), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('product_snapshot', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cart_items_cart_id'), 'cart_items', ['cart_id'], unique=False)

    op.create_table('orders',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('cart_id', sa.UUID(as_uuid=False), sa.ForeignKey('carts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_phone', sa.String(length=50), nullable=True),
        sa.Column('shipping_address', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'CONFIRMED', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED', name='orderstatus'), nullable=True),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('platform_fee', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number'),
    )
    op.create_index(op.f('ix_orders_store_id'), 'orders', ['store_id'], unique=False)

    op.create_table('order_items',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        sa.Column('order_id', sa.UUID(as_uuid=False), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.UUID(as_uuid=False), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('variant', sa.String(length=100), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=12, scale=2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_order_items_order_id'), 'order_items', ['order_id'], unique=False)

    op.create_table('order_status_history',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        sa.Column('order_id', sa.UUID(as_uuid=False), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'CONFIRMED', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED', name='orderstatus', create_type=False), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('changed_by', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_order_status_history_order_id'), 'order_status_history', ['order_id'], unique=False)

    # AI task log and daily usage
    op.create_table('ai_tasks',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('agent', sa.String(length=50), nullable=False),
        sa.Column('task_type', sa.String(length=100), nullable=False),
        sa.Column('input_data', sa.JSON(), nullable=True),
        sa.Column('output_data', sa.JSON(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('tokens_used', sa.Integer(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ai_tasks_store_id'), 'ai_tasks', ['store_id'], unique=False)

    op.create_table('ai_usage',
        sa.Column('id', sa.UUID(as_uuid=False), nullable=False),
        _store_fk(),
        sa.Column('operation', sa.Enum('TEXT_GENERATION', 'BULK_BATCH', 'IMAGE_GENERATION', 'SCREENSHOT_ANALYSIS', name='usageoperation'), nullable=False),
        sa.Column('usage_date', sa.Date(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=True),
        sa.Column('tokens_used', sa.Integer(), nullable=True),
        sa.Column('cost_estimate', sa.Numeric(precision=12, scale=6), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'operation', 'usage_date', name='uq_ai_usage_store_op_date'),
    )
    op.create_index(op.f('ix_ai_usage_store_id'), 'ai_usage', ['store_id'], unique=False)


def downgrade() -> None:
    for table in (
        'ai_usage',
        'ai_tasks',
        'order_status_history',
        'order_items',
        'orders',
        'cart_items',
        'carts',
        'generated_assets',
        'product_drafts',
        'products',
        'bulk_batches',
        'categories',
        'users',
        'store_preview_tokens',
        'store_domains',
        'stores',
    ):
        op.drop_table(table)

    for enum_name in (
        'usageoperation',
        'orderstatus',
        'cartstatus',
        'assettype',
        'draftstatus',
        'aiconfidence',
        'productstatus',
        'batchstatus',
        'storetype',
        'storestatus',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
