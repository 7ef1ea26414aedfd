"""init_db_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- user: accounts (buyer, seller, admin, enterprise_buyer, enterprise_vendor)
- category: self-referencing catalogue tree
- product: fixed-price and auction listings, money in NUMERIC(12, 2)
- bid: auction bids, at most one winning bid per product
- order: UUID7 primary key, one per payment intent
- payment: gateway intent records
- wallet / wallet_transaction: balance plus append-only signed ledger
- enterprise_listing / quote_request / quote_response: bulk quote workflow

Note: product.specifications, enterprise_listing.specs and quote_response.line_items
are JSONB lists of typed records, e.g. [{"name": "Wattage", "value": "400", "unit": "W"}]
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, with_updated_at: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        )
    ]
    if with_updated_at:
        columns.append(
            sa.Column(
                'updated_at',
                sa.DateTime(timezone=True),
                server_default=sa.text('now()'),
                nullable=False,
            )
        )
    return columns


def _money(name: str, *, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=nullable)


def upgrade() -> None:
    """Create all tables with final schema."""

    # ========== STEP 1: Accounts and catalogue ==========

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        *_timestamps(with_updated_at=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)
    op.create_index(op.f('ix_user_role'), 'user', ['role'], unique=False)

    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        *_timestamps(with_updated_at=False),
        sa.ForeignKeyConstraint(['parent_id'], ['category.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        _money('price'),
        sa.Column('condition', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_auction', sa.Boolean(), nullable=False),
        _money('minimum_bid', nullable=True),
        _money('current_bid', nullable=True),
        _money('buy_now_price', nullable=True),
        sa.Column('auction_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'specifications', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")
        ),
        sa.Column('location', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['owner_id'], ['user.id']),
        sa.ForeignKeyConstraint(['category_id'], ['category.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_product_owner_id'), 'product', ['owner_id'], unique=False)
    op.create_index(op.f('ix_product_category_id'), 'product', ['category_id'], unique=False)
    op.create_index(
        'ix_product_status_auction_end',
        'product',
        ['status', 'is_auction', 'auction_end_date'],
        unique=False,
    )

    # ========== STEP 2: Auctions ==========

    op.create_table(
        'bid',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        _money('amount'),
        sa.Column('is_winning', sa.Boolean(), nullable=False),
        *_timestamps(with_updated_at=False),
        sa.ForeignKeyConstraint(['product_id'], ['product.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bid_product_amount', 'bid', ['product_id', 'amount'], unique=False)
    op.create_index(op.f('ix_bid_user_id'), 'bid', ['user_id'], unique=False)

    # ========== STEP 3: Orders and payments ==========

    op.create_table(
        'order',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        _money('total_amount'),
        _money('platform_fee'),
        _money('seller_amount'),
        sa.Column('shipping_address', JSONB, nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_intent_id', sa.String(length=255), nullable=True),
        sa.Column('tracking_number', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shipped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['buyer_id'], ['user.id']),
        sa.ForeignKeyConstraint(['seller_id'], ['user.id']),
        sa.ForeignKeyConstraint(['product_id'], ['product.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payment_intent_id'),
    )
    op.create_index(op.f('ix_order_buyer_id'), 'order', ['buyer_id'], unique=False)
    op.create_index(op.f('ix_order_seller_id'), 'order', ['seller_id'], unique=False)
    op.create_index(op.f('ix_order_product_id'), 'order', ['product_id'], unique=False)

    op.create_table(
        'payment',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('payment_intent_id', sa.String(length=255), nullable=False),
        _money('amount'),
        _money('platform_fee'),
        _money('net_amount'),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        *_timestamps(with_updated_at=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['order_id'], ['order.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payment_intent_id'),
    )
    op.create_index(op.f('ix_payment_user_id'), 'payment', ['user_id'], unique=False)
    op.create_index(op.f('ix_payment_order_id'), 'payment', ['order_id'], unique=False)

    # ========== STEP 4: Wallet ledger ==========

    op.create_table(
        'wallet',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        _money('balance'),
        _money('locked_balance'),
        *_timestamps(),
        sa.CheckConstraint('balance >= 0', name='ck_wallet_balance_non_negative'),
        sa.CheckConstraint('locked_balance >= 0', name='ck_wallet_locked_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'wallet_transaction',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('wallet_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        _money('amount'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('reference', sa.String(length=255), nullable=True),
        *_timestamps(with_updated_at=False),
        sa.ForeignKeyConstraint(['wallet_id'], ['wallet.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_wallet_transaction_wallet_id'), 'wallet_transaction', ['wallet_id'], unique=False
    )

    # ========== STEP 5: Enterprise quotes ==========

    op.create_table(
        'enterprise_listing',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        _money('base_price'),
        sa.Column('price_unit', sa.String(length=50), nullable=False),
        sa.Column('specs', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('delivery_time', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['vendor_id'], ['user.id']),
        sa.ForeignKeyConstraint(['category_id'], ['category.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_enterprise_listing_vendor_id'), 'enterprise_listing', ['vendor_id'], unique=False
    )
    op.create_index(
        op.f('ix_enterprise_listing_status'), 'enterprise_listing', ['status'], unique=False
    )

    op.create_table(
        'quote_request',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('listing_id', sa.Integer(), nullable=True),
        sa.Column('vendor_id', sa.Integer(), nullable=True),
        sa.Column('requested_quantity', sa.Integer(), nullable=False),
        sa.Column(
            'project_specs', JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('delivery_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['buyer_id'], ['user.id']),
        sa.ForeignKeyConstraint(['listing_id'], ['enterprise_listing.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_quote_request_buyer_id'), 'quote_request', ['buyer_id'], unique=False)
    op.create_index(
        op.f('ix_quote_request_listing_id'), 'quote_request', ['listing_id'], unique=False
    )
    op.create_index(
        op.f('ix_quote_request_vendor_id'), 'quote_request', ['vendor_id'], unique=False
    )

    op.create_table(
        'quote_response',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('quote_request_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        _money('proposed_total_price'),
        sa.Column('line_items', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('delivery_estimate', sa.String(length=100), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('payment_terms', sa.String(length=255), nullable=True),
        sa.Column('warranty_terms', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('valid_until', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['quote_request_id'], ['quote_request.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_quote_response_quote_request_id'),
        'quote_response',
        ['quote_request_id'],
        unique=False,
    )
    op.create_index(
        op.f('ix_quote_response_vendor_id'), 'quote_response', ['vendor_id'], unique=False
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('quote_response')
    op.drop_table('quote_request')
    op.drop_table('enterprise_listing')
    op.drop_table('wallet_transaction')
    op.drop_table('wallet')
    op.drop_table('payment')
    op.drop_table('order')
    op.drop_table('bid')
    op.drop_table('product')
    op.drop_table('category')
    op.drop_table('user')
