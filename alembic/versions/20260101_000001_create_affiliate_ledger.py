"""Create affiliate ledger tables.

Revision ID: 20260101_000001
Revises:
Create Date: 2026-01-01

Creates affiliates, tracked links, attribution sessions (clicks),
commissions, payouts with their commission links, and fraud logs.
Adds affiliate attribution columns to the storefront orders table.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '20260101_000001'
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.DECIMAL(precision=18, scale=8)
RATE = sa.DECIMAL(precision=5, scale=4)


def upgrade() -> None:
    """Create affiliate ledger tables."""
    op.create_table(
        'affiliates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('affiliate_code', sa.String(length=50), nullable=False),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='pending',
            comment='pending, active, suspended, rejected'
        ),
        sa.Column(
            'commission_rate',
            RATE,
            nullable=False,
            server_default='0.10',
            comment='Commission rate as a fraction of order total'
        ),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('website_url', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('social_media', postgresql.JSONB(), nullable=True),
        sa.Column('tax_information', postgresql.JSONB(), nullable=True),
        sa.Column('payment_details', postgresql.JSONB(), nullable=True),
        sa.Column('total_clicks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_sales', MONEY, nullable=False, server_default='0'),
        sa.Column('total_commissions', MONEY, nullable=False, server_default='0'),
        sa.Column('pending_commissions', MONEY, nullable=False, server_default='0'),
        sa.Column('paid_commissions', MONEY, nullable=False, server_default='0'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_active', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('updated_by', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'commission_rate >= 0 AND commission_rate <= 1',
            name='check_affiliate_commission_rate_range'
        )
    )
    op.create_index('ix_affiliates_user_id', 'affiliates', ['user_id'], unique=True)
    op.create_index('ix_affiliates_email', 'affiliates', ['email'], unique=True)
    op.create_index(
        'ix_affiliates_affiliate_code', 'affiliates', ['affiliate_code'], unique=True
    )
    op.create_index('ix_affiliates_status', 'affiliates', ['status'])

    op.create_table(
        'affiliate_links',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column(
            'link_type',
            sa.String(length=20),
            nullable=False,
            server_default='general',
            comment='general, product, category'
        ),
        sa.Column('target_url', sa.String(length=500), nullable=False),
        sa.Column('campaign_name', sa.String(length=100), nullable=True),
        sa.Column('click_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('conversion_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('revenue_generated', MONEY, nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('last_clicked', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_affiliate_links_affiliate_id', 'affiliate_links', ['affiliate_id'])

    op.create_table(
        'affiliate_clicks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('session_token', sa.String(length=64), nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('affiliate_link_id', sa.Integer(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('referrer', sa.String(length=500), nullable=True),
        sa.Column('landing_page', sa.String(length=500), nullable=True),
        sa.Column('campaign', sa.String(length=100), nullable=True),
        sa.Column(
            'converted',
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment='Flips to true exactly once on attribution'
        ),
        sa.Column('conversion_order_id', sa.Integer(), nullable=True),
        sa.Column('converted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['affiliate_link_id'], ['affiliate_links.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_affiliate_clicks_session_token', 'affiliate_clicks', ['session_token'], unique=True
    )
    op.create_index(
        'ix_affiliate_clicks_conversion_order_id', 'affiliate_clicks', ['conversion_order_id']
    )
    op.create_index(
        'ix_affiliate_clicks_affiliate_created', 'affiliate_clicks', ['affiliate_id', 'created_at']
    )
    op.create_index(
        'ix_affiliate_clicks_affiliate_ip', 'affiliate_clicks', ['affiliate_id', 'ip_address']
    )

    op.create_table(
        'affiliate_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('click_id', sa.Integer(), nullable=True),
        sa.Column(
            'adjusts_commission_id',
            sa.Integer(),
            nullable=True,
            comment='Original commission of a refund compensating entry'
        ),
        sa.Column('order_total', MONEY, nullable=False, comment='Snapshot at conversion'),
        sa.Column('commission_rate', RATE, nullable=False, comment='Snapshot at conversion'),
        sa.Column('commission_amount', MONEY, nullable=False),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='pending',
            comment='pending, approved, paid, cancelled, disputed'
        ),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('payment_reference', sa.String(length=255), nullable=True),
        sa.Column('payment_notes', sa.Text(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('updated_by', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['click_id'], ['affiliate_clicks.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(
            ['adjusts_commission_id'], ['affiliate_commissions.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'commission_rate >= 0 AND commission_rate <= 1',
            name='check_commission_rate_range'
        )
    )
    op.create_index(
        'ix_affiliate_commissions_order_id', 'affiliate_commissions', ['order_id']
    )
    op.create_index(
        'ix_affiliate_commissions_adjusts_commission_id',
        'affiliate_commissions',
        ['adjusts_commission_id']
    )
    op.create_index(
        'ix_affiliate_commissions_affiliate_status',
        'affiliate_commissions',
        ['affiliate_id', 'status']
    )
    op.create_index(
        'ix_affiliate_commissions_created_at', 'affiliate_commissions', ['created_at']
    )

    op.create_table(
        'affiliate_payouts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('total_amount', MONEY, nullable=False),
        sa.Column('commission_count', sa.Integer(), nullable=False),
        sa.Column('payout_method', sa.String(length=50), nullable=True),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='pending',
            comment='pending, processing, completed, failed'
        ),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processed_by', sa.String(length=64), nullable=True),
        sa.Column('payment_reference', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_affiliate_payouts_affiliate_status',
        'affiliate_payouts',
        ['affiliate_id', 'status']
    )

    op.create_table(
        'affiliate_payout_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payout_id', sa.Integer(), nullable=False),
        sa.Column('commission_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['payout_id'], ['affiliate_payouts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['commission_id'], ['affiliate_commissions.id'], ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payout_id', 'commission_id', name='uq_payout_commission')
    )
    op.create_index(
        'ix_affiliate_payout_commissions_payout_id',
        'affiliate_payout_commissions',
        ['payout_id']
    )
    op.create_index(
        'ix_affiliate_payout_commissions_commission_id',
        'affiliate_payout_commissions',
        ['commission_id']
    )

    op.create_table(
        'affiliate_fraud_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('risk_score', sa.Integer(), nullable=False),
        sa.Column(
            'reasons',
            postgresql.JSONB(),
            nullable=False,
            comment='List of fraud reason codes'
        ),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='flagged'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()')
        ),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_affiliate_fraud_logs_affiliate_created',
        'affiliate_fraud_logs',
        ['affiliate_id', 'created_at']
    )

    # Attribution annotations on storefront orders
    op.add_column('orders', sa.Column('affiliate_id', sa.Integer(), nullable=True))
    op.add_column('orders', sa.Column('affiliate_click_id', sa.Integer(), nullable=True))
    op.add_column(
        'orders',
        sa.Column('affiliate_commission_amount', MONEY, nullable=True)
    )
    op.create_index(
        'ix_orders_affiliate_created', 'orders', ['affiliate_id', 'created_at']
    )


def downgrade() -> None:
    """Drop affiliate ledger tables."""
    op.drop_index('ix_orders_affiliate_created', table_name='orders')
    op.drop_column('orders', 'affiliate_commission_amount')
    op.drop_column('orders', 'affiliate_click_id')
    op.drop_column('orders', 'affiliate_id')

    op.drop_table('affiliate_fraud_logs')
    op.drop_table('affiliate_payout_commissions')
    op.drop_table('affiliate_payouts')
    op.drop_table('affiliate_commissions')
    op.drop_table('affiliate_clicks')
    op.drop_table('affiliate_links')
    op.drop_table('affiliates')
