"""Initial schema: users, posters, payouts, support messages.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('uuid', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('user_role', sa.String(50), nullable=True),
        sa.Column('approved', sa.Boolean(), nullable=True),
        sa.Column('vendor', sa.String(255), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('instagram', sa.String(255), nullable=True),
        sa.Column('portfolio', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('payment_method', sa.String(20), nullable=True),
        sa.Column('iban', sa.String(64), nullable=True),
        sa.Column('paypal_email', sa.String(255), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('idx_user_email', 'users', ['email'])
    op.create_index('idx_user_role_approved', 'users', ['user_role', 'approved'])

    op.create_table(
        'posters',
        sa.Column('uuid', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('drive_link', sa.String(500), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=True),
        sa.Column('prices', sa.JSON(), nullable=True),
        sa.Column('selected_sizes', sa.JSON(), nullable=True),
        sa.Column('sales', sa.Integer(), nullable=True),
        sa.Column('shopify_product_id', sa.String(255), nullable=True),
        sa.Column('shopify_url', sa.String(500), nullable=True),
        sa.Column('creator_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=False),
        sa.Column('upload_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('idx_poster_creator_id', 'posters', ['creator_id'])
    op.create_index('idx_poster_status', 'posters', ['status'])

    op.create_table(
        'payouts',
        sa.Column('uuid', sa.String(36), primary_key=True),
        sa.Column('creator_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('method', sa.String(20), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('calculated_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('override_reason', sa.Text(), nullable=True),
        sa.Column('override_by', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('creator_id', 'period_start', 'period_end', name='uq_payout_creator_period'),
    )
    op.create_index('idx_payout_creator_id', 'payouts', ['creator_id'])
    op.create_index('idx_payout_status', 'payouts', ['status'])

    op.create_table(
        'support_messages',
        sa.Column('uuid', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('vendor', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('idx_support_status', 'support_messages', ['status'])


def downgrade():
    op.drop_index('idx_support_status', table_name='support_messages')
    op.drop_table('support_messages')
    op.drop_index('idx_payout_status', table_name='payouts')
    op.drop_index('idx_payout_creator_id', table_name='payouts')
    op.drop_table('payouts')
    op.drop_index('idx_poster_status', table_name='posters')
    op.drop_index('idx_poster_creator_id', table_name='posters')
    op.drop_table('posters')
    op.drop_index('idx_user_role_approved', table_name='users')
    op.drop_index('idx_user_email', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
