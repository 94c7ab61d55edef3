"""Initial schema - users, portfolio, watchlist and closed positions

Revision ID: 0001
Revises: None
Create Date: 2024-06-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables."""

    # ===========================================
    # 1. USERS TABLE
    # ===========================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('username', sa.String(50), unique=True, index=True, nullable=False),
        sa.Column('email', sa.String(255), unique=True, index=True, nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('is_superuser', sa.Boolean(), default=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )

    # ===========================================
    # 2. PORTFOLIO TABLE (open positions)
    # ===========================================
    op.create_table(
        'portfolio',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('symbol', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sector', sa.String(100), nullable=True),
        sa.Column('buy_price', sa.Numeric(15, 4), nullable=False, server_default='0'),
        sa.Column('current_price', sa.Numeric(15, 4), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('invested', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('current_value', sa.Numeric(15, 2), nullable=True),
        sa.Column('pl', sa.Numeric(15, 2), nullable=True),
        sa.Column('pl_percent', sa.Numeric(10, 2), nullable=True),
        sa.Column('day_change', sa.Numeric(15, 4), server_default='0'),
        sa.Column('day_change_percent', sa.Numeric(10, 2), server_default='0'),
        sa.Column('target_price', sa.Numeric(15, 4), nullable=True),
        sa.Column('stop_loss', sa.Numeric(15, 4), nullable=True),
        sa.Column('position_size', sa.String(20), server_default='Medium'),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        sa.Column('last_updated', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('quantity >= 0', name='ck_portfolio_quantity_non_negative'),
        sa.CheckConstraint('buy_price >= 0', name='ck_portfolio_buy_price_non_negative'),
    )

    # ===========================================
    # 3. WATCHLIST TABLE
    # ===========================================
    op.create_table(
        'watchlist',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('symbol', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sector', sa.String(100), server_default='Unknown'),
        sa.Column('current_price', sa.Numeric(15, 4), nullable=True),
        sa.Column('day_change', sa.Numeric(15, 4), nullable=True),
        sa.Column('day_change_percent', sa.Numeric(10, 2), nullable=True),
        sa.Column('target_price', sa.Numeric(15, 4), nullable=True),
        sa.Column('stop_loss', sa.Numeric(15, 4), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('added_date', sa.Date(), nullable=False),
        sa.Column('last_updated', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    # ===========================================
    # 4. CLOSED_POSITIONS TABLE
    # ===========================================
    op.create_table(
        'closed_positions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('symbol', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sector', sa.String(100), nullable=True),
        sa.Column('buy_price', sa.Numeric(15, 4), nullable=False, server_default='0'),
        sa.Column('sell_price', sa.Numeric(15, 4), nullable=False, server_default='0'),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('invested', sa.Numeric(15, 2), nullable=False),
        sa.Column('realized', sa.Numeric(15, 2), nullable=False),
        sa.Column('pl', sa.Numeric(15, 2), nullable=False),
        sa.Column('pl_percent', sa.Numeric(10, 2), nullable=False),
        sa.Column('buy_date', sa.Date(), nullable=False),
        sa.Column('sell_date', sa.Date(), nullable=False),
        sa.Column('holding_period', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('quantity >= 0', name='ck_closed_positions_quantity_non_negative'),
        sa.CheckConstraint('buy_price >= 0', name='ck_closed_positions_buy_price_non_negative'),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('closed_positions')
    op.drop_table('watchlist')
    op.drop_table('portfolio')
    op.drop_table('users')
