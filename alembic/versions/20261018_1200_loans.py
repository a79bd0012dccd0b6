"""Create loans table

Revision ID: 5c1e0a7d9b42
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d9b42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('loans',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        # Loan details
        sa.Column('friend_name', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='INR'),
        sa.Column('date_loaned', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        # Contact info
        sa.Column('phone_number', sa.String(length=30), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        # Repayment and reminders
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('reminder_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_reminder_sent', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_loans_amount_positive'),
        sa.CheckConstraint('reminder_count >= 0', name='ck_loans_reminder_count_non_negative')
    )
    op.create_index(op.f('ix_loans_owner_id'), 'loans', ['owner_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_loans_owner_id'), table_name='loans')
    op.drop_table('loans')
