"""Delivery agent vetting

Revision ID: 7b2e4c1f9a30
Revises: 3f1c2a9d8e01
Create Date: 2026-10-18 14:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '7b2e4c1f9a30'
down_revision: Union[str, Sequence[str], None] = '3f1c2a9d8e01'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

agent_status = sa.Enum('INACTIVE', 'ACTIVE', name='agentstatus')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'delivery_agents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('photo', sa.String(), nullable=True),
        sa.Column('proof', sa.String(), nullable=False),
        sa.Column('status', agent_status, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_delivery_agents_id', 'delivery_agents', ['id'])
    op.create_index('ix_delivery_agents_status', 'delivery_agents', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('delivery_agents')
    agent_status.drop(op.get_bind(), checkfirst=True)
