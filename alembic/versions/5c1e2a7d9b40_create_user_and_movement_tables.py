"""create user and movement tables

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2026-02-12 16:28:45.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e2a7d9b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    role = sa.Enum('USER', 'ADMIN', name='role')
    movement_type = sa.Enum('INCOME', 'EXPENSE', name='movementtype')

    op.create_table(
        'user',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('role', role, nullable=False, server_default='USER'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)
    op.create_index(op.f('ix_user_role'), 'user', ['role'], unique=False)

    op.create_table(
        'movement',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('concept', sa.String(length=200), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('type', movement_type, nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_movement_date'), 'movement', ['date'], unique=False)
    op.create_index(op.f('ix_movement_user_id'), 'movement', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_movement_user_id'), table_name='movement')
    op.drop_index(op.f('ix_movement_date'), table_name='movement')
    op.drop_table('movement')
    op.drop_index(op.f('ix_user_role'), table_name='user')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')
    sa.Enum(name='movementtype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='role').drop(op.get_bind(), checkfirst=True)
