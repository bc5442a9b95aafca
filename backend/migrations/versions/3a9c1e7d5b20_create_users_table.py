"""create users table

Revision ID: 3a9c1e7d5b20
Revises:
Create Date: 2025-10-02 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a9c1e7d5b20'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('games_won', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_streak', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    # Leaderboard order: max_streak desc, games_won desc
    op.create_index('ix_users_leaderboard', 'users', ['max_streak', 'games_won'])


def downgrade():
    op.drop_index('ix_users_leaderboard', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
