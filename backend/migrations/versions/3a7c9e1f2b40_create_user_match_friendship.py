"""create user, game_match and friendship tables

Revision ID: 3a7c9e1f2b40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c9e1f2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'game_match' not in existing_tables:
        op.create_table(
            'game_match',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_type', sa.String(length=32), nullable=False),
            sa.Column('player1_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('player2_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('p1_score', sa.Integer(), nullable=False),
            sa.Column('p2_score', sa.Integer(), nullable=False),
            sa.Column('winner_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        )
        op.create_index('ix_game_match_game_type', 'game_match', ['game_type'])
        op.create_index('ix_game_match_player1_id', 'game_match', ['player1_id'])
        op.create_index('ix_game_match_player2_id', 'game_match', ['player2_id'])

    if 'friendship' not in existing_tables:
        op.create_table(
            'friendship',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('friend_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.UniqueConstraint('user_id', 'friend_id', name='uq_friendship_pair'),
        )
        op.create_index('ix_friendship_user_id', 'friendship', ['user_id'])
        op.create_index('ix_friendship_friend_id', 'friendship', ['friend_id'])


def downgrade():
    op.drop_table('friendship')
    op.drop_table('game_match')
    op.drop_table('user')
