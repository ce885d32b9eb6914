"""initial league schema

Revision ID: 5b7e2d9c1a40
Revises:
Create Date: 2026-01-12 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7e2d9c1a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'admin_user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
    )
    op.create_index('ix_admin_user_username', 'admin_user', ['username'], unique=True)

    op.create_table(
        'tournament',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('num_weeks', sa.Integer(), nullable=False),
        sa.Column('current_week', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('week_dates', sa.Text(), nullable=True),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'team',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tournament_id', sa.Integer(), sa.ForeignKey('tournament.id'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_team_tournament_id', 'team', ['tournament_id'])

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tournament_id', sa.Integer(), sa.ForeignKey('tournament.id'), nullable=False),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('player_code', sa.String(length=50), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default='500000'),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('is_captain', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_player_tournament_id', 'player', ['tournament_id'])
    op.create_index('ix_player_team_id', 'player', ['team_id'])

    op.create_table(
        'reserve',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tournament_id', sa.Integer(), sa.ForeignKey('tournament.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default='500000'),
        sa.Column('suggested_position', sa.String(length=10), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_reserve_tournament_id', 'reserve', ['tournament_id'])

    op.create_table(
        'weekly_matchup',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tournament_id', sa.Integer(), sa.ForeignKey('tournament.id'), nullable=False),
        sa.Column('week', sa.Integer(), nullable=False),
        sa.Column('team_a_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
        sa.Column('team_b_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
        sa.Column('team_a_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('team_b_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_weekly_matchup_tournament_id', 'weekly_matchup', ['tournament_id'])

    op.create_table(
        'match',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('weekly_matchup_id', sa.Integer(), sa.ForeignKey('weekly_matchup.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('player_a_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('player_b_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('substitute_a_id', sa.Integer(), sa.ForeignKey('reserve.id'), nullable=True),
        sa.Column('substitute_b_id', sa.Integer(), sa.ForeignKey('reserve.id'), nullable=True),
        sa.Column('score_a', sa.Integer(), nullable=True),
        sa.Column('score_b', sa.Integer(), nullable=True),
        sa.Column('handicap', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('scored_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_match_weekly_matchup_id', 'match', ['weekly_matchup_id'])

    op.create_table(
        'weekly_duty',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tournament_id', sa.Integer(), sa.ForeignKey('tournament.id'), nullable=False),
        sa.Column('week', sa.Integer(), nullable=False),
        sa.Column('dinner_team_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
        sa.Column('cleanup_team_id', sa.Integer(), sa.ForeignKey('team.id'), nullable=False),
    )
    op.create_index('ix_weekly_duty_tournament_id', 'weekly_duty', ['tournament_id'])


def downgrade():
    op.drop_table('weekly_duty')
    op.drop_table('match')
    op.drop_table('weekly_matchup')
    op.drop_table('reserve')
    op.drop_table('player')
    op.drop_table('team')
    op.drop_table('tournament')
    op.drop_table('admin_user')
