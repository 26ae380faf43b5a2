"""Add completion log, progress and milestone tables.

Revision ID: e1a2b3c4d5f6
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'e1a2b3c4d5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create completion_events, daily_progress, user_stats and the milestone tables."""
    op.create_table(
        'completion_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('category', sa.Enum('Mind', 'Body', 'Soul', name='routine_category', native_enum=False), nullable=False),
        sa.Column('routine_id', sa.String(64), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_completion_events_user_id', 'completion_events', ['user_id'])
    op.create_index(
        'ix_completion_events_user_category_time',
        'completion_events',
        ['user_id', 'category', 'completed_at'],
    )

    op.create_table(
        'daily_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('mind_complete', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.Column('body_complete', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.Column('soul_complete', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='unique_user_daily_progress'),
    )
    op.create_index('ix_daily_progress_user_id', 'daily_progress', ['user_id'])

    op.create_table(
        'user_stats',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('current_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('longest_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('mind_current_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('body_current_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('soul_current_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('mind_longest_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('body_longest_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('soul_longest_streak', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('unique_mind_routines', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('unique_body_routines', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('unique_soul_routines', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('last_mind_activity', sa.Date(), nullable=True),
        sa.Column('last_body_activity', sa.Date(), nullable=True),
        sa.Column('last_soul_activity', sa.Date(), nullable=True),
        sa.Column('harmony_score', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_completions', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'milestone_definitions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=False, server_default=''),
        sa.Column('icon_name', sa.String(50), nullable=False, server_default='trophy'),
        sa.Column('icon_color', sa.String(20), nullable=False, server_default='#3B82F6'),
        sa.Column('metric', sa.String(64), nullable=False),
        sa.Column('threshold', sa.Integer(), nullable=False),
        sa.Column('threshold_type', sa.String(20), nullable=False, server_default='count'),
        sa.Column('rarity', sa.String(20), nullable=False, server_default='common'),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_milestone_definitions_category', 'milestone_definitions', ['category'])

    op.create_table(
        'user_milestones',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('milestone_id', sa.String(64), nullable=False),
        sa.Column('achieved_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('progress_value', sa.Integer(), nullable=True),
        sa.Column('shown_celebration', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.Column('shared_to_activity', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['milestone_id'], ['milestone_definitions.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'milestone_id', name='unique_user_milestone'),
    )
    op.create_index('ix_user_milestones_user_id', 'user_milestones', ['user_id'])
    op.create_index('ix_user_milestones_celebration', 'user_milestones', ['user_id', 'shown_celebration'])

    op.create_table(
        'milestone_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('milestone_id', sa.String(64), nullable=False),
        sa.Column('current_value', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('last_updated', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['milestone_id'], ['milestone_definitions.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'milestone_id', name='unique_user_milestone_progress'),
    )
    op.create_index('ix_milestone_progress_user_id', 'milestone_progress', ['user_id'])


def downgrade():
    """Drop progress and milestone tables."""
    op.drop_index('ix_milestone_progress_user_id', table_name='milestone_progress')
    op.drop_table('milestone_progress')
    op.drop_index('ix_user_milestones_celebration', table_name='user_milestones')
    op.drop_index('ix_user_milestones_user_id', table_name='user_milestones')
    op.drop_table('user_milestones')
    op.drop_index('ix_milestone_definitions_category', table_name='milestone_definitions')
    op.drop_table('milestone_definitions')
    op.drop_table('user_stats')
    op.drop_index('ix_daily_progress_user_id', table_name='daily_progress')
    op.drop_table('daily_progress')
    op.drop_index('ix_completion_events_user_category_time', table_name='completion_events')
    op.drop_index('ix_completion_events_user_id', table_name='completion_events')
    op.drop_table('completion_events')
