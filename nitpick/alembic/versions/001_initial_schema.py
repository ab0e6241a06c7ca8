"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates the following tables:
- users, user_exercises
- submissions
- comments, likes, muted_submissions, submission_viewers
- views: last-viewed timestamp per user and exercise
- notifications
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True, index=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        'user_exercises',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('language', sa.String(50), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('state', sa.String(50), server_default='pending'),
        sa.Column('is_nitpicker', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'language', 'slug', name='uq_user_exercise_problem'),
    )

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('key', sa.String(32), nullable=False, unique=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('user_exercise_id', sa.Integer(), sa.ForeignKey('user_exercises.id'), nullable=True, index=True),
        sa.Column('solution', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True),
        sa.Column('language', sa.String(50), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('state', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('done_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('nit_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_liked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), index=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_submissions_user_problem', 'submissions', ['user_id', 'language', 'slug'])
    op.create_index('ix_submissions_problem_state', 'submissions', ['language', 'slug', 'state'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id'), nullable=False, index=True),
        sa.Column('body', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), index=True),
    )

    op.create_table(
        'likes',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), index=True),
        sa.UniqueConstraint('user_id', 'submission_id', name='uq_like_user_submission'),
    )

    op.create_table(
        'muted_submissions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'submission_id', name='uq_muted_user_submission'),
    )

    op.create_table(
        'submission_viewers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('viewer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('submission_id', sa.Integer(), sa.ForeignKey('submissions.id'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('viewer_id', 'submission_id', name='uq_viewer_submission'),
    )

    op.create_table(
        'views',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('user_exercises.id'), nullable=False),
        sa.Column('last_viewed_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'exercise_id', name='uq_view_user_exercise'),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('item_type', sa.String(50), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('regarding', sa.String(50), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_item', 'notifications', ['item_type', 'item_id'])


def downgrade():
    op.drop_index('ix_notifications_item', table_name='notifications')
    op.drop_table('notifications')
    op.drop_table('views')
    op.drop_table('submission_viewers')
    op.drop_table('muted_submissions')
    op.drop_table('likes')
    op.drop_table('comments')
    op.drop_index('ix_submissions_problem_state', table_name='submissions')
    op.drop_index('ix_submissions_user_problem', table_name='submissions')
    op.drop_table('submissions')
    op.drop_table('user_exercises')
    op.drop_table('users')
