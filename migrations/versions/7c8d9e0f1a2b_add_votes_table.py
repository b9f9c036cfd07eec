"""add votes table

Revision ID: 7c8d9e0f1a2b
Revises: 1a2b3c4d5e6f
Create Date: 2025-03-09 11:05:47.902231

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c8d9e0f1a2b'
down_revision = '1a2b3c4d5e6f'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'votes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('vote_type', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("vote_type in ('upvote', 'downvote')", name='ck_votes_vote_type'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('post_id', 'user_id', name='uq_votes_post_user'),
    )
    op.create_index('ix_votes_post_id', 'votes', ['post_id'], unique=False)
    op.create_index('ix_votes_user_id', 'votes', ['user_id'], unique=False)


def downgrade():
    op.drop_index('ix_votes_user_id', table_name='votes')
    op.drop_index('ix_votes_post_id', table_name='votes')
    op.drop_table('votes')
