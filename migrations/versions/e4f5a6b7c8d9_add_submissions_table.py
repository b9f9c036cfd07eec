"""add submissions table

Revision ID: e4f5a6b7c8d9
Revises: 7c8d9e0f1a2b
Create Date: 2025-03-16 20:13:05.118467

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = 'e4f5a6b7c8d9'
down_revision = '7c8d9e0f1a2b'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = inspect(bind)

    # Databases created with AUTO_CREATE_DB may already have it
    if 'submissions' in inspector.get_table_names():
        return

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('post_type', sa.String(length=16), nullable=False),
        sa.Column('post_id', sa.String(length=64), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=True),
        sa.Column('submitted_by', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_submissions_status', 'submissions', ['status'], unique=False)


def downgrade():
    op.drop_index('ix_submissions_status', table_name='submissions')
    op.drop_table('submissions')
