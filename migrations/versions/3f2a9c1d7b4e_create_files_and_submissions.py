"""Create files and submissions tables

Revision ID: 3f2a9c1d7b4e
Revises:
Create Date: 2026-10-19 10:12:41.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b4e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'submissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_name', sa.String(length=100), nullable=False),
        sa.Column('student_email', sa.String(length=100), nullable=False),
        sa.Column('storage_key', sa.String(length=500), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('public_url', sa.String(length=1000), nullable=False),
        sa.Column('size_bytes', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), server_default='other', nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'rejected', name='submission_status', native_enum=False, length=20),
            server_default='pending',
            nullable=False,
        ),
        sa.Column('rejection_reason', sa.String(length=500), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('blob_purge_pending', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_submissions_status_created', 'submissions', ['status', 'created_at'])

    op.create_table(
        'files',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(length=100), nullable=False),
        sa.Column('storage_key', sa.String(length=500), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('public_url', sa.String(length=1000), nullable=False),
        sa.Column('size_bytes', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('source_submission_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['source_submission_id'], ['submissions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_submission_id')
    )
    op.create_index('ix_files_owner_id', 'files', ['owner_id'])
    op.create_index('idx_files_owner_created', 'files', ['owner_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_files_owner_created', table_name='files')
    op.drop_index('ix_files_owner_id', table_name='files')
    op.drop_table('files')
    op.drop_index('idx_submissions_status_created', table_name='submissions')
    op.drop_table('submissions')
