"""add attachments table

Revision ID: d8b3f5a1c6e2
Revises: c4e1a7d2b9f0
Create Date: 2026-10-18

Photo metadata linked to an issue at creation time. The bytes themselves
live in the upload directory under `filename`.
"""
from alembic import op
import sqlalchemy as sa

revision = 'd8b3f5a1c6e2'
down_revision = 'c4e1a7d2b9f0'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'attachments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'issue_id',
            sa.Integer(),
            sa.ForeignKey('issues.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('filename', sa.Text(), nullable=False),
        sa.Column('mime', sa.Text(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_attachments_issue_id', 'attachments', ['issue_id'])


def downgrade() -> None:
    op.drop_index('ix_attachments_issue_id', table_name='attachments')
    op.drop_table('attachments')
