"""initial schema: users, otp_codes, issues, issue_events

Revision ID: c4e1a7d2b9f0
Revises:
Create Date: 2026-10-18

  users         : one row per phone, role citizen | admin
  otp_codes     : the single outstanding OTP per phone (unique phone)
  issues        : reported issues; status caches the latest event
  issue_events  : append-only status history
"""
from alembic import op
import sqlalchemy as sa

revision = 'c4e1a7d2b9f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)

    op.create_table(
        'otp_codes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('code', sa.String(12), nullable=False),
        sa.Column('attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_otp_codes_phone', 'otp_codes', ['phone'], unique=True)

    op.create_table(
        'issues',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lng', sa.Float(), nullable=False),
        sa.Column('status', sa.Text(), server_default='Created', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            'created_by_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
    )
    op.create_index('ix_issues_category', 'issues', ['category'])
    op.create_index('ix_issues_status', 'issues', ['status'])
    op.create_index('ix_issues_created_at', 'issues', ['created_at'])
    op.create_index('ix_issues_created_by_id', 'issues', ['created_by_id'])

    op.create_table(
        'issue_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'issue_id',
            sa.Integer(),
            sa.ForeignKey('issues.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('actor_phone', sa.Text(), nullable=True),
    )
    op.create_index('ix_issue_events_issue_id', 'issue_events', ['issue_id'])


def downgrade() -> None:
    op.drop_index('ix_issue_events_issue_id', table_name='issue_events')
    op.drop_table('issue_events')
    op.drop_index('ix_issues_created_by_id', table_name='issues')
    op.drop_index('ix_issues_created_at', table_name='issues')
    op.drop_index('ix_issues_status', table_name='issues')
    op.drop_index('ix_issues_category', table_name='issues')
    op.drop_table('issues')
    op.drop_index('ix_otp_codes_phone', table_name='otp_codes')
    op.drop_table('otp_codes')
    op.drop_index('ix_users_phone', table_name='users')
    op.drop_table('users')
