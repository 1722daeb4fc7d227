"""create jobs table with enrichment state

Revision ID: c41d7e2a9b10
Revises:
Create Date: 2026-10-18 09:12:40.518204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'c41d7e2a9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JsonType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create jobs table: scraped payload plus enrichment state machine columns."""
    op.create_table(
        'jobs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('fingerprint', sa.String(length=64), nullable=False),
        sa.Column('source_name', sa.String(length=50), nullable=False),
        sa.Column('source_id', sa.String(length=255), nullable=True),
        sa.Column('payload', JsonType, nullable=False),
        sa.Column('enrichment_status', sa.String(length=20), server_default='unenriched', nullable=False),
        # status: unenriched, pending, processing, enriched, failed
        sa.Column('enrichment_attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('enrichment_version', sa.Integer(), server_default='0', nullable=False),
        sa.Column('queued_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_attempt_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('enriched_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('enriched_fields', JsonType, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_index('ix_jobs_fingerprint', 'jobs', ['fingerprint'], unique=True)
    op.create_index('ix_jobs_enrichment_status', 'jobs', ['enrichment_status'])
    # FIFO claims: WHERE status = 'pending' ORDER BY queued_at
    op.create_index('ix_jobs_status_queued_at', 'jobs', ['enrichment_status', 'queued_at'])
    # Stuck scans: WHERE status = 'processing' AND last_attempt_at < cutoff
    op.create_index('ix_jobs_status_last_attempt_at', 'jobs', ['enrichment_status', 'last_attempt_at'])


def downgrade() -> None:
    """Drop jobs table."""
    op.drop_index('ix_jobs_status_last_attempt_at', table_name='jobs')
    op.drop_index('ix_jobs_status_queued_at', table_name='jobs')
    op.drop_index('ix_jobs_enrichment_status', table_name='jobs')
    op.drop_index('ix_jobs_fingerprint', table_name='jobs')
    op.drop_table('jobs')
