"""create_health_score_records_table

Revision ID: 4c1e7a9d2b58
Revises:
Create Date: 2026-10-18 09:30:41.218377
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = '4c1e7a9d2b58'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Apply migration: create_health_score_records_table"""
    # One row per health score calculation
    op.create_table('health_score_records',
        sa.Column('entity_id', sa.String(length=255), nullable=False, comment='Identifier of the scored entity'),
        sa.Column('calculated_at', sa.DateTime(timezone=True), nullable=False, comment='When the score was calculated'),
        sa.Column('overall_score', sa.Numeric(precision=5, scale=2), nullable=False, comment='Overall health score (0-100)'),
        sa.Column('health_status', sa.String(length=20), nullable=False, comment='healthy, warning or critical'),
        sa.Column('previous_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('score_change', sa.Numeric(precision=8, scale=2), nullable=True, comment='Percentage change from previous score'),
        sa.Column('score_change_velocity', sa.Numeric(precision=8, scale=2), nullable=True, comment='Score change percentage per day'),
        sa.Column('confidence', sa.Numeric(precision=3, scale=2), nullable=False, comment='Data availability confidence (0-1)'),
        sa.Column('benchmark_percentile', sa.Integer(), nullable=True, comment='Percentile rank against recently scored entities'),
        sa.Column('financial_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('operational_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('team_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('customer_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('market_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('technology_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('primary_issue', sa.Text(), nullable=True),
        sa.Column('issues', postgresql.JSONB(astext_type=sa.Text()), nullable=False, comment='Flagged metric messages, worst first'),
        sa.Column('critical_flags', postgresql.JSONB(astext_type=sa.Text()), nullable=False, comment='Flagged metrics scoring below the critical threshold'),
        sa.Column('risk_assessment_score', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('growth_opportunity_index', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('raw_metrics', postgresql.JSONB(astext_type=sa.Text()), nullable=False, comment='Numeric metric snapshot used for trend series'),
        sa.Column('data_freshness_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('calculation_duration_ms', sa.Numeric(precision=10, scale=3), nullable=True),
        sa.Column('calculation_version', sa.String(length=20), nullable=False),
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entity_id', 'calculated_at', name='uq_health_score_records_entity_calculated')
    )

    # Latest-per-entity, dashboard filters and benchmark window lookups
    op.create_index('ix_health_score_records_entity_calculated', 'health_score_records', ['entity_id', 'calculated_at'], unique=False)
    op.create_index('ix_health_score_records_status_score', 'health_score_records', ['health_status', 'overall_score'], unique=False)
    op.create_index('ix_health_score_records_calculated_at', 'health_score_records', ['calculated_at'], unique=False)


def downgrade() -> None:
    """Revert migration: create_health_score_records_table"""
    # Drop indexes
    op.drop_index('ix_health_score_records_calculated_at', table_name='health_score_records')
    op.drop_index('ix_health_score_records_status_score', table_name='health_score_records')
    op.drop_index('ix_health_score_records_entity_calculated', table_name='health_score_records')

    # Drop table
    op.drop_table('health_score_records')
