"""Create skus and sku_measurements tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create skus and sku_measurements tables."""
    # SKUs (soft-deleted through deleted_at)
    op.create_table(
        'skus',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('code', sa.String(100), nullable=False, unique=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('brand_id', sa.String(100), nullable=False, index=True),
        sa.Column('line_id', sa.String(100), nullable=True),
        sa.Column('collection', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('images', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('videos', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('materials', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('category', postgresql.JSONB, nullable=False, server_default='{}'),
        sa.Column('metadata', postgresql.JSONB, nullable=False, server_default='{}'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Index for name search
    op.create_index('ix_skus_name', 'skus', ['name'])

    # Per-size measurements
    op.create_table(
        'sku_measurements',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('sku_id', sa.String(36),
                  sa.ForeignKey('skus.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('pom_id', sa.String(36),
                  sa.ForeignKey('pom_definitions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('size_id', sa.String(36),
                  sa.ForeignKey('vocabulary_entries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.Numeric(10, 2), nullable=False),
        sa.Column('tolerance', sa.Numeric(5, 2), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_unique_constraint(
        'uq_sku_measurement',
        'sku_measurements',
        ['sku_id', 'pom_id', 'size_id'],
    )


def downgrade() -> None:
    """Drop skus and sku_measurements tables."""
    op.drop_table('sku_measurements')
    op.drop_index('ix_skus_name', table_name='skus')
    op.drop_table('skus')
