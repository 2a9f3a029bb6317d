"""Retire POM definitions in place and add package measurement types.

Revision ID: 003
Revises: 002
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '003'
down_revision: Union[str, None] = '002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add pom_definitions.is_active and the package_measurement_types table."""
    op.add_column(
        'pom_definitions',
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    )
    op.add_column(
        'pom_definitions',
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    op.create_table(
        'package_measurement_types',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('unit', sa.String(10), nullable=False, server_default='cm'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )


def downgrade() -> None:
    """Drop package_measurement_types and the POM retirement columns."""
    op.drop_table('package_measurement_types')
    op.drop_column('pom_definitions', 'updated_at')
    op.drop_column('pom_definitions', 'is_active')
