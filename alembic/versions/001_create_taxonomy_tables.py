"""Create taxonomy, attribute, vocabulary and POM tables.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create taxonomy, attribute matrix, vocabulary and POM tables."""
    # Category hierarchy (apparel roots, style children)
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('parent_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Attribute registry
    op.create_table(
        'attribute_types',
        sa.Column('slug', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Sparse category x attribute matrix
    op.create_table(
        'category_attributes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('attribute_slug', sa.String(100),
                  sa.ForeignKey('attribute_types.slug', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.Text(), nullable=False, server_default=''),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_unique_constraint(
        'uq_category_attribute',
        'category_attributes',
        ['category_id', 'attribute_slug'],
    )

    # Reference vocabularies
    op.create_table(
        'vocabulary_entries',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('kind', sa.String(20), nullable=False, index=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('hex_code', sa.String(7), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_unique_constraint(
        'uq_vocabulary_kind_name',
        'vocabulary_entries',
        ['kind', 'name'],
    )

    # Points of measurement
    op.create_table(
        'pom_categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'pom_definitions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('pom_categories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('code', sa.String(10), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('measurement_unit', sa.String(10), nullable=False, server_default='cm'),
        sa.Column('is_half_measurement', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('default_tolerance', sa.Numeric(5, 2), nullable=False, server_default='0.5'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_unique_constraint(
        'uq_pom_category_code',
        'pom_definitions',
        ['category_id', 'code'],
    )

    op.create_table(
        'apparel_pom_mappings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('apparel_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('pom_id', sa.String(36),
                  sa.ForeignKey('pom_definitions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_unique_constraint(
        'uq_apparel_pom',
        'apparel_pom_mappings',
        ['apparel_id', 'pom_id'],
    )


def downgrade() -> None:
    """Drop taxonomy, attribute matrix, vocabulary and POM tables."""
    op.drop_table('apparel_pom_mappings')
    op.drop_table('pom_definitions')
    op.drop_table('pom_categories')
    op.drop_table('vocabulary_entries')
    op.drop_table('category_attributes')
    op.drop_table('attribute_types')
    op.drop_table('categories')
