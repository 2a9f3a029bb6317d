"""SQLAlchemy models for the product taxonomy and SKU catalog.

Defines the category hierarchy, the attribute registry and matrix,
reference vocabularies, the points-of-measurement catalog and SKU
records for persistent storage.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.state_machines import SKUStatus
from app.infrastructure.database import Base, JSONType


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Taxonomy
# ============================================================================


class Category(Base):
    """Node of the two-level apparel/style taxonomy.

    Root categories (``parent_id is None``) are apparel categories;
    their children are style categories. Style categories never have
    children of their own.

    Attributes:
        id: Unique category identifier.
        name: Display name.
        parent_id: Parent apparel category (None for roots).
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, name={self.name}, parent_id={self.parent_id})>"

    @property
    def level(self) -> str:
        """Taxonomy level: "apparel" for roots, "style" for children."""
        return "apparel" if self.parent_id is None else "style"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "level": self.level,
        }


class AttributeType(Base):
    """Registered attribute slug that may be attached to a category.

    The slug is the join key of the attribute matrix and never changes.
    """

    __tablename__ = "attribute_types"

    slug: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<AttributeType(slug={self.slug}, name={self.name})>"


class CategoryAttribute(Base):
    """One cell of the sparse (category, attribute slug) -> value matrix.

    Values are opaque text. Multi-valued slugs hold a JSON-encoded
    array of vocabulary IDs.
    """

    __tablename__ = "category_attributes"
    __table_args__ = (
        UniqueConstraint("category_id", "attribute_slug", name="uq_category_attribute"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_slug: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("attribute_types.slug", ondelete="CASCADE"),
        nullable=False,
    )
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryAttribute({self.category_id}, {self.attribute_slug}={self.value[:30]})>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "category_id": self.category_id,
            "attribute_slug": self.attribute_slug,
            "value": self.value,
        }


# ============================================================================
# Reference Vocabularies
# ============================================================================


class VocabularyEntry(Base):
    """Flat reference value (size, color, fit, pattern, material, gender).

    Attributes:
        id: Unique entry identifier.
        kind: Vocabulary the entry belongs to.
        name: Display name, unique within its kind.
        hex_code: Display color (colors only).
        sort_order: Explicit ordering (used by sizes).
    """

    __tablename__ = "vocabulary_entries"
    __table_args__ = (
        UniqueConstraint("kind", "name", name="uq_vocabulary_kind_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    hex_code: Mapped[str | None] = mapped_column(String(7), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """String representation."""
        return f"<VocabularyEntry(kind={self.kind}, name={self.name})>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "sort_order": self.sort_order,
        }
        if self.hex_code is not None:
            data["hex"] = self.hex_code
        return data


# ============================================================================
# Points of Measurement
# ============================================================================


class POMCategory(Base):
    """Grouping of POM definitions (Tops, Bottoms, Footwear, ...)."""

    __tablename__ = "pom_categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """String representation."""
        return f"<POMCategory(name={self.name})>"


class POMDefinition(Base):
    """Named garment measurement location.

    Attributes:
        code: Short industry code (e.g. "HPS", "CH").
        is_half_measurement: Flat measurement that doubles to a circumference.
        default_tolerance: Accepted +/- deviation in ``measurement_unit``.
        is_active: False once retired from the catalog. Existing apparel
            links and SKU measurements keep pointing at it.
    """

    __tablename__ = "pom_definitions"
    __table_args__ = (
        UniqueConstraint("category_id", "code", name="uq_pom_category_code"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("pom_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(10), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    measurement_unit: Mapped[str] = mapped_column(String(10), nullable=False, default="cm")
    is_half_measurement: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_tolerance: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0.5")
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<POMDefinition(code={self.code}, name={self.name})>"


class PackageMeasurementType(Base):
    """Shipping package dimension recorded for a product (Length, Weight, ...)."""

    __tablename__ = "package_measurement_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit: Mapped[str] = mapped_column(String(10), nullable=False, default="cm")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<PackageMeasurementType(name={self.name}, unit={self.unit})>"


class ApparelPOMMapping(Base):
    """Link between an apparel category and a POM definition."""

    __tablename__ = "apparel_pom_mappings"
    __table_args__ = (
        UniqueConstraint("apparel_id", "pom_id", name="uq_apparel_pom"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    apparel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pom_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("pom_definitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ============================================================================
# SKUs
# ============================================================================


class SKU(Base):
    """Concrete sellable variant: exactly one (color, size) combination.

    Attributes:
        id: Unique SKU identifier.
        code: Unique opaque code assigned at generation time.
        name: Display name including variant annotations.
        brand_id: Owning brand.
        line_id: Optional brand line.
        collection: Optional collection name.
        images: Asset URLs returned by the storage service.
        videos: Asset URLs returned by the storage service.
        materials: Material display names.
        category: Category reference snapshot (page name and IDs).
        sku_metadata: Attribute snapshot, see ``app.catalog.schemas.SKUMetadata``.
        deleted_at: Soft-delete timestamp (None while active).
    """

    __tablename__ = "skus"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    brand_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    line_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    collection: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    videos: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    materials: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    category: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    # "metadata" is reserved on declarative classes
    sku_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<SKU(id={self.id}, code={self.code}, name={self.name[:30]})>"

    @property
    def status(self) -> SKUStatus:
        """Lifecycle state derived from ``deleted_at``."""
        return SKUStatus.from_deleted_at(self.deleted_at)


class SKUMeasurement(Base):
    """Measured value of one POM for one size of a SKU."""

    __tablename__ = "sku_measurements"
    __table_args__ = (
        UniqueConstraint("sku_id", "pom_id", "size_id", name="uq_sku_measurement"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    sku_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("skus.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pom_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("pom_definitions.id", ondelete="CASCADE"),
        nullable=False,
    )
    size_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vocabulary_entries.id", ondelete="CASCADE"),
        nullable=False,
    )
    value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tolerance: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
