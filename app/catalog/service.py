"""Catalog services for taxonomy, vocabulary, POM and SKU operations.

High-level services that combine repository operations with the
business rules of the taxonomy and of SKU materialization. Services
commit their own units of work and raise domain errors; they never
return error values.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Generic, Iterable, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.attributes import (
    REQUIRED_ATTRIBUTE_TYPES,
    AttributeTypeSpec,
    validate_attribute_value,
)
from app.catalog.codes import SKUCodeGenerator
from app.catalog.generator import FailedCombination, GenerationResult, SKUGenerator
from app.catalog.models import (
    SKU,
    ApparelPOMMapping,
    AttributeType,
    Category,
    CategoryAttribute,
    PackageMeasurementType,
    POMCategory,
    POMDefinition,
    SKUMeasurement,
    VocabularyEntry,
)
from app.catalog.naming import ResolvedNames, annotate_name, build_base_name, expand_combinations
from app.catalog.repository import (
    AttributeRepository,
    CategoryRepository,
    POMRepository,
    SKURepository,
    VocabularyRepository,
)
from app.catalog.schemas import SKUContext, SKUMetadata, VocabularyKind
from app.domain.exceptions import (
    AttributeTypeExistsError,
    AttributeTypeNotFoundError,
    BatchTooLargeError,
    CategoryDepthError,
    CategoryNotFoundError,
    ConflictError,
    MissingNameFragmentError,
    PartialBatchFailureError,
    POMNotFoundError,
    SKUNotFoundError,
    SKUTrashedError,
    ValidationError,
    VocabularyEntryExistsError,
    VocabularyEntryNotFoundError,
)
from app.domain.state_machines import SKUStatus, validate_sku_transition
from app.infrastructure.config import settings

T = TypeVar("T")

logger = structlog.get_logger()

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
DEFAULT_COLOR_HEX = "#000000"

POM_DEFINITION_FIELDS = frozenset(
    {
        "category_id",
        "code",
        "name",
        "description",
        "measurement_unit",
        "is_half_measurement",
        "default_tolerance",
        "sort_order",
    }
)
PACKAGE_TYPE_FIELDS = frozenset({"name", "description", "unit", "sort_order"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_name(value: str, field: str = "name") -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{field} must not be blank", details={"field": field})
    return name


def _failure_reason(exc: SQLAlchemyError) -> str:
    """Short client-facing reason for a failed write; the full error is logged."""
    if isinstance(exc, IntegrityError):
        return "integrity constraint violated"
    if isinstance(exc, OperationalError):
        return "database unavailable"
    return "database error"


# ============================================================================
# Query Parameters
# ============================================================================


@dataclass
class SKUFilter:
    """Filter parameters for SKU listings.

    Attributes:
        brand_id: Filter by brand.
        search: Case-insensitive text search in name or code.
    """

    brand_id: str | None = None
    search: str | None = None


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
    """

    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count.
        page: Current page.
        page_size: Items per page.
    """

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1


# ============================================================================
# Taxonomy
# ============================================================================


class TaxonomyService:
    """Service for the category hierarchy and the attribute matrix.

    Example usage:
        async with async_session_factory() as session:
            service = TaxonomyService(session)
            tops = await service.create_category("Tops")
            await service.create_category("T-Shirts", parent_id=tops.id)
            await service.set_category_attribute(tops.id, "possible-sizes", '["s-1"]')
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.categories = CategoryRepository(session)
        self.attributes = AttributeRepository(session)

    async def _get_category(self, category_id: str) -> Category:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def list_categories(self) -> list[Category]:
        """List every category, apparel roots first."""
        return list(await self.categories.find_all())

    async def list_children(self, parent_id: str) -> list[Category]:
        """List the style categories under an apparel category.

        Raises:
            CategoryNotFoundError: If the parent does not exist.
        """
        await self._get_category(parent_id)
        return list(await self.categories.find_children(parent_id))

    async def create_category(self, name: str, parent_id: str | None = None) -> Category:
        """Create an apparel (root) or style (child) category.

        Args:
            name: Display name.
            parent_id: Apparel category to nest under.

        Returns:
            The created category.

        Raises:
            ValidationError: If the name is blank.
            CategoryNotFoundError: If the parent does not exist.
            CategoryDepthError: If the parent is itself a style category.
        """
        name = _require_name(name)
        if parent_id is not None:
            parent = await self._get_category(parent_id)
            if parent.parent_id is not None:
                raise CategoryDepthError(parent_id)

        category = await self.categories.save(Category(name=name, parent_id=parent_id))
        await self.session.commit()

        logger.info(
            "Category created",
            category_id=category.id,
            parent_id=parent_id,
            level=category.level,
        )
        return category

    async def rename_category(self, category_id: str, name: str) -> Category:
        """Rename a category."""
        name = _require_name(name)
        category = await self._get_category(category_id)
        category.name = name
        await self.session.flush()
        await self.session.commit()

        logger.info("Category renamed", category_id=category_id)
        return category

    async def delete_category(self, category_id: str) -> list[str]:
        """Delete a category with its children, matrix rows and POM links.

        Everything is removed in one transaction. SKUs keep the names they
        were generated with.

        Returns:
            IDs of every removed category, the requested one first.
        """
        await self._get_category(category_id)
        removed = await self.categories.collect_subtree_ids(category_id)
        await self.categories.delete_many(removed)
        await self.session.commit()

        logger.info(
            "Category deleted",
            category_id=category_id,
            removed_count=len(removed),
        )
        return removed

    # ------------------------------------------------------------------------
    # Attribute types
    # ------------------------------------------------------------------------

    async def ensure_attribute_types(
        self,
        required: Iterable[AttributeTypeSpec] = REQUIRED_ATTRIBUTE_TYPES,
    ) -> list[str]:
        """Create every missing attribute type.

        Existing types are left untouched, names included.

        Args:
            required: Slug/name pairs that must exist.

        Returns:
            Slugs created by this call (empty when all existed).
        """
        created = []
        for spec in required:
            if await self.attributes.add_type_if_missing(spec.slug, spec.name):
                created.append(spec.slug)
        await self.session.commit()

        if created:
            logger.info("Attribute types created", slugs=created)
        return created

    async def create_attribute_type(self, slug: str, name: str) -> AttributeType:
        """Register a new attribute type.

        Raises:
            AttributeTypeExistsError: If the slug is taken.
        """
        slug = _require_name(slug, "slug")
        name = _require_name(name)
        if not await self.attributes.add_type_if_missing(slug, name):
            raise AttributeTypeExistsError(slug)
        await self.session.commit()
        attribute_type = await self.attributes.get_type(slug)

        logger.info("Attribute type created", slug=slug)
        return attribute_type

    async def list_attribute_types(self) -> list[AttributeType]:
        """List registered attribute types."""
        return list(await self.attributes.find_types())

    # ------------------------------------------------------------------------
    # Matrix
    # ------------------------------------------------------------------------

    async def set_category_attribute(
        self,
        category_id: str,
        slug: str,
        value: str,
    ) -> CategoryAttribute:
        """Upsert one cell of the category-attribute matrix.

        Args:
            category_id: Category ID.
            slug: Registered attribute slug.
            value: Text to store; a JSON array of IDs for multi-valued slugs.

        Returns:
            The stored cell.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            AttributeTypeNotFoundError: If the slug is not registered.
            InvalidMultiValueError: If a multi-valued slug gets malformed text.
        """
        await self._get_category(category_id)
        if await self.attributes.get_type(slug) is None:
            raise AttributeTypeNotFoundError(slug)
        validate_attribute_value(slug, value)

        cell = await self.attributes.upsert_value(category_id, slug, value)
        await self.session.commit()

        logger.info("Category attribute set", category_id=category_id, slug=slug)
        return cell

    async def get_all_category_attributes(self) -> list[CategoryAttribute]:
        """Return the full sparse matrix."""
        return list(await self.attributes.find_values())

    async def get_category_attributes(self, category_id: str) -> list[CategoryAttribute]:
        """Return the matrix row of one category."""
        await self._get_category(category_id)
        return list(await self.attributes.find_values(category_id))


# ============================================================================
# Vocabularies
# ============================================================================


class VocabularyService:
    """Service for the flat reference vocabularies."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = VocabularyRepository(session)

    async def _get_entry(self, kind: VocabularyKind, entry_id: str) -> VocabularyEntry:
        entry = await self.repository.get(kind.value, entry_id)
        if entry is None:
            raise VocabularyEntryNotFoundError(kind.value, entry_id)
        return entry

    @staticmethod
    def _color_hex(kind: VocabularyKind, hex_code: str | None) -> str | None:
        if kind is not VocabularyKind.COLORS:
            return None
        hex_code = hex_code or DEFAULT_COLOR_HEX
        if not HEX_COLOR_PATTERN.match(hex_code):
            raise ValidationError(
                f"Invalid color hex: {hex_code}",
                details={"field": "hex_code", "value": hex_code},
            )
        return hex_code.upper()

    async def list_entries(self, kind: VocabularyKind | str) -> list[VocabularyEntry]:
        """List entries of a vocabulary in its display order."""
        kind = VocabularyKind(kind)
        return list(await self.repository.find_by_kind(kind.value))

    async def get_entries(
        self,
        kind: VocabularyKind | str,
        entry_ids: list[str],
    ) -> list[VocabularyEntry]:
        """Get entries by ID in the requested order, skipping unknown IDs."""
        kind = VocabularyKind(kind)
        found = await self.repository.get_many(kind.value, entry_ids)
        return [found[entry_id] for entry_id in dict.fromkeys(entry_ids) if entry_id in found]

    async def add_entry(
        self,
        kind: VocabularyKind | str,
        name: str,
        hex_code: str | None = None,
        sort_order: int | None = None,
    ) -> VocabularyEntry:
        """Add an entry to a vocabulary.

        Args:
            kind: Vocabulary kind.
            name: Display name, unique within the kind.
            hex_code: Display color (colors only, defaults to black).
            sort_order: Explicit position; appended last when omitted.

        Returns:
            The created entry.

        Raises:
            VocabularyEntryExistsError: If the name is taken.
        """
        kind = VocabularyKind(kind)
        name = _require_name(name)
        if await self.repository.get_by_name(kind.value, name) is not None:
            raise VocabularyEntryExistsError(kind.value, name)
        if sort_order is None:
            sort_order = len(await self.repository.find_by_kind(kind.value))

        entry = await self.repository.save(
            VocabularyEntry(
                kind=kind.value,
                name=name,
                hex_code=self._color_hex(kind, hex_code),
                sort_order=sort_order,
            )
        )
        await self.session.commit()

        logger.info("Vocabulary entry added", kind=kind.value, entry_id=entry.id)
        return entry

    async def rename_entry(
        self,
        kind: VocabularyKind | str,
        entry_id: str,
        name: str,
        hex_code: str | None = None,
    ) -> VocabularyEntry:
        """Rename an entry (and recolor it, for colors)."""
        kind = VocabularyKind(kind)
        name = _require_name(name)
        entry = await self._get_entry(kind, entry_id)
        existing = await self.repository.get_by_name(kind.value, name)
        if existing is not None and existing.id != entry.id:
            raise VocabularyEntryExistsError(kind.value, name)

        entry.name = name
        if kind is VocabularyKind.COLORS and hex_code is not None:
            entry.hex_code = self._color_hex(kind, hex_code)
        await self.session.flush()
        await self.session.commit()

        logger.info("Vocabulary entry renamed", kind=kind.value, entry_id=entry_id)
        return entry

    async def delete_entry(self, kind: VocabularyKind | str, entry_id: str) -> None:
        """Delete an entry.

        SKUs keep the names they were generated with.
        """
        kind = VocabularyKind(kind)
        entry = await self._get_entry(kind, entry_id)
        await self.repository.delete(entry)
        await self.session.commit()

        logger.info("Vocabulary entry deleted", kind=kind.value, entry_id=entry_id)


# ============================================================================
# Points of Measurement
# ============================================================================


@dataclass
class POMLink:
    """Requested link between an apparel category and a POM.

    A missing ``sort_order`` takes the link's position in the request.
    """

    pom_id: str
    is_required: bool = False
    sort_order: int | None = None


@dataclass
class LinkedPOM:
    """POM definition as linked to an apparel category."""

    definition: POMDefinition
    category_name: str
    is_required: bool
    sort_order: int


@dataclass
class MeasurementInput:
    """One measured value for a (POM, size) pair of a SKU."""

    pom_id: str
    size_id: str
    value: Decimal
    tolerance: Decimal | None = None


@dataclass
class MeasurementRecord:
    """Stored measurement joined with its POM and size."""

    measurement: SKUMeasurement
    definition: POMDefinition
    size: VocabularyEntry


class POMService:
    """Service for the POM catalog, apparel links and SKU measurements."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = POMRepository(session)
        self.categories = CategoryRepository(session)
        self.vocabularies = VocabularyRepository(session)
        self.skus = SKURepository(session)

    async def _get_apparel(self, apparel_id: str) -> Category:
        category = await self.categories.get_by_id(apparel_id)
        if category is None:
            raise CategoryNotFoundError(apparel_id)
        return category

    async def list_pom_categories(self) -> list[POMCategory]:
        """List POM categories in display order."""
        return list(await self.repository.find_categories())

    async def get_pom_category(self, category_id: str) -> POMCategory:
        """Get a POM category by ID.

        Raises:
            POMNotFoundError: If the category does not exist.
        """
        category = await self.repository.get_category(category_id)
        if category is None:
            raise POMNotFoundError(category_id, entity_type="POMCategory")
        return category

    async def list_pom_definitions(
        self,
        category_id: str | None = None,
    ) -> list[tuple[POMDefinition, str]]:
        """List POM definitions with their category names.

        Raises:
            POMNotFoundError: If ``category_id`` is unknown.
        """
        if category_id is not None and await self.repository.get_category(category_id) is None:
            raise POMNotFoundError(category_id, entity_type="POMCategory")
        return list(await self.repository.find_definitions(category_id))

    async def create_pom_category(
        self,
        name: str,
        description: str | None = None,
        sort_order: int = 0,
    ) -> POMCategory:
        """Create a POM category with a unique name."""
        name = _require_name(name)
        if await self.repository.get_category_by_name(name) is not None:
            raise ConflictError(f"POM category already exists: {name}", details={"name": name})
        category = await self.repository.save(
            POMCategory(name=name, description=description, sort_order=sort_order)
        )
        await self.session.commit()

        logger.info("POM category created", pom_category_id=category.id)
        return category

    async def create_pom_definition(
        self,
        category_id: str,
        code: str,
        name: str,
        description: str | None = None,
        is_half_measurement: bool = False,
        default_tolerance: Decimal = Decimal("0.5"),
        sort_order: int = 0,
        measurement_unit: str = "cm",
    ) -> POMDefinition:
        """Create a POM definition, unique by code within its category."""
        if await self.repository.get_category(category_id) is None:
            raise POMNotFoundError(category_id, entity_type="POMCategory")
        code = _require_name(code, "code").upper()
        name = _require_name(name)
        if await self.repository.get_definition_by_code(category_id, code) is not None:
            raise ConflictError(
                f"POM code already exists in category: {code}",
                details={"category_id": category_id, "code": code},
            )
        definition = await self.repository.save(
            POMDefinition(
                category_id=category_id,
                code=code,
                name=name,
                description=description,
                is_half_measurement=is_half_measurement,
                default_tolerance=default_tolerance,
                sort_order=sort_order,
                measurement_unit=measurement_unit,
            )
        )
        await self.session.commit()

        logger.info("POM definition created", pom_id=definition.id, code=code)
        return definition

    async def _get_definition(self, pom_id: str) -> POMDefinition:
        definition = await self.repository.get_definition(pom_id)
        if definition is None or not definition.is_active:
            raise POMNotFoundError(pom_id)
        return definition

    async def update_pom_definition(self, pom_id: str, **changes: Any) -> POMDefinition:
        """Update fields of an active POM definition.

        Args:
            pom_id: Definition ID.
            **changes: New values for any of ``POM_DEFINITION_FIELDS``.
                Fields that are not passed keep their value.

        Returns:
            The updated definition.

        Raises:
            POMNotFoundError: If the definition, or the target POM
                category, does not exist or the definition was retired.
            ValidationError: If a field is not updatable or a name is blank.
            ConflictError: If the code is taken in the target category.
        """
        unknown = sorted(set(changes) - POM_DEFINITION_FIELDS)
        if unknown:
            raise ValidationError("Fields cannot be updated", details={"fields": unknown})

        definition = await self._get_definition(pom_id)
        if "code" in changes:
            changes["code"] = _require_name(changes["code"], "code").upper()
        if "name" in changes:
            changes["name"] = _require_name(changes["name"])

        category_id = changes.get("category_id", definition.category_id)
        if category_id != definition.category_id:
            if await self.repository.get_category(category_id) is None:
                raise POMNotFoundError(category_id, entity_type="POMCategory")
        code = changes.get("code", definition.code)
        existing = await self.repository.get_definition_by_code(category_id, code)
        if existing is not None and existing.id != definition.id:
            raise ConflictError(
                f"POM code already exists in category: {code}",
                details={"category_id": category_id, "code": code},
            )

        for field, value in changes.items():
            setattr(definition, field, value)
        await self.session.flush()
        await self.session.commit()

        logger.info("POM definition updated", pom_id=pom_id, fields=sorted(changes))
        return definition

    async def delete_pom_definition(self, pom_id: str) -> None:
        """Retire a POM definition from the catalog.

        The row stays so that apparel links and SKU measurements that
        already use it keep resolving. Retired definitions are hidden from
        listings and cannot be linked or measured again.
        """
        definition = await self._get_definition(pom_id)
        definition.is_active = False
        await self.session.flush()
        await self.session.commit()

        logger.info("POM definition retired", pom_id=pom_id, code=definition.code)

    # ------------------------------------------------------------------------
    # Package measurement types
    # ------------------------------------------------------------------------

    async def list_package_measurement_types(self) -> list[PackageMeasurementType]:
        """List active package measurement types in display order."""
        return list(await self.repository.find_package_types())

    async def create_package_measurement_type(
        self,
        name: str,
        description: str | None = None,
        unit: str = "cm",
        sort_order: int = 0,
    ) -> PackageMeasurementType:
        """Create a package measurement type with a unique name."""
        name = _require_name(name)
        if await self.repository.get_package_type_by_name(name) is not None:
            raise ConflictError(
                f"Package measurement type already exists: {name}", details={"name": name}
            )
        package_type = await self.repository.save(
            PackageMeasurementType(
                name=name,
                description=description,
                unit=unit,
                sort_order=sort_order,
            )
        )
        await self.session.commit()

        logger.info("Package measurement type created", package_type_id=package_type.id)
        return package_type

    async def update_package_measurement_type(
        self,
        type_id: str,
        **changes: Any,
    ) -> PackageMeasurementType:
        """Update fields of a package measurement type.

        Raises:
            POMNotFoundError: If the type does not exist.
            ValidationError: If a field is not updatable or the name is blank.
            ConflictError: If the new name is taken.
        """
        unknown = sorted(set(changes) - PACKAGE_TYPE_FIELDS)
        if unknown:
            raise ValidationError("Fields cannot be updated", details={"fields": unknown})

        package_type = await self.repository.get_package_type(type_id)
        if package_type is None or not package_type.is_active:
            raise POMNotFoundError(type_id, entity_type="PackageMeasurementType")
        if "name" in changes:
            changes["name"] = _require_name(changes["name"])
            existing = await self.repository.get_package_type_by_name(changes["name"])
            if existing is not None and existing.id != type_id:
                raise ConflictError(
                    f"Package measurement type already exists: {changes['name']}",
                    details={"name": changes["name"]},
                )

        for field, value in changes.items():
            setattr(package_type, field, value)
        await self.session.flush()
        await self.session.commit()

        logger.info("Package measurement type updated", package_type_id=type_id)
        return package_type

    async def get_apparel_poms(self, apparel_id: str) -> list[LinkedPOM]:
        """List the POMs linked to an apparel category.

        Ordered by link sort order, then definition sort order.
        """
        await self._get_apparel(apparel_id)
        rows = await self.repository.find_apparel_poms(apparel_id)
        return [
            LinkedPOM(
                definition=definition,
                category_name=category_name,
                is_required=mapping.is_required,
                sort_order=mapping.sort_order,
            )
            for definition, mapping, category_name in rows
        ]

    async def set_apparel_poms(self, apparel_id: str, links: list[POMLink]) -> list[LinkedPOM]:
        """Replace the POM set of an apparel category.

        Every reference is validated before anything is written; the old
        set is deleted and the new one inserted in one transaction. An
        empty list clears the mapping.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            ValidationError: If the category is a style category or a POM repeats.
            POMNotFoundError: If a POM ID is unknown.
        """
        apparel = await self._get_apparel(apparel_id)
        if apparel.parent_id is not None:
            raise ValidationError(
                "POMs are linked to apparel categories only",
                details={"category_id": apparel_id, "level": apparel.level},
            )

        pom_ids = [link.pom_id for link in links]
        duplicates = sorted({pom_id for pom_id in pom_ids if pom_ids.count(pom_id) > 1})
        if duplicates:
            raise ValidationError(
                "POM listed more than once",
                details={"pom_ids": duplicates},
            )
        known = await self.repository.get_definitions(pom_ids)
        for pom_id in pom_ids:
            if pom_id not in known:
                raise POMNotFoundError(pom_id)

        mappings = [
            ApparelPOMMapping(
                apparel_id=apparel_id,
                pom_id=link.pom_id,
                is_required=link.is_required,
                sort_order=index if link.sort_order is None else link.sort_order,
            )
            for index, link in enumerate(links)
        ]
        try:
            await self.repository.replace_apparel_mappings(apparel_id, mappings)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        logger.info("Apparel POMs replaced", apparel_id=apparel_id, pom_count=len(mappings))
        return await self.get_apparel_poms(apparel_id)

    async def save_sku_measurements(
        self,
        sku_id: str,
        measurements: list[MeasurementInput],
    ) -> list[MeasurementRecord]:
        """Upsert measurements of a SKU keyed by (POM, size).

        Raises:
            SKUNotFoundError: If the SKU does not exist.
            SKUTrashedError: If the SKU is in the trash.
            POMNotFoundError: If a POM ID is unknown.
            VocabularyEntryNotFoundError: If a size ID is unknown.
        """
        sku = await self.skus.get_by_id(sku_id, include_trashed=True)
        if sku is None:
            raise SKUNotFoundError(sku_id)
        if sku.status is SKUStatus.TRASHED:
            raise SKUTrashedError(sku_id)

        known_poms = await self.repository.get_definitions([m.pom_id for m in measurements])
        known_sizes = await self.vocabularies.get_many(
            VocabularyKind.SIZES.value, [m.size_id for m in measurements]
        )
        for item in measurements:
            if item.pom_id not in known_poms:
                raise POMNotFoundError(item.pom_id)
            if item.size_id not in known_sizes:
                raise VocabularyEntryNotFoundError(VocabularyKind.SIZES.value, item.size_id)

        for item in measurements:
            await self.repository.upsert_measurement(
                sku_id, item.pom_id, item.size_id, item.value, item.tolerance
            )
        await self.session.commit()

        logger.info("SKU measurements saved", sku_id=sku_id, count=len(measurements))
        return await self.get_sku_measurements(sku_id)

    async def get_sku_measurements(self, sku_id: str) -> list[MeasurementRecord]:
        """List measurements of a SKU ordered by size then POM."""
        if await self.skus.get_by_id(sku_id, include_trashed=True) is None:
            raise SKUNotFoundError(sku_id)
        rows = await self.repository.find_measurements(sku_id)
        return [
            MeasurementRecord(measurement=measurement, definition=definition, size=size)
            for measurement, definition, size in rows
        ]


# ============================================================================
# SKUs
# ============================================================================


class SKUService:
    """Service for SKU materialization and lifecycle.

    Example usage:
        async with async_session_factory() as session:
            service = SKUService(session)
            result = await service.generate_skus(
                SKUContext(brand_id="b-1", brand_name="Acme", model_name="Classic Tee"),
                color_ids=["red-id", "blue-id"],
                size_ids=["s-id", "m-id"],
            )
            result.count  # 4
    """

    def __init__(
        self,
        session: AsyncSession,
        code_prefix: str | None = None,
        max_combinations: int | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
            code_prefix: SKU code prefix. Defaults to ``settings.sku_code_prefix``.
            max_combinations: Batch size limit. Defaults to
                ``settings.max_batch_combinations``.
        """
        self.session = session
        self.repository = SKURepository(session)
        self.categories = CategoryRepository(session)
        self.vocabularies = VocabularyRepository(session)
        self.poms = POMRepository(session)
        self.code_prefix = code_prefix or settings.sku_code_prefix
        self.max_combinations = max_combinations or settings.max_batch_combinations

    # ------------------------------------------------------------------------
    # Context resolution
    # ------------------------------------------------------------------------

    async def _category_name(self, category_id: str | None) -> str | None:
        if not category_id:
            return None
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category.name

    async def _vocabulary_name(self, kind: VocabularyKind, entry_id: str | None) -> str | None:
        if not entry_id:
            return None
        entry = await self.vocabularies.get(kind.value, entry_id)
        if entry is None:
            raise VocabularyEntryNotFoundError(kind.value, entry_id)
        return entry.name

    async def _resolve_context(self, context: SKUContext) -> tuple[ResolvedNames, SKUMetadata]:
        """Resolve every reference of a context to its display name.

        Raises:
            MissingNameFragmentError: If brand or model name is missing.
            CategoryNotFoundError: If apparel or style is unknown.
            VocabularyEntryNotFoundError: If pattern, material, fit or gender is unknown.
        """
        if not context.brand_id.strip():
            raise MissingNameFragmentError("brand_id")
        if not context.model_name.strip():
            raise MissingNameFragmentError("model_name")

        apparel_name = await self._category_name(context.apparel_id)
        style_name = await self._category_name(context.style_id)
        pattern_name = await self._vocabulary_name(VocabularyKind.PATTERNS, context.pattern_id)
        material_name = await self._vocabulary_name(VocabularyKind.MATERIALS, context.material_id)
        fit_name = await self._vocabulary_name(VocabularyKind.FITS, context.fit_id)
        gender_name = await self._vocabulary_name(VocabularyKind.GENDERS, context.gender_id)

        names = ResolvedNames(
            brand=context.brand_name,
            line=context.line_name or "",
            collection=context.collection or "",
            model=context.model_name,
            style=style_name or "",
            pattern=pattern_name or "",
            material=material_name or "",
            fit=fit_name or "",
            apparel=apparel_name or "",
        )
        metadata = SKUMetadata(
            model_name=context.model_name,
            gender_id=context.gender_id,
            gender_name=gender_name,
            apparel_id=context.apparel_id,
            apparel_name=apparel_name,
            style_id=context.style_id,
            style_name=style_name,
            pattern_id=context.pattern_id,
            pattern_name=pattern_name,
            material_id=context.material_id,
            material_name=material_name,
            fit_id=context.fit_id,
            fit_name=fit_name,
            name_config=context.name_config,
            extra=dict(context.extra),
        )
        return names, metadata

    async def _vocabulary_names(
        self,
        kind: VocabularyKind,
        entry_ids: list[str],
    ) -> tuple[dict[str, str], list[str]]:
        found = await self.vocabularies.get_many(kind.value, entry_ids)
        unresolved = [
            entry_id for entry_id in dict.fromkeys(entry_ids) if entry_id and entry_id not in found
        ]
        return {entry_id: entry.name for entry_id, entry in found.items()}, unresolved

    # ------------------------------------------------------------------------
    # Generation and update
    # ------------------------------------------------------------------------

    async def generate_skus(
        self,
        context: SKUContext,
        color_ids: list[str] | None = None,
        size_ids: list[str] | None = None,
    ) -> GenerationResult:
        """Materialize one SKU per (color, size) combination.

        Every combination is committed on its own. A combination that
        fails to persist is rolled back and recorded; the remaining ones
        are still attempted.

        Args:
            context: Brand, model and attribute selection.
            color_ids: Selected colors (empty means no color dimension).
            size_ids: Selected sizes (empty means no size dimension).

        Returns:
            Generation result with every created SKU.

        Raises:
            MissingNameFragmentError: If brand or model name is missing.
            NotFoundError: If a category or vocabulary reference is unknown.
            BatchTooLargeError: If the selection exceeds the combination limit.
            PartialBatchFailureError: If at least one combination failed.
        """
        color_ids = list(color_ids or [])
        size_ids = list(size_ids or [])

        combinations = expand_combinations(color_ids, size_ids)
        if len(combinations) > self.max_combinations:
            raise BatchTooLargeError(len(combinations), self.max_combinations)

        names, base_metadata = await self._resolve_context(context)
        size_names, unresolved_sizes = await self._vocabulary_names(VocabularyKind.SIZES, size_ids)
        color_names, unresolved_colors = await self._vocabulary_names(
            VocabularyKind.COLORS, color_ids
        )
        if unresolved_sizes or unresolved_colors:
            logger.warning(
                "Unresolved variant references",
                size_ids=unresolved_sizes,
                color_ids=unresolved_colors,
            )

        generator = SKUGenerator(
            context,
            names,
            base_metadata,
            size_names=size_names,
            color_names=color_names,
            codes=SKUCodeGenerator(self.code_prefix),
        )
        result = GenerationResult(
            attempted=len(combinations),
            unresolved_size_ids=unresolved_sizes,
            unresolved_color_ids=unresolved_colors,
        )

        for combination in combinations:
            planned = generator.plan_one(combination)
            try:
                sku = await self.repository.save(generator.build(planned))
                await self.session.commit()
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(
                    "SKU combination failed",
                    color_id=planned.color_id,
                    size_id=planned.size_id,
                    code=planned.code,
                    error=str(e),
                )
                result.failed.append(
                    FailedCombination(planned.color_id, planned.size_id, _failure_reason(e))
                )
                continue
            result.created.append(sku)

        logger.info(
            "SKUs generated",
            brand_id=context.brand_id,
            base_name=generator.base_name,
            created=result.count,
            failed=len(result.failed),
        )

        if result.failed:
            # Rollback expired the SKUs committed earlier in the batch
            for sku in result.created:
                await self.session.refresh(sku)
            raise PartialBatchFailureError(result)
        return result

    async def update_sku(self, sku_id: str, context: SKUContext) -> SKU:
        """Rename and re-describe an existing SKU from a new context.

        The SKU keeps its code and its (color, size) combination. Variant
        annotations are appended only when the new base name does not
        already contain them.

        Raises:
            SKUNotFoundError: If the SKU does not exist.
            SKUTrashedError: If the SKU is in the trash.
        """
        sku = await self.repository.get_by_id(sku_id, include_trashed=True)
        if sku is None:
            raise SKUNotFoundError(sku_id)
        if sku.status is SKUStatus.TRASHED:
            raise SKUTrashedError(sku_id)

        names, metadata = await self._resolve_context(context)
        stored = SKUMetadata.model_validate(sku.sku_metadata or {})
        size_names, _ = await self._vocabulary_names(
            VocabularyKind.SIZES, [stored.size_id] if stored.size_id else []
        )
        color_names, _ = await self._vocabulary_names(
            VocabularyKind.COLORS, [stored.color_id] if stored.color_id else []
        )
        size_name = size_names.get(stored.size_id) if stored.size_id else None
        color_name = color_names.get(stored.color_id) if stored.color_id else None

        base_name = build_base_name(names, context.name_config)
        metadata = metadata.model_copy(
            update={
                "size_id": stored.size_id,
                "size_name": size_name,
                "color_id": stored.color_id,
                "color_name": color_name,
            }
        )
        generator = SKUGenerator(
            context,
            names,
            metadata,
            size_names=size_names,
            color_names=color_names,
            codes=SKUCodeGenerator(self.code_prefix),
        )

        sku.name = annotate_name(base_name, color_name, size_name, skip_existing=True)
        sku.brand_id = context.brand_id
        sku.line_id = context.line_id
        sku.collection = context.collection
        sku.description = context.description
        sku.images = list(context.images)
        sku.videos = list(context.videos)
        sku.materials = generator.materials
        sku.category = generator.category
        sku.sku_metadata = metadata.to_json()
        sku.updated_at = _utcnow()
        await self.session.flush()
        await self.session.commit()

        logger.info("SKU updated", sku_id=sku_id, code=sku.code)
        return sku

    # ------------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------------

    async def _transition(self, sku_id: str, target: SKUStatus) -> SKU:
        sku = await self.repository.get_by_id(sku_id, include_trashed=True)
        if sku is None:
            raise SKUNotFoundError(sku_id)
        validate_sku_transition(sku_id, sku.status, target)
        return sku

    async def delete_sku(self, sku_id: str) -> SKU:
        """Move an active SKU to the trash."""
        sku = await self._transition(sku_id, SKUStatus.TRASHED)
        sku.deleted_at = _utcnow()
        await self.session.flush()
        await self.session.commit()

        logger.info("SKU trashed", sku_id=sku_id)
        return sku

    async def restore_sku(self, sku_id: str) -> SKU:
        """Bring a trashed SKU back to the active catalog."""
        sku = await self._transition(sku_id, SKUStatus.ACTIVE)
        sku.deleted_at = None
        await self.session.flush()
        await self.session.commit()

        logger.info("SKU restored", sku_id=sku_id)
        return sku

    async def permanent_delete_sku(self, sku_id: str) -> None:
        """Remove a trashed SKU and its measurements for good."""
        sku = await self._transition(sku_id, SKUStatus.PURGED)
        await self.poms.delete_measurements(sku_id)
        await self.repository.delete(sku)
        await self.session.commit()

        logger.info("SKU purged", sku_id=sku_id)

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------

    async def get_sku(self, sku_id: str, include_trashed: bool = False) -> SKU:
        """Get a SKU by ID.

        Raises:
            SKUNotFoundError: If the SKU does not exist (or is trashed and
                ``include_trashed`` is False).
        """
        sku = await self.repository.get_by_id(sku_id, include_trashed=include_trashed)
        if sku is None:
            raise SKUNotFoundError(sku_id)
        return sku

    async def _list(
        self,
        trashed: bool,
        filters: SKUFilter | None,
        pagination: PaginationParams | None,
    ) -> PaginatedResult[SKU]:
        filters = filters or SKUFilter()
        pagination = pagination or PaginationParams()

        skus = await self.repository.find_all(
            trashed=trashed,
            brand_id=filters.brand_id,
            search=filters.search,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        total = await self.repository.count(
            trashed=trashed,
            brand_id=filters.brand_id,
            search=filters.search,
        )
        return PaginatedResult(
            items=list(skus),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    async def list_active_skus(
        self,
        filters: SKUFilter | None = None,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResult[SKU]:
        """List active SKUs, newest first."""
        return await self._list(False, filters, pagination)

    async def list_trashed_skus(
        self,
        filters: SKUFilter | None = None,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResult[SKU]:
        """List trashed SKUs, newest first."""
        return await self._list(True, filters, pagination)
