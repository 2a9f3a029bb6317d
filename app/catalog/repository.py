"""Repositories for taxonomy and SKU database operations.

Each repository wraps an ``AsyncSession`` and only flushes; committing
is left to the calling service so that multi-row operations (cascading
category deletes, POM link replacement) stay inside one transaction.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

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
from app.infrastructure.database import upsert_insert


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryRepository:
    """Repository for the category hierarchy.

    Children are looked up through the ``parent_id`` index rather than by
    walking loaded objects.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, category: Category) -> Category:
        """Save a category to database."""
        self.session.add(category)
        await self.session.flush()
        return category

    async def get_by_id(self, category_id: str) -> Category | None:
        """Get category by ID.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        return await self.session.get(Category, category_id)

    async def get_many(self, category_ids: Sequence[str]) -> dict[str, Category]:
        """Get categories by ID, keyed by ID (unknown IDs are absent)."""
        if not category_ids:
            return {}
        result = await self.session.execute(
            select(Category).where(Category.id.in_(list(category_ids)))
        )
        return {c.id: c for c in result.scalars().all()}

    async def find_all(self) -> Sequence[Category]:
        """List all categories, apparel roots first, then by name."""
        query = select(Category).order_by(
            Category.parent_id.is_not(None),
            Category.name,
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_children(self, parent_id: str) -> Sequence[Category]:
        """List direct children of a category ordered by name."""
        query = (
            select(Category)
            .where(Category.parent_id == parent_id)
            .order_by(Category.name)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def collect_subtree_ids(self, category_id: str) -> list[str]:
        """Collect a category and all of its descendants.

        Args:
            category_id: Root of the subtree.

        Returns:
            IDs in breadth-first order, the root first.
        """
        collected = [category_id]
        frontier = [category_id]
        while frontier:
            result = await self.session.execute(
                select(Category.id).where(Category.parent_id.in_(frontier))
            )
            frontier = [row for row in result.scalars().all() if row not in collected]
            collected.extend(frontier)
        return collected

    async def delete_many(self, category_ids: Sequence[str]) -> None:
        """Delete categories together with their matrix rows and POM links.

        Args:
            category_ids: Categories to remove, parents before children.
        """
        ids = list(category_ids)
        await self.session.execute(
            delete(CategoryAttribute).where(CategoryAttribute.category_id.in_(ids))
        )
        await self.session.execute(
            delete(ApparelPOMMapping).where(ApparelPOMMapping.apparel_id.in_(ids))
        )
        # Children first so the self-referencing foreign key never dangles
        for category_id in reversed(ids):
            await self.session.execute(delete(Category).where(Category.id == category_id))
        await self.session.flush()


class AttributeRepository:
    """Repository for attribute types and the category-attribute matrix."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_types(self) -> Sequence[AttributeType]:
        """List attribute types ordered by name."""
        result = await self.session.execute(select(AttributeType).order_by(AttributeType.name))
        return result.scalars().all()

    async def get_type(self, slug: str) -> AttributeType | None:
        """Get attribute type by slug."""
        return await self.session.get(AttributeType, slug)

    async def add_type_if_missing(self, slug: str, name: str) -> bool:
        """Insert an attribute type unless the slug is already registered.

        Runs as one ``INSERT ... ON CONFLICT DO NOTHING``.

        Returns:
            True if this call inserted the row.
        """
        table = AttributeType.__table__
        stmt = upsert_insert(self.session, table).values(slug=slug, name=name)
        stmt = stmt.on_conflict_do_nothing(index_elements=[table.c.slug])
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def upsert_value(self, category_id: str, slug: str, value: str) -> CategoryAttribute:
        """Insert or update the matrix cell keyed by (category_id, slug).

        Runs as one ``INSERT ... ON CONFLICT DO UPDATE``: concurrent
        writers of the same cell both succeed and the last one wins.

        Args:
            category_id: Category ID.
            slug: Attribute slug.
            value: Text to store.

        Returns:
            The stored cell.
        """
        table = CategoryAttribute.__table__
        stmt = upsert_insert(self.session, table).values(
            category_id=category_id,
            attribute_slug=slug,
            value=value,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.category_id, table.c.attribute_slug],
            set_={"value": stmt.excluded.value, "updated_at": _utcnow()},
        )
        await self.session.execute(stmt)
        result = await self.session.execute(
            select(CategoryAttribute)
            .where(
                and_(
                    CategoryAttribute.category_id == category_id,
                    CategoryAttribute.attribute_slug == slug,
                )
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def find_values(self, category_id: str | None = None) -> Sequence[CategoryAttribute]:
        """List matrix cells, optionally for a single category.

        Args:
            category_id: Restrict to one category.

        Returns:
            Cells ordered by category and slug.
        """
        query = select(CategoryAttribute)
        if category_id is not None:
            query = query.where(CategoryAttribute.category_id == category_id)
        query = query.order_by(CategoryAttribute.category_id, CategoryAttribute.attribute_slug)
        result = await self.session.execute(query)
        return result.scalars().all()


class VocabularyRepository:
    """Repository for reference vocabulary entries of every kind."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_by_kind(self, kind: str) -> Sequence[VocabularyEntry]:
        """List entries of one kind.

        Sizes follow their explicit ``sort_order``; the other kinds are
        alphabetical.
        """
        query = select(VocabularyEntry).where(VocabularyEntry.kind == kind)
        if kind == "sizes":
            query = query.order_by(VocabularyEntry.sort_order, VocabularyEntry.name)
        else:
            query = query.order_by(VocabularyEntry.name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get(self, kind: str, entry_id: str) -> VocabularyEntry | None:
        """Get an entry by kind and ID."""
        entry = await self.session.get(VocabularyEntry, entry_id)
        if entry is None or entry.kind != kind:
            return None
        return entry

    async def get_many(self, kind: str, entry_ids: Sequence[str]) -> dict[str, VocabularyEntry]:
        """Get entries of one kind by ID, keyed by ID (unknown IDs are absent)."""
        ids = [entry_id for entry_id in entry_ids if entry_id]
        if not ids:
            return {}
        result = await self.session.execute(
            select(VocabularyEntry).where(
                and_(VocabularyEntry.kind == kind, VocabularyEntry.id.in_(ids))
            )
        )
        return {e.id: e for e in result.scalars().all()}

    async def get_by_name(self, kind: str, name: str) -> VocabularyEntry | None:
        """Get an entry by kind and exact name."""
        result = await self.session.execute(
            select(VocabularyEntry).where(
                and_(VocabularyEntry.kind == kind, VocabularyEntry.name == name)
            )
        )
        return result.scalar_one_or_none()

    async def save(self, entry: VocabularyEntry) -> VocabularyEntry:
        """Save an entry to database."""
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def delete(self, entry: VocabularyEntry) -> None:
        """Delete an entry."""
        await self.session.delete(entry)
        await self.session.flush()


class POMRepository:
    """Repository for the points-of-measurement catalog and its links."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_categories(self) -> Sequence[POMCategory]:
        """List POM categories in display order."""
        result = await self.session.execute(
            select(POMCategory).order_by(POMCategory.sort_order, POMCategory.name)
        )
        return result.scalars().all()

    async def get_category(self, category_id: str) -> POMCategory | None:
        """Get POM category by ID."""
        return await self.session.get(POMCategory, category_id)

    async def get_category_by_name(self, name: str) -> POMCategory | None:
        """Get POM category by its unique name."""
        result = await self.session.execute(select(POMCategory).where(POMCategory.name == name))
        return result.scalar_one_or_none()

    async def find_definitions(
        self,
        category_id: str | None = None,
    ) -> Sequence[tuple[POMDefinition, str]]:
        """List active POM definitions with their category name.

        Args:
            category_id: Restrict to one POM category.

        Returns:
            (definition, category name) pairs in category then definition order.
        """
        query = select(POMDefinition, POMCategory.name).join(
            POMCategory, POMDefinition.category_id == POMCategory.id
        )
        query = query.where(POMDefinition.is_active.is_(True))
        if category_id is not None:
            query = query.where(POMDefinition.category_id == category_id)
        query = query.order_by(POMCategory.sort_order, POMDefinition.sort_order)
        result = await self.session.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def get_definitions(
        self,
        pom_ids: Sequence[str],
        active_only: bool = True,
    ) -> dict[str, POMDefinition]:
        """Get definitions by ID, keyed by ID (unknown IDs are absent).

        Args:
            pom_ids: Definition IDs.
            active_only: Treat retired definitions as unknown.
        """
        if not pom_ids:
            return {}
        query = select(POMDefinition).where(POMDefinition.id.in_(list(pom_ids)))
        if active_only:
            query = query.where(POMDefinition.is_active.is_(True))
        result = await self.session.execute(query)
        return {d.id: d for d in result.scalars().all()}

    async def get_definition(self, pom_id: str) -> POMDefinition | None:
        """Get a definition by ID, active or retired."""
        return await self.session.get(POMDefinition, pom_id)

    async def find_package_types(self) -> Sequence[PackageMeasurementType]:
        """List active package measurement types in display order."""
        result = await self.session.execute(
            select(PackageMeasurementType)
            .where(PackageMeasurementType.is_active.is_(True))
            .order_by(PackageMeasurementType.sort_order, PackageMeasurementType.name)
        )
        return result.scalars().all()

    async def get_package_type(self, type_id: str) -> PackageMeasurementType | None:
        """Get a package measurement type by ID."""
        return await self.session.get(PackageMeasurementType, type_id)

    async def get_package_type_by_name(self, name: str) -> PackageMeasurementType | None:
        """Get a package measurement type by its unique name."""
        result = await self.session.execute(
            select(PackageMeasurementType).where(PackageMeasurementType.name == name)
        )
        return result.scalar_one_or_none()

    async def get_definition_by_code(self, category_id: str, code: str) -> POMDefinition | None:
        """Get a definition by its (category, code) key."""
        result = await self.session.execute(
            select(POMDefinition).where(
                and_(POMDefinition.category_id == category_id, POMDefinition.code == code)
            )
        )
        return result.scalar_one_or_none()

    async def save(self, obj: POMCategory | POMDefinition | PackageMeasurementType) -> Any:
        """Save a POM category, definition or package measurement type."""
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def find_apparel_poms(
        self,
        apparel_id: str,
    ) -> Sequence[tuple[POMDefinition, ApparelPOMMapping, str]]:
        """List POMs linked to an apparel category.

        Args:
            apparel_id: Apparel category ID.

        Returns:
            (definition, link, POM category name) triples ordered by link
            sort order, then definition sort order.
        """
        query = (
            select(POMDefinition, ApparelPOMMapping, POMCategory.name)
            .join(ApparelPOMMapping, ApparelPOMMapping.pom_id == POMDefinition.id)
            .join(POMCategory, POMDefinition.category_id == POMCategory.id)
            .where(ApparelPOMMapping.apparel_id == apparel_id)
            .order_by(ApparelPOMMapping.sort_order, POMDefinition.sort_order)
        )
        result = await self.session.execute(query)
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def replace_apparel_mappings(
        self,
        apparel_id: str,
        mappings: Sequence[ApparelPOMMapping],
    ) -> None:
        """Replace every link of an apparel category.

        Runs inside the caller's transaction; the old rows are deleted and
        the new rows inserted before a single flush.
        """
        await self.session.execute(
            delete(ApparelPOMMapping).where(ApparelPOMMapping.apparel_id == apparel_id)
        )
        self.session.add_all(list(mappings))
        await self.session.flush()

    async def find_measurements(
        self,
        sku_id: str,
    ) -> Sequence[tuple[SKUMeasurement, POMDefinition, VocabularyEntry]]:
        """List measurements of a SKU with their POM and size."""
        query = (
            select(SKUMeasurement, POMDefinition, VocabularyEntry)
            .join(POMDefinition, SKUMeasurement.pom_id == POMDefinition.id)
            .join(VocabularyEntry, SKUMeasurement.size_id == VocabularyEntry.id)
            .where(SKUMeasurement.sku_id == sku_id)
            .order_by(VocabularyEntry.sort_order, POMDefinition.sort_order)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def upsert_measurement(
        self,
        sku_id: str,
        pom_id: str,
        size_id: str,
        value: Any,
        tolerance: Any = None,
    ) -> None:
        """Insert or update the measurement keyed by (sku, pom, size)."""
        table = SKUMeasurement.__table__
        stmt = upsert_insert(self.session, table).values(
            sku_id=sku_id,
            pom_id=pom_id,
            size_id=size_id,
            value=value,
            tolerance=tolerance,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.sku_id, table.c.pom_id, table.c.size_id],
            set_={
                "value": stmt.excluded.value,
                "tolerance": stmt.excluded.tolerance,
                "updated_at": _utcnow(),
            },
        )
        await self.session.execute(stmt)

    async def delete_measurements(self, sku_id: str) -> None:
        """Delete every measurement of a SKU."""
        await self.session.execute(delete(SKUMeasurement).where(SKUMeasurement.sku_id == sku_id))


class SKURepository:
    """Repository for SKU records.

    Example usage:
        async with get_session() as session:
            repo = SKURepository(session)
            skus = await repo.find_all(trashed=False, brand_id="brand-1", search="tee")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, sku: SKU) -> SKU:
        """Save a SKU to database."""
        self.session.add(sku)
        await self.session.flush()
        return sku

    async def get_by_id(self, sku_id: str, include_trashed: bool = False) -> SKU | None:
        """Get SKU by ID.

        Args:
            sku_id: SKU ID.
            include_trashed: Also return soft-deleted SKUs.

        Returns:
            SKU if found, None otherwise.
        """
        query = select(SKU).where(SKU.id == sku_id)
        if not include_trashed:
            query = query.where(SKU.deleted_at.is_(None))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def _conditions(
        self,
        trashed: bool,
        brand_id: str | None,
        search: str | None,
    ) -> list[Any]:
        conditions: list[Any] = [
            SKU.deleted_at.is_not(None) if trashed else SKU.deleted_at.is_(None)
        ]
        if brand_id is not None:
            conditions.append(SKU.brand_id == brand_id)
        if search:
            search_pattern = f"%{search}%"
            conditions.append(
                or_(
                    SKU.name.ilike(search_pattern),
                    SKU.code.ilike(search_pattern),
                )
            )
        return conditions

    async def find_all(
        self,
        trashed: bool = False,
        brand_id: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[SKU]:
        """Find SKUs in one lifecycle state with filtering and pagination.

        Args:
            trashed: List the trash instead of active SKUs.
            brand_id: Filter by brand.
            search: Case-insensitive match on name or code.
            limit: Maximum results.
            offset: Result offset for pagination.

        Returns:
            Matching SKUs, newest first.
        """
        query = (
            select(SKU)
            .where(and_(*self._conditions(trashed, brand_id, search)))
            .order_by(SKU.created_at.desc(), SKU.code)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(
        self,
        trashed: bool = False,
        brand_id: str | None = None,
        search: str | None = None,
    ) -> int:
        """Count SKUs matching the same filters as ``find_all``."""
        query = select(func.count(SKU.id)).where(
            and_(*self._conditions(trashed, brand_id, search))
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def delete(self, sku: SKU) -> None:
        """Remove a SKU row permanently."""
        await self.session.delete(sku)
        await self.session.flush()
