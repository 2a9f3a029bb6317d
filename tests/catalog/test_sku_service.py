"""Tests for SKU generation, update and lifecycle."""

from dataclasses import dataclass
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.models import SKU, VocabularyEntry
from app.catalog.repository import SKURepository
from app.catalog.schemas import NameConfig, SKUContext, VocabularyKind
from app.catalog.service import (
    PaginationParams,
    SKUFilter,
    SKUService,
    TaxonomyService,
    VocabularyService,
)
from app.domain.exceptions import (
    BatchTooLargeError,
    CategoryNotFoundError,
    InvalidStateTransitionError,
    MissingNameFragmentError,
    PartialBatchFailureError,
    SKUNotFoundError,
    SKUTrashedError,
    VocabularyEntryNotFoundError,
)
from app.domain.state_machines import SKUStatus


@dataclass
class Catalog:
    red: VocabularyEntry
    blue: VocabularyEntry
    small: VocabularyEntry
    medium: VocabularyEntry
    large: VocabularyEntry
    context: SKUContext


SNAPSHOT_FIELDS = (
    "code",
    "name",
    "brand_id",
    "line_id",
    "collection",
    "description",
    "images",
    "videos",
    "materials",
    "category",
    "sku_metadata",
)


def sku_snapshot(sku: SKU) -> dict[str, Any]:
    return {field: getattr(sku, field) for field in SNAPSHOT_FIELDS}


@pytest_asyncio.fixture
async def catalog(session: AsyncSession) -> Catalog:
    """Colors, sizes and a Tops category with an Acme tee context."""
    vocabularies = VocabularyService(session)
    red = await vocabularies.add_entry(VocabularyKind.COLORS, "Red", "#FF0000")
    blue = await vocabularies.add_entry(VocabularyKind.COLORS, "Blue", "#0000FF")
    small = await vocabularies.add_entry(VocabularyKind.SIZES, "S")
    medium = await vocabularies.add_entry(VocabularyKind.SIZES, "M")
    large = await vocabularies.add_entry(VocabularyKind.SIZES, "L")
    tops = await TaxonomyService(session).create_category("Tops")
    context = SKUContext(
        brand_id="brand-acme",
        brand_name="Acme",
        model_name="Classic Tee",
        apparel_id=tops.id,
    )
    return Catalog(red, blue, small, medium, large, context)


class TestGenerateSKUs:
    """Tests for batch generation."""

    @pytest.mark.asyncio
    async def test_one_sku_per_combination(self, session: AsyncSession, catalog: Catalog) -> None:
        """Two colors and two sizes make four SKUs in color-major order."""
        result = await SKUService(session).generate_skus(
            catalog.context,
            color_ids=[catalog.red.id, catalog.blue.id],
            size_ids=[catalog.small.id, catalog.medium.id],
        )

        assert result.count == 4
        assert result.attempted == 4
        assert result.succeeded
        assert [sku.name for sku in result.created] == [
            "Acme Classic Tee Tops (Red) [S]",
            "Acme Classic Tee Tops (Red) [M]",
            "Acme Classic Tee Tops (Blue) [S]",
            "Acme Classic Tee Tops (Blue) [M]",
        ]
        assert len({sku.code for sku in result.created}) == 4

    @pytest.mark.asyncio
    async def test_acme_example(self, session: AsyncSession, catalog: Catalog) -> None:
        """Apparel can be dropped from a minimal context."""
        context = SKUContext(brand_id="brand-acme", brand_name="Acme", model_name="Classic Tee")

        result = await SKUService(session).generate_skus(
            context, color_ids=[catalog.red.id], size_ids=[catalog.small.id]
        )

        assert [sku.name for sku in result.created] == ["Acme Classic Tee (Red) [S]"]

    @pytest.mark.asyncio
    async def test_empty_selection_makes_one_sku(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """No colors and no sizes still materialize a single SKU."""
        result = await SKUService(session).generate_skus(catalog.context)

        assert result.count == 1
        sku = result.created[0]
        assert sku.name == "Acme Classic Tee Tops"
        assert sku.sku_metadata["color_id"] is None
        assert sku.sku_metadata["size_id"] is None

    @pytest.mark.asyncio
    async def test_one_dimension_only(self, session: AsyncSession, catalog: Catalog) -> None:
        """Sizes alone give one SKU per size."""
        result = await SKUService(session).generate_skus(
            catalog.context,
            size_ids=[catalog.small.id, catalog.medium.id, catalog.large.id],
        )

        assert [sku.name for sku in result.created] == [
            "Acme Classic Tee Tops [S]",
            "Acme Classic Tee Tops [M]",
            "Acme Classic Tee Tops [L]",
        ]

    @pytest.mark.asyncio
    async def test_codes_unique_across_batches(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """Two batches of the same context never reuse a code."""
        service = SKUService(session)
        first = await service.generate_skus(catalog.context, size_ids=[catalog.small.id])
        second = await service.generate_skus(catalog.context, size_ids=[catalog.small.id])

        assert first.created[0].code != second.created[0].code
        assert first.created[0].code.startswith("SKU-")

    @pytest.mark.asyncio
    async def test_snapshot(self, session: AsyncSession, catalog: Catalog) -> None:
        """Metadata and category snapshots are stored on the SKU."""
        context = catalog.context.model_copy(update={"extra": {"season": "SS26"}})

        result = await SKUService(session).generate_skus(
            context, color_ids=[catalog.red.id], size_ids=[catalog.medium.id]
        )

        sku = result.created[0]
        assert sku.brand_id == "brand-acme"
        assert sku.status == SKUStatus.ACTIVE
        assert sku.category["page"] == "Tops"
        assert sku.sku_metadata["model_name"] == "Classic Tee"
        assert sku.sku_metadata["apparel_name"] == "Tops"
        assert sku.sku_metadata["color_name"] == "Red"
        assert sku.sku_metadata["size_name"] == "M"
        assert sku.sku_metadata["extra"] == {"season": "SS26"}

    @pytest.mark.asyncio
    async def test_unresolved_sizes_are_reported(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """Unknown size IDs still produce SKUs, without a size annotation."""
        result = await SKUService(session).generate_skus(
            catalog.context,
            color_ids=[catalog.red.id],
            size_ids=[catalog.small.id, "ghost-size"],
        )

        assert result.count == 2
        assert result.unresolved_size_ids == ["ghost-size"]
        assert result.unresolved_color_ids == []
        assert result.created[1].name == "Acme Classic Tee Tops (Red)"

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_successes(
        self,
        session: AsyncSession,
        catalog: Catalog,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A failed combination is reported; the others persist."""
        original_save = SKURepository.save
        calls = {"count": 0}

        async def flaky_save(self: SKURepository, sku):  # type: ignore[no-untyped-def]
            calls["count"] += 1
            if calls["count"] == 2:
                raise SQLAlchemyError("disk full")
            return await original_save(self, sku)

        monkeypatch.setattr(SKURepository, "save", flaky_save)
        service = SKUService(session)
        # Rollback expires every loaded entry; keep plain IDs
        red_id, medium_id = catalog.red.id, catalog.medium.id

        with pytest.raises(PartialBatchFailureError) as exc_info:
            await service.generate_skus(
                catalog.context,
                color_ids=[red_id],
                size_ids=[catalog.small.id, medium_id, catalog.large.id],
            )

        result = exc_info.value.result
        assert result.attempted == 3
        assert [sku.name for sku in result.created] == [
            "Acme Classic Tee Tops (Red) [S]",
            "Acme Classic Tee Tops (Red) [L]",
        ]
        assert len(result.failed) == 1
        assert result.failed[0].color_id == red_id
        assert result.failed[0].size_id == medium_id
        assert result.failed[0].reason == "database error"

        page = await service.list_active_skus()
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_batch_limit(self, session: AsyncSession, catalog: Catalog) -> None:
        """Selections over the limit are rejected before anything is written."""
        service = SKUService(session, max_combinations=3)

        with pytest.raises(BatchTooLargeError):
            await service.generate_skus(
                catalog.context,
                color_ids=[catalog.red.id, catalog.blue.id],
                size_ids=[catalog.small.id, catalog.medium.id],
            )
        assert (await service.list_active_skus()).total == 0

    @pytest.mark.asyncio
    async def test_brand_required(self, session: AsyncSession, catalog: Catalog) -> None:
        """A missing brand is a validation error."""
        context = catalog.context.model_copy(update={"brand_id": ""})

        with pytest.raises(MissingNameFragmentError):
            await SKUService(session).generate_skus(context)

    @pytest.mark.asyncio
    async def test_unknown_references(self, session: AsyncSession, catalog: Catalog) -> None:
        """Unknown categories and attribute values are not-found errors."""
        service = SKUService(session)

        with pytest.raises(CategoryNotFoundError):
            await service.generate_skus(
                catalog.context.model_copy(update={"style_id": "missing"})
            )
        with pytest.raises(VocabularyEntryNotFoundError):
            await service.generate_skus(
                catalog.context.model_copy(update={"fit_id": "missing"})
            )


class TestUpdateSKU:
    """Tests for SKU update."""

    @pytest.mark.asyncio
    async def test_update_keeps_code_and_combination(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """Renaming re-annotates with the stored color and size."""
        service = SKUService(session)
        result = await service.generate_skus(
            catalog.context, color_ids=[catalog.red.id], size_ids=[catalog.small.id]
        )
        sku = result.created[0]

        updated = await service.update_sku(
            sku.id,
            catalog.context.model_copy(update={"model_name": "Heritage Tee"}),
        )

        assert updated.code == sku.code
        assert updated.name == "Acme Heritage Tee Tops (Red) [S]"
        assert updated.sku_metadata["model_name"] == "Heritage Tee"
        assert updated.sku_metadata["size_id"] == catalog.small.id

    @pytest.mark.asyncio
    async def test_update_does_not_duplicate_annotations(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """A model name that already holds the annotations is not re-annotated."""
        service = SKUService(session)
        context = SKUContext(brand_id="brand-acme", brand_name="Acme", model_name="Classic Tee")
        result = await service.generate_skus(
            context, color_ids=[catalog.red.id], size_ids=[catalog.small.id]
        )

        updated = await service.update_sku(
            result.created[0].id,
            context.model_copy(update={"model_name": "Classic Tee (Red) [S]"}),
        )

        assert updated.name == "Acme Classic Tee (Red) [S]"

    @pytest.mark.asyncio
    async def test_update_trashed_is_conflict(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """Trashed SKUs must be restored before editing."""
        service = SKUService(session)
        sku = (await service.generate_skus(catalog.context)).created[0]
        await service.delete_sku(sku.id)

        with pytest.raises(SKUTrashedError):
            await service.update_sku(sku.id, catalog.context)

    @pytest.mark.asyncio
    async def test_update_unknown(self, session: AsyncSession, catalog: Catalog) -> None:
        """Updating an unknown SKU raises."""
        with pytest.raises(SKUNotFoundError):
            await SKUService(session).update_sku("missing", catalog.context)


class TestSKULifecycle:
    """Tests for trash, restore and purge."""

    @pytest.mark.asyncio
    async def test_delete_and_restore(self, session: AsyncSession, catalog: Catalog) -> None:
        """Trashing hides a SKU from the catalog until restored."""
        service = SKUService(session)
        sku = (await service.generate_skus(catalog.context)).created[0]

        trashed = await service.delete_sku(sku.id)
        assert trashed.status == SKUStatus.TRASHED
        assert (await service.list_active_skus()).total == 0
        assert [s.id for s in (await service.list_trashed_skus()).items] == [sku.id]
        with pytest.raises(SKUNotFoundError):
            await service.get_sku(sku.id)

        restored = await service.restore_sku(sku.id)
        assert restored.status == SKUStatus.ACTIVE
        assert restored.deleted_at is None
        assert (await service.get_sku(sku.id)).id == sku.id

    @pytest.mark.asyncio
    async def test_restore_keeps_every_other_field(
        self,
        session: AsyncSession,
        catalog: Catalog,
    ) -> None:
        """Delete then restore only toggles the trash timestamp."""
        cotton = await VocabularyService(session).add_entry(VocabularyKind.MATERIALS, "Cotton")
        context = catalog.context.model_copy(
            update={
                "line_id": "line-core",
                "collection": "Core",
                "material_id": cotton.id,
                "description": "Heavyweight jersey",
                "images": ["https://cdn.example.com/tee-front.jpg"],
                "videos": ["https://cdn.example.com/tee.mp4"],
                "extra": {"season": "SS26"},
            }
        )
        service = SKUService(session)
        sku = (
            await service.generate_skus(
                context, color_ids=[catalog.red.id], size_ids=[catalog.small.id]
            )
        ).created[0]
        before = sku_snapshot(sku)

        await service.delete_sku(sku.id)
        await service.restore_sku(sku.id)
        session.expire_all()
        after = sku_snapshot(await service.get_sku(sku.id))

        assert after == before
        assert before["materials"] == ["Cotton"]
        assert before["sku_metadata"]["color_id"] == catalog.red.id

    @pytest.mark.asyncio
    async def test_purge_requires_trash(self, session: AsyncSession, catalog: Catalog) -> None:
        """Active SKUs cannot be purged."""
        service = SKUService(session)
        sku = (await service.generate_skus(catalog.context)).created[0]

        with pytest.raises(InvalidStateTransitionError):
            await service.permanent_delete_sku(sku.id)
        assert (await service.get_sku(sku.id)).id == sku.id

    @pytest.mark.asyncio
    async def test_purge_removes_record(self, session: AsyncSession, catalog: Catalog) -> None:
        """Purged SKUs are gone from both listings."""
        service = SKUService(session)
        sku = (await service.generate_skus(catalog.context)).created[0]
        await service.delete_sku(sku.id)

        await service.permanent_delete_sku(sku.id)

        with pytest.raises(SKUNotFoundError):
            await service.get_sku(sku.id, include_trashed=True)
        assert (await service.list_trashed_skus()).total == 0

    @pytest.mark.asyncio
    async def test_double_delete_is_conflict(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        """Trashing a trashed SKU is an invalid transition."""
        service = SKUService(session)
        sku = (await service.generate_skus(catalog.context)).created[0]
        await service.delete_sku(sku.id)

        with pytest.raises(InvalidStateTransitionError):
            await service.delete_sku(sku.id)


class TestListSKUs:
    """Tests for SKU listing."""

    @pytest.mark.asyncio
    async def test_filters_and_pagination(self, session: AsyncSession, catalog: Catalog) -> None:
        """Brand and search filters narrow the listing; pages split it."""
        service = SKUService(session)
        await service.generate_skus(
            catalog.context,
            size_ids=[catalog.small.id, catalog.medium.id, catalog.large.id],
        )
        other = SKUContext(brand_id="brand-zed", brand_name="Zed", model_name="Hoodie")
        await service.generate_skus(other)

        acme = await service.list_active_skus(SKUFilter(brand_id="brand-acme"))
        assert acme.total == 3

        hoodies = await service.list_active_skus(SKUFilter(search="hoodie"))
        assert [s.name for s in hoodies.items] == ["Zed Hoodie"]

        page = await service.list_active_skus(pagination=PaginationParams(page=2, page_size=3))
        assert page.total == 4
        assert len(page.items) == 1
        assert page.total_pages == 2
        assert page.has_prev
        assert not page.has_next
