"""Tests for the POM catalog, apparel links and measurements."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.bootstrap import (
    PACKAGE_MEASUREMENT_TYPES,
    POM_CATALOG,
    seed_package_measurement_types,
    seed_pom_catalog,
)
from app.catalog.models import POMDefinition
from app.catalog.schemas import SKUContext, VocabularyKind
from app.catalog.service import (
    MeasurementInput,
    POMLink,
    POMService,
    SKUService,
    TaxonomyService,
    VocabularyService,
)
from app.domain.exceptions import (
    ConflictError,
    POMNotFoundError,
    SKUTrashedError,
    ValidationError,
    VocabularyEntryNotFoundError,
)


async def create_poms(service: POMService, *codes: str) -> list[POMDefinition]:
    category = await service.create_pom_category("Tops", sort_order=1)
    return [
        await service.create_pom_definition(category.id, code, code.title(), sort_order=i)
        for i, code in enumerate(codes, 1)
    ]


class TestPOMCatalog:
    """Tests for POM categories and definitions."""

    @pytest.mark.asyncio
    async def test_seeded_catalog(self, session: AsyncSession) -> None:
        """Seeding creates every definition once."""
        expected = sum(len(definitions) for _, _, definitions in POM_CATALOG)

        assert await seed_pom_catalog(session) == expected
        assert await seed_pom_catalog(session) == 0

        service = POMService(session)
        assert len(await service.list_pom_categories()) == len(POM_CATALOG)
        assert len(await service.list_pom_definitions()) == expected

    @pytest.mark.asyncio
    async def test_code_unique_within_category(self, session: AsyncSession) -> None:
        """Codes are upper-cased and unique per category."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")

        assert chest.code == "CHEST"
        with pytest.raises(ConflictError):
            await service.create_pom_definition(chest.category_id, "CHEST", "Chest again")

    @pytest.mark.asyncio
    async def test_duplicate_category_name(self, session: AsyncSession) -> None:
        """POM category names are unique."""
        service = POMService(session)
        await service.create_pom_category("Tops")

        with pytest.raises(ConflictError):
            await service.create_pom_category("Tops")

    @pytest.mark.asyncio
    async def test_filter_by_unknown_category(self, session: AsyncSession) -> None:
        """Filtering by an unknown POM category raises."""
        with pytest.raises(POMNotFoundError):
            await POMService(session).list_pom_definitions("missing")


class TestApparelPOMs:
    """Tests for apparel POM links."""

    @pytest.mark.asyncio
    async def test_replace_is_whole_set(self, session: AsyncSession) -> None:
        """Setting POMs replaces the previous set entirely."""
        service = POMService(session)
        chest, waist, length = await create_poms(service, "chest", "waist", "length")
        tops = await TaxonomyService(session).create_category("Tops")

        await service.set_apparel_poms(tops.id, [POMLink(chest.id), POMLink(waist.id)])
        linked = await service.set_apparel_poms(
            tops.id, [POMLink(length.id, is_required=True), POMLink(chest.id)]
        )

        assert [item.definition.code for item in linked] == ["LENGTH", "CHEST"]
        assert linked[0].is_required
        assert [item.sort_order for item in linked] == [0, 1]
        assert [item.definition.id for item in await service.get_apparel_poms(tops.id)] == [
            length.id,
            chest.id,
        ]

    @pytest.mark.asyncio
    async def test_explicit_sort_order(self, session: AsyncSession) -> None:
        """Links are ordered by their sort order."""
        service = POMService(session)
        chest, waist = await create_poms(service, "chest", "waist")
        tops = await TaxonomyService(session).create_category("Tops")

        linked = await service.set_apparel_poms(
            tops.id, [POMLink(chest.id, sort_order=5), POMLink(waist.id, sort_order=1)]
        )

        assert [item.definition.code for item in linked] == ["WAIST", "CHEST"]

    @pytest.mark.asyncio
    async def test_empty_list_clears(self, session: AsyncSession) -> None:
        """An empty set removes every link."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        tops = await TaxonomyService(session).create_category("Tops")
        await service.set_apparel_poms(tops.id, [POMLink(chest.id)])

        assert await service.set_apparel_poms(tops.id, []) == []

    @pytest.mark.asyncio
    async def test_invalid_request_leaves_set_untouched(self, session: AsyncSession) -> None:
        """Duplicates and unknown POMs are rejected before anything changes."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        tops = await TaxonomyService(session).create_category("Tops")
        await service.set_apparel_poms(tops.id, [POMLink(chest.id)])

        with pytest.raises(ValidationError):
            await service.set_apparel_poms(tops.id, [POMLink(chest.id), POMLink(chest.id)])
        with pytest.raises(POMNotFoundError):
            await service.set_apparel_poms(tops.id, [POMLink("missing")])

        linked = await service.get_apparel_poms(tops.id)
        assert [item.definition.id for item in linked] == [chest.id]

    @pytest.mark.asyncio
    async def test_style_categories_rejected(self, session: AsyncSession) -> None:
        """Only apparel categories carry POMs."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        taxonomy = TaxonomyService(session)
        tops = await taxonomy.create_category("Tops")
        tees = await taxonomy.create_category("T-Shirts", parent_id=tops.id)

        with pytest.raises(ValidationError):
            await service.set_apparel_poms(tees.id, [POMLink(chest.id)])


class TestMeasurements:
    """Tests for SKU measurements."""

    @pytest.mark.asyncio
    async def test_upsert_by_pom_and_size(self, session: AsyncSession) -> None:
        """Saving the same (POM, size) twice updates the value."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        size = await VocabularyService(session).add_entry(VocabularyKind.SIZES, "M")
        result = await SKUService(session).generate_skus(
            SKUContext(brand_id="b-1", brand_name="Acme", model_name="Tee")
        )
        sku = result.created[0]

        await service.save_sku_measurements(
            sku.id, [MeasurementInput(chest.id, size.id, Decimal("52.0"))]
        )
        records = await service.save_sku_measurements(
            sku.id, [MeasurementInput(chest.id, size.id, Decimal("53.5"), Decimal("1.0"))]
        )

        assert len(records) == 1
        assert records[0].measurement.value == Decimal("53.5")
        assert records[0].measurement.tolerance == Decimal("1.0")
        assert records[0].definition.code == "CHEST"
        assert records[0].size.name == "M"

    @pytest.mark.asyncio
    async def test_unknown_size_rejected(self, session: AsyncSession) -> None:
        """Measurements reference known sizes only."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        result = await SKUService(session).generate_skus(
            SKUContext(brand_id="b-1", brand_name="Acme", model_name="Tee")
        )

        with pytest.raises(VocabularyEntryNotFoundError):
            await service.save_sku_measurements(
                result.created[0].id, [MeasurementInput(chest.id, "ghost", Decimal("1"))]
            )

    @pytest.mark.asyncio
    async def test_trashed_sku_rejected(self, session: AsyncSession) -> None:
        """Trashed SKUs cannot be measured."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        size = await VocabularyService(session).add_entry(VocabularyKind.SIZES, "M")
        skus = SKUService(session)
        result = await skus.generate_skus(
            SKUContext(brand_id="b-1", brand_name="Acme", model_name="Tee")
        )
        await skus.delete_sku(result.created[0].id)

        with pytest.raises(SKUTrashedError):
            await service.save_sku_measurements(
                result.created[0].id, [MeasurementInput(chest.id, size.id, Decimal("1"))]
            )


class TestPOMDefinitionAdmin:
    """Tests for updating and retiring POM definitions."""

    @pytest.mark.asyncio
    async def test_update_changes_only_given_fields(self, session: AsyncSession) -> None:
        service = POMService(session)
        [chest] = await create_poms(service, "chest")

        updated = await service.update_pom_definition(
            chest.id, name="Chest Width", default_tolerance=Decimal("1.0"), code="chest-w"
        )

        assert updated.name == "Chest Width"
        assert updated.code == "CHEST-W"
        assert updated.default_tolerance == Decimal("1.0")
        assert updated.measurement_unit == "cm"
        assert updated.sort_order == 1

    @pytest.mark.asyncio
    async def test_update_to_taken_code(self, session: AsyncSession) -> None:
        service = POMService(session)
        chest, _ = await create_poms(service, "chest", "waist")

        with pytest.raises(ConflictError):
            await service.update_pom_definition(chest.id, code="WAIST")

    @pytest.mark.asyncio
    async def test_update_keeps_own_code(self, session: AsyncSession) -> None:
        """Re-sending the current code is not a conflict."""
        service = POMService(session)
        [chest] = await create_poms(service, "chest")

        updated = await service.update_pom_definition(chest.id, code="chest", name="Chest")

        assert updated.code == "CHEST"

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_field(self, session: AsyncSession) -> None:
        service = POMService(session)
        [chest] = await create_poms(service, "chest")

        with pytest.raises(ValidationError):
            await service.update_pom_definition(chest.id, is_active=False)

    @pytest.mark.asyncio
    async def test_move_to_unknown_category(self, session: AsyncSession) -> None:
        service = POMService(session)
        [chest] = await create_poms(service, "chest")

        with pytest.raises(POMNotFoundError):
            await service.update_pom_definition(chest.id, category_id="missing")

    @pytest.mark.asyncio
    async def test_retired_definition_hidden_and_unusable(self, session: AsyncSession) -> None:
        """Retiring hides a POM from the catalog and blocks new links."""
        service = POMService(session)
        chest, waist = await create_poms(service, "chest", "waist")
        tops = await TaxonomyService(session).create_category("Tops")

        await service.delete_pom_definition(chest.id)

        codes = [definition.code for definition, _ in await service.list_pom_definitions()]
        assert codes == ["WAIST"]
        with pytest.raises(POMNotFoundError):
            await service.set_apparel_poms(tops.id, [POMLink(chest.id)])
        with pytest.raises(POMNotFoundError):
            await service.update_pom_definition(chest.id, name="Chest")
        with pytest.raises(POMNotFoundError):
            await service.delete_pom_definition(chest.id)

    @pytest.mark.asyncio
    async def test_retired_definition_keeps_existing_links(self, session: AsyncSession) -> None:
        service = POMService(session)
        chest, waist = await create_poms(service, "chest", "waist")
        tops = await TaxonomyService(session).create_category("Tops")
        await service.set_apparel_poms(tops.id, [POMLink(chest.id), POMLink(waist.id)])

        await service.delete_pom_definition(chest.id)

        linked = await service.get_apparel_poms(tops.id)
        assert [item.definition.code for item in linked] == ["CHEST", "WAIST"]

    @pytest.mark.asyncio
    async def test_retired_definition_cannot_be_measured(self, session: AsyncSession) -> None:
        service = POMService(session)
        [chest] = await create_poms(service, "chest")
        size = await VocabularyService(session).add_entry(VocabularyKind.SIZES, "M")
        result = await SKUService(session).generate_skus(
            SKUContext(brand_id="b-1", brand_name="Acme", model_name="Tee")
        )
        sku_id = result.created[0].id
        await service.save_sku_measurements(
            sku_id, [MeasurementInput(chest.id, size.id, Decimal("52.0"))]
        )

        await service.delete_pom_definition(chest.id)

        with pytest.raises(POMNotFoundError):
            await service.save_sku_measurements(
                sku_id, [MeasurementInput(chest.id, size.id, Decimal("53.0"))]
            )
        records = await service.get_sku_measurements(sku_id)
        assert [record.measurement.value for record in records] == [Decimal("52.0")]


class TestPackageMeasurementTypes:
    """Tests for package measurement types."""

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, session: AsyncSession) -> None:
        assert await seed_package_measurement_types(session) == len(PACKAGE_MEASUREMENT_TYPES)
        assert await seed_package_measurement_types(session) == 0

        types = await POMService(session).list_package_measurement_types()
        assert [t.name for t in types] == [name for name, _, _ in PACKAGE_MEASUREMENT_TYPES]
        assert types[-1].unit == "kg"

    @pytest.mark.asyncio
    async def test_duplicate_name(self, session: AsyncSession) -> None:
        service = POMService(session)
        await service.create_package_measurement_type("Girth")

        with pytest.raises(ConflictError):
            await service.create_package_measurement_type("Girth")

    @pytest.mark.asyncio
    async def test_update(self, session: AsyncSession) -> None:
        service = POMService(session)
        girth = await service.create_package_measurement_type("Girth", sort_order=9)
        await service.create_package_measurement_type("Depth")

        updated = await service.update_package_measurement_type(girth.id, unit="in")
        assert updated.unit == "in"
        assert updated.name == "Girth"
        with pytest.raises(ConflictError):
            await service.update_package_measurement_type(girth.id, name="Depth")
        with pytest.raises(POMNotFoundError):
            await service.update_package_measurement_type("missing", unit="in")
