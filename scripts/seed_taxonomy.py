#!/usr/bin/env python3
"""Seed taxonomy reference data script.

Creates the tables, ensures the required attribute types and seeds the
default vocabularies and the standard POM catalog. Optionally adds a
demo apparel hierarchy with package measurements, possible sizes and
fits, and POM links.

Usage:
    python scripts/seed_taxonomy.py
    python scripts/seed_taxonomy.py --with-demo-categories
    python scripts/seed_taxonomy.py --attribute-types-only
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.catalog.attributes import encode_multi_value
from app.catalog.bootstrap import bootstrap_taxonomy
from app.catalog.schemas import VocabularyKind
from app.catalog.service import POMLink, POMService, TaxonomyService, VocabularyService
from app.infrastructure.database import async_session_factory, engine, Base
from app.infrastructure.logging import configure_logging

# apparel -> (POM category, styles, sizes, fits, (height, length, width, weight))
DEMO_APPAREL: dict[str, tuple[str, list[str], list[str], list[str], tuple[float, ...]]] = {
    "T-Shirt": (
        "Tops",
        ["Crew Neck", "V-Neck", "Pocket Tee"],
        ["XXS", "XS", "S", "M", "L", "XL", "XXL"],
        ["Regular Fit", "Slim", "Oversized", "Boxy"],
        (2, 30, 25, 0.2),
    ),
    "Hoodie": (
        "Tops",
        ["Pullover", "Zip-Up"],
        ["XS", "S", "M", "L", "XL", "XXL"],
        ["Regular Fit", "Oversized", "Boxy"],
        (5, 40, 35, 0.5),
    ),
    "Jeans": (
        "Bottoms",
        ["Five Pocket", "Carpenter"],
        ["30", "32", "34", "36", "38", "40"],
        ["Slim", "Straight", "Skinny", "Relaxed", "Wide", "Bootcut"],
        (4, 40, 30, 0.6),
    ),
    "Shorts": (
        "Bottoms",
        ["Chino", "Cargo"],
        ["XS", "S", "M", "L", "XL", "XXL"],
        ["Regular Fit", "Slim", "Relaxed"],
        (2, 30, 25, 0.25),
    ),
}


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_demo_categories() -> int:
    """Create the demo apparel hierarchy with attributes and POM links.

    Apparel categories that already exist by name are skipped.

    Returns:
        Number of apparel categories created.
    """
    created = 0
    async with async_session_factory() as session:
        taxonomy = TaxonomyService(session)
        vocabularies = VocabularyService(session)
        poms = POMService(session)

        existing = {c.name for c in await taxonomy.list_categories() if c.parent_id is None}
        size_ids = {e.name: e.id for e in await vocabularies.list_entries(VocabularyKind.SIZES)}
        fit_ids = {e.name: e.id for e in await vocabularies.list_entries(VocabularyKind.FITS)}
        pom_categories = {c.name: c.id for c in await poms.list_pom_categories()}

        for name, (pom_category, styles, sizes, fits, package) in DEMO_APPAREL.items():
            if name in existing:
                continue
            apparel = await taxonomy.create_category(name)
            for style in styles:
                await taxonomy.create_category(style, parent_id=apparel.id)

            height, length, width, weight = package
            values = {
                "height-cm": str(height),
                "length-cm": str(length),
                "width-cm": str(width),
                "weight-kg": str(weight),
                "possible-sizes": encode_multi_value([size_ids[s] for s in sizes if s in size_ids]),
                "possible-fits": encode_multi_value([fit_ids[f] for f in fits if f in fit_ids]),
            }
            for slug, value in values.items():
                await taxonomy.set_category_attribute(apparel.id, slug, value)

            definitions = await poms.list_pom_definitions(pom_categories[pom_category])
            await poms.set_apparel_poms(
                apparel.id,
                [
                    POMLink(pom_id=definition.id, is_required=index < 3, sort_order=index)
                    for index, (definition, _) in enumerate(definitions)
                ],
            )
            created += 1
    return created


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed taxonomy reference data",
    )
    parser.add_argument(
        "--attribute-types-only",
        action="store_true",
        help="Only ensure the required attribute types",
    )
    parser.add_argument(
        "--with-demo-categories",
        action="store_true",
        help="Also create a demo apparel hierarchy",
    )

    args = parser.parse_args()
    configure_logging()

    print("=" * 60)
    print("Stockroom Taxonomy Seeder")
    print("=" * 60)

    # Create tables
    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    async with async_session_factory() as session:
        summary = await bootstrap_taxonomy(
            session,
            seed_reference_data=not args.attribute_types_only,
        )

    print(f"  ✓ Attribute types created: {len(summary['attribute_types_created'])}")
    print(f"  ✓ Vocabulary entries created: {summary['vocabulary_entries_created']}")
    print(f"  ✓ POM definitions created: {summary['pom_definitions_created']}")
    print(f"  ✓ Package measurement types created: {summary['package_measurement_types_created']}")

    if args.with_demo_categories and not args.attribute_types_only:
        created = await seed_demo_categories()
        print(f"  ✓ Demo apparel categories created: {created}")

    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
