"""Declarative bootstrap of the taxonomy reference data.

Holds the required attribute types, the default vocabularies and the
standard points-of-measurement catalog with its package measurement
types. Every function here is
idempotent: existing rows are left untouched, so the bootstrap can run
on every application start.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.attributes import REQUIRED_ATTRIBUTE_TYPES
from app.catalog.models import (
    PackageMeasurementType,
    POMCategory,
    POMDefinition,
    VocabularyEntry,
)
from app.catalog.repository import POMRepository, VocabularyRepository
from app.catalog.schemas import VocabularyKind
from app.catalog.service import TaxonomyService

logger = structlog.get_logger()


# ============================================================================
# Vocabularies
# ============================================================================

SIZES = ["XXS", "XS", "S", "M", "L", "XL", "XXL", "30", "32", "34", "36", "38", "40", "U"]

# (name, hex)
COLORS = [
    ("Black", "#000000"),
    ("White", "#FFFFFF"),
    ("Grey", "#808080"),
    ("Navy", "#000080"),
    ("Blue", "#0000FF"),
    ("Red", "#FF0000"),
    ("Green", "#008000"),
    ("Beige", "#F5F5DC"),
    ("Brown", "#8B4513"),
]

FITS = [
    "Regular Fit", "Slim", "Oversized", "Boxy", "Relaxed", "Loose",
    "Straight", "Skinny", "Wide", "Bootcut", "Baggy", "Adjustable Fit",
]

PATTERNS = [
    "Solid", "Argyle", "Checkered", "Gingham", "Houndstooth", "Plaid / Tartan",
    "Pinstripe", "Polka Dot", "Floral", "Paisley", "Camouflage", "Graphic",
    "Gradient / Ombré", "Tie-Dye / Batik",
]

MATERIALS = [
    "Cotton", "Organic Cotton", "Polyester", "Linen", "Wool", "Cashmere",
    "Denim", "Nylon", "Leather", "Silk", "Viscose", "Elastane",
]

GENDERS = ["Men", "Women", "Unisex"]


# ============================================================================
# Points of Measurement
# ============================================================================


@dataclass(frozen=True)
class POMSeed:
    """Seed row of a POM definition."""

    code: str
    name: str
    description: str
    is_half_measurement: bool = False


# (category name, description, definitions in display order)
POM_CATALOG: list[tuple[str, str, list[POMSeed]]] = [
    (
        "Tops",
        "Measurements for shirts, t-shirts, jackets, coats, etc.",
        [
            POMSeed("HPS", "Body Length", "From High Point Shoulder (where neck meets shoulder) to hem."),
            POMSeed("CB", "Center Back Length", "From the back neck seam down to the bottom hem."),
            POMSeed("CH", "Across Chest", 'Measured 1" (2.5cm) below the armhole, edge to edge.', True),
            POMSeed("WA", "Waist Width", "Measured at the narrowest part of the torso.", True),
            POMSeed("SW", "Sweep (Bottom)", "The width of the garment at the very bottom edge.", True),
            POMSeed("SH", "Across Shoulders", "From shoulder seam to shoulder seam."),
            POMSeed("SL", "Sleeve Length", "From the shoulder seam to the bottom of the cuff."),
            POMSeed("BC", "Bicep", '1" below the armhole, perpendicular to the sleeve length.', True),
            POMSeed("AH", "Armhole (Curved)", "Along the seam where the sleeve meets the body."),
            POMSeed("NW", "Neck Opening", "From neck seam to neck seam at the HPS."),
            POMSeed("FD", "Front Neck Drop", "Vertical distance from HPS to the front center neck."),
            POMSeed("BD", "Back Neck Drop", "Vertical distance from HPS to the back center neck."),
            POMSeed("CO", "Cuff Opening", "The width of the sleeve edge.", True),
        ],
    ),
    (
        "Bottoms",
        "Measurements for pants, shorts, skirts, etc.",
        [
            POMSeed("WB", "Waistband", "Straight across the top edge of the waistband.", True),
            POMSeed("HP", "Hip", 'Typically measured 7" to 9" below the top of the waistband.', True),
            POMSeed("FR", "Front Rise", "From the crotch seam up to the top of the front waistband."),
            POMSeed("BR", "Back Rise", "From the crotch seam up to the top of the back waistband."),
            POMSeed("IN", "Inseam", "From the crotch seam down the inner leg to the hem."),
            POMSeed("OS", "Outseam", "From the top of the waistband down the side to the hem."),
            POMSeed("TH", "Thigh", '1" below the crotch seam, edge to edge.', True),
            POMSeed("KN", "Knee Opening", 'Measured 12" (standard) below the crotch seam.', True),
            POMSeed("LO", "Leg Opening", 'The width of the very bottom of the leg (the "Cuff").', True),
        ],
    ),
    (
        "One-Pieces",
        "Measurements for dresses, jumpsuits, overalls, etc.",
        [
            POMSeed("TL", "Total Length", "HPS to the bottom leg/skirt hem."),
            POMSeed("BH", "Bib Height", "(For Overalls) From the top of the bib to the waist seam."),
            POMSeed("BW", "Bib Width", "Across the top of the bib.", True),
            POMSeed("TR", "Total Rise", "From front waistband, through crotch, to back waistband."),
        ],
    ),
    (
        "Footwear",
        "Measurements for shoes, boots, sandals, etc.",
        [
            POMSeed("FL", "Footbed Length", "Total interior length from heel to toe."),
            POMSeed("FW", "Ball Width", "The widest part of the foot (under the toes)."),
            POMSeed("HL", "Heel Height", "From the ground to the point where the heel meets the upper."),
            POMSeed("SHF", "Shaft Height", "(For Boots) From the footbed up to the top of the boot."),
            POMSeed("SC", "Shaft Circumference", "The measurement around the top opening of a boot."),
        ],
    ),
    (
        "Accessories",
        "Measurements for bags, hats, belts, etc.",
        [
            POMSeed("WI", "Width", "Across the widest part of the item."),
            POMSeed("HT", "Height", "From bottom to top."),
            POMSeed("DP", "Depth", "The thickness/gusset of a bag or wallet."),
            POMSeed("SD", "Strap Drop", "Vertical distance from the top of the strap to the bag opening."),
            POMSeed("BL", "Belt Length", "From the buckle pin to the middle (3rd) hole."),
            POMSeed("HC", "Head Circumference", "For hats, measured around the interior sweatband."),
        ],
    ),
]

# (name, description, unit)
PACKAGE_MEASUREMENT_TYPES = [
    ("Length", "The longest side of the package", "cm"),
    ("Width", "The second longest side of the package", "cm"),
    ("Height", "The shortest side of the package", "cm"),
    ("Weight", "Total weight including packaging", "kg"),
]


# ============================================================================
# Bootstrap
# ============================================================================


def _vocabulary_rows() -> list[tuple[VocabularyKind, str, str | None]]:
    rows: list[tuple[VocabularyKind, str, str | None]] = []
    rows.extend((VocabularyKind.SIZES, name, None) for name in SIZES)
    rows.extend((VocabularyKind.COLORS, name, hex_code) for name, hex_code in COLORS)
    rows.extend((VocabularyKind.FITS, name, None) for name in FITS)
    rows.extend((VocabularyKind.PATTERNS, name, None) for name in PATTERNS)
    rows.extend((VocabularyKind.MATERIALS, name, None) for name in MATERIALS)
    rows.extend((VocabularyKind.GENDERS, name, None) for name in GENDERS)
    return rows


async def ensure_required_attribute_types(session: AsyncSession) -> list[str]:
    """Create the required attribute types that are missing.

    Returns:
        Slugs created by this call.
    """
    return await TaxonomyService(session).ensure_attribute_types(REQUIRED_ATTRIBUTE_TYPES)


async def seed_vocabularies(session: AsyncSession) -> int:
    """Insert the default vocabulary entries that are missing.

    Returns:
        Number of entries created.
    """
    repository = VocabularyRepository(session)
    created = 0
    positions: dict[VocabularyKind, int] = {}
    for kind, name, hex_code in _vocabulary_rows():
        position = positions.get(kind, 0)
        positions[kind] = position + 1
        if await repository.get_by_name(kind.value, name) is not None:
            continue
        await repository.save(
            VocabularyEntry(kind=kind.value, name=name, hex_code=hex_code, sort_order=position)
        )
        created += 1
    await session.commit()
    return created


async def seed_pom_catalog(session: AsyncSession) -> int:
    """Insert the standard POM categories and definitions that are missing.

    Returns:
        Number of definitions created.
    """
    repository = POMRepository(session)
    created = 0
    for category_order, (category_name, description, definitions) in enumerate(POM_CATALOG, 1):
        category = await repository.get_category_by_name(category_name)
        if category is None:
            category = await repository.save(
                POMCategory(name=category_name, description=description, sort_order=category_order)
            )
        for definition_order, seed in enumerate(definitions, 1):
            if await repository.get_definition_by_code(category.id, seed.code) is not None:
                continue
            await repository.save(
                POMDefinition(
                    category_id=category.id,
                    code=seed.code,
                    name=seed.name,
                    description=seed.description,
                    is_half_measurement=seed.is_half_measurement,
                    default_tolerance=Decimal("0.5"),
                    sort_order=definition_order,
                )
            )
            created += 1
    await session.commit()
    return created


async def seed_package_measurement_types(session: AsyncSession) -> int:
    """Insert the standard package measurement types that are missing."""
    repository = POMRepository(session)
    created = 0
    for sort_order, (name, description, unit) in enumerate(PACKAGE_MEASUREMENT_TYPES, 1):
        if await repository.get_package_type_by_name(name) is not None:
            continue
        await repository.save(
            PackageMeasurementType(
                name=name, description=description, unit=unit, sort_order=sort_order
            )
        )
        created += 1
    await session.commit()
    return created


async def bootstrap_taxonomy(session: AsyncSession, seed_reference_data: bool = True) -> dict[str, Any]:
    """Run the startup bootstrap.

    Args:
        session: Async SQLAlchemy session.
        seed_reference_data: Also seed vocabularies, the POM catalog and
            the package measurement types.

    Returns:
        Counts of created rows.
    """
    attribute_types = await ensure_required_attribute_types(session)
    vocabulary_entries = 0
    pom_definitions = 0
    package_types = 0
    if seed_reference_data:
        vocabulary_entries = await seed_vocabularies(session)
        pom_definitions = await seed_pom_catalog(session)
        package_types = await seed_package_measurement_types(session)

    summary = {
        "attribute_types_created": attribute_types,
        "vocabulary_entries_created": vocabulary_entries,
        "pom_definitions_created": pom_definitions,
        "package_measurement_types_created": package_types,
    }
    logger.info("Taxonomy bootstrap complete", **summary)
    return summary
