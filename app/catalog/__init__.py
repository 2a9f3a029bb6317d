"""Product Taxonomy & SKU Catalog.

Provides the category hierarchy, the attribute matrix, reference
vocabularies, the points-of-measurement catalog and SKU materialization.
"""

from app.catalog.codes import SKUCodeGenerator
from app.catalog.generator import FailedCombination, GenerationResult, SKUGenerator
from app.catalog.models import (
    SKU,
    ApparelPOMMapping,
    AttributeType,
    Category,
    CategoryAttribute,
    POMCategory,
    POMDefinition,
    SKUMeasurement,
    VocabularyEntry,
)
from app.catalog.schemas import NameConfig, SKUContext, SKUMetadata, VocabularyKind
from app.catalog.service import (
    PaginatedResult,
    PaginationParams,
    POMService,
    SKUFilter,
    SKUService,
    TaxonomyService,
    VocabularyService,
)

__all__ = [
    # Models
    "ApparelPOMMapping",
    "AttributeType",
    "Category",
    "CategoryAttribute",
    "POMCategory",
    "POMDefinition",
    "SKU",
    "SKUMeasurement",
    "VocabularyEntry",
    # Schemas
    "NameConfig",
    "SKUContext",
    "SKUMetadata",
    "VocabularyKind",
    # Generator
    "FailedCombination",
    "GenerationResult",
    "SKUCodeGenerator",
    "SKUGenerator",
    # Services
    "PaginatedResult",
    "PaginationParams",
    "POMService",
    "SKUFilter",
    "SKUService",
    "TaxonomyService",
    "VocabularyService",
]
