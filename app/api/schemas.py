"""API schemas for Stockroom API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.catalog.schemas import SKUContext, VocabularyKind


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginatedResponse(BaseModel):
    """Base paginated response."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")
    has_more: bool = Field(..., description="Whether there are more pages")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    parent_id: str | None = Field(
        default=None, description="Apparel category to nest under (omit for an apparel category)"
    )


class CategoryRenameRequest(BaseModel):
    """Request to rename a category."""

    name: str = Field(..., min_length=1, max_length=200)


class CategoryResponse(BaseModel):
    """Category details."""

    id: str
    name: str
    parent_id: str | None
    level: str = Field(..., description="'apparel' for roots, 'style' for children")


class CategoryListResponse(BaseModel):
    """List of categories."""

    items: list[CategoryResponse]
    total: int


class CategoryDeleteResponse(BaseModel):
    """Result of a cascading category delete."""

    removed_ids: list[str] = Field(..., description="Every removed category, requested one first")


# ============================================================================
# Attribute Schemas
# ============================================================================


class AttributeTypeCreateRequest(BaseModel):
    """Request to register an attribute type."""

    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9-]*$")
    name: str = Field(..., min_length=1, max_length=200)


class AttributeTypeResponse(BaseModel):
    """Attribute type details."""

    slug: str
    name: str


class AttributeTypeListResponse(BaseModel):
    """List of attribute types."""

    items: list[AttributeTypeResponse]


class EnsureAttributeTypesRequest(BaseModel):
    """Attribute types that must exist."""

    required: list[AttributeTypeCreateRequest] | None = Field(
        default=None,
        description="Slug/name pairs; the built-in required set when omitted",
    )


class EnsureAttributeTypesResponse(BaseModel):
    """Result of ensuring the required attribute types."""

    created: list[str] = Field(..., description="Slugs created by this call")


class CategoryAttributeSetRequest(BaseModel):
    """Request to set one cell of the category-attribute matrix."""

    value: str = Field(
        ..., description="Text value; a JSON array of IDs for multi-valued attributes"
    )


class CategoryAttributeResponse(BaseModel):
    """One cell of the category-attribute matrix."""

    category_id: str
    attribute_slug: str
    value: str
    values: list[str] | None = Field(
        default=None, description="Decoded IDs (multi-valued attributes only)"
    )


class CategoryAttributeListResponse(BaseModel):
    """Sparse category-attribute matrix."""

    items: list[CategoryAttributeResponse]
    total: int


# ============================================================================
# Vocabulary Schemas
# ============================================================================


class VocabularyEntryCreateRequest(BaseModel):
    """Request to add a vocabulary entry."""

    name: str = Field(..., min_length=1, max_length=100)
    hex_code: str | None = Field(default=None, description="Display color (colors only)")
    sort_order: int | None = Field(default=None, ge=0)


class VocabularyEntryUpdateRequest(BaseModel):
    """Request to rename a vocabulary entry."""

    name: str = Field(..., min_length=1, max_length=100)
    hex_code: str | None = None


class VocabularyEntryResponse(BaseModel):
    """Vocabulary entry details."""

    id: str
    kind: VocabularyKind
    name: str
    hex_code: str | None = None
    sort_order: int


class VocabularyListResponse(BaseModel):
    """Entries of one vocabulary in display order."""

    kind: VocabularyKind
    items: list[VocabularyEntryResponse]


# ============================================================================
# SKU Schemas
# ============================================================================


class SKUGenerateRequest(SKUContext):
    """Request to materialize SKUs from a naming context."""

    color_ids: list[str] = Field(default_factory=list, description="Selected color IDs")
    size_ids: list[str] = Field(default_factory=list, description="Selected size IDs")

    def to_context(self) -> SKUContext:
        """Strip the selection, keeping the naming context."""
        return SKUContext.model_validate(self.model_dump(exclude={"color_ids", "size_ids"}))


class SKUResponse(BaseModel):
    """SKU details."""

    id: str
    code: str
    name: str
    brand_id: str
    line_id: str | None
    collection: str | None
    description: str | None
    images: list[str]
    videos: list[str]
    materials: list[str]
    category: dict[str, Any]
    metadata: dict[str, Any]
    status: str
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime


class SKUListResponse(PaginatedResponse):
    """Paginated list of SKUs."""

    items: list[SKUResponse]


class FailedCombinationSchema(BaseModel):
    """A combination that could not be persisted."""

    color_id: str | None
    size_id: str | None
    reason: str


class SKUGenerationResponse(BaseModel):
    """Result of a generation batch."""

    count: int
    created: list[SKUResponse]
    failed: list[FailedCombinationSchema] = Field(default_factory=list)
    unresolved_size_ids: list[str] = Field(default_factory=list)
    unresolved_color_ids: list[str] = Field(default_factory=list)


# ============================================================================
# POM Schemas
# ============================================================================


class POMCategoryCreateRequest(BaseModel):
    """Request to create a POM category."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    sort_order: int = Field(default=0, ge=0)


class POMCategoryResponse(BaseModel):
    """POM category details."""

    id: str
    name: str
    description: str | None
    sort_order: int


class POMDefinitionCreateRequest(BaseModel):
    """Request to create a POM definition."""

    category_id: str
    code: str = Field(..., min_length=1, max_length=10)
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    measurement_unit: str = Field(default="cm", max_length=10)
    is_half_measurement: bool = False
    default_tolerance: float = Field(default=0.5, ge=0)
    sort_order: int = Field(default=0, ge=0)


class POMDefinitionResponse(BaseModel):
    """POM definition details."""

    id: str
    category_id: str
    category_name: str
    code: str
    name: str
    description: str | None
    measurement_unit: str
    is_half_measurement: bool
    default_tolerance: float
    sort_order: int


class POMDefinitionUpdateRequest(BaseModel):
    """Request to update a POM definition; omitted fields are unchanged."""

    category_id: str | None = None
    code: str | None = Field(default=None, min_length=1, max_length=10)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    measurement_unit: str | None = Field(default=None, max_length=10)
    is_half_measurement: bool | None = None
    default_tolerance: float | None = Field(default=None, ge=0)
    sort_order: int | None = Field(default=None, ge=0)


class PackageMeasurementTypeCreateRequest(BaseModel):
    """Request to create a package measurement type."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    unit: str = Field(default="cm", max_length=10)
    sort_order: int = Field(default=0, ge=0)


class PackageMeasurementTypeUpdateRequest(BaseModel):
    """Request to update a package measurement type; omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    unit: str | None = Field(default=None, max_length=10)
    sort_order: int | None = Field(default=None, ge=0)


class PackageMeasurementTypeResponse(BaseModel):
    """Package measurement type details."""

    id: str
    name: str
    description: str | None
    unit: str
    sort_order: int


class POMDefinitionListResponse(BaseModel):
    """List of POM definitions."""

    items: list[POMDefinitionResponse]


class POMLinkSchema(BaseModel):
    """Requested link of a POM to an apparel category."""

    pom_id: str
    is_required: bool = False
    sort_order: int | None = Field(default=None, ge=0)


class ApparelPOMSetRequest(BaseModel):
    """Request to replace the POM set of an apparel category."""

    poms: list[POMLinkSchema] = Field(default_factory=list)


class ApparelPOMResponse(BaseModel):
    """POM linked to an apparel category."""

    pom: POMDefinitionResponse
    is_required: bool
    sort_order: int


class ApparelPOMListResponse(BaseModel):
    """POM set of an apparel category in display order."""

    apparel_id: str
    items: list[ApparelPOMResponse]


class MeasurementSchema(BaseModel):
    """One measured value."""

    pom_id: str
    size_id: str
    value: float = Field(..., ge=0)
    tolerance: float | None = Field(default=None, ge=0)


class MeasurementsSaveRequest(BaseModel):
    """Request to upsert SKU measurements."""

    measurements: list[MeasurementSchema]


class MeasurementResponse(BaseModel):
    """Stored measurement with its POM and size."""

    pom_id: str
    pom_code: str
    pom_name: str
    size_id: str
    size_name: str
    value: float
    tolerance: float | None


class MeasurementListResponse(BaseModel):
    """Measurements of a SKU."""

    sku_id: str
    items: list[MeasurementResponse]
