"""Attribute type and attribute matrix API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import AdminScope
from app.api.categories import attribute_to_response
from app.api.schemas import (
    AttributeTypeCreateRequest,
    AttributeTypeListResponse,
    AttributeTypeResponse,
    CategoryAttributeListResponse,
    EnsureAttributeTypesRequest,
    EnsureAttributeTypesResponse,
    ErrorResponse,
)
from app.catalog.attributes import REQUIRED_ATTRIBUTE_TYPES, AttributeTypeSpec
from app.catalog.service import TaxonomyService
from app.infrastructure.database import get_session

router = APIRouter(tags=["Attributes"])


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> TaxonomyService:
    """Get taxonomy service bound to the request session."""
    return TaxonomyService(session)


@router.get(
    "/attribute-types",
    response_model=AttributeTypeListResponse,
    summary="List attribute types",
)
async def list_attribute_types(
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> AttributeTypeListResponse:
    """List registered attribute types."""
    types = await service.list_attribute_types()
    return AttributeTypeListResponse(
        items=[AttributeTypeResponse(slug=t.slug, name=t.name) for t in types]
    )


@router.post(
    "/attribute-types",
    dependencies=[AdminScope],
    response_model=AttributeTypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create attribute type",
)
async def create_attribute_type(
    request: AttributeTypeCreateRequest,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> AttributeTypeResponse:
    """Register a new attribute type; the slug must be unused."""
    attribute_type = await service.create_attribute_type(request.slug, request.name)
    return AttributeTypeResponse(slug=attribute_type.slug, name=attribute_type.name)


@router.post(
    "/attribute-types/ensure",
    dependencies=[AdminScope],
    response_model=EnsureAttributeTypesResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Ensure required attribute types",
    description=(
        "Create the listed attribute types that do not exist yet, or the "
        "built-in required set when no body is sent. Existing types are never "
        "renamed. Safe to repeat."
    ),
)
async def ensure_attribute_types(
    service: Annotated[TaxonomyService, Depends(get_service)],
    request: Annotated[EnsureAttributeTypesRequest | None, Body()] = None,
) -> EnsureAttributeTypesResponse:
    """Create any missing attribute type."""
    required = REQUIRED_ATTRIBUTE_TYPES
    if request is not None and request.required is not None:
        required = tuple(AttributeTypeSpec(t.slug, t.name) for t in request.required)
    created = await service.ensure_attribute_types(required)
    return EnsureAttributeTypesResponse(created=created)


@router.get(
    "/category-attributes",
    response_model=CategoryAttributeListResponse,
    summary="Get the attribute matrix",
    description="Return every stored (category, attribute) value.",
)
async def get_all_category_attributes(
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryAttributeListResponse:
    """Return the full sparse attribute matrix."""
    cells = await service.get_all_category_attributes()
    return CategoryAttributeListResponse(
        items=[attribute_to_response(c) for c in cells],
        total=len(cells),
    )
