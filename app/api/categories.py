"""Category API endpoints.

Provides endpoints for the apparel/style hierarchy and for the
attribute values attached to each category.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import AdminScope
from app.api.schemas import (
    CategoryAttributeListResponse,
    CategoryAttributeResponse,
    CategoryAttributeSetRequest,
    CategoryCreateRequest,
    CategoryDeleteResponse,
    CategoryListResponse,
    CategoryRenameRequest,
    CategoryResponse,
    ErrorResponse,
)
from app.catalog.attributes import decode_multi_value, is_multi_valued
from app.catalog.models import Category, CategoryAttribute
from app.catalog.service import TaxonomyService
from app.infrastructure.database import get_session

router = APIRouter(prefix="/categories", tags=["Categories"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> TaxonomyService:
    """Get taxonomy service bound to the request session."""
    return TaxonomyService(session)


# ============================================================================
# Converters
# ============================================================================


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category model to response schema."""
    return CategoryResponse(**category.to_dict())


def attribute_to_response(cell: CategoryAttribute) -> CategoryAttributeResponse:
    """Convert a matrix cell to response schema, decoding list values."""
    values = None
    if is_multi_valued(cell.attribute_slug):
        values = decode_multi_value(cell.value, cell.attribute_slug)
    return CategoryAttributeResponse(**cell.to_dict(), values=values)


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
    description="List every category, apparel categories first.",
)
async def list_categories(
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryListResponse:
    """List all categories."""
    categories = await service.list_categories()
    return CategoryListResponse(
        items=[category_to_response(c) for c in categories],
        total=len(categories),
    )


@router.post(
    "",
    dependencies=[AdminScope],
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Create category",
    description="Create an apparel category, or a style category under an apparel category.",
)
async def create_category(
    request: CategoryCreateRequest,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryResponse:
    """Create a category.

    Args:
        request: Name and optional parent.
        service: Taxonomy service.

    Returns:
        Created category.
    """
    category = await service.create_category(request.name, parent_id=request.parent_id)
    return category_to_response(category)


@router.get(
    "/{category_id}/children",
    response_model=CategoryListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List style categories",
)
async def list_children(
    category_id: str,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryListResponse:
    """List the style categories under an apparel category."""
    children = await service.list_children(category_id)
    return CategoryListResponse(
        items=[category_to_response(c) for c in children],
        total=len(children),
    )


@router.patch(
    "/{category_id}",
    dependencies=[AdminScope],
    response_model=CategoryResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Rename category",
)
async def rename_category(
    category_id: str,
    request: CategoryRenameRequest,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryResponse:
    """Rename a category."""
    category = await service.rename_category(category_id, request.name)
    return category_to_response(category)


@router.delete(
    "/{category_id}",
    dependencies=[AdminScope],
    response_model=CategoryDeleteResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete category",
    description=(
        "Delete a category together with its style categories, their "
        "attribute values and their POM links."
    ),
)
async def delete_category(
    category_id: str,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryDeleteResponse:
    """Delete a category and everything attached to it."""
    removed = await service.delete_category(category_id)
    return CategoryDeleteResponse(removed_ids=removed)


@router.get(
    "/{category_id}/attributes",
    response_model=CategoryAttributeListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category attributes",
)
async def get_category_attributes(
    category_id: str,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryAttributeListResponse:
    """Get the attribute values of one category."""
    cells = await service.get_category_attributes(category_id)
    return CategoryAttributeListResponse(
        items=[attribute_to_response(c) for c in cells],
        total=len(cells),
    )


@router.put(
    "/{category_id}/attributes/{slug}",
    dependencies=[AdminScope],
    response_model=CategoryAttributeResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Set category attribute",
    description=(
        "Insert or update the value of one attribute for one category. "
        "Multi-valued attributes take a JSON array of IDs."
    ),
)
async def set_category_attribute(
    category_id: str,
    slug: str,
    request: CategoryAttributeSetRequest,
    service: Annotated[TaxonomyService, Depends(get_service)],
) -> CategoryAttributeResponse:
    """Upsert one cell of the attribute matrix."""
    cell = await service.set_category_attribute(category_id, slug, request.value)
    return attribute_to_response(cell)
