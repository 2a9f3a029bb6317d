"""Points-of-measurement API endpoints."""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import AdminScope
from app.api.schemas import (
    ApparelPOMListResponse,
    ApparelPOMResponse,
    ApparelPOMSetRequest,
    ErrorResponse,
    PackageMeasurementTypeCreateRequest,
    PackageMeasurementTypeResponse,
    PackageMeasurementTypeUpdateRequest,
    POMCategoryCreateRequest,
    POMCategoryResponse,
    POMDefinitionCreateRequest,
    POMDefinitionListResponse,
    POMDefinitionResponse,
    POMDefinitionUpdateRequest,
)
from app.catalog.models import PackageMeasurementType, POMCategory, POMDefinition
from app.catalog.service import LinkedPOM, POMLink, POMService
from app.infrastructure.database import get_session

router = APIRouter(prefix="/poms", tags=["Points of Measurement"])


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> POMService:
    """Get POM service bound to the request session."""
    return POMService(session)


# ============================================================================
# Converters
# ============================================================================


def category_to_response(category: POMCategory) -> POMCategoryResponse:
    """Convert POMCategory model to response schema."""
    return POMCategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
        sort_order=category.sort_order,
    )


def definition_to_response(definition: POMDefinition, category_name: str) -> POMDefinitionResponse:
    """Convert POMDefinition model to response schema."""
    return POMDefinitionResponse(
        id=definition.id,
        category_id=definition.category_id,
        category_name=category_name,
        code=definition.code,
        name=definition.name,
        description=definition.description,
        measurement_unit=definition.measurement_unit,
        is_half_measurement=definition.is_half_measurement,
        default_tolerance=float(definition.default_tolerance),
        sort_order=definition.sort_order,
    )


def package_type_to_response(package_type: PackageMeasurementType) -> PackageMeasurementTypeResponse:
    """Convert PackageMeasurementType model to response schema."""
    return PackageMeasurementTypeResponse(
        id=package_type.id,
        name=package_type.name,
        description=package_type.description,
        unit=package_type.unit,
        sort_order=package_type.sort_order,
    )


def linked_to_response(apparel_id: str, linked: list[LinkedPOM]) -> ApparelPOMListResponse:
    """Convert an apparel POM set to response schema."""
    return ApparelPOMListResponse(
        apparel_id=apparel_id,
        items=[
            ApparelPOMResponse(
                pom=definition_to_response(item.definition, item.category_name),
                is_required=item.is_required,
                sort_order=item.sort_order,
            )
            for item in linked
        ],
    )


# ============================================================================
# Catalog
# ============================================================================


@router.get(
    "/categories",
    response_model=list[POMCategoryResponse],
    summary="List POM categories",
)
async def list_pom_categories(
    service: Annotated[POMService, Depends(get_service)],
) -> list[POMCategoryResponse]:
    """List POM categories in display order."""
    return [category_to_response(c) for c in await service.list_pom_categories()]


@router.post(
    "/categories",
    dependencies=[AdminScope],
    response_model=POMCategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create POM category",
)
async def create_pom_category(
    request: POMCategoryCreateRequest,
    service: Annotated[POMService, Depends(get_service)],
) -> POMCategoryResponse:
    """Create a POM category."""
    category = await service.create_pom_category(
        request.name,
        description=request.description,
        sort_order=request.sort_order,
    )
    return category_to_response(category)


@router.get(
    "/definitions",
    response_model=POMDefinitionListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List POM definitions",
)
async def list_pom_definitions(
    service: Annotated[POMService, Depends(get_service)],
    category_id: Annotated[str | None, Query(description="Filter by POM category")] = None,
) -> POMDefinitionListResponse:
    """List POM definitions, optionally for one POM category."""
    rows = await service.list_pom_definitions(category_id)
    return POMDefinitionListResponse(
        items=[definition_to_response(d, name) for d, name in rows]
    )


@router.post(
    "/definitions",
    dependencies=[AdminScope],
    response_model=POMDefinitionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create POM definition",
)
async def create_pom_definition(
    request: POMDefinitionCreateRequest,
    service: Annotated[POMService, Depends(get_service)],
) -> POMDefinitionResponse:
    """Create a POM definition within a POM category."""
    definition = await service.create_pom_definition(
        request.category_id,
        request.code,
        request.name,
        description=request.description,
        is_half_measurement=request.is_half_measurement,
        default_tolerance=Decimal(str(request.default_tolerance)),
        sort_order=request.sort_order,
        measurement_unit=request.measurement_unit,
    )
    category = await service.get_pom_category(definition.category_id)
    return definition_to_response(definition, category.name)


@router.patch(
    "/definitions/{pom_id}",
    dependencies=[AdminScope],
    response_model=POMDefinitionResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update POM definition",
)
async def update_pom_definition(
    pom_id: str,
    request: POMDefinitionUpdateRequest,
    service: Annotated[POMService, Depends(get_service)],
) -> POMDefinitionResponse:
    """Update the fields sent in the request body."""
    changes = {
        field: value
        for field, value in request.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    if "default_tolerance" in changes:
        changes["default_tolerance"] = Decimal(str(changes["default_tolerance"]))
    definition = await service.update_pom_definition(pom_id, **changes)
    category = await service.get_pom_category(definition.category_id)
    return definition_to_response(definition, category.name)


@router.delete(
    "/definitions/{pom_id}",
    dependencies=[AdminScope],
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Retire POM definition",
    description=(
        "Hide a POM definition from the catalog. Existing apparel links and "
        "SKU measurements keep it."
    ),
)
async def delete_pom_definition(
    pom_id: str,
    service: Annotated[POMService, Depends(get_service)],
) -> None:
    """Retire a POM definition."""
    await service.delete_pom_definition(pom_id)


# ============================================================================
# Package measurement types
# ============================================================================


@router.get(
    "/package-types",
    response_model=list[PackageMeasurementTypeResponse],
    summary="List package measurement types",
)
async def list_package_measurement_types(
    service: Annotated[POMService, Depends(get_service)],
) -> list[PackageMeasurementTypeResponse]:
    """List package measurement types in display order."""
    return [
        package_type_to_response(t) for t in await service.list_package_measurement_types()
    ]


@router.post(
    "/package-types",
    dependencies=[AdminScope],
    response_model=PackageMeasurementTypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create package measurement type",
)
async def create_package_measurement_type(
    request: PackageMeasurementTypeCreateRequest,
    service: Annotated[POMService, Depends(get_service)],
) -> PackageMeasurementTypeResponse:
    """Create a package measurement type."""
    package_type = await service.create_package_measurement_type(
        request.name,
        description=request.description,
        unit=request.unit,
        sort_order=request.sort_order,
    )
    return package_type_to_response(package_type)


@router.patch(
    "/package-types/{type_id}",
    dependencies=[AdminScope],
    response_model=PackageMeasurementTypeResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update package measurement type",
)
async def update_package_measurement_type(
    type_id: str,
    request: PackageMeasurementTypeUpdateRequest,
    service: Annotated[POMService, Depends(get_service)],
) -> PackageMeasurementTypeResponse:
    """Update the fields sent in the request body."""
    changes = {
        field: value
        for field, value in request.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    package_type = await service.update_package_measurement_type(type_id, **changes)
    return package_type_to_response(package_type)


# ============================================================================
# Apparel links
# ============================================================================


@router.get(
    "/apparel/{category_id}",
    response_model=ApparelPOMListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get apparel POMs",
)
async def get_apparel_poms(
    category_id: str,
    service: Annotated[POMService, Depends(get_service)],
) -> ApparelPOMListResponse:
    """List the POMs linked to an apparel category."""
    return linked_to_response(category_id, await service.get_apparel_poms(category_id))


@router.put(
    "/apparel/{category_id}",
    dependencies=[AdminScope],
    response_model=ApparelPOMListResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Replace apparel POMs",
    description="Replace the whole POM set of an apparel category. An empty list clears it.",
)
async def set_apparel_poms(
    category_id: str,
    request: ApparelPOMSetRequest,
    service: Annotated[POMService, Depends(get_service)],
) -> ApparelPOMListResponse:
    """Replace the POM set of an apparel category."""
    linked = await service.set_apparel_poms(
        category_id,
        [
            POMLink(pom_id=p.pom_id, is_required=p.is_required, sort_order=p.sort_order)
            for p in request.poms
        ],
    )
    return linked_to_response(category_id, linked)
