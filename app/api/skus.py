"""SKU API endpoints.

Provides endpoints for generating SKUs from a naming context, editing
them, moving them through the trash lifecycle and recording their
measurements.
"""

from decimal import Decimal
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import AdminScope
from app.api.schemas import (
    ErrorResponse,
    FailedCombinationSchema,
    MeasurementListResponse,
    MeasurementResponse,
    MeasurementsSaveRequest,
    SKUGenerateRequest,
    SKUGenerationResponse,
    SKUListResponse,
    SKUResponse,
)
from app.catalog.generator import GenerationResult
from app.catalog.models import SKU
from app.catalog.schemas import SKUContext
from app.catalog.service import (
    MeasurementInput,
    MeasurementRecord,
    PaginatedResult,
    PaginationParams,
    POMService,
    SKUFilter,
    SKUService,
)
from app.domain.exceptions import PartialBatchFailureError
from app.infrastructure.database import get_session

logger = structlog.get_logger()

router = APIRouter(prefix="/skus", tags=["SKUs"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> SKUService:
    """Get SKU service bound to the request session."""
    return SKUService(session)


def get_pom_service(session: Annotated[AsyncSession, Depends(get_session)]) -> POMService:
    """Get POM service bound to the request session."""
    return POMService(session)


# ============================================================================
# Converters
# ============================================================================


def sku_to_response(sku: SKU) -> SKUResponse:
    """Convert SKU model to response schema."""
    return SKUResponse(
        id=sku.id,
        code=sku.code,
        name=sku.name,
        brand_id=sku.brand_id,
        line_id=sku.line_id,
        collection=sku.collection,
        description=sku.description,
        images=list(sku.images or []),
        videos=list(sku.videos or []),
        materials=list(sku.materials or []),
        category=dict(sku.category or {}),
        metadata=dict(sku.sku_metadata or {}),
        status=sku.status.value,
        deleted_at=sku.deleted_at,
        created_at=sku.created_at,
        updated_at=sku.updated_at,
    )


def generation_to_response(result: GenerationResult) -> SKUGenerationResponse:
    """Convert a generation result to response schema."""
    return SKUGenerationResponse(
        count=result.count,
        created=[sku_to_response(s) for s in result.created],
        failed=[FailedCombinationSchema(**f.to_dict()) for f in result.failed],
        unresolved_size_ids=result.unresolved_size_ids,
        unresolved_color_ids=result.unresolved_color_ids,
    )


def page_to_response(page: PaginatedResult[SKU]) -> SKUListResponse:
    """Convert a page of SKUs to response schema."""
    return SKUListResponse(
        items=[sku_to_response(s) for s in page.items],
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        has_more=page.has_next,
    )


def measurement_to_response(record: MeasurementRecord) -> MeasurementResponse:
    """Convert a stored measurement to response schema."""
    return MeasurementResponse(
        pom_id=record.definition.id,
        pom_code=record.definition.code,
        pom_name=record.definition.name,
        size_id=record.size.id,
        size_name=record.size.name,
        value=float(record.measurement.value),
        tolerance=(
            float(record.measurement.tolerance)
            if record.measurement.tolerance is not None
            else None
        ),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/generate",
    dependencies=[AdminScope],
    response_model=SKUGenerationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        207: {"model": SKUGenerationResponse, "description": "Some combinations failed"},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Generate SKUs",
    description=(
        "Create one SKU per (color, size) combination of the selection. "
        "An empty selection on either dimension counts as a single absent value."
    ),
)
async def generate_skus(
    request: SKUGenerateRequest,
    service: Annotated[SKUService, Depends(get_service)],
) -> SKUGenerationResponse | JSONResponse:
    """Materialize SKUs for a naming context.

    Args:
        request: Naming context plus color and size selection.
        service: SKU service.

    Returns:
        Created SKUs; 207 with the failed combinations when only part
        of the batch was persisted.
    """
    try:
        result = await service.generate_skus(
            request.to_context(),
            color_ids=request.color_ids,
            size_ids=request.size_ids,
        )
    except PartialBatchFailureError as e:
        logger.warning(
            "Partial SKU batch",
            created=e.result.count,
            failed=len(e.result.failed),
        )
        body = generation_to_response(e.result)
        return JSONResponse(
            status_code=status.HTTP_207_MULTI_STATUS,
            content=body.model_dump(mode="json"),
        )
    return generation_to_response(result)


@router.get(
    "",
    response_model=SKUListResponse,
    summary="List active SKUs",
)
async def list_active_skus(
    service: Annotated[SKUService, Depends(get_service)],
    brand_id: Annotated[str | None, Query(description="Filter by brand")] = None,
    search: Annotated[str | None, Query(description="Match name or code")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> SKUListResponse:
    """List active SKUs, newest first."""
    result = await service.list_active_skus(
        SKUFilter(brand_id=brand_id, search=search),
        PaginationParams(page=page, page_size=page_size),
    )
    return page_to_response(result)


@router.get(
    "/trash",
    dependencies=[AdminScope],
    response_model=SKUListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List trashed SKUs",
)
async def list_trashed_skus(
    service: Annotated[SKUService, Depends(get_service)],
    brand_id: Annotated[str | None, Query(description="Filter by brand")] = None,
    search: Annotated[str | None, Query(description="Match name or code")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> SKUListResponse:
    """List SKUs in the trash, newest first."""
    result = await service.list_trashed_skus(
        SKUFilter(brand_id=brand_id, search=search),
        PaginationParams(page=page, page_size=page_size),
    )
    return page_to_response(result)


@router.get(
    "/{sku_id}",
    response_model=SKUResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get SKU",
)
async def get_sku(
    sku_id: str,
    service: Annotated[SKUService, Depends(get_service)],
) -> SKUResponse:
    """Get an active SKU by ID."""
    return sku_to_response(await service.get_sku(sku_id))


@router.put(
    "/{sku_id}",
    dependencies=[AdminScope],
    response_model=SKUResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Update SKU",
    description="Rename and re-describe a SKU. Its code and (color, size) combination are kept.",
)
async def update_sku(
    sku_id: str,
    request: SKUContext,
    service: Annotated[SKUService, Depends(get_service)],
) -> SKUResponse:
    """Update a SKU from a new naming context."""
    return sku_to_response(await service.update_sku(sku_id, request))


@router.delete(
    "/{sku_id}",
    dependencies=[AdminScope],
    response_model=SKUResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Move SKU to trash",
)
async def delete_sku(
    sku_id: str,
    service: Annotated[SKUService, Depends(get_service)],
) -> SKUResponse:
    """Soft-delete an active SKU."""
    return sku_to_response(await service.delete_sku(sku_id))


@router.post(
    "/{sku_id}/restore",
    dependencies=[AdminScope],
    response_model=SKUResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Restore SKU from trash",
)
async def restore_sku(
    sku_id: str,
    service: Annotated[SKUService, Depends(get_service)],
) -> SKUResponse:
    """Restore a trashed SKU."""
    return sku_to_response(await service.restore_sku(sku_id))


@router.delete(
    "/{sku_id}/permanent",
    dependencies=[AdminScope],
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Delete SKU permanently",
    description="Only SKUs already in the trash can be deleted permanently.",
)
async def permanent_delete_sku(
    sku_id: str,
    service: Annotated[SKUService, Depends(get_service)],
) -> None:
    """Purge a trashed SKU and its measurements."""
    await service.permanent_delete_sku(sku_id)


@router.get(
    "/{sku_id}/measurements",
    response_model=MeasurementListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get SKU measurements",
)
async def get_sku_measurements(
    sku_id: str,
    service: Annotated[POMService, Depends(get_pom_service)],
) -> MeasurementListResponse:
    """List the measurements of a SKU."""
    records = await service.get_sku_measurements(sku_id)
    return MeasurementListResponse(
        sku_id=sku_id,
        items=[measurement_to_response(r) for r in records],
    )


@router.put(
    "/{sku_id}/measurements",
    dependencies=[AdminScope],
    response_model=MeasurementListResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Save SKU measurements",
)
async def save_sku_measurements(
    sku_id: str,
    request: MeasurementsSaveRequest,
    service: Annotated[POMService, Depends(get_pom_service)],
) -> MeasurementListResponse:
    """Upsert measurements keyed by (POM, size)."""
    records = await service.save_sku_measurements(
        sku_id,
        [
            MeasurementInput(
                pom_id=m.pom_id,
                size_id=m.size_id,
                value=Decimal(str(m.value)),
                tolerance=Decimal(str(m.tolerance)) if m.tolerance is not None else None,
            )
            for m in request.measurements
        ],
    )
    return MeasurementListResponse(
        sku_id=sku_id,
        items=[measurement_to_response(r) for r in records],
    )
