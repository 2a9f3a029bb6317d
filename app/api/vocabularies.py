"""Reference vocabulary API endpoints.

One set of routes serves every vocabulary kind (sizes, colors, fits,
patterns, materials, genders).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import AdminScope
from app.api.schemas import (
    ErrorResponse,
    VocabularyEntryCreateRequest,
    VocabularyEntryResponse,
    VocabularyEntryUpdateRequest,
    VocabularyListResponse,
)
from app.catalog.models import VocabularyEntry
from app.catalog.schemas import VocabularyKind
from app.catalog.service import VocabularyService
from app.infrastructure.database import get_session

router = APIRouter(prefix="/vocabularies", tags=["Vocabularies"])


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> VocabularyService:
    """Get vocabulary service bound to the request session."""
    return VocabularyService(session)


def entry_to_response(entry: VocabularyEntry) -> VocabularyEntryResponse:
    """Convert VocabularyEntry model to response schema."""
    return VocabularyEntryResponse(
        id=entry.id,
        kind=VocabularyKind(entry.kind),
        name=entry.name,
        hex_code=entry.hex_code,
        sort_order=entry.sort_order,
    )


@router.get(
    "/{kind}",
    response_model=VocabularyListResponse,
    summary="List vocabulary entries",
    description="Sizes are ordered by their explicit position, other kinds alphabetically.",
)
async def list_entries(
    kind: VocabularyKind,
    service: Annotated[VocabularyService, Depends(get_service)],
) -> VocabularyListResponse:
    """List the entries of one vocabulary."""
    entries = await service.list_entries(kind)
    return VocabularyListResponse(kind=kind, items=[entry_to_response(e) for e in entries])


@router.post(
    "/{kind}",
    dependencies=[AdminScope],
    response_model=VocabularyEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Add vocabulary entry",
)
async def add_entry(
    kind: VocabularyKind,
    request: VocabularyEntryCreateRequest,
    service: Annotated[VocabularyService, Depends(get_service)],
) -> VocabularyEntryResponse:
    """Add an entry; names are unique within a kind."""
    entry = await service.add_entry(
        kind,
        request.name,
        hex_code=request.hex_code,
        sort_order=request.sort_order,
    )
    return entry_to_response(entry)


@router.patch(
    "/{kind}/{entry_id}",
    dependencies=[AdminScope],
    response_model=VocabularyEntryResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Rename vocabulary entry",
)
async def rename_entry(
    kind: VocabularyKind,
    entry_id: str,
    request: VocabularyEntryUpdateRequest,
    service: Annotated[VocabularyService, Depends(get_service)],
) -> VocabularyEntryResponse:
    """Rename an entry."""
    entry = await service.rename_entry(kind, entry_id, request.name, hex_code=request.hex_code)
    return entry_to_response(entry)


@router.delete(
    "/{kind}/{entry_id}",
    dependencies=[AdminScope],
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete vocabulary entry",
)
async def delete_entry(
    kind: VocabularyKind,
    entry_id: str,
    service: Annotated[VocabularyService, Depends(get_service)],
) -> None:
    """Delete an entry."""
    await service.delete_entry(kind, entry_id)
