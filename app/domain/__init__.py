"""Domain layer - state machines and domain errors.

This module exports the core domain building blocks:

- **State Machines**: Deterministic SKU lifecycle transitions (SKUStatus)
- **Exceptions**: Domain-specific errors grouped by kind (not found,
  conflict, validation, partial batch failure)

Example usage:
    from app.domain import SKUStatus, validate_sku_transition

    status = SKUStatus.from_deleted_at(sku.deleted_at)
    validate_sku_transition(sku.id, status, SKUStatus.PURGED)
"""

# Exceptions
from app.domain.exceptions import (
    AttributeTypeExistsError,
    AttributeTypeNotFoundError,
    BatchTooLargeError,
    CategoryDepthError,
    CategoryNotFoundError,
    ConflictError,
    DomainError,
    InvalidMultiValueError,
    InvalidStateTransitionError,
    MissingNameFragmentError,
    NotFoundError,
    PartialBatchFailureError,
    POMNotFoundError,
    SKUNotFoundError,
    SKUTrashedError,
    ValidationError,
    VocabularyEntryExistsError,
    VocabularyEntryNotFoundError,
)

# State Machines
from app.domain.state_machines import SKUStatus, validate_sku_transition

__all__ = [
    # State Machines
    "SKUStatus",
    "validate_sku_transition",
    # Exceptions
    "DomainError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "AttributeTypeExistsError",
    "AttributeTypeNotFoundError",
    "BatchTooLargeError",
    "CategoryDepthError",
    "CategoryNotFoundError",
    "InvalidMultiValueError",
    "InvalidStateTransitionError",
    "MissingNameFragmentError",
    "PartialBatchFailureError",
    "POMNotFoundError",
    "SKUNotFoundError",
    "SKUTrashedError",
    "VocabularyEntryExistsError",
    "VocabularyEntryNotFoundError",
]
