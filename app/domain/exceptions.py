"""Domain exceptions.

All domain-level errors that represent business rule violations.
These exceptions are raised by services and state machines when
invariants are violated or invalid operations are attempted.

Every error belongs to one of four kinds, used by the API layer to
pick a status code:

- ``NotFoundError``: unknown category, attribute type, vocabulary entry,
  POM or SKU.
- ``ConflictError``: duplicate identity or invalid state transition.
- ``ValidationError``: malformed input (multi-valued JSON, missing name
  fragments, taxonomy depth).
- ``PartialBatchFailureError``: some combinations of a SKU batch failed.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.catalog.generator import GenerationResult


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Base class for lookups of unknown identifiers."""

    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Category", "SKU").
            entity_id: The identifier that was not found.
        """
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class ConflictError(DomainError):
    """Base class for errors caused by the current state of stored data."""

    error_code = "CONFLICT"


class ValidationError(DomainError):
    """Base class for malformed input."""

    error_code = "VALIDATION_ERROR"


# ============================================================================
# Not Found Errors
# ============================================================================


class CategoryNotFoundError(NotFoundError):
    """Raised when a category ID is unknown."""

    error_code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str) -> None:
        super().__init__("Category", category_id)


class AttributeTypeNotFoundError(NotFoundError):
    """Raised when an attribute slug is not registered."""

    error_code = "ATTRIBUTE_TYPE_NOT_FOUND"

    def __init__(self, slug: str) -> None:
        super().__init__("AttributeType", slug)


class VocabularyEntryNotFoundError(NotFoundError):
    """Raised when a vocabulary entry ID is unknown for its kind."""

    error_code = "VOCABULARY_ENTRY_NOT_FOUND"

    def __init__(self, kind: str, entry_id: str) -> None:
        super().__init__(f"Vocabulary entry ({kind})", entry_id)
        self.details["kind"] = kind


class POMNotFoundError(NotFoundError):
    """Raised when a POM definition or POM category ID is unknown."""

    error_code = "POM_NOT_FOUND"

    def __init__(self, pom_id: str, entity_type: str = "POMDefinition") -> None:
        super().__init__(entity_type, pom_id)


class SKUNotFoundError(NotFoundError):
    """Raised when a SKU ID is unknown (or purged)."""

    error_code = "SKU_NOT_FOUND"

    def __init__(self, sku_id: str) -> None:
        super().__init__("SKU", sku_id)


# ============================================================================
# Conflict Errors
# ============================================================================


class AttributeTypeExistsError(ConflictError):
    """Raised on explicit creation of an attribute type whose slug exists."""

    error_code = "ATTRIBUTE_TYPE_EXISTS"

    def __init__(self, slug: str) -> None:
        super().__init__(
            f"Attribute type already exists: {slug}",
            details={"slug": slug},
        )


class VocabularyEntryExistsError(ConflictError):
    """Raised when a vocabulary name is already taken within its kind."""

    error_code = "VOCABULARY_ENTRY_EXISTS"

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(
            f"Value '{name}' already exists in {kind}",
            details={"kind": kind, "name": name},
        )


class InvalidStateTransitionError(ConflictError):
    """Raised when an invalid state transition is attempted.

    This error indicates that the requested operation cannot be performed
    in the current state of the entity.
    """

    error_code = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "SKU").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


class SKUTrashedError(ConflictError):
    """Raised when editing a SKU that sits in the trash."""

    error_code = "SKU_TRASHED"

    def __init__(self, sku_id: str) -> None:
        super().__init__(
            f"SKU {sku_id} is in the trash; restore it before editing",
            details={"sku_id": sku_id},
        )


# ============================================================================
# Validation Errors
# ============================================================================


class InvalidMultiValueError(ValidationError):
    """Raised when a multi-valued attribute is not a JSON array of IDs."""

    error_code = "INVALID_MULTI_VALUE"

    def __init__(self, slug: str, value: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for multi-valued attribute '{slug}': {reason}",
            details={"slug": slug, "value": value, "reason": reason},
        )


class MissingNameFragmentError(ValidationError):
    """Raised when a SKU naming context lacks a required fragment."""

    error_code = "MISSING_NAME_FRAGMENT"

    def __init__(self, fragment: str) -> None:
        super().__init__(
            f"Naming context is missing required fragment '{fragment}'",
            details={"fragment": fragment},
        )


class CategoryDepthError(ValidationError):
    """Raised when a category would be nested below a style category."""

    error_code = "CATEGORY_DEPTH_EXCEEDED"

    def __init__(self, parent_id: str) -> None:
        super().__init__(
            f"Category {parent_id} is a style category and cannot have children",
            details={"parent_id": parent_id, "max_depth": 2},
        )


class BatchTooLargeError(ValidationError):
    """Raised when a generation request exceeds the combination limit."""

    error_code = "BATCH_TOO_LARGE"

    def __init__(self, combinations: int, limit: int) -> None:
        super().__init__(
            f"Selection yields {combinations} combinations; limit is {limit}",
            details={"combinations": combinations, "limit": limit},
        )


# ============================================================================
# Batch Errors
# ============================================================================


class PartialBatchFailureError(DomainError):
    """Raised when some combinations of a SKU generation batch failed.

    The SKUs listed in ``result.created`` are persisted; the combinations in
    ``result.failed`` are not and can be retried individually.
    """

    error_code = "PARTIAL_BATCH_FAILURE"

    def __init__(self, result: "GenerationResult") -> None:
        """Initialize partial batch failure.

        Args:
            result: Generation result with created SKUs and failed combinations.
        """
        super().__init__(
            f"{len(result.failed)} of {result.attempted} SKU combinations failed",
            details={
                "created_ids": [sku.id for sku in result.created],
                "failed": [failure.to_dict() for failure in result.failed],
            },
        )
        self.result = result
