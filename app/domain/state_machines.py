"""State machines for domain entities.

Deterministic state machine that defines valid lifecycle transitions
for SKU records. The state machine enforces the trash-before-purge
ordering independently of any UI flow.
"""

from datetime import datetime
from enum import Enum

from app.domain.exceptions import InvalidStateTransitionError


# ============================================================================
# SKU State Machine
# ============================================================================


class SKUStatus(str, Enum):
    """SKU lifecycle states.

    State diagram:
        ACTIVE ──────── delete ───────► TRASHED
          ▲                               │   │
          └─────────── restore ───────────┘   │
                                              │ permanent_delete
                                              ▼
                                            PURGED
    """

    ACTIVE = "active"
    TRASHED = "trashed"
    PURGED = "purged"

    @classmethod
    def from_deleted_at(cls, deleted_at: datetime | None) -> "SKUStatus":
        """Derive the status of a stored SKU from its soft-delete timestamp.

        Args:
            deleted_at: The SKU's ``deleted_at`` column.

        Returns:
            ACTIVE when not soft-deleted, TRASHED otherwise.
        """
        return cls.ACTIVE if deleted_at is None else cls.TRASHED

    def can_transition_to(self, target: "SKUStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _SKU_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["SKUStatus"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to, sorted by value.
        """
        return sorted(_SKU_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state.

        Returns:
            True if no further transitions are possible.
        """
        return len(_SKU_TRANSITIONS.get(self, set())) == 0

    def is_listed(self) -> bool:
        """Check if a SKU in this state appears in the active catalog.

        Returns:
            True for ACTIVE only.
        """
        return self == SKUStatus.ACTIVE


# SKU state transitions (defined outside enum to avoid Enum restrictions)
_SKU_TRANSITIONS: dict[SKUStatus, set[SKUStatus]] = {
    SKUStatus.ACTIVE: {SKUStatus.TRASHED},
    SKUStatus.TRASHED: {SKUStatus.ACTIVE, SKUStatus.PURGED},
    SKUStatus.PURGED: set(),  # Terminal state
}


def validate_sku_transition(
    sku_id: str,
    current_status: SKUStatus,
    target_status: SKUStatus,
) -> None:
    """Validate and raise if SKU state transition is invalid.

    Args:
        sku_id: SKU identifier for error message.
        current_status: Current SKU status.
        target_status: Target SKU status.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise InvalidStateTransitionError(
            entity_type="SKU",
            entity_id=sku_id,
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
        )
