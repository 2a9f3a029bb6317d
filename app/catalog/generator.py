"""SKU materialization from a naming context and a variant selection.

The generator is pure: it resolves nothing from the database and
persists nothing. ``SKUService`` looks up names, hands them to
``SKUGenerator`` and stores the planned SKUs one by one.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

from app.catalog.codes import SKUCodeGenerator
from app.catalog.models import SKU
from app.catalog.naming import (
    Combination,
    ResolvedNames,
    annotate_name,
    build_base_name,
    expand_combinations,
)
from app.catalog.schemas import SKUContext, SKUMetadata


# ============================================================================
# Results
# ============================================================================


@dataclass
class FailedCombination:
    """A (color, size) combination that could not be persisted."""

    color_id: str | None
    size_id: str | None
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "color_id": self.color_id,
            "size_id": self.size_id,
            "reason": self.reason,
        }


@dataclass
class GenerationResult:
    """Outcome of one generation batch.

    Attributes:
        created: Persisted SKUs in combination order.
        failed: Combinations that were rolled back.
        attempted: Number of combinations enumerated.
        unresolved_size_ids: Selected size IDs missing from the vocabulary.
        unresolved_color_ids: Selected color IDs missing from the vocabulary.
    """

    created: list[SKU] = field(default_factory=list)
    failed: list[FailedCombination] = field(default_factory=list)
    attempted: int = 0
    unresolved_size_ids: list[str] = field(default_factory=list)
    unresolved_color_ids: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of SKUs created."""
        return len(self.created)

    @property
    def succeeded(self) -> bool:
        """True when every combination was persisted."""
        return not self.failed


# ============================================================================
# Generator
# ============================================================================


@dataclass
class PlannedSKU:
    """Fully named SKU for one combination, not yet persisted."""

    color_id: str | None
    size_id: str | None
    code: str
    name: str
    metadata: SKUMetadata

    def to_model(self, context: SKUContext, category: dict[str, Any], materials: list[str]) -> SKU:
        """Build the ORM row for this plan."""
        return SKU(
            code=self.code,
            name=self.name,
            brand_id=context.brand_id,
            line_id=context.line_id,
            collection=context.collection,
            description=context.description,
            images=list(context.images),
            videos=list(context.videos),
            materials=list(materials),
            category=dict(category),
            sku_metadata=self.metadata.to_json(),
        )


def category_snapshot(context: SKUContext, names: ResolvedNames) -> dict[str, Any]:
    """Category references stored on every SKU of a batch."""
    return {
        "page": names.apparel or None,
        "apparel_id": context.apparel_id,
        "style_id": context.style_id,
        "pattern_id": context.pattern_id,
        "material_id": context.material_id,
        "fit_id": context.fit_id,
        "gender_id": context.gender_id,
    }


class SKUGenerator:
    """Expands a naming context into one SKU per (color, size) combination.

    Example usage:
        generator = SKUGenerator(
            context,
            names,
            base_metadata,
            size_names={"s-1": "S"},
            color_names={"c-1": "Red"},
            codes=SKUCodeGenerator("SKU"),
        )
        for planned in generator.plan(["c-1"], ["s-1"]):
            ...
    """

    def __init__(
        self,
        context: SKUContext,
        names: ResolvedNames,
        base_metadata: SKUMetadata,
        size_names: dict[str, str],
        color_names: dict[str, str],
        codes: SKUCodeGenerator,
    ) -> None:
        """Initialize generator.

        Args:
            context: Brand, model and attribute selection.
            names: Display names resolved for the context.
            base_metadata: Snapshot shared by every SKU of the batch.
            size_names: Size display names by ID (unknown IDs absent).
            color_names: Color display names by ID (unknown IDs absent).
            codes: Code issuer for this batch.
        """
        self.context = context
        self.names = names
        self.base_metadata = base_metadata
        self.size_names = size_names
        self.color_names = color_names
        self.codes = codes
        self.base_name = build_base_name(names, context.name_config)

    @property
    def materials(self) -> list[str]:
        """Material names stored on the SKU."""
        return [self.names.material] if self.names.material else []

    @property
    def category(self) -> dict[str, Any]:
        """Category snapshot stored on the SKU."""
        return category_snapshot(self.context, self.names)

    def plan_one(self, combination: Combination) -> PlannedSKU:
        """Name and code a single combination.

        Unresolved IDs are kept in the metadata but add no annotation.
        """
        color_id, size_id = combination
        color_name = self.color_names.get(color_id) if color_id else None
        size_name = self.size_names.get(size_id) if size_id else None
        metadata = self.base_metadata.model_copy(
            update={
                "color_id": color_id,
                "color_name": color_name,
                "size_id": size_id,
                "size_name": size_name,
            }
        )
        return PlannedSKU(
            color_id=color_id,
            size_id=size_id,
            code=self.codes.next_code(),
            name=annotate_name(self.base_name, color_name, size_name),
            metadata=metadata,
        )

    def plan(self, color_ids: list[str], size_ids: list[str]) -> Iterator[PlannedSKU]:
        """Plan every combination, colors outer and sizes inner.

        Args:
            color_ids: Selected color IDs (empty means no color dimension).
            size_ids: Selected size IDs (empty means no size dimension).

        Yields:
            One planned SKU per combination.
        """
        for combination in expand_combinations(color_ids, size_ids):
            yield self.plan_one(combination)

    def build(self, planned: PlannedSKU) -> SKU:
        """Build the ORM row for a planned SKU."""
        return planned.to_model(self.context, self.category, self.materials)
