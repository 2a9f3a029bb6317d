"""SKU naming and variant combinatorics.

Pure functions with no database access:

    base = build_base_name(ResolvedNames(brand="Acme", model="Classic Tee"), NameConfig())
    annotate_name(base, color_name="Red", size_name="S")
    # 'Acme Classic Tee (Red) [S]'
"""

from collections.abc import Iterable
from dataclasses import dataclass

from app.catalog.schemas import NameConfig

Combination = tuple[str | None, str | None]


@dataclass(frozen=True)
class ResolvedNames:
    """Display names of every naming fragment, resolved from IDs.

    Empty strings mean the fragment is absent.
    """

    brand: str = ""
    line: str = ""
    collection: str = ""
    model: str = ""
    style: str = ""
    pattern: str = ""
    material: str = ""
    fit: str = ""
    apparel: str = ""


def name_fragments(names: ResolvedNames, config: NameConfig) -> list[str]:
    """Return the non-empty fragments in naming order.

    Order: brand, line, collection, model, style, pattern, material,
    fit, apparel.

    Args:
        names: Resolved display names.
        config: Toggles for the optional fragments.

    Returns:
        Stripped, non-empty fragments.
    """
    candidates = [
        (config.include_brand, names.brand),
        (config.include_line, names.line),
        (config.include_collection, names.collection),
        (True, names.model),
        (config.include_style, names.style),
        (config.include_pattern, names.pattern),
        (config.include_material, names.material),
        (config.include_fit, names.fit),
        (True, names.apparel),
    ]
    return [value.strip() for enabled, value in candidates if enabled and value and value.strip()]


def build_base_name(names: ResolvedNames, config: NameConfig) -> str:
    """Space-join the enabled, non-empty fragments.

    Args:
        names: Resolved display names.
        config: Toggles for the optional fragments.

    Returns:
        Base SKU name without variant annotations.
    """
    return " ".join(name_fragments(names, config))


def annotate_name(
    base_name: str,
    color_name: str | None = None,
    size_name: str | None = None,
    skip_existing: bool = False,
) -> str:
    """Append the color and size annotations to a base name.

    Args:
        base_name: Name without annotations.
        color_name: Color display name, appended as " (Color)".
        size_name: Size display name, appended as " [Size]".
        skip_existing: Do not append an annotation the base already contains.

    Returns:
        Final SKU name.
    """
    parts = [base_name] if base_name else []
    if color_name:
        annotation = f"({color_name})"
        if not (skip_existing and annotation in base_name):
            parts.append(annotation)
    if size_name:
        annotation = f"[{size_name}]"
        if not (skip_existing and annotation in base_name):
            parts.append(annotation)
    return " ".join(parts)


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered = []
    for value in ids:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def expand_combinations(
    color_ids: Iterable[str],
    size_ids: Iterable[str],
) -> list[Combination]:
    """Enumerate (color, size) pairs, colors outer and sizes inner.

    An empty selection stands for the single absent value, so at least
    one combination is always returned. Duplicate IDs are dropped,
    keeping first occurrence order.

    Args:
        color_ids: Selected color IDs.
        size_ids: Selected size IDs.

    Returns:
        Ordered list of (color_id, size_id) pairs.
    """
    colors: list[str | None] = list(_unique(color_ids)) or [None]
    sizes: list[str | None] = list(_unique(size_ids)) or [None]
    return [(color_id, size_id) for color_id in colors for size_id in sizes]


def combination_count(color_count: int, size_count: int) -> int:
    """Number of SKUs a selection of the given sizes materializes to."""
    return max(1, color_count) * max(1, size_count)
