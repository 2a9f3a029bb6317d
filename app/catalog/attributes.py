"""Attribute registry declarations and the multi-value codec.

The category-attribute matrix stores text. Slugs listed in
``MULTI_VALUED_SLUGS`` hold a JSON array of vocabulary IDs; callers use
``encode_multi_value`` / ``decode_multi_value`` on every write and read
so the two stay symmetric.
"""

import json
from dataclasses import dataclass

from app.domain.exceptions import InvalidMultiValueError


@dataclass(frozen=True)
class AttributeTypeSpec:
    """Slug and display name of an attribute type."""

    slug: str
    name: str


REQUIRED_ATTRIBUTE_TYPES: tuple[AttributeTypeSpec, ...] = (
    AttributeTypeSpec("subcategory-1", "Subcategory 1"),
    AttributeTypeSpec("subcategory-2", "Subcategory 2"),
    AttributeTypeSpec("google-shopping-category", "Google Shopping Category"),
    AttributeTypeSpec("google-shopping-code", "Google Shopping Code"),
    AttributeTypeSpec("height-cm", "Height (cm)"),
    AttributeTypeSpec("length-cm", "Length (cm)"),
    AttributeTypeSpec("width-cm", "Width (cm)"),
    AttributeTypeSpec("weight-kg", "Weight (kg)"),
    AttributeTypeSpec("possible-sizes", "Possible Sizes"),
    AttributeTypeSpec("possible-fits", "Possible Fits"),
)

MULTI_VALUED_SLUGS: frozenset[str] = frozenset({"possible-sizes", "possible-fits"})


def is_multi_valued(slug: str) -> bool:
    """Check whether a slug stores a JSON-encoded list."""
    return slug in MULTI_VALUED_SLUGS


def encode_multi_value(ids: list[str]) -> str:
    """Encode an ordered list of IDs for storage.

    Args:
        ids: Vocabulary IDs, order preserved.

    Returns:
        Compact JSON array text.
    """
    return json.dumps(list(ids), separators=(",", ":"))


def decode_multi_value(value: str | None, slug: str = "") -> list[str]:
    """Decode a stored multi-valued attribute.

    The empty string (an unset cell) decodes to an empty list.

    Args:
        value: Stored text.
        slug: Attribute slug, for error reporting.

    Returns:
        Ordered list of IDs.

    Raises:
        InvalidMultiValueError: If the text is not a JSON array of strings.
    """
    if value is None or value.strip() == "":
        return []
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError as e:
        raise InvalidMultiValueError(slug, value, f"not valid JSON ({e.msg})") from e
    if not isinstance(decoded, list):
        raise InvalidMultiValueError(slug, value, "expected a JSON array")
    if not all(isinstance(item, str) for item in decoded):
        raise InvalidMultiValueError(slug, value, "array items must be string IDs")
    return decoded


def validate_attribute_value(slug: str, value: str) -> None:
    """Reject malformed text for multi-valued slugs.

    Scalar slugs accept any text.

    Raises:
        InvalidMultiValueError: If a multi-valued slug gets malformed text.
    """
    if is_multi_valued(slug):
        decode_multi_value(value, slug)
