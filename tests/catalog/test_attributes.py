"""Tests for the attribute registry and multi-value codec."""

import pytest

from app.catalog.attributes import (
    MULTI_VALUED_SLUGS,
    REQUIRED_ATTRIBUTE_TYPES,
    decode_multi_value,
    encode_multi_value,
    is_multi_valued,
    validate_attribute_value,
)
from app.domain.exceptions import InvalidMultiValueError, ValidationError


class TestRequiredAttributeTypes:
    """Tests for the required attribute set."""

    def test_required_slugs(self) -> None:
        """The required set lists the ten bootstrap slugs."""
        assert [spec.slug for spec in REQUIRED_ATTRIBUTE_TYPES] == [
            "subcategory-1",
            "subcategory-2",
            "google-shopping-category",
            "google-shopping-code",
            "height-cm",
            "length-cm",
            "width-cm",
            "weight-kg",
            "possible-sizes",
            "possible-fits",
        ]

    def test_multi_valued_slugs_are_required(self) -> None:
        """Every multi-valued slug is part of the required set."""
        required = {spec.slug for spec in REQUIRED_ATTRIBUTE_TYPES}
        assert MULTI_VALUED_SLUGS <= required
        assert is_multi_valued("possible-sizes")
        assert not is_multi_valued("height-cm")


class TestMultiValueCodec:
    """Tests for encode/decode of multi-valued attributes."""

    def test_round_trip_preserves_order(self) -> None:
        """Decoding an encoded list gives the same list back."""
        ids = ["m-id", "s-id", "xl-id"]
        assert decode_multi_value(encode_multi_value(ids)) == ids

    def test_empty_string_decodes_to_empty_list(self) -> None:
        """An unset cell is an empty selection."""
        assert decode_multi_value("") == []
        assert decode_multi_value(None) == []
        assert encode_multi_value([]) == "[]"

    @pytest.mark.parametrize(
        ("value", "reason"),
        [
            ("not json", "not valid JSON"),
            ('{"a": 1}', "expected a JSON array"),
            ("[1, 2]", "array items must be string IDs"),
        ],
    )
    def test_malformed_values_raise(self, value: str, reason: str) -> None:
        """Malformed text is a validation error, never an empty list."""
        with pytest.raises(InvalidMultiValueError) as exc_info:
            decode_multi_value(value, "possible-sizes")
        assert isinstance(exc_info.value, ValidationError)
        assert reason in exc_info.value.details["reason"]
        assert exc_info.value.details["slug"] == "possible-sizes"

    def test_scalar_slugs_accept_any_text(self) -> None:
        """Only multi-valued slugs are checked."""
        validate_attribute_value("height-cm", "not json")
        with pytest.raises(InvalidMultiValueError):
            validate_attribute_value("possible-fits", "not json")
