"""Typed records used by the catalog services.

``SKUContext`` is the naming/selection input of SKU generation and
update; ``SKUMetadata`` is the attribute snapshot stored on every SKU.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class VocabularyKind(str, Enum):
    """Reference vocabularies used as attribute values and SKU dimensions."""

    SIZES = "sizes"
    COLORS = "colors"
    FITS = "fits"
    PATTERNS = "patterns"
    MATERIALS = "materials"
    GENDERS = "genders"


class NameConfig(BaseModel):
    """Which optional fragments participate in the generated SKU name.

    The model name and the apparel category are always included.
    """

    include_brand: bool = True
    include_line: bool = True
    include_collection: bool = False
    include_style: bool = True
    include_pattern: bool = True
    include_material: bool = True
    include_fit: bool = True


class SKUContext(BaseModel):
    """Brand, model and attribute selection shared by a batch of SKUs."""

    brand_id: str = Field(default="", description="Owning brand ID")
    brand_name: str = Field(default="", description="Brand display name")
    line_id: str | None = Field(default=None, description="Brand line ID")
    line_name: str | None = Field(default=None, description="Brand line display name")
    collection: str | None = Field(default=None, description="Collection name")
    model_name: str = Field(default="", description="Model name, e.g. 'Classic Tee'")
    apparel_id: str | None = Field(default=None, description="Apparel (root) category ID")
    style_id: str | None = Field(default=None, description="Style (child) category ID")
    pattern_id: str | None = None
    material_id: str | None = None
    fit_id: str | None = None
    gender_id: str | None = None
    description: str | None = None
    images: list[str] = Field(default_factory=list, description="Stored asset URLs")
    videos: list[str] = Field(default_factory=list, description="Stored asset URLs")
    name_config: NameConfig = Field(default_factory=NameConfig)
    extra: dict[str, Any] = Field(
        default_factory=dict, description="Additional keys copied into the metadata snapshot"
    )


class SKUMetadata(BaseModel):
    """Attribute snapshot captured when a SKU is created or updated.

    Known attributes have explicit fields. Keys this version does not
    know about are kept in ``extra`` so records written by newer
    versions survive a round trip.
    """

    model_name: str = ""
    gender_id: str | None = None
    gender_name: str | None = None
    apparel_id: str | None = None
    apparel_name: str | None = None
    style_id: str | None = None
    style_name: str | None = None
    pattern_id: str | None = None
    pattern_name: str | None = None
    material_id: str | None = None
    material_name: str | None = None
    fit_id: str | None = None
    fit_name: str | None = None
    size_id: str | None = None
    size_name: str | None = None
    color_id: str | None = None
    color_name: str | None = None
    name_config: NameConfig = Field(default_factory=NameConfig)
    extra: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_unknown_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = set(cls.model_fields)
        unknown = {k: v for k, v in data.items() if k not in known}
        if not unknown:
            return data
        cleaned = {k: v for k, v in data.items() if k in known}
        cleaned["extra"] = {**unknown, **(data.get("extra") or {})}
        return cleaned

    def to_json(self) -> dict[str, Any]:
        """Serialize for the JSON ``metadata`` column."""
        return self.model_dump(mode="json")
