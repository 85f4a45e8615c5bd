"""
Recortes Backend - Cut Request/Response Schemas
================================================

What:  Pydantic models defining the API contract for the /cuts resource.
Why:   Strict input validation, camelCase serialization, and OpenAPI docs.
How:   Input models are validated by recortes.validation against the raw
       multipart form / query string; response models are built from ORM rows.
Who:   Routes (response_model), the Request Validator (input), CutService.

Wire format:
    Every field is camelCase on the wire (modelName, displayOrder, imageUrl)
    and snake_case in Python. The alias generator keeps the two in sync.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from recortes.models.cut import INT4_MAX, TEXT_MAX_LENGTH, CutStatus


# Human-readable names used in "X is required" messages
_FIELD_LABELS = {
    "sku": "SKU",
    "model_name": "Model name",
    "cut_type": "Cut type",
    "position": "Position",
    "product_type": "Product type",
    "material": "Material",
    "material_color": "Material color",
}

TEXT_FIELDS = tuple(_FIELD_LABELS)

# What: Wire names accepted by ?sortBy= mapped to Cut attribute names
# Why a whitelist: the value ends up in ORDER BY; anything else is a 400
SORTABLE_FIELDS: Dict[str, str] = {
    "id": "id",
    "sku": "sku",
    "modelName": "model_name",
    "cutType": "cut_type",
    "position": "position",
    "productType": "product_type",
    "material": "material",
    "materialColor": "material_color",
    "displayOrder": "display_order",
    "status": "status",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def field_label(field_name: str) -> Optional[str]:
    return _FIELD_LABELS.get(field_name)


@dataclass(frozen=True)
class ImageUpload:
    """An image file part, already read into memory and type/size checked."""

    filename: str
    content: bytes
    content_type: str


def _require_text(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return value
    if not value.strip():
        raise ValueError(f"{_FIELD_LABELS[field_name]} is required")
    if len(value) > TEXT_MAX_LENGTH:
        raise ValueError(f"{_FIELD_LABELS[field_name]} must be at most {TEXT_MAX_LENGTH} characters")
    return value


def _require_positive(value: Optional[int]) -> Optional[int]:
    if value is not None and value <= 0:
        raise ValueError("Display order must be a positive integer")
    if value is not None and value > INT4_MAX:
        raise ValueError(f"Display order must be at most {INT4_MAX}")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class CutCreate(_CamelModel):
    """
    Text fields of POST /cuts (the image travels separately as a file part).

    All seven text attributes and displayOrder are required; status is
    optional and defaults to ACTIVE in the database.
    """

    sku: str
    model_name: str
    cut_type: str
    position: str
    product_type: str
    material: str
    material_color: str
    display_order: int
    status: Optional[CutStatus] = None

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        return _require_text(v, info.field_name)

    @field_validator("display_order")
    @classmethod
    def positive_display_order(cls, v: int) -> int:
        return _require_positive(v)


class CutUpdate(_CamelModel):
    """
    Text fields of PUT /cuts/{id}. Every field is optional.

    Patch semantics are presence-based: `model_fields_set` tells the service
    which keys the client actually sent. A key that is sent must carry a
    valid value; sending an empty sku is a 400, not a silent no-op.
    """

    sku: Optional[str] = None
    model_name: Optional[str] = None
    cut_type: Optional[str] = None
    position: Optional[str] = None
    product_type: Optional[str] = None
    material: Optional[str] = None
    material_color: Optional[str] = None
    display_order: Optional[int] = None
    status: Optional[CutStatus] = None

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def not_blank(cls, v: Optional[str], info) -> Optional[str]:
        return _require_text(v, info.field_name)

    @field_validator("display_order")
    @classmethod
    def positive_display_order(cls, v: Optional[int]) -> Optional[int]:
        return _require_positive(v)

    def changes(self) -> Dict[str, object]:
        """Only the fields present in the request, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class CutListQuery(_CamelModel):
    """
    Query string of GET /cuts.

    page and limit are only type-checked here. Out-of-range values (zero,
    negative, oversized) are normalized by CutService.list_cuts so the
    pagination arithmetic never divides by zero.
    """

    page: int = 1
    limit: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("limit", "perPage"),
    )
    sku: Optional[str] = None
    cut_type: Optional[str] = None
    status: Optional[CutStatus] = None
    sort_by: str = "displayOrder"

    @field_validator("status", mode="before")
    @classmethod
    def empty_status_is_no_filter(cls, v):
        # ?status= behaves like the other empty filters
        return None if v == "" else v

    @field_validator("sort_by")
    @classmethod
    def known_sort_field(cls, v: str) -> str:
        if v not in SORTABLE_FIELDS:
            raise ValueError(
                f"Cannot sort by '{v}'. Must be one of: {', '.join(sorted(SORTABLE_FIELDS))}"
            )
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CutResponse(_CamelModel):
    """Full representation of a cut, as returned by every /cuts endpoint."""

    id: int
    sku: str
    model_name: str
    cut_type: str
    position: str
    product_type: str
    material: str
    material_color: str
    display_order: int
    status: CutStatus
    image_url: str
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(_CamelModel):
    """Paging block of GET /cuts. totalPages = ceil(total / perPage)."""

    page: int
    per_page: int
    total: int
    total_pages: int


class CutListResponse(BaseModel):
    """Paginated response wrapper: {data: [...], meta: {...}}."""

    data: List[CutResponse]
    meta: PaginationMeta
