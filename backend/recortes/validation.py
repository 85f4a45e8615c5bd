"""
Recortes Backend - Request Validator
=====================================

What:  Validates multipart bodies, query strings and image parts of the
       /cuts endpoints before any business logic runs.
Why:   Cut bodies arrive as multipart/form-data (text fields + an image),
       which FastAPI's JSON body validation does not cover. Parsing the form
       here keeps one error shape for every input problem:

           400 {"message": "Validation failed",
                "errors": [{"field": "body.displayOrder", "issue": "..."}]}

How:   Raw form/query values are fed to the Pydantic models in
       recortes.schemas.cut; pydantic errors are converted into
       ValidationError with a field/issue list.
Who:   Route handlers, through the dependencies at the bottom of this module.
"""

import logging
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from starlette.datastructures import UploadFile

from recortes.config import settings
from recortes.exceptions import ValidationError
from recortes.schemas.cut import (
    TEXT_FIELDS,
    CutCreate,
    CutListQuery,
    CutUpdate,
    ImageUpload,
    field_label,
)

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"

ModelT = TypeVar("ModelT", bound=BaseModel)

_LABELS_BY_ALIAS = {to_camel(name): field_label(name) for name in TEXT_FIELDS}
_LABELS_BY_ALIAS["displayOrder"] = "Display order"


class CutCreateForm(NamedTuple):
    fields: CutCreate
    image: Optional[ImageUpload]


class CutUpdateForm(NamedTuple):
    fields: CutUpdate
    image: Optional[ImageUpload]


def _issue(error: Mapping[str, Any]) -> str:
    """Readable message for one pydantic error."""
    ctx = error.get("ctx") or {}
    if "error" in ctx:
        # ValueError raised by our own validators: use its text verbatim
        return str(ctx["error"])
    if error.get("type") == "missing":
        loc = error.get("loc") or ()
        label = _LABELS_BY_ALIAS.get(str(loc[-1])) if loc else None
        if label:
            return f"{label} is required"
    return error.get("msg", "Invalid value")


def to_field_errors(exc: PydanticValidationError, source: str) -> List[Dict[str, str]]:
    """Convert a pydantic error into [{"field": "<source>.<loc>", "issue": ...}]."""
    return [
        {
            "field": ".".join([source, *(str(part) for part in err.get("loc", ()))]),
            "issue": _issue(err),
        }
        for err in exc.errors()
    ]


def validate_model(model: Type[ModelT], data: Mapping[str, Any], source: str) -> ModelT:
    """
    Validate raw input against a schema.

    Raises:
        ValidationError: with one entry per failing field
    """
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = to_field_errors(e, source)
        logger.info("Rejected %s input for %s: %s", source, model.__name__, errors)
        raise ValidationError(message="Validation failed", errors=errors) from e


async def read_image(value: Any) -> Optional[ImageUpload]:
    """
    Check and read the `image` part of a multipart body.

    An absent part (or an empty file input) yields None; whether an image is
    mandatory is the service's decision. A present part must be a file with
    an image/* content type within the configured size limit.
    """
    if value is None:
        return None
    if not isinstance(value, UploadFile):
        raise ValidationError(
            message="Validation failed",
            errors=[{"field": f"file.{IMAGE_FIELD}", "issue": "Image must be sent as a file"}],
        )

    try:
        content = await value.read()
    finally:
        await value.close()

    if not value.filename and not content:
        return None

    content_type = value.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError(
            message="Validation failed",
            errors=[{"field": f"file.{IMAGE_FIELD}", "issue": "File must be an image"}],
            context={"content_type": content_type},
        )
    if len(content) > settings.max_file_size:
        max_mb = settings.max_file_size / (1024 * 1024)
        raise ValidationError(
            message="Validation failed",
            errors=[{"field": f"file.{IMAGE_FIELD}", "issue": f"Image exceeds the maximum size of {max_mb:.0f}MB"}],
            context={"size": len(content)},
        )

    return ImageUpload(
        filename=value.filename or "",
        content=content,
        content_type=content_type,
    )


def _split_form(form) -> Dict[str, Any]:
    return {key: value for key, value in form.multi_items() if key != IMAGE_FIELD}


# ══════════════════════════════════════════════════════════════════════════
# FastAPI dependencies
# ══════════════════════════════════════════════════════════════════════════


async def cut_create_form(request: Request) -> CutCreateForm:
    """Validated body of POST /cuts."""
    form = await request.form()
    fields = validate_model(CutCreate, _split_form(form), "body")
    image = await read_image(form.get(IMAGE_FIELD))
    return CutCreateForm(fields=fields, image=image)


async def cut_update_form(request: Request) -> CutUpdateForm:
    """Validated body of PUT /cuts/{id}. Only sent keys end up in model_fields_set."""
    form = await request.form()
    fields = validate_model(CutUpdate, _split_form(form), "body")
    image = await read_image(form.get(IMAGE_FIELD))
    return CutUpdateForm(fields=fields, image=image)


def cut_list_query(request: Request) -> CutListQuery:
    """Validated query string of GET /cuts."""
    return validate_model(CutListQuery, request.query_params, "query")
