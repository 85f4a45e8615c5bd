"""
Recortes Backend - Cut Route Handlers
======================================

What:  The /cuts resource: create, list, get, update, delete.
Why:   The HTTP face of CutService for the catalog frontend.
How:   Authentication, body/query validation and the service itself all come
       in as dependencies; handlers only choose the status code.
Who:   The catalog frontend (multipart uploads from the cut editor, JSON
       reads from the listing pages).

Status codes:
    201 create · 200 list/get/update · 204 delete
    400 validation · 401 auth · 404 missing or not owned · 500 storage/database

Caching:
    Every response is user-specific, so reads carry `Cache-Control: private, no-cache`.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from recortes.auth import get_current_identity
from recortes.database import get_db_session
from recortes.schemas.common import ErrorResponse, Identity
from recortes.schemas.cut import CutListQuery, CutListResponse, CutResponse
from recortes.services.blob_store import BlobStore, get_blob_store
from recortes.services.cut_service import CutService
from recortes.validation import (
    CutCreateForm,
    CutUpdateForm,
    cut_create_form,
    cut_list_query,
    cut_update_form,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cuts", tags=["Cuts"])

_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or invalid credentials", "model": ErrorResponse},
    500: {"description": "Storage or database failure", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Cut not found", "model": ErrorResponse}}

# Multipart bodies are parsed by hand in recortes.validation, so describe them for OpenAPI
_CUT_FORM_PROPERTIES = {
    "sku": {"type": "string"},
    "modelName": {"type": "string"},
    "cutType": {"type": "string"},
    "position": {"type": "string"},
    "productType": {"type": "string"},
    "material": {"type": "string"},
    "materialColor": {"type": "string"},
    "displayOrder": {"type": "integer", "minimum": 1},
    "status": {"type": "string", "enum": ["ACTIVE", "EXPIRED", "PENDING"]},
    "image": {"type": "string", "format": "binary"},
}


def _multipart_body(required: list) -> dict:
    return {
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": _CUT_FORM_PROPERTIES,
                        "required": required,
                    }
                }
            },
        }
    }


def get_cut_service(
    db: AsyncSession = Depends(get_db_session),
    blobs: BlobStore = Depends(get_blob_store),
) -> CutService:
    """One CutService per request, sharing the request's session."""
    return CutService(db=db, blobs=blobs)


@router.post(
    "",
    response_model=CutResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERRORS},
    summary="Create a cut",
    openapi_extra=_multipart_body(
        ["sku", "modelName", "cutType", "position", "productType",
         "material", "materialColor", "displayOrder", "image"]
    ),
)
async def create_cut(
    identity: Identity = Depends(get_current_identity),
    form: CutCreateForm = Depends(cut_create_form),
    service: CutService = Depends(get_cut_service),
) -> CutResponse:
    """
    Upload the image, then insert the cut for the caller.

    The image is stored under a name derived from productType, cutType,
    material and materialColor, so two cuts with identical metadata share
    (and overwrite) one object.
    """
    return await service.create(identity, form.fields, form.image)


@router.get(
    "",
    response_model=CutListResponse,
    responses={**_ERRORS},
    summary="List the caller's cuts",
)
async def list_cuts(
    response: Response,
    identity: Identity = Depends(get_current_identity),
    query: CutListQuery = Depends(cut_list_query),
    service: CutService = Depends(get_cut_service),
) -> CutListResponse:
    """
    Paginated list, only ever containing the caller's cuts.

    Query parameters (read by cut_list_query):
        page      1-based page number (default 1)
        limit     items per page, default 10, capped at 100 (alias: perPage)
        sku, cutType, status   exact-match filters
        sortBy    camelCase field to sort by, ascending (default displayOrder)

    Example:
        GET /cuts?page=2&limit=20&cutType=frente&sortBy=createdAt
    """
    result = await service.list_cuts(identity, query)
    response.headers["Cache-Control"] = "private, no-cache"
    response.headers["X-Total-Count"] = str(result.meta.total)
    return result


@router.get(
    "/{cut_id}",
    response_model=CutResponse,
    responses={**_ERRORS, **_NOT_FOUND},
    summary="Get one cut",
)
async def get_cut(
    cut_id: str,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    service: CutService = Depends(get_cut_service),
) -> CutResponse:
    # cut_id stays a string: a malformed id is a 404 here, not a 422
    result = await service.get(identity, cut_id)
    response.headers["Cache-Control"] = "private, no-cache"
    return result


@router.put(
    "/{cut_id}",
    response_model=CutResponse,
    responses={**_ERRORS, **_NOT_FOUND},
    summary="Update a cut",
    openapi_extra=_multipart_body([]),
)
async def update_cut(
    cut_id: str,
    identity: Identity = Depends(get_current_identity),
    form: CutUpdateForm = Depends(cut_update_form),
    service: CutService = Depends(get_cut_service),
) -> CutResponse:
    """
    Apply the fields present in the body; replace the image when one is sent.

    A non-numeric id is rejected with 400 before the cut is looked up.
    """
    return await service.update(identity, cut_id, form.fields, form.image)


@router.delete(
    "/{cut_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_ERRORS, **_NOT_FOUND},
    summary="Delete a cut and its image",
)
async def delete_cut(
    cut_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CutService = Depends(get_cut_service),
) -> Response:
    await service.remove(identity, cut_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
