"""
Recortes Backend - Cut Service (Business Logic Orchestrator)
=============================================================

What:  The cut lifecycle: create, list, get, update, remove, each scoped to
       the authenticated owner.
Why:   Keeps ownership rules, upload orchestration and cleanup policy in one
       place, independent of HTTP concerns.
How:   Composes the object key builder, the blob store and the database
       session handed in by the route (one service instance per request).
Who:   Called by the /cuts route handlers.

Orchestration Flow (create):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │  Image   │───▶│ Object name │───▶│  Blob store  │───▶│  Insert  │
    │  check   │    │ (metadata)  │    │   upload     │    │   row    │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    Upload failure → StorageError, no row written.

Orchestration Flow (remove):
    ownership lookup → extract object name → remove blob (best effort) → delete row

    The database and the blob store are not coordinated transactionally.
    A failed blob removal leaves an orphaned object, logged as a warning.

Ownership:
    Every lookup filters on (id, user_id). A cut owned by someone else is
    indistinguishable from a missing one: both raise NotFoundError (404).
"""

import logging
import math
from typing import Dict, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recortes.config import settings
from recortes.exceptions import DatabaseError, NotFoundError, ValidationError
from recortes.models.cut import INT4_MAX, Cut
from recortes.schemas.common import Identity
from recortes.schemas.cut import (
    SORTABLE_FIELDS,
    CutCreate,
    CutListQuery,
    CutListResponse,
    CutResponse,
    CutUpdate,
    ImageUpload,
    PaginationMeta,
)
from recortes.services.blob_store import BlobStore
from recortes.services.object_keys import KEY_FIELDS, build_object_name

logger = logging.getLogger(__name__)


def parse_cut_id(raw_id: object) -> Optional[int]:
    """
    Parse a path id. Returns None unless it is a plain base-10 integer
    that fits the id column.

    "12" → 12; "abc", "1.5", "", " 7", "99999999999" → None
    """
    text = str(raw_id)
    if not text.isascii() or not text.isdigit():
        return None
    value = int(text)
    return value if value <= INT4_MAX else None


def normalize_pagination(page: int, limit: Optional[int]) -> Tuple[int, int]:
    """
    Clamp paging input into a usable range.

    page < 1            → 1
    page > INT4_MAX     → INT4_MAX (keeps the OFFSET within bigint)
    limit missing       → DEFAULT_PAGE_SIZE
    limit < 1           → 1
    limit > MAX_PAGE_SIZE → MAX_PAGE_SIZE

    perPage is therefore always >= 1, so totalPages never divides by zero.
    """
    per_page = settings.default_page_size if limit is None else limit
    per_page = min(max(per_page, 1), settings.max_page_size)
    return min(max(page, 1), INT4_MAX), per_page


def total_pages(total: int, per_page: int) -> int:
    """ceil(total / per_page); 0 when there is nothing to show."""
    return math.ceil(total / per_page) if total > 0 else 0


class CutService:
    """
    Business logic for cut resources.

    Stateless apart from its two collaborators, which are injected:
        db:     the request's AsyncSession (committed by get_db_session)
        blobs:  the BlobStore for cut images

    Error Handling Strategy:
        SQLAlchemy errors are wrapped in DatabaseError (hides internals).
        StorageError from uploads propagates unchanged. Blob removal never
        raises (see BlobStore.remove).
    """

    def __init__(self, db: AsyncSession, blobs: BlobStore):
        self.db = db
        self.blobs = blobs

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_owned(self, identity: Identity, cut_id: int) -> Cut:
        """The cut with this id if the caller owns it; NotFoundError otherwise."""
        try:
            result = await self.db.execute(
                select(Cut).where(Cut.id == cut_id, Cut.user_id == identity.id)
            )
            cut = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching cut %s: %s", cut_id, e)
            raise DatabaseError(context={"cut_id": cut_id, "error_type": type(e).__name__}) from e

        if cut is None:
            raise NotFoundError(resource="cut", resource_id=str(cut_id))
        return cut

    async def _upload_image(self, image: ImageUpload, metadata: Dict[str, Optional[str]]) -> str:
        """Store the image under its metadata-derived name; return its public URL."""
        object_name = build_object_name(metadata, image.filename, image.content_type)
        await self.blobs.upload(object_name, image.content, image.content_type)
        return self.blobs.public_url(object_name)

    async def _flush_and_refresh(self, cut: Cut, action: str) -> None:
        try:
            await self.db.flush()
            await self.db.refresh(cut)
        except SQLAlchemyError as e:
            logger.error("Database error during cut %s: %s", action, e, exc_info=True)
            raise DatabaseError(context={"action": action, "error_type": type(e).__name__}) from e

    # ── Operations ────────────────────────────────────────────────────────

    async def create(
        self,
        identity: Identity,
        fields: CutCreate,
        image: Optional[ImageUpload],
    ) -> CutResponse:
        """
        Create a cut owned by the caller.

        Workflow Steps:
            1. Require an image (before any upload is attempted)
            2. Upload it under the metadata-derived object name
            3. Insert the row with the resulting public URL

        Raises:
            ValidationError: no image attached
            StorageError: the upload failed (no row is written)
            DatabaseError: the insert failed
        """
        if image is None:
            raise ValidationError(message="Image file is required", field="image")

        image_url = await self._upload_image(
            image, {name: getattr(fields, name) for name in KEY_FIELDS}
        )

        cut = Cut(
            sku=fields.sku,
            model_name=fields.model_name,
            cut_type=fields.cut_type,
            position=fields.position,
            product_type=fields.product_type,
            material=fields.material,
            material_color=fields.material_color,
            display_order=int(fields.display_order),
            image_url=image_url,
            user_id=identity.id,
        )
        if fields.status is not None:
            cut.status = fields.status

        self.db.add(cut)
        await self._flush_and_refresh(cut, "create")
        logger.info("Cut %s created by user %s (%s)", cut.id, identity.id, image_url)
        return CutResponse.model_validate(cut)

    async def list_cuts(self, identity: Identity, query: CutListQuery) -> CutListResponse:
        """
        One page of the caller's cuts.

        Filters (exact match, AND-combined, empty values ignored):
            sku, cutType, status, plus the implicit owner filter.
        Sort: query.sort_by ascending, id as tie-breaker.
        Paging: see normalize_pagination for how edge values are handled.
        """
        page, per_page = normalize_pagination(query.page, query.limit)

        conditions = [Cut.user_id == identity.id]
        if query.sku:
            conditions.append(Cut.sku == query.sku)
        if query.cut_type:
            conditions.append(Cut.cut_type == query.cut_type)
        if query.status:
            conditions.append(Cut.status == query.status)

        sort_column = getattr(Cut, SORTABLE_FIELDS[query.sort_by])

        try:
            result = await self.db.execute(
                select(Cut)
                .where(*conditions)
                .order_by(sort_column.asc(), Cut.id.asc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            )
            cuts = list(result.scalars().all())

            count_result = await self.db.execute(
                select(func.count(Cut.id)).where(*conditions)
            )
            total = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing cuts: %s", e, exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        return CutListResponse(
            data=[CutResponse.model_validate(cut) for cut in cuts],
            meta=PaginationMeta(
                page=page,
                per_page=per_page,
                total=total,
                total_pages=total_pages(total, per_page),
            ),
        )

    async def get(self, identity: Identity, raw_id: object) -> CutResponse:
        """
        One cut by id.

        A malformed id cannot match any row, so it is reported as not found.
        """
        cut_id = parse_cut_id(raw_id)
        if cut_id is None:
            raise NotFoundError(resource="cut", resource_id=str(raw_id))
        return CutResponse.model_validate(await self._get_owned(identity, cut_id))

    async def update(
        self,
        identity: Identity,
        raw_id: object,
        fields: CutUpdate,
        image: Optional[ImageUpload] = None,
    ) -> CutResponse:
        """
        Partially update a cut, optionally replacing its image.

        Patch semantics are presence-based: only keys the client sent are
        applied (fields.changes()). With a new image, the object name is
        derived from the merged metadata (stored values overlaid with the
        incoming ones). The previous object is left in the bucket when the
        name changes.

        Raises:
            ValidationError: id is not an integer (checked before any lookup)
            NotFoundError: no such cut for this caller
            StorageError: the new image could not be uploaded
        """
        cut_id = parse_cut_id(raw_id)
        if cut_id is None:
            raise ValidationError(message="Invalid ID format", field="id")

        cut = await self._get_owned(identity, cut_id)
        changes = fields.changes()

        if image is not None:
            metadata = {
                name: changes.get(name, getattr(cut, name)) for name in KEY_FIELDS
            }
            cut.image_url = await self._upload_image(image, metadata)

        for name, value in changes.items():
            if name == "display_order":
                value = int(value)
            setattr(cut, name, value)

        await self._flush_and_refresh(cut, "update")
        logger.info(
            "Cut %s updated by user %s: fields=%s image=%s",
            cut.id, identity.id, sorted(changes), image is not None,
        )
        return CutResponse.model_validate(cut)

    async def remove(self, identity: Identity, raw_id: object) -> None:
        """
        Delete a cut and, best effort, its image.

        The row is deleted whether or not the blob could be removed. Only a
        failure of the row delete itself propagates.
        """
        cut_id = parse_cut_id(raw_id)
        if cut_id is None:
            raise NotFoundError(resource="cut", resource_id=str(raw_id))

        cut = await self._get_owned(identity, cut_id)

        object_name = self.blobs.extract_object_name(cut.image_url)
        if not object_name:
            logger.warning("Could not extract image path from URL for cut %s: %s", cut.id, cut.image_url)
        else:
            await self.blobs.remove(object_name)

        try:
            await self.db.delete(cut)
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting cut %s: %s", cut_id, e, exc_info=True)
            raise DatabaseError(context={"cut_id": cut_id, "error_type": type(e).__name__}) from e

        logger.info("Cut %s deleted by user %s", cut_id, identity.id)
