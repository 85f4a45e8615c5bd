"""
Recortes Backend - Blob Store Adapter
======================================

What:  Upload, delete and public-URL resolution for cut images in one bucket.
Why:   Keeps every Supabase Storage detail (client construction, file options,
       URL layout) out of the cut lifecycle logic.
How:   Wraps the synchronous supabase-py client; blocking calls run in the
       threadpool so the event loop keeps serving other requests.
Who:   CutService (upload on create/update, remove on delete).

Failure policy:
    upload  → StorageError. The caller aborts before writing any row.
    remove  → logged as a warning and reported as False. Never raised:
              a leftover blob must not block deleting the cut record.

URL layout (public bucket):
    {SUPABASE_URL}/storage/v1/object/public/{bucket}/{object_name}

    public_url() builds this locally (no network round trip) and
    extract_object_name() inverts it, so for every object name n:
        extract_object_name(public_url(n)) == n
"""

import logging
import re
from typing import Optional
from urllib.parse import quote, unquote

from fastapi.concurrency import run_in_threadpool
from supabase import Client as SupabaseClient, create_client

from recortes.config import settings
from recortes.exceptions import StorageError

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Capability over a single fixed bucket.

    The Supabase client is created on first use, not at import, so the
    application (and its health check) starts even when storage
    credentials are missing. Tests pass a fake client directly.
    """

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        bucket: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self._client = client
        self.bucket = bucket or settings.storage_bucket
        self.base_url = (base_url if base_url is not None else settings.supabase_url).rstrip("/")
        self._segment = re.compile(rf"/{re.escape(self.bucket)}/([^?#]+)")

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(
            settings.supabase_url and settings.supabase_service_role_key
        )

    def _bucket(self):
        if self._client is None:
            if not self.configured:
                raise StorageError(
                    message="Image storage is not available.",
                    context={"reason": "SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not set"},
                )
            self._client = create_client(settings.supabase_url, settings.supabase_service_role_key)
            logger.info("Supabase storage client created for bucket '%s'", self.bucket)
        return self._client.storage.from_(self.bucket)

    async def upload(self, object_name: str, content: bytes, content_type: str) -> None:
        """
        Write `content` under `object_name`, replacing any existing object.

        Raises:
            StorageError: the store rejected the write (or is not configured)
        """
        bucket = self._bucket()
        try:
            await run_in_threadpool(
                bucket.upload,
                object_name,
                content,
                {"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error("Upload of '%s' to bucket '%s' failed: %s", object_name, self.bucket, e)
            raise StorageError(
                context={"object_name": object_name, "error": str(e)},
            ) from e

        logger.info("Stored %s/%s (%d bytes, %s)", self.bucket, object_name, len(content), content_type)

    def public_url(self, object_name: str) -> str:
        """Publicly fetchable URL of an object. Pure string work, no I/O."""
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(object_name, safe='/')}"

    def extract_object_name(self, url: Optional[str]) -> str:
        """
        Recover the object name from a URL issued by public_url().

        Matches the first "/{bucket}/" segment, drops any query string or
        fragment, and un-quotes the remainder. Returns "" when the URL does
        not have the expected shape; callers treat that as nothing to delete.
        """
        if not url:
            return ""
        match = self._segment.search(url)
        if not match:
            return ""
        return unquote(match.group(1))

    async def remove(self, object_name: str) -> bool:
        """
        Delete an object. Best effort.

        Returns:
            True if the store accepted the delete, False otherwise (already
            logged as a warning).
        """
        try:
            bucket = self._bucket()
            await run_in_threadpool(bucket.remove, [object_name])
        except Exception as e:
            logger.warning(
                "Failed to remove image %s/%s from storage: %s", self.bucket, object_name, e
            )
            return False

        logger.info("Removed %s/%s", self.bucket, object_name)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
blob_store = BlobStore()


def get_blob_store() -> BlobStore:
    """FastAPI dependency; overridden in tests with a BlobStore around a fake client."""
    return blob_store
