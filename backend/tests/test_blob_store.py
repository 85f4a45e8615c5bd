"""
Recortes Backend - Blob Store Tests
====================================

What we test:
    ✅ Upload goes to the configured bucket as an upsert with the content type
    ✅ Provider failures on upload become StorageError
    ✅ Public URL layout and its inverse (extract_object_name)
    ✅ Extraction tolerates query strings and rejects foreign URLs
    ✅ Removal failures are reported as False, never raised
    ✅ An unconfigured store refuses uploads
"""

import pytest

from recortes.exceptions import StorageError
from recortes.services.blob_store import BlobStore

from conftest import PUBLIC_PREFIX, SUPABASE_URL


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_is_upsert_with_content_type(self, blob_store, fake_bucket):
        await blob_store.upload("camiseta_frente.png", b"img", "image/png")

        assert fake_bucket.objects["camiseta_frente.png"] == b"img"
        options = fake_bucket.uploads[0]["options"]
        assert options["content-type"] == "image/png"
        assert options["upsert"] == "true"

    @pytest.mark.asyncio
    async def test_upload_uses_configured_bucket(self, blob_store):
        await blob_store.upload("a.png", b"img", "image/png")
        assert blob_store._client.requested == ["recortes"]

    @pytest.mark.asyncio
    async def test_upload_failure_raises_storage_error(self, blob_store, fake_bucket):
        fake_bucket.fail_upload = True

        with pytest.raises(StorageError) as exc_info:
            await blob_store.upload("a.png", b"img", "image/png")

        assert exc_info.value.context["object_name"] == "a.png"
        # Provider detail stays out of the client-facing message
        assert "storage unavailable" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unconfigured_store_refuses_upload(self, monkeypatch):
        from recortes.config import settings

        monkeypatch.setattr(settings, "supabase_url", "")
        monkeypatch.setattr(settings, "supabase_service_role_key", "")
        store = BlobStore(bucket="recortes", base_url="")

        assert store.configured is False
        with pytest.raises(StorageError):
            await store.upload("a.png", b"img", "image/png")


class TestPublicUrls:

    def test_public_url_layout(self, blob_store):
        assert blob_store.public_url("bone_preto.png") == PUBLIC_PREFIX + "bone_preto.png"

    def test_public_url_quotes_unsafe_characters(self, blob_store):
        url = blob_store.public_url("camiseta_poly-50%.png")
        assert url.endswith("/recortes/camiseta_poly-50%25.png")

    @pytest.mark.parametrize(
        "name",
        ["bone_preto.png", "bone-americano_frente-copa_linho_azul.jpg", "poly/algodao-50%.webp", "sem-extensao"],
    )
    def test_extract_inverts_public_url(self, blob_store, name):
        assert blob_store.extract_object_name(blob_store.public_url(name)) == name

    def test_extract_ignores_query_string_and_fragment(self, blob_store):
        url = PUBLIC_PREFIX + "bone_preto.png?t=1700000000#top"
        assert blob_store.extract_object_name(url) == "bone_preto.png"

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://cdn.example.com/images/bone_preto.png",
            f"{SUPABASE_URL}/storage/v1/object/public/outro-bucket/bone_preto.png",
        ],
    )
    def test_extract_unrecognized_url_gives_empty(self, blob_store, url):
        assert blob_store.extract_object_name(url) == ""


class TestRemove:

    @pytest.mark.asyncio
    async def test_remove_success(self, blob_store, fake_bucket):
        fake_bucket.objects["a.png"] = b"img"

        assert await blob_store.remove("a.png") is True
        assert fake_bucket.removed == ["a.png"]
        assert "a.png" not in fake_bucket.objects

    @pytest.mark.asyncio
    async def test_remove_failure_is_reported_not_raised(self, blob_store, fake_bucket, caplog):
        fake_bucket.fail_remove = True

        assert await blob_store.remove("a.png") is False
        assert "Failed to remove image" in caplog.text
