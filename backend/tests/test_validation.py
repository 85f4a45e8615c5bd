"""
Recortes Backend - Request Validator Tests
===========================================

What we test:
    ✅ Required-field messages use human labels and camelCase field paths
    ✅ Blank strings and non-positive display orders are rejected
    ✅ Values that would not fit the database columns are rejected
    ✅ Partial update bodies only mark the fields that were sent
    ✅ List query: type errors and unknown sort fields are 400s
    ✅ Image part: content-type and size checks, empty file input ignored
"""

import io

import pytest
from starlette.datastructures import Headers, UploadFile

from recortes.exceptions import ValidationError
from recortes.models.cut import CutStatus
from recortes.schemas.cut import CutCreate, CutListQuery, CutUpdate
from recortes.validation import read_image, validate_model


def _issues(exc: ValidationError) -> dict:
    return {e["field"]: e["issue"] for e in exc.errors}


def _upload(content: bytes, filename: str = "foto.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestCreateBody:

    def test_valid_body(self, cut_form):
        fields = validate_model(CutCreate, cut_form, "body")

        assert fields.model_name == "Camiseta Básica"
        assert fields.display_order == 1
        assert fields.status is None

    def test_missing_fields_are_reported_by_label(self, cut_form):
        del cut_form["modelName"]
        del cut_form["sku"]

        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutCreate, cut_form, "body")

        issues = _issues(exc_info.value)
        assert issues["body.modelName"] == "Model name is required"
        assert issues["body.sku"] == "SKU is required"
        assert exc_info.value.message == "Validation failed"

    def test_blank_text_is_rejected(self, cut_form):
        cut_form["materialColor"] = "   "

        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutCreate, cut_form, "body")

        assert _issues(exc_info.value) == {"body.materialColor": "Material color is required"}

    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_display_order_must_be_positive(self, cut_form, value):
        cut_form["displayOrder"] = value

        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutCreate, cut_form, "body")

        assert _issues(exc_info.value) == {"body.displayOrder": "Display order must be a positive integer"}

    def test_display_order_must_fit_the_column(self, cut_form):
        cut_form["displayOrder"] = "99999999999999999999999"

        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutCreate, cut_form, "body")

        assert _issues(exc_info.value) == {"body.displayOrder": "Display order must be at most 2147483647"}

    def test_text_longer_than_column_is_rejected(self, cut_form):
        cut_form["material"] = "a" * 256

        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutCreate, cut_form, "body")

        assert _issues(exc_info.value) == {"body.material": "Material must be at most 255 characters"}

    def test_display_order_must_be_integer(self, cut_form):
        cut_form["displayOrder"] = "first"

        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutCreate, cut_form, "body")

        assert "body.displayOrder" in _issues(exc_info.value)

    def test_status_is_optional_enum(self, cut_form):
        cut_form["status"] = "PENDING"
        assert validate_model(CutCreate, cut_form, "body").status is CutStatus.PENDING

        cut_form["status"] = "ARCHIVED"
        with pytest.raises(ValidationError):
            validate_model(CutCreate, cut_form, "body")


class TestUpdateBody:

    def test_only_sent_fields_are_changes(self):
        fields = validate_model(CutUpdate, {"sku": "NEW-1", "displayOrder": "4"}, "body")
        assert fields.changes() == {"sku": "NEW-1", "display_order": 4}

    def test_empty_body_changes_nothing(self):
        assert validate_model(CutUpdate, {}, "body").changes() == {}

    def test_sent_field_must_not_be_blank(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutUpdate, {"sku": ""}, "body")

        assert _issues(exc_info.value) == {"body.sku": "SKU is required"}


    def test_sent_field_must_fit_the_column(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutUpdate, {"sku": "X" * 300, "displayOrder": "2147483648"}, "body")

        assert _issues(exc_info.value) == {
            "body.sku": "SKU must be at most 255 characters",
            "body.displayOrder": "Display order must be at most 2147483647",
        }


class TestListQuery:

    def test_defaults(self):
        query = validate_model(CutListQuery, {}, "query")

        assert query.page == 1
        assert query.limit is None
        assert query.sort_by == "displayOrder"

    def test_per_page_alias(self):
        assert validate_model(CutListQuery, {"perPage": "25"}, "query").limit == 25

    def test_filters_use_wire_names(self):
        query = validate_model(CutListQuery, {"cutType": "Frente", "status": "ACTIVE", "sku": "X"}, "query")

        assert query.cut_type == "Frente"
        assert query.status is CutStatus.ACTIVE
        assert query.sku == "X"

    def test_empty_status_means_no_filter(self):
        assert validate_model(CutListQuery, {"status": ""}, "query").status is None

    def test_non_integer_page_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutListQuery, {"page": "two"}, "query")

        assert "query.page" in _issues(exc_info.value)

    def test_unknown_sort_field_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_model(CutListQuery, {"sortBy": "imageUrl; DROP TABLE cuts"}, "query")

        assert "Cannot sort by" in _issues(exc_info.value)["query.sortBy"]

    def test_out_of_range_paging_passes_validation(self):
        # Normalized later by CutService, not rejected
        query = validate_model(CutListQuery, {"page": "0", "limit": "1000"}, "query")
        assert (query.page, query.limit) == (0, 1000)


class TestReadImage:

    @pytest.mark.asyncio
    async def test_absent_part(self):
        assert await read_image(None) is None

    @pytest.mark.asyncio
    async def test_valid_image(self):
        image = await read_image(_upload(b"png-bytes"))

        assert image.filename == "foto.png"
        assert image.content == b"png-bytes"
        assert image.content_type == "image/png"

    @pytest.mark.asyncio
    async def test_empty_file_input_counts_as_absent(self):
        assert await read_image(_upload(b"", filename="", content_type="application/octet-stream")) is None

    @pytest.mark.asyncio
    async def test_non_image_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            await read_image(_upload(b"%PDF-1.7", filename="doc.pdf", content_type="application/pdf"))

        assert _issues(exc_info.value) == {"file.image": "File must be an image"}

    @pytest.mark.asyncio
    async def test_text_value_is_rejected(self):
        with pytest.raises(ValidationError):
            await read_image("not-a-file")

    @pytest.mark.asyncio
    async def test_oversized_image_is_rejected(self, monkeypatch):
        from recortes.config import settings

        monkeypatch.setattr(settings, "max_file_size", 8)

        with pytest.raises(ValidationError) as exc_info:
            await read_image(_upload(b"0123456789"))

        assert "maximum size" in _issues(exc_info.value)["file.image"]
