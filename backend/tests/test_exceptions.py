"""
Recortes Backend - Exception Hierarchy Tests
=============================================

What we test:
    ✅ Status codes and error codes per class
    ✅ The caller's context dict is never modified
"""

import pytest

from recortes.exceptions import (
    AuthError,
    DatabaseError,
    NotFoundError,
    StorageError,
    ValidationError,
)


class TestStatusCodes:

    @pytest.mark.parametrize(
        "exc, status_code",
        [
            (ValidationError(), 400),
            (AuthError(), 401),
            (NotFoundError(resource="cut"), 404),
            (StorageError(), 500),
            (DatabaseError(), 500),
        ],
    )
    def test_status_code(self, exc, status_code):
        assert exc.status_code == status_code

    def test_not_found_message(self):
        assert NotFoundError(resource="cut", resource_id="7").message == "Cut not found"


class TestContext:

    def test_validation_error_copies_context(self):
        shared = {"content_type": "text/plain"}

        exc = ValidationError(field="image", context=shared)

        assert exc.context == {"content_type": "text/plain", "field": "image"}
        assert shared == {"content_type": "text/plain"}

    def test_auth_error_copies_context(self):
        shared = {"path": "/cuts"}

        exc = AuthError(reason=AuthError.MISSING_HEADER, context=shared)

        assert exc.context["reason"] == AuthError.MISSING_HEADER
        assert shared == {"path": "/cuts"}

    def test_not_found_copies_context(self):
        shared = {}

        NotFoundError(resource="cut", resource_id="3", context=shared)

        assert shared == {}
