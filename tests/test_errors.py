"""Unit tests for flatdocs.engine.errors — error hierarchy and serialization."""

import json

import pytest

from flatdocs.engine.errors import (
    AlreadyExistsError,
    AuthRequiredError,
    ConfigError,
    FlatDocsError,
    InvalidCredentialsError,
    InvalidNameError,
    NotFoundError,
    StorageError,
    UnsupportedExtensionError,
    ValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [
            NotFoundError,
            AlreadyExistsError,
            InvalidNameError,
            UnsupportedExtensionError,
            ValidationError,
            AuthRequiredError,
            InvalidCredentialsError,
            StorageError,
            ConfigError,
        ],
    )
    def test_all_derive_from_base(self, cls):
        assert issubclass(cls, FlatDocsError)

    def test_unsupported_extension_is_invalid_name(self):
        assert issubclass(UnsupportedExtensionError, InvalidNameError)


class TestFlatDocsError:
    def test_message_and_context(self):
        err = NotFoundError("about.md does not exist.", object_ref="about.md")
        assert str(err) == "about.md does not exist."
        assert err.message == "about.md does not exist."
        assert err.object_ref == "about.md"
        assert err.error_type == "NotFoundError"

    def test_to_dict(self):
        err = AlreadyExistsError("x exists", object_ref="x.txt", version=3)
        d = err.to_dict()
        assert d["error_type"] == "AlreadyExistsError"
        assert d["object_ref"] == "x.txt"
        assert d["context"] == {"version": "3"}
        assert "timestamp" in d

    def test_to_json(self):
        err = ValidationError("bad", field="username")
        data = json.loads(err.to_json())
        assert data["field"] == "username"
        assert data["message"] == "bad"

    def test_repr(self):
        err = NotFoundError("missing", object_ref="a.md")
        assert repr(err) == "NotFoundError: missing | object_ref=a.md"


class TestSubclassAttributes:
    def test_unsupported_extension(self):
        err = UnsupportedExtensionError("bad ext", name="a.exe", extension="exe")
        assert err.name == "a.exe"
        assert err.extension == "exe"

    def test_storage_error_keeps_cause(self):
        cause = OSError("disk full")
        err = StorageError("write failed", operation="write", path="/x", cause=cause)
        assert err.cause is cause
        assert err.operation == "write"
        assert err.to_dict()["context"]["cause"] == "disk full"

    def test_invalid_credentials_username(self):
        err = InvalidCredentialsError("Invalid Credentials!", username="john")
        assert err.username == "john"
