"""Tests for vaultrestore error classes."""

import pytest

from vaultrestore.errors import (
    ConfigError,
    InvalidVaultReference,
    MalformedArchiveDescription,
    MalformedInventory,
    PermanentError,
    RemoteServiceError,
    ResourceNotFound,
    RestoreWriteError,
    ServiceUnavailable,
    TransientError,
    UnsafeRestorePath,
    VaultRestoreError,
    describe_error,
    is_transient,
)


class TestErrorHierarchy:
    """Tests for the error taxonomy."""

    @pytest.mark.parametrize("error_cls", [
        ConfigError,
        MalformedInventory,
        InvalidVaultReference,
        RestoreWriteError,
        UnsafeRestorePath,
        ResourceNotFound,
    ])
    def test_permanent_errors(self, error_cls):
        assert issubclass(error_cls, PermanentError)
        assert issubclass(error_cls, VaultRestoreError)
        assert not issubclass(error_cls, TransientError)

    def test_service_unavailable_is_transient_remote_error(self):
        assert issubclass(ServiceUnavailable, TransientError)
        assert issubclass(ServiceUnavailable, RemoteServiceError)

    def test_remote_error_carries_code(self):
        error = ResourceNotFound("no vault", code="ResourceNotFoundException", operation="ListJobs")
        assert error.code == "ResourceNotFoundException"
        assert error.operation == "ListJobs"
        assert str(error) == "no vault"

    def test_malformed_description_message(self):
        error = MalformedArchiveDescription("A9", "Expecting value")
        assert error.archive_id == "A9"
        assert str(error) == "Cannot parse description of archive A9: Expecting value"


class TestDescribeError:
    def test_prefixes_code(self):
        error = ServiceUnavailable("slow down", code="ThrottlingException")
        assert describe_error(error) == "ThrottlingException: slow down"

    def test_plain_error(self):
        assert describe_error(ValueError("boom")) == "boom"

    def test_is_transient(self):
        assert is_transient(ServiceUnavailable("x"))
        assert not is_transient(ConfigError("x"))
