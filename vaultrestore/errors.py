"""
Error classes for vaultrestore.

These error types classify failures at the run boundary:
- TransientError: A later re-run may succeed (service unavailable, throttling)
- PermanentError: A re-run will fail the same way until an operator fixes
  something (bad config, corrupt inventory, missing vault, unwritable disk)

Nothing in vaultrestore retries. Every error aborts the run; the split only
tells the operator whether simply re-invoking the tool is worth trying.
Re-runs are safe because already-indexed archives and already-restored files
are skipped.
"""


class VaultRestoreError(Exception):
    """Base exception for vaultrestore."""
    pass


class TransientError(VaultRestoreError):
    """
    Transient error - re-running later may succeed.

    Examples:
    - Service temporarily unavailable
    - Request throttled
    - Connection reset / endpoint timeout
    """
    pass


class PermanentError(VaultRestoreError):
    """
    Permanent error - re-running will not help without a fix.

    Examples:
    - Conflicting account id / vault name
    - Malformed inventory snapshot
    - Vault or job not found
    - Restore directory not writable
    """
    pass


class ConfigError(PermanentError):
    """Missing or conflicting run configuration."""
    pass


class MalformedInventory(PermanentError):
    """Inventory snapshot could not be decoded."""
    pass


class MalformedArchiveDescription(MalformedInventory):
    """An archive description is not the expected JSON payload."""

    def __init__(self, archive_id: str, reason: str):
        self.archive_id = archive_id
        self.reason = reason
        super().__init__(f"Cannot parse description of archive {archive_id}: {reason}")


class InvalidVaultReference(PermanentError):
    """Vault ARN could not be split into account id and vault name."""
    pass


class UnsafeRestorePath(PermanentError):
    """A logical path would resolve outside the restore directory."""
    pass


class RestoreWriteError(PermanentError):
    """Creating directories or writing restored content failed."""
    pass


class RemoteServiceError(VaultRestoreError):
    """
    Error returned by the vault service.

    Attributes:
        code: Service error code (e.g. ResourceNotFoundException)
        operation: Remote operation that failed, if known
    """

    def __init__(self, message: str, code: str = "", operation: str = ""):
        self.code = code
        self.operation = operation
        super().__init__(message)


class ResourceNotFound(RemoteServiceError, PermanentError):
    pass


class InvalidParameter(RemoteServiceError, PermanentError):
    pass


class MissingParameter(RemoteServiceError, PermanentError):
    pass


class ServiceUnavailable(RemoteServiceError, TransientError):
    pass


class OtherRemoteError(RemoteServiceError, PermanentError):
    pass


def describe_error(error: BaseException) -> str:
    """
    Render an error for a log line, prefixed by its service code if any.

    Examples:
        >>> describe_error(ResourceNotFound("no vault", code="ResourceNotFoundException"))
        'ResourceNotFoundException: no vault'
        >>> describe_error(ValueError("boom"))
        'boom'
    """
    code = getattr(error, "code", "")
    if code:
        return f"{code}: {error}"
    return str(error)


def is_transient(error: BaseException) -> bool:
    """Return True if a later re-run might succeed."""
    return isinstance(error, TransientError)
