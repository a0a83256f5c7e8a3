"""
Glacier adapter - VaultService over the boto3 Glacier client.

This module is the single boundary where vaultrestore talks to AWS.
Authentication, request signing and pagination transport are boto3's job;
this adapter only shapes requests and translates responses and errors.

Error classification:
- ClientError codes map onto the RemoteServiceError subclasses
  (ResourceNotFound, InvalidParameter, MissingParameter, ServiceUnavailable)
- Throttling and request timeouts count as ServiceUnavailable (transient)
- Missing credentials -> OtherRemoteError (permanent)
- Other botocore transport errors -> ServiceUnavailable (transient)
"""

import logging
from typing import Any, Iterator, Optional

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from vaultrestore.errors import (
    InvalidParameter,
    MissingParameter,
    OtherRemoteError,
    RemoteServiceError,
    ResourceNotFound,
    ServiceUnavailable,
)
from vaultrestore.schemas import Job, JobOutput, JobStatus, RestoreTier
from vaultrestore.vault.base import UNBOUNDED, VaultService, collect_pages

logger = logging.getLogger(__name__)

# "-" means the account that owns the credentials
DEFAULT_ACCOUNT_ID = "-"

_ERROR_CODES: dict[str, type[RemoteServiceError]] = {
    "ResourceNotFoundException": ResourceNotFound,
    "InvalidParameterValueException": InvalidParameter,
    "MissingParameterValueException": MissingParameter,
    "ServiceUnavailableException": ServiceUnavailable,
    "RequestTimeoutException": ServiceUnavailable,
    "ThrottlingException": ServiceUnavailable,
    "LimitExceededException": ServiceUnavailable,
}


def classify_client_error(error: Exception, operation: str = "") -> RemoteServiceError:
    """
    Translate a botocore exception into the vaultrestore taxonomy.

    Args:
        error: Exception raised by a boto3 call
        operation: Glacier operation name, for log lines

    Returns:
        RemoteServiceError subclass instance (caller raises it)
    """
    if isinstance(error, ClientError):
        err = error.response.get("Error", {})
        code = err.get("Code") or ""
        message = err.get("Message") or str(error)
        error_cls = _ERROR_CODES.get(code, OtherRemoteError)
        return error_cls(message, code=code, operation=operation)
    if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
        return OtherRemoteError(str(error), code="CredentialsError", operation=operation)
    if isinstance(error, BotoCoreError):
        return ServiceUnavailable(str(error), code=type(error).__name__, operation=operation)
    return OtherRemoteError(str(error), operation=operation)


class GlacierVault(VaultService):
    """
    VaultService for one Glacier vault.

    Args:
        vault_name: Vault to operate on
        account_id: Owning account id ("-" for the caller's account)
        region: AWS region of the vault
        client: Pre-built boto3 Glacier client (built from region if None)
    """

    def __init__(
        self,
        vault_name: str,
        account_id: str = DEFAULT_ACCOUNT_ID,
        region: Optional[str] = None,
        client: Any = None,
    ):
        self.vault_name = vault_name
        self.account_id = account_id or DEFAULT_ACCOUNT_ID
        self.region = region
        if client is None:
            client = boto3.Session(region_name=region).client("glacier")
        self.client = client

    def _vault_params(self) -> dict[str, str]:
        return {"accountId": self.account_id, "vaultName": self.vault_name}

    def _job_pages(self, params: dict[str, Any]) -> Iterator[list[Job]]:
        paginator = self.client.get_paginator("list_jobs")
        for page in paginator.paginate(**params):
            yield [Job.from_dict(j) for j in page.get("JobList", [])]

    def list_jobs(
        self,
        completed: Optional[bool] = None,
        status_code: Optional[JobStatus] = None,
        max_count: int = UNBOUNDED,
    ) -> list[Job]:
        params: dict[str, Any] = self._vault_params()
        if completed is not None:
            params["completed"] = "true" if completed else "false"
        if status_code is not None:
            params["statuscode"] = JobStatus(status_code).value

        logger.debug("Listing jobs for vault %s: %s", self.vault_name, params)
        try:
            return collect_pages(self._job_pages(params), max_count)
        except (ClientError, BotoCoreError) as e:
            raise classify_client_error(e, "ListJobs") from e

    def initiate_retrieval_job(self, archive_id: str, description: str, tier: RestoreTier) -> str:
        job_parameters = {
            "Type": "archive-retrieval",
            "ArchiveId": archive_id,
            "Description": description,
            "Tier": RestoreTier(tier).value,
        }
        try:
            resp = self.client.initiate_job(jobParameters=job_parameters, **self._vault_params())
        except (ClientError, BotoCoreError) as e:
            raise classify_client_error(e, "InitiateJob") from e
        return resp["jobId"]

    def get_job_output(self, job_id: str) -> JobOutput:
        try:
            resp = self.client.get_job_output(jobId=job_id, **self._vault_params())
            body = resp["body"]
            try:
                content = body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise classify_client_error(e, "GetJobOutput") from e

        return JobOutput(
            description=resp.get("archiveDescription") or "",
            body=content,
        )
