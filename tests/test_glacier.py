"""Tests for the Glacier adapter."""

import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from vaultrestore.errors import (
    InvalidParameter,
    MissingParameter,
    OtherRemoteError,
    PermanentError,
    ResourceNotFound,
    ServiceUnavailable,
    TransientError,
)
from vaultrestore.schemas import JobStatus, RestoreTier
from vaultrestore.vault.glacier import GlacierVault, classify_client_error


def client_error(code, message="boom", operation="ListJobs"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def job_description(job_id, archive_id="A1", status="Succeeded"):
    return {
        "JobId": job_id,
        "Action": "ArchiveRetrieval",
        "ArchiveId": archive_id,
        "StatusCode": status,
        "Completed": status != "InProgress",
        "CreationDate": "2021-03-01T08:00:00.000Z",
        "JobDescription": f"{archive_id}.bin",
        "ArchiveSizeInBytes": 42,
        "Tier": "Bulk",
    }


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def glacier(client):
    return GlacierVault("photos", account_id="123456789012", region="us-east-1", client=client)


class TestClassifyClientError:
    """Tests for ClientError -> taxonomy mapping."""

    @pytest.mark.parametrize("code, expected", [
        ("ResourceNotFoundException", ResourceNotFound),
        ("InvalidParameterValueException", InvalidParameter),
        ("MissingParameterValueException", MissingParameter),
        ("ServiceUnavailableException", ServiceUnavailable),
        ("ThrottlingException", ServiceUnavailable),
        ("AccessDeniedException", OtherRemoteError),
    ])
    def test_maps_codes(self, code, expected):
        error = classify_client_error(client_error(code, "msg"), "ListJobs")
        assert type(error) is expected
        assert error.code == code
        assert error.operation == "ListJobs"
        assert str(error) == "msg"

    def test_service_unavailable_is_transient(self):
        error = classify_client_error(client_error("ServiceUnavailableException"))
        assert isinstance(error, TransientError)

    def test_not_found_is_permanent(self):
        error = classify_client_error(client_error("ResourceNotFoundException"))
        assert isinstance(error, PermanentError)

    def test_missing_credentials_is_permanent(self):
        error = classify_client_error(NoCredentialsError())
        assert isinstance(error, OtherRemoteError)

    def test_connection_error_is_transient(self):
        error = classify_client_error(EndpointConnectionError(endpoint_url="https://glacier"))
        assert isinstance(error, ServiceUnavailable)


class TestListJobs:
    """Tests for GlacierVault.list_jobs."""

    def test_passes_filters_and_parses_jobs(self, glacier, client):
        paginator = client.get_paginator.return_value
        paginator.paginate.return_value = iter([
            {"JobList": [job_description("J1"), job_description("J2", "A2")]},
        ])

        jobs = glacier.list_jobs(completed=True, status_code=JobStatus.SUCCEEDED)

        client.get_paginator.assert_called_once_with("list_jobs")
        paginator.paginate.assert_called_once_with(
            accountId="123456789012",
            vaultName="photos",
            completed="true",
            statuscode="Succeeded",
        )
        assert [j.job_id for j in jobs] == ["J1", "J2"]
        assert jobs[0].archive_size_bytes == 42
        assert jobs[0].is_archive_retrieval

    def test_in_progress_filter_has_no_statuscode(self, glacier, client):
        paginator = client.get_paginator.return_value
        paginator.paginate.return_value = iter([])

        glacier.list_jobs(completed=False)

        kwargs = paginator.paginate.call_args.kwargs
        assert kwargs["completed"] == "false"
        assert "statuscode" not in kwargs

    def test_stops_paginating_after_cap(self, glacier, client):
        served = []

        def pages(**kwargs):
            for n in range(3):
                served.append(n)
                yield {"JobList": [job_description(f"J{n}-{i}", f"A{n}{i}") for i in range(5)]}

        client.get_paginator.return_value.paginate.side_effect = pages

        jobs = glacier.list_jobs(completed=True, max_count=0)

        assert len(jobs) == 5
        assert served == [0]

    def test_client_error_is_translated(self, glacier, client):
        client.get_paginator.return_value.paginate.side_effect = client_error(
            "ResourceNotFoundException", "Vault not found"
        )
        with pytest.raises(ResourceNotFound, match="Vault not found") as exc_info:
            glacier.list_jobs(completed=True)
        assert exc_info.value.operation == "ListJobs"


class TestInitiateRetrievalJob:
    def test_sends_archive_retrieval_parameters(self, glacier, client):
        client.initiate_job.return_value = {"jobId": "NEWJOB", "location": "/x"}

        job_id = glacier.initiate_retrieval_job("A1", "docs/readme.txt", RestoreTier.EXPEDITED)

        assert job_id == "NEWJOB"
        client.initiate_job.assert_called_once_with(
            accountId="123456789012",
            vaultName="photos",
            jobParameters={
                "Type": "archive-retrieval",
                "ArchiveId": "A1",
                "Description": "docs/readme.txt",
                "Tier": "Expedited",
            },
        )

    def test_error_is_translated(self, glacier, client):
        client.initiate_job.side_effect = client_error(
            "InvalidParameterValueException", operation="InitiateJob"
        )
        with pytest.raises(InvalidParameter):
            glacier.initiate_retrieval_job("A1", "x", RestoreTier.BULK)


class TestGetJobOutput:
    def test_reads_and_closes_body(self, glacier, client):
        body = MagicMock()
        body.read.return_value = b"content"
        client.get_job_output.return_value = {"body": body, "archiveDescription": '{"path":"x"}'}

        output = glacier.get_job_output("J1")

        assert output.body == b"content"
        assert output.description == '{"path":"x"}'
        body.close.assert_called_once()
        client.get_job_output.assert_called_once_with(
            accountId="123456789012", vaultName="photos", jobId="J1"
        )

    def test_missing_description_is_empty(self, glacier, client):
        client.get_job_output.return_value = {"body": io.BytesIO(b"x")}
        assert glacier.get_job_output("J1").description == ""

    def test_error_is_translated(self, glacier, client):
        client.get_job_output.side_effect = client_error(
            "ServiceUnavailableException", operation="GetJobOutput"
        )
        with pytest.raises(ServiceUnavailable):
            glacier.get_job_output("J1")


def test_default_account_id():
    vault = GlacierVault("photos", account_id="", client=MagicMock())
    assert vault.account_id == "-"
