"""Tests for the inventory model."""

import io
import json

import pytest

from conftest import VAULT_ARN, inventory_document
from vaultrestore.errors import (
    InvalidVaultReference,
    MalformedArchiveDescription,
    MalformedInventory,
)
from vaultrestore.inventory import load, parse_description, process, summarize
from vaultrestore.schemas import Archive, Inventory, VaultReference


class TestVaultReference:
    """Tests for VaultReference.parse."""

    def test_parse_valid_arn(self):
        ref = VaultReference.parse(VAULT_ARN)
        assert ref.account_id == "123456789012"
        assert ref.vault_name == "photos"
        assert ref.region == "us-east-1"
        assert ref.service == "glacier"

    def test_str_round_trips(self):
        assert str(VaultReference.parse(VAULT_ARN)) == VAULT_ARN

    @pytest.mark.parametrize("arn", [
        "not-an-arn",
        "arn:aws:glacier:us-east-1",
        "arn:aws:glacier:us-east-1::vaults/photos",
        "arn:aws:glacier:us-east-1:123456789012:",
    ])
    def test_parse_invalid_arn_raises(self, arn):
        with pytest.raises(InvalidVaultReference):
            VaultReference.parse(arn)

    def test_parse_non_string_raises(self):
        with pytest.raises(InvalidVaultReference):
            VaultReference.parse(None)


class TestParseDescription:
    """Tests for per-archive description parsing."""

    def test_extracts_path(self):
        archive = Archive("A1", description='{"path": "docs/readme.txt"}')
        assert parse_description(archive) == "docs/readme.txt"

    def test_missing_path_is_empty(self):
        archive = Archive("A1", description='{"other": 1}')
        assert parse_description(archive) == ""

    def test_invalid_json_raises_with_archive_id(self):
        archive = Archive("A1", description="uploaded by hand")
        with pytest.raises(MalformedArchiveDescription) as exc_info:
            parse_description(archive)
        assert exc_info.value.archive_id == "A1"
        assert "A1" in str(exc_info.value)

    def test_non_object_json_raises(self):
        archive = Archive("A1", description='["docs/readme.txt"]')
        with pytest.raises(MalformedArchiveDescription):
            parse_description(archive)

    @pytest.mark.parametrize("path", ["0", "false", "[\"a.txt\"]", "{\"name\": \"a.txt\"}"])
    def test_non_string_path_raises(self, path):
        archive = Archive("A1", description=f'{{"path": {path}}}')
        with pytest.raises(MalformedArchiveDescription, match="must be a string"):
            parse_description(archive)

    def test_null_path_is_empty(self):
        archive = Archive("A1", description='{"path": null}')
        assert parse_description(archive) == ""

    def test_malformed_description_is_malformed_inventory(self):
        assert issubclass(MalformedArchiveDescription, MalformedInventory)


class TestProcess:
    """Tests for process (fail-fast)."""

    def test_sets_logical_paths(self):
        inventory = Inventory(VAULT_ARN, archives=[
            Archive("A1", description='{"path": "a.txt"}'),
            Archive("A2", description='{"path": "b/c.txt"}'),
        ])
        process(inventory)
        assert [a.logical_path for a in inventory.archives] == ["a.txt", "b/c.txt"]

    def test_first_bad_description_aborts(self):
        inventory = Inventory(VAULT_ARN, archives=[
            Archive("A1", description='{"path": "a.txt"}'),
            Archive("A2", description="garbage"),
            Archive("A3", description='{"path": "c.txt"}'),
        ])
        with pytest.raises(MalformedArchiveDescription) as exc_info:
            process(inventory)
        assert exc_info.value.archive_id == "A2"
        assert inventory.archives[0].logical_path == "a.txt"
        assert inventory.archives[2].logical_path == ""


class TestLoad:
    """Tests for load."""

    def test_load_from_path(self, write_inventory):
        path = write_inventory([("A1", '{"path":"docs/readme.txt"}')])
        inventory = load(path)
        assert inventory.vault_arn == VAULT_ARN
        assert len(inventory) == 1
        archive = inventory.archives[0]
        assert archive.archive_id == "A1"
        assert archive.logical_path == "docs/readme.txt"
        assert archive.size_bytes == 1024
        assert archive.sha256_tree_hash == "abc123"

    def test_load_from_stream(self):
        stream = io.StringIO(json.dumps(inventory_document([("A1", '{"path":"x"}')])))
        inventory = load(stream)
        assert inventory.archives[0].logical_path == "x"

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "inv.json"
        path.write_text("{ not json")
        with pytest.raises(MalformedInventory, match="not valid JSON"):
            load(path)

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "inv.json"
        path.write_text("[]")
        with pytest.raises(MalformedInventory):
            load(path)

    def test_missing_vault_arn_raises(self, tmp_path):
        path = tmp_path / "inv.json"
        path.write_text(json.dumps({"ArchiveList": []}))
        with pytest.raises(MalformedInventory, match="VaultARN"):
            load(path)

    def test_bad_vault_arn_raises(self, write_inventory):
        path = write_inventory([("A1", '{"path":"x"}')], vault_arn="bogus")
        with pytest.raises(InvalidVaultReference):
            load(path)

    def test_bad_description_aborts_load(self, write_inventory):
        path = write_inventory([("A1", '{"path":"x"}'), ("A2", "not json")])
        with pytest.raises(MalformedArchiveDescription):
            load(path)

    @pytest.mark.parametrize("description", [5, {"path": "x"}, ["x"]])
    def test_non_string_description_raises(self, write_inventory, description):
        path = write_inventory([("A1", description)])
        with pytest.raises(MalformedArchiveDescription) as exc_info:
            load(path)
        assert exc_info.value.archive_id == "A1"
        assert "must be a string" in str(exc_info.value)

    def test_empty_archive_list(self, write_inventory):
        inventory = load(write_inventory([]))
        assert len(inventory) == 0


class TestSummarize:
    def test_counts_and_sizes(self, write_inventory):
        inventory = load(write_inventory([
            ("A1", '{"path":"a"}'),
            ("A2", '{}'),
        ]))
        summary = summarize(inventory)
        assert summary["vault_name"] == "photos"
        assert summary["account_id"] == "123456789012"
        assert summary["archive_count"] == 2
        assert summary["total_size_bytes"] == 2048
        assert summary["archives_without_path"] == 1
