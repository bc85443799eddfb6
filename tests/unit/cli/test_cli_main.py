"""Tests for the command line entry point."""

import json
from unittest.mock import MagicMock, patch

import pytest

from cloudstack_client.cli.main import build_parser, main
from cloudstack_client.database.json_profile_store import JSONProfileStore
from cloudstack_client.exceptions import CatalogError
from cloudstack_client.models.results import ErrorResult, SuccessResult


@pytest.fixture
def fake_session():
    session = MagicMock()
    session.__enter__.return_value = session
    return session


@pytest.mark.unit
class TestParser:
    """Test argument parsing."""

    def test_wait_and_no_wait_are_exclusive(self):
        """--wait and --no-wait cannot be combined."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["call", "x", "--wait", "3", "--no-wait"])

    def test_call_arguments(self):
        """name=value pairs are collected."""
        args = build_parser().parse_args(["-p", "prod", "call", "listZones", "available=true"])
        assert args.profile == "prod"
        assert args.args == ["available=true"]


@pytest.mark.unit
class TestProfileCommands:
    """Test profile management from the command line."""

    def test_add_and_remove(self, profiles_file):
        """profile add stores a profile, profile remove deletes it."""
        code = main([
            "--profiles-file", profiles_file,
            "profile", "add", "prod",
            "--server", "cloud.example.com",
            "--api-key", "K",
            "--secret-key", "S",
            "--use-ssl",
        ])
        assert code == 0
        stored = JSONProfileStore(profiles_file).get_profile("prod")
        assert stored.use_ssl is True

        assert main(["--profiles-file", profiles_file, "profile", "remove", "prod"]) == 0
        assert JSONProfileStore(profiles_file).list_profiles() == []

    def test_remove_unknown(self, profiles_file):
        """Removing an unknown profile exits non-zero."""
        assert main(["--profiles-file", profiles_file, "profile", "remove", "ghost"]) == 2


@pytest.mark.unit
class TestCallCommand:
    """Test the call action."""

    def test_call_prints_result(self, profiles_file, fake_session, capsys):
        """A successful call prints the items as JSON and exits 0."""
        fake_session.call.return_value = SuccessResult(items=({"id": "z1", "name": "zone1"},))

        with patch("cloudstack_client.cli.main.CloudStackSession.open", return_value=fake_session):
            code = main(["--profiles-file", profiles_file, "call", "listZones", "available=true", "--wait", "5"])

        assert code == 0
        fake_session.call.assert_called_once_with("listZones", {"available": "true"}, wait=5, no_wait=False)
        output = json.loads(capsys.readouterr().out)
        assert output["items"] == [{"id": "z1", "name": "zone1"}]

    def test_call_error_exit_code(self, profiles_file, fake_session, capsys):
        """An error result exits 1."""
        fake_session.call.return_value = ErrorResult(code="431", message="bad")

        with patch("cloudstack_client.cli.main.CloudStackSession.open", return_value=fake_session):
            code = main(["--profiles-file", profiles_file, "call", "listZones"])

        assert code == 1
        assert json.loads(capsys.readouterr().out)["errorcode"] == "431"

    def test_catalog_error_exit_code(self, profiles_file, fake_session):
        """A catalog failure exits 2."""
        fake_session.load_catalog.side_effect = CatalogError("Catalog discovery failed")

        with patch("cloudstack_client.cli.main.CloudStackSession.open", return_value=fake_session):
            assert main(["--profiles-file", profiles_file, "call", "listZones"]) == 2

    def test_missing_profile_exit_code(self, profiles_file):
        """No resolvable profile exits 2."""
        assert main(["--profiles-file", profiles_file, "-p", "ghost", "call", "listZones"]) == 2

    def test_json_data_arguments(self, profiles_file, fake_session):
        """--data arguments are merged with name=value pairs."""
        fake_session.call.return_value = SuccessResult()

        with patch("cloudstack_client.cli.main.CloudStackSession.open", return_value=fake_session):
            main([
                "--profiles-file", profiles_file,
                "call", "deployVirtualMachine", "zoneid=z",
                "--data", '{"details": {"cpuNumber": 2}}',
                "--no-wait",
            ])

        fake_session.call.assert_called_once_with(
            "deployVirtualMachine", {"details": {"cpuNumber": 2}, "zoneid": "z"}, wait=None, no_wait=True
        )
