"""Tests for the command line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from pypogoplug.native import (
    ApiError,
    ConfigError,
    Device,
    FileType,
    PogoFile,
    Service,
    User,
)
from pypogoplug.run import app

runner = CliRunner()


@pytest.fixture
def api() -> MagicMock:
    """Patch client creation and return the mock client."""
    mock_client = MagicMock()
    with patch(
        "pypogoplug.run.PogoplugClient.from_config", return_value=mock_client
    ) as from_config:
        mock_client.from_config = from_config
        yield mock_client


class TestCommands:
    """Tests for the CLI commands."""

    def test_config_option(self, api: MagicMock) -> None:
        """Test that --config is passed to the client."""
        api.get_user.return_value = User(user_id="u1")

        result = runner.invoke(app, ["--config", "/tmp/pogo.yaml", "user"])

        assert result.exit_code == 0
        api.from_config.assert_called_once_with("/tmp/pogo.yaml")

    def test_user(self, api: MagicMock) -> None:
        """Test printing the account user."""
        api.get_user.return_value = User(
            user_id="u1", screen_name="dave", email="d@x.y"
        )

        result = runner.invoke(app, ["user"])

        assert result.exit_code == 0
        assert "u1\tdave\td@x.y" in result.output

    def test_devices(self, api: MagicMock) -> None:
        """Test listing devices and their services."""
        api.list_devices.return_value = [
            Device(
                device_id="d1",
                name="Pogoplug",
                version="3.2.0",
                services=[
                    Service(
                        device_id="d1",
                        service_id="s1",
                        name="USB Drive",
                        space="1536/2048",
                    )
                ],
            )
        ]

        result = runner.invoke(app, ["devices"])

        assert result.exit_code == 0
        assert "d1\tPogoplug\t3.2.0" in result.output
        assert "s1\tUSB Drive\t1.5 KB / 2 KB" in result.output

    def test_services(self, api: MagicMock) -> None:
        """Test listing shared services of a device."""
        api.list_services.return_value = [
            Service(device_id="d1", service_id="s1", name="Cloud", online=True)
        ]

        result = runner.invoke(app, ["services", "--device-id", "d1", "--shared"])

        assert result.exit_code == 0
        api.list_services.assert_called_once_with(device_id="d1", shared=True)
        assert "d1\ts1\tCloud\tonline" in result.output

    def test_ls(self, api: MagicMock) -> None:
        """Test listing a directory."""
        api.list_files.return_value = [
            PogoFile(file_id="f1", name="photos", type=FileType.DIRECTORY),
            PogoFile(file_id="f2", name="a.txt", size=1536),
        ]

        result = runner.invoke(
            app, ["ls", "d1", "s1", "--parent-id", "root", "--sort", "+name"]
        )

        assert result.exit_code == 0
        api.list_files.assert_called_once_with(
            "d1",
            "s1",
            space_id=None,
            parent_id="root",
            page_offset=None,
            max_count=None,
            sort_crit="+name",
        )
        assert "f1\t0 Bytes\tphotos/" in result.output
        assert "f2\t1.5 KB\ta.txt" in result.output

    def test_search(self, api: MagicMock) -> None:
        """Test searching a service."""
        api.search_files.return_value = [PogoFile(file_id="f2", name="a.txt")]

        result = runner.invoke(app, ["search", "a.txt", "d1", "s1"])

        assert result.exit_code == 0
        api.search_files.assert_called_once_with(
            "a.txt", "d1", "s1", page_offset=None, max_count=None, sort_crit=None
        )

    def test_stat_by_path(self, api: MagicMock) -> None:
        """Test looking up a file by path."""
        api.get_file.return_value = PogoFile(file_id="f2", name="a.txt")

        result = runner.invoke(app, ["stat", "d1", "s1", "--path", "/a.txt"])

        assert result.exit_code == 0
        api.get_file.assert_called_once_with("d1", "s1", file_id=None, path="/a.txt")

    def test_mkdir(self, api: MagicMock) -> None:
        """Test creating a directory."""
        api.create_file.return_value = PogoFile(file_id="f9", name="new", type=1)

        result = runner.invoke(app, ["mkdir", "d1", "s1", "new"])

        assert result.exit_code == 0
        api.create_file.assert_called_once_with(
            "d1", "s1", "new", FileType.DIRECTORY, parent_id=None
        )
        assert "f9" in result.output

    def test_create_invalid_type(self, api: MagicMock) -> None:
        """Test that an unknown file type is rejected."""
        result = runner.invoke(app, ["create", "d1", "s1", "x", "--file-type", "7"])

        assert result.exit_code == 1
        api.create_file.assert_not_called()

    def test_rm(self, api: MagicMock) -> None:
        """Test removing a file."""
        result = runner.invoke(app, ["rm", "d1", "s1", "f1"])

        assert result.exit_code == 0
        api.remove_file.assert_called_once_with("d1", "s1", "f1")

    def test_demo_writes_file(self, api: MagicMock, tmp_path: Path) -> None:
        """Test writing the demo page to a file."""
        api.list_devices.return_value = []
        api.list_files.return_value = [PogoFile(file_id="f1", name="a.txt")]
        output = tmp_path / "index.html"

        result = runner.invoke(app, ["demo", "d1", "s1", "--output", str(output)])

        assert result.exit_code == 0
        assert "<td>a.txt</td>" in output.read_text()


class TestErrors:
    """Tests for CLI error reporting."""

    def test_api_error_exit_code(self, api: MagicMock) -> None:
        """Test that API errors exit with status 1."""
        api.list_devices.side_effect = ApiError(
            801, url="http://x/json/listDevices", method="listDevices"
        )

        result = runner.invoke(app, ["devices"])

        assert result.exit_code == 1
        assert "The referenced device does not exist" in result.output

    def test_config_error_exit_code(self) -> None:
        """Test that a broken config file exits with status 1."""
        with patch(
            "pypogoplug.run.PogoplugClient.from_config",
            side_effect=ConfigError("Failed to parse config file"),
        ):
            result = runner.invoke(app, ["devices"])

        assert result.exit_code == 1
        assert "Failed to parse config file" in result.output
