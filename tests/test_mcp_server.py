# tests/test_mcp_server.py
"""Tests for the MCP server implementation."""
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cdsync.exceptions import ExternalFileReadError, SyncInProgressError
from cdsync.commands import COMMAND_ID, COMMAND_NAME
from cdsync.models.schema import PluginSettings, SyncOutcome, SyncResult
from cdsync.observability import metrics
from cdsync.server.mcp_server import (
    SYNC_TOOL_NAME,
    CDSyncMcpServer,
    format_sync_result,
)


class TestMcpServer:
    """Tests for the CDSyncMcpServer class."""

    def setup_method(self):
        """Set up test environment before each test."""
        self.registered_tools = {}
        self.tool_descriptions = {}

        self.mock_mcp = MagicMock()

        # Capture registered tool functions BEFORE server creation
        def mock_tool_decorator(*args, **kwargs):
            def tool_wrapper(func):
                name = kwargs.get('name')
                self.registered_tools[name] = func
                self.tool_descriptions[name] = kwargs.get('description')
                return func
            return tool_wrapper
        self.mock_mcp.tool = mock_tool_decorator

        self.mock_service = MagicMock()
        self.mock_service.settings = PluginSettings()

        self.mcp_patcher = patch('cdsync.server.mcp_server.FastMCP', return_value=self.mock_mcp)
        self.mcp_patcher.start()

        self.server = CDSyncMcpServer(sync_service=self.mock_service)

    def teardown_method(self):
        """Clean up after each test."""
        self.mcp_patcher.stop()

    def test_tools_registered(self):
        assert SYNC_TOOL_NAME == "cdsync_sync"
        assert set(self.registered_tools) == {
            "cdsync_sync",
            "cdsync_get_settings",
            "cdsync_status",
            "cdsync_set_lower_case",
        }
        assert self.tool_descriptions["cdsync_sync"] == "Sync Custom Dictionary"

    def test_sync_tool_named_after_command(self):
        assert (COMMAND_ID, COMMAND_NAME) == ("sync", "Sync Custom Dictionary")
        assert SYNC_TOOL_NAME == f"cdsync_{COMMAND_ID}"
        assert self.tool_descriptions[SYNC_TOOL_NAME] == COMMAND_NAME

    def test_sync_tool_completed(self):
        self.mock_service.sync.return_value = SyncResult(
            outcome=SyncOutcome.COMPLETED,
            merged_entries=4,
            added_to_note=2,
            added_to_external=1,
            note_path=Path("/vault/Custom Dictionary.md"),
            download_path=Path("/downloads/Custom Dictionary.txt"),
        )

        result = self.registered_tools["cdsync_sync"](external_path="/tmp/words.txt")

        assert "Synced 4 entries" in result
        assert "Added to note: 2" in result
        picker = self.mock_service.sync.call_args[0][0]
        assert picker.pick().path == Path("/tmp/words.txt")

    def test_sync_tool_without_path_cancels(self):
        self.mock_service.sync.return_value = SyncResult(outcome=SyncOutcome.CANCELLED)

        result = self.registered_tools["cdsync_sync"]()

        assert "cancelled" in result
        picker = self.mock_service.sync.call_args[0][0]
        assert picker.pick().cancelled

    def test_sync_tool_note_missing_returns_notice(self):
        self.mock_service.sync.return_value = SyncResult(
            outcome=SyncOutcome.NOTE_MISSING,
            notices=['Failed to read note "Custom Dictionary"'],
        )
        result = self.registered_tools["cdsync_sync"](external_path="/tmp/words.txt")
        assert result == 'Failed to read note "Custom Dictionary"'

    def test_sync_tool_read_error(self):
        self.mock_service.sync.side_effect = ExternalFileReadError(
            "No such file or directory", path="/tmp/words.txt"
        )
        result = self.registered_tools["cdsync_sync"](external_path="/tmp/words.txt")
        assert result == "Error: Error reading file: No such file or directory"

    def test_sync_tool_busy(self):
        self.mock_service.sync.side_effect = SyncInProgressError()
        result = self.registered_tools["cdsync_sync"](external_path="/tmp/words.txt")
        assert result == "Error: A dictionary sync is already in progress"

    def test_get_settings_tool(self):
        assert self.registered_tools["cdsync_get_settings"]() == "To Lower Case: on"

    def test_set_lower_case_tool(self):
        self.mock_service.update_settings.return_value = PluginSettings(to_lower_case=False)
        result = self.registered_tools["cdsync_set_lower_case"](enabled=False)
        assert result == "To Lower Case set to off"
        self.mock_service.update_settings.assert_called_once_with(to_lower_case=False)

    def test_status_before_any_sync(self):
        result = self.registered_tools["cdsync_status"]()
        assert "## Server Metrics" in result
        assert "**Operations:** 0" in result
        assert "No syncs run yet." in result

    def test_status_reports_sync_runs(self):
        metrics.record_operation("sync_dictionary", 12.0, True)
        metrics.record_operation("sync_dictionary", 40.0, False, error="Error reading file: denied")

        result = self.registered_tools["cdsync_status"]()

        assert "**Operations:** 2" in result
        assert "**Success Rate:** 50.0%" in result
        assert "**Errors:** 1" in result
        assert "**Runs:** 2 (1 failed)" in result
        assert "**Average:** 26.0 ms" in result
        assert "**Slowest:** 40.0 ms" in result
        assert "**Last Error:** Error reading file: denied" in result


class TestFormatErrorResponse:
    """Tests for error formatting at the tool boundary."""

    @pytest.fixture
    def server(self):
        with patch('cdsync.server.mcp_server.FastMCP'):
            yield CDSyncMcpServer(sync_service=MagicMock())

    def test_value_error_hides_details(self, server):
        result = server.format_error_response(ValueError("secret detail"))
        assert "secret detail" not in result
        assert result.startswith("Error: Invalid input (ref: ")

    def test_os_error_hides_path(self, server):
        result = server.format_error_response(OSError("/home/me/private"))
        assert "/home/me" not in result
        assert "file system error" in result

    def test_unexpected_error(self, server):
        result = server.format_error_response(RuntimeError("boom"))
        assert "unexpected error" in result


def test_format_sync_result_completed():
    text = format_sync_result(
        SyncResult(outcome=SyncOutcome.COMPLETED, merged_entries=1)
    )
    assert text.startswith("Synced 1 entries.")
