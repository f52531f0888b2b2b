"""MCP server exposing the dictionary sync as tools."""

import logging
import uuid
from typing import Optional

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError as PydanticValidationError

from cdsync.commands import COMMAND_ID, COMMAND_NAME
from cdsync.config import config
from cdsync.exceptions import CDSyncError
from cdsync.models.schema import SyncOutcome, SyncResult
from cdsync.observability import metrics
from cdsync.services.sync_service import SYNC_OPERATION, DictionarySyncService
from cdsync.storage.external_file import StaticFilePicker

logger = logging.getLogger(__name__)

SYNC_TOOL_NAME = f"cdsync_{COMMAND_ID}"


def format_sync_result(result: SyncResult) -> str:
    """Render a SyncResult as a short human-readable report."""
    if result.outcome == SyncOutcome.NOTE_MISSING:
        return "\n".join(result.notices)
    if result.outcome == SyncOutcome.CANCELLED:
        return "Sync cancelled: no word list selected."
    return (
        f"Synced {result.merged_entries} entries.\n"
        f"- Added to note: {result.added_to_note}\n"
        f"- Added to word list: {result.added_to_external}\n"
        f"- Note: {result.note_path}\n"
        f"- Word list: {result.download_path}"
    )


class CDSyncMcpServer:
    """MCP server for CDSync."""

    def __init__(self, sync_service: Optional[DictionarySyncService] = None):
        """Initialize the MCP server.

        Args:
            sync_service: Pre-built service. When None, one is built from
                the global config.
        """
        self.mcp = FastMCP(config.server_name)
        self.sync_service = sync_service or DictionarySyncService.from_config(config)
        self._register_tools()
        logger.info(f"CDSync MCP server initialized (v{config.server_version})")

    def format_error_response(self, error: Exception) -> str:
        """Format an error response in a consistent way.

        Args:
            error: The exception that occurred

        Returns:
            Formatted error message with appropriate level of detail
        """
        # Unique error ID for traceability in logs
        error_id = str(uuid.uuid4())[:8]

        if isinstance(error, CDSyncError):
            logger.error(
                f"[{error.code.name}] [{error_id}]: {error.message}",
                extra={"error_details": error.details},
            )
            return f"Error: {error.message}"
        elif isinstance(error, (ValueError, PydanticValidationError)):
            logger.error(f"Validation error [{error_id}]: {str(error)}")
            return f"Error: Invalid input (ref: {error_id})"
        elif isinstance(error, (IOError, OSError)):
            # Don't expose paths or detailed error messages
            logger.error(f"File system error [{error_id}]: {str(error)}", exc_info=True)
            return f"Error: A file system error occurred (ref: {error_id})"
        else:
            logger.error(f"Unexpected error [{error_id}]: {str(error)}", exc_info=True)
            return f"Error: An unexpected error occurred (ref: {error_id})"

    def _register_tools(self) -> None:
        """Register MCP tools."""

        @self.mcp.tool(name=SYNC_TOOL_NAME, description=COMMAND_NAME)
        def cdsync_sync(external_path: Optional[str] = None) -> str:
            """Sync Custom Dictionary.

            Merges the vault's dictionary note with a local word list and
            writes the result back to the note and to the download folder.

            Args:
                external_path: Path of the word list to merge. Leave empty to cancel.
            """
            try:
                picker = StaticFilePicker(external_path)
                result = self.sync_service.sync(picker)
                return format_sync_result(result)
            except Exception as e:
                return self.format_error_response(e)

        @self.mcp.tool(name="cdsync_get_settings")
        def cdsync_get_settings() -> str:
            """Show the plugin settings."""
            settings = self.sync_service.settings
            state = "on" if settings.to_lower_case else "off"
            return f"To Lower Case: {state}"

        @self.mcp.tool(name="cdsync_status")
        def cdsync_status() -> str:
            """Show server uptime and how past syncs went."""
            summary = metrics.get_summary()
            output = "## Server Metrics\n"
            output += f"**Uptime:** {summary['uptime_seconds']:.0f} seconds\n"
            output += f"**Operations:** {summary['total_operations']}\n"
            output += (
                f"**Success Rate:** {summary['overall_success_rate']:.1%}\n"
            )
            output += f"**Errors:** {summary['total_errors']}\n"

            sync = metrics.get_metrics().get(SYNC_OPERATION)
            if not sync:
                output += "\nNo syncs run yet.\n"
                return output

            output += "\n## Dictionary Syncs\n"
            output += f"**Runs:** {sync['count']} ({sync['error_count']} failed)\n"
            output += f"**Average:** {sync['avg_duration_ms']:.1f} ms\n"
            output += f"**Slowest:** {sync['max_duration_ms']:.1f} ms\n"
            if sync["last_error"]:
                output += (
                    f"**Last Error:** {sync['last_error']} "
                    f"({sync['last_error_time']})\n"
                )
            return output

        @self.mcp.tool(name="cdsync_set_lower_case")
        def cdsync_set_lower_case(enabled: bool) -> str:
            """Turn lower-case folding of first-letter-capped words on or off.

            Args:
                enabled: True to fold "Word" to "word" while merging
            """
            try:
                settings = self.sync_service.update_settings(to_lower_case=enabled)
                state = "on" if settings.to_lower_case else "off"
                return f"To Lower Case set to {state}"
            except Exception as e:
                return self.format_error_response(e)

    def run(self) -> None:
        """Run the MCP server over stdio."""
        self.mcp.run()
