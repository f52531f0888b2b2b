"""Command identity shared by every trigger surface."""

# Fixed identifier and display name of the sync command
COMMAND_ID = "sync"
COMMAND_NAME = "Sync Custom Dictionary"
