"""
CDSync - keeps a vault's custom dictionary note and a spell-checker word list in step.

The sync operation merges the "Custom Dictionary" note of a note vault with a
user-selected local word list into a deduplicated union and writes the result
back to both places.

This version uses synchronous operations.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cdsync")
except PackageNotFoundError:
    __version__ = "0.3.0"
