"""Word-list parsing and merging for the custom dictionary.

A dictionary is a flat, newline-delimited list of words or phrases. Two
sources are merged: the vault's dictionary note (source A) and an external
spell-checker word list (source B). The result is an insertion-ordered,
duplicate-free union.

Source A lines are trimmed; source B lines are taken verbatim apart from
dropping blank lines and checksum lines. The asymmetry is kept on purpose
until someone confirms that external lines should be trimmed as well.

Case is preserved ("Banana" and "banana" stay distinct) unless a caller asks
for first-letter folding explicitly.
"""
from typing import Iterable, List

# Spell-checker word lists end with a line such as "checksum_v1 = 0a1b..."
CHECKSUM_PREFIX = "checksum"


def parse_note_entries(text: str) -> List[str]:
    """Parse the dictionary note into trimmed, non-empty, unique entries."""
    entries = (line.strip() for line in text.split("\n"))
    return list(dict.fromkeys(entry for entry in entries if entry))


def parse_external_entries(text: str) -> List[str]:
    """Parse an external word list, skipping blank and checksum lines.

    Kept lines are not trimmed, so a Windows line ending leaves a trailing
    carriage return on the entry. Whitespace-only lines count as blank.
    """
    return list(dict.fromkeys(
        line for line in text.split("\n")
        if line.strip() and not line.startswith(CHECKSUM_PREFIX)
    ))


def checksum_lines(text: str) -> List[str]:
    """Return the checksum lines of an external word list."""
    return [line for line in text.split("\n") if line.startswith(CHECKSUM_PREFIX)]


def fold_capitalized(entry: str) -> str:
    """Lower-case a word whose only capital is its first letter.

    Examples:
        "Banana" -> "banana"
        "NASA" -> "NASA"
        "McDonald" -> "McDonald"
        "I" -> "I"
    """
    if entry[:1].isupper() and entry[1:].islower():
        return entry.lower()
    return entry


def merge_entries(
    note_text: str,
    external_text: str,
    lower_case: bool = False,
) -> List[str]:
    """Union the entries of both sources.

    Note entries come first, followed by external entries not already
    present. Checksum lines from the external list never reach the result,
    even when the note holds the same line.

    Args:
        note_text: Content of the dictionary note
        external_text: Content of the external word list
        lower_case: Fold first-letter-capitalised words to lower case

    Returns:
        Ordered list of unique entries
    """
    entries = parse_note_entries(note_text) + parse_external_entries(external_text)
    if lower_case:
        entries = [fold_capitalized(entry) for entry in entries]
    merged = dict.fromkeys(entries)
    for line in checksum_lines(external_text):
        merged.pop(line, None)
    return list(merged)


def serialize_entries(entries: Iterable[str]) -> str:
    """Join entries into newline-delimited text without a trailing newline."""
    return "\n".join(entries)


def merge_dictionaries(
    note_text: str,
    external_text: str,
    lower_case: bool = False,
) -> str:
    """Merge both sources and return the text written back to each of them."""
    return serialize_entries(merge_entries(note_text, external_text, lower_case))
