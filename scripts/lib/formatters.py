"""
Input and output formatters for eligibility reports.

This module loads the registration sheet export and writes the JSON
report with stable 4-space indentation.
"""

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, List, Optional, TextIO

from .models import EligibilityRecord, SheetData, TrackedCollections


class InputError(Exception):
    """Exception raised for an unreadable or malformed input sheet."""

    pass


def load_sheet(path: str) -> SheetData:
    """
    Load and validate the registration sheet.

    Args:
        path: Path of the sheet JSON export

    Returns:
        SheetData with at least one data row

    Raises:
        InputError: If the file cannot be read or parsed, or has no data rows
    """
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except OSError as e:
        raise InputError(f"Error reading file: {e}") from e
    except ValueError as e:
        raise InputError(f"Error parsing JSON: {e}") from e

    try:
        sheet = SheetData.from_json(payload)
    except ValueError as e:
        raise InputError(f"Error parsing JSON: {e}") from e

    if len(sheet.values) < 2:
        raise InputError("No data found in the sheet")

    return sheet


def records_to_output(
    records: List[EligibilityRecord],
    output_format: str = "full",
    tracked: Optional[TrackedCollections] = None,
) -> List[Any]:
    """Convert records to the JSON document for an output format."""
    return [record.to_output(output_format, tracked) for record in records]


def write_json_to_stream(document: Any, stream: TextIO) -> None:
    json.dump(document, stream, indent=4)
    stream.write("\n")


def write_report(
    records: List[EligibilityRecord],
    output_path: Optional[str] = None,
    output_format: str = "full",
    tracked: Optional[TrackedCollections] = None,
) -> Optional[str]:
    """
    Write eligible records as JSON to a file or stdout.

    The file is written to a temporary sibling and moved into place, so
    the output path never holds a partial report.

    Args:
        records: Eligible records in scan order
        output_path: Destination path. If None, writes to stdout.
        output_format: One of models.OUTPUT_FORMATS
        tracked: Collection order for collection names

    Returns:
        The output path, or None when written to stdout
    """
    document = records_to_output(records, output_format, tracked)

    if output_path is None:
        write_json_to_stream(document, sys.stdout)
        return None

    path = Path(output_path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            write_json_to_stream(document, f)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    return str(path)
