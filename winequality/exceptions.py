"""
Pipeline Errors
===============

Error taxonomy for the wine quality pipeline. Every error is fatal to the run.
"""

from typing import Optional


class WineQualityError(ValueError):
    """Base class for all pipeline errors."""


class ParseError(WineQualityError):
    """A data row could not be read as a wine record."""

    def __init__(self, row_index: Optional[int], reason: str, file_path: Optional[str] = None):
        self.row_index = row_index
        self.reason = reason
        self.file_path = file_path

        location = f"row {row_index}" if row_index is not None else "unknown row"
        if file_path:
            location = f"{file_path}, {location}"
        super().__init__(f"Malformed input ({location}): {reason}")


class InsufficientDataError(WineQualityError):
    """Training was requested with no rows."""


class EmptyInputError(WineQualityError):
    """Evaluation or prediction was requested with no rows."""
