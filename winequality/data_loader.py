"""
Data Loader Module
==================

Handles CSV ingestion, row validation, and basic data quality checks.

Every input file carries 13 numeric columns in a fixed positional order:
11 physicochemical features, the quality label, and a row identifier.
Column position is authoritative; header names are ignored.

Functions:
    - load_data: Load a CSV file into a validated DataFrame
    - load_records: Load a CSV file into WineRecord objects
    - records_from_frame / records_to_frame: Convert between the two forms
    - validate_data: Check data quality constraints
    - get_data_summary: Generate basic statistics
"""

import io
import re
import logging
from dataclasses import dataclass, astuple
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence, Tuple

import pandas as pd
import numpy as np

from .exceptions import ParseError

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = [
    'fixed_acidity',
    'volatile_acidity',
    'citric_acid',
    'residual_sugar',
    'chlorides',
    'free_sulfur_dioxide',
    'total_sulfur_dioxide',
    'density',
    'ph',
    'sulphates',
    'alcohol',
]
LABEL_COLUMN = 'quality'
ID_COLUMN = 'id'
COLUMN_NAMES = FEATURE_COLUMNS + [LABEL_COLUMN, ID_COLUMN]
N_COLUMNS = len(COLUMN_NAMES)

QUALITY_RANGE = (0.0, 10.0)

ENCODING = "utf-8"
_LINE_RE = re.compile(r"line (\d+)")


@dataclass(frozen=True)
class WineRecord:
    """One input row: 11 features, the quality label and an identifier."""
    fixed_acidity: float
    volatile_acidity: float
    citric_acid: float
    residual_sugar: float
    chlorides: float
    free_sulfur_dioxide: float
    total_sulfur_dioxide: float
    density: float
    ph: float
    sulphates: float
    alcohol: float
    quality: float
    id: float

    def as_row(self) -> Tuple[float, ...]:
        """Return all 13 fields in column order."""
        return astuple(self)


def _row_from_parser_error(error: Exception) -> Optional[int]:
    # pandas reports 1-based line numbers of the text it was given
    match = _LINE_RE.search(str(error))
    if match is None:
        return None
    return int(match.group(1)) - 1


def _read_data_lines(file_path: Path, has_header: bool) -> List[str]:
    """
    Read the data lines of a file, dropping blank lines and the header.

    Line i of the result is data row i.

    Raises:
        ParseError: If a data line is not valid UTF-8 text
    """
    with open(file_path, 'rb') as f:
        raw_lines = [line for line in f.read().splitlines() if line.strip()]

    if has_header:
        raw_lines = raw_lines[1:]

    lines = []
    for row_index, raw_line in enumerate(raw_lines):
        try:
            lines.append(raw_line.decode(ENCODING))
        except UnicodeDecodeError as e:
            raise ParseError(
                row_index, f"invalid {ENCODING} bytes ({e.reason})", str(file_path)
            ) from e
    return lines


def _check_rows(raw: pd.DataFrame, file_path: str) -> pd.DataFrame:
    """
    Validate raw string cells and convert them to floats.

    Args:
        raw: Cells as read from the file (strings, NaN where a row was short)
        file_path: Source file, used in error messages

    Returns:
        Float DataFrame with the canonical column names

    Raises:
        ParseError: On the first row with a wrong column count or a non-numeric value
    """
    body = raw.reindex(columns=range(N_COLUMNS))
    missing = body.isna()

    if raw.shape[1] > N_COLUMNS:
        extra = raw.iloc[:, N_COLUMNS:].notna().any(axis=1)
    else:
        extra = pd.Series(False, index=raw.index)

    numeric = pd.DataFrame(
        {col: pd.to_numeric(body[col], errors='coerce') for col in body.columns},
        index=body.index
    )
    # inf and overflowing literals such as 1e400 count as non-numeric
    infinite = pd.DataFrame(
        np.isinf(numeric.to_numpy(dtype=float)),
        index=numeric.index,
        columns=numeric.columns
    )
    non_numeric = (numeric.isna() | infinite) & ~missing

    bad_rows = missing.any(axis=1) | extra | non_numeric.any(axis=1)
    if bad_rows.any():
        row_index = int(np.flatnonzero(bad_rows.to_numpy())[0])
        if missing.iloc[row_index].any() or extra.iloc[row_index]:
            found = int(raw.iloc[row_index].notna().sum())
            reason = f"expected {N_COLUMNS} columns, found {found}"
        else:
            col = int(np.flatnonzero(non_numeric.iloc[row_index].to_numpy())[0])
            reason = (
                f"non-numeric or non-finite value {body.iat[row_index, col]!r} "
                f"in column {col} ({COLUMN_NAMES[col]})"
            )
        raise ParseError(row_index, reason, file_path)

    numeric = numeric.astype(float)
    numeric.columns = COLUMN_NAMES
    return numeric


def load_data(
    file_path: str,
    delimiter: str = ",",
    has_header: bool = True
) -> pd.DataFrame:
    """
    Load a wine CSV file into a validated DataFrame.

    Args:
        file_path: Path to the CSV file
        delimiter: Field delimiter
        has_header: Whether the first line is a header row to skip

    Returns:
        DataFrame with columns COLUMN_NAMES, one row per data line

    Raises:
        FileNotFoundError: If data file doesn't exist
        ParseError: If a row has the wrong column count or a non-numeric value
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    lines = _read_data_lines(file_path, has_header)

    try:
        raw = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=delimiter,
            header=None,
            dtype=str,
            na_filter=False,
        )
    except pd.errors.EmptyDataError:
        raw = pd.DataFrame(columns=range(N_COLUMNS), dtype=object)
    except pd.errors.ParserError as e:
        raise ParseError(
            _row_from_parser_error(e),
            f"wrong column count ({str(e).strip()})",
            str(file_path)
        ) from e

    df = _check_rows(raw, str(file_path))
    logger.info(f"Loaded data from {file_path}: {df.shape[0]} rows × {df.shape[1]} columns")

    return df


def records_from_frame(df: pd.DataFrame) -> List[WineRecord]:
    """Convert a validated DataFrame into WineRecord objects, in row order."""
    values = df[COLUMN_NAMES].to_numpy(dtype=float)
    return [WineRecord(*(float(v) for v in row)) for row in values]


def records_to_frame(records: Sequence[WineRecord]) -> pd.DataFrame:
    """Convert WineRecord objects back into a DataFrame with COLUMN_NAMES."""
    return pd.DataFrame(
        [record.as_row() for record in records],
        columns=COLUMN_NAMES,
        dtype=float
    )


def load_records(
    file_path: str,
    delimiter: str = ",",
    has_header: bool = True
) -> List[WineRecord]:
    """
    Load a wine CSV file into an ordered list of WineRecord objects.

    Args:
        file_path: Path to the CSV file
        delimiter: Field delimiter
        has_header: Whether the first line is a header row to skip

    Returns:
        One WineRecord per data row (empty when the file has no data rows)
    """
    return records_from_frame(load_data(file_path, delimiter, has_header))


def validate_data(df: pd.DataFrame, strict: bool = True) -> Tuple[bool, Dict[str, Any]]:
    """
    Validate data quality constraints for training and evaluation.

    Checks:
        - No duplicate rows or duplicate identifiers
        - Quality label within the 0-10 scale
        - No extreme outliers (> 4 std) in feature columns

    Args:
        df: DataFrame returned by load_data
        strict: If True, raise errors on validation failure

    Returns:
        Tuple of (is_valid, validation_report)
    """
    report = {
        "total_rows": len(df),
        "total_columns": len(df.columns),
        "column_names": list(df.columns),
        "issues": []
    }

    # Check 1: Duplicate rows
    duplicates = int(df.duplicated().sum())
    if duplicates > 0:
        issue = f"Duplicate rows found: {duplicates}"
        report["issues"].append(issue)
        logger.warning(issue)

    # Check 2: Duplicate identifiers
    duplicate_ids = int(df[ID_COLUMN].duplicated().sum())
    if duplicate_ids > 0:
        issue = f"Duplicate identifiers found: {duplicate_ids}"
        report["issues"].append(issue)
        logger.warning(issue)

    # Check 3: Label range
    low, high = QUALITY_RANGE
    out_of_range = int(((df[LABEL_COLUMN] < low) | (df[LABEL_COLUMN] > high)).sum())
    if out_of_range > 0:
        issue = f"Quality outside [{low:g}, {high:g}]: {out_of_range} rows"
        report["issues"].append(issue)
        logger.warning(issue)

    # Check 4: Outliers
    if len(df) > 1:
        for col in FEATURE_COLUMNS:
            col_std = df[col].std()
            if not col_std:
                continue
            outliers = int(((df[col] - df[col].mean()).abs() > 4 * col_std).sum())
            if outliers > 0:
                issue = f"Column '{col}' has {outliers} potential outliers (>4 std)"
                report["issues"].append(issue)
                logger.warning(issue)

    is_valid = len(report["issues"]) == 0
    report["is_valid"] = is_valid

    if strict and not is_valid:
        raise ValueError(f"Data validation failed: {report['issues']}")

    return is_valid, report


def get_data_summary(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Generate summary statistics for the dataset.

    Args:
        df: DataFrame to summarize

    Returns:
        Dictionary containing summary statistics
    """
    summary = {
        "shape": df.shape,
        "columns": list(df.columns),
        "statistics": {}
    }

    for col in FEATURE_COLUMNS + [LABEL_COLUMN]:
        summary["statistics"][col] = {
            "count": int(df[col].count()),
            "mean": float(df[col].mean()),
            "std": float(df[col].std()),
            "min": float(df[col].min()),
            "50%": float(df[col].quantile(0.50)),
            "max": float(df[col].max()),
        }

    if len(df):
        summary["quality_counts"] = {
            float(k): int(v) for k, v in df[LABEL_COLUMN].value_counts().sort_index().items()
        }

    return summary


def print_data_summary(df: pd.DataFrame) -> None:
    """
    Print a formatted summary of the dataset to console.

    Args:
        df: DataFrame to summarize
    """
    print("\n" + "=" * 60)
    print("DATASET SUMMARY")
    print("=" * 60)
    print(f"Shape: {df.shape[0]} rows × {df.shape[1]} columns")

    if df.empty:
        print("No data rows.")
        print("=" * 60 + "\n")
        return

    print("\nBasic Statistics:")
    print("-" * 40)
    print(df[FEATURE_COLUMNS + [LABEL_COLUMN]].describe().round(4).to_string())

    print("\nQuality Distribution:")
    print("-" * 40)
    for quality, count in df[LABEL_COLUMN].value_counts().sort_index().items():
        print(f"  {quality:g}: {count}")
    print("=" * 60 + "\n")
