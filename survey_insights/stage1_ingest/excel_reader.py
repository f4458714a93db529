"""
Workbook Reader - Stage 1 of the survey pipeline
Simple extraction: survey export workbook → list of row records

Philosophy:
- Read ONLY the first sheet; its first row is the header
- Every cell comes back as a display string, empty cells as ''
- No filtering here: column selection happens in Stage 2
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Optional, Union

import pandas as pd

from .config import ALLOWED_EXTENSIONS, SHEET_INDEX, NO_ANSWER_SENTINELS
from .exceptions import (
    InvalidFileFormatError,
    SheetReadError,
    EmptyWorkbookError
)

logger = logging.getLogger(__name__)

WorkbookSource = Union[str, Path, bytes, BinaryIO]


def is_no_answer(value, sentinels: Iterable[str] = NO_ANSWER_SENTINELS) -> bool:
    """
    Check whether a cell value counts as "no answer"

    Args:
        value: Cell value (string, number or None)
        sentinels: Literal markers that mean the respondent skipped the question

    Returns:
        True for None, blank strings and sentinel markers (case-insensitive)
    """
    if value is None:
        return True

    text = str(value).strip()
    if text == '':
        return True

    folded = text.casefold()
    return any(folded == str(s).strip().casefold() for s in sentinels)


class WorkbookReader:
    """
    Reads a survey export workbook into row records

    Each record maps column name → display string, in sheet order.
    """

    def __init__(self, source: WorkbookSource, filename: Optional[str] = None):
        """
        Initialize reader with a workbook

        Args:
            source: Path to the workbook, its raw bytes, or a binary file object
            filename: Original filename (required for bytes/file objects so the
                extension can be checked)

        Raises:
            InvalidFileFormatError: If the file is not .xlsx/.xls
        """
        if isinstance(source, (str, Path)):
            self.filename = filename or Path(source).name
            self.source = Path(source)
        else:
            self.filename = filename or ''
            self.source = io.BytesIO(source) if isinstance(source, bytes) else source

        suffix = Path(self.filename).suffix.lower()
        if suffix not in ALLOWED_EXTENSIONS:
            raise InvalidFileFormatError(
                f"File must be Excel format ({', '.join(ALLOWED_EXTENSIONS)}): {self.filename or '<unnamed>'}"
            )

        self.columns: List[str] = []

    def read(self) -> List[Dict[str, str]]:
        """
        Read the first sheet into row records

        Returns:
            List of dicts mapping column name to cell display string

        Raises:
            SheetReadError: If the workbook cannot be parsed
            EmptyWorkbookError: If the sheet has no data rows
        """
        logger.info(f"Reading workbook: {self.filename}")

        try:
            # dtype=str keeps cells as displayed (no float coercion of IDs)
            df = pd.read_excel(
                self.source,
                sheet_name=SHEET_INDEX,
                header=0,
                dtype=str,
                na_filter=True,
                keep_default_na=False,
                na_values=['']
            )
        except Exception as e:
            raise SheetReadError(f"Failed to read workbook '{self.filename}': {str(e)}")

        df = df.fillna('')
        df.columns = [str(col).strip() for col in df.columns]

        # Drop rows where every cell is blank (trailing formatting rows)
        if not df.empty:
            df = df[~df.apply(lambda row: all(str(val).strip() == '' for val in row), axis=1)]
            df = df.reset_index(drop=True)

        if df.empty:
            raise EmptyWorkbookError(f"Workbook '{self.filename}' has no data rows")

        self.columns = list(df.columns)
        rows = df.to_dict(orient='records')

        logger.info(f"Read {len(rows)} rows, {len(self.columns)} columns")
        logger.debug(f"Columns: {self.columns}")

        return rows


def read_workbook(source: WorkbookSource, filename: Optional[str] = None) -> List[Dict[str, str]]:
    """Convenience wrapper: read the first sheet of a workbook into row records"""
    return WorkbookReader(source, filename=filename).read()
