"""
Stage 1: Ingest
Reads the first sheet of a survey export into an ordered list of row records
"""

from .excel_reader import WorkbookReader, read_workbook, is_no_answer
from .exceptions import (
    ParseError,
    InvalidFileFormatError,
    SheetReadError,
    EmptyWorkbookError
)

__all__ = [
    'WorkbookReader',
    'read_workbook',
    'is_no_answer',
    'ParseError',
    'InvalidFileFormatError',
    'SheetReadError',
    'EmptyWorkbookError'
]
