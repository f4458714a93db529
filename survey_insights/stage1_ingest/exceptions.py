"""
Custom exceptions for the workbook reader
"""


class ParseError(Exception):
    """Base exception for unreadable or unusable workbooks"""
    pass


class InvalidFileFormatError(ParseError):
    """Raised when the uploaded file is not an Excel workbook"""
    pass


class SheetReadError(ParseError):
    """Raised when the first sheet cannot be read"""
    pass


class EmptyWorkbookError(ParseError):
    """Raised when the first sheet has a header but no data rows"""
    pass
