"""
Custom exceptions for the LLM client
"""

from typing import Optional


class LLMError(Exception):
    """Base exception for completion backend failures"""
    pass


class TransportError(LLMError):
    """Raised on network errors and non-2xx responses"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(LLMError):
    """Raised when the response body lacks choices[0].message.content"""
    pass
