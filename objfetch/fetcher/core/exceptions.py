"""
Custom exceptions for the object fetcher.
"""


from typing import Optional

from .types import FetchErrorType


class FetcherException(Exception):
    """Base exception for all fetcher-related errors."""

    error_type: Optional[FetchErrorType] = None


class NonRetryableException(FetcherException):
    """Exception for failures that re-queuing the same unit cannot fix."""

    pass


class ParameterError(NonRetryableException):
    """A fetch parameter evaluated to an unusable value."""

    error_type = FetchErrorType.PARAMETER_ERROR

    def __init__(self, message: str, parameter: Optional[str] = None, value: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class ByteRangeError(NonRetryableException):
    """Range end lies before range start."""

    error_type = FetchErrorType.RANGE_ERROR

    def __init__(self, start: int, end: int):
        super().__init__(f"Start byte index {start} is greater than end byte index {end}")
        self.start = start
        self.end = end


class ConfigurationException(NonRetryableException):
    """Configuration-related errors."""

    pass


class RetrievalError(FetcherException):
    """I/O or client/protocol failure while retrieving an object."""

    error_type = FetchErrorType.RETRIEVAL_ERROR

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
