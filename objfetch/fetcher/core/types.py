"""
Core types for the object fetcher.
"""

from __future__ import annotations

from enum import Enum

from ...schema.storage import MAX_RANGE_END


class RangeMode(str, Enum):
    """When a byte range is attached to the outgoing request"""

    EXPLICIT = "explicit"  # only when a range start or end is configured
    ALWAYS = "always"  # whenever range parsing completed, defaults included


class FetchErrorType(str, Enum):
    """Types of fetch errors"""

    PARAMETER_ERROR = "parameter_error"
    RANGE_ERROR = "range_error"
    RETRIEVAL_ERROR = "retrieval_error"


# Attribute names written on success
ATTR_BUCKET = "s3.bucket"
ATTR_ETAG = "s3.etag"
ATTR_EXPIRATION_TIME = "s3.expirationTime"
ATTR_EXPIRATION_RULE_ID = "s3.expirationTimeRuleId"
ATTR_VERSION = "s3.version"
ATTR_FILENAME = "filename"
ATTR_PATH = "path"
ATTR_ABSOLUTE_PATH = "absolute.path"
ATTR_MIME_TYPE = "mime.type"
ATTR_HASH_VALUE = "hash.value"
ATTR_HASH_ALGORITHM = "hash.algorithm"

HASH_ALGORITHM_MD5 = "MD5"

__all__ = [
    "MAX_RANGE_END",
    "RangeMode",
    "FetchErrorType",
    "ATTR_BUCKET",
    "ATTR_ETAG",
    "ATTR_EXPIRATION_TIME",
    "ATTR_EXPIRATION_RULE_ID",
    "ATTR_VERSION",
    "ATTR_FILENAME",
    "ATTR_PATH",
    "ATTR_ABSOLUTE_PATH",
    "ATTR_MIME_TYPE",
    "ATTR_HASH_VALUE",
    "ATTR_HASH_ALGORITHM",
    "HASH_ALGORITHM_MD5",
]
