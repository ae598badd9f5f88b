"""
Storage components for the object fetcher.

Provides the boto3-backed object store used to retrieve objects from S3.
"""

from .s3_client import S3ObjectStore, S3RemoteObject, metadata_from_response, parse_expiration

__all__ = [
    "S3ObjectStore",
    "S3RemoteObject",
    "metadata_from_response",
    "parse_expiration",
]
