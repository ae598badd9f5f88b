"""
Object fetcher for flow-based pipelines.

Retrieves a single S3 object per flow unit, replaces the unit's payload with
the object content, and maps the object metadata to unit attributes.
"""

from .config.settings import FetcherSettings, load_settings
from .processor.get_object import FetchOutcome, ObjectFetcher
from .storage.s3_client import S3ObjectStore
from .utils.logging import setup_fetcher_logger

__all__ = [
    "FetcherSettings",
    "load_settings",
    "ObjectFetcher",
    "FetchOutcome",
    "S3ObjectStore",
    "setup_fetcher_logger",
]
