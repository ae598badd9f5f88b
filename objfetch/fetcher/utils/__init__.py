"""
Utility modules for the object fetcher.
"""

from .logging import FetcherLoggerAdapter, get_fetcher_logger, setup_fetcher_logger

__all__ = ["FetcherLoggerAdapter", "get_fetcher_logger", "setup_fetcher_logger"]
