"""
Object fetch processor.

- ObjectFetcher: polls a unit, retrieves its object and routes it
- resolve_parameters: evaluates bucket, key, version and byte range for a unit
- build_attributes: maps object metadata to unit attributes
"""

from .attributes import build_attributes, content_disposition_attributes, transit_uri
from .get_object import FetchOutcome, ObjectFetcher
from .parameters import FetchParameters, parse_range_bound, resolve_parameters

__all__ = [
    "ObjectFetcher",
    "FetchOutcome",
    "FetchParameters",
    "resolve_parameters",
    "parse_range_bound",
    "build_attributes",
    "content_disposition_attributes",
    "transit_uri",
]
