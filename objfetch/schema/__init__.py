from .flow import Channel, FlowUnit
from .storage import MAX_RANGE_END, ByteRange, GetObjectRequest, ObjectMetadata

__all__ = [
    # flow
    "Channel",
    "FlowUnit",
    # storage
    "MAX_RANGE_END",
    "ByteRange",
    "GetObjectRequest",
    "ObjectMetadata",
]
