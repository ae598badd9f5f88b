"""
Mapping of retrieved object metadata to flow unit attributes.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from ...schema.storage import ObjectMetadata
from ..core.types import (
    ATTR_ABSOLUTE_PATH,
    ATTR_BUCKET,
    ATTR_ETAG,
    ATTR_EXPIRATION_RULE_ID,
    ATTR_EXPIRATION_TIME,
    ATTR_FILENAME,
    ATTR_HASH_ALGORITHM,
    ATTR_HASH_VALUE,
    ATTR_MIME_TYPE,
    ATTR_PATH,
    ATTR_VERSION,
    HASH_ALGORITHM_MD5,
)


def epoch_millis(value: datetime) -> int:
    """Milliseconds since the epoch; naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def content_disposition_attributes(disposition: str) -> Dict[str, str]:
    """
    Split a content disposition into path attributes.

    ``a/b/c.txt`` gives path ``a/b``, absolute path ``a/b/c.txt`` and filename
    ``c.txt``. A value without a slash, or ending in one, is used as the
    filename unchanged.
    """
    last_slash = disposition.rfind("/")
    if -1 < last_slash < len(disposition) - 1:
        return {
            ATTR_PATH: disposition[:last_slash],
            ATTR_ABSOLUTE_PATH: disposition,
            ATTR_FILENAME: disposition[last_slash + 1 :],
        }
    return {ATTR_FILENAME: disposition}


def build_attributes(bucket: Optional[str], metadata: ObjectMetadata) -> Dict[str, str]:
    """
    Attributes for a successful retrieval.

    Only fields present in ``metadata`` produce attributes. User metadata is
    applied after the fixed fields and may replace them; the version is
    applied last.
    """
    attributes: Dict[str, str] = {}

    if bucket:
        attributes[ATTR_BUCKET] = bucket

    if metadata.content_disposition is not None:
        attributes.update(content_disposition_attributes(metadata.content_disposition))

    if metadata.content_md5 is not None:
        attributes[ATTR_HASH_VALUE] = metadata.content_md5
        attributes[ATTR_HASH_ALGORITHM] = HASH_ALGORITHM_MD5

    if metadata.content_type is not None:
        attributes[ATTR_MIME_TYPE] = metadata.content_type

    if metadata.etag is not None:
        attributes[ATTR_ETAG] = metadata.etag

    if metadata.expiration_time is not None:
        attributes[ATTR_EXPIRATION_TIME] = str(epoch_millis(metadata.expiration_time))

    if metadata.expiration_rule_id is not None:
        attributes[ATTR_EXPIRATION_RULE_ID] = metadata.expiration_rule_id

    if metadata.user_metadata:
        attributes.update(metadata.user_metadata)

    if metadata.version_id is not None:
        attributes[ATTR_VERSION] = metadata.version_id

    return attributes


def transit_uri(bucket: str, key: str) -> str:
    """Source URI recorded in the receive event"""
    return f"http://{bucket}.amazonaws.com/{key}"
