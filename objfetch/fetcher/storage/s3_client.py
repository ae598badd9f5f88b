"""
S3 object store for the object fetcher.

Issues GetObject requests through boto3 and exposes the response as a
closeable handle with the body stream and normalized metadata.
"""

import logging
import re
import threading
from email.utils import parsedate_to_datetime
from types import TracebackType
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Type

import boto3
import botocore.session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...schema.storage import GetObjectRequest, ObjectMetadata
from ..config.settings import FetcherSettings
from ..core.exceptions import RetrievalError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import GetObjectOutputTypeDef

logger = logging.getLogger(__name__)

_EXPIRY_DATE_RE = re.compile(r'expiry-date="([^"]+)"')
_RULE_ID_RE = re.compile(r'rule-id="([^"]+)"')


def parse_expiration(header: Optional[str]) -> Dict[str, Any]:
    """
    Split an ``x-amz-expiration`` header into expiry time and rule id.

    Args:
        header: Raw header value, e.g. ``expiry-date="Fri, 23 Dec 2012 00:00:00 GMT", rule-id="archive"``

    Returns:
        Dict with ``expiration_time`` and ``expiration_rule_id`` for the parts present
    """
    result: Dict[str, Any] = {}
    if not header:
        return result

    date_match = _EXPIRY_DATE_RE.search(header)
    if date_match:
        try:
            result["expiration_time"] = parsedate_to_datetime(date_match.group(1))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unparseable expiry date in expiration header: {header}")

    rule_match = _RULE_ID_RE.search(header)
    if rule_match:
        result["expiration_rule_id"] = rule_match.group(1)

    return result


def metadata_from_response(response: "GetObjectOutputTypeDef") -> ObjectMetadata:
    """Build ObjectMetadata from a boto3 ``get_object`` response"""
    headers: Dict[str, str] = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
    user_metadata = response.get("Metadata")

    return ObjectMetadata(
        content_disposition=response.get("ContentDisposition"),
        # boto3 does not surface Content-MD5 on GetObject, only as a raw header
        content_md5=headers.get("content-md5"),
        content_type=response.get("ContentType"),
        etag=response.get("ETag"),
        user_metadata=dict(user_metadata) if user_metadata else None,
        version_id=response.get("VersionId"),
        **parse_expiration(response.get("Expiration")),
    )


class S3RemoteObject:
    """Handle on one GetObject response; closes the body stream on exit."""

    def __init__(self, bucket: str, key: str, body: Any, metadata: ObjectMetadata):
        self.bucket = bucket
        self.key = key
        self.metadata = metadata
        self._body = body
        self._closed = False

    def iter_content(self, chunk_size: int) -> Iterator[bytes]:
        try:
            for chunk in self._body.iter_chunks(chunk_size=chunk_size):
                yield chunk
        except (BotoCoreError, OSError) as e:
            logger.error(f"Failed reading body of s3://{self.bucket}/{self.key}: {e}")
            raise RetrievalError(f"Failed to read object content: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._body.close()
        except (BotoCoreError, OSError) as e:
            logger.warning(f"Error closing body of s3://{self.bucket}/{self.key}: {e}")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "S3RemoteObject":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


class S3ObjectStore:
    """
    boto3-backed object store.

    The client is created on first use and shared between threads; boto3
    clients are thread-safe once constructed.
    """

    def __init__(self, settings: FetcherSettings, client: Optional["S3Client"] = None):
        self.settings = settings
        self._client = client
        self._client_lock = threading.Lock()

    def _create_client(self) -> "S3Client":
        config = Config(
            region_name=self.settings.region,
            connect_timeout=self.settings.timeout,
            read_timeout=self.settings.timeout,
        )
        client_kwargs: Dict[str, Any] = {"config": config}
        if self.settings.endpoint_url:
            client_kwargs["endpoint_url"] = self.settings.endpoint_url

        if self.settings.credentials_file is not None:
            core_session = botocore.session.Session()
            core_session.set_config_variable("credentials_file", str(self.settings.credentials_file))
            session = boto3.session.Session(botocore_session=core_session, region_name=self.settings.region)
        elif self.settings.access_key and self.settings.secret_key:
            session = boto3.session.Session(
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
            )
        else:
            session = boto3.session.Session(region_name=self.settings.region)

        client = session.client("s3", **client_kwargs)  # type: ignore
        logger.debug(
            "Created S3 client",
            extra={"region": self.settings.region, "endpoint_url": self.settings.endpoint_url},
        )
        return client

    def _ensure_client(self) -> "S3Client":
        """Ensure S3 client is initialized"""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = self._create_client()
        return self._client

    def get_object(self, request: GetObjectRequest) -> S3RemoteObject:
        """
        Issue a GetObject request.

        Args:
            request: Addressed request (bucket, key, optional version and range)

        Returns:
            S3RemoteObject that must be closed by the caller

        Raises:
            RetrievalError: If the request fails
        """
        params: Dict[str, Any] = {"Bucket": request.bucket, "Key": request.key}
        if request.version_id is not None:
            params["VersionId"] = request.version_id
        if request.byte_range is not None:
            params["Range"] = request.byte_range.to_header()

        try:
            response = self._ensure_client().get_object(**params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"S3 GetObject failed with error {error_code}: {e}")
            raise RetrievalError(f"S3 GetObject failed: {error_code}", error_code=error_code) from e
        except BotoCoreError as e:
            logger.error(f"S3 GetObject failed for s3://{request.bucket}/{request.key}: {e}")
            raise RetrievalError(f"S3 GetObject failed: {e}") from e

        body = response["Body"]
        try:
            metadata = metadata_from_response(response)
        except ValueError as e:
            body.close()
            raise RetrievalError(f"Malformed S3 response metadata: {e}") from e

        return S3RemoteObject(request.bucket, request.key, body, metadata)
