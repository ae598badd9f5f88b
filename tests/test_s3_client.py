"""Tests for the boto3-backed object store, using botocore's Stubber."""

import io
from datetime import datetime, timezone

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from objfetch.fetcher.config.settings import FetcherSettings
from objfetch.fetcher.core.exceptions import RetrievalError
from objfetch.fetcher.host.expressions import AttributeExpressionEvaluator
from objfetch.fetcher.host.memory import InMemoryRouter, InMemoryUnitSource, RecordingAuditSink
from objfetch.fetcher.processor.get_object import ObjectFetcher
from objfetch.fetcher.storage.s3_client import S3ObjectStore, metadata_from_response, parse_expiration
from objfetch.schema.flow import Channel, FlowUnit
from objfetch.schema.storage import ByteRange, GetObjectRequest


@pytest.fixture
def s3():
    client = boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def settings():
    return FetcherSettings(bucket="data", key="${filename}")


def streaming_body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


def test_get_object_sends_version_and_range(s3, settings):
    client, stubber = s3
    body = streaming_body(b"0123456789")
    stubber.add_response(
        "get_object",
        {"Body": body, "ContentType": "text/plain", "ETag": '"abc"'},
        {"Bucket": "data", "Key": "a.txt", "VersionId": "v1", "Range": "bytes=2-5"},
    )
    store = S3ObjectStore(settings, client=client)
    request = GetObjectRequest(bucket="data", key="a.txt", version_id="v1", byte_range=ByteRange(start=2, end=5))

    with store.get_object(request) as remote:
        content = b"".join(remote.iter_content(1024))
        assert remote.bucket == "data"
        assert remote.metadata.content_type == "text/plain"
        assert remote.metadata.etag == '"abc"'

    assert content == b"0123456789"
    assert remote.closed


def test_get_object_without_optional_params(s3, settings):
    client, stubber = s3
    stubber.add_response("get_object", {"Body": streaming_body(b"x")}, {"Bucket": "data", "Key": "a.txt"})
    store = S3ObjectStore(settings, client=client)

    with store.get_object(GetObjectRequest(bucket="data", key="a.txt")) as remote:
        assert b"".join(remote.iter_content(1024)) == b"x"


def test_open_ended_range_header(s3, settings):
    client, stubber = s3
    stubber.add_response(
        "get_object",
        {"Body": streaming_body(b"")},
        {"Bucket": "data", "Key": "a.txt", "Range": "bytes=100-"},
    )
    store = S3ObjectStore(settings, client=client)

    store.get_object(GetObjectRequest(bucket="data", key="a.txt", byte_range=ByteRange(start=100))).close()


def test_client_error_becomes_retrieval_error(s3, settings):
    client, stubber = s3
    stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    store = S3ObjectStore(settings, client=client)

    with pytest.raises(RetrievalError) as exc_info:
        store.get_object(GetObjectRequest(bucket="data", key="missing.txt"))

    assert exc_info.value.error_code == "NoSuchKey"


def test_metadata_from_response():
    response = {
        "Body": streaming_body(b""),
        "ContentDisposition": "a/b/c.txt",
        "ContentType": "text/plain",
        "ETag": '"etag"',
        "Expiration": 'expiry-date="Fri, 23 Dec 2033 00:00:00 GMT", rule-id="archive-rule"',
        "Metadata": {"owner": "alice"},
        "VersionId": "v9",
        "ResponseMetadata": {"HTTPHeaders": {"content-md5": "abc123"}},
    }

    metadata = metadata_from_response(response)

    assert metadata.content_disposition == "a/b/c.txt"
    assert metadata.content_md5 == "abc123"
    assert metadata.expiration_time == datetime(2033, 12, 23, tzinfo=timezone.utc)
    assert metadata.expiration_rule_id == "archive-rule"
    assert metadata.user_metadata == {"owner": "alice"}
    assert metadata.version_id == "v9"


def test_metadata_from_response_without_user_metadata():
    metadata = metadata_from_response({"Body": streaming_body(b""), "Metadata": {}})

    assert metadata.user_metadata is None
    assert metadata.content_md5 is None


def test_parse_expiration_partial():
    assert parse_expiration(None) == {}
    assert parse_expiration('rule-id="only-rule"') == {"expiration_rule_id": "only-rule"}
    assert parse_expiration('expiry-date="not a date"') == {}


def test_fetcher_against_stubbed_client(s3, settings):
    client, stubber = s3
    body = streaming_body(b"hello world")
    stubber.add_response(
        "get_object",
        {
            "Body": body,
            "ContentType": "text/plain",
            "Metadata": {"owner": "alice"},
            "ResponseMetadata": {"HTTPHeaders": {"content-md5": "XrY7u+Ae7tCTyyK7j1rNww=="}},
        },
        {"Bucket": "data", "Key": "hello.txt"},
    )
    source = InMemoryUnitSource([FlowUnit(attributes={"filename": "hello.txt"})])
    router = InMemoryRouter()
    audit = RecordingAuditSink()
    fetcher = ObjectFetcher(
        settings=settings,
        store=S3ObjectStore(settings, client=client),
        source=source,
        evaluator=AttributeExpressionEvaluator(),
        router=router,
        audit=audit,
    )

    outcome = fetcher.on_trigger()

    assert outcome.channel is Channel.SUCCESS
    assert outcome.unit.content == b"hello world"
    assert outcome.unit.attributes["s3.bucket"] == "data"
    assert outcome.unit.attributes["mime.type"] == "text/plain"
    assert outcome.unit.attributes["hash.value"] == "XrY7u+Ae7tCTyyK7j1rNww=="
    assert outcome.unit.attributes["owner"] == "alice"
    assert audit.events[0].transit_uri == "http://data.amazonaws.com/hello.txt"
    assert body._raw_stream.closed


def test_client_created_once(settings):
    store = S3ObjectStore(settings.model_copy(update={"access_key": "a", "secret_key": "b"}))

    first = store._ensure_client()

    assert store._ensure_client() is first
    assert first.meta.region_name == "us-west-2"
