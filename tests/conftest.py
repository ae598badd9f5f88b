"""Shared fixtures: in-memory object store and a wired fetcher."""

from typing import Dict, Iterator, List, Optional

import pytest

from objfetch.fetcher.config.settings import FetcherSettings
from objfetch.fetcher.core.exceptions import RetrievalError
from objfetch.fetcher.host.expressions import AttributeExpressionEvaluator
from objfetch.fetcher.host.memory import InMemoryRouter, InMemoryUnitSource, RecordingAuditSink
from objfetch.fetcher.processor.get_object import ObjectFetcher
from objfetch.fetcher.utils.logging import setup_fetcher_logger
from objfetch.schema.flow import FlowUnit
from objfetch.schema.storage import GetObjectRequest, ObjectMetadata


class FakeRemoteObject:
    def __init__(self, bucket: str, content: bytes, metadata: ObjectMetadata, fail_after: Optional[int] = None):
        self.bucket = bucket
        self.metadata = metadata
        self._content = content
        self._fail_after = fail_after
        self.close_count = 0

    def iter_content(self, chunk_size: int) -> Iterator[bytes]:
        for offset in range(0, len(self._content), chunk_size):
            if self._fail_after is not None and offset >= self._fail_after:
                raise OSError("connection reset by peer")
            yield self._content[offset : offset + chunk_size]

    def close(self) -> None:
        self.close_count += 1

    def __enter__(self) -> "FakeRemoteObject":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FakeObjectStore:
    """Serves objects from a dict keyed by (bucket, key); honors byte ranges."""

    def __init__(self) -> None:
        self.objects: Dict[tuple, bytes] = {}
        self.metadata: Dict[tuple, ObjectMetadata] = {}
        self.requests: List[GetObjectRequest] = []
        self.handles: List[FakeRemoteObject] = []
        self.error: Optional[Exception] = None
        self.fail_after: Optional[int] = None

    def put(self, bucket: str, key: str, content: bytes, metadata: Optional[ObjectMetadata] = None) -> None:
        self.objects[(bucket, key)] = content
        self.metadata[(bucket, key)] = metadata or ObjectMetadata()

    def get_object(self, request: GetObjectRequest) -> FakeRemoteObject:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        address = (request.bucket, request.key)
        if address not in self.objects:
            raise RetrievalError("S3 GetObject failed: NoSuchKey", error_code="NoSuchKey")

        content = self.objects[address]
        if request.byte_range is not None:
            content = content[request.byte_range.start : request.byte_range.end + 1]

        handle = FakeRemoteObject(request.bucket, content, self.metadata[address], fail_after=self.fail_after)
        self.handles.append(handle)
        return handle


class FetcherHarness:
    def __init__(self, settings: FetcherSettings, store: FakeObjectStore):
        self.settings = settings
        self.store = store
        self.source = InMemoryUnitSource()
        self.router = InMemoryRouter()
        self.audit = RecordingAuditSink()
        self.fetcher = ObjectFetcher(
            settings=settings,
            store=store,
            source=self.source,
            evaluator=AttributeExpressionEvaluator(),
            router=self.router,
            audit=self.audit,
            processor_id="test-fetcher",
        )

    def run(self, unit: FlowUnit):
        self.source.offer(unit)
        return self.fetcher.on_trigger()


@pytest.fixture(scope="session", autouse=True)
def structured_logging():
    # Route structlog through stdlib logging so stdout stays clean
    setup_fetcher_logger("tests", level="DEBUG")


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def make_harness(store):
    def _make(**settings_kwargs) -> FetcherHarness:
        settings_kwargs.setdefault("bucket", "${bucket}")
        settings_kwargs.setdefault("key", "${filename}")
        settings_kwargs.setdefault("chunk_size", 1024)
        return FetcherHarness(FetcherSettings(**settings_kwargs), store)

    return _make
