"""
Collaborator interfaces for the object fetcher.

The host pipeline and the object store are injected so the fetch logic can
run against in-memory fakes as well as the real services.
"""

from __future__ import annotations

from types import TracebackType
from typing import Iterator, Optional, Protocol, Type, runtime_checkable

from ...schema.flow import Channel, FlowUnit
from ...schema.storage import GetObjectRequest, ObjectMetadata


@runtime_checkable
class UnitSource(Protocol):
    """Inbound queue of flow units."""

    def poll(self) -> Optional[FlowUnit]:
        """Return the next unit without blocking, or None when the queue is empty."""
        ...


@runtime_checkable
class ExpressionEvaluator(Protocol):
    def evaluate(self, expression: Optional[str], unit: FlowUnit) -> Optional[str]:
        """Evaluate an attribute expression against ``unit``.

        Returns None when ``expression`` is None (property not configured).
        """
        ...


@runtime_checkable
class Router(Protocol):
    def transfer(self, unit: FlowUnit, channel: Channel) -> None: ...


@runtime_checkable
class AuditSink(Protocol):
    """Receiver of provenance events."""

    def receive(self, unit: FlowUnit, transit_uri: str, transfer_millis: int) -> None: ...


@runtime_checkable
class RemoteObject(Protocol):
    """Handle on a retrieved object.

    Must be closed exactly once; use it as a context manager.
    """

    bucket: str
    metadata: ObjectMetadata

    def iter_content(self, chunk_size: int) -> Iterator[bytes]:
        """Yield the object body. Raises RetrievalError on I/O failure."""
        ...

    def close(self) -> None: ...

    def __enter__(self) -> RemoteObject: ...

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None: ...


@runtime_checkable
class ObjectStore(Protocol):
    def get_object(self, request: GetObjectRequest) -> RemoteObject:
        """Issue one GET. Raises RetrievalError on client or I/O failure."""
        ...


__all__ = [
    "UnitSource",
    "ExpressionEvaluator",
    "Router",
    "AuditSink",
    "RemoteObject",
    "ObjectStore",
]
