"""
Object fetcher: retrieves one S3 object per flow unit.

Each trigger polls one unit, resolves its fetch parameters, issues a single
GetObject, and routes the unit to success (with the object content as its new
payload plus metadata attributes) or to failure (unchanged).
"""

import io
import time
from typing import NamedTuple, Optional
from uuid import uuid4

from ...schema.flow import Channel, FlowUnit
from ..config.settings import FetcherSettings
from ..core.exceptions import ByteRangeError, ParameterError, RetrievalError
from ..core.interfaces import AuditSink, ExpressionEvaluator, ObjectStore, Router, UnitSource
from ..core.types import FetchErrorType
from ..utils.logging import FetcherLoggerAdapter, get_fetcher_logger
from .attributes import build_attributes, transit_uri
from .parameters import FetchParameters, resolve_parameters


class FetchOutcome(NamedTuple):
    """Result of one fetch; ``unit`` is the unit to route to ``channel``"""

    unit: FlowUnit
    channel: Channel
    parameters: Optional[FetchParameters] = None
    error_type: Optional[FetchErrorType] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.channel is Channel.SUCCESS


class ObjectFetcher:
    """
    Retrieves the contents of an S3 object and writes it to the content of a flow unit.

    Holds only static configuration and collaborators; concurrent triggers
    share no mutable state.
    """

    def __init__(
        self,
        settings: FetcherSettings,
        store: ObjectStore,
        source: UnitSource,
        evaluator: ExpressionEvaluator,
        router: Router,
        audit: AuditSink,
        processor_id: Optional[str] = None,
    ):
        self.settings = settings
        self.store = store
        self.source = source
        self.evaluator = evaluator
        self.router = router
        self.audit = audit
        self.processor_id = processor_id or f"fetcher-{uuid4().hex[:8]}"
        self.log = FetcherLoggerAdapter(get_fetcher_logger(__name__), self.processor_id)

    def on_trigger(self) -> Optional[FetchOutcome]:
        """
        Poll one unit and process it.

        Returns:
            The outcome, or None when no unit was available
        """
        unit = self.source.poll()
        if unit is None:
            return None
        return self.process(unit)

    def process(self, unit: FlowUnit) -> FetchOutcome:
        """Fetch, route, and on success emit the receive event"""
        start = time.monotonic()
        outcome = self.fetch(unit)
        self.router.transfer(outcome.unit, outcome.channel)

        if outcome.succeeded and outcome.parameters is not None:
            transfer_millis = int((time.monotonic() - start) * 1000)
            self.log.log_fetch_succeeded(
                unit_id=outcome.unit.uuid,
                bucket=outcome.parameters.bucket,
                key=outcome.parameters.key,
                content_length=outcome.unit.size,
                transfer_millis=transfer_millis,
            )
            self.audit.receive(
                outcome.unit,
                transit_uri(outcome.parameters.bucket, outcome.parameters.key),
                transfer_millis,
            )

        return outcome

    def fetch(self, unit: FlowUnit) -> FetchOutcome:
        """
        Retrieve the object addressed by ``unit``.

        Never raises for parameter or retrieval problems: those produce a
        failure outcome carrying ``unit`` exactly as received.
        """
        try:
            parameters = resolve_parameters(self.settings, self.evaluator, unit)
        except (ParameterError, ByteRangeError) as e:
            return self._failure(unit, e.error_type, str(e))

        request = parameters.to_request()
        buffer = io.BytesIO()
        try:
            with self.store.get_object(request) as remote:
                for chunk in remote.iter_content(self.settings.chunk_size):
                    buffer.write(chunk)
                attributes = build_attributes(remote.bucket, remote.metadata)
        except (RetrievalError, OSError) as e:
            return self._failure(
                unit,
                FetchErrorType.RETRIEVAL_ERROR,
                str(e),
                parameters=parameters,
                error_code=getattr(e, "error_code", None),
            )

        fetched = unit.with_content(buffer.getvalue()).with_attributes(attributes)
        return FetchOutcome(unit=fetched, channel=Channel.SUCCESS, parameters=parameters)

    def _failure(
        self,
        unit: FlowUnit,
        error_type: Optional[FetchErrorType],
        message: str,
        parameters: Optional[FetchParameters] = None,
        error_code: Optional[str] = None,
    ) -> FetchOutcome:
        self.log.log_fetch_failed(
            unit_id=unit.uuid,
            error_type=error_type.value if error_type else "unknown",
            error_message=message,
            bucket=parameters.bucket if parameters else None,
            key=parameters.key if parameters else None,
            version_id=parameters.version_id if parameters else None,
            byte_range=parameters.byte_range.to_header() if parameters and parameters.byte_range else None,
            error_code=error_code,
        )
        return FetchOutcome(
            unit=unit,
            channel=Channel.FAILURE,
            parameters=parameters,
            error_type=error_type,
            error_message=message,
        )
