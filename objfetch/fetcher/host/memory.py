"""
In-memory host implementations.

Thread-safe queue, router and audit sinks for running the fetcher outside a
pipeline engine: the command line tool and the test suite.
"""

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from ...schema.flow import Channel, FlowUnit

logger = logging.getLogger(__name__)


class ProvenanceEvent(BaseModel):
    """Audit record of a unit receiving content from a remote system"""

    event_type: str = "RECEIVE"
    unit_id: str
    transit_uri: str
    transfer_millis: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryUnitSource:
    """FIFO inbound queue"""

    def __init__(self, units: Optional[Iterable[FlowUnit]] = None):
        self._queue: Deque[FlowUnit] = deque(units or ())
        self._lock = threading.Lock()

    def offer(self, unit: FlowUnit) -> None:
        with self._lock:
            self._queue.append(unit)

    def poll(self) -> Optional[FlowUnit]:
        with self._lock:
            if not self._queue:
                return None
            return self._queue.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)


class InMemoryRouter:
    """Collects transferred units per channel"""

    def __init__(self) -> None:
        self._routed: Dict[Channel, List[FlowUnit]] = {channel: [] for channel in Channel}
        self._lock = threading.Lock()

    def transfer(self, unit: FlowUnit, channel: Channel) -> None:
        with self._lock:
            self._routed[channel].append(unit)
        logger.debug(f"Transferred unit {unit.uuid} to {channel.value}")

    def units(self, channel: Channel) -> List[FlowUnit]:
        with self._lock:
            return list(self._routed[channel])

    @property
    def success(self) -> List[FlowUnit]:
        return self.units(Channel.SUCCESS)

    @property
    def failure(self) -> List[FlowUnit]:
        return self.units(Channel.FAILURE)


class RecordingAuditSink:
    """Keeps every provenance event in memory"""

    def __init__(self) -> None:
        self.events: List[ProvenanceEvent] = []
        self._lock = threading.Lock()

    def receive(self, unit: FlowUnit, transit_uri: str, transfer_millis: int) -> None:
        event = ProvenanceEvent(unit_id=unit.uuid, transit_uri=transit_uri, transfer_millis=transfer_millis)
        with self._lock:
            self.events.append(event)


class LoggingAuditSink:
    """Writes provenance events to the log"""

    def receive(self, unit: FlowUnit, transit_uri: str, transfer_millis: int) -> None:
        logger.info(
            f"RECEIVE {unit.uuid} from {transit_uri} in {transfer_millis} ms",
            extra={"unit_id": unit.uuid, "transit_uri": transit_uri, "transfer_millis": transfer_millis},
        )
