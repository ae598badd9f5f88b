"""
Host pipeline implementations for running the fetcher standalone.
"""

from .expressions import AttributeExpressionEvaluator
from .memory import InMemoryRouter, InMemoryUnitSource, LoggingAuditSink, ProvenanceEvent, RecordingAuditSink

__all__ = [
    "AttributeExpressionEvaluator",
    "InMemoryUnitSource",
    "InMemoryRouter",
    "RecordingAuditSink",
    "LoggingAuditSink",
    "ProvenanceEvent",
]
