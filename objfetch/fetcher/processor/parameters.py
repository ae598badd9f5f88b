"""
Resolution of per-unit fetch parameters.

Configured expressions are evaluated against the incoming unit, then the
byte range bounds are parsed and checked before any request is built.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel

from ...schema.flow import FlowUnit
from ...schema.storage import MAX_RANGE_END, ByteRange, GetObjectRequest
from ..config.settings import FetcherSettings
from ..core.exceptions import ByteRangeError, ParameterError
from ..core.interfaces import ExpressionEvaluator
from ..core.types import RangeMode

_NON_NEGATIVE_INT_RE = re.compile(r"\+?[0-9]+")


class FetchParameters(BaseModel):
    bucket: str
    key: str
    version_id: Optional[str] = None
    byte_range: Optional[ByteRange] = None

    def to_request(self) -> GetObjectRequest:
        return GetObjectRequest(
            bucket=self.bucket,
            key=self.key,
            version_id=self.version_id,
            byte_range=self.byte_range,
        )


def parse_range_bound(name: str, value: Optional[str], default: int) -> int:
    """
    Parse one byte range bound.

    Args:
        name: Parameter name, for error reporting
        value: Evaluated expression, or None when the property is not configured
        default: Value used when the property is not configured

    Returns:
        The bound as a non-negative integer

    Raises:
        ParameterError: If the value is not a non-negative decimal integer
    """
    if value is None:
        return default

    text = value.strip()
    if not _NON_NEGATIVE_INT_RE.fullmatch(text):
        raise ParameterError(f"{name} must be a non-negative integer, got {value!r}", parameter=name, value=value)

    bound = int(text)
    if bound > MAX_RANGE_END:
        raise ParameterError(f"{name} exceeds {MAX_RANGE_END}", parameter=name, value=value)
    return bound


def resolve_parameters(settings: FetcherSettings, evaluator: ExpressionEvaluator, unit: FlowUnit) -> FetchParameters:
    """
    Evaluate the configured expressions for ``unit``.

    Raises:
        ParameterError: Empty bucket or key, or a malformed range bound
        ByteRangeError: Range end before range start
    """
    bucket = evaluator.evaluate(settings.bucket, unit)
    key = evaluator.evaluate(settings.key, unit)
    version_id = evaluator.evaluate(settings.version_id, unit) or None

    if not bucket:
        raise ParameterError(f"Bucket expression {settings.bucket!r} evaluated to an empty value", parameter="bucket")
    if not key:
        raise ParameterError(f"Key expression {settings.key!r} evaluated to an empty value", parameter="key")

    start_value = evaluator.evaluate(settings.range_start, unit)
    end_value = evaluator.evaluate(settings.range_end, unit)
    start = parse_range_bound("range_start", start_value, 0)
    end = parse_range_bound("range_end", end_value, MAX_RANGE_END)

    if end < start:
        raise ByteRangeError(start, end)

    explicit = settings.range_start is not None or settings.range_end is not None
    byte_range = None
    if settings.range_mode is RangeMode.ALWAYS or explicit:
        byte_range = ByteRange(start=start, end=end)

    return FetchParameters(bucket=bucket, key=key, version_id=version_id, byte_range=byte_range)
