from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator

# Largest signed 64-bit value, used as the open end of a byte range
MAX_RANGE_END = 2**63 - 1


class ByteRange(BaseModel):
    start: int = Field(0, ge=0)
    end: int = Field(MAX_RANGE_END, ge=0)

    @model_validator(mode="after")
    def check_order(self) -> ByteRange:
        if self.end < self.start:
            raise ValueError(f"range end {self.end} is less than range start {self.start}")
        return self

    @property
    def open_ended(self) -> bool:
        return self.end == MAX_RANGE_END

    def to_header(self) -> str:
        """Render as an HTTP ``Range`` header value."""
        if self.open_ended:
            return f"bytes={self.start}-"
        return f"bytes={self.start}-{self.end}"


class GetObjectRequest(BaseModel):
    bucket: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)
    version_id: Optional[str] = None
    byte_range: Optional[ByteRange] = None


class ObjectMetadata(BaseModel):
    content_disposition: Optional[str] = None
    content_md5: Optional[str] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    expiration_time: Optional[datetime] = None
    expiration_rule_id: Optional[str] = None
    user_metadata: Optional[Dict[str, str]] = None
    version_id: Optional[str] = None
