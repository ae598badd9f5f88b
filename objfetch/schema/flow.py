from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Channel(str, Enum):
    """Terminal routing channel for a flow unit"""

    SUCCESS = "success"
    FAILURE = "failure"


class FlowUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    uuid: str = Field(default_factory=lambda: str(uuid4()))
    content: bytes = b""
    attributes: Dict[str, str] = Field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.content)

    def with_content(self, content: bytes) -> FlowUnit:
        return self.model_copy(update={"content": content})

    def with_attributes(self, attributes: Mapping[str, str]) -> FlowUnit:
        """Return a copy with ``attributes`` merged over the existing ones."""
        merged = dict(self.attributes)
        merged.update(attributes)
        return self.model_copy(update={"attributes": merged})
