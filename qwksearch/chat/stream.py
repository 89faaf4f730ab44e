"""Structured events flowing from a focus-mode handler to the client."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

StreamEventType = Literal["response", "sources", "messageEnd", "error"]

TERMINAL_EVENT_TYPES = frozenset({"messageEnd", "error"})


@dataclass(frozen=True, slots=True)
class StreamEvent:
    """One answer event; ``messageEnd`` and ``error`` close the stream."""

    type: StreamEventType
    data: Any = None

    @property
    def terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES

    def as_frame(self, message_id: str | None = None) -> dict[str, Any]:
        """Return the wire representation sent to the browser."""

        if self.type == "response":
            return {"type": "message", "data": self.data, "messageId": message_id}
        if self.type == "sources":
            return {"type": "sources", "data": self.data, "messageId": message_id}
        if self.type == "error":
            return {"type": "error", "data": self.data}
        return {"type": "messageEnd"}

    @classmethod
    def response(cls, text: str) -> "StreamEvent":
        return cls("response", text)

    @classmethod
    def sources(cls, sources: list[dict[str, Any]]) -> "StreamEvent":
        return cls("sources", sources)

    @classmethod
    def message_end(cls) -> "StreamEvent":
        return cls("messageEnd")

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls("error", message)


def encode_frame(frame: dict[str, Any]) -> bytes:
    """Serialise one frame as a newline-terminated JSON line."""

    payload = json.dumps(frame, ensure_ascii=False)
    return (payload + "\n").encode("utf-8")


__all__ = ["StreamEvent", "StreamEventType", "TERMINAL_EVENT_TYPES", "encode_frame"]
