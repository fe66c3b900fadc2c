"""Core data models — no internal dependencies, only Pydantic + stdlib."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Inbound events (agent stdout → renderer)
# ---------------------------------------------------------------------------

class EventKind(str, Enum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    TOOL_CALL = "tool_call"
    RESULT = "result"
    UNKNOWN = "unknown"


class ToolKind(str, Enum):
    WRITE = "write"
    READ = "read"
    OTHER = "other"


class ToolCall(BaseModel):
    """Descriptor of one tool invocation inside a ``tool_call`` event."""
    model_config = ConfigDict(frozen=True)

    kind: ToolKind = ToolKind.OTHER
    path: str = "unknown"
    succeeded: bool = False
    lines_created: int = 0
    file_size: int = 0
    total_lines: int = 0


class Event(BaseModel):
    """One decoded NDJSON line. Absent fields resolve to their defaults."""
    model_config = ConfigDict(frozen=True)

    kind: EventKind = EventKind.UNKNOWN
    subtype: str | None = None
    model: str = "unknown"
    text: str = ""
    tool_call: ToolCall | None = None
    duration_ms: int = 0
    result: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------

_TOOL_KEYS = (
    ("writeToolCall", ToolKind.WRITE),
    ("readToolCall", ToolKind.READ),
)


def _as_int(value: Any) -> int:
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def _as_str(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _dig(data: Any, *keys: str | int) -> Any:
    """Walk nested dicts/lists; ``None`` as soon as a step is missing."""
    for key in keys:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[key] if isinstance(key, int) else data.get(key)
    return data


def _decode_tool_call(raw: Any) -> ToolCall:
    for key, kind in _TOOL_KEYS:
        call = _dig(raw, key)
        if call is None or call is False:
            continue
        success = _dig(call, "result", "success")
        return ToolCall(
            kind=kind,
            path=_as_str(_dig(call, "args", "path"), "unknown"),
            succeeded=success is not None and success is not False,
            lines_created=_as_int(_dig(success, "linesCreated")),
            file_size=_as_int(_dig(success, "fileSize")),
            total_lines=_as_int(_dig(success, "totalLines")),
        )
    return ToolCall()


def decode(line: str) -> Event:
    """Decode one NDJSON line. Total: malformed input yields ``kind=unknown``."""
    try:
        data = json.loads(line)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.debug("undecodable line (%s): %.80r", exc, line)
        return Event()

    if not isinstance(data, dict):
        return Event()

    try:
        kind = EventKind(data.get("type"))
    except (ValueError, TypeError):
        kind = EventKind.UNKNOWN
    subtype = data.get("subtype")

    return Event(
        kind=kind,
        subtype=subtype if isinstance(subtype, str) else None,
        model=_as_str(data.get("model"), "unknown"),
        text=_as_str(_dig(data, "message", "content", 0, "text"), ""),
        tool_call=_decode_tool_call(data.get("tool_call")) if kind is EventKind.TOOL_CALL else None,
        duration_ms=_as_int(data.get("duration_ms")),
        result=_as_str(data.get("result"), ""),
        payload=data,
    )


# ---------------------------------------------------------------------------
# Run configuration (CLI → invoker)
# ---------------------------------------------------------------------------

OutputFormat = Literal["text", "json", "stream-json"]
AgentMode = Literal["agent", "plan", "ask"]


class RunConfig(BaseModel):
    """Validated settings for a single agent invocation."""
    prompt: str = Field(min_length=1)
    force: bool = True
    output_format: OutputFormat = "text"
    model: str | None = None
    mode: AgentMode | None = None
    stream: bool = True
    debug: bool = False
    directory: Path | None = None

    @model_validator(mode="after")
    def _stream_implies_stream_json(self) -> RunConfig:
        if self.stream:
            self.output_format = "stream-json"
        return self

    @property
    def interprets_stream(self) -> bool:
        return self.stream and self.output_format == "stream-json"
