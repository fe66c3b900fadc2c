"""Progress renderers — ABC, structured NDJSON interpreter, raw passthrough."""

from __future__ import annotations

import logging
import sys
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TextIO

from task_runner.engine.models import Event, EventKind, ToolKind

logger = logging.getLogger(__name__)


class Verbosity(str, Enum):
    COMPACT = "compact"
    DEBUG = "debug"


@dataclass
class ProgressState:
    """Per-run counters. Owned and mutated only by one renderer."""

    start_time: float | None = None
    char_count: int = 0
    tool_count: int = 0
    accumulated_text: str = ""
    result_seen: bool = False
    line_open: bool = False  # last diagnostic write left the cursor mid-line


class ProgressRenderer(ABC):
    """Consumes one agent stream, line by line.

    ``raw`` sees every line as read; ``handle`` sees the decoded event and is
    only called when ``interprets`` is true.
    """

    interprets: bool = True

    def start(self) -> None:
        """Reset per-run state. Called by the driver before the first line."""

    def raw(self, line: str) -> None:
        """Observe an undecoded line. No-op unless overridden."""

    def finish(self) -> None:
        """Called once when the stream closes."""

    @abstractmethod
    def handle(self, event: Event) -> None: ...

    @property
    @abstractmethod
    def result_seen(self) -> bool: ...


# ---------------------------------------------------------------------------
# Passthrough — no decoding capability, stdout gets the stream verbatim
# ---------------------------------------------------------------------------

class PassthroughRenderer(ProgressRenderer):
    interprets = False

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out if out is not None else sys.stdout

    def raw(self, line: str) -> None:
        self._out.write(line + "\n")
        self._out.flush()

    def handle(self, event: Event) -> None:
        pass

    @property
    def result_seen(self) -> bool:
        return False


# ---------------------------------------------------------------------------
# Structured — progress on ``err``, final result (and raw echo in debug) on ``out``
# ---------------------------------------------------------------------------

class StructuredRenderer(ProgressRenderer):
    """Renders compact or debug progress from decoded events.

    Compact mode keeps a single overwritten ``[progress]`` line and prints
    only the final result on ``out``. Debug mode echoes every raw line on
    ``out`` as well, and adds per-tool completion details on ``err``.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.COMPACT,
        out: TextIO | None = None,
        err: TextIO | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.verbosity = verbosity
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self._clock = clock
        self.state = ProgressState()

    @property
    def debug(self) -> bool:
        return self.verbosity is Verbosity.DEBUG

    @property
    def result_seen(self) -> bool:
        return self.state.result_seen

    def start(self) -> None:
        self.state = ProgressState()

    def finish(self) -> None:
        if self.state.line_open:
            self._diag("\n")

    def raw(self, line: str) -> None:
        if self.debug:
            self._out.write(line + "\n")
            self._out.flush()

    # -- dispatch -----------------------------------------------------------

    def handle(self, event: Event) -> None:
        if self.state.start_time is None:
            self.state.start_time = self._clock()

        if event.kind is EventKind.SYSTEM:
            self._on_system(event)
        elif event.kind is EventKind.ASSISTANT:
            self._on_assistant(event)
        elif event.kind is EventKind.TOOL_CALL:
            if event.subtype == "started":
                self._on_tool_started(event)
            elif event.subtype == "completed" and self.debug:
                self._on_tool_completed(event)
        elif event.kind is EventKind.RESULT:
            self._on_result(event)
        else:
            logger.debug("ignoring event kind=%s subtype=%s", event.kind.value, event.subtype)

    # -- per-kind handlers --------------------------------------------------

    def _on_system(self, event: Event) -> None:
        if event.subtype == "init":
            self._diag(f"[init] model: {event.model}\n")

    def _on_assistant(self, event: Event) -> None:
        state = self.state
        if self.debug:
            state.accumulated_text += event.text
            self._diag(f"\r[text] {len(state.accumulated_text)} chars")
            return
        state.char_count += len(event.text)
        self._diag(
            f"\r[progress] {state.char_count} chars, {state.tool_count} tools, "
            f"{self._elapsed()}s elapsed"
        )

    def _on_tool_started(self, event: Event) -> None:
        self.state.tool_count += 1
        n = self.state.tool_count
        call = event.tool_call
        if call is not None and call.kind is ToolKind.WRITE:
            self._diag(f"\n[tool #{n}] write {call.path}\n")
        elif call is not None and call.kind is ToolKind.READ:
            self._diag(f"\n[tool #{n}] read {call.path}\n")
        elif not self.debug:
            self._diag(f"\n[tool #{n}] ...\n")

    def _on_tool_completed(self, event: Event) -> None:
        call = event.tool_call
        if call is None or not call.succeeded:
            return
        if call.kind is ToolKind.WRITE:
            self._diag(f"   -> wrote {call.lines_created} lines ({call.file_size} bytes)\n")
        elif call.kind is ToolKind.READ:
            self._diag(f"   -> read {call.total_lines} lines\n")

    def _on_result(self, event: Event) -> None:
        state = self.state
        chars = len(state.accumulated_text) if self.debug else state.char_count
        self._diag(
            f"\n[done] {event.duration_ms}ms ({self._elapsed()}s wall), "
            f"{state.tool_count} tools, {chars} chars\n"
        )
        state.result_seen = True
        self._out.write(event.result + "\n")
        self._out.flush()

    # -- helpers ------------------------------------------------------------

    def _elapsed(self) -> int:
        if self.state.start_time is None:
            return 0
        return int(self._clock() - self.state.start_time)

    def _diag(self, text: str) -> None:
        self._err.write(text)
        self.state.line_open = not text.endswith("\n")
        self._err.flush()


def select_renderer(
    verbosity: Verbosity,
    decode_events: bool = True,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> ProgressRenderer:
    """Pick the renderer variant once, based on decoding capability."""
    if not decode_events:
        return PassthroughRenderer(out)
    return StructuredRenderer(verbosity, out=out, err=err)
