"""StreamDriver — feeds agent stdout lines through a renderer in arrival order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterable

from task_runner.engine.errors import EXIT_INCOMPLETE, EXIT_OK
from task_runner.engine.models import decode
from task_runner.engine.renderer import ProgressRenderer

logger = logging.getLogger(__name__)


@dataclass
class StreamOutcome:
    lines: int
    result_seen: bool
    exit_code: int


class StreamDriver:
    """Public API: ``outcome = await StreamDriver(renderer).run(stream)``"""

    def __init__(self, renderer: ProgressRenderer) -> None:
        self._renderer = renderer

    async def run(self, stream: AsyncIterable[bytes | str]) -> StreamOutcome:
        renderer = self._renderer
        renderer.start()
        count = 0

        try:
            async for chunk in stream:
                line = chunk.decode("utf-8", errors="replace") if isinstance(chunk, bytes) else chunk
                line = line.rstrip("\n").rstrip("\r")
                count += 1
                renderer.raw(line)
                if renderer.interprets:
                    renderer.handle(decode(line))
        finally:
            renderer.finish()

        # Passthrough cannot tell whether the run finished; trust the process.
        if renderer.result_seen or not renderer.interprets:
            exit_code = EXIT_OK
        else:
            logger.warning("agent stream closed after %d lines without a result event", count)
            exit_code = EXIT_INCOMPLETE

        return StreamOutcome(lines=count, result_seen=renderer.result_seen, exit_code=exit_code)
