"""task_runner — headless coding-agent wrapper with live NDJSON progress.

Usage::

    import asyncio
    from task_runner import RunConfig, create_runner

    runner = create_runner()
    status = asyncio.run(runner.run(RunConfig(prompt="Refactor utils.js")))
"""

from __future__ import annotations

from typing import TextIO

from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from task_runner.config import RunnerSettings
from task_runner.engine.errors import ConfigurationError, DependencyMissing, TaskRunnerError
from task_runner.engine.invoker import AgentInvoker
from task_runner.engine.models import Event, EventKind, RunConfig, decode

__all__ = [
    "AgentInvoker",
    "ConfigurationError",
    "DependencyMissing",
    "Event",
    "EventKind",
    "RunConfig",
    "TaskRunnerError",
    "create_runner",
    "decode",
]


def create_runner(
    *,
    agent_bin: str | None = None,
    decode_events: bool | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> AgentInvoker:
    """Wire settings and return a ready-to-use AgentInvoker.

    Environment variables (all optional):
      TASK_RUNNER_AGENT_BIN      — agent executable, default ``agent``
      TASK_RUNNER_DECODE_EVENTS  — set to ``0`` for raw NDJSON passthrough
      TASK_RUNNER_LOG_LEVEL      — CLI log level, default ``WARNING``
    """
    settings = RunnerSettings.from_env()
    return AgentInvoker(
        agent_bin=agent_bin or settings.agent_bin,
        decode_events=decode_events if decode_events is not None else settings.decode_events,
        out=out,
        err=err,
    )
