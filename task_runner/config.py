"""Environment-driven runner settings."""

from __future__ import annotations

import os

from pydantic import BaseModel

_FALSY = {"0", "false", "no", "off"}


class RunnerSettings(BaseModel):
    agent_bin: str = "agent"
    decode_events: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> RunnerSettings:
        """Read ``TASK_RUNNER_*`` variables; unset ones keep the defaults."""
        return cls(
            agent_bin=os.environ.get("TASK_RUNNER_AGENT_BIN") or "agent",
            decode_events=os.environ.get("TASK_RUNNER_DECODE_EVENTS", "1").strip().lower() not in _FALSY,
            log_level=(os.environ.get("TASK_RUNNER_LOG_LEVEL") or "WARNING").upper(),
        )
