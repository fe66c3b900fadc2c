"""Shared fixtures for task_runner tests."""

from __future__ import annotations

import asyncio
import io
import json
import os
import stat
import sys
import time
from pathlib import Path
from typing import Any

import pytest

from task_runner.engine.renderer import StructuredRenderer, Verbosity


class FakeClock:
    """Manually advanced clock for deterministic elapsed-time output."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def ndjson(*events: dict[str, Any] | str) -> list[str]:
    """Serialize event dicts to NDJSON lines; strings pass through untouched."""
    return [e if isinstance(e, str) else json.dumps(e) for e in events]


async def aiter_lines(lines: list[str | bytes]):
    for line in lines:
        yield line


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def err():
    return io.StringIO()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def compact(out, err, clock):
    return StructuredRenderer(Verbosity.COMPACT, out=out, err=err, clock=clock)


@pytest.fixture
def debug(out, err, clock):
    return StructuredRenderer(Verbosity.DEBUG, out=out, err=err, clock=clock)


class FakeAgent:
    """Executable stand-in for the agent CLI, written into ``tmp_path``."""

    def __init__(self, root: Path) -> None:
        self.path = root / "fake-agent"
        self._record = root / "invocation.json"

    def program(self, lines: list[str], exit_code: int = 0, then: str = "") -> str:
        """Write the script; *then* is Python run after printing *lines*."""
        record = str(self._record)
        self.path.write_text(
            f"#!{sys.executable}\n"
            "import json, os, signal, sys, time\n"
            f"with open({record + '.tmp'!r}, 'w') as f:\n"
            "    json.dump({'argv': sys.argv[1:], 'cwd': os.getcwd(), 'pid': os.getpid()}, f)\n"
            f"os.replace({record + '.tmp'!r}, {record!r})\n"
            f"for line in {lines!r}:\n"
            "    print(line, flush=True)\n"
            f"{then}\n"
            f"sys.exit({exit_code})\n"
        )
        self.path.chmod(self.path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(self.path)

    @property
    def invoked(self) -> bool:
        return self._record.exists()

    def invocation(self) -> dict[str, Any]:
        return json.loads(self._record.read_text())

    async def wait_invoked(self, timeout: float = 10.0) -> dict[str, Any]:
        deadline = time.monotonic() + timeout
        while not self.invoked:
            if time.monotonic() > deadline:
                raise TimeoutError("fake agent was never started")
            await asyncio.sleep(0.02)
        return self.invocation()


@pytest.fixture
def fake_agent(tmp_path):
    root = tmp_path / "bin"
    root.mkdir()
    return FakeAgent(root)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TASK_RUNNER_"):
            monkeypatch.delenv(key)
