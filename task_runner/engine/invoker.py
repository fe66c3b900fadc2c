"""AgentInvoker — builds the agent command line and runs it as a subprocess."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import AsyncIterator, TextIO

from task_runner.engine.driver import StreamDriver
from task_runner.engine.errors import ConfigurationError, DependencyMissing, ErrorKind
from task_runner.engine.models import RunConfig
from task_runner.engine.renderer import Verbosity, select_renderer

logger = logging.getLogger(__name__)

# Tool-call events can embed whole file contents on a single line.
_STREAM_LIMIT = 16 * 1024 * 1024


def build_command(agent_bin: str, config: RunConfig) -> list[str]:
    """Return the agent argv for *config*; the prompt is always the last item."""
    cmd = [agent_bin, "-p"]
    if config.force:
        cmd.append("--force")
    cmd += ["--output-format", config.output_format]
    if config.model:
        cmd += ["-m", config.model]
    if config.mode:
        cmd += ["--mode", config.mode]
    if config.stream:
        cmd.append("--stream-partial-output")
    cmd.append(config.prompt)
    return cmd


class AgentInvoker:
    """Public API: ``status = await invoker.run(config)``

    The returned status is the agent's own exit status. The one exception is
    a structured stream that closes cleanly without a result event, which is
    reported as incomplete.
    """

    def __init__(
        self,
        agent_bin: str = "agent",
        decode_events: bool = True,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self._agent_bin = agent_bin
        self._decode_events = decode_events
        self._out = out
        self._err = err

    # ------------------------------------------------------------------
    # Pre-launch checks
    # ------------------------------------------------------------------

    @staticmethod
    def check_directory(directory: Path | None) -> Path | None:
        if directory is None:
            return None
        if not directory.is_dir():
            raise ConfigurationError(
                f"directory not found: {directory}", ErrorKind.INVALID_DIRECTORY
            )
        return directory

    def resolve_executable(self) -> str:
        found = shutil.which(self._agent_bin)
        if found is None:
            raise DependencyMissing(
                f"'{self._agent_bin}' (Cursor CLI) not found on PATH. "
                "Install: curl https://cursor.com/install -fsS | bash"
            )
        return found

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, config: RunConfig) -> int:
        cwd = self.check_directory(config.directory)
        cmd = build_command(self.resolve_executable(), config)
        logger.info(
            "launching %s (format=%s, stream=%s, cwd=%s)",
            cmd[0], config.output_format, config.stream, cwd or ".",
        )

        if config.interprets_stream:
            return await self._run_streaming(cmd, cwd, config)
        return await self._run_plain(cmd, cwd)

    async def _run_plain(self, cmd: list[str], cwd: Path | None) -> int:
        process = await self._spawn(cmd, cwd, stdout=None)
        try:
            returncode = await process.wait()
        finally:
            await _terminate(process)
        return _exit_status(returncode)

    async def _run_streaming(self, cmd: list[str], cwd: Path | None, config: RunConfig) -> int:
        if not self._decode_events:
            logger.warning("event decoding disabled; output will be raw NDJSON")
        verbosity = Verbosity.DEBUG if config.debug else Verbosity.COMPACT
        renderer = select_renderer(verbosity, self._decode_events, out=self._out, err=self._err)

        process = await self._spawn(cmd, cwd, stdout=asyncio.subprocess.PIPE)
        try:
            outcome = await StreamDriver(renderer).run(read_lines(process.stdout))
            returncode = await process.wait()
        finally:
            await _terminate(process)

        if returncode != 0:
            logger.info("agent exited with status %d", returncode)
            return _exit_status(returncode)
        return outcome.exit_code

    async def _spawn(self, cmd: list[str], cwd: Path | None, stdout: int | None) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdout=stdout,
                limit=_STREAM_LIMIT,
            )
        except FileNotFoundError as exc:
            raise DependencyMissing(f"cannot execute '{cmd[0]}': {exc}") from exc


async def read_lines(reader: asyncio.StreamReader) -> AsyncIterator[bytes]:
    """Yield newline-terminated lines; lines over the reader's limit are dropped.

    The final line is yielded even when the stream ends without a newline.
    """
    skipped = 0
    while True:
        try:
            line = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            line = exc.partial
            if skipped:
                logger.warning("dropped oversized agent output line (%d bytes)", skipped + len(line))
            elif line:
                yield line
            return
        except asyncio.LimitOverrunError as exc:
            # the first ``consumed`` bytes hold no separator; discard them and keep looking
            skipped += len(await reader.readexactly(exc.consumed))
            continue

        if skipped:
            logger.warning("dropped oversized agent output line (%d bytes)", skipped + len(line))
            skipped = 0
            continue
        yield line


def _exit_status(returncode: int) -> int:
    # asyncio reports death-by-signal as -N; shells report 128 + N
    return 128 - returncode if returncode < 0 else returncode


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Stop the agent if it is still running; no-op once it has exited."""
    if process.returncode is not None:
        return
    logger.warning("terminating agent (pid %d)", process.pid)
    try:
        process.terminate()
    except ProcessLookupError:
        pass
    await process.wait()
