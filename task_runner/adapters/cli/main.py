"""CLI adapter — parses flags, resolves the prompt, runs the agent, exits with its status."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from task_runner import create_runner
from task_runner.config import RunnerSettings
from task_runner.engine.errors import (
    EXIT_INTERRUPTED,
    ConfigurationError,
    ErrorKind,
    TaskRunnerError,
)
from task_runner.engine.models import RunConfig

logger = logging.getLogger(__name__)

_EXAMPLES = """\
Examples:
  task-runner -f task.txt
  task-runner -p "Refactor utils.js" -d /path/to/project --no-stream -o json
  task-runner -f review.txt --debug
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-runner",
        description="Run a headless coding agent on a prompt, with live progress.",
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-p", dest="prompt", metavar="PROMPT", help="Inline prompt")
    parser.add_argument("-f", dest="prompt_file", metavar="FILE", help="Read prompt from file ('-' for stdin)")
    parser.add_argument("-d", dest="directory", metavar="DIR", help="Working directory (default: cwd)")
    parser.add_argument(
        "-o", dest="output_format", choices=["text", "json", "stream-json"], default="text",
        help="Output format (forced to stream-json when streaming)",
    )
    parser.add_argument("-m", dest="model", help="Model name")
    parser.add_argument("--mode", choices=["agent", "plan", "ask"], help="Agent mode")
    parser.add_argument(
        "--force", dest="force", action="store_true", default=True,
        help="Allow file modifications (default)",
    )
    parser.add_argument(
        "--no-force", dest="force", action="store_false",
        help="Do not modify files; agent only proposes changes",
    )
    parser.add_argument(
        "--stream", dest="stream", action="store_true", default=True,
        help="Stream events with progress display (default)",
    )
    parser.add_argument(
        "--no-stream", dest="stream", action="store_false",
        help="Plain output only (text or json per -o); no progress display",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Echo raw NDJSON on stdout and show verbose progress",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")
    return parser


def resolve_prompt(prompt: str | None, prompt_file: str | None) -> str:
    """Exactly one of *prompt* / *prompt_file* must be given, and it must not be empty."""
    if prompt is not None and prompt_file is not None:
        raise ConfigurationError("use -p or -f, not both", ErrorKind.CONFLICTING_PROMPT)
    if prompt is None and prompt_file is None:
        raise ConfigurationError('provide -p "prompt" or -f prompt-file', ErrorKind.MISSING_PROMPT)
    if prompt is not None:
        if not prompt:
            raise ConfigurationError("-p requires a prompt string", ErrorKind.MISSING_PROMPT)
        return prompt

    if prompt_file == "-":
        text = sys.stdin.read()
    else:
        path = Path(prompt_file)
        if not path.is_file():
            raise ConfigurationError(f"prompt file not found: {path}", ErrorKind.PROMPT_FILE_NOT_FOUND)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"cannot read prompt file {path}: {exc}", ErrorKind.PROMPT_FILE_NOT_FOUND
            ) from exc
    if not text.strip():
        raise ConfigurationError(f"prompt file is empty: {prompt_file}", ErrorKind.MISSING_PROMPT)
    return text


def build_config(args: argparse.Namespace) -> RunConfig:
    try:
        return RunConfig(
            prompt=resolve_prompt(args.prompt, args.prompt_file),
            force=args.force,
            output_format=args.output_format,
            model=args.model,
            mode=args.mode,
            stream=args.stream,
            debug=args.debug,
            directory=Path(args.directory) if args.directory else None,
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        kind = ErrorKind.MISSING_PROMPT if field == "prompt" else ErrorKind.INVALID_OPTION
        raise ConfigurationError(f"invalid {field}: {first['msg']}", kind) from exc


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = RunnerSettings.from_env()
    logging.basicConfig(
        level=logging.INFO if args.verbose else settings.log_level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
        runner = create_runner()
        return asyncio.run(runner.run(config))
    except TaskRunnerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("Error: interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
