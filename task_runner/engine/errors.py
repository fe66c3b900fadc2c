"""Error taxonomy and process exit codes."""

from __future__ import annotations

from enum import Enum

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_INCOMPLETE = 3  # stream closed without a result event
EXIT_INTERRUPTED = 130
EXIT_NOT_FOUND = 127


class ErrorKind(str, Enum):
    MISSING_PROMPT = "missing_prompt"
    CONFLICTING_PROMPT = "conflicting_prompt"
    PROMPT_FILE_NOT_FOUND = "prompt_file_not_found"
    INVALID_DIRECTORY = "invalid_directory"
    INVALID_OPTION = "invalid_option"


class TaskRunnerError(Exception):
    """Fatal condition raised before (or instead of) launching the agent."""

    exit_code: int = 1


class ConfigurationError(TaskRunnerError):
    exit_code = EXIT_CONFIG

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


class DependencyMissing(TaskRunnerError):
    """A required external executable is not on PATH."""

    exit_code = EXIT_NOT_FOUND
