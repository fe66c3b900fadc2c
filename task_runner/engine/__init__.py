from task_runner.engine.models import (
    Event,
    EventKind,
    RunConfig,
    ToolCall,
    ToolKind,
    decode,
)
from task_runner.engine.errors import (
    ConfigurationError,
    DependencyMissing,
    ErrorKind,
    TaskRunnerError,
)
from task_runner.engine.renderer import (
    PassthroughRenderer,
    ProgressRenderer,
    ProgressState,
    StructuredRenderer,
    Verbosity,
    select_renderer,
)
from task_runner.engine.driver import StreamDriver, StreamOutcome
from task_runner.engine.invoker import AgentInvoker, build_command

__all__ = [
    "AgentInvoker",
    "ConfigurationError",
    "DependencyMissing",
    "ErrorKind",
    "Event",
    "EventKind",
    "PassthroughRenderer",
    "ProgressRenderer",
    "ProgressState",
    "RunConfig",
    "StreamDriver",
    "StreamOutcome",
    "StructuredRenderer",
    "TaskRunnerError",
    "ToolCall",
    "ToolKind",
    "Verbosity",
    "build_command",
    "decode",
    "select_renderer",
]
