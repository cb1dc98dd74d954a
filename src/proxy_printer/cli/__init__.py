from .common import (
    ProgressPrinter,
    exit_with_message,
    resolve_output_path,
    write_json_summary,
)

from .handlers import (
    build_materializer,
    handle_materialize,
    summarize,
)

__all__ = [
    "ProgressPrinter",
    "exit_with_message",
    "resolve_output_path",
    "write_json_summary",
    "build_materializer",
    "handle_materialize",
    "summarize",
]
