"""Log output and the instruction-trace window."""

from __future__ import annotations

import sys
from typing import TextIO

DEFAULT_TRACE_START = 0
DEFAULT_TRACE_END = 10000


class Logger:
    """Writes log lines to a stream and decides whether tracing is active."""

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        trace: bool = False,
        trace_start: int = DEFAULT_TRACE_START,
        trace_end: int = DEFAULT_TRACE_END,
        owns_stream: bool = False,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.trace = trace
        self.trace_start = trace_start
        self.trace_end = trace_end
        self._owns_stream = owns_stream

    def log(self, message: str) -> None:
        """Write one line to the log."""
        self.stream.write(f"{message}\n")
        self.stream.flush()

    def enabled(self, nr_guest_inst: int) -> bool:
        """Whether the trace is on for the given instruction count."""
        return self.trace and self.trace_start <= nr_guest_inst <= self.trace_end

    def close(self) -> None:
        """Close the stream if this logger opened it."""
        if self._owns_stream and not self.stream.closed:
            self.stream.close()

    def __enter__(self) -> Logger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def init_log(log_file: str | None = None) -> Logger:
    """Open the log, on ``log_file`` if given and on standard output otherwise."""
    if log_file is None:
        logger = Logger()
    else:
        logger = Logger(open(log_file, "w", encoding="utf-8"), owns_stream=True)
    logger.log(f"Log is written to {log_file if log_file else 'stdout'}")
    return logger