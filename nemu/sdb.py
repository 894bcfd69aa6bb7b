"""The simple debugger: a command loop and the watchpoint pool."""

from __future__ import annotations

import sys
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, NamedTuple, Protocol, TextIO

NR_WP = 32
PROMPT = "(nemu) "


class _Executor(Protocol):
    def exec(self, n: int) -> None: ...


@dataclass
class Watchpoint:
    """One watchpoint slot, identified by its number."""

    no: int


class WatchpointPool:
    """A fixed pool of watchpoints split into free and active ones."""

    def __init__(self, size: int = NR_WP) -> None:
        self.size = size
        self.free: deque[Watchpoint] = deque()
        self.active: list[Watchpoint] = []
        self.reset()

    def reset(self) -> None:
        """Put every watchpoint back on the free list, in number order."""
        self.free = deque(Watchpoint(no) for no in range(self.size))
        self.active = []

    def new_wp(self) -> Watchpoint:
        """Take the first free watchpoint and make it active."""
        if not self.free:
            raise RuntimeError("no free watchpoint")
        wp = self.free.popleft()
        self.active.insert(0, wp)
        return wp

    def free_wp(self, wp: Watchpoint) -> None:
        """Return an active watchpoint to the free list."""
        if wp not in self.active:
            raise ValueError(f"watchpoint {wp.no} is not active")
        self.active.remove(wp)
        self.free.appendleft(wp)


class _Command(NamedTuple):
    name: str
    description: str
    handler: Callable[["Debugger", "str | None"], bool]


def _read_lines() -> Iterator[str]:
    try:
        import readline  # noqa: F401  # line editing and history for input()
    except ImportError:
        pass
    while True:
        try:
            yield input(PROMPT)
        except EOFError:
            return


class Debugger:
    """Reads commands and drives the CPU."""

    def __init__(
        self,
        cpu: _Executor,
        *,
        out: TextIO | None = None,
        batch: bool = False,
        clear_event_queue: Callable[[], None] | None = None,
    ) -> None:
        self.cpu = cpu
        self.out = out
        self.batch = batch
        self._clear_event_queue = clear_event_queue
        self.watchpoints = WatchpointPool()

    def set_batch_mode(self) -> None:
        self.batch = True

    def _write(self, text: str) -> None:
        out = self.out if self.out is not None else sys.stdout
        out.write(text)
        out.flush()

    def _cmd_c(self, args: str | None) -> bool:
        self.cpu.exec(-1)
        return True

    def _cmd_q(self, args: str | None) -> bool:
        return False

    def _cmd_help(self, args: str | None) -> bool:
        words = args.split(" ") if args else []
        arg = next((w for w in words if w), None)
        if arg is None:
            for cmd in COMMANDS:
                self._write(f"{cmd.name} - {cmd.description}\n")
            return True
        for cmd in COMMANDS:
            if cmd.name == arg:
                self._write(f"{cmd.name} - {cmd.description}\n")
                return True
        self._write(f"Unknown command '{arg}'\n")
        return True

    def run_command(self, line: str) -> bool:
        """Run one command line; False means the loop should end."""
        cmd, _, rest = line.lstrip(" ").partition(" ")
        if not cmd:
            return True
        args = rest or None
        if self._clear_event_queue is not None:
            self._clear_event_queue()
        for entry in COMMANDS:
            if entry.name == cmd:
                return entry.handler(self, args)
        self._write(f"Unknown command '{cmd}'\n")
        return True

    def mainloop(self, lines: Iterable[str] | None = None) -> None:
        """Run commands until quit or end of input; batch mode just continues."""
        if self.batch:
            self._cmd_c(None)
            return
        for line in lines if lines is not None else _read_lines():
            if not self.run_command(line.rstrip("\n")):
                return


COMMANDS = (
    _Command("help", "Display information about all supported commands", Debugger._cmd_help),
    _Command("c", "Continue the execution of the program", Debugger._cmd_c),
    _Command("q", "Exit NEMU", Debugger._cmd_q),
)