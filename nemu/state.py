"""Run state of the emulated machine and its exit status."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class RunState(enum.Enum):
    """What the emulator is currently doing."""

    RUNNING = enum.auto()
    STOP = enum.auto()
    END = enum.auto()
    ABORT = enum.auto()
    QUIT = enum.auto()


@dataclass
class MachineState:
    """The machine's run state together with where and how it halted."""

    state: RunState = RunState.STOP
    halt_pc: int = 0
    halt_ret: int = 0

    def set(self, state: RunState, pc: int, halt_ret: int) -> None:
        """Record a new state along with the halting pc and return value."""
        self.state = state
        self.halt_pc = pc
        self.halt_ret = halt_ret

    def is_exit_status_bad(self) -> bool:
        """True unless the guest hit a good trap or the user quit."""
        good = (
            self.state is RunState.END and self.halt_ret == 0
        ) or self.state is RunState.QUIT
        return not good