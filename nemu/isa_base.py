"""Machinery shared by every guest instruction set: registers, decoding, traps."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import Callable, NamedTuple, TextIO

from .memory import PhysicalMemory
from .state import MachineState, RunState

NR_GPR = 32
INST_LEN = 4

ANSI_FG_RED = "\33[1;31m"
ANSI_FG_GREEN = "\33[1;32m"
ANSI_NONE = "\33[0m"


def _ansi(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_NONE}"


def bits(value: int, hi: int, lo: int) -> int:
    """Bits ``hi`` down to ``lo`` of ``value``, shifted down to bit 0."""
    return (value >> lo) & ((1 << (hi - lo + 1)) - 1)


def sext(value: int, width: int) -> int:
    """Sign-extend the low ``width`` bits of ``value`` to a Python integer."""
    value &= (1 << width) - 1
    sign = 1 << (width - 1)
    return (value ^ sign) - sign


class _Pattern(NamedTuple):
    key: int
    mask: int
    text: str

    def matches(self, inst: int) -> bool:
        return inst & self.mask == self.key


def pattern(text: str) -> _Pattern:
    """Compile an instruction pattern of '0', '1' and '?' (don't care); spaces are ignored."""
    key = mask = width = 0
    for ch in text:
        if ch == " ":
            continue
        if ch not in "01?":
            raise ValueError(f"invalid character {ch!r} in pattern {text!r}")
        key <<= 1
        mask <<= 1
        width += 1
        if ch != "?":
            mask |= 1
            key |= int(ch == "1")
    if width > 64:
        raise ValueError(f"pattern {text!r} is longer than 64 bits")
    return _Pattern(key, mask, text)


class MMUMode(enum.Enum):
    DIRECT = enum.auto()
    TRANSLATE = enum.auto()
    FAIL = enum.auto()


class MemRet(enum.Enum):
    OK = enum.auto()
    FAIL = enum.auto()
    CROSS_PAGE = enum.auto()


@dataclass
class CPUState:
    """General-purpose registers and program counter."""

    xlen: int = 32
    gpr: list[int] = field(default_factory=lambda: [0] * NR_GPR)
    pc: int = 0

    @property
    def word_mask(self) -> int:
        return (1 << self.xlen) - 1


@dataclass
class Decode:
    """One instruction in flight: its pc, the static and dynamic next pc."""

    pc: int = 0
    snpc: int = 0
    dnpc: int = 0
    inst: int = 0
    logbuf: str = ""


Execute = Callable[["Isa", Decode, int, int, int, int], None]
InstructionEntry = tuple[_Pattern, str, str, Execute]


class Isa:
    """A guest instruction set bound to a memory and a machine state."""

    NAME = "isa"
    XLEN = 32
    REGS: tuple[str, ...] = ()
    IMG: tuple[int, ...] = ()
    LOGO = ""
    INSTRUCTIONS: tuple[InstructionEntry, ...] = ()

    def __init__(
        self,
        memory: PhysicalMemory,
        state: MachineState,
        *,
        reset_vector: int | None = None,
        on_skip_ref: Callable[[], None] | None = None,
        out: TextIO | None = None,
    ) -> None:
        self.memory = memory
        self.state = state
        self.reset_vector = memory.base if reset_vector is None else reset_vector
        self.on_skip_ref = on_skip_ref
        self.out = out
        self.cpu = CPUState(self.XLEN)

    @property
    def word_mask(self) -> int:
        return self.cpu.word_mask

    def fmt_word(self, value: int) -> str:
        return f"0x{value & self.word_mask:0{self.XLEN // 4}x}"

    @staticmethod
    def _check_reg_idx(idx: int) -> int:
        if not 0 <= idx < NR_GPR:
            raise IndexError(f"register index {idx} out of range")
        return idx

    def gpr(self, idx: int) -> int:
        return self.cpu.gpr[self._check_reg_idx(idx)]

    def set_gpr(self, idx: int, value: int) -> None:
        self.cpu.gpr[self._check_reg_idx(idx)] = value & self.word_mask

    def vaddr_read(self, addr: int, length: int) -> int:
        return self.memory.read(addr & self.word_mask, length)

    def vaddr_write(self, addr: int, length: int, data: int) -> None:
        self.memory.write(addr & self.word_mask, length, data)

    def inst_fetch(self, s: Decode, length: int) -> int:
        """Fetch ``length`` bytes at ``s.snpc`` and advance it."""
        value = self.memory.ifetch(s.snpc & self.word_mask, length)
        s.snpc += length
        return value

    def init(self) -> None:
        """Load the built-in image at the reset vector and reset the registers."""
        image = b"".join(word.to_bytes(4, "little") for word in self.IMG)
        if image:
            self.memory.load(self.reset_vector, image)
        self.cpu.pc = self.reset_vector
        self.cpu.gpr[0] = 0

    def decode_operand(self, s: Decode, kind: str) -> tuple[int, int, int, int]:
        """Extract ``(rd, src1, src2, imm)`` for an instruction type."""
        return 0, 0, 0, 0

    def _decode_exec(self, s: Decode) -> None:
        s.dnpc = s.snpc
        for pat, _name, kind, execute in self.INSTRUCTIONS:
            if pat.matches(s.inst):
                rd, src1, src2, imm = self.decode_operand(s, kind)
                execute(self, s, rd, src1, src2, imm)
                break
        self.cpu.gpr[0] = 0

    def exec_once(self, s: Decode) -> None:
        """Fetch, decode and execute one instruction at ``s.pc``."""
        s.inst = self.inst_fetch(s, INST_LEN)
        self._decode_exec(s)

    def reg_name(self, idx: int) -> str:
        return self.REGS[self._check_reg_idx(idx)]

    def reg_display(self) -> str:
        """All registers and the pc, one per line."""
        lines = [
            f"{name:<4} {self.fmt_word(value)} {value}"
            for name, value in zip(self.REGS, self.cpu.gpr)
        ]
        lines.append(f"{'pc':<4} {self.fmt_word(self.cpu.pc)}")
        return "\n".join(lines)

    def raise_intr(self, no: int, epc: int) -> int:
        """Address of the exception vector; no vectors are installed."""
        return 0

    def query_intr(self) -> int:
        """The pending interrupt, or all ones when there is none."""
        return self.word_mask

    def mmu_check(self, vaddr: int, length: int, kind: object) -> MMUMode:
        return MMUMode.DIRECT

    def mmu_translate(self, vaddr: int, length: int, kind: object) -> MemRet:
        return MemRet.FAIL

    def difftest_checkregs(self, ref: CPUState, pc: int) -> bool:
        """Whether a reference register file agrees with this one."""
        mask = self.word_mask
        return (ref.pc & mask) == (self.cpu.pc & mask) and [
            r & mask for r in ref.gpr
        ] == [r & mask for r in self.cpu.gpr]

    def _set_state(self, state: RunState, pc: int, halt_ret: int) -> None:
        if self.on_skip_ref is not None:
            self.on_skip_ref()
        self.state.set(state, pc, halt_ret)

    def trap(self, pc: int, halt_ret: int) -> None:
        """The guest hit the trap instruction: end the run with ``halt_ret``."""
        self._set_state(RunState.END, pc, sext(halt_ret, 32))

    def invalid_inst(self, pc: int) -> None:
        """Report an undecodable instruction and abort the run."""
        probe = Decode(snpc=pc)
        words = [self.inst_fetch(probe, 4) for _ in range(2)]
        raw = b"".join(w.to_bytes(4, "little") for w in words)
        where = self.fmt_word(pc)
        out = self.out if self.out is not None else sys.stdout
        out.write(
            f"invalid opcode(PC = {where}):\n"
            f"\t{' '.join(f'{b:02x}' for b in raw)} ...\n"
            f"\t{words[0]:08x} {words[1]:08x}...\n"
        )
        out.write(
            "There are two cases which will trigger this unexpected exception:\n"
            f"1. The instruction at PC = {where} is not implemented.\n"
            "2. Something is implemented incorrectly.\n"
        )
        out.write(
            f"Find this PC({where}) in the disassembling result to distinguish "
            "which case it is.\n\n"
        )
        out.write(
            _ansi(
                f"If it is the first case, see\n{self.LOGO}\nfor more details.\n\n"
                "If it is the second case, remember:\n"
                "* The machine is always right!\n"
                "* Every line of untested code is always wrong!\n\n",
                ANSI_FG_RED,
            )
        )
        out.flush()
        self._set_state(RunState.ABORT, pc, -1)