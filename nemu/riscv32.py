"""The RV32 guest: lui, lw, sw and the ebreak trap."""

from __future__ import annotations

from .isa_base import Decode, Isa, bits, pattern, sext

REGS = (
    "$0", "ra", "sp", "gp", "tp", "t0", "t1", "t2",
    "s0", "s1", "a0", "a1", "a2", "a3", "a4", "a5",
    "a6", "a7", "s2", "s3", "s4", "s5", "s6", "s7",
    "s8", "s9", "s10", "s11", "t3", "t4", "t5", "t6",
)

IMG = (
    0x800002B7,  # lui t0,0x80000
    0x0002A023,  # sw  zero,0(t0)
    0x0002A503,  # lw  a0,0(t0)
    0x00100073,  # ebreak, the trap
)

LOGO = "\n".join((
    r"       _                         __  __                         _ ",
    r"      (_)                       |  \/  |                       | |",
    r"  _ __ _ ___  ___ ________   __ | \  / | __ _ _ __  _   _  __ _| |",
    r" | '__| / __|/ __|______\ \ / / | |\/| |/ _` | '_ \| | | |/ _` | |",
    r" | |  | \__ \ (__        \ V /  | |  | | (_| | | | | |_| | (_| | |",
    r" |_|  |_|___/\___|        \_/   |_|  |_|\__,_|_| |_|\__,_|\__,_|_|",
)) + "\n"

A0 = 10


def _lui(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.set_gpr(rd, imm)


def _lw(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.set_gpr(rd, isa.vaddr_read(src1 + imm, 4))


def _sw(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.vaddr_write(src1 + imm, 4, src2)


def _ebreak(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.trap(s.pc, isa.gpr(A0))


def _inv(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.invalid_inst(s.pc)


class Riscv32(Isa):
    """32-bit RISC-V with the minimal instruction subset."""

    NAME = "riscv32"
    XLEN = 32
    REGS = REGS
    IMG = IMG
    LOGO = LOGO
    INSTRUCTIONS = (
        (pattern("??????? ????? ????? ??? ????? 01101 11"), "lui", "U", _lui),
        (pattern("??????? ????? ????? 010 ????? 00000 11"), "lw", "I", _lw),
        (pattern("??????? ????? ????? 010 ????? 01000 11"), "sw", "S", _sw),
        (pattern("0000000 00001 00000 000 00000 11100 11"), "ebreak", "N", _ebreak),
        (pattern("??????? ????? ????? ??? ????? ????? ??"), "inv", "N", _inv),
    )

    def decode_operand(self, s: Decode, kind: str) -> tuple[int, int, int, int]:
        i = s.inst
        rs1, rs2, rd = bits(i, 19, 15), bits(i, 24, 20), bits(i, 11, 7)
        src1 = src2 = imm = 0
        if kind == "I":
            src1 = self.gpr(rs1)
            imm = sext(bits(i, 31, 20), 12)
        elif kind == "U":
            imm = sext(bits(i, 31, 12), 20) << 12
        elif kind == "S":
            src1 = self.gpr(rs1)
            src2 = self.gpr(rs2)
            imm = (sext(bits(i, 31, 25), 7) << 5) | bits(i, 11, 7)
        return rd, src1, src2, imm & self.word_mask

    def init(self) -> None:
        """Load the built-in program and reset pc and the zero register."""
        super().init()

    def exec_once(self, s: Decode) -> None:
        """Fetch one 32-bit instruction and execute it."""
        s.inst = self.inst_fetch(s, 4)
        self._decode_exec(s)