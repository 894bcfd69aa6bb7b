"""The MIPS32 guest: lui, lw, sw and the sdbbp trap."""

from __future__ import annotations

from .isa_base import Decode, Isa, bits, pattern, sext

REGS = (
    "$0", "at", "v0", "v1", "a0", "a1", "a2", "a3",
    "t0", "t1", "t2", "t3", "t4", "t5", "t6", "t7",
    "s0", "s1", "s2", "s3", "s4", "s5", "s6", "s7",
    "t8", "t9", "k0", "k1", "gp", "sp", "s8", "ra",
)

IMG = (
    0x3C048000,  # lui a0, 0x8000
    0xAC800000,  # sw  zero, 0(a0)
    0x8C820000,  # lw  v0,0(a0)
    0x7000003F,  # sdbbp, the trap
)

LOGO = "\n".join((
    r"            _           ____ ___    __  __                         _ ",
    r"           (_)         |___ \__ \  |  \/  |                       | |",
    r"  _ __ ___  _ _ __  ___  __) | ) | | \  / | __ _ _ __  _   _  __ _| |",
    r" | '_ ` _ \| | '_ \/ __||__ < / /  | |\/| |/ _` | '_ \| | | |/ _` | |",
    r" | | | | | | | |_) \__ \___) / /_  | |  | | (_| | | | | |_| | (_| | |",
    r" |_| |_| |_|_| .__/|___/____/____| |_|  |_|\__,_|_| |_|\__,_|\__,_|_|",
    r"             | |                                                     ",
    r"             |_|                                                     ",
)) + "\n"

V0 = 2


def _lui(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.set_gpr(rd, imm << 16)


def _lw(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.set_gpr(rd, isa.vaddr_read(src1 + imm, 4))


def _sw(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.vaddr_write(src1 + imm, 4, isa.gpr(rd))


def _sdbbp(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.trap(s.pc, isa.gpr(V0))


def _inv(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.invalid_inst(s.pc)


class Mips32(Isa):
    """32-bit MIPS with the minimal instruction subset."""

    NAME = "mips32"
    XLEN = 32
    REGS = REGS
    IMG = IMG
    LOGO = LOGO
    INSTRUCTIONS = (
        (pattern("001111 ????? ????? ????? ????? ??????"), "lui", "U", _lui),
        (pattern("100011 ????? ????? ????? ????? ??????"), "lw", "I", _lw),
        (pattern("101011 ????? ????? ????? ????? ??????"), "sw", "I", _sw),
        (pattern("011100 ????? ????? ????? ????? 111111"), "sdbbp", "N", _sdbbp),
        (pattern("?????? ????? ????? ????? ????? ??????"), "inv", "N", _inv),
    )

    def decode_operand(self, s: Decode, kind: str) -> tuple[int, int, int, int]:
        i = s.inst
        rt, rs = bits(i, 20, 16), bits(i, 25, 21)
        rd = rt if kind in ("U", "I") else bits(i, 15, 11)
        src1 = src2 = imm = 0
        if kind == "I":
            src1 = self.gpr(rs)
            imm = sext(bits(i, 15, 0), 16)
        elif kind == "U":
            src1 = self.gpr(rs)
            imm = bits(i, 15, 0)
        return rd, src1, src2, imm & self.word_mask

    def init(self) -> None:
        """Load the built-in program and reset pc and the zero register."""
        super().init()

    def exec_once(self, s: Decode) -> None:
        """Fetch one 32-bit instruction and execute it."""
        s.inst = self.inst_fetch(s, 4)
        self._decode_exec(s)