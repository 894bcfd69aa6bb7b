"""The LoongArch32 reduced guest: pcaddu12i, ld.w, st.w and the break trap."""

from __future__ import annotations

from .isa_base import Decode, Isa, bits, pattern, sext

REGS = (
    "$0", "ra", "tp", "sp", "a0", "a1", "a2", "a3",
    "a4", "a5", "a6", "a7", "t0", "t1", "t2", "t3",
    "t4", "t5", "t6", "t7", "t8", "rs", "fp", "s0",
    "s1", "s2", "s3", "s4", "s5", "s6", "s7", "s8",
)

IMG = (
    0x1C00000C,  # pcaddu12i $t0,0
    0x29804180,  # st.w $zero,$t0,16
    0x28804184,  # ld.w $a0,$t0,16
    0x002A0000,  # break 0, the trap
    0xDEADBEEF,  # some data
)

LOGO = "loongarch32r manual"

A0 = 4


def _pcaddu12i(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.set_gpr(rd, s.pc + imm)


def _ld_w(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.set_gpr(rd, isa.vaddr_read(src1 + imm, 4))


def _st_w(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.vaddr_write(src1 + imm, 4, isa.gpr(rd))


def _break(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.trap(s.pc, isa.gpr(A0))


def _inv(isa: Isa, s: Decode, rd: int, src1: int, src2: int, imm: int) -> None:
    isa.invalid_inst(s.pc)


class Loongarch32r(Isa):
    """32-bit LoongArch (reduced) with the minimal instruction subset."""

    NAME = "loongarch32r"
    XLEN = 32
    REGS = REGS
    IMG = IMG
    LOGO = LOGO
    INSTRUCTIONS = (
        (pattern("0001110 ????? ????? ????? ????? ?????"), "pcaddu12i", "1RI20", _pcaddu12i),
        (pattern("0010100010 ???????????? ????? ?????"), "ld.w", "2RI12", _ld_w),
        (pattern("0010100110 ???????????? ????? ?????"), "st.w", "2RI12", _st_w),
        (pattern("0000 0000 0010 10100 ????? ????? ?????"), "break", "N", _break),
        (pattern("????????????????? ????? ????? ?????"), "inv", "N", _inv),
    )

    def decode_operand(self, s: Decode, kind: str) -> tuple[int, int, int, int]:
        i = s.inst
        rj, rd = bits(i, 9, 5), bits(i, 4, 0)
        src1 = imm = 0
        if kind == "1RI20":
            imm = sext(bits(i, 24, 5), 20) << 12
            src1 = self.gpr(rj)
        elif kind == "2RI12":
            imm = sext(bits(i, 21, 10), 12)
            src1 = self.gpr(rj)
        return rd, src1, 0, imm & self.word_mask

    def init(self) -> None:
        """Load the built-in program and reset pc and the zero register."""
        super().init()

    def exec_once(self, s: Decode) -> None:
        """Fetch one 32-bit instruction and execute it."""
        s.inst = self.inst_fetch(s, 4)
        self._decode_exec(s)