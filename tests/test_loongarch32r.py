import io

import pytest

from nemu.isa_base import Decode, MemRet
from nemu.loongarch32r import IMG, LOGO, Loongarch32r
from nemu.memory import PhysicalMemory
from nemu.state import MachineState, RunState


@pytest.fixture
def machine():
    memory = PhysicalMemory(size=0x1000)
    state = MachineState()
    out = io.StringIO()
    isa = Loongarch32r(memory, state, out=out)
    isa.init()
    return isa, memory, state, out


def step(isa):
    s = Decode(pc=isa.cpu.pc, snpc=isa.cpu.pc)
    isa.exec_once(s)
    isa.cpu.pc = s.dnpc
    return s


def test_init_loads_image_and_resets_pc(machine):
    isa, memory, _, _ = machine
    assert isa.cpu.pc == memory.base
    assert memory.read(memory.base, 4) == IMG[0]
    assert memory.read(memory.base + 16, 4) == 0xDEADBEEF


def test_builtin_image_hits_good_trap(machine):
    isa, memory, state, _ = machine
    for _ in range(4):
        step(isa)
    assert state.state is RunState.END
    assert state.halt_ret == 0
    assert state.halt_pc == memory.base + 12
    assert isa.gpr(12) == memory.base
    assert memory.read(memory.base + 16, 4) == 0
    assert not state.is_exit_status_bad()


def test_pcaddu12i_writes_pc_relative_value(machine):
    isa, memory, _, _ = machine
    s = step(isa)
    assert isa.gpr(12) == s.pc
    assert s.dnpc == s.pc + 4


def test_break_reports_a0(machine):
    isa, memory, state, _ = machine
    memory.load(memory.base, IMG[3].to_bytes(4, "little"))
    isa.set_gpr(4, 7)
    step(isa)
    assert state.state is RunState.END
    assert state.halt_ret == 7
    assert state.is_exit_status_bad()


def test_zero_register_stays_zero(machine):
    isa, memory, _, _ = machine
    # pcaddu12i $zero,0
    memory.load(memory.base, (0x1C000000).to_bytes(4, "little"))
    step(isa)
    assert isa.gpr(0) == 0


def test_invalid_instruction_aborts(machine):
    isa, memory, state, out = machine
    memory.load(memory.base, b"\xff\xff\xff\xff")
    step(isa)
    assert state.state is RunState.ABORT
    assert state.halt_ret == -1
    assert "invalid opcode" in out.getvalue()
    assert LOGO in out.getvalue()


def test_register_names(machine):
    isa, _, _, _ = machine
    assert isa.reg_name(0) == "$0"
    assert isa.reg_name(4) == "a0"
    assert isa.reg_name(12) == "t0"
    with pytest.raises(IndexError):
        isa.reg_name(32)


def test_system_hooks(machine):
    isa, _, _, _ = machine
    assert isa.raise_intr(3, 0) == 0
    assert isa.query_intr() == isa.word_mask
    assert isa.mmu_translate(0, 4, None) is MemRet.FAIL