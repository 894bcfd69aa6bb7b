# nemu

Building blocks of a small emulator of a simple computer: little-endian guest
memory, device register windows reached through memory-mapped or port I/O, a
handful of devices, instruction decoders for three guest instruction sets
(riscv32, mips32, loongarch32r) and a simple command-driven debugger.

It is a library; there is no standard library dependency beyond Python itself.

## Installing

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## What is in it

- `nemu.state` — `RunState` (RUNNING, STOP, END, ABORT, QUIT) and
  `MachineState`, which records how the machine halted;
  `is_exit_status_bad()` is false only after a good trap (END with a zero
  return value) or a QUIT.
- `nemu.log` — `Logger` and `init_log(log_file)`, which logs to a file or to
  standard output.
- `nemu.memory` — `PhysicalMemory(size, base)`: bounds-checked reads and
  writes of 1, 2, 4 or 8 bytes, `load`/`dump` of raw bytes, and a fall-through
  to an MMIO bus for addresses outside RAM. Bad accesses raise
  `MemoryAccessError`.
- `nemu.iomap` — `IOSpace` (page-aligned register storage), `IOMap`,
  `MMIOBus` (rejects regions that overlap RAM or each other) and `PortIOBus`.
  Device windows call `callback(offset, length, is_write)` before a read and
  after a write. Bad accesses raise `DeviceAccessError`.
- Devices: `nemu.serial.Serial` (byte writes go to a text stream, standard
  error by default), `nemu.keyboard.Keyboard` (host key events queued while
  running, one popped per read of the data register), `nemu.vga.VGA` (size
  register and ARGB framebuffer, with an optional renderer callback),
  `nemu.audio.Audio` (control registers and a stream buffer) and
  `nemu.alarm.Alarm` (calls registered handlers periodically).
- `nemu.isa_base` — `Isa`, `CPUState`, `Decode` and the helpers `bits`,
  `sext` and `pattern` for matching instruction bit patterns.
- `nemu.riscv32.Riscv32`, `nemu.mips32.Mips32`,
  `nemu.loongarch32r.Loongarch32r` — each knows a load, a store, an
  upper-immediate instruction and a trap instruction; anything else is
  reported as an invalid opcode and aborts the run. `init()` loads a built-in
  program at the reset vector.
- `nemu.sdb` — `Debugger` with the commands `help [CMD]`, `c` (continue) and
  `q` (quit), fed with `run_command(line)` or `mainloop(lines)`, and a
  `WatchpointPool` of 32 slots.

## Example

Running the built-in riscv32 program, which stores zero, loads it into `a0`
and traps with it:

```python
from nemu.isa_base import Decode
from nemu.memory import PhysicalMemory
from nemu.riscv32 import Riscv32
from nemu.state import MachineState, RunState

memory = PhysicalMemory(size=0x10000)   # based at 0x80000000
state = MachineState()
isa = Riscv32(memory, state)
isa.init()

state.state = RunState.RUNNING
while state.state is RunState.RUNNING:
    s = Decode(pc=isa.cpu.pc, snpc=isa.cpu.pc)
    isa.exec_once(s)
    isa.cpu.pc = s.dnpc

assert state.state is RunState.END and state.halt_ret == 0
assert not state.is_exit_status_bad()
```

The debugger drives any object with an `exec(n)` method, where `n = -1`
means "run until it stops":

```python
from nemu.sdb import Debugger

debugger = Debugger(my_cpu)
debugger.mainloop(["help", "c", "q"])
```

## What it does not do

- There is no command-line program: nothing parses options, loads an image
  file or starts the debugger for you. You assemble memory, devices and an
  instruction set yourself, as above.
- There is no execution loop with statistics or instruction tracing; you step
  the instruction set with `exec_once` yourself, or hand the debugger your own
  executor.
- There is no 64-bit guest, no real-time clock device, no SD card device, no
  central device set-up or event polling, no expression evaluation in the
  debugger and no differential testing against a reference.