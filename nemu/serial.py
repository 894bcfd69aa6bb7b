"""Output-only serial port bound to the host's standard error."""

from __future__ import annotations

import sys
from typing import TextIO

from .iomap import DeviceAccessError, IOSpace, MMIOBus, PortIOBus

SERIAL_MMIO = 0xA00003F8
SERIAL_PORT = 0x3F8
CH_OFFSET = 0


class Serial:
    """A 16550-style transmitter: byte writes at offset 0 go to ``stream``."""

    def __init__(
        self,
        space: IOSpace,
        bus: MMIOBus | PortIOBus,
        addr: int = SERIAL_MMIO,
        stream: TextIO | None = None,
    ) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.base = space.new_space(8)
        bus.add_map("serial", addr, self.base, 8, self._io_handler)

    def _io_handler(self, offset: int, length: int, is_write: bool) -> None:
        if length != 1:
            raise DeviceAccessError(f"serial access length must be 1, got {length}")
        if offset != CH_OFFSET:
            raise DeviceAccessError(f"do not support offset = {offset}")
        if not is_write:
            raise DeviceAccessError("do not support read")
        self.stream.write(chr(self.base[0]))
        self.stream.flush()