"""Guest physical memory with fall-through to memory-mapped devices."""

from __future__ import annotations

import random
from typing import Callable, Protocol

from .log import Logger

DEFAULT_MBASE = 0x80000000
DEFAULT_MSIZE = 0x8000000

_ACCESS_WIDTHS = (1, 2, 4, 8)


class MemoryAccessError(Exception):
    """An access fell outside physical memory and every device."""


class _Bus(Protocol):
    def read(self, addr: int, length: int) -> int: ...

    def write(self, addr: int, length: int, data: int) -> None: ...


def _check_width(length: int) -> None:
    if length not in _ACCESS_WIDTHS:
        raise ValueError(f"unsupported access width {length}")


def _host_read(buf: bytearray, offset: int, length: int) -> int:
    _check_width(length)
    return int.from_bytes(buf[offset:offset + length], "little")


def _host_write(buf: bytearray, offset: int, length: int, data: int) -> None:
    _check_width(length)
    mask = (1 << (8 * length)) - 1
    buf[offset:offset + length] = (data & mask).to_bytes(length, "little")


class PhysicalMemory:
    """Little-endian guest RAM at ``[base, base + size)``."""

    def __init__(
        self,
        size: int = DEFAULT_MSIZE,
        base: int = DEFAULT_MBASE,
        *,
        random_init: bool = False,
        mmio: _Bus | None = None,
        logger: Logger | None = None,
        pc: Callable[[], int] | None = None,
    ) -> None:
        self.base = base
        self.size = size
        self._data = bytearray(random.randbytes(size)) if random_init else bytearray(size)
        self.mmio = mmio
        self._pc = pc
        if logger is not None:
            logger.log(f"physical memory area [0x{self.left:08x}, 0x{self.right:08x}]")

    @property
    def left(self) -> int:
        return self.base

    @property
    def right(self) -> int:
        return self.base + self.size - 1

    def in_pmem(self, addr: int) -> bool:
        """Whether ``addr`` lies inside physical memory."""
        return 0 <= addr - self.base < self.size

    def _out_of_bound(self, addr: int) -> MemoryAccessError:
        message = (
            f"address = 0x{addr:08x} is out of bound of pmem "
            f"[0x{self.left:08x}, 0x{self.right:08x}]"
        )
        if self._pc is not None:
            message += f" at pc = 0x{self._pc():08x}"
        return MemoryAccessError(message)

    def _offset(self, addr: int, length: int) -> int:
        offset = addr - self.base
        if offset + length > self.size:
            raise self._out_of_bound(addr + length - 1)
        return offset

    def read(self, addr: int, length: int) -> int:
        """Read ``length`` bytes as an unsigned little-endian integer."""
        if self.in_pmem(addr):
            return _host_read(self._data, self._offset(addr, length), length)
        if self.mmio is not None:
            return self.mmio.read(addr, length)
        raise self._out_of_bound(addr)

    def write(self, addr: int, length: int, data: int) -> None:
        """Write the low ``length`` bytes of ``data``."""
        if self.in_pmem(addr):
            _host_write(self._data, self._offset(addr, length), length, data)
            return
        if self.mmio is not None:
            self.mmio.write(addr, length, data)
            return
        raise self._out_of_bound(addr)

    def ifetch(self, addr: int, length: int) -> int:
        """Fetch instruction bytes; addresses are physical."""
        return self.read(addr, length)

    def load(self, addr: int, data: bytes) -> None:
        """Copy raw bytes into memory, e.g. a program image."""
        if not self.in_pmem(addr):
            raise self._out_of_bound(addr)
        offset = self._offset(addr, len(data))
        self._data[offset:offset + len(data)] = data

    def dump(self, addr: int, length: int) -> bytes:
        """Return a copy of ``length`` raw bytes starting at ``addr``."""
        if not self.in_pmem(addr):
            raise self._out_of_bound(addr)
        offset = self._offset(addr, length)
        return bytes(self._data[offset:offset + length])