"""Device register maps reached through memory-mapped or port I/O."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .log import Logger
from .memory import _host_read, _host_write

IO_SPACE_MAX = 2 * 1024 * 1024
PAGE_SIZE = 4096
NR_MAP = 16
PORT_IO_SPACE_MAX = 65535

IOCallback = Callable[[int, int, bool], None]


class DeviceAccessError(Exception):
    """A device access was malformed or hit no device."""


class IOSpace:
    """Allocator for device register storage, in whole pages."""

    def __init__(self, limit: int = IO_SPACE_MAX) -> None:
        self.limit = limit
        self.used = 0

    def new_space(self, size: int) -> bytearray:
        """Return zeroed storage of ``size`` bytes rounded up to a page."""
        aligned = (size + PAGE_SIZE - 1) & ~(PAGE_SIZE - 1)
        if self.used + aligned >= self.limit:
            raise DeviceAccessError("I/O space exhausted")
        self.used += aligned
        return bytearray(aligned)


def _check_length(length: int) -> None:
    if not 1 <= length <= 8:
        raise DeviceAccessError(f"invalid access length {length}")


@dataclass
class IOMap:
    """One device's register window ``[low, high]`` backed by ``space``."""

    name: str
    low: int
    high: int
    space: bytearray
    callback: IOCallback | None = None

    def __contains__(self, addr: int) -> bool:
        return self.low <= addr <= self.high

    def _check_bound(self, addr: int) -> None:
        if addr not in self:
            raise DeviceAccessError(
                f"address (0x{addr:08x}) is out of bound {{{self.name}}} "
                f"[0x{self.low:08x}, 0x{self.high:08x}]"
            )

    def read(self, addr: int, length: int) -> int:
        """Let the device prepare the data, then read it."""
        _check_length(length)
        self._check_bound(addr)
        offset = addr - self.low
        if self.callback is not None:
            self.callback(offset, length, False)
        return _host_read(self.space, offset, length)

    def write(self, addr: int, length: int, data: int) -> None:
        """Store the data, then notify the device."""
        _check_length(length)
        self._check_bound(addr)
        offset = addr - self.low
        _host_write(self.space, offset, length, data)
        if self.callback is not None:
            self.callback(offset, length, True)


def _find(maps: list[IOMap], addr: int) -> IOMap | None:
    return next((m for m in maps if addr in m), None)


class MMIOBus:
    """Memory-mapped device regions, kept clear of physical memory."""

    def __init__(self, pmem: tuple[int, int] | None = None, logger: Logger | None = None) -> None:
        self.maps: list[IOMap] = []
        self._pmem = pmem
        self._logger = logger

    def _in_pmem(self, addr: int) -> bool:
        return self._pmem is not None and self._pmem[0] <= addr <= self._pmem[1]

    @staticmethod
    def _overlap(name1: str, l1: int, r1: int, name2: str, l2: int, r2: int) -> DeviceAccessError:
        return DeviceAccessError(
            f"MMIO region {name1}@[0x{l1:08x}, 0x{r1:08x}] is overlapped "
            f"with {name2}@[0x{l2:08x}, 0x{r2:08x}]"
        )

    def add_map(
        self,
        name: str,
        addr: int,
        space: bytearray,
        length: int,
        callback: IOCallback | None = None,
    ) -> IOMap:
        """Register a device window of ``length`` bytes at ``addr``."""
        if len(self.maps) >= NR_MAP:
            raise DeviceAccessError("too many MMIO maps")
        left, right = addr, addr + length - 1
        if self._in_pmem(left) or self._in_pmem(right):
            assert self._pmem is not None
            raise self._overlap(name, left, right, "pmem", *self._pmem)
        for other in self.maps:
            if left <= other.high and right >= other.low:
                raise self._overlap(name, left, right, other.name, other.low, other.high)
        iomap = IOMap(name, left, right, space, callback)
        self.maps.append(iomap)
        if self._logger is not None:
            self._logger.log(f"Add mmio map '{name}' at [0x{left:08x}, 0x{right:08x}]")
        return iomap

    def find(self, addr: int) -> IOMap | None:
        """The map holding ``addr``, or None."""
        return _find(self.maps, addr)

    def _resolve(self, addr: int) -> IOMap:
        iomap = self.find(addr)
        if iomap is None:
            raise DeviceAccessError(f"address (0x{addr:08x}) is out of bound")
        return iomap

    def read(self, addr: int, length: int) -> int:
        return self._resolve(addr).read(addr, length)

    def write(self, addr: int, length: int, data: int) -> None:
        self._resolve(addr).write(addr, length, data)


class PortIOBus:
    """Device windows in the 16-bit port I/O space."""

    def __init__(self, logger: Logger | None = None) -> None:
        self.maps: list[IOMap] = []
        self._logger = logger

    def add_map(
        self,
        name: str,
        addr: int,
        space: bytearray,
        length: int,
        callback: IOCallback | None = None,
    ) -> IOMap:
        """Register a device window of ``length`` ports at ``addr``."""
        if len(self.maps) >= NR_MAP:
            raise DeviceAccessError("too many port-io maps")
        if addr + length > PORT_IO_SPACE_MAX:
            raise DeviceAccessError(f"port-io map '{name}' exceeds the port space")
        iomap = IOMap(name, addr, addr + length - 1, space, callback)
        self.maps.append(iomap)
        if self._logger is not None:
            self._logger.log(
                f"Add port-io map '{name}' at [0x{iomap.low:08x}, 0x{iomap.high:08x}]"
            )
        return iomap

    def _resolve(self, addr: int, length: int) -> IOMap:
        if addr + length - 1 >= PORT_IO_SPACE_MAX:
            raise DeviceAccessError(f"port 0x{addr:x} is out of the port space")
        iomap = _find(self.maps, addr)
        if iomap is None:
            raise DeviceAccessError(f"no device at port 0x{addr:x}")
        return iomap

    def read(self, addr: int, length: int) -> int:
        return self._resolve(addr, length).read(addr, length)

    def write(self, addr: int, length: int, data: int) -> None:
        self._resolve(addr, length).write(addr, length, data)