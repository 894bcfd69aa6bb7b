"""Audio controller registers and the stream buffer."""

from __future__ import annotations

import enum

from .iomap import IOSpace, MMIOBus, PortIOBus

AUDIO_CTL_MMIO = 0xA0000200
AUDIO_CTL_PORT = 0x200
SB_ADDR = 0xA1200000
SB_SIZE = 0x10000


class AudioReg(enum.IntEnum):
    FREQ = 0
    CHANNELS = 1
    SAMPLES = 2
    SBUF_SIZE = 3
    INIT = 4
    COUNT = 5


NR_REG = len(AudioReg)


class Audio:
    """Control registers plus a stream buffer the guest fills with samples."""

    def __init__(
        self,
        space: IOSpace,
        bus: MMIOBus,
        *,
        ctl_bus: MMIOBus | PortIOBus | None = None,
        ctl_addr: int = AUDIO_CTL_MMIO,
        sb_addr: int = SB_ADDR,
        sb_size: int = SB_SIZE,
    ) -> None:
        space_size = 4 * NR_REG
        self.base = space.new_space(space_size)
        # The registers are plain storage: the device reacts to no access.
        (ctl_bus or bus).add_map("audio", ctl_addr, self.base, space_size, None)
        self.sbuf = space.new_space(sb_size)
        bus.add_map("audio-sbuf", sb_addr, self.sbuf, sb_size, None)

    def register(self, reg: AudioReg) -> int:
        """Current value of one control register."""
        start = 4 * reg
        return int.from_bytes(self.base[start:start + 4], "little")