"""VGA controller: a size register and a 32-bit ARGB framebuffer."""

from __future__ import annotations

from typing import Callable

from .iomap import IOSpace, MMIOBus, PortIOBus

VGA_CTL_MMIO = 0xA0000100
VGA_CTL_PORT = 0x100
FB_ADDR = 0xA1000000

Renderer = Callable[[bytes, int, int], None]


class VGA:
    """Exposes the screen size at the control register and memory at the framebuffer."""

    def __init__(
        self,
        space: IOSpace,
        bus: MMIOBus,
        *,
        ctl_bus: MMIOBus | PortIOBus | None = None,
        ctl_addr: int = VGA_CTL_MMIO,
        fb_addr: int = FB_ADDR,
        width: int = 400,
        height: int = 300,
        renderer: Renderer | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self._renderer = renderer
        self.ctl = space.new_space(8)
        self.ctl[0:4] = ((width << 16) | height).to_bytes(4, "little")
        (ctl_bus or bus).add_map("vgactl", ctl_addr, self.ctl, 8, None)
        self.vmem = space.new_space(self.screen_size)
        bus.add_map("vmem", fb_addr, self.vmem, self.screen_size, None)

    @property
    def screen_size(self) -> int:
        """Framebuffer size in bytes, four per pixel."""
        return self.width * self.height * 4

    def pixel(self, x: int, y: int) -> int:
        """The ARGB value of one pixel."""
        start = 4 * (y * self.width + x)
        return int.from_bytes(self.vmem[start:start + 4], "little")

    def update_screen(self) -> None:
        """Hand the current framebuffer to the renderer, if there is one."""
        if self._renderer is not None:
            self._renderer(bytes(self.vmem[:self.screen_size]), self.width, self.height)