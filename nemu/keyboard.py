"""i8042-style keyboard: a queue of key events read one at a time."""

from __future__ import annotations

import string
from collections import deque

from .iomap import DeviceAccessError, IOSpace, MMIOBus, PortIOBus
from .state import MachineState, RunState

KEYDOWN_MASK = 0x8000
KEY_QUEUE_LEN = 1024
KEY_NONE = 0
I8042_DATA_MMIO = 0xA0000060
I8042_DATA_PORT = 0x60

KEY_NAMES = (
    "ESCAPE", "F1", "F2", "F3", "F4", "F5", "F6", "F7", "F8", "F9", "F10", "F11", "F12",
    "GRAVE", "1", "2", "3", "4", "5", "6", "7", "8", "9", "0", "MINUS", "EQUALS", "BACKSPACE",
    "TAB", "Q", "W", "E", "R", "T", "Y", "U", "I", "O", "P",
    "LEFTBRACKET", "RIGHTBRACKET", "BACKSLASH",
    "CAPSLOCK", "A", "S", "D", "F", "G", "H", "J", "K", "L", "SEMICOLON", "APOSTROPHE", "RETURN",
    "LSHIFT", "Z", "X", "C", "V", "B", "N", "M", "COMMA", "PERIOD", "SLASH", "RSHIFT",
    "LCTRL", "APPLICATION", "LALT", "SPACE", "RALT", "RCTRL",
    "UP", "DOWN", "LEFT", "RIGHT", "INSERT", "DELETE", "HOME", "END", "PAGEUP", "PAGEDOWN",
)

# Key codes seen by the guest, numbered from 1 in the order above.
AM_KEYS = {name: code for code, name in enumerate(KEY_NAMES, start=1)}

# Host scancodes (USB HID usage IDs) of the keys above.
SCANCODES: dict[str, int] = {
    **{letter: 4 + i for i, letter in enumerate(string.ascii_uppercase)},
    **{str(d): 29 + d for d in range(1, 10)},
    "0": 39,
    "RETURN": 40, "ESCAPE": 41, "BACKSPACE": 42, "TAB": 43, "SPACE": 44,
    "MINUS": 45, "EQUALS": 46, "LEFTBRACKET": 47, "RIGHTBRACKET": 48, "BACKSLASH": 49,
    "SEMICOLON": 51, "APOSTROPHE": 52, "GRAVE": 53, "COMMA": 54, "PERIOD": 55, "SLASH": 56,
    "CAPSLOCK": 57,
    **{f"F{n}": 57 + n for n in range(1, 13)},
    "INSERT": 73, "HOME": 74, "PAGEUP": 75, "DELETE": 76, "END": 77, "PAGEDOWN": 78,
    "RIGHT": 79, "LEFT": 80, "DOWN": 81, "UP": 82,
    "APPLICATION": 101,
    "LCTRL": 224, "LSHIFT": 225, "LALT": 226, "RCTRL": 228, "RSHIFT": 229, "RALT": 230,
}

KEYMAP = {SCANCODES[name]: AM_KEYS[name] for name in KEY_NAMES}


class KeyQueueOverflow(Exception):
    """More key events arrived than the queue can hold."""


class Keyboard:
    """Queues host key events; each read of the data register pops one."""

    def __init__(
        self,
        space: IOSpace,
        bus: MMIOBus | PortIOBus,
        state: MachineState,
        addr: int = I8042_DATA_MMIO,
    ) -> None:
        self._state = state
        self._queue: deque[int] = deque()
        self.base = space.new_space(4)
        self.base[0:4] = KEY_NONE.to_bytes(4, "little")
        bus.add_map("keyboard", addr, self.base, 4, self._io_handler)

    def send_key(self, scancode: int, is_keydown: bool) -> None:
        """Queue a host key event while the guest is running."""
        code = KEYMAP.get(scancode, KEY_NONE)
        if self._state.state is not RunState.RUNNING or code == KEY_NONE:
            return
        if len(self._queue) >= KEY_QUEUE_LEN - 1:
            raise KeyQueueOverflow("key queue overflow!")
        self._queue.append(code | (KEYDOWN_MASK if is_keydown else 0))

    def dequeue(self) -> int:
        """Pop the oldest event, or KEY_NONE when the queue is empty."""
        return self._queue.popleft() if self._queue else KEY_NONE

    def _io_handler(self, offset: int, length: int, is_write: bool) -> None:
        if is_write:
            raise DeviceAccessError("keyboard data register is read-only")
        if offset != 0:
            raise DeviceAccessError(f"do not support offset = {offset}")
        self.base[0:4] = self.dequeue().to_bytes(4, "little")