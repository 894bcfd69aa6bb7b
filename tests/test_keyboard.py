import pytest

from nemu.iomap import DeviceAccessError, IOSpace, MMIOBus
from nemu.keyboard import (
    AM_KEYS,
    I8042_DATA_MMIO,
    KEY_NONE,
    KEY_QUEUE_LEN,
    KEYDOWN_MASK,
    KEYMAP,
    SCANCODES,
    KeyQueueOverflow,
    Keyboard,
)
from nemu.state import MachineState, RunState


@pytest.fixture
def setup():
    state = MachineState(state=RunState.RUNNING)
    bus = MMIOBus()
    keyboard = Keyboard(IOSpace(), bus, state)
    return keyboard, bus, state


def test_keymap_is_one_to_one():
    assert len(KEYMAP) == len(AM_KEYS)
    assert sorted(KEYMAP.values()) == sorted(AM_KEYS.values())


def test_keydown_and_keyup_order(setup):
    keyboard, _, _ = setup
    keyboard.send_key(SCANCODES["A"], True)
    keyboard.send_key(SCANCODES["A"], False)
    assert keyboard.dequeue() == AM_KEYS["A"] | KEYDOWN_MASK
    assert keyboard.dequeue() == AM_KEYS["A"]
    assert keyboard.dequeue() == KEY_NONE


def test_events_ignored_when_not_running(setup):
    keyboard, _, state = setup
    state.state = RunState.STOP
    keyboard.send_key(SCANCODES["SPACE"], True)
    assert keyboard.dequeue() == KEY_NONE


def test_unknown_scancode_ignored(setup):
    keyboard, _, _ = setup
    keyboard.send_key(250, True)
    assert keyboard.dequeue() == KEY_NONE


def test_read_through_bus_pops_queue(setup):
    keyboard, bus, _ = setup
    assert bus.read(I8042_DATA_MMIO, 4) == KEY_NONE
    keyboard.send_key(SCANCODES["ESCAPE"], True)
    assert bus.read(I8042_DATA_MMIO, 4) == AM_KEYS["ESCAPE"] | KEYDOWN_MASK
    assert bus.read(I8042_DATA_MMIO, 4) == KEY_NONE


def test_write_is_rejected(setup):
    _, bus, _ = setup
    with pytest.raises(DeviceAccessError):
        bus.write(I8042_DATA_MMIO, 4, 1)


def test_queue_overflow(setup):
    keyboard, _, _ = setup
    for _ in range(KEY_QUEUE_LEN - 1):
        keyboard.send_key(SCANCODES["Q"], True)
    with pytest.raises(KeyQueueOverflow):
        keyboard.send_key(SCANCODES["Q"], True)
    assert keyboard.dequeue() == AM_KEYS["Q"] | KEYDOWN_MASK