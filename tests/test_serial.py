import io

import pytest

from nemu.iomap import DeviceAccessError, IOSpace, MMIOBus, PortIOBus
from nemu.serial import SERIAL_MMIO, SERIAL_PORT, Serial


@pytest.fixture
def setup():
    stream = io.StringIO()
    bus = MMIOBus()
    Serial(IOSpace(), bus, SERIAL_MMIO, stream)
    return bus, stream


def test_written_bytes_reach_stream(setup):
    bus, stream = setup
    for ch in "hi!":
        bus.write(SERIAL_MMIO, 1, ord(ch))
    assert stream.getvalue() == "hi!"


def test_read_is_rejected(setup):
    bus, _ = setup
    with pytest.raises(DeviceAccessError, match="read"):
        bus.read(SERIAL_MMIO, 1)


def test_wide_access_is_rejected(setup):
    bus, stream = setup
    with pytest.raises(DeviceAccessError):
        bus.write(SERIAL_MMIO, 2, 0x4141)
    assert stream.getvalue() == ""


def test_other_offset_is_rejected(setup):
    bus, _ = setup
    with pytest.raises(DeviceAccessError, match="offset = 1"):
        bus.write(SERIAL_MMIO + 1, 1, 0x41)


def test_port_io_variant():
    stream = io.StringIO()
    bus = PortIOBus()
    Serial(IOSpace(), bus, SERIAL_PORT, stream)
    bus.write(SERIAL_PORT, 1, ord("A"))
    assert stream.getvalue() == "A"