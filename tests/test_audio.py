import pytest

from nemu.audio import AUDIO_CTL_MMIO, AUDIO_CTL_PORT, SB_ADDR, Audio, AudioReg
from nemu.iomap import DeviceAccessError, IOSpace, MMIOBus, PortIOBus


def test_register_round_trip():
    bus = MMIOBus()
    audio = Audio(IOSpace(), bus)
    bus.write(AUDIO_CTL_MMIO + 4 * AudioReg.FREQ, 4, 44100)
    bus.write(AUDIO_CTL_MMIO + 4 * AudioReg.CHANNELS, 4, 2)
    assert audio.register(AudioReg.FREQ) == 44100
    assert audio.register(AudioReg.CHANNELS) == 2
    assert bus.read(AUDIO_CTL_MMIO + 4 * AudioReg.FREQ, 4) == 44100


def test_stream_buffer_round_trip():
    bus = MMIOBus()
    audio = Audio(IOSpace(), bus)
    bus.write(SB_ADDR + 10, 1, 0x7F)
    assert audio.sbuf[10] == 0x7F
    assert bus.read(SB_ADDR + 10, 1) == 0x7F


def test_maps_and_bounds():
    bus = MMIOBus()
    Audio(IOSpace(), bus)
    assert [m.name for m in bus.maps] == ["audio", "audio-sbuf"]
    with pytest.raises(DeviceAccessError):
        bus.read(AUDIO_CTL_MMIO + 4 * len(AudioReg), 4)


def test_control_on_port_bus():
    mmio = MMIOBus()
    pio = PortIOBus()
    audio = Audio(IOSpace(), mmio, ctl_bus=pio, ctl_addr=AUDIO_CTL_PORT)
    pio.write(AUDIO_CTL_PORT + 4 * AudioReg.SAMPLES, 4, 1024)
    assert audio.register(AudioReg.SAMPLES) == 1024
    assert [m.name for m in mmio.maps] == ["audio-sbuf"]