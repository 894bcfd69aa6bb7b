import io

import pytest

from nemu.sdb import NR_WP, Debugger, WatchpointPool


class FakeCPU:
    def __init__(self):
        self.calls = []

    def exec(self, n):
        self.calls.append(n)


@pytest.fixture
def dbg():
    cpu = FakeCPU()
    out = io.StringIO()
    return Debugger(cpu, out=out), cpu, out


def test_help_lists_all_commands(dbg):
    debugger, _, out = dbg
    assert debugger.run_command("help") is True
    lines = out.getvalue().splitlines()
    assert lines == [
        "help - Display information about all supported commands",
        "c - Continue the execution of the program",
        "q - Exit NEMU",
    ]


def test_help_single_command(dbg):
    debugger, _, out = dbg
    debugger.run_command("help c")
    assert out.getvalue() == "c - Continue the execution of the program\n"


def test_help_unknown_argument(dbg):
    debugger, _, out = dbg
    debugger.run_command("help zz")
    assert out.getvalue() == "Unknown command 'zz'\n"


def test_unknown_command(dbg):
    debugger, cpu, out = dbg
    assert debugger.run_command("frob 1") is True
    assert out.getvalue() == "Unknown command 'frob'\n"
    assert cpu.calls == []


def test_continue_runs_without_bound(dbg):
    debugger, cpu, _ = dbg
    assert debugger.run_command("  c") is True
    assert cpu.calls == [-1]


def test_quit_stops_mainloop(dbg):
    debugger, cpu, _ = dbg
    debugger.mainloop(["c", "q", "c"])
    assert cpu.calls == [-1]


def test_blank_lines_are_skipped(dbg):
    debugger, cpu, out = dbg
    debugger.mainloop(["", "   ", "c\n"])
    assert cpu.calls == [-1]
    assert out.getvalue() == ""


def test_batch_mode_continues_once():
    cpu = FakeCPU()
    debugger = Debugger(cpu, out=io.StringIO(), batch=True)
    debugger.mainloop(["help", "c", "c"])
    assert cpu.calls == [-1]


def test_set_batch_mode():
    cpu = FakeCPU()
    debugger = Debugger(cpu, out=io.StringIO())
    debugger.set_batch_mode()
    debugger.mainloop([])
    assert cpu.calls == [-1]


def test_event_queue_cleared_per_command():
    cleared = []
    debugger = Debugger(FakeCPU(), out=io.StringIO(), clear_event_queue=lambda: cleared.append(1))
    debugger.mainloop(["help", "", "c"])
    assert len(cleared) == 2


def test_pool_starts_all_free_in_order():
    pool = WatchpointPool()
    assert [wp.no for wp in pool.free] == list(range(NR_WP))
    assert pool.active == []


def test_pool_new_and_free_round_trip():
    pool = WatchpointPool()
    first = pool.new_wp()
    second = pool.new_wp()
    assert (first.no, second.no) == (0, 1)
    assert pool.active == [second, first]
    pool.free_wp(first)
    assert first not in pool.active
    assert pool.new_wp() is first
    assert len(pool.free) + len(pool.active) == NR_WP


def test_pool_exhaustion_and_bad_free():
    pool = WatchpointPool(size=2)
    pool.new_wp()
    wp = pool.new_wp()
    with pytest.raises(RuntimeError):
        pool.new_wp()
    pool.free_wp(wp)
    with pytest.raises(ValueError):
        pool.free_wp(wp)


def test_debugger_has_fresh_pool(dbg):
    debugger, _, _ = dbg
    assert len(debugger.watchpoints.free) == NR_WP