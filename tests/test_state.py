from nemu.state import MachineState, RunState


def test_default_state_is_stop():
    state = MachineState()
    assert state.state is RunState.STOP
    assert state.halt_pc == 0
    assert state.halt_ret == 0


def test_set_records_all_fields():
    state = MachineState()
    state.set(RunState.END, 0x80000010, 7)
    assert (state.state, state.halt_pc, state.halt_ret) == (RunState.END, 0x80000010, 7)


def test_good_trap_is_not_bad():
    state = MachineState()
    state.set(RunState.END, 0x80000000, 0)
    assert state.is_exit_status_bad() is False


def test_bad_trap_is_bad():
    state = MachineState()
    state.set(RunState.END, 0x80000000, 1)
    assert state.is_exit_status_bad() is True


def test_quit_is_not_bad():
    state = MachineState(state=RunState.QUIT)
    assert state.is_exit_status_bad() is False


def test_stop_and_abort_are_bad():
    assert MachineState(state=RunState.STOP).is_exit_status_bad() is True
    assert MachineState(state=RunState.ABORT).is_exit_status_bad() is True
    assert MachineState(state=RunState.RUNNING).is_exit_status_bad() is True