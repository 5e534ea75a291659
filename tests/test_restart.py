from conftest import FakeProcesses

from showtray.core.restart import ShellRestarter


def _restarter(processes, attempts=3):
    sleeps = []
    restarter = ShellRestarter(processes, attempts=attempts, interval=0.25, sleep=sleeps.append)
    return restarter, sleeps


def test_restart_waits_for_exit_then_starts():
    processes = FakeProcesses(stop_after_checks=2)
    restarter, sleeps = _restarter(processes)

    warnings = restarter.restart()

    assert warnings == []
    assert sleeps == [0.25, 0.25]
    assert processes.started == ["explorer.exe"]


def test_restart_timeout_is_only_a_warning():
    processes = FakeProcesses(never_stops=True)
    restarter, sleeps = _restarter(processes, attempts=4)

    warnings = restarter.restart()

    assert len(warnings) == 1
    assert "still running" in warnings[0]
    assert len(sleeps) == 4
    # still alive, so nothing is launched
    assert processes.started == []
