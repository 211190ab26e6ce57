import pytest

from timed_snake.scheduler import Scheduler, VirtualClock


def test_periodic_task_fires_every_period(scheduler, clock) -> None:
    fired = []
    scheduler.call_every(100, lambda: fired.append(clock()))
    scheduler.advance(350)
    assert fired == [100, 200, 300]
    assert clock() == 350


def test_independent_tasks_interleave_in_deadline_order(scheduler, clock) -> None:
    fired = []
    scheduler.call_every(250, lambda: fired.append(("countdown", clock())))
    scheduler.call_every(195, lambda: fired.append(("tick", clock())))
    scheduler.advance(500)
    assert fired == [
        ("tick", 195), ("countdown", 250), ("tick", 390), ("countdown", 500),
    ]


def test_same_deadline_fires_in_creation_order(scheduler) -> None:
    fired = []
    scheduler.call_every(100, lambda: fired.append("first"))
    scheduler.call_every(50, lambda: fired.append("second"))
    scheduler.advance(100)
    assert fired == ["second", "first", "second"]


def test_cancelled_task_never_fires(scheduler) -> None:
    fired = []
    task = scheduler.call_every(100, lambda: fired.append(1))
    scheduler.advance(150)
    task.cancel()
    scheduler.advance(1000)
    assert fired == [1]
    assert not task.active
    assert scheduler.tasks == []


def test_reschedule_replaces_outstanding_firing(scheduler, clock) -> None:
    fired = []
    task = scheduler.call_every(100, lambda: fired.append(clock()))
    scheduler.advance(60)
    task.reschedule(30)
    scheduler.advance(100)
    assert fired == [90, 120, 150]
    assert len(scheduler.tasks) == 1


def test_task_rescheduling_itself_is_not_bumped(scheduler, clock) -> None:
    fired = []
    periods = iter([80, 60, 40])

    def speed_up():
        fired.append(clock())
        task.reschedule(next(periods, 40))

    task = scheduler.call_every(100, speed_up)
    scheduler.advance(300)
    assert fired == [100, 180, 240, 280]


def test_callback_can_cancel_every_task(scheduler) -> None:
    fired = []
    other = scheduler.call_every(100, lambda: fired.append("other"))

    def stop_all():
        fired.append("stop")
        scheduler.cancel_all()

    scheduler.call_every(100, stop_all)
    scheduler.call_every(100, lambda: fired.append("late"))
    scheduler.advance(500)
    assert fired == ["other", "stop"]
    assert not other.active


def test_run_pending_rebases_a_late_task() -> None:
    now = [0]
    scheduler = Scheduler(lambda: now[0])
    fired = []
    task = scheduler.call_every(100, lambda: fired.append(now[0]))

    now[0] = 1050
    assert scheduler.run_pending() == 1
    assert task.deadline == 1150

    now[0] = 1100
    assert scheduler.run_pending() == 0
    assert fired == [1050]


def test_invalid_periods_are_rejected(scheduler) -> None:
    with pytest.raises(ValueError):
        scheduler.call_every(0, lambda: None)
    task = scheduler.call_every(10, lambda: None)
    with pytest.raises(ValueError):
        task.reschedule(-5)
    task.cancel()
    with pytest.raises(RuntimeError):
        task.reschedule(10)


def test_advance_requires_virtual_clock() -> None:
    with pytest.raises(TypeError):
        Scheduler(lambda: 0).advance(10)


def test_virtual_clock_cannot_run_backwards() -> None:
    clock = VirtualClock(100)
    with pytest.raises(ValueError):
        clock.set(50)
