from aurum_tryon.scheduler import FrameScheduler


def test_runs_only_due_tasks(scheduler, clock):
    calls = []
    scheduler.call_later(100, lambda: calls.append("a"))
    scheduler.call_later(50, lambda: calls.append("b"))

    assert scheduler.run_pending() == 0
    clock.advance(60)
    assert scheduler.run_pending() == 1
    assert calls == ["b"]

    clock.advance(40)
    scheduler.run_pending()
    assert calls == ["b", "a"]
    assert scheduler.pending_count == 0


def test_same_due_time_keeps_submission_order(scheduler, clock):
    calls = []
    for name in "xyz":
        scheduler.call_later(10, lambda n=name: calls.append(n))
    clock.advance(10)
    scheduler.run_pending()
    assert calls == ["x", "y", "z"]


def test_explicit_now(scheduler, clock):
    calls = []
    scheduler.call_later(100, lambda: calls.append(1))
    scheduler.run_pending(now_ms=clock.now + 100)
    assert calls == [1]


def test_cancel(scheduler, clock):
    calls = []
    task = scheduler.call_later(10, lambda: calls.append(1))
    assert task.pending

    task.cancel()
    task.cancel()
    assert task.cancelled
    assert scheduler.pending_count == 0

    clock.advance(20)
    assert scheduler.run_pending() == 0
    assert calls == []


def test_cancel_after_run_is_noop(scheduler, clock):
    task = scheduler.call_later(0, lambda: None)
    scheduler.run_pending()
    task.cancel()
    assert task.done
    assert not task.cancelled


def test_task_scheduled_from_callback_waits(scheduler, clock):
    calls = []

    def first():
        calls.append("first")
        scheduler.call_later(100, lambda: calls.append("second"))

    scheduler.call_later(0, first)
    scheduler.run_pending()
    assert calls == ["first"]

    clock.advance(100)
    scheduler.run_pending()
    assert calls == ["first", "second"]


def test_clear(scheduler, clock):
    task = scheduler.call_later(5, lambda: None)
    scheduler.clear()
    assert task.cancelled
    clock.advance(10)
    assert scheduler.run_pending() == 0


def test_default_clock_is_monotonic():
    scheduler = FrameScheduler()
    first = scheduler.now_ms()
    assert scheduler.now_ms() >= first
