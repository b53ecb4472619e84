import pytest

from aurum_tryon.auto_try_sequencer import AutoTrySequencer, AutoTryState
from aurum_tryon.config import AUTO_TRY_NOTICE

STEP_MS = 1500


class Harness:
    """Sequencer wired to a capture that records which item was selected."""

    def __init__(self, navigation, scheduler, clock):
        self.navigation = navigation
        self.scheduler = scheduler
        self.clock = clock
        self.visited: list[int] = []
        self.galleries: list[list[bytes]] = []
        self.notices: list[str] = []
        self.sequencer = AutoTrySequencer(
            navigation=navigation,
            scheduler=scheduler,
            capture=self.capture,
            on_gallery=self.galleries.append,
            on_notice=self.notices.append,
            step_delay_ms=STEP_MS
        )

    def capture(self) -> bytes:
        index = self.navigation.current_index()
        self.visited.append(index)
        return f"snapshot-{index}".encode()

    def step(self, count: int = 1) -> None:
        for _ in range(count):
            self.clock.advance(STEP_MS)
            self.scheduler.run_pending()


@pytest.fixture
def harness(navigation, scheduler, clock):
    return Harness(navigation, scheduler, clock)


def test_start_without_category_shows_notice(harness):
    assert harness.sequencer.start() is False
    assert harness.sequencer.state is AutoTryState.IDLE
    assert harness.notices == [AUTO_TRY_NOTICE]
    assert harness.scheduler.pending_count == 0


def test_first_item_applied_immediately(harness):
    harness.navigation.set_category("gold_earrings")
    assert harness.sequencer.start() is True

    assert harness.sequencer.is_running
    assert harness.navigation.current_index() == 0
    assert harness.visited == []
    assert harness.scheduler.pending_count == 1


def test_no_capture_before_delay(harness):
    harness.navigation.set_category("gold_earrings")
    harness.sequencer.start()

    harness.clock.advance(STEP_MS - 1)
    harness.scheduler.run_pending()
    assert harness.visited == []


def test_full_run_captures_every_item(harness):
    harness.navigation.set_category("gold_earrings")
    harness.sequencer.start()
    harness.step(5)

    assert harness.visited == [0, 1, 2, 3, 4]
    assert harness.sequencer.state is AutoTryState.IDLE
    assert harness.sequencer.snapshots == [f"snapshot-{i}".encode() for i in range(5)]
    assert harness.galleries == [harness.sequencer.snapshots]
    assert harness.sequencer.session.step_index == 5
    assert harness.scheduler.pending_count == 0


def test_stop_mid_run(harness):
    harness.navigation.set_category("gold_earrings")
    harness.sequencer.start()
    harness.step(2)

    pending = harness.sequencer.session.pending
    assert harness.sequencer.stop() is True

    assert harness.sequencer.state is AutoTryState.IDLE
    assert len(harness.sequencer.snapshots) == 2
    assert pending.cancelled
    assert harness.galleries == [[b"snapshot-0", b"snapshot-1"]]

    harness.step(3)
    assert harness.visited == [0, 1]


def test_stop_before_first_capture_has_no_gallery(harness):
    harness.navigation.set_category("gold_earrings")
    harness.sequencer.start()
    harness.sequencer.stop()

    assert harness.galleries == []
    assert harness.scheduler.pending_count == 0


def test_stop_when_idle(harness):
    assert harness.sequencer.stop() is False


def test_start_while_running_is_rejected(harness):
    harness.navigation.set_category("gold_earrings")
    harness.sequencer.start()
    harness.step(1)

    assert harness.sequencer.start() is False
    assert harness.sequencer.session.step_index == 1
    assert harness.scheduler.pending_count == 1


def test_restart_resets_snapshots(harness):
    harness.navigation.set_category("gold_necklaces")
    harness.sequencer.start()
    harness.step(3)
    assert len(harness.sequencer.snapshots) == 3

    harness.sequencer.start()
    assert harness.sequencer.snapshots == []
    assert harness.navigation.current_index() == 0


def test_empty_category_finishes_at_once(harness):
    harness.navigation.set_category("silver_earrings")
    assert harness.sequencer.start() is True
    assert harness.sequencer.state is AutoTryState.IDLE
    assert harness.galleries == []


def test_toggle(harness):
    harness.navigation.set_category("gold_earrings")
    assert harness.sequencer.toggle() is True
    harness.step(1)
    assert harness.sequencer.toggle() is False
    assert len(harness.galleries) == 1


def test_step_index_bounded_by_item_count(harness):
    harness.navigation.set_category("gold_necklaces")
    harness.sequencer.start()
    harness.step(10)
    assert harness.sequencer.session.step_index == 3
