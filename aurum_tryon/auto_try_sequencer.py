"""
Auto-try sequencer for Aurum Try-On.

Sweeps the active category one item at a time: apply the item, wait a
fixed delay, capture the canvas, move on. Manual stop and natural
completion both end in the same place: IDLE, with any captured snapshots
surfaced as a gallery.

Capture timing: the sequencer never renders. A capture reads whatever the
face-tracking render loop last drew. If the step delay is shorter than one
camera -> detector -> render round trip, a snapshot can still show the
previous item. This ordering risk is deliberate and left in place; forcing
a synchronous render here would change the observable timing.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional

from .logger import get_logger
from .config import AUTO_TRY_NOTICE, AUTO_TRY_STEP_DELAY_MS
from .navigation_controller import NavigationController
from .scheduler import FrameScheduler, ScheduledTask

logger = get_logger("AutoTrySequencer")


class AutoTryState(Enum):
    """Sequencer state."""
    IDLE = auto()
    RUNNING = auto()


@dataclass
class AutoTrySession:
    """
    Per-run state.

    Attributes:
        step_index: Index of the item being tried, in [0, len(assets)].
        snapshots: Encoded captures, one per completed step.
        pending: The single outstanding delayed step, if any.
    """
    step_index: int = 0
    snapshots: list[bytes] = field(default_factory=list)
    pending: Optional[ScheduledTask] = None


class AutoTrySequencer:
    """
    Timed IDLE -> RUNNING -> IDLE state machine over the active category.
    """

    def __init__(
        self,
        navigation: NavigationController,
        scheduler: FrameScheduler,
        capture: Callable[[], bytes],
        on_gallery: Optional[Callable[[list[bytes]], None]] = None,
        on_notice: Optional[Callable[[str], None]] = None,
        step_delay_ms: float = AUTO_TRY_STEP_DELAY_MS
    ):
        """
        Initialize the sequencer.

        Args:
            navigation: Controller whose selection is driven.
            scheduler: Cooperative timer queue.
            capture: Returns the current canvas contents, encoded.
            on_gallery: Receives the snapshots when a run ends with any.
            on_notice: Receives user-facing notices (e.g. no category).
            step_delay_ms: Delay between applying an item and capturing it.
        """
        self.navigation = navigation
        self.scheduler = scheduler
        self.step_delay_ms = step_delay_ms
        self._capture = capture
        self._on_gallery = on_gallery
        self._on_notice = on_notice

        self.state = AutoTryState.IDLE
        self.session: Optional[AutoTrySession] = None

    @property
    def is_running(self) -> bool:
        return self.state is AutoTryState.RUNNING

    @property
    def snapshots(self) -> list[bytes]:
        return list(self.session.snapshots) if self.session else []

    def start(self) -> bool:
        """
        Begin a run over the active category.

        Returns:
            True if the run started.
        """
        if self.is_running:
            logger.debug("Auto-try already running")
            return False

        if self.navigation.active_category is None:
            logger.warning("Auto-try requested without an active category")
            if self._on_notice:
                self._on_notice(AUTO_TRY_NOTICE)
            return False

        self.state = AutoTryState.RUNNING
        self.session = AutoTrySession()
        logger.info(f"Auto-try started on {self.navigation.active_category}")

        self._run_step()
        return True

    def stop(self) -> bool:
        """
        Cancel the run.

        Returns:
            True if a run was stopped, False if already idle.
        """
        if not self.is_running:
            return False

        logger.info("Auto-try stopped")
        self._finish()
        return True

    def toggle(self) -> bool:
        """Stop a running sweep or start a new one. Returns the new running state."""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    def _run_step(self) -> None:
        session = self.session
        assets = self.navigation.active_assets()

        if not self.is_running or session is None:
            return

        if not assets or session.step_index >= len(assets):
            logger.info(f"Auto-try complete ({len(session.snapshots)} snapshots)")
            self._finish()
            return

        self.navigation.apply_asset(assets[session.step_index])
        logger.debug(f"Auto-try step {session.step_index + 1}/{len(assets)}")

        session.pending = self.scheduler.call_later(
            self.step_delay_ms, self._on_step_elapsed, name="auto-try step"
        )

    def _on_step_elapsed(self) -> None:
        session = self.session
        if not self.is_running or session is None:
            return

        session.pending = None
        session.snapshots.append(self._capture())
        session.step_index += 1
        self._run_step()

    def _finish(self) -> None:
        session = self.session
        if session and session.pending:
            session.pending.cancel()
            session.pending = None

        self.state = AutoTryState.IDLE

        if session and session.snapshots and self._on_gallery:
            self._on_gallery(list(session.snapshots))
