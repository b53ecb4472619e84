"""
Try-on session: the core of Aurum Try-On without camera or window.

Wires the asset cache, gesture classifier, navigation controller, overlay
compositor and auto-try sequencer together and exposes the operations a
front-end calls (category buttons, thumbnails, Try All, snapshot, gallery)
plus the state it displays. Detector results come in through
``handle_hand_result`` / ``handle_face_result``; timers advance through
``pump``. Everything runs on the caller's thread.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from .logger import get_logger
from .config import (
    CAPTURE_FLASH_MS,
    INDICATOR_ACTIVE_LABEL,
    INDICATOR_IDLE_LABEL,
    NOTICE_DISPLAY_MS,
    GestureSettings,
    OverlaySettings,
)
from .asset_cache import AssetCache
from .auto_try_sequencer import AutoTrySequencer
from .catalog_loader import Catalog
from .frame_canvas import FrameCanvas
from .gesture_classifier import GestureClassifier, NavigationCommand
from .landmark_service import DetectionResult
from .landmarks import FaceLandmarks, HandLandmarks
from .navigation_controller import NavigationController, Selection
from .overlay_compositor import OverlayCompositor, OverlayPlacement
from .scheduler import FrameScheduler

logger = get_logger("TryOnSession")


@dataclass
class Gallery:
    """
    Snapshots of the current session and whether they are on screen.

    Attributes:
        snapshots: Encoded images, oldest first.
        visible: True while the gallery is shown.
    """
    snapshots: list[bytes] = field(default_factory=list)
    visible: bool = False

    def show(self, snapshots: Optional[list[bytes]] = None) -> None:
        """Show the gallery, replacing its contents if snapshots are given."""
        if snapshots is not None:
            self.snapshots = list(snapshots)
        self.visible = True

    def add(self, snapshot: bytes) -> None:
        self.snapshots.append(snapshot)

    def close(self) -> None:
        self.visible = False


@dataclass(frozen=True)
class IndicatorState:
    """Hand indicator as displayed at one instant."""
    hand_detected: bool
    flashing: bool

    @property
    def label(self) -> str:
        return INDICATOR_ACTIVE_LABEL if self.hand_detected else INDICATOR_IDLE_LABEL


class TryOnSession:
    """
    One user's try-on session.

    Attributes:
        catalog: Catalog in use.
        assets: Category image cache.
        navigation: Active category and selection.
        classifier: Hand gesture classifier.
        compositor: Overlay renderer.
        canvas: Surface the compositor draws to and snapshots read from.
        scheduler: Timer queue, also the session's clock.
        sequencer: Auto-try state machine.
        gallery: Snapshot gallery.
        hand_detected: Whether the last hand result contained a hand.
    """

    def __init__(
        self,
        catalog: Catalog,
        assets: Optional[AssetCache] = None,
        scheduler: Optional[FrameScheduler] = None,
        gesture_settings: Optional[GestureSettings] = None,
        overlay_settings: Optional[OverlaySettings] = None,
        step_delay_ms: Optional[float] = None
    ):
        """
        Initialize the session.

        Args:
            catalog: Catalog describing the jewelry categories.
            assets: Asset cache; one is created for the catalog if omitted.
            scheduler: Timer queue; a monotonic one is created if omitted.
            gesture_settings: Gesture thresholds; cooldown defaults to the catalog's.
            overlay_settings: Overlay anchors and sizing.
            step_delay_ms: Auto-try step delay; defaults to the catalog's.
        """
        self.catalog = catalog
        self.assets = assets or AssetCache(catalog)
        self.scheduler = scheduler or FrameScheduler()

        if gesture_settings is None:
            gesture_settings = GestureSettings(cooldown_ms=catalog.gesture_cooldown_ms)
        if step_delay_ms is None:
            step_delay_ms = catalog.auto_try_delay_ms

        self.navigation = NavigationController(self.assets)
        self.classifier = GestureClassifier(gesture_settings)
        self.compositor = OverlayCompositor(overlay_settings)
        self.canvas = FrameCanvas()
        self.gallery = Gallery()
        self.sequencer = AutoTrySequencer(
            navigation=self.navigation,
            scheduler=self.scheduler,
            capture=self._capture,
            on_gallery=self.gallery.show,
            on_notice=self._notify,
            step_delay_ms=step_delay_ms
        )

        self.hand_detected = False
        self.last_placements: list[OverlayPlacement] = []
        self._frame: Optional[np.ndarray] = None
        self._flash_until_ms: Optional[float] = None
        self._capture_flash_until_ms: Optional[float] = None
        self._notice: Optional[tuple[str, float]] = None
        self._notice_listeners: list[Callable[[str], None]] = []

    # ----- Observable state -----

    @property
    def selection(self) -> Selection:
        return self.navigation.selection

    @property
    def auto_try_running(self) -> bool:
        return self.sequencer.is_running

    @property
    def active_category(self) -> Optional[str]:
        return self.navigation.active_category

    def indicator_state(self, now_ms: Optional[float] = None) -> IndicatorState:
        """
        Hand indicator at ``now_ms``.

        The indicator flashes for a short time after every accepted gesture
        and otherwise reflects the latest hand result.
        """
        now = self.scheduler.now_ms() if now_ms is None else now_ms
        flashing = self._flash_until_ms is not None and now < self._flash_until_ms
        return IndicatorState(hand_detected=self.hand_detected, flashing=flashing)

    def capture_flash_active(self, now_ms: Optional[float] = None) -> bool:
        """True shortly after a snapshot was captured."""
        now = self.scheduler.now_ms() if now_ms is None else now_ms
        return self._capture_flash_until_ms is not None and now < self._capture_flash_until_ms

    def active_notice(self, now_ms: Optional[float] = None) -> Optional[str]:
        """The latest user notice while it is still displayed."""
        if self._notice is None:
            return None
        now = self.scheduler.now_ms() if now_ms is None else now_ms
        message, until = self._notice
        return message if now < until else None

    def add_notice_listener(self, listener: Callable[[str], None]) -> None:
        self._notice_listeners.append(listener)

    # ----- Detector results -----

    def set_frame(self, frame_bgr: np.ndarray) -> None:
        """Store the camera frame the next face result is rendered over."""
        self._frame = frame_bgr

    def handle_hand_result(self, result: DetectionResult[HandLandmarks]) -> NavigationCommand:
        """
        React to one hand detector result.

        Gestures are ignored while auto-try runs.

        Returns:
            The accepted navigation command, NONE if nothing happened.
        """
        self.hand_detected = result.detected
        if not result.detected or self.sequencer.is_running:
            return NavigationCommand.NONE

        now = self.scheduler.now_ms()
        command = self.classifier.classify(result.landmarks, now)
        if command is NavigationCommand.NONE:
            return command

        self.navigation.navigate(command.direction)
        self._flash_until_ms = now + self.classifier.settings.flash_ms
        return command

    def handle_face_result(self, result: DetectionResult[FaceLandmarks]) -> list[OverlayPlacement]:
        """
        Render the stored frame with overlays for one face detector result.

        Returns:
            The overlay placements drawn (empty without a face or frame).
        """
        if self._frame is None:
            logger.debug("Face result before first frame, skipping render")
            return []

        self.last_placements = self.compositor.render(
            self.canvas, self._frame, result.landmarks, self.navigation.selection
        )
        return self.last_placements

    def pump(self, now_ms: Optional[float] = None) -> int:
        """Run due timers (auto-try steps). Returns the number run."""
        return self.scheduler.run_pending(now_ms)

    # ----- Operations -----

    def set_category(self, name: str) -> bool:
        return self.navigation.set_category(name)

    def navigate(self, direction: int) -> bool:
        """Manual step through the active category; refused while auto-try runs."""
        if self.sequencer.is_running:
            logger.debug("Navigation ignored while auto-try is running")
            return False
        return self.navigation.navigate(direction)

    def select_explicit(self, category: str, item_index: int) -> bool:
        if self.sequencer.is_running:
            logger.debug("Thumbnail pick ignored while auto-try is running")
            return False
        return self.navigation.select_explicit(category, item_index)

    def start_auto_try(self) -> bool:
        return self.sequencer.start()

    def stop_auto_try(self) -> bool:
        return self.sequencer.stop()

    def toggle_auto_try(self) -> bool:
        return self.sequencer.toggle()

    def capture_single_snapshot(self) -> bytes:
        """
        Capture the canvas into the gallery and show it.

        Returns:
            The encoded snapshot.
        """
        snapshot = self._capture()
        self.gallery.add(snapshot)
        self.gallery.show()
        logger.info(f"Snapshot captured ({len(self.gallery.snapshots)} in gallery)")
        return snapshot

    def close_gallery(self) -> None:
        self.gallery.close()

    def close(self) -> None:
        """Drop pending timers and stop asset decoding."""
        self.scheduler.clear()
        self.assets.close()

    # ----- Internals -----

    def _capture(self) -> bytes:
        snapshot = self.canvas.export_image()
        self._capture_flash_until_ms = self.scheduler.now_ms() + CAPTURE_FLASH_MS
        return snapshot

    def _notify(self, message: str) -> None:
        self._notice = (message, self.scheduler.now_ms() + NOTICE_DISPLAY_MS)
        for listener in self._notice_listeners:
            listener(message)
