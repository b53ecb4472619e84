"""
Gesture classifier for Aurum Try-On.

Turns one frame's hand landmarks into a navigation command. The index
finger pointing sideways (relative to its knuckle, scaled by palm size)
means next/previous; a cooldown gate keeps one held pose from skipping
through several items.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .logger import get_logger
from .config import GESTURE_COOLDOWN_MS, POINT_THRESHOLD_RATIO, GestureSettings
from .landmarks import HandLandmarks, distance_2d

logger = get_logger("GestureClassifier")


class NavigationCommand(Enum):
    """Directional command; the value is the index delta."""
    PREVIOUS = -1
    NONE = 0
    NEXT = 1

    @property
    def direction(self) -> int:
        return self.value


@dataclass
class GestureState:
    """
    Cooldown state, mutated only when a gesture is accepted.

    Attributes:
        last_accepted_ms: Monotonic time of the last accepted gesture, None before the first.
    """
    last_accepted_ms: Optional[float] = None


def classify_pointing(
    hand: HandLandmarks,
    threshold_ratio: float = POINT_THRESHOLD_RATIO
) -> NavigationCommand:
    """
    Classify the index finger direction of one hand.

    Args:
        hand: Landmarks of the primary hand.
        threshold_ratio: Required fingertip travel as a fraction of palm size.

    Returns:
        NEXT when the fingertip is past the knuckle towards +x in
        camera coordinates, PREVIOUS towards -x, NONE otherwise (including
        vertical pointing).
    """
    # Wrist to middle knuckle normalizes for hand size and camera distance
    hand_scale = distance_2d(hand.wrist, hand.middle_knuckle)
    dx = hand.index_tip.x - hand.index_knuckle.x
    dy = hand.index_tip.y - hand.index_knuckle.y
    threshold = hand_scale * threshold_ratio

    if abs(dy) >= threshold:
        return NavigationCommand.NONE
    if dx > threshold:
        return NavigationCommand.NEXT
    if dx < -threshold:
        return NavigationCommand.PREVIOUS
    return NavigationCommand.NONE


def gate_cooldown(
    command: NavigationCommand,
    now_ms: float,
    state: GestureState,
    cooldown_ms: float = GESTURE_COOLDOWN_MS
) -> NavigationCommand:
    """
    Apply the cooldown gate to a raw command.

    Args:
        command: Raw classification.
        now_ms: Current monotonic time in milliseconds.
        state: Cooldown state, updated on acceptance.
        cooldown_ms: Minimum time between accepted commands.

    Returns:
        The command if accepted, NONE if suppressed.
    """
    if command is NavigationCommand.NONE:
        return command

    if state.last_accepted_ms is not None and now_ms - state.last_accepted_ms < cooldown_ms:
        return NavigationCommand.NONE

    state.last_accepted_ms = now_ms
    return command


class GestureClassifier:
    """
    Per-frame hand gesture classifier with cooldown.

    Stateless apart from the cooldown timestamp, so a fresh instance per
    session (or per test) is fully independent.
    """

    def __init__(self, settings: Optional[GestureSettings] = None):
        self.settings = settings or GestureSettings()
        self.state = GestureState()

    def classify(self, hand: Optional[HandLandmarks], now_ms: float) -> NavigationCommand:
        """
        Classify one frame's hand landmarks.

        Args:
            hand: Primary hand landmarks, None when no hand was detected.
            now_ms: Current monotonic time in milliseconds.

        Returns:
            Accepted navigation command, or NONE.
        """
        if hand is None:
            return NavigationCommand.NONE

        raw = classify_pointing(hand, self.settings.threshold_ratio)
        accepted = gate_cooldown(raw, now_ms, self.state, self.settings.cooldown_ms)

        if accepted is not NavigationCommand.NONE:
            logger.info(f"Gesture: {accepted.name}")
        elif raw is not NavigationCommand.NONE:
            logger.debug(f"Gesture {raw.name} suppressed by cooldown")

        return accepted

    def reset(self) -> None:
        """Forget the last accepted gesture."""
        self.state = GestureState()
