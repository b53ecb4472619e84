"""
Throttled submit/consume boundary around a landmark detector.

Each detector is wrapped as a service that accepts a frame only after the
previous result has been consumed. A frame offered while a result is still
outstanding is dropped, never queued, so slow inference cannot build a
backlog and results are always consumed in submission order.

Two detector styles are supported:

* ``detect``: a blocking call returning landmarks (MediaPipe VIDEO mode);
  the result is delivered before ``submit`` returns.
* ``send``: a non-blocking call (MediaPipe LIVE_STREAM mode); whoever
  receives the detector's callback must call ``deliver`` on the host loop.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

import numpy as np

from .logger import get_logger

logger = get_logger("LandmarkService")

T = TypeVar("T")


@dataclass
class DetectionResult(Generic[T]):
    """One detector result, None landmarks meaning nothing was detected."""
    landmarks: Optional[T]
    timestamp_ms: float
    frame_width: int
    frame_height: int

    @property
    def detected(self) -> bool:
        return self.landmarks is not None


class ThrottledLandmarkService(Generic[T]):
    """
    Submit/consume gate for one detector.

    Attributes:
        name: Service name used in logs.
    """

    def __init__(
        self,
        name: str,
        on_result: Callable[[DetectionResult[T]], None],
        detect: Optional[Callable[[np.ndarray, float], Optional[T]]] = None,
        send: Optional[Callable[[np.ndarray, float], None]] = None
    ):
        """
        Initialize the service.

        Args:
            name: Service name used in logs.
            on_result: Consumer invoked with each result.
            detect: Blocking detector call taking (frame, timestamp_ms).
            send: Non-blocking detector submission taking (frame, timestamp_ms).
        """
        if (detect is None) == (send is None):
            raise ValueError("Exactly one of detect or send must be given")

        self.name = name
        self._on_result = on_result
        self._detect = detect
        self._send = send
        self._busy = False
        self._submitted = 0
        self._dropped = 0

    @property
    def busy(self) -> bool:
        """True while a submitted frame's result has not been consumed."""
        return self._busy

    @property
    def submitted_count(self) -> int:
        return self._submitted

    @property
    def dropped_count(self) -> int:
        return self._dropped

    def submit(self, rgb_frame: np.ndarray, timestamp_ms: float) -> bool:
        """
        Offer a frame to the detector.

        Args:
            rgb_frame: RGB image.
            timestamp_ms: Frame timestamp.

        Returns:
            True if the frame was accepted, False if it was dropped.
        """
        if self._busy:
            self._dropped += 1
            logger.debug(f"{self.name}: frame dropped, previous result outstanding")
            return False

        self._busy = True
        self._submitted += 1

        if self._send is not None:
            try:
                self._send(rgb_frame, timestamp_ms)
            except Exception:
                self._busy = False
                raise
            return True

        h, w = rgb_frame.shape[:2]
        try:
            landmarks = self._detect(rgb_frame, timestamp_ms)
        except Exception:
            self._busy = False
            raise

        self.deliver(DetectionResult(landmarks, timestamp_ms, w, h))
        return True

    def deliver(self, result: DetectionResult[T]) -> None:
        """Reopen the gate, then hand the result to the consumer."""
        self._busy = False
        self._on_result(result)
