"""
Common lifecycle for the MediaPipe landmark detectors.

MediaPipe ships two Python APIs: the legacy Solutions API (``mp.solutions``)
and the Tasks API, which replaces it on newer wheels. Subclasses implement
both paths; this base picks one at construction time, creates the model
lazily and feeds the Tasks API monotonically increasing VIDEO-mode
timestamps.
"""

from typing import Any, Generic, Optional, TypeVar

import numpy as np
import mediapipe as mp

from .logger import get_logger

logger = get_logger("MediaPipe")

T = TypeVar("T")

FRAME_INTERVAL_MS = 33  # Assumed spacing when no capture timestamp is given


def has_solution(name: str) -> bool:
    """True if the legacy Solutions API provides ``mp.solutions.<name>``."""
    return hasattr(mp, "solutions") and hasattr(mp.solutions, name)


class MediaPipeDetector(Generic[T]):
    """
    Base class for a single-subject landmark detector.

    Subclasses set ``solution_name`` and implement ``_create_solution``,
    ``_create_landmarker``, ``_from_solution`` and ``_from_landmarker``.
    """

    solution_name = ""
    label = "Detector"

    def __init__(self):
        self._model: Any = None
        self._using_tasks_api = not has_solution(self.solution_name)
        self._last_timestamp_ms = 0

    @property
    def using_tasks_api(self) -> bool:
        return self._using_tasks_api

    @property
    def is_initialized(self) -> bool:
        return self._model is not None

    def initialize(self) -> None:
        """Create the model. Errors are logged and re-raised."""
        if self._model is not None:
            return

        try:
            if self._using_tasks_api:
                self._model = self._create_landmarker()
            else:
                self._model = self._create_solution()
        except Exception as e:
            logger.error(f"{self.label}: failed to create model: {e}")
            raise

        self._last_timestamp_ms = 0
        api = "Tasks API, VIDEO mode" if self._using_tasks_api else "Solutions API"
        logger.info(f"{self.label} ready ({api})")

    def close(self) -> None:
        if self._model is not None:
            self._model.close()
            self._model = None
            logger.debug(f"{self.label} closed")

    def detect(self, rgb_image: np.ndarray, timestamp_ms: Optional[float] = None) -> Optional[T]:
        """
        Run the model on one RGB frame.

        Args:
            rgb_image: RGB image (H, W, 3).
            timestamp_ms: Capture time; only used by the Tasks API.

        Returns:
            Landmarks of the primary subject, None if nothing was detected.
        """
        if self._model is None:
            self.initialize()

        if not self._using_tasks_api:
            return self._from_solution(self._model.process(rgb_image))

        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb_image))
        return self._from_landmarker(self._model.detect_for_video(image, self._next_timestamp(timestamp_ms)))

    def _next_timestamp(self, timestamp_ms: Optional[float]) -> int:
        # VIDEO mode rejects timestamps that do not strictly increase
        if timestamp_ms is None:
            ts = self._last_timestamp_ms + FRAME_INTERVAL_MS
        else:
            ts = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = ts
        return ts

    def _create_solution(self) -> Any:
        raise NotImplementedError

    def _create_landmarker(self) -> Any:
        raise NotImplementedError

    def _from_solution(self, results: Any) -> Optional[T]:
        raise NotImplementedError

    def _from_landmarker(self, result: Any) -> Optional[T]:
        raise NotImplementedError

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
