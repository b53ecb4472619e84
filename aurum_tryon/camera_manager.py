"""
Camera acquisition for Aurum Try-On.

Thin OpenCV VideoCapture wrapper producing timestamped BGR frames for the
landmark services and the compositor.
"""

import sys
import time
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .logger import get_logger
from .config import CAMERA_WIDTH, CAMERA_HEIGHT, CAMERA_FPS, DEFAULT_CAMERA_INDEX

logger = get_logger("CameraManager")


class CameraError(Exception):
    """Raised when the camera cannot be opened or read."""
    pass


@dataclass
class CameraFrame:
    """
    One captured frame.

    Attributes:
        bgr: Unmirrored BGR image.
        timestamp_ms: Monotonic capture time in milliseconds.
        sequence: 1-based frame number since the camera was opened.
    """
    bgr: np.ndarray
    timestamp_ms: float
    sequence: int

    @property
    def width(self) -> int:
        return int(self.bgr.shape[1])

    @property
    def height(self) -> int:
        return int(self.bgr.shape[0])

    def to_rgb(self) -> np.ndarray:
        """RGB copy for the MediaPipe detectors."""
        return cv2.cvtColor(self.bgr, cv2.COLOR_BGR2RGB)


def _open_capture(index: int) -> cv2.VideoCapture:
    # DirectShow opens much faster than MSMF on Windows
    if sys.platform == "win32":
        capture = cv2.VideoCapture(index, cv2.CAP_DSHOW)
        if capture.isOpened():
            return capture
        capture.release()
    return cv2.VideoCapture(index)


class CameraManager:
    """
    Webcam capture.

    Attributes:
        camera_index: Device index.
        width: Requested capture width.
        height: Requested capture height.
        fps: Requested frame rate.
    """

    def __init__(
        self,
        camera_index: int = DEFAULT_CAMERA_INDEX,
        width: int = CAMERA_WIDTH,
        height: int = CAMERA_HEIGHT,
        fps: int = CAMERA_FPS
    ):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.fps = fps

        self._capture: Optional[cv2.VideoCapture] = None
        self._sequence = 0
        self._failed_reads = 0

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    @property
    def frame_count(self) -> int:
        return self._sequence

    @property
    def failed_reads(self) -> int:
        return self._failed_reads

    def open(self) -> None:
        """
        Open the camera and request the configured mode.

        Raises:
            CameraError: If the device cannot be opened.
        """
        if self._capture is not None:
            logger.warning("Camera already open, reopening")
            self.close()

        logger.info(f"Opening camera {self.camera_index}")
        capture = _open_capture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            raise CameraError(f"Failed to open camera {self.camera_index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        capture.set(cv2.CAP_PROP_FPS, self.fps)
        capture.set(cv2.CAP_PROP_BUFFERSIZE, 1)  # Newest frame, not a backlog

        actual_w = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = capture.get(cv2.CAP_PROP_FPS)
        logger.info(f"Camera opened: {actual_w}x{actual_h} @ {actual_fps:.1f} FPS")

        if (actual_w, actual_h) != (self.width, self.height):
            logger.warning(f"Requested {self.width}x{self.height}, got {actual_w}x{actual_h}")

        self._capture = capture
        self._sequence = 0
        self._failed_reads = 0

    def close(self) -> None:
        """Release the device."""
        if self._capture is not None:
            logger.info(f"Releasing camera {self.camera_index}")
            self._capture.release()
            self._capture = None

    def read(self) -> Optional[CameraFrame]:
        """
        Grab the next frame.

        Returns:
            The frame, or None if this read failed.

        Raises:
            CameraError: If the camera is not open.
        """
        if self._capture is None:
            raise CameraError("Camera is not open")

        ok, frame = self._capture.read()
        if not ok or frame is None:
            self._failed_reads += 1
            logger.warning(f"Failed to read frame from camera ({self._failed_reads} failures)")
            return None

        self._sequence += 1
        return CameraFrame(bgr=frame, timestamp_ms=time.monotonic() * 1000.0, sequence=self._sequence)

    def __enter__(self) -> "CameraManager":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def list_available_cameras(max_index: int = 10) -> list[int]:
    """
    Probe device indices.

    Args:
        max_index: Number of indices to probe.

    Returns:
        Indices that could be opened.
    """
    available = []
    for i in range(max_index):
        capture = _open_capture(i)
        if capture.isOpened():
            available.append(i)
        capture.release()

    logger.debug(f"Cameras found: {available}")
    return available


def select_camera(preferred_index: int = -1) -> int:
    """
    Pick the camera to use.

    Args:
        preferred_index: Requested index, -1 for the first available one.

    Returns:
        Selected camera index.

    Raises:
        CameraError: If no camera is available.
    """
    available = list_available_cameras()
    if not available:
        raise CameraError("No camera could be opened")

    if preferred_index >= 0:
        if preferred_index in available:
            logger.info(f"Using camera {preferred_index}")
            return preferred_index
        logger.warning(f"Camera {preferred_index} not available, using {available[0]}")

    logger.info(f"Auto-selected camera {available[0]}")
    return available[0]
