"""
Configuration constants for Aurum Try-On.

This module contains all tunable parameters for camera capture,
landmark detection, gesture navigation, overlay placement and the
auto-try sequence.
"""

from dataclasses import dataclass
from typing import Final


# Camera configuration
CAMERA_WIDTH: Final[int] = 1280
CAMERA_HEIGHT: Final[int] = 720
CAMERA_FPS: Final[int] = 30
DEFAULT_CAMERA_INDEX: Final[int] = 0

# MediaPipe Hands configuration
MEDIAPIPE_HAND_MODEL_COMPLEXITY: Final[int] = 0  # Lite model for performance
MEDIAPIPE_MAX_NUM_HANDS: Final[int] = 1
MEDIAPIPE_HAND_MIN_DETECTION_CONFIDENCE: Final[float] = 0.5
MEDIAPIPE_HAND_MIN_TRACKING_CONFIDENCE: Final[float] = 0.5

# MediaPipe Face Mesh configuration
MEDIAPIPE_MAX_NUM_FACES: Final[int] = 1
MEDIAPIPE_REFINE_FACE_LANDMARKS: Final[bool] = True  # 478 points instead of 468
MEDIAPIPE_FACE_MIN_DETECTION_CONFIDENCE: Final[float] = 0.5
MEDIAPIPE_FACE_MIN_TRACKING_CONFIDENCE: Final[float] = 0.5

# Gesture navigation
GESTURE_COOLDOWN_MS: Final[float] = 800.0  # Minimum time between accepted swipes
POINT_THRESHOLD_RATIO: Final[float] = 0.4  # Fingertip travel relative to palm size
GESTURE_FLASH_MS: Final[float] = 300.0  # Indicator flash after an accepted gesture

# Face mesh landmark indices used as overlay anchors (model-specific)
FACE_LEFT_EAR_INDEX: Final[int] = 132
FACE_RIGHT_EAR_INDEX: Final[int] = 361
FACE_NECK_INDEX: Final[int] = 152

# Overlay sizing, all relative to the on-screen ear distance
EARRING_WIDTH_RATIO: Final[float] = 0.25
NECKLACE_WIDTH_RATIO: Final[float] = 1.2
NECKLACE_DROP_RATIO: Final[float] = 0.2

# Auto-try sequence
AUTO_TRY_STEP_DELAY_MS: Final[float] = 1500.0
AUTO_TRY_NOTICE: Final[str] = "Please select a sub-category (e.g. Gold Earrings) first!"

# HUD
INDICATOR_ACTIVE_LABEL: Final[str] = "Gesture Active"
INDICATOR_IDLE_LABEL: Final[str] = "Hand Not Detected"
CAPTURE_FLASH_MS: Final[float] = 100.0  # White flash after a capture
NOTICE_DISPLAY_MS: Final[float] = 3000.0
WINDOW_NAME: Final[str] = "Aurum Try-On"
GALLERY_WINDOW_NAME: Final[str] = "Aurum Try-On Gallery"
GALLERY_THUMB_WIDTH: Final[int] = 320
GALLERY_COLUMNS: Final[int] = 3

# Catalog
DEFAULT_ASSETS_ROOT: Final[str] = "."
ASSET_FILE_EXTENSION: Final[str] = ".png"
ASSET_LOADER_WORKERS: Final[int] = 4
EARRING_CATEGORY_KEYWORD: Final[str] = "earrings"

# Built-in catalog: category name -> number of images (1.png .. N.png)
DEFAULT_CATEGORY_COUNTS: Final[dict[str, int]] = {
    "gold_earrings": 5,
    "gold_necklaces": 5,
    "diamond_earrings": 5,
    "diamond_necklaces": 6,
}

# Snapshot export
SNAPSHOT_FORMAT: Final[str] = ".png"

# Logging
LOG_FILENAME: Final[str] = "aurum_tryon.log"
LOG_MAX_BYTES: Final[int] = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT: Final[int] = 3

# Exit codes
EXIT_SUCCESS: Final[int] = 0
EXIT_CATALOG_ERROR: Final[int] = 1
EXIT_CAMERA_ERROR: Final[int] = 2
EXIT_RUNTIME_ERROR: Final[int] = 3


@dataclass
class GestureSettings:
    """Container for gesture navigation thresholds."""

    cooldown_ms: float = GESTURE_COOLDOWN_MS
    threshold_ratio: float = POINT_THRESHOLD_RATIO
    flash_ms: float = GESTURE_FLASH_MS


@dataclass
class OverlaySettings:
    """Container for landmark anchors and overlay sizing ratios."""

    left_ear_index: int = FACE_LEFT_EAR_INDEX
    right_ear_index: int = FACE_RIGHT_EAR_INDEX
    neck_index: int = FACE_NECK_INDEX
    earring_width_ratio: float = EARRING_WIDTH_RATIO
    necklace_width_ratio: float = NECKLACE_WIDTH_RATIO
    necklace_drop_ratio: float = NECKLACE_DROP_RATIO
