"""
Landmark data types shared by the detectors and the core.

Landmarks are normalized to [0, 1] relative to the frame they were
detected in. They are produced once per processed frame and never kept
across frames.
"""

import math
from dataclasses import dataclass
from typing import Optional


class LandmarkIndex:
    """Hand landmark indices used by the gesture classifier (MediaPipe hand topology)."""
    WRIST = 0
    INDEX_MCP = 5  # Index knuckle
    INDEX_TIP = 8
    MIDDLE_MCP = 9  # Middle knuckle


HAND_LANDMARK_COUNT = 21
FACE_LANDMARK_COUNT_REFINED = 478

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),  # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),  # Index
    (0, 9), (9, 10), (10, 11), (11, 12),  # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),  # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (5, 9), (9, 13), (13, 17)  # Palm
]


@dataclass
class Landmark:
    """Single landmark with normalized coordinates and visibility."""
    x: float  # Normalized x [0, 1]
    y: float  # Normalized y [0, 1]
    z: float = 0.0  # Relative depth
    visibility: float = 1.0


@dataclass
class HandLandmarks:
    """
    Hand landmark data for the primary hand in a frame.

    Attributes:
        landmarks: List of 21 hand landmarks.
        handedness: 'Left' or 'Right'.
        score: Detection confidence score.
    """
    landmarks: list[Landmark]
    handedness: str = "Right"
    score: float = 1.0

    @property
    def wrist(self) -> Landmark:
        return self.landmarks[LandmarkIndex.WRIST]

    @property
    def index_knuckle(self) -> Landmark:
        return self.landmarks[LandmarkIndex.INDEX_MCP]

    @property
    def index_tip(self) -> Landmark:
        return self.landmarks[LandmarkIndex.INDEX_TIP]

    @property
    def middle_knuckle(self) -> Landmark:
        return self.landmarks[LandmarkIndex.MIDDLE_MCP]


@dataclass
class FaceLandmarks:
    """
    Face mesh landmark data for the primary face in a frame.

    Attributes:
        landmarks: 468 points, or 478 with iris refinement.
    """
    landmarks: list[Landmark]

    def get_landmark(self, index: int) -> Optional[Landmark]:
        """Get landmark by index."""
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None

    def __len__(self) -> int:
        return len(self.landmarks)


def distance_2d(lm1: Landmark, lm2: Landmark) -> float:
    """
    Calculate 2D distance between two landmarks (ignoring z).

    Args:
        lm1: First landmark.
        lm2: Second landmark.

    Returns:
        Euclidean distance in the landmarks' coordinate space.
    """
    return math.hypot(lm1.x - lm2.x, lm1.y - lm2.y)


def convert_landmarks(raw_landmarks) -> list[Landmark]:
    """Convert MediaPipe landmark protos/objects to Landmark instances."""
    return [
        Landmark(
            x=lm.x,
            y=lm.y,
            z=lm.z,
            visibility=getattr(lm, "visibility", None) or 1.0
        )
        for lm in raw_landmarks
    ]
