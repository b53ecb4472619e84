"""
MediaPipe Hands adapter.

Only the first detected hand is reported; the gesture classifier works on
a single hand.
"""

from typing import Any, Optional

import cv2
import numpy as np
import mediapipe as mp

from .config import (
    MEDIAPIPE_HAND_MODEL_COMPLEXITY,
    MEDIAPIPE_MAX_NUM_HANDS,
    MEDIAPIPE_HAND_MIN_DETECTION_CONFIDENCE,
    MEDIAPIPE_HAND_MIN_TRACKING_CONFIDENCE,
)
from .landmarks import HAND_CONNECTIONS, HandLandmarks, Landmark, convert_landmarks
from .mediapipe_detector import MediaPipeDetector

BONE_COLOR = (0, 0, 255)
JOINT_COLOR = (0, 255, 0)


class HandDetector(MediaPipeDetector[HandLandmarks]):
    """
    Primary-hand landmark detector.

    Attributes:
        model_complexity: 0 for the lite model, 1 for the full model (Solutions API only).
        max_num_hands: Hands tracked by the model.
        min_detection_confidence: Palm detection threshold.
        min_tracking_confidence: Landmark tracking threshold.
    """

    solution_name = "hands"
    label = "HandDetector"

    def __init__(
        self,
        model_complexity: int = MEDIAPIPE_HAND_MODEL_COMPLEXITY,
        max_num_hands: int = MEDIAPIPE_MAX_NUM_HANDS,
        min_detection_confidence: float = MEDIAPIPE_HAND_MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence: float = MEDIAPIPE_HAND_MIN_TRACKING_CONFIDENCE
    ):
        super().__init__()
        self.model_complexity = model_complexity
        self.max_num_hands = max_num_hands
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence

    def _create_solution(self) -> Any:
        return mp.solutions.hands.Hands(
            static_image_mode=False,
            model_complexity=self.model_complexity,
            max_num_hands=self.max_num_hands,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )

    def _create_landmarker(self) -> Any:
        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision as mp_vision

        from .model_manager import ensure_hand_landmarker_model

        options = mp_vision.HandLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=ensure_hand_landmarker_model()),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_hands=self.max_num_hands,
            min_hand_detection_confidence=self.min_detection_confidence,
            min_hand_presence_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )
        return mp_vision.HandLandmarker.create_from_options(options)

    def _from_solution(self, results: Any) -> Optional[HandLandmarks]:
        if not results.multi_hand_landmarks:
            return None

        hand = HandLandmarks(convert_landmarks(results.multi_hand_landmarks[0].landmark))
        if results.multi_handedness:
            best = results.multi_handedness[0].classification[0]
            hand.handedness, hand.score = best.label, best.score
        return hand

    def _from_landmarker(self, result: Any) -> Optional[HandLandmarks]:
        if not result.hand_landmarks:
            return None

        hand = HandLandmarks(convert_landmarks(result.hand_landmarks[0]))
        if result.handedness:
            best = result.handedness[0][0]
            hand.handedness, hand.score = best.category_name, best.score
        return hand


def draw_hand_landmarks(image: np.ndarray, hand: HandLandmarks, mirrored: bool = True) -> np.ndarray:
    """
    Draw the hand skeleton onto a BGR display image (debug view).

    Args:
        image: BGR image, drawn on in place.
        hand: Landmarks in unmirrored camera coordinates.
        mirrored: Whether the image is the mirrored view.

    Returns:
        The same image.
    """
    height, width = image.shape[:2]

    def to_px(lm: Landmark) -> tuple[int, int]:
        x = 1.0 - lm.x if mirrored else lm.x
        return int(x * width), int(lm.y * height)

    points = [to_px(lm) for lm in hand.landmarks]
    for start, end in HAND_CONNECTIONS:
        cv2.line(image, points[start], points[end], BONE_COLOR, 2)
    for point in points:
        cv2.circle(image, point, 3, JOINT_COLOR, -1)

    return image
