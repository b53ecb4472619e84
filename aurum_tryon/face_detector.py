"""
MediaPipe Face Mesh adapter.

Reports the primary face's mesh (478 points with iris refinement). The
overlay anchor indices in config refer to this topology.
"""

from typing import Any, Optional

import mediapipe as mp

from .config import (
    MEDIAPIPE_MAX_NUM_FACES,
    MEDIAPIPE_REFINE_FACE_LANDMARKS,
    MEDIAPIPE_FACE_MIN_DETECTION_CONFIDENCE,
    MEDIAPIPE_FACE_MIN_TRACKING_CONFIDENCE,
)
from .landmarks import FaceLandmarks, convert_landmarks
from .mediapipe_detector import MediaPipeDetector


class FaceDetector(MediaPipeDetector[FaceLandmarks]):
    """Primary-face mesh detector."""

    solution_name = "face_mesh"
    label = "FaceDetector"

    def __init__(
        self,
        max_num_faces: int = MEDIAPIPE_MAX_NUM_FACES,
        refine_landmarks: bool = MEDIAPIPE_REFINE_FACE_LANDMARKS,
        min_detection_confidence: float = MEDIAPIPE_FACE_MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence: float = MEDIAPIPE_FACE_MIN_TRACKING_CONFIDENCE
    ):
        super().__init__()
        self.max_num_faces = max_num_faces
        self.refine_landmarks = refine_landmarks
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence

    def _create_solution(self) -> Any:
        return mp.solutions.face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=self.max_num_faces,
            refine_landmarks=self.refine_landmarks,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )

    def _create_landmarker(self) -> Any:
        # The Tasks model always returns the refined 478-point mesh
        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision as mp_vision

        from .model_manager import ensure_face_landmarker_model

        options = mp_vision.FaceLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=ensure_face_landmarker_model()),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_faces=self.max_num_faces,
            min_face_detection_confidence=self.min_detection_confidence,
            min_face_presence_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )
        return mp_vision.FaceLandmarker.create_from_options(options)

    def _from_solution(self, results: Any) -> Optional[FaceLandmarks]:
        if not results.multi_face_landmarks:
            return None
        return FaceLandmarks(convert_landmarks(results.multi_face_landmarks[0].landmark))

    def _from_landmarker(self, result: Any) -> Optional[FaceLandmarks]:
        if not result.face_landmarks:
            return None
        return FaceLandmarks(convert_landmarks(result.face_landmarks[0]))
