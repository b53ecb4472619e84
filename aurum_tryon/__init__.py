"""
Aurum Try-On - AR jewelry try-on with hand-gesture navigation.

Tracks the user's hand and face with MediaPipe, overlays catalog jewelry
on the mirrored webcam feed and sweeps a whole category into a snapshot
gallery on request. The detector adapters live in ``hand_detector`` and
``face_detector`` and are imported only by the desktop host.
"""

__version__ = "1.0.0"
__author__ = "Aurum Team"

from .catalog_loader import Catalog, CategoryInfo, CatalogLoadError, Slot, load_catalog, create_default_catalog
from .asset_cache import AssetCache, OverlayImage
from .landmarks import Landmark, HandLandmarks, FaceLandmarks
from .gesture_classifier import GestureClassifier, NavigationCommand
from .navigation_controller import NavigationController, Selection
from .overlay_compositor import OverlayCompositor, OverlayPlacement
from .frame_canvas import FrameCanvas
from .scheduler import FrameScheduler, ScheduledTask
from .auto_try_sequencer import AutoTrySequencer, AutoTryState
from .landmark_service import DetectionResult, ThrottledLandmarkService
from .tryon_session import TryOnSession, Gallery, IndicatorState

__all__ = [
    "Catalog",
    "CategoryInfo",
    "CatalogLoadError",
    "Slot",
    "load_catalog",
    "create_default_catalog",
    "AssetCache",
    "OverlayImage",
    "Landmark",
    "HandLandmarks",
    "FaceLandmarks",
    "GestureClassifier",
    "NavigationCommand",
    "NavigationController",
    "Selection",
    "OverlayCompositor",
    "OverlayPlacement",
    "FrameCanvas",
    "FrameScheduler",
    "ScheduledTask",
    "AutoTrySequencer",
    "AutoTryState",
    "DetectionResult",
    "ThrottledLandmarkService",
    "TryOnSession",
    "Gallery",
    "IndicatorState",
]
