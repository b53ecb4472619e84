"""
Overlay compositor for Aurum Try-On.

Draws the mirrored camera frame and places the selected jewelry images on
it, anchored to face mesh landmarks. Anchors are converted straight into
mirrored screen space, so overlays are drawn with an identity transform
after the video.

Because the anchors are mirrored, the "right ear" landmark lands on the
visually left side of the screen and vice versa (selfie-mirror
convention). Earrings are drawn at the right-ear anchor first, then at the
left-ear anchor; this ordering is part of the rendering contract.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .logger import get_logger
from .config import OverlaySettings
from .asset_cache import OverlayImage
from .frame_canvas import FrameCanvas
from .landmarks import FaceLandmarks
from .navigation_controller import Selection

logger = get_logger("OverlayCompositor")


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class FaceAnchors:
    """Overlay anchors in mirrored screen space."""
    left_ear: Point
    right_ear: Point
    neck: Point

    @property
    def ear_distance(self) -> float:
        return math.hypot(self.right_ear.x - self.left_ear.x, self.right_ear.y - self.left_ear.y)


@dataclass(frozen=True)
class OverlayPlacement:
    """One overlay draw call in screen space."""
    image: OverlayImage
    x: float
    y: float
    width: float
    height: float


def compute_anchors(
    face: Optional[FaceLandmarks],
    width: int,
    height: int,
    settings: Optional[OverlaySettings] = None
) -> Optional[FaceAnchors]:
    """
    Map anchor landmarks to mirrored screen coordinates.

    Args:
        face: Face landmarks, None when no face was detected.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        settings: Landmark indices and sizing ratios.

    Returns:
        FaceAnchors, or None without a face (or with too few landmarks).
    """
    if face is None:
        return None

    settings = settings or OverlaySettings()
    indices = (settings.left_ear_index, settings.right_ear_index, settings.neck_index)
    points = [face.get_landmark(i) for i in indices]
    if any(p is None for p in points):
        logger.debug(f"Face has {len(face)} landmarks, anchors unavailable")
        return None

    left_ear, right_ear, neck = (
        Point((1.0 - p.x) * width, p.y * height) for p in points
    )
    return FaceAnchors(left_ear=left_ear, right_ear=right_ear, neck=neck)


def compute_placements(
    face: Optional[FaceLandmarks],
    selection: Selection,
    width: int,
    height: int,
    settings: Optional[OverlaySettings] = None
) -> list[OverlayPlacement]:
    """
    Compute the overlay draw calls for one frame.

    Args:
        face: Face landmarks, None when no face was detected.
        selection: Current selection per slot.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        settings: Landmark indices and sizing ratios.

    Returns:
        Placements in draw order; empty without a face. Images that have
        not finished loading are left out.
    """
    settings = settings or OverlaySettings()
    anchors = compute_anchors(face, width, height, settings)
    if anchors is None:
        return []

    ear_distance = anchors.ear_distance
    placements: list[OverlayPlacement] = []

    earring = selection.earring
    if earring is not None and earring.is_loaded:
        ew = ear_distance * settings.earring_width_ratio
        eh = ew * earring.height / earring.width
        for anchor in (anchors.right_ear, anchors.left_ear):
            placements.append(OverlayPlacement(earring, anchor.x - ew / 2, anchor.y, ew, eh))

    necklace = selection.necklace
    if necklace is not None and necklace.is_loaded:
        nw = ear_distance * settings.necklace_width_ratio
        nh = nw * necklace.height / necklace.width
        placements.append(OverlayPlacement(
            necklace,
            anchors.neck.x - nw / 2,
            anchors.neck.y + ear_distance * settings.necklace_drop_ratio,
            nw,
            nh
        ))

    return placements


class OverlayCompositor:
    """Renders the mirrored video frame plus overlays onto a canvas."""

    def __init__(self, settings: Optional[OverlaySettings] = None):
        self.settings = settings or OverlaySettings()
        self._frames_rendered = 0
        self._frames_with_face = 0

    @property
    def frames_rendered(self) -> int:
        return self._frames_rendered

    @property
    def frames_with_face(self) -> int:
        return self._frames_with_face

    def render(
        self,
        canvas: FrameCanvas,
        frame: np.ndarray,
        face: Optional[FaceLandmarks],
        selection: Selection
    ) -> list[OverlayPlacement]:
        """
        Composite one frame.

        Args:
            canvas: Target surface, resized to the frame.
            frame: Camera frame (BGR, unmirrored).
            face: Face landmarks for this frame, or None.
            selection: Current selection per slot.

        Returns:
            The overlay placements that were drawn.
        """
        height, width = frame.shape[:2]
        canvas.resize(width, height)

        canvas.save()
        canvas.clear()

        canvas.translate(width, 0)
        canvas.scale(-1, 1)
        canvas.draw_image(frame, 0, 0, width, height)
        canvas.reset_transform()

        placements = compute_placements(face, selection, width, height, self.settings)
        for p in placements:
            canvas.draw_image(p.image.pixels, p.x, p.y, p.width, p.height)

        canvas.restore()

        self._frames_rendered += 1
        if face is not None:
            self._frames_with_face += 1

        return placements
