"""Shared fixtures: synthetic catalogs, images, landmarks and a fake clock."""

from pathlib import Path
from typing import Optional

import numpy as np
import pytest

from aurum_tryon.asset_cache import AssetCache
from aurum_tryon.catalog_loader import Catalog, CategoryInfo
from aurum_tryon.config import FACE_LEFT_EAR_INDEX, FACE_NECK_INDEX, FACE_RIGHT_EAR_INDEX
from aurum_tryon.landmarks import (
    FACE_LANDMARK_COUNT_REFINED,
    HAND_LANDMARK_COUNT,
    FaceLandmarks,
    HandLandmarks,
    Landmark,
    LandmarkIndex,
)
from aurum_tryon.navigation_controller import NavigationController
from aurum_tryon.scheduler import FrameScheduler


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 1000.0):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def make_bgra(width: int, height: int, color=(0, 0, 255), alpha: int = 255) -> np.ndarray:
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[..., :3] = color
    image[..., 3] = alpha
    return image


def fake_loader(path: Path) -> Optional[np.ndarray]:
    """Earrings are 20x40 (1:2), necklaces 40x20 (2:1)."""
    if "earrings" in str(path):
        return make_bgra(20, 40)
    return make_bgra(40, 20, color=(0, 255, 255))


def make_hand(dx: float, dy: float, hand_scale: float = 0.2) -> HandLandmarks:
    """
    Hand whose index fingertip is offset (dx, dy) from its knuckle and whose
    wrist to middle-knuckle distance is ``hand_scale``.
    """
    wrist = Landmark(0.5, 0.8)
    points = [Landmark(wrist.x, wrist.y) for _ in range(HAND_LANDMARK_COUNT)]
    points[LandmarkIndex.MIDDLE_MCP] = Landmark(0.5, 0.8 - hand_scale)
    points[LandmarkIndex.INDEX_MCP] = Landmark(0.45, 0.6)
    points[LandmarkIndex.INDEX_TIP] = Landmark(0.45 + dx, 0.6 + dy)
    return HandLandmarks(landmarks=points)


def make_face(left_ear=(0.75, 0.1), right_ear=(0.25, 0.1), neck=(0.5, 0.5)) -> FaceLandmarks:
    """Refined face mesh with only the anchor points set (normalized, unmirrored)."""
    points = [Landmark(0.5, 0.5) for _ in range(FACE_LANDMARK_COUNT_REFINED)]
    points[FACE_LEFT_EAR_INDEX] = Landmark(*left_ear)
    points[FACE_RIGHT_EAR_INDEX] = Landmark(*right_ear)
    points[FACE_NECK_INDEX] = Landmark(*neck)
    return FaceLandmarks(landmarks=points)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock) -> FrameScheduler:
    return FrameScheduler(clock=clock)


@pytest.fixture
def catalog(tmp_path) -> Catalog:
    root = tmp_path / "assets"
    return Catalog(
        assets_root=root,
        categories=[
            CategoryInfo("gold_earrings", 5, root / "gold_earrings"),
            CategoryInfo("gold_necklaces", 3, root / "gold_necklaces"),
            CategoryInfo("silver_earrings", 0, root / "silver_earrings"),
        ]
    )


@pytest.fixture
def assets(catalog) -> AssetCache:
    cache = AssetCache(catalog, loader=fake_loader, synchronous=True)
    yield cache
    cache.close()


@pytest.fixture
def navigation(assets) -> NavigationController:
    return NavigationController(assets)
