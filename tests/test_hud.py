import cv2
import numpy as np

from aurum_tryon.hud import (
    INDICATOR_ACTIVE_COLOR,
    INDICATOR_FLASH_COLOR,
    INDICATOR_IDLE_COLOR,
    apply_capture_flash,
    build_gallery_montage,
    decode_snapshot,
    draw_hud,
    indicator_color,
)
from aurum_tryon.tryon_session import IndicatorState, TryOnSession


def encode(width, height, value=0) -> bytes:
    ok, data = cv2.imencode(".png", np.full((height, width, 3), value, dtype=np.uint8))
    assert ok
    return data.tobytes()


def test_indicator_color():
    assert indicator_color(IndicatorState(False, False)) == INDICATOR_IDLE_COLOR
    assert indicator_color(IndicatorState(True, False)) == INDICATOR_ACTIVE_COLOR
    assert indicator_color(IndicatorState(True, True)) == INDICATOR_FLASH_COLOR


def test_decode_snapshot():
    assert decode_snapshot(b"") is None
    assert decode_snapshot(encode(4, 2)).shape == (2, 4, 3)


def test_montage_layout():
    snapshots = [encode(40, 20, v) for v in (10, 20, 30, 40)]
    montage = build_gallery_montage(snapshots, thumb_width=20, columns=3, padding=2)

    # 3 columns x 2 rows of 20x10 tiles
    assert montage.shape == (2 + 2 * 12, 2 + 3 * 22, 3)
    assert montage[2, 2, 0] == 10
    assert montage[14, 2, 0] == 40


def test_montage_skips_empty_snapshots():
    assert build_gallery_montage([]) is None
    assert build_gallery_montage([b""]) is None
    montage = build_gallery_montage([b"", encode(10, 10)], thumb_width=10, columns=3, padding=0)
    assert montage.shape == (10, 10, 3)


def test_capture_flash_brightens():
    flashed = apply_capture_flash(np.zeros((2, 2, 3), dtype=np.uint8))
    assert flashed.min() > 100


def test_draw_hud(catalog, assets, scheduler):
    session = TryOnSession(catalog, assets=assets, scheduler=scheduler)
    session.set_category("gold_earrings")
    session.start_auto_try()
    session.start_auto_try()

    image = np.zeros((480, 640, 3), dtype=np.uint8)
    result = draw_hud(image, session, scheduler.now_ms(), fps=30.0)

    assert result is image
    assert image.any()
    session.close()
