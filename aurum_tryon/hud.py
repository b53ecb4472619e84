"""
On-screen overlays for the desktop host: status text, hand indicator,
capture flash and the snapshot gallery montage.
"""

from typing import Optional

import cv2
import numpy as np

from .logger import get_logger
from .config import GALLERY_COLUMNS, GALLERY_THUMB_WIDTH
from .tryon_session import IndicatorState, TryOnSession

logger = get_logger("HUD")

# BGR
INDICATOR_ACTIVE_COLOR = (136, 255, 0)
INDICATOR_IDLE_COLOR = (85, 85, 85)
INDICATOR_FLASH_COLOR = (55, 175, 212)
TEXT_COLOR = (255, 255, 255)
ACCENT_COLOR = (55, 175, 212)
NOTICE_COLOR = (0, 200, 255)

HELP_TEXT = "1-4 category  a/d prev/next  shift+1..6 item  t try all  s snapshot  g close gallery  q quit"

FONT = cv2.FONT_HERSHEY_SIMPLEX


def indicator_color(state: IndicatorState) -> tuple[int, int, int]:
    if state.flashing:
        return INDICATOR_FLASH_COLOR
    return INDICATOR_ACTIVE_COLOR if state.hand_detected else INDICATOR_IDLE_COLOR


def _put_text(image: np.ndarray, text: str, org: tuple[int, int], scale: float,
              color: tuple[int, int, int], thickness: int = 1) -> None:
    # Dark outline keeps text readable over the video
    cv2.putText(image, text, org, FONT, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(image, text, org, FONT, scale, color, thickness, cv2.LINE_AA)


def draw_hud(image: np.ndarray, session: TryOnSession, now_ms: float, fps: Optional[float] = None) -> np.ndarray:
    """
    Draw session status onto a display frame (in place).

    Args:
        image: BGR display frame.
        session: Session providing the state.
        now_ms: Current time for timed elements.
        fps: Frame rate to show, omitted if None.

    Returns:
        The same image.
    """
    h, w = image.shape[:2]

    info = session.navigation.active_info
    if info is None:
        title = "No category selected"
    else:
        index = session.navigation.current_index()
        position = f" {index + 1}/{info.count}" if index is not None else ""
        title = f"{info.display_name}{position}"
    _put_text(image, title, (10, 30), 0.8, ACCENT_COLOR, 2)

    state = session.indicator_state(now_ms)
    cv2.circle(image, (w - 230, 24), 8, indicator_color(state), -1)
    _put_text(image, state.label, (w - 215, 30), 0.6, TEXT_COLOR)

    if session.auto_try_running:
        run = session.sequencer.session
        assets = session.navigation.active_assets() or []
        step = run.step_index + 1 if run else 0
        _put_text(image, f"TRY ALL {step}/{len(assets)}  (t to stop)", (10, 62), 0.7, ACCENT_COLOR, 2)

    notice = session.active_notice(now_ms)
    if notice:
        (tw, _), _ = cv2.getTextSize(notice, FONT, 0.7, 2)
        _put_text(image, notice, (max((w - tw) // 2, 10), h // 2), 0.7, NOTICE_COLOR, 2)

    if fps is not None:
        _put_text(image, f"FPS: {fps:.1f}", (10, h - 40), 0.5, TEXT_COLOR)
    _put_text(image, HELP_TEXT, (10, h - 14), 0.45, TEXT_COLOR)

    return image


def apply_capture_flash(image: np.ndarray, strength: float = 0.6) -> np.ndarray:
    """Blend the frame towards white, as a camera-shutter cue."""
    white = np.full_like(image, 255)
    return cv2.addWeighted(image, 1.0 - strength, white, strength, 0)


def decode_snapshot(snapshot: bytes) -> Optional[np.ndarray]:
    """Decode an encoded snapshot to BGR, None if it is empty or corrupt."""
    if not snapshot:
        return None
    return cv2.imdecode(np.frombuffer(snapshot, dtype=np.uint8), cv2.IMREAD_COLOR)


def build_gallery_montage(
    snapshots: list[bytes],
    thumb_width: int = GALLERY_THUMB_WIDTH,
    columns: int = GALLERY_COLUMNS,
    padding: int = 8
) -> Optional[np.ndarray]:
    """
    Tile snapshots into one image, row by row in capture order.

    Args:
        snapshots: Encoded snapshots.
        thumb_width: Width of each tile.
        columns: Tiles per row.
        padding: Gap between tiles in pixels.

    Returns:
        BGR montage, or None if no snapshot could be decoded.
    """
    thumbs = []
    for i, snapshot in enumerate(snapshots):
        image = decode_snapshot(snapshot)
        if image is None:
            logger.warning(f"Skipping undecodable snapshot {i}")
            continue
        thumb_height = max(1, round(image.shape[0] * thumb_width / image.shape[1]))
        thumbs.append(cv2.resize(image, (thumb_width, thumb_height), interpolation=cv2.INTER_AREA))

    if not thumbs:
        return None

    columns = max(1, min(columns, len(thumbs)))
    rows = (len(thumbs) + columns - 1) // columns
    cell_h = max(t.shape[0] for t in thumbs)

    montage = np.full(
        (rows * (cell_h + padding) + padding, columns * (thumb_width + padding) + padding, 3),
        24, dtype=np.uint8
    )
    for i, thumb in enumerate(thumbs):
        row, col = divmod(i, columns)
        y = padding + row * (cell_h + padding)
        x = padding + col * (thumb_width + padding)
        montage[y:y + thumb.shape[0], x:x + thumb_width] = thumb

    return montage
