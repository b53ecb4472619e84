"""
Canvas-like drawing surface backed by a numpy BGR buffer.

Supports the subset of a 2D canvas the compositor needs: clear, axis
aligned transforms (translate/scale, including mirroring with a negative
scale), save/restore, scaled image drawing with alpha blending, and
exporting the current contents as an encoded image.
"""

from typing import Optional

import cv2
import numpy as np

from .logger import get_logger
from .config import SNAPSHOT_FORMAT

logger = get_logger("FrameCanvas")

# (scale_x, scale_y, translate_x, translate_y)
Transform = tuple[float, float, float, float]
IDENTITY: Transform = (1.0, 1.0, 0.0, 0.0)


class FrameCanvas:
    """
    Drawing surface for one composited frame.

    Attributes:
        draw_count: Number of draw_image calls that touched the buffer.
    """

    def __init__(self, width: int = 0, height: int = 0):
        self._buffer = np.zeros((max(height, 0), max(width, 0), 3), dtype=np.uint8)
        self._transform: Transform = IDENTITY
        self._stack: list[Transform] = []
        self.draw_count = 0

    @property
    def width(self) -> int:
        return int(self._buffer.shape[1])

    @property
    def height(self) -> int:
        return int(self._buffer.shape[0])

    @property
    def image(self) -> np.ndarray:
        """Current contents (BGR). Callers must not keep it across frames."""
        return self._buffer

    @property
    def transform(self) -> Transform:
        return self._transform

    def resize(self, width: int, height: int) -> None:
        """Set the canvas size; the contents are kept only if the size is unchanged."""
        if (width, height) != (self.width, self.height):
            self._buffer = np.zeros((height, width, 3), dtype=np.uint8)
            logger.debug(f"Canvas resized to {width}x{height}")

    def clear(self) -> None:
        self._buffer[:] = 0

    def save(self) -> None:
        self._stack.append(self._transform)

    def restore(self) -> None:
        if self._stack:
            self._transform = self._stack.pop()

    def translate(self, dx: float, dy: float) -> None:
        sx, sy, tx, ty = self._transform
        self._transform = (sx, sy, tx + sx * dx, ty + sy * dy)

    def scale(self, scale_x: float, scale_y: float) -> None:
        sx, sy, tx, ty = self._transform
        self._transform = (sx * scale_x, sy * scale_y, tx, ty)

    def reset_transform(self) -> None:
        self._transform = IDENTITY

    def draw_image(self, image: np.ndarray, x: float, y: float, width: float, height: float) -> None:
        """
        Draw an image scaled into the rectangle (x, y, width, height).

        The rectangle is mapped through the current transform. BGRA images
        are alpha blended, BGR and greyscale images are copied. Parts
        outside the canvas are clipped.

        Args:
            image: BGR, BGRA or greyscale image.
            x: Left edge in user space.
            y: Top edge in user space.
            width: Target width in user space.
            height: Target height in user space.
        """
        sx, sy, tx, ty = self._transform
        x0, x1 = sx * x + tx, sx * (x + width) + tx
        y0, y1 = sy * y + ty, sy * (y + height) + ty

        left, top = min(x0, x1), min(y0, y1)
        dst_w = int(round(abs(x1 - x0)))
        dst_h = int(round(abs(y1 - y0)))
        if dst_w <= 0 or dst_h <= 0 or image.size == 0:
            return

        ix, iy = int(round(left)), int(round(top))
        cx0, cy0 = max(ix, 0), max(iy, 0)
        cx1, cy1 = min(ix + dst_w, self.width), min(iy + dst_h, self.height)
        if cx0 >= cx1 or cy0 >= cy1:
            return

        if image.ndim == 2:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

        if image.shape[1] == dst_w and image.shape[0] == dst_h:
            scaled = image
        else:
            scaled = cv2.resize(image, (dst_w, dst_h), interpolation=cv2.INTER_LINEAR)

        if x1 < x0:
            scaled = cv2.flip(scaled, 1)
        if y1 < y0:
            scaled = cv2.flip(scaled, 0)

        src = scaled[cy0 - iy:cy1 - iy, cx0 - ix:cx1 - ix]
        dst = self._buffer[cy0:cy1, cx0:cx1]

        if src.shape[2] == 4:
            alpha = src[..., 3:4].astype(np.float32) / 255.0
            blended = src[..., :3].astype(np.float32) * alpha + dst.astype(np.float32) * (1.0 - alpha)
            dst[:] = np.clip(blended + 0.5, 0, 255).astype(np.uint8)
        else:
            dst[:] = src[..., :3]

        self.draw_count += 1

    def export_image(self, extension: str = SNAPSHOT_FORMAT) -> bytes:
        """
        Encode the current contents.

        Args:
            extension: Image format understood by cv2.imencode (".png", ".jpg").

        Returns:
            Encoded image bytes, empty for a canvas nothing was drawn to yet.

        Raises:
            RuntimeError: If encoding fails.
        """
        if self._buffer.size == 0:
            return b""

        ok, encoded = cv2.imencode(extension, self._buffer)
        if not ok:
            raise RuntimeError(f"Failed to encode canvas as {extension}")
        return encoded.tobytes()

    def copy_pixels(self) -> Optional[np.ndarray]:
        """Copy of the current contents, None for an empty canvas."""
        if self._buffer.size == 0:
            return None
        return self._buffer.copy()
