"""
Asset cache for Aurum Try-On.

Maps a catalog category to its ordered list of overlay image handles.
Handles are created on first request and decoded in a small worker pool,
so the render loop never blocks on disk I/O. A handle that has not
finished decoding reports ``is_loaded == False`` and is skipped by the
compositor for that frame.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import cv2
import numpy as np

from .logger import get_logger
from .config import ASSET_FILE_EXTENSION, ASSET_LOADER_WORKERS
from .catalog_loader import Catalog

logger = get_logger("AssetCache")

ImageLoader = Callable[[Path], Optional[np.ndarray]]


@dataclass(eq=False)
class OverlayImage:
    """
    Handle for one catalog image.

    Compared by identity: two handles for the same file are different
    selections unless they are the same cached object.

    Attributes:
        category: Owning category name.
        index: 1-based position in the category.
        path: Source file.
        pixels: BGRA image once decoded, None before.
    """
    category: str
    index: int
    path: Path
    pixels: Optional[np.ndarray] = field(default=None, repr=False)
    failed: bool = False

    @property
    def is_loaded(self) -> bool:
        return self.pixels is not None

    @property
    def width(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[0])


def decode_image(path: Path) -> Optional[np.ndarray]:
    """
    Decode an image file into a BGRA array.

    Args:
        path: Image file path.

    Returns:
        BGRA image as numpy array, or None if the file can't be decoded.
    """
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        return None

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    return image


class AssetCache:
    """
    On-demand, memoized loader of category image lists.

    Attributes:
        catalog: Catalog providing category counts and directories.
    """

    def __init__(
        self,
        catalog: Catalog,
        loader: ImageLoader = decode_image,
        max_workers: int = ASSET_LOADER_WORKERS,
        synchronous: bool = False
    ):
        """
        Initialize asset cache.

        Args:
            catalog: Catalog describing categories.
            loader: Function decoding one file to a BGRA array.
            max_workers: Decoder thread count.
            synchronous: Decode inline instead of in the worker pool.
        """
        self.catalog = catalog
        self._loader = loader
        self._synchronous = synchronous
        self._executor: Optional[ThreadPoolExecutor] = None
        self._max_workers = max_workers
        self._assets: dict[str, list[OverlayImage]] = {}
        self._pending: list[Future] = []

    def preload(self, category: str) -> Optional[list[OverlayImage]]:
        """
        Create (once) and start decoding the asset list of a category.

        Args:
            category: Category name.

        Returns:
            The cached asset list, or None for an unknown category.
        """
        cached = self._assets.get(category)
        if cached is not None:
            return cached

        info = self.catalog.get(category)
        if info is None:
            logger.warning(f"Unknown category: {category}")
            return None

        assets = [
            OverlayImage(category=category, index=i, path=info.asset_path(i, ASSET_FILE_EXTENSION))
            for i in range(1, info.count + 1)
        ]
        # Registered before decoding starts so the list is never rebuilt
        self._assets[category] = assets
        logger.info(f"Preloading {len(assets)} assets for {category}")

        for image in assets:
            if self._synchronous:
                self._load(image)
            else:
                self._pending.append(self._get_executor().submit(self._load, image))

        return assets

    def get(self, category: str) -> Optional[list[OverlayImage]]:
        """Return the cached asset list without triggering a load."""
        return self._assets.get(category)

    def is_cached(self, category: str) -> bool:
        return category in self._assets

    def wait_until_loaded(self, timeout: Optional[float] = None) -> None:
        """Block until every submitted decode has finished."""
        pending, self._pending = self._pending, []
        for future in pending:
            future.result(timeout=timeout)

    def close(self) -> None:
        """Stop the decoder pool."""
        if self._executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self._pending.clear()

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="asset-decoder"
            )
        return self._executor

    def _load(self, image: OverlayImage) -> None:
        try:
            pixels = self._loader(image.path)
        except Exception as e:
            logger.warning(f"Failed to decode {image.path}: {e}")
            pixels = None

        if pixels is None:
            image.failed = True
            logger.warning(f"Asset not available: {image.path}")
            return

        image.pixels = pixels
        logger.debug(f"Loaded {image.category}/{image.index} ({image.width}x{image.height})")

    def __enter__(self) -> "AssetCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
