from pathlib import Path

import cv2
import numpy as np

from aurum_tryon.asset_cache import AssetCache, OverlayImage, decode_image

from conftest import fake_loader, make_bgra


class CountingLoader:
    def __init__(self, result=None, error=None):
        self.calls: list[Path] = []
        self.result = result
        self.error = error

    def __call__(self, path: Path):
        self.calls.append(path)
        if self.error:
            raise self.error
        return self.result if self.result is not None else fake_loader(path)


def test_lazy_until_preload(catalog):
    loader = CountingLoader()
    cache = AssetCache(catalog, loader=loader, synchronous=True)

    assert cache.get("gold_earrings") is None
    assert not cache.is_cached("gold_earrings")
    assert loader.calls == []


def test_preload_builds_ordered_handles(catalog):
    cache = AssetCache(catalog, loader=fake_loader, synchronous=True)
    images = cache.preload("gold_earrings")

    assert [image.index for image in images] == [1, 2, 3, 4, 5]
    assert images[0].path == catalog.assets_root / "gold_earrings" / "1.png"
    assert all(image.is_loaded for image in images)
    assert (images[0].width, images[0].height) == (20, 40)


def test_preload_is_idempotent(catalog):
    loader = CountingLoader()
    cache = AssetCache(catalog, loader=loader, synchronous=True)

    first = cache.preload("gold_necklaces")
    second = cache.preload("gold_necklaces")

    assert first is second
    assert len(loader.calls) == 3
    assert cache.get("gold_necklaces") is first


def test_unknown_category(catalog):
    cache = AssetCache(catalog, loader=fake_loader, synchronous=True)
    assert cache.preload("platinum_rings") is None
    assert not cache.is_cached("platinum_rings")


def test_empty_category(catalog):
    cache = AssetCache(catalog, loader=fake_loader, synchronous=True)
    assert cache.preload("silver_earrings") == []


def test_missing_file_leaves_handle_unloaded(catalog):
    cache = AssetCache(catalog, loader=lambda path: None, synchronous=True)
    images = cache.preload("gold_necklaces")

    assert len(images) == 3
    assert not any(image.is_loaded for image in images)
    assert all(image.failed for image in images)
    assert images[0].width == 0


def test_loader_error_is_contained(catalog):
    cache = AssetCache(catalog, loader=CountingLoader(error=OSError("disk")), synchronous=True)
    images = cache.preload("gold_necklaces")
    assert all(image.failed and not image.is_loaded for image in images)


def test_threaded_loading(catalog):
    with AssetCache(catalog, loader=fake_loader, max_workers=2) as cache:
        images = cache.preload("gold_earrings")
        cache.wait_until_loaded(timeout=5)
        assert all(image.is_loaded for image in images)


def test_handles_compare_by_identity():
    a = OverlayImage("gold_earrings", 1, Path("1.png"))
    b = OverlayImage("gold_earrings", 1, Path("1.png"))
    assert a != b
    assert a == a


def test_decode_image_converts_to_bgra(tmp_path):
    bgr_path = tmp_path / "bgr.png"
    cv2.imwrite(str(bgr_path), np.full((3, 5, 3), 40, dtype=np.uint8))
    decoded = decode_image(bgr_path)
    assert decoded.shape == (3, 5, 4)
    assert decoded[0, 0, 3] == 255

    bgra_path = tmp_path / "bgra.png"
    cv2.imwrite(str(bgra_path), make_bgra(4, 2, alpha=10))
    assert decode_image(bgra_path)[0, 0, 3] == 10

    assert decode_image(tmp_path / "missing.png") is None
