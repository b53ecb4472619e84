"""
Catalog loader for Aurum Try-On.

Loads and validates JSON catalog files describing the jewelry categories
available for try-on. Catalog properties use camelCase to match the
web front-end's JSON format.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .logger import get_logger
from .config import (
    AUTO_TRY_STEP_DELAY_MS,
    DEFAULT_ASSETS_ROOT,
    DEFAULT_CATEGORY_COUNTS,
    EARRING_CATEGORY_KEYWORD,
    GESTURE_COOLDOWN_MS,
)

logger = get_logger("CatalogLoader")


class Slot:
    """Overlay slot names."""
    EARRING = "earring"
    NECKLACE = "necklace"


def slot_for_category(name: str) -> str:
    """Earring categories feed the earring slot, everything else the necklace slot."""
    return Slot.EARRING if EARRING_CATEGORY_KEYWORD in name else Slot.NECKLACE


@dataclass(frozen=True)
class CategoryInfo:
    """
    Immutable metadata for one catalog category.

    Attributes:
        name: Category identifier, also the asset sub-directory (e.g. "gold_earrings").
        count: Number of images, stored as 1.png .. <count>.png.
        asset_dir: Directory holding the category's images.
        label: Display label.
    """

    name: str
    count: int
    asset_dir: Path
    label: str = ""

    @property
    def slot(self) -> str:
        return slot_for_category(self.name)

    @property
    def display_name(self) -> str:
        return self.label or self.name.replace("_", " ").title()

    def asset_path(self, index: int, extension: str = ".png") -> Path:
        """Path of the 1-based image ``index``."""
        return self.asset_dir / f"{index}{extension}"

    @classmethod
    def from_dict(cls, data: dict[str, Any], assets_root: Path) -> "CategoryInfo":
        """
        Create CategoryInfo from dictionary with camelCase keys.

        Args:
            data: Dictionary with name, count and optional label/assetDir keys.
            assets_root: Root directory; relative assetDir values resolve against it.

        Returns:
            CategoryInfo instance.

        Raises:
            CatalogLoadError: If name or count is missing or invalid.
        """
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise CatalogLoadError(f"Category missing valid name: {data!r}")

        count = data.get("count")
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise CatalogLoadError(f"Category '{name}' has invalid count: {count!r}")

        asset_dir = data.get("assetDir")
        return cls(
            name=name,
            count=count,
            asset_dir=assets_root / asset_dir if asset_dir else assets_root / name,
            label=str(data.get("label", ""))
        )


@dataclass
class Catalog:
    """
    Catalog configuration loaded from JSON.

    Attributes:
        assets_root: Root directory of the category image folders.
        categories: Categories in display order.
        selected_camera_index: Camera device index (-1 for auto).
        gesture_cooldown_ms: Minimum time between accepted gestures.
        auto_try_delay_ms: Delay between auto-try steps.
    """

    assets_root: Path
    categories: list[CategoryInfo] = field(default_factory=list)
    selected_camera_index: int = -1
    gesture_cooldown_ms: float = GESTURE_COOLDOWN_MS
    auto_try_delay_ms: float = AUTO_TRY_STEP_DELAY_MS

    def get(self, name: str) -> Optional[CategoryInfo]:
        """Look up a category by name."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.categories]


class CatalogLoadError(Exception):
    """Raised when catalog loading or validation fails."""
    pass


def load_catalog(catalog_path: str | Path) -> Catalog:
    """
    Load and validate a catalog from a JSON file.

    Args:
        catalog_path: Path to the JSON catalog file.

    Returns:
        Validated Catalog instance.

    Raises:
        CatalogLoadError: If file cannot be read or validation fails.
    """
    path = Path(catalog_path)
    logger.info(f"Loading catalog from: {path}")

    if not path.exists():
        raise CatalogLoadError(f"Catalog file not found: {path}")

    if not path.is_file():
        raise CatalogLoadError(f"Catalog path is not a file: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Invalid JSON in catalog: {e}")
    except IOError as e:
        raise CatalogLoadError(f"Cannot read catalog file: {e}")

    if not isinstance(data, dict):
        raise CatalogLoadError("Catalog root must be a JSON object")

    # Relative asset roots resolve against the catalog file's directory
    return _parse_catalog(data, base_dir=path.parent)


def _parse_catalog(data: dict[str, Any], base_dir: Path) -> Catalog:
    """
    Parse and validate catalog data from dictionary.

    Args:
        data: Dictionary with camelCase catalog properties.
        base_dir: Directory relative asset paths are resolved against.

    Returns:
        Validated Catalog instance.

    Raises:
        CatalogLoadError: If required fields are missing or invalid.
    """
    assets_root = Path(data.get("assetsRoot", DEFAULT_ASSETS_ROOT))
    if not assets_root.is_absolute():
        assets_root = base_dir / assets_root

    categories_data = data.get("categories")
    if categories_data is None:
        categories = _default_categories(assets_root)
        logger.info("Catalog has no categories, using built-in defaults")
    elif not isinstance(categories_data, list):
        raise CatalogLoadError("Catalog field 'categories' must be a list")
    else:
        categories = []
        for position, entry in enumerate(categories_data):
            if not isinstance(entry, dict):
                raise CatalogLoadError(f"Category entry {position} must be an object")
            categories.append(CategoryInfo.from_dict(entry, assets_root))

    names = [c.name for c in categories]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise CatalogLoadError(f"Duplicate category name(s): {', '.join(duplicates)}")

    camera_index = data.get("selectedCameraIndex", -1)
    if not isinstance(camera_index, int):
        camera_index = -1

    cooldown_ms = data.get("gestureCooldownMs", GESTURE_COOLDOWN_MS)
    if not isinstance(cooldown_ms, (int, float)) or cooldown_ms < 0:
        logger.warning(f"Invalid gestureCooldownMs, using default: {GESTURE_COOLDOWN_MS}")
        cooldown_ms = GESTURE_COOLDOWN_MS

    delay_ms = data.get("autoTryDelayMs", AUTO_TRY_STEP_DELAY_MS)
    if not isinstance(delay_ms, (int, float)) or delay_ms <= 0:
        logger.warning(f"Invalid autoTryDelayMs, using default: {AUTO_TRY_STEP_DELAY_MS}")
        delay_ms = AUTO_TRY_STEP_DELAY_MS

    catalog = Catalog(
        assets_root=assets_root,
        categories=categories,
        selected_camera_index=camera_index,
        gesture_cooldown_ms=float(cooldown_ms),
        auto_try_delay_ms=float(delay_ms)
    )

    logger.info(f"Loaded catalog with {len(catalog.categories)} categories")
    for category in catalog.categories:
        logger.debug(f"  {category.name}: {category.count} items ({category.slot})")

    return catalog


def _default_categories(assets_root: Path) -> list[CategoryInfo]:
    return [
        CategoryInfo(name=name, count=count, asset_dir=assets_root / name)
        for name, count in DEFAULT_CATEGORY_COUNTS.items()
    ]


def create_default_catalog(assets_root: str | Path = DEFAULT_ASSETS_ROOT) -> Catalog:
    """
    Create the built-in catalog (gold/diamond earrings and necklaces).

    Args:
        assets_root: Directory holding one sub-directory per category.

    Returns:
        Catalog with default values.
    """
    root = Path(assets_root)
    return Catalog(assets_root=root, categories=_default_categories(root))
