"""
Navigation controller for Aurum Try-On.

Holds the active catalog category and the current image of each overlay
slot, and applies gesture, keyboard or auto-try driven changes to them.
"""

from dataclasses import dataclass
from typing import Optional

from .logger import get_logger
from .asset_cache import AssetCache, OverlayImage
from .catalog_loader import CategoryInfo, Slot, slot_for_category

logger = get_logger("NavigationController")


@dataclass
class Selection:
    """Currently selected image per overlay slot."""
    earring: Optional[OverlayImage] = None
    necklace: Optional[OverlayImage] = None

    def get(self, slot: str) -> Optional[OverlayImage]:
        return self.earring if slot == Slot.EARRING else self.necklace

    def set(self, slot: str, image: Optional[OverlayImage]) -> None:
        if slot == Slot.EARRING:
            self.earring = image
        else:
            self.necklace = image


class NavigationController:
    """
    Active category and per-slot selection.

    Only the slot matching the active category is written by relative
    navigation; switching category leaves both slots untouched.
    """

    def __init__(self, assets: AssetCache):
        self.assets = assets
        self.selection = Selection()
        self._active: Optional[CategoryInfo] = None

    @property
    def active_category(self) -> Optional[str]:
        return self._active.name if self._active else None

    @property
    def active_info(self) -> Optional[CategoryInfo]:
        return self._active

    @property
    def active_slot(self) -> Optional[str]:
        return self._active.slot if self._active else None

    def active_assets(self) -> Optional[list[OverlayImage]]:
        """Cached asset list of the active category, None if absent."""
        if self._active is None:
            return None
        return self.assets.get(self._active.name)

    def set_category(self, name: str) -> bool:
        """
        Switch the active category and start loading its assets.

        Args:
            name: Category name.

        Returns:
            True if the category exists and is now active.
        """
        info = self.assets.catalog.get(name)
        if info is None:
            logger.warning(f"Ignoring unknown category: {name}")
            return False

        self._active = info
        self.assets.preload(name)
        logger.info(f"Active category: {name} ({info.count} items, {info.slot} slot)")
        return True

    def navigate(self, direction: int) -> bool:
        """
        Step the active slot through the active category.

        Args:
            direction: +1 for next, -1 for previous.

        Returns:
            True if the selection changed, False when there is no active
            category or its assets are not cached (or it is empty).
        """
        assets = self.active_assets()
        if not assets:
            logger.debug("Navigation ignored: no active category assets")
            return False

        slot = self._active.slot
        current = self.selection.get(slot)
        index = self._index_of(assets, current)
        next_index = (index + direction + len(assets)) % len(assets)

        self.selection.set(slot, assets[next_index])
        logger.debug(f"Navigated {slot} to {self._active.name}[{next_index}]")
        return True

    def select_explicit(self, category: str, item_index: int) -> bool:
        """
        Select one item directly (thumbnail pick).

        Args:
            category: Category name; its assets are loaded if needed.
            item_index: 0-based item index.

        Returns:
            True if the item exists and was selected.
        """
        assets = self.assets.preload(category)
        if assets is None or not 0 <= item_index < len(assets):
            logger.warning(f"Invalid selection {category}[{item_index}]")
            return False

        self.selection.set(slot_for_category(category), assets[item_index])
        logger.info(f"Selected {category}[{item_index}]")
        return True

    def apply_asset(self, image: OverlayImage) -> None:
        """Assign an image to the active category's slot."""
        slot = self._active.slot if self._active else slot_for_category(image.category)
        self.selection.set(slot, image)

    def current_index(self) -> Optional[int]:
        """Index of the active slot's image in the active list, None if not a member."""
        assets = self.active_assets()
        if not assets:
            return None
        current = self.selection.get(self._active.slot)
        for i, image in enumerate(assets):
            if image is current:
                return i
        return None

    @staticmethod
    def _index_of(assets: list[OverlayImage], current: Optional[OverlayImage]) -> int:
        # Stale or empty selections (e.g. after a category switch) start from 0
        for i, image in enumerate(assets):
            if image is current:
                return i
        return 0
