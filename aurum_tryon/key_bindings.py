"""
Keyboard bindings for the desktop host.

Keys stand in for the web page's buttons: the digit keys pick a category,
the shifted digits pick an item of the active category directly
(thumbnail click), and single letters trigger the remaining actions.
"""

from typing import Callable, Final

from .logger import get_logger
from .tryon_session import TryOnSession

logger = get_logger("KeyBindings")

KEY_NONE: Final[int] = -1
KEY_ESCAPE: Final[int] = 27

# Shift+1 .. Shift+6 on a US layout
THUMBNAIL_KEYS: Final[str] = "!@#$%^"
MAX_CATEGORY_KEYS: Final[int] = 9


class KeyBindings:
    """
    Maps key codes (as returned by cv2.waitKey) to session operations.
    """

    def __init__(self, session: TryOnSession):
        self.session = session
        self.category_keys = {
            ord(str(i + 1)): name
            for i, name in enumerate(session.catalog.names[:MAX_CATEGORY_KEYS])
        }
        self._actions: dict[int, Callable[[], object]] = {
            ord("a"): lambda: session.navigate(-1),
            ord("d"): lambda: session.navigate(1),
            ord("t"): session.toggle_auto_try,
            ord("s"): session.capture_single_snapshot,
            ord("g"): session.close_gallery,
        }

    @staticmethod
    def is_quit(key: int) -> bool:
        return key in (ord("q"), KEY_ESCAPE)

    def handle(self, key: int) -> bool:
        """
        Dispatch one key press.

        Args:
            key: Key code, -1 when no key was pressed.

        Returns:
            False if the key requests quitting, True otherwise.
        """
        if key == KEY_NONE:
            return True

        key &= 0xFF
        if self.is_quit(key):
            logger.info("Quit key pressed")
            return False

        if key in self.category_keys:
            self.session.set_category(self.category_keys[key])
        elif chr(key) in THUMBNAIL_KEYS:
            self._select_thumbnail(THUMBNAIL_KEYS.index(chr(key)))
        elif key in self._actions:
            self._actions[key]()
        else:
            logger.debug(f"Unbound key: {key}")

        return True

    def _select_thumbnail(self, item_index: int) -> None:
        category = self.session.active_category
        if category is None:
            logger.info("Thumbnail pick ignored: no active category")
            return
        self.session.select_explicit(category, item_index)
