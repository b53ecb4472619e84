import pytest

from aurum_tryon.key_bindings import KEY_ESCAPE, KEY_NONE, KeyBindings
from aurum_tryon.tryon_session import TryOnSession


@pytest.fixture
def session(catalog, assets, scheduler):
    s = TryOnSession(catalog, assets=assets, scheduler=scheduler)
    yield s
    s.close()


@pytest.fixture
def keys(session):
    return KeyBindings(session)


def press(keys, char: str) -> bool:
    return keys.handle(ord(char))


def test_no_key(keys):
    assert keys.handle(KEY_NONE) is True


@pytest.mark.parametrize("key", [ord("q"), KEY_ESCAPE])
def test_quit_keys(keys, key):
    assert keys.handle(key) is False


def test_digit_selects_category(keys, session):
    press(keys, "2")
    assert session.active_category == "gold_necklaces"

    # Only three categories in the test catalog
    press(keys, "4")
    assert session.active_category == "gold_necklaces"


def test_navigation_keys(keys, session):
    press(keys, "1")
    press(keys, "d")
    assert session.navigation.current_index() == 1
    press(keys, "a")
    press(keys, "a")
    assert session.navigation.current_index() == 4


def test_thumbnail_keys(keys, session):
    press(keys, "@")
    assert session.selection.earring is None

    press(keys, "1")
    press(keys, "#")
    assert session.navigation.current_index() == 2

    press(keys, "^")
    assert session.navigation.current_index() == 2


def test_try_all_and_gallery_keys(keys, session, clock):
    press(keys, "1")
    press(keys, "t")
    assert session.auto_try_running

    clock.advance(session.sequencer.step_delay_ms)
    session.pump()
    press(keys, "t")
    assert not session.auto_try_running
    assert session.gallery.visible

    press(keys, "g")
    assert not session.gallery.visible

    press(keys, "s")
    assert session.gallery.visible
    assert len(session.gallery.snapshots) == 2


def test_unbound_key(keys, session):
    assert press(keys, "z") is True
    assert session.active_category is None
