import numpy as np
import pytest

from aurum_tryon.config import AUTO_TRY_NOTICE, GESTURE_FLASH_MS, INDICATOR_ACTIVE_LABEL, INDICATOR_IDLE_LABEL
from aurum_tryon.gesture_classifier import NavigationCommand
from aurum_tryon.key_bindings import KeyBindings
from aurum_tryon.landmark_service import DetectionResult
from aurum_tryon.tryon_session import TryOnSession

from conftest import make_face, make_hand

POINT_NEXT = make_hand(0.12, 0.0)
POINT_PREVIOUS = make_hand(-0.12, 0.0)


def hand_result(hand, ts=0.0):
    return DetectionResult(hand, ts, 640, 480)


def face_result(face, ts=0.0):
    return DetectionResult(face, ts, 400, 600)


@pytest.fixture
def session(catalog, assets, scheduler):
    s = TryOnSession(catalog, assets=assets, scheduler=scheduler)
    yield s
    s.close()


def test_initial_state(session):
    assert not session.hand_detected
    assert not session.auto_try_running
    assert session.gallery.snapshots == []
    assert not session.gallery.visible
    assert session.selection.earring is None
    assert session.indicator_state().label == INDICATOR_IDLE_LABEL


def test_settings_come_from_catalog(catalog, assets, scheduler):
    catalog.gesture_cooldown_ms = 250.0
    catalog.auto_try_delay_ms = 400.0
    session = TryOnSession(catalog, assets=assets, scheduler=scheduler)
    assert session.classifier.settings.cooldown_ms == 250.0
    assert session.sequencer.step_delay_ms == 400.0


def test_gesture_navigates(session):
    session.set_category("gold_earrings")

    assert session.handle_hand_result(hand_result(POINT_NEXT)) is NavigationCommand.NEXT
    assert session.hand_detected
    assert session.navigation.current_index() == 1


def test_gesture_cooldown_uses_session_clock(session, clock):
    session.set_category("gold_earrings")
    session.handle_hand_result(hand_result(POINT_NEXT))

    clock.advance(400)
    assert session.handle_hand_result(hand_result(POINT_NEXT)) is NavigationCommand.NONE
    clock.advance(400)
    assert session.handle_hand_result(hand_result(POINT_PREVIOUS)) is NavigationCommand.PREVIOUS
    assert session.navigation.current_index() == 0


def test_no_hand(session):
    session.handle_hand_result(hand_result(POINT_NEXT))
    assert session.handle_hand_result(hand_result(None)) is NavigationCommand.NONE
    assert not session.hand_detected


def test_indicator_flash(session, clock):
    session.set_category("gold_earrings")
    session.handle_hand_result(hand_result(POINT_NEXT))

    state = session.indicator_state()
    assert state.flashing
    assert state.label == INDICATOR_ACTIVE_LABEL

    clock.advance(GESTURE_FLASH_MS)
    assert not session.indicator_state().flashing
    assert session.indicator_state().hand_detected


def test_gestures_ignored_during_auto_try(session, clock):
    session.set_category("gold_earrings")
    session.start_auto_try()

    assert session.handle_hand_result(hand_result(POINT_NEXT)) is NavigationCommand.NONE
    assert session.hand_detected
    assert session.navigation.current_index() == 0
    assert session.classifier.state.last_accepted_ms is None


def test_face_result_renders_stored_frame(session):
    assert session.handle_face_result(face_result(make_face())) == []

    session.set_frame(np.zeros((600, 400, 3), dtype=np.uint8))
    session.select_explicit("gold_earrings", 0)
    placements = session.handle_face_result(face_result(make_face()))

    assert len(placements) == 2
    assert (session.canvas.width, session.canvas.height) == (400, 600)
    assert session.last_placements == placements


def test_single_snapshot_opens_gallery(session, clock):
    session.set_frame(np.zeros((20, 30, 3), dtype=np.uint8))
    session.handle_face_result(face_result(None))

    snapshot = session.capture_single_snapshot()

    assert snapshot.startswith(b"\x89PNG")
    assert session.gallery.snapshots == [snapshot]
    assert session.gallery.visible
    assert session.capture_flash_active()

    clock.advance(200)
    assert not session.capture_flash_active()

    session.close_gallery()
    assert not session.gallery.visible
    assert session.gallery.snapshots == [snapshot]


def test_auto_try_fills_gallery(session, clock):
    session.set_frame(np.zeros((20, 30, 3), dtype=np.uint8))
    session.handle_face_result(face_result(None))
    session.set_category("gold_necklaces")

    assert session.toggle_auto_try() is True
    assert session.auto_try_running
    for _ in range(3):
        clock.advance(session.sequencer.step_delay_ms)
        session.pump()

    assert not session.auto_try_running
    assert len(session.gallery.snapshots) == 3
    assert session.gallery.visible


def test_stop_auto_try(session, clock):
    session.set_category("gold_earrings")
    session.start_auto_try()
    clock.advance(session.sequencer.step_delay_ms)
    session.pump()

    assert session.stop_auto_try() is True
    assert not session.auto_try_running
    assert len(session.gallery.snapshots) == 1


def test_auto_try_without_category_notice(session, clock):
    heard = []
    session.add_notice_listener(heard.append)

    assert session.start_auto_try() is False
    assert heard == [AUTO_TRY_NOTICE]
    assert session.active_notice() == AUTO_TRY_NOTICE

    clock.advance(5000)
    assert session.active_notice() is None


def test_manual_navigation_blocked_during_auto_try(session, clock):
    session.set_category("gold_earrings")
    session.start_auto_try()
    keys = KeyBindings(session)

    captured = []
    for _ in range(2):
        assert keys.handle(ord("d")) is True
        assert keys.handle(ord("#")) is True
        assert session.navigate(-1) is False
        assert session.select_explicit("gold_earrings", 4) is False
        captured.append(session.navigation.current_index())
        clock.advance(session.sequencer.step_delay_ms)
        session.pump()

    assert captured == [0, 1]
    assert len(session.sequencer.snapshots) == 2

    session.stop_auto_try()
    assert session.navigate(1) is True
