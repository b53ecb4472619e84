"""
Aurum Try-On

Desktop host for the try-on session: reads the webcam, feeds the hand and
face landmark services, shows the composited frame in an OpenCV window and
maps keys to the session's operations.

Usage:
    aurum-tryon [--catalog <path>] [--assets <dir>] [--camera <index>] [--debug]

Exit Codes:
    0 - Success
    1 - Catalog error
    2 - No usable camera
    3 - Unexpected failure
"""

import argparse
import signal
import sys
import time
from typing import Optional

import cv2
import numpy as np

from .config import (
    DEFAULT_ASSETS_ROOT,
    DEFAULT_CAMERA_INDEX,
    EXIT_CAMERA_ERROR,
    EXIT_CATALOG_ERROR,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    GALLERY_WINDOW_NAME,
    WINDOW_NAME,
)
from .logger import setup_logging, get_logger
from .catalog_loader import Catalog, CatalogLoadError, create_default_catalog, load_catalog
from .camera_manager import CameraError, CameraManager, select_camera
from .face_detector import FaceDetector
from .hand_detector import HandDetector, draw_hand_landmarks
from .hud import apply_capture_flash, build_gallery_montage, draw_hud
from .key_bindings import KeyBindings
from .landmark_service import DetectionResult, ThrottledLandmarkService
from .landmarks import FaceLandmarks, HandLandmarks
from .tryon_session import TryOnSession


class TryOnApp:
    """
    Main application window.

    One loop iteration: read a frame, offer it to both landmark services,
    run due timers, draw the canvas with the HUD, handle one key.
    """

    def __init__(
        self,
        catalog: Catalog,
        camera_index: int = DEFAULT_CAMERA_INDEX,
        debug: bool = False
    ):
        """
        Initialize the application.

        Args:
            catalog: Loaded catalog.
            camera_index: Camera device index.
            debug: Draw hand landmarks and FPS.
        """
        self.catalog = catalog
        self.camera_index = camera_index
        self.debug = debug

        self._logger = get_logger("App")
        self._running = False

        self._camera: Optional[CameraManager] = None
        self._hand_detector: Optional[HandDetector] = None
        self._face_detector: Optional[FaceDetector] = None
        self._hand_service: Optional[ThrottledLandmarkService[HandLandmarks]] = None
        self._face_service: Optional[ThrottledLandmarkService[FaceLandmarks]] = None
        self._last_hand: Optional[HandLandmarks] = None

        self.session: Optional[TryOnSession] = None
        self._keys: Optional[KeyBindings] = None

        # Gallery window state
        self._gallery_key: Optional[tuple[int, int]] = None

        # Stats
        self._frame_count = 0
        self._start_time = 0.0
        self._last_fps_time = 0.0
        self._fps = 0.0

    def initialize(self) -> None:
        """
        Open the camera and create detectors and session.

        Raises:
            CameraError: If the camera cannot be opened.
        """
        self._logger.info("Initializing try-on...")

        self._camera = CameraManager(camera_index=self.camera_index)
        self._camera.open()

        self._hand_detector = HandDetector()
        self._hand_detector.initialize()
        self._face_detector = FaceDetector()
        self._face_detector.initialize()

        self.session = TryOnSession(self.catalog)
        self.session.add_notice_listener(lambda message: self._logger.warning(f"Notice: {message}"))
        self._keys = KeyBindings(self.session)

        self._hand_service = ThrottledLandmarkService(
            "hand", on_result=self._on_hand_result, detect=self._hand_detector.detect
        )
        self._face_service = ThrottledLandmarkService(
            "face", on_result=self.session.handle_face_result, detect=self._face_detector.detect
        )

        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        self._logger.info(f"Try-on initialized with categories: {', '.join(self.catalog.names)}")

    def _on_hand_result(self, result: DetectionResult[HandLandmarks]) -> None:
        self._last_hand = result.landmarks
        self.session.handle_hand_result(result)

    def run(self) -> None:
        """Run the main loop until quit."""
        self._running = True
        self._start_time = time.perf_counter()
        self._last_fps_time = self._start_time

        self._logger.info("Starting try-on loop...")

        try:
            while self._running:
                self._process_frame()

                key = cv2.waitKey(1)
                if not self._keys.handle(key):
                    break
                if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                    self._logger.info("Window closed")
                    break
        except KeyboardInterrupt:
            self._logger.info("Interrupted by user")
        finally:
            self.stop()

    def _process_frame(self) -> None:
        """Process a single camera frame."""
        if self._camera is None or self.session is None:
            return

        frame = self._camera.read()
        if frame is None:
            return

        self._frame_count += 1
        self.session.set_frame(frame.bgr)

        rgb = frame.to_rgb()
        self._hand_service.submit(rgb, frame.timestamp_ms)
        self._face_service.submit(rgb, frame.timestamp_ms)

        self.session.pump()

        self._show_frame(frame.bgr)
        self._update_gallery_window()
        self._update_fps()

    def _show_frame(self, fallback: np.ndarray) -> None:
        session = self.session
        now = session.scheduler.now_ms()

        if session.canvas.width > 0:
            display = session.canvas.copy_pixels()
        else:
            display = cv2.flip(fallback, 1)

        if self.debug and self._last_hand is not None:
            display = draw_hand_landmarks(display, self._last_hand, mirrored=True)

        draw_hud(display, session, now, self._fps if self.debug else None)

        if session.capture_flash_active(now):
            display = apply_capture_flash(display)

        cv2.imshow(WINDOW_NAME, display)

    def _update_gallery_window(self) -> None:
        gallery = self.session.gallery

        if not gallery.visible:
            if self._gallery_key is not None:
                cv2.destroyWindow(GALLERY_WINDOW_NAME)
                self._gallery_key = None
            return

        # Rebuild when a run replaced the list or a snapshot was added
        key = (id(gallery.snapshots), len(gallery.snapshots))
        if key == self._gallery_key:
            return

        montage = build_gallery_montage(gallery.snapshots)
        if montage is None:
            self._logger.warning("Gallery has no displayable snapshots")
            gallery.close()
            return

        cv2.imshow(GALLERY_WINDOW_NAME, montage)
        self._gallery_key = key
        self._logger.info(f"Gallery showing {len(gallery.snapshots)} snapshots (g to close)")

    def _update_fps(self) -> None:
        """Refresh the FPS estimate about once a second."""
        current_time = time.perf_counter()
        if current_time - self._last_fps_time >= 1.0:
            self._fps = self._frame_count / (current_time - self._start_time)
            self._last_fps_time = current_time

    def request_stop(self) -> None:
        """Ask the loop to exit after the current frame."""
        self._running = False

    def stop(self) -> None:
        """Stop the loop and release everything."""
        if not self._running and self._camera is None:
            return

        self._running = False
        self._logger.info("Stopping try-on...")

        if self.session:
            self.session.close()

        if self._hand_detector:
            self._hand_detector.close()
            self._hand_detector = None

        if self._face_detector:
            self._face_detector.close()
            self._face_detector = None

        if self._camera:
            self._camera.close()
            self._camera = None

        cv2.destroyAllWindows()

        if self._frame_count > 0:
            elapsed = time.perf_counter() - self._start_time
            avg_fps = self._frame_count / elapsed if elapsed > 0 else 0
            self._logger.info(
                f"Try-on stopped. Processed {self._frame_count} frames "
                f"in {elapsed:.1f}s ({avg_fps:.1f} FPS average)"
            )
            if self._hand_service and self._face_service:
                self._logger.info(
                    f"Dropped frames: hand={self._hand_service.dropped_count}, "
                    f"face={self._face_service.dropped_count}"
                )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Command line options for the try-on window."""
    parser = argparse.ArgumentParser(
        prog="aurum-tryon",
        description="Aurum Try-On - AR jewelry try-on with gesture navigation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0  Success
  1  Catalog could not be loaded
  2  No usable camera
  3  Unexpected failure (see the log file)

Examples:
  aurum-tryon --assets ./assets
  aurum-tryon --catalog catalog.json --camera 1
  aurum-tryon --catalog catalog.json --debug
"""
    )

    parser.add_argument(
        "--catalog", "-p",
        default=None,
        help="Path to JSON catalog file (default: built-in catalog)"
    )

    parser.add_argument(
        "--assets", "-a",
        default=DEFAULT_ASSETS_ROOT,
        help="Assets root for the built-in catalog (ignored with --catalog)"
    )

    parser.add_argument(
        "--camera", "-c",
        type=int,
        default=-1,
        help="Camera index (default: catalog setting, then auto-detect)"
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging and landmark overlay"
    )

    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only"
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Run the try-on window until the user quits.

    Returns:
        Exit code.
    """
    args = parse_args(argv)

    logger = setup_logging(debug=args.debug, log_to_file=not args.no_log_file)
    logger.info("Aurum Try-On starting...")

    if args.catalog:
        try:
            catalog = load_catalog(args.catalog)
        except CatalogLoadError as e:
            logger.error(f"Failed to load catalog: {e}")
            return EXIT_CATALOG_ERROR
        if args.assets != DEFAULT_ASSETS_ROOT:
            logger.warning("--assets is ignored when --catalog is given")
    else:
        catalog = create_default_catalog(args.assets)
        logger.info(f"Using built-in catalog with assets in {catalog.assets_root}")

    try:
        if args.camera >= 0:
            camera_index = args.camera
        elif catalog.selected_camera_index >= 0:
            camera_index = catalog.selected_camera_index
        else:
            camera_index = select_camera()
    except CameraError as e:
        logger.error(f"Camera selection failed: {e}")
        return EXIT_CAMERA_ERROR

    app: Optional[TryOnApp] = None

    try:
        app = TryOnApp(catalog=catalog, camera_index=camera_index, debug=args.debug)

        def signal_handler(sig, frame):
            logger.info(f"Signal {sig} received, stopping")
            if app:
                app.request_stop()

        signal.signal(signal.SIGINT, signal_handler)
        # No SIGTERM on Windows
        if sys.platform != "win32":
            signal.signal(signal.SIGTERM, signal_handler)

        app.initialize()
        app.run()

        return EXIT_SUCCESS

    except CameraError as e:
        logger.error(f"Camera unavailable: {e}")
        return EXIT_CAMERA_ERROR
    except Exception as e:
        logger.exception(f"Try-on stopped on an unexpected error: {e}")
        return EXIT_RUNTIME_ERROR
    finally:
        if app:
            app.stop()


if __name__ == "__main__":
    sys.exit(main())
