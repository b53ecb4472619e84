"""
MediaPipe model file manager for the Tasks API.

Downloads and caches the hand and face landmarker model files needed on
installs where the legacy Solutions API is unavailable.
"""

import os
import shutil
import sys
import time
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .logger import get_logger

logger = get_logger("ModelManager")

DOWNLOAD_TIMEOUT_S = 120
DOWNLOAD_ATTEMPTS = 3
RETRY_BACKOFF_S = 2  # multiplied by the attempt number


@dataclass(frozen=True)
class ModelSpec:
    """Remote model file description."""
    url: str
    filename: str
    size_mb: float


HAND_LANDMARKER = ModelSpec(
    url="https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task",
    filename="hand_landmarker.task",
    size_mb=7.8,
)

FACE_LANDMARKER = ModelSpec(
    url="https://storage.googleapis.com/mediapipe-models/face_landmarker/face_landmarker/float16/latest/face_landmarker.task",
    filename="face_landmarker.task",
    size_mb=3.6,
)


def get_model_cache_dir() -> Path:
    """Per-user cache directory for downloaded model files (created on demand)."""
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~"))
    else:
        base = os.environ.get("XDG_CACHE_HOME", os.path.expanduser("~/.cache"))

    cache_dir = Path(base) / "AurumTryOn" / "mediapipe_models"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def ensure_model(spec: ModelSpec) -> str:
    """
    Ensure a model file is available, downloading it if needed.

    Args:
        spec: Model to fetch.

    Returns:
        Path to the model file.

    Raises:
        RuntimeError: If download fails after retries.
    """
    model_path = get_model_cache_dir() / spec.filename

    if model_path.exists():
        logger.debug(f"Using cached model: {model_path}")
        return str(model_path)

    logger.info(f"Downloading {spec.filename} (~{spec.size_mb} MB) from {spec.url}")

    last_error: Optional[Exception] = None
    for attempt in range(1, DOWNLOAD_ATTEMPTS + 1):
        try:
            _download_model(spec.url, model_path)
            logger.info(f"Model downloaded: {model_path}")
            return str(model_path)
        except Exception as e:
            last_error = e
            logger.warning(f"Download attempt {attempt}/{DOWNLOAD_ATTEMPTS} failed: {e}")
            if attempt < DOWNLOAD_ATTEMPTS:
                time.sleep(RETRY_BACKOFF_S * attempt)

    raise RuntimeError(
        f"Failed to download {spec.filename} after {DOWNLOAD_ATTEMPTS} attempts. "
        f"Check the internet connection and try again."
    ) from last_error


def ensure_hand_landmarker_model() -> str:
    return ensure_model(HAND_LANDMARKER)


def ensure_face_landmarker_model() -> str:
    return ensure_model(FACE_LANDMARKER)


def _download_model(url: str, dest_path: Path) -> None:
    """
    Download a model file to a temp path, then move it into place.

    Args:
        url: URL to download from.
        dest_path: Destination file path.
    """
    temp_path = dest_path.with_suffix(".tmp")

    try:
        request = urllib.request.Request(url, headers={"User-Agent": "AurumTryOn/1.0"})

        with urllib.request.urlopen(request, timeout=DOWNLOAD_TIMEOUT_S) as response:
            with open(temp_path, "wb") as out:
                shutil.copyfileobj(response, out)

        temp_path.replace(dest_path)

    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise
