"""Camera device management with exclusive ownership."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import ClassVar, Optional, Protocol, Set, Tuple

import cv2
import numpy as np

from ... import config


logger = logging.getLogger(__name__)

WARMUP_INTERVAL = 0.05


class CameraError(RuntimeError):
    """Raised when camera operations fail."""


class CameraBusyError(CameraError):
    """Raised when the camera is already held by another manager."""


class CameraProvider(Protocol):
    """Abstraction for objects that can supply cv2.VideoCapture."""

    def open(self, index: int) -> cv2.VideoCapture:
        ...


class DefaultCameraProvider:
    """Real provider that uses OpenCV to create VideoCapture objects."""

    def open(self, index: int) -> cv2.VideoCapture:
        capture = cv2.VideoCapture(index)
        if not capture or not capture.isOpened():
            raise CameraError(f"Cannot open camera index {index}")
        return capture


@dataclass
class CameraConfig:
    index: Optional[int] = None
    facing_mode: str = config.CAMERA_FACING_MODE
    width: Optional[int] = config.CAMERA_WIDTH
    height: Optional[int] = config.CAMERA_HEIGHT
    warmup_frames: int = config.CAMERA_WARMUP_FRAMES
    buffer_size: Optional[int] = config.CAMERA_BUFFER_SIZE
    jpeg_quality: int = config.JPEG_QUALITY

    def resolve_index(self) -> int:
        """Explicit index wins, otherwise pick by facing mode ('user' = front)."""
        if self.index is not None:
            return self.index
        if self.facing_mode == 'environment':
            return config.REAR_CAMERA_INDEX
        return config.FRONT_CAMERA_INDEX


@dataclass
class CameraState:
    """State container for camera device handles."""

    capture: Optional[cv2.VideoCapture] = None
    leased_index: Optional[int] = None


class CameraManager:
    """Owns one camera device handle and exposes safe read operations.

    A device index can be leased by only one manager at a time in this
    process; a second ``start()`` on the same index fails with
    :class:`CameraBusyError` until the first manager calls ``stop()``.
    """

    _leases: ClassVar[Set[int]] = set()
    _lease_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        camera_config: Optional[CameraConfig] = None,
        provider: Optional[CameraProvider] = None,
    ):
        self.config = camera_config or CameraConfig()
        self.state = CameraState()
        self.provider = provider or DefaultCameraProvider()

    @property
    def index(self) -> int:
        return self.config.resolve_index()

    def is_open(self) -> bool:
        capture = self.state.capture
        return bool(capture is not None and capture.isOpened())

    def start(self) -> cv2.VideoCapture:
        if self.is_open():
            return self.state.capture

        index = self.index
        self._acquire_lease(index)
        try:
            capture = self.provider.open(index)
            if capture is None or not capture.isOpened():
                raise CameraError(f"Cannot open camera index {index}")
        except CameraError:
            self._release_lease(index)
            raise
        except Exception as exc:
            self._release_lease(index)
            raise CameraError(f"Cannot open camera index {index}: {exc}") from exc

        self.state.capture = capture
        self.state.leased_index = index
        self._configure_capture(capture)
        return capture

    def _acquire_lease(self, index: int) -> None:
        with self._lease_lock:
            if index in self._leases:
                raise CameraBusyError(f"Camera index {index} is already in use")
            self._leases.add(index)

    def _release_lease(self, index: Optional[int]) -> None:
        if index is None:
            return
        with self._lease_lock:
            self._leases.discard(index)

    def resolution(self) -> Tuple[int, int]:
        """Frame size the device actually delivers, (0, 0) when closed."""
        capture = self.state.capture
        if capture is None:
            return 0, 0
        return int(capture.get(cv2.CAP_PROP_FRAME_WIDTH)), int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))

    def _configure_capture(self, capture: cv2.VideoCapture) -> None:
        # Drivers may ignore any of these; the device keeps its own defaults then
        requested = (
            (cv2.CAP_PROP_FRAME_WIDTH, self.config.width),
            (cv2.CAP_PROP_FRAME_HEIGHT, self.config.height),
            (getattr(cv2, 'CAP_PROP_BUFFERSIZE', None), self.config.buffer_size),
        )
        for prop, value in requested:
            if prop is None or value is None:
                continue
            try:
                capture.set(prop, value)
            except cv2.error as exc:
                logger.warning("Camera %s ignored property %s=%s: %s", self.index, prop, value, exc)
        self._warm_up(capture)

    def _warm_up(self, capture: cv2.VideoCapture) -> None:
        """Drop the first frames; many webcams deliver them dark or blurred."""
        frames = max(0, self.config.warmup_frames)
        good = 0
        for _ in range(frames):
            ok, _frame = capture.read()
            good += bool(ok)
            time.sleep(WARMUP_INTERVAL)
        if frames:
            logger.debug("Camera %s warm-up: %s/%s frames", self.index, good, frames)

    def stop(self) -> None:
        capture = self.state.capture
        index = self.state.leased_index
        self.state.capture = None
        self.state.leased_index = None
        try:
            if capture is not None:
                capture.release()
        finally:
            self._release_lease(index)

    def read(self) -> np.ndarray:
        if not self.is_open():
            raise CameraError("Camera is not open")
        ret, frame = self.state.capture.read()
        if not ret or frame is None:
            raise CameraError("Unable to read frame from camera")
        return frame

    def encode_jpeg(self, frame: np.ndarray) -> bytes:
        ret, buf = cv2.imencode('.jpg', frame, [int(cv2.IMWRITE_JPEG_QUALITY), self.config.jpeg_quality])
        if not ret:
            raise CameraError("Unable to encode frame as JPEG")
        return buf.tobytes()
