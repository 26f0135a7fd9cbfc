"""Capture controller: camera lifecycle and single-artifact capture for one screen."""
from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ...logging_config import capture_logger
from ..errors import DeviceError
from .camera_manager import CameraBusyError, CameraConfig, CameraError, CameraManager, CameraProvider


logger = logging.getLogger(__name__)


class CaptureState(Enum):
    IDLE = 'idle'
    DEVICE_ACQUIRING = 'device_acquiring'
    READY = 'ready'
    CAPTURED = 'captured'


class CapturePreconditionError(RuntimeError):
    """capture()/retake() called in a state that does not allow it."""


@dataclass(frozen=True)
class ImageArtifact:
    display_encoding: str
    transmittable_bytes: bytes
    content_type: str = 'image/jpeg'

    @classmethod
    def from_jpeg(cls, jpeg_bytes: bytes) -> 'ImageArtifact':
        encoded = base64.b64encode(jpeg_bytes).decode('ascii')
        return cls(
            display_encoding=f"data:image/jpeg;base64,{encoded}",
            transmittable_bytes=jpeg_bytes,
        )


ArtifactListener = Callable[[Optional[ImageArtifact]], None]


class CaptureController:
    """Owns the camera for the lifetime of one workflow screen.

    ``acquire_device()`` never raises: a denied or missing camera is kept in
    ``device_error`` and stays there until ``reset_device_error()``.
    """

    def __init__(
        self,
        camera_config: Optional[CameraConfig] = None,
        provider: Optional[CameraProvider] = None,
        manager: Optional[CameraManager] = None,
    ):
        self._manager = manager or CameraManager(camera_config, provider)
        self._state = CaptureState.IDLE
        self._artifact: Optional[ImageArtifact] = None
        self._listeners: List[ArtifactListener] = []
        self.device_error: Optional[DeviceError] = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def artifact(self) -> Optional[ImageArtifact]:
        return self._artifact

    @property
    def index(self) -> int:
        return self._manager.index

    @property
    def device_available(self) -> bool:
        return self.device_error is None

    def on_change(self, listener: ArtifactListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._artifact)

    async def acquire_device(self) -> CaptureState:
        if self.device_error is not None:
            return self._state
        if self._state is not CaptureState.IDLE:
            return self._state

        self._state = CaptureState.DEVICE_ACQUIRING
        try:
            await asyncio.to_thread(self._manager.start)
        except CameraError as exc:
            self._state = CaptureState.IDLE
            key = 'errors.camera_busy' if isinstance(exc, CameraBusyError) else 'errors.camera_unavailable'
            self.device_error = DeviceError.from_camera_error(exc, key)
            capture_logger.log_device_error(self._manager.index, str(exc))
            return self._state
        except asyncio.CancelledError:
            self._manager.stop()
            self._state = CaptureState.IDLE
            raise

        if self._state is not CaptureState.DEVICE_ACQUIRING:
            # released while the open was in flight
            self._manager.stop()
            return self._state

        self._state = CaptureState.READY
        capture_logger.log_device_acquired(
            self._manager.index, *self._manager.resolution()
        )
        return self._state

    def capture(self) -> ImageArtifact:
        if self._state is not CaptureState.READY:
            raise CapturePreconditionError(f"capture() requires READY, current state is {self._state.name}")

        frame = self._manager.read()
        jpeg = self._manager.encode_jpeg(frame)
        if not jpeg:
            raise CameraError("Encoded frame is empty")

        self._artifact = ImageArtifact.from_jpeg(jpeg)
        self._state = CaptureState.CAPTURED
        capture_logger.log_capture(len(jpeg))
        self._notify()
        return self._artifact

    def retake(self) -> None:
        if self._state is not CaptureState.CAPTURED:
            raise CapturePreconditionError(f"retake() requires CAPTURED, current state is {self._state.name}")
        self._artifact = None
        self._state = CaptureState.READY
        capture_logger.log_retake()
        self._notify()

    def reset_device_error(self) -> None:
        """Clear a persistent device failure, e.g. after permission was granted."""
        self.device_error = None

    def release(self) -> None:
        had_device = self._state is not CaptureState.IDLE
        had_artifact = self._artifact is not None
        self._artifact = None
        self._state = CaptureState.IDLE
        try:
            self._manager.stop()
        except Exception as exc:
            logger.debug("[Camera] stop() failed: %s", exc)
        if had_device:
            capture_logger.log_device_released(self._manager.index)
        if had_artifact:
            self._notify()

    async def __aenter__(self) -> 'CaptureController':
        await self.acquire_device()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
