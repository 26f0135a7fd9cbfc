from .camera_manager import CameraBusyError, CameraConfig, CameraError, CameraManager, DefaultCameraProvider
from .capture import CaptureController, CapturePreconditionError, CaptureState, ImageArtifact

__all__ = [
    'CameraBusyError',
    'CameraConfig',
    'CameraError',
    'CameraManager',
    'DefaultCameraProvider',
    'CaptureController',
    'CapturePreconditionError',
    'CaptureState',
    'ImageArtifact',
]
