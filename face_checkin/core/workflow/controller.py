"""Shared capture-submit-result state machine for the enroll and check-in screens."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence

from ... import config
from ...i18n import translate
from ...logging_config import capture_logger, workflow_logger
from ..vision.camera_manager import CameraError
from ..vision.capture import CaptureController, CaptureState, ImageArtifact
from ..errors import DeviceError, DomainRejection, TransportError, ValidationError, WorkflowError
from .timer import NavigationTimer


logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    EDITING = 'editing'
    VALIDATING = 'validating'
    SUBMITTING = 'submitting'
    SUCCEEDED = 'succeeded'
    REJECTED = 'rejected'
    FAILED = 'failed'


class SubmissionState(Enum):
    NOT_SUBMITTING = 'not_submitting'
    SUBMITTING = 'submitting'


TERMINAL_STATES = frozenset({WorkflowState.SUCCEEDED, WorkflowState.REJECTED, WorkflowState.FAILED})


@dataclass(frozen=True)
class FieldSpec:
    name: str
    required: bool = False
    message_key: Optional[str] = None

    def missing_message(self) -> str:
        if self.message_key:
            return translate(self.message_key)
        return translate('validation.field_required', field=self.name)


SubmitOperation = Callable[[Dict[str, str], bytes], Awaitable[Any]]
SuccessPredicate = Callable[[Any], bool]
Validator = Callable[[Mapping[str, str], Optional[ImageArtifact]], Optional[ValidationError]]
Navigator = Callable[[str], None]


class WorkflowController:
    """Form fields + photo + one submission at a time + delayed redirect.

    Concrete screens supply the field schema, the submit operation, the
    success predicate and the redirect delay. Use it as an async context
    manager so the camera is acquired on entry and released (with any pending
    redirect cancelled) on every exit path.
    """

    def __init__(
        self,
        *,
        name: str,
        fields: Sequence[FieldSpec],
        submit: SubmitOperation,
        is_success: SuccessPredicate,
        success_delay_ms: int,
        capture: CaptureController,
        navigate: Optional[Navigator] = None,
        validate: Optional[Validator] = None,
        image_message_key: Optional[str] = None,
        landing_route: Optional[str] = None,
        timer: Optional[NavigationTimer] = None,
    ):
        self.name = name
        self._schema = {spec.name: spec for spec in fields}
        self._fields: Dict[str, str] = {spec.name: '' for spec in fields}
        self._submit = submit
        self._is_success = is_success
        self._validate = validate or self.validate_required
        self._image_message_key = image_message_key
        self.success_delay_ms = success_delay_ms
        self.landing_route = landing_route or config.LANDING_ROUTE
        self._navigate = navigate
        self._timer = timer or NavigationTimer()
        self._capture = capture

        self._state = WorkflowState.EDITING
        self._submission = SubmissionState.NOT_SUBMITTING
        self._error: Optional[WorkflowError] = None
        self._result: Any = None
        self._submitted_fields: Optional[Dict[str, str]] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only state
    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def submission(self) -> SubmissionState:
        return self._submission

    @property
    def is_submitting(self) -> bool:
        return self._submission is SubmissionState.SUBMITTING

    @property
    def error(self) -> Optional[WorkflowError]:
        return self._error

    @property
    def result(self) -> Any:
        return self._result

    @property
    def fields(self) -> Dict[str, str]:
        return dict(self._fields)

    @property
    def submitted_fields(self) -> Optional[Dict[str, str]]:
        """Form values as they were when the last submission started."""
        return dict(self._submitted_fields) if self._submitted_fields is not None else None

    @property
    def capture_controller(self) -> CaptureController:
        return self._capture

    @property
    def navigation_pending(self) -> bool:
        return self._timer.pending

    @property
    def closed(self) -> bool:
        return self._closed

    def status(self) -> dict:
        device_error = self._capture.device_error
        return {
            'workflow': self.name,
            'state': self._state.value,
            'submitting': self.is_submitting,
            'capture_state': self._capture.state.value,
            'has_photo': self._capture.artifact is not None,
            'device_error': device_error.message if device_error else None,
            'camera_message': translate('camera.acquiring')
            if self._capture.state is CaptureState.DEVICE_ACQUIRING else None,
            'error': self._error.to_dict() if self._error else None,
            'navigation_pending': self.navigation_pending,
        }

    # ------------------------------------------------------------------
    # Editing
    def _clear_outcome(self) -> None:
        self._timer.cancel()
        if self._state is WorkflowState.SUBMITTING:
            # in-flight request keeps running, its result lands when it resolves
            return
        self._error = None
        self._result = None
        if self._state in TERMINAL_STATES:
            self._state = WorkflowState.EDITING

    def get_field(self, name: str) -> str:
        return self._fields[name]

    def set_field(self, name: str, value: Optional[str]) -> None:
        if name not in self._schema:
            raise KeyError(f"Unknown field '{name}' for {self.name}")
        self._fields[name] = '' if value is None else str(value)
        self._clear_outcome()

    def update_fields(self, values: Mapping[str, Optional[str]]) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    def validate_required(
        self, fields: Mapping[str, str], artifact: Optional[ImageArtifact]
    ) -> Optional[ValidationError]:
        """Default rule: required fields non-blank, then a photo must exist."""
        for spec in self._schema.values():
            if spec.required and not (fields.get(spec.name) or '').strip():
                return ValidationError(spec.name, spec.missing_message())
        if artifact is None or not artifact.transmittable_bytes:
            message = translate(self._image_message_key) if self._image_message_key else None
            return ValidationError('image', message)
        return None

    # ------------------------------------------------------------------
    # Camera
    async def start(self) -> None:
        await self._capture.acquire_device()

    def capture(self) -> Optional[ImageArtifact]:
        """Take the photo. A failed read or encode is shown as a device error."""
        try:
            artifact = self._capture.capture()
        except CameraError as exc:
            self._error = DeviceError.from_camera_error(exc, 'errors.capture_failed')
            capture_logger.log_device_error(self._capture.index, str(exc))
            return None
        self._clear_outcome()
        return artifact

    def retake(self) -> None:
        self._capture.retake()
        self._clear_outcome()

    # ------------------------------------------------------------------
    # Submission
    async def submit(self) -> WorkflowState:
        if self._submission is SubmissionState.SUBMITTING:
            workflow_logger.log_ignored_submission(self.name)
            return self._state

        self._timer.cancel()
        self._error = None
        self._result = None
        self._state = WorkflowState.VALIDATING

        artifact = self._capture.artifact
        validation_error = self._validate(dict(self._fields), artifact)
        if validation_error is not None:
            self._error = validation_error
            self._state = WorkflowState.EDITING
            workflow_logger.log_validation_error(self.name, validation_error.field)
            return self._state

        fields = dict(self._fields)
        self._submitted_fields = fields
        self._submission = SubmissionState.SUBMITTING
        self._state = WorkflowState.SUBMITTING
        workflow_logger.log_submission(self.name, fields)

        try:
            body = await self._submit(dict(fields), artifact.transmittable_bytes)
            succeeded = self._is_success(body)
        except TransportError as exc:
            self._error = exc
            self._state = WorkflowState.FAILED
            workflow_logger.log_outcome(self.name, self._state.name, exc.message)
            return self._state
        except asyncio.CancelledError:
            self._state = WorkflowState.EDITING
            raise
        except Exception as exc:
            self._error = TransportError(translate('errors.request_failed'), cause=exc)
            self._state = WorkflowState.FAILED
            logger.exception("Unexpected error while submitting %s", self.name)
            raise
        finally:
            self._submission = SubmissionState.NOT_SUBMITTING

        self._result = body
        if succeeded:
            self._state = WorkflowState.SUCCEEDED
            if not self._closed:
                self._timer.arm(self.success_delay_ms, self._navigate_to_landing)
                workflow_logger.log_navigation(self.name, self.landing_route, self.success_delay_ms)
        else:
            self._state = WorkflowState.REJECTED
            self._error = DomainRejection(self.rejection_message(body), body)
        workflow_logger.log_outcome(self.name, self._state.name, getattr(body, 'message', None))
        return self._state

    def rejection_message(self, body: Any) -> str:
        message = getattr(body, 'message', None)
        return message or translate('errors.request_failed')

    def _navigate_to_landing(self) -> None:
        if self._closed:
            return
        workflow_logger.log_navigation(self.name, self.landing_route)
        if self._navigate is not None:
            self._navigate(self.landing_route)

    # ------------------------------------------------------------------
    # Teardown
    def surface_error(self, error: WorkflowError) -> None:
        """Show an error that did not come from a submission (e.g. loading data)."""
        self._error = error

    def close(self) -> None:
        """Leave the screen: cancel the redirect and release the camera."""
        self._closed = True
        self._timer.cancel()
        self._capture.release()

    async def __aenter__(self) -> 'WorkflowController':
        self._closed = False
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
