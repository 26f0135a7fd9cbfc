"""Enroll screen: name / email / phone plus a reference face photo."""
from __future__ import annotations

from typing import Dict, Optional

from ... import config
from ...i18n import translate
from ...services.models import Employee
from ...services.verification_gateway import VerificationGateway
from ..vision.camera_manager import CameraConfig, CameraProvider
from ..vision.capture import CaptureController
from .controller import FieldSpec, Navigator, WorkflowController, WorkflowState
from .timer import NavigationTimer

ENROLLMENT_FIELDS = (
    FieldSpec('name', required=True, message_key='validation.enroll.name'),
    FieldSpec('email', required=True, message_key='validation.enroll.email'),
    FieldSpec('phone'),
)


def registered(_employee: Optional[Employee]) -> bool:
    # gateway.enroll only returns on a 2xx, with or without the created record
    return True


class EnrollmentWorkflow(WorkflowController):
    """Registers a new employee; any 2xx answer counts as success."""

    def __init__(
        self,
        gateway: VerificationGateway,
        *,
        capture: Optional[CaptureController] = None,
        navigate: Optional[Navigator] = None,
        timer: Optional[NavigationTimer] = None,
        camera_config: Optional[CameraConfig] = None,
        provider: Optional[CameraProvider] = None,
        success_delay_ms: int = config.ENROLL_REDIRECT_MS,
    ):
        self.gateway = gateway
        super().__init__(
            name='enroll',
            fields=ENROLLMENT_FIELDS,
            submit=self._enroll,
            is_success=registered,
            success_delay_ms=success_delay_ms,
            capture=capture or CaptureController(camera_config, provider),
            navigate=navigate,
            image_message_key='validation.enroll.image',
            timer=timer,
        )

    async def _enroll(self, fields: Dict[str, str], image_bytes: bytes) -> Optional[Employee]:
        return await self.gateway.enroll(fields, image_bytes)

    @property
    def employee(self) -> Optional[Employee]:
        """The created record, when the service sent one back."""
        return self.result if self.state is WorkflowState.SUCCEEDED else None

    def success_message(self) -> Optional[str]:
        if self.state is not WorkflowState.SUCCEEDED:
            return None
        return translate('enroll.success')
