"""Check-in screen: pick an employee, take a selfie, let the service verify it."""
from __future__ import annotations

from typing import Dict, List, Optional

from ... import config
from ...i18n import format_percentage, format_timestamp, translate
from ...services.models import Employee, VerificationResult
from ...services.verification_gateway import VerificationGateway
from ..errors import TransportError
from ..vision.camera_manager import CameraConfig, CameraProvider
from ..vision.capture import CaptureController
from .controller import FieldSpec, Navigator, WorkflowController, WorkflowState
from .timer import NavigationTimer

CHECKIN_FIELDS = (
    FieldSpec('user_id', required=True, message_key='validation.checkin.user_id'),
)


def is_verified(result: VerificationResult) -> bool:
    return result is not None and result.verification is True


class CheckInWorkflow(WorkflowController):
    """Verifies a selfie against the selected employee's reference face.

    A 2xx answer with ``verification: false`` is a rejection, not an error:
    the score and threshold are still rendered.
    """

    def __init__(
        self,
        gateway: VerificationGateway,
        *,
        capture: Optional[CaptureController] = None,
        navigate: Optional[Navigator] = None,
        timer: Optional[NavigationTimer] = None,
        camera_config: Optional[CameraConfig] = None,
        provider: Optional[CameraProvider] = None,
        success_delay_ms: int = config.CHECKIN_REDIRECT_MS,
    ):
        self.gateway = gateway
        self.employees: List[Employee] = []
        super().__init__(
            name='checkin',
            fields=CHECKIN_FIELDS,
            submit=self._verify,
            is_success=is_verified,
            success_delay_ms=success_delay_ms,
            capture=capture or CaptureController(camera_config, provider),
            navigate=navigate,
            image_message_key='validation.checkin.image',
            timer=timer,
        )

    async def _verify(self, fields: Dict[str, str], image_bytes: bytes) -> VerificationResult:
        return await self.gateway.verify(fields['user_id'], image_bytes)

    async def start(self) -> None:
        await super().start()
        await self.load_employees()

    async def load_employees(self) -> List[Employee]:
        try:
            self.employees = await self.gateway.list_employees()
        except TransportError as exc:
            self.employees = []
            self.surface_error(TransportError(translate('errors.load_employees_failed'), exc.status, exc))
        return self.employees

    def employee_options(self) -> List[Dict[str, str]]:
        return [{'value': str(emp.id), 'label': emp.label} for emp in self.employees]

    def select_employee(self, employee_id) -> None:
        self.set_field('user_id', '' if employee_id is None else str(employee_id))

    @property
    def selected_employee(self) -> Optional[Employee]:
        selected = self.get_field('user_id')
        for emp in self.employees:
            if str(emp.id) == selected:
                return emp
        return None

    @property
    def verification(self) -> Optional[VerificationResult]:
        if self.state in (WorkflowState.SUCCEEDED, WorkflowState.REJECTED):
            return self.result
        return None

    def render_result(self, lang: Optional[str] = None) -> Optional[Dict[str, str]]:
        """Displayable lines for the last verification, success or rejection."""
        result = self.verification
        if result is None:
            return None

        verified = self.state is WorkflowState.SUCCEEDED
        submitted = self.submitted_fields or {}
        rendered = {
            'title': translate('checkin.success_title' if verified else 'checkin.failure_title', lang),
            'message': result.message,
            'employee_id': submitted.get('user_id', ''),
            'employee_label': translate('checkin.employee', lang),
            'employee': result.attendance.user_name,
            'check_in_time_label': translate('checkin.check_in_time', lang),
            'check_in_time': format_timestamp(result.attendance.check_in_time, lang),
            'similarity_label': translate('checkin.similarity', lang),
            'similarity': format_percentage(result.similarity_score),
            'threshold_label': translate('checkin.threshold', lang),
            'threshold': format_percentage(result.threshold),
        }
        if verified:
            rendered['redirecting'] = translate('checkin.redirecting', lang)
        return rendered
