"""
Workflow package - shared submit/result state machine and its two screens
"""

from .controller import FieldSpec, SubmissionState, WorkflowController, WorkflowState
from .timer import NavigationTimer

__all__ = [
    'FieldSpec',
    'SubmissionState',
    'WorkflowController',
    'WorkflowState',
    'NavigationTimer',
]

# checkin / enrollment import the services package; import them explicitly
# (face_checkin.core.workflow.checkin) to keep this package light.
