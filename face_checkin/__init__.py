"""Face check-in client.

Enroll an employee's face and verify it at check-in time against a remote
verification service, using a local camera.
"""

__version__ = '1.0.0'

from .core.workflow.checkin import CheckInWorkflow
from .core.workflow.enrollment import EnrollmentWorkflow
from .services.verification_gateway import VerificationGateway

__all__ = [
    'CheckInWorkflow',
    'EnrollmentWorkflow',
    'VerificationGateway',
]
