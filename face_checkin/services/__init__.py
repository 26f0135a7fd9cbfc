"""
Client-side services for the remote face verification API.
"""

__all__ = [
    'VerificationGateway',
    'Employee',
    'AttendanceRecord',
    'VerificationResult',
]

from .models import AttendanceRecord, Employee, VerificationResult
from .verification_gateway import VerificationGateway
