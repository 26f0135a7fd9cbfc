"""Errors surfaced by the enroll / check-in workflows."""
from __future__ import annotations

from typing import Any, Optional

from ..i18n import translate


class WorkflowError(Exception):
    """Base class for everything a workflow screen can display."""

    kind = 'error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message}


class ValidationError(WorkflowError):
    """A required field or the photo is missing. Never reaches the network."""

    kind = 'validation'

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or translate('validation.field_required', field=field))
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['field'] = self.field
        return data


class TransportError(WorkflowError):
    """No usable response: connection failure, timeout, non-2xx or malformed body."""

    kind = 'transport'

    def __init__(self, message: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.status = status
        self.cause = cause

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['status'] = self.status
        return data


class DomainRejection(WorkflowError):
    """Well-formed response whose content says the submission was refused."""

    kind = 'rejected'

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


class DeviceError(WorkflowError):
    """Camera permission denied, missing or busy."""

    kind = 'device'

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @classmethod
    def from_camera_error(cls, exc: BaseException, message_key: str = 'errors.camera_unavailable') -> 'DeviceError':
        return cls(translate(message_key), cause=exc)
