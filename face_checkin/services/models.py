"""
Typed records returned by the verification service.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

_FRACTION_RE = re.compile(r'\.(\d+)')


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an RFC 3339 timestamp (as written by the service) or return None.
    Fractions longer than microseconds are truncated.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    text = _FRACTION_RE.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
    return datetime.fromisoformat(text)


def _require(data: Dict[str, Any], key: str):
    if key not in data:
        raise ValueError(f"Missing field '{key}'")
    return data[key]


def _unit_interval(value) -> float:
    number = float(value)
    if not 0.0 <= number <= 1.0:
        raise ValueError(f"Score out of range [0, 1]: {number}")
    return number


@dataclass
class Employee:
    id: int
    name: str
    email: str
    phone: str = ''
    face_image_path: str = ''
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        if not isinstance(data, dict):
            raise ValueError("Employee record must be an object")
        return cls(
            id=int(_require(data, 'id')),
            name=str(_require(data, 'name')),
            email=str(data.get('email') or ''),
            phone=str(data.get('phone') or ''),
            face_image_path=str(data.get('face_image_path') or ''),
            created_at=parse_timestamp(data.get('created_at')),
        )

    @property
    def label(self) -> str:
        """Text for the employee picker: 'name (email)'."""
        return f"{self.name} ({self.email})"


@dataclass
class AttendanceRecord:
    user_name: str
    check_in_time: Optional[datetime]
    id: Optional[int] = None
    user_id: Optional[int] = None
    similarity_score: Optional[float] = None
    status: str = ''
    face_image_path: str = ''
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AttendanceRecord':
        if not isinstance(data, dict):
            raise ValueError("Attendance record must be an object")
        score = data.get('similarity_score')
        return cls(
            id=int(data['id']) if data.get('id') is not None else None,
            user_id=int(data['user_id']) if data.get('user_id') is not None else None,
            user_name=str(data.get('user_name') or ''),
            check_in_time=parse_timestamp(_require(data, 'check_in_time')),
            similarity_score=float(score) if score is not None else None,
            status=str(data.get('status') or ''),
            face_image_path=str(data.get('face_image_path') or ''),
            created_at=parse_timestamp(data.get('created_at')),
        )


@dataclass
class VerificationResult:
    verification: bool
    message: str
    similarity_score: float
    threshold: float
    attendance: AttendanceRecord
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VerificationResult':
        if not isinstance(data, dict):
            raise ValueError("Verification result must be an object")
        verification = _require(data, 'verification')
        if not isinstance(verification, bool):
            raise ValueError("'verification' must be a boolean")
        return cls(
            verification=verification,
            message=str(data.get('message') or ''),
            similarity_score=_unit_interval(_require(data, 'similarity_score')),
            threshold=_unit_interval(_require(data, 'threshold')),
            attendance=AttendanceRecord.from_dict(_require(data, 'attendance')),
            raw=data,
        )
