"""
Verification Gateway - typed client for the remote face verification service
"""
import asyncio
import json
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import aiohttp

from .. import config
from ..core.errors import TransportError
from ..i18n import translate
from ..logging_config import gateway_logger
from .models import AttendanceRecord, Employee, VerificationResult

T = TypeVar('T')


class VerificationGateway:
    """Client for the enrollment / check-in HTTP API.

    One request per call and no retries; retrying is up to the caller.
    Every failure is raised as :class:`TransportError` whose message is the
    service's own ``message`` when it sent one, otherwise a localized
    fallback for the operation.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self.headers: Dict[str, str] = {'Accept': 'application/json'}
        token = token if token is not None else config.API_TOKEN
        if token:
            self.headers['Authorization'] = f'Bearer {token}'
        if headers:
            self.headers.update(headers)
        self.timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else config.API_TIMEOUT)
        self._session = session
        self._owns_session = session is None

    # ------------------------------------------------------------------
    # Session lifecycle
    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        session = self._session
        if session is not None and self._owns_session and not session.closed:
            await session.close()
        self._session = None

    async def __aenter__(self) -> 'VerificationGateway':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _parse_json(body: bytes) -> Any:
        if not body:
            return None
        try:
            return json.loads(body.decode('utf-8', errors='replace'))
        except ValueError:
            return None

    async def _request(
        self,
        method: str,
        path: str,
        fallback_key: str,
        *,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
        allow_empty: bool = False,
    ) -> Optional[Dict[str, Any]]:
        session = self._get_session()
        gateway_logger.log_request(method, path)
        started = time.monotonic()
        try:
            async with session.request(
                method,
                self._url(path),
                data=data,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            ) as response:
                status = response.status
                body = await response.read()
        except asyncio.TimeoutError as exc:
            gateway_logger.log_error(path, 'timeout')
            raise TransportError(translate(fallback_key), cause=exc) from exc
        except aiohttp.ClientError as exc:
            gateway_logger.log_error(path, str(exc) or exc.__class__.__name__)
            raise TransportError(translate(fallback_key), cause=exc) from exc

        gateway_logger.log_response(path, status, time.monotonic() - started)
        payload = self._parse_json(body)

        if not 200 <= status < 300:
            if allow_not_found and status == 404:
                return None
            message = None
            if isinstance(payload, dict) and isinstance(payload.get('message'), str):
                message = payload['message'].strip() or None
            gateway_logger.log_error(path, message or 'no error message in response', status)
            raise TransportError(message or translate(fallback_key), status=status)

        if not isinstance(payload, dict):
            if allow_empty:
                return {}
            gateway_logger.log_error(path, 'response body is not a JSON object', status)
            raise TransportError(translate('errors.invalid_response'), status=status)
        return payload

    @staticmethod
    def _parse(path: str, parser: Callable[[Any], T], value: Any) -> T:
        try:
            return parser(value)
        except (KeyError, TypeError, ValueError) as exc:
            gateway_logger.log_error(path, f"malformed data: {exc}")
            raise TransportError(translate("errors.invalid_response"), cause=exc) from exc

    @staticmethod
    def _image_form(fields: Mapping[str, Any], image_field: str, image_bytes: bytes, filename: str) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for name, value in fields.items():
            form.add_field(name, '' if value is None else str(value))
        form.add_field(image_field, image_bytes, filename=filename, content_type='image/jpeg')
        return form

    # ------------------------------------------------------------------
    # Public API
    async def enroll(self, fields: Mapping[str, Any], image_bytes: bytes) -> Optional[Employee]:
        """POST /api/employees/register with name, email, phone and face_image.

        Any 2xx answer means the employee was registered. The created record is
        returned when the body carries one, otherwise None.
        """
        path = '/api/employees/register'
        form = self._image_form(
            {
                'name': fields.get('name', ''),
                'email': fields.get('email', ''),
                'phone': fields.get('phone', ''),
            },
            'face_image',
            image_bytes,
            config.FACE_IMAGE_FILENAME,
        )
        payload = await self._request('POST', path, 'errors.enroll_failed', data=form, allow_empty=True)
        data = payload.get('data')
        if data is None:
            return None
        try:
            return Employee.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            gateway_logger.log_error(path, f"registered, but record is malformed: {exc}")
            return None

    async def verify(self, employee_id, image_bytes: bytes) -> VerificationResult:
        """POST /api/attendance/checkin with user_id and selfie_image."""
        path = '/api/attendance/checkin'
        form = self._image_form({'user_id': employee_id}, 'selfie_image', image_bytes, config.SELFIE_IMAGE_FILENAME)
        payload = await self._request('POST', path, 'errors.checkin_failed', data=form)
        return self._parse(path, VerificationResult.from_dict, payload.get('data'))

    async def list_employees(self) -> List[Employee]:
        path = '/api/employees'
        payload = await self._request('GET', path, 'errors.load_employees_failed')
        return self._parse(path, lambda rows: [Employee.from_dict(row) for row in rows or []], payload.get('data'))

    async def get_employee(self, employee_id) -> Employee:
        path = f'/api/employees/{employee_id}'
        payload = await self._request('GET', path, 'errors.load_employee_failed')
        return self._parse(path, Employee.from_dict, payload.get('data'))

    async def list_attendances(self, limit: Optional[int] = None, employee_id=None) -> List[AttendanceRecord]:
        """GET /api/attendance, filters are only sent when given."""
        path = '/api/attendance'
        params: Dict[str, Any] = {}
        if limit is not None:
            params['limit'] = str(int(limit))
        if employee_id is not None and employee_id != '':
            params['user_id'] = str(employee_id)
        payload = await self._request('GET', path, 'errors.load_attendances_failed', params=params or None)
        return self._parse(
            path, lambda rows: [AttendanceRecord.from_dict(row) for row in rows or []], payload.get('data')
        )

    async def today_attendance(self, employee_id) -> Optional[AttendanceRecord]:
        """Today's record for the employee, or None when there is none yet."""
        path = f'/api/attendance/today/{employee_id}'
        payload = await self._request('GET', path, 'errors.load_attendances_failed', allow_not_found=True)
        if payload is None or not payload.get('data'):
            return None
        return self._parse(path, AttendanceRecord.from_dict, payload['data'])

    async def health(self) -> Dict[str, Any]:
        return await self._request('GET', '/api/health', 'errors.health_failed')
