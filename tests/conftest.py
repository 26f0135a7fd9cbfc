"""Shared pytest configuration and fixtures for the check-in client test suite."""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np
import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from face_checkin import i18n
from face_checkin.core.vision.camera_manager import CameraConfig, CameraError, CameraManager
from face_checkin.core.workflow.timer import NavigationTimer
from face_checkin.services.models import Employee, VerificationResult


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_addoption(parser):
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require a physical camera",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Camera mocks
# =============================================================================

class FakeVideoCapture:
    """Stand-in for cv2.VideoCapture producing solid-colour 640x480 frames."""

    def __init__(self, width: int = 640, height: int = 480, fail_read: bool = False):
        self.props = {
            cv2.CAP_PROP_FRAME_WIDTH: float(width),
            cv2.CAP_PROP_FRAME_HEIGHT: float(height),
            cv2.CAP_PROP_FPS: 30.0,
        }
        self.fail_read = fail_read
        self.opened = True
        self.released = False
        self.reads = 0

    def isOpened(self) -> bool:
        return self.opened

    def set(self, prop, value) -> bool:
        self.props[prop] = float(value)
        return True

    def get(self, prop) -> float:
        return self.props.get(prop, 0.0)

    def read(self):
        if self.fail_read or not self.opened:
            return False, None
        self.reads += 1
        height = int(self.props[cv2.CAP_PROP_FRAME_HEIGHT])
        width = int(self.props[cv2.CAP_PROP_FRAME_WIDTH])
        frame = np.full((height, width, 3), (self.reads * 40) % 256, dtype=np.uint8)
        return True, frame

    def release(self) -> None:
        self.opened = False
        self.released = True


class FakeCameraProvider:
    """CameraProvider that hands out FakeVideoCapture objects or refuses."""

    def __init__(self, deny: bool = False, fail_read: bool = False):
        self.deny = deny
        self.fail_read = fail_read
        self.opened: List[int] = []
        self.captures: List[FakeVideoCapture] = []

    def open(self, index: int) -> FakeVideoCapture:
        self.opened.append(index)
        if self.deny:
            raise CameraError(f"Permission denied for camera index {index}")
        capture = FakeVideoCapture(fail_read=self.fail_read)
        self.captures.append(capture)
        return capture

    @property
    def last_capture(self) -> Optional[FakeVideoCapture]:
        return self.captures[-1] if self.captures else None


# =============================================================================
# Timer mocks
# =============================================================================

class FakeHandle:
    def __init__(self, when: float, delay: float, callback):
        self.when = when
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock exposing the loop.call_later interface."""

    def __init__(self):
        self.now = 0.0
        self.handles: List[FakeHandle] = []

    def call_later(self, delay: float, callback) -> FakeHandle:
        handle = FakeHandle(self.now + delay, delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for handle in sorted(self.handles, key=lambda h: h.when):
            if handle.cancelled or handle.fired:
                continue
            if handle.when <= self.now + 1e-9:
                handle.fired = True
                handle.callback()

    @property
    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]


# =============================================================================
# Gateway mocks
# =============================================================================

def make_verification(verification: bool, similarity: float = 0.87, threshold: float = 0.6,
                      user_name: str = 'Budi Santoso') -> VerificationResult:
    return VerificationResult.from_dict({
        'verification': verification,
        'message': 'Face verified successfully! Check-in recorded.' if verification
        else 'Face verification failed. Similarity score too low.',
        'similarity_score': similarity,
        'threshold': threshold,
        'attendance': {
            'id': 11,
            'user_id': 7,
            'user_name': user_name,
            'check_in_time': '2026-10-19T08:15:30.123456789+07:00',
            'similarity_score': similarity,
            'status': 'success' if verification else 'failed',
        },
    })


def make_employee(emp_id: int = 7, name: str = 'Budi Santoso', email: str = 'budi@example.com') -> Employee:
    return Employee(id=emp_id, name=name, email=email, phone='0812')


class FakeGateway:
    """Records calls; responses and failures are set per test.

    When ``gate`` is an asyncio.Event the submit calls wait on it, which keeps
    a request in flight until the test releases it.
    """

    def __init__(self):
        self.verify_calls = []
        self.enroll_calls = []
        self.verify_response = None
        self.enroll_response = None
        self.error: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None
        self.employees: List[Employee] = [make_employee()]
        self.employees_error: Optional[BaseException] = None

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def verify(self, employee_id, image_bytes):
        self.verify_calls.append((employee_id, image_bytes))
        await self._wait()
        return self.verify_response

    async def enroll(self, fields, image_bytes):
        self.enroll_calls.append((dict(fields), image_bytes))
        await self._wait()
        return self.enroll_response

    async def list_employees(self):
        if self.employees_error is not None:
            raise self.employees_error
        return list(self.employees)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def english_locale():
    previous = i18n.get_locale()
    i18n.set_locale('en')
    yield
    i18n.set_locale(previous)


@pytest.fixture(autouse=True)
def release_camera_leases():
    yield
    CameraManager._leases.clear()


@pytest.fixture
def camera_config() -> CameraConfig:
    return CameraConfig(index=0, warmup_frames=0)


@pytest.fixture
def provider() -> FakeCameraProvider:
    return FakeCameraProvider()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def timer(scheduler) -> NavigationTimer:
    return NavigationTimer(loop=scheduler)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def navigations() -> List[str]:
    return []
