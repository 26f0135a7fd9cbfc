"""Tests for the enrollment screen workflow."""

import pytest

from face_checkin.core.errors import TransportError, ValidationError
from face_checkin.core.workflow.controller import WorkflowState
from face_checkin.core.workflow.enrollment import EnrollmentWorkflow

from conftest import FakeCameraProvider, make_employee


@pytest.fixture
def enrollment(gateway, camera_config, provider, timer, navigations):
    return EnrollmentWorkflow(
        gateway,
        camera_config=camera_config,
        provider=provider,
        timer=timer,
        navigate=navigations.append,
    )


async def fill(workflow, **values):
    await workflow.start()
    workflow.update_fields(values)
    return workflow


@pytest.mark.asyncio
@pytest.mark.parametrize('values, field, message', [
    ({'email': 'budi@example.com'}, 'name', 'Name is required'),
    ({'name': 'Budi'}, 'email', 'Email is required'),
    ({'name': 'Budi', 'email': 'budi@example.com'}, 'image', 'A face photo is required'),
])
async def test_missing_input_never_reaches_gateway(enrollment, gateway, values, field, message):
    await fill(enrollment, **values)

    await enrollment.submit()

    assert gateway.enroll_calls == []
    assert isinstance(enrollment.error, ValidationError)
    assert enrollment.error.field == field
    assert enrollment.error.message == message
    enrollment.close()


@pytest.mark.asyncio
async def test_phone_is_optional(enrollment, gateway):
    gateway.enroll_response = make_employee()
    await fill(enrollment, name='Budi', email='budi@example.com')
    enrollment.capture()

    assert await enrollment.submit() is WorkflowState.SUCCEEDED
    fields, image_bytes = gateway.enroll_calls[0]
    assert fields == {'name': 'Budi', 'email': 'budi@example.com', 'phone': ''}
    assert image_bytes[:2] == b'\xff\xd8'
    enrollment.close()


@pytest.mark.asyncio
async def test_success_redirects_after_two_seconds(enrollment, gateway, scheduler, navigations):
    gateway.enroll_response = make_employee()
    await fill(enrollment, name='Budi', email='budi@example.com', phone='0812')
    enrollment.capture()

    await enrollment.submit()

    assert enrollment.employee.id == 7
    assert enrollment.success_message() == 'Registration successful! Redirecting...'
    assert scheduler.pending[0].delay == 2.0
    scheduler.advance(1.999)
    assert navigations == []
    scheduler.advance(0.001)
    assert navigations == ['/']
    enrollment.close()


@pytest.mark.asyncio
async def test_service_message_is_shown_on_failure(enrollment, gateway, scheduler):
    gateway.error = TransportError('Email already registered', status=400)
    await fill(enrollment, name='Budi', email='budi@example.com')
    enrollment.capture()

    assert await enrollment.submit() is WorkflowState.FAILED
    assert enrollment.error.message == 'Email already registered'
    assert enrollment.employee is None
    assert enrollment.success_message() is None
    assert scheduler.pending == []
    enrollment.close()


@pytest.mark.asyncio
async def test_camera_denied_is_persistent_indicator(gateway, camera_config, timer, navigations):
    workflow = EnrollmentWorkflow(
        gateway,
        camera_config=camera_config,
        provider=FakeCameraProvider(deny=True),
        timer=timer,
        navigate=navigations.append,
    )
    await fill(workflow, name='Budi', email='budi@example.com')

    assert workflow.status()['device_error'] == 'Camera unavailable'
    await workflow.submit()
    assert workflow.error.field == 'image'
    assert workflow.status()['device_error'] == 'Camera unavailable'
    workflow.close()


@pytest.mark.asyncio
async def test_registration_without_returned_record_still_succeeds(enrollment, gateway, scheduler, navigations):
    gateway.enroll_response = None
    await fill(enrollment, name='Budi', email='budi@example.com')
    enrollment.capture()

    assert await enrollment.submit() is WorkflowState.SUCCEEDED
    assert enrollment.employee is None
    assert enrollment.success_message() == 'Registration successful! Redirecting...'
    scheduler.advance(2)
    assert navigations == ['/']
    enrollment.close()
