from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from patientflow.models import Appointment, ExamRoom, Location, Patient, Tenant, User
from patientflow.services.flow import FlowEngine

# A Monday morning, so room assignments for day 1 apply.
MONDAY_9AM = datetime(2024, 3, 4, 9, 0, tzinfo=dt_timezone.utc)


class FakeClock:
    def __init__(self, start=MONDAY_9AM):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, tenant_id, event):
        self.events.append((tenant_id, event))


class BrokenPublisher:
    def publish(self, tenant_id, event):
        raise ConnectionError('channel layer down')


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def broken_publisher():
    return BrokenPublisher()


@pytest.fixture
def engine(publisher, clock):
    return FlowEngine(publisher, clock=clock)


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(id='t1', name='Main Street Family Practice')


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(id='t2', name='Elsewhere Clinic')


@pytest.fixture
def location(tenant):
    return Location.objects.create(id='loc-1', tenant=tenant, name='Downtown')


@pytest.fixture
def provider(tenant):
    return User.objects.create_user(
        username='drsmith', password='P@ssw0rd1', role='provider', tenant=tenant,
        first_name='Jane', last_name='Smith',
    )


@pytest.fixture
def ma(tenant):
    return User.objects.create_user(
        username='ma1', password='P@ssw0rd1', role='ma', tenant=tenant, first_name='Sam', last_name='Lee',
    )


@pytest.fixture
def make_room(tenant, location):
    def _make(number, **extra):
        extra.setdefault('room_name', f'Exam {number}')
        return ExamRoom.objects.create(tenant=tenant, location=location, room_number=number, **extra)
    return _make


@pytest.fixture
def make_appointment(tenant, location, provider):
    counter = {'n': 0}

    def _make(first='Pat', last=None, *, appointment_id=None, scheduled_start=MONDAY_9AM, **extra):
        counter['n'] += 1
        patient = Patient.objects.create(tenant=tenant, first_name=first, last_name=last or f'Doe{counter["n"]}')
        extra.setdefault('provider', provider)
        extra.setdefault('location', location)
        extra.setdefault('appointment_type', 'Follow-up')
        kwargs = {'id': appointment_id} if appointment_id else {}
        return Appointment.objects.create(
            tenant=tenant, patient=patient, scheduled_start=scheduled_start, **kwargs, **extra
        )
    return _make
