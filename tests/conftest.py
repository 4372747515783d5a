"""Shared fixtures: an application bound to an in-memory database and a fixed clock."""
from datetime import date, time

import pytest

from clinic import create_app
from clinic.extensions import db
from clinic.services import directory_service, schedule_service
from clinic.utils import clock

# A Monday
TODAY = date(2026, 10, 19)
NEXT_MONDAY = date(2026, 10, 26)


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def frozen_today(monkeypatch):
    monkeypatch.setattr(clock, 'today', lambda: TODAY)
    return TODAY


@pytest.fixture
def specialty(app):
    return directory_service.create_specialty('General Practice', 'Primary care and general medical services')


@pytest.fixture
def doctor(specialty):
    return directory_service.create_doctor(
        first_name='Sarah', last_name='Johnson', email='s.johnson@clinic.com',
        license_number='MED123456', specialty_id=specialty.id, years_of_experience=12,
    )


@pytest.fixture
def location(app):
    return directory_service.create_location(
        name='Main Clinic', address='123 Healthcare Ave', city='Springfield',
        state='IL', postal_code='62701',
    )


@pytest.fixture
def patient(app):
    return directory_service.create_patient(
        first_name='John', last_name='Doe', email='john.doe@email.com',
        date_of_birth='1985-03-15', gender='Male', allergies='Penicillin',
    )


@pytest.fixture
def staff(app):
    return directory_service.create_staff(
        first_name='Rita', last_name='Ortiz', email='r.ortiz@clinic.com', role='receptionist',
    )


@pytest.fixture
def monday_slot(doctor, location):
    """Monday 09:00-12:00, 30 minute visits, effective 2024-01-01 with no end date."""
    return schedule_service.create_schedule_slot(
        doctor_id=doctor.id, location_id=location.id, day_of_week='Monday',
        start_time=time(9, 0), end_time=time(12, 0), effective_date=date(2024, 1, 1),
    )
