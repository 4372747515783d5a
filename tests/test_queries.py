from datetime import date

import pytest

from clinic.services import appointment_service, query_service, directory_service
from clinic.utils.errors import ValidationError, NotFoundError
from tests.conftest import TODAY, NEXT_MONDAY


@pytest.fixture
def booked(patient, doctor, location, monday_slot):
    later = appointment_service.create_appointment(
        patient.id, doctor.id, location.id, NEXT_MONDAY, '10:00', '10:30', 'Follow-up')
    earlier = appointment_service.create_appointment(
        patient.id, doctor.id, location.id, TODAY, '09:00', '09:30', 'Checkup')
    return earlier, later


class TestUpcomingAppointments:

    def test_ordered_soonest_first(self, booked):
        rows = query_service.upcoming_appointments()
        assert [r['appointment_id'] for r in rows] == [booked[0].id, booked[1].id]
        assert rows[0]['patient_name'] == 'John Doe'
        assert rows[0]['doctor_name'] == 'Sarah Johnson'
        assert rows[0]['specialty'] == 'General Practice'
        assert rows[0]['clinic_location'] == 'Main Clinic'
        assert rows[0]['start_time'] == '09:00'

    def test_from_date_excludes_earlier(self, booked):
        rows = query_service.upcoming_appointments(from_date='2026-10-20')
        assert [r['appointment_id'] for r in rows] == [booked[1].id]


class TestDoctorAppointments:

    def test_range_is_inclusive(self, booked, doctor):
        rows = query_service.get_doctor_appointments(doctor.id, TODAY, NEXT_MONDAY)
        assert [r['appointment_date'] for r in rows] == ['2026-10-19', '2026-10-26']

    def test_range_filters(self, booked, doctor):
        rows = query_service.get_doctor_appointments(doctor.id, '2026-10-20', '2026-10-31')
        assert [r['appointment_id'] for r in rows] == [booked[1].id]

    def test_inverted_range_is_rejected(self, doctor):
        with pytest.raises(ValidationError):
            query_service.get_doctor_appointments(doctor.id, date(2026, 11, 1), date(2026, 10, 1))

    def test_unknown_doctor(self, app):
        with pytest.raises(NotFoundError):
            query_service.get_doctor_appointments(99, TODAY, NEXT_MONDAY)

    def test_other_doctors_are_excluded(self, booked, specialty):
        other = directory_service.create_doctor('Emily', 'Rodriguez', 'e.rodriguez@clinic.com',
                                                'MED123458', specialty.id)
        assert query_service.get_doctor_appointments(other.id, TODAY, NEXT_MONDAY) == []
