from datetime import date, time, timedelta

import pytest

from clinic.services import schedule_service, query_service, appointment_service, directory_service
from clinic.utils.errors import ValidationError, ConflictError, NoAvailabilityError, NotFoundError
from tests.conftest import NEXT_MONDAY


class TestScheduleSlots:

    def test_slot_times_must_be_ordered(self, doctor, location):
        with pytest.raises(ValidationError):
            schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '12:00', '09:00',
                                                  '2024-01-01')

    def test_duration_bounds(self, doctor, location):
        with pytest.raises(ValidationError) as exc:
            schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                                  '2024-01-01', appointment_duration=10)
        assert exc.value.field == 'appointment_duration'

    def test_fractional_duration_is_rejected(self, doctor, location):
        with pytest.raises(ValidationError) as exc:
            schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                                  '2024-01-01', appointment_duration=15.9)
        assert exc.value.field == 'appointment_duration'

    def test_whole_float_duration_is_accepted(self, doctor, location):
        slot = schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                                     '2024-01-01', appointment_duration=45.0)
        assert slot.appointment_duration == 45

    def test_availability_flag_must_be_boolean(self, monday_slot):
        with pytest.raises(ValidationError) as exc:
            schedule_service.set_slot_availability(monday_slot.id, 'false')
        assert exc.value.field == 'is_available'
        assert schedule_service.get_schedule_slot(monday_slot.id).is_available is True

    def test_end_date_cannot_precede_effective_date(self, doctor, location):
        with pytest.raises(ValidationError):
            schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                                  '2024-01-01', end_date='2023-12-31')

    def test_duplicate_slot_is_a_conflict(self, monday_slot, doctor, location):
        with pytest.raises(ConflictError):
            schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '13:00', '17:00',
                                                  '2024-01-01')


class TestResolveSlot:

    def test_covering_slot_is_found(self, monday_slot, doctor, location):
        slot = schedule_service.resolve_slot(doctor.id, location.id, NEXT_MONDAY, time(9, 30))
        assert slot.id == monday_slot.id

    def test_wrong_weekday_has_no_availability(self, monday_slot, doctor, location):
        with pytest.raises(NoAvailabilityError):
            schedule_service.resolve_slot(doctor.id, location.id, NEXT_MONDAY + timedelta(days=1), '09:30')

    def test_outside_hours_has_no_availability(self, monday_slot, doctor, location):
        with pytest.raises(NoAvailabilityError):
            schedule_service.resolve_slot(doctor.id, location.id, NEXT_MONDAY, '13:00')

    def test_before_effective_date_has_no_availability(self, monday_slot, doctor, location):
        with pytest.raises(NoAvailabilityError):
            schedule_service.resolve_slot(doctor.id, location.id, date(2023, 12, 25), '09:30')

    def test_unavailable_slot_is_skipped(self, monday_slot, doctor, location):
        schedule_service.set_slot_availability(monday_slot.id, False)
        with pytest.raises(NoAvailabilityError):
            schedule_service.resolve_slot(doctor.id, location.id, NEXT_MONDAY, '09:30')

    def test_expired_slot_is_skipped(self, doctor, location):
        schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                              '2024-01-01', end_date='2025-01-01')
        with pytest.raises(NoAvailabilityError):
            schedule_service.resolve_slot(doctor.id, location.id, NEXT_MONDAY, '09:30')

    def test_latest_effective_slot_wins(self, monday_slot, doctor, location):
        newer = schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '08:00', '12:00',
                                                      '2026-01-05')
        slot = schedule_service.resolve_slot(doctor.id, location.id, NEXT_MONDAY, '09:30')
        assert slot.id == newer.id


class TestAvailabilityProjection:

    def test_lists_slots_in_effect(self, monday_slot, doctor):
        rows = query_service.doctor_availability()
        assert rows == [{
            'schedule_id': monday_slot.id,
            'doctor_id': doctor.id,
            'doctor_name': 'Sarah Johnson',
            'specialty': 'General Practice',
            'clinic_location': 'Main Clinic',
            'day_of_week': 'Monday',
            'start_time': '09:00',
            'end_time': '12:00',
            'appointment_duration': 30,
        }]

    def test_hides_unavailable_slots(self, monday_slot):
        schedule_service.set_slot_availability(monday_slot.id, False)
        assert query_service.doctor_availability() == []


class TestSlotAndLocationRemoval:

    def test_unused_slot_can_be_deleted(self, monday_slot):
        schedule_service.delete_schedule_slot(monday_slot.id)
        with pytest.raises(NotFoundError):
            schedule_service.get_schedule_slot(monday_slot.id)

    def test_booked_slot_cannot_be_deleted(self, monday_slot, patient, doctor, location):
        appointment_service.create_appointment(patient.id, doctor.id, location.id, NEXT_MONDAY,
                                               '09:30', '10:00', 'Checkup')
        with pytest.raises(ConflictError):
            schedule_service.delete_schedule_slot(monday_slot.id)

    def test_location_with_schedule_cannot_be_deleted(self, monday_slot, location):
        with pytest.raises(ConflictError):
            directory_service.delete_location(location.id)

    def test_unused_location_can_be_deleted(self, location):
        directory_service.delete_location(location.id)
        with pytest.raises(NotFoundError):
            directory_service.get_location(location.id)
