"""Booking checks and the appointment status workflow."""
from datetime import date, time
from types import SimpleNamespace

import pytest
from sqlalchemy import update

from clinic.extensions import db
from clinic.models.appointment_models import Appointment, AppointmentStatus, AppointmentPriority
from clinic.models.billing_models import Bill
from clinic.models.system_models import AuditEntry, AuditAction
from clinic.services import appointment_service, schedule_service
from clinic.utils.errors import (
    ValidationError, ConflictError, NotFoundError, NoAvailabilityError, InvalidTransitionError
)
from tests.conftest import TODAY, NEXT_MONDAY


@pytest.fixture
def book(patient, doctor, location, monday_slot):
    def _book(start='09:30', end='10:00', on=NEXT_MONDAY, **kwargs):
        return appointment_service.create_appointment(
            patient.id, doctor.id, location.id, on, start, end, 'Annual checkup', **kwargs
        )
    return _book


class TestBooking:

    def test_booking_inside_slot(self, book, monday_slot):
        appointment = book()
        assert appointment.status == AppointmentStatus.SCHEDULED
        assert appointment.priority == AppointmentPriority.ROUTINE
        assert appointment.schedule_id == monday_slot.id
        assert appointment.start_time == time(9, 30)

    def test_booking_outside_slot_has_no_availability(self, book):
        with pytest.raises(NoAvailabilityError):
            book(start='13:00', end='13:30')
        assert Appointment.query.count() == 0

    def test_double_booking_is_a_conflict(self, book):
        book()
        with pytest.raises(ConflictError) as exc:
            book()
        assert exc.value.field == 'start_time'
        assert Appointment.query.count() == 1

    def test_unique_index_catches_a_race(self, book, monkeypatch):
        book()
        # Simulate a concurrent booking that passed the pre-check
        monkeypatch.setattr(appointment_service, '_find_booking_conflict', lambda *args: None)
        with pytest.raises(ConflictError):
            book()
        assert Appointment.query.count() == 1

    def test_cancelled_booking_frees_the_time(self, book):
        first = book()
        appointment_service.cancel_appointment(first.id, 'Patient travelling')
        second = book()
        assert second.id != first.id

    def test_past_date_is_rejected(self, book):
        with pytest.raises(ValidationError) as exc:
            book(on=date(2026, 10, 12))
        assert exc.value.field == 'appointment_date'

    def test_today_is_accepted(self, book):
        assert book(on=TODAY).appointment_date == TODAY

    def test_start_must_precede_end(self, book):
        with pytest.raises(ValidationError):
            book(start='10:00', end='10:00')
        with pytest.raises(ValidationError):
            book(start='10:30', end='10:00')

    def test_missing_reason_is_rejected(self, patient, doctor, location, monday_slot):
        with pytest.raises(ValidationError) as exc:
            appointment_service.create_appointment(patient.id, doctor.id, location.id, NEXT_MONDAY,
                                                   '09:30', '10:00', '   ')
        assert exc.value.field == 'reason_for_visit'

    def test_unknown_patient_is_not_found(self, doctor, location, monday_slot):
        with pytest.raises(NotFoundError) as exc:
            appointment_service.create_appointment(999, doctor.id, location.id, NEXT_MONDAY,
                                                   '09:30', '10:00', 'Checkup')
        assert exc.value.field == 'patient_id'

    def test_full_slot_has_no_availability(self, patient, doctor, location):
        schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                              '2024-01-01', max_patients_per_day=1)
        appointment_service.create_appointment(patient.id, doctor.id, location.id, NEXT_MONDAY,
                                               '09:00', '09:30', 'Checkup')
        with pytest.raises(NoAvailabilityError):
            appointment_service.create_appointment(patient.id, doctor.id, location.id, NEXT_MONDAY,
                                                   '10:00', '10:30', 'Follow-up')

    def test_exact_duplicate_on_full_slot_is_a_conflict(self, patient, doctor, location):
        schedule_service.create_schedule_slot(doctor.id, location.id, 'Monday', '09:00', '12:00',
                                              '2024-01-01', max_patients_per_day=1)
        appointment_service.create_appointment(patient.id, doctor.id, location.id, NEXT_MONDAY,
                                               '09:30', '10:00', 'Checkup')
        with pytest.raises(ConflictError) as exc:
            appointment_service.create_appointment(patient.id, doctor.id, location.id, NEXT_MONDAY,
                                                   '09:30', '10:00', 'Checkup')
        assert exc.value.field == 'start_time'

    def test_time_with_utc_offset_is_rejected(self, book):
        with pytest.raises(ValidationError) as exc:
            book(start='09:30+02:00', end='10:00')
        assert exc.value.field == 'start_time'

    def test_foreign_key_failure_is_not_reported_as_double_booking(self, book, monkeypatch):
        # Slot removed between the availability check and the insert
        vanished = SimpleNamespace(id=999, max_patients_per_day=20)
        monkeypatch.setattr(appointment_service, 'require_covering_slot', lambda *args: vanished)
        with pytest.raises(ConflictError) as exc:
            book()
        assert exc.value.field is None
        assert Appointment.query.count() == 0

    def test_booking_is_audited_with_actor(self, book, staff):
        appointment = book(changed_by=staff.id)
        entry = AuditEntry.query.filter_by(table_name='appointments', record_id=appointment.id).one()
        assert entry.action == AuditAction.INSERT
        assert entry.changed_by == staff.id
        assert entry.new_values['status'] == 'scheduled'


class TestStatusWorkflow:

    def test_full_happy_path(self, book):
        appointment = book()
        for status in ('confirmed', 'in_progress', 'completed'):
            appointment = appointment_service.transition_appointment(appointment.id, status)
        assert appointment.status == AppointmentStatus.COMPLETED

    def test_scheduled_cannot_jump_to_completed(self, book):
        appointment = book()
        with pytest.raises(InvalidTransitionError):
            appointment_service.transition_appointment(appointment.id, 'completed')
        assert appointment_service.get_appointment(appointment.id).status == AppointmentStatus.SCHEDULED

    def test_completed_is_terminal(self, book):
        appointment = book()
        for status in ('confirmed', 'in_progress', 'completed'):
            appointment_service.transition_appointment(appointment.id, status)
        with pytest.raises(InvalidTransitionError):
            appointment_service.cancel_appointment(appointment.id, 'Too late')

    def test_stale_copy_cannot_complete_twice(self, book):
        appointment = book()
        appointment_service.transition_appointment(appointment.id, 'confirmed')
        appointment_service.transition_appointment(appointment.id, 'in_progress')
        assert appointment.status == AppointmentStatus.IN_PROGRESS

        # Another request completes the visit; this session still holds the old status
        db.session.execute(
            update(Appointment)
            .where(Appointment.id == appointment.id)
            .values(status=AppointmentStatus.COMPLETED)
            .execution_options(synchronize_session=False)
        )
        assert appointment.status == AppointmentStatus.IN_PROGRESS

        with pytest.raises(InvalidTransitionError):
            appointment_service.transition_appointment(appointment.id, 'completed')
        assert Bill.query.filter_by(appointment_id=appointment.id).count() == 0

    def test_no_show_from_confirmed(self, book):
        appointment = book()
        appointment_service.transition_appointment(appointment.id, 'confirmed')
        appointment = appointment_service.transition_appointment(appointment.id, 'no_show')
        assert appointment.status == AppointmentStatus.NO_SHOW

    def test_unknown_status_is_rejected(self, book):
        appointment = book()
        with pytest.raises(ValidationError):
            appointment_service.transition_appointment(appointment.id, 'postponed')

    def test_transition_is_audited(self, book, staff):
        appointment = book()
        appointment_service.transition_appointment(appointment.id, 'confirmed', changed_by=staff.id)
        entry = AuditEntry.query.filter_by(table_name='appointments', action=AuditAction.UPDATE).one()
        assert entry.old_values == {'status': 'scheduled'}
        assert entry.new_values == {'status': 'confirmed'}


class TestCancellation:

    def test_cancel_records_reason(self, book, staff):
        appointment = book()
        appointment = appointment_service.cancel_appointment(appointment.id, 'Feeling better',
                                                             changed_by=staff.id)
        assert appointment.status == AppointmentStatus.CANCELLED
        entry = AuditEntry.query.filter_by(table_name='appointments', action=AuditAction.UPDATE).one()
        assert entry.old_values == {'status': 'scheduled'}
        assert entry.new_values == {'status': 'cancelled', 'reason': 'Feeling better'}

    def test_cancel_requires_reason(self, book):
        appointment = book()
        with pytest.raises(ValidationError):
            appointment_service.cancel_appointment(appointment.id, '')

    def test_cancelling_twice_is_rejected(self, book):
        appointment = book()
        appointment_service.cancel_appointment(appointment.id, 'Feeling better')
        with pytest.raises(InvalidTransitionError):
            appointment_service.cancel_appointment(appointment.id, 'Again')
        assert AuditEntry.query.filter_by(action=AuditAction.UPDATE).count() == 1

    def test_cancel_via_status_transition(self, book):
        appointment = book()
        appointment = appointment_service.transition_appointment(appointment.id, 'cancelled',
                                                                 reason='Clinic closed')
        assert appointment.status == AppointmentStatus.CANCELLED

    def test_cancel_unknown_appointment(self, app):
        with pytest.raises(NotFoundError):
            appointment_service.cancel_appointment(42, 'Nope')
