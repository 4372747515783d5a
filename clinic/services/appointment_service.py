# /clinic/services/appointment_service.py
"""Appointment booking and status workflow.

Booking checks run in the order: referenced entities, input shape, the
availability resolver, then double-booking. The partial unique index on
(doctor_id, appointment_date, start_time) is the final arbiter when two
bookings race; the loser gets ``ConflictError``.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from clinic.extensions import db
from clinic.models.appointment_models import Appointment, AppointmentStatus, AppointmentPriority
from clinic.models.directory_models import Doctor, Patient, Location
from clinic.models.system_models import AuditAction
from clinic.services.audit_service import record_audit, resolve_actor
from clinic.services.billing_service import derive_bill
from clinic.services.schedule_service import require_covering_slot, check_capacity
from clinic.utils import clock
from clinic.utils.errors import ValidationError, ConflictError, NotFoundError, InvalidTransitionError
from clinic.utils.lookups import get_or_404
from clinic.utils.transactions import atomic
from clinic.utils.validators import require_text, optional_text, parse_date, parse_time, parse_enum


def _find_booking_conflict(doctor_id, appointment_date, start_time):
    return Appointment.query.filter(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == appointment_date,
        Appointment.start_time == start_time,
        Appointment.status != AppointmentStatus.CANCELLED,
    ).first()


def _double_booking_error(doctor_id, appointment_date, start_time):
    return ConflictError(
        "Doctor already has an appointment at this date and time",
        entity='Appointment', field='start_time',
        value=f"{appointment_date.isoformat()} {start_time.strftime('%H:%M')}"
    )


def _is_timeslot_violation(exc):
    # PostgreSQL names the index; SQLite lists the indexed columns
    message = str(exc.orig)
    return 'uq_doctor_timeslot' in message or 'appointments.start_time' in message


def create_appointment(patient_id, doctor_id, location_id, appointment_date, start_time, end_time,
                       reason_for_visit, priority=AppointmentPriority.ROUTINE, symptoms=None,
                       changed_by=None):
    patient = get_or_404(Patient, patient_id, field='patient_id')
    doctor = get_or_404(Doctor, doctor_id, field='doctor_id')
    location = get_or_404(Location, location_id, field='location_id')
    actor_id = resolve_actor(changed_by)

    reason = require_text(reason_for_visit, 'reason_for_visit', entity='Appointment')
    priority = parse_enum(AppointmentPriority, priority, 'priority', entity='Appointment',
                          default=AppointmentPriority.ROUTINE)
    appointment_date = parse_date(appointment_date, 'appointment_date', entity='Appointment')
    start = parse_time(start_time, 'start_time', entity='Appointment')
    end = parse_time(end_time, 'end_time', entity='Appointment')

    if appointment_date < clock.today():
        raise ValidationError("appointment_date cannot be in the past",
                              entity='Appointment', field='appointment_date', value=appointment_date)
    if start >= end:
        raise ValidationError("start_time must be before end_time",
                              entity='Appointment', field='start_time', value=start)

    slot = require_covering_slot(doctor.id, location.id, appointment_date, start)
    if _find_booking_conflict(doctor.id, appointment_date, start):
        raise _double_booking_error(doctor.id, appointment_date, start)
    check_capacity(slot, appointment_date)

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        location_id=location.id,
        schedule_id=slot.id,
        appointment_date=appointment_date,
        start_time=start,
        end_time=end,
        status=AppointmentStatus.SCHEDULED,
        priority=priority,
        reason_for_visit=reason,
        symptoms=optional_text(symptoms, 'symptoms'),
    )
    try:
        with atomic():
            db.session.add(appointment)
            db.session.flush()
            record_audit('appointments', appointment.id, AuditAction.INSERT,
                         new_values=appointment.to_dict(), changed_by=actor_id)
    except IntegrityError as exc:
        if _is_timeslot_violation(exc):
            raise _double_booking_error(doctor.id, appointment_date, start) from exc
        raise ConflictError("Appointment references a record that changed while booking",
                            entity='Appointment') from exc

    current_app.logger.info(
        f"Appointment {appointment.id} booked: doctor {doctor.id}, patient {patient.id}, "
        f"{appointment_date.isoformat()} {start.strftime('%H:%M')}"
    )
    return appointment


def get_appointment(appointment_id):
    return get_or_404(Appointment, appointment_id)


def _apply_transition(appointment, new_status, actor_id, extra=None):
    """Moves the appointment to ``new_status`` inside the caller's transaction."""
    old_status = appointment.status
    if not appointment.can_transition_to(new_status):
        raise InvalidTransitionError(
            f"Cannot change appointment status from {old_status.value} to {new_status.value}",
            entity='Appointment', field='status', value=new_status.value
        )

    appointment.status = new_status
    new_values = {'status': new_status.value}
    if extra:
        new_values.update(extra)
    record_audit('appointments', appointment.id, AuditAction.UPDATE,
                 old_values={'status': old_status.value}, new_values=new_values,
                 changed_by=actor_id)

    if new_status == AppointmentStatus.COMPLETED and old_status != AppointmentStatus.COMPLETED:
        derive_bill(appointment, changed_by=actor_id)
    return old_status


def _lock_appointment(appointment_id):
    """Re-reads the appointment under a row lock held until the transaction ends.

    ``populate_existing`` discards any stale copy in the identity map, so the
    transition check always sees the committed status.
    """
    appointment = (
        Appointment.query
        .filter_by(id=appointment_id)
        .populate_existing()
        .with_for_update()
        .one_or_none()
    )
    if appointment is None:
        raise NotFoundError('Appointment', appointment_id)
    return appointment


def _run_transition(appointment_id, new_status, actor_id, extra=None):
    try:
        with atomic():
            appointment = _lock_appointment(appointment_id)
            old_status = _apply_transition(appointment, new_status, actor_id, extra=extra)
    except IntegrityError as exc:
        # Unique bill per appointment: a concurrent completion got there first
        raise ConflictError("Appointment was changed by another request",
                            entity='Appointment', field='status', value=new_status.value) from exc
    return appointment, old_status


def transition_appointment(appointment_id, new_status, changed_by=None, reason=None):
    new_status = parse_enum(AppointmentStatus, new_status, 'status', entity='Appointment')
    if new_status == AppointmentStatus.CANCELLED:
        return cancel_appointment(appointment_id, reason, changed_by=changed_by)
    get_or_404(Appointment, appointment_id)
    actor_id = resolve_actor(changed_by)

    appointment, old_status = _run_transition(appointment_id, new_status, actor_id)

    current_app.logger.info(
        f"Appointment {appointment.id} moved from {old_status.value} to {new_status.value}"
    )
    return appointment


def cancel_appointment(appointment_id, reason, changed_by=None):
    """Cancels an appointment. Cancelling twice raises ``InvalidTransitionError``."""
    get_or_404(Appointment, appointment_id)
    reason = require_text(reason, 'reason', entity='Appointment')
    actor_id = resolve_actor(changed_by)

    appointment, _ = _run_transition(appointment_id, AppointmentStatus.CANCELLED, actor_id,
                                     extra={'reason': reason})

    current_app.logger.info(f"Appointment {appointment.id} cancelled: {reason}")
    return appointment
