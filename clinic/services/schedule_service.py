# /clinic/services/schedule_service.py
"""Doctor schedule slots and the availability resolver."""
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from clinic.extensions import db
from clinic.models.appointment_models import Appointment, AppointmentStatus
from clinic.models.directory_models import Doctor, Location
from clinic.models.schedule_models import ScheduleSlot, DayOfWeek
from clinic.utils.errors import ValidationError, ConflictError, NoAvailabilityError
from clinic.utils.lookups import get_or_404
from clinic.utils.transactions import atomic
from clinic.utils.validators import parse_date, parse_time, parse_enum, parse_bool, validate_int_range


def create_schedule_slot(doctor_id, location_id, day_of_week, start_time, end_time,
                         effective_date, end_date=None, appointment_duration=30,
                         max_patients_per_day=20, is_available=True):
    doctor = get_or_404(Doctor, doctor_id, field='doctor_id')
    location = get_or_404(Location, location_id, field='location_id')
    day = parse_enum(DayOfWeek, day_of_week, 'day_of_week', entity='ScheduleSlot')
    start = parse_time(start_time, 'start_time', entity='ScheduleSlot')
    end = parse_time(end_time, 'end_time', entity='ScheduleSlot')
    if start >= end:
        raise ValidationError("start_time must be before end_time",
                              entity='ScheduleSlot', field='start_time', value=start)
    duration = validate_int_range(appointment_duration, 'appointment_duration',
                                  minimum=15, maximum=120, entity='ScheduleSlot')
    max_patients = validate_int_range(max_patients_per_day, 'max_patients_per_day',
                                      minimum=1, maximum=100, entity='ScheduleSlot')
    effective = parse_date(effective_date, 'effective_date', entity='ScheduleSlot')
    until = parse_date(end_date, 'end_date', entity='ScheduleSlot', required=False)
    if until is not None and until < effective:
        raise ValidationError("end_date cannot be before effective_date",
                              entity='ScheduleSlot', field='end_date', value=until)

    duplicate = ScheduleSlot.query.filter_by(
        doctor_id=doctor.id, location_id=location.id,
        day_of_week=day, effective_date=effective
    ).first()
    if duplicate:
        raise ConflictError("Doctor already has a schedule for this location, day and effective date",
                            entity='ScheduleSlot', field='effective_date', value=effective)

    slot = ScheduleSlot(
        doctor_id=doctor.id,
        location_id=location.id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        appointment_duration=duration,
        max_patients_per_day=max_patients,
        effective_date=effective,
        end_date=until,
        is_available=parse_bool(is_available, 'is_available', entity='ScheduleSlot'),
    )
    try:
        with atomic():
            db.session.add(slot)
    except IntegrityError as exc:
        raise ConflictError("Doctor already has a schedule for this location, day and effective date",
                            entity='ScheduleSlot') from exc

    current_app.logger.info(
        f"Schedule slot {slot.id} created for doctor {doctor.id} on {day.value} "
        f"{start.strftime('%H:%M')}-{end.strftime('%H:%M')}"
    )
    return slot


def get_schedule_slot(slot_id):
    return get_or_404(ScheduleSlot, slot_id)


def set_slot_availability(slot_id, is_available):
    slot = get_or_404(ScheduleSlot, slot_id)
    is_available = parse_bool(is_available, 'is_available', entity='ScheduleSlot')
    with atomic():
        slot.is_available = is_available
    current_app.logger.info(f"Schedule slot {slot.id} availability set to {slot.is_available}")
    return slot


def delete_schedule_slot(slot_id):
    slot = get_or_404(ScheduleSlot, slot_id)
    if slot.appointments.first() is not None:
        raise ConflictError("Schedule slot has appointments and cannot be deleted",
                            entity='ScheduleSlot', value=slot_id)
    with atomic():
        db.session.delete(slot)
    current_app.logger.info(f"Schedule slot {slot_id} deleted")


def find_covering_slot(doctor_id, location_id, on_date, start_time):
    """Returns the active slot covering the request, or None.

    Overlapping slots resolve to the latest effective date, then to the most
    recently created slot.
    """
    return (
        ScheduleSlot.query
        .filter(
            ScheduleSlot.doctor_id == doctor_id,
            ScheduleSlot.location_id == location_id,
            ScheduleSlot.day_of_week == DayOfWeek.from_date(on_date),
            ScheduleSlot.effective_date <= on_date,
            or_(ScheduleSlot.end_date.is_(None), ScheduleSlot.end_date >= on_date),
            ScheduleSlot.is_available.is_(True),
            ScheduleSlot.start_time <= start_time,
            ScheduleSlot.end_time >= start_time,
        )
        .order_by(ScheduleSlot.effective_date.desc(), ScheduleSlot.id.desc())
        .first()
    )


def require_covering_slot(doctor_id, location_id, on_date, start_time):
    slot = find_covering_slot(doctor_id, location_id, on_date, start_time)
    if slot is None:
        raise NoAvailabilityError(
            "Doctor is not available at the requested time",
            entity='ScheduleSlot', field='start_time',
            value=f"{on_date.isoformat()} {start_time.strftime('%H:%M')}"
        )
    return slot


def check_capacity(slot, on_date):
    """Raises ``NoAvailabilityError`` when ``slot`` already holds its daily maximum of active bookings."""
    booked = Appointment.query.filter(
        Appointment.schedule_id == slot.id,
        Appointment.appointment_date == on_date,
        Appointment.status != AppointmentStatus.CANCELLED,
    ).count()
    if booked >= slot.max_patients_per_day:
        raise NoAvailabilityError(
            "Doctor is fully booked for this schedule on the requested date",
            entity='ScheduleSlot', field='max_patients_per_day', value=on_date.isoformat()
        )


def resolve_slot(doctor_id, location_id, on_date, start_time):
    """Availability check: a covering active slot with room left on ``on_date``.

    Booking runs the two halves separately so that an exact double booking
    is reported as a conflict before the capacity count.
    """
    on_date = parse_date(on_date, 'appointment_date', entity='Appointment')
    start_time = parse_time(start_time, 'start_time', entity='Appointment')

    slot = require_covering_slot(doctor_id, location_id, on_date, start_time)
    check_capacity(slot, on_date)
    return slot
