# /clinic/services/query_service.py
"""Read-only projections over schedules and appointments."""
from sqlalchemy import or_

from clinic.extensions import db
from clinic.models.appointment_models import Appointment
from clinic.models.directory_models import Doctor, Patient, Specialty, Location
from clinic.models.schedule_models import ScheduleSlot
from clinic.models.base import format_date, format_time
from clinic.utils import clock
from clinic.utils.errors import ValidationError
from clinic.utils.lookups import get_or_404
from clinic.utils.validators import parse_date


def doctor_availability(on_date=None):
    """Available schedule slots in effect on ``on_date`` (default: today)."""
    on_date = parse_date(on_date, 'on_date', required=False) or clock.today()
    rows = (
        db.session.query(ScheduleSlot, Doctor, Specialty, Location)
        .join(Doctor, ScheduleSlot.doctor_id == Doctor.id)
        .join(Specialty, Doctor.specialty_id == Specialty.id)
        .join(Location, ScheduleSlot.location_id == Location.id)
        .filter(
            ScheduleSlot.is_available.is_(True),
            ScheduleSlot.effective_date <= on_date,
            or_(ScheduleSlot.end_date.is_(None), ScheduleSlot.end_date >= on_date),
        )
        .order_by(Doctor.last_name, Doctor.first_name, ScheduleSlot.id)
        .all()
    )
    return [
        {
            'schedule_id': slot.id,
            'doctor_id': doctor.id,
            'doctor_name': doctor.full_name,
            'specialty': specialty.name,
            'clinic_location': location.name,
            'day_of_week': slot.day_of_week.value,
            'start_time': format_time(slot.start_time),
            'end_time': format_time(slot.end_time),
            'appointment_duration': slot.appointment_duration,
        }
        for slot, doctor, specialty, location in rows
    ]


def upcoming_appointments(from_date=None):
    """Appointments on or after ``from_date`` (default: today), soonest first."""
    from_date = parse_date(from_date, 'from_date', required=False) or clock.today()
    rows = (
        db.session.query(Appointment, Patient, Doctor, Specialty, Location)
        .join(Patient, Appointment.patient_id == Patient.id)
        .join(Doctor, Appointment.doctor_id == Doctor.id)
        .join(Specialty, Doctor.specialty_id == Specialty.id)
        .join(Location, Appointment.location_id == Location.id)
        .filter(Appointment.appointment_date >= from_date)
        .order_by(Appointment.appointment_date, Appointment.start_time, Appointment.id)
        .all()
    )
    return [
        {
            'appointment_id': appt.id,
            'patient_name': patient.full_name,
            'doctor_name': doctor.full_name,
            'specialty': specialty.name,
            'clinic_location': location.name,
            'appointment_date': format_date(appt.appointment_date),
            'start_time': format_time(appt.start_time),
            'end_time': format_time(appt.end_time),
            'status': appt.status.value,
            'reason_for_visit': appt.reason_for_visit,
        }
        for appt, patient, doctor, specialty, location in rows
    ]


def get_doctor_appointments(doctor_id, start_date, end_date):
    """A doctor's appointments between two dates inclusive, ordered by date and time."""
    doctor = get_or_404(Doctor, doctor_id)
    start_date = parse_date(start_date, 'start_date')
    end_date = parse_date(end_date, 'end_date')
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date",
                              field='start_date', value=start_date)

    rows = (
        db.session.query(Appointment, Patient)
        .join(Patient, Appointment.patient_id == Patient.id)
        .filter(
            Appointment.doctor_id == doctor.id,
            Appointment.appointment_date.between(start_date, end_date),
        )
        .order_by(Appointment.appointment_date, Appointment.start_time)
        .all()
    )
    return [
        {
            'appointment_id': appt.id,
            'patient_name': patient.full_name,
            'appointment_date': format_date(appt.appointment_date),
            'start_time': format_time(appt.start_time),
            'end_time': format_time(appt.end_time),
            'status': appt.status.value,
            'reason_for_visit': appt.reason_for_visit,
        }
        for appt, patient in rows
    ]
