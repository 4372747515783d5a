# /clinic/services/directory_service.py
"""Specialties, doctors, patients, locations and staff."""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from clinic.extensions import db
from clinic.models.directory_models import (
    Specialty, Doctor, Patient, Location, Staff, Gender, BloodType, StaffRole
)
from clinic.models.appointment_models import Appointment
from clinic.models.clinical_models import MedicalRecord
from clinic.models.schedule_models import ScheduleSlot
from clinic.models.system_models import AuditAction
from clinic.services.audit_service import record_audit, resolve_actor
from clinic.utils import clock
from clinic.utils.errors import ValidationError, ConflictError
from clinic.utils.lookups import get_or_404
from clinic.utils.transactions import atomic
from clinic.utils.validators import (
    require_text, optional_text, validate_email, validate_int_range, validate_amount,
    parse_date, parse_enum, parse_bool, years_before
)


def _ensure_unique(model, field, value, entity, exclude_id=None):
    query = model.query.filter(getattr(model, field) == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first():
        raise ConflictError(f"{entity} with this {field} already exists",
                            entity=entity, field=field, value=value)


def _commit_new(instance, entity):
    """Persists a new row, turning a uniqueness race into ConflictError."""
    try:
        with atomic():
            db.session.add(instance)
    except IntegrityError as exc:
        raise ConflictError(f"{entity} violates a uniqueness rule", entity=entity) from exc
    current_app.logger.info(f"{entity} {instance.id} created")
    return instance


# --- Specialties ---

def create_specialty(name, description=None, consultation_fee=None, is_active=True):
    name = require_text(name, 'name', entity='Specialty', max_length=100)
    _ensure_unique(Specialty, 'name', name, 'Specialty')
    fee = None
    if consultation_fee is not None:
        fee = validate_amount(consultation_fee, 'consultation_fee', entity='Specialty')
    specialty = Specialty(
        name=name,
        description=optional_text(description, 'description'),
        consultation_fee=fee,
        is_active=parse_bool(is_active, 'is_active', entity='Specialty'),
    )
    return _commit_new(specialty, 'Specialty')


def list_specialties(active_only=False):
    query = Specialty.query
    if active_only:
        query = query.filter_by(is_active=True)
    return query.order_by(Specialty.name).all()


def delete_specialty(specialty_id):
    specialty = get_or_404(Specialty, specialty_id)
    if specialty.doctors.first() is not None:
        raise ConflictError("Specialty is still assigned to doctors",
                            entity='Specialty', value=specialty_id)
    with atomic():
        db.session.delete(specialty)
    current_app.logger.info(f"Specialty {specialty_id} deleted")


# --- Doctors ---

DOCTOR_UPDATABLE_FIELDS = ('first_name', 'last_name', 'phone_number', 'specialty_id',
                           'years_of_experience', 'biography', 'is_active')


def create_doctor(first_name, last_name, email, license_number, specialty_id,
                  phone_number=None, years_of_experience=None, biography=None):
    specialty = get_or_404(Specialty, specialty_id, field='specialty_id')
    doctor = Doctor(
        specialty_id=specialty.id,
        first_name=require_text(first_name, 'first_name', entity='Doctor', max_length=50),
        last_name=require_text(last_name, 'last_name', entity='Doctor', max_length=50),
        email=validate_email(email, entity='Doctor'),
        license_number=require_text(license_number, 'license_number', entity='Doctor', max_length=50),
        phone_number=optional_text(phone_number, 'phone_number', max_length=15),
        years_of_experience=validate_int_range(years_of_experience, 'years_of_experience',
                                               minimum=0, entity='Doctor', required=False),
        biography=optional_text(biography, 'biography'),
    )
    _ensure_unique(Doctor, 'email', doctor.email, 'Doctor')
    _ensure_unique(Doctor, 'license_number', doctor.license_number, 'Doctor')
    return _commit_new(doctor, 'Doctor')


def get_doctor(doctor_id):
    return get_or_404(Doctor, doctor_id)


def update_doctor(doctor_id, changes):
    doctor = get_or_404(Doctor, doctor_id)
    unknown = set(changes) - set(DOCTOR_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                              entity='Doctor', field=sorted(unknown)[0])

    cleaned = {}
    for key, value in changes.items():
        if key in ('first_name', 'last_name'):
            value = require_text(value, key, entity='Doctor', max_length=50)
        elif key == 'phone_number':
            value = optional_text(value, key, max_length=15)
        elif key == 'years_of_experience':
            value = validate_int_range(value, key, minimum=0, entity='Doctor', required=False)
        elif key == 'specialty_id':
            value = get_or_404(Specialty, value, field='specialty_id').id
        elif key == 'biography':
            value = optional_text(value, key)
        elif key == 'is_active':
            value = parse_bool(value, key, entity='Doctor')
        cleaned[key] = value

    with atomic():
        for key, value in cleaned.items():
            setattr(doctor, key, value)
    current_app.logger.info(f"Doctor {doctor_id} updated: {sorted(changes)}")
    return doctor


def delete_doctor(doctor_id):
    """Removes a doctor who has no appointments or records; schedule slots go with them."""
    doctor = get_or_404(Doctor, doctor_id)
    if doctor.appointments.first() is not None:
        raise ConflictError("Doctor has appointments and cannot be deleted",
                            entity='Doctor', value=doctor_id)
    if MedicalRecord.query.filter_by(doctor_id=doctor.id).first():
        raise ConflictError("Doctor has medical records and cannot be deleted",
                            entity='Doctor', value=doctor_id)
    with atomic():
        db.session.delete(doctor)
    current_app.logger.info(f"Doctor {doctor_id} deleted")


# --- Patients ---

PATIENT_UPDATABLE_FIELDS = ('first_name', 'last_name', 'email', 'phone_number', 'date_of_birth',
                            'gender', 'blood_type', 'emergency_contact_name',
                            'emergency_contact_phone', 'allergies', 'medical_conditions')


def _validate_date_of_birth(value):
    date_of_birth = parse_date(value, 'date_of_birth', entity='Patient')
    if date_of_birth > years_before(clock.today(), 1):
        raise ValidationError("date_of_birth must be at least one year in the past",
                              entity='Patient', field='date_of_birth', value=date_of_birth)
    return date_of_birth


def _clean_patient_field(key, value):
    if key in ('first_name', 'last_name'):
        return require_text(value, key, entity='Patient', max_length=50)
    if key == 'email':
        return validate_email(value, entity='Patient')
    if key == 'date_of_birth':
        return _validate_date_of_birth(value)
    if key == 'gender':
        return parse_enum(Gender, value, 'gender', entity='Patient')
    if key == 'blood_type':
        return parse_enum(BloodType, value, 'blood_type', entity='Patient') if value is not None else None
    if key in ('phone_number', 'emergency_contact_phone'):
        return optional_text(value, key, max_length=15)
    if key == 'emergency_contact_name':
        return optional_text(value, key, max_length=100)
    return optional_text(value, key)


def create_patient(first_name, last_name, email, date_of_birth, gender, changed_by=None, **details):
    unknown = set(details) - set(PATIENT_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown patient fields: {', '.join(sorted(unknown))}",
                              entity='Patient', field=sorted(unknown)[0])
    fields = dict(details, first_name=first_name, last_name=last_name, email=email,
                  date_of_birth=date_of_birth, gender=gender)
    patient = Patient(**{key: _clean_patient_field(key, value) for key, value in fields.items()})
    _ensure_unique(Patient, 'email', patient.email, 'Patient')
    actor_id = resolve_actor(changed_by)

    try:
        with atomic():
            db.session.add(patient)
            db.session.flush()
            record_audit('patients', patient.id, AuditAction.INSERT,
                         new_values=patient.to_dict(), changed_by=actor_id)
    except IntegrityError as exc:
        raise ConflictError("Patient with this email already exists",
                            entity='Patient', field='email', value=patient.email) from exc

    current_app.logger.info(f"Patient {patient.id} registered")
    return patient


def get_patient(patient_id):
    return get_or_404(Patient, patient_id)


def update_patient(patient_id, changes, changed_by=None):
    patient = get_or_404(Patient, patient_id)
    unknown = set(changes) - set(PATIENT_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                              entity='Patient', field=sorted(unknown)[0])
    cleaned = {key: _clean_patient_field(key, value) for key, value in changes.items()}
    if 'email' in cleaned:
        _ensure_unique(Patient, 'email', cleaned['email'], 'Patient', exclude_id=patient.id)
    actor_id = resolve_actor(changed_by)

    before = patient.to_dict()
    for key, value in cleaned.items():
        setattr(patient, key, value)
    after = patient.to_dict()
    changed = [key for key in cleaned if before.get(key) != after.get(key)]

    try:
        with atomic():
            if changed:
                record_audit('patients', patient.id, AuditAction.UPDATE,
                             old_values={key: before[key] for key in changed},
                             new_values={key: after[key] for key in changed},
                             changed_by=actor_id)
    except IntegrityError as exc:
        raise ConflictError("Patient with this email already exists",
                            entity='Patient', field='email') from exc
    return patient


def delete_patient(patient_id, changed_by=None):
    """Removes a patient together with their appointments, records and bills."""
    patient = get_or_404(Patient, patient_id)
    actor_id = resolve_actor(changed_by)
    snapshot = patient.to_dict()
    appointments = [(appt.id, appt.to_dict()) for appt in patient.appointments]

    with atomic():
        for appointment_id, appointment_snapshot in appointments:
            record_audit('appointments', appointment_id, AuditAction.DELETE,
                         old_values=appointment_snapshot, changed_by=actor_id)
        db.session.delete(patient)
        record_audit('patients', patient_id, AuditAction.DELETE,
                     old_values=snapshot, changed_by=actor_id)

    current_app.logger.info(
        f"Patient {patient_id} deleted with {len(appointments)} appointment(s)"
    )


# --- Locations ---

def create_location(name, address, city, state, postal_code, phone_number=None,
                    email=None, operating_hours=None, is_active=True):
    location = Location(
        name=require_text(name, 'name', entity='Location', max_length=100),
        address=require_text(address, 'address', entity='Location', max_length=255),
        city=require_text(city, 'city', entity='Location', max_length=100),
        state=require_text(state, 'state', entity='Location', max_length=100),
        postal_code=require_text(postal_code, 'postal_code', entity='Location', max_length=20),
        phone_number=optional_text(phone_number, 'phone_number', max_length=15),
        email=validate_email(email, entity='Location') if email else None,
        operating_hours=optional_text(operating_hours, 'operating_hours'),
        is_active=parse_bool(is_active, 'is_active', entity='Location'),
    )
    return _commit_new(location, 'Location')


def get_location(location_id):
    return get_or_404(Location, location_id)


def delete_location(location_id):
    location = get_or_404(Location, location_id)
    in_use = (
        Appointment.query.filter_by(location_id=location.id).first()
        or ScheduleSlot.query.filter_by(location_id=location.id).first()
    )
    if in_use:
        raise ConflictError("Location is referenced by schedules or appointments",
                            entity='Location', value=location_id)
    with atomic():
        db.session.delete(location)
    current_app.logger.info(f"Location {location_id} deleted")


# --- Staff ---

def create_staff(first_name, last_name, email, role, phone_number=None):
    staff = Staff(
        first_name=require_text(first_name, 'first_name', entity='Staff', max_length=50),
        last_name=require_text(last_name, 'last_name', entity='Staff', max_length=50),
        email=validate_email(email, entity='Staff'),
        role=parse_enum(StaffRole, role, 'role', entity='Staff'),
        phone_number=optional_text(phone_number, 'phone_number', max_length=15),
    )
    _ensure_unique(Staff, 'email', staff.email, 'Staff')
    return _commit_new(staff, 'Staff')


def get_staff(staff_id):
    return get_or_404(Staff, staff_id)
