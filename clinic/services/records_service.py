# /clinic/services/records_service.py
from flask import current_app

from clinic.extensions import db
from clinic.models.appointment_models import Appointment
from clinic.models.clinical_models import MedicalRecord
from clinic.models.directory_models import Doctor, Patient
from clinic.models.system_models import AuditAction
from clinic.services.audit_service import record_audit, resolve_actor
from clinic.utils.errors import ValidationError
from clinic.utils.lookups import get_or_404
from clinic.utils.transactions import atomic
from clinic.utils.validators import optional_text, parse_date


def create_medical_record(patient_id, doctor_id, appointment_id=None, diagnosis=None,
                          prescription=None, treatment_notes=None, vital_signs=None,
                          follow_up_date=None, changed_by=None):
    patient = get_or_404(Patient, patient_id, field='patient_id')
    doctor = get_or_404(Doctor, doctor_id, field='doctor_id')
    if appointment_id is not None:
        appointment = get_or_404(Appointment, appointment_id, field='appointment_id')
        if appointment.patient_id != patient.id:
            raise ValidationError("Appointment belongs to a different patient",
                                  entity='MedicalRecord', field='appointment_id', value=appointment_id)
    if vital_signs is not None and not isinstance(vital_signs, dict):
        raise ValidationError("vital_signs must be an object of measurements",
                              entity='MedicalRecord', field='vital_signs')
    actor_id = resolve_actor(changed_by)

    record = MedicalRecord(
        patient_id=patient.id,
        doctor_id=doctor.id,
        appointment_id=appointment_id,
        diagnosis=optional_text(diagnosis, 'diagnosis'),
        prescription=optional_text(prescription, 'prescription'),
        treatment_notes=optional_text(treatment_notes, 'treatment_notes'),
        vital_signs=vital_signs or {},
        follow_up_date=parse_date(follow_up_date, 'follow_up_date', entity='MedicalRecord', required=False),
    )
    with atomic():
        db.session.add(record)
        db.session.flush()
        record_audit('medical_records', record.id, AuditAction.INSERT,
                     new_values={'patient_id': patient.id, 'doctor_id': doctor.id,
                                 'appointment_id': appointment_id},
                     changed_by=actor_id)

    current_app.logger.info(f"Medical record {record.id} created for patient {patient.id}")
    return record


def list_patient_records(patient_id):
    patient = get_or_404(Patient, patient_id)
    return (
        MedicalRecord.query
        .filter_by(patient_id=patient.id)
        .order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
        .all()
    )
