from clinic.extensions import db
from clinic.models.base import TimestampMixin, format_date


class MedicalRecord(TimestampMixin, db.Model):
    """Clinical findings for a patient visit.

    The record outlives the appointment it documents: deleting the
    appointment only clears ``appointment_id``.
    """
    __tablename__ = 'medical_records'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='RESTRICT'), nullable=False)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id', ondelete='SET NULL'))
    diagnosis = db.Column(db.Text)
    prescription = db.Column(db.Text)
    treatment_notes = db.Column(db.Text)
    vital_signs = db.Column(db.JSON)  # blood pressure, temperature, heart rate, etc.
    follow_up_date = db.Column(db.Date)

    patient = db.relationship('Patient', back_populates='medical_records')
    doctor = db.relationship('Doctor')
    appointment = db.relationship('Appointment', back_populates='medical_records')

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'appointment_id': self.appointment_id,
            'diagnosis': self.diagnosis,
            'prescription': self.prescription,
            'treatment_notes': self.treatment_notes,
            'vital_signs': self.vital_signs or {},
            'follow_up_date': format_date(self.follow_up_date),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
