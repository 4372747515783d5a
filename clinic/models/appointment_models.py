import enum
from datetime import datetime
from clinic.extensions import db
from clinic.models.base import TimestampMixin, enum_column, format_date, format_time


class AppointmentStatus(enum.Enum):
    SCHEDULED = 'scheduled'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'


class AppointmentPriority(enum.Enum):
    ROUTINE = 'routine'
    URGENT = 'urgent'
    EMERGENCY = 'emergency'


# Allowed status changes. Statuses missing from the keys are terminal.
ALLOWED_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.IN_PROGRESS: {
        AppointmentStatus.COMPLETED,
    },
}


class Appointment(TimestampMixin, db.Model):
    """Model for storing a scheduled encounter between a patient and a doctor."""
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)

    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='RESTRICT'), nullable=False, index=True)
    location_id = db.Column(db.Integer, db.ForeignKey('clinic_locations.id', ondelete='RESTRICT'), nullable=False)
    schedule_id = db.Column(db.Integer, db.ForeignKey('doctor_schedule.id', ondelete='RESTRICT'), nullable=False)

    # Appointment details
    appointment_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    status = enum_column(AppointmentStatus, 'appointment_status', nullable=False,
                         default=AppointmentStatus.SCHEDULED, index=True)
    reason_for_visit = db.Column(db.Text, nullable=False)
    symptoms = db.Column(db.Text)
    priority = enum_column(AppointmentPriority, 'appointment_priority', nullable=False,
                           default=AppointmentPriority.ROUTINE)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('start_time < end_time', name='chk_appointment_time_valid'),
        # A cancelled booking releases its time slot
        db.Index(
            'uq_doctor_timeslot', 'doctor_id', 'appointment_date', 'start_time',
            unique=True,
            postgresql_where=db.text("status <> 'cancelled'"),
            sqlite_where=db.text("status <> 'cancelled'"),
        ),
    )

    patient = db.relationship('Patient', back_populates='appointments')
    doctor = db.relationship('Doctor', back_populates='appointments')
    location = db.relationship('Location')
    schedule_slot = db.relationship('ScheduleSlot', back_populates='appointments')
    medical_records = db.relationship('MedicalRecord', back_populates='appointment')
    bills = db.relationship('Bill', back_populates='appointment')

    def can_transition_to(self, new_status):
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'location_id': self.location_id,
            'schedule_id': self.schedule_id,
            'appointment_date': format_date(self.appointment_date),
            'start_time': format_time(self.start_time),
            'end_time': format_time(self.end_time),
            'status': self.status.value,
            'priority': self.priority.value,
            'reason_for_visit': self.reason_for_visit,
            'symptoms': self.symptoms,
        }
