import enum
from clinic.extensions import db
from clinic.models.base import TimestampMixin, enum_column, format_date, format_time


class DayOfWeek(enum.Enum):
    MONDAY = 'Monday'
    TUESDAY = 'Tuesday'
    WEDNESDAY = 'Wednesday'
    THURSDAY = 'Thursday'
    FRIDAY = 'Friday'
    SATURDAY = 'Saturday'
    SUNDAY = 'Sunday'

    @classmethod
    def from_date(cls, value):
        # Members are declared in date.weekday() order
        return list(cls)[value.weekday()]


class ScheduleSlot(TimestampMixin, db.Model):
    """A recurring weekly availability window for a doctor at a location."""
    __tablename__ = 'doctor_schedule'

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False, index=True)
    location_id = db.Column(db.Integer, db.ForeignKey('clinic_locations.id', ondelete='RESTRICT'), nullable=False)
    day_of_week = enum_column(DayOfWeek, 'schedule_day_of_week', nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    appointment_duration = db.Column(db.Integer, nullable=False, default=30)  # minutes
    max_patients_per_day = db.Column(db.Integer, nullable=False, default=20)
    is_available = db.Column(db.Boolean, default=True, nullable=False, index=True)
    effective_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date)

    __table_args__ = (
        db.CheckConstraint('start_time < end_time', name='chk_time_valid'),
        db.CheckConstraint('appointment_duration BETWEEN 15 AND 120', name='chk_duration_valid'),
        db.CheckConstraint('max_patients_per_day BETWEEN 1 AND 100', name='chk_max_patients_valid'),
        db.UniqueConstraint('doctor_id', 'location_id', 'day_of_week', 'effective_date', name='uq_doctor_schedule'),
    )

    doctor = db.relationship('Doctor', back_populates='schedule_slots')
    location = db.relationship('Location')
    appointments = db.relationship('Appointment', back_populates='schedule_slot', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'doctor_id': self.doctor_id,
            'location_id': self.location_id,
            'day_of_week': self.day_of_week.value,
            'start_time': format_time(self.start_time),
            'end_time': format_time(self.end_time),
            'appointment_duration': self.appointment_duration,
            'max_patients_per_day': self.max_patients_per_day,
            'is_available': self.is_available,
            'effective_date': format_date(self.effective_date),
            'end_date': format_date(self.end_date),
        }
