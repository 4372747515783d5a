import enum
from datetime import datetime
from clinic.extensions import db
from clinic.models.base import TimestampMixin, enum_column, format_date, format_amount


class Gender(enum.Enum):
    MALE = 'Male'
    FEMALE = 'Female'
    OTHER = 'Other'


class BloodType(enum.Enum):
    A_POS = 'A+'
    A_NEG = 'A-'
    B_POS = 'B+'
    B_NEG = 'B-'
    AB_POS = 'AB+'
    AB_NEG = 'AB-'
    O_POS = 'O+'
    O_NEG = 'O-'


class StaffRole(enum.Enum):
    RECEPTIONIST = 'receptionist'
    NURSE = 'nurse'
    ADMINISTRATOR = 'administrator'
    TECHNICIAN = 'technician'


class Specialty(TimestampMixin, db.Model):
    """Medical specialty a doctor practices; optionally carries the consultation fee."""
    __tablename__ = 'specialties'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)
    consultation_fee = db.Column(db.Numeric(10, 2))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    doctors = db.relationship('Doctor', back_populates='specialty', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'consultation_fee': format_amount(self.consultation_fee),
            'is_active': self.is_active,
        }


class Doctor(TimestampMixin, db.Model):
    __tablename__ = 'doctors'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    phone_number = db.Column(db.String(15))
    license_number = db.Column(db.String(50), unique=True, nullable=False)
    specialty_id = db.Column(db.Integer, db.ForeignKey('specialties.id', ondelete='RESTRICT'), nullable=False, index=True)
    years_of_experience = db.Column(db.Integer)
    biography = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('years_of_experience >= 0', name='chk_experience_non_negative'),
    )

    specialty = db.relationship('Specialty', back_populates='doctors')
    schedule_slots = db.relationship('ScheduleSlot', back_populates='doctor', cascade='all, delete-orphan')
    appointments = db.relationship('Appointment', back_populates='doctor', lazy='dynamic')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone_number': self.phone_number,
            'license_number': self.license_number,
            'specialty_id': self.specialty_id,
            'specialty': self.specialty.name if self.specialty else None,
            'years_of_experience': self.years_of_experience,
            'biography': self.biography,
            'is_active': self.is_active,
        }


class Patient(TimestampMixin, db.Model):
    __tablename__ = 'patients'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False, index=True)
    phone_number = db.Column(db.String(15))
    date_of_birth = db.Column(db.Date, nullable=False)
    gender = enum_column(Gender, 'patient_gender', nullable=False)
    emergency_contact_name = db.Column(db.String(100))
    emergency_contact_phone = db.Column(db.String(15))
    blood_type = enum_column(BloodType, 'patient_blood_type')
    allergies = db.Column(db.Text)
    medical_conditions = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # The patient owns appointments, records and bills; removing the patient removes them.
    appointments = db.relationship('Appointment', back_populates='patient', cascade='all, delete-orphan')
    medical_records = db.relationship('MedicalRecord', back_populates='patient', cascade='all, delete-orphan')
    bills = db.relationship('Bill', back_populates='patient', cascade='all, delete-orphan')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone_number': self.phone_number,
            'date_of_birth': format_date(self.date_of_birth),
            'gender': self.gender.value if self.gender else None,
            'blood_type': self.blood_type.value if self.blood_type else None,
            'emergency_contact_name': self.emergency_contact_name,
            'emergency_contact_phone': self.emergency_contact_phone,
            'allergies': self.allergies,
            'medical_conditions': self.medical_conditions,
        }


class Location(TimestampMixin, db.Model):
    """A clinic site where doctors hold schedule slots."""
    __tablename__ = 'clinic_locations'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100), nullable=False)
    postal_code = db.Column(db.String(20), nullable=False)
    phone_number = db.Column(db.String(15))
    email = db.Column(db.String(100))
    operating_hours = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'postal_code': self.postal_code,
            'phone_number': self.phone_number,
            'email': self.email,
            'operating_hours': self.operating_hours,
            'is_active': self.is_active,
        }


class Staff(TimestampMixin, db.Model):
    """Receptionists, nurses and other non-physician staff; the actors of the audit trail."""
    __tablename__ = 'staff'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    phone_number = db.Column(db.String(15))
    role = enum_column(StaffRole, 'staff_role', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone_number': self.phone_number,
            'role': self.role.value,
            'is_active': self.is_active,
        }
