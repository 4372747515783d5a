import click
from datetime import date
from flask.cli import with_appcontext
from clinic.extensions import db
from clinic.models.directory_models import Specialty, Doctor, Patient, Location, Gender, BloodType

SAMPLE_SPECIALTIES = [
    {'name': 'Cardiology', 'description': 'Heart and cardiovascular system specialists'},
    {'name': 'Dermatology', 'description': 'Skin, hair, and nail specialists'},
    {'name': 'Pediatrics', 'description': 'Medical care for infants, children, and adolescents'},
    {'name': 'Orthopedics', 'description': 'Bones, joints, and musculoskeletal system specialists'},
    {'name': 'General Practice', 'description': 'Primary care and general medical services'},
]

# specialty is matched by name
SAMPLE_DOCTORS = [
    {'first_name': 'Sarah', 'last_name': 'Johnson', 'email': 's.johnson@clinic.com', 'phone_number': '555-0101',
     'license_number': 'MED123456', 'specialty': 'Cardiology', 'years_of_experience': 12},
    {'first_name': 'Michael', 'last_name': 'Chen', 'email': 'm.chen@clinic.com', 'phone_number': '555-0102',
     'license_number': 'MED123457', 'specialty': 'Dermatology', 'years_of_experience': 8},
    {'first_name': 'Emily', 'last_name': 'Rodriguez', 'email': 'e.rodriguez@clinic.com', 'phone_number': '555-0103',
     'license_number': 'MED123458', 'specialty': 'Pediatrics', 'years_of_experience': 15},
    {'first_name': 'David', 'last_name': 'Kim', 'email': 'd.kim@clinic.com', 'phone_number': '555-0104',
     'license_number': 'MED123459', 'specialty': 'Orthopedics', 'years_of_experience': 10},
    {'first_name': 'Jennifer', 'last_name': 'Wilson', 'email': 'j.wilson@clinic.com', 'phone_number': '555-0105',
     'license_number': 'MED123460', 'specialty': 'General Practice', 'years_of_experience': 20},
]

SAMPLE_LOCATIONS = [
    {'name': 'Main Clinic', 'address': '123 Healthcare Ave', 'city': 'Springfield', 'state': 'IL',
     'postal_code': '62701', 'phone_number': '555-0200', 'email': 'main@clinic.com',
     'operating_hours': 'Mon-Fri: 8:00 AM - 6:00 PM, Sat: 9:00 AM - 2:00 PM'},
    {'name': 'Westside Branch', 'address': '456 Medical Blvd', 'city': 'Springfield', 'state': 'IL',
     'postal_code': '62702', 'phone_number': '555-0201', 'email': 'west@clinic.com',
     'operating_hours': 'Mon-Fri: 9:00 AM - 5:00 PM'},
]

SAMPLE_PATIENTS = [
    {'first_name': 'John', 'last_name': 'Doe', 'email': 'john.doe@email.com', 'phone_number': '555-0301',
     'date_of_birth': date(1985, 3, 15), 'gender': Gender.MALE, 'emergency_contact_name': 'Jane Doe',
     'emergency_contact_phone': '555-0302', 'blood_type': BloodType.O_POS, 'allergies': 'Penicillin'},
    {'first_name': 'Mary', 'last_name': 'Smith', 'email': 'mary.smith@email.com', 'phone_number': '555-0303',
     'date_of_birth': date(1990, 7, 22), 'gender': Gender.FEMALE, 'emergency_contact_name': 'John Smith',
     'emergency_contact_phone': '555-0304', 'blood_type': BloodType.A_NEG, 'allergies': 'Shellfish, Latex'},
    {'first_name': 'Robert', 'last_name': 'Brown', 'email': 'robert.b@email.com', 'phone_number': '555-0305',
     'date_of_birth': date(1978, 11, 30), 'gender': Gender.MALE, 'emergency_contact_name': 'Susan Brown',
     'emergency_contact_phone': '555-0306', 'blood_type': BloodType.B_POS, 'allergies': 'None'},
]


def seed_sample_data():
    """Loads the reference specialties, doctors, locations and patients. Existing rows are skipped."""
    for specialty_data in SAMPLE_SPECIALTIES:
        if not Specialty.query.filter_by(name=specialty_data['name']).first():
            db.session.add(Specialty(**specialty_data))
    db.session.commit()

    for doctor_data in SAMPLE_DOCTORS:
        if Doctor.query.filter_by(email=doctor_data['email']).first():
            continue
        fields = dict(doctor_data)
        specialty = Specialty.query.filter_by(name=fields.pop('specialty')).first()
        db.session.add(Doctor(specialty_id=specialty.id, **fields))

    for location_data in SAMPLE_LOCATIONS:
        if not Location.query.filter_by(name=location_data['name']).first():
            db.session.add(Location(**location_data))

    for patient_data in SAMPLE_PATIENTS:
        if not Patient.query.filter_by(email=patient_data['email']).first():
            db.session.add(Patient(**patient_data))
    db.session.commit()


@click.command('init-db')
@click.option('--seed', is_flag=True, help='Load the sample clinic data after creating tables.')
@with_appcontext
def init_db_command(seed):
    """Create all clinic tables, optionally with sample data."""
    db.create_all()
    click.echo("Database tables created.")

    if seed:
        seed_sample_data()
        click.echo("Sample specialties, doctors, locations and patients loaded.")


def register_commands(app):
    app.cli.add_command(init_db_command)
