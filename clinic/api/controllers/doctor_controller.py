from flask import request, jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import directory_service, query_service


def create_specialty():
    data = get_json_body()
    missing = missing_fields_response(data, ['name'])
    if missing:
        return missing

    specialty = directory_service.create_specialty(
        name=data['name'],
        description=data.get('description'),
        consultation_fee=data.get('consultation_fee'),
        is_active=data.get('is_active', True),
    )
    return jsonify({'message': 'Specialty created successfully', 'specialty': specialty.to_dict()}), 201


def get_specialties():
    active_only = request.args.get('active') in ('1', 'true', 'yes')
    specialties = directory_service.list_specialties(active_only=active_only)
    return jsonify({'specialties': [s.to_dict() for s in specialties]}), 200


def delete_specialty(specialty_id):
    directory_service.delete_specialty(specialty_id)
    return jsonify({'message': 'Specialty deleted successfully'}), 200


def register_doctor():
    data = get_json_body()
    required = ['first_name', 'last_name', 'email', 'license_number', 'specialty_id']
    missing = missing_fields_response(data, required)
    if missing:
        return missing

    doctor = directory_service.create_doctor(
        first_name=data['first_name'],
        last_name=data['last_name'],
        email=data['email'],
        license_number=data['license_number'],
        specialty_id=data['specialty_id'],
        phone_number=data.get('phone_number'),
        years_of_experience=data.get('years_of_experience'),
        biography=data.get('biography'),
    )
    return jsonify({'message': 'Doctor registered successfully', 'doctor': doctor.to_dict()}), 201


def get_doctor(doctor_id):
    return jsonify({'doctor': directory_service.get_doctor(doctor_id).to_dict()}), 200


def update_doctor(doctor_id):
    doctor = directory_service.update_doctor(doctor_id, get_json_body())
    return jsonify({'message': 'Doctor updated successfully', 'doctor': doctor.to_dict()}), 200


def delete_doctor(doctor_id):
    directory_service.delete_doctor(doctor_id)
    return jsonify({'message': 'Doctor deleted successfully'}), 200


def get_doctor_appointments(doctor_id):
    """Appointments for a doctor between start_date and end_date query parameters."""
    appointments = query_service.get_doctor_appointments(
        doctor_id,
        request.args.get('start_date'),
        request.args.get('end_date'),
    )
    return jsonify({'appointments': appointments}), 200
