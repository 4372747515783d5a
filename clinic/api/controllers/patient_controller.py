from flask import jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import directory_service, records_service, billing_service
from clinic.utils.decorators import current_actor_id


def register_patient():
    data = get_json_body()
    required = ['first_name', 'last_name', 'email', 'date_of_birth', 'gender']
    missing = missing_fields_response(data, required)
    if missing:
        return missing

    details = {key: value for key, value in data.items() if key not in required}
    patient = directory_service.create_patient(
        first_name=data['first_name'],
        last_name=data['last_name'],
        email=data['email'],
        date_of_birth=data['date_of_birth'],
        gender=data['gender'],
        changed_by=current_actor_id(),
        **details
    )
    return jsonify({'message': 'Patient registered successfully', 'patient': patient.to_dict()}), 201


def get_patient(patient_id):
    return jsonify({'patient': directory_service.get_patient(patient_id).to_dict()}), 200


def update_patient(patient_id):
    patient = directory_service.update_patient(patient_id, get_json_body(), changed_by=current_actor_id())
    return jsonify({'message': 'Patient updated successfully', 'patient': patient.to_dict()}), 200


def delete_patient(patient_id):
    directory_service.delete_patient(patient_id, changed_by=current_actor_id())
    return jsonify({'message': 'Patient deleted successfully'}), 200


def get_patient_records(patient_id):
    records = records_service.list_patient_records(patient_id)
    return jsonify({'medical_records': [r.to_dict() for r in records]}), 200


def get_patient_bills(patient_id):
    directory_service.get_patient(patient_id)
    bills = billing_service.list_patient_bills(patient_id)
    return jsonify({'bills': [b.to_dict() for b in bills]}), 200
