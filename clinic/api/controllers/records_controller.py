from flask import jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import records_service
from clinic.utils.decorators import current_actor_id


def create_medical_record():
    data = get_json_body()
    missing = missing_fields_response(data, ['patient_id', 'doctor_id'])
    if missing:
        return missing

    record = records_service.create_medical_record(
        patient_id=data['patient_id'],
        doctor_id=data['doctor_id'],
        appointment_id=data.get('appointment_id'),
        diagnosis=data.get('diagnosis'),
        prescription=data.get('prescription'),
        treatment_notes=data.get('treatment_notes'),
        vital_signs=data.get('vital_signs'),
        follow_up_date=data.get('follow_up_date'),
        changed_by=current_actor_id(),
    )
    return jsonify({'message': 'Medical record created successfully', 'medical_record': record.to_dict()}), 201
