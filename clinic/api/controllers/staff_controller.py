from flask import request, jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import directory_service, audit_service
from clinic.utils.errors import ValidationError


def create_staff():
    data = get_json_body()
    missing = missing_fields_response(data, ['first_name', 'last_name', 'email', 'role'])
    if missing:
        return missing

    staff = directory_service.create_staff(
        first_name=data['first_name'],
        last_name=data['last_name'],
        email=data['email'],
        role=data['role'],
        phone_number=data.get('phone_number'),
    )
    return jsonify({'message': 'Staff member created successfully', 'staff': staff.to_dict()}), 201


def get_staff(staff_id):
    return jsonify({'staff': directory_service.get_staff(staff_id).to_dict()}), 200


def get_audit_entries():
    record_id = request.args.get('record_id')
    if record_id is not None:
        try:
            record_id = int(record_id)
        except ValueError:
            raise ValidationError("record_id must be an integer", field='record_id', value=record_id)
    entries = audit_service.list_audit_entries(request.args.get('table_name'), record_id)
    return jsonify({'audit_log': [e.to_dict() for e in entries]}), 200
