from flask import request, jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import directory_service, schedule_service, query_service


def create_location():
    data = get_json_body()
    required = ['name', 'address', 'city', 'state', 'postal_code']
    missing = missing_fields_response(data, required)
    if missing:
        return missing

    location = directory_service.create_location(
        name=data['name'],
        address=data['address'],
        city=data['city'],
        state=data['state'],
        postal_code=data['postal_code'],
        phone_number=data.get('phone_number'),
        email=data.get('email'),
        operating_hours=data.get('operating_hours'),
        is_active=data.get('is_active', True),
    )
    return jsonify({'message': 'Location created successfully', 'location': location.to_dict()}), 201


def get_location(location_id):
    return jsonify({'location': directory_service.get_location(location_id).to_dict()}), 200


def create_schedule_slot():
    data = get_json_body()
    required = ['doctor_id', 'location_id', 'day_of_week', 'start_time', 'end_time', 'effective_date']
    missing = missing_fields_response(data, required)
    if missing:
        return missing

    slot = schedule_service.create_schedule_slot(
        doctor_id=data['doctor_id'],
        location_id=data['location_id'],
        day_of_week=data['day_of_week'],
        start_time=data['start_time'],
        end_time=data['end_time'],
        effective_date=data['effective_date'],
        end_date=data.get('end_date'),
        appointment_duration=data.get('appointment_duration', 30),
        max_patients_per_day=data.get('max_patients_per_day', 20),
        is_available=data.get('is_available', True),
    )
    return jsonify({'message': 'Schedule created successfully', 'schedule': slot.to_dict()}), 201


def set_slot_availability(slot_id):
    data = get_json_body()
    missing = missing_fields_response(data, ['is_available'])
    if missing:
        return missing
    slot = schedule_service.set_slot_availability(slot_id, data['is_available'])
    return jsonify({'schedule': slot.to_dict()}), 200


def get_doctor_availability():
    slots = query_service.doctor_availability(request.args.get('date'))
    return jsonify({'availability': slots}), 200


def delete_location(location_id):
    directory_service.delete_location(location_id)
    return jsonify({'message': 'Location deleted successfully'}), 200


def get_schedule_slot(slot_id):
    return jsonify({'schedule': schedule_service.get_schedule_slot(slot_id).to_dict()}), 200


def delete_schedule_slot(slot_id):
    schedule_service.delete_schedule_slot(slot_id)
    return jsonify({'message': 'Schedule deleted successfully'}), 200
