from flask import request, jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import appointment_service, query_service
from clinic.utils.decorators import current_actor_id


def create_appointment():
    """Books an appointment after the availability and double-booking checks."""
    data = get_json_body()
    required = ['patient_id', 'doctor_id', 'location_id', 'appointment_date',
                'start_time', 'end_time', 'reason_for_visit']
    missing = missing_fields_response(data, required)
    if missing:
        return missing

    appointment = appointment_service.create_appointment(
        patient_id=data['patient_id'],
        doctor_id=data['doctor_id'],
        location_id=data['location_id'],
        appointment_date=data['appointment_date'],
        start_time=data['start_time'],
        end_time=data['end_time'],
        reason_for_visit=data['reason_for_visit'],
        priority=data.get('priority', 'routine'),
        symptoms=data.get('symptoms'),
        changed_by=current_actor_id(),
    )
    return jsonify({"message": "Appointment created successfully", "appointment": appointment.to_dict()}), 201


def get_appointment(appointment_id):
    appointment = appointment_service.get_appointment(appointment_id)
    return jsonify({"appointment": appointment.to_dict()}), 200


def get_upcoming_appointments():
    return jsonify({"appointments": query_service.upcoming_appointments(request.args.get('from_date'))}), 200


def update_appointment_status(appointment_id):
    data = get_json_body()
    missing = missing_fields_response(data, ['status'])
    if missing:
        return missing

    appointment = appointment_service.transition_appointment(
        appointment_id, data['status'], changed_by=current_actor_id(), reason=data.get('reason')
    )
    response = {"message": "Appointment status updated", "appointment": appointment.to_dict()}
    if appointment.bills:
        response["bill"] = appointment.bills[0].to_dict()
    return jsonify(response), 200


def cancel_appointment(appointment_id):
    data = get_json_body()
    missing = missing_fields_response(data, ['reason'])
    if missing:
        return missing

    appointment = appointment_service.cancel_appointment(
        appointment_id, data['reason'], changed_by=current_actor_id()
    )
    return jsonify({"message": "Appointment cancelled", "appointment": appointment.to_dict()}), 200
