# /clinic/api/routes.py

from . import api_bp
from clinic.extensions import limiter
from clinic.utils.decorators import audit_log
from .controllers import doctor_controller, patient_controller, schedule_controller, appointment_controller
from .controllers import records_controller, billing_controller, staff_controller


# --- Specialty Endpoints ---
@api_bp.route('/specialties', methods=['POST'])
@limiter.limit("30 per hour")
@audit_log("SPECIALTY_CREATE", "specialties")
def create_specialty():
    return doctor_controller.create_specialty()

@api_bp.route('/specialties', methods=['GET'])
def get_specialties():
    return doctor_controller.get_specialties()

@api_bp.route('/specialties/<int:specialty_id>', methods=['DELETE'])
@audit_log("SPECIALTY_DELETE", "specialties")
def delete_specialty(specialty_id):
    return doctor_controller.delete_specialty(specialty_id)


# --- Doctor Endpoints ---
@api_bp.route('/doctors', methods=['POST'])
@limiter.limit("10 per hour")
@audit_log("DOCTOR_REGISTRATION", "doctors")
def register_doctor():
    return doctor_controller.register_doctor()

@api_bp.route('/doctors/<int:doctor_id>', methods=['GET'])
@audit_log("VIEW_DOCTOR", "doctors")
def get_doctor(doctor_id):
    return doctor_controller.get_doctor(doctor_id)

@api_bp.route('/doctors/<int:doctor_id>', methods=['PUT'])
@audit_log("DOCTOR_UPDATE", "doctors")
def update_doctor(doctor_id):
    return doctor_controller.update_doctor(doctor_id)

@api_bp.route('/doctors/<int:doctor_id>', methods=['DELETE'])
@audit_log("DOCTOR_DELETE", "doctors")
def delete_doctor(doctor_id):
    return doctor_controller.delete_doctor(doctor_id)

@api_bp.route('/doctors/<int:doctor_id>/appointments', methods=['GET'])
@audit_log("VIEW_DOCTOR_APPOINTMENTS", "appointments")
def get_doctor_appointments(doctor_id):
    return doctor_controller.get_doctor_appointments(doctor_id)


# --- Patient Management Endpoints ---
@api_bp.route('/patients', methods=['POST'])
@limiter.limit("60 per hour")
@audit_log("PATIENT_REGISTRATION", "patients")
def register_patient():
    return patient_controller.register_patient()

@api_bp.route('/patients/<int:patient_id>', methods=['GET'])
@audit_log("VIEW_PATIENT", "patients")
def get_patient(patient_id):
    return patient_controller.get_patient(patient_id)

@api_bp.route('/patients/<int:patient_id>', methods=['PUT'])
@audit_log("PATIENT_UPDATE", "patients")
def update_patient(patient_id):
    return patient_controller.update_patient(patient_id)

@api_bp.route('/patients/<int:patient_id>', methods=['DELETE'])
@audit_log("PATIENT_DELETE", "patients")
def delete_patient(patient_id):
    return patient_controller.delete_patient(patient_id)

@api_bp.route('/patients/<int:patient_id>/medical-records', methods=['GET'])
@audit_log("VIEW_MEDICAL_RECORDS", "medical_records")
def get_patient_records(patient_id):
    return patient_controller.get_patient_records(patient_id)

@api_bp.route('/patients/<int:patient_id>/bills', methods=['GET'])
@audit_log("VIEW_PATIENT_BILLS", "billing")
def get_patient_bills(patient_id):
    return patient_controller.get_patient_bills(patient_id)


# --- Locations and Staff ---
@api_bp.route('/locations', methods=['POST'])
@audit_log("LOCATION_CREATE", "clinic_locations")
def create_location():
    return schedule_controller.create_location()

@api_bp.route('/locations/<int:location_id>', methods=['GET'])
def get_location(location_id):
    return schedule_controller.get_location(location_id)

@api_bp.route('/locations/<int:location_id>', methods=['DELETE'])
@audit_log("LOCATION_DELETE", "clinic_locations")
def delete_location(location_id):
    return schedule_controller.delete_location(location_id)

@api_bp.route('/staff', methods=['POST'])
@limiter.limit("10 per hour")
@audit_log("STAFF_CREATE", "staff")
def create_staff():
    return staff_controller.create_staff()

@api_bp.route('/staff/<int:staff_id>', methods=['GET'])
def get_staff(staff_id):
    return staff_controller.get_staff(staff_id)


# --- Schedule Endpoints ---
@api_bp.route('/schedules', methods=['POST'])
@audit_log("SCHEDULE_CREATE", "doctor_schedule")
def create_schedule_slot():
    return schedule_controller.create_schedule_slot()

@api_bp.route('/schedules/<int:slot_id>', methods=['GET'])
def get_schedule_slot(slot_id):
    return schedule_controller.get_schedule_slot(slot_id)

@api_bp.route('/schedules/<int:slot_id>', methods=['DELETE'])
@audit_log("SCHEDULE_DELETE", "doctor_schedule")
def delete_schedule_slot(slot_id):
    return schedule_controller.delete_schedule_slot(slot_id)

@api_bp.route('/schedules/<int:slot_id>/availability', methods=['PATCH'])
@audit_log("SCHEDULE_AVAILABILITY", "doctor_schedule")
def set_slot_availability(slot_id):
    return schedule_controller.set_slot_availability(slot_id)

@api_bp.route('/availability', methods=['GET'])
def get_doctor_availability():
    return schedule_controller.get_doctor_availability()


# --- Appointment Endpoints ---
@api_bp.route('/appointments', methods=['POST'])
@limiter.limit("60 per hour")
@audit_log("APPOINTMENT_CREATE", "appointments")
def create_appointment():
    return appointment_controller.create_appointment()

@api_bp.route('/appointments/upcoming', methods=['GET'])
@audit_log("VIEW_UPCOMING_APPOINTMENTS", "appointments")
def get_upcoming_appointments():
    return appointment_controller.get_upcoming_appointments()

@api_bp.route('/appointments/<int:appointment_id>', methods=['GET'])
@audit_log("VIEW_APPOINTMENT", "appointments")
def get_appointment(appointment_id):
    return appointment_controller.get_appointment(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>/status', methods=['POST'])
@audit_log("APPOINTMENT_STATUS_UPDATE", "appointments")
def update_appointment_status(appointment_id):
    return appointment_controller.update_appointment_status(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>/cancel', methods=['POST'])
@audit_log("APPOINTMENT_CANCEL", "appointments")
def cancel_appointment(appointment_id):
    return appointment_controller.cancel_appointment(appointment_id)


# --- Medical Records ---
@api_bp.route('/medical-records', methods=['POST'])
@audit_log("MEDICAL_RECORD_CREATE", "medical_records")
def create_medical_record():
    return records_controller.create_medical_record()


# --- Billing Endpoints ---
@api_bp.route('/bills/<int:bill_id>', methods=['GET'])
@audit_log("VIEW_BILL", "billing")
def get_bill(bill_id):
    return billing_controller.get_bill(bill_id)

@api_bp.route('/bills/<int:bill_id>/payments', methods=['POST'])
@limiter.limit("30 per minute")
@audit_log("PAYMENT_CREATE", "payments")
def record_payment(bill_id):
    return billing_controller.record_payment(bill_id)

@api_bp.route('/bills/<int:bill_id>/insurance-processing', methods=['POST'])
@audit_log("BILL_INSURANCE_PROCESSING", "billing")
def mark_insurance_processing(bill_id):
    return billing_controller.mark_insurance_processing(bill_id)

@api_bp.route('/payments/<int:payment_id>/refund', methods=['POST'])
@audit_log("PAYMENT_REFUND", "payments")
def refund_payment(payment_id):
    return billing_controller.refund_payment(payment_id)


# --- Audit Trail ---
@api_bp.route('/audit', methods=['GET'])
@audit_log("VIEW_AUDIT_LOG", "audit_log")
def get_audit_entries():
    return staff_controller.get_audit_entries()
