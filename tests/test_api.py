"""HTTP layer: request parsing, status codes and error payloads."""
from clinic.models.billing_models import Bill
from clinic.models.directory_models import Specialty, Doctor, Patient, Location
from tests.conftest import NEXT_MONDAY


def booking_payload(patient, doctor, location, start='09:30', end='10:00'):
    return {
        'patient_id': patient.id,
        'doctor_id': doctor.id,
        'location_id': location.id,
        'appointment_date': NEXT_MONDAY.isoformat(),
        'start_time': start,
        'end_time': end,
        'reason_for_visit': 'Annual checkup',
    }


class TestDirectoryApi:

    def test_register_patient(self, client, staff):
        response = client.post('/api/patients', headers={'X-Staff-Id': str(staff.id)}, json={
            'first_name': 'Mary', 'last_name': 'Smith', 'email': 'mary.smith@email.com',
            'date_of_birth': '1990-07-22', 'gender': 'Female', 'blood_type': 'A-',
        })
        assert response.status_code == 201
        assert response.get_json()['patient']['blood_type'] == 'A-'

    def test_missing_fields(self, client):
        response = client.post('/api/patients', json={'first_name': 'Mary'})
        assert response.status_code == 400
        assert 'email' in response.get_json()['fields']

    def test_validation_error_payload(self, client):
        response = client.post('/api/patients', json={
            'first_name': 'Mary', 'last_name': 'Smith', 'email': 'not-an-email',
            'date_of_birth': '1990-07-22', 'gender': 'Female',
        })
        body = response.get_json()
        assert response.status_code == 400
        assert body['type'] == 'validation_error'
        assert body['field'] == 'email'

    def test_bad_staff_header(self, client, patient):
        response = client.put(f'/api/patients/{patient.id}', headers={'X-Staff-Id': 'abc'},
                              json={'allergies': 'None'})
        assert response.status_code == 400

    def test_unknown_doctor_is_404(self, client):
        response = client.get('/api/doctors/999')
        assert response.status_code == 404
        assert response.get_json()['type'] == 'not_found'

    def test_list_specialties(self, client, specialty):
        response = client.get('/api/specialties')
        assert [s['name'] for s in response.get_json()['specialties']] == ['General Practice']


class TestAppointmentApi:

    def test_book_then_conflict(self, client, patient, doctor, location, monday_slot):
        payload = booking_payload(patient, doctor, location)
        assert client.post('/api/appointments', json=payload).status_code == 201

        response = client.post('/api/appointments', json=payload)
        assert response.status_code == 409
        assert response.get_json()['type'] == 'conflict'

    def test_no_availability(self, client, patient, doctor, location, monday_slot):
        response = client.post('/api/appointments',
                               json=booking_payload(patient, doctor, location, '13:00', '13:30'))
        assert response.status_code == 409
        assert response.get_json()['type'] == 'no_availability'

    def test_completion_returns_bill(self, client, patient, doctor, location, monday_slot):
        appointment_id = client.post('/api/appointments',
                                     json=booking_payload(patient, doctor, location)).get_json()['appointment']['id']
        for status in ('confirmed', 'in_progress'):
            client.post(f'/api/appointments/{appointment_id}/status', json={'status': status})

        response = client.post(f'/api/appointments/{appointment_id}/status', json={'status': 'completed'})
        body = response.get_json()
        assert response.status_code == 200
        assert body['bill']['total_amount'] == '150.00'
        assert body['bill']['patient_responsibility'] == '30.00'
        assert Bill.query.count() == 1

    def test_invalid_transition(self, client, patient, doctor, location, monday_slot):
        appointment_id = client.post('/api/appointments',
                                     json=booking_payload(patient, doctor, location)).get_json()['appointment']['id']
        response = client.post(f'/api/appointments/{appointment_id}/status', json={'status': 'completed'})
        assert response.status_code == 409
        assert response.get_json()['type'] == 'invalid_transition'

    def test_cancel(self, client, patient, doctor, location, monday_slot, staff):
        appointment_id = client.post('/api/appointments',
                                     json=booking_payload(patient, doctor, location)).get_json()['appointment']['id']
        response = client.post(f'/api/appointments/{appointment_id}/cancel',
                               headers={'X-Staff-Id': str(staff.id)}, json={'reason': 'Sick child'})
        assert response.status_code == 200
        assert response.get_json()['appointment']['status'] == 'cancelled'

        audit = client.get(f'/api/audit?table_name=appointments&record_id={appointment_id}').get_json()
        assert audit['audit_log'][-1]['new_values'] == {'status': 'cancelled', 'reason': 'Sick child'}
        assert audit['audit_log'][-1]['changed_by'] == staff.id

    def test_doctor_appointments_range(self, client, doctor):
        response = client.get(f'/api/doctors/{doctor.id}/appointments?start_date=2026-11-01&end_date=2026-10-01')
        assert response.status_code == 400

    def test_availability(self, client, monday_slot):
        response = client.get('/api/availability')
        assert response.get_json()['availability'][0]['schedule_id'] == monday_slot.id

    def test_availability_flag_given_as_string(self, client, monday_slot):
        response = client.patch(f'/api/schedules/{monday_slot.id}/availability', json={'is_available': 'false'})
        assert response.status_code == 400
        assert response.get_json()['field'] == 'is_available'

        response = client.patch(f'/api/schedules/{monday_slot.id}/availability', json={'is_available': False})
        assert response.get_json()['schedule']['is_available'] is False

    def test_schedule_delete(self, client, monday_slot):
        assert client.get(f'/api/schedules/{monday_slot.id}').status_code == 200
        assert client.delete(f'/api/schedules/{monday_slot.id}').status_code == 200
        assert client.get(f'/api/schedules/{monday_slot.id}').status_code == 404


class TestCli:

    def test_init_db_with_seed(self, app):
        result = app.test_cli_runner().invoke(args=['init-db', '--seed'])
        assert result.exit_code == 0
        assert Specialty.query.count() == 5
        assert Doctor.query.count() == 5
        assert Location.query.count() == 2
        assert Patient.query.count() == 3
