"""Tests for the volunteer portal."""
from wristband import db
from wristband.models import User, Volunteer, VolunteerAssignment


def make_patient(email):
    user = User()
    user.email = email
    user.set_password('patient-password')
    db.session.add(user)
    db.session.commit()
    return user


class TestVolunteerAccounts:

    def test_signup_requires_name(self, client):
        response = client.post('/volunteer/signup', json={
            'email': 'helper@example.com', 'password': 'helper-password',
        })
        assert response.status_code == 400
        assert 'Name is required' in response.get_json()['error']

    def test_signup_and_login(self, client):
        response = client.post('/volunteer/signup', json={
            'name': 'Helen Helper', 'email': 'helper@example.com', 'password': 'helper-password',
        })
        assert response.status_code == 201
        assert response.get_json()['volunteer']['name'] == 'Helen Helper'

        volunteer = Volunteer.find_by_email('helper@example.com')
        assert volunteer.check_password('helper-password')
        assert volunteer.password_hash != 'helper-password'

        response = client.post('/volunteer/login', json={
            'email': 'helper@example.com', 'password': 'helper-password',
        })
        assert response.status_code == 200
        assert response.get_json()['token']

    def test_wrong_password_is_401(self, client, volunteer):
        response = client.post('/volunteer/login', json={
            'email': 'volunteer@example.com', 'password': 'not-the-password',
        })
        assert response.status_code == 401

    def test_deactivated_volunteer_cannot_login(self, client, volunteer):
        volunteer.is_active = False
        db.session.commit()
        response = client.post('/volunteer/login', json={
            'email': 'volunteer@example.com', 'password': 'battery-staple',
        })
        assert response.status_code == 403

    def test_patient_token_rejected(self, client, patient_headers):
        assert client.get('/volunteer/dashboard', headers=patient_headers).status_code == 401

    def test_logout(self, client, volunteer_headers):
        assert client.post('/volunteer/logout', headers=volunteer_headers, json={}).status_code == 200
        assert client.get('/volunteer/me', headers=volunteer_headers).status_code == 401


class TestVolunteerDashboard:

    def test_patients_sorted_most_severe_first(self, client, volunteer_headers, add_reading):
        add_reading('1', 'device-a', hr=80)
        add_reading('2', 'device-b', hr=95)
        add_reading('3', 'device-c', hr=80, spo2=90)
        # superseded by the newer reading above
        add_reading('3', 'device-c', hr=80, spo2=99, minutes_ago=30)

        response = client.get('/volunteer/dashboard', headers=volunteer_headers)
        assert response.status_code == 200
        body = response.get_json()

        assert [p['user_id'] for p in body['patients']] == ['3', '2', '1']
        assert [p['overall_status'] for p in body['patients']] == ['danger', 'moderate', 'normal']
        assert body['active_devices'] == 3
        assert body['analytics']['danger_count'] == 1
        assert body['analytics']['moderate_count'] == 1
        assert body['analytics']['normal_count'] == 1
        assert body['analytics']['total_patients'] == 3

    def test_empty_dashboard(self, client, volunteer_headers):
        body = client.get('/volunteer/dashboard', headers=volunteer_headers).get_json()
        assert body['patients'] == []
        assert body['analytics']['total_patients'] == 0
        assert body['analytics']['total_devices'] == 0


class TestAssignments:

    def test_assign_list_and_remove(self, client, volunteer_headers):
        patient = make_patient('assigned@example.com')

        response = client.post('/volunteer/assignments', headers=volunteer_headers,
                               json={'user_id': patient.id, 'notes': 'Morning check-ins'})
        assert response.status_code == 201
        assert response.get_json()['user_email'] == 'assigned@example.com'

        listed = client.get('/volunteer/assignments', headers=volunteer_headers).get_json()
        assert [a['user_id'] for a in listed] == [patient.id]

        response = client.delete(f'/volunteer/assignments/{patient.id}', headers=volunteer_headers)
        assert response.status_code == 200
        assert VolunteerAssignment.query.count() == 0

    def test_duplicate_assignment_conflicts(self, client, volunteer_headers):
        patient = make_patient('twice@example.com')
        payload = {'user_id': patient.id}
        assert client.post('/volunteer/assignments', headers=volunteer_headers,
                           json=payload).status_code == 201
        assert client.post('/volunteer/assignments', headers=volunteer_headers,
                           json=payload).status_code == 409

    def test_unknown_patient_is_404(self, client, volunteer_headers):
        response = client.post('/volunteer/assignments', headers=volunteer_headers,
                               json={'user_id': 9999})
        assert response.status_code == 404

    def test_bad_user_id_is_400(self, client, volunteer_headers):
        response = client.post('/volunteer/assignments', headers=volunteer_headers,
                               json={'user_id': 'abc'})
        assert response.status_code == 400

    def test_remove_missing_assignment_is_404(self, client, volunteer_headers):
        response = client.delete('/volunteer/assignments/4242', headers=volunteer_headers)
        assert response.status_code == 404
