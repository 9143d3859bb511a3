import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext
from django.urls import reverse

from core.models import Consultation
from core.services import consult as consult_svc

pytestmark = pytest.mark.django_db


def request(client, doctor):
    return client.post(reverse('consult-request', args=[doctor.id]), format='json')


def respond(client, patient, action):
    return client.post(reverse('consult-respond', args=[patient.id]), {'action': action}, format='json')


def test_request_makes_both_sides_pending(patient, doctor, client_for):
    r = request(client_for(patient), doctor)
    assert r.status_code == 200
    assert r.data['message'] == 'Consultation request sent to doctor.'
    assert patient.pending_ids == [doctor.id]
    assert doctor.pending_ids == [patient.id]
    assert patient.consulted_ids == [] and doctor.consulted_ids == []


def test_accept_moves_both_to_consulted(patient, doctor, client_for):
    request(client_for(patient), doctor)
    r = respond(client_for(doctor), patient, 'accept')
    assert r.status_code == 200
    assert r.data['message'] == 'Consultation accepted.'
    assert patient.consulted_ids == [doctor.id]
    assert doctor.consulted_ids == [patient.id]
    assert patient.pending_ids == [] and doctor.pending_ids == []
    assert consult_svc.is_consulting(doctor.id, patient.id)


def test_reject_returns_both_to_none(patient, doctor, client_for):
    request(client_for(patient), doctor)
    r = respond(client_for(doctor), patient, 'reject')
    assert r.status_code == 200
    assert r.data['message'] == 'Consultation rejected.'
    assert not Consultation.objects.exists()
    assert not consult_svc.is_consulting(doctor.id, patient.id)
    # the patient may ask again afterwards
    assert request(client_for(patient), doctor).status_code == 200


def test_reject_leaves_existing_consultation(patient, doctor, consulting, client_for):
    respond(client_for(doctor), patient, 'reject')
    assert consult_svc.is_consulting(doctor.id, patient.id)


def test_accept_is_idempotent(patient, doctor, consulting, client_for):
    assert respond(client_for(doctor), patient, 'accept').status_code == 200
    assert Consultation.objects.filter(status=Consultation.STATUS_CONSULTED).count() == 1


def test_duplicate_request_conflicts_without_state_change(patient, doctor, client_for):
    c = client_for(patient)
    request(c, doctor)
    before = list(Consultation.objects.values_list('id', 'status', 'created_at'))
    r = request(c, doctor)
    assert r.status_code == 409
    assert r.data['error'] == 'Consultation request already pending.'
    assert list(Consultation.objects.values_list('id', 'status', 'created_at')) == before


def test_request_to_consulted_doctor_conflicts(patient, doctor, consulting, client_for):
    r = request(client_for(patient), doctor)
    assert r.status_code == 409
    assert r.data['error'] == 'You are already consulting this doctor.'
    assert patient.pending_ids == []


def test_request_to_unknown_or_non_doctor_is_404(patient, other_patient, client_for):
    c = client_for(patient)
    assert c.post(reverse('consult-request', args=[99999])).status_code == 404
    r = request(c, other_patient)
    assert r.status_code == 404
    assert r.data['code'] == 'not_found'
    assert not Consultation.objects.exists()


def test_invalid_action_changes_nothing(patient, doctor, client_for):
    request(client_for(patient), doctor)
    with CaptureQueriesContext(connection) as ctx:
        r = respond(client_for(doctor), patient, 'maybe')
    assert r.status_code == 400
    assert r.data['error'] == 'Invalid action.'
    assert not any('UPDATE' in q['sql'] or 'DELETE' in q['sql'] or 'INSERT' in q['sql'] for q in ctx.captured_queries)
    assert doctor.pending_ids == [patient.id]


def test_respond_to_unknown_patient_is_404(doctor, other_doctor, client_for):
    c = client_for(doctor)
    r = c.post(reverse('consult-respond', args=[424242]), {'action': 'accept'}, format='json')
    assert r.status_code == 404
    assert respond(c, other_doctor, 'accept').status_code == 404
    assert not Consultation.objects.exists()


def test_pending_lists_oldest_first(patient, other_patient, doctor, client_for):
    request(client_for(patient), doctor)
    request(client_for(other_patient), doctor)
    r = client_for(doctor).get(reverse('consult-pending'))
    assert r.status_code == 200
    assert [p['id'] for p in r.data['data']] == [patient.id, other_patient.id]
    assert r.data['data'][0]['email'] == patient.email


def test_search_requires_query(patient, client_for):
    r = client_for(patient).get(reverse('consult-search-doctors'), {'query': '  '})
    assert r.status_code == 400
    assert r.data['code'] == 'invalid_argument'


def test_search_flags_follow_relation(patient, doctor, other_doctor, client_for):
    c = client_for(patient)
    r = c.get(reverse('consult-search-doctors'), {'query': 'cardio'})
    assert [d['id'] for d in r.data['data']] == [doctor.id]
    assert r.data['data'][0]['isConsulted'] is False
    assert r.data['data'][0]['isPending'] is False

    request(c, doctor)
    r = c.get(reverse('consult-search-doctors'), {'query': 'CARDIO'})
    assert r.data['data'][0]['isPending'] is True

    # name matches too
    r = c.get(reverse('consult-search-doctors'), {'query': 'sam'})
    assert [d['id'] for d in r.data['data']] == [other_doctor.id]


def test_my_doctors_and_my_patients(patient, other_patient, doctor, consulting, client_for):
    r = client_for(patient).get(reverse('consult-my-doctors'))
    assert r.status_code == 200
    assert r.data['data'] == [{'id': doctor.id, 'name': doctor.name, 'email': doctor.email,
                               'specialty': 'Cardiology'}]

    dc = client_for(doctor)
    r = dc.get(reverse('doctor-my-patients'))
    assert [p['id'] for p in r.data['data']] == [patient.id]
    assert r.data['data'][0]['consultingSince']
    assert dc.get(reverse('doctor-my-patients'), {'search': 'olive'}).data['data'] == []
    assert len(dc.get(reverse('doctor-my-patients'), {'search': 'PAT@'}).data['data']) == 1


def test_end_to_end_scenario(client_for, other_patient):
    from rest_framework.test import APIClient

    anon = APIClient()
    anon.post(reverse('auth-register'),
              {'name': 'P', 'email': 'p@x.io', 'password': 'Str0ng!Pass'}, format='json')
    anon.post(reverse('auth-register'),
              {'name': 'D', 'email': 'd@x.io', 'password': 'Str0ng!Pass', 'role': 'doctor',
               'specialty': 'Cardiology'}, format='json')

    def login(email):
        r = anon.post(reverse('auth-login'), {'email': email, 'password': 'Str0ng!Pass'}, format='json')
        assert r.status_code == 200
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
        return c, r.data['user']['id']

    p, p_id = login('p@x.io')
    d, d_id = login('d@x.io')

    found = p.get(reverse('consult-search-doctors'), {'query': 'cardio'}).data['data']
    assert [(x['id'], x['isConsulted'], x['isPending']) for x in found] == [(d_id, False, False)]

    assert p.post(reverse('consult-request', args=[d_id])).status_code == 200
    assert [x['id'] for x in d.get(reverse('consult-pending')).data['data']] == [p_id]

    assert d.post(reverse('consult-respond', args=[p_id]), {'action': 'accept'}, format='json').status_code == 200
    assert d.get(reverse('consult-pending')).data['data'] == []
    assert [x['id'] for x in p.get(reverse('consult-my-doctors')).data['data']] == [d_id]
    assert [x['id'] for x in d.get(reverse('doctor-my-patients')).data['data']] == [p_id]

    p.post(reverse('records-add'), {'bp': '120/80', 'sugar': '95', 'heartRate': '72'}, format='json')
    vitals = d.get(reverse('doctor-patient-vitals', args=[p_id]))
    assert vitals.status_code == 200
    assert vitals.data['data'][0]['bp'] == '120/80'

    assert d.get(reverse('doctor-patient-vitals', args=[other_patient.id])).status_code == 403
    other = client_for(other_patient)
    assert other.get(reverse('patient-notes', args=[p_id])).status_code == 403
    assert other.get(reverse('doctor-patient-vitals', args=[p_id])).status_code == 403
