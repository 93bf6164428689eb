from urllib.parse import unquote

import pytest

from app.utils.contact_store import contact_store

CONTACT = '/consumer/emergency-contact'


@pytest.fixture
def events():
    received = []
    unsubscribe = contact_store.subscribe(received.append)
    yield received
    unsubscribe()


def test_no_contact_yet(client, user_headers):
    assert client.get(CONTACT, headers=user_headers).get_json() == {'contact': None}
    assert client.delete(CONTACT, headers=user_headers).status_code == 404


def test_invalid_contact(client, user_headers):
    resp = client.put(CONTACT, json={'name': 'S', 'phone': 'call me'}, headers=user_headers)
    assert resp.status_code == 400
    assert 'Invalid phone number format' in resp.get_json()['error']


def test_save_publishes_and_persists(client, user_headers, events):
    resp = client.put(CONTACT, json={'name': ' Sam ', 'phone': '+1 555 123 4567'}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.get_json()['contact'] == {'name': 'Sam', 'phone': '+1 555 123 4567'}

    assert [e.kind for e in events] == ['saved']
    assert events[0].contact.name == 'Sam'

    fetched = client.get(CONTACT, headers=user_headers).get_json()
    assert fetched['contact']['phone'] == '+1 555 123 4567'

    client.put(CONTACT, json={'name': 'Alex', 'phone': '5551234567'}, headers=user_headers)
    assert client.get(CONTACT, headers=user_headers).get_json()['contact']['name'] == 'Alex'


def test_remove_publishes(client, user_headers, events):
    client.put(CONTACT, json={'name': 'Sam', 'phone': '5551234567'}, headers=user_headers)
    assert client.delete(CONTACT, headers=user_headers).status_code == 200
    assert [e.kind for e in events] == ['saved', 'removed']
    assert events[1].contact is None


def test_failing_listener_does_not_undo_save(client, user_headers):
    def broken(event):
        raise RuntimeError('listener down')

    unsubscribe = contact_store.subscribe(broken)
    try:
        resp = client.put(CONTACT, json={'name': 'Sam', 'phone': '5551234567'}, headers=user_headers)
    finally:
        unsubscribe()
    assert resp.status_code == 200
    assert client.get(CONTACT, headers=user_headers).get_json()['contact']['name'] == 'Sam'


def test_subscribe_twice_delivers_once(client, user_headers, events):
    contact_store.subscribe(events.append)
    client.put(CONTACT, json={'name': 'Sam', 'phone': '5551234567'}, headers=user_headers)
    assert len(events) == 1


def test_low_stock_link_needs_contact(client, guest):
    resp = client.get(f'{CONTACT}/low-stock-link', headers=guest['headers'])
    assert resp.status_code == 409


def test_low_stock_link_for_guest(client, guest):
    client.put(CONTACT, json={'name': 'Sam', 'phone': '+44 7700 900123'}, headers=guest['headers'])
    data = client.get(f'{CONTACT}/low-stock-link', headers=guest['headers']).get_json()
    assert data['url'].startswith('https://wa.me/447700900123?text=')
    assert 'Vitamin D (only 3 left)' in unquote(data['url'])
    assert 'Aspirin' not in data['message']


def test_low_stock_link_when_well_stocked(client, user_headers):
    client.put(CONTACT, json={'name': 'Sam', 'phone': '5551234567'}, headers=user_headers)
    client.post('/consumer/medications', json={'name': 'Aspirin', 'quantity': 40, 'dose_times': []},
                headers=user_headers)
    data = client.get(f'{CONTACT}/low-stock-link', headers=user_headers).get_json()
    assert data['url'] is None


def test_non_string_phone_is_rejected(client, user_headers):
    resp = client.put(CONTACT, json={'name': 'Sam', 'phone': 5551234567}, headers=user_headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == ['Phone must be a string']

    resp = client.put(CONTACT, json={'name': {'first': 'Sam'}, 'phone': '5551234567'}, headers=user_headers)
    assert resp.status_code == 400
    assert client.get(CONTACT, headers=user_headers).get_json() == {'contact': None}


def test_non_object_contact_body(client, user_headers):
    resp = client.put(CONTACT, json=['Sam', '5551234567'], headers=user_headers)
    assert resp.status_code == 400
