from bingo import SOCKET_NAMESPACE
from helpers import drain

AUTH = {'Authorization': 'Bearer test-admin'}


def test_index_and_state(client):
    assert client.get('/').status_code == 200
    state = client.get('/state').get_json()
    assert state['state'] == 'idle'
    assert state['calledNumbers'] == []


def test_requires_bearer_token(client):
    assert client.get('/admin/list-users').status_code == 403
    res = client.get('/admin/list-users', headers={'Authorization': 'Bearer wrong'})
    assert res.status_code == 403
    assert res.get_json() == {'error': 'Forbidden'}


def test_list_and_get_balance(client, bingo_round):
    bingo_round.ledger.set_balance('alice', 70)
    res = client.get('/admin/list-users', headers=AUTH)
    assert res.get_json() == {'users': {'alice': {'balance': 70}}}

    res = client.get('/admin/get-balance?username=alice', headers=AUTH)
    assert res.get_json() == {'balance': 70}
    res = client.get('/admin/get-balance?username=nobody', headers=AUTH)
    assert res.status_code == 404


def test_update_balance_validates_input(client):
    for body in ({}, {'username': 'alice'}, {'username': 'alice', 'amount': '5'},
                 {'username': 'alice', 'amount': -1}, {'username': 'alice', 'amount': True}):
        res = client.post('/admin/update-balance', json=body, headers=AUTH)
        assert res.status_code == 400


def test_update_balance_creates_account(client, bingo_round):
    res = client.post('/admin/update-balance', json={'username': 'newbie', 'amount': 250}, headers=AUTH)
    assert res.get_json() == {'success': True}
    assert bingo_round.ledger.get_balance('newbie') == 250


def test_update_balance_pushes_to_open_session(client, connect, bingo_round):
    alice, bob = connect(), connect()
    alice.emit('register', {'username': 'alice', 'seed': 7}, namespace=SOCKET_NAMESPACE)
    drain(alice)
    drain(bob)

    client.post('/admin/update-balance', json={'username': 'alice', 'amount': 500}, headers=AUTH)
    assert drain(alice)['balanceUpdate'] == [{'balance': 500}]
    assert 'balanceUpdate' not in drain(bob)
