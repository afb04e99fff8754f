from arena.models import Friendship, User
from arena.services.results import DatabaseResultSink, global_leaderboard, player_stats


def register(client, username, password='password', **extra):
    return client.post('/api/register', json={'username': username, 'password': password, **extra})


def test_register_logs_in(client):
    res = register(client, '  alice ')
    assert res.status_code == 201
    assert res.get_json()['username'] == 'alice'
    me = client.get('/api/me')
    assert me.status_code == 200
    data = me.get_json()
    assert data['username'] == 'alice'
    assert data['stats'] == {'games_played': 0, 'wins': 0, 'losses': 0, 'draws': 0, 'total_score': 0}


def test_register_validation(client):
    assert client.post('/api/register', json={'username': 'bob'}).status_code == 400
    assert register(client, 'b').status_code == 400
    assert register(client, 'x' * 21).status_code == 400
    assert register(client, 'bob', password='abc').status_code == 400
    assert register(client, 'bob').status_code == 201
    dup = register(client, 'bob')
    assert dup.status_code == 409
    assert dup.get_json()['error'] == 'Username already taken'


def test_login_and_logout(flask_app, client):
    register(flask_app.test_client(), 'carol', password='secret')
    assert client.post('/api/login', json={'username': 'carol', 'password': 'wrong'}).status_code == 401
    assert client.post('/api/login', json={'username': 'carol'}).status_code == 400
    res = client.post('/api/login', json={'username': 'carol', 'password': 'secret', 'remember_me': True})
    assert res.status_code == 200
    assert res.get_json()['username'] == 'carol'
    assert client.post('/api/logout').get_json() == {'ok': True}
    assert client.get('/api/me').status_code == 401


def test_protected_routes_require_login(client):
    for path in ('/api/me', '/api/friends', '/api/leaderboard', '/api/leaderboard/global'):
        res = client.get(path)
        assert res.status_code == 401
        assert res.get_json() == {'error': 'Not logged in'}


def test_passwords_are_hashed(flask_app, client):
    register(client, 'dave', password='hunter22')
    user = User.query.filter_by(username='dave').first()
    assert user.password_hash != 'hunter22'
    assert user.check_password('hunter22')
    assert not user.check_password('hunter23')


def test_friend_request_flow(flask_app):
    alice, bob = flask_app.test_client(), flask_app.test_client()
    register(alice, 'alice')
    bob_id = register(bob, 'bob').get_json()['id']
    alice_id = User.query.filter_by(username='alice').first().id

    assert alice.post('/api/friends/add', json={}).status_code == 400
    assert alice.post('/api/friends/add', json={'username': 'alice'}).status_code == 400
    assert alice.post('/api/friends/add', json={'username': 'nobody'}).status_code == 404
    assert alice.post('/api/friends/add', json={'username': 'bob'}).status_code == 201
    assert alice.post('/api/friends/add', json={'username': 'bob'}).status_code == 409
    # the reverse direction counts as the same friendship
    assert bob.post('/api/friends/add', json={'username': 'alice'}).status_code == 409

    [pending] = bob.get('/api/friends').get_json()
    assert pending['username'] == 'alice'
    assert pending['status'] == 'pending'
    assert pending['direction'] == 'incoming'

    assert alice.post('/api/friends/accept', json={'user_id': bob_id}).status_code == 404
    assert bob.post('/api/friends/accept', json={'user_id': alice_id}).status_code == 200
    assert Friendship.query.filter_by(status='accepted').count() == 2

    [friend] = alice.get('/api/friends').get_json()
    assert friend['id'] == bob_id
    assert friend['status'] == 'accepted'


def test_result_sink_and_stats(flask_app):
    users = {}
    for name in ('alice', 'bob', 'carol'):
        c = flask_app.test_client()
        users[name] = (c, register(c, name).get_json()['id'])
    a, b, c = users['alice'][1], users['bob'][1], users['carol'][1]

    sink = DatabaseResultSink(flask_app)
    sink('prisoners_dilemma', a, b, 25, 0, a)
    sink('ultimatum', b, a, 4, 6, a)
    sink('prisoners_dilemma', a, c, 15, 15, None)

    assert player_stats(a) == {'games_played': 3, 'wins': 2, 'losses': 0, 'draws': 1, 'total_score': 46}
    assert player_stats(b) == {'games_played': 2, 'wins': 0, 'losses': 2, 'draws': 0, 'total_score': 4}

    me = users['bob'][0].get('/api/me').get_json()
    assert me['stats']['losses'] == 2

    board = users['carol'][0].get('/api/leaderboard/global').get_json()
    assert [row['username'] for row in board] == ['alice', 'carol', 'bob']
    assert [row['rank'] for row in board] == [1, 2, 3]


def test_friends_leaderboard_includes_only_accepted_friends(flask_app):
    alice, bob, carol = flask_app.test_client(), flask_app.test_client(), flask_app.test_client()
    alice_id = register(alice, 'alice').get_json()['id']
    bob_id = register(bob, 'bob').get_json()['id']
    carol_id = register(carol, 'carol').get_json()['id']

    alice.post('/api/friends/add', json={'username': 'bob'})
    bob.post('/api/friends/accept', json={'user_id': alice_id})
    alice.post('/api/friends/add', json={'username': 'carol'})  # still pending

    DatabaseResultSink(flask_app)('prisoners_dilemma', bob_id, carol_id, 5, 0, bob_id)

    board = alice.get('/api/leaderboard').get_json()
    assert [row['username'] for row in board] == ['bob', 'alice']
    assert board[0]['wins'] == 1
    assert board[0]['rank'] == 1


def test_failed_write_is_rolled_back_and_logged(flask_app, caplog):
    sink = DatabaseResultSink(flask_app)
    # missing game type violates NOT NULL
    sink(None, 1, 2, 0, 0, None)
    assert any('[record-match-failed]' in rec.getMessage() for rec in caplog.records)
    assert player_stats(1)['games_played'] == 0


def test_accept_takes_camel_case_user_id(flask_app):
    alice, bob = flask_app.test_client(), flask_app.test_client()
    alice_id = register(alice, 'alice').get_json()['id']
    register(bob, 'bob')
    alice.post('/api/friends/add', json={'username': 'bob'})

    assert bob.post('/api/friends/accept', json={'userId': alice_id}).status_code == 200
    [friend] = bob.get('/api/friends').get_json()
    assert friend['id'] == alice_id
    assert friend['status'] == 'accepted'


def test_me_lists_recent_matches_newest_first(flask_app, client):
    alice_id = register(client, 'alice').get_json()['id']
    bob_id = register(flask_app.test_client(), 'bob').get_json()['id']
    sink = DatabaseResultSink(flask_app)
    sink('prisoners_dilemma', alice_id, bob_id, 25, 0, alice_id)
    sink('ultimatum', bob_id, alice_id, 5, 5, None)

    recent = client.get('/api/me').get_json()['recent_matches']
    assert [m['game_type'] for m in recent] == ['ultimatum', 'prisoners_dilemma']
    assert recent[0]['player1_id'] == bob_id
    assert recent[0]['winner_id'] is None
    assert recent[1]['p1_score'] == 25
    assert recent[1]['winner_id'] == alice_id
    assert recent[1]['created_at']


def test_global_leaderboard_is_capped_and_counts_idle_users(flask_app):
    ids = {}
    for name in ('alice', 'bob', 'carol', 'dave'):
        ids[name] = register(flask_app.test_client(), name).get_json()['id']
    sink = DatabaseResultSink(flask_app)
    sink('prisoners_dilemma', ids['alice'], ids['bob'], 25, 0, ids['alice'])
    sink('prisoners_dilemma', ids['carol'], ids['bob'], 3, 8, ids['bob'])

    top = global_leaderboard(limit=2)
    assert [row['username'] for row in top] == ['alice', 'bob']
    assert top[1]['games_played'] == 2

    dave = global_leaderboard(limit=10)[-1]
    assert dave['username'] == 'dave'
    assert dave == {
        'rank': 4, 'id': ids['dave'], 'username': 'dave', 'games_played': 0,
        'wins': 0, 'losses': 0, 'draws': 0, 'total_score': 0,
    }
