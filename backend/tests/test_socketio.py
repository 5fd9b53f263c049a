from mancala.broadcaster import DETAILS_EVENT, ERRORS_EVENT, topic_for


def frames(test_client, name):
    return [pkt['args'][0] for pkt in test_client.get_received('/ws') if pkt['name'] == name]


def host_game(sio_client):
    host = sio_client()
    host.get_received('/ws')
    host.emit('/app/game.host', {}, namespace='/ws')
    details = frames(host, DETAILS_EVENT)
    assert len(details) == 1
    return host, details[0]['gameId']


def join_game(sio_client, game_id):
    guest = sio_client()
    guest.get_received('/ws')
    guest.emit('/app/game.join', {'gameId': game_id}, namespace='/ws')
    return guest


def test_socket_connect(sio_client):
    test_client = sio_client()
    assert test_client.is_connected('/ws')
    received = test_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_host_receives_details(sio_client):
    host = sio_client()
    host.get_received('/ws')
    host.emit('/app/game.host', {}, namespace='/ws')
    details = frames(host, DETAILS_EVENT)
    assert details[0]['assignedPlayerRole'] == 0
    assert details[0]['gameStatus'] == 'WAITING_FOR_PLAYER'
    assert details[0]['board'] == [4, 4, 4, 4, 4, 4, 0, 4, 4, 4, 4, 4, 4, 0]


def test_join_notifies_both_players(sio_client):
    host, game_id = host_game(sio_client)
    guest = join_game(sio_client, game_id)

    guest_received = guest.get_received('/ws')
    names = [pkt['name'] for pkt in guest_received]
    assert names == [DETAILS_EVENT, topic_for(game_id)]
    assert guest_received[0]['args'][0]['assignedPlayerRole'] == 1

    host_topic = frames(host, topic_for(game_id))
    assert len(host_topic) == 1
    assert host_topic[0]['gameStatus'] == 'IN_PROGRESS'
    assert host_topic[0]['currentPlayer'] == 0


def test_move_is_broadcast_to_topic(sio_client):
    host, game_id = host_game(sio_client)
    guest = join_game(sio_client, game_id)
    host.get_received('/ws')
    guest.get_received('/ws')

    host.emit(f'/app/game.{game_id}.move', {'pitIndex': 0}, namespace='/ws')
    for test_client in (host, guest):
        snapshots = frames(test_client, topic_for(game_id))
        assert len(snapshots) == 1
        assert snapshots[0]['board'] == [0, 5, 5, 5, 5, 4, 0, 4, 4, 4, 4, 4, 4, 0]
        assert snapshots[0]['currentPlayer'] == 1


def test_wrong_turn_error_goes_to_sender_only(sio_client):
    host, game_id = host_game(sio_client)
    guest = join_game(sio_client, game_id)
    host.get_received('/ws')
    guest.get_received('/ws')

    guest.emit(f'/app/game.{game_id}.move', {'pitIndex': 7}, namespace='/ws')
    assert frames(guest, ERRORS_EVENT) == [{'message': 'It is not your turn'}]
    assert host.get_received('/ws') == []


def test_join_unknown_game(sio_client):
    guest = join_game(sio_client, 'no-such-game')
    received = guest.get_received('/ws')
    assert [pkt['name'] for pkt in received] == [ERRORS_EVENT]
    assert received[0]['args'][0]['message'] == 'Game not found'


def test_unknown_destination_is_reported(sio_client):
    test_client = sio_client()
    test_client.get_received('/ws')
    test_client.emit('/app/game.abc.resign', {}, namespace='/ws')
    errors = frames(test_client, ERRORS_EVENT)
    assert len(errors) == 1


def test_host_disconnect_cancels_game(sio_client):
    host, game_id = host_game(sio_client)
    guest = join_game(sio_client, game_id)
    guest.get_received('/ws')

    host.disconnect(namespace='/ws')
    snapshots = frames(guest, topic_for(game_id))
    assert len(snapshots) == 1
    assert snapshots[0]['gameStatus'] == 'CANCELLED'
    assert snapshots[0]['winner'] == -1


def test_rematch_over_socket(flask_app, sio_client):
    host, game_id = host_game(sio_client)
    guest = join_game(sio_client, game_id)

    # play out the last move of a drawn game
    registry = flask_app.extensions['mancala'].registry
    from mancala.services.games import Board
    registry.get(game_id).game.board = Board(slots=(0, 0, 0, 0, 0, 1, 23, 0, 0, 0, 0, 0, 1, 23))
    host.emit(f'/app/game.{game_id}.move', {'pitIndex': 5}, namespace='/ws')
    finished = frames(guest, topic_for(game_id))[-1]
    assert finished['gameStatus'] == 'FINISHED'
    assert finished['gameOver'] is True
    host.get_received('/ws')

    host.emit(f'/app/game.{game_id}.rematch', {}, namespace='/ws')
    guest.emit(f'/app/game.{game_id}.rematch', {}, namespace='/ws')
    snapshots = frames(host, topic_for(game_id))
    assert len(snapshots) == 3
    assert snapshots[-1]['gameStatus'] == 'IN_PROGRESS'
    assert snapshots[-1]['board'] == [4, 4, 4, 4, 4, 4, 0, 4, 4, 4, 4, 4, 4, 0]
