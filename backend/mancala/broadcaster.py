"""Socket.IO delivery of game frames.

Topics are Socket.IO rooms named ``/topic/game/<gameId>``; the event name of
a topic frame is the room name itself, so a client tells games apart without
inspecting the payload. Personal frames go to a single sid.
"""

DETAILS_EVENT = '/user/queue/game.details'
ERRORS_EVENT = '/user/queue/errors'


def topic_for(game_id: str) -> str:
    return f"/topic/game/{game_id}"


class SocketIOBroadcaster:
    """Fan-out of coordinator output over a Flask-SocketIO server.

    ``emit`` only queues packets on each target connection, so a slow or
    vanished client never holds up the caller.
    """

    def __init__(self, socketio, namespace='/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def subscribe(self, connection_id: str, game_id: str) -> None:
        self.socketio.server.enter_room(connection_id, topic_for(game_id), namespace=self.namespace)

    def unsubscribe(self, connection_id: str, game_id: str) -> None:
        self.socketio.server.leave_room(connection_id, topic_for(game_id), namespace=self.namespace)

    def close_topic(self, game_id: str) -> None:
        self.socketio.close_room(topic_for(game_id), namespace=self.namespace)

    def publish(self, game_id: str, snapshot: dict) -> None:
        room = topic_for(game_id)
        self.socketio.emit(room, snapshot, to=room, namespace=self.namespace)

    def send_details(self, connection_id: str, details: dict) -> None:
        self.socketio.emit(DETAILS_EVENT, details, to=connection_id, namespace=self.namespace)

    def send_error(self, connection_id: str, message: str) -> None:
        self.socketio.emit(ERRORS_EVENT, {'message': message}, to=connection_id, namespace=self.namespace)
