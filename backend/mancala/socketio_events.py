from flask import current_app, request
from flask_socketio import emit
from mancala import socketio
from mancala.coordinator import HOST_DESTINATION, JOIN_DESTINATION


def _coordinator():
    return current_app.extensions['mancala']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'message': f"Connected to {request.namespace}"})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _coordinator().disconnect(sid)


def handle_host(data=None):
    _coordinator().handle(_get_sid(), HOST_DESTINATION, data)


def handle_join(data=None):
    _coordinator().handle(_get_sid(), JOIN_DESTINATION, data)


def handle_game_frame(event, data=None):
    """Catch-all for the per-game destinations (move, rematch) and strays."""
    _coordinator().handle(_get_sid(), event, data)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Event names are the client destinations; ``/app/game.<id>.move`` and
    ``/app/game.<id>.rematch`` carry the game id so they go through the
    catch-all handler.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(HOST_DESTINATION, handle_host, namespace=namespace)
    socketio.on_event(JOIN_DESTINATION, handle_join, namespace=namespace)
    socketio.on_event('*', handle_game_frame, namespace=namespace)
