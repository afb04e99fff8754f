from flask_socketio import emit
from flask import current_app, request
from flask_login import current_user
from arena import socketio
from arena.services.connections import Connection
from typing import Any, Dict, Optional


class SocketConnection(Connection):
    """Connection backed by a Socket.IO session id."""

    def __init__(self, sid: str, namespace: str, user_id=None, name: Optional[str] = None):
        super().__init__(sid, user_id=user_id, name=name)
        self.namespace = namespace

    def _send(self, event: str, payload: Optional[Dict[str, Any]]) -> None:
        # Use socketio.emit since the recipient is usually not the sender
        if payload is None:
            socketio.emit(event, to=self.sid, namespace=self.namespace)
        else:
            socketio.emit(event, payload, to=self.sid, namespace=self.namespace)


def _arena():
    return current_app.extensions['arena']

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _current_connection() -> Optional[Connection]:
    return _arena().connections.get(_get_sid())

def _value(data, key: str):
    """Clients may send a bare value or an object carrying it under ``key``."""
    if isinstance(data, dict):
        return data.get(key)
    return data


def handle_connect(auth=None):
    # Identity is resolved once, from the Flask-Login session at connect time
    user_id = name = None
    if current_user.is_authenticated:
        user_id, name = current_user.id, current_user.username
    connection = SocketConnection(_get_sid(), request.namespace, user_id=user_id, name=name)
    _arena().connect(connection)
    current_app.logger.info(f"[connect] sid={connection.sid} user={user_id or 'guest'}")
    emit('connected', {
        'message': 'Connected to /ws',
        'user': {'id': user_id, 'username': name} if user_id is not None else None,
    })


def handle_disconnect(reason=None):
    connection = _arena().disconnect(_get_sid())
    if connection:
        current_app.logger.info(f"[disconnect] sid={connection.sid} user={connection.user_id or 'guest'}")


def handle_join_queue(data=None):
    connection = _current_connection()
    if connection is None:
        return
    _arena().join_queue(connection, _value(data, 'game_mode'))


def handle_make_choice(data=None):
    connection = _current_connection()
    if connection is None:
        return
    _arena().dispatch(connection, 'make-choice', _value(data, 'choice'))


def handle_propose_split(data=None):
    connection = _current_connection()
    if connection is None:
        return
    _arena().dispatch(connection, 'propose-split', _value(data, 'proposer_split'))


def handle_respond_to_proposal(data=None):
    connection = _current_connection()
    if connection is None:
        return
    _arena().dispatch(connection, 'respond-to-proposal', _value(data, 'accepted'))


def handle_rematch(data=None):
    connection = _current_connection()
    if connection is None:
        return
    _arena().rematch(connection)


_HANDLERS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('join-queue', handle_join_queue),
    ('make-choice', handle_make_choice),
    ('propose-split', handle_propose_split),
    ('respond-to-proposal', handle_respond_to_proposal),
    ('rematch', handle_rematch),
)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in _HANDLERS:
            socketio.on_event(event, handler, namespace=namespace)
