from flask import current_app, request
from app import socketio
from app.services.games import SessionManager
from typing import Any, Optional


class SocketIONotifier:
    """Fan SessionManager notifications out to connected sockets."""

    def __init__(self, namespace: str = '/'):
        self.namespace = namespace

    def broadcast(self, event: str, payload: Any = None, skip: Optional[str] = None) -> None:
        # Use socketio.emit since this may be called from a background task
        socketio.emit(event, payload, namespace=self.namespace, skip_sid=skip)

    def send(self, sid: str, event: str, payload: Any = None) -> None:
        socketio.emit(event, payload, to=sid, namespace=self.namespace)


def _manager() -> SessionManager:
    return current_app.extensions['session_manager']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    _manager().register(_get_sid())


def handle_disconnect(*args):
    _manager().unregister(_get_sid())


def handle_key_press(*args):
    _manager().handle_key_press(_get_sid())


def handle_update_name(name=None):
    _manager().rename(_get_sid(), name)


def handle_update_variant(variant=None):
    _manager().select_variant(_get_sid(), variant)


def handle_start_game(*args):
    _manager().start_round()


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('keyPress', handle_key_press, namespace=namespace)
    socketio.on_event('updateName', handle_update_name, namespace=namespace)
    socketio.on_event('updateVariant', handle_update_variant, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
