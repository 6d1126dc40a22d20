from __future__ import annotations

from typing import Hashable

from flask_socketio import SocketIO


class SocketIOTransport:
    """Sends to a single Socket.IO session id (each sid is its own room)."""

    def __init__(self, socketio: SocketIO):
        self._socketio = socketio

    def send(self, connection: Hashable, event: str, payload: dict) -> None:
        self._socketio.emit(event, payload, to=connection)

    def dispatch(self, fn, *args) -> None:
        self._socketio.start_background_task(fn, *args)
