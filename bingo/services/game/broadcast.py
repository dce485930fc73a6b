from typing import Any, Dict, Optional

from bingo import SOCKET_NAMESPACE, socketio


class Broadcaster:
    """Fan-out of round events to connected sessions.

    Uses `socketio.emit` rather than the request-bound `emit`, since
    timer callbacks run in background tasks with no socket context.
    """

    def __init__(self, namespace: str = SOCKET_NAMESPACE):
        self.namespace = namespace

    def broadcast(self, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        socketio.emit(event, payload if payload is not None else {}, namespace=self.namespace)

    def send(self, sid: str, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        socketio.emit(event, payload if payload is not None else {}, to=sid, namespace=self.namespace)
