import logging
from typing import Any, Optional

from flask_socketio import join_room

logger = logging.getLogger(__name__)


class BroadcastRouter:
    """Room-wide and per-connection emission over the Socket.IO server.

    Emission is synchronous, so clients in a room see events in the order
    the handlers produced them.
    """

    def __init__(self, socketio=None, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def init_app(self, app) -> None:
        self.namespace = app.config.get('SOCKETIO_NAMESPACE', '/')

    @staticmethod
    def group(code: str) -> str:
        return f"room:{code}"

    def join(self, code: str, sid: str) -> None:
        join_room(self.group(code), sid=sid, namespace=self.namespace)

    def to_room(self, code: str, event: str, payload: Any = None, skip_sid: Optional[str] = None) -> None:
        logger.debug(f"[emit-room] room={code} event={event} skip={skip_sid}")
        self.socketio.emit(event, payload, to=self.group(code), skip_sid=skip_sid, namespace=self.namespace)

    def to_connection(self, sid: Optional[str], event: str, payload: Any = None) -> None:
        if not sid:
            logger.info(f"[emit-drop] event={event} no connection to target")
            return
        logger.debug(f"[emit-conn] conn={sid} event={event}")
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)
