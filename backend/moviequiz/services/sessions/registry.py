import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from moviequiz.models import Room

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every live room, keyed by room code.

    Single-process and in-memory: rooms vanish when the process exits.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        # Guards the code -> room map. Reentrant: an event for an unknown
        # code holds it while create_session takes it again.
        self._lock = threading.RLock()

    def init_app(self, app) -> None:
        # A fresh app starts with no live rooms
        self._rooms = {}
        app.extensions['moviequiz_registry'] = self

    def create_session(self, code: str) -> Optional[Room]:
        with self._lock:
            if code in self._rooms:
                logger.info(f"[session-exists] room={code} already live, create ignored")
                return None
            room = Room(code=code)
            self._rooms[code] = room
        logger.info(f"[session-create] room={code}")
        return room

    def get_session(self, code: Optional[str]) -> Optional[Room]:
        if not code:
            return None
        room = self._rooms.get(code)
        if room is None:
            logger.info(f"[room-unknown] room={code}")
        return room

    def destroy_session(self, code: str, room: Optional[Room] = None) -> bool:
        """Remove a room and its catalog cache.

        When ``room`` is given only that exact instance is removed, so a
        teardown scheduled for an old room never deletes a newer room that
        reuses the code.
        """
        with self._lock:
            current = self._rooms.get(code)
            if current is None:
                return False
            if room is not None and current is not room:
                logger.info(f"[teardown-skip] room={code} was replaced")
                return False
            del self._rooms[code]
        logger.info(f"[session-destroy] room={code}")
        return True

    @contextmanager
    def locked(self, code: Optional[str]) -> Iterator[Optional[Room]]:
        """Handle one event for ``code`` at a time.

        Yields the live room with its lock held. For a code with no live
        room the registry itself stays locked instead, so the room cannot
        appear halfway through the event.
        """
        while True:
            with self._lock:
                room = self._rooms.get(code) if code else None
                if room is None:
                    yield None
                    return
            with room.lock:
                # Destroyed and recreated while we waited: lock the new one
                if self._rooms.get(code) is room:
                    yield room
                    return

    def live_codes(self) -> List[str]:
        return list(self._rooms)

    def __contains__(self, code) -> bool:
        return code in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
