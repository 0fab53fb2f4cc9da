import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from moviequiz.models import Participant, Role, Room

logger = logging.getLogger(__name__)


@dataclass
class BindResult:
    participant: Participant
    rebound: bool = False


def mint_logical_id() -> str:
    return uuid.uuid4().hex


def bind(room: Room, role: Role, connection_id: str, logical_id: Optional[str] = None,
         display_name: Optional[str] = None) -> Optional[BindResult]:
    """Bind or rebind a connection to one of the room's role slots.

    Returns ``None`` for duplicate joins, unknown player names and
    identity conflicts; the existing binding is left untouched.
    """
    if not connection_id:
        logger.warning(f"[bind-drop] room={room.code} role={role.value} missing connection id")
        return None
    if role is Role.PLAYER:
        return _bind_player(room, connection_id, logical_id, display_name)
    slot = room.host if role is Role.HOST else room.game
    return _bind_singleton(room, slot, connection_id, logical_id)


def _bind_player(room: Room, connection_id: str, logical_id: Optional[str],
                 display_name: Optional[str]) -> Optional[BindResult]:
    slot = room.find_player(display_name)
    if slot is None:
        logger.warning(f"[bind-drop] room={room.code} no player slot named {display_name!r}")
        return None

    if not slot.is_bound:
        slot.bind(logical_id or mint_logical_id(), connection_id)
        logger.info(f"[player-join] room={room.code} name={display_name} conn={connection_id}")
        return BindResult(slot)

    if slot.connection_id == connection_id:
        logger.info(f"[player-duplicate] room={room.code} name={display_name} conn={connection_id}")
        return None
    if logical_id and logical_id != slot.logical_id:
        logger.warning(f"[identity-conflict] room={room.code} name={display_name} foreign logical id")
        return None

    previous = slot.connection_id
    slot.connection_id = connection_id
    logger.info(f"[player-rebind] room={room.code} name={display_name} conn={previous} -> {connection_id}")
    return BindResult(slot, rebound=True)


def _bind_singleton(room: Room, slot: Participant, connection_id: str,
                    logical_id: Optional[str]) -> Optional[BindResult]:
    role = slot.role.value
    if not slot.is_bound:
        slot.bind(logical_id or mint_logical_id(), connection_id)
        logger.info(f"[{role}-join] room={room.code} conn={connection_id}")
        return BindResult(slot)

    # A bound host/game slot only moves to a connection presenting its id
    if logical_id != slot.logical_id:
        logger.warning(f"[identity-conflict] room={room.code} role={role} already bound to another page")
        return None
    if slot.connection_id == connection_id:
        logger.info(f"[{role}-duplicate] room={room.code} conn={connection_id}")
        return None

    previous = slot.connection_id
    slot.connection_id = connection_id
    logger.info(f"[{role}-rebind] room={room.code} conn={previous} -> {connection_id}")
    return BindResult(slot, rebound=True)
