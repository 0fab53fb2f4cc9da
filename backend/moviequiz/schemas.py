"""Inbound Socket.IO event payloads.

Each event name maps to exactly one model in ``EVENT_SCHEMAS``. Clients
may send a single object (snake_case or camelCase keys) or positional
arguments in the order listed by the model's ``positional`` tuple, which
matches what the browser pages emit.
"""
import logging
from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class RoomEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra='ignore')
    positional: ClassVar[Tuple[str, ...]] = ('room',)

    room: str = Field(min_length=1)


class PlayerJoin(RoomEvent):
    positional: ClassVar[Tuple[str, ...]] = ('room', 'display_name', 'connection_id', 'logical_id')

    display_name: str = Field(alias='displayName', min_length=1)
    connection_id: Optional[str] = Field(default=None, alias='connectionId')
    logical_id: Optional[str] = Field(default=None, alias='logicalId')


class RoleJoin(RoomEvent):
    positional: ClassVar[Tuple[str, ...]] = ('room', 'connection_id', 'logical_id')

    connection_id: Optional[str] = Field(default=None, alias='connectionId')
    logical_id: Optional[str] = Field(default=None, alias='logicalId')


class PlayerAnswer(RoomEvent):
    positional: ClassVar[Tuple[str, ...]] = ('room', 'display_name')

    display_name: str = Field(alias='displayName', min_length=1)


class AnswerYes(RoomEvent):
    positional: ClassVar[Tuple[str, ...]] = ('room', 'display_name')

    display_name: Optional[str] = Field(default=None, alias='displayName')


class PlayerPoints(RoomEvent):
    positional: ClassVar[Tuple[str, ...]] = ('room', 'display_name', 'delta', 'target_connection_id')

    display_name: str = Field(alias='displayName', min_length=1)
    delta: int
    target_connection_id: Optional[str] = Field(default=None, alias='targetConnectionId')


class SendPoints(PlayerPoints):
    # The game display sends the points first
    positional: ClassVar[Tuple[str, ...]] = ('delta', 'room', 'display_name', 'target_connection_id')


class GetFrames(RoomEvent):
    positional: ClassVar[Tuple[str, ...]] = ('room', 'theme', 'movie')

    theme: str = Field(min_length=1)
    movie: str = Field(min_length=1)


EVENT_SCHEMAS: Dict[str, Type[RoomEvent]] = {
    'create_session': RoomEvent,
    'player_join_room': PlayerJoin,
    'host_join_room': RoleJoin,
    'game_join_room': RoleJoin,
    'start_round': RoomEvent,
    'round_end': RoomEvent,
    'player_answer': PlayerAnswer,
    'answer_yes': AnswerYes,
    'answer_no': RoomEvent,
    'send_points': SendPoints,
    'player_points': PlayerPoints,
    'get_themes': RoomEvent,
    'get_frames': GetFrames,
    'change_frame': RoomEvent,
    'end_game': RoomEvent,
}


def _as_mapping(schema: Type[RoomEvent], args: Sequence[Any]) -> Any:
    if len(args) == 1 and isinstance(args[0], dict):
        return args[0]
    if len(args) > len(schema.positional):
        raise ValueError(f"expected at most {len(schema.positional)} arguments, got {len(args)}")
    return {name: value for name, value in zip(schema.positional, args) if value is not None}


def parse_event(event: str, args: Sequence[Any]) -> Optional[RoomEvent]:
    """Validate raw handler arguments; ``None`` means drop the event."""
    schema = EVENT_SCHEMAS.get(event)
    if schema is None:
        logger.warning(f"[payload-drop] unknown event {event!r}")
        return None
    try:
        return schema.model_validate(_as_mapping(schema, args))
    except (ValidationError, ValueError) as exc:
        logger.warning(f"[payload-drop] event={event} invalid payload: {exc}")
        return None
