import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Fixed player roster: (display name, emblem). Players pick a slot by name.
PLAYER_ROSTER = (
    ('Черепашки', 'turtle'),
    ('Черепушки', 'skull'),
    ('Черемушки', 'cherry'),
)
MAX_PLAYERS = len(PLAYER_ROSTER)


class Role(str, Enum):
    HOST = 'host'
    GAME = 'game'
    PLAYER = 'player'


class RoomState(str, Enum):
    LOBBY = 'lobby'
    THEME_SELECTION = 'theme_selection'
    ROUND_ACTIVE = 'round_active'
    ROUND_RESOLVED = 'round_resolved'
    ENDED = 'ended'


@dataclass
class Participant:
    """One role slot in a room.

    A slot exists for the whole life of the room and is either unbound
    (no logical id yet) or bound to a logical id plus the connection
    currently serving it.
    """
    role: Role
    display_name: Optional[str] = None
    emblem: Optional[str] = None
    score: int = 0
    logical_id: Optional[str] = None
    connection_id: Optional[str] = None

    @property
    def is_bound(self) -> bool:
        return self.logical_id is not None

    def bind(self, logical_id: str, connection_id: str) -> None:
        self.logical_id = logical_id
        self.connection_id = connection_id

    def to_dict(self):
        # Roster payloads reach the whole room, so no logical id here
        data = {
            'role': self.role.value,
            'connection_id': self.connection_id,
            'bound': self.is_bound,
        }
        if self.role is Role.PLAYER:
            data.update({
                'name': self.display_name,
                'emblem': self.emblem,
                'score': self.score,
            })
        return data


@dataclass
class Movie:
    name: str
    index: int
    guessed: bool = False
    guessed_by: Optional[str] = None

    def to_dict(self):
        return {
            'name': self.name,
            'index': self.index,
            'guessed': self.guessed,
            'guessed_by': self.guessed_by,
        }


def _player_slots() -> List[Participant]:
    return [Participant(role=Role.PLAYER, display_name=name, emblem=emblem) for name, emblem in PLAYER_ROSTER]


@dataclass
class Room:
    code: str
    state: RoomState = RoomState.LOBBY
    host: Participant = field(default_factory=lambda: Participant(role=Role.HOST))
    game: Participant = field(default_factory=lambda: Participant(role=Role.GAME))
    players: List[Participant] = field(default_factory=_player_slots)
    theme_catalog: Dict[str, List[Movie]] = field(default_factory=dict)
    catalog_loaded: bool = False
    active_theme: Optional[str] = None
    active_movie: Optional[str] = None
    round_active: bool = False
    answering_player: Optional[str] = None
    # Held while an event for this room is handled
    lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    def find_player(self, display_name: Optional[str]) -> Optional[Participant]:
        for player in self.players:
            if player.display_name == display_name:
                return player
        return None

    def find_movie(self, theme: Optional[str], movie: Optional[str]) -> Optional[Movie]:
        for entry in self.theme_catalog.get(theme, []) if theme else []:
            if entry.name == movie:
                return entry
        return None

    def roster_complete(self) -> bool:
        return self.host.is_bound and self.game.is_bound and all(p.is_bound for p in self.players)

    def themes_to_dict(self):
        return {theme: [m.to_dict() for m in movies] for theme, movies in self.theme_catalog.items()}

    def players_to_dict(self):
        return [p.to_dict() for p in self.players]
