import logging
from dataclasses import dataclass, field
from typing import List, Optional

from moviequiz.models import Participant, Room

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    is_tie: bool
    score: Optional[int]
    winners: List[Participant] = field(default_factory=list)

    def to_dict(self):
        if self.is_tie:
            return {
                'tied_players': [{'name': p.display_name, 'score': p.score} for p in self.winners],
                'score': self.score,
            }
        if not self.winners:
            # Nobody joined: the game ends without a winner
            return {'winner': None, 'score': None}
        return {'winner': self.winners[0].display_name, 'score': self.score}


def add_points(room: Room, display_name: Optional[str], delta: int) -> Optional[Participant]:
    """Add ``delta`` to the named player's score.

    Negative deltas are allowed and no floor is applied. An unknown name
    changes nothing.
    """
    player = room.find_player(display_name)
    if player is None:
        logger.warning(f"[points-drop] room={room.code} no player named {display_name!r}")
        return None
    player.score += delta
    logger.info(f"[points] room={room.code} name={display_name} delta={delta} total={player.score}")
    return player


def standings(room: Room) -> List[Participant]:
    """Players who joined the room, highest score first."""
    return sorted((p for p in room.players if p.is_bound), key=lambda p: p.score, reverse=True)


def determine_winner(room: Room) -> GameResult:
    """Pick the winner, or every player sharing the top score.

    Only players who joined are ranked; an empty slot never wins. The tie
    is detected by comparing scores against the maximum, so the outcome
    never depends on the order in which the sort leaves equals.
    """
    ranked = standings(room)
    if not ranked:
        return GameResult(is_tie=False, score=None)
    top = ranked[0].score
    leaders = [p for p in ranked if p.score == top]
    return GameResult(is_tie=len(leaders) > 1, score=top, winners=leaders)
