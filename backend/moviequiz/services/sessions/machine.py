"""Per-room game lifecycle.

lobby -> theme_selection -> round_active -> round_resolved -> theme_selection ... -> ended

Every transition function takes the room, validates the current state and
returns an outcome, or ``None`` when the event does not apply. Late and
duplicate events are routine with real-time clients, so an illegal
transition is logged and ignored rather than raised.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from moviequiz.models import Movie, Participant, Room, RoomState
from .scoring import GameResult, add_points, determine_winner

logger = logging.getLogger(__name__)


@dataclass
class AnswerOutcome:
    player: Participant
    theme: str
    movie: Movie


def _ignore(room: Room, event: str, reason: str) -> None:
    logger.info(f"[transition-ignored] room={room.code} state={room.state.value} event={event} reason={reason}")


def _enter(room: Room, state: RoomState) -> None:
    logger.info(f"[transition] room={room.code} {room.state.value} -> {state.value}")
    room.state = state


def check_roster(room: Room) -> bool:
    """Leave the lobby once host, game display and all players are bound."""
    if room.state is not RoomState.LOBBY or not room.roster_complete():
        return False
    _enter(room, RoomState.THEME_SELECTION)
    return True


def can_select_movie(room: Room, theme: Optional[str], movie: Optional[str]) -> Optional[Movie]:
    if room.state is not RoomState.THEME_SELECTION:
        _ignore(room, 'get_frames', 'not selecting a theme')
        return None
    entry = room.find_movie(theme, movie)
    if entry is None:
        _ignore(room, 'get_frames', f'unknown movie {theme!r}/{movie!r}')
        return None
    if entry.guessed:
        _ignore(room, 'get_frames', f'movie {movie!r} already guessed')
        return None
    return entry


def select_movie(room: Room, theme: Optional[str], movie: Optional[str]) -> Optional[Movie]:
    entry = can_select_movie(room, theme, movie)
    if entry is None:
        return None
    room.active_theme = theme
    room.active_movie = entry.name
    logger.info(f"[movie-select] room={room.code} theme={theme} movie={entry.name}")
    return entry


def start_round(room: Room) -> bool:
    if room.state is not RoomState.THEME_SELECTION:
        _ignore(room, 'start_round', 'not selecting a theme')
        return False
    if room.active_movie is None:
        _ignore(room, 'start_round', 'no movie selected')
        return False
    _enter(room, RoomState.ROUND_ACTIVE)
    room.round_active = True
    room.answering_player = None
    return True


def player_answer(room: Room, display_name: Optional[str]) -> Optional[Participant]:
    if room.state is not RoomState.ROUND_ACTIVE:
        _ignore(room, 'player_answer', 'no active round')
        return None
    if room.answering_player is not None:
        _ignore(room, 'player_answer', f'{room.answering_player} is answering')
        return None
    player = room.find_player(display_name)
    if player is None or not player.is_bound:
        _ignore(room, 'player_answer', f'unknown player {display_name!r}')
        return None
    room.answering_player = player.display_name
    logger.info(f"[answering] room={room.code} name={player.display_name}")
    return player


def answer_yes(room: Room, display_name: Optional[str] = None, points: int = 0) -> Optional[AnswerOutcome]:
    """Confirm the pending answer: credit the player and resolve the round."""
    if room.state is not RoomState.ROUND_ACTIVE or room.answering_player is None:
        _ignore(room, 'answer_yes', 'nobody is answering')
        return None
    if display_name and display_name != room.answering_player:
        _ignore(room, 'answer_yes', f'{display_name!r} is not the answering player')
        return None
    player = room.find_player(room.answering_player)
    movie = room.find_movie(room.active_theme, room.active_movie)
    if player is None or movie is None:
        _ignore(room, 'answer_yes', 'answering player or movie missing')
        return None

    movie.guessed = True
    movie.guessed_by = player.emblem
    if points:
        add_points(room, player.display_name, points)
    outcome = AnswerOutcome(player=player, theme=room.active_theme, movie=movie)

    room.answering_player = None
    room.round_active = False
    _enter(room, RoomState.ROUND_RESOLVED)
    room.active_theme = None
    room.active_movie = None
    _enter(room, RoomState.THEME_SELECTION)
    return outcome


def answer_no(room: Room) -> Optional[str]:
    """Reject the pending answer; the round continues and anyone may answer."""
    if room.state is not RoomState.ROUND_ACTIVE or room.answering_player is None:
        _ignore(room, 'answer_no', 'nobody is answering')
        return None
    name = room.answering_player
    room.answering_player = None
    logger.info(f"[answer-rejected] room={room.code} name={name}")
    return name


def round_end(room: Room) -> bool:
    if room.state not in (RoomState.ROUND_ACTIVE, RoomState.THEME_SELECTION):
        _ignore(room, 'round_end', 'no round to end')
        return False
    room.round_active = False
    room.answering_player = None
    if room.state is not RoomState.THEME_SELECTION:
        _enter(room, RoomState.THEME_SELECTION)
    return True


def end_game(room: Room) -> Optional[GameResult]:
    if room.state is RoomState.ENDED:
        _ignore(room, 'end_game', 'already ended')
        return None
    room.round_active = False
    room.answering_player = None
    _enter(room, RoomState.ENDED)
    result = determine_winner(room)
    if result.is_tie:
        names = ', '.join(p.display_name for p in result.winners)
        logger.info(f"[game-end] room={room.code} tie between {names} at {result.score}")
    elif not result.winners:
        logger.info(f"[game-end] room={room.code} no players joined, no winner")
    else:
        logger.info(f"[game-end] room={room.code} winner={result.winners[0].display_name} score={result.score}")
    return result
