from contextlib import contextmanager
from flask import current_app, request
from flask_socketio import emit
from typing import Any, Callable, Iterator, Optional

from moviequiz import catalog, registry, router, socketio
from moviequiz.models import Participant, Role, Room, RoomState
from moviequiz.schemas import RoomEvent, parse_event
from moviequiz.services.sessions import identity, machine, scoring
from moviequiz.services.sessions.catalog import CatalogError
from moviequiz.services.sessions.scheduler import schedule_teardown


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _lookup(payload: RoomEvent, event: str) -> Optional[Room]:
    room = registry.get_session(payload.room)
    if room is None:
        current_app.logger.info(f"[{event}] room={payload.room} unknown, ignored")
        return None
    if room.state is RoomState.ENDED and event != 'end_game':
        current_app.logger.info(f"[{event}] room={payload.room} already ended, ignored")
        return None
    return room


def _still_live(room: Room, event: str) -> bool:
    """Re-check a room after a catalog call; it may have been torn down meanwhile."""
    if registry.get_session(room.code) is not room or room.state is RoomState.ENDED:
        current_app.logger.info(f"[{event}] room={room.code} gone while fetching, result discarded")
        return False
    return True


@contextmanager
def _unlocked(room: Room) -> Iterator[None]:
    """Let other events for ``room`` through while a catalog call is in flight."""
    room.lock.release()
    try:
        yield
    finally:
        room.lock.acquire()


def _load_catalog(room: Room, event: str) -> bool:
    """Fill the room's theme cache on first use; False when it stays unavailable."""
    if room.catalog_loaded:
        current_app.logger.info(f"[catalog-cached] room={room.code}")
        return True
    try:
        with _unlocked(room):
            themes, complete = catalog.load_theme_map()
    except CatalogError as exc:
        current_app.logger.warning(f"[catalog-fail] room={room.code} themes unavailable: {exc}")
        return False
    if not _still_live(room, event):
        return False
    # A concurrent get_themes may have filled the cache first; keep its guessed flags
    if not room.catalog_loaded:
        room.theme_catalog = themes
        room.catalog_loaded = True
        if not complete:
            current_app.logger.warning(f"[catalog-partial] room={room.code} some themes have no movies")
    return True


def _to_game_display(room: Room, event: str, payload: Any, sender: str) -> None:
    if room.game.is_bound:
        router.to_connection(room.game.connection_id, event, payload)
    else:
        router.to_room(room.code, event, payload, skip_sid=sender)


def _emit_points(room: Room, player: Participant, target: Optional[str] = None) -> None:
    router.to_connection(target or room.game.connection_id, 'all_points', room.players_to_dict())
    router.to_connection(player.connection_id, 'your_points', player.score)


def _after_bind(room: Room) -> None:
    if not machine.check_roster(room):
        return
    router.to_room(room.code, 'start_game', {'room': room.code})
    if _load_catalog(room, 'start_game'):
        router.to_connection(room.host.connection_id, 'all_themes', room.themes_to_dict())


def handle_connect(auth=None):
    emit('connected', {'connection_id': _get_sid()})


def handle_disconnect(reason=None):
    # Bindings survive a disconnect so the page can reload and rebind
    current_app.logger.info(f"[disconnect] conn={_get_sid()} reason={reason}")


def handle_create_session(payload):
    registry.create_session(payload.room)


def handle_player_join(payload):
    room = _lookup(payload, 'player_join_room')
    if not room:
        return
    sid = _get_sid()
    result = identity.bind(room, Role.PLAYER, payload.connection_id or sid, payload.logical_id, payload.display_name)
    if result is None:
        return
    player = result.participant
    router.join(room.code, sid)
    emit('player_joined', {
        'logical_id': player.logical_id,
        'display_name': player.display_name,
        'emblem': player.emblem,
    })
    router.to_room(room.code, 'check_player', room.players_to_dict())
    router.to_connection(player.connection_id, 'your_points', player.score)
    _after_bind(room)


def handle_host_join(payload):
    room = _lookup(payload, 'host_join_room')
    if not room:
        return
    sid = _get_sid()
    result = identity.bind(room, Role.HOST, payload.connection_id or sid, payload.logical_id)
    if result is None:
        return
    router.join(room.code, sid)
    emit('host_joined', {'logical_id': result.participant.logical_id})
    emit('check_player', room.players_to_dict())
    emit('all_points', room.players_to_dict())
    if room.catalog_loaded:
        emit('all_themes', room.themes_to_dict())
    if room.game.is_bound:
        emit('game_page_id', {'connection_id': room.game.connection_id})
    _after_bind(room)


def handle_game_join(payload):
    room = _lookup(payload, 'game_join_room')
    if not room:
        return
    sid = _get_sid()
    result = identity.bind(room, Role.GAME, payload.connection_id or sid, payload.logical_id)
    if result is None:
        return
    game = result.participant
    router.join(room.code, sid)
    emit('game_joined', {'logical_id': game.logical_id})
    emit('check_player', room.players_to_dict())
    emit('all_points', room.players_to_dict())
    if room.host.is_bound:
        router.to_connection(room.host.connection_id, 'game_page_id', {'connection_id': game.connection_id})
    _after_bind(room)


def handle_start_round(payload):
    room = _lookup(payload, 'start_round')
    if room and machine.start_round(room):
        router.to_room(room.code, 'start_round', {'theme': room.active_theme, 'movie': room.active_movie},
                       skip_sid=_get_sid())


def handle_round_end(payload):
    room = _lookup(payload, 'round_end')
    if room and machine.round_end(room):
        router.to_room(room.code, 'round_end', None, skip_sid=_get_sid())


def handle_player_answer(payload):
    room = _lookup(payload, 'player_answer')
    if not room:
        return
    player = machine.player_answer(room, payload.display_name)
    if player:
        router.to_room(room.code, 'player_answer', {'display_name': player.display_name})


def handle_answer_yes(payload):
    room = _lookup(payload, 'answer_yes')
    if not room:
        return
    points = int(current_app.config.get('CORRECT_ANSWER_POINTS', 1))
    outcome = machine.answer_yes(room, payload.display_name, points=points)
    if outcome is None:
        return
    router.to_room(room.code, 'answer_yes', {
        'display_name': outcome.player.display_name,
        'emblem': outcome.player.emblem,
        'theme': outcome.theme,
        'movie': outcome.movie.name,
    })
    _to_game_display(room, 'show_logo', {
        'theme': outcome.theme,
        'movie': outcome.movie.name,
        'guessed_by': outcome.movie.guessed_by,
    }, _get_sid())
    _emit_points(room, outcome.player)


def handle_answer_no(payload):
    room = _lookup(payload, 'answer_no')
    if not room:
        return
    name = machine.answer_no(room)
    if name:
        router.to_room(room.code, 'answer_no', {'display_name': name})


def handle_points(payload):
    room = _lookup(payload, 'send_points')
    if not room:
        return
    player = scoring.add_points(room, payload.display_name, payload.delta)
    if player:
        _emit_points(room, player, payload.target_connection_id)


def handle_get_themes(payload):
    room = _lookup(payload, 'get_themes')
    if room and _load_catalog(room, 'get_themes'):
        emit('all_themes', room.themes_to_dict())


def handle_get_frames(payload):
    room = _lookup(payload, 'get_frames')
    if not room or machine.can_select_movie(room, payload.theme, payload.movie) is None:
        return
    with _unlocked(room):
        frames = catalog.fetch_frames(payload.theme, payload.movie)
    if frames is None or not _still_live(room, 'get_frames'):
        return
    movie = machine.select_movie(room, payload.theme, payload.movie)
    if movie:
        _to_game_display(room, 'all_frames', {'frames': frames, 'movie': movie.name}, _get_sid())


def handle_change_frame(payload):
    room = _lookup(payload, 'change_frame')
    if room:
        _to_game_display(room, 'change_frame', None, _get_sid())


def handle_end_game(payload):
    room = _lookup(payload, 'end_game')
    if not room:
        return
    result = machine.end_game(room)
    if result is None:
        return
    router.to_room(room.code, 'end_game_tie' if result.is_tie else 'end_game', result.to_dict())
    schedule_teardown(current_app._get_current_object(), room)


def handle_error(exc):
    # One bad event must not take down the process serving every room
    current_app.logger.exception(f"[socket-error] conn={_get_sid()} {exc}")


EVENT_HANDLERS = {
    'create_session': handle_create_session,
    'player_join_room': handle_player_join,
    'host_join_room': handle_host_join,
    'game_join_room': handle_game_join,
    'start_round': handle_start_round,
    'round_end': handle_round_end,
    'player_answer': handle_player_answer,
    'answer_yes': handle_answer_yes,
    'answer_no': handle_answer_no,
    'send_points': handle_points,
    'player_points': handle_points,
    'get_themes': handle_get_themes,
    'get_frames': handle_get_frames,
    'change_frame': handle_change_frame,
    'end_game': handle_end_game,
}


def _validated(event: str, handler: Callable) -> Callable:
    def _dispatch(*args):
        payload = parse_event(event, args)
        if payload is None:
            return
        # Handlers for one room run one at a time, whatever the async mode
        with registry.locked(payload.room):
            handler(payload)
    _dispatch.__name__ = f"on_{event}"
    return _dispatch


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Room events are validated into their schema before reaching the
    handler; invalid payloads are logged and dropped.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event, handler in EVENT_HANDLERS.items():
        socketio.on_event(event, _validated(event, handler), namespace=namespace)
    socketio.on_error(namespace)(handle_error)
