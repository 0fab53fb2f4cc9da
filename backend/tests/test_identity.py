from moviequiz.models import Role
from moviequiz.services.sessions.identity import bind


def test_player_binds_by_display_name(room):
    result = bind(room, Role.PLAYER, 'c1', display_name='Черепашки')
    assert result is not None and not result.rebound
    player = room.find_player('Черепашки')
    assert player.connection_id == 'c1'
    assert player.logical_id


def test_player_unknown_name_is_dropped(room):
    assert bind(room, Role.PLAYER, 'c1', display_name='Someone') is None
    assert len(room.players) == 3
    assert not any(p.is_bound for p in room.players)


def test_player_duplicate_join_is_ignored(room):
    first = bind(room, Role.PLAYER, 'c1', display_name='Черепашки')
    assert bind(room, Role.PLAYER, 'c1', display_name='Черепашки') is None
    assert room.find_player('Черепашки').logical_id == first.participant.logical_id


def test_player_rebind_preserves_score_and_id(room):
    first = bind(room, Role.PLAYER, 'c1', display_name='Черепашки')
    logical_id = first.participant.logical_id
    room.find_player('Черепашки').score = 5

    result = bind(room, Role.PLAYER, 'c2', display_name='Черепашки')
    assert result.rebound
    player = room.find_player('Черепашки')
    assert player.connection_id == 'c2'
    assert player.logical_id == logical_id
    assert player.score == 5


def test_player_rebind_with_foreign_logical_id_is_ignored(room):
    bind(room, Role.PLAYER, 'c1', logical_id='abc', display_name='Черепашки')
    assert bind(room, Role.PLAYER, 'c2', logical_id='xyz', display_name='Черепашки') is None
    assert room.find_player('Черепашки').connection_id == 'c1'


def test_each_slot_holds_one_connection(room):
    bind(room, Role.PLAYER, 'c1', display_name='Черепашки')
    bind(room, Role.PLAYER, 'c2', display_name='Черепушки')
    bind(room, Role.PLAYER, 'c3', display_name='Черемушки')
    conns = [p.connection_id for p in room.players]
    assert conns == ['c1', 'c2', 'c3']


def test_host_first_join_mints_id(room):
    result = bind(room, Role.HOST, 'h1')
    assert result.participant is room.host
    assert room.host.logical_id
    assert room.host.connection_id == 'h1'


def test_host_first_join_keeps_supplied_id(room):
    bind(room, Role.HOST, 'h1', logical_id='host-1')
    assert room.host.logical_id == 'host-1'


def test_host_reconnect_with_known_id_updates_connection(room):
    first = bind(room, Role.HOST, 'h1')
    result = bind(room, Role.HOST, 'h2', logical_id=first.participant.logical_id)
    assert result.rebound
    assert room.host.connection_id == 'h2'


def test_host_same_connection_is_duplicate(room):
    first = bind(room, Role.HOST, 'h1')
    assert bind(room, Role.HOST, 'h1', logical_id=first.participant.logical_id) is None


def test_second_host_page_cannot_replace_bound_host(room):
    first = bind(room, Role.HOST, 'h1')
    assert bind(room, Role.HOST, 'h2') is None
    assert bind(room, Role.HOST, 'h3', logical_id='stale') is None
    assert room.host.connection_id == 'h1'
    assert room.host.logical_id == first.participant.logical_id


def test_game_slot_is_independent_of_host(room):
    bind(room, Role.HOST, 'h1')
    result = bind(room, Role.GAME, 'g1')
    assert result.participant is room.game
    assert room.game.logical_id != room.host.logical_id


def test_missing_connection_is_dropped(room):
    assert bind(room, Role.GAME, '') is None
    assert not room.game.is_bound
