from moviequiz.schemas import EVENT_SCHEMAS, GetFrames, PlayerJoin, PlayerPoints, RoomEvent, SendPoints, parse_event


def test_room_only_event_accepts_bare_code():
    payload = parse_event('start_round', ('R1',))
    assert isinstance(payload, RoomEvent)
    assert payload.room == 'R1'


def test_numeric_room_code_becomes_string():
    assert parse_event('create_session', (1234,)).room == '1234'


def test_object_payload_with_camel_case_keys():
    payload = parse_event('player_join_room', ({'room': 'R1', 'displayName': 'Черепашки', 'connectionId': 'c1'},))
    assert isinstance(payload, PlayerJoin)
    assert payload.display_name == 'Черепашки'
    assert payload.connection_id == 'c1'
    assert payload.logical_id is None


def test_object_payload_with_snake_case_keys():
    payload = parse_event('get_frames', ({'room': 'R1', 'theme': 'Classics', 'movie': 'Vertigo'},))
    assert isinstance(payload, GetFrames)
    assert payload.movie == 'Vertigo'


def test_send_points_positional_order_starts_with_delta():
    payload = parse_event('send_points', (5, 'R1', 'Черепашки', 'g1'))
    assert isinstance(payload, SendPoints)
    assert (payload.room, payload.display_name, payload.delta, payload.target_connection_id) == ('R1', 'Черепашки', 5, 'g1')


def test_player_points_positional_order_starts_with_room():
    payload = parse_event('player_points', ('R1', 'Черепашки', -2))
    assert isinstance(payload, PlayerPoints)
    assert payload.delta == -2
    assert payload.target_connection_id is None


def test_invalid_payloads_are_dropped():
    assert parse_event('start_round', ()) is None
    assert parse_event('start_round', ('',)) is None
    assert parse_event('send_points', ('many', 'R1', 'Черепашки')) is None
    assert parse_event('get_frames', ('R1', 'Classics')) is None
    assert parse_event('start_round', ('R1', 'extra', 'args')) is None
    assert parse_event('unknown_event', ('R1',)) is None


def test_every_schema_requires_room():
    for event in EVENT_SCHEMAS:
        assert parse_event(event, ({},)) is None
