import os
import sys
import pytest

# Ensure the backend root (containing the `moviequiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from moviequiz import create_app, socketio
from moviequiz.models import Movie, Role, Room
from moviequiz.services.sessions import identity


STATIC_CATALOG = {
    'Classics': {
        'Casablanca': ['https://cdn.test/classics/casablanca/1.jpg', 'https://cdn.test/classics/casablanca/2.jpg'],
        'Vertigo': ['https://cdn.test/classics/vertigo/1.jpg'],
    },
    'Sci-Fi': {
        'Interstellar': ['https://cdn.test/scifi/interstellar/1.jpg'],
    },
}


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    PORT = 3000
    CORS_ALLOWED_ORIGINS = ['*']
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'
    SESSION_TEARDOWN_DELAY_SEC = 0
    CORRECT_ANSWER_POINTS = 1
    MEDIA_CATALOG_BACKEND = 'static'
    MEDIA_CATALOG_ROOT = 'movie-quiz/themes'
    MEDIA_CATALOG_STATIC = STATIC_CATALOG


class CountingCatalog:
    """Static catalog that records how often each listing is requested."""

    def __init__(self, data=None, fail_themes=False, fail_movies_for=()):
        self.data = data if data is not None else STATIC_CATALOG
        self.fail_themes = fail_themes
        self.fail_movies_for = set(fail_movies_for)
        self.calls = []

    def list_themes(self, root):
        self.calls.append(('themes', root))
        if self.fail_themes:
            raise RuntimeError('media service down')
        return list(self.data)

    def list_movies(self, root, theme):
        self.calls.append(('movies', theme))
        if theme in self.fail_movies_for:
            raise RuntimeError(f'cannot list {theme}')
        return list(self.data[theme])

    def list_frames(self, root, theme, movie):
        self.calls.append(('frames', theme, movie))
        return list(self.data[theme][movie])


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _connect(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client(), namespace='/')
    connected = [e for e in test_client.get_received('/') if e['name'] == 'connected']
    test_client.conn_id = connected[0]['args'][0]['connection_id'] if connected else None
    return test_client


@pytest.fixture()
def connect(flask_app):
    """Factory for extra socket clients; every client is disconnected at teardown."""
    clients = []

    def _factory():
        c = _connect(flask_app)
        clients.append(c)
        return c

    yield _factory
    for c in clients:
        try:
            c.disconnect(namespace='/')
        except Exception:
            pass


@pytest.fixture()
def sio_client(connect):
    return connect()


@pytest.fixture()
def counting_catalog(flask_app, monkeypatch):
    from moviequiz import catalog
    fake = CountingCatalog()
    monkeypatch.setattr(catalog, 'backend', fake)
    return fake


@pytest.fixture()
def room():
    return Room(code='R1')


@pytest.fixture()
def full_room(room):
    """A room with every slot bound and the Classics catalog cached."""
    identity.bind(room, Role.HOST, 'host-conn')
    identity.bind(room, Role.GAME, 'game-conn')
    for i, player in enumerate(room.players):
        identity.bind(room, Role.PLAYER, f'player-conn-{i}', display_name=player.display_name)
    room.theme_catalog = {
        'Classics': [Movie(name='Casablanca', index=0), Movie(name='Vertigo', index=1)],
    }
    room.catalog_loaded = True
    return room
