from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from moviequiz.services.sessions.broadcast import BroadcastRouter
from moviequiz.services.sessions.catalog import CatalogError, MediaCatalog
from moviequiz.services.sessions.registry import SessionRegistry

socketio = SocketIO(async_mode=None)
registry = SessionRegistry()
catalog = MediaCatalog()
router = BroadcastRouter(socketio)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or ['*']
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins='*' if allowed_origins == ['*'] else allowed_origins)

    registry.init_app(flask_app)
    catalog.init_app(flask_app)
    router.init_app(flask_app)

    from moviequiz.main import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from moviequiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('catalog')
    def catalog_command():
        """Prints the theme -> movie listing from the configured media catalog."""
        try:
            themes, complete = catalog.load_theme_map()
        except CatalogError as exc:
            raise click.ClickException(str(exc))
        for theme, movies in themes.items():
            click.echo(f"{theme} ({len(movies)} movies)")
            for movie in movies:
                click.echo(f"  {movie.index}: {movie.name}")
        if not complete:
            click.echo('Some themes failed to load, see the log.', err=True)

    flask_app.cli.add_command(catalog_command)

    return flask_app
