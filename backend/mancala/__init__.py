from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Session table, transport and timers are owned by this app instance
    from mancala.broadcaster import SocketIOBroadcaster
    from mancala.coordinator import SessionCoordinator
    from mancala.registry import SessionRegistry
    from mancala.services.games.scheduler import EvictionScheduler

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    flask_app.extensions['mancala'] = SessionCoordinator(
        SessionRegistry(stones_per_pit=int(flask_app.config.get('STONES_PER_PIT', 4))),
        SocketIOBroadcaster(socketio, namespace=namespace),
        EvictionScheduler(flask_app, socketio),
        finished_grace_sec=flask_app.config.get('FINISHED_GRACE_SEC', 300),
        cancelled_grace_sec=flask_app.config.get('CANCELLED_GRACE_SEC', 5),
        stale_waiting_sec=flask_app.config.get('STALE_WAITING_SEC', 600),
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from mancala.main import main
    flask_app.register_blueprint(main)

    from mancala.api.local import local
    flask_app.register_blueprint(local, url_prefix='/api/local')

    # Register Socket.IO event handlers
    from mancala.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('play')
    @click.option('--stones', type=int, default=None, help='Stones per pit (defaults to STONES_PER_PIT).')
    def play_command(stones):
        """Play a hot-seat game in the terminal."""
        from mancala.services.games.local import LocalGame
        from mancala.errors import MancalaError

        game = LocalGame(stones_per_pit=stones or int(flask_app.config.get('STONES_PER_PIT', 4)))
        click.echo(game.board.render())
        while not game.finished:
            player = game.board.current_player
            choice = click.prompt(f"Player {player + 1}, choose a pit (q to quit)", type=str)
            if choice.strip().lower() in ('q', 'quit'):
                click.echo('Bye!')
                return
            try:
                state = game.submit(choice.strip())
            except MancalaError as exc:
                click.echo(exc.message)
                continue
            click.echo(game.board.render())
            click.echo(state['statusMessage'])

    flask_app.cli.add_command(play_command)

    return flask_app
