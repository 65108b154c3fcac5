from flask import Flask, jsonify, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from referee.errors import RefereeError
from referee.services.matches import AttestationSigner, MatchEngine, MatchRegistry

socketio = SocketIO(async_mode=None)


def get_engine() -> MatchEngine:
    return current_app.extensions['referee']


def broadcast_state(match) -> None:
    socketio.emit(
        'state_update',
        {'matchId': match.match_id, 'game': match.to_dict()},
        to=f"match:{match.match_id}",
        namespace='/ws',
    )


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    # No signer, no service: a winner we cannot attest is never declared.
    signer = AttestationSigner.from_key(flask_app.config.get('SIGNER_PRIVATE_KEY'))
    flask_app.logger.info(f"[signer] loaded address={signer.address} chain_id={flask_app.config['CHAIN_ID']}")

    registry = MatchRegistry(id_digits=int(flask_app.config.get('MATCH_ID_DIGITS', 6)))
    flask_app.extensions['referee'] = MatchEngine(
        registry,
        signer,
        chain_id=flask_app.config['CHAIN_ID'],
        replay_starter=flask_app.config.get('DRAW_REPLAY_STARTER', 'same'),
        logger=flask_app.logger,
        on_change=broadcast_state,
    )

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from referee.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    # Paths the browser client polls and posts to
    from referee.routes import legacy
    flask_app.register_blueprint(legacy)

    from referee.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @flask_app.errorhandler(RefereeError)
    def handle_referee_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @click.command('signer-info')
    @click.option('--expected', default=None, help='Address the settlement contract trusts.')
    def signer_info_command(expected):
        """Print the signer address; compare it with the contract's trusted signer."""
        engine = flask_app.extensions['referee']
        click.echo(f"Signer address: {engine.signer.address}")
        click.echo(f"Chain id: {engine.chain_id}")
        if expected is None:
            return
        if expected.strip().lower() != engine.signer.address.lower():
            raise click.ClickException(f"MISMATCH: contract trusts {expected}")
        click.echo('MATCH: signing key belongs to the trusted signer.')

    flask_app.cli.add_command(signer_info_command)

    return flask_app
