from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

SOCKET_NAMESPACE = '/ws'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS', '*')
    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    # No migrations directory ships: the account table comes from
    # CREATE_TABLES (db.create_all) or `flask db-reset`. Run `flask db init`
    # before the first schema change to start versioning it.
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/admin')

    # The single shared round lives on the app so handlers and timers find it
    from bingo.services.game import BingoRound
    flask_app.extensions['bingo_round'] = BingoRound(flask_app)

    from bingo.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # Admin requests carry a bearer token instead of a session cookie
    from bingo.models import AdminUser

    @login_manager.request_loader
    def load_admin_from_request(request):
        return AdminUser.from_authorization(
            request.headers.get('Authorization', ''),
            current_app.config['ADMIN_SECRET'],
        )

    @login_manager.unauthorized_handler
    def forbidden():
        return jsonify({'error': 'Forbidden'}), 403

    if flask_app.config.get('CREATE_TABLES'):
        with flask_app.app_context():
            db.create_all()

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the ledger tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
