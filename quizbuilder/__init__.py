import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from quizbuilder.config import config, DEV_SECRET_KEY
from quizbuilder.database import create_tables, init_engine
from quizbuilder.errors import QuizBuilderError
from quizbuilder.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(config_name='default', **overrides):
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    app.config.update(overrides)

    configure_logging(app.config["LOG_LEVEL"])
    if app.config["SECRET_KEY"] == DEV_SECRET_KEY:
        logger.warning("SECRET_KEY not set. Using fallback. Set SECRET_KEY in production.")

    # Create database tables
    init_engine(app.config["SQLALCHEMY_DATABASE_URI"])
    create_tables()

    # Register blueprints
    from quizbuilder.blueprints.auth import auth
    from quizbuilder.blueprints.participants import participants
    from quizbuilder.blueprints.quizzes import quizzes
    from quizbuilder.blueprints.results import results

    app.register_blueprint(auth)
    app.register_blueprint(participants)
    app.register_blueprint(quizzes)
    app.register_blueprint(results)

    register_error_handlers(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(QuizBuilderError)
    def handle_quiz_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception("Unhandled error")
        return jsonify({"message": "Internal server error"}), 500
