import logging
import uuid

from flask import Flask, session
from config import Config
from neverhappened.extensions import db, migrate


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    flask_app.logger.setLevel(flask_app.config.get("LOG_LEVEL", logging.INFO))

    is_dev = flask_app.config.get("IS_DEV", False)

    if not is_dev and not flask_app.config.get("TESTING", False):
        if not flask_app.config.get("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY is not set")
        if not flask_app.config.get("SQLALCHEMY_DATABASE_URI"):
            raise RuntimeError("DATABASE_URL is not set")
        flask_app.config["AUTO_CREATE_DB"] = False

    if flask_app.config.get("SUBMISSION_MODE") not in ("publish", "moderate"):
        raise RuntimeError(f"Unknown SUBMISSION_MODE: {flask_app.config.get('SUBMISSION_MODE')!r}")

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)

    # dev only: auto create tables when migrations are not in use
    if flask_app.config.get("AUTO_CREATE_DB", False):
        try:
            with flask_app.app_context():
                from . import models  # noqa: F401  (registers models in metadata)

                from sqlalchemy import inspect
                inspector = inspect(db.engine)

                if not inspector.get_table_names():
                    flask_app.logger.warning("AUTO_CREATE_DB=1: creating tables (empty db).")
                    db.create_all()

                    inspector = inspect(db.engine)
                    flask_app.logger.warning(f"AUTO_CREATE_DB: tables now: {inspector.get_table_names()}")
        except Exception:
            flask_app.logger.exception("AUTO_CREATE_DB: error creating tables.")

    from neverhappened.routes import bp as main_bp
    flask_app.register_blueprint(main_bp)

    from neverhappened.cli import seed_categories_command
    flask_app.cli.add_command(seed_categories_command)

    @flask_app.before_request
    def assign_voter_id():
        # No accounts: each browser gets an opaque id in the signed session cookie
        if "voter_id" not in session:
            session["voter_id"] = uuid.uuid4().hex
            session.permanent = True

    return flask_app
