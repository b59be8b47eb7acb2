"""Marzellus marketing site: Flask application factory."""
from flask import Flask, jsonify

from app.errors import SubmissionError
from app.models import db
from app.routes.main import main_bp


def create_app(config_object="app.config.Config") -> Flask:
    """Create and configure the Flask application."""
    # Pages and icons are published by the static site; this app only serves the form and JSON endpoints
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_object)

    db.init_app(app)
    with app.app_context():
        from app.models import Submission  # noqa: F401
        db.create_all()

    app.register_blueprint(main_bp)

    @app.errorhandler(SubmissionError)
    def submission_error(e: SubmissionError):
        if e.status_code >= 500:
            app.logger.error("Marketing form failed: %s", e.message)
        else:
            app.logger.info("Marketing form rejected (%s): %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"success": False, "code": "NOT_FOUND", "error": "Not found"}), 404

    return app
