"""Main (public) routes."""
from flask import Blueprint, current_app, jsonify, request, Response

from app.site import build_manifest
from app.submissions import SubmissionHandler, SubmissionSettings

main_bp = Blueprint("main", __name__)


def get_submission_handler() -> SubmissionHandler:
    """Handler for the current request, built from app config (no shared state between requests)."""
    return SubmissionHandler(SubmissionSettings.from_config(current_app.config))


@main_bp.route("/marketing-form", methods=["POST"])
def marketing_form():
    """Store a marketing form submission (form-encoded). Errors are rendered by the app's SubmissionError handler."""
    handler = get_submission_handler()
    result = handler.submit(request.form, remote_ip=request.remote_addr)
    return jsonify(result.to_dict())


@main_bp.route("/manifest.json")
def manifest():
    """Web app manifest."""
    return jsonify(build_manifest())


@main_bp.route("/robots.txt")
def robots():
    """Serve robots.txt allowing all crawlers."""
    body = """User-agent: *
Allow: /
"""
    return Response(body, mimetype="text/plain")
