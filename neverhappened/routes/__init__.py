from flask import Blueprint, jsonify, request, session

bp = Blueprint('routes', __name__)


def current_voter_id():
    return session.get("voter_id")


def request_data():
    """JSON object body, else form fields. Anything else counts as empty."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


@bp.app_errorhandler(404)
def not_found(_error):
    return jsonify({"success": False, "reason": "not_found"}), 404


@bp.app_errorhandler(405)
def method_not_allowed(_error):
    return jsonify({"success": False, "reason": "method_not_allowed"}), 405


# Imports at the end so bp already exists
from neverhappened.routes import categories, posts, submit  # noqa: E402,F401
