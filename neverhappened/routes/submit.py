from flask import jsonify

from neverhappened.routes import bp, request_data
from neverhappened.services import submit_post

SUBMIT_STATUS_CODES = {
    "already_submitted": 409,
    "store_error": 503,
}


@bp.route('/submit', methods=['POST'])
def submit():
    data = request_data()

    # No accounts, every submission is anonymous
    result = submit_post(
        post_url=data.get('post_url') or data.get('postUrl') or '',
        title=data.get('title'),
        description=data.get('description'),
        category_id=data.get('category_id') or data.get('categoryId'),
    )

    if result.success:
        body = {"success": True}
        if result.post_id is not None:
            body["post_id"] = result.post_id
        if result.submission_id is not None:
            body["submission_id"] = result.submission_id
        return jsonify(body), 201

    return jsonify({
        "success": False,
        "reason": result.reason,
        "error": result.error,
    }), SUBMIT_STATUS_CODES.get(result.reason, 400)
