from flask import jsonify

from neverhappened.routes import bp
from neverhappened.services import list_categories, get_category_by_slug


@bp.route('/categories')
def categories():
    return jsonify({"categories": [c.to_dict() for c in list_categories()]})


@bp.route('/categories/<slug>')
def category_detail(slug):
    category = get_category_by_slug(slug)
    if category is None:
        return jsonify({"success": False, "reason": "not_found"}), 404
    return jsonify(category.to_dict())
