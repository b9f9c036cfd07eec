from flask import current_app, jsonify, request

from neverhappened.routes import bp, current_voter_id, request_data
from neverhappened.services import (
    PostFilter,
    get_post,
    get_user_votes,
    list_posts_page,
    vote_post,
)

VOTE_STATUS_CODES = {
    "not_found": 404,
    "invalid_vote_type": 400,
    "conflict": 409,
    "store_error": 503,
}

VOTE_ERROR_MESSAGES = {
    "not_found": "Post not found",
    "invalid_vote_type": "Vote must be 'upvote' or 'downvote'",
    "conflict": "Another vote is in progress, please retry",
    "store_error": "Failed to process vote",
}


@bp.route('/posts')
def posts():
    """Published posts, filtered by ?category=&q= and ordered by ?sort=."""
    post_filter = PostFilter(
        category_slug=request.args.get('category'),
        search_query=request.args.get('q') or request.args.get('query'),
        sort=request.args.get('sort', 'trending'),
        limit=request.args.get('limit', current_app.config.get("POSTS_PER_PAGE", 10), type=int),
        offset=request.args.get('offset', 0, type=int),
    )
    page = list_posts_page(post_filter)

    # Current voter's votes so highlights persist after refresh
    my_votes = get_user_votes(current_voter_id(), [p.id for p in page.posts])

    return jsonify({
        "posts": [p.to_dict() for p in page.posts],
        "has_more": page.has_more,
        "my_votes": {str(k): v for k, v in my_votes.items()},
    })


@bp.route('/posts/<int:post_id>')
def post_detail(post_id: int):
    post = get_post(post_id)
    if post is None:
        return jsonify({"success": False, "reason": "not_found"}), 404

    data = post.to_dict()
    data["my_vote"] = get_user_votes(current_voter_id(), [post.id]).get(post.id)
    return jsonify(data)


@bp.route('/posts/<int:post_id>/vote', methods=['POST'])
def vote_post_route(post_id: int):
    data = request_data()
    vote_type = data.get('vote_type')

    result = vote_post(post_id=post_id, vote_type=vote_type, user_id=current_voter_id())

    if result.success:
        return jsonify({
            "success": True,
            "upvotes": result.upvotes,
            "downvotes": result.downvotes,
            "my_vote": result.my_vote,
        })

    return jsonify({
        "success": False,
        "reason": result.reason,
        "error": VOTE_ERROR_MESSAGES.get(result.reason, result.reason),
    }), VOTE_STATUS_CODES.get(result.reason, 400)
