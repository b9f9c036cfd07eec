from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Optional, Iterable, Dict, List
from urllib.parse import urlparse, unquote

from flask import current_app
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from neverhappened.extensions import db
from neverhappened.models import (
    Category,
    Post,
    Submission,
    Vote,
    STATUS_PENDING,
    STATUS_PUBLISHED,
    VOTE_TYPES,
)

# Categories

def list_categories() -> List[Category]:
    try:
        return db.session.execute(select(Category).order_by(Category.name.asc())).scalars().all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to fetch categories")
        return []


def get_category_by_slug(slug: str) -> Optional[Category]:
    if not slug:
        return None
    try:
        return Category.query.filter_by(slug=slug).first()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to fetch category %r", slug)
        return None

# Post listing

SORT_OPTIONS = ("trending", "recent", "top")
DEFAULT_SORT = "trending"
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class PostFilter:
    category_slug: Optional[str] = None
    search_query: Optional[str] = None
    sort: str = DEFAULT_SORT
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def normalized(self, max_page_size: int = 50) -> "PostFilter":
        slug = (self.category_slug or "").strip() or None
        search = (self.search_query or "").strip() or None
        sort = self.sort if self.sort in SORT_OPTIONS else DEFAULT_SORT
        limit = min(max(int(self.limit), 1), int(max_page_size))
        offset = max(int(self.offset), 0)
        return replace(self, category_slug=slug, search_query=search, sort=sort, limit=limit, offset=offset)


@dataclass(frozen=True)
class PostPage:
    posts: List[Post] = field(default_factory=list)
    has_more: bool = False


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_posts_query(post_filter: PostFilter):
    """Translate a PostFilter into a SELECT over published posts.

    Nothing is executed here. An unknown category slug makes the scalar
    subquery yield NULL, so the statement matches no rows instead of
    falling back to every category.

    "trending" is upvotes with a recency tie-break; there is no time decay.
    """
    f = post_filter.normalized(max_page_size=max(post_filter.limit, 1))

    stmt = (
        select(Post)
        .options(joinedload(Post.category))
        .where(Post.status == STATUS_PUBLISHED)
    )

    if f.category_slug:
        category_id = (
            select(Category.id)
            .where(Category.slug == f.category_slug)
            .scalar_subquery()
        )
        stmt = stmt.where(Post.category_id == category_id)

    if f.search_query:
        pattern = _like_pattern(f.search_query)
        stmt = stmt.where(or_(
            Post.title.ilike(pattern, escape="\\"),
            Post.description.ilike(pattern, escape="\\"),
        ))

    if f.sort == "recent":
        stmt = stmt.order_by(Post.created_at.desc())
    elif f.sort == "top":
        stmt = stmt.order_by(Post.upvotes.desc())
    else:  # trending
        stmt = stmt.order_by(Post.upvotes.desc(), Post.created_at.desc())

    # stable pages
    stmt = stmt.order_by(Post.id.desc())

    return stmt.offset(f.offset).limit(f.limit)


def list_posts(post_filter: Optional[PostFilter] = None) -> List[Post]:
    post_filter = post_filter or PostFilter()
    max_page_size = current_app.config.get("MAX_PAGE_SIZE", 50)
    post_filter = post_filter.normalized(max_page_size=max_page_size)
    try:
        return db.session.execute(build_posts_query(post_filter)).scalars().all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to fetch posts for %r", post_filter)
        return []


def list_posts_page(post_filter: Optional[PostFilter] = None) -> PostPage:
    post_filter = (post_filter or PostFilter()).normalized(
        max_page_size=current_app.config.get("MAX_PAGE_SIZE", 50)
    )
    posts = list_posts(post_filter)
    return PostPage(posts=posts, has_more=len(posts) == post_filter.limit)


def get_post(post_id: int) -> Optional[Post]:
    try:
        return db.session.get(Post, int(post_id))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to fetch post %s", post_id)
        return None

# Votes

@dataclass(frozen=True)
class VotePostResult:
    success: bool
    reason: str  # "ok" | "not_found" | "invalid_vote_type" | "conflict" | "store_error"
    upvotes: Optional[int] = None
    downvotes: Optional[int] = None
    my_vote: Optional[str] = None  # "upvote", "downvote", or None (removed / not tracked)


def _count_votes(post_id: int):
    rows = (
        db.session.query(Vote.vote_type, func.count(Vote.id))
        .filter(Vote.post_id == post_id)
        .group_by(Vote.vote_type)
        .all()
    )
    counts = dict(rows)
    return counts.get("upvote", 0), counts.get("downvote", 0)


def _vote_with_ledger(post_id: int, user_id: str, vote_type: str) -> VotePostResult:
    # Row lock serializes concurrent votes on the same post (no-op on SQLite)
    post = db.session.execute(
        select(Post)
        .where(Post.id == post_id, Post.status == STATUS_PUBLISHED)
        .with_for_update(of=Post)
    ).scalar_one_or_none()
    if post is None:
        return VotePostResult(success=False, reason="not_found")

    vote = Vote.query.filter_by(post_id=post.id, user_id=user_id).first()

    if vote and vote.vote_type == vote_type:
        db.session.delete(vote)
        my_vote = None
    else:
        my_vote = vote_type
        if vote is None:
            db.session.add(Vote(post_id=post.id, user_id=user_id, vote_type=vote_type))
        else:
            vote.vote_type = vote_type

    db.session.flush()

    # Counters are rebuilt from the ledger so drift heals itself
    post.upvotes, post.downvotes = _count_votes(post.id)
    db.session.commit()
    return VotePostResult(
        success=True, reason="ok",
        upvotes=post.upvotes, downvotes=post.downvotes, my_vote=my_vote,
    )


def _vote_anonymously(post_id: int, vote_type: str) -> VotePostResult:
    column = Post.upvotes if vote_type == "upvote" else Post.downvotes
    result = db.session.execute(
        update(Post)
        .where(Post.id == post_id, Post.status == STATUS_PUBLISHED)
        .values({column: column + 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.rollback()
        return VotePostResult(success=False, reason="not_found")
    db.session.commit()

    post = db.session.get(Post, post_id)
    return VotePostResult(success=True, reason="ok", upvotes=post.upvotes, downvotes=post.downvotes)


def vote_post(post_id: int, vote_type: str, user_id: Optional[str] = None) -> VotePostResult:
    """Record a vote and return the post's fresh counters.

    With a user_id the vote goes through the ledger: a repeat of the same
    vote removes it, the opposite vote replaces it. Without one the named
    counter is bumped atomically in the database.
    """
    if vote_type not in VOTE_TYPES:
        return VotePostResult(success=False, reason="invalid_vote_type")

    try:
        post_id = int(post_id)
        if user_id is None:
            return _vote_anonymously(post_id, vote_type)
        return _vote_with_ledger(post_id, str(user_id), vote_type)
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("Concurrent vote on post %s by %s", post_id, user_id)
        return VotePostResult(success=False, reason="conflict")
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to record vote on post %s", post_id)
        return VotePostResult(success=False, reason="store_error")


def get_user_votes(user_id: Optional[str], post_ids: Iterable[int]) -> Dict[int, str]:
    ids = [int(x) for x in post_ids]
    if not user_id or not ids:
        return {}
    try:
        votes = Vote.query.filter(Vote.user_id == str(user_id), Vote.post_id.in_(ids)).all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to fetch votes for %s", user_id)
        return {}
    return {v.post_id: v.vote_type for v in votes}

# Submissions

TWITTER_HOSTS = ("twitter.com", "x.com")
LINKEDIN_HOSTS = ("linkedin.com",)

_LINKEDIN_SHARE_RE = re.compile(r"urn:li:share:(\d+)")
_LINKEDIN_ACTIVITY_RE = re.compile(r"activity:(\d+)")
_DIGITS_RE = re.compile(r"^\d+$")

MAX_TITLE_LEN = 200
MAX_DESCRIPTION_LEN = 2000

SUBMIT_ERROR_MESSAGES = {
    "invalid_url": "Invalid URL provided",
    "unrecognized_url": "Could not identify the post from the URL. Please provide a valid Twitter or LinkedIn post URL.",
    "missing_post_id": "Could not identify the post from the URL. Please provide a valid Twitter or LinkedIn post URL.",
    "invalid_post_id": "Invalid post ID format",
    "invalid_title": "Title must be text",
    "invalid_description": "Description must be text",
    "too_long_title": f"Title must be at most {MAX_TITLE_LEN} characters",
    "too_long_description": f"Description must be at most {MAX_DESCRIPTION_LEN} characters",
    "missing_category": "Please select a category",
    "already_submitted": "This post has already been submitted",
    "store_error": "Failed to submit post",
}


class PostUrlError(ValueError):
    def __init__(self, reason: str):
        super().__init__(SUBMIT_ERROR_MESSAGES.get(reason, reason))
        self.reason = reason


@dataclass(frozen=True)
class ParsedPostUrl:
    post_type: str  # "twitter" | "linkedin"
    post_id: str


def _host_matches(host: str, domains) -> bool:
    return any(host == d or host.endswith("." + d) for d in domains)


def _twitter_post_id(path: str) -> Optional[str]:
    parts = [p for p in path.split("/") if p]
    if not parts:
        return None
    # /<user>/status/<id>/photo/1 still points at <id>
    for marker in ("status", "statuses"):
        if marker in parts:
            idx = parts.index(marker)
            if idx + 1 < len(parts):
                return parts[idx + 1]
    return parts[-1]


def _linkedin_post_id(post_url: str) -> Optional[str]:
    decoded = unquote(post_url)
    match = _LINKEDIN_SHARE_RE.search(decoded) or _LINKEDIN_ACTIVITY_RE.search(decoded)
    return match.group(1) if match else None


def parse_post_url(post_url: str, strict_ids: bool = True) -> ParsedPostUrl:
    """Classify a post URL by platform and pull out the external post id.

    Raises PostUrlError with one of: invalid_url, unrecognized_url,
    missing_post_id, invalid_post_id.
    """
    if not isinstance(post_url, str):
        raise PostUrlError("invalid_url")

    post_url = post_url.strip()
    try:
        parsed = urlparse(post_url)
        host = (parsed.hostname or "").lower()
    except ValueError:
        raise PostUrlError("invalid_url")

    if parsed.scheme not in ("http", "https") or not host:
        raise PostUrlError("invalid_url")

    if _host_matches(host, TWITTER_HOSTS):
        post_type = "twitter"
        post_id = _twitter_post_id(parsed.path)
    elif _host_matches(host, LINKEDIN_HOSTS):
        post_type = "linkedin"
        post_id = _linkedin_post_id(post_url)
    else:
        raise PostUrlError("unrecognized_url")

    if not post_id:
        raise PostUrlError("missing_post_id")

    if strict_ids and not _DIGITS_RE.match(post_id):
        raise PostUrlError("invalid_post_id")

    return ParsedPostUrl(post_type=post_type, post_id=post_id)


@dataclass(frozen=True)
class SubmitPostResult:
    success: bool
    reason: str  # "ok" | see SUBMIT_ERROR_MESSAGES
    post_id: Optional[int] = None
    submission_id: Optional[int] = None

    @property
    def error(self) -> Optional[str]:
        if self.success:
            return None
        return SUBMIT_ERROR_MESSAGES.get(self.reason, self.reason)


def _already_submitted(parsed: ParsedPostUrl, moderate: bool) -> bool:
    exists = (
        Post.query
        .filter_by(post_type=parsed.post_type, post_id=parsed.post_id)
        .first()
    )
    if exists is not None:
        return True
    if moderate:
        pending = (
            Submission.query
            .filter_by(post_type=parsed.post_type, post_id=parsed.post_id, status=STATUS_PENDING)
            .first()
        )
        return pending is not None
    return False


def submit_post(
    *,
    post_url: str,
    title: Optional[str],
    description: Optional[str],
    category_id,
    submitted_by: str = "anonymous",
) -> SubmitPostResult:
    strict_ids = current_app.config.get("STRICT_POST_IDS", True)
    moderate = current_app.config.get("SUBMISSION_MODE", "publish") == "moderate"

    try:
        parsed = parse_post_url(post_url, strict_ids=strict_ids)
    except PostUrlError as e:
        current_app.logger.info("Rejected submission %r: %s", post_url, e.reason)
        return SubmitPostResult(success=False, reason=e.reason)

    if title is not None and not isinstance(title, str):
        return SubmitPostResult(success=False, reason="invalid_title")

    if description is not None and not isinstance(description, str):
        return SubmitPostResult(success=False, reason="invalid_description")

    title = (title or "").strip()
    description = (description or "").strip()

    if len(title) > MAX_TITLE_LEN:
        return SubmitPostResult(success=False, reason="too_long_title")

    if len(description) > MAX_DESCRIPTION_LEN:
        return SubmitPostResult(success=False, reason="too_long_description")

    try:
        category_id = int(category_id)
    except (TypeError, ValueError):
        return SubmitPostResult(success=False, reason="missing_category")

    try:
        if db.session.get(Category, category_id) is None:
            return SubmitPostResult(success=False, reason="missing_category")

        if _already_submitted(parsed, moderate):
            return SubmitPostResult(success=False, reason="already_submitted")

        if moderate:
            submission = Submission(
                post_type=parsed.post_type,
                post_id=parsed.post_id,
                category_id=category_id,
                title=title or None,
                description=description or None,
                submitted_by=submitted_by,
                status=STATUS_PENDING,
            )
            db.session.add(submission)
            db.session.commit()
            return SubmitPostResult(success=True, reason="ok", submission_id=submission.id)

        post = Post(
            post_type=parsed.post_type,
            post_id=parsed.post_id,
            title=title or None,
            description=description or None,
            category_id=category_id,
            submitted_by=submitted_by,
            status=STATUS_PUBLISHED,
            upvotes=0,
            downvotes=0,
        )
        db.session.add(post)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return SubmitPostResult(success=False, reason="already_submitted")
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error creating post from %r", post_url)
        return SubmitPostResult(success=False, reason="store_error")

    # Listings are always read from the database, so the post shows up on the next request
    current_app.logger.info("Published %s post %s as #%s", post.post_type, post.post_id, post.id)
    return SubmitPostResult(success=True, reason="ok", post_id=post.id)
