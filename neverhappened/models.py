from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, UniqueConstraint

from neverhappened.extensions import db

POST_TYPES = ("twitter", "linkedin")
VOTE_TYPES = ("upvote", "downvote")

STATUS_PUBLISHED = "published"
STATUS_PENDING = "pending"


def _utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    posts = db.relationship('Post', back_populates='category', lazy=True)

    @property
    def display_description(self):
        """Description shown on the categories page, with a generated fallback."""
        if self.description:
            return self.description
        return f"A collection of {self.name.lower()} stories that never happened"

    def to_dict(self, brief=False):
        data = {"id": self.id, "name": self.name, "slug": self.slug}
        if brief:
            return data
        data.update(
            description=self.description,
            display_description=self.display_description,
            created_at=_isoformat(self.created_at),
        )
        return data

    def __repr__(self):
        return f'<Category {self.slug}>'


class Post(db.Model):
    __tablename__ = 'posts'

    id = db.Column(db.Integer, primary_key=True)
    post_type = db.Column(db.String(16), nullable=False)
    # external platform identifier
    post_id = db.Column(db.String(64), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=True)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PUBLISHED, index=True)
    upvotes = db.Column(db.Integer, nullable=False, default=0)
    downvotes = db.Column(db.Integer, nullable=False, default=0)
    submitted_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow, index=True)

    category = db.relationship('Category', back_populates='posts', lazy='joined', innerjoin=True)
    votes = db.relationship('Vote', back_populates='post', lazy=True, passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('post_type', 'post_id', name='uq_posts_type_post_id'),
        CheckConstraint("post_type in ('twitter', 'linkedin')", name='ck_posts_post_type'),
        CheckConstraint('upvotes >= 0 and downvotes >= 0', name='ck_posts_counters'),
    )

    @property
    def score(self):
        return (self.upvotes or 0) - (self.downvotes or 0)

    @property
    def permalink(self):
        if self.post_type == "linkedin":
            return f"https://www.linkedin.com/feed/update/urn:li:share:{self.post_id}"
        return f"https://twitter.com/x/status/{self.post_id}"

    @property
    def embed_url(self):
        if self.post_type == "linkedin":
            return f"https://www.linkedin.com/embed/feed/update/urn:li:share:{self.post_id}?collapsed=1"
        return self.permalink

    def to_dict(self):
        return {
            "id": self.id,
            "post_type": self.post_type,
            "post_id": self.post_id,
            "category_id": self.category_id,
            "category": self.category.to_dict(brief=True) if self.category else None,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "upvotes": self.upvotes,
            "downvotes": self.downvotes,
            "score": self.score,
            "submitted_by": self.submitted_by,
            "permalink": self.permalink,
            "embed_url": self.embed_url,
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Post {self.id} {self.post_type}:{self.post_id}>"


class Vote(db.Model):
    __tablename__ = 'votes'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    vote_type = db.Column(db.String(10), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    post = db.relationship('Post', back_populates='votes')

    __table_args__ = (
        UniqueConstraint('post_id', 'user_id', name='uq_votes_post_user'),
        CheckConstraint("vote_type in ('upvote', 'downvote')", name='ck_votes_vote_type'),
    )

    def __repr__(self):
        return f"<Vote post={self.post_id} user={self.user_id} {self.vote_type}>"


class Submission(db.Model):
    __tablename__ = 'submissions'

    id = db.Column(db.Integer, primary_key=True)
    post_type = db.Column(db.String(16), nullable=False)
    post_id = db.Column(db.String(64), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False)
    title = db.Column(db.String(200), nullable=True)
    description = db.Column(db.Text, nullable=True)
    submitted_by = db.Column(db.String(64), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    # moderator's note, not the submitter's text
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    category = db.relationship('Category', lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "post_type": self.post_type,
            "post_id": self.post_id,
            "category_id": self.category_id,
            "title": self.title,
            "description": self.description,
            "submitted_by": self.submitted_by,
            "status": self.status,
            "notes": self.notes,
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Submission {self.id} {self.post_type}:{self.post_id} {self.status}>"
