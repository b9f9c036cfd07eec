from datetime import datetime, timedelta

import pytest

from neverhappened import create_app
from neverhappened.extensions import db
from config import Config
from neverhappened.models import Category, Post


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_DB = False
    SUBMISSION_MODE = "publish"
    STRICT_POST_IDS = True
    POSTS_PER_PAGE = 10
    MAX_PAGE_SIZE = 50


@pytest.fixture
def app():
    app = create_app(TestConfig)

    with app.app_context():
        db.drop_all()
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def category_ids(app):
    with app.app_context():
        cats = [
            Category(name="Overheard Conversations", slug="overheard"),
            Category(name="Airplane Stories", slug="airplane", description="Everybody clapped."),
        ]
        db.session.add_all(cats)
        db.session.commit()

        # ids saved before leaving the context
        return {c.slug: c.id for c in cats}


BASE_TIME = datetime(2025, 3, 1, 12, 0, 0)


def _make_post(category_id, n, *, upvotes=0, downvotes=0, minutes=0, status="published",
               title=None, description=None, post_type="twitter"):
    post = Post(
        post_type=post_type,
        post_id=str(1000 + n),
        category_id=category_id,
        title=title if title is not None else f"Post {n}",
        description=description,
        status=status,
        upvotes=upvotes,
        downvotes=downvotes,
        submitted_by="anonymous",
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.session.add(post)
    return post


@pytest.fixture
def make_post():
    return _make_post


@pytest.fixture
def post_id(app, category_ids):
    with app.app_context():
        post = _make_post(category_ids["overheard"], 1)
        db.session.commit()
        return post.id
