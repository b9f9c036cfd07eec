import os

import pytest

from config import Config, _resolve_sqlite_path
from neverhappened import create_app


def test_visitor_gets_stable_voter_id(client):
    client.get("/categories")
    with client.session_transaction() as sess:
        first = sess["voter_id"]

    client.get("/posts")
    with client.session_transaction() as sess:
        assert sess["voter_id"] == first


def test_unknown_route_returns_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "reason": "not_found"}


def test_production_requires_secret_key():
    class ProdConfig(Config):
        IS_DEV = False
        TESTING = False
        SECRET_KEY = None
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    with pytest.raises(RuntimeError):
        create_app(ProdConfig)


def test_unknown_submission_mode_is_rejected():
    class BadConfig(Config):
        TESTING = True
        SECRET_KEY = "x"
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        SUBMISSION_MODE = "yolo"

    with pytest.raises(RuntimeError):
        create_app(BadConfig)


def test_resolve_sqlite_path(tmp_path):
    uri = _resolve_sqlite_path("sqlite:///instance/test.db", str(tmp_path))

    assert uri == f"sqlite:///{(tmp_path / 'instance' / 'test.db').as_posix()}"
    assert os.path.isdir(tmp_path / "instance")

    assert _resolve_sqlite_path("sqlite:///:memory:", str(tmp_path)) == "sqlite:///:memory:"
    assert _resolve_sqlite_path("postgresql://db/stnh", str(tmp_path)) == "postgresql://db/stnh"
