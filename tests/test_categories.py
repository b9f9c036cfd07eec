from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from neverhappened.extensions import db
from neverhappened.models import Category


def test_list_categories_sorted_by_name(app, category_ids):
    from neverhappened.services import list_categories

    with app.app_context():
        names = [c.name for c in list_categories()]
        assert names == ["Airplane Stories", "Overheard Conversations"]


def test_list_categories_fails_soft(app, category_ids, monkeypatch):
    from neverhappened.services import list_categories

    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    with app.app_context():
        monkeypatch.setattr(Session, "execute", boom)
        assert list_categories() == []


def test_display_description_fallback(app, category_ids):
    with app.app_context():
        overheard = db.session.get(Category, category_ids["overheard"])
        airplane = db.session.get(Category, category_ids["airplane"])

        assert overheard.display_description == (
            "A collection of overheard conversations stories that never happened"
        )
        assert airplane.display_description == "Everybody clapped."


def test_categories_endpoint(client, category_ids):
    resp = client.get("/categories")
    assert resp.status_code == 200

    slugs = [c["slug"] for c in resp.get_json()["categories"]]
    assert slugs == ["airplane", "overheard"]


def test_category_detail_endpoint(client, category_ids):
    resp = client.get("/categories/airplane")
    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Airplane Stories"

    missing = client.get("/categories/does-not-exist")
    assert missing.status_code == 404
    assert missing.get_json()["reason"] == "not_found"


def test_seed_categories_is_idempotent(app):
    from neverhappened.cli import seed_categories, DEFAULT_CATEGORIES

    with app.app_context():
        assert seed_categories() == len(DEFAULT_CATEGORIES)
        assert seed_categories() == 0
        assert Category.query.count() == len(DEFAULT_CATEGORIES)


def test_seed_categories_command(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-categories"])

    assert result.exit_code == 0
    assert "Added" in result.output
