from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from neverhappened.extensions import db
from neverhappened.services import PostFilter, build_posts_query


def _seed(category_ids, make_post):
    overheard = category_ids["overheard"]
    airplane = category_ids["airplane"]
    make_post(overheard, 1, upvotes=5, minutes=1, title="Cashier quoted Einstein")
    make_post(overheard, 2, upvotes=9, minutes=2, description="and then everybody clapped")
    make_post(airplane, 3, upvotes=5, minutes=3, title="Pilot thanked me personally")
    make_post(airplane, 4, upvotes=0, minutes=4)
    make_post(overheard, 5, upvotes=50, minutes=5, status="pending")
    db.session.commit()


def _ids(posts):
    return [p.post_id for p in posts]


def test_filter_normalization():
    f = PostFilter(category_slug="  ", search_query="", sort="bogus", limit=500, offset=-3)
    n = f.normalized(max_page_size=50)

    assert n.category_slug is None
    assert n.search_query is None
    assert n.sort == "trending"
    assert n.limit == 50
    assert n.offset == 0


def test_build_query_compiles_without_store(app):
    stmt = build_posts_query(PostFilter(category_slug="overheard", search_query="clap", sort="recent"))
    sql = str(stmt)

    assert "posts.status" in sql
    assert "categories.slug" in sql
    assert "ORDER BY posts.created_at DESC" in sql


def test_only_published_posts(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)
        posts = list_posts(PostFilter(limit=50))

        assert all(p.status == "published" for p in posts)
        assert "1005" not in _ids(posts)
        assert len(posts) == 4


def test_sort_recent(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)
        posts = list_posts(PostFilter(sort="recent"))

        created = [p.created_at for p in posts]
        assert created == sorted(created, reverse=True)
        assert _ids(posts) == ["1004", "1003", "1002", "1001"]


def test_sort_top(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)
        posts = list_posts(PostFilter(sort="top"))

        upvotes = [p.upvotes for p in posts]
        assert upvotes == sorted(upvotes, reverse=True)


def test_sort_trending_breaks_ties_by_recency(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)
        posts = list_posts(PostFilter(sort="trending"))

        # 1001 and 1003 both have 5 upvotes, the newer one comes first
        assert _ids(posts) == ["1002", "1003", "1001", "1004"]


def test_category_filter(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)
        posts = list_posts(PostFilter(category_slug="airplane"))

        assert sorted(_ids(posts)) == ["1003", "1004"]
        assert all(p.category.slug == "airplane" for p in posts)


def test_unknown_category_slug_returns_nothing(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)
        assert list_posts(PostFilter(category_slug="does-not-exist")) == []


def test_search_matches_title_or_description_case_insensitive(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        _seed(category_ids, make_post)

        assert _ids(list_posts(PostFilter(search_query="EINSTEIN"))) == ["1001"]
        assert _ids(list_posts(PostFilter(search_query="clapped"))) == ["1002"]
        assert list_posts(PostFilter(search_query="100%")) == []


def test_pagination_is_contiguous(app, category_ids, make_post):
    from neverhappened.services import list_posts

    with app.app_context():
        for i in range(25):
            make_post(category_ids["overheard"], i, upvotes=i % 4, minutes=i % 7)
        db.session.commit()

        everything = _ids(list_posts(PostFilter(limit=50)))
        pages = []
        for offset in (0, 10, 20):
            page = list_posts(PostFilter(limit=10, offset=offset))
            assert len(page) <= 10
            pages.extend(_ids(page))

        assert pages == everything
        assert len(set(pages)) == 25


def test_list_posts_page_has_more(app, category_ids, make_post):
    from neverhappened.services import list_posts_page

    with app.app_context():
        _seed(category_ids, make_post)

        first = list_posts_page(PostFilter(limit=2))
        assert len(first.posts) == 2
        assert first.has_more is True

        last = list_posts_page(PostFilter(limit=2, offset=2))
        assert len(last.posts) == 2
        assert last.has_more is True

        empty = list_posts_page(PostFilter(limit=2, offset=4))
        assert empty.posts == []
        assert empty.has_more is False


def test_list_posts_fails_soft(app, category_ids, monkeypatch):
    from neverhappened.services import list_posts

    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    with app.app_context():
        monkeypatch.setattr(Session, "execute", boom)
        assert list_posts(PostFilter()) == []


def test_get_post(app, post_id):
    from neverhappened.services import get_post

    with app.app_context():
        post = get_post(post_id)
        assert post is not None
        assert post.category.slug == "overheard"

        assert get_post(999) is None


def test_posts_endpoint(client, app, category_ids, make_post):
    with app.app_context():
        _seed(category_ids, make_post)

    resp = client.get("/posts?sort=recent&limit=3&category=overheard")
    assert resp.status_code == 200

    data = resp.get_json()
    assert [p["post_id"] for p in data["posts"]] == ["1002", "1001"]
    assert data["has_more"] is False
    assert data["posts"][0]["category"]["slug"] == "overheard"
    assert data["posts"][0]["embed_url"] == "https://twitter.com/x/status/1002"
    assert data["my_votes"] == {}


def test_post_detail_endpoint(client, post_id):
    resp = client.get(f"/posts/{post_id}")
    assert resp.status_code == 200
    assert resp.get_json()["my_vote"] is None

    assert client.get("/posts/999").status_code == 404
