"""
Posts endpoints: listing, detail, create, update, delete
"""
from tests.conftest import ADMIN_HEADERS

NEW_POST = {
    "title": "Caching on the client",
    "excerpt": "Stale-while-revalidate in a few dozen lines.",
    "content": "## Why\n\nInstant paint on every navigation.",
    "category": "前端开发",
    "readTime": "4 分钟",
}


def test_list_posts_returns_seeded_summaries(api):
    response = api.get("/api/posts")
    assert response.status_code == 200
    posts = response.json()
    assert len(posts) == 3
    assert set(posts[0]) == {"id", "title", "excerpt", "category", "readTime", "date"}


def test_list_posts_newest_first(api):
    dates = [p["date"] for p in api.get("/api/posts").json()]
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == "2026-01-10"


def test_list_posts_filters_by_category(api):
    posts = api.get("/api/posts", params={"category": "设计思考"}).json()
    assert len(posts) == 1
    assert posts[0]["category"] == "设计思考"


def test_list_posts_all_label_means_no_filter(api):
    posts = api.get("/api/posts", params={"category": "全部"}).json()
    assert len(posts) == 3


def test_list_posts_unknown_category_is_empty(api):
    assert api.get("/api/posts", params={"category": "nothing"}).json() == []


def test_get_post_includes_content(api):
    post_id = api.get("/api/posts").json()[0]["id"]
    response = api.get(f"/api/posts/{post_id}")
    assert response.status_code == 200
    post = response.json()
    assert post["id"] == post_id
    assert post["content"]


def test_get_missing_post_returns_404(api):
    response = api.get("/api/posts/9999")
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}


def test_create_post(api):
    response = api.post("/api/posts", json=NEW_POST, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    body = response.json()
    assert body["message"]

    post = api.get(f"/api/posts/{body['id']}").json()
    assert post["title"] == NEW_POST["title"]
    assert post["readTime"] == "4 分钟"
    assert len(api.get("/api/posts").json()) == 4


def test_create_post_applies_defaults(api):
    response = api.post(
        "/api/posts",
        json={"title": "Bare", "content": "<p>Only the required fields</p>"},
        headers=ADMIN_HEADERS,
    )
    post = api.get(f"/api/posts/{response.json()['id']}").json()
    assert post["excerpt"] == ""
    assert post["category"] == "随想"
    assert post["readTime"] == "5 分钟"


def test_create_post_requires_title_and_content(api):
    response = api.post("/api/posts", json={"title": "No body"}, headers=ADMIN_HEADERS)
    assert response.status_code == 400
    assert "error" in response.json()


def test_create_post_requires_auth(api):
    response = api.post("/api/posts", json=NEW_POST, headers={"X-Auth-Key": "wrong"})
    assert response.status_code == 401
    assert len(api.get("/api/posts").json()) == 3


def test_update_post(api):
    post_id = api.get("/api/posts").json()[0]["id"]
    response = api.put(f"/api/posts/{post_id}", json=NEW_POST, headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert api.get(f"/api/posts/{post_id}").json()["title"] == NEW_POST["title"]


def test_update_missing_post_returns_404(api):
    response = api.put("/api/posts/9999", json=NEW_POST, headers=ADMIN_HEADERS)
    assert response.status_code == 404


def test_update_post_requires_auth(api):
    post_id = api.get("/api/posts").json()[0]["id"]
    response = api.put(f"/api/posts/{post_id}", json=NEW_POST)
    assert response.status_code == 401


def test_delete_post(api):
    post_id = api.get("/api/posts").json()[0]["id"]
    response = api.delete(f"/api/posts/{post_id}", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert api.get(f"/api/posts/{post_id}").status_code == 404


def test_delete_missing_post_returns_404(api):
    response = api.delete("/api/posts/9999", headers=ADMIN_HEADERS)
    assert response.status_code == 404


def test_delete_post_requires_auth(api):
    post_id = api.get("/api/posts").json()[0]["id"]
    assert api.delete(f"/api/posts/{post_id}").status_code == 401
    assert api.get(f"/api/posts/{post_id}").status_code == 200
