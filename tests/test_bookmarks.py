from app.extensions import db
from app.models import Bookmark, DailyAnalytics, Habit, TodoItem


def test_requests_without_credentials_are_rejected(client):
    response = client.get("/api/v1/bookmarks")
    assert response.status_code == 401
    assert response.get_json() == {"error": "authentication required"}

    response = client.get(
        "/api/v1/bookmarks", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


def test_health_is_public(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_create_bookmark_validates_and_rejects_duplicates(client, signup, create_bookmark):
    auth = signup("alice@example.com")

    response = client.post("/api/v1/bookmarks", headers=auth, json={"url": "https://x.io"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "title is required"}

    response = client.post(
        "/api/v1/bookmarks",
        headers={**auth, "Content-Type": "application/json"},
        data="{not json",
    )
    assert response.status_code == 400

    create_bookmark(auth, url="https://Example.com/docs?b=2&a=1", title="Docs")
    response = client.post(
        "/api/v1/bookmarks",
        headers=auth,
        json={"url": "https://example.com/docs?a=1&b=2", "title": "Again"},
    )
    assert response.status_code == 409
    assert "Docs" in response.get_json()["error"]


def test_bookmarks_are_private_to_their_owner(client, signup, create_bookmark):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")
    bookmark = create_bookmark(alice)

    assert client.get("/api/v1/bookmarks", headers=bob).get_json()["items"] == []
    for method in ("get", "patch", "delete"):
        response = getattr(client, method)(
            f"/api/v1/bookmarks/{bookmark['id']}", headers=bob, json={"title": "Mine"}
        )
        assert response.status_code == 404
        assert response.get_json() == {"error": "bookmark not found"}

    response = client.post(
        f"/api/v1/bookmarks/{bookmark['id']}/track-visit", headers=bob, json={}
    )
    assert response.status_code == 404


def test_bookmark_cannot_reference_foreign_tags(client, signup, create_bookmark):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")
    bob_tag = client.post("/api/v1/tags", headers=bob, json={"name": "bob"}).get_json()

    response = client.post(
        "/api/v1/bookmarks",
        headers=alice,
        json={"url": "https://a.io", "title": "A", "tag_ids": [bob_tag["id"]]},
    )
    assert response.status_code == 404
    assert response.get_json() == {"error": "tag not found"}


def test_patch_is_whitelisted_and_repeatable(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    tag = client.post("/api/v1/tags", headers=auth, json={"name": "read"}).get_json()
    body = {
        "title": "Renamed",
        "priority": "high",
        "is_favorite": True,
        "tag_ids": [tag["id"]],
        "user_id": 999,
        "total_visits": 500,
    }

    first = client.patch(f"/api/v1/bookmarks/{bookmark['id']}", headers=auth, json=body)
    second = client.patch(f"/api/v1/bookmarks/{bookmark['id']}", headers=auth, json=body)
    assert first.status_code == 200
    assert second.status_code == 200

    ignored = {"updated_at"}
    first_state = {k: v for k, v in first.get_json().items() if k not in ignored}
    second_state = {k: v for k, v in second.get_json().items() if k not in ignored}
    assert first_state == second_state
    assert second_state["priority"] == "HIGH"
    assert second_state["visit_count"] == 0
    assert [item["name"] for item in second_state["tags"]] == ["read"]

    response = client.get(f"/api/v1/bookmarks/{bookmark['id']}", headers=auth)
    actions = [row["action"] for row in response.get_json()["history"]]
    assert actions.count("UPDATED") == 2
    assert "CREATED" in actions


def test_patch_rejects_invalid_priority_without_partial_write(
    client, signup, create_bookmark
):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)

    response = client.patch(
        f"/api/v1/bookmarks/{bookmark['id']}",
        headers=auth,
        json={"title": "Half", "priority": "whenever"},
    )
    assert response.status_code == 400

    response = client.get(f"/api/v1/bookmarks/{bookmark['id']}", headers=auth)
    assert response.get_json()["title"] == "Example"


def test_track_time_is_additive(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    url = f"/api/v1/bookmarks/{bookmark['id']}/track-time"

    first = client.post(url, headers=auth, json={"timeSpentSeconds": 30})
    second = client.post(url, headers=auth, json={"timeSpentSeconds": 30})
    assert first.get_json()["time_spent"] == 30
    assert second.get_json()["time_spent"] == 60

    legacy = client.post(url, headers=auth, json={"timeSpentMinutes": 1})
    assert legacy.get_json()["time_spent"] == 120

    response = client.post(url, headers=auth, json={"timeSpentSeconds": -5})
    assert response.status_code == 400
    assert response.get_json() == {"error": "invalid time value"}


def test_track_visit_updates_score_history_and_analytics(
    client, signup, create_bookmark, app
):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)

    response = client.post(
        f"/api/v1/bookmarks/{bookmark['id']}/track-visit", headers=auth, json={}
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["visit_count"] == 1
    assert payload["engagement_score"] == 31

    response = client.post(
        f"/api/v1/bookmarks/{bookmark['id']}/track-visit",
        headers=auth,
        json={"timeSpent": 120},
    )
    payload = response.get_json()
    assert payload["visit_count"] == 2
    assert payload["time_spent"] == 120

    with app.app_context():
        row = DailyAnalytics.query.one()
        assert row.total_visits == 2
        assert row.time_spent == 1 + 2

    response = client.get("/api/v1/analytics?days=7", headers=auth)
    assert response.status_code == 200
    analytics = response.get_json()
    assert analytics["totals"]["total_visits"] == 2
    assert analytics["top_bookmarks"][0]["id"] == bookmark["id"]


def test_search_filters_and_ranks(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    create_bookmark(auth, url="https://flask.palletsprojects.com", title="Flask docs")
    create_bookmark(auth, url="https://gardening.example", title="Tomatoes")
    create_bookmark(
        auth, url="https://urgent.example", title="Pager rota", priority="URGENT"
    )

    response = client.get("/api/v1/bookmarks?search=flask", headers=auth)
    items = response.get_json()["items"]
    assert [item["title"] for item in items] == ["Flask docs"]
    assert items[0]["reasons"]

    response = client.get("/api/v1/bookmarks?priority=urgent", headers=auth)
    assert [item["title"] for item in response.get_json()["items"]] == ["Pager rota"]


def test_delete_removes_bookmark_and_its_tools(client, signup, create_bookmark, app):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    client.post(f"/api/v1/habits/{bookmark['id']}", headers=auth, json={"name": "Read"})
    client.post(f"/api/v1/todos/{bookmark['id']}", headers=auth, json={"title": "Do"})

    response = client.delete(f"/api/v1/bookmarks/{bookmark['id']}", headers=auth)
    assert response.status_code == 200

    with app.app_context():
        assert db.session.get(Bookmark, bookmark["id"]) is None
        assert Habit.query.count() == 0
        assert TodoItem.query.count() == 0


def test_unexpected_errors_are_logged_and_hidden(client, signup, monkeypatch):
    auth = signup("alice@example.com")

    def boom(*args, **kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr("app.api.analytics.scoped_query", boom)
    response = client.get("/api/v1/analytics", headers=auth)
    assert response.status_code == 500
    assert response.get_json() == {"error": "internal server error"}
