from app.models import Habit, HabitCheckIn


def test_habit_of_another_user_is_not_found(client, signup, create_bookmark):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")
    alice_bookmark = create_bookmark(alice)
    bob_bookmark = create_bookmark(bob, url="https://bob.example")
    habit = client.post(
        f"/api/v1/habits/{alice_bookmark['id']}", headers=alice, json={"name": "Read"}
    ).get_json()

    attempts = [
        f"/api/v1/habits/{alice_bookmark['id']}/{habit['id']}",
        f"/api/v1/habits/{bob_bookmark['id']}/{habit['id']}",
    ]
    for url in attempts:
        response = client.patch(url, headers=bob, json={"name": "Mine now"})
        assert response.status_code == 404
        assert client.delete(url, headers=bob).status_code == 404
        assert client.post(f"{url}/checkin", headers=bob, json={}).status_code == 404

    assert client.get(f"/api/v1/habits/{alice_bookmark['id']}", headers=bob).status_code == 404
    listed = client.get(f"/api/v1/habits/{alice_bookmark['id']}", headers=alice)
    assert listed.get_json()["items"][0]["name"] == "Read"


def test_checkin_creates_then_toggles(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    habit = client.post(
        f"/api/v1/habits/{bookmark['id']}", headers=auth, json={"name": "Stretch"}
    ).get_json()
    url = f"/api/v1/habits/{bookmark['id']}/{habit['id']}/checkin"

    first = client.post(url, headers=auth, json={"date": "2024-05-01"})
    assert first.status_code == 201
    assert first.get_json()["completed"] is True
    assert first.get_json()["count"] == 1

    second = client.post(url, headers=auth, json={"date": "2024-05-01"})
    assert second.status_code == 200
    assert second.get_json()["completed"] is False
    assert second.get_json()["id"] == first.get_json()["id"]

    third = client.post(url, headers=auth, json={"date": "2024-05-01", "count": 3})
    assert third.get_json()["completed"] is True
    assert third.get_json()["count"] == 3

    explicit = client.post(
        url, headers=auth, json={"date": "2024-05-01", "completed": True}
    )
    assert explicit.get_json()["completed"] is True

    toggled = client.post(
        url, headers=auth, json={"date": "2024-05-01", "completed": None}
    )
    assert toggled.status_code == 200
    assert toggled.get_json()["completed"] is False


def test_habit_delete_deactivates_and_keeps_checkins(client, signup, create_bookmark, app):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    habit = client.post(
        f"/api/v1/habits/{bookmark['id']}", headers=auth, json={"name": "Walk"}
    ).get_json()
    client.post(f"/api/v1/habits/{bookmark['id']}/{habit['id']}/checkin", headers=auth)

    response = client.delete(f"/api/v1/habits/{bookmark['id']}/{habit['id']}", headers=auth)
    assert response.status_code == 200

    listed = client.get(f"/api/v1/habits/{bookmark['id']}", headers=auth)
    assert listed.get_json()["items"] == []
    with app.app_context():
        assert Habit.query.one().is_active is False
        assert HabitCheckIn.query.count() == 1


def test_todo_completion_tracks_timestamp(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    base = f"/api/v1/todos/{bookmark['id']}"
    first = client.post(base, headers=auth, json={"title": "One"}).get_json()
    second = client.post(base, headers=auth, json={"title": "Two"}).get_json()
    assert (first["order"], second["order"]) == (0, 1)

    done = client.patch(f"{base}/{first['id']}", headers=auth, json={"completed": True})
    assert done.get_json()["completed_at"] is not None
    again = client.patch(f"{base}/{first['id']}", headers=auth, json={"completed": True})
    assert again.get_json()["completed_at"] == done.get_json()["completed_at"]

    undone = client.patch(f"{base}/{first['id']}", headers=auth, json={"completed": False})
    assert undone.get_json()["completed_at"] is None

    response = client.post(base, headers=auth, json={"title": "Bad", "priority": "soon"})
    assert response.status_code == 400


def test_comments_hide_resolved_and_accept_replies(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    base = f"/api/v1/comments/{bookmark['id']}"
    open_comment = client.post(base, headers=auth, json={"content": "open"}).get_json()
    closed = client.post(base, headers=auth, json={"content": "closed"}).get_json()
    client.patch(f"{base}/{closed['id']}", headers=auth, json={"is_resolved": True})

    response = client.post(
        f"{base}/{open_comment['id']}/replies", headers=auth, json={"content": "reply"}
    )
    assert response.status_code == 201

    visible = client.get(base, headers=auth).get_json()["items"]
    assert [item["content"] for item in visible] == ["open"]
    assert [reply["content"] for reply in visible[0]["replies"]] == ["reply"]

    everything = client.get(f"{base}?showResolved=true", headers=auth).get_json()["items"]
    assert {item["content"] for item in everything} == {"open", "closed"}


def test_simple_tools_crud(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    cases = [
        ("quick-notes", {"content": "remember"}, {"content": "updated"}),
        ("highlights", {"highlighted_text": "quote"}, {"personal_note": "why"}),
        ("media", {"name": "diagram", "url": "https://cdn.example/d.png"}, {"name": "d2"}),
        ("code-snippets", {"title": "loop", "code": "for x in y: pass"}, {"language": "python"}),
    ]
    for resource, create_body, patch_body in cases:
        base = f"/api/v1/{resource}/{bookmark['id']}"
        response = client.post(base, headers=auth, json=create_body)
        assert response.status_code == 201, resource
        item = response.get_json()

        response = client.patch(f"{base}/{item['id']}", headers=auth, json=patch_body)
        assert response.status_code == 200, resource
        for key, value in patch_body.items():
            assert response.get_json()[key] == value

        assert len(client.get(base, headers=auth).get_json()["items"]) == 1
        assert client.delete(f"{base}/{item['id']}", headers=auth).status_code == 200
        assert client.get(base, headers=auth).get_json()["items"] == []

        response = client.post(base, headers=auth, json={})
        assert response.status_code == 400, resource


def test_task_list_items_must_belong_to_the_same_bookmark(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)
    other = create_bookmark(auth, url="https://other.example")
    todo = client.post(
        f"/api/v1/todos/{bookmark['id']}", headers=auth, json={"title": "Task"}
    ).get_json()
    other_todo = client.post(
        f"/api/v1/todos/{other['id']}", headers=auth, json={"title": "Elsewhere"}
    ).get_json()
    task_list = client.post(
        f"/api/v1/task-lists/{bookmark['id']}", headers=auth, json={"name": "Sprint"}
    ).get_json()
    items_url = f"/api/v1/task-lists/{bookmark['id']}/{task_list['id']}/items"

    response = client.post(items_url, headers=auth, json={"todo_item_id": todo["id"]})
    assert response.status_code == 201
    assert [item["todo_item"]["title"] for item in response.get_json()["items"]] == ["Task"]

    response = client.post(items_url, headers=auth, json={"todo_item_id": todo["id"]})
    assert response.status_code == 409
    response = client.post(items_url, headers=auth, json={"todo_item_id": other_todo["id"]})
    assert response.status_code == 404

    response = client.delete(f"/api/v1/todos/{bookmark['id']}/{todo['id']}", headers=auth)
    assert response.status_code == 200
    lists = client.get(f"/api/v1/task-lists/{bookmark['id']}", headers=auth).get_json()
    assert lists["items"][0]["items"] == []
