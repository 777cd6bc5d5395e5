def test_duplicate_tag_name_conflicts_for_same_user_only(client, signup):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")

    response = client.post("/api/v1/tags", headers=alice, json={"name": "Reading"})
    assert response.status_code == 201
    assert response.get_json()["color"] == "#10B981"

    response = client.post("/api/v1/tags", headers=alice, json={"name": "Reading"})
    assert response.status_code == 409
    assert response.get_json() == {
        "error": 'A tag named "Reading" already exists. Please choose a different name.'
    }

    response = client.post("/api/v1/tags", headers=bob, json={"name": "Reading"})
    assert response.status_code == 201


def test_tag_rename_conflict_and_foreign_tag(client, signup):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")
    first = client.post("/api/v1/tags", headers=alice, json={"name": "one"}).get_json()
    client.post("/api/v1/tags", headers=alice, json={"name": "two"})

    response = client.patch(
        f"/api/v1/tags/{first['id']}", headers=alice, json={"name": "two"}
    )
    assert response.status_code == 409

    response = client.patch(
        f"/api/v1/tags/{first['id']}", headers=alice, json={"color": "#000000"}
    )
    assert response.status_code == 200
    assert response.get_json()["color"] == "#000000"

    response = client.delete(f"/api/v1/tags/{first['id']}", headers=bob)
    assert response.status_code == 404


def test_categories_folders_and_assignment(client, signup, create_bookmark):
    auth = signup("alice@example.com")
    bookmark = create_bookmark(auth)

    folder = client.post(
        "/api/v1/categories/folders", headers=auth, json={"name": "Work"}
    ).get_json()
    response = client.post(
        "/api/v1/categories",
        headers=auth,
        json={"name": "Reference", "folder_id": folder["id"]},
    )
    assert response.status_code == 201
    category = response.get_json()
    assert category["icon"] == "folder"
    assert category["folder_id"] == folder["id"]

    response = client.post("/api/v1/categories", headers=auth, json={"name": "Reference"})
    assert response.status_code == 409

    response = client.post(
        f"/api/v1/categories/{category['id']}/assign",
        headers=auth,
        json={"bookmark_ids": [bookmark["id"], bookmark["id"]]},
    )
    assert response.status_code == 200
    assert response.get_json()["assigned"] == 1

    response = client.get(f"/api/v1/bookmarks?category={category['id']}", headers=auth)
    assert [item["id"] for item in response.get_json()["items"]] == [bookmark["id"]]

    response = client.delete(f"/api/v1/categories/folders/{folder['id']}", headers=auth)
    assert response.status_code == 200
    listed = client.get("/api/v1/categories", headers=auth).get_json()["items"]
    assert listed[0]["folder_id"] is None
    assert listed[0]["bookmark_count"] == 1


def test_category_assign_rejects_foreign_bookmarks(client, signup, create_bookmark):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")
    bob_bookmark = create_bookmark(bob)
    category = client.post(
        "/api/v1/categories", headers=alice, json={"name": "Mine"}
    ).get_json()

    response = client.post(
        f"/api/v1/categories/{category['id']}/assign",
        headers=alice,
        json={"bookmark_ids": [bob_bookmark["id"]]},
    )
    assert response.status_code == 404

    response = client.patch(
        f"/api/v1/categories/{category['id']}", headers=bob, json={"name": "Taken"}
    )
    assert response.status_code == 404


def test_rename_with_non_string_name_is_rejected(client, signup):
    auth = signup("alice@example.com")
    tag = client.post("/api/v1/tags", headers=auth, json={"name": "python"}).get_json()
    category = client.post(
        "/api/v1/categories", headers=auth, json={"name": "Reading"}
    ).get_json()

    response = client.patch(f"/api/v1/tags/{tag['id']}", headers=auth, json={"name": 5})
    assert response.status_code == 400
    assert response.get_json()["error"] == "name must be a string"

    response = client.patch(
        f"/api/v1/categories/{category['id']}", headers=auth, json={"name": {"x": 1}}
    )
    assert response.status_code == 400

    listed = client.get("/api/v1/tags", headers=auth).get_json()["items"]
    assert [item["name"] for item in listed] == ["python"]
