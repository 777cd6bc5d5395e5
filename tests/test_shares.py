import pytest


@pytest.fixture
def shared_setup(client, signup, create_bookmark):
    owner = signup("owner@example.com")
    recipient = signup("friend@example.com")
    stranger = signup("stranger@example.com")
    bookmark = create_bookmark(owner, title="Shared doc")
    response = client.post(
        f"/api/v1/bookmark-share/{bookmark['id']}",
        headers=owner,
        json={"shared_with_email": "friend@example.com", "message": "have a look"},
    )
    assert response.status_code == 201
    return owner, recipient, stranger, bookmark, response.get_json()


def test_share_validation(client, shared_setup):
    owner, recipient, _stranger, bookmark, share = shared_setup
    url = f"/api/v1/bookmark-share/{bookmark['id']}"

    assert share["permission"] == "VIEW"
    assert share["shared_with"]["email"] == "friend@example.com"

    response = client.post(url, headers=owner, json={"shared_with_email": "friend@example.com"})
    assert response.status_code == 409
    response = client.post(url, headers=owner, json={"shared_with_email": "owner@example.com"})
    assert response.status_code == 400
    response = client.post(url, headers=owner, json={"shared_with_email": "nobody@example.com"})
    assert response.status_code == 404
    response = client.post(
        url,
        headers=owner,
        json={"shared_with_email": "stranger@example.com", "permission": "ADMIN"},
    )
    assert response.status_code == 400

    response = client.get(url, headers=recipient)
    assert response.status_code == 404


def test_view_share_grants_read_only_access(client, shared_setup):
    _owner, recipient, stranger, bookmark, _share = shared_setup
    url = f"/api/v1/shared/{bookmark['id']}"

    response = client.get(url, headers=recipient)
    assert response.status_code == 200
    assert response.get_json()["permission"] == "VIEW"
    assert client.get(f"{url}/comments", headers=recipient).status_code == 200

    response = client.patch(url, headers=recipient, json={"title": "Hijacked"})
    assert response.status_code == 403
    response = client.post(f"{url}/comments", headers=recipient, json={"content": "hi"})
    assert response.status_code == 403

    assert client.get(url, headers=stranger).status_code == 404


def test_upgraded_share_allows_comment_and_edit(client, shared_setup):
    owner, recipient, _stranger, bookmark, share = shared_setup
    share_url = f"/api/v1/bookmark-share/{bookmark['id']}/{share['id']}"
    url = f"/api/v1/shared/{bookmark['id']}"

    response = client.patch(share_url, headers=owner, json={"permission": "comment"})
    assert response.get_json()["permission"] == "COMMENT"
    response = client.post(f"{url}/comments", headers=recipient, json={"content": "nice"})
    assert response.status_code == 201
    assert client.patch(url, headers=recipient, json={"title": "x"}).status_code == 403

    client.patch(share_url, headers=owner, json={"permission": "EDIT"})
    response = client.patch(
        url, headers=recipient, json={"title": "Edited", "url": "https://evil.example"}
    )
    assert response.status_code == 200
    assert response.get_json()["title"] == "Edited"
    assert response.get_json()["url"] == "https://example.com/"

    comments = client.get(f"/api/v1/comments/{bookmark['id']}", headers=owner)
    assert [item["content"] for item in comments.get_json()["items"]] == ["nice"]


def test_expired_share_is_not_found(client, shared_setup):
    owner, recipient, _stranger, bookmark, share = shared_setup
    share_url = f"/api/v1/bookmark-share/{bookmark['id']}/{share['id']}"

    listed = client.get("/api/v1/bookmark-share/shared-with-me", headers=recipient)
    assert [item["bookmark"]["id"] for item in listed.get_json()["items"]] == [
        bookmark["id"]
    ]

    response = client.patch(
        share_url, headers=owner, json={"expires_at": "2000-01-01T00:00:00Z"}
    )
    assert response.status_code == 200
    assert response.get_json()["is_active"] is False

    assert client.get(f"/api/v1/shared/{bookmark['id']}", headers=recipient).status_code == 404
    listed = client.get("/api/v1/bookmark-share/shared-with-me", headers=recipient)
    assert listed.get_json()["items"] == []


def test_owner_can_revoke_share(client, shared_setup):
    owner, recipient, stranger, bookmark, share = shared_setup
    share_url = f"/api/v1/bookmark-share/{bookmark['id']}/{share['id']}"

    assert client.delete(share_url, headers=stranger).status_code == 404
    assert client.delete(share_url, headers=owner).status_code == 200
    assert client.get(f"/api/v1/shared/{bookmark['id']}", headers=recipient).status_code == 404
    assert client.get(f"/api/v1/bookmark-share/{bookmark['id']}", headers=owner).get_json()[
        "items"
    ] == []
