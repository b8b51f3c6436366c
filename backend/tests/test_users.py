"""Tests for user profiles, language preferences, connections and avatars."""

from __future__ import annotations


def _set_languages(client, user, native, learning):
    response = client.put(
        "/api/users/languages",
        headers=user["headers"],
        json={
            "nativeLanguages": native,
            "learningLanguages": [
                {"language": language_id, "proficiency": proficiency}
                for language_id, proficiency in learning
            ],
        },
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_list_users_is_paginated(client, register):
    first = register("alpha")
    register("bravo")
    register("charlie")

    response = client.get("/api/users", headers=first["headers"], params={"page": 1, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert body["total"] == 3
    assert body["pagination"] == {"next": {"page": 2, "limit": 2}, "prev": None}
    assert [user["username"] for user in body["data"]] == ["alpha", "bravo"]


def test_get_user_by_id(client, register):
    viewer = register("alpha")
    other = register("bravo")

    found = client.get(f"/api/users/{other['id']}", headers=viewer["headers"])
    missing = client.get("/api/users/999", headers=viewer["headers"])

    assert found.status_code == 200
    assert found.json()["data"]["username"] == "bravo"
    assert missing.status_code == 404
    assert missing.json()["error"] == "User not found with id of 999"


def test_update_languages_keeps_learning_order(client, register, languages):
    user = register("alpha")

    data = _set_languages(
        client,
        user,
        [languages["en"]],
        [(languages["ja"], "beginner"), (languages["es"], "advanced")],
    )

    assert [language["code"] for language in data["nativeLanguages"]] == ["en"]
    assert [(entry["language"]["code"], entry["proficiency"]) for entry in data["learningLanguages"]] == [
        ("ja", "beginner"),
        ("es", "advanced"),
    ]

    data = _set_languages(client, user, [languages["en"]], [(languages["es"], "fluent")])
    assert [(entry["language"]["code"], entry["proficiency"]) for entry in data["learningLanguages"]] == [
        ("es", "fluent")
    ]


def test_update_languages_rejects_unknown_and_duplicate_ids(client, register, languages):
    user = register("alpha")

    unknown = client.put("/api/users/languages", headers=user["headers"], json={"nativeLanguages": [9999]})
    duplicate = client.put(
        "/api/users/languages",
        headers=user["headers"],
        json={"learningLanguages": [{"language": languages["fr"]}, {"language": languages["fr"]}]},
    )

    assert unknown.status_code == 404
    assert duplicate.status_code == 400


def test_recommendations_are_scored_both_ways(client, register, languages):
    me = register("alpha")
    perfect = register("bravo")
    partial = register("charlie")
    unrelated = register("delta")

    _set_languages(client, me, [languages["en"]], [(languages["es"], "beginner")])
    _set_languages(client, partial, [languages["fr"]], [(languages["en"], "beginner")])
    _set_languages(client, perfect, [languages["es"]], [(languages["en"], "intermediate")])
    _set_languages(client, unrelated, [languages["de"]], [(languages["it"], "beginner")])

    response = client.get("/api/users/recommendations", headers=me["headers"])

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert [(entry["user"]["username"], entry["matchScore"]) for entry in data] == [
        ("bravo", 2),
        ("charlie", 1),
    ]

    reverse = client.get("/api/users/recommendations", headers=perfect["headers"])

    assert reverse.status_code == 200, reverse.text
    scores = {entry["user"]["username"]: entry["matchScore"] for entry in reverse.json()["data"]}
    assert scores["alpha"] >= 1
    assert "delta" not in scores


def test_recommendations_keep_store_order_for_ties(client, register, languages):
    me = register("alpha")
    first = register("bravo")
    second = register("charlie")

    _set_languages(client, me, [languages["en"]], [])
    _set_languages(client, second, [], [(languages["en"], "beginner")])
    _set_languages(client, first, [], [(languages["en"], "beginner")])

    data = client.get("/api/users/recommendations", headers=me["headers"]).json()["data"]

    assert [entry["user"]["username"] for entry in data] == ["bravo", "charlie"]


def test_recommendations_empty_without_languages(client, register):
    me = register("alpha")
    register("bravo")

    response = client.get("/api/users/recommendations", headers=me["headers"])

    assert response.json() == {"success": True, "count": 0, "data": []}


def test_connections_are_symmetric(client, register):
    alpha = register("alpha")
    bravo = register("bravo")

    added = client.post(f"/api/users/connections/{bravo['id']}", headers=alpha["headers"])
    assert added.status_code == 200
    assert added.json() == {"success": True, "message": "Connection added successfully"}

    again = client.post(f"/api/users/connections/{bravo['id']}", headers=alpha["headers"])
    assert again.status_code == 400
    assert again.json()["error"] == "Already connected with this user"

    reverse = client.get("/api/users/connections", headers=bravo["headers"]).json()
    assert [user["username"] for user in reverse["data"]] == ["alpha"]

    removed = client.delete(f"/api/users/connections/{alpha['id']}", headers=bravo["headers"])
    assert removed.json()["message"] == "Connection removed successfully"
    assert client.get("/api/users/connections", headers=alpha["headers"]).json()["count"] == 0


def test_cannot_connect_with_self_or_unknown(client, register):
    alpha = register("alpha")

    self_connect = client.post(f"/api/users/connections/{alpha['id']}", headers=alpha["headers"])
    unknown = client.post("/api/users/connections/999", headers=alpha["headers"])

    assert self_connect.status_code == 400
    assert self_connect.json()["error"] == "You cannot connect with yourself"
    assert unknown.status_code == 404


def test_profile_picture_url(client, register):
    alpha = register("alpha")

    response = client.put(
        "/api/users/profile-picture",
        headers=alpha["headers"],
        json={"profilePicture": "https://cdn.example.com/me.png"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["profilePicture"] == "https://cdn.example.com/me.png"


def test_avatar_upload_and_download(client, register, media_root):
    alpha = register("alpha")
    image = b"\x89PNG\r\n\x1a\nfake-image"

    response = client.post(
        "/api/users/avatar",
        headers=alpha["headers"],
        files={"file": ("me.png", image, "image/png")},
    )

    assert response.status_code == 200, response.text
    picture = response.json()["data"]["profilePicture"]
    assert f"/{alpha['id']}?v=" in picture
    assert (media_root / "avatars" / f"user_{alpha['id']}" / "avatar.png").read_bytes() == image

    download = client.get(f"/api/users/avatar/{alpha['id']}")
    assert download.status_code == 200
    assert download.content == image
    assert download.headers["content-type"] == "image/png"


def test_avatar_rejects_non_images(client, register):
    alpha = register("alpha")

    response = client.post(
        "/api/users/avatar",
        headers=alpha["headers"],
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Avatar must be an image file"


def test_avatar_missing(client, register):
    alpha = register("alpha")

    response = client.get(f"/api/users/avatar/{alpha['id']}")

    assert response.status_code == 404
