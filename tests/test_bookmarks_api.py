import io

from linkgroups.extensions import db
from linkgroups.models import Bookmark


def _group(client, name="Work"):
    response = client.post("/api/groups", json={"name": name})
    assert response.status_code == 201
    return response.get_json()["id"]


def _add(client, group_id, name, url, **extra):
    data = {"url": url, "name": name, "groupId": group_id}
    data.update(extra)
    response = client.post("/api/bookmarks", data=data)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def _listing(client, group_id):
    response = client.get("/api/bookmarks", query_string={"groupId": group_id})
    assert response.status_code == 200
    return [item["name"] for item in response.get_json()]


def test_bookmarks_require_authentication(client):
    assert client.get("/api/bookmarks").status_code == 401
    response = client.post("/api/bookmarks/reorder", json={"bookmarkIds": []})
    assert response.status_code == 401


def test_create_requires_url_name_and_group(client, login):
    login()
    group_id = _group(client)
    response = client.post(
        "/api/bookmarks", data={"url": "https://a.com", "groupId": group_id}
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "URL, name, and groupId are required"


def test_create_assigns_increasing_positions(client, login):
    login()
    group_id = _group(client)
    first = _add(client, group_id, "X", "https://a.com")
    second = _add(client, group_id, "Y", "https://b.com")

    assert first["position"] == 0
    assert second["position"] == 1
    assert first["image"] == ""


def test_create_accepts_json_body(client, login):
    login()
    group_id = _group(client)
    response = client.post(
        "/api/bookmarks",
        json={"url": "https://json.example", "name": "Json", "groupId": group_id},
    )
    assert response.status_code == 201
    assert response.get_json()["groupId"] == group_id


def test_create_into_foreign_group_is_not_found(app, client, login):
    login()
    other = app.test_client()
    login(email="other@example.com", http=other)
    foreign_group = _group(other, "Theirs")

    response = client.post(
        "/api/bookmarks",
        data={"url": "https://a.com", "name": "A", "groupId": foreign_group},
    )
    assert response.status_code == 404


def test_listing_filters_by_group_and_orders_by_position(client, login):
    login()
    work = _group(client, "Work")
    home = _group(client, "Home")
    _add(client, work, "W1", "https://w1.example")
    _add(client, home, "H1", "https://h1.example")
    _add(client, work, "W2", "https://w2.example")

    assert _listing(client, work) == ["W1", "W2"]
    assert _listing(client, home) == ["H1"]

    everything = client.get("/api/bookmarks").get_json()
    assert sorted(item["name"] for item in everything) == ["H1", "W1", "W2"]


def test_reorder_delete_and_undo_scenario(client, login):
    login()
    work = _group(client, "Work")
    x = _add(client, work, "X", "https://a.com")
    y = _add(client, work, "Y", "https://b.com")
    assert _listing(client, work) == ["X", "Y"]

    response = client.post(
        "/api/bookmarks/reorder", json={"bookmarkIds": [y["id"], x["id"]]}
    )
    assert response.status_code == 200
    assert _listing(client, work) == ["Y", "X"]

    response = client.delete(f"/api/bookmarks/{x['id']}")
    assert response.status_code == 200
    assert _listing(client, work) == ["Y"]

    response = client.post(f"/api/bookmarks/{x['id']}/restore")
    assert response.status_code == 200
    restored = response.get_json()
    assert restored["position"] == 1
    assert restored["groupId"] == work
    assert _listing(client, work) == ["Y", "X"]


def test_restore_requires_deleted_bookmark(client, login):
    login()
    work = _group(client)
    x = _add(client, work, "X", "https://a.com")
    response = client.post(f"/api/bookmarks/{x['id']}/restore")
    assert response.status_code == 404


def test_reorder_rejects_non_list_payload(client, login):
    login()
    response = client.post("/api/bookmarks/reorder", json={"bookmarkIds": "abc"})
    assert response.status_code == 400


def test_reorder_empty_list_succeeds(client, login):
    login()
    response = client.post("/api/bookmarks/reorder", json={"bookmarkIds": []})
    assert response.status_code == 200
    assert response.get_json()["updated"] == 0


def test_reorder_ignores_other_users_bookmarks(app, client, login):
    login()
    work = _group(client)
    mine = _add(client, work, "Mine", "https://mine.example")

    other = app.test_client()
    login(email="other@example.com", http=other)
    theirs_group = _group(other, "Theirs")
    theirs = _add(other, theirs_group, "Theirs", "https://theirs.example")

    response = client.post(
        "/api/bookmarks/reorder", json={"bookmarkIds": [theirs["id"], mine["id"]]}
    )
    assert response.status_code == 200
    assert response.get_json()["updated"] == 1

    with app.app_context():
        assert db.session.get(Bookmark, theirs["id"]).position == 0
        assert db.session.get(Bookmark, mine["id"]).position == 1


def test_move_appends_to_destination(client, login):
    login()
    work = _group(client, "Work")
    home = _group(client, "Home")
    _add(client, home, "H1", "https://h1.example")
    _add(client, home, "H2", "https://h2.example")
    w = _add(client, work, "W", "https://w.example")

    response = client.patch(f"/api/bookmarks/{w['id']}/move", json={"groupId": home})
    assert response.status_code == 200
    assert response.get_json()["position"] == 2
    assert _listing(client, home) == ["H1", "H2", "W"]
    assert _listing(client, work) == []


def test_move_ignores_deleted_bookmarks_for_destination_max(client, login):
    login()
    work = _group(client, "Work")
    home = _group(client, "Home")
    _add(client, home, "H1", "https://h1.example")
    gone = _add(client, home, "Gone", "https://gone.example")
    client.delete(f"/api/bookmarks/{gone['id']}")
    w = _add(client, work, "W", "https://w.example")

    response = client.patch(f"/api/bookmarks/{w['id']}/move", json={"groupId": home})
    assert response.get_json()["position"] == 1


def test_move_validation(client, login):
    login()
    work = _group(client, "Work")
    home = _group(client, "Home")
    w = _add(client, work, "W", "https://w.example")

    response = client.patch(f"/api/bookmarks/{w['id']}/move", json={})
    assert response.status_code == 400

    response = client.patch("/api/bookmarks/missing/move", json={"groupId": home})
    assert response.status_code == 404

    main = client.get("/api/groups").get_json()[0]["id"]
    client.delete(f"/api/groups/{home}", query_string={"selectedGroupId": main})
    response = client.patch(f"/api/bookmarks/{w['id']}/move", json={"groupId": home})
    assert response.status_code == 404
    assert response.get_json()["error"] == "Target group not found"


def test_update_changes_fields_and_checks_ownership(app, client, login):
    login()
    work = _group(client)
    x = _add(client, work, "X", "https://a.com")

    response = client.put(
        f"/api/bookmarks/{x['id']}", data={"url": "https://c.com", "name": "Z"}
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["url"] == "https://c.com"
    assert payload["name"] == "Z"
    assert payload["position"] == x["position"]

    other = app.test_client()
    login(email="other@example.com", http=other)
    response = other.put(f"/api/bookmarks/{x['id']}", data={"name": "nope"})
    assert response.status_code == 404
    response = other.delete(f"/api/bookmarks/{x['id']}")
    assert response.status_code == 404


def test_create_with_image_uploads_to_storage(client, login, fake_s3):
    me = login(email="pics@example.com")
    work = _group(client)
    response = client.post(
        "/api/bookmarks",
        data={
            "url": "https://a.com",
            "name": "A",
            "groupId": work,
            "image": (io.BytesIO(b"\x89PNG fake"), "thumb.png", "image/png"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 201
    image_url = response.get_json()["image"]

    assert len(fake_s3.puts) == 1
    put = fake_s3.puts[0]
    assert put["Bucket"] == "linkgroups-test"
    assert put["ContentType"] == "image/png"
    assert put["Body"] == b"\x89PNG fake"
    assert put["Key"].startswith(f"dev/{me['email']}/")
    assert put["Key"].endswith(".png")
    bucket_host = "https://linkgroups-test.s3.us-east-1.amazonaws.com"
    assert image_url == f"{bucket_host}/{put['Key']}"


def test_update_with_image_replaces_url_without_deleting_old_object(
    client, login, fake_s3
):
    login()
    work = _group(client)
    first = client.post(
        "/api/bookmarks",
        data={
            "url": "https://a.com",
            "name": "A",
            "groupId": work,
            "image": (io.BytesIO(b"one"), "one.jpg", "image/jpeg"),
        },
        content_type="multipart/form-data",
    ).get_json()

    response = client.put(
        f"/api/bookmarks/{first['id']}",
        data={
            "url": "https://a.com",
            "name": "A",
            "image": (io.BytesIO(b"two"), "two.webp", "image/webp"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    assert response.get_json()["image"] != first["image"]
    assert response.get_json()["image"].endswith(".webp")
    assert len(fake_s3.puts) == 2
    assert fake_s3.deletes == []


def test_pdf_upload_rejected_before_any_write(app, client, login, fake_s3):
    login()
    work = _group(client)
    response = client.post(
        "/api/bookmarks",
        data={
            "url": "https://a.com",
            "name": "A",
            "groupId": work,
            "image": (io.BytesIO(b"%PDF-1.7"), "doc.pdf", "application/pdf"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    assert "Invalid file type" in response.get_json()["error"]
    assert fake_s3.puts == []
    with app.app_context():
        assert Bookmark.query.count() == 0


def test_pdf_upload_on_update_leaves_bookmark_untouched(client, login, fake_s3):
    login()
    work = _group(client)
    x = _add(client, work, "X", "https://a.com")

    response = client.put(
        f"/api/bookmarks/{x['id']}",
        data={
            "url": "https://changed.example",
            "name": "Changed",
            "image": (io.BytesIO(b"%PDF-1.7"), "doc.pdf", "application/pdf"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    assert fake_s3.puts == []
    assert _listing(client, work) == ["X"]


def test_oversized_image_rejected(app, client, login, fake_s3):
    app.config["MAX_IMAGE_BYTES"] = 16
    login()
    work = _group(client)
    response = client.post(
        "/api/bookmarks",
        data={
            "url": "https://a.com",
            "name": "A",
            "groupId": work,
            "image": (io.BytesIO(b"x" * 17), "big.gif", "image/gif"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 413
    assert fake_s3.puts == []
    with app.app_context():
        assert Bookmark.query.count() == 0


def test_image_at_size_limit_is_accepted(app, client, login, fake_s3):
    app.config["MAX_IMAGE_BYTES"] = 16
    login()
    work = _group(client)
    response = client.post(
        "/api/bookmarks",
        data={
            "url": "https://a.com",
            "name": "A",
            "groupId": work,
            "image": (io.BytesIO(b"x" * 16), "edge.gif", "image/gif"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 201
    assert len(fake_s3.puts) == 1
    assert len(fake_s3.puts[0]["Body"]) == 16


def test_timestamps_serialize_as_utc(client, login):
    login()
    work = _group(client)
    created = _add(client, work, "A", "https://a.com")
    assert created["createdAt"].endswith("+00:00")

    response = client.get("/api/bookmarks", query_string={"groupId": work})
    listed = response.get_json()[0]
    assert listed["createdAt"] == created["createdAt"]
    assert listed["updatedAt"].endswith("+00:00")
