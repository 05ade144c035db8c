"""User endpoint tests."""


def register(client, username):
    return client.post("/api/users/register", json={"username": username})


def test_register_and_get(client):
    response = register(client, "alice")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    user_id = data["details"]["id"]
    assert data["details"] == {"id": user_id, "username": "alice"}

    response = client.get(f"/api/users/u/{user_id}")
    assert response.json() == {
        "success": True,
        "details": {"id": user_id, "username": "alice", "images": []},
    }


def test_register_form_body(client):
    response = client.post("/api/users/register", data={"username": "bob"})
    assert response.json()["details"]["username"] == "bob"


def test_register_without_username(client):
    for response in (register(client, ""), client.post("/api/users/register", json={})):
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Please provide a username for the new user!",
        }


def test_register_duplicate_case_insensitive(client):
    register(client, "Carol")
    response = register(client, "cAROL")
    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": 'User with username "cAROL" already exists!',
    }


def test_register_username_with_slash(client):
    response = register(client, "ac/dc")
    assert response.status_code == 200
    assert response.json()["details"]["username"] == "ac/dc"

    response = register(client, "AC/DC")
    assert response.status_code == 409
    assert response.json()["message"] == 'User with username "AC/DC" already exists!'


def test_list_users(client):
    assert client.get("/api/users/").json() == {"success": True, "users": []}

    register(client, "a")
    register(client, "b")
    users = client.get("/api/users/").json()["users"]
    assert sorted(user["username"] for user in users) == ["a", "b"]


def test_get_missing_user(client):
    response = client.get("/api/users/u/nope00")
    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": 'User with id "nope00" does not exist.',
    }


def test_user_upload_is_owned(client):
    user_id = register(client, "dave").json()["details"]["id"]

    response = client.post(
        f"/api/users/u/{user_id}/upload",
        files=[("photos", ("dog.png", b"png", "image/png"))],
    )
    file = response.json()["file"]

    details = client.get(f"/api/images/i/{file['id']}").json()["details"]
    assert details["owner_id"] == user_id

    images = client.get(f"/api/users/u/{user_id}").json()["details"]["images"]
    assert [image["id"] for image in images] == [file["id"]]


def test_user_upload_unknown_user(client, storage):
    response = client.post(
        "/api/users/u/nope00/upload",
        files=[("photos", ("dog.png", b"png", "image/png"))],
    )
    assert response.status_code == 404
    assert response.json()["message"] == 'User with id "nope00" does not exist.'
    assert storage.calls == []


def test_private_images_hidden_from_user(client):
    user_id = register(client, "erin").json()["details"]["id"]
    file_id = client.post(
        f"/api/users/u/{user_id}/upload",
        files=[("photos", ("cat.gif", b"gif", "image/gif"))],
    ).json()["file"]["id"]

    client.post(f"/api/images/i/{file_id}/set_public", json={"public": "false"})
    assert client.get(f"/api/users/u/{user_id}").json()["details"]["images"] == []
