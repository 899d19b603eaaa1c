from fastapi.testclient import TestClient

from recipe_service.main import create_app

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


def register(client, email="cook@example.com", name="Cook", password="password1"):
    response = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['accessToken']}"}


def create_cuisine(client, headers, name="Italian"):
    response = client.post("/api/v1/cuisines", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def create_recipe(client, headers, cuisine_ids, name="Carbonara"):
    response = client.post(
        "/api/v1/recipes",
        json={
            "name": name,
            "description": "Pasta with eggs and cheese",
            "cuisines": cuisine_ids,
            "ingredients": [{"name": "Pasta", "quantity": 400, "unit": "grams"}],
            "steps": [{"step_number": 1, "instruction": "Boil"}],
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def test_root_and_health(client) -> None:
    assert client.get("/").json()["documentation"] == "/docs"
    health = client.get("/health").json()
    assert health["status"] == "healthy"


def test_register_login_and_profile(client) -> None:
    user, headers = register(client, email="Cook@Example.com")
    assert user["email"] == "cook@example.com"

    duplicate = client.post(
        "/auth/register", json={"name": "Again", "email": "cook@example.com", "password": "password1"}
    )
    assert duplicate.status_code == 409

    login = client.post("/auth/login", json={"email": "cook@example.com", "password": "password1"})
    assert login.status_code == 200
    assert login.json()["data"]["user"]["id"] == user["id"]

    wrong = client.post("/auth/login", json={"email": "cook@example.com", "password": "password2"})
    assert wrong.status_code == 401
    assert wrong.json()["success"] is False

    profile = client.get("/auth/profile", headers=headers)
    assert profile.json()["data"]["name"] == "Cook"

    updated = client.put("/auth/profile", json={"name": "Head Cook"}, headers=headers)
    assert updated.json()["data"]["name"] == "Head Cook"


def test_weak_password_is_rejected(client) -> None:
    response = client.post(
        "/auth/register", json={"name": "Cook", "email": "cook@example.com", "password": "lettersonly"}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "WEAK_PASSWORD"


def test_refresh_and_change_password(client) -> None:
    register(client)
    login = client.post("/auth/login", json={"email": "cook@example.com", "password": "password1"}).json()["data"]

    refreshed = client.post("/auth/refresh", json={"refreshToken": login["refreshToken"]})
    assert refreshed.status_code == 200
    headers = {"Authorization": f"Bearer {refreshed.json()['data']['accessToken']}"}

    rejected = client.post("/auth/refresh", json={"refreshToken": login["accessToken"]})
    assert rejected.status_code == 401

    wrong_current = client.post(
        "/auth/change-password",
        json={"currentPassword": "nope", "newPassword": "newpassword2"},
        headers=headers,
    )
    assert wrong_current.status_code == 400

    changed = client.post(
        "/auth/change-password",
        json={"currentPassword": "password1", "newPassword": "newpassword2"},
        headers=headers,
    )
    assert changed.status_code == 200
    assert client.post("/auth/login", json={"email": "cook@example.com", "password": "newpassword2"}).status_code == 200


def test_recipe_lifecycle(client) -> None:
    _, headers = register(client)
    italian = create_cuisine(client, headers)
    recipe_id = create_recipe(client, headers, [italian])

    detail = client.get(f"/api/v1/recipes/{recipe_id}").json()["data"]
    assert [cuisine["name"] for cuisine in detail["cuisines"]] == ["Italian"]
    assert detail["ingredients"][0]["ingredient_name"] == "Pasta"
    assert detail["steps"] == [{"id": detail["steps"][0]["id"], "step_number": 1, "instruction": "Boil"}]

    update = client.put(
        f"/api/v1/recipes/{recipe_id}",
        json={"ingredients": [{"name": "Pasta", "quantity": 500, "unit": "grams"}]},
        headers=headers,
    )
    assert update.status_code == 200
    detail = client.get(f"/api/v1/recipes/{recipe_id}").json()["data"]
    assert [item["quantity"] for item in detail["ingredients"]] == [500]

    listing = client.get("/api/v1/recipes", params={"search": "carbo", "limit": 5}).json()
    assert listing["pagination"] == {"page": 1, "limit": 5, "total": 1}
    assert listing["data"][0]["cuisine_names"] == ["Italian"]

    grouped = client.get("/api/v1/recipes/grouped-by-cuisine").json()["data"]
    assert grouped[0]["cuisine_name"] == "Italian"
    assert grouped[0]["recipe_count"] == 1

    by_cuisine = client.get(f"/api/v1/recipes/by-cuisine/{italian}").json()["data"]
    assert [row["id"] for row in by_cuisine] == [recipe_id]

    archived = client.delete(f"/api/v1/recipes/{recipe_id}", headers=headers)
    assert archived.status_code == 200
    assert client.get(f"/api/v1/recipes/{recipe_id}").status_code == 404


def test_list_query_validation(client) -> None:
    response = client.get("/api/v1/recipes", params={"limit": 500})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

    response = client.get("/api/v1/recipes", params={"sortBy": "calories"})
    assert response.status_code == 400


def test_recipe_writes_require_auth(client) -> None:
    response = client.post("/api/v1/recipes", json={"name": "x", "description": "y"})
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"

    bad_token = client.post(
        "/api/v1/recipes", json={"name": "x", "description": "y"}, headers={"Authorization": "Bearer junk"}
    )
    assert bad_token.status_code == 401


def test_only_author_can_edit(client) -> None:
    _, owner = register(client)
    _, stranger = register(client, email="other@example.com", name="Other")
    recipe_id = create_recipe(client, owner, [])

    response = client.put(f"/api/v1/recipes/{recipe_id}", json={"name": "Mine now"}, headers=stranger)
    assert response.status_code == 403
    assert client.delete(f"/api/v1/recipes/{recipe_id}", headers=stranger).status_code == 403
    assert client.get(f"/api/v1/recipes/{recipe_id}").json()["data"]["name"] == "Carbonara"


def test_missing_recipe_returns_404(client) -> None:
    _, headers = register(client)
    assert client.get("/api/v1/recipes/missing").json()["code"] == "NOT_FOUND"
    assert client.put("/api/v1/recipes/missing", json={"name": "x"}, headers=headers).status_code == 404
    assert client.delete("/api/v1/recipes/missing", headers=headers).status_code == 404


def test_unknown_cuisine_on_create_is_conflict(client) -> None:
    _, headers = register(client)
    response = client.post(
        "/api/v1/recipes",
        json={"name": "Ghost", "description": "No cuisine", "cuisines": ["missing"]},
        headers=headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "CONSTRAINT_VIOLATION"
    assert client.get("/api/v1/recipes").json()["pagination"]["total"] == 0


def test_cuisine_crud(client) -> None:
    _, headers = register(client)
    cuisine_id = create_cuisine(client, headers, "Mexican")

    assert client.post("/api/v1/cuisines", json={"name": "Mexican"}, headers=headers).status_code == 409

    updated = client.put(f"/api/v1/cuisines/{cuisine_id}", json={"description": "Spicy"}, headers=headers)
    assert updated.status_code == 200
    detail = client.get(f"/api/v1/cuisines/{cuisine_id}").json()["data"]
    assert detail["description"] == "Spicy"

    create_recipe(client, headers, [cuisine_id], name="Tacos")
    in_use = client.delete(f"/api/v1/cuisines/{cuisine_id}", headers=headers)
    assert in_use.status_code == 409

    spare = create_cuisine(client, headers, "Greek")
    assert [item["name"] for item in client.get("/api/v1/cuisines").json()["data"]] == ["Greek", "Mexican"]
    assert client.delete(f"/api/v1/cuisines/{spare}", headers=headers).status_code == 200
    assert client.get(f"/api/v1/cuisines/{spare}").status_code == 404


def test_photo_upload_and_serving(client) -> None:
    _, headers = register(client)
    recipe_id = create_recipe(client, headers, [])

    hero = client.post(
        f"/api/v1/recipes/{recipe_id}/photos/hero",
        files={"photo": ("hero.jpg", JPEG_BYTES, "image/jpeg")},
        headers=headers,
    )
    assert hero.status_code == 200, hero.text
    assert hero.json()["data"]["filename"] == "hero.jpg"

    step = client.post(
        f"/api/v1/recipes/{recipe_id}/photos/steps/1",
        files={"photo": ("step.png", JPEG_BYTES, "image/png")},
        headers=headers,
    )
    assert step.json()["data"]["filename"] == "step-1.jpg"

    served = client.get(f"/api/v1/files/{recipe_id}/hero.jpg")
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/jpeg"
    assert served.headers["cache-control"] == "public, max-age=31536000"
    assert served.content == JPEG_BYTES

    assert client.get(f"/api/v1/files/{recipe_id}/missing.jpg").status_code == 404


def test_photo_upload_validation(client) -> None:
    _, headers = register(client)
    recipe_id = create_recipe(client, headers, [])
    url = f"/api/v1/recipes/{recipe_id}/photos/hero"

    wrong_type = client.post(url, files={"photo": ("notes.txt", b"hello", "text/plain")}, headers=headers)
    assert wrong_type.json()["code"] == "INVALID_FILE_TYPE"

    too_big = client.post(url, files={"photo": ("big.jpg", b"\x00" * 2048, "image/jpeg")}, headers=headers)
    assert too_big.json()["code"] == "FILE_TOO_LARGE"

    missing = client.post(url, headers=headers)
    assert missing.status_code == 400

    unknown_recipe = client.post(
        "/api/v1/recipes/missing/photos/hero",
        files={"photo": ("hero.jpg", JPEG_BYTES, "image/jpeg")},
        headers=headers,
    )
    assert unknown_recipe.status_code == 404


def test_rate_limit(settings) -> None:
    settings.rate_limit_max_requests = 2
    with TestClient(create_app(settings)) as limited:
        assert limited.get("/health").status_code == 200
        assert limited.get("/health").status_code == 200
        response = limited.get("/health")
    assert response.status_code == 429
    assert response.json()["code"] == "RATE_LIMITED"


def test_rate_limit_ignores_forwarded_headers(settings) -> None:
    settings.rate_limit_max_requests = 2
    with TestClient(create_app(settings)) as limited:
        codes = [
            limited.get("/health", headers={"X-Forwarded-For": f"10.0.0.{index}"}).status_code
            for index in range(5)
        ]
    assert codes[:2] == [200, 200]
    assert codes[2:] == [429, 429, 429]


def test_only_author_can_upload_photos(client) -> None:
    _, owner = register(client)
    _, stranger = register(client, email="other@example.com", name="Other")
    recipe_id = create_recipe(client, owner, [])

    hero = client.post(
        f"/api/v1/recipes/{recipe_id}/photos/hero",
        files={"photo": ("hero.jpg", JPEG_BYTES, "image/jpeg")},
        headers=stranger,
    )
    assert hero.status_code == 403
    step = client.post(
        f"/api/v1/recipes/{recipe_id}/photos/steps/1",
        files={"photo": ("step.jpg", JPEG_BYTES, "image/jpeg")},
        headers=stranger,
    )
    assert step.status_code == 403
    assert client.get(f"/api/v1/files/{recipe_id}/hero.jpg").status_code == 404
