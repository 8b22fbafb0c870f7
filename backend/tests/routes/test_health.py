"""Health probe and framework-level error handling."""


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "studiobook-api"
    assert body["timestamp"].endswith("Z")


def test_unknown_route_uses_problem_envelope(client):
    response = client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    body = response.json()
    assert body["title"] == "Not Found"
    assert body["instance"] == "/api/v1/nothing-here"


def test_body_validation_errors(client):
    response = client.post("/api/v1/leads", json={"email": "not-an-email"})

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    fields = {tuple(error["loc"]) for error in body["errors"]}
    assert ("body", "full_name") in fields
    assert ("body", "email") in fields
