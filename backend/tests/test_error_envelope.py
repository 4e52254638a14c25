from __future__ import annotations

from conftest import FakeMailer, build_settings
from fastapi.testclient import TestClient

from wildway.core.exceptions import (
    EmailDeliveryError,
    ForbiddenError,
    NotFoundError,
    RateLimitExceeded,
)
from wildway.db.base import Base
from wildway.main import create_app


def test_client_errors_are_fail_and_server_errors_are_error() -> None:
    assert NotFoundError("No tour found with that ID.").to_dict() == {
        "status": "fail",
        "message": "No tour found with that ID.",
        "error_code": "NOT_FOUND",
    }
    assert ForbiddenError().to_dict()["status"] == "fail"
    assert EmailDeliveryError().to_dict()["status"] == "error"


def test_details_are_included_only_when_present() -> None:
    error = RateLimitExceeded(retry_after=3, limit=2, window_seconds=60)

    payload = error.to_dict()

    assert payload["details"] == {"retry_after": 3, "limit": 2, "window_seconds": 60}
    assert error.headers["Retry-After"] == "3"
    assert "details" not in NotFoundError().to_dict()


def test_unknown_route_uses_envelope(client) -> None:  # noqa: ANN001
    response = client.get("/api/v1/nowhere")

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "fail"
    assert body["error_code"] == "HTTP_ERROR"


def test_validation_errors_are_400_with_field_details(client) -> None:  # noqa: ANN001
    response = client.post(
        "/api/v1/users/signup",
        json={"name": "Leo", "email": "not-an-email", "password": "pass1234", "confirmPassword": "pass1234"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "fail"
    assert body["error_code"] == "VALIDATION_ERROR"
    assert any(error["field"] == "email" for error in body["details"]["errors"])


def test_api_responses_carry_security_headers(client) -> None:  # noqa: ANN001
    response = client.get("/api/v1/tours/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_health_endpoint(client) -> None:  # noqa: ANN001
    assert client.get("/health").json() == {"status": "ok"}


def test_auth_routes_are_rate_limited() -> None:
    app = create_app(build_settings(RATE_LIMIT_ENABLED=True, RATE_LIMIT_AUTH_MAX_REQUESTS=2))
    Base.metadata.create_all(app.state.engine)
    app.state.mailer = FakeMailer()
    client = TestClient(app)
    payload = {"email": "a@x.com", "password": "wrong"}

    statuses = [client.post("/api/v1/users/login", json=payload).status_code for _ in range(3)]

    assert statuses == [401, 401, 429]
    limited = client.post("/api/v1/users/login", json=payload)
    assert limited.json()["error_code"] == "RATE_LIMIT"
    assert int(limited.headers["Retry-After"]) >= 1
    # Tour routes use their own budget.
    assert client.get("/api/v1/tours/").status_code == 200
    Base.metadata.drop_all(app.state.engine)
