from __future__ import annotations

import datetime as dt

from wildway.models.enums import UserRole

ME_URL = "/api/v1/users/me"


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_missing_token_is_not_authenticated(client) -> None:  # noqa: ANN001
    response = client.get(ME_URL)

    assert response.status_code == 401
    body = response.json()
    assert body["status"] == "fail"
    assert body["error_code"] == "NOT_AUTHENTICATED"


def test_bearer_token_attaches_user(client, make_user, tokens) -> None:  # noqa: ANN001
    user = make_user()

    response = client.get(ME_URL, headers=_bearer(tokens.issue(user.id)))

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "success"
    assert payload["data"]["user"]["email"] == "natalie@example.com"
    assert "password" not in str(payload)


def test_cookie_is_used_when_header_is_absent(client, make_user, tokens) -> None:  # noqa: ANN001
    user = make_user()
    client.cookies.set("jwt", tokens.issue(user.id))

    response = client.get(ME_URL)

    assert response.status_code == 200


def test_non_bearer_authorization_falls_back_to_cookie(client, make_user, tokens) -> None:  # noqa: ANN001
    user = make_user()
    client.cookies.set("jwt", tokens.issue(user.id))

    response = client.get(ME_URL, headers={"Authorization": "Basic Zm9vOmJhcg=="})

    assert response.status_code == 200


def test_logged_out_cookie_is_treated_as_absent(client) -> None:  # noqa: ANN001
    client.cookies.set("jwt", "loggedout")

    response = client.get(ME_URL)

    assert response.status_code == 401
    assert response.json()["error_code"] == "NOT_AUTHENTICATED"


def test_invalid_and_expired_tokens_get_the_same_generic_answer(client, make_user, tokens) -> None:  # noqa: ANN001
    user = make_user()
    expired = tokens.issue(user.id, issued_at=dt.datetime.now(dt.timezone.utc) - dt.timedelta(days=2))

    garbage = client.get(ME_URL, headers=_bearer("definitely.not.valid"))
    stale = client.get(ME_URL, headers=_bearer(expired))

    assert garbage.status_code == stale.status_code == 401
    assert garbage.json() == stale.json()
    assert garbage.json()["error_code"] == "INVALID_TOKEN"


def test_token_of_deleted_user_is_rejected(client, make_user, tokens, db) -> None:  # noqa: ANN001
    user = make_user()
    token = tokens.issue(user.id)
    db.delete(user)
    db.commit()

    response = client.get(ME_URL, headers=_bearer(token))

    assert response.status_code == 401
    assert response.json()["error_code"] == "USER_NOT_FOUND"


def test_token_issued_before_password_change_is_stale(client, make_user, tokens, store) -> None:  # noqa: ANN001
    user = make_user()
    old_token = tokens.issue(user.id, issued_at=dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=5))
    assert client.get(ME_URL, headers=_bearer(old_token)).status_code == 200

    store.set_password(user, "brand-new-pass")

    response = client.get(ME_URL, headers=_bearer(old_token))
    assert response.status_code == 401
    assert response.json()["error_code"] == "PASSWORD_CHANGED"
    assert "recently changed password" in response.json()["message"]

    fresh_token = tokens.issue(user.id)
    assert client.get(ME_URL, headers=_bearer(fresh_token)).status_code == 200



def test_token_issued_moments_before_password_change_is_stale(client, make_user, tokens, store) -> None:  # noqa: ANN001
    user = make_user()
    old_token = tokens.issue(user.id, issued_at=dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1.5))

    store.set_password(user, "brand-new-pass")

    response = client.get(ME_URL, headers=_bearer(old_token))
    assert response.status_code == 401
    assert response.json()["error_code"] == "PASSWORD_CHANGED"


def test_restrict_to_forbids_roles_outside_the_allowed_set(client, make_user, tokens) -> None:  # noqa: ANN001
    regular = make_user("user@example.com")
    guide = make_user("guide@example.com", role=UserRole.guide)

    forbidden = client.get("/api/v1/tours/monthly-plan/2026", headers=_bearer(tokens.issue(regular.id)))
    allowed = client.get("/api/v1/tours/monthly-plan/2026", headers=_bearer(tokens.issue(guide.id)))

    assert forbidden.status_code == 403
    assert forbidden.json()["error_code"] == "FORBIDDEN"
    assert allowed.status_code == 200


def test_restrict_to_requires_a_session_first(client) -> None:  # noqa: ANN001
    response = client.delete("/api/v1/tours/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 401
    assert response.json()["error_code"] == "NOT_AUTHENTICATED"
