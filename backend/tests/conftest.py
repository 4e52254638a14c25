from __future__ import annotations

import os
import sys
from pathlib import Path
from types import SimpleNamespace

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

# Required settings must exist before wildway.main builds its module-level app.
TEST_ENV = {
    "JWT_SECRET": "test-secret-key-for-testing-only-0123456789",
    "JWT_EXPIRES_MINUTES": "60",
    "JWT_COOKIE_EXPIRES_DAYS": "1",
    "SMTP_HOST": "smtp.wildway.local",
    "SMTP_USER": "mailer",
    "SMTP_PASSWORD": "mailer-password",
    "SMTP_FROM": "Wildway <noreply@wildway.io>",
    "DATABASE_URL": "sqlite://",
    "RATE_LIMIT_ENABLED": "false",
}
for _key, _value in TEST_ENV.items():
    os.environ.setdefault(_key, _value)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import wildway.models  # noqa: E402,F401
from wildway.core.config import Settings  # noqa: E402
from wildway.db.base import Base  # noqa: E402
from wildway.main import create_app  # noqa: E402
from wildway.models.enums import UserRole  # noqa: E402
from wildway.services.users import UserStore  # noqa: E402


class FakeMailer:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[SimpleNamespace] = []

    def send(self, to: str, subject: str, body: str, *, html_body: str | None = None) -> bool:
        if self.fail:
            return False
        self.sent.append(SimpleNamespace(to=to, subject=subject, body=body, html_body=html_body))
        return True


def build_settings(**overrides) -> Settings:  # noqa: ANN003
    values = {
        "JWT_SECRET": TEST_ENV["JWT_SECRET"],
        "JWT_EXPIRES_MINUTES": 60,
        "JWT_COOKIE_EXPIRES_DAYS": 1,
        "SMTP_HOST": TEST_ENV["SMTP_HOST"],
        "SMTP_USER": TEST_ENV["SMTP_USER"],
        "SMTP_PASSWORD": TEST_ENV["SMTP_PASSWORD"],
        "SMTP_FROM": TEST_ENV["SMTP_FROM"],
        "DATABASE_URL": "sqlite://",
        "RATE_LIMIT_ENABLED": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def app(settings: Settings):  # noqa: ANN201
    application = create_app(settings)
    Base.metadata.create_all(application.state.engine)
    application.state.mailer = FakeMailer()
    yield application
    Base.metadata.drop_all(application.state.engine)


@pytest.fixture
def client(app) -> TestClient:  # noqa: ANN001
    return TestClient(app)


@pytest.fixture
def mailer(app) -> FakeMailer:  # noqa: ANN001
    return app.state.mailer


@pytest.fixture
def tokens(app):  # noqa: ANN001, ANN201
    return app.state.token_service


@pytest.fixture
def db(app):  # noqa: ANN001, ANN201
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db) -> UserStore:  # noqa: ANN001
    return UserStore(db)


@pytest.fixture
def make_user(store: UserStore):  # noqa: ANN201
    def _make_user(
        email: str = "natalie@example.com",
        password: str = "pass1234",
        *,
        name: str = "Natalie Jones",
        role: UserRole = UserRole.user,
    ):  # noqa: ANN202
        return store.create(name=name, email=email, password=password, role=role)

    return _make_user


@pytest.fixture
def reload_user(app):  # noqa: ANN001, ANN201
    """Read a user back through a fresh session, bypassing any identity map."""

    def _reload(email: str):  # noqa: ANN202
        with app.state.session_factory() as session:
            return UserStore(session).find_by_email(email, with_password=True)

    return _reload
